from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, status
from tutorsched.api.deps import get_current_user, get_engine, get_now, require_roles
from tutorsched.api.schemas.slots import (
    DayView,
    PublishWeekRequest,
    PublishWeekResponse,
    SlotCreate,
    SlotResponse,
    WeekViewResponse,
)
from tutorsched.domain import User, calendar
from tutorsched.domain.engine import SchedulingEngine

router = APIRouter(prefix="/slots", tags=["Slots"])


def _to_response(engine: SchedulingEngine, slot) -> SlotResponse:
    return SlotResponse.from_slot(slot, engine.slots.lesson_minutes)


@router.get("/week", response_model=WeekViewResponse)
async def week_view(
    week_start: date | None = Query(None, description="Any date inside the wanted week"),
    tutor_id: str | None = Query(None, description="Admins only: show this tutor's slots"),
    user: User = Depends(get_current_user),
    engine: SchedulingEngine = Depends(get_engine),
    now: datetime = Depends(get_now),
) -> WeekViewResponse:
    """Return the seven days of a week with the slots the caller may see."""
    start = calendar.start_of_week(week_start or now)
    days = []
    for index in range(calendar.DAYS_PER_WEEK):
        day = calendar.date_for_weekday(start, index)
        slots = engine.slots.visible_slots(user.id, day=day, tutor_id=tutor_id)
        days.append(
            DayView(
                day=day.date(),
                status=engine.slots.day_status(user.id, day, now=now).value,
                slots=[_to_response(engine, slot) for slot in slots],
            )
        )
    return WeekViewResponse(
        week_start=start.date(),
        past_week=calendar.is_past_week(start, now),
        days=days,
    )


@router.post("", response_model=SlotResponse, status_code=status.HTTP_201_CREATED)
async def create_slot(
    payload: SlotCreate,
    user: User = Depends(require_roles(["tutor", "admin"])),
    engine: SchedulingEngine = Depends(get_engine),
    now: datetime = Depends(get_now),
) -> SlotResponse:
    slot = engine.slots.create_draft_slot(
        payload.tutor_id or user.id, payload.when, actor_id=user.id, now=now
    )
    return _to_response(engine, slot)


@router.post("/publish", response_model=PublishWeekResponse)
async def publish_week(
    payload: PublishWeekRequest,
    user: User = Depends(require_roles(["tutor", "admin"])),
    engine: SchedulingEngine = Depends(get_engine),
    now: datetime = Depends(get_now),
) -> PublishWeekResponse:
    """Publish all draft slots of a week and notify the tutor's students."""
    published = engine.slots.publish_drafts_for_week(
        payload.tutor_id or user.id,
        calendar.start_of_week(payload.week_start),
        actor_id=user.id,
        now=now,
    )
    return PublishWeekResponse(
        count=len(published),
        slots=[_to_response(engine, slot) for slot in published],
    )


@router.post("/{slot_id}/reserve", response_model=SlotResponse)
async def reserve_slot(
    slot_id: str,
    user: User = Depends(require_roles(["student"])),
    engine: SchedulingEngine = Depends(get_engine),
    now: datetime = Depends(get_now),
) -> SlotResponse:
    slot = engine.slots.reserve(slot_id, user.id, now=now)
    return _to_response(engine, slot)


@router.post("/{slot_id}/done", response_model=SlotResponse)
async def toggle_done(
    slot_id: str,
    user: User = Depends(require_roles(["tutor", "admin"])),
    engine: SchedulingEngine = Depends(get_engine),
) -> SlotResponse:
    slot = engine.slots.toggle_done(slot_id, actor_id=user.id)
    return _to_response(engine, slot)


@router.delete("/{slot_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_slot(
    slot_id: str,
    user: User = Depends(require_roles(["tutor", "admin"])),
    engine: SchedulingEngine = Depends(get_engine),
) -> None:
    engine.slots.delete_slot(slot_id, actor_id=user.id)
