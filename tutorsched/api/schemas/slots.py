from __future__ import annotations

from datetime import date, datetime, timedelta

from pydantic import BaseModel, Field, field_validator
from tutorsched.domain import Slot, calendar


class SlotResponse(BaseModel):
    id: str
    tutor_id: str
    when: datetime
    ends_at: datetime
    reserved_by: str | None = None
    done: bool
    published: bool

    @classmethod
    def from_slot(cls, slot: Slot, lesson_minutes: int) -> SlotResponse:
        return cls(
            id=slot.id,
            tutor_id=slot.tutor_id,
            when=slot.when,
            ends_at=slot.when + timedelta(minutes=lesson_minutes),
            reserved_by=slot.reserved_by,
            done=slot.done,
            published=slot.published,
        )


class SlotCreate(BaseModel):
    when: datetime
    tutor_id: str | None = Field(
        None, description="Owning tutor; defaults to the caller, admins may pick any"
    )

    @field_validator("when")
    @classmethod
    def _local_time(cls, value: datetime) -> datetime:
        return calendar.to_local(value)


class PublishWeekRequest(BaseModel):
    week_start: date
    tutor_id: str | None = None


class PublishWeekResponse(BaseModel):
    count: int
    slots: list[SlotResponse]


class DayView(BaseModel):
    day: date
    status: str
    slots: list[SlotResponse]


class WeekViewResponse(BaseModel):
    week_start: date
    past_week: bool
    days: list[DayView]
