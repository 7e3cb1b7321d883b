from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, status
from tutorsched.api.deps import get_current_user, get_engine, get_now, require_roles
from tutorsched.api.schemas.announcements import (
    AnnouncementCreate,
    AnnouncementResponse,
    AnnouncementsResponse,
    HiddenAnnouncementsResponse,
)
from tutorsched.domain import User
from tutorsched.domain.engine import SchedulingEngine

router = APIRouter(prefix="/announcements", tags=["Announcements"])


@router.get("", response_model=AnnouncementsResponse)
async def list_announcements(
    user: User = Depends(get_current_user),
    engine: SchedulingEngine = Depends(get_engine),
) -> AnnouncementsResponse:
    items = engine.announcements.visible_for(user.id)
    return AnnouncementsResponse(
        items=[AnnouncementResponse.for_reader(item, user.id) for item in items]
    )


@router.post("", response_model=AnnouncementResponse, status_code=status.HTTP_201_CREATED)
async def post_announcement(
    payload: AnnouncementCreate,
    user: User = Depends(require_roles(["tutor", "admin"])),
    engine: SchedulingEngine = Depends(get_engine),
    now: datetime = Depends(get_now),
) -> AnnouncementResponse:
    announcement = engine.announcements.post_announcement(
        user.id, payload.title, payload.body, now=now
    )
    return AnnouncementResponse.for_reader(announcement, user.id)


@router.post("/{announcement_id}/read", response_model=AnnouncementResponse)
async def mark_read(
    announcement_id: str,
    user: User = Depends(get_current_user),
    engine: SchedulingEngine = Depends(get_engine),
) -> AnnouncementResponse:
    announcement = engine.announcements.mark_read(announcement_id, user.id)
    return AnnouncementResponse.for_reader(announcement, user.id)


@router.post("/{announcement_id}/hide", response_model=HiddenAnnouncementsResponse)
async def hide_announcement(
    announcement_id: str,
    user: User = Depends(get_current_user),
    engine: SchedulingEngine = Depends(get_engine),
) -> HiddenAnnouncementsResponse:
    """Hide an announcement for the caller only."""
    engine.store.get_announcement(announcement_id)
    hidden = engine.announcements.hide_for_user(user.id, announcement_id)
    return HiddenAnnouncementsResponse(hidden=hidden)


@router.delete("/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_announcement(
    announcement_id: str,
    user: User = Depends(require_roles(["tutor", "admin"])),
    engine: SchedulingEngine = Depends(get_engine),
) -> None:
    engine.announcements.delete_announcement(announcement_id, actor_id=user.id)
