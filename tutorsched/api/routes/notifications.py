from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from tutorsched.api.deps import get_current_user, get_engine
from tutorsched.api.schemas.notifications import (
    EmailLogEntryResponse,
    EmailLogResponse,
    NotificationResponse,
    NotificationsResponse,
)
from tutorsched.domain import User
from tutorsched.domain.engine import SchedulingEngine
from tutorsched.libs.mailer import recent_emails

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationsResponse)
async def list_notifications(
    user: User = Depends(get_current_user),
    engine: SchedulingEngine = Depends(get_engine),
) -> NotificationsResponse:
    items = engine.notifications.list_for(user.id)
    return NotificationsResponse(
        unread=engine.notifications.unread_count(user.id),
        items=[NotificationResponse.from_notification(item) for item in items],
    )


@router.get("/email-log", response_model=EmailLogResponse)
async def email_log(
    limit: int | None = Query(None, ge=1, le=500),
    _: User = Depends(get_current_user),
    engine: SchedulingEngine = Depends(get_engine),
) -> EmailLogResponse:
    """Mock outbound email, newest first."""
    entries = recent_emails(engine.store, limit)
    return EmailLogResponse(items=[EmailLogEntryResponse.from_entry(e) for e in entries])


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: str,
    user: User = Depends(get_current_user),
    engine: SchedulingEngine = Depends(get_engine),
) -> NotificationResponse:
    notification = engine.notifications.mark_read(user.id, notification_id)
    return NotificationResponse.from_notification(notification)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_notification(
    notification_id: str,
    user: User = Depends(get_current_user),
    engine: SchedulingEngine = Depends(get_engine),
) -> None:
    engine.notifications.remove(user.id, notification_id)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_notifications(
    user: User = Depends(get_current_user),
    engine: SchedulingEngine = Depends(get_engine),
) -> None:
    engine.notifications.clear(user.id)
