from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel
from tutorsched.domain import EmailLogEntry, Notification


class NotificationResponse(BaseModel):
    id: str
    kind: str
    title: str
    message: str
    created_at: datetime
    read: bool

    @classmethod
    def from_notification(cls, notification: Notification) -> NotificationResponse:
        return cls(
            id=notification.id,
            kind=notification.kind.value,
            title=notification.title,
            message=notification.message,
            created_at=notification.created_at,
            read=notification.read,
        )


class NotificationsResponse(BaseModel):
    unread: int
    items: list[NotificationResponse]


class EmailLogEntryResponse(BaseModel):
    id: str
    to: str
    subject: str
    body: str
    at: datetime

    @classmethod
    def from_entry(cls, entry: EmailLogEntry) -> EmailLogEntryResponse:
        return cls(id=entry.id, to=entry.to, subject=entry.subject, body=entry.body, at=entry.at)


class EmailLogResponse(BaseModel):
    items: list[EmailLogEntryResponse]
