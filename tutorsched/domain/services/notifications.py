"""In-app notifications with a mock email copy for every message."""

from __future__ import annotations

from datetime import datetime

import structlog
from tutorsched.core.errors import NotificationNotFound
from tutorsched.domain.events import EventBus, EventType
from tutorsched.domain.models import Notification, NotificationKind, new_id
from tutorsched.domain.store import DomainStore
from tutorsched.libs.mailer import send_email

logger = structlog.get_logger(__name__)

DEFAULT_SUBJECTS = {
    NotificationKind.BOOKING: "New slot reservation",
    NotificationKind.SLOTS: "New slots published",
    NotificationKind.ANNOUNCEMENT: "New announcement",
    NotificationKind.SYSTEM: "Scheduler notice",
}


class NotificationService:
    """Creates notifications and manages their read state per user."""

    def __init__(self, store: DomainStore, bus: EventBus) -> None:
        self.store = store
        self.bus = bus

    def notify(
        self,
        user_id: str,
        kind: NotificationKind,
        title: str,
        message: str,
        *,
        now: datetime,
        subject: str | None = None,
        email_body: str | None = None,
    ) -> Notification:
        """Prepend a notification for ``user_id`` and log a mock email copy.

        Never fails: a user without a resolvable email address still gets the
        in-app notification, only the email is skipped.
        """
        notification = Notification(
            id=new_id(),
            kind=kind,
            title=title,
            message=message,
            created_at=now,
        )
        self.store.notifications_for(user_id).insert(0, notification)

        user = self.store.find_user(user_id)
        if user is not None and user.email:
            send_email(
                self.store,
                user.email,
                subject or DEFAULT_SUBJECTS[kind],
                email_body if email_body is not None else message,
                now=now,
            )
        else:
            logger.warning("notification_email_skipped", user_id=user_id, kind=kind.value)

        self.bus.emit(EventType.NOTIFICATION_NEW, user_id=user_id, notification_id=notification.id)
        return notification

    def list_for(self, user_id: str) -> list[Notification]:
        return list(self.store.notifications.get(user_id, []))

    def unread_count(self, user_id: str) -> int:
        return sum(1 for note in self.store.notifications.get(user_id, []) if not note.read)

    def mark_read(self, user_id: str, notification_id: str) -> Notification:
        notification = self._get(user_id, notification_id)
        notification.read = True
        self.bus.emit(
            EventType.NOTIFICATION_UPDATE, user_id=user_id, notification_id=notification_id
        )
        return notification

    def remove(self, user_id: str, notification_id: str) -> None:
        notification = self._get(user_id, notification_id)
        self.store.notifications[user_id] = [
            note for note in self.store.notifications[user_id] if note is not notification
        ]
        self.bus.emit(
            EventType.NOTIFICATION_REMOVE, user_id=user_id, notification_id=notification_id
        )

    def clear(self, user_id: str) -> int:
        removed = len(self.store.notifications.get(user_id, []))
        self.store.notifications[user_id] = []
        self.bus.emit(EventType.NOTIFICATION_CLEAR, user_id=user_id, removed=removed)
        return removed

    def _get(self, user_id: str, notification_id: str) -> Notification:
        for note in self.store.notifications.get(user_id, []):
            if note.id == notification_id:
                return note
        raise NotificationNotFound(f"Notification {notification_id} not found")
