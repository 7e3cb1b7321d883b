from __future__ import annotations

from datetime import datetime

import structlog
from tutorsched.core.auth import Role
from tutorsched.core.errors import EmptyTitle, Forbidden
from tutorsched.domain.events import EventBus, EventType
from tutorsched.domain.models import Announcement, NotificationKind, new_id
from tutorsched.domain.services.notifications import NotificationService
from tutorsched.domain.store import DomainStore

logger = structlog.get_logger(__name__)


class AnnouncementService:
    """Broadcasts from a tutor to the students assigned at posting time."""

    def __init__(
        self,
        store: DomainStore,
        bus: EventBus,
        notifications: NotificationService,
        *,
        preview_chars: int = 120,
    ) -> None:
        self.store = store
        self.bus = bus
        self.notifications = notifications
        self.preview_chars = preview_chars

    def post_announcement(
        self, author_id: str, title: str, body: str, *, now: datetime
    ) -> Announcement:
        author = self.store.get_user(author_id)
        if not author.can_teach:
            raise Forbidden("Only tutors and admins can post announcements")
        if not title or not title.strip():
            raise EmptyTitle("Announcement title must not be blank")

        announcement = Announcement(
            id=new_id(),
            tutor_id=author.id,
            title=title,
            body=body or "",
            created_at=now,
            recipients=self.store.students_of(author.id),
        )
        self.store.announcements.insert(0, announcement)

        logger.info(
            "announcement_posted",
            announcement_id=announcement.id,
            author_id=author.id,
            recipients=len(announcement.recipients),
        )
        self.bus.emit(
            EventType.ANNOUNCEMENT_NEW,
            announcement_id=announcement.id,
            tutor_id=author.id,
        )

        preview = announcement.body[: self.preview_chars]
        for student_id in announcement.recipients:
            self.notifications.notify(
                student_id,
                NotificationKind.ANNOUNCEMENT,
                f"New announcement: {title}",
                preview,
                now=now,
                subject=f"New announcement from {author.name}: {title}",
                email_body=announcement.body,
            )
        return announcement

    def mark_read(self, announcement_id: str, user_id: str) -> Announcement:
        announcement = self.store.get_announcement(announcement_id)
        if user_id not in announcement.read_by:
            announcement.read_by.append(user_id)
        self.bus.emit(
            EventType.ANNOUNCEMENT_READ, announcement_id=announcement.id, user_id=user_id
        )
        return announcement

    def hide_for_user(self, user_id: str, announcement_id: str) -> list[str]:
        """Hide an announcement for one user only; returns their hidden set."""
        self.store.get_user(user_id)
        hidden = self.store.hidden_announcements.setdefault(user_id, [])
        if announcement_id not in hidden:
            hidden.append(announcement_id)
        self.bus.emit(
            EventType.ANNOUNCEMENT_HIDDEN, announcement_id=announcement_id, user_id=user_id
        )
        return list(hidden)

    def delete_announcement(self, announcement_id: str, *, actor_id: str) -> None:
        announcement = self.store.get_announcement(announcement_id)
        actor = self.store.get_user(actor_id)
        if actor.role is not Role.ADMIN and actor.id != announcement.tutor_id:
            raise Forbidden("Only the author or an admin may delete an announcement")

        self.store.announcements = [
            item for item in self.store.announcements if item.id != announcement.id
        ]
        logger.info("announcement_deleted", announcement_id=announcement.id, actor_id=actor.id)
        self.bus.emit(EventType.ANNOUNCEMENT_DELETE, announcement_id=announcement.id)

    def visible_for(self, user_id: str) -> list[Announcement]:
        """Announcements shown to ``user_id``, newest first.

        Students see their current tutor's announcements minus the ones they
        hid; tutors see their own; admins see everything.
        """
        user = self.store.get_user(user_id)
        if user.role is Role.ADMIN:
            return list(self.store.announcements)
        if user.role is Role.TUTOR:
            return [item for item in self.store.announcements if item.tutor_id == user.id]

        tutor_id = self.store.assignments.get(user.id)
        hidden = set(self.store.hidden_announcements.get(user.id, []))
        return [
            item
            for item in self.store.announcements
            if item.tutor_id == tutor_id and item.id not in hidden
        ]
