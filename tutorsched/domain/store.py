"""Authoritative in-memory dataset and its persisted document form."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from tutorsched.core.auth import Role
from tutorsched.core.errors import (
    AnnouncementNotFound,
    SlotNotFound,
    UnknownTeacher,
    UserNotFound,
)
from tutorsched.domain import calendar
from tutorsched.domain.models import (
    Announcement,
    EmailLogEntry,
    Notification,
    NotificationKind,
    Slot,
    User,
)


@dataclass
class DomainStore:
    """Every entity of the scheduler lives here.

    Services receive the store explicitly and are the only code paths that
    mutate it. Lists keep insertion order, which is also the tie-break order
    for load balancing and listings.
    """

    users: list[User] = field(default_factory=list)
    assignments: dict[str, str] = field(default_factory=dict)
    slots: list[Slot] = field(default_factory=list)
    announcements: list[Announcement] = field(default_factory=list)
    notifications: dict[str, list[Notification]] = field(default_factory=dict)
    email_log: list[EmailLogEntry] = field(default_factory=list)
    last_weekly_reset_at: datetime | None = None
    hidden_announcements: dict[str, list[str]] = field(default_factory=dict)

    # --- Lookups ---

    def find_user(self, user_id: str) -> User | None:
        return next((user for user in self.users if user.id == user_id), None)

    def get_user(self, user_id: str) -> User:
        user = self.find_user(user_id)
        if user is None:
            raise UserNotFound(f"User {user_id} not found")
        return user

    def get_teacher(self, teacher_id: str) -> User:
        user = self.find_user(teacher_id)
        if user is None or not user.can_teach:
            raise UnknownTeacher(f"User {teacher_id} is not a tutor or admin")
        return user

    def get_slot(self, slot_id: str) -> Slot:
        slot = next((slot for slot in self.slots if slot.id == slot_id), None)
        if slot is None:
            raise SlotNotFound(f"Slot {slot_id} not found")
        return slot

    def get_announcement(self, announcement_id: str) -> Announcement:
        announcement = next(
            (item for item in self.announcements if item.id == announcement_id), None
        )
        if announcement is None:
            raise AnnouncementNotFound(f"Announcement {announcement_id} not found")
        return announcement

    def teachers(self) -> list[User]:
        return [user for user in self.users if user.can_teach]

    def students(self) -> list[User]:
        return [user for user in self.users if user.role is Role.STUDENT]

    def students_of(self, teacher_id: str) -> list[str]:
        return [sid for sid, tid in self.assignments.items() if tid == teacher_id]

    def notifications_for(self, user_id: str) -> list[Notification]:
        return self.notifications.setdefault(user_id, [])

    # --- Document codec ---

    def to_document(self) -> dict[str, Any]:
        """Serialize into the single JSON-compatible persisted document."""
        return {
            "users": [
                {
                    "id": user.id,
                    "role": user.role.value,
                    "name": user.name,
                    "username": user.username,
                    "email": user.email,
                    "password": user.password,
                }
                for user in self.users
            ],
            "assignments": dict(self.assignments),
            "slots": [
                {
                    "id": slot.id,
                    "tutorId": slot.tutor_id,
                    "when": slot.when.isoformat(),
                    "reservedBy": slot.reserved_by,
                    "done": slot.done,
                    "published": slot.published,
                }
                for slot in self.slots
            ],
            "announcements": [
                {
                    "id": item.id,
                    "tutorId": item.tutor_id,
                    "title": item.title,
                    "body": item.body,
                    "createdAt": item.created_at.isoformat(),
                    "recipients": list(item.recipients),
                    "readBy": list(item.read_by),
                }
                for item in self.announcements
            ],
            "notifications": {
                user_id: [
                    {
                        "id": note.id,
                        "kind": note.kind.value,
                        "title": note.title,
                        "message": note.message,
                        "createdAt": note.created_at.isoformat(),
                        "read": note.read,
                    }
                    for note in notes
                ]
                for user_id, notes in self.notifications.items()
            },
            "emailLog": [
                {
                    "id": entry.id,
                    "to": entry.to,
                    "subject": entry.subject,
                    "body": entry.body,
                    "at": entry.at.isoformat(),
                }
                for entry in self.email_log
            ],
            "lastWeeklyResetAt": (
                self.last_weekly_reset_at.isoformat() if self.last_weekly_reset_at else None
            ),
            "hiddenAnnouncements": {
                user_id: list(ids) for user_id, ids in self.hidden_announcements.items()
            },
        }

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> DomainStore:
        """Rebuild a store; fields missing from older documents default to empty."""
        last_reset = document.get("lastWeeklyResetAt")
        return cls(
            users=[_user_from(raw) for raw in document.get("users") or []],
            assignments=dict(document.get("assignments") or {}),
            slots=[_slot_from(raw) for raw in document.get("slots") or []],
            announcements=[
                _announcement_from(raw) for raw in document.get("announcements") or []
            ],
            notifications={
                user_id: [_notification_from(raw) for raw in notes or []]
                for user_id, notes in (document.get("notifications") or {}).items()
            },
            email_log=[_email_from(raw) for raw in document.get("emailLog") or []],
            last_weekly_reset_at=parse_instant(last_reset) if last_reset else None,
            hidden_announcements={
                user_id: list(ids or [])
                for user_id, ids in (document.get("hiddenAnnouncements") or {}).items()
            },
        )


def parse_instant(value: str) -> datetime:
    """Parse an ISO-8601 string into a naive local datetime."""
    return calendar.to_local(datetime.fromisoformat(value))


def _user_from(raw: dict[str, Any]) -> User:
    return User(
        id=raw["id"],
        role=Role(raw["role"]),
        name=raw.get("name", ""),
        username=raw.get("username", ""),
        email=raw.get("email", ""),
        password=raw.get("password", ""),
    )


def _slot_from(raw: dict[str, Any]) -> Slot:
    return Slot(
        id=raw["id"],
        tutor_id=raw["tutorId"],
        when=parse_instant(raw["when"]),
        reserved_by=raw.get("reservedBy"),
        done=bool(raw.get("done", False)),
        published=bool(raw.get("published", False)),
    )


def _announcement_from(raw: dict[str, Any]) -> Announcement:
    return Announcement(
        id=raw["id"],
        tutor_id=raw["tutorId"],
        title=raw.get("title", ""),
        body=raw.get("body", ""),
        created_at=parse_instant(raw["createdAt"]),
        recipients=list(raw.get("recipients") or []),
        read_by=list(raw.get("readBy") or []),
    )


def _notification_from(raw: dict[str, Any]) -> Notification:
    # Older documents stored the kind under "type".
    kind = raw.get("kind") or raw.get("type") or NotificationKind.SYSTEM.value
    return Notification(
        id=raw["id"],
        kind=NotificationKind(kind),
        title=raw.get("title", ""),
        message=raw.get("message", ""),
        created_at=parse_instant(raw["createdAt"]),
        read=bool(raw.get("read", False)),
    )


def _email_from(raw: dict[str, Any]) -> EmailLogEntry:
    return EmailLogEntry(
        id=raw["id"],
        to=raw.get("to", ""),
        subject=raw.get("subject", ""),
        body=raw.get("body", ""),
        at=parse_instant(raw["at"]),
    )
