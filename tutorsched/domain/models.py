from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime

from tutorsched.core.auth import Role


def new_id() -> str:
    """Short random identifier used for every store entity."""
    return uuid.uuid4().hex[:10]


class NotificationKind(str, enum.Enum):
    BOOKING = "booking"
    SLOTS = "slots"
    ANNOUNCEMENT = "announcement"
    SYSTEM = "system"


@dataclass(slots=True)
class User:
    """A person that can log in: admin, tutor or student."""

    id: str
    role: Role
    name: str
    username: str
    email: str
    password: str = ""

    @property
    def can_teach(self) -> bool:
        return self.role.can_teach


@dataclass(slots=True)
class Slot:
    """A single bookable lesson owned by one tutor.

    Only the start instant is stored; the lesson length is a fixed setting.
    """

    id: str
    tutor_id: str
    when: datetime
    reserved_by: str | None = None
    done: bool = False
    published: bool = False

    @property
    def is_reserved(self) -> bool:
        return self.reserved_by is not None


@dataclass(slots=True)
class Announcement:
    id: str
    tutor_id: str
    title: str
    body: str
    created_at: datetime
    recipients: list[str] = field(default_factory=list)
    read_by: list[str] = field(default_factory=list)

    def is_read_by(self, user_id: str) -> bool:
        return user_id in self.read_by


@dataclass(slots=True)
class Notification:
    id: str
    kind: NotificationKind
    title: str
    message: str
    created_at: datetime
    read: bool = False


@dataclass(slots=True, frozen=True)
class EmailLogEntry:
    """Record of a mock outbound email. Never mutated after creation."""

    id: str
    to: str
    subject: str
    body: str
    at: datetime
