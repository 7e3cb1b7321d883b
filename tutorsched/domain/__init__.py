"""Scheduling domain: entities, store and events."""

from tutorsched.domain.events import DomainEvent, EventBus, EventType
from tutorsched.domain.models import (
    Announcement,
    EmailLogEntry,
    Notification,
    NotificationKind,
    Slot,
    User,
)
from tutorsched.domain.store import DomainStore

__all__ = [
    "Announcement",
    "DomainEvent",
    "DomainStore",
    "EmailLogEntry",
    "EventBus",
    "EventType",
    "Notification",
    "NotificationKind",
    "Slot",
    "User",
]
