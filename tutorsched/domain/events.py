from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class EventType(str, enum.Enum):
    SLOT_NEW = "slot:new"
    SLOT_UPDATE = "slot:update"
    SLOT_DELETE = "slot:delete"
    SLOT_DONE = "slot:done"
    SLOTS_PUBLISHED = "slots:published"
    ANNOUNCEMENT_NEW = "announcement:new"
    ANNOUNCEMENT_DELETE = "announcement:delete"
    ANNOUNCEMENT_READ = "announcement:read"
    ANNOUNCEMENT_HIDDEN = "announcement:hidden"
    NOTIFICATION_NEW = "notification:new"
    NOTIFICATION_UPDATE = "notification:update"
    NOTIFICATION_REMOVE = "notification:remove"
    NOTIFICATION_CLEAR = "notification:clear"
    ASSIGNMENT_UPDATE = "assignment:update"
    USER_NEW = "user:new"
    RESET_WEEKLY = "reset:weekly"


@dataclass(slots=True, frozen=True)
class DomainEvent:
    """Value emitted after a mutation has been applied to the store."""

    type: EventType
    payload: dict[str, Any] = field(default_factory=dict)


EventListener = Callable[[DomainEvent], None]


class EventBus:
    """Synchronous fan-out of domain events to subscribed listeners.

    Listeners run after the store mutation is final; a failing listener is
    logged and skipped so it can never undo or block the mutation.
    """

    def __init__(self) -> None:
        self._listeners: list[EventListener] = []

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event_type: EventType, **payload: Any) -> DomainEvent:
        event = DomainEvent(type=event_type, payload=payload)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("event_listener_failed", event_type=event_type.value)
        return event
