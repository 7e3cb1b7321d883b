from __future__ import annotations

from typing import Any

from tutorsched.core.config import Settings, get_settings
from tutorsched.domain.events import EventBus, EventListener
from tutorsched.domain.seed import create_seed_store
from tutorsched.domain.services.announcements import AnnouncementService
from tutorsched.domain.services.assignments import AssignmentService
from tutorsched.domain.services.notifications import NotificationService
from tutorsched.domain.services.slots import SlotService
from tutorsched.domain.services.statistics import StatisticsService
from tutorsched.domain.services.users import UserService
from tutorsched.domain.services.weekly_reset import WeeklyResetScheduler
from tutorsched.domain.store import DomainStore


class SchedulingEngine:
    """One store, one event bus and the services that operate on them.

    The presentation layer holds a single engine per process and calls the
    services directly; nothing reaches the store through globals.
    """

    def __init__(self, store: DomainStore, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.store = store
        self.bus = EventBus()

        self.notifications = NotificationService(store, self.bus)
        self.assignments = AssignmentService(store, self.bus)
        self.slots = SlotService(
            store, self.bus, self.notifications, lesson_minutes=settings.lesson_minutes
        )
        self.announcements = AnnouncementService(
            store,
            self.bus,
            self.notifications,
            preview_chars=settings.announcement_preview_chars,
        )
        self.weekly_reset = WeeklyResetScheduler(store, self.bus, self.notifications)
        self.statistics = StatisticsService(store, lesson_minutes=settings.lesson_minutes)
        self.users = UserService(store, self.bus, self.assignments)

    @classmethod
    def from_document(
        cls, document: dict[str, Any] | None, settings: Settings | None = None
    ) -> SchedulingEngine:
        """Load a persisted document, falling back to the seed dataset."""
        settings = settings or get_settings()
        if not document:
            store = create_seed_store() if settings.seed_demo_data else DomainStore()
            return cls(store, settings)

        engine = cls(DomainStore.from_document(document), settings)
        # every student must have exactly one tutor
        engine.assignments.assign_unassigned_students()
        return engine

    def subscribe(self, listener: EventListener):
        return self.bus.subscribe(listener)

    def to_document(self) -> dict[str, Any]:
        return self.store.to_document()
