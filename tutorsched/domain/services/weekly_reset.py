from __future__ import annotations

from datetime import datetime

import structlog
from tutorsched.domain import calendar
from tutorsched.domain.events import EventBus, EventType
from tutorsched.domain.models import NotificationKind
from tutorsched.domain.services.notifications import NotificationService
from tutorsched.domain.store import DomainStore

logger = structlog.get_logger(__name__)


class WeeklyResetScheduler:
    """Purges every slot on the first day of a new week.

    Runs whenever it is evaluated; at most one purge happens per calendar
    day, so repeated evaluation is harmless.
    """

    def __init__(
        self, store: DomainStore, bus: EventBus, notifications: NotificationService
    ) -> None:
        self.store = store
        self.bus = bus
        self.notifications = notifications

    def is_due(self, now: datetime) -> bool:
        if not calendar.is_first_day_of_week(now):
            return False
        last = self.store.last_weekly_reset_at
        return last is None or last.date() != now.date()

    def evaluate(self, now: datetime, *, force: bool = False) -> bool:
        """Run the reset if due (or forced). Returns whether a purge happened."""
        if not (force or self.is_due(now)):
            return False

        purged = len(self.store.slots)
        self.store.slots = []
        self.store.last_weekly_reset_at = now

        logger.info("weekly_reset", purged_slots=purged, forced=force, at=now.isoformat())
        self.bus.emit(EventType.RESET_WEEKLY, purged=purged, at=now.isoformat())

        for user in list(self.store.users):
            self.notifications.notify(
                user.id,
                NotificationKind.SYSTEM,
                "Weekly reset",
                "Old slots and reservations have been cleared.",
                now=now,
            )
        return True
