"""
Slot lifecycle: draft, publish, reserve, mark done, delete.

Every check runs before the store is touched, so a rejected call leaves the
store exactly as it was. Notifications are dispatched only after the slot
mutation is final and never undo it.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from datetime import datetime

import structlog
from tutorsched.core.auth import Role
from tutorsched.core.errors import (
    AlreadyReservedByOther,
    AlreadyReservedBySelf,
    Forbidden,
    ForbiddenWeek,
    NothingToPublish,
    NotPublished,
    PastDay,
    SlotInPast,
)
from tutorsched.domain import calendar
from tutorsched.domain.events import EventBus, EventType
from tutorsched.domain.models import NotificationKind, Slot, User, new_id
from tutorsched.domain.services.notifications import NotificationService
from tutorsched.domain.store import DomainStore

logger = structlog.get_logger(__name__)


class DayStatus(str, enum.Enum):
    PAST_WEEK = "past_week"
    EMPTY = "empty"
    OPEN = "open"
    FULL = "full"


class SlotService:
    """Domain logic for the slot lifecycle."""

    def __init__(
        self,
        store: DomainStore,
        bus: EventBus,
        notifications: NotificationService,
        *,
        lesson_minutes: int = 50,
    ) -> None:
        self.store = store
        self.bus = bus
        self.notifications = notifications
        self.lesson_minutes = lesson_minutes

    # --- Mutations ---

    def create_draft_slot(
        self, tutor_id: str, when: datetime, *, actor_id: str, now: datetime
    ) -> Slot:
        """Add an unpublished slot for ``tutor_id`` starting at ``when``."""
        when = calendar.to_local(when)
        actor = self.store.get_user(actor_id)
        tutor = self.store.get_teacher(tutor_id)
        self._ensure_owner_or_admin(actor, tutor.id, action="create_slot")

        if calendar.is_past_week(when, now):
            logger.warning("slot_create_rejected", reason="past_week", tutor_id=tutor.id)
            raise ForbiddenWeek("Slots cannot be added to a past week")
        if calendar.is_past_day(when, now):
            logger.warning("slot_create_rejected", reason="past_day", tutor_id=tutor.id)
            raise PastDay("Slots cannot be added to a past day")

        slot = Slot(id=new_id(), tutor_id=tutor.id, when=when)
        self.store.slots.append(slot)

        logger.info(
            "slot_created",
            slot_id=slot.id,
            tutor_id=tutor.id,
            actor_id=actor.id,
            when=when.isoformat(),
        )
        self.bus.emit(EventType.SLOT_NEW, slot_id=slot.id, tutor_id=tutor.id)
        return slot

    def publish_drafts_for_week(
        self, tutor_id: str, week_start: datetime, *, actor_id: str, now: datetime
    ) -> list[Slot]:
        """Publish every draft of ``tutor_id`` in the week and tell their students."""
        actor = self.store.get_user(actor_id)
        tutor = self.store.get_teacher(tutor_id)
        self._ensure_owner_or_admin(actor, tutor.id, action="publish_week")

        start = calendar.start_of_week(week_start)
        if calendar.is_past_week(start, now):
            raise ForbiddenWeek("Slots of a past week cannot be published")

        drafts = [
            slot
            for slot in self.store.slots
            if slot.tutor_id == tutor.id
            and not slot.published
            and calendar.in_week(slot.when, start)
        ]
        if not drafts:
            logger.info("publish_week_noop", tutor_id=tutor.id, week_start=start.isoformat())
            raise NothingToPublish("No draft slots to publish in this week")

        for slot in drafts:
            slot.published = True

        slot_ids = [slot.id for slot in drafts]
        logger.info(
            "slots_published",
            tutor_id=tutor.id,
            week_start=start.isoformat(),
            count=len(drafts),
        )
        self.bus.emit(
            EventType.SLOTS_PUBLISHED,
            tutor_id=tutor.id,
            week_start=start.isoformat(),
            slot_ids=slot_ids,
            count=len(drafts),
        )

        days: list[str] = []
        for slot in sorted(drafts, key=lambda item: item.when):
            label = calendar.format_day(slot.when)
            if label not in days:
                days.append(label)
        message = (
            f"New slots were published for week {calendar.format_week_range(start)}.\n"
            f"Days: {', '.join(days)}."
        )
        for student_id in self.store.students_of(tutor.id):
            self._dispatch(
                lambda sid=student_id: self.notifications.notify(
                    sid,
                    NotificationKind.SLOTS,
                    "New slots published",
                    message,
                    now=now,
                    subject=f"New slots from {tutor.name}",
                )
            )
        return drafts

    def reserve(self, slot_id: str, student_id: str, *, now: datetime) -> Slot:
        """Claim a published future slot for ``student_id``."""
        slot = self.store.get_slot(slot_id)
        student = self.store.get_user(student_id)
        if student.role is not Role.STUDENT:
            raise Forbidden("Only students can reserve slots")

        if slot.when < now:
            raise SlotInPast("Past slots cannot be reserved")
        if not slot.published:
            raise NotPublished("Slot is not published yet")
        if self.store.assignments.get(student.id) != slot.tutor_id:
            raise Forbidden("Slot belongs to a tutor the student is not assigned to")
        if slot.reserved_by is not None and slot.reserved_by != student.id:
            logger.warning("slot_reserve_conflict", slot_id=slot.id, student_id=student.id)
            raise AlreadyReservedByOther("Slot is already reserved")
        if slot.reserved_by == student.id:
            raise AlreadyReservedBySelf("You have already reserved this slot")

        slot.reserved_by = student.id

        logger.info("slot_reserved", slot_id=slot.id, student_id=student.id)
        self.bus.emit(EventType.SLOT_UPDATE, slot_id=slot.id, reserved_by=student.id)

        message = (
            f"{student.name} reserved the slot "
            f"{calendar.format_slot_range(slot.when, self.lesson_minutes)}."
        )
        self._dispatch(
            lambda: self.notifications.notify(
                slot.tutor_id,
                NotificationKind.BOOKING,
                "New reservation",
                message,
                now=now,
            )
        )
        return slot

    def toggle_done(self, slot_id: str, *, actor_id: str) -> Slot:
        slot = self.store.get_slot(slot_id)
        actor = self.store.get_user(actor_id)
        self._ensure_owner_or_admin(actor, slot.tutor_id, action="toggle_done")

        slot.done = not slot.done

        logger.info("slot_done_toggled", slot_id=slot.id, actor_id=actor.id, done=slot.done)
        self.bus.emit(EventType.SLOT_DONE, slot_id=slot.id, done=slot.done)
        return slot

    def delete_slot(self, slot_id: str, *, actor_id: str) -> None:
        """Admins delete anything; tutors only their own unreserved slots."""
        slot = self.store.get_slot(slot_id)
        actor = self.store.get_user(actor_id)

        allowed = actor.role is Role.ADMIN or (
            actor.id == slot.tutor_id and slot.reserved_by is None
        )
        if not allowed:
            logger.warning("slot_delete_forbidden", slot_id=slot.id, actor_id=actor.id)
            raise Forbidden("Deleting this slot is not allowed")

        self.store.slots = [item for item in self.store.slots if item.id != slot.id]

        logger.info("slot_deleted", slot_id=slot.id, actor_id=actor.id)
        self.bus.emit(EventType.SLOT_DELETE, slot_id=slot.id, tutor_id=slot.tutor_id)

    # --- Queries ---

    def visible_slots(
        self,
        user_id: str,
        *,
        week_start: datetime | None = None,
        day: datetime | None = None,
        tutor_id: str | None = None,
    ) -> list[Slot]:
        """Slots the user may see, optionally narrowed to a week or a day.

        Students see published slots of their current tutor, tutors see all of
        their own slots, admins see a chosen tutor's slots or every published one.
        """
        user = self.store.get_user(user_id)

        if user.role is Role.STUDENT:
            own_tutor = self.store.assignments.get(user.id)
            slots = [s for s in self.store.slots if s.tutor_id == own_tutor and s.published]
        elif user.role is Role.TUTOR:
            slots = [s for s in self.store.slots if s.tutor_id == user.id]
        elif tutor_id is not None:
            slots = [s for s in self.store.slots if s.tutor_id == tutor_id]
        else:
            slots = [s for s in self.store.slots if s.published]

        if week_start is not None:
            slots = [s for s in slots if calendar.in_week(s.when, week_start)]
        if day is not None:
            slots = [s for s in slots if calendar.same_day(s.when, day)]
        return sorted(slots, key=lambda s: s.when)

    def day_status(self, user_id: str, day: datetime, *, now: datetime) -> DayStatus:
        if calendar.is_past_week(day, now):
            return DayStatus.PAST_WEEK
        slots = self.visible_slots(user_id, day=day)
        if not slots:
            return DayStatus.EMPTY
        if all(slot.is_reserved for slot in slots):
            return DayStatus.FULL
        return DayStatus.OPEN

    # --- Helpers ---

    def _ensure_owner_or_admin(self, actor: User, tutor_id: str, *, action: str) -> None:
        if actor.role is Role.ADMIN or actor.id == tutor_id:
            return
        logger.warning("slot_action_forbidden", action=action, actor_id=actor.id, tutor_id=tutor_id)
        raise Forbidden("Only the owning tutor or an admin may do this")

    def _dispatch(self, send: Callable[[], object]) -> None:
        # Dispatch is best effort; the slot state is already final here.
        try:
            send()
        except Exception:
            logger.exception("notification_dispatch_failed")
