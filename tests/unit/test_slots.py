"""Unit tests for the slot lifecycle."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from tutorsched.core.errors import (
    AlreadyReservedByOther,
    AlreadyReservedBySelf,
    Forbidden,
    ForbiddenWeek,
    NothingToPublish,
    NotPublished,
    PastDay,
    SlotInPast,
    SlotNotFound,
    TemporalConstraintViolation,
    UnknownTeacher,
)
from tutorsched.domain.events import EventType
from tutorsched.domain.models import NotificationKind
from tutorsched.domain.services.slots import DayStatus

from tests.utils import WEEK_START, published_slot, user_named

WEDNESDAY_10 = datetime(2025, 2, 5, 10, 0)
THURSDAY_10 = datetime(2025, 2, 6, 10, 0)


@pytest.fixture
def ivana(engine):
    return user_named(engine, "ivana")


@pytest.fixture
def marko(engine):
    return user_named(engine, "marko")


@pytest.fixture
def ana(engine):
    return user_named(engine, "ana")


@pytest.fixture
def admin(engine):
    return user_named(engine, "admin")


def assert_reservations_published(engine) -> None:
    for slot in engine.store.slots:
        if slot.reserved_by is not None:
            assert slot.published


class TestCreateDraftSlot:
    def test_draft_is_invisible_to_students(self, engine, events, ivana, ana, now) -> None:
        """A new draft exists unpublished and the tutor's student cannot see it."""
        slot = engine.slots.create_draft_slot(ivana.id, WEDNESDAY_10, actor_id=ivana.id, now=now)

        assert slot in engine.store.slots
        assert slot.published is False
        assert slot.done is False
        assert slot.reserved_by is None
        assert engine.slots.visible_slots(ana.id, week_start=WEEK_START) == []
        assert engine.slots.visible_slots(ivana.id, week_start=WEEK_START) == [slot]
        assert [e.type for e in events] == [EventType.SLOT_NEW]

    def test_past_week_is_forbidden(self, engine, ivana, now) -> None:
        with pytest.raises(ForbiddenWeek):
            engine.slots.create_draft_slot(
                ivana.id, datetime(2025, 1, 31, 10), actor_id=ivana.id, now=now
            )
        assert engine.store.slots == []

    def test_earlier_day_this_week_is_past_day(self, engine, ivana, now) -> None:
        with pytest.raises(PastDay) as exc_info:
            engine.slots.create_draft_slot(
                ivana.id, datetime(2025, 2, 4, 16), actor_id=ivana.id, now=now
            )
        assert isinstance(exc_info.value, TemporalConstraintViolation)
        assert exc_info.value.code == "PastDay"

    def test_earlier_hour_today_is_allowed(self, engine, ivana, now) -> None:
        slot = engine.slots.create_draft_slot(
            ivana.id, datetime(2025, 2, 5, 7), actor_id=ivana.id, now=now
        )
        assert slot.when.hour == 7

    def test_offset_time_is_stored_as_local(self, engine, ivana, ana, now) -> None:
        aware = datetime(2025, 2, 6, 20, 0, tzinfo=timezone(timedelta(hours=1)))

        slot = engine.slots.create_draft_slot(ivana.id, aware, actor_id=ivana.id, now=now)
        engine.slots.publish_drafts_for_week(ivana.id, WEEK_START, actor_id=ivana.id, now=now)

        assert slot.when.tzinfo is None
        assert slot.when == aware.astimezone().replace(tzinfo=None)
        assert engine.slots.visible_slots(ana.id, week_start=WEEK_START) == [slot]
        engine.slots.reserve(slot.id, ana.id, now=now)
        assert engine.statistics.weekly_stats(WEEK_START).students

    def test_tutor_cannot_create_for_another_tutor(self, engine, ivana, marko, now) -> None:
        with pytest.raises(Forbidden):
            engine.slots.create_draft_slot(marko.id, WEDNESDAY_10, actor_id=ivana.id, now=now)

    def test_admin_creates_for_any_tutor(self, engine, admin, marko, now) -> None:
        slot = engine.slots.create_draft_slot(marko.id, WEDNESDAY_10, actor_id=admin.id, now=now)
        assert slot.tutor_id == marko.id

    def test_student_is_not_a_teacher(self, engine, admin, ana, now) -> None:
        with pytest.raises(UnknownTeacher):
            engine.slots.create_draft_slot(ana.id, WEDNESDAY_10, actor_id=admin.id, now=now)


class TestPublishDraftsForWeek:
    def test_publish_notifies_each_student_once(self, engine, ivana, ana, now) -> None:
        """One pending draft: it gets published and each student hears about it once."""
        slot = engine.slots.create_draft_slot(ivana.id, THURSDAY_10, actor_id=ivana.id, now=now)
        students = engine.store.students_of(ivana.id)
        emails_before = len(engine.store.email_log)

        published = engine.slots.publish_drafts_for_week(
            ivana.id, WEEK_START, actor_id=ivana.id, now=now
        )

        assert published == [slot]
        assert slot.published is True
        for student_id in students:
            notes = engine.store.notifications[student_id]
            assert len(notes) == 1
            assert notes[0].kind is NotificationKind.SLOTS
            assert "Thursday 06.02." in notes[0].message
        assert len(engine.store.email_log) == emails_before + len(students)
        assert engine.store.email_log[-1].subject == f"New slots from {ivana.name}"
        assert engine.slots.visible_slots(ana.id, week_start=WEEK_START) == [slot]

    def test_only_drafts_of_that_week_and_tutor(self, engine, ivana, marko, admin, now) -> None:
        this_week = engine.slots.create_draft_slot(
            ivana.id, THURSDAY_10, actor_id=ivana.id, now=now
        )
        next_week = engine.slots.create_draft_slot(
            ivana.id, datetime(2025, 2, 11, 10), actor_id=ivana.id, now=now
        )
        other_tutor = engine.slots.create_draft_slot(
            marko.id, THURSDAY_10, actor_id=admin.id, now=now
        )

        engine.slots.publish_drafts_for_week(ivana.id, WEEK_START, actor_id=ivana.id, now=now)

        assert this_week.published
        assert not next_week.published
        assert not other_tutor.published

    def test_days_are_listed_once(self, engine, ivana, now) -> None:
        for hour in (10, 11, 12):
            engine.slots.create_draft_slot(
                ivana.id, datetime(2025, 2, 6, hour), actor_id=ivana.id, now=now
            )
        engine.slots.publish_drafts_for_week(ivana.id, WEEK_START, actor_id=ivana.id, now=now)

        student_id = engine.store.students_of(ivana.id)[0]
        message = engine.store.notifications[student_id][0].message
        assert message.count("Thursday 06.02.") == 1

    def test_nothing_to_publish(self, engine, events, ivana, now) -> None:
        with pytest.raises(NothingToPublish):
            engine.slots.publish_drafts_for_week(
                ivana.id, WEEK_START, actor_id=ivana.id, now=now
            )
        assert events == []
        assert engine.store.email_log == []

    def test_republishing_has_nothing_pending(self, engine, ivana, now) -> None:
        published_slot(engine, ivana, THURSDAY_10, now=now)
        with pytest.raises(NothingToPublish):
            engine.slots.publish_drafts_for_week(
                ivana.id, WEEK_START, actor_id=ivana.id, now=now
            )

    def test_past_week_cannot_be_published(self, engine, ivana, now) -> None:
        with pytest.raises(ForbiddenWeek):
            engine.slots.publish_drafts_for_week(
                ivana.id, datetime(2025, 1, 27), actor_id=ivana.id, now=now
            )

    def test_failed_dispatch_keeps_slots_published(self, engine, ivana, now, monkeypatch) -> None:
        slot = engine.slots.create_draft_slot(ivana.id, THURSDAY_10, actor_id=ivana.id, now=now)

        def broken_notify(*args, **kwargs):
            raise RuntimeError("mail down")

        monkeypatch.setattr(engine.notifications, "notify", broken_notify)

        engine.slots.publish_drafts_for_week(ivana.id, WEEK_START, actor_id=ivana.id, now=now)

        assert slot.published is True


class TestReserve:
    def test_reserve_and_conflict(self, engine, ivana, ana, admin, now) -> None:
        """First student wins; a second student gets a conflict and nothing changes."""
        slot = published_slot(engine, ivana, THURSDAY_10, now=now)
        tutor_notes_before = len(engine.store.notifications.get(ivana.id, []))

        engine.slots.reserve(slot.id, ana.id, now=now)

        assert slot.reserved_by == ana.id
        tutor_notes = engine.store.notifications[ivana.id]
        assert len(tutor_notes) == tutor_notes_before + 1
        assert tutor_notes[0].kind is NotificationKind.BOOKING
        assert "Thu 06.02. 10:00-10:50" in tutor_notes[0].message

        other = engine.users.create_user(
            actor_id=admin.id,
            role="student",
            name="Iva",
            username="iva",
            email="iva@uni.hr",
            password="secret1",
        )
        engine.assignments.assign(other.id, ivana.id)
        snapshot = engine.to_document()

        with pytest.raises(AlreadyReservedByOther):
            engine.slots.reserve(slot.id, other.id, now=now)

        assert engine.to_document() == snapshot

    def test_reserving_twice_is_signalled(self, engine, ivana, ana, now) -> None:
        slot = published_slot(engine, ivana, THURSDAY_10, now=now)
        engine.slots.reserve(slot.id, ana.id, now=now)
        notes = len(engine.store.notifications[ivana.id])

        with pytest.raises(AlreadyReservedBySelf):
            engine.slots.reserve(slot.id, ana.id, now=now)

        assert len(engine.store.notifications[ivana.id]) == notes

    def test_past_slot(self, engine, ivana, ana, now) -> None:
        slot = published_slot(engine, ivana, datetime(2025, 2, 5, 8), now=now)
        with pytest.raises(SlotInPast):
            engine.slots.reserve(slot.id, ana.id, now=now)
        assert slot.reserved_by is None

    def test_draft_cannot_be_reserved(self, engine, ivana, ana, now) -> None:
        slot = engine.slots.create_draft_slot(ivana.id, THURSDAY_10, actor_id=ivana.id, now=now)
        with pytest.raises(NotPublished):
            engine.slots.reserve(slot.id, ana.id, now=now)
        assert slot.reserved_by is None

    def test_slot_of_another_tutor(self, engine, marko, ana, now) -> None:
        slot = published_slot(engine, marko, THURSDAY_10, now=now)
        with pytest.raises(Forbidden):
            engine.slots.reserve(slot.id, ana.id, now=now)

    def test_tutors_cannot_reserve(self, engine, ivana, now) -> None:
        slot = published_slot(engine, ivana, THURSDAY_10, now=now)
        with pytest.raises(Forbidden):
            engine.slots.reserve(slot.id, ivana.id, now=now)

    def test_unknown_slot(self, engine, ana, now) -> None:
        with pytest.raises(SlotNotFound):
            engine.slots.reserve("missing", ana.id, now=now)


class TestToggleDone:
    def test_owner_toggles_back_and_forth(self, engine, events, ivana, now) -> None:
        slot = engine.slots.create_draft_slot(ivana.id, THURSDAY_10, actor_id=ivana.id, now=now)

        engine.slots.toggle_done(slot.id, actor_id=ivana.id)
        assert slot.done is True
        engine.slots.toggle_done(slot.id, actor_id=ivana.id)
        assert slot.done is False
        assert [e.type for e in events].count(EventType.SLOT_DONE) == 2
        assert EventType.NOTIFICATION_NEW not in [e.type for e in events]

    def test_admin_may_toggle(self, engine, ivana, admin, now) -> None:
        slot = engine.slots.create_draft_slot(ivana.id, THURSDAY_10, actor_id=ivana.id, now=now)
        engine.slots.toggle_done(slot.id, actor_id=admin.id)
        assert slot.done is True

    @pytest.mark.parametrize("username", ["marko", "ana"])
    def test_others_are_forbidden(self, engine, ivana, now, username) -> None:
        slot = engine.slots.create_draft_slot(ivana.id, THURSDAY_10, actor_id=ivana.id, now=now)
        with pytest.raises(Forbidden):
            engine.slots.toggle_done(slot.id, actor_id=user_named(engine, username).id)
        assert slot.done is False


class TestDeleteSlot:
    def test_owner_deletes_unreserved(self, engine, ivana, now) -> None:
        slot = engine.slots.create_draft_slot(ivana.id, THURSDAY_10, actor_id=ivana.id, now=now)
        engine.slots.delete_slot(slot.id, actor_id=ivana.id)
        assert engine.store.slots == []

    def test_owner_cannot_delete_reserved(self, engine, ivana, ana, now) -> None:
        slot = published_slot(engine, ivana, THURSDAY_10, now=now)
        engine.slots.reserve(slot.id, ana.id, now=now)
        with pytest.raises(Forbidden):
            engine.slots.delete_slot(slot.id, actor_id=ivana.id)
        assert slot in engine.store.slots

    def test_admin_deletes_reserved(self, engine, ivana, ana, admin, now) -> None:
        slot = published_slot(engine, ivana, THURSDAY_10, now=now)
        engine.slots.reserve(slot.id, ana.id, now=now)
        engine.slots.delete_slot(slot.id, actor_id=admin.id)
        assert engine.store.slots == []

    def test_other_tutor_cannot_delete(self, engine, ivana, marko, now) -> None:
        slot = engine.slots.create_draft_slot(ivana.id, THURSDAY_10, actor_id=ivana.id, now=now)
        with pytest.raises(Forbidden):
            engine.slots.delete_slot(slot.id, actor_id=marko.id)


class TestVisibilityAndInvariants:
    def test_reservations_always_published(self, engine, ivana, ana, admin, now) -> None:
        """No operation sequence produces a reserved but unpublished slot."""
        first = published_slot(engine, ivana, THURSDAY_10, now=now)
        draft = engine.slots.create_draft_slot(
            ivana.id, datetime(2025, 2, 7, 10), actor_id=ivana.id, now=now
        )
        steps = [
            lambda: engine.slots.reserve(first.id, ana.id, now=now),
            lambda: engine.slots.reserve(draft.id, ana.id, now=now),
            lambda: engine.slots.toggle_done(first.id, actor_id=ivana.id),
            lambda: engine.slots.publish_drafts_for_week(
                ivana.id, WEEK_START, actor_id=ivana.id, now=now
            ),
            lambda: engine.slots.reserve(draft.id, ana.id, now=now),
            lambda: engine.slots.delete_slot(first.id, actor_id=admin.id),
        ]
        for step in steps:
            try:
                step()
            except NotPublished:
                pass
            assert_reservations_published(engine)
        assert draft.reserved_by == ana.id

    def test_admin_sees_selected_tutor_or_published(self, engine, ivana, admin, now) -> None:
        draft = engine.slots.create_draft_slot(ivana.id, THURSDAY_10, actor_id=ivana.id, now=now)

        assert engine.slots.visible_slots(admin.id) == []
        assert engine.slots.visible_slots(admin.id, tutor_id=ivana.id) == [draft]

    def test_day_status(self, engine, ivana, ana, now) -> None:
        thursday = datetime(2025, 2, 6)
        assert engine.slots.day_status(ana.id, thursday, now=now) is DayStatus.EMPTY

        slot = published_slot(engine, ivana, THURSDAY_10, now=now)
        assert engine.slots.day_status(ana.id, thursday, now=now) is DayStatus.OPEN

        engine.slots.reserve(slot.id, ana.id, now=now)
        assert engine.slots.day_status(ana.id, thursday, now=now) is DayStatus.FULL
        assert (
            engine.slots.day_status(ana.id, datetime(2025, 1, 30), now=now)
            is DayStatus.PAST_WEEK
        )
