"""Read-only lesson statistics over the current slot set."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from tutorsched.domain import calendar
from tutorsched.domain.models import Slot
from tutorsched.domain.store import DomainStore


@dataclass(slots=True)
class TutorStats:
    tutor_id: str
    name: str
    done: int
    hours: float


@dataclass(slots=True)
class StudentStats:
    student_id: str
    name: str
    reserved: int
    done: int
    reserved_hours: float
    done_hours: float


@dataclass(slots=True)
class StatsReport:
    tutors: list[TutorStats]
    students: list[StudentStats]
    week_start: datetime | None = None


class StatisticsService:
    """Derives per-tutor and per-student totals.

    Tutor figures follow slot ownership, not the live assignment map, so a
    reassigned student's lessons stay with the tutor who held them.
    """

    def __init__(self, store: DomainStore, *, lesson_minutes: int = 50) -> None:
        self.store = store
        self.lesson_minutes = lesson_minutes

    def weekly_stats(self, week_start: datetime) -> StatsReport:
        start = calendar.start_of_week(week_start)
        slots = [slot for slot in self.store.slots if calendar.in_week(slot.when, start)]
        report = self._build(slots)
        report.week_start = start
        return report

    def all_time_stats(self) -> StatsReport:
        return self._build(list(self.store.slots))

    def hours(self, count: int) -> float:
        return round(count * self.lesson_minutes / 60, 2)

    def _build(self, slots: Iterable[Slot]) -> StatsReport:
        slots = list(slots)
        tutors = []
        for teacher in self.store.teachers():
            done = sum(1 for slot in slots if slot.tutor_id == teacher.id and slot.done)
            tutors.append(
                TutorStats(tutor_id=teacher.id, name=teacher.name, done=done, hours=self.hours(done))
            )

        students = []
        for student in self.store.students():
            booked = [slot for slot in slots if slot.reserved_by == student.id]
            done = sum(1 for slot in booked if slot.done)
            students.append(
                StudentStats(
                    student_id=student.id,
                    name=student.name,
                    reserved=len(booked),
                    done=done,
                    reserved_hours=self.hours(len(booked)),
                    done_hours=self.hours(done),
                )
            )
        return StatsReport(tutors=tutors, students=students)
