from __future__ import annotations

from dataclasses import asdict
from datetime import datetime

from pydantic import BaseModel
from tutorsched.domain.services.statistics import StatsReport


class TutorStatsItem(BaseModel):
    tutor_id: str
    name: str
    done: int
    hours: float


class StudentStatsItem(BaseModel):
    student_id: str
    name: str
    reserved: int
    done: int
    reserved_hours: float
    done_hours: float


class StatsResponse(BaseModel):
    week_start: datetime | None = None
    tutors: list[TutorStatsItem]
    students: list[StudentStatsItem]

    @classmethod
    def from_report(cls, report: StatsReport) -> StatsResponse:
        return cls(
            week_start=report.week_start,
            tutors=[TutorStatsItem(**asdict(item)) for item in report.tutors],
            students=[StudentStatsItem(**asdict(item)) for item in report.students],
        )


class AssignRequest(BaseModel):
    teacher_id: str


class AssignmentsResponse(BaseModel):
    assignments: dict[str, str]
    load: dict[str, int]
