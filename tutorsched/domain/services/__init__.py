"""Domain services."""

from tutorsched.domain.services.announcements import AnnouncementService
from tutorsched.domain.services.assignments import AssignmentService
from tutorsched.domain.services.notifications import NotificationService
from tutorsched.domain.services.slots import DayStatus, SlotService
from tutorsched.domain.services.statistics import (
    StatisticsService,
    StatsReport,
    StudentStats,
    TutorStats,
)
from tutorsched.domain.services.users import UserService
from tutorsched.domain.services.weekly_reset import WeeklyResetScheduler

__all__ = [
    "AnnouncementService",
    "AssignmentService",
    "DayStatus",
    "NotificationService",
    "SlotService",
    "StatisticsService",
    "StatsReport",
    "StudentStats",
    "TutorStats",
    "UserService",
    "WeeklyResetScheduler",
]
