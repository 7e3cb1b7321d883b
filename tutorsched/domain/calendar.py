"""Week and day arithmetic on naive local datetimes.

Weeks start on Monday 00:00. Nothing in here reads the wall clock; callers
always pass the instant they care about.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

DAYS_PER_WEEK = 7
WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def to_local(value: datetime) -> datetime:
    """Convert an aware instant to naive local time; naive values pass through."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def start_of_week(value: datetime | date) -> datetime:
    """Return Monday 00:00 of the week containing ``value``."""
    day = value.date() if isinstance(value, datetime) else value
    monday = day - timedelta(days=day.weekday())
    return datetime.combine(monday, time.min)


def end_of_week(week_start: datetime | date) -> datetime:
    """Exclusive upper bound of the week: the following Monday 00:00."""
    return start_of_week(week_start) + timedelta(days=DAYS_PER_WEEK)


def in_week(instant: datetime, week_start: datetime | date) -> bool:
    start = start_of_week(week_start)
    return start <= instant < start + timedelta(days=DAYS_PER_WEEK)


def date_for_weekday(week_start: datetime | date, weekday_index: int) -> datetime:
    """Return 00:00 of the ``weekday_index``-th day (0 = Monday) of the week."""
    if not 0 <= weekday_index < DAYS_PER_WEEK:
        raise ValueError(f"weekday_index must be in 0..6, got {weekday_index}")
    return start_of_week(week_start) + timedelta(days=weekday_index)


def with_time(base: datetime | date, hour: int, minute: int = 0) -> datetime:
    day = base.date() if isinstance(base, datetime) else base
    return datetime.combine(day, time(hour=hour, minute=minute))


def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min)


def same_day(a: datetime, b: datetime) -> bool:
    return a.date() == b.date()


def is_past_week(week_start: datetime | date, now: datetime) -> bool:
    """A week is past iff its Monday precedes the Monday of ``now``'s week."""
    return start_of_week(week_start) < start_of_week(now)


def is_past_day(instant: datetime, now: datetime) -> bool:
    """Compare calendar dates only; earlier hours of today are not past."""
    return instant.date() < now.date()


def is_first_day_of_week(now: datetime) -> bool:
    return now.weekday() == 0


# Formatting used in notification and email bodies.


def format_day(value: datetime) -> str:
    return f"{WEEKDAY_NAMES[value.weekday()]} {value:%d.%m.}"


def format_week_range(week_start: datetime | date) -> str:
    start = start_of_week(week_start)
    end = end_of_week(start)
    return f"{start:%d.%m.}-{end:%d.%m.}"


def format_slot_range(when: datetime, lesson_minutes: int) -> str:
    end = when + timedelta(minutes=lesson_minutes)
    return f"{WEEKDAY_NAMES[when.weekday()][:3]} {when:%d.%m.} {when:%H:%M}-{end:%H:%M}"
