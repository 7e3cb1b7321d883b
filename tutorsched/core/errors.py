"""Error taxonomy for scheduling operations.

Every failure raised by the engine is a ``SchedulingError`` carrying a stable
``code``. Callers branch on the category class (or the code); nothing here
ever terminates the process.
"""

from __future__ import annotations


class SchedulingError(Exception):
    """Base exception for all engine failures."""

    code = "SchedulingError"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


# --- Categories ---


class ValidationError(SchedulingError):
    """Malformed or missing required input."""

    code = "ValidationError"


class TemporalConstraintViolation(SchedulingError):
    """Operation targets a day, week or slot that is already in the past."""

    code = "TemporalConstraintViolation"


class StateConflict(SchedulingError):
    """Operation conflicts with the current state of the entity."""

    code = "StateConflict"


class AuthorizationError(SchedulingError):
    """Actor lacks the role or ownership required for the action."""

    code = "AuthorizationError"


class NotFound(SchedulingError):
    """Referenced identity does not exist."""

    code = "NotFound"


# --- Validation ---


class EmptyTitle(ValidationError):
    code = "EmptyTitle"


class DuplicateUsername(ValidationError):
    code = "DuplicateUsername"


class DuplicateEmail(ValidationError):
    code = "DuplicateEmail"


class InvalidRole(ValidationError):
    code = "InvalidRole"


# --- Temporal ---


class ForbiddenWeek(TemporalConstraintViolation):
    code = "ForbiddenWeek"


class PastDay(TemporalConstraintViolation):
    code = "PastDay"


class SlotInPast(TemporalConstraintViolation):
    code = "SlotInPast"


# --- State ---


class NotPublished(StateConflict):
    code = "NotPublished"


class AlreadyReservedByOther(StateConflict):
    code = "AlreadyReservedByOther"


class AlreadyReservedBySelf(StateConflict):
    code = "AlreadyReservedBySelf"


class NothingToPublish(StateConflict):
    code = "NothingToPublish"


# --- Authorization ---


class Forbidden(AuthorizationError):
    code = "Forbidden"


class InvalidCredentials(AuthorizationError):
    code = "InvalidCredentials"


# --- Lookup ---


class UnknownTeacher(NotFound):
    code = "UnknownTeacher"


class UserNotFound(NotFound):
    code = "UserNotFound"


class SlotNotFound(NotFound):
    code = "SlotNotFound"


class AnnouncementNotFound(NotFound):
    code = "AnnouncementNotFound"


class NotificationNotFound(NotFound):
    code = "NotificationNotFound"
