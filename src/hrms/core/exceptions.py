from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations.

    Each subclass carries a stable ``code`` and the HTTP status the controller
    layer answers with.
    """

    code = "DOMAIN_ERROR"
    http_status = 400

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message())

    def default_message(self) -> str:
        return "Request could not be processed"

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    code = "AUTHENTICATION_FAILED"
    http_status = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "FORBIDDEN"
    http_status = 403


class NotFoundError(DomainError):
    code = "NOT_FOUND"
    http_status = 404


class ConcurrentModification(DomainError):
    """A conditional write lost a race that the guards could not explain."""

    code = "CONCURRENT_MODIFICATION"
    http_status = 409

    def default_message(self) -> str:
        return "Record was modified by another request, please retry"


# -------- Attendance session transitions --------
class AttendanceError(DomainError):
    """Wrong state-machine transition attempted."""

    code = "ATTENDANCE_ERROR"


class AlreadyCheckedIn(AttendanceError):
    code = "ALREADY_CHECKED_IN"

    def default_message(self) -> str:
        return "Already checked in today"


class NoCheckInFound(AttendanceError):
    code = "NO_CHECK_IN_FOUND"

    def default_message(self) -> str:
        return "No check-in record found for today"


class AlreadyCheckedOut(AttendanceError):
    code = "ALREADY_CHECKED_OUT"

    def default_message(self) -> str:
        return "Already checked out today"


class NoCheckOutFound(AttendanceError):
    code = "NO_CHECK_OUT_FOUND"

    def default_message(self) -> str:
        return "Please check out from your first session before re-checking in"


class AlreadyReCheckedIn(AttendanceError):
    code = "ALREADY_RE_CHECKED_IN"

    def default_message(self) -> str:
        return "Already re-checked in today"


class NoReCheckInFound(AttendanceError):
    code = "NO_RE_CHECK_IN_FOUND"

    def default_message(self) -> str:
        return "No re-check-in record found for today"


class AlreadyReCheckedOut(AttendanceError):
    code = "ALREADY_RE_CHECKED_OUT"

    def default_message(self) -> str:
        return "Already re-checked out today"


class TooSoon(AttendanceError):
    """Session closed before the minimum elapsed time."""

    code = "TOO_SOON"

    def __init__(self, elapsed_seconds: int, minimum_seconds: int, message: str | None = None):
        self.elapsed_seconds = int(elapsed_seconds)
        self.minimum_seconds = int(minimum_seconds)
        super().__init__(
            message
            or f"Please wait at least {self.minimum_seconds // 60} minute(s); only {self.elapsed_seconds} seconds elapsed"
        )


# -------- Payroll --------
class DuplicatePayrollPeriod(DomainError):
    code = "DUPLICATE_PAYROLL_PERIOD"

    def __init__(self, month: int, year: int):
        self.month = int(month)
        self.year = int(year)
        super().__init__(f"Payroll for {self.month}/{self.year} has already been generated")


class InvalidTransition(DomainError):
    code = "INVALID_TRANSITION"
