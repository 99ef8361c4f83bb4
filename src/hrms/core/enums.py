from __future__ import annotations

from enum import Enum


class UserType(str, Enum):
    """Kind of account an attendance record or payroll belongs to."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Attendance status stored on each daily record."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half-day"
    LEAVE = "leave"
    RE_CHECKED_IN = "re-checked-in"


# Statuses that count as a worked day in statistics and payroll.
PRESENT_STATUSES = frozenset({AttendanceStatus.PRESENT, AttendanceStatus.LATE, AttendanceStatus.RE_CHECKED_IN})


class SessionState(str, Enum):
    """Where a daily record sits in the check-in/check-out sequence."""

    NONE = "NONE"
    CHECKED_IN = "CHECKED_IN"
    CHECKED_OUT = "CHECKED_OUT"
    RE_CHECKED_IN = "RE_CHECKED_IN"
    RE_CHECKED_OUT = "RE_CHECKED_OUT"


class SessionAction(str, Enum):
    CHECK_IN = "check-in"
    CHECK_OUT = "check-out"
    RE_CHECK_IN = "re-check-in"
    RE_CHECK_OUT = "re-check-out"


class PayrollStatus(str, Enum):
    DRAFT = "draft"
    GENERATED = "generated"
    PAID = "paid"


class LeaveType(str, Enum):
    SICK = "sick"
    CASUAL = "casual"
    ANNUAL = "annual"
    MATERNITY = "maternity"
    PATERNITY = "paternity"
    BEREAVEMENT = "bereavement"
    OTHER = "other"


class HalfDayType(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"


class LeaveStatus(str, Enum):
    """Approval workflow state of a leave request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
