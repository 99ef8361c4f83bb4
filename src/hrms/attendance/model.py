from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..core.constants import DEFAULT_LOCATION
from ..core.enums import AttendanceStatus, UserType
from ..users.model import UserRef


@dataclass(frozen=True)
class SessionEvent:
    """One timestamped check-in/check-out event with its request metadata."""

    time: datetime
    location: str = DEFAULT_LOCATION
    ip_address: Optional[str] = None
    device_info: Optional[str] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one user's attendance for one business day.

    ``date`` is the UTC instant of the business day's local midnight.
    Hour fields and ``check_in_count`` are derived; see ``session.derive_fields``.
    """

    attendance_id: Optional[int]
    user_id: int
    user_type: UserType
    date: datetime
    check_in: Optional[SessionEvent] = None
    check_out: Optional[SessionEvent] = None
    re_check_in: Optional[SessionEvent] = None
    re_check_out: Optional[SessionEvent] = None
    first_session_hours: float = 0.0
    second_session_hours: float = 0.0
    total_hours: float = 0.0
    status: AttendanceStatus = AttendanceStatus.PRESENT
    is_late: bool = False
    late_minutes: int = 0
    check_in_count: int = 1
    notes: Optional[str] = None
    version: int = 0

    @property
    def owner(self) -> UserRef:
        return UserRef(self.user_type, self.user_id)

    def with_changes(self, **changes) -> "AttendanceRecord":
        return replace(self, **changes)


@dataclass(frozen=True)
class TodayView:
    """Answer to "what can I do now" for the current business day."""

    record: Optional[AttendanceRecord]
    can_check_in: bool
    can_check_out: bool
    can_re_check_in: bool
    can_re_check_out: bool
