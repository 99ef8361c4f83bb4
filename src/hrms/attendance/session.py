"""Attendance session state machine.

The state of a daily record is inferred once from which timestamps are set;
every transition guard works on that explicit state. ``derive_fields`` is the
only place hours, status override and ``check_in_count`` are computed, and
every mutator runs it before persisting.
"""
from __future__ import annotations

import math
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import as_utc, hours_between
from ..core.constants import MIN_SESSION_SECONDS
from ..core.enums import AttendanceStatus, SessionAction, SessionState
from ..core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    AlreadyReCheckedIn,
    AlreadyReCheckedOut,
    NoCheckInFound,
    NoCheckOutFound,
    NoReCheckInFound,
    TooSoon,
)
from .model import AttendanceRecord, SessionEvent, TodayView


def session_state(record: Optional[AttendanceRecord]) -> SessionState:
    if record is None or record.check_in is None:
        return SessionState.NONE
    if record.check_out is None:
        return SessionState.CHECKED_IN
    if record.re_check_in is None:
        return SessionState.CHECKED_OUT
    if record.re_check_out is None:
        return SessionState.RE_CHECKED_IN
    return SessionState.RE_CHECKED_OUT


_ORDER = [
    SessionState.NONE,
    SessionState.CHECKED_IN,
    SessionState.CHECKED_OUT,
    SessionState.RE_CHECKED_IN,
    SessionState.RE_CHECKED_OUT,
]

# action -> (required state, error when the action's own step already happened, error when too early)
_GUARDS = {
    SessionAction.CHECK_IN: (SessionState.NONE, AlreadyCheckedIn, None),
    SessionAction.CHECK_OUT: (SessionState.CHECKED_IN, AlreadyCheckedOut, NoCheckInFound),
    SessionAction.RE_CHECK_IN: (SessionState.CHECKED_OUT, AlreadyReCheckedIn, NoCheckOutFound),
    SessionAction.RE_CHECK_OUT: (SessionState.RE_CHECKED_IN, AlreadyReCheckedOut, NoReCheckInFound),
}


def require_transition(record: Optional[AttendanceRecord], action: SessionAction) -> SessionState:
    """Raise the specific precondition error unless ``action`` is legal now."""
    state = session_state(record)
    required, already_error, missing_error = _GUARDS[action]
    if state == required:
        return state
    if _ORDER.index(state) > _ORDER.index(required):
        raise already_error()
    raise missing_error()


def require_min_elapsed(started: datetime, now: datetime, *, minimum_seconds: int = MIN_SESSION_SECONDS) -> None:
    elapsed = as_utc(now) - as_utc(started)
    if elapsed.total_seconds() < minimum_seconds:
        raise TooSoon(elapsed_seconds=math.floor(elapsed.total_seconds()), minimum_seconds=minimum_seconds)


def _session_hours(start: Optional[SessionEvent], end: Optional[SessionEvent]) -> Optional[float]:
    if start is None or end is None:
        return None
    return hours_between(start.time, end.time)


def derive_fields(record: AttendanceRecord) -> AttendanceRecord:
    """Recompute session hours, total, status override and check-in count."""
    first = _session_hours(record.check_in, record.check_out)
    second = _session_hours(record.re_check_in, record.re_check_out)

    status = record.status
    count = record.check_in_count
    if record.re_check_in is not None:
        status = AttendanceStatus.RE_CHECKED_IN
        count = 2

    first_hours = first if first is not None else 0.0
    second_hours = second if second is not None else 0.0
    return record.with_changes(
        first_session_hours=first_hours,
        second_session_hours=second_hours,
        total_hours=round(first_hours + second_hours, 2),
        status=status,
        check_in_count=count,
    )


def today_view(record: Optional[AttendanceRecord]) -> TodayView:
    """Action availability from timestamp presence only (ignores ``status``)."""
    state = session_state(record)
    return TodayView(
        record=record,
        can_check_in=state == SessionState.NONE,
        can_check_out=state == SessionState.CHECKED_IN,
        can_re_check_in=state == SessionState.CHECKED_OUT,
        can_re_check_out=state == SessionState.RE_CHECKED_IN,
    )
