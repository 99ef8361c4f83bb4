from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Optional

from ..common.datetime_utils import (
    BUSINESS_TZ,
    day_range,
    day_start,
    format_clock,
    format_hours,
    local_date,
    round_half_up,
    utc_now,
)
from ..common.validators import optional_max_length, pagination_block
from ..core.constants import (
    DEFAULT_LOCATION,
    MAX_DEVICE_INFO_LENGTH,
    MAX_LOCATION_LENGTH,
    MAX_NOTES_LENGTH,
    MIN_SESSION_SECONDS,
)
from ..core.enums import PRESENT_STATUSES, AttendanceStatus, SessionAction, UserType
from ..core.exceptions import AlreadyCheckedIn, ConcurrentModification, ValidationError
from ..users.model import UserRef
from ..users.repository import UserRepository
from .model import AttendanceRecord, SessionEvent
from .policies.base import LatenessPolicy
from .policies.no_lateness_policy import NoLatenessPolicy
from .repository import AttendanceRepository
from .session import derive_fields, require_min_elapsed, require_transition, today_view

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use case: daily check-in/check-out sessions and attendance queries."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        lateness_policy: Optional[LatenessPolicy] = None,
        tz: timezone = BUSINESS_TZ,
        min_session_seconds: int = MIN_SESSION_SECONDS,
    ):
        self._attendance = attendance
        self._users = users
        self._lateness = lateness_policy or NoLatenessPolicy()
        self._tz = tz
        self._min_session_seconds = int(min_session_seconds)

    # -------- Session transitions --------
    def check_in(
        self,
        user: UserRef,
        *,
        location: Optional[str] = None,
        ip_address: Optional[str] = None,
        device_info: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        now = now or utc_now()
        start, end = day_range(now, self._tz)
        existing = self._find(user, start, end)
        require_transition(existing, SessionAction.CHECK_IN)

        decision = self._lateness.evaluate(check_in_at=now)
        changes = dict(
            check_in=self._event(now, location, ip_address, device_info),
            status=AttendanceStatus.LATE if decision.is_late else AttendanceStatus.PRESENT,
            is_late=decision.is_late,
            late_minutes=decision.late_minutes,
        )

        if existing is None:
            record = derive_fields(
                AttendanceRecord(attendance_id=None, user_id=user.user_id, user_type=user.user_type, date=start, **changes)
            )
            stored = self._attendance.insert_if_absent(record)
            if stored is None:
                logger.info("Check-in rejected for %s: record created concurrently", user)
                raise AlreadyCheckedIn()
        else:
            stored = self._write(user, existing, derive_fields(existing.with_changes(**changes)), SessionAction.CHECK_IN)

        logger.info("Check-in for %s at %s (late=%s)", user, now.isoformat(), stored.is_late)
        return {
            "check_in_time": format_clock(stored.check_in.time, self._tz),
            "is_late": stored.is_late,
            "late_minutes": stored.late_minutes,
        }

    def check_out(
        self,
        user: UserRef,
        *,
        location: Optional[str] = None,
        ip_address: Optional[str] = None,
        device_info: Optional[str] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        now = now or utc_now()
        notes = optional_max_length(notes, "Notes", MAX_NOTES_LENGTH)
        start, end = day_range(now, self._tz)
        record = self._find(user, start, end)
        require_transition(record, SessionAction.CHECK_OUT)
        require_min_elapsed(record.check_in.time, now, minimum_seconds=self._min_session_seconds)

        changes = dict(check_out=self._event(now, location, ip_address, device_info))
        if notes is not None:
            changes["notes"] = notes
        updated = derive_fields(record.with_changes(**changes))
        stored = self._write(user, record, updated, SessionAction.CHECK_OUT)

        logger.info("Check-out for %s: first session %.2fh", user, stored.first_session_hours)
        return {
            "check_out_time": format_clock(stored.check_out.time, self._tz),
            "first_session_hours": stored.first_session_hours,
            "first_session_hours_formatted": format_hours(stored.first_session_hours),
            "total_hours": stored.total_hours,
            "total_hours_formatted": format_hours(stored.total_hours),
            "can_re_check_in": True,
        }

    def re_check_in(
        self,
        user: UserRef,
        *,
        location: Optional[str] = None,
        ip_address: Optional[str] = None,
        device_info: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        now = now or utc_now()
        start, end = day_range(now, self._tz)
        record = self._find(user, start, end)
        require_transition(record, SessionAction.RE_CHECK_IN)

        updated = derive_fields(record.with_changes(re_check_in=self._event(now, location, ip_address, device_info)))
        stored = self._write(user, record, updated, SessionAction.RE_CHECK_IN)

        logger.info("Re-check-in for %s at %s", user, now.isoformat())
        return {
            "re_check_in_time": format_clock(stored.re_check_in.time, self._tz),
            "first_session_hours": stored.first_session_hours,
            "status": stored.status.value,
            "check_in_count": stored.check_in_count,
        }

    def re_check_out(
        self,
        user: UserRef,
        *,
        location: Optional[str] = None,
        ip_address: Optional[str] = None,
        device_info: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        now = now or utc_now()
        start, end = day_range(now, self._tz)
        record = self._find(user, start, end)
        require_transition(record, SessionAction.RE_CHECK_OUT)
        require_min_elapsed(record.re_check_in.time, now, minimum_seconds=self._min_session_seconds)

        updated = derive_fields(record.with_changes(re_check_out=self._event(now, location, ip_address, device_info)))
        stored = self._write(user, record, updated, SessionAction.RE_CHECK_OUT)

        logger.info("Re-check-out for %s: total %.2fh", user, stored.total_hours)
        return {
            "re_check_out_time": format_clock(stored.re_check_out.time, self._tz),
            "second_session_hours": stored.second_session_hours,
            "second_session_hours_formatted": format_hours(stored.second_session_hours),
            "total_hours": stored.total_hours,
            "total_hours_formatted": format_hours(stored.total_hours),
        }

    # -------- Queries --------
    def get_today(self, user: UserRef, *, now: Optional[datetime] = None) -> dict:
        start, end = day_range(now or utc_now(), self._tz)
        view = today_view(self._find(user, start, end))
        return {
            "attendance": self._to_view(view.record) if view.record else None,
            "can_check_in": view.can_check_in,
            "can_check_out": view.can_check_out,
            "can_re_check_in": view.can_re_check_in,
            "can_re_check_out": view.can_re_check_out,
        }

    def get_history(
        self,
        user: UserRef,
        *,
        page: int = 1,
        limit: int = 10,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> dict:
        if start_date and end_date and end_date < start_date:
            raise ValidationError("End date cannot be before start date")

        start = day_start(start_date, self._tz) if start_date else None
        end = day_range(day_start(end_date, self._tz), self._tz)[1] if end_date else None

        records, total = self._attendance.list_for_user(
            user_id=user.user_id,
            user_type=user.user_type,
            offset=(page - 1) * limit,
            limit=limit,
            start=start,
            end=end,
        )
        return {
            "attendance": [self._to_view(r) for r in records],
            "pagination": pagination_block(page=page, limit=limit, total=total),
        }

    def list_all(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        day: Optional[date] = None,
        employee_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> dict:
        start = end = None
        if day is not None:
            start, end = day_range(day_start(day, self._tz), self._tz)

        records, total = self._attendance.list_filtered(
            user_type=UserType.EMPLOYEE,
            offset=(page - 1) * limit,
            limit=limit,
            start=start,
            end=end,
            user_id=employee_id,
            status=status,
        )
        owners = self._users.get_many([r.owner for r in records])

        rows = []
        for r in records:
            owner = owners.get(r.owner)
            row = self._to_view(r)
            row["id"] = r.attendance_id
            row["user"] = {
                "id": r.user_id,
                "full_name": owner.full_name if owner else "Unknown",
                "email": owner.email if owner else "Unknown",
                "department": owner.get_department() if owner else "N/A",
            }
            row["is_late"] = r.is_late
            row["late_minutes"] = r.late_minutes
            rows.append(row)

        return {"attendance": rows, "pagination": pagination_block(page=page, limit=limit, total=total)}

    def get_daily_stats(self, *, day: Optional[date] = None, now: Optional[datetime] = None) -> dict:
        day = day or local_date(now or utc_now(), self._tz)
        start, end = day_range(day_start(day, self._tz), self._tz)
        records = self._attendance.list_in_range(start=start, end=end, user_type=UserType.EMPLOYEE)

        total = len(records)
        present = sum(1 for r in records if r.status in PRESENT_STATUSES)
        late = sum(1 for r in records if r.is_late)

        owners = self._users.get_many([r.owner for r in records])
        by_dept: dict[str, dict] = {}
        for r in records:
            owner = owners.get(r.owner)
            if owner is None:
                continue
            d = by_dept.setdefault(owner.get_department(), {"department": owner.get_department(), "present": 0, "total": 0})
            d["total"] += 1
            if r.status in PRESENT_STATUSES:
                d["present"] += 1

        department_stats = sorted(by_dept.values(), key=lambda x: x["total"], reverse=True)
        for d in department_stats:
            d["rate"] = _percent(d["present"], d["total"])

        return {
            "date": day.strftime("%Y-%m-%d"),
            "total_records": total,
            "present_records": present,
            "late_records": late,
            "absent_records": total - present,
            "attendance_rate": _percent(present, total),
            "department_stats": department_stats,
        }

    # -------- Internals --------
    def _find(self, user: UserRef, start: datetime, end: datetime) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_day(user_id=user.user_id, user_type=user.user_type, start=start, end=end)

    @staticmethod
    def _event(now: datetime, location: Optional[str], ip_address: Optional[str], device_info: Optional[str]) -> SessionEvent:
        return SessionEvent(
            time=now,
            location=optional_max_length(location, "Location", MAX_LOCATION_LENGTH) or DEFAULT_LOCATION,
            ip_address=ip_address,
            device_info=device_info[:MAX_DEVICE_INFO_LENGTH] if device_info else device_info,
        )

    def _write(self, user: UserRef, current: AttendanceRecord, updated: AttendanceRecord, action: SessionAction) -> AttendanceRecord:
        if self._attendance.update_if_version(updated, expected_version=current.version):
            return updated.with_changes(version=current.version + 1)

        # Lost a race: re-read so the caller gets the specific precondition error.
        start, end = day_range(current.date, self._tz)
        require_transition(self._find(user, start, end), action)
        logger.warning("Conditional %s write for %s failed without a guard violation", action.value, user)
        raise ConcurrentModification()

    def _to_view(self, r: AttendanceRecord) -> dict:
        return {
            "date": r.date.isoformat(),
            "business_date": local_date(r.date, self._tz).strftime("%Y-%m-%d"),
            "check_in_time": format_clock(r.check_in.time if r.check_in else None, self._tz),
            "check_out_time": format_clock(r.check_out.time if r.check_out else None, self._tz),
            "re_check_in_time": format_clock(r.re_check_in.time if r.re_check_in else None, self._tz),
            "re_check_out_time": format_clock(r.re_check_out.time if r.re_check_out else None, self._tz),
            "first_session_hours": r.first_session_hours,
            "first_session_hours_formatted": format_hours(r.first_session_hours),
            "second_session_hours": r.second_session_hours,
            "second_session_hours_formatted": format_hours(r.second_session_hours),
            "total_hours": r.total_hours,
            "total_hours_formatted": format_hours(r.total_hours),
            "status": r.status.value,
            "check_in_count": r.check_in_count,
            "notes": r.notes,
        }


def _percent(part: int, whole: int) -> int:
    return int(round_half_up(part * 100 / whole, "1")) if whole else 0
