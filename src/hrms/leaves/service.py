from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Optional

from ..common.datetime_utils import BUSINESS_TZ, day_range, day_start, local_date, round_half_up, utc_now
from ..common.validators import pagination_block, require_length
from ..core.constants import LEAVE_REASON_MAX_LENGTH, LEAVE_REASON_MIN_LENGTH, MAX_NOTES_LENGTH
from ..core.enums import HalfDayType, LeaveStatus, LeaveType, UserType
from ..core.exceptions import NotFoundError, ValidationError
from ..users.model import UserRef
from ..users.repository import UserRepository
from .model import LeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


def leave_days(from_date: date, to_date: date, is_half_day: bool) -> float:
    """Inclusive calendar days; a half-day request counts as 0.5."""
    if is_half_day:
        return 0.5
    return float((to_date - from_date).days + 1)


class LeaveService:
    def __init__(self, leaves: LeaveRepository, users: UserRepository, *, tz: timezone = BUSINESS_TZ):
        self._leaves = leaves
        self._users = users
        self._tz = tz

    def submit(
        self,
        user: UserRef,
        *,
        leave_type,
        from_date: Optional[date],
        to_date: Optional[date],
        reason: str,
        is_half_day: bool = False,
        half_day_type=None,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        try:
            kind = LeaveType(leave_type)
        except ValueError:
            raise ValidationError("Please select a valid leave type")

        if from_date is None:
            raise ValidationError("Please provide a from date")
        if to_date is None:
            raise ValidationError("Please provide a to date")

        reason = require_length(reason, "Reason", LEAVE_REASON_MIN_LENGTH, LEAVE_REASON_MAX_LENGTH)

        half_type = None
        if half_day_type:
            try:
                half_type = HalfDayType(half_day_type)
            except ValueError:
                raise ValidationError("Half day type must be morning or afternoon")

        now = now or utc_now()
        if from_date < local_date(now, self._tz):
            raise ValidationError("From date cannot be in the past")
        if to_date < from_date:
            raise ValidationError("To date cannot be before from date")
        if is_half_day and to_date != from_date:
            raise ValidationError("A half-day leave must start and end on the same day")

        if self._leaves.find_active_overlapping(user, from_date=from_date, to_date=to_date):
            raise ValidationError("You have overlapping leave requests for these dates")

        leave = self._leaves.create(
            LeaveRequest(
                request_id=None,
                user_id=user.user_id,
                user_type=user.user_type,
                leave_type=kind,
                from_date=from_date,
                to_date=to_date,
                total_days=leave_days(from_date, to_date, bool(is_half_day)),
                reason=reason,
                is_half_day=bool(is_half_day),
                half_day_type=half_type if is_half_day else None,
                created_at=now,
            )
        )
        logger.info("Leave request %s submitted by %s (%s days)", leave.request_id, user, leave.total_days)
        return leave

    def list_mine(self, user: UserRef, *, page: int = 1, limit: int = 20, status=None) -> dict:
        status_filter = None
        if status:
            try:
                status_filter = LeaveStatus(status)
            except ValueError:
                raise ValidationError("Invalid leave status")

        items, total = self._leaves.list_for_user(user, offset=(page - 1) * limit, limit=limit, status=status_filter)
        return {
            "leaves": [leave.to_dict() for leave in items],
            "pagination": pagination_block(page=page, limit=limit, total=total),
        }

    def list_pending(self) -> list[dict]:
        return self._with_owners(self._leaves.list_by_status(LeaveStatus.PENDING))

    def list_all(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        status=None,
        leave_type=None,
        employee_id: Optional[int] = None,
    ) -> dict:
        items, total = self._leaves.list_filtered(
            offset=(page - 1) * limit,
            limit=limit,
            status=_parse(LeaveStatus, status, "Invalid leave status"),
            leave_type=_parse(LeaveType, leave_type, "Please select a valid leave type"),
            owner=UserRef.employee(employee_id) if employee_id is not None else None,
        )
        return {
            "leaves": self._with_owners(items),
            "pagination": pagination_block(page=page, limit=limit, total=total),
        }

    def stats(self, *, start_date: Optional[date] = None, end_date: Optional[date] = None) -> dict:
        """Employee leave counts by status, by type and by department.

        ``start_date``/``end_date`` bound the submission date (business-local, inclusive).
        """
        if start_date and end_date and end_date < start_date:
            raise ValidationError("End date cannot be before start date")

        rows = self._leaves.count_grouped(
            user_type=UserType.EMPLOYEE,
            created_from=day_start(start_date, self._tz) if start_date else None,
            created_to=day_range(day_start(end_date, self._tz), self._tz)[1] if end_date else None,
        )

        by_status = {s: 0 for s in LeaveStatus}
        by_type: dict[LeaveType, dict] = {}
        by_dept: dict[str, dict] = {}
        owners = self._users.get_many(list({UserRef.employee(user_id) for user_id, _, _, _ in rows}))

        for user_id, kind, status, n in rows:
            by_status[status] += n
            _tally(by_type.setdefault(kind, _bucket("type", kind.value)), status, n)
            # Requests whose owner no longer exists are left out of the department view.
            owner = owners.get(UserRef.employee(user_id))
            if owner is not None:
                dept = owner.get_department()
                _tally(by_dept.setdefault(dept, _bucket("department", dept)), status, n)

        total = sum(by_status.values())
        approved = by_status[LeaveStatus.APPROVED]
        return {
            "total_leaves": total,
            "pending_leaves": by_status[LeaveStatus.PENDING],
            "approved_leaves": approved,
            "rejected_leaves": by_status[LeaveStatus.REJECTED],
            "approval_rate": int(round_half_up(approved * 100 / total, "1")) if total else 0,
            "leave_type_stats": sorted(by_type.values(), key=lambda x: x["total"], reverse=True),
            "department_stats": sorted(by_dept.values(), key=lambda x: x["total"], reverse=True),
        }

    def _with_owners(self, items) -> list[dict]:
        owners = self._users.get_many([UserRef(leave.user_type, leave.user_id) for leave in items])
        rows = []
        for leave in items:
            row = leave.to_dict()
            owner = owners.get(UserRef(leave.user_type, leave.user_id))
            row["user"] = {
                "id": leave.user_id,
                "full_name": owner.full_name if owner else "Unknown",
                "email": owner.email if owner else "Unknown",
                "department": owner.get_department() if owner else "N/A",
            }
            rows.append(row)
        return rows

    def approve(self, admin: UserRef, request_id, *, note: str = "", now: Optional[datetime] = None) -> None:
        self._decide(admin, request_id, LeaveStatus.APPROVED, note, now)

    def reject(self, admin: UserRef, request_id, *, note: str = "", now: Optional[datetime] = None) -> None:
        self._decide(admin, request_id, LeaveStatus.REJECTED, note, now)

    def _decide(self, admin: UserRef, request_id, status: LeaveStatus, note: str, now: Optional[datetime]) -> None:
        leave = self._leaves.get(int(request_id))
        if leave is None:
            raise NotFoundError("Leave request not found")
        if leave.status != LeaveStatus.PENDING:
            raise ValidationError("Leave request has already been processed")

        note = (note or "").strip()
        if len(note) > MAX_NOTES_LENGTH:
            raise ValidationError(f"Note cannot exceed {MAX_NOTES_LENGTH} characters")

        ok = self._leaves.decide(
            request_id=leave.request_id,
            status=status,
            decided_by=admin.user_id,
            decided_at=now or utc_now(),
            admin_note=note or None,
        )
        if not ok:
            raise ValidationError("Leave request has already been processed")
        logger.info("Leave request %s %s by %s", leave.request_id, status.value, admin)


def _parse(enum_cls, value, message: str):
    if not value:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(message)


def _bucket(label: str, name: str) -> dict:
    return {label: name, "total": 0, "approved": 0, "rejected": 0, "pending": 0}


def _tally(bucket: dict, status: LeaveStatus, n: int) -> None:
    bucket["total"] += n
    bucket[status.value] += n
