from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import BUSINESS_TZ, month_range, round_half_up, utc_now
from ..common.validators import pagination_block, require_month, require_year
from ..core.enums import PayrollStatus, UserType
from ..core.exceptions import AuthorizationError, DuplicatePayrollPeriod, InvalidTransition, NotFoundError, ValidationError
from ..users.model import UserRef
from ..users.repository import UserRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import PayrollRecord
from .repository import PayrollRepository

logger = logging.getLogger(__name__)

# Only forward, one step at a time.
_NEXT_STATUS = {
    PayrollStatus.DRAFT: PayrollStatus.GENERATED,
    PayrollStatus.GENERATED: PayrollStatus.PAID,
}


class PayrollService:
    """Use case: monthly payroll generation and payroll queries."""

    def __init__(
        self,
        payroll: PayrollRepository,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
        tz: timezone = BUSINESS_TZ,
    ):
        self._payroll = payroll
        self._attendance = attendance
        self._users = users
        self._calculator = calculator or StandardPayrollCalculator()
        self._tz = tz

    def generate_payroll(self, *, month, year, generated_by: Optional[int] = None, now: Optional[datetime] = None) -> dict:
        month = require_month(month)
        year = require_year(year)
        now = now or utc_now()

        if self._payroll.exists_for_period(month=month, year=year):
            logger.info("Payroll generation rejected: %s/%s already exists", month, year)
            raise DuplicatePayrollPeriod(month, year)

        start, end = month_range(month, year, self._tz)
        records = []
        for employee in self._users.list_active_employees():
            profile = employee.get_compensation_profile()
            days = self._attendance.list_in_range(
                start=start, end=end, user_type=UserType.EMPLOYEE, user_id=employee.user_id
            )
            summary = self._calculator.summarize(days, month=month, year=year, profile=profile)
            records.append(
                PayrollRecord(
                    payroll_id=None,
                    employee_id=employee.user_id,
                    month=month,
                    year=year,
                    breakdown=self._calculator.compute(profile=profile, summary=summary),
                    attendance=summary,
                    status=PayrollStatus.GENERATED,
                    generated_by=generated_by,
                    generated_at=now,
                )
            )

        count = self._payroll.insert_period(month=month, year=year, records=records)
        total_net = round_half_up(sum(r.net_pay for r in records))
        logger.info("Generated payroll for %s/%s: %s employees, net %.2f", month, year, count, total_net)
        return {"month": month, "year": year, "count": count, "total_net_pay": total_net}

    def get_payroll(self, *, requester: UserRef, employee_id, page: int = 1, limit: int = 12) -> dict:
        try:
            employee_id = int(employee_id)
        except (TypeError, ValueError):
            raise ValidationError("Employee id must be a whole number")

        if not requester.is_admin and requester.user_id != employee_id:
            logger.info("Payroll read by %s for employee %s denied", requester, employee_id)
            raise AuthorizationError("Access denied")

        items, total = self._payroll.list_for_employee(
            employee_id=employee_id, offset=(page - 1) * limit, limit=limit
        )
        return {
            "payroll": [p.to_dict() for p in items],
            "pagination": pagination_block(page=page, limit=limit, total=total),
        }

    def set_payroll_status(self, *, payroll_id, status, now: Optional[datetime] = None) -> dict:
        try:
            target = PayrollStatus(status)
        except ValueError:
            raise ValidationError("Invalid payroll status")

        current = self._payroll.get_by_id(int(payroll_id))
        if current is None:
            raise NotFoundError("Payroll record not found")

        if _NEXT_STATUS.get(current.status) != target:
            raise InvalidTransition(f"Cannot change payroll status from {current.status.value} to {target.value}")

        paid_at = (now or utc_now()) if target == PayrollStatus.PAID else None
        if not self._payroll.update_status(
            payroll_id=current.payroll_id, expected=current.status, status=target, paid_at=paid_at
        ):
            # Someone else moved it first.
            raise InvalidTransition(f"Payroll status is no longer {current.status.value}")

        logger.info("Payroll %s: %s -> %s", current.payroll_id, current.status.value, target.value)
        return {
            "id": current.payroll_id,
            "status": target.value,
            "paid_at": paid_at.isoformat() if paid_at else None,
        }

    def list_all(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
    ) -> dict:
        items, total = self._payroll.list_filtered(
            offset=(page - 1) * limit, limit=limit, month=month, year=year, status=status
        )
        owners = self._users.get_many([UserRef.employee(p.employee_id) for p in items])

        rows = []
        for p in items:
            row = p.to_dict()
            owner = owners.get(UserRef.employee(p.employee_id))
            row["employee"] = {
                "id": p.employee_id,
                "full_name": owner.full_name if owner else "Unknown",
                "department": owner.get_department() if owner else "N/A",
            }
            rows.append(row)
        return {"payroll": rows, "pagination": pagination_block(page=page, limit=limit, total=total)}

    def summary(self, *, month: Optional[int] = None, year: Optional[int] = None) -> dict:
        items = self._payroll.list_for_period(month=month, year=year)
        owners = self._users.get_many([UserRef.employee(p.employee_id) for p in items])

        by_dept: dict[str, dict] = {}
        for p in items:
            owner = owners.get(UserRef.employee(p.employee_id))
            dept = owner.get_department() if owner else "N/A"
            d = by_dept.setdefault(dept, {"department": dept, "count": 0, "total_net_pay": 0.0})
            d["count"] += 1
            d["total_net_pay"] = round_half_up(d["total_net_pay"] + p.net_pay)

        return {
            "month": month,
            "year": year,
            "total_employees": len(items),
            "total_basic_salary": round_half_up(sum(p.breakdown.basic_salary for p in items)),
            "total_allowances": round_half_up(sum(p.breakdown.allowances.total for p in items)),
            "total_overtime": round_half_up(sum(p.breakdown.overtime.amount for p in items)),
            "total_deductions": round_half_up(sum(p.breakdown.deductions.total for p in items)),
            "total_net_pay": round_half_up(sum(p.net_pay for p in items)),
            "department_breakdown": sorted(by_dept.values(), key=lambda d: d["department"]),
        }
