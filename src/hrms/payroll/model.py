from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import PayrollStatus


@dataclass(frozen=True)
class Allowances:
    housing: float = 0.0
    transport: float = 0.0
    meal: float = 0.0
    medical: float = 0.0
    other: float = 0.0

    @property
    def total(self) -> float:
        return round(self.housing + self.transport + self.meal + self.medical + self.other, 2)


@dataclass(frozen=True)
class Deductions:
    absent: float = 0.0
    half_day: float = 0.0
    tax: float = 0.0
    insurance: float = 0.0
    other: float = 0.0

    @property
    def total(self) -> float:
        return round(self.absent + self.half_day + self.tax + self.insurance + self.other, 2)


@dataclass(frozen=True)
class Overtime:
    hours: float = 0.0
    amount: float = 0.0


@dataclass(frozen=True)
class AttendanceSummary:
    """Month snapshot captured at generation time; never updated afterwards."""

    total_days: int = 0
    present_days: int = 0
    absent_days: int = 0
    half_days: int = 0
    leave_days: int = 0
    overtime_hours: float = 0.0


@dataclass(frozen=True)
class PayrollBreakdown:
    basic_salary: float
    allowances: Allowances
    overtime: Overtime
    deductions: Deductions

    @property
    def net_pay(self) -> float:
        return round(self.basic_salary + self.allowances.total + self.overtime.amount - self.deductions.total, 2)


@dataclass(frozen=True)
class PayrollRecord:
    """Domain entity: one employee's payroll for one month."""

    payroll_id: Optional[int]
    employee_id: int
    month: int
    year: int
    breakdown: PayrollBreakdown
    attendance: AttendanceSummary
    status: PayrollStatus
    generated_by: Optional[int] = None
    generated_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None

    @property
    def net_pay(self) -> float:
        return self.breakdown.net_pay

    def to_dict(self) -> dict:
        b = self.breakdown
        return {
            "id": self.payroll_id,
            "employee_id": self.employee_id,
            "month": self.month,
            "year": self.year,
            "basic_salary": b.basic_salary,
            "allowances": {
                "housing": b.allowances.housing,
                "transport": b.allowances.transport,
                "meal": b.allowances.meal,
                "medical": b.allowances.medical,
                "other": b.allowances.other,
            },
            "total_allowances": b.allowances.total,
            "overtime": {"hours": b.overtime.hours, "amount": b.overtime.amount},
            "deductions": {
                "absent": b.deductions.absent,
                "half_day": b.deductions.half_day,
                "tax": b.deductions.tax,
                "insurance": b.deductions.insurance,
                "other": b.deductions.other,
            },
            "total_deductions": b.deductions.total,
            "net_pay": b.net_pay,
            "attendance_data": {
                "total_days": self.attendance.total_days,
                "present_days": self.attendance.present_days,
                "absent_days": self.attendance.absent_days,
                "half_days": self.attendance.half_days,
                "overtime_hours": self.attendance.overtime_hours,
            },
            "status": self.status.value,
            "generated_by": self.generated_by,
            "generated_at": self.generated_at.isoformat() if self.generated_at else None,
            "paid_at": self.paid_at.isoformat() if self.paid_at else None,
        }
