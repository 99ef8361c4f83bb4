from __future__ import annotations

from typing import Sequence

from ...attendance.model import AttendanceRecord
from ...common.datetime_utils import round_half_up, working_days_in_month
from ...core.constants import DEFAULT_STANDARD_DAILY_HOURS
from ...core.enums import PRESENT_STATUSES, AttendanceStatus
from ...users.model import CompensationProfile
from ..model import Allowances, AttendanceSummary, Deductions, Overtime, PayrollBreakdown
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: Monday-Friday working days, per-day proration of basic salary.

    - absent days = working days not covered by a present, half-day or leave record
    - overtime = hours beyond the profile's daily threshold on worked days
    """

    def __init__(self, *, default_daily_hours: float = DEFAULT_STANDARD_DAILY_HOURS):
        self._default_daily_hours = float(default_daily_hours)

    def summarize(
        self,
        records: Sequence[AttendanceRecord],
        *,
        month: int,
        year: int,
        profile: CompensationProfile,
    ) -> AttendanceSummary:
        total_days = working_days_in_month(month, year)
        present = sum(1 for r in records if r.status in PRESENT_STATUSES)
        half = sum(1 for r in records if r.status == AttendanceStatus.HALF_DAY)
        leave = sum(1 for r in records if r.status == AttendanceStatus.LEAVE)

        threshold = profile.standard_daily_hours
        if threshold is None:
            threshold = self._default_daily_hours

        overtime_hours = 0.0
        if profile.overtime_eligible:
            overtime_hours = sum(max(r.total_hours - threshold, 0.0) for r in records if r.status in PRESENT_STATUSES)

        return AttendanceSummary(
            total_days=total_days,
            present_days=present,
            absent_days=max(total_days - present - half - leave, 0),
            half_days=half,
            leave_days=leave,
            overtime_hours=round_half_up(overtime_hours),
        )

    def compute(self, *, profile: CompensationProfile, summary: AttendanceSummary) -> PayrollBreakdown:
        basic = round_half_up(profile.basic_salary)
        daily_rate = basic / summary.total_days if summary.total_days else 0.0

        allowances = Allowances(
            housing=round_half_up(profile.housing),
            transport=round_half_up(profile.transport),
            meal=round_half_up(profile.meal),
            medical=round_half_up(profile.medical),
            other=round_half_up(profile.other_allowance),
        )
        deductions = Deductions(
            absent=round_half_up(summary.absent_days * daily_rate),
            half_day=round_half_up(summary.half_days * daily_rate * 0.5),
            tax=round_half_up(basic * profile.tax_rate / 100),
            insurance=round_half_up(basic * profile.insurance_rate / 100),
        )
        overtime = Overtime(
            hours=summary.overtime_hours,
            amount=round_half_up(summary.overtime_hours * profile.overtime_rate),
        )
        return PayrollBreakdown(basic_salary=basic, allowances=allowances, overtime=overtime, deductions=deductions)
