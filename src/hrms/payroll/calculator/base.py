from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ...attendance.model import AttendanceRecord
from ...users.model import CompensationProfile
from ..model import AttendanceSummary, PayrollBreakdown


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def summarize(
        self,
        records: Sequence[AttendanceRecord],
        *,
        month: int,
        year: int,
        profile: CompensationProfile,
    ) -> AttendanceSummary:
        raise NotImplementedError

    @abstractmethod
    def compute(self, *, profile: CompensationProfile, summary: AttendanceSummary) -> PayrollBreakdown:
        raise NotImplementedError
