from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import PayrollStatus
from .model import PayrollRecord


class PayrollRepository(Protocol):
    def exists_for_period(self, *, month: int, year: int) -> bool:
        raise NotImplementedError

    def insert_period(self, *, month: int, year: int, records: Sequence[PayrollRecord]) -> int:
        """Persist every record of the period in one transaction.

        Raises ``DuplicatePayrollPeriod`` if any (employee, month, year) key
        already exists; nothing is persisted in that case.
        """

        raise NotImplementedError

    def get_by_id(self, payroll_id: int) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def list_for_employee(self, *, employee_id: int, offset: int, limit: int) -> tuple[Sequence[PayrollRecord], int]:
        raise NotImplementedError

    def list_filtered(
        self,
        *,
        offset: int,
        limit: int,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
    ) -> tuple[Sequence[PayrollRecord], int]:
        raise NotImplementedError

    def list_for_period(self, *, month: Optional[int] = None, year: Optional[int] = None) -> Sequence[PayrollRecord]:
        raise NotImplementedError

    def update_status(
        self,
        *,
        payroll_id: int,
        expected: PayrollStatus,
        status: PayrollStatus,
        paid_at: Optional[datetime] = None,
    ) -> bool:
        """Conditional on the stored status still being ``expected``."""

        raise NotImplementedError
