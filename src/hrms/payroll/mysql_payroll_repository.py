from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import PayrollStatus
from ..core.exceptions import DuplicatePayrollPeriod
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, is_duplicate_key, to_db_datetime
from .model import Allowances, AttendanceSummary, Deductions, Overtime, PayrollBreakdown, PayrollRecord
from .repository import PayrollRepository

_COLUMNS = """
    payroll_id, employee_id, month, year, basic_salary,
    housing_allowance, transport_allowance, meal_allowance, medical_allowance, other_allowance,
    overtime_hours, overtime_amount,
    absent_deduction, half_day_deduction, tax_deduction, insurance_deduction, other_deduction,
    total_days, present_days, absent_days, half_days, leave_days, attendance_overtime_hours,
    status, generated_by, generated_at, paid_at
"""


def _f(value) -> float:
    return float(value or 0)


def _to_record(r: dict) -> PayrollRecord:
    return PayrollRecord(
        payroll_id=int(r["payroll_id"]),
        employee_id=int(r["employee_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        breakdown=PayrollBreakdown(
            basic_salary=_f(r["basic_salary"]),
            allowances=Allowances(
                housing=_f(r["housing_allowance"]),
                transport=_f(r["transport_allowance"]),
                meal=_f(r["meal_allowance"]),
                medical=_f(r["medical_allowance"]),
                other=_f(r["other_allowance"]),
            ),
            overtime=Overtime(hours=_f(r["overtime_hours"]), amount=_f(r["overtime_amount"])),
            deductions=Deductions(
                absent=_f(r["absent_deduction"]),
                half_day=_f(r["half_day_deduction"]),
                tax=_f(r["tax_deduction"]),
                insurance=_f(r["insurance_deduction"]),
                other=_f(r["other_deduction"]),
            ),
        ),
        attendance=AttendanceSummary(
            total_days=int(r["total_days"] or 0),
            present_days=int(r["present_days"] or 0),
            absent_days=int(r["absent_days"] or 0),
            half_days=int(r["half_days"] or 0),
            leave_days=int(r["leave_days"] or 0),
            overtime_hours=_f(r["attendance_overtime_hours"]),
        ),
        status=PayrollStatus(r["status"]),
        generated_by=r.get("generated_by"),
        generated_at=from_db_datetime(r.get("generated_at")),
        paid_at=from_db_datetime(r.get("paid_at")),
    )


def _insert_params(p: PayrollRecord) -> tuple:
    b = p.breakdown
    a = p.attendance
    return (
        int(p.employee_id),
        int(p.month),
        int(p.year),
        b.basic_salary,
        b.allowances.housing,
        b.allowances.transport,
        b.allowances.meal,
        b.allowances.medical,
        b.allowances.other,
        b.allowances.total,
        b.overtime.hours,
        b.overtime.amount,
        b.deductions.absent,
        b.deductions.half_day,
        b.deductions.tax,
        b.deductions.insurance,
        b.deductions.other,
        b.deductions.total,
        b.net_pay,
        a.total_days,
        a.present_days,
        a.absent_days,
        a.half_days,
        a.leave_days,
        a.overtime_hours,
        p.status.value,
        p.generated_by,
        to_db_datetime(p.generated_at),
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def exists_for_period(self, *, month: int, year: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM payroll_records WHERE month=%s AND year=%s LIMIT 1", (int(month), int(year)))
            return fetchone(cur) is not None

    def insert_period(self, *, month: int, year: int, records: Sequence[PayrollRecord]) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.executemany(
                    """
                    INSERT INTO payroll_records(
                        employee_id, month, year, basic_salary,
                        housing_allowance, transport_allowance, meal_allowance, medical_allowance, other_allowance,
                        total_allowances, overtime_hours, overtime_amount,
                        absent_deduction, half_day_deduction, tax_deduction, insurance_deduction, other_deduction,
                        total_deductions, net_pay,
                        total_days, present_days, absent_days, half_days, leave_days, attendance_overtime_hours,
                        status, generated_by, generated_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    [_insert_params(p) for p in records],
                )
        except IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicatePayrollPeriod(month, year)
            raise
        return len(records)

    def get_by_id(self, payroll_id: int) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payroll_records WHERE payroll_id=%s", (int(payroll_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_employee(self, *, employee_id: int, offset: int, limit: int) -> tuple[Sequence[PayrollRecord], int]:
        return self._page(clauses=["employee_id=%s"], params=[int(employee_id)], offset=offset, limit=limit)

    def list_filtered(
        self,
        *,
        offset: int,
        limit: int,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
    ) -> tuple[Sequence[PayrollRecord], int]:
        clauses, params = self._period_clauses(month, year)
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        return self._page(clauses=clauses, params=params, offset=offset, limit=limit)

    def list_for_period(self, *, month: Optional[int] = None, year: Optional[int] = None) -> Sequence[PayrollRecord]:
        clauses, params = self._period_clauses(month, year)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payroll_records WHERE {' AND '.join(clauses)} ORDER BY employee_id ASC",
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def update_status(
        self,
        *,
        payroll_id: int,
        expected: PayrollStatus,
        status: PayrollStatus,
        paid_at: Optional[datetime] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payroll_records
                SET status=%s, paid_at=COALESCE(%s, paid_at)
                WHERE payroll_id=%s AND status=%s
                """,
                (status.value, to_db_datetime(paid_at), int(payroll_id), expected.value),
            )
            return cur.rowcount > 0

    @staticmethod
    def _period_clauses(month: Optional[int], year: Optional[int]) -> tuple[list[str], list[object]]:
        clauses = ["1=1"]
        params: list[object] = []
        if month is not None:
            clauses.append("month=%s")
            params.append(int(month))
        if year is not None:
            clauses.append("year=%s")
            params.append(int(year))
        return clauses, params

    def _page(self, *, clauses: list[str], params: list[object], offset: int, limit: int) -> tuple[Sequence[PayrollRecord], int]:
        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM payroll_records WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)

            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM payroll_records
                WHERE {where}
                ORDER BY year DESC, month DESC, employee_id ASC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            return [_to_record(r) for r in fetchall(cur)], total
