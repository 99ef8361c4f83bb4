"""In-memory repositories shared by the service and controller tests."""
from __future__ import annotations

from dataclasses import replace
from typing import Optional

from hrms.attendance.model import AttendanceRecord
from hrms.core.enums import LeaveStatus, UserType
from hrms.core.exceptions import DuplicatePayrollPeriod
from hrms.leaves.model import LeaveRequest
from hrms.payroll.model import PayrollRecord
from hrms.users.model import User, UserRef


class InMemoryUsers:
    def __init__(self, *users: User):
        self._by_ref = {u.ref: u for u in users}

    def get(self, ref: UserRef) -> Optional[User]:
        return self._by_ref.get(ref)

    def get_by_email(self, email: str) -> Optional[User]:
        for u in self._by_ref.values():
            if u.email == email.strip().lower():
                return u
        return None

    def list_active_employees(self):
        items = [u for u in self._by_ref.values() if u.user_type == UserType.EMPLOYEE and u.is_active]
        return sorted(items, key=lambda u: u.user_id)

    def get_many(self, refs):
        return {r: self._by_ref[r] for r in refs if r in self._by_ref}


class InMemoryAttendance:
    def __init__(self):
        self.records: dict[int, AttendanceRecord] = {}
        self._id = 0

    def add(self, record: AttendanceRecord) -> AttendanceRecord:
        stored = self.insert_if_absent(record)
        assert stored is not None
        return stored

    def get_for_day(self, *, user_id, user_type, start, end):
        for r in self.records.values():
            if r.user_id == user_id and r.user_type == user_type and start <= r.date < end:
                return r
        return None

    def insert_if_absent(self, record):
        for r in self.records.values():
            if (r.user_id, r.user_type, r.date) == (record.user_id, record.user_type, record.date):
                return None
        self._id += 1
        stored = record.with_changes(attendance_id=self._id, version=0)
        self.records[self._id] = stored
        return stored

    def update_if_version(self, record, *, expected_version):
        current = self.records.get(record.attendance_id)
        if current is None or current.version != expected_version:
            return False
        self.records[record.attendance_id] = record.with_changes(version=expected_version + 1)
        return True

    def _matching(self, *, start=None, end=None, user_type=None, user_id=None, status=None):
        out = []
        for r in self.records.values():
            if start is not None and r.date < start:
                continue
            if end is not None and r.date >= end:
                continue
            if user_type is not None and r.user_type != user_type:
                continue
            if user_id is not None and r.user_id != user_id:
                continue
            if status is not None and r.status != status:
                continue
            out.append(r)
        return out

    def list_for_user(self, *, user_id, user_type, offset, limit, start=None, end=None):
        items = sorted(
            self._matching(start=start, end=end, user_type=user_type, user_id=user_id),
            key=lambda r: r.date,
            reverse=True,
        )
        return items[offset : offset + limit], len(items)

    def list_in_range(self, *, start, end, user_type=None, user_id=None):
        return sorted(self._matching(start=start, end=end, user_type=user_type, user_id=user_id), key=lambda r: r.date)

    def list_filtered(self, *, user_type, offset, limit, start=None, end=None, user_id=None, status=None):
        items = sorted(
            self._matching(start=start, end=end, user_type=user_type, user_id=user_id, status=status),
            key=lambda r: r.date,
            reverse=True,
        )
        return items[offset : offset + limit], len(items)


class InMemoryPayroll:
    def __init__(self):
        self.records: dict[int, PayrollRecord] = {}
        self._id = 0

    def exists_for_period(self, *, month, year):
        return any(p.month == month and p.year == year for p in self.records.values())

    def insert_period(self, *, month, year, records):
        keys = {(p.employee_id, p.month, p.year) for p in self.records.values()}
        if any((p.employee_id, p.month, p.year) in keys for p in records):
            raise DuplicatePayrollPeriod(month, year)
        for p in records:
            self._id += 1
            self.records[self._id] = replace(p, payroll_id=self._id)
        return len(records)

    def get_by_id(self, payroll_id):
        return self.records.get(payroll_id)

    def _sorted(self, items):
        return sorted(items, key=lambda p: (-p.year, -p.month, p.employee_id))

    def list_for_employee(self, *, employee_id, offset, limit):
        items = self._sorted(p for p in self.records.values() if p.employee_id == employee_id)
        return items[offset : offset + limit], len(items)

    def list_filtered(self, *, offset, limit, month=None, year=None, status=None):
        items = self._sorted(
            p
            for p in self.list_for_period(month=month, year=year)
            if status is None or p.status == status
        )
        return items[offset : offset + limit], len(items)

    def list_for_period(self, *, month=None, year=None):
        return [
            p
            for p in self.records.values()
            if (month is None or p.month == month) and (year is None or p.year == year)
        ]

    def update_status(self, *, payroll_id, expected, status, paid_at=None):
        current = self.records.get(payroll_id)
        if current is None or current.status != expected:
            return False
        self.records[payroll_id] = replace(current, status=status, paid_at=paid_at or current.paid_at)
        return True


class InMemoryLeaves:
    def __init__(self):
        self.items: dict[int, LeaveRequest] = {}
        self._id = 0

    def create(self, leave):
        self._id += 1
        stored = replace(leave, request_id=self._id)
        self.items[self._id] = stored
        return stored

    def get(self, request_id):
        return self.items.get(request_id)

    def find_active_overlapping(self, owner, *, from_date, to_date):
        return [
            x
            for x in self.items.values()
            if UserRef(x.user_type, x.user_id) == owner
            and x.status in (LeaveStatus.PENDING, LeaveStatus.APPROVED)
            and x.overlaps(from_date, to_date)
        ]

    def list_for_user(self, owner, *, offset, limit, status=None):
        items = [
            x
            for x in self.items.values()
            if UserRef(x.user_type, x.user_id) == owner and (status is None or x.status == status)
        ]
        items.sort(key=lambda x: x.request_id, reverse=True)
        return items[offset : offset + limit], len(items)

    def list_by_status(self, status, *, limit=500):
        return [x for x in self.items.values() if x.status == status][:limit]

    def list_filtered(self, *, offset, limit, status=None, leave_type=None, owner=None):
        items = [
            x
            for x in self.items.values()
            if (status is None or x.status == status)
            and (leave_type is None or x.leave_type == leave_type)
            and (owner is None or UserRef(x.user_type, x.user_id) == owner)
        ]
        items.sort(key=lambda x: x.request_id, reverse=True)
        return items[offset : offset + limit], len(items)

    def count_grouped(self, *, user_type, created_from=None, created_to=None):
        counts: dict[tuple, int] = {}
        for x in self.items.values():
            if x.user_type != user_type:
                continue
            if created_from is not None and x.created_at < created_from:
                continue
            if created_to is not None and x.created_at >= created_to:
                continue
            key = (x.user_id, x.leave_type, x.status)
            counts[key] = counts.get(key, 0) + 1
        return [(*key, n) for key, n in counts.items()]

    def decide(self, *, request_id, status, decided_by, decided_at, admin_note=None):
        current = self.items.get(request_id)
        if current is None or current.status != LeaveStatus.PENDING:
            return False
        self.items[request_id] = replace(
            current, status=status, decided_by=decided_by, decided_at=decided_at, admin_note=admin_note
        )
        return True
