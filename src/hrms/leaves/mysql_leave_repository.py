from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import HalfDayType, LeaveStatus, LeaveType, UserType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, to_db_datetime
from ..users.model import UserRef
from .model import LeaveRequest
from .repository import LeaveRepository

_COLUMNS = """
    request_id, user_id, user_type, leave_type, from_date, to_date, total_days, reason,
    is_half_day, half_day_type, status, created_at, decided_by, decided_at, admin_note
"""


def _to_leave(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        user_id=int(r["user_id"]),
        user_type=UserType(r["user_type"]),
        leave_type=LeaveType(r["leave_type"]),
        from_date=r["from_date"],
        to_date=r["to_date"],
        total_days=float(r["total_days"] or 0),
        reason=r["reason"],
        is_half_day=bool(r.get("is_half_day")),
        half_day_type=HalfDayType(r["half_day_type"]) if r.get("half_day_type") else None,
        status=LeaveStatus(r["status"]),
        created_at=from_db_datetime(r.get("created_at")),
        decided_by=r.get("decided_by"),
        decided_at=from_db_datetime(r.get("decided_at")),
        admin_note=r.get("admin_note"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, leave: LeaveRequest) -> LeaveRequest:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    user_id, user_type, leave_type, from_date, to_date, total_days, reason,
                    is_half_day, half_day_type, status, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(leave.user_id),
                    leave.user_type.value,
                    leave.leave_type.value,
                    leave.from_date,
                    leave.to_date,
                    leave.total_days,
                    leave.reason,
                    1 if leave.is_half_day else 0,
                    leave.half_day_type.value if leave.half_day_type else None,
                    leave.status.value,
                    to_db_datetime(leave.created_at),
                ),
            )
            return replace(leave, request_id=int(cur.lastrowid))

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def find_active_overlapping(self, owner: UserRef, *, from_date: date, to_date: date) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE user_id=%s AND user_type=%s
                  AND status IN (%s, %s)
                  AND from_date <= %s AND to_date >= %s
                """,
                (
                    int(owner.user_id),
                    owner.user_type.value,
                    LeaveStatus.PENDING.value,
                    LeaveStatus.APPROVED.value,
                    to_date,
                    from_date,
                ),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def list_for_user(
        self,
        owner: UserRef,
        *,
        offset: int,
        limit: int,
        status: Optional[LeaveStatus] = None,
    ) -> tuple[Sequence[LeaveRequest], int]:
        clauses = ["user_id=%s", "user_type=%s"]
        params: list[object] = [int(owner.user_id), owner.user_type.value]
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM leave_requests WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE {where}
                ORDER BY created_at DESC, request_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            return [_to_leave(r) for r in fetchall(cur)], total

    def list_by_status(self, status: LeaveStatus, *, limit: int = 500) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leave_requests WHERE status=%s ORDER BY created_at ASC LIMIT %s",
                (status.value, int(limit)),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def list_filtered(
        self,
        *,
        offset: int,
        limit: int,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[LeaveType] = None,
        owner: Optional[UserRef] = None,
    ) -> tuple[Sequence[LeaveRequest], int]:
        clauses: list[str] = []
        params: list[object] = []
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if leave_type is not None:
            clauses.append("leave_type=%s")
            params.append(leave_type.value)
        if owner is not None:
            clauses.append("user_id=%s AND user_type=%s")
            params.extend([int(owner.user_id), owner.user_type.value])
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM leave_requests {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                {where}
                ORDER BY created_at DESC, request_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            return [_to_leave(r) for r in fetchall(cur)], total

    def count_grouped(
        self,
        *,
        user_type: UserType,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
    ) -> Sequence[tuple[int, LeaveType, LeaveStatus, int]]:
        clauses = ["user_type=%s"]
        params: list[object] = [user_type.value]
        if created_from is not None:
            clauses.append("created_at >= %s")
            params.append(to_db_datetime(created_from))
        if created_to is not None:
            clauses.append("created_at < %s")
            params.append(to_db_datetime(created_to))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT user_id, leave_type, status, COUNT(*) AS n
                FROM leave_requests
                WHERE {' AND '.join(clauses)}
                GROUP BY user_id, leave_type, status
                """,
                tuple(params),
            )
            return [
                (int(r["user_id"]), LeaveType(r["leave_type"]), LeaveStatus(r["status"]), int(r["n"]))
                for r in fetchall(cur)
            ]

    def decide(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        decided_by: int,
        decided_at: datetime,
        admin_note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, decided_by=%s, decided_at=%s, admin_note=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(decided_by),
                    to_db_datetime(decided_at),
                    admin_note,
                    int(request_id),
                    LeaveStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0
