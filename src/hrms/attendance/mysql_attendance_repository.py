from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.constants import DEFAULT_LOCATION
from ..core.enums import AttendanceStatus, UserType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, is_duplicate_key, to_db_datetime
from .model import AttendanceRecord, SessionEvent
from .repository import AttendanceRepository

_EVENTS = ("check_in", "check_out", "re_check_in", "re_check_out")

_COLUMNS = ", ".join(
    ["attendance_id", "user_id", "user_type", "date"]
    + [f"{e}_{suffix}" for e in _EVENTS for suffix in ("time", "location", "ip", "device")]
    + [
        "first_session_hours",
        "second_session_hours",
        "total_hours",
        "status",
        "is_late",
        "late_minutes",
        "check_in_count",
        "notes",
        "version",
    ]
)


def _event_from_row(r: dict, prefix: str) -> Optional[SessionEvent]:
    t = r.get(f"{prefix}_time")
    if t is None:
        return None
    return SessionEvent(
        time=from_db_datetime(t),
        location=r.get(f"{prefix}_location") or DEFAULT_LOCATION,
        ip_address=r.get(f"{prefix}_ip"),
        device_info=r.get(f"{prefix}_device"),
    )


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        user_type=UserType(r["user_type"]),
        date=from_db_datetime(r["date"]),
        check_in=_event_from_row(r, "check_in"),
        check_out=_event_from_row(r, "check_out"),
        re_check_in=_event_from_row(r, "re_check_in"),
        re_check_out=_event_from_row(r, "re_check_out"),
        first_session_hours=float(r.get("first_session_hours") or 0),
        second_session_hours=float(r.get("second_session_hours") or 0),
        total_hours=float(r.get("total_hours") or 0),
        status=AttendanceStatus(r["status"]),
        is_late=bool(r.get("is_late")),
        late_minutes=int(r.get("late_minutes") or 0),
        check_in_count=int(r.get("check_in_count") or 1),
        notes=r.get("notes"),
        version=int(r.get("version") or 0),
    )


def _event_params(event: Optional[SessionEvent]) -> list[Any]:
    if event is None:
        return [None, None, None, None]
    return [to_db_datetime(event.time), event.location, event.ip_address, event.device_info]


def _mutable_params(record: AttendanceRecord) -> list[Any]:
    params: list[Any] = []
    for name in _EVENTS:
        params.extend(_event_params(getattr(record, name)))
    params.extend(
        [
            record.first_session_hours,
            record.second_session_hours,
            record.total_hours,
            record.status.value,
            int(record.is_late),
            int(record.late_minutes),
            int(record.check_in_count),
            record.notes,
        ]
    )
    return params


_MUTABLE_ASSIGNMENTS = ", ".join(
    [f"{e}_{suffix}=%s" for e in _EVENTS for suffix in ("time", "location", "ip", "device")]
    + [
        "first_session_hours=%s",
        "second_session_hours=%s",
        "total_hours=%s",
        "status=%s",
        "is_late=%s",
        "late_minutes=%s",
        "check_in_count=%s",
        "notes=%s",
    ]
)


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_day(self, *, user_id: int, user_type: UserType, start: datetime, end: datetime) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND user_type=%s AND date >= %s AND date < %s
                """,
                (int(user_id), user_type.value, to_db_datetime(start), to_db_datetime(end)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def insert_if_absent(self, record: AttendanceRecord) -> Optional[AttendanceRecord]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    INSERT INTO attendance_records
                    SET user_id=%s, user_type=%s, date=%s, {_MUTABLE_ASSIGNMENTS}, version=0
                    """,
                    tuple([int(record.user_id), record.user_type.value, to_db_datetime(record.date)] + _mutable_params(record)),
                )
                new_id = int(cur.lastrowid)
        except IntegrityError as e:
            if is_duplicate_key(e):
                return None
            raise
        return record.with_changes(attendance_id=new_id, version=0)

    def update_if_version(self, record: AttendanceRecord, *, expected_version: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_records
                SET {_MUTABLE_ASSIGNMENTS}, version=version+1
                WHERE attendance_id=%s AND version=%s
                """,
                tuple(_mutable_params(record) + [int(record.attendance_id), int(expected_version)]),
            )
            return cur.rowcount > 0

    def list_for_user(
        self,
        *,
        user_id: int,
        user_type: UserType,
        offset: int,
        limit: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        return self._page(
            clauses=["user_id=%s", "user_type=%s"],
            params=[int(user_id), user_type.value],
            start=start,
            end=end,
            offset=offset,
            limit=limit,
        )

    def list_in_range(
        self,
        *,
        start: datetime,
        end: datetime,
        user_type: Optional[UserType] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["date >= %s", "date < %s"]
        params: list[object] = [to_db_datetime(start), to_db_datetime(end)]
        if user_type is not None:
            clauses.append("user_type=%s")
            params.append(user_type.value)
        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(user_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE {where} ORDER BY date ASC, user_id ASC",
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_filtered(
        self,
        *,
        user_type: UserType,
        offset: int,
        limit: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        user_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        clauses = ["user_type=%s"]
        params: list[object] = [user_type.value]
        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(user_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        return self._page(clauses=clauses, params=params, start=start, end=end, offset=offset, limit=limit)

    def _page(
        self,
        *,
        clauses: list[str],
        params: list[object],
        start: Optional[datetime],
        end: Optional[datetime],
        offset: int,
        limit: int,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        clauses = list(clauses)
        params = list(params)
        if start is not None:
            clauses.append("date >= %s")
            params.append(to_db_datetime(start))
        if end is not None:
            clauses.append("date < %s")
            params.append(to_db_datetime(end))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM attendance_records WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)

            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY date DESC, check_in_time DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            return [_to_record(r) for r in fetchall(cur)], total
