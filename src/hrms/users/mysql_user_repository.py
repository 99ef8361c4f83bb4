from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import UserType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import CompensationProfile, User, UserRef
from .repository import UserRepository

_COLUMNS = """
    user_id, user_type, full_name, email, password_hash, department, position, is_active,
    basic_salary, housing_allowance, transport_allowance, meal_allowance, medical_allowance,
    other_allowance, overtime_rate, tax_rate, insurance_rate, standard_daily_hours, overtime_eligible
"""


def _to_user(row: dict) -> User:
    user_type = UserType(row["user_type"])
    compensation = None
    if user_type == UserType.EMPLOYEE:
        std_hours = row.get("standard_daily_hours")
        compensation = CompensationProfile(
            basic_salary=float(row.get("basic_salary") or 0),
            housing=float(row.get("housing_allowance") or 0),
            transport=float(row.get("transport_allowance") or 0),
            meal=float(row.get("meal_allowance") or 0),
            medical=float(row.get("medical_allowance") or 0),
            other_allowance=float(row.get("other_allowance") or 0),
            overtime_rate=float(row.get("overtime_rate") or 0),
            tax_rate=float(row.get("tax_rate") or 0),
            insurance_rate=float(row.get("insurance_rate") or 0),
            standard_daily_hours=float(std_hours) if std_hours is not None else None,
            overtime_eligible=bool(row.get("overtime_eligible", True)),
        )
    return User(
        user_id=int(row["user_id"]),
        user_type=user_type,
        full_name=row["full_name"],
        email=row["email"],
        password_hash=row["password_hash"],
        department=row.get("department"),
        position=row.get("position"),
        is_active=bool(row.get("is_active", True)),
        compensation=compensation,
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, ref: UserRef) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users WHERE user_id=%s AND user_type=%s",
                (int(ref.user_id), ref.user_type.value),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email.strip().lower(),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_active_employees(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users WHERE user_type=%s AND is_active=1 ORDER BY user_id ASC",
                (UserType.EMPLOYEE.value,),
            )
            return [_to_user(r) for r in fetchall(cur)]

    def get_many(self, refs: Sequence[UserRef]) -> dict[UserRef, User]:
        ids = sorted({int(r.user_id) for r in refs})
        if not ids:
            return {}
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id IN ({placeholders})", tuple(ids))
            users = [_to_user(r) for r in fetchall(cur)]
        wanted = set(refs)
        return {u.ref: u for u in users if u.ref in wanted}
