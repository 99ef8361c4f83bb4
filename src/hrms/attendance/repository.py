from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus, UserType
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_for_day(self, *, user_id: int, user_type: UserType, start: datetime, end: datetime) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def insert_if_absent(self, record: AttendanceRecord) -> Optional[AttendanceRecord]:
        """Insert unless the (user, type, day) key exists.

        Returns the stored record, or ``None`` when another record already
        holds the key.
        """

        raise NotImplementedError

    def update_if_version(self, record: AttendanceRecord, *, expected_version: int) -> bool:
        """Write ``record`` only if the stored version still matches; bumps the version."""

        raise NotImplementedError

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
        raise NotImplementedError

    def list_in_range(
        self,
        *,
        start: datetime,
        end: datetime,
        user_type: Optional[UserType] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

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
        raise NotImplementedError
