from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType, UserType
from ..users.model import UserRef
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def create(self, leave: LeaveRequest) -> LeaveRequest:
        raise NotImplementedError

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def find_active_overlapping(self, owner: UserRef, *, from_date: date, to_date: date) -> Sequence[LeaveRequest]:
        """Pending or approved requests of ``owner`` intersecting the range."""

        raise NotImplementedError

    def list_for_user(
        self,
        owner: UserRef,
        *,
        offset: int,
        limit: int,
        status: Optional[LeaveStatus] = None,
    ) -> tuple[Sequence[LeaveRequest], int]:
        raise NotImplementedError

    def list_by_status(self, status: LeaveStatus, *, limit: int = 500) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_filtered(
        self,
        *,
        offset: int,
        limit: int,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[LeaveType] = None,
        owner: Optional[UserRef] = None,
    ) -> tuple[Sequence[LeaveRequest], int]:
        """Newest first across all users."""

        raise NotImplementedError

    def count_grouped(
        self,
        *,
        user_type: UserType,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
    ) -> Sequence[tuple[int, LeaveType, LeaveStatus, int]]:
        """Request counts per ``(user_id, leave_type, status)``; ``created_to`` is exclusive."""

        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        decided_by: int,
        decided_at: datetime,
        admin_note: Optional[str] = None,
    ) -> bool:
        """Conditional on the request still being pending."""

        raise NotImplementedError
