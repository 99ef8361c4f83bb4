from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import HalfDayType, LeaveStatus, LeaveType, UserType


@dataclass(frozen=True)
class LeaveRequest:
    request_id: Optional[int]
    user_id: int
    user_type: UserType
    leave_type: LeaveType
    from_date: date
    to_date: date
    total_days: float
    reason: str
    status: LeaveStatus = LeaveStatus.PENDING
    is_half_day: bool = False
    half_day_type: Optional[HalfDayType] = None
    created_at: Optional[datetime] = None
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    admin_note: Optional[str] = None

    def overlaps(self, from_date: date, to_date: date) -> bool:
        return self.from_date <= to_date and from_date <= self.to_date

    def to_dict(self) -> dict:
        return {
            "id": self.request_id,
            "user_id": self.user_id,
            "user_type": self.user_type.value,
            "leave_type": self.leave_type.value,
            "from_date": self.from_date.strftime("%Y-%m-%d"),
            "to_date": self.to_date.strftime("%Y-%m-%d"),
            "total_days": self.total_days,
            "reason": self.reason,
            "is_half_day": self.is_half_day,
            "half_day_type": self.half_day_type.value if self.half_day_type else None,
            "status": self.status.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "decided_by": self.decided_by,
            "decided_at": self.decided_at.isoformat() if self.decided_at else None,
            "admin_note": self.admin_note,
        }
