from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import DEFAULT_INSURANCE_RATE, DEFAULT_TAX_RATE
from ..core.enums import UserType


@dataclass(frozen=True)
class UserRef:
    """Tagged reference to an account: ``Admin(id) | Employee(id)``."""

    user_type: UserType
    user_id: int

    @classmethod
    def admin(cls, user_id: int) -> "UserRef":
        return cls(UserType.ADMIN, int(user_id))

    @classmethod
    def employee(cls, user_id: int) -> "UserRef":
        return cls(UserType.EMPLOYEE, int(user_id))

    @property
    def is_admin(self) -> bool:
        return self.user_type == UserType.ADMIN

    def __str__(self) -> str:
        return f"{self.user_type.value}:{self.user_id}"


@dataclass(frozen=True)
class CompensationProfile:
    """Salary structure snapshot read at payroll generation time.

    ``standard_daily_hours`` is the overtime threshold; ``None`` falls back to
    the configured default.
    """

    basic_salary: float = 0.0
    housing: float = 0.0
    transport: float = 0.0
    meal: float = 0.0
    medical: float = 0.0
    other_allowance: float = 0.0
    overtime_rate: float = 0.0
    tax_rate: float = DEFAULT_TAX_RATE
    insurance_rate: float = DEFAULT_INSURANCE_RATE
    standard_daily_hours: Optional[float] = None
    overtime_eligible: bool = True


@dataclass(frozen=True)
class User:
    """Domain entity: an admin or employee account.

    Note: Pure data object (no DB access code).
    """

    user_id: int
    user_type: UserType
    full_name: str
    email: str
    password_hash: str
    department: Optional[str] = None
    position: Optional[str] = None
    is_active: bool = True
    compensation: Optional[CompensationProfile] = None

    @property
    def ref(self) -> UserRef:
        return UserRef(self.user_type, self.user_id)

    def get_compensation_profile(self) -> CompensationProfile:
        return self.compensation or CompensationProfile()

    def get_department(self) -> str:
        return self.department or "N/A"

    def public_view(self) -> dict:
        return {
            "id": self.user_id,
            "user_type": self.user_type.value,
            "full_name": self.full_name,
            "email": self.email,
            "department": self.department,
            "position": self.position,
        }
