from __future__ import annotations

from dataclasses import dataclass
from datetime import timezone

from .attendance.factory import LatenessPolicyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import business_tz
from .core.constants import BUSINESS_UTC_OFFSET_HOURS, DEFAULT_STANDARD_DAILY_HOURS, MIN_SESSION_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveService
from .payroll.calculator.standard_calculator import StandardPayrollCalculator
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.repository import PayrollRepository
from .payroll.service import PayrollService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    attendance_repo: AttendanceRepository
    payroll_repo: PayrollRepository
    leaves_repo: LeaveRepository

    auth_service: AuthService
    attendance_service: AttendanceService
    payroll_service: PayrollService
    leave_service: LeaveService


def build_services(
    *,
    users_repo: UserRepository,
    attendance_repo: AttendanceRepository,
    payroll_repo: PayrollRepository,
    leaves_repo: LeaveRepository,
    tz: timezone,
    late_cutoff: str | None = None,
    late_grace_minutes: int = 0,
    standard_daily_hours: float = DEFAULT_STANDARD_DAILY_HOURS,
) -> Container:
    """Wire services over any set of repositories (MySQL in production, in-memory in tests)."""
    lateness = LatenessPolicyFactory(tz=tz).from_settings(late_cutoff=late_cutoff, grace_minutes=late_grace_minutes)
    return Container(
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        payroll_repo=payroll_repo,
        leaves_repo=leaves_repo,
        auth_service=AuthService(users_repo),
        attendance_service=AttendanceService(
            attendance_repo,
            users_repo,
            lateness_policy=lateness,
            tz=tz,
            min_session_seconds=MIN_SESSION_SECONDS,
        ),
        payroll_service=PayrollService(
            payroll_repo,
            attendance_repo,
            users_repo,
            calculator=StandardPayrollCalculator(default_daily_hours=standard_daily_hours),
            tz=tz,
        ),
        leave_service=LeaveService(leaves_repo, users_repo, tz=tz),
    )


def build_container(*, db_config: dict, settings=None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return build_services(
        users_repo=MySQLUserRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        payroll_repo=MySQLPayrollRepository(conn),
        leaves_repo=MySQLLeaveRepository(conn),
        tz=business_tz(getattr(settings, "BUSINESS_UTC_OFFSET_HOURS", BUSINESS_UTC_OFFSET_HOURS)),
        late_cutoff=getattr(settings, "LATE_CUTOFF", None),
        late_grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", 0)),
        standard_daily_hours=float(getattr(settings, "STANDARD_DAILY_HOURS", DEFAULT_STANDARD_DAILY_HOURS)),
    )
