from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

import pytest

from hrms.attendance.model import AttendanceRecord, SessionEvent
from hrms.attendance.policies.cutoff_policy import CutoffLatenessPolicy
from hrms.attendance.service import AttendanceService
from hrms.core.enums import AttendanceStatus, UserType
from hrms.core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    AlreadyReCheckedOut,
    ConcurrentModification,
    NoCheckInFound,
    NoCheckOutFound,
    TooSoon,
    ValidationError,
)
from hrms.users.model import User, UserRef

from tests.fakes import InMemoryAttendance, InMemoryUsers

UTC = timezone.utc
# 09:00 business-local on 2024-03-11
T0 = datetime(2024, 3, 11, 4, 0, tzinfo=UTC)
EMP = UserRef.employee(7)


def _users():
    return InMemoryUsers(
        User(user_id=7, user_type=UserType.EMPLOYEE, full_name="Jane", email="jane@x.io", password_hash="-", department="Engineering"),
        User(user_id=8, user_type=UserType.EMPLOYEE, full_name="Omar", email="omar@x.io", password_hash="-", department=None),
    )


def _service(attendance=None, **kwargs):
    return AttendanceService(attendance or InMemoryAttendance(), _users(), **kwargs)


def test_full_day_two_sessions():
    repo = InMemoryAttendance()
    svc = _service(repo)

    res = svc.check_in(EMP, location="HQ", ip_address="10.0.0.1", device_info="pytest", now=T0)
    assert res["check_in_time"] == "09:00 AM"
    assert res["is_late"] is False

    res = svc.check_out(EMP, now=T0 + timedelta(hours=4))
    assert res["first_session_hours"] == 4.0
    assert res["first_session_hours_formatted"] == "4h 0m"
    assert res["can_re_check_in"] is True

    res = svc.re_check_in(EMP, now=T0 + timedelta(hours=5))
    assert res["status"] == AttendanceStatus.RE_CHECKED_IN.value
    assert res["check_in_count"] == 2

    res = svc.re_check_out(EMP, now=T0 + timedelta(hours=9, minutes=30))
    assert res["second_session_hours"] == 4.5
    assert res["total_hours"] == 8.5
    assert res["total_hours_formatted"] == "8h 30m"

    (stored,) = repo.records.values()
    assert stored.check_in.location == "HQ"
    assert stored.check_in.ip_address == "10.0.0.1"
    assert stored.check_out.location == "Office"
    assert stored.version == 3

    with pytest.raises(AlreadyReCheckedOut):
        svc.re_check_out(EMP, now=T0 + timedelta(hours=10))


def test_second_check_in_same_business_day_is_rejected():
    svc = _service()
    svc.check_in(EMP, now=T0)

    with pytest.raises(AlreadyCheckedIn):
        svc.check_in(EMP, now=T0 + timedelta(hours=10))


def test_next_business_day_starts_fresh():
    svc = _service()
    svc.check_in(EMP, now=T0)
    # 00:30 local on the 12th
    svc.check_in(EMP, now=datetime(2024, 3, 11, 19, 30, tzinfo=UTC))


def test_check_out_without_check_in():
    with pytest.raises(NoCheckInFound):
        _service().check_out(EMP, now=T0)


def test_re_check_in_before_check_out():
    svc = _service()
    svc.check_in(EMP, now=T0)
    with pytest.raises(NoCheckOutFound):
        svc.re_check_in(EMP, now=T0 + timedelta(hours=1))


def test_check_out_after_re_check_in_is_already_checked_out():
    svc = _service()
    svc.check_in(EMP, now=T0)
    svc.check_out(EMP, now=T0 + timedelta(hours=1))
    svc.re_check_in(EMP, now=T0 + timedelta(hours=2))
    with pytest.raises(AlreadyCheckedOut):
        svc.check_out(EMP, now=T0 + timedelta(hours=3))


def test_too_soon_leaves_record_unchanged():
    repo = InMemoryAttendance()
    svc = _service(repo)
    svc.check_in(EMP, now=T0)

    with pytest.raises(TooSoon) as exc:
        svc.check_out(EMP, now=T0 + timedelta(seconds=30))
    assert exc.value.elapsed_seconds == 30

    (stored,) = repo.records.values()
    assert stored.check_out is None
    assert stored.version == 0


def test_sixty_one_seconds_rounds_to_two_hundredths():
    svc = _service()
    svc.check_in(EMP, now=T0)
    res = svc.check_out(EMP, now=T0 + timedelta(seconds=61))
    assert res["first_session_hours"] == 0.02


def test_overlong_location_is_rejected_before_anything_is_stored():
    repo = InMemoryAttendance()
    svc = _service(repo)

    with pytest.raises(ValidationError):
        svc.check_in(EMP, location="x" * 101, now=T0)
    assert repo.records == {}

    svc.check_in(EMP, location="  " + "y" * 100 + "  ", now=T0)
    (stored,) = repo.records.values()
    assert stored.check_in.location == "y" * 100


def test_long_user_agent_is_clipped_to_column_width():
    repo = InMemoryAttendance()
    svc = _service(repo)

    svc.check_in(EMP, device_info="Mozilla/5.0 " + "z" * 400, now=T0)
    (stored,) = repo.records.values()
    assert len(stored.check_in.device_info) == 255
    assert stored.check_in.device_info.startswith("Mozilla/5.0 ")


def test_check_out_stores_notes():
    repo = InMemoryAttendance()
    svc = _service(repo)
    svc.check_in(EMP, now=T0)

    with pytest.raises(ValidationError):
        svc.check_out(EMP, notes="n" * 501, now=T0 + timedelta(hours=1))
    svc.check_out(EMP, notes="  Client visit in the afternoon ", now=T0 + timedelta(hours=1))

    (stored,) = repo.records.values()
    assert stored.notes == "Client visit in the afternoon"
    assert svc.get_today(EMP, now=T0 + timedelta(hours=2))["attendance"]["notes"] == "Client visit in the afternoon"


def test_lateness_policy_marks_late_and_re_check_in_overrides_status():
    repo = InMemoryAttendance()
    svc = _service(repo, lateness_policy=CutoffLatenessPolicy(time(9, 0)))

    res = svc.check_in(EMP, now=T0 + timedelta(minutes=20))
    assert res["is_late"] is True
    assert res["late_minutes"] == 20
    (stored,) = repo.records.values()
    assert stored.status == AttendanceStatus.LATE

    svc.check_out(EMP, now=T0 + timedelta(hours=2))
    svc.re_check_in(EMP, now=T0 + timedelta(hours=3))
    (stored,) = repo.records.values()
    assert stored.status == AttendanceStatus.RE_CHECKED_IN
    assert stored.is_late is True


class RacingInsertAttendance(InMemoryAttendance):
    """Another request creates the day's record between our read and insert."""

    def get_for_day(self, **kwargs):
        return None


def test_concurrent_check_in_loses_on_unique_key():
    repo = RacingInsertAttendance()
    svc = _service(repo)
    svc.check_in(EMP, now=T0)

    with pytest.raises(AlreadyCheckedIn):
        svc.check_in(EMP, now=T0 + timedelta(seconds=1))
    assert len(repo.records) == 1


class RacingUpdateAttendance(InMemoryAttendance):
    """The first conditional update loses to a concurrent write."""

    def __init__(self, concurrent_change):
        super().__init__()
        self._concurrent_change = concurrent_change

    def update_if_version(self, record, *, expected_version):
        if self._concurrent_change is not None:
            current = self.records[record.attendance_id]
            self.records[record.attendance_id] = self._concurrent_change(current).with_changes(version=current.version + 1)
            self._concurrent_change = None
        return super().update_if_version(record, expected_version=expected_version)


def test_lost_update_reports_precondition_error():
    repo = RacingUpdateAttendance(lambda r: r.with_changes(check_out=SessionEvent(time=T0 + timedelta(hours=1))))
    svc = _service(repo)
    svc.check_in(EMP, now=T0)

    with pytest.raises(AlreadyCheckedOut):
        svc.check_out(EMP, now=T0 + timedelta(hours=2))


def test_lost_update_without_guard_violation_is_concurrent_modification():
    repo = RacingUpdateAttendance(lambda r: r.with_changes(notes="edited"))
    svc = _service(repo)
    svc.check_in(EMP, now=T0)

    with pytest.raises(ConcurrentModification):
        svc.check_out(EMP, now=T0 + timedelta(hours=2))


def test_get_today_booleans_follow_timestamps():
    svc = _service()
    today = svc.get_today(EMP, now=T0)
    assert today["attendance"] is None
    assert today["can_check_in"] is True

    svc.check_in(EMP, now=T0)
    svc.check_out(EMP, now=T0 + timedelta(hours=1))
    today = svc.get_today(EMP, now=T0 + timedelta(hours=2))

    assert today["attendance"]["business_date"] == "2024-03-11"
    assert today["attendance"]["check_out_time"] == "10:00 AM"
    assert (today["can_check_in"], today["can_check_out"], today["can_re_check_in"], today["can_re_check_out"]) == (
        False,
        False,
        True,
        False,
    )


def test_history_is_paginated_newest_first():
    svc = _service()
    for d in range(3):
        now = T0 + timedelta(days=d)
        svc.check_in(EMP, now=now)
        svc.check_out(EMP, now=now + timedelta(hours=8))

    res = svc.get_history(EMP, page=1, limit=2)
    assert [r["business_date"] for r in res["attendance"]] == ["2024-03-13", "2024-03-12"]
    assert res["pagination"]["total_records"] == 3
    assert res["pagination"]["total_pages"] == 2
    assert res["pagination"]["has_next_page"] is True

    res = svc.get_history(EMP, start_date=date(2024, 3, 12), end_date=date(2024, 3, 12))
    assert [r["business_date"] for r in res["attendance"]] == ["2024-03-12"]


def test_history_rejects_inverted_range():
    with pytest.raises(ValidationError):
        _service().get_history(EMP, start_date=date(2024, 3, 12), end_date=date(2024, 3, 11))


def test_daily_stats_by_department():
    repo = InMemoryAttendance()
    svc = _service(repo)
    svc.check_in(EMP, now=T0)
    svc.check_in(UserRef.employee(8), now=T0)
    start = datetime(2024, 3, 10, 19, 0, tzinfo=UTC)
    repo.add(AttendanceRecord(attendance_id=None, user_id=8, user_type=UserType.EMPLOYEE, date=start - timedelta(days=1), status=AttendanceStatus.ABSENT))
    # Admin records are excluded
    svc.check_in(UserRef.admin(1), now=T0)

    stats = svc.get_daily_stats(day=date(2024, 3, 11))

    assert stats["total_records"] == 2
    assert stats["present_records"] == 2
    assert stats["attendance_rate"] == 100
    assert {d["department"] for d in stats["department_stats"]} == {"Engineering", "N/A"}


def test_list_all_attaches_owner_info():
    svc = _service()
    svc.check_in(EMP, now=T0)

    res = svc.list_all(day=date(2024, 3, 11))
    (row,) = res["attendance"]
    assert row["user"]["full_name"] == "Jane"
    assert row["user"]["department"] == "Engineering"
    assert row["is_late"] is False
