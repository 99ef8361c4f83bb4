from __future__ import annotations

import pytest
from werkzeug.security import generate_password_hash

from hrms.common.datetime_utils import BUSINESS_TZ
from hrms.container import build_services
from hrms.core.enums import UserType
from hrms.main import create_app
from hrms.users.model import CompensationProfile, User

from tests.fakes import InMemoryAttendance, InMemoryLeaves, InMemoryPayroll, InMemoryUsers


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    users = InMemoryUsers(
        User(user_id=1, user_type=UserType.ADMIN, full_name="Admin", email="admin@x.io", password_hash=generate_password_hash("admin123")),
        User(
            user_id=7,
            user_type=UserType.EMPLOYEE,
            full_name="Jane",
            email="jane@x.io",
            password_hash=generate_password_hash("employee123"),
            department="Engineering",
            compensation=CompensationProfile(basic_salary=20000),
        ),
    )
    container = build_services(
        users_repo=users,
        attendance_repo=InMemoryAttendance(),
        payroll_repo=InMemoryPayroll(),
        leaves_repo=InMemoryLeaves(),
        tz=BUSINESS_TZ,
    )
    app = create_app(container)
    return app.test_client()


def _login(client, email, password):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def test_login_and_me(client):
    assert client.get("/api/auth/me").status_code == 401

    res = _login(client, "jane@x.io", "employee123")
    assert res.status_code == 200
    assert res.get_json()["data"]["user_type"] == "employee"

    me = client.get("/api/auth/me").get_json()
    assert me["success"] is True
    assert me["data"]["email"] == "jane@x.io"


def test_bad_login(client):
    res = _login(client, "jane@x.io", "nope")
    body = res.get_json()
    assert res.status_code == 401
    assert body == {"success": False, "message": "Invalid email or password", "code": "AUTHENTICATION_FAILED"}


def test_check_in_then_immediate_check_out_is_too_soon(client):
    _login(client, "jane@x.io", "employee123")

    res = client.post("/api/attendance/checkin", json={"location": "HQ"}, headers={"User-Agent": "pytest"})
    assert res.status_code == 201
    assert res.get_json()["data"]["is_late"] is False

    again = client.post("/api/attendance/checkin")
    assert again.status_code == 400
    assert again.get_json()["code"] == "ALREADY_CHECKED_IN"

    out = client.post("/api/attendance/checkout")
    assert out.status_code == 400
    assert out.get_json()["code"] == "TOO_SOON"

    today = client.get("/api/attendance/today").get_json()["data"]
    assert today["can_check_out"] is True
    assert today["attendance"]["status"] == "present"


def test_admin_routes_are_guarded(client):
    _login(client, "jane@x.io", "employee123")
    assert client.get("/api/attendance/all").status_code == 403
    assert client.post("/api/payroll/generate", json={"month": 6, "year": 2024}).status_code == 403


def test_payroll_flow(client):
    _login(client, "admin@x.io", "admin123")

    res = client.post("/api/payroll/generate", json={"month": 6, "year": 2024})
    assert res.status_code == 201
    assert res.get_json()["data"]["count"] == 1

    dup = client.post("/api/payroll/generate", json={"month": 6, "year": 2024})
    assert dup.status_code == 400
    assert dup.get_json()["code"] == "DUPLICATE_PAYROLL_PERIOD"

    bad = client.post("/api/payroll/generate", json={"month": 13, "year": 2024})
    assert bad.get_json()["code"] == "VALIDATION_ERROR"

    paid = client.put("/api/payroll/1/status", json={"status": "paid"})
    assert paid.status_code == 200
    assert paid.get_json()["data"]["paid_at"] is not None

    again = client.put("/api/payroll/1/status", json={"status": "paid"})
    assert again.get_json()["code"] == "INVALID_TRANSITION"

    summary = client.get("/api/payroll/reports/summary?month=6&year=2024").get_json()["data"]
    assert summary["total_employees"] == 1


def test_employee_cannot_read_other_payroll(client):
    _login(client, "jane@x.io", "employee123")
    assert client.get("/api/payroll/7").status_code == 200
    res = client.get("/api/payroll/8")
    assert res.status_code == 403
    assert res.get_json()["code"] == "FORBIDDEN"


def test_history_rejects_bad_dates(client):
    _login(client, "jane@x.io", "employee123")
    res = client.get("/api/attendance/history?startDate=2024-13-01")
    assert res.status_code == 400


def test_leave_request_and_approval(client):
    _login(client, "jane@x.io", "employee123")
    res = client.post(
        "/api/leaves/request",
        json={"leaveType": "sick", "fromDate": "2099-01-05", "toDate": "2099-01-06", "reason": "Flu symptoms"},
    )
    assert res.status_code == 201
    leave_id = res.get_json()["data"]["leave"]["id"]
    assert res.get_json()["data"]["leave"]["total_days"] == 2

    client.post("/api/auth/logout")
    _login(client, "admin@x.io", "admin123")
    assert len(client.get("/api/leaves/pending").get_json()["data"]["leaves"]) == 1
    assert client.put(f"/api/leaves/{leave_id}/approve", json={"note": "ok"}).status_code == 200
    assert client.put(f"/api/leaves/{leave_id}/reject").status_code == 400


def test_admin_leave_listing_and_stats(client):
    _login(client, "jane@x.io", "employee123")
    client.post(
        "/api/leaves/request",
        json={"leaveType": "sick", "fromDate": "2099-02-02", "toDate": "2099-02-02", "reason": "Dentist visit"},
    )
    assert client.get("/api/leaves/all").status_code == 403
    assert client.get("/api/leaves/stats").status_code == 403

    client.post("/api/auth/logout")
    _login(client, "admin@x.io", "admin123")

    res = client.get("/api/leaves/all?status=pending&leaveType=sick&employeeId=7")
    assert res.status_code == 200
    assert res.headers["Cache-Control"].startswith("no-store")
    (row,) = res.get_json()["data"]["leaves"]
    assert row["user"]["department"] == "Engineering"
    assert client.get("/api/leaves/all?leaveType=holiday").status_code == 400
    assert client.get("/api/leaves/all?employeeId=abc").status_code == 400

    stats = client.get("/api/leaves/stats").get_json()["data"]
    assert stats["pending_leaves"] == 1
    assert stats["department_stats"][0]["department"] == "Engineering"


def test_overlong_location_is_a_validation_error(client):
    _login(client, "jane@x.io", "employee123")
    res = client.post("/api/attendance/checkin", json={"location": "L" * 101})
    assert res.status_code == 400
    assert res.get_json()["code"] == "VALIDATION_ERROR"
    assert client.get("/api/attendance/today").get_json()["data"]["can_check_in"] is True


def test_unknown_route_uses_json_envelope(client):
    res = client.get("/api/nope")
    assert res.status_code == 404
    assert res.get_json()["success"] is False
