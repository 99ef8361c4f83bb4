from __future__ import annotations

from flask import Flask, request

from ..common.http import admin_required, current_ref, json_errors, login_required, ok
from ..common.validators import optional_date, paging
from ..core.constants import DEFAULT_ADMIN_LIST_LIMIT, DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..container import Container


def _session_meta() -> dict:
    data = request.get_json(silent=True) or {}
    return {
        "location": data.get("location"),
        "ip_address": request.remote_addr,
        "device_info": request.headers.get("User-Agent"),
    }


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance/checkin", methods=["POST"], endpoint="attendance_checkin")
    @login_required
    @json_errors
    def checkin():
        data = service.check_in(current_ref(), **_session_meta())
        return ok(data, "Checked in successfully", 201)

    @app.route("/api/attendance/checkout", methods=["POST"], endpoint="attendance_checkout")
    @login_required
    @json_errors
    def checkout():
        notes = (request.get_json(silent=True) or {}).get("notes")
        data = service.check_out(current_ref(), notes=notes, **_session_meta())
        return ok(data, "Checked out successfully")

    @app.route("/api/attendance/re-checkin", methods=["POST"], endpoint="attendance_re_checkin")
    @login_required
    @json_errors
    def re_checkin():
        data = service.re_check_in(current_ref(), **_session_meta())
        return ok(data, "Re-checked in successfully")

    @app.route("/api/attendance/re-checkout", methods=["POST"], endpoint="attendance_re_checkout")
    @login_required
    @json_errors
    def re_checkout():
        data = service.re_check_out(current_ref(), **_session_meta())
        return ok(data, "Re-checked out successfully")

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    @json_errors
    def today():
        return ok(service.get_today(current_ref()))

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    @json_errors
    def history():
        page, limit = paging(request.args.get("page"), request.args.get("limit"), default_limit=DEFAULT_HISTORY_LIMIT)
        data = service.get_history(
            current_ref(),
            page=page,
            limit=limit,
            start_date=optional_date(request.args.get("startDate"), "Start date"),
            end_date=optional_date(request.args.get("endDate"), "End date"),
        )
        return ok(data)

    @app.route("/api/attendance/all", methods=["GET"], endpoint="attendance_all")
    @admin_required
    @json_errors
    def all_records():
        page, limit = paging(request.args.get("page"), request.args.get("limit"), default_limit=DEFAULT_ADMIN_LIST_LIMIT)

        status = None
        if request.args.get("status"):
            try:
                status = AttendanceStatus(request.args["status"])
            except ValueError:
                raise ValidationError("Invalid attendance status")

        employee_id = request.args.get("employeeId")
        data = service.list_all(
            page=page,
            limit=limit,
            day=optional_date(request.args.get("date"), "Date"),
            employee_id=int(employee_id) if employee_id and employee_id.isdigit() else None,
            status=status,
        )
        return ok(data)

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    @admin_required
    @json_errors
    def stats():
        return ok(service.get_daily_stats(day=optional_date(request.args.get("date"), "Date")))
