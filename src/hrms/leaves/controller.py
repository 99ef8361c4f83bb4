from __future__ import annotations

from flask import Flask, request

from ..common.http import admin_required, current_ref, json_errors, login_required, ok
from ..common.validators import optional_date, paging, require_int
from ..core.constants import DEFAULT_ADMIN_LIST_LIMIT
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.leave_service

    @app.route("/api/leaves/request", methods=["POST"], endpoint="leave_request")
    @login_required
    @json_errors
    def submit():
        data = request.get_json(silent=True) or {}
        is_half_day = data.get("isHalfDay", False)
        if not isinstance(is_half_day, bool):
            raise ValidationError("isHalfDay must be a boolean")

        leave = service.submit(
            current_ref(),
            leave_type=data.get("leaveType"),
            from_date=optional_date(data.get("fromDate"), "From date"),
            to_date=optional_date(data.get("toDate"), "To date"),
            reason=data.get("reason", ""),
            is_half_day=is_half_day,
            half_day_type=data.get("halfDayType"),
        )
        return ok({"leave": leave.to_dict()}, "Leave request submitted successfully", 201)

    @app.route("/api/leaves/my-leaves", methods=["GET"], endpoint="my_leaves")
    @login_required
    @json_errors
    def my_leaves():
        page, limit = paging(request.args.get("page"), request.args.get("limit"), default_limit=DEFAULT_ADMIN_LIST_LIMIT)
        return ok(service.list_mine(current_ref(), page=page, limit=limit, status=request.args.get("status")))

    @app.route("/api/leaves/pending", methods=["GET"], endpoint="pending_leaves")
    @admin_required
    @json_errors
    def pending():
        return ok({"leaves": service.list_pending()})

    @app.route("/api/leaves/all", methods=["GET"], endpoint="all_leaves")
    @admin_required
    @json_errors
    def all_leaves():
        page, limit = paging(request.args.get("page"), request.args.get("limit"), default_limit=DEFAULT_ADMIN_LIST_LIMIT)
        employee_id = request.args.get("employeeId")
        data = service.list_all(
            page=page,
            limit=limit,
            status=request.args.get("status"),
            leave_type=request.args.get("leaveType"),
            employee_id=require_int(employee_id, "Employee id", minimum=1, maximum=2**31 - 1) if employee_id else None,
        )
        resp, status = ok(data)
        resp.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
        return resp, status

    @app.route("/api/leaves/stats", methods=["GET"], endpoint="leave_stats")
    @admin_required
    @json_errors
    def stats():
        return ok(
            service.stats(
                start_date=optional_date(request.args.get("startDate"), "Start date"),
                end_date=optional_date(request.args.get("endDate"), "End date"),
            )
        )

    @app.route("/api/leaves/<int:request_id>/approve", methods=["PUT"], endpoint="approve_leave")
    @admin_required
    @json_errors
    def approve(request_id: int):
        data = request.get_json(silent=True) or {}
        service.approve(current_ref(), request_id, note=data.get("note", ""))
        return ok(None, "Leave request approved")

    @app.route("/api/leaves/<int:request_id>/reject", methods=["PUT"], endpoint="reject_leave")
    @admin_required
    @json_errors
    def reject(request_id: int):
        data = request.get_json(silent=True) or {}
        service.reject(current_ref(), request_id, note=data.get("note", ""))
        return ok(None, "Leave request rejected")
