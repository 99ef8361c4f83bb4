from __future__ import annotations

from flask import Flask, request

from ..common.http import admin_required, current_ref, json_errors, login_required, ok
from ..common.validators import paging, require_month, require_year
from ..core.constants import DEFAULT_ADMIN_LIST_LIMIT, DEFAULT_PAYROLL_LIMIT
from ..core.enums import PayrollStatus
from ..core.exceptions import ValidationError
from ..container import Container


def _optional(value, parse):
    return parse(value) if value not in (None, "") else None


def register(app: Flask, container: Container) -> None:
    service = container.payroll_service

    @app.route("/api/payroll/generate", methods=["POST"], endpoint="payroll_generate")
    @admin_required
    @json_errors
    def generate():
        data = request.get_json(silent=True) or {}
        result = service.generate_payroll(
            month=data.get("month"),
            year=data.get("year"),
            generated_by=current_ref().user_id,
        )
        return ok(result, f"Payroll generated for {result['count']} employees", 201)

    @app.route("/api/payroll/all", methods=["GET"], endpoint="payroll_all")
    @admin_required
    @json_errors
    def all_payroll():
        page, limit = paging(request.args.get("page"), request.args.get("limit"), default_limit=DEFAULT_ADMIN_LIST_LIMIT)

        status = None
        if request.args.get("status"):
            try:
                status = PayrollStatus(request.args["status"])
            except ValueError:
                raise ValidationError("Invalid payroll status")

        data = service.list_all(
            page=page,
            limit=limit,
            month=_optional(request.args.get("month"), require_month),
            year=_optional(request.args.get("year"), require_year),
            status=status,
        )
        return ok(data)

    @app.route("/api/payroll/reports/summary", methods=["GET"], endpoint="payroll_summary")
    @admin_required
    @json_errors
    def summary():
        data = service.summary(
            month=_optional(request.args.get("month"), require_month),
            year=_optional(request.args.get("year"), require_year),
        )
        return ok(data)

    @app.route("/api/payroll/<int:employee_id>", methods=["GET"], endpoint="payroll_for_employee")
    @login_required
    @json_errors
    def for_employee(employee_id: int):
        page, limit = paging(request.args.get("page"), request.args.get("limit"), default_limit=DEFAULT_PAYROLL_LIMIT)
        data = service.get_payroll(requester=current_ref(), employee_id=employee_id, page=page, limit=limit)
        return ok(data)

    @app.route("/api/payroll/<int:payroll_id>/status", methods=["PUT"], endpoint="payroll_status")
    @admin_required
    @json_errors
    def set_status(payroll_id: int):
        data = request.get_json(silent=True) or {}
        result = service.set_payroll_status(payroll_id=payroll_id, status=data.get("status"))
        return ok(result, f"Payroll status updated to {result['status']}")
