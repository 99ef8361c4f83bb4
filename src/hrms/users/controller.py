from __future__ import annotations

from flask import Flask, request, session

from ..common.http import current_ref, json_errors, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    @json_errors
    def login():
        data = request.get_json(silent=True) or {}
        s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))

        session.clear()
        session["user_id"] = s_user.user_id
        session["user_type"] = s_user.user_type.value
        session["name"] = s_user.full_name

        return ok(
            {
                "id": s_user.user_id,
                "user_type": s_user.user_type.value,
                "full_name": s_user.full_name,
                "department": s_user.department,
            },
            "Login successful",
        )

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok(None, "Logged out")

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @login_required
    @json_errors
    def me():
        user = container.auth_service.current_user(current_ref())
        return ok(user.public_view())
