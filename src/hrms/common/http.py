from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, session

from ..core.enums import UserType
from ..core.exceptions import DomainError
from ..users.model import UserRef

logger = logging.getLogger(__name__)


def ok(data=None, message: str = "OK", status: int = 200):
    return jsonify({"success": True, "message": message, "data": data}), status


def fail(message: str, code: str, status: int):
    return jsonify({"success": False, "message": message, "code": code}), status


def current_ref() -> UserRef:
    return UserRef(UserType(session["user_type"]), int(session["user_id"]))


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail("Please log in to continue", "AUTHENTICATION_REQUIRED", 401)
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail("Please log in to continue", "AUTHENTICATION_REQUIRED", 401)
        if session.get("user_type") != UserType.ADMIN.value:
            return fail("Admin access required", "FORBIDDEN", 403)
        return view(*args, **kwargs)

    return wrapper


def json_errors(view):
    """Turn domain errors into the JSON failure shape; anything else is a 500."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            return fail(e.message, e.code, e.http_status)
        except Exception:
            logger.exception("Unhandled error in %s", view.__name__)
            return fail("Server error, please try again later", "SERVER_ERROR", 500)

    return wrapper
