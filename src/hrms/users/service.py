from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty
from ..core.enums import UserType
from ..core.exceptions import AuthenticationError, NotFoundError
from .model import User, UserRef
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    user_type: UserType
    full_name: str
    department: Optional[str]

    @property
    def ref(self) -> UserRef:
        return UserRef(self.user_type, self.user_id)


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        email = require_non_empty(email, "Email").lower()
        user = self._users.get_by_email(email)
        if not user or not user.is_active:
            logger.info("Login rejected for %s: unknown or inactive account", email)
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.info("Login rejected for %s: wrong password", email)
            raise AuthenticationError("Invalid email or password")

        return SessionUser(
            user_id=user.user_id,
            user_type=user.user_type,
            full_name=user.full_name,
            department=user.department,
        )

    def current_user(self, ref: UserRef) -> User:
        user = self._users.get(ref)
        if not user:
            raise NotFoundError("User not found")
        return user
