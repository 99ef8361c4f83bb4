from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import User, UserRef


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get(self, ref: UserRef) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def list_active_employees(self) -> Sequence[User]:
        raise NotImplementedError

    def get_many(self, refs: Sequence[UserRef]) -> dict[UserRef, User]:
        raise NotImplementedError
