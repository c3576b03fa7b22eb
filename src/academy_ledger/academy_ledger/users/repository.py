from __future__ import annotations

from typing import Optional, Protocol

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_login_id(self, login_id: str) -> Optional[User]:
        raise NotImplementedError

    def exists_with_role(self, role: Role) -> bool:
        raise NotImplementedError

    def create_user(self, *, login_id: str, full_name: str, password_hash: str, role: Role) -> int:
        raise NotImplementedError
