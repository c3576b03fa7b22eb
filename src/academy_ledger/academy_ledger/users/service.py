from __future__ import annotations

import logging

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .model import Actor
from .repository import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: authenticate user (login) and keep the first-admin invariant."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, login_id: str, password: str) -> Actor:
        user = self._users.get_by_login_id((login_id or "").strip())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid login ID or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid login ID or password")

        return Actor(user_id=user.user_id, role=user.role, full_name=user.full_name)

    def ensure_admin_user(self, *, login_id: str, password: str, full_name: str = "Administrator") -> bool:
        """Create the first admin when none exists. Returns True if one was created."""
        if self._users.exists_with_role(Role.ADMIN):
            return False

        login_id = require_non_empty(login_id, "Admin login ID")
        password = require_non_empty(password, "Admin password")
        self._users.create_user(
            login_id=login_id,
            full_name=full_name or "Administrator",
            password_hash=generate_password_hash(password),
            role=Role.ADMIN,
        )
        logger.info("Provisioned initial admin account %r", login_id)
        return True
