from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a login account.

    Note: Plain data object (no DB access code).
    """

    user_id: int
    login_id: str
    full_name: str
    password_hash: str
    role: Role
    is_active: bool = True


@dataclass(frozen=True)
class Actor:
    """Who is making the request; supplied by the session and trusted as-is."""

    user_id: int
    role: Role
    full_name: str = ""
