from __future__ import annotations

from ...core.exceptions import AuthorizationError, DomainError
from ...roster.directory import RosterDirectory
from ...roster.model import ClassGroup
from ...users.model import Actor
from .base import AccessPolicy


class AdminAccessPolicy(AccessPolicy):
    """Admins reach every class."""

    def can_access(self, *, actor: Actor, class_group: ClassGroup, directory: RosterDirectory) -> bool:
        return True

    def denial(self, class_group: ClassGroup) -> DomainError:
        return AuthorizationError("You do not have permission for this class")
