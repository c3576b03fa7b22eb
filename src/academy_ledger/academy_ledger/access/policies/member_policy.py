from __future__ import annotations

from ...core.exceptions import DomainError, NotFoundError
from ...roster.directory import RosterDirectory
from ...roster.model import ClassGroup
from ...users.model import Actor
from .base import AccessPolicy


class MemberAccessPolicy(AccessPolicy):
    """Students and parents never get staff-level class access.

    Their reads go through the roster directory instead; a denial must not
    reveal that the class exists.
    """

    def can_access(self, *, actor: Actor, class_group: ClassGroup, directory: RosterDirectory) -> bool:
        return False

    def denial(self, class_group: ClassGroup) -> DomainError:
        return NotFoundError("Class not found")
