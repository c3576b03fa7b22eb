from __future__ import annotations

from ...core.exceptions import AuthorizationError, DomainError
from ...roster.directory import RosterDirectory
from ...roster.model import ClassGroup
from ...users.model import Actor
from .base import AccessPolicy


class TeacherAccessPolicy(AccessPolicy):
    """Teachers reach the classes whose teacher set includes their teacher record."""

    def can_access(self, *, actor: Actor, class_group: ClassGroup, directory: RosterDirectory) -> bool:
        teacher = directory.teacher_for_user(actor.user_id)
        if not teacher:
            return False
        return class_group.has_teacher(teacher.teacher_id)

    def denial(self, class_group: ClassGroup) -> DomainError:
        return AuthorizationError("You do not teach this class")
