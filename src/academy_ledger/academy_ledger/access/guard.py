from __future__ import annotations

import logging
from typing import Optional

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..roster.directory import RosterDirectory
from ..roster.model import ClassGroup
from ..users.model import Actor
from .factory import AccessPolicyFactory

logger = logging.getLogger(__name__)


class AccessGuard:
    """Decides whether an actor may read or mutate a class's records."""

    def __init__(self, directory: RosterDirectory, *, policy_factory: Optional[AccessPolicyFactory] = None):
        self._directory = directory
        self._factory = policy_factory or AccessPolicyFactory()

    def can_access(self, actor: Actor, class_group: ClassGroup) -> bool:
        policy = self._factory.for_role(actor.role)
        return policy.can_access(actor=actor, class_group=class_group, directory=self._directory)

    def require_class(self, actor: Actor, class_id: int) -> ClassGroup:
        class_group = self._directory.get_class(int(class_id))
        if not class_group:
            raise NotFoundError("Class not found")

        policy = self._factory.for_role(actor.role)
        if not policy.can_access(actor=actor, class_group=class_group, directory=self._directory):
            logger.warning(
                "Denied class access: user_id=%s role=%s class_id=%s",
                actor.user_id,
                actor.role.value,
                class_group.class_id,
            )
            raise policy.denial(class_group)
        return class_group

    def require_admin(self, actor: Actor) -> None:
        if actor.role != Role.ADMIN:
            raise AuthorizationError("Only administrators may do this")

    def require_staff(self, actor: Actor) -> None:
        if actor.role not in {Role.ADMIN, Role.TEACHER}:
            raise AuthorizationError("Only staff may do this")
