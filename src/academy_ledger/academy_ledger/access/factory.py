from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role
from .policies.admin_policy import AdminAccessPolicy
from .policies.base import AccessPolicy
from .policies.member_policy import MemberAccessPolicy
from .policies.teacher_policy import TeacherAccessPolicy


@dataclass
class AccessPolicyFactory:
    """Factory Pattern: choose the access policy for a role."""

    def for_role(self, role: Role) -> AccessPolicy:
        if role == Role.ADMIN:
            return AdminAccessPolicy()
        if role == Role.TEACHER:
            return TeacherAccessPolicy()
        return MemberAccessPolicy()
