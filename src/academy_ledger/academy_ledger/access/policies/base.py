from __future__ import annotations

from abc import ABC, abstractmethod

from ...core.exceptions import DomainError
from ...roster.directory import RosterDirectory
from ...roster.model import ClassGroup
from ...users.model import Actor


class AccessPolicy(ABC):
    """Strategy Pattern: one class-access rule per role."""

    @abstractmethod
    def can_access(self, *, actor: Actor, class_group: ClassGroup, directory: RosterDirectory) -> bool:
        raise NotImplementedError

    @abstractmethod
    def denial(self, class_group: ClassGroup) -> DomainError:
        """Error raised when can_access is False."""

        raise NotImplementedError
