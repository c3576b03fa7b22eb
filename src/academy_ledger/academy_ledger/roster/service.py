from __future__ import annotations

import logging
from typing import Sequence

from ..access.guard import AccessGuard
from ..core.exceptions import NotFoundError, ValidationError
from ..users.model import Actor
from .directory import RosterDirectory
from .model import ClassGroup, Student
from .repository import RosterRepository

logger = logging.getLogger(__name__)


class RosterService:
    """Use case: class listings for staff and the membership links the core maintains."""

    def __init__(self, roster: RosterRepository, directory: RosterDirectory, guard: AccessGuard):
        self._roster = roster
        self._directory = directory
        self._guard = guard

    def visible_classes(self, actor: Actor) -> Sequence[ClassGroup]:
        return self._directory.classes_visible_to(actor)

    def class_students(self, actor: Actor, class_id: int) -> Sequence[Student]:
        class_group = self._guard.require_class(actor, class_id)
        return self._roster.list_students(class_group.student_ids)

    def add_students(self, actor: Actor, class_id: int, student_ids: Sequence[int]) -> ClassGroup:
        self._guard.require_admin(actor)
        class_group = self._get_class(class_id)

        to_add: list[int] = []
        for sid in student_ids:
            sid = int(sid)
            if class_group.has_student(sid) or sid in to_add:
                continue
            if not self._roster.get_student(sid):
                raise NotFoundError(f"Student {sid} not found")
            to_add.append(sid)

        if to_add:
            self._roster.add_students(class_id=class_group.class_id, student_ids=to_add)
            logger.info("Added students %s to class %s", to_add, class_group.class_id)
        return self._get_class(class_id)

    def remove_student(self, actor: Actor, class_id: int, student_id: int) -> ClassGroup:
        self._guard.require_admin(actor)
        class_group = self._get_class(class_id)
        if not class_group.has_student(student_id):
            raise NotFoundError("Student is not a member of this class")

        self._roster.remove_student(class_id=class_group.class_id, student_id=int(student_id))
        logger.info("Removed student %s from class %s", student_id, class_group.class_id)
        return self._get_class(class_id)

    def add_teacher(self, actor: Actor, class_id: int, teacher_id: int) -> ClassGroup:
        self._guard.require_admin(actor)
        class_group = self._get_class(class_id)
        if not self._roster.get_teacher(int(teacher_id)):
            raise NotFoundError("Teacher not found")

        if not class_group.has_teacher(teacher_id):
            self._roster.add_teacher(class_id=class_group.class_id, teacher_id=int(teacher_id))
            logger.info("Assigned teacher %s to class %s", teacher_id, class_group.class_id)
        return self._get_class(class_id)

    def remove_teacher(self, actor: Actor, class_id: int, teacher_id: int) -> ClassGroup:
        self._guard.require_admin(actor)
        class_group = self._get_class(class_id)
        if not class_group.has_teacher(teacher_id):
            raise ValidationError("Teacher is not assigned to this class")

        self._roster.remove_teacher(class_id=class_group.class_id, teacher_id=int(teacher_id))
        logger.info("Unassigned teacher %s from class %s", teacher_id, class_group.class_id)
        return self._get_class(class_id)

    def _get_class(self, class_id: int) -> ClassGroup:
        class_group = self._roster.get_class(int(class_id))
        if not class_group:
            raise NotFoundError("Class not found")
        return class_group
