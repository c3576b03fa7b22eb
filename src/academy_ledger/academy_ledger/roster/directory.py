from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..core.exceptions import NotFoundError
from ..users.model import Actor
from .model import ClassGroup, Student, Teacher
from .repository import RosterRepository


class RosterDirectory:
    """Read-only resolution of identity to class membership."""

    def __init__(self, roster: RosterRepository):
        self._roster = roster

    def get_class(self, class_id: int) -> Optional[ClassGroup]:
        return self._roster.get_class(int(class_id))

    def classes_containing(self, student_id: int) -> Sequence[ClassGroup]:
        return self._roster.list_classes_for_student(int(student_id))

    def classes_taught_by(self, teacher_id: int) -> Sequence[ClassGroup]:
        return self._roster.list_classes_for_teacher(int(teacher_id))

    def teacher_for_user(self, user_id: int) -> Optional[Teacher]:
        return self._roster.get_teacher_by_user(int(user_id))

    def classes_visible_to(self, actor: Actor) -> Sequence[ClassGroup]:
        if actor.role == Role.ADMIN:
            return self._roster.list_classes()
        if actor.role == Role.TEACHER:
            teacher = self.teacher_for_user(actor.user_id)
            return self.classes_taught_by(teacher.teacher_id) if teacher else []
        return self.classes_containing(self.student_for_actor(actor).student_id)

    def student_for_actor(self, actor: Actor) -> Student:
        """The student a student/parent actor is linked to."""
        student = None
        if actor.role == Role.STUDENT:
            student = self._roster.get_student_by_user(actor.user_id)
        elif actor.role == Role.PARENT:
            student = self._roster.get_student_by_parent_user(actor.user_id)
        if not student:
            raise NotFoundError("Linked student not found")
        return student

    def resolve_student_class(self, student_id: int, preferred_class_id: Optional[int] = None) -> Optional[int]:
        """Pick the class a student-centric view should read from.

        A preferred class is used only when the student belongs to it. Otherwise
        the student's primary class wins, then the first class (by name) whose
        membership contains the student.
        """
        memberships = self.classes_containing(student_id)
        if preferred_class_id is not None:
            if any(c.class_id == int(preferred_class_id) for c in memberships):
                return int(preferred_class_id)

        student = self._roster.get_student(int(student_id))
        if student and student.class_id is not None:
            return student.class_id

        return memberships[0].class_id if memberships else None
