from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ClassGroup, Student, Teacher


class RosterRepository(Protocol):
    """Read access to classes, teachers and students plus membership maintenance."""

    def get_class(self, class_id: int) -> Optional[ClassGroup]:
        raise NotImplementedError

    def list_classes(self) -> Sequence[ClassGroup]:
        """All classes ordered by name."""

        raise NotImplementedError

    def list_classes_for_student(self, student_id: int) -> Sequence[ClassGroup]:
        """Classes whose membership contains the student, ordered by name."""

        raise NotImplementedError

    def list_classes_for_teacher(self, teacher_id: int) -> Sequence[ClassGroup]:
        raise NotImplementedError

    def get_teacher(self, teacher_id: int) -> Optional[Teacher]:
        raise NotImplementedError

    def get_teacher_by_user(self, user_id: int) -> Optional[Teacher]:
        raise NotImplementedError

    def get_student(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_student_by_user(self, user_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_student_by_parent_user(self, user_id: int) -> Optional[Student]:
        raise NotImplementedError

    def list_students(self, student_ids: Sequence[int]) -> Sequence[Student]:
        """Students for the given ids, in the given order; unknown ids are skipped."""

        raise NotImplementedError

    def add_students(self, *, class_id: int, student_ids: Sequence[int]) -> None:
        """Append memberships and set the primary class link of each added student."""

        raise NotImplementedError

    def remove_student(self, *, class_id: int, student_id: int) -> None:
        """Drop membership and clear the student's primary link if it points at class_id."""

        raise NotImplementedError

    def add_teacher(self, *, class_id: int, teacher_id: int) -> None:
        raise NotImplementedError

    def remove_teacher(self, *, class_id: int, teacher_id: int) -> None:
        raise NotImplementedError
