from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class ClassGroup:
    """Domain entity: a class roster.

    ``teacher_ids`` keeps assignment order; ``student_ids`` keeps join order,
    which is also the order records are seeded in when a period is added.
    """

    class_id: int
    name: str
    description: str = ""
    teacher_ids: Tuple[int, ...] = field(default_factory=tuple)
    student_ids: Tuple[int, ...] = field(default_factory=tuple)

    def has_teacher(self, teacher_id: int) -> bool:
        return int(teacher_id) in self.teacher_ids

    def has_student(self, student_id: int) -> bool:
        return int(student_id) in self.student_ids


@dataclass(frozen=True)
class Teacher:
    teacher_id: int
    user_id: int
    name: str


@dataclass(frozen=True)
class Student:
    """Domain entity: a student.

    ``class_id`` is the designated primary class, which may be unset even when
    the student belongs to one or more classes.
    """

    student_id: int
    user_id: int
    parent_user_id: Optional[int]
    name: str
    school: str = ""
    grade: str = ""
    class_id: Optional[int] = None
