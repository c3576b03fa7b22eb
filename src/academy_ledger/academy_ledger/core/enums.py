from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for access decisions."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"


class AttendanceMark(str, Enum):
    """Per-student attendance mark stored on a period record."""

    PRESENT = "present"
    ABSENT = "absent"
    UNSET = ""


class HomeworkMark(str, Enum):
    """Per-student homework mark stored on a period record."""

    DONE = "done"
    NOT_DONE = "not_done"
    UNSET = ""


class HomeworkStatus(str, Enum):
    """Student-facing homework status derived from HomeworkMark."""

    SUBMITTED = "submitted"
    NOT_SUBMITTED = "not_submitted"
    BLANK = ""


class TestType(str, Enum):
    __test__ = False

    WEEKLY = "weekly"
    REAL = "real"
