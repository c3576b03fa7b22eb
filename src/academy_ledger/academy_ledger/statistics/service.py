from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, List, Optional, Sequence, Tuple

from ..access.guard import AccessGuard
from ..assessments.model import TestRecord
from ..assessments.repository import TestRepository
from ..common.datetime_utils import month_bounds, now_local, parse_optional_date
from ..common.validators import require_int
from ..core.constants import (
    MAX_STATS_YEAR,
    MIN_STATS_YEAR,
    RECENT_LESSON_LIMIT,
    RECENT_TEST_LIMIT,
    RECENT_WINDOW_DAYS,
)
from ..core.exceptions import NotFoundError, ValidationError
from ..ledger.repository import LessonDayRepository
from ..roster.directory import RosterDirectory
from ..roster.model import ClassGroup, Student
from ..roster.repository import RosterRepository
from ..users.model import Actor
from .aggregator import (
    RateSummary,
    RecentComment,
    RecentHomework,
    ScoreStats,
    attendance_summary,
    homework_summary,
    recent_items,
    score_stats,
    student_test_average,
)
from .flattening import LessonEntry, flatten_lesson_days

logger = logging.getLogger(__name__)

_EMPTY_RATE = RateSummary(total=0, count=0, rate=0.0)


@dataclass(frozen=True)
class StudentTestView:
    test: TestRecord
    my_score: Optional[float]
    stats: Optional[ScoreStats] = None


@dataclass(frozen=True)
class Dashboard:
    student: Student
    class_group: Optional[ClassGroup] = None
    teacher_names: List[str] = field(default_factory=list)
    recent_lessons: List[LessonEntry] = field(default_factory=list)
    recent_tests: List[StudentTestView] = field(default_factory=list)
    homework: RateSummary = _EMPTY_RATE
    attendance: RateSummary = _EMPTY_RATE
    recent_homework: List[RecentHomework] = field(default_factory=list)
    recent_comments: List[RecentComment] = field(default_factory=list)


@dataclass(frozen=True)
class MonthlyStatistics:
    year: int
    month: int
    attendance: RateSummary
    homework: RateSummary
    test_average: Optional[float]
    test_count: int


class StudentDataService:
    """Use case: what a student (or their parent) sees, plus monthly stats for staff.

    Student and parent actors only reach the classes their linked student
    belongs to; anything else is reported as not found.
    """

    def __init__(
        self,
        lesson_days: LessonDayRepository,
        tests: TestRepository,
        roster: RosterRepository,
        directory: RosterDirectory,
        guard: AccessGuard,
    ):
        self._days = lesson_days
        self._tests = tests
        self._roster = roster
        self._directory = directory
        self._guard = guard

    def classes(self, actor: Actor) -> Sequence[ClassGroup]:
        student = self._directory.student_for_actor(actor)
        return self._directory.classes_containing(student.student_id)

    def dashboard(self, actor: Actor, class_id: Any = None, *, today: Optional[date] = None) -> Dashboard:
        student, resolved = self._student_and_class(actor, class_id)
        if resolved is None:
            return Dashboard(student=student)

        class_group = self._directory.get_class(resolved)
        if not class_group:
            return Dashboard(student=student)

        # Rates use the whole history; the trailing window only feeds the recent lists.
        entries = flatten_lesson_days(self._days.list_for_class(class_id=resolved), student.student_id)
        today = today or now_local().date()
        homework_items, comments = recent_items(entries, since=today - timedelta(days=RECENT_WINDOW_DAYS))

        recent_tests = [
            StudentTestView(test=t, my_score=t.score_for(student.student_id))
            for t in self._tests.list_for_class(class_id=resolved, limit=RECENT_TEST_LIMIT)
        ]

        return Dashboard(
            student=student,
            class_group=class_group,
            teacher_names=self._teacher_names(class_group),
            recent_lessons=entries[:RECENT_LESSON_LIMIT],
            recent_tests=recent_tests,
            homework=homework_summary(entries),
            attendance=attendance_summary(entries),
            recent_homework=homework_items,
            recent_comments=comments,
        )

    def lessons(
        self,
        actor: Actor,
        *,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        class_id: Any = None,
    ) -> List[LessonEntry]:
        start = parse_optional_date(date_from)
        end = parse_optional_date(date_to)
        student, resolved = self._student_and_class(actor, class_id)
        if resolved is None:
            return []

        lesson_days = self._days.list_for_class(class_id=resolved, date_from=start, date_to=end)
        return flatten_lesson_days(lesson_days, student.student_id)

    def tests(self, actor: Actor, class_id: Any = None) -> List[StudentTestView]:
        student, resolved = self._student_and_class(actor, class_id)
        if resolved is None:
            return []

        return [
            StudentTestView(test=t, my_score=t.score_for(student.student_id), stats=score_stats(t))
            for t in self._tests.list_for_class(class_id=resolved)
        ]

    def monthly_statistics(self, actor: Actor, year: Any, month: Any, class_id: Any = None) -> MonthlyStatistics:
        year, month = self._check_month(year, month)
        student, resolved = self._student_and_class(actor, class_id)
        if resolved is None:
            raise NotFoundError("Student is not assigned to a class")
        return self._monthly(student.student_id, resolved, year, month)

    def student_monthly_statistics(
        self, actor: Actor, student_id: Any, year: Any, month: Any, class_id: Any = None
    ) -> MonthlyStatistics:
        year, month = self._check_month(year, month)
        self._guard.require_staff(actor)

        student = self._roster.get_student(require_int(student_id, "studentId"))
        if not student:
            raise NotFoundError("Student not found")

        preferred = require_int(class_id, "classId") if class_id not in (None, "") else None
        resolved = self._directory.resolve_student_class(student.student_id, preferred)
        if resolved is None:
            raise NotFoundError("Student is not assigned to a class")

        self._guard.require_class(actor, resolved)
        return self._monthly(student.student_id, resolved, year, month)

    def _monthly(self, student_id: int, class_id: int, year: int, month: int) -> MonthlyStatistics:
        start, end = month_bounds(year, month)
        lesson_days = self._days.list_for_class(class_id=class_id, date_from=start, date_to=end)
        tests = self._tests.list_for_class(class_id=class_id, date_from=start, date_to=end)

        entries = flatten_lesson_days(lesson_days, student_id)
        average, count = student_test_average(tests, student_id)
        return MonthlyStatistics(
            year=year,
            month=month,
            attendance=attendance_summary(entries),
            homework=homework_summary(entries),
            test_average=average,
            test_count=count,
        )

    def _student_and_class(self, actor: Actor, class_id: Any) -> Tuple[Student, Optional[int]]:
        student = self._directory.student_for_actor(actor)
        if class_id in (None, ""):
            return student, self._directory.resolve_student_class(student.student_id)

        requested = require_int(class_id, "classId")
        memberships = self._directory.classes_containing(student.student_id)
        if not any(c.class_id == requested for c in memberships):
            logger.warning(
                "Student-scoped read outside membership: user_id=%s class_id=%s", actor.user_id, requested
            )
            raise NotFoundError("Class not found")
        return student, requested

    def _teacher_names(self, class_group: ClassGroup) -> List[str]:
        names: List[str] = []
        for teacher_id in class_group.teacher_ids:
            teacher = self._roster.get_teacher(teacher_id)
            if teacher and teacher.name and teacher.name not in names:
                names.append(teacher.name)
        return names

    @staticmethod
    def _check_month(year: Any, month: Any) -> Tuple[int, int]:
        year = require_int(year, "year")
        month = require_int(month, "month")
        if not MIN_STATS_YEAR <= year <= MAX_STATS_YEAR:
            raise ValidationError(f"year must be between {MIN_STATS_YEAR} and {MAX_STATS_YEAR}")
        if not 1 <= month <= 12:
            raise ValidationError("month must be between 1 and 12")
        return year, month
