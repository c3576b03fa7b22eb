from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from ..access.guard import AccessGuard
from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_int, require_number
from ..core.enums import TestType
from ..core.exceptions import NotFoundError, ValidationError
from ..roster.repository import RosterRepository
from ..statistics.aggregator import ScoreStats, score_stats
from ..users.model import Actor
from .model import ScoreEntry, TestDetails, TestRecord
from .repository import TestRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TestOverview:
    """A test together with its score statistics."""

    __test__ = False

    test: TestRecord
    stats: ScoreStats


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip()


def build_details(
    *,
    test_date: Any = None,
    question_count: Any = None,
    subject: Optional[str] = None,
    big_unit: Optional[str] = None,
    small_unit: Optional[str] = None,
    source: Optional[str] = None,
) -> TestDetails:
    count = None
    if question_count is not None and question_count != "":
        count = require_int(question_count, "questionCount")
        if count < 0:
            raise ValidationError("questionCount must be 0 or more")
    return TestDetails(
        test_date=parse_iso_date(test_date) if test_date not in (None, "") else None,
        question_count=count,
        subject=_clean(subject),
        big_unit=_clean(big_unit),
        small_unit=_clean(small_unit),
        source=_clean(source),
    )


class TestService:
    """Use case: tests and scores of a class (admin or the class's teachers)."""

    __test__ = False

    def __init__(self, tests: TestRepository, roster: RosterRepository, guard: AccessGuard):
        self._tests = tests
        self._roster = roster
        self._guard = guard

    def create_test(self, actor: Actor, *, class_id: int, test_type: str, details: TestDetails) -> TestRecord:
        try:
            kind = TestType(test_type)
        except ValueError:
            raise ValidationError("testType must be 'weekly' or 'real'")
        if details.test_date is None:
            raise ValidationError("Test date is required")

        class_group = self._guard.require_class(actor, require_int(class_id, "classId"))
        test_id = self._tests.create(class_id=class_group.class_id, test_type=kind, details=details)
        logger.info("Created %s test %s for class %s", kind.value, test_id, class_group.class_id)
        return self._reload(test_id)

    def list_tests(self, actor: Actor, class_id: int) -> Sequence[TestOverview]:
        class_group = self._guard.require_class(actor, require_int(class_id, "classId"))
        return [TestOverview(test=t, stats=score_stats(t)) for t in self._tests.list_for_class(class_id=class_group.class_id)]

    def get_test(self, actor: Actor, test_id: int) -> TestOverview:
        test = self._load_for(actor, test_id)
        return TestOverview(test=test, stats=score_stats(test))

    def update_test(self, actor: Actor, test_id: int, details: TestDetails) -> TestRecord:
        test = self._load_for(actor, test_id)
        if not self._tests.update(test_id=test.test_id, details=details):
            raise NotFoundError("Test not found")
        logger.info("Updated test %s", test.test_id)
        return self._reload(test.test_id)

    def delete_test(self, actor: Actor, test_id: int) -> None:
        test = self._load_for(actor, test_id)
        if not self._tests.delete(test_id=test.test_id):
            raise NotFoundError("Test not found")
        logger.info("Deleted test %s", test.test_id)

    def get_scores(self, actor: Actor, test_id: int) -> Sequence[ScoreEntry]:
        test = self._load_for(actor, test_id)
        missing = [s.student_id for s in test.scores if s.student_name is None]
        if not missing:
            return test.scores
        names = {s.student_id: s.name for s in self._roster.list_students(missing)}
        return tuple(
            s if s.student_name is not None else ScoreEntry(s.student_id, s.score, names.get(s.student_id, ""))
            for s in test.scores
        )

    def upsert_score(self, actor: Actor, test_id: int, *, student_id: int, score: Any) -> TestRecord:
        test = self._load_for(actor, test_id)
        value = require_number(score, "score")
        student_id = require_int(student_id, "studentId")
        if not self._roster.get_student(student_id):
            raise NotFoundError("Student not found")

        self._tests.upsert_score(test_id=test.test_id, student_id=student_id, score=value)
        logger.info("Recorded score for student %s on test %s", student_id, test.test_id)
        return self._reload(test.test_id)

    def _load_for(self, actor: Actor, test_id: int) -> TestRecord:
        test = self._tests.get_by_id(require_int(test_id, "testId"))
        if not test:
            raise NotFoundError("Test not found")
        self._guard.require_class(actor, test.class_id)
        return test

    def _reload(self, test_id: int) -> TestRecord:
        test = self._tests.get_by_id(test_id)
        if not test:
            raise NotFoundError("Test not found")
        return test
