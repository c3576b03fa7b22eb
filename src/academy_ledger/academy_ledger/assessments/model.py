from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Tuple

from ..core.enums import TestType


@dataclass(frozen=True)
class ScoreEntry:
    student_id: int
    score: float
    student_name: Optional[str] = None


@dataclass(frozen=True)
class TestRecord:
    """Domain entity: one weekly or formal test taken by a class."""

    __test__ = False  # keep pytest from collecting this as a test class

    test_id: int
    class_id: int
    test_type: TestType
    test_date: date
    question_count: Optional[int] = None
    subject: Optional[str] = None
    big_unit: Optional[str] = None
    small_unit: Optional[str] = None
    source: Optional[str] = None
    scores: Tuple[ScoreEntry, ...] = field(default_factory=tuple)

    def score_for(self, student_id: int) -> Optional[float]:
        for entry in self.scores:
            if entry.student_id == int(student_id):
                return entry.score
        return None


@dataclass(frozen=True)
class TestDetails:
    """Editable metadata of a test; None means "leave unchanged" on update."""

    __test__ = False

    test_date: Optional[date] = None
    question_count: Optional[int] = None
    subject: Optional[str] = None
    big_unit: Optional[str] = None
    small_unit: Optional[str] = None
    source: Optional[str] = None
