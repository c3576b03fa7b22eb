"""Rates and averages derived from flattened lesson entries and test scores."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

from ..assessments.model import TestRecord
from ..core.constants import RECENT_ITEMS_CAP, SCORE_DIGITS
from ..core.enums import AttendanceMark, HomeworkStatus
from .flattening import LessonEntry


@dataclass(frozen=True)
class RateSummary:
    total: int
    count: int
    rate: float


@dataclass(frozen=True)
class RecentHomework:
    entry_id: str
    lesson_date: date
    teacher_name: str
    homework_description: Optional[str]
    homework_due_date: Optional[date]
    homework_done: bool


@dataclass(frozen=True)
class RecentComment:
    entry_id: str
    lesson_date: date
    teacher_name: str
    note: str


@dataclass(frozen=True)
class ScoreStats:
    average: Optional[float]
    max_score: Optional[float]


def percentage(part: int, total: int) -> float:
    """part/total as a percentage; 0 when total is 0."""
    if not total:
        return 0.0
    return part / total * 100


def round_score(value: Optional[float]) -> Optional[float]:
    return round(value, SCORE_DIGITS) if value is not None else None


def homework_summary(entries: Sequence[LessonEntry]) -> RateSummary:
    """Homework counts over entries with a homework mark or a progress memo."""
    total = sum(
        1 for e in entries if e.homework_status != HomeworkStatus.BLANK or (e.progress or "").strip()
    )
    done = sum(1 for e in entries if e.homework_done)
    return RateSummary(total=total, count=done, rate=percentage(done, total))


def attendance_summary(entries: Sequence[LessonEntry]) -> RateSummary:
    """Any explicit mark, absence included, counts as a recorded attendance."""
    total = len(entries)
    attended = sum(1 for e in entries if e.attendance_status != AttendanceMark.UNSET)
    return RateSummary(total=total, count=attended, rate=percentage(attended, total))


def recent_items(
    entries: Iterable[LessonEntry], *, since: date, cap: int = RECENT_ITEMS_CAP
) -> Tuple[List[RecentHomework], List[RecentComment]]:
    """Homework assignments and teacher notes dated on or after ``since``."""
    window = [e for e in entries if e.lesson_date >= since]

    homework = [
        RecentHomework(
            entry_id=e.entry_id,
            lesson_date=e.lesson_date,
            teacher_name=e.teacher_name or "",
            homework_description=e.homework_description,
            homework_due_date=e.homework_due_date,
            homework_done=e.homework_done,
        )
        for e in window
        if e.homework_description or e.homework_due_date
    ][:cap]

    comments = [
        RecentComment(entry_id=e.entry_id, lesson_date=e.lesson_date, teacher_name=e.teacher_name or "", note=e.note)
        for e in window
        if e.note
    ][:cap]

    return homework, comments


def score_stats(test: TestRecord) -> ScoreStats:
    values = [entry.score for entry in test.scores]
    if not values:
        return ScoreStats(average=None, max_score=None)
    return ScoreStats(average=round_score(sum(values) / len(values)), max_score=round_score(max(values)))


def student_test_average(tests: Iterable[TestRecord], student_id: int) -> Tuple[Optional[float], int]:
    """Mean of the student's own scores and how many scores it covers."""
    scores = [s for s in (t.score_for(student_id) for t in tests) if s is not None]
    if not scores:
        return None, 0
    return round_score(sum(scores) / len(scores)), len(scores)
