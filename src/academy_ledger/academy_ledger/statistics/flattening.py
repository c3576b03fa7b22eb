"""Projection of nested lesson days into a per-student timeline.

Pure functions only; callers fetch the lesson days.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from ..core.enums import AttendanceMark, HomeworkMark, HomeworkStatus
from ..ledger.model import LessonDay

_HOMEWORK_STATUS = {
    HomeworkMark.DONE: HomeworkStatus.SUBMITTED,
    HomeworkMark.NOT_DONE: HomeworkStatus.NOT_SUBMITTED,
    HomeworkMark.UNSET: HomeworkStatus.BLANK,
}


@dataclass(frozen=True)
class LessonEntry:
    """One period of one lesson day, seen from a single student."""

    entry_id: str
    lesson_date: date
    period_label: int
    progress: str
    homework_status: HomeworkStatus
    homework_done: bool
    attendance_status: AttendanceMark
    homework_description: Optional[str] = None
    homework_due_date: Optional[date] = None
    teacher_name: Optional[str] = None
    note: Optional[str] = None


def entry_id(lesson_day_id: int, period_index: int) -> str:
    return f"{lesson_day_id}-{period_index}"


def flatten_lesson_days(lesson_days: Iterable[LessonDay], student_id: int) -> List[LessonEntry]:
    """One entry per period, keeping day order and then period order.

    A period without a record for the student (joined after it was seeded)
    yields an entry with blank marks.
    """
    entries: List[LessonEntry] = []
    for day in lesson_days:
        for index, period in enumerate(day.periods):
            record = period.record_for(student_id)
            attendance = record.attendance if record else AttendanceMark.UNSET
            homework = record.homework if record else HomeworkMark.UNSET
            note = (record.note or "").strip() if record else ""

            entries.append(
                LessonEntry(
                    entry_id=entry_id(day.lesson_day_id, index),
                    lesson_date=day.lesson_date,
                    period_label=index + 1,
                    progress=period.memo or "",
                    homework_status=_HOMEWORK_STATUS[homework],
                    homework_done=homework == HomeworkMark.DONE,
                    attendance_status=attendance,
                    homework_description=(period.homework_description or "").strip() or None,
                    homework_due_date=period.homework_due_date,
                    teacher_name=period.teacher_name or None,
                    note=note or None,
                )
            )
    return entries
