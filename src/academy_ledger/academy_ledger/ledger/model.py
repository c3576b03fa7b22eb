from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Mapping, Optional, Sequence, Tuple

from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_int
from ..core.enums import AttendanceMark, HomeworkMark
from ..core.exceptions import ValidationError


class _Missing:
    """Marks a patch field the caller did not send."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


@dataclass(frozen=True)
class StudentRecord:
    """One student's marks within a period."""

    student_id: int
    attendance: AttendanceMark = AttendanceMark.UNSET
    homework: HomeworkMark = HomeworkMark.UNSET
    note: str = ""
    student_name: Optional[str] = None


@dataclass(frozen=True)
class Period:
    """One teaching session of a lesson day; identified by its position in LessonDay.periods."""

    teacher_id: int
    memo: str = ""
    homework_description: str = ""
    homework_due_date: Optional[date] = None
    records: Tuple[StudentRecord, ...] = field(default_factory=tuple)
    teacher_name: Optional[str] = None

    def record_for(self, student_id: int) -> Optional[StudentRecord]:
        for record in self.records:
            if record.student_id == int(student_id):
                return record
        return None


@dataclass(frozen=True)
class LessonDay:
    """Domain entity: one calendar date of activity for one class."""

    lesson_day_id: int
    class_id: int
    lesson_date: date
    periods: Tuple[Period, ...] = field(default_factory=tuple)
    class_name: Optional[str] = None


@dataclass(frozen=True)
class LessonDaySummary:
    """Read-model for lesson day listings."""

    lesson_day_id: int
    class_id: int
    class_name: str
    lesson_date: date
    period_count: int


@dataclass(frozen=True)
class LessonDayFilter:
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    class_id: Optional[int] = None
    teacher_id: Optional[int] = None


def parse_attendance(value: Optional[str]) -> AttendanceMark:
    try:
        return AttendanceMark(value or "")
    except ValueError:
        raise ValidationError(f"Invalid attendance mark: {value!r}")


def parse_homework(value: Optional[str]) -> HomeworkMark:
    try:
        return HomeworkMark(value or "")
    except ValueError:
        raise ValidationError(f"Invalid homework mark: {value!r}")


def validate_records(records: Sequence[StudentRecord]) -> Tuple[StudentRecord, ...]:
    seen: set[int] = set()
    for record in records:
        if record.student_id in seen:
            raise ValidationError(f"Student {record.student_id} appears more than once in the period")
        seen.add(record.student_id)
    return tuple(records)


def _optional_text(value: Any, field_name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    return value


def _record_from_payload(raw: Any) -> StudentRecord:
    if not isinstance(raw, Mapping):
        raise ValidationError("each record must be an object")
    return StudentRecord(
        student_id=require_int(raw.get("studentId"), "studentId"),
        attendance=parse_attendance(raw.get("attendance")),
        homework=parse_homework(raw.get("homework")),
        note=_optional_text(raw.get("note"), "note"),
    )


@dataclass(frozen=True)
class PeriodPatch:
    """Partial update of a period.

    Fields left as MISSING are not touched. ``homework_due_date=None`` clears the
    due date. ``records`` replaces the whole record sequence of the period.
    """

    teacher_id: Any = MISSING
    memo: Any = MISSING
    homework_description: Any = MISSING
    homework_due_date: Any = MISSING
    records: Any = MISSING

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "PeriodPatch":
        """Build a patch from a JSON body; key presence decides what changes."""
        values: dict[str, Any] = {}

        if payload.get("teacherId") is not None:
            values["teacher_id"] = require_int(payload["teacherId"], "teacherId")
        if "memo" in payload:
            values["memo"] = _optional_text(payload["memo"], "memo")
        if "homeworkDescription" in payload:
            values["homework_description"] = _optional_text(
                payload["homeworkDescription"], "homeworkDescription"
            )
        if "homeworkDueDate" in payload:
            raw = payload["homeworkDueDate"]
            values["homework_due_date"] = None if raw in (None, "") else parse_iso_date(raw)
        if payload.get("records") is not None:
            raw_records = payload["records"]
            if not isinstance(raw_records, (list, tuple)):
                raise ValidationError("records must be a list")
            values["records"] = validate_records([_record_from_payload(r) for r in raw_records])

        return cls(**values)

    def apply(self, period: Period) -> Period:
        changes: dict[str, Any] = {}
        if self.teacher_id is not MISSING:
            changes["teacher_id"] = int(self.teacher_id)
            changes["teacher_name"] = None
        if self.memo is not MISSING:
            changes["memo"] = self.memo or ""
        if self.homework_description is not MISSING:
            changes["homework_description"] = self.homework_description or ""
        if self.homework_due_date is not MISSING:
            changes["homework_due_date"] = self.homework_due_date
        if self.records is not MISSING:
            changes["records"] = validate_records(list(self.records))
        return replace(period, **changes)
