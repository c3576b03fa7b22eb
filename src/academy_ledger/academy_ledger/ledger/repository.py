from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import LessonDay, LessonDaySummary, Period


class LessonDayRepository(Protocol):
    def get_by_id(self, lesson_day_id: int) -> Optional[LessonDay]:
        raise NotImplementedError

    def get_by_class_and_date(self, *, class_id: int, lesson_date: date) -> Optional[LessonDay]:
        raise NotImplementedError

    def create(self, *, class_id: int, lesson_date: date) -> int:
        """Insert an empty lesson day.

        Raises ConflictError when (class_id, lesson_date) already exists.
        """

        raise NotImplementedError

    def update_header(self, *, lesson_day_id: int, class_id: int, lesson_date: date) -> bool:
        raise NotImplementedError

    def delete(self, *, lesson_day_id: int) -> bool:
        """Delete the day together with its periods and records."""

        raise NotImplementedError

    def save_periods(self, *, lesson_day_id: int, periods: Sequence[Period]) -> bool:
        """Replace the period sequence of a day in a single write."""

        raise NotImplementedError

    def list_summaries(
        self,
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        class_ids: Optional[Sequence[int]] = None,
        teacher_id: Optional[int] = None,
    ) -> Sequence[LessonDaySummary]:
        """Summaries ordered by date descending.

        ``class_ids=None`` means no class restriction; an empty sequence matches nothing.
        """

        raise NotImplementedError

    def list_for_class(
        self,
        *,
        class_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Sequence[LessonDay]:
        """Full lesson days of a class ordered by date descending (bounds inclusive)."""

        raise NotImplementedError
