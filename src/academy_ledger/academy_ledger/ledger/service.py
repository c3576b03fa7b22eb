from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence, Union

from ..access.guard import AccessGuard
from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_int
from ..core.enums import Role
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..roster.directory import RosterDirectory
from ..roster.repository import RosterRepository
from ..users.model import Actor
from .model import LessonDay, LessonDayFilter, LessonDaySummary, Period, PeriodPatch, StudentRecord
from .repository import LessonDayRepository

logger = logging.getLogger(__name__)

DateInput = Union[str, date]


class LessonLedgerService:
    """Use case: lesson days and their periods.

    Every operation resolves the owning class through the access guard before
    reading or writing. Period mutations are read-modify-write on the whole
    day (last writer wins).
    """

    def __init__(
        self,
        lesson_days: LessonDayRepository,
        roster: RosterRepository,
        directory: RosterDirectory,
        guard: AccessGuard,
    ):
        self._days = lesson_days
        self._roster = roster
        self._directory = directory
        self._guard = guard

    def create_lesson_day(self, actor: Actor, *, class_id: int, lesson_date: DateInput) -> LessonDay:
        lesson_date = parse_iso_date(lesson_date)
        class_group = self._guard.require_class(actor, require_int(class_id, "classId"))

        if self._days.get_by_class_and_date(class_id=class_group.class_id, lesson_date=lesson_date):
            raise ConflictError("A lesson day already exists for this class and date")

        lesson_day_id = self._days.create(class_id=class_group.class_id, lesson_date=lesson_date)
        logger.info("Created lesson day %s for class %s on %s", lesson_day_id, class_group.class_id, lesson_date)
        return self._reload(lesson_day_id)

    def get_lesson_day(self, actor: Actor, lesson_day_id: int) -> LessonDay:
        return self._load_for(actor, lesson_day_id)

    def get_lesson_day_by_class_and_date(
        self, actor: Actor, *, class_id: int, lesson_date: DateInput
    ) -> Optional[LessonDay]:
        lesson_date = parse_iso_date(lesson_date)
        class_group = self._guard.require_class(actor, require_int(class_id, "classId"))
        return self._days.get_by_class_and_date(class_id=class_group.class_id, lesson_date=lesson_date)

    def update_lesson_day(
        self,
        actor: Actor,
        lesson_day_id: int,
        *,
        lesson_date: Optional[DateInput] = None,
        class_id: Optional[int] = None,
    ) -> LessonDay:
        lesson_day = self._load_for(actor, lesson_day_id)

        new_date = parse_iso_date(lesson_date) if lesson_date is not None else lesson_day.lesson_date
        new_class_id = lesson_day.class_id
        if class_id is not None:
            new_class_id = self._guard.require_class(actor, require_int(class_id, "classId")).class_id

        if (new_class_id, new_date) != (lesson_day.class_id, lesson_day.lesson_date):
            existing = self._days.get_by_class_and_date(class_id=new_class_id, lesson_date=new_date)
            if existing and existing.lesson_day_id != lesson_day.lesson_day_id:
                raise ConflictError("A lesson day already exists for this class and date")
            self._days.update_header(
                lesson_day_id=lesson_day.lesson_day_id, class_id=new_class_id, lesson_date=new_date
            )
            logger.info("Moved lesson day %s to class %s on %s", lesson_day.lesson_day_id, new_class_id, new_date)

        return self._reload(lesson_day.lesson_day_id)

    def delete_lesson_day(self, actor: Actor, lesson_day_id: int) -> None:
        lesson_day = self._load_for(actor, lesson_day_id)
        if not self._days.delete(lesson_day_id=lesson_day.lesson_day_id):
            raise NotFoundError("Lesson day not found")
        logger.info("Deleted lesson day %s", lesson_day.lesson_day_id)

    def add_period(self, actor: Actor, lesson_day_id: int, *, teacher_id: int) -> LessonDay:
        lesson_day = self._load_for(actor, lesson_day_id)
        teacher = self._roster.get_teacher(require_int(teacher_id, "teacherId"))
        if not teacher:
            raise NotFoundError("Teacher not found")

        # Seed from current membership; later roster changes do not touch this period.
        class_group = self._directory.get_class(lesson_day.class_id)
        member_ids = class_group.student_ids if class_group else ()
        period = Period(
            teacher_id=teacher.teacher_id,
            records=tuple(StudentRecord(student_id=sid) for sid in member_ids),
            teacher_name=teacher.name,
        )

        self._save(lesson_day, lesson_day.periods + (period,))
        logger.info(
            "Added period %s to lesson day %s (%s records)",
            len(lesson_day.periods) + 1,
            lesson_day.lesson_day_id,
            len(period.records),
        )
        return self._reload(lesson_day.lesson_day_id)

    def remove_period(self, actor: Actor, lesson_day_id: int, *, period_index: int) -> LessonDay:
        lesson_day = self._load_for(actor, lesson_day_id)
        index = self._check_index(lesson_day, period_index)

        periods = lesson_day.periods[:index] + lesson_day.periods[index + 1:]
        self._save(lesson_day, periods)
        logger.info("Removed period index %s from lesson day %s", index, lesson_day.lesson_day_id)
        return self._reload(lesson_day.lesson_day_id)

    def update_period(self, actor: Actor, lesson_day_id: int, *, period_index: int, patch: PeriodPatch) -> LessonDay:
        lesson_day = self._load_for(actor, lesson_day_id)
        index = self._check_index(lesson_day, period_index)

        updated = patch.apply(lesson_day.periods[index])
        if updated.teacher_id != lesson_day.periods[index].teacher_id:
            if not self._roster.get_teacher(updated.teacher_id):
                raise NotFoundError("Teacher not found")

        periods = lesson_day.periods[:index] + (updated,) + lesson_day.periods[index + 1:]
        self._save(lesson_day, periods)
        logger.info("Updated period index %s of lesson day %s", index, lesson_day.lesson_day_id)
        return self._reload(lesson_day.lesson_day_id)

    def list_lesson_days(self, actor: Actor, criteria: Optional[LessonDayFilter] = None) -> Sequence[LessonDaySummary]:
        criteria = criteria or LessonDayFilter()
        self._guard.require_staff(actor)

        class_ids: Optional[list[int]] = None
        if criteria.class_id is not None:
            class_ids = [self._guard.require_class(actor, criteria.class_id).class_id]
        elif actor.role == Role.TEACHER:
            teacher = self._directory.teacher_for_user(actor.user_id)
            taught = self._directory.classes_taught_by(teacher.teacher_id) if teacher else []
            class_ids = [c.class_id for c in taught]

        return self._days.list_summaries(
            date_from=criteria.date_from,
            date_to=criteria.date_to,
            class_ids=class_ids,
            teacher_id=criteria.teacher_id,
        )

    def _load_for(self, actor: Actor, lesson_day_id: int) -> LessonDay:
        lesson_day = self._days.get_by_id(require_int(lesson_day_id, "lessonDayId"))
        if not lesson_day:
            raise NotFoundError("Lesson day not found")
        self._guard.require_class(actor, lesson_day.class_id)
        return lesson_day

    def _reload(self, lesson_day_id: int) -> LessonDay:
        lesson_day = self._days.get_by_id(lesson_day_id)
        if not lesson_day:
            raise NotFoundError("Lesson day not found")
        return lesson_day

    def _save(self, lesson_day: LessonDay, periods: Sequence[Period]) -> None:
        if not self._days.save_periods(lesson_day_id=lesson_day.lesson_day_id, periods=tuple(periods)):
            raise NotFoundError("Lesson day not found")

    @staticmethod
    def _check_index(lesson_day: LessonDay, period_index: int) -> int:
        index = require_int(period_index, "periodIndex")
        if index < 0 or index >= len(lesson_day.periods):
            raise ValidationError(
                f"periodIndex {index} is out of range (lesson day has {len(lesson_day.periods)} periods)"
            )
        return index
