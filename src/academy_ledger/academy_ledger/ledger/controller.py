from __future__ import annotations

from typing import Optional

from flask import Flask, request

from ..common.datetime_utils import format_date, parse_optional_date
from ..common.http import STAFF_ROLES, current_actor, json_body, ok, roles_required
from ..common.validators import require_int
from ..container import Container
from ..core.exceptions import ValidationError
from .model import LessonDay, LessonDayFilter, LessonDaySummary, Period, PeriodPatch

# Students and parents read lessons through /api/me; here they get a 404, not a 403.
_HIDDEN = "Not found"


def _optional_int(value: Optional[str], field_name: str) -> Optional[int]:
    if value in (None, ""):
        return None
    return require_int(value, field_name)


def period_json(period: Period, index: int) -> dict:
    return {
        "periodIndex": index,
        "teacherId": period.teacher_id,
        "teacherName": period.teacher_name,
        "memo": period.memo,
        "homeworkDescription": period.homework_description,
        "homeworkDueDate": format_date(period.homework_due_date),
        "records": [
            {
                "studentId": r.student_id,
                "studentName": r.student_name,
                "attendance": r.attendance.value,
                "homework": r.homework.value,
                "note": r.note,
            }
            for r in period.records
        ],
    }


def lesson_day_json(lesson_day: Optional[LessonDay]) -> Optional[dict]:
    if lesson_day is None:
        return None
    return {
        "lessonDayId": lesson_day.lesson_day_id,
        "classId": lesson_day.class_id,
        "className": lesson_day.class_name,
        "date": format_date(lesson_day.lesson_date),
        "periods": [period_json(p, i) for i, p in enumerate(lesson_day.periods)],
    }


def summary_json(summary: LessonDaySummary) -> dict:
    return {
        "lessonDayId": summary.lesson_day_id,
        "classId": summary.class_id,
        "className": summary.class_name,
        "date": format_date(summary.lesson_date),
        "periodCount": summary.period_count,
    }


def register(app: Flask, container: Container) -> None:
    service = container.ledger_service

    @app.route("/api/lesson-days", methods=["GET"], endpoint="list_lesson_days")
    @roles_required(*STAFF_ROLES, hide_as=_HIDDEN)
    def list_lesson_days():
        criteria = LessonDayFilter(
            date_from=parse_optional_date(request.args.get("dateFrom")),
            date_to=parse_optional_date(request.args.get("dateTo")),
            class_id=_optional_int(request.args.get("classId"), "classId"),
            teacher_id=_optional_int(request.args.get("teacherId"), "teacherId"),
        )
        return ok([summary_json(s) for s in service.list_lesson_days(current_actor(), criteria)])

    @app.route("/api/lesson-days", methods=["POST"], endpoint="create_lesson_day")
    @roles_required(*STAFF_ROLES, hide_as=_HIDDEN)
    def create_lesson_day():
        data = json_body()
        lesson_day = service.create_lesson_day(
            current_actor(), class_id=data.get("classId"), lesson_date=data.get("date")
        )
        return ok(lesson_day_json(lesson_day), 201)

    @app.route("/api/lesson-days/by-class-date", methods=["GET"], endpoint="lesson_day_by_class_date")
    @roles_required(*STAFF_ROLES, hide_as=_HIDDEN)
    def lesson_day_by_class_date():
        lesson_day = service.get_lesson_day_by_class_and_date(
            current_actor(), class_id=request.args.get("classId"), lesson_date=request.args.get("date")
        )
        return ok(lesson_day_json(lesson_day))

    @app.route("/api/lesson-days/<int:lesson_day_id>", methods=["GET"], endpoint="get_lesson_day")
    @roles_required(*STAFF_ROLES, hide_as=_HIDDEN)
    def get_lesson_day(lesson_day_id: int):
        return ok(lesson_day_json(service.get_lesson_day(current_actor(), lesson_day_id)))

    @app.route("/api/lesson-days/<int:lesson_day_id>", methods=["PUT"], endpoint="update_lesson_day")
    @roles_required(*STAFF_ROLES, hide_as=_HIDDEN)
    def update_lesson_day(lesson_day_id: int):
        data = json_body()
        lesson_day = service.update_lesson_day(
            current_actor(),
            lesson_day_id,
            lesson_date=data.get("date") or None,
            class_id=data.get("classId"),
        )
        return ok(lesson_day_json(lesson_day))

    @app.route("/api/lesson-days/<int:lesson_day_id>", methods=["DELETE"], endpoint="delete_lesson_day")
    @roles_required(*STAFF_ROLES, hide_as=_HIDDEN)
    def delete_lesson_day(lesson_day_id: int):
        service.delete_lesson_day(current_actor(), lesson_day_id)
        return ok()

    @app.route("/api/lesson-days/<int:lesson_day_id>/periods", methods=["POST"], endpoint="add_period")
    @roles_required(*STAFF_ROLES, hide_as=_HIDDEN)
    def add_period(lesson_day_id: int):
        teacher_id = json_body().get("teacherId")
        if teacher_id in (None, ""):
            raise ValidationError("teacherId is required")
        lesson_day = service.add_period(current_actor(), lesson_day_id, teacher_id=teacher_id)
        return ok(lesson_day_json(lesson_day), 201)

    @app.route("/api/lesson-days/<int:lesson_day_id>/periods", methods=["DELETE"], endpoint="remove_period")
    @roles_required(*STAFF_ROLES, hide_as=_HIDDEN)
    def remove_period(lesson_day_id: int):
        period_index = request.args.get("periodIndex")
        if period_index in (None, ""):
            raise ValidationError("periodIndex is required")
        lesson_day = service.remove_period(current_actor(), lesson_day_id, period_index=period_index)
        return ok(lesson_day_json(lesson_day))

    @app.route("/api/lesson-days/<int:lesson_day_id>/periods", methods=["PUT"], endpoint="update_period")
    @roles_required(*STAFF_ROLES, hide_as=_HIDDEN)
    def update_period(lesson_day_id: int):
        data = json_body()
        if data.get("periodIndex") in (None, ""):
            raise ValidationError("periodIndex is required")
        lesson_day = service.update_period(
            current_actor(),
            lesson_day_id,
            period_index=data["periodIndex"],
            patch=PeriodPatch.from_payload(data),
        )
        return ok(lesson_day_json(lesson_day))
