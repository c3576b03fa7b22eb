from __future__ import annotations

from flask import Flask, request

from ..assessments.controller import test_json
from ..common.datetime_utils import format_date
from ..common.http import LEARNER_ROLES, STAFF_ROLES, current_actor, ok, roles_required
from ..container import Container
from ..roster.controller import class_json
from .aggregator import RateSummary, RecentComment, RecentHomework
from .flattening import LessonEntry
from .service import Dashboard, MonthlyStatistics, StudentTestView


def entry_json(entry: LessonEntry) -> dict:
    return {
        "id": entry.entry_id,
        "date": format_date(entry.lesson_date),
        "period": entry.period_label,
        "progress": entry.progress,
        "homeworkStatus": entry.homework_status.value,
        "homeworkDone": entry.homework_done,
        "attendanceStatus": entry.attendance_status.value,
        "homeworkDescription": entry.homework_description,
        "homeworkDueDate": format_date(entry.homework_due_date),
        "teacherName": entry.teacher_name,
        "note": entry.note,
    }


def _homework_json(summary: RateSummary) -> dict:
    return {"total": summary.total, "done": summary.count, "rate": summary.rate}


def _attendance_json(summary: RateSummary) -> dict:
    return {"total": summary.total, "attended": summary.count, "rate": summary.rate}


def _recent_homework_json(item: RecentHomework) -> dict:
    return {
        "id": item.entry_id,
        "date": format_date(item.lesson_date),
        "teacherName": item.teacher_name,
        "homeworkDescription": item.homework_description,
        "homeworkDueDate": format_date(item.homework_due_date),
        "homeworkDone": item.homework_done,
    }


def _recent_comment_json(item: RecentComment) -> dict:
    return {
        "id": item.entry_id,
        "date": format_date(item.lesson_date),
        "teacherName": item.teacher_name,
        "note": item.note,
    }


def _student_test_json(view: StudentTestView) -> dict:
    return {**test_json(view.test, view.stats), "myScore": view.my_score}


def dashboard_json(dashboard: Dashboard) -> dict:
    student = dashboard.student
    return {
        "student": {
            "studentId": student.student_id,
            "name": student.name,
            "school": student.school,
            "grade": student.grade,
        },
        "class": class_json(dashboard.class_group) if dashboard.class_group else None,
        "teacherNames": dashboard.teacher_names,
        "recentLessons": [entry_json(e) for e in dashboard.recent_lessons],
        "recentTests": [_student_test_json(t) for t in dashboard.recent_tests],
        "homeworkSummary": _homework_json(dashboard.homework),
        "attendanceSummary": _attendance_json(dashboard.attendance),
        "recentHomework": [_recent_homework_json(h) for h in dashboard.recent_homework],
        "recentComments": [_recent_comment_json(c) for c in dashboard.recent_comments],
    }


def monthly_json(stats: MonthlyStatistics) -> dict:
    return {
        "year": stats.year,
        "month": stats.month,
        "attendance": _attendance_json(stats.attendance),
        "homework": _homework_json(stats.homework),
        "testAverage": stats.test_average,
        "testCount": stats.test_count,
    }


def register(app: Flask, container: Container) -> None:
    service = container.student_data_service

    @app.route("/api/me/classes", methods=["GET"], endpoint="my_classes")
    @roles_required(*LEARNER_ROLES)
    def my_classes():
        return ok([class_json(c) for c in service.classes(current_actor())])

    @app.route("/api/me/dashboard", methods=["GET"], endpoint="my_dashboard")
    @roles_required(*LEARNER_ROLES)
    def my_dashboard():
        return ok(dashboard_json(service.dashboard(current_actor(), request.args.get("classId"))))

    @app.route("/api/me/lessons", methods=["GET"], endpoint="my_lessons")
    @roles_required(*LEARNER_ROLES)
    def my_lessons():
        entries = service.lessons(
            current_actor(),
            date_from=request.args.get("from"),
            date_to=request.args.get("to"),
            class_id=request.args.get("classId"),
        )
        return ok([entry_json(e) for e in entries])

    @app.route("/api/me/tests", methods=["GET"], endpoint="my_tests")
    @roles_required(*LEARNER_ROLES)
    def my_tests():
        return ok([_student_test_json(t) for t in service.tests(current_actor(), request.args.get("classId"))])

    @app.route("/api/me/statistics/monthly", methods=["GET"], endpoint="my_monthly_statistics")
    @roles_required(*LEARNER_ROLES)
    def my_monthly_statistics():
        stats = service.monthly_statistics(
            current_actor(), request.args.get("year"), request.args.get("month"), request.args.get("classId")
        )
        return ok(monthly_json(stats))

    @app.route(
        "/api/students/<int:student_id>/statistics/monthly",
        methods=["GET"],
        endpoint="student_monthly_statistics",
    )
    @roles_required(*STAFF_ROLES)
    def student_monthly_statistics(student_id: int):
        stats = service.student_monthly_statistics(
            current_actor(),
            student_id,
            request.args.get("year"),
            request.args.get("month"),
            request.args.get("classId"),
        )
        return ok(monthly_json(stats))
