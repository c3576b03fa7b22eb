from __future__ import annotations

from flask import Flask

from ..common.http import STAFF_ROLES, current_actor, json_body, ok, roles_required
from ..common.validators import require_int
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError
from .model import ClassGroup, Student


def class_json(class_group: ClassGroup) -> dict:
    return {
        "classId": class_group.class_id,
        "name": class_group.name,
        "description": class_group.description,
        "teacherIds": list(class_group.teacher_ids),
        "studentIds": list(class_group.student_ids),
    }


def student_json(student: Student) -> dict:
    return {
        "studentId": student.student_id,
        "name": student.name,
        "school": student.school,
        "grade": student.grade,
        "classId": student.class_id,
    }


def register(app: Flask, container: Container) -> None:
    service = container.roster_service

    @app.route("/api/classes", methods=["GET"], endpoint="list_classes")
    @roles_required(*STAFF_ROLES)
    def list_classes():
        return ok([class_json(c) for c in service.visible_classes(current_actor())])

    @app.route("/api/classes/<int:class_id>/students", methods=["GET"], endpoint="class_students")
    @roles_required(*STAFF_ROLES)
    def class_students(class_id: int):
        return ok([student_json(s) for s in service.class_students(current_actor(), class_id)])

    @app.route("/api/classes/<int:class_id>/students", methods=["POST"], endpoint="add_class_students")
    @roles_required(Role.ADMIN)
    def add_class_students(class_id: int):
        raw_ids = json_body().get("studentIds")
        if not isinstance(raw_ids, list) or not raw_ids:
            raise ValidationError("studentIds must be a non-empty list")
        student_ids = [require_int(sid, "studentIds") for sid in raw_ids]
        class_group = service.add_students(current_actor(), class_id, student_ids)
        return ok(class_json(class_group))

    @app.route(
        "/api/classes/<int:class_id>/students/<int:student_id>",
        methods=["DELETE"],
        endpoint="remove_class_student",
    )
    @roles_required(Role.ADMIN)
    def remove_class_student(class_id: int, student_id: int):
        return ok(class_json(service.remove_student(current_actor(), class_id, student_id)))

    @app.route("/api/classes/<int:class_id>/teachers", methods=["POST"], endpoint="add_class_teacher")
    @roles_required(Role.ADMIN)
    def add_class_teacher(class_id: int):
        teacher_id = require_int(json_body().get("teacherId"), "teacherId")
        return ok(class_json(service.add_teacher(current_actor(), class_id, teacher_id)))

    @app.route(
        "/api/classes/<int:class_id>/teachers/<int:teacher_id>",
        methods=["DELETE"],
        endpoint="remove_class_teacher",
    )
    @roles_required(Role.ADMIN)
    def remove_class_teacher(class_id: int, teacher_id: int):
        return ok(class_json(service.remove_teacher(current_actor(), class_id, teacher_id)))
