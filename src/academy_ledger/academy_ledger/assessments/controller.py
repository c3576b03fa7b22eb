from __future__ import annotations

from typing import Any, Mapping, Optional

from flask import Flask

from ..common.datetime_utils import format_date
from ..common.http import STAFF_ROLES, current_actor, json_body, ok, roles_required
from ..container import Container
from ..statistics.aggregator import ScoreStats
from .model import ScoreEntry, TestDetails, TestRecord
from .service import build_details


def test_json(test: TestRecord, stats: Optional[ScoreStats] = None) -> dict:
    data = {
        "testId": test.test_id,
        "classId": test.class_id,
        "testType": test.test_type.value,
        "date": format_date(test.test_date),
        "questionCount": test.question_count,
        "subject": test.subject,
        "bigUnit": test.big_unit,
        "smallUnit": test.small_unit,
        "source": test.source,
    }
    if stats is not None:
        data["average"] = stats.average
        data["maxScore"] = stats.max_score
    return data


def score_json(entry: ScoreEntry) -> dict:
    return {"studentId": entry.student_id, "studentName": entry.student_name, "score": entry.score}


def _details_from(data: Mapping[str, Any]) -> TestDetails:
    return build_details(
        test_date=data.get("date"),
        question_count=data.get("questionCount"),
        subject=data.get("subject"),
        big_unit=data.get("bigUnit"),
        small_unit=data.get("smallUnit"),
        source=data.get("source"),
    )


def register(app: Flask, container: Container) -> None:
    service = container.test_service

    @app.route("/api/classes/<int:class_id>/tests", methods=["GET"], endpoint="list_class_tests")
    @roles_required(*STAFF_ROLES)
    def list_class_tests(class_id: int):
        return ok([test_json(o.test, o.stats) for o in service.list_tests(current_actor(), class_id)])

    @app.route("/api/classes/<int:class_id>/tests", methods=["POST"], endpoint="create_class_test")
    @roles_required(*STAFF_ROLES)
    def create_class_test(class_id: int):
        data = json_body()
        test = service.create_test(
            current_actor(), class_id=class_id, test_type=data.get("testType", ""), details=_details_from(data)
        )
        return ok(test_json(test), 201)

    @app.route("/api/tests/<int:test_id>", methods=["GET"], endpoint="get_test")
    @roles_required(*STAFF_ROLES)
    def get_test(test_id: int):
        overview = service.get_test(current_actor(), test_id)
        return ok(test_json(overview.test, overview.stats))

    @app.route("/api/tests/<int:test_id>", methods=["PUT"], endpoint="update_test")
    @roles_required(*STAFF_ROLES)
    def update_test(test_id: int):
        test = service.update_test(current_actor(), test_id, _details_from(json_body()))
        return ok(test_json(test))

    @app.route("/api/tests/<int:test_id>", methods=["DELETE"], endpoint="delete_test")
    @roles_required(*STAFF_ROLES)
    def delete_test(test_id: int):
        service.delete_test(current_actor(), test_id)
        return ok()

    @app.route("/api/tests/<int:test_id>/scores", methods=["GET"], endpoint="get_test_scores")
    @roles_required(*STAFF_ROLES)
    def get_test_scores(test_id: int):
        return ok([score_json(s) for s in service.get_scores(current_actor(), test_id)])

    @app.route("/api/tests/<int:test_id>/scores", methods=["POST"], endpoint="upsert_test_score")
    @roles_required(*STAFF_ROLES)
    def upsert_test_score(test_id: int):
        data = json_body()
        test = service.upsert_score(
            current_actor(), test_id, student_id=data.get("studentId"), score=data.get("score")
        )
        return ok({**test_json(test), "scores": [score_json(s) for s in test.scores]})
