from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import TestType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, normalize_mysql_date, to_float
from .model import ScoreEntry, TestDetails, TestRecord
from .repository import TestRepository


_TEST_COLUMNS = "test_id, class_id, test_type, test_date, question_count, subject, big_unit, small_unit, source"

_DETAIL_COLUMNS = {
    "test_date": "test_date",
    "question_count": "question_count",
    "subject": "subject",
    "big_unit": "big_unit",
    "small_unit": "small_unit",
    "source": "source",
}


class MySQLTestRepository(TestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_tests(self, cur, rows: Sequence[dict]) -> list[TestRecord]:
        if not rows:
            return []
        test_ids = [int(r["test_id"]) for r in rows]
        cur.execute(
            f"""
            SELECT sc.test_id, sc.student_id, s.full_name AS student_name, sc.score
            FROM test_scores sc
            LEFT JOIN students s ON s.student_id = sc.student_id
            WHERE sc.test_id IN ({in_clause(test_ids)})
            ORDER BY sc.test_id ASC, sc.position ASC
            """,
            tuple(test_ids),
        )
        scores: dict[int, list[ScoreEntry]] = {tid: [] for tid in test_ids}
        for r in fetchall(cur):
            scores[int(r["test_id"])].append(
                ScoreEntry(student_id=int(r["student_id"]), score=to_float(r["score"]), student_name=r.get("student_name"))
            )

        return [
            TestRecord(
                test_id=int(r["test_id"]),
                class_id=int(r["class_id"]),
                test_type=TestType(r["test_type"]),
                test_date=normalize_mysql_date(r["test_date"]),
                question_count=int(r["question_count"]) if r.get("question_count") is not None else None,
                subject=r.get("subject"),
                big_unit=r.get("big_unit"),
                small_unit=r.get("small_unit"),
                source=r.get("source"),
                scores=tuple(scores[int(r["test_id"])]),
            )
            for r in rows
        ]

    def get_by_id(self, test_id: int) -> Optional[TestRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_TEST_COLUMNS} FROM tests WHERE test_id=%s", (int(test_id),))
            row = fetchone(cur)
            if not row:
                return None
            return self._load_tests(cur, [row])[0]

    def create(self, *, class_id: int, test_type: TestType, details: TestDetails) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tests(class_id, test_type, test_date, question_count, subject, big_unit, small_unit, source)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(class_id),
                    test_type.value,
                    details.test_date,
                    details.question_count,
                    details.subject,
                    details.big_unit,
                    details.small_unit,
                    details.source,
                ),
            )
            return int(cur.lastrowid)

    def update(self, *, test_id: int, details: TestDetails) -> bool:
        sets: list[str] = []
        params: list[object] = []
        for attr, column in _DETAIL_COLUMNS.items():
            value = getattr(details, attr)
            if value is not None:
                sets.append(f"{column}=%s")
                params.append(value)
        if not sets:
            return True

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE tests SET {', '.join(sets)} WHERE test_id=%s",
                (*params, int(test_id)),
            )
            cur.execute("SELECT 1 AS found FROM tests WHERE test_id=%s", (int(test_id),))
            return fetchone(cur) is not None

    def delete(self, *, test_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM tests WHERE test_id=%s", (int(test_id),))
            return cur.rowcount > 0

    def upsert_score(self, *, test_id: int, student_id: int, score: float) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO test_scores(test_id, student_id, score, position)
                SELECT %s, %s, %s, COALESCE(MAX(position), -1) + 1 FROM test_scores WHERE test_id=%s
                ON DUPLICATE KEY UPDATE score=VALUES(score)
                """,
                (int(test_id), int(student_id), score, int(test_id)),
            )
            # rowcount is 0 when the score is unchanged
            return True

    def list_for_class(
        self,
        *,
        class_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> Sequence[TestRecord]:
        clauses = ["class_id=%s"]
        params: list[object] = [int(class_id)]
        if date_from is not None:
            clauses.append("test_date >= %s")
            params.append(date_from)
        if date_to is not None:
            clauses.append("test_date <= %s")
            params.append(date_to)
        sql = f"SELECT {_TEST_COLUMNS} FROM tests WHERE {' AND '.join(clauses)} ORDER BY test_date DESC, test_id DESC"
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return self._load_tests(cur, fetchall(cur))
