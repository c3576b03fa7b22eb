from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import AttendanceMark, HomeworkMark
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, is_duplicate_key, normalize_mysql_date
from .model import LessonDay, LessonDaySummary, Period, StudentRecord
from .repository import LessonDayRepository


class MySQLLessonDayRepository(LessonDayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_days(self, cur, rows: Sequence[dict]) -> list[LessonDay]:
        if not rows:
            return []
        day_ids = [int(r["lesson_day_id"]) for r in rows]

        cur.execute(
            f"""
            SELECT p.period_id, p.lesson_day_id, p.position, p.teacher_id, t.full_name AS teacher_name,
                   p.memo, p.homework_description, p.homework_due_date
            FROM lesson_periods p
            LEFT JOIN teachers t ON t.teacher_id = p.teacher_id
            WHERE p.lesson_day_id IN ({in_clause(day_ids)})
            ORDER BY p.lesson_day_id ASC, p.position ASC
            """,
            tuple(day_ids),
        )
        period_rows = fetchall(cur)

        records_by_period: dict[int, list[StudentRecord]] = {int(p["period_id"]): [] for p in period_rows}
        if period_rows:
            period_ids = list(records_by_period)
            cur.execute(
                f"""
                SELECT r.period_id, r.student_id, s.full_name AS student_name, r.attendance, r.homework, r.note
                FROM period_records r
                LEFT JOIN students s ON s.student_id = r.student_id
                WHERE r.period_id IN ({in_clause(period_ids)})
                ORDER BY r.period_id ASC, r.position ASC
                """,
                tuple(period_ids),
            )
            for r in fetchall(cur):
                records_by_period[int(r["period_id"])].append(
                    StudentRecord(
                        student_id=int(r["student_id"]),
                        attendance=AttendanceMark(r.get("attendance") or ""),
                        homework=HomeworkMark(r.get("homework") or ""),
                        note=r.get("note") or "",
                        student_name=r.get("student_name"),
                    )
                )

        periods_by_day: dict[int, list[Period]] = {day_id: [] for day_id in day_ids}
        for p in period_rows:
            periods_by_day[int(p["lesson_day_id"])].append(
                Period(
                    teacher_id=int(p["teacher_id"]),
                    memo=p.get("memo") or "",
                    homework_description=p.get("homework_description") or "",
                    homework_due_date=normalize_mysql_date(p.get("homework_due_date")),
                    records=tuple(records_by_period[int(p["period_id"])]),
                    teacher_name=p.get("teacher_name"),
                )
            )

        return [
            LessonDay(
                lesson_day_id=int(r["lesson_day_id"]),
                class_id=int(r["class_id"]),
                lesson_date=normalize_mysql_date(r["lesson_date"]),
                periods=tuple(periods_by_day[int(r["lesson_day_id"])]),
                class_name=r.get("class_name"),
            )
            for r in rows
        ]

    def get_by_id(self, lesson_day_id: int) -> Optional[LessonDay]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT d.lesson_day_id, d.class_id, c.class_name, d.lesson_date
                FROM lesson_days d
                JOIN classes c ON c.class_id = d.class_id
                WHERE d.lesson_day_id=%s
                """,
                (int(lesson_day_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return self._load_days(cur, [row])[0]

    def get_by_class_and_date(self, *, class_id: int, lesson_date: date) -> Optional[LessonDay]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT d.lesson_day_id, d.class_id, c.class_name, d.lesson_date
                FROM lesson_days d
                JOIN classes c ON c.class_id = d.class_id
                WHERE d.class_id=%s AND d.lesson_date=%s
                """,
                (int(class_id), lesson_date),
            )
            row = fetchone(cur)
            if not row:
                return None
            return self._load_days(cur, [row])[0]

    def create(self, *, class_id: int, lesson_date: date) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO lesson_days(class_id, lesson_date) VALUES(%s,%s)",
                    (int(class_id), lesson_date),
                )
                return int(cur.lastrowid)
        except IntegrityError as e:
            if is_duplicate_key(e):
                raise ConflictError("A lesson day already exists for this class and date")
            raise

    def update_header(self, *, lesson_day_id: int, class_id: int, lesson_date: date) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "UPDATE lesson_days SET class_id=%s, lesson_date=%s WHERE lesson_day_id=%s",
                    (int(class_id), lesson_date, int(lesson_day_id)),
                )
                return cur.rowcount > 0
        except IntegrityError as e:
            if is_duplicate_key(e):
                raise ConflictError("A lesson day already exists for this class and date")
            raise

    def delete(self, *, lesson_day_id: int) -> bool:
        # lesson_periods and period_records go with it (ON DELETE CASCADE).
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM lesson_days WHERE lesson_day_id=%s", (int(lesson_day_id),))
            return cur.rowcount > 0

    def save_periods(self, *, lesson_day_id: int, periods: Sequence[Period]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT lesson_day_id FROM lesson_days WHERE lesson_day_id=%s FOR UPDATE",
                (int(lesson_day_id),),
            )
            if not fetchone(cur):
                return False

            cur.execute("DELETE FROM lesson_periods WHERE lesson_day_id=%s", (int(lesson_day_id),))
            for position, period in enumerate(periods):
                cur.execute(
                    """
                    INSERT INTO lesson_periods(lesson_day_id, position, teacher_id, memo, homework_description, homework_due_date)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(lesson_day_id),
                        position,
                        int(period.teacher_id),
                        period.memo,
                        period.homework_description,
                        period.homework_due_date,
                    ),
                )
                period_id = int(cur.lastrowid)
                if period.records:
                    cur.executemany(
                        """
                        INSERT INTO period_records(period_id, position, student_id, attendance, homework, note)
                        VALUES(%s,%s,%s,%s,%s,%s)
                        """,
                        [
                            (period_id, idx, int(r.student_id), r.attendance.value, r.homework.value, r.note)
                            for idx, r in enumerate(period.records)
                        ],
                    )

            cur.execute("UPDATE lesson_days SET updated_at=CURRENT_TIMESTAMP WHERE lesson_day_id=%s", (int(lesson_day_id),))
            return True

    def list_summaries(
        self,
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        class_ids: Optional[Sequence[int]] = None,
        teacher_id: Optional[int] = None,
    ) -> Sequence[LessonDaySummary]:
        if class_ids is not None and not class_ids:
            return []

        clauses = ["1=1"]
        params: list[object] = []
        if date_from is not None:
            clauses.append("d.lesson_date >= %s")
            params.append(date_from)
        if date_to is not None:
            clauses.append("d.lesson_date <= %s")
            params.append(date_to)
        if class_ids is not None:
            clauses.append(f"d.class_id IN ({in_clause(class_ids)})")
            params.extend(int(c) for c in class_ids)
        if teacher_id is not None:
            clauses.append(
                "EXISTS (SELECT 1 FROM lesson_periods tp WHERE tp.lesson_day_id = d.lesson_day_id AND tp.teacher_id=%s)"
            )
            params.append(int(teacher_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT d.lesson_day_id, d.class_id, c.class_name, d.lesson_date,
                       (SELECT COUNT(*) FROM lesson_periods p WHERE p.lesson_day_id = d.lesson_day_id) AS period_count
                FROM lesson_days d
                JOIN classes c ON c.class_id = d.class_id
                WHERE {where}
                ORDER BY d.lesson_date DESC, d.lesson_day_id DESC
                """,
                tuple(params),
            )
            return [
                LessonDaySummary(
                    lesson_day_id=int(r["lesson_day_id"]),
                    class_id=int(r["class_id"]),
                    class_name=r.get("class_name") or "-",
                    lesson_date=normalize_mysql_date(r["lesson_date"]),
                    period_count=int(r["period_count"]),
                )
                for r in fetchall(cur)
            ]

    def list_for_class(
        self,
        *,
        class_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Sequence[LessonDay]:
        clauses = ["d.class_id=%s"]
        params: list[object] = [int(class_id)]
        if date_from is not None:
            clauses.append("d.lesson_date >= %s")
            params.append(date_from)
        if date_to is not None:
            clauses.append("d.lesson_date <= %s")
            params.append(date_to)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT d.lesson_day_id, d.class_id, c.class_name, d.lesson_date
                FROM lesson_days d
                JOIN classes c ON c.class_id = d.class_id
                WHERE {' AND '.join(clauses)}
                ORDER BY d.lesson_date DESC
                """,
                tuple(params),
            )
            return self._load_days(cur, fetchall(cur))
