from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import ClassGroup, Student, Teacher
from .repository import RosterRepository


_STUDENT_COLUMNS = "student_id, user_id, parent_user_id, full_name, school, grade, class_id"


def _row_to_student(r: dict) -> Student:
    return Student(
        student_id=int(r["student_id"]),
        user_id=int(r["user_id"]),
        parent_user_id=int(r["parent_user_id"]) if r.get("parent_user_id") is not None else None,
        name=r["full_name"],
        school=r.get("school") or "",
        grade=r.get("grade") or "",
        class_id=int(r["class_id"]) if r.get("class_id") is not None else None,
    )


def _row_to_teacher(r: dict) -> Teacher:
    return Teacher(teacher_id=int(r["teacher_id"]), user_id=int(r["user_id"]), name=r["full_name"])


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_classes(self, cur, rows: Sequence[dict]) -> list[ClassGroup]:
        if not rows:
            return []
        ids = [int(r["class_id"]) for r in rows]
        placeholders = in_clause(ids)

        cur.execute(
            f"SELECT class_id, teacher_id FROM class_teachers WHERE class_id IN ({placeholders}) ORDER BY position ASC",
            tuple(ids),
        )
        teachers: dict[int, list[int]] = {cid: [] for cid in ids}
        for r in fetchall(cur):
            teachers[int(r["class_id"])].append(int(r["teacher_id"]))

        cur.execute(
            f"SELECT class_id, student_id FROM class_students WHERE class_id IN ({placeholders}) ORDER BY position ASC",
            tuple(ids),
        )
        students: dict[int, list[int]] = {cid: [] for cid in ids}
        for r in fetchall(cur):
            students[int(r["class_id"])].append(int(r["student_id"]))

        return [
            ClassGroup(
                class_id=int(r["class_id"]),
                name=r["class_name"],
                description=r.get("description") or "",
                teacher_ids=tuple(teachers[int(r["class_id"])]),
                student_ids=tuple(students[int(r["class_id"])]),
            )
            for r in rows
        ]

    def get_class(self, class_id: int) -> Optional[ClassGroup]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT class_id, class_name, description FROM classes WHERE class_id=%s", (int(class_id),))
            row = fetchone(cur)
            if not row:
                return None
            return self._load_classes(cur, [row])[0]

    def list_classes(self) -> Sequence[ClassGroup]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT class_id, class_name, description FROM classes ORDER BY class_name ASC")
            return self._load_classes(cur, fetchall(cur))

    def list_classes_for_student(self, student_id: int) -> Sequence[ClassGroup]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT c.class_id, c.class_name, c.description
                FROM classes c
                JOIN class_students cs ON cs.class_id = c.class_id
                WHERE cs.student_id=%s
                ORDER BY c.class_name ASC
                """,
                (int(student_id),),
            )
            return self._load_classes(cur, fetchall(cur))

    def list_classes_for_teacher(self, teacher_id: int) -> Sequence[ClassGroup]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT c.class_id, c.class_name, c.description
                FROM classes c
                JOIN class_teachers ct ON ct.class_id = c.class_id
                WHERE ct.teacher_id=%s
                ORDER BY c.class_name ASC
                """,
                (int(teacher_id),),
            )
            return self._load_classes(cur, fetchall(cur))

    def get_teacher(self, teacher_id: int) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT teacher_id, user_id, full_name FROM teachers WHERE teacher_id=%s", (int(teacher_id),))
            row = fetchone(cur)
            return _row_to_teacher(row) if row else None

    def get_teacher_by_user(self, user_id: int) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT teacher_id, user_id, full_name FROM teachers WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _row_to_teacher(row) if row else None

    def get_student(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_STUDENT_COLUMNS} FROM students WHERE student_id=%s", (int(student_id),))
            row = fetchone(cur)
            return _row_to_student(row) if row else None

    def get_student_by_user(self, user_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_STUDENT_COLUMNS} FROM students WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _row_to_student(row) if row else None

    def get_student_by_parent_user(self, user_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_STUDENT_COLUMNS} FROM students WHERE parent_user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _row_to_student(row) if row else None

    def list_students(self, student_ids: Sequence[int]) -> Sequence[Student]:
        ids = [int(s) for s in student_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_STUDENT_COLUMNS} FROM students WHERE student_id IN ({in_clause(ids)})",
                tuple(ids),
            )
            by_id = {int(r["student_id"]): _row_to_student(r) for r in fetchall(cur)}
            return [by_id[sid] for sid in ids if sid in by_id]

    def add_students(self, *, class_id: int, student_ids: Sequence[int]) -> None:
        ids = [int(s) for s in student_ids]
        if not ids:
            return
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COALESCE(MAX(position), -1) AS last_pos FROM class_students WHERE class_id=%s",
                (int(class_id),),
            )
            position = int(fetchone(cur)["last_pos"]) + 1
            for sid in ids:
                cur.execute(
                    "INSERT INTO class_students(class_id, student_id, position) VALUES(%s,%s,%s)",
                    (int(class_id), sid, position),
                )
                position += 1
            cur.execute(
                f"UPDATE students SET class_id=%s WHERE student_id IN ({in_clause(ids)})",
                (int(class_id), *ids),
            )

    def remove_student(self, *, class_id: int, student_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM class_students WHERE class_id=%s AND student_id=%s",
                (int(class_id), int(student_id)),
            )
            cur.execute(
                "UPDATE students SET class_id=NULL WHERE student_id=%s AND class_id=%s",
                (int(student_id), int(class_id)),
            )

    def add_teacher(self, *, class_id: int, teacher_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO class_teachers(class_id, teacher_id, position)
                SELECT %s, %s, COALESCE(MAX(position), -1) + 1 FROM class_teachers WHERE class_id=%s
                """,
                (int(class_id), int(teacher_id), int(class_id)),
            )

    def remove_teacher(self, *, class_id: int, teacher_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM class_teachers WHERE class_id=%s AND teacher_id=%s",
                (int(class_id), int(teacher_id)),
            )
