"""Schema and demo-data helpers used by create_app() and the scripts/ entry points."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Union

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig, DatabaseConnection

logger = logging.getLogger(__name__)

# login_id -> demo password; seed.sql inserts these accounts with a placeholder hash.
DEMO_PASSWORDS = {
    "teacher.kim": "teacher123",
    "teacher.lee": "teacher123",
    "student.park": "student123",
    "student.choi": "student123",
    "parent.park": "parent123",
}


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql usable regardless of the configured database name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal splitter for schema/seed files (handles ';' inside quotes, skips '--' comments).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False
    lines = [line for line in sql.splitlines() if not line.lstrip().startswith("--")]

    for ch in "\n".join(lines):
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _connect(config: DBConfig, *, with_database: bool = True):
    params = dict(host=config.host, port=config.port, user=config.user, password=config.password)
    if with_database:
        params["database"] = config.database
    return mysql.connector.connect(use_pure=True, **params)


def ensure_database_exists(db_config: dict) -> None:
    config = DatabaseConnection.from_settings(db_config)
    conn = _connect(config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def _run_sql_file(db_config: dict, path: Union[str, Path]) -> int:
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))
    conn = _connect(DatabaseConnection.from_settings(db_config))
    count = 0
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    except mysql.connector.Error:
        conn.rollback()
        raise
    finally:
        conn.close()
    return count


def apply_schema(db_config: dict, *, schema_path: Union[str, Path]) -> None:
    ensure_database_exists(db_config)
    count = _run_sql_file(db_config, schema_path)
    logger.info("Applied schema %s (%s statements)", schema_path, count)


def apply_seed_sql(db_config: dict, *, seed_path: Union[str, Path]) -> None:
    count = _run_sql_file(db_config, seed_path)
    logger.info("Applied seed %s (%s statements)", seed_path, count)


def ensure_demo_passwords(db_config: dict) -> None:
    """Replace the placeholder hashes of the seeded demo accounts with real ones."""
    conn = _connect(DatabaseConnection.from_settings(db_config))
    try:
        cur = conn.cursor()
        for login_id, password in DEMO_PASSWORDS.items():
            cur.execute(
                "UPDATE users SET password_hash=%s, is_active=1 WHERE login_id=%s AND password_hash='CHANGE_ME'",
                (generate_password_hash(password), login_id),
            )
        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(DatabaseConnection.from_settings(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
