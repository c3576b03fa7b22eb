from pathlib import Path

from src.academy_ledger.academy_ledger.database.bootstrap import _iter_sql_statements, _strip_create_db_and_use

REPO_ROOT = Path(__file__).resolve().parents[2]


def test_splitter_keeps_semicolons_inside_quotes_and_drops_comments():
    sql = "-- header\nINSERT INTO t VALUES ('a;b');\nSELECT 1;\n"

    assert list(_iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('a;b')", "SELECT 1"]


def test_schema_file_is_independent_of_database_name():
    sql = _strip_create_db_and_use((REPO_ROOT / "database" / "schema.sql").read_text(encoding="utf-8"))
    statements = list(_iter_sql_statements(sql))

    assert not any(s.upper().startswith(("CREATE DATABASE", "USE ")) for s in statements)
    assert sum(1 for s in statements if s.startswith("CREATE TABLE IF NOT EXISTS")) == 11
