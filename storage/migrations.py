"""Ad-hoc database migrations for SmartTask."""

from __future__ import annotations

from sqlalchemy import text


def _column_exists(conn, table: str, column: str) -> bool:
    result = conn.execute(text(f"PRAGMA table_info('{table}')"))
    return any(row[1] == column for row in result)


def ensure_task_columns(conn) -> None:
    # databases created before subtasks existed lack the tree columns
    columns = {
        "description": "VARCHAR NOT NULL DEFAULT ''",
        "parent_id": "CHAR(32) REFERENCES task(id)",
        "position": "INTEGER NOT NULL DEFAULT 0",
    }
    for name, ddl_type in columns.items():
        if not _column_exists(conn, "task", name):
            conn.execute(text(f"ALTER TABLE task ADD COLUMN {name} {ddl_type}"))

    conn.execute(text("UPDATE task SET description = '' WHERE description IS NULL"))


def ensure_task_indexes(conn) -> None:
    conn.execute(text("CREATE INDEX IF NOT EXISTS ix_task_parent_id ON task (parent_id)"))
    conn.execute(text("CREATE INDEX IF NOT EXISTS ix_task_deadline ON task (deadline)"))


def run_all(engine) -> None:
    with engine.begin() as conn:
        ensure_task_columns(conn)
        ensure_task_indexes(conn)


__all__ = ["run_all"]
