import sqlite3

from constants import SCHEMA_VERSION, TABLE_SCHEMA_VERSION


def _ensure_table(conn: sqlite3.Connection):
    conn.execute(f"""
        CREATE TABLE IF NOT EXISTS {TABLE_SCHEMA_VERSION}(
            id INTEGER PRIMARY KEY CHECK (id=1),
            version TEXT NOT NULL
        );
    """)


def get_current_version(conn: sqlite3.Connection) -> str | None:
    _ensure_table(conn)
    row = conn.execute(f"SELECT version FROM {TABLE_SCHEMA_VERSION} WHERE id=1;").fetchone()
    if row is None:
        return None
    return row[0]


def ensure_version(conn: sqlite3.Connection) -> str:
    """Record SCHEMA_VERSION on a fresh database; return the stored version."""
    current = get_current_version(conn)
    if current is None:
        conn.execute(
            f"INSERT INTO {TABLE_SCHEMA_VERSION}(id, version) VALUES (1, ?);",
            (SCHEMA_VERSION,),
        )
        current = SCHEMA_VERSION
    return current
