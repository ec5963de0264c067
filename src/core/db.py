"""SQLite key/value store backing durable client sessions."""

import sqlite3
from datetime import datetime
from pathlib import Path

_ITEMS_TABLE = """
CREATE TABLE IF NOT EXISTS storage_items (
    key         TEXT PRIMARY KEY,
    value       TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
"""


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_ITEMS_TABLE)
    conn.commit()
    return conn


def get_item(conn: sqlite3.Connection, key: str) -> str | None:
    """Return the stored value for key, or None."""
    row = conn.execute(
        "SELECT value FROM storage_items WHERE key = ?",
        (key,),
    ).fetchone()
    if row is None:
        return None
    return row["value"]  # type: ignore[no-any-return]


def set_item(conn: sqlite3.Connection, key: str, value: str) -> None:
    """Insert or replace the value for key."""
    conn.execute(
        """
        INSERT INTO storage_items (key, value, updated_at)
        VALUES (?, ?, ?)
        ON CONFLICT(key)
        DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
        """,
        (key, value, datetime.now().isoformat()),
    )
    conn.commit()


def remove_item(conn: sqlite3.Connection, key: str) -> bool:
    """Delete key. Returns True if a row was removed."""
    cursor = conn.execute("DELETE FROM storage_items WHERE key = ?", (key,))
    conn.commit()
    return cursor.rowcount > 0


def clear_items(conn: sqlite3.Connection) -> int:
    """Delete every stored item. Returns the number of rows removed."""
    cursor = conn.execute("DELETE FROM storage_items")
    conn.commit()
    return cursor.rowcount
