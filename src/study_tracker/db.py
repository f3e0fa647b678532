"""Database initialization and key-value storage helpers."""
import os
import sqlite3
from pathlib import Path

DEFAULT_DB_PATH = os.environ.get(
    "STUDY_TRACKER_DB", str(Path.home() / ".study_tracker" / "tracker.db")
)

SCHEMA = """
CREATE TABLE IF NOT EXISTS storage (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating the storage table if it doesn't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


def get_item(db_path: str, key: str) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM storage WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else None


def set_item(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO storage (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def remove_item(db_path: str, key: str) -> None:
    conn = get_connection(db_path)
    conn.execute("DELETE FROM storage WHERE key = ?", (key,))
    conn.commit()
    conn.close()


def keys_with_prefix(db_path: str, prefix: str) -> list[str]:
    """All storage keys starting with prefix, in key order."""
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT key FROM storage WHERE substr(key, 1, ?) = ? ORDER BY key",
        (len(prefix), prefix),
    ).fetchall()
    conn.close()
    return [r["key"] for r in rows]
