import datetime as dt
import sqlite3
import threading
from pathlib import Path
from typing import Optional, Union


MEMORY = ":memory:"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


def connect(db_path: Union[Path, str]) -> sqlite3.Connection:
    """Connect to the SQLite database and create the key-value table."""
    if str(db_path) != MEMORY:
        db_path = Path(db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
    # Recommendation generation publishes from a worker thread.
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.executescript(SCHEMA_SQL)
    conn.commit()
    return conn


class KeyValueStore:
    """Flat key -> text blob storage on top of a single SQLite table."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            row = self.conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        if row:
            return row["value"]
        return None

    def set(self, key: str, value: str) -> None:
        now = dt.datetime.now().isoformat(timespec="seconds")
        with self._lock:
            self.conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, value, now),
            )
            self.conn.commit()

    def delete(self, key: str) -> None:
        with self._lock:
            self.conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            self.conn.commit()

    def keys(self) -> list[str]:
        with self._lock:
            rows = self.conn.execute("SELECT key FROM kv_store ORDER BY key").fetchall()
        return [row["key"] for row in rows]
