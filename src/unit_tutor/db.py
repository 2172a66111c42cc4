"""Database initialization and the key/value store used for saved progress."""
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

DEFAULT_DB_PATH = str(Path.home() / ".unit_tutor" / "tutor.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value BLOB NOT NULL,
    updated_at TEXT
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


class SqliteStore:
    """Blob storage keyed by name, one row per key."""

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        self.db_path = db_path

    def load(self, key: str) -> Optional[bytes]:
        conn = get_connection(self.db_path)
        try:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        return bytes(row["value"]) if row else None

    def save(self, key: str, blob: bytes) -> None:
        conn = get_connection(self.db_path)
        try:
            conn.execute(
                "INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at",
                (key, blob, datetime.now().isoformat()),
            )
            conn.commit()
        finally:
            conn.close()


class MemoryStore:
    """In-process store for tests and throwaway sessions."""

    def __init__(self):
        self.data = {}

    def load(self, key: str) -> Optional[bytes]:
        return self.data.get(key)

    def save(self, key: str, blob: bytes) -> None:
        self.data[key] = bytes(blob)
