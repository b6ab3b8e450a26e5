import sqlite3
from contextlib import contextmanager
from typing import Optional

from config import DB_PATH


def init_db():
    with sqlite3.connect(DB_PATH) as conn:
        # Two string slots: treatment start date and the serialized dose record
        conn.execute("""
            CREATE TABLE IF NOT EXISTS app_storage (
                key   TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        conn.commit()


@contextmanager
def get_db():
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def read_slot(key: str) -> Optional[str]:
    with get_db() as conn:
        row = conn.execute("SELECT value FROM app_storage WHERE key=?", (key,)).fetchone()
    return row["value"] if row else None


def write_slot(key: str, value: str):
    with get_db() as conn:
        conn.execute(
            "INSERT OR REPLACE INTO app_storage (key, value) VALUES (?, ?)", (key, value)
        )
        conn.commit()


def delete_slot(key: str):
    with get_db() as conn:
        conn.execute("DELETE FROM app_storage WHERE key=?", (key,))
        conn.commit()


class SlotStorage:
    """Persistence collaborator backed by the app_storage table."""

    def read(self, key: str) -> Optional[str]:
        return read_slot(key)

    def write(self, key: str, value: str):
        write_slot(key, value)

    def delete(self, key: str):
        delete_slot(key)


class MemoryStorage:
    """Dict-backed storage with the same interface as SlotStorage."""

    def __init__(self, initial: Optional[dict] = None):
        self.slots = dict(initial or {})
        self.writes = 0

    def read(self, key: str) -> Optional[str]:
        return self.slots.get(key)

    def write(self, key: str, value: str):
        self.slots[key] = value
        self.writes += 1

    def delete(self, key: str):
        self.slots.pop(key, None)
