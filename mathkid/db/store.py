import json
import logging
import sqlite3

from mathkid.config import DB_PATH, GAME_STATS_KEY, PROGRESS_KEY, SETTINGS_KEY
from mathkid.db.sqlite import db_conn

logger = logging.getLogger(__name__)

KNOWN_KEYS = (SETTINGS_KEY, GAME_STATS_KEY, PROGRESS_KEY)


class KeyValueStore:
    """JSON values in a single sqlite table.

    Errors never escape: reads return None and writes return False, so
    callers fall back to defaults when storage is unavailable.
    """

    def __init__(self, path: str = DB_PATH):
        self.path = path

    def init_db(self) -> bool:
        try:
            conn = db_conn(self.path)
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                  key TEXT PRIMARY KEY,
                  value TEXT NOT NULL,
                  updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            conn.commit()
            conn.close()
            return True
        except sqlite3.Error as e:
            logger.error(f"Error initializing storage at {self.path}: {e}")
            return False

    def is_available(self) -> bool:
        try:
            conn = db_conn(self.path)
            conn.execute("SELECT 1 FROM kv LIMIT 1").fetchall()
            conn.close()
            return True
        except sqlite3.Error as e:
            logger.warning(f"Storage not available: {e}")
            return False

    def get(self, key: str):
        try:
            conn = db_conn(self.path)
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            conn.close()
        except sqlite3.Error as e:
            logger.error(f"Error getting storage item {key}: {e}")
            return None

        if not row:
            return None
        try:
            return json.loads(row["value"])
        except ValueError as e:
            logger.error(f"Corrupted storage item {key}: {e}")
            return None

    def set(self, key: str, value) -> bool:
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.error(f"Error encoding storage item {key}: {e}")
            return False

        try:
            conn = db_conn(self.path)
            conn.execute(
                """
                INSERT INTO kv(key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, payload),
            )
            conn.commit()
            conn.close()
            return True
        except sqlite3.Error as e:
            logger.error(f"Error setting storage item {key}: {e}")
            return False

    def remove(self, key: str) -> bool:
        try:
            conn = db_conn(self.path)
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()
            conn.close()
            return True
        except sqlite3.Error as e:
            logger.error(f"Error removing storage item {key}: {e}")
            return False

    def clear(self) -> bool:
        try:
            conn = db_conn(self.path)
            conn.executemany("DELETE FROM kv WHERE key = ?", [(k,) for k in KNOWN_KEYS])
            conn.commit()
            conn.close()
            return True
        except sqlite3.Error as e:
            logger.error(f"Error clearing storage: {e}")
            return False

    def usage(self):
        """Stored size of each known key, in characters of JSON."""
        try:
            conn = db_conn(self.path)
            marks = ", ".join("?" for _ in KNOWN_KEYS)
            rows = conn.execute(f"SELECT key, length(value) AS size FROM kv WHERE key IN ({marks})", KNOWN_KEYS).fetchall()
            conn.close()
        except sqlite3.Error as e:
            logger.error(f"Error reading storage usage: {e}")
            return None

        usage = {row["key"]: row["size"] for row in rows}
        return {"usage": usage, "total": sum(usage.values())}
