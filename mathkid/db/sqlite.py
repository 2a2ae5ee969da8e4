import sqlite3

from mathkid.config import DB_PATH


def db_conn(path: str = None):
    conn = sqlite3.connect(path or DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn
