import os
import tempfile

import pytest

os.environ.setdefault("DB_PATH", os.path.join(tempfile.gettempdir(), "mathkid-test.sqlite3"))

from mathkid.db.store import KeyValueStore  # noqa: E402


class SequenceRandom:
    """randint() that replays fixed values and records the bounds it was asked for."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = []

    def randint(self, a, b):
        self.calls.append((a, b))
        value = self.values.pop(0)
        assert a <= value <= b, f"{value} not in [{a}, {b}]"
        return value


@pytest.fixture
def store(tmp_path):
    s = KeyValueStore(str(tmp_path / "mathkid.sqlite3"))
    assert s.init_db()
    return s
