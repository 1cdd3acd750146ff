"""
Test helpers shared across storage engine tests.
"""

import sqlite3
import threading
from contextlib import closing


class CompletionWaiter:
    """Collects completion calls made from any thread."""

    def __init__(self):
        self.calls = []
        self.threads = []
        self._event = threading.Event()

    def __call__(self, *args):
        self.calls.append(args)
        self.threads.append(threading.current_thread())
        self._event.set()

    def wait(self, timeout: float = 5.0) -> tuple:
        assert self._event.wait(timeout), "completion was never called"
        return self.calls[0]


def write_raw(path: str, key: str, value: bytes) -> None:
    """Insert a row directly, bypassing the engine (a foreign writer)."""
    with closing(sqlite3.connect(path)) as conn:
        conn.execute('INSERT INTO "Data" ("key", "value") VALUES (?, ?)', (key, value))
        conn.commit()


def count_rows(path: str, key: str | None = None) -> int:
    """Count rows in the Data table, optionally for one key."""
    with closing(sqlite3.connect(path)) as conn:
        if key is None:
            return conn.execute('SELECT COUNT(*) FROM "Data"').fetchone()[0]
        return conn.execute('SELECT COUNT(*) FROM "Data" WHERE "key" = ?', (key,)).fetchone()[0]
