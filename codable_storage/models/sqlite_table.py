"""
SQLiteRecordTable - RecordTable stored in a single SQLite file.
"""

import logging
import sqlite3
from collections.abc import Iterable
from typing import Any

from codable_storage.interfaces.record_table import RecordTable
from codable_storage.models.exceptions import BackingStoreError
from codable_storage.models.record import Record

logger = logging.getLogger(__name__)


class SQLiteRecordTable(RecordTable):
    """
    Record table backed by SQLite.

    Schema (recreated identically on every open, no migrations):
        TABLE "Data" ("key" TEXT COLLATE BINARY, "value" BLOB)
        INDEX "key" ON "Data" ("key")

    Transactions are explicit: the connection runs in autocommit mode and
    writes are wrapped in BEGIN IMMEDIATE / COMMIT so the write lock is taken
    up front instead of on the first modifying statement.

    The connection is created with check_same_thread=False: it is opened on
    the thread constructing the engine and then used only from the engine's
    worker thread.
    """

    _CREATE_TABLE = (
        'CREATE TABLE IF NOT EXISTS "Data" ('
        '"key" TEXT COLLATE BINARY, '
        '"value" BLOB)'
    )
    _CREATE_INDEX = 'CREATE INDEX IF NOT EXISTS "key" ON "Data" ("key" COLLATE BINARY)'

    def __init__(self, file_path: str, timeout: float = 5.0) -> None:
        """
        Initialize the table.

        Args:
            file_path: Path of the SQLite database file.
            timeout: Seconds to wait for a lock held by another connection.
        """
        self.file_path = file_path
        self._timeout = timeout
        self._conn: sqlite3.Connection | None = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> None:
        try:
            conn = sqlite3.connect(
                self.file_path,
                timeout=self._timeout,
                isolation_level=None,
                check_same_thread=False,
            )
        except (sqlite3.Error, ValueError, OSError) as e:
            # ValueError: paths sqlite cannot represent, such as an embedded NUL
            raise BackingStoreError(f"Cannot open store at {self.file_path!r}: {e}") from e

        try:
            conn.execute(self._CREATE_TABLE)
            conn.execute(self._CREATE_INDEX)
        except sqlite3.Error as e:
            conn.close()
            raise BackingStoreError(f"Cannot create schema at {self.file_path}: {e}") from e

        self._conn = conn
        logger.debug("Opened record table at %s", self.file_path)

    def close(self) -> None:
        if self._conn is None:
            return
        try:
            self._conn.close()
        except sqlite3.Error as e:
            raise BackingStoreError(f"Cannot close store at {self.file_path}: {e}") from e
        finally:
            self._conn = None
        logger.debug("Closed record table at %s", self.file_path)

    def begin(self) -> None:
        self._execute("BEGIN IMMEDIATE")

    def commit(self) -> None:
        self._execute("COMMIT")

    def rollback(self) -> None:
        conn = self._connection()
        if not conn.in_transaction:
            return
        self._execute("ROLLBACK")

    def fetch(self, key: str) -> list[Record]:
        cursor = self._execute(
            'SELECT rowid, "key", "value" FROM "Data" WHERE "key" = ? ORDER BY rowid',
            (key,),
        )
        try:
            rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise BackingStoreError(f"Fetch failed for key {key!r}: {e}") from e
        return [Record(key=row[1], value=self._as_bytes(row[2]), row_id=row[0]) for row in rows]

    def insert(self, record: Record) -> None:
        self._execute(
            'INSERT INTO "Data" ("key", "value") VALUES (?, ?)',
            (record.key, sqlite3.Binary(record.value)),
        )

    def delete(self, records: Iterable[Record]) -> None:
        row_ids = []
        for record in records:
            if record.row_id is None:
                raise ValueError(f"Record for key {record.key!r} was never persisted")
            row_ids.append((record.row_id,))
        if not row_ids:
            return

        conn = self._connection()
        try:
            conn.executemany('DELETE FROM "Data" WHERE rowid = ?', row_ids)
        except sqlite3.Error as e:
            raise BackingStoreError(f"Delete failed: {e}") from e

    def delete_all(self) -> None:
        self._execute('DELETE FROM "Data"')

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise BackingStoreError(f"Store at {self.file_path} is not open")
        return self._conn

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        conn = self._connection()
        try:
            return conn.execute(sql, params)
        except sqlite3.Error as e:
            raise BackingStoreError(f"{sql.split()[0]} failed: {e}") from e

    @staticmethod
    def _as_bytes(value: Any) -> bytes:
        # Rows written by other clients may hold TEXT, INTEGER, REAL or NULL instead of BLOB
        if value is None:
            return b""
        if isinstance(value, (str, int, float)):
            return str(value).encode("utf-8")
        return bytes(value)
