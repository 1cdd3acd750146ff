"""
RecordTable abstract base class for transactional key -> bytes storage.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from codable_storage.models.record import Record


class RecordTable(ABC):
    """
    Abstract base class for the durable table behind an engine.

    The table holds (key, value-bytes) records. Keys are expected to be
    unique but the table itself does not enforce it; callers fetch, delete
    and insert inside one transaction to keep at most one record per key.

    Every method raises BackingStoreError on failure.

    Implementations:
    - SQLiteRecordTable: single SQLite file
    """

    @abstractmethod
    def open(self) -> None:
        """Attach the store and create the schema if it does not exist."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the store handle."""
        pass

    @abstractmethod
    def begin(self) -> None:
        """Start a write transaction."""
        pass

    @abstractmethod
    def commit(self) -> None:
        """Make every change since begin() durable."""
        pass

    @abstractmethod
    def rollback(self) -> None:
        """Discard every change since begin()."""
        pass

    @abstractmethod
    def fetch(self, key: str) -> list[Record]:
        """
        Fetch all records stored under a key.

        Args:
            key: The exact key to match.

        Returns:
            Matching records in insertion order (normally zero or one).
        """
        pass

    @abstractmethod
    def insert(self, record: Record) -> None:
        """
        Insert a new record.

        Args:
            record: The record to insert.
        """
        pass

    @abstractmethod
    def delete(self, records: Iterable[Record]) -> None:
        """
        Delete previously fetched records.

        Args:
            records: Records returned by fetch().
        """
        pass

    @abstractmethod
    def delete_all(self) -> None:
        """Delete every record in the table as one batch."""
        pass
