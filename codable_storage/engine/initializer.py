"""
StoreInitializer - Resolve the store location and open the backing table.
"""

import os
from pathlib import Path

from codable_storage import config
from codable_storage.models.exceptions import BackingStoreError, InitializationError
from codable_storage.models.sqlite_table import SQLiteRecordTable


class StoreInitializer:
    """
    Handles engine startup.

    Responsibilities:
    - Resolve the store location (explicit path or the default location)
    - Create the default directory, with intermediate directories
    - Open the record table and create its schema
    """

    def __init__(
        self,
        location: str | os.PathLike | None = None,
        timeout: float = config.DEFAULT_TIMEOUT,
    ) -> None:
        """
        Initialize the store initializer.

        Args:
            location: Explicit store file, or None for the default location.
            timeout: Lock wait passed to the record table.
        """
        self._location = location
        self._timeout = timeout

    def resolve_location(self) -> Path:
        """
        Resolve the store file path.

        Returns:
            The explicit location, or the default location.

        Raises:
            InitializationError: If the default location cannot be determined.
        """
        if self._location is not None:
            return Path(os.fspath(self._location))
        try:
            return config.default_location()
        except RuntimeError as e:
            raise InitializationError(f"No documents directory: {e}") from e

    def _is_default(self, location: Path) -> bool:
        if self._location is None:
            return True
        try:
            return location == config.default_location()
        except RuntimeError:
            return False

    def open(self) -> tuple[SQLiteRecordTable, Path]:
        """
        Open the record table at the resolved location.

        Returns:
            Tuple of:
            - The opened record table
            - The resolved location

        Raises:
            InitializationError: If the directory or the store cannot be created.
        """
        location = self.resolve_location()

        if self._is_default(location):
            try:
                location.parent.mkdir(parents=True, exist_ok=True)
            except (OSError, ValueError) as e:
                raise InitializationError(
                    f"Cannot create directory {location.parent}: {e}"
                ) from e

        table = SQLiteRecordTable(file_path=str(location), timeout=self._timeout)
        try:
            table.open()
        except BackingStoreError as e:
            raise InitializationError(str(e)) from e

        return table, location
