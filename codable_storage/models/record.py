"""
Record dataclass for rows of the backing table.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Record:
    """
    Represents one stored (key, value-bytes) pair.

    Attributes:
        key: The key the value is stored under.
        value: The encoded value.
        row_id: Backing store identifier, None until the record is persisted.
    """

    key: str
    value: bytes
    row_id: int | None = None
