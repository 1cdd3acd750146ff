"""
Data models for the storage engine.
"""

from codable_storage.models.codec import JSONCodec
from codable_storage.models.exceptions import (
    BackingStoreError,
    DecodeError,
    EncodeError,
    InitializationError,
    StorageError,
)
from codable_storage.models.record import Record

__all__ = [
    "JSONCodec",
    "Record",
    "StorageError",
    "InitializationError",
    "EncodeError",
    "DecodeError",
    "BackingStoreError",
]
