"""
Durable key-value storage for structured values.

This package provides a single-table store with:
- get(key, value_type) - Read and decode the value under a key
- put(value, key) - Atomically replace the value under a key (None removes it)
- clear() - Remove every value in one transaction
- Completion-callback and awaitable forms of each operation
- default_engine() - Process-wide engine at the default location
"""

from codable_storage.engine.default import default_engine
from codable_storage.engine.engine import Engine
from codable_storage.models.exceptions import (
    BackingStoreError,
    DecodeError,
    EncodeError,
    InitializationError,
    StorageError,
)

__all__ = [
    "Engine",
    "default_engine",
    "StorageError",
    "InitializationError",
    "EncodeError",
    "DecodeError",
    "BackingStoreError",
]
