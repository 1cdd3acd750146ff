"""
Abstract base classes for the storage engine.
"""

from codable_storage.interfaces.codec import Codec
from codable_storage.interfaces.record_table import RecordTable

__all__ = ["Codec", "RecordTable"]
