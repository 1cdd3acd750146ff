"""
Storage engine: execution context, scheduling and the Engine API.
"""

from codable_storage.engine.engine import Engine

__all__ = ["Engine"]
