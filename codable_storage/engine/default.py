"""
Process-wide default engine.
"""

import threading

from codable_storage.engine.engine import Engine

# Created on first access of default_engine(), never replaced or closed
_default: Engine | None = None
_default_lock = threading.Lock()


def default_engine() -> Engine:
    """
    Return the process-wide engine bound to the default location.

    The engine is constructed on first call; later calls return the same
    instance. Thread-safe: double-checked locking makes sure only one engine
    is ever constructed. If the default location is unusable the returned
    engine is degraded, and stays so for the life of the process.
    """
    global _default

    if _default is not None:
        return _default

    with _default_lock:
        if _default is None:
            _default = Engine()
    return _default
