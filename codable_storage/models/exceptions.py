"""
Custom exceptions for the storage engine.
"""


class StorageError(Exception):
    """Base class for every error reported by the storage engine."""


class InitializationError(StorageError):
    """
    Raised when an engine has no usable execution context.

    This happens when the backing store could not be created or opened
    at construction time, or after the engine has been closed.
    """

    def __init__(self, reason: str | None = None):
        """
        Initialize initialization error.

        Args:
            reason: Why the engine failed to initialize, if known.
        """
        self.reason = reason
        message = "Storage engine is not initialized"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class EncodeError(StorageError):
    """Raised when a value cannot be serialized to bytes."""


class DecodeError(StorageError):
    """Raised when stored bytes cannot be decoded into the requested type."""


class BackingStoreError(StorageError):
    """
    Raised when the backing store fails a fetch, insert, delete or commit.

    The driver exception is available as ``__cause__``.
    """
