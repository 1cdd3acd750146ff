"""
Defaults and location resolution for storage engines.
"""

import os
from pathlib import Path

# Subdirectory of the documents directory holding the default store
DEFAULT_DIRECTORY_NAME = "CodableStorage"

# File name of the default store
DEFAULT_FILE_NAME = "storage.db"

# Seconds to wait on a store locked by another connection
DEFAULT_TIMEOUT = 5.0

# Maximum accepted lock wait (1 minute)
MAX_TIMEOUT = 60.0

# Environment variable overriding the per-user documents directory
DOCUMENTS_DIR_ENV = "CODABLE_STORAGE_DOCUMENTS_DIR"


def documents_directory() -> Path:
    """
    Return the per-user documents directory.

    Uses $CODABLE_STORAGE_DOCUMENTS_DIR when set, ~/Documents otherwise.

    Raises:
        RuntimeError: If the home directory cannot be determined.
    """
    override = os.environ.get(DOCUMENTS_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / "Documents"


def default_directory() -> Path:
    """Return the directory holding the default store."""
    return documents_directory() / DEFAULT_DIRECTORY_NAME


def default_location() -> Path:
    """Return the path of the default store file."""
    return default_directory() / DEFAULT_FILE_NAME


def validate_timeout(timeout: float) -> float:
    """
    Validate a backing store lock timeout.

    Args:
        timeout: Seconds to wait for a lock.

    Returns:
        The timeout as a float.
    """
    if timeout < 0:
        raise ValueError(f"timeout must be >= 0, got {timeout}")
    if timeout > MAX_TIMEOUT:
        raise ValueError(f"timeout cannot exceed {MAX_TIMEOUT}s, got {timeout}")
    return float(timeout)
