"""
Shared pytest fixtures for storage engine tests.
"""

import os
import tempfile

import pytest
import pytest_asyncio

from codable_storage.engine.engine import Engine
from codable_storage.models.sqlite_table import SQLiteRecordTable
from helpers import CompletionWaiter


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def store_path(temp_dir):
    """Provide a path for a store file."""
    return os.path.join(temp_dir, "storage.db")


@pytest_asyncio.fixture
async def engine(store_path):
    """Provide an Engine bound to a fresh store file."""
    async with Engine(store_path) as eng:
        yield eng


@pytest.fixture
def sync_engine(store_path):
    """Provide an Engine for tests that run without an event loop."""
    with Engine(store_path) as eng:
        yield eng


@pytest.fixture
def table(store_path):
    """Provide an open SQLiteRecordTable."""
    tbl = SQLiteRecordTable(file_path=store_path)
    tbl.open()
    yield tbl
    tbl.close()


@pytest.fixture
def waiter():
    """Provide a thread-safe completion recorder."""
    return CompletionWaiter()
