"""
Tests for the process-wide default engine and location resolution.
"""

import os
import threading
from pathlib import Path

import pytest

from codable_storage import config, default_engine
from codable_storage.engine import default as default_module
from codable_storage.engine.engine import Engine


@pytest.fixture
def documents_dir(temp_dir, monkeypatch):
    """Point the documents directory at a temporary directory and reset the default engine."""
    monkeypatch.setenv(config.DOCUMENTS_DIR_ENV, temp_dir)
    monkeypatch.setattr(default_module, "_default", None)
    yield Path(temp_dir)
    if default_module._default is not None:
        default_module._default.close()


class TestLocation:
    """Tests for default location resolution."""

    def test_documents_override(self, temp_dir, monkeypatch):
        """Test the environment override wins."""
        monkeypatch.setenv(config.DOCUMENTS_DIR_ENV, temp_dir)
        assert config.documents_directory() == Path(temp_dir)

    def test_documents_default(self, monkeypatch):
        """Test the documents directory defaults to ~/Documents."""
        monkeypatch.delenv(config.DOCUMENTS_DIR_ENV, raising=False)
        assert config.documents_directory() == Path.home() / "Documents"

    def test_default_location(self, temp_dir, monkeypatch):
        """Test the default store path layout."""
        monkeypatch.setenv(config.DOCUMENTS_DIR_ENV, temp_dir)
        assert config.default_location() == Path(temp_dir) / "CodableStorage" / "storage.db"

    def test_validate_timeout(self):
        """Test timeout bounds."""
        assert config.validate_timeout(0) == 0.0
        assert config.validate_timeout(2) == 2.0
        with pytest.raises(ValueError):
            config.validate_timeout(-0.1)


class TestDefaultEngine:
    """Tests for default_engine()."""

    def test_lazy_creation(self, documents_dir):
        """Test nothing is created before first access."""
        assert default_module._default is None
        assert not (documents_dir / "CodableStorage").exists()

        engine = default_engine()

        assert engine.location == documents_dir / "CodableStorage" / "storage.db"
        assert os.path.isfile(engine.location)

    def test_same_instance(self, documents_dir):
        """Test repeated calls return one engine."""
        assert default_engine() is default_engine()

    def test_single_instance_across_threads(self, documents_dir):
        """Test concurrent first access constructs exactly one engine."""
        results = []
        barrier = threading.Barrier(8)

        def access() -> None:
            barrier.wait()
            results.append(default_engine())

        threads = [threading.Thread(target=access) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 8
        assert all(engine is results[0] for engine in results)

    async def test_default_engine_round_trip(self, documents_dir):
        """Test the default engine stores values."""
        engine = default_engine()
        await engine.aput({"a": 1}, "cfg")
        assert await engine.aget("cfg", dict) == {"a": 1}

    def test_explicit_default_path_creates_directory(self, documents_dir):
        """Test passing the default location explicitly still creates its directory."""
        with Engine(config.default_location()) as engine:
            assert engine.location == documents_dir / "CodableStorage" / "storage.db"
