"""
Unit tests for cache directory management.
"""

import os

import pytest

from idekit.core.directory import (
    CACHE_SUBDIRECTORIES,
    ensure_global_cache_structure,
    get_global_cache_dir,
    verify_directory_writable,
)


class TestGetGlobalCacheDir:
    """Test cache home resolution."""

    def test_env_override(self, cache_home):
        """Test IDEKIT_CACHE_DIR overrides the default location."""
        assert get_global_cache_dir() == cache_home

    @pytest.mark.skipif(os.name == "nt", reason="Unix home layout")
    def test_default_under_home(self, isolated_home, monkeypatch):
        """Test the default cache home is ~/.idekit."""
        monkeypatch.delenv("IDEKIT_CACHE_DIR", raising=False)
        assert get_global_cache_dir() == isolated_home / ".idekit"


class TestEnsureGlobalCacheStructure:
    """Test cache layout creation."""

    def test_creates_layout(self, temp_dir):
        """Test every subdirectory is created and returned."""
        root = temp_dir / "cache"
        layout = ensure_global_cache_structure(root)

        assert layout["root"] == root
        for name in CACHE_SUBDIRECTORIES:
            assert layout[name] == root / name
            assert layout[name].is_dir()

    def test_idempotent(self, temp_dir):
        """Test creating the layout twice is harmless."""
        root = temp_dir / "cache"
        ensure_global_cache_structure(root)
        (root / "ides" / "IC-2021.3.2").mkdir()

        ensure_global_cache_structure(root)
        assert (root / "ides" / "IC-2021.3.2").is_dir()

    def test_uses_cache_home(self, cache_home):
        """Test the cache home is used when no root is given."""
        layout = ensure_global_cache_structure()
        assert layout["root"] == cache_home
        assert (cache_home / "jbr").is_dir()


class TestVerifyDirectoryWritable:
    """Test writability check."""

    def test_writable(self, temp_dir):
        """Test a temporary directory is writable."""
        assert verify_directory_writable(temp_dir)

    def test_missing(self, temp_dir):
        """Test a missing directory is not writable."""
        assert not verify_directory_writable(temp_dir / "missing")
