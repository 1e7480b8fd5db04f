"""
Unit tests for the artifact cache registry.
"""

import json
from unittest.mock import patch

import pytest
from filelock import Timeout

from idekit.core.cache_registry import ArtifactCacheRegistry
from idekit.core.exceptions import RegistryError, RegistryLockTimeout


@pytest.fixture
def registry(temp_dir):
    return ArtifactCacheRegistry(temp_dir / "registry.json", lock_timeout=1)


class TestArtifactCacheRegistry:
    """Test ArtifactCacheRegistry."""

    def test_empty_registry(self, registry):
        """Test a new registry has no entries."""
        assert registry.list_entries() == []
        assert registry.get("missing") is None

    def test_record_and_get(self, registry, temp_dir):
        """Test recording an artifact."""
        path = temp_dir / "a.jar"
        path.write_bytes(b"")

        registry.record("g:a:1@jar", path=path, source_url="https://repo/a.jar")

        entry = registry.get("g:a:1@jar")
        assert entry["path"] == str(path.resolve())
        assert entry["source_url"] == "https://repo/a.jar"
        assert "resolved" in entry

    def test_record_merges_fields(self, registry, temp_dir):
        """Test a later extraction merges into the download entry."""
        registry.record("key", path=temp_dir / "a.zip", source_url="https://repo/a.zip")
        registry.record("key", extracted=temp_dir / "a")

        entry = registry.get("key")
        assert entry["source_url"] == "https://repo/a.zip"
        assert entry["extracted"] == str((temp_dir / "a").resolve())

    def test_registry_file_format(self, registry, temp_dir):
        """Test the registry is persisted as versioned JSON."""
        registry.record("key", source_url="https://repo/x")

        data = json.loads((temp_dir / "registry.json").read_text())
        assert data["version"] == 1
        assert "key" in data["artifacts"]

    def test_list_entries_sorted(self, registry):
        """Test entries are listed in sorted order."""
        registry.record("b")
        registry.record("a")
        assert registry.list_entries() == ["a", "b"]

    def test_forget(self, registry):
        """Test forgetting an entry."""
        registry.record("key")
        assert registry.forget("key") is True
        assert registry.get("key") is None

    def test_forget_unknown(self, registry):
        """Test forgetting an unknown entry returns False."""
        assert registry.forget("unknown") is False

    def test_stats(self, registry, temp_dir):
        """Test statistics count extracted and missing entries."""
        present = temp_dir / "present.jar"
        present.write_bytes(b"")
        registry.record("present", path=present)
        registry.record("missing", path=temp_dir / "gone.jar")
        registry.record("extracted", extracted=temp_dir)

        stats = registry.stats()

        assert stats == {"total_artifacts": 3, "extracted": 1, "missing": 1}

    def test_corrupt_registry(self, registry, temp_dir):
        """Test a corrupt registry file raises RegistryError."""
        (temp_dir / "registry.json").write_text("{not json")
        with pytest.raises(RegistryError):
            registry.list_entries()

    def test_wrong_version_resets(self, registry, temp_dir):
        """Test a registry with another format version is treated as empty."""
        (temp_dir / "registry.json").write_text('{"version": 99, "artifacts": {"x": {}}}')
        assert registry.list_entries() == []

    def test_lock_timeout(self, registry):
        """Test lock timeout surfaces as RegistryLockTimeout."""
        with patch("idekit.core.cache_registry.FileLock") as mock_lock:
            mock_lock.return_value.__enter__.side_effect = Timeout(str(registry.lock_path))
            with pytest.raises(RegistryLockTimeout):
                registry.record("key")

    def test_default_location(self, cache_home):
        """Test the registry defaults to the cache home."""
        registry = ArtifactCacheRegistry()
        assert registry.registry_path == cache_home / "registry.json"
        assert registry.lock_path == cache_home / "lock" / "registry.lock"
