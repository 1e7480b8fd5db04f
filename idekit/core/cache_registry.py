"""
Registry of resolved artifacts in the shared cache.

The on-disk cache is authoritative: a path that exists is fresh. The registry
only records where each artifact came from and where it was extracted, so
`idekit cache` can list and forget entries. Access is serialized across
processes with a file lock.
"""

import json
import logging
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from filelock import FileLock, Timeout

from idekit.core.directory import get_global_cache_dir
from idekit.core.filesystem import atomic_write
from idekit.core.exceptions import RegistryError, RegistryLockTimeout

logger = logging.getLogger(__name__)

REGISTRY_VERSION = 1


def _empty_registry() -> dict:
    return {"version": REGISTRY_VERSION, "artifacts": {}}


class ArtifactCacheRegistry:
    """
    Tracks resolved artifacts with process-safe access.

    Example:
        >>> registry = ArtifactCacheRegistry()
        >>> registry.record(
        ...     'com.jetbrains:jbre:jbr_jcef-17.0.2-linux-x64-b469.1',
        ...     path=Path('/home/user/.idekit/maven/com.jetbrains/jbre/...'),
        ...     source_url='https://cache-redirector.jetbrains.com/intellij-jbr/...',
        ... )
        >>> registry.get('com.jetbrains:jbre:jbr_jcef-17.0.2-linux-x64-b469.1')['path']
    """

    def __init__(self, registry_path: Optional[Path] = None, lock_timeout: int = 30):
        """
        Initialize artifact registry.

        Args:
            registry_path: Path to registry.json (default: cache home)
            lock_timeout: Timeout in seconds for acquiring file lock
        """
        if registry_path is None:
            registry_path = get_global_cache_dir() / "registry.json"

        self.registry_path = Path(registry_path)
        self.lock_path = self.registry_path.parent / "lock" / "registry.lock"
        self.lock_timeout = lock_timeout

        logger.debug(f"Initialized registry at {self.registry_path}")

    def _load_registry(self) -> dict:
        if not self.registry_path.exists():
            return _empty_registry()

        try:
            with open(self.registry_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Failed to load registry: {e}")
            raise RegistryError(f"Failed to load registry: {e}") from e

        if not isinstance(data, dict) or data.get("version") != REGISTRY_VERSION:
            logger.warning("Invalid registry format, resetting")
            return _empty_registry()

        data.setdefault("artifacts", {})
        return data

    def _save_registry(self, data: dict):
        try:
            json_content = json.dumps(data, indent=2, ensure_ascii=False)
            atomic_write(self.registry_path, json_content)
            logger.debug(f"Saved registry with {len(data['artifacts'])} artifacts")
        except OSError as e:
            logger.error(f"Failed to save registry: {e}")
            raise RegistryError(f"Failed to save registry: {e}") from e

    @contextmanager
    def _lock(self):
        """
        Acquire the exclusive registry lock.

        Raises:
            RegistryLockTimeout: If lock cannot be acquired within timeout
        """
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        lock = FileLock(self.lock_path, timeout=self.lock_timeout)

        try:
            with lock:
                yield
        except Timeout as e:
            logger.error(f"Failed to acquire registry lock within {self.lock_timeout}s")
            raise RegistryLockTimeout(
                f"Could not acquire registry lock within {self.lock_timeout} seconds"
            ) from e

    def record(
        self,
        cache_key: str,
        path: Optional[Path] = None,
        extracted: Optional[Path] = None,
        source_url: Optional[str] = None,
    ):
        """
        Record or update an artifact entry.

        Only the fields that are given are updated, so a download and a later
        extraction of the same artifact merge into one entry.

        Args:
            cache_key: Coordinate string or raw URL key
            path: Local path of the downloaded file
            extracted: Local path of the extracted directory
            source_url: URL the artifact was fetched from
        """
        with self._lock():
            data = self._load_registry()
            entry = data["artifacts"].setdefault(cache_key, {})

            if path is not None:
                entry["path"] = str(Path(path).resolve())
            if extracted is not None:
                entry["extracted"] = str(Path(extracted).resolve())
            if source_url is not None:
                entry["source_url"] = source_url
            entry["resolved"] = datetime.now().isoformat()

            self._save_registry(data)

        logger.debug(f"Recorded artifact: {cache_key}")

    def get(self, cache_key: str) -> Optional[Dict]:
        """Get an artifact entry, or None if it was never recorded."""
        return self._load_registry()["artifacts"].get(cache_key)

    def list_entries(self) -> List[str]:
        """Get list of all recorded cache keys."""
        return sorted(self._load_registry()["artifacts"])

    def forget(self, cache_key: str) -> bool:
        """
        Remove an entry from the registry.

        Files on disk are left alone; callers delete them separately.

        Returns:
            True if an entry was removed
        """
        with self._lock():
            data = self._load_registry()
            if cache_key not in data["artifacts"]:
                logger.warning(f"Artifact not found in registry: {cache_key}")
                return False
            del data["artifacts"][cache_key]
            self._save_registry(data)

        logger.info(f"Forgot artifact: {cache_key}")
        return True

    def stats(self) -> Dict:
        """
        Get registry statistics.

        Returns:
            Dictionary with 'total_artifacts', 'extracted' and 'missing'
            (entries whose downloaded file no longer exists).
        """
        artifacts = self._load_registry()["artifacts"]
        missing = [
            key
            for key, entry in artifacts.items()
            if "path" in entry and not Path(entry["path"]).exists()
        ]
        return {
            "total_artifacts": len(artifacts),
            "extracted": sum(1 for entry in artifacts.values() if "extracted" in entry),
            "missing": len(missing),
        }


__all__ = ["ArtifactCacheRegistry"]
