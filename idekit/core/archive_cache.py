"""
Idempotent extraction cache.

An archive is extracted at most once per target directory. Extraction goes to
a sibling temporary directory which is renamed into place, so a reader never
observes a half-extracted target and two processes racing on the same target
converge on one complete copy.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from idekit.core.exceptions import ExtractionError
from idekit.core.filesystem import extract_archive, is_populated_directory, safe_rmtree

logger = logging.getLogger(__name__)


class ArchiveCache:
    """
    Extracts archives into cache directories exactly once.

    An existing non-empty target directory is trusted as-is; its content is
    not verified.

    Example:
        >>> cache = ArchiveCache()
        >>> home = cache.extract(Path("jbr.tar.gz"), Path("~/.idekit/jbr/x/extracted"))
    """

    def __init__(self, registry=None):
        """
        Initialize archive cache.

        Args:
            registry: Optional ArtifactCacheRegistry to record extractions in
        """
        self.registry = registry

    def extract(
        self,
        archive_path: Union[str, Path],
        target_dir: Union[str, Path],
        cache_key: Optional[str] = None,
        discard_archive: bool = False,
    ) -> Path:
        """
        Extract archive into target_dir unless it is already populated.

        Args:
            archive_path: Downloaded archive
            target_dir: Final extraction directory
            cache_key: Registry key to record the extraction under
            discard_archive: Delete archive_path when it cannot be extracted,
                so the next resolution downloads it again

        Returns:
            target_dir

        Raises:
            ExtractionError: If the archive is corrupt or cannot be placed;
                no partial output is left behind
        """
        archive_path = Path(archive_path)
        target_dir = Path(target_dir)

        if is_populated_directory(target_dir):
            logger.debug(f"Using cached extraction: {target_dir}")
            return target_dir

        target_dir.parent.mkdir(parents=True, exist_ok=True)
        staging = Path(
            tempfile.mkdtemp(prefix=f".{target_dir.name}.tmp-", dir=target_dir.parent)
        )

        try:
            logger.info(f"Extracting {archive_path.name} to {target_dir}")
            try:
                extract_archive(archive_path, staging)
            except ExtractionError:
                if discard_archive:
                    logger.warning(f"Removing unusable archive: {archive_path}")
                    archive_path.unlink(missing_ok=True)
                raise
            self._place(staging, target_dir, archive_path)
        finally:
            if staging.exists():
                safe_rmtree(staging)

        if self.registry is not None:
            self.registry.record(cache_key or archive_path.name, extracted=target_dir)

        return target_dir

    def _place(self, staging: Path, target_dir: Path, archive_path: Path) -> None:
        # An empty leftover target would block the rename on Windows
        if target_dir.is_dir() and not is_populated_directory(target_dir):
            try:
                target_dir.rmdir()
            except OSError:
                pass

        try:
            os.replace(staging, target_dir)
        except OSError as e:
            if is_populated_directory(target_dir):
                logger.debug(f"Target placed concurrently, keeping it: {target_dir}")
                return
            raise ExtractionError(
                f"Failed to move extracted {archive_path.name} into {target_dir}: {e}",
                archive_path,
            ) from e


__all__ = ["ArchiveCache"]
