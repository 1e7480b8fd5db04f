"""
Multi-repository artifact downloader.

Resolves a coordinate against an ordered list of repositories: the first
repository that serves the artifact wins, failures move on to the next
candidate, and each repository is tried at most once per call. Resolved
files are kept in a stable cache layout so a later call returns the cached
file without touching the network.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional

import requests

from idekit.core.directory import get_global_cache_dir
from idekit.core.download import DEFAULT_TIMEOUT, ProgressCallback, download_file
from idekit.core.exceptions import ArtifactNotFoundError, DownloadError
from idekit.repository.coordinates import ArtifactCoordinate, RepositoryCandidate

logger = logging.getLogger(__name__)


def deduplicate_repositories(
    repositories: Iterable[RepositoryCandidate],
) -> List[RepositoryCandidate]:
    """Drop repeated repositories (same URL, layout and pattern), keeping order."""
    seen = set()
    unique = []
    for repository in repositories:
        key = (repository.url.rstrip("/"), repository.layout, repository.pattern)
        if key in seen:
            continue
        seen.add(key)
        unique.append(repository)
    return unique


class MirroredDownloader:
    """
    Downloads artifacts with ordered fallback across repositories.

    Example:
        >>> downloader = MirroredDownloader()
        >>> path = downloader.resolve(
        ...     ArtifactCoordinate("com.jetbrains.intellij.java", "java-compiler-ant-tasks",
        ...                        "213.6777.52", extension="jar"),
        ...     [maven_repository("https://repo-a"), maven_repository("https://repo-b")],
        ... )
    """

    def __init__(
        self,
        cache_dir: Optional[Path] = None,
        session: Optional[requests.Session] = None,
        registry=None,
        progress_callback: Optional[ProgressCallback] = None,
        timeout: int = DEFAULT_TIMEOUT,
    ):
        """
        Initialize downloader.

        Args:
            cache_dir: Root of the artifact cache (default: <cache home>/maven)
            session: requests session shared by all downloads
            registry: Optional ArtifactCacheRegistry to record resolutions in
            progress_callback: Optional callback for download progress
            timeout: Request timeout in seconds
        """
        self.cache_dir = Path(cache_dir) if cache_dir else get_global_cache_dir() / "maven"
        self.session = session or requests.Session()
        self.registry = registry
        self.progress_callback = progress_callback
        self.timeout = timeout

    def artifact_path(self, coordinate: ArtifactCoordinate) -> Path:
        """Cache location of a coordinate."""
        return (
            self.cache_dir
            / coordinate.group
            / coordinate.name
            / coordinate.version
            / coordinate.file_name
        )

    def resolve(
        self,
        coordinate: ArtifactCoordinate,
        repositories: Iterable[RepositoryCandidate],
    ) -> Path:
        """
        Resolve a coordinate to a local file.

        Args:
            coordinate: Artifact to resolve
            repositories: Candidates, tried strictly in order

        Returns:
            Path of the cached artifact

        Raises:
            ArtifactNotFoundError: If no repository serves the artifact; the
                error lists every URL that was tried
        """
        target = self.artifact_path(coordinate)
        if target.is_file():
            logger.debug(f"Using cached artifact {coordinate}: {target}")
            return target

        attempted = []
        for repository in deduplicate_repositories(repositories):
            url = repository.artifact_url(coordinate)
            attempted.append(url)
            logger.debug(f"Trying {coordinate} from {repository}")

            try:
                self._download(url, target, repository.headers())
            except DownloadError as e:
                logger.debug(f"Repository {repository} failed for {coordinate}: {e}")
                continue

            logger.info(f"Resolved {coordinate} from {repository}")
            self._record(coordinate.cache_key, target, url)
            return target

        raise ArtifactNotFoundError(coordinate, attempted)

    def resolve_url(self, url: str, target: Path, headers: Optional[dict] = None) -> Path:
        """
        Download a single raw URL into the cache.

        Args:
            url: Source URL
            target: Cache location for the file
            headers: Extra request headers

        Returns:
            target

        Raises:
            DownloadError: If the download fails
        """
        target = Path(target)
        if target.is_file():
            logger.debug(f"Using cached download: {target}")
            return target

        self._download(url, target, headers or {})
        self._record(url, target, url)
        return target

    def _download(self, url: str, target: Path, headers: dict) -> Path:
        return download_file(
            url,
            target,
            session=self.session,
            headers=headers,
            progress_callback=self.progress_callback,
            timeout=self.timeout,
        )

    def _record(self, cache_key: str, path: Path, source_url: str) -> None:
        if self.registry is not None:
            self.registry.record(cache_key, path=path, source_url=source_url)


__all__ = ["MirroredDownloader", "deduplicate_repositories"]
