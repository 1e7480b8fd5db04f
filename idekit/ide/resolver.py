"""
IDE distribution resolution.

An IDE is resolved from one of three sources:

- a local installation directory;
- the IntelliJ Maven repository (``releases``, ``snapshots``, ``nightly``);
- the JetBrains download service, trying the release channels in order.

Downloaded archives are extracted once through the ArchiveCache and the
extracted directory is returned.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union
from urllib.parse import urlsplit

import requests

from idekit.constants import (
    ANDROID_STUDIO_DOWNLOAD_URL,
    ANDROID_STUDIO_TYPE,
    CACHE_REDIRECTOR,
    DEFAULT_INTELLIJ_REPOSITORY,
    IDEA_DOWNLOAD_URL,
)
from idekit.core.archive_cache import ArchiveCache
from idekit.core.directory import get_global_cache_dir
from idekit.core.download import resolve_redirect
from idekit.core.exceptions import ArtifactNotFoundError, DownloadError, NotFoundError
from idekit.core.platform import PlatformInfo, detect_platform
from idekit.repository.compiler import (
    RELEASE_TYPE_NIGHTLY,
    RELEASE_TYPE_RELEASES,
    RELEASE_TYPE_SNAPSHOTS,
    release_type,
)
from idekit.repository.coordinates import ArtifactCoordinate, maven_repository
from idekit.repository.downloader import MirroredDownloader
from idekit.versioning.ide_version import IdeVersion

logger = logging.getLogger(__name__)

BUILD_TYPES = ("release", "rc", "eap", "beta")


def version_parameter_name(version: str) -> str:
    """
    Query parameter naming the version in download service URLs.

    Example:
        >>> version_parameter_name("202.7660.26")
        'build'
        >>> version_parameter_name("2020.2.3")
        'version'
    """
    return "build" if IdeVersion.parse(version).is_build_number else "version"


def ide_download_url(ide_type: str, version: str, build_type: str) -> str:
    """Download service URL for an IDE in the given channel."""
    if ide_type == ANDROID_STUDIO_TYPE:
        return f"{ANDROID_STUDIO_DOWNLOAD_URL}/{version}/android-studio-{version}-linux.tar.gz"
    return (
        f"{IDEA_DOWNLOAD_URL}?code={ide_type}&platform=linux"
        f"&type={build_type}&{version_parameter_name(version)}={version}"
    )


def build_types(ide_type: str) -> List[str]:
    return [""] if ide_type == ANDROID_STUDIO_TYPE else list(BUILD_TYPES)


class IdeResolver:
    """
    Resolves IDE distributions to local directories.

    Example:
        >>> resolver = IdeResolver(MirroredDownloader())
        >>> ide_dir = resolver.resolve_download(IdeVersion.parse("IC-2021.3.2"))
    """

    def __init__(
        self,
        downloader: MirroredDownloader,
        archive_cache: Optional[ArchiveCache] = None,
        cache_dir: Optional[Path] = None,
        intellij_repository: str = DEFAULT_INTELLIJ_REPOSITORY,
        platform_info: Optional[PlatformInfo] = None,
    ):
        """
        Initialize resolver.

        Args:
            downloader: Downloader for IDE archives
            archive_cache: Extraction cache (a new one if omitted)
            cache_dir: Cache home; downloaded IDEs live in its ``ides`` directory
            intellij_repository: Base URL of the IntelliJ Maven repository
            platform_info: Host platform (detected if omitted)
        """
        self.downloader = downloader
        self.archive_cache = archive_cache or ArchiveCache()
        self.cache_dir = Path(cache_dir) if cache_dir else get_global_cache_dir()
        self.intellij_repository = intellij_repository.rstrip("/")
        self.platform = platform_info or detect_platform()

    @property
    def session(self) -> requests.Session:
        return self.downloader.session

    # ------------------------------------------------------------------------
    # Local
    # ------------------------------------------------------------------------

    def resolve_local(self, path: Union[str, Path]) -> Path:
        """
        Validate a local IDE installation.

        On macOS an ``.app`` bundle resolves to its ``Contents`` directory.

        Raises:
            NotFoundError: If the path is missing or has no ``lib`` directory
        """
        path = Path(path).expanduser()
        if self.platform.is_macos and path.suffix == ".app":
            path = path / "Contents"

        if not path.is_dir():
            raise NotFoundError(f"Local IDE directory does not exist: {path}")
        if not (path / "lib").is_dir():
            raise NotFoundError(f"Not an IDE installation (no lib directory): {path}")

        logger.debug(f"Using local IDE: {path}")
        return path

    # ------------------------------------------------------------------------
    # Maven
    # ------------------------------------------------------------------------

    def maven_coordinate(self, ide_version: IdeVersion) -> ArtifactCoordinate:
        """
        Maven coordinate of an IDE distribution.

        Raises:
            NotFoundError: If the product is not published to Maven
        """
        ide_type = ide_version.ide_type
        if not ide_type.maven_artifact:
            raise NotFoundError(f"{ide_type.name} is not published to the IntelliJ repository")
        return ArtifactCoordinate(
            ide_type.maven_group, ide_type.maven_artifact, ide_version.version
        )

    def resolve_maven(self, ide_version: IdeVersion) -> Path:
        """
        Download an IDE from the IntelliJ Maven repository and extract it.

        The channel matching the version suffix is tried first, then the
        remaining channels.

        Raises:
            ArtifactNotFoundError: If no channel serves the distribution
        """
        coordinate = self.maven_coordinate(ide_version)
        preferred = release_type(ide_version.version)
        channels = [preferred] + [
            c
            for c in (RELEASE_TYPE_RELEASES, RELEASE_TYPE_SNAPSHOTS, RELEASE_TYPE_NIGHTLY)
            if c != preferred
        ]
        repositories = [
            maven_repository(f"{self.intellij_repository}/{channel}") for channel in channels
        ]

        archive = self.downloader.resolve(coordinate, repositories)
        target = archive.parent / f"{coordinate.name}-{coordinate.version}"
        return self.archive_cache.extract(
            archive, target, cache_key=coordinate.cache_key, discard_archive=True
        )

    # ------------------------------------------------------------------------
    # Download service
    # ------------------------------------------------------------------------

    def resolve_download_url(self, ide_type: str, version: str, build_type: str) -> str:
        """
        Direct download URL for an IDE.

        A redirect from the download service is rewritten to go through the
        cache redirector. Android Studio URLs are used as-is.

        Raises:
            DownloadError: If the download service request fails
        """
        url = ide_download_url(ide_type, version, build_type)
        if ide_type == ANDROID_STUDIO_TYPE:
            return url

        logger.debug(f"Resolving direct IDE download URL for: {url}")
        location = resolve_redirect(url, session=self.session)
        if not location:
            logger.debug("IDE download URL has no redirection provided. Skipping")
            return url

        redirect = urlsplit(location)
        path = redirect.path + (f"?{redirect.query}" if redirect.query else "")
        resolved = f"{CACHE_REDIRECTOR}/{redirect.netloc}{path}"
        logger.debug(f"Resolved IDE download URL: {resolved}")
        return resolved

    def resolve_download(self, ide_version: IdeVersion) -> Path:
        """
        Download an IDE from the download service and extract it.

        An IDE already present in ``ides/{type}-{version}`` is returned
        without contacting the network.

        Raises:
            ArtifactNotFoundError: If no channel serves the IDE
            ExtractionError: If a served archive cannot be extracted; later
                channels are not tried
        """
        name = str(ide_version)
        ides_dir = self.cache_dir / "ides"
        ide_dir = ides_dir / name

        if ide_dir.exists():
            logger.debug(f"IDE already available in: {ide_dir}")
            return ide_dir

        attempted = []
        for build_type in build_types(ide_version.type):
            logger.debug(f"Downloading IDE '{name}' from '{build_type}' channel")
            try:
                url = self.resolve_download_url(ide_version.type, ide_version.version, build_type)
                attempted.append(url)
                archive = self.downloader.resolve_url(
                    url, ides_dir / "archives" / build_type / f"{name}.tar.gz"
                )
            except (DownloadError, NotFoundError) as e:
                logger.debug(
                    f"Cannot download IDE '{name}' from '{build_type}' channel: {e}. "
                    f"Trying another channel..."
                )
                continue

            # A served archive that does not extract is fatal, not a miss
            self.archive_cache.extract(
                archive, ide_dir, cache_key=f"ide:{name}", discard_archive=True
            )
            logger.info(f"Resolved IDE '{name}': {ide_dir}")
            return ide_dir

        raise ArtifactNotFoundError(f"IDE {name}", attempted)

    def resolve(self, ide_version: IdeVersion, local_path: Optional[Path] = None) -> Path:
        """
        Resolve an IDE: a local path wins, then Maven, then the download service.
        """
        if local_path:
            return self.resolve_local(local_path)

        if ide_version.ide_type.maven_artifact:
            try:
                return self.resolve_maven(ide_version)
            except NotFoundError as e:
                logger.debug(f"{ide_version} not available from Maven: {e}")

        return self.resolve_download(ide_version)


__all__ = [
    "BUILD_TYPES",
    "IdeResolver",
    "build_types",
    "ide_download_url",
    "version_parameter_name",
]
