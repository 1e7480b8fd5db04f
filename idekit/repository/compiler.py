"""
Resolution of the java-compiler-ant-tasks artifact.

The compiler companion is published under versions that only loosely track
IDE builds, so resolution walks three tiers and stops at the first success:

1. the exact requested version;
2. for ``-EAP-SNAPSHOT`` versions, the same version without the suffix;
3. the greatest version listed in the releases maven-metadata.xml that is
   not greater than the requested one.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional

from idekit.constants import (
    DEFAULT_IDEA_VERSION,
    DEFAULT_INTELLIJ_REPOSITORY,
    INTELLIJ_DEPENDENCIES,
    MINIMAL_COMPILER_BUILD,
)
from idekit.core.exceptions import (
    ArtifactNotFoundError,
    DownloadError,
    IncompatibleVersionError,
)
from idekit.repository.coordinates import (
    ArtifactCoordinate,
    RepositoryCandidate,
    maven_repository,
)
from idekit.repository.downloader import MirroredDownloader
from idekit.repository.maven_metadata import closest_version, fetch_metadata
from idekit.versioning.build_number import parse, strip_excess_components
from idekit.versioning.ide_version import IDE_TYPES, IdeVersion
from idekit.versioning.version import Version

logger = logging.getLogger(__name__)

COMPILER_GROUP = "com.jetbrains.intellij.java"
COMPILER_NAME = "java-compiler-ant-tasks"

RELEASE_SUFFIX_SNAPSHOT = "-SNAPSHOT"
RELEASE_SUFFIX_EAP = "-EAP-SNAPSHOT"
RELEASE_SUFFIX_EAP_CANDIDATE = "-EAP-CANDIDATE-SNAPSHOT"
RELEASE_SUFFIX_CUSTOM_SNAPSHOT = "-CUSTOM-SNAPSHOT"

RELEASE_TYPE_RELEASES = "releases"
RELEASE_TYPE_SNAPSHOTS = "snapshots"
RELEASE_TYPE_NIGHTLY = "nightly"

# Products whose LATEST-EAP-SNAPSHOT maps to an EAP candidate compiler build
EAP_CANDIDATE_TYPES = ("CL", "RD", "PY", "PS")


def release_type(version: str) -> str:
    """
    Repository channel a version is published in.

    Example:
        >>> release_type("213.5744-EAP-SNAPSHOT")
        'snapshots'
        >>> release_type("LATEST-SNAPSHOT")
        'nightly'
    """
    if version.endswith(
        (RELEASE_SUFFIX_EAP, RELEASE_SUFFIX_EAP_CANDIDATE, RELEASE_SUFFIX_CUSTOM_SNAPSHOT)
    ):
        return RELEASE_TYPE_SNAPSHOTS
    if version.endswith(RELEASE_SUFFIX_SNAPSHOT):
        return RELEASE_TYPE_NIGHTLY
    return RELEASE_TYPE_RELEASES


def compiler_version(
    ide_version: IdeVersion,
    build_number: Optional[str],
    version_suffix: Optional[str] = None,
    local_path: Optional[str] = None,
) -> str:
    """
    Derive the compiler version matching an IDE.

    Args:
        ide_version: Requested IDE version
        build_number: Build number of the resolved IDE (from product-info.json)
        version_suffix: versionSuffix of the resolved IDE ('EAP' for EAP builds)
        local_path: Local IDE path, when the IDE was not downloaded

    Returns:
        Version string of java-compiler-ant-tasks

    Example:
        >>> compiler_version(IdeVersion("IC", "2021.3.2"), "IC-213.6777.52.1")
        '213.6777.52'
    """
    version = ide_version.version

    if (local_path or not version.endswith(RELEASE_SUFFIX_SNAPSHOT)) and build_number:
        stripped = parse(strip_excess_components(build_number))
        eap_suffix = RELEASE_SUFFIX_EAP if version_suffix == "EAP" else ""
        return stripped.as_string_without_product_code() + eap_suffix

    if version == DEFAULT_IDEA_VERSION and ide_version.type in EAP_CANDIDATE_TYPES:
        if not build_number:
            return version
        v = Version.parse(build_number)
        return f"{v.major}.{v.minor}{RELEASE_SUFFIX_EAP_CANDIDATE}"

    ide_type = IDE_TYPES.get(ide_version.type)
    prefix = ide_type.compiler_prefix if ide_type else ""
    return prefix + version


def check_minimum_compiler_support(version: str) -> None:
    """
    Reject compiler versions older than 2018.3.

    Raises:
        IncompatibleVersionError: If version predates 183.3795.13
    """
    if version == DEFAULT_IDEA_VERSION:
        return
    if Version.parse(version) >= Version.parse(MINIMAL_COMPILER_BUILD):
        return
    raise IncompatibleVersionError(
        f"{COMPILER_NAME} {version}",
        f">= {MINIMAL_COMPILER_BUILD} (2018.3+)",
        version,
    )


def compiler_repositories(
    version: str, intellij_repository: str = DEFAULT_INTELLIJ_REPOSITORY
) -> List[RepositoryCandidate]:
    """Repositories to search for a compiler version, in order."""
    base = intellij_repository.rstrip("/")
    return [
        maven_repository(f"{base}/{release_type(version)}"),
        maven_repository(f"{base}/{RELEASE_TYPE_RELEASES}"),
        maven_repository(INTELLIJ_DEPENDENCIES),
    ]


def resolve_java_compiler(
    version: str,
    downloader: MirroredDownloader,
    intellij_repository: str = DEFAULT_INTELLIJ_REPOSITORY,
    metadata_repository: str = DEFAULT_INTELLIJ_REPOSITORY,
) -> Path:
    """
    Resolve java-compiler-ant-tasks through the three fallback tiers.

    Args:
        version: Requested compiler version (see compiler_version())
        downloader: Downloader used for every tier
        intellij_repository: Base URL of the IntelliJ repository
        metadata_repository: Base URL whose releases metadata lists versions

    Returns:
        Path to the compiler jar

    Raises:
        IncompatibleVersionError: If version is older than 2018.3
        ArtifactNotFoundError: If all tiers fail; lists every source tried
    """
    check_minimum_compiler_support(version)
    attempted: List[str] = []

    def download(candidate: str) -> Optional[Path]:
        coordinate = ArtifactCoordinate(
            COMPILER_GROUP, COMPILER_NAME, candidate, extension="jar"
        )
        try:
            return downloader.resolve(
                coordinate, compiler_repositories(candidate, intellij_repository)
            )
        except ArtifactNotFoundError as e:
            attempted.extend(e.attempted)
            logger.warning(f"Cannot resolve {COMPILER_NAME} in version: {candidate}")
            return None

    def exact() -> Optional[Path]:
        return download(version)

    def without_eap_suffix() -> Optional[Path]:
        if not version.endswith(RELEASE_SUFFIX_EAP):
            return None
        non_eap = version[: -len(RELEASE_SUFFIX_EAP)]
        path = download(non_eap)
        if path:
            logger.warning(f"Resolved non-EAP {COMPILER_NAME} version: {non_eap}")
        return path

    def closest_lower() -> Optional[Path]:
        repository = maven_repository(
            f"{metadata_repository.rstrip('/')}/{RELEASE_TYPE_RELEASES}"
        )
        url = repository.metadata_url(COMPILER_GROUP, COMPILER_NAME)
        attempted.append(url)
        try:
            metadata = fetch_metadata(url, session=downloader.session)
            closest = closest_version(metadata.versions, version)
        except (DownloadError, ArtifactNotFoundError) as e:
            logger.warning(f"Cannot resolve {COMPILER_NAME} Maven metadata: {e}")
            return None
        path = download(closest)
        if path:
            logger.warning(f"Resolved closest lower {COMPILER_NAME} version: {closest}")
        return path

    tiers: List[Callable[[], Optional[Path]]] = [exact, without_eap_suffix, closest_lower]
    for tier in tiers:
        path = tier()
        if path:
            return path

    raise ArtifactNotFoundError(f"{COMPILER_GROUP}:{COMPILER_NAME}:{version}", attempted)


__all__ = [
    "COMPILER_GROUP",
    "COMPILER_NAME",
    "release_type",
    "compiler_version",
    "check_minimum_compiler_support",
    "compiler_repositories",
    "resolve_java_compiler",
]
