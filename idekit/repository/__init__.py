"""
Artifact repositories and multi-repository downloads.
"""

from .coordinates import (
    ArtifactCoordinate,
    RepositoryAuth,
    RepositoryCandidate,
    maven_repository,
    ivy_repository,
)
from .downloader import MirroredDownloader
from .maven_metadata import MavenMetadata, fetch_metadata, closest_version
from .compiler import compiler_version, resolve_java_compiler, release_type

__all__ = [
    "ArtifactCoordinate",
    "RepositoryAuth",
    "RepositoryCandidate",
    "maven_repository",
    "ivy_repository",
    "MirroredDownloader",
    "MavenMetadata",
    "fetch_metadata",
    "closest_version",
    "compiler_version",
    "resolve_java_compiler",
    "release_type",
]
