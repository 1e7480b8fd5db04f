"""
Core functionality for idekit.

This package contains the foundational modules the resolvers depend on:
cache layout, downloads, archive extraction and the error hierarchy.
"""

from .directory import (
    get_global_cache_dir,
    ensure_global_cache_structure,
    verify_directory_writable,
    DirectoryError,
)

from .platform import (
    PlatformInfo,
    detect_platform,
    clear_platform_cache,
)

from .archive_cache import ArchiveCache

from .cache_registry import ArtifactCacheRegistry

from .exceptions import (
    IdekitError,
    ParseError,
    InvalidNotationError,
    NotFoundError,
    ArtifactNotFoundError,
    PluginNotFoundError,
    DownloadError,
    ExtractionError,
    RegistryError,
    RegistryLockTimeout,
    IncompatibleVersionError,
    ConfigError,
)

__all__ = [
    "get_global_cache_dir",
    "ensure_global_cache_structure",
    "verify_directory_writable",
    "DirectoryError",
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
    "ArchiveCache",
    "ArtifactCacheRegistry",
    "IdekitError",
    "ParseError",
    "InvalidNotationError",
    "NotFoundError",
    "ArtifactNotFoundError",
    "PluginNotFoundError",
    "DownloadError",
    "ExtractionError",
    "RegistryError",
    "RegistryLockTimeout",
    "IncompatibleVersionError",
    "ConfigError",
]
