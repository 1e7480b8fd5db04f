"""
Directory structure management for idekit.

This module resolves the shared cache home and creates its layout. The layout
is stable across runs; the existence of a path inside it is the only freshness
signal the resolvers use.

Directory Structure:
    Cache home (~/.idekit/, %USERPROFILE%\\.idekit\\ or $IDEKIT_CACHE_DIR):
        - ides/           : Extracted IDE distributions ({type}-{version})
        - jbr/            : Downloaded and extracted runtimes
        - maven/          : Repository artifacts ({group}/{name}/{version}/)
        - plugins/        : Plugins from custom repositories
        - lock/           : Registry lock file
        - registry.json   : Resolved artifact registry
"""

import os
from pathlib import Path
from typing import Dict, Optional


CACHE_DIR_ENV = "IDEKIT_CACHE_DIR"

CACHE_SUBDIRECTORIES = ("ides", "jbr", "maven", "plugins", "lock")


class DirectoryError(Exception):
    """Base exception for directory-related errors."""

    pass


class DirectoryCreationError(DirectoryError):
    """Raised when directory creation fails."""

    pass


def get_global_cache_dir() -> Path:
    """
    Get the cache home directory path.

    Returns:
        Path: The cache home.
            - $IDEKIT_CACHE_DIR when set
            - Windows: %USERPROFILE%\\.idekit
            - Linux/macOS: ~/.idekit/

    Example:
        >>> cache_dir = get_global_cache_dir()
        >>> print(cache_dir)
        /home/user/.idekit  # on Linux
    """
    override = os.environ.get(CACHE_DIR_ENV)
    if override:
        return Path(override).expanduser()

    if os.name == "nt":  # Windows
        user_profile = os.environ.get("USERPROFILE")
        if not user_profile:
            raise DirectoryError(
                "USERPROFILE environment variable is not set. "
                "Cannot determine cache directory."
            )
        return Path(user_profile) / ".idekit"
    else:  # Linux/macOS
        return Path.home() / ".idekit"


def verify_directory_writable(path: Path) -> bool:
    """
    Verify that a directory exists and is writable.

    Args:
        path: Directory path to verify.

    Returns:
        bool: True if directory exists and is writable, False otherwise.
    """
    if not path.is_dir():
        return False

    try:
        test_file = path / ".write_test"
        test_file.touch()
        test_file.unlink()
        return True
    except OSError:
        return False


def ensure_global_cache_structure(cache_dir: Optional[Path] = None) -> Dict[str, Path]:
    """
    Create the cache directory layout if it doesn't exist.

    Args:
        cache_dir: Cache home to populate (default: get_global_cache_dir())

    Returns:
        Mapping of layout names ('root', 'ides', 'jbr', ...) to paths.

    Raises:
        DirectoryCreationError: If a directory cannot be created or written.

    Example:
        >>> layout = ensure_global_cache_structure()
        >>> layout["ides"]
        PosixPath('/home/user/.idekit/ides')
    """
    root = Path(cache_dir) if cache_dir else get_global_cache_dir()

    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreationError(
            f"Failed to create cache directory at {root}: {e}"
        )

    if not verify_directory_writable(root):
        raise DirectoryCreationError(
            f"Cache directory at {root} is not writable. "
            "Please check directory permissions."
        )

    layout = {"root": root}
    for subdir in CACHE_SUBDIRECTORIES:
        subdir_path = root / subdir
        try:
            subdir_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreationError(
                f"Failed to create subdirectory {subdir_path}: {e}"
            )
        layout[subdir] = subdir_path

    return layout


__all__ = [
    "CACHE_DIR_ENV",
    "CACHE_SUBDIRECTORIES",
    "DirectoryError",
    "DirectoryCreationError",
    "get_global_cache_dir",
    "verify_directory_writable",
    "ensure_global_cache_structure",
]
