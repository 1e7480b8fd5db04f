"""
File system utilities for idekit.

This module provides the archive and file primitives the caches build on:
- Archive format detection (by extension, then by magic bytes)
- Archive extraction (zip/jar, tar.gz, tar.xz, tar.bz2, plain tar, bare file)
- Safe file operations (atomic writes, guarded deletion)

Extraction validates every member path so an archive cannot write outside
its destination.
"""

import logging
import os
import shutil
import sys
import tarfile
import tempfile
import zipfile
from pathlib import Path
from typing import Optional, Union

from idekit.core.exceptions import ExtractionError

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"


# ============================================================================
# Error Handling
# ============================================================================


class FilesystemError(Exception):
    """Base exception for filesystem operations."""

    pass


class InsecureArchiveError(ExtractionError):
    """Archive contains paths that escape the destination directory."""

    pass


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to parent.

    Args:
        path: Path to check
        parent: Potential parent path

    Returns:
        True if path is under parent
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def is_populated_directory(path: Union[str, Path]) -> bool:
    """Return True if path is a directory with at least one entry."""
    path = Path(path)
    if not path.is_dir():
        return False
    return any(path.iterdir())


# ============================================================================
# Archive Format Detection
# ============================================================================

ARCHIVE_ZIP = "zip"
ARCHIVE_TAR_GZ = "tar.gz"
ARCHIVE_TAR_XZ = "tar.xz"
ARCHIVE_TAR_BZ2 = "tar.bz2"
ARCHIVE_TAR = "tar"
ARCHIVE_FILE = "file"

_EXTENSIONS = (
    ((".zip", ".jar"), ARCHIVE_ZIP),
    ((".tar.gz", ".tgz"), ARCHIVE_TAR_GZ),
    ((".tar.xz", ".txz"), ARCHIVE_TAR_XZ),
    ((".tar.bz2", ".tbz2"), ARCHIVE_TAR_BZ2),
    ((".tar",), ARCHIVE_TAR),
)

_MAGIC = (
    (b"PK\x03\x04", ARCHIVE_ZIP),
    (b"PK\x05\x06", ARCHIVE_ZIP),
    (b"\x1f\x8b", ARCHIVE_TAR_GZ),
    (b"\xfd7zXZ\x00", ARCHIVE_TAR_XZ),
    (b"BZh", ARCHIVE_TAR_BZ2),
)

_TAR_MODES = {
    ARCHIVE_TAR_GZ: "r:gz",
    ARCHIVE_TAR_XZ: "r:xz",
    ARCHIVE_TAR_BZ2: "r:bz2",
    ARCHIVE_TAR: "r:",
}


def detect_archive_format(archive_path: Union[str, Path]) -> str:
    """
    Detect archive format from the file name, falling back to magic bytes.

    Downloads cached under repository-derived names do not always carry a
    meaningful extension, so the content is sniffed when the name says
    nothing. Files that match no known signature are treated as bare
    single files.

    Args:
        archive_path: Path to the archive

    Returns:
        One of 'zip', 'tar.gz', 'tar.xz', 'tar.bz2', 'tar' or 'file'

    Example:
        >>> detect_archive_format("ideaIC-2021.3.2.zip")
        'zip'
    """
    archive_path = Path(archive_path)
    name = archive_path.name.lower()

    for suffixes, archive_format in _EXTENSIONS:
        if name.endswith(suffixes):
            return archive_format

    with open(archive_path, "rb") as f:
        header = f.read(265)

    for magic, archive_format in _MAGIC:
        if header.startswith(magic):
            return archive_format

    if header[257:262] == b"ustar":
        return ARCHIVE_TAR

    return ARCHIVE_FILE


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "Extraction has been blocked."
        )


def extract_archive(
    archive_path: Union[str, Path], destination: Union[str, Path]
) -> str:
    """
    Extract an archive into a destination directory.

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to (created if missing)

    Returns:
        The detected archive format

    Raises:
        ExtractionError: If the archive is missing or corrupt
        InsecureArchiveError: If the archive contains malicious paths

    Example:
        >>> extract_archive('jbr.tar.gz', '/tmp/jbr')
        'tar.gz'
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.is_file():
        raise ExtractionError(f"Archive not found: {archive_path}", archive_path)

    destination.mkdir(parents=True, exist_ok=True)
    archive_format = detect_archive_format(archive_path)
    logger.debug(f"Extracting {archive_path.name} ({archive_format}) to {destination}")

    try:
        if archive_format == ARCHIVE_ZIP:
            _extract_zip(archive_path, destination)
        elif archive_format == ARCHIVE_FILE:
            shutil.copy2(archive_path, destination / archive_path.name)
        else:
            _extract_tar(archive_path, destination, _TAR_MODES[archive_format])
    except ExtractionError:
        raise
    except (OSError, EOFError, tarfile.TarError, zipfile.BadZipFile) as e:
        raise ExtractionError(
            f"Failed to extract {archive_path}: {e}", archive_path
        ) from e

    return archive_format


def _extract_zip(archive_path: Path, destination: Path) -> None:
    """Extract a ZIP archive, restoring Unix permission bits."""
    with zipfile.ZipFile(archive_path, "r") as zf:
        members = zf.infolist()

        for member in members:
            _validate_archive_path(member.filename, destination)

        for member in members:
            extracted = zf.extract(member, destination)
            mode = (member.external_attr >> 16) & 0o777
            if mode and not IS_WINDOWS:
                os.chmod(extracted, mode)


def _extract_tar(archive_path: Path, destination: Path, mode: str) -> None:
    """Extract a tar archive with specified compression."""
    with tarfile.open(archive_path, mode) as tar:
        for member in tar.getmembers():
            _validate_archive_path(member.name, destination)

        # Extract with filter for security (Python 3.12+)
        # For older Python, we've already validated paths above
        if sys.version_info >= (3, 12):
            tar.extractall(destination, filter="data")
        else:
            tar.extractall(destination)


# ============================================================================
# Safe File Operations
# ============================================================================


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    If the write fails, the original file (if any) remains unchanged.

    Args:
        file_path: Path to write to
        content: Content to write (string or bytes)
        encoding: Text encoding (used only for string content)

    Example:
        >>> atomic_write('registry.json', '{"version": 1}')
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Same directory keeps the rename on one filesystem
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)

    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree with safeguards.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails

    Example:
        >>> safe_rmtree('/tmp/idekit/ides/IC-2021.3', require_prefix='/tmp/idekit')
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        if IS_WINDOWS:

            def handle_remove_readonly(func, path, exc):
                """Error handler for Windows read-only files."""
                if not os.access(path, os.W_OK):
                    os.chmod(path, 0o777)
                    func(path)
                else:
                    raise

            shutil.rmtree(path, onerror=handle_remove_readonly)
        else:
            shutil.rmtree(path)

    except OSError as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


__all__ = [
    "FilesystemError",
    "InsecureArchiveError",
    "is_relative_to",
    "is_populated_directory",
    "detect_archive_format",
    "extract_archive",
    "atomic_write",
    "safe_rmtree",
]
