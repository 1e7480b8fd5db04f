"""
Unit tests for filesystem module.

Tests archive detection and extraction and the safe file helpers.
"""

import io
import os
import tarfile
import zipfile

import pytest

from idekit.core.exceptions import ExtractionError
from idekit.core.filesystem import (
    FilesystemError,
    InsecureArchiveError,
    atomic_write,
    detect_archive_format,
    extract_archive,
    is_populated_directory,
    is_relative_to,
    safe_rmtree,
)


class TestDetectArchiveFormat:
    """Test archive format detection."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("ideaIC-2021.3.2.zip", "zip"),
            ("plugin.jar", "zip"),
            ("jbr.tar.gz", "tar.gz"),
            ("jbr.tgz", "tar.gz"),
            ("dist.tar.xz", "tar.xz"),
            ("dist.tar.bz2", "tar.bz2"),
            ("dist.tar", "tar"),
        ],
    )
    def test_by_extension(self, temp_dir, name, expected):
        """Test the file name decides when it has a known extension."""
        path = temp_dir / name
        path.write_bytes(b"")
        assert detect_archive_format(path) == expected

    def test_zip_magic(self, temp_dir, archive_builders):
        """Test zip content is recognized without an extension."""
        path = temp_dir / "download"
        path.write_bytes(archive_builders.zip_bytes({"a.txt": b"a"}))
        assert detect_archive_format(path) == "zip"

    def test_gzip_magic(self, temp_dir, archive_builders):
        """Test gzip content is recognized without an extension."""
        path = temp_dir / "download"
        path.write_bytes(archive_builders.tar_gz_bytes({"a.txt": b"a"}))
        assert detect_archive_format(path) == "tar.gz"

    def test_plain_tar_magic(self, temp_dir):
        """Test uncompressed tar is recognized by its ustar header."""
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w") as tar:
            info = tarfile.TarInfo("a.txt")
            info.size = 1
            tar.addfile(info, io.BytesIO(b"a"))

        path = temp_dir / "download"
        path.write_bytes(buffer.getvalue())
        assert detect_archive_format(path) == "tar"

    def test_unknown_content_is_file(self, temp_dir):
        """Test unrecognized content is treated as a bare file."""
        path = temp_dir / "compiler"
        path.write_bytes(b"just some bytes")
        assert detect_archive_format(path) == "file"


class TestExtractArchive:
    """Test archive extraction."""

    def test_extract_zip(self, temp_dir, archive_builders):
        """Test extracting a zip archive."""
        archive = archive_builders.zip(
            temp_dir / "plugin.zip", {"plugin/lib/plugin.jar": b"jar"}
        )
        dest = temp_dir / "out"

        assert extract_archive(archive, dest) == "zip"
        assert (dest / "plugin" / "lib" / "plugin.jar").read_bytes() == b"jar"

    @pytest.mark.skipif(os.name == "nt", reason="Unix permissions")
    def test_extract_zip_restores_permissions(self, temp_dir, archive_builders):
        """Test executable bits stored in a zip survive extraction."""
        archive = archive_builders.zip(
            temp_dir / "ide.zip",
            {"bin/idea.sh": b"#!/bin/sh\n"},
            modes={"bin/idea.sh": 0o755},
        )
        dest = temp_dir / "out"
        extract_archive(archive, dest)

        assert os.access(dest / "bin" / "idea.sh", os.X_OK)

    def test_extract_tar_gz(self, temp_dir, archive_builders):
        """Test extracting a gzip-compressed tar."""
        archive = archive_builders.tar_gz(
            temp_dir / "jbr.tar.gz", {"jbr/bin/java": b"java"}
        )
        dest = temp_dir / "out"

        assert extract_archive(archive, dest) == "tar.gz"
        assert (dest / "jbr" / "bin" / "java").read_bytes() == b"java"

    def test_bare_file_is_copied(self, temp_dir):
        """Test a non-archive file is copied into the destination."""
        source = temp_dir / "tool"
        source.write_bytes(b"plain")
        dest = temp_dir / "out"

        assert extract_archive(source, dest) == "file"
        assert (dest / "tool").read_bytes() == b"plain"

    def test_missing_archive(self, temp_dir):
        """Test missing archive raises ExtractionError."""
        with pytest.raises(ExtractionError, match="Archive not found"):
            extract_archive(temp_dir / "missing.zip", temp_dir / "out")

    def test_corrupt_zip(self, temp_dir):
        """Test a corrupt zip raises ExtractionError."""
        archive = temp_dir / "broken.zip"
        archive.write_bytes(b"PK\x03\x04 not really a zip")

        with pytest.raises(ExtractionError):
            extract_archive(archive, temp_dir / "out")

    def test_zip_traversal_blocked(self, temp_dir):
        """Test zip members escaping the destination are rejected."""
        archive = temp_dir / "evil.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("../escaped.txt", b"x")

        with pytest.raises(InsecureArchiveError):
            extract_archive(archive, temp_dir / "out")
        assert not (temp_dir / "escaped.txt").exists()

    def test_tar_traversal_blocked(self, temp_dir, archive_builders):
        """Test tar members escaping the destination are rejected."""
        archive = archive_builders.tar_gz(temp_dir / "evil.tar.gz", {"../escaped.txt": b"x"})

        with pytest.raises(InsecureArchiveError):
            extract_archive(archive, temp_dir / "out")
        assert not (temp_dir / "escaped.txt").exists()


class TestPathHelpers:
    """Test path helpers."""

    def test_is_relative_to(self, temp_dir):
        """Test parent detection."""
        assert is_relative_to(temp_dir / "a" / "b", temp_dir)
        assert not is_relative_to(temp_dir, temp_dir / "a")

    def test_is_populated_directory(self, temp_dir):
        """Test populated directory detection."""
        empty = temp_dir / "empty"
        empty.mkdir()
        assert not is_populated_directory(empty)
        assert not is_populated_directory(temp_dir / "missing")

        (empty / "file").write_text("x")
        assert is_populated_directory(empty)


class TestAtomicWrite:
    """Test atomic_write."""

    def test_write_text(self, temp_dir):
        """Test writing text creates parent directories."""
        target = temp_dir / "nested" / "registry.json"
        atomic_write(target, '{"version": 1}')
        assert target.read_text() == '{"version": 1}'

    def test_write_bytes_replaces(self, temp_dir):
        """Test writing bytes replaces existing content."""
        target = temp_dir / "data.bin"
        target.write_bytes(b"old")
        atomic_write(target, b"new")
        assert target.read_bytes() == b"new"

    def test_no_temp_files_left(self, temp_dir):
        """Test no temporary files remain after writing."""
        atomic_write(temp_dir / "file.txt", "content")
        assert [p.name for p in temp_dir.iterdir()] == ["file.txt"]


class TestSafeRmtree:
    """Test safe_rmtree."""

    def test_remove_directory(self, temp_dir):
        """Test removing a directory tree."""
        target = temp_dir / "tree"
        (target / "sub").mkdir(parents=True)
        (target / "sub" / "file").write_text("x")

        safe_rmtree(target, require_prefix=temp_dir)
        assert not target.exists()

    def test_missing_is_noop(self, temp_dir):
        """Test removing a missing directory does nothing."""
        safe_rmtree(temp_dir / "missing")

    def test_outside_prefix_refused(self, temp_dir):
        """Test deletion outside the required prefix is refused."""
        target = temp_dir / "outside"
        target.mkdir()
        with pytest.raises(ValueError, match="not under required prefix"):
            safe_rmtree(target, require_prefix=temp_dir / "cache")
        assert target.exists()

    def test_file_rejected(self, temp_dir):
        """Test a regular file is not removed."""
        target = temp_dir / "file.txt"
        target.write_text("x")
        with pytest.raises(FilesystemError):
            safe_rmtree(target)
