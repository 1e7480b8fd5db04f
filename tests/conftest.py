"""
Pytest configuration and shared fixtures for idekit tests.
"""

import io
import json
import tarfile
import zipfile
import pytest
import tempfile
from pathlib import Path
from typing import Dict, Generator, Optional

from idekit.core.platform import PlatformInfo


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """
    Skip integration tests unless --integration flag is provided.
    """
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def isolated_home(temp_dir: Path, monkeypatch) -> Path:
    """Create isolated home directory for tests."""
    fake_home = temp_dir / "home"
    fake_home.mkdir()

    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("USERPROFILE", str(fake_home))
    monkeypatch.delenv("JAVA_HOME", raising=False)

    return fake_home


@pytest.fixture
def cache_home(temp_dir: Path, monkeypatch) -> Path:
    """Point the idekit cache home at a temporary directory."""
    cache_dir = temp_dir / "idekit-cache"
    monkeypatch.setenv("IDEKIT_CACHE_DIR", str(cache_dir))
    return cache_dir


@pytest.fixture
def linux_x64() -> PlatformInfo:
    return PlatformInfo("linux", "x64", "x86_64")


@pytest.fixture
def macos_arm64() -> PlatformInfo:
    return PlatformInfo("macos", "arm64", "arm64")


@pytest.fixture
def windows_x64() -> PlatformInfo:
    return PlatformInfo("windows", "x64", "amd64")


# ============================================================================
# Archive Builders
# ============================================================================


def build_zip(path: Path, files: Dict[str, bytes], modes: Optional[Dict[str, int]] = None) -> Path:
    """Write a zip archive; modes maps member names to Unix permission bits."""
    path.parent.mkdir(parents=True, exist_ok=True)
    modes = modes or {}
    with zipfile.ZipFile(path, "w") as zf:
        for name, content in files.items():
            info = zipfile.ZipInfo(name)
            if name in modes:
                info.external_attr = modes[name] << 16
            zf.writestr(info, content)
    return path


def build_tar_gz(path: Path, files: Dict[str, bytes], modes: Optional[Dict[str, int]] = None) -> Path:
    """Write a gzip-compressed tar archive."""
    path.parent.mkdir(parents=True, exist_ok=True)
    modes = modes or {}
    with tarfile.open(path, "w:gz") as tar:
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = modes.get(name, 0o644)
            tar.addfile(info, io.BytesIO(content))
    return path


def zip_bytes(files: Dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buffer.getvalue()


def tar_gz_bytes(files: Dict[str, bytes], modes: Optional[Dict[str, int]] = None) -> bytes:
    modes = modes or {}
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = modes.get(name, 0o644)
            tar.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


def plugin_xml(
    plugin_id: str,
    version: str = "1.0.0",
    since: Optional[str] = None,
    until: Optional[str] = None,
) -> bytes:
    attributes = ""
    if since:
        attributes += f' since-build="{since}"'
    if until:
        attributes += f' until-build="{until}"'
    return (
        f"<idea-plugin><id>{plugin_id}</id><name>{plugin_id}</name>"
        f"<version>{version}</version><idea-version{attributes}/></idea-plugin>"
    ).encode("utf-8")


@pytest.fixture
def archive_builders():
    """Archive builder helpers, for tests that need them as a fixture."""

    class Builders:
        zip = staticmethod(build_zip)
        tar_gz = staticmethod(build_tar_gz)
        zip_bytes = staticmethod(zip_bytes)
        tar_gz_bytes = staticmethod(tar_gz_bytes)
        plugin_xml = staticmethod(plugin_xml)

    return Builders


@pytest.fixture
def fake_ide(temp_dir: Path) -> Path:
    """
    Create a minimal IDE installation.

    Layout:
        lib/app.jar
        jbr/bin/java
        dependencies.txt (runtimeBuild=17.0.2b469.1)
        product-info.json (IC-213.6777.52)
        plugins/markdown/lib/markdown.jar (org.intellij.plugins.markdown)
    """
    ide_dir = temp_dir / "ideaIC-2021.3.2"
    (ide_dir / "lib").mkdir(parents=True)
    (ide_dir / "lib" / "app.jar").write_bytes(b"")

    java = ide_dir / "jbr" / "bin" / "java"
    java.parent.mkdir(parents=True)
    java.write_text("#!/bin/sh\n")
    java.chmod(0o755)

    (ide_dir / "dependencies.txt").write_text(
        "# Runtime\nruntimeBuild=17.0.2b469.1\njdkBuild=11_0_13b1751.21\n"
    )
    (ide_dir / "product-info.json").write_text(
        json.dumps(
            {
                "name": "IntelliJ IDEA",
                "version": "2021.3.2",
                "buildNumber": "213.6777.52",
                "productCode": "IC",
                "bundledPlugins": ["com.intellij.java", "org.intellij.plugins.markdown"],
                "modules": ["com.intellij.modules.java"],
            }
        )
    )

    build_zip(
        ide_dir / "plugins" / "markdown" / "lib" / "markdown.jar",
        {"META-INF/plugin.xml": plugin_xml("org.intellij.plugins.markdown", "213.6777.52")},
    )
    return ide_dir
