"""
Java toolchain discovery.

A project can ask for a toolchain by language version and vendor. The
runtime resolver consults a ToolchainService for it; LocalToolchainService
finds JDKs already installed in the usual download locations by reading
their ``release`` files.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol

from idekit.core.platform import PlatformInfo, detect_platform
from idekit.core.properties import load_properties

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolchainSpec:
    """
    Requested Java toolchain.

    Attributes:
        language_version: Java feature release (8, 11, 17, ...)
        vendor: Vendor name to match, e.g. 'JetBrains'
    """

    language_version: Optional[int] = None
    vendor: Optional[str] = None

    def vendor_matches(self, implementor: Optional[str]) -> bool:
        if not self.vendor:
            return True
        return bool(implementor) and self.vendor.lower() in implementor.lower()


@dataclass(frozen=True)
class JavaInstallation:
    """A JDK found on disk."""

    home: Path
    version: str
    implementor: str

    @property
    def language_version(self) -> Optional[int]:
        return java_feature_version(self.version)


class ToolchainService(Protocol):
    def find_installation(self, spec: ToolchainSpec) -> Optional[Path]:
        ...


def java_feature_version(version: str) -> Optional[int]:
    """
    Feature release of a JAVA_VERSION value.

    Example:
        >>> java_feature_version("1.8.0_292")
        8
        >>> java_feature_version("17.0.2")
        17
    """
    parts = version.split(".")
    try:
        if parts[0] == "1" and len(parts) > 1:
            return int(parts[1])
        return int(parts[0].split("-")[0].split("+")[0])
    except ValueError:
        return None


def read_release_file(home: Path) -> Optional[JavaInstallation]:
    """Read JAVA_VERSION and IMPLEMENTOR from a JDK's release file."""
    properties = load_properties(home / "release")
    version = properties.get("JAVA_VERSION", "").strip('"')
    if not version:
        return None
    return JavaInstallation(
        home=home,
        version=version,
        implementor=properties.get("IMPLEMENTOR", "").strip('"'),
    )


class LocalToolchainService:
    """
    Finds installed JDKs in standard download locations.

    Searched locations:
    - $JAVA_HOME
    - ~/.jdks (IDE-managed downloads)
    - ~/.gradle/jdks (Gradle-provisioned toolchains)
    - /Library/Java/JavaVirtualMachines (macOS)
    """

    def __init__(
        self,
        search_dirs: Optional[List[Path]] = None,
        platform_info: Optional[PlatformInfo] = None,
    ):
        self.platform = platform_info or detect_platform()
        self.search_dirs = search_dirs if search_dirs is not None else self._default_dirs()

    def _default_dirs(self) -> List[Path]:
        home = Path.home()
        dirs = [home / ".jdks", home / ".gradle" / "jdks"]
        if self.platform.is_macos:
            dirs.append(Path("/Library/Java/JavaVirtualMachines"))
        return dirs

    def installations(self) -> List[JavaInstallation]:
        """List every JDK found, $JAVA_HOME first."""
        candidates = []
        java_home = os.environ.get("JAVA_HOME")
        if java_home:
            candidates.append(Path(java_home))

        for location in self.search_dirs:
            if not location.is_dir():
                logger.debug(f"Toolchain location does not exist: {location}")
                continue
            for entry in sorted(location.iterdir()):
                if entry.is_dir():
                    candidates.append(entry)
                    # macOS bundles keep the home under Contents/Home
                    candidates.append(entry / "Contents" / "Home")

        found = []
        for home in candidates:
            installation = read_release_file(home)
            if installation:
                logger.debug(
                    f"Found JDK {installation.version} ({installation.implementor}) at {home}"
                )
                found.append(installation)
        return found

    def find_installation(self, spec: ToolchainSpec) -> Optional[Path]:
        """
        Find a JDK matching spec.

        Returns:
            Home directory of the first matching JDK, or None
        """
        for installation in self.installations():
            if not spec.vendor_matches(installation.implementor):
                continue
            if (
                spec.language_version is not None
                and installation.language_version != spec.language_version
            ):
                continue
            return installation.home
        return None


__all__ = [
    "ToolchainSpec",
    "JavaInstallation",
    "ToolchainService",
    "java_feature_version",
    "read_release_file",
    "LocalToolchainService",
]
