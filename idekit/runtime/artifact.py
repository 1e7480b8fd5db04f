"""
Canonical JetBrains Runtime artifact names.

The mirror serves runtimes under names derived from the requested version,
variant, platform and architecture, for example
``jbr_jcef-17.0.2-linux-x64-b469.1`` or ``jbrex8u152b1024.10_windows_x86``.
The derivation below is a naming contract with the mirror and must not
drift.
"""

import os
from dataclasses import dataclass
from typing import Optional

from idekit.constants import DEFAULT_JBR_REPOSITORY
from idekit.core.platform import PlatformInfo, detect_platform
from idekit.versioning.version import Version

# Checked in order; the first match wins
_VERSION_PREFIXES = (
    "jbrsdk-",
    "jbr_jcef-",
    "jbr_dcevm-",
    "jbr_fd-",
    "jbr_nomod-",
    "jbr-",
    "jbrx-",
)
LEGACY_PREFIX = "jbrex"

LEGACY_BUILD_THRESHOLD = Version.parse("1483.24")
JCEF_BUILD_THRESHOLD = Version.parse("1319.6")


def jbr_arch(new_format: bool, platform_info: Optional[PlatformInfo] = None) -> str:
    """
    Architecture token for runtime names.

    Args:
        new_format: Selects the 32-bit fallback token ('i586' vs 'x86')
        platform_info: Host platform (detected if omitted)
    """
    platform_info = platform_info or detect_platform()
    machine = platform_info.machine.lower()

    if machine in ("aarch64", "arm64"):
        return "aarch64"
    if machine in ("x86_64", "amd64"):
        return "x64"
    if platform_info.is_windows and os.environ.get("ProgramFiles(x86)") is not None:
        return "x64"
    return "i586" if new_format else "x86"


def _prefix(version: str, variant: Optional[str]) -> str:
    if variant:
        return "jbrsdk-" if variant == "sdk" else f"jbr_{variant}-"
    for prefix in _VERSION_PREFIXES:
        if version.startswith(prefix):
            return prefix
    if version.startswith("jbrex8"):
        return LEGACY_PREFIX
    return ""


@dataclass(frozen=True)
class JbrArtifact:
    """Runtime artifact name and the repository serving it."""

    name: str
    repository_url: str = DEFAULT_JBR_REPOSITORY

    @classmethod
    def from_version(
        cls,
        jbr_version: str,
        jbr_variant: Optional[str] = None,
        jbr_arch_override: Optional[str] = None,
        platform_info: Optional[PlatformInfo] = None,
    ) -> "JbrArtifact":
        """
        Compute the artifact for a runtime version.

        Args:
            jbr_version: Runtime version, e.g. '17.0.2b469.1', 'u202b1483.24'
                or 'jbr_dcevm-11_0_13b1751.21'
            jbr_variant: Explicit variant ('sdk', 'jcef', 'fd', 'dcevm', 'nomod')
            jbr_arch_override: Explicit architecture token
            platform_info: Target platform (detected if omitted)

        Example:
            >>> linux = PlatformInfo("linux", "x64", "x86_64")
            >>> JbrArtifact.from_version("17.0.2b469.1", platform_info=linux).name
            'jbr_jcef-17.0.2-linux-x64-b469.1'
        """
        platform_info = platform_info or detect_platform()
        version = ("8" if jbr_version.startswith("u") else "") + jbr_version
        prefix = _prefix(version, jbr_variant)

        last_b = version.rfind("b")
        last_dash = version.rfind("-") + 1

        if last_b > -1:
            major = version[last_dash:last_b]
            if last_dash == last_b:
                build = version[: last_dash - 1]
            else:
                build = version[last_b + 1 :]
        else:
            major = version[last_dash:]
            build = ""

        build_number = Version.parse(build)
        is_java8 = major.startswith("8")
        is_java17 = major.startswith("17")
        platform = platform_info.jbr_platform

        if prefix == LEGACY_PREFIX or (is_java8 and build_number < LEGACY_BUILD_THRESHOLD):
            return cls(
                f"{LEGACY_PREFIX}{major}b{build}_{platform}_{jbr_arch(False, platform_info)}"
            )

        arch = jbr_arch_override or jbr_arch(is_java8, platform_info)
        if not prefix:
            if is_java17:
                prefix = "jbr_jcef-"
            elif is_java8:
                prefix = "jbrx-"
            elif platform_info.is_macos and arch == "aarch64":
                prefix = "jbr_jcef-"
            elif build_number < JCEF_BUILD_THRESHOLD:
                prefix = "jbr-"
            else:
                prefix = "jbr_jcef-"

        return cls(f"{prefix}{major}-{platform}-{arch}-b{build}")


__all__ = ["JbrArtifact", "jbr_arch"]
