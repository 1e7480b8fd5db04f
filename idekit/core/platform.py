"""
Platform detection for idekit.

This module detects the current operating system and CPU architecture and
translates them into the tokens used by runtime and IDE download names.

Usage:
    from idekit.core.platform import detect_platform

    info = detect_platform()
    print(f"OS: {info.os}")                     # 'linux'
    print(f"Architecture: {info.arch}")         # 'x64'
    print(f"Runtime token: {info.jbr_platform}") # 'linux'
"""

import functools
import platform
from dataclasses import dataclass


@dataclass(frozen=True)
class PlatformInfo:
    """
    Host platform information.

    Attributes:
        os: Operating system ('windows', 'linux', 'macos')
        arch: Normalized CPU architecture ('x64', 'arm64', 'x86', 'arm', ...)
        machine: Raw machine string reported by the interpreter
    """

    os: str
    arch: str
    machine: str

    @property
    def is_windows(self) -> bool:
        return self.os == "windows"

    @property
    def is_macos(self) -> bool:
        return self.os == "macos"

    @property
    def jbr_platform(self) -> str:
        """Platform token used in runtime artifact names."""
        if self.is_windows:
            return "windows"
        if self.is_macos:
            return "osx"
        return "linux"

    def platform_string(self) -> str:
        """
        Get canonical platform string (e.g., 'linux-x64', 'macos-arm64').
        """
        return f"{self.os}-{self.arch}"

    def __str__(self) -> str:
        return f"{self.platform_string()} ({self.machine})"


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.

    Returns:
        PlatformInfo instance with detected platform information
    """
    machine = platform.machine().lower()
    return PlatformInfo(os=_detect_os(), arch=_normalize_arch(machine), machine=machine)


def _detect_os() -> str:
    """
    Detect operating system.

    Returns:
        Normalized OS name: 'windows', 'linux', 'macos'

    Raises:
        RuntimeError: If OS is not supported
    """
    system = platform.system().lower()

    if system == "windows":
        return "windows"
    elif system == "linux":
        return "linux"
    elif system == "darwin":
        return "macos"
    else:
        raise RuntimeError(f"Unsupported operating system: {system}")


def _normalize_arch(machine: str) -> str:
    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i586", "i686", "x86"):
        return "x86"
    elif machine.startswith("arm"):
        return "arm"
    # Return original for unknown architectures
    return machine


def clear_platform_cache():
    """
    Clear the platform detection cache.

    This forces the next call to detect_platform() to re-detect.
    """
    detect_platform.cache_clear()


__all__ = [
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
]
