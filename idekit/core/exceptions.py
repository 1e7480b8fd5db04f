"""
Centralized exception hierarchy for idekit.

Every error raised by the resolution engine derives from IdekitError so
callers can separate resolution failures from programming errors.
"""

from typing import Iterable, Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class IdekitError(Exception):
    """Base exception for all idekit errors."""

    pass


# ============================================================================
# Parsing Exceptions
# ============================================================================


class ParseError(IdekitError):
    """Raised when a version, build number or notation string is malformed."""

    def __init__(self, value: str, reason: str = ""):
        self.value = value
        self.reason = reason
        msg = f"Cannot parse '{value}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class InvalidNotationError(ParseError):
    """Raised for malformed plugin dependency notations."""

    pass


# ============================================================================
# Resolution Exceptions
# ============================================================================


class NotFoundError(IdekitError):
    """Base exception when something cannot be resolved from any source."""

    pass


class ArtifactNotFoundError(NotFoundError):
    """Raised when an artifact is not resolvable after exhausting all sources."""

    def __init__(self, coordinate, attempted: Optional[Iterable[str]] = None):
        self.coordinate = coordinate
        self.attempted = list(attempted or [])
        msg = f"Artifact not resolvable: {coordinate}"
        if self.attempted:
            msg += "\nAttempted sources:\n" + "\n".join(
                f"  - {source}" for source in self.attempted
            )
        super().__init__(msg)


class PluginNotFoundError(NotFoundError):
    """Raised when a plugin cannot be found in any configured repository."""

    def __init__(self, notation, attempted: Optional[Iterable[str]] = None):
        self.notation = notation
        self.attempted = list(attempted or [])
        msg = f"Plugin not found: {notation}"
        if self.attempted:
            msg += f" (searched: {', '.join(self.attempted)})"
        super().__init__(msg)


class DownloadError(IdekitError):
    """Raised when a single download attempt fails."""

    pass


# ============================================================================
# Cache Exceptions
# ============================================================================


class ExtractionError(IdekitError):
    """Raised when an archive is corrupt or in an unsupported format."""

    def __init__(self, message: str, archive=None):
        self.archive = archive
        super().__init__(message)


class RegistryError(IdekitError):
    """Base exception for artifact registry errors."""

    pass


class RegistryLockTimeout(RegistryError):
    """Raised when registry lock cannot be acquired within timeout."""

    pass


# ============================================================================
# Compatibility Exceptions
# ============================================================================


class IncompatibleVersionError(IdekitError):
    """Raised when a plugin or compiler version is outside the target range."""

    def __init__(self, subject: str, required: str, actual: str):
        self.subject = subject
        self.required = required
        self.actual = actual
        super().__init__(
            f"{subject} is not compatible: requires {required}, actual {actual}"
        )


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigError(IdekitError):
    """Configuration parsing or validation error."""

    pass


__all__ = [
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
