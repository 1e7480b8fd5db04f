"""
maven-metadata.xml parsing and closest-version lookup.
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import requests

from idekit.constants import VERSION_LATEST
from idekit.core.download import fetch_text
from idekit.core.exceptions import ArtifactNotFoundError, DownloadError
from idekit.versioning.version import Version

logger = logging.getLogger(__name__)


@dataclass
class MavenMetadata:
    """The versioning section of a maven-metadata.xml document."""

    versions: List[str] = field(default_factory=list)
    latest: Optional[str] = None
    release: Optional[str] = None

    @property
    def newest(self) -> Optional[str]:
        """Release, else latest, else the last listed version."""
        if self.release:
            return self.release
        if self.latest:
            return self.latest
        return self.versions[-1] if self.versions else None


def _text(element: Optional[ET.Element]) -> Optional[str]:
    if element is None or not element.text:
        return None
    return element.text.strip() or None


def parse_metadata(text: str) -> MavenMetadata:
    """
    Parse maven-metadata.xml content.

    Raises:
        ET.ParseError: If the document is not well-formed XML
    """
    root = ET.fromstring(text)
    versioning = root.find("versioning")
    if versioning is None:
        return MavenMetadata()

    versions = []
    versions_elem = versioning.find("versions")
    if versions_elem is not None:
        for version_elem in versions_elem.findall("version"):
            version = _text(version_elem)
            if version:
                versions.append(version)

    return MavenMetadata(
        versions=versions,
        latest=_text(versioning.find("latest")),
        release=_text(versioning.find("release")),
    )


def fetch_metadata(
    url: str,
    session: Optional[requests.Session] = None,
    headers: Optional[dict] = None,
) -> MavenMetadata:
    """
    Download and parse maven-metadata.xml.

    Raises:
        DownloadError: If the document cannot be fetched or parsed
    """
    text = fetch_text(url, session=session, headers=headers)
    try:
        return parse_metadata(text)
    except ET.ParseError as e:
        raise DownloadError(f"Malformed Maven metadata at {url}: {e}") from e


def resolve_latest_version(
    url: str,
    session: Optional[requests.Session] = None,
    headers: Optional[dict] = None,
) -> str:
    """
    Newest version published under a maven-metadata.xml URL.

    Raises:
        DownloadError: If the document cannot be fetched or parsed
        ArtifactNotFoundError: If the metadata lists no version
    """
    version = fetch_metadata(url, session=session, headers=headers).newest
    if not version:
        raise ArtifactNotFoundError(f"latest version at {url}")
    logger.debug(f"Latest version at {url}: {version}")
    return version


def is_latest(version: Optional[str]) -> bool:
    """True when version is absent or the ``latest`` placeholder."""
    return not version or version.lower() == VERSION_LATEST


def closest_version(versions: Iterable[str], target: str) -> str:
    """
    Pick the greatest version that is not greater than target.

    Versions are compared leniently by their major/minor/patch numbers.

    Raises:
        ArtifactNotFoundError: If every version is greater than target

    Example:
        >>> closest_version(["211.1", "212.5", "213.9"], "213.1")
        '212.5'
    """
    limit = Version.parse(target)
    candidates = [Version.parse(v) for v in versions]
    eligible = [v for v in candidates if v <= limit]
    if not eligible:
        raise ArtifactNotFoundError(f"version <= {target}")
    return max(eligible).version


__all__ = [
    "MavenMetadata",
    "parse_metadata",
    "fetch_metadata",
    "resolve_latest_version",
    "is_latest",
    "closest_version",
]
