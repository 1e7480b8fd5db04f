"""
Artifact coordinates and repository candidates.

A coordinate names a downloadable unit independently of where it is served
from; a repository candidate knows how to turn a coordinate into a URL.
"""

import base64
import re
from dataclasses import dataclass
from typing import Dict, Optional

LAYOUT_MAVEN = "maven"
LAYOUT_IVY = "ivy"

_IVY_TOKEN = re.compile(r"\[(\w+)\]")
_IVY_OPTIONAL = re.compile(r"\(([^()]*)\)")


@dataclass(frozen=True)
class ArtifactCoordinate:
    """
    Logical artifact identity.

    Attributes:
        group: Group/organisation (e.g. 'com.jetbrains.intellij.java')
        name: Artifact/module name
        version: Version or revision
        classifier: Optional classifier
        extension: File extension without the leading dot
    """

    group: str
    name: str
    version: str
    classifier: Optional[str] = None
    extension: str = "zip"

    @property
    def file_name(self) -> str:
        classifier = f"-{self.classifier}" if self.classifier else ""
        return f"{self.name}-{self.version}{classifier}.{self.extension}"

    @property
    def cache_key(self) -> str:
        key = f"{self.group}:{self.name}:{self.version}"
        if self.classifier:
            key += f":{self.classifier}"
        return f"{key}@{self.extension}"

    def ivy_tokens(self) -> Dict[str, Optional[str]]:
        return {
            "organisation": self.group,
            "organization": self.group,
            "module": self.name,
            "artifact": self.name,
            "revision": self.version,
            "classifier": self.classifier,
            "ext": self.extension,
            "type": self.extension,
        }

    def __str__(self) -> str:
        return self.cache_key


@dataclass(frozen=True)
class RepositoryAuth:
    """Credentials sent with every request to a repository."""

    mode: str  # 'basic' or 'bearer'
    username: Optional[str] = None
    password: Optional[str] = None
    token: Optional[str] = None

    def headers(self) -> Dict[str, str]:
        if self.mode == "basic":
            raw = f"{self.username or ''}:{self.password or ''}".encode("utf-8")
            return {"Authorization": f"Basic {base64.b64encode(raw).decode('ascii')}"}
        if self.mode == "bearer":
            return {"Authorization": f"Bearer {self.token or ''}"}
        raise ValueError(f"Unsupported auth mode: {self.mode}")


@dataclass(frozen=True)
class RepositoryCandidate:
    """
    One source to try for a coordinate.

    Attributes:
        url: Base URL
        layout: 'maven' or 'ivy'
        pattern: Ivy artifact pattern relative to url (ivy layout only)
        auth: Optional credentials
        name: Label used in logs and error messages
    """

    url: str
    layout: str = LAYOUT_MAVEN
    pattern: Optional[str] = None
    auth: Optional[RepositoryAuth] = None
    name: Optional[str] = None

    def artifact_url(self, coordinate: ArtifactCoordinate) -> str:
        """
        Build the URL of a coordinate in this repository.

        Example:
            >>> repo = RepositoryCandidate("https://repo.example.com/releases")
            >>> repo.artifact_url(ArtifactCoordinate("com.acme", "tool", "1.0", extension="jar"))
            'https://repo.example.com/releases/com/acme/tool/1.0/tool-1.0.jar'
        """
        base = self.url.rstrip("/")

        if self.layout == LAYOUT_IVY:
            if not self.pattern:
                raise ValueError(f"Ivy repository {self.url} has no artifact pattern")
            return f"{base}/{expand_ivy_pattern(self.pattern, coordinate).lstrip('/')}"

        group_path = coordinate.group.replace(".", "/")
        return f"{base}/{group_path}/{coordinate.name}/{coordinate.version}/{coordinate.file_name}"

    def metadata_url(self, group: str, name: str) -> str:
        """URL of maven-metadata.xml for group:name in this repository."""
        return f"{self.url.rstrip('/')}/{group.replace('.', '/')}/{name}/maven-metadata.xml"

    def headers(self) -> Dict[str, str]:
        return self.auth.headers() if self.auth else {}

    def __str__(self) -> str:
        return self.name or self.url


def expand_ivy_pattern(pattern: str, coordinate: ArtifactCoordinate) -> str:
    """
    Substitute ``[token]`` placeholders in an Ivy pattern.

    Parenthesized sections are optional and dropped when any token inside
    them has no value.

    Example:
        >>> expand_ivy_pattern("[revision].tar.gz", ArtifactCoordinate("g", "m", "r1"))
        'r1.tar.gz'
    """
    tokens = coordinate.ivy_tokens()

    def substitute(text: str) -> str:
        return _IVY_TOKEN.sub(lambda m: tokens.get(m.group(1)) or "", text)

    def optional(match) -> str:
        section = match.group(1)
        names = _IVY_TOKEN.findall(section)
        if all(tokens.get(name) for name in names):
            return substitute(section)
        return ""

    return substitute(_IVY_OPTIONAL.sub(optional, pattern))


def maven_repository(url: str, auth: Optional[RepositoryAuth] = None) -> RepositoryCandidate:
    return RepositoryCandidate(url=url, layout=LAYOUT_MAVEN, auth=auth)


def ivy_repository(
    url: str, pattern: str, auth: Optional[RepositoryAuth] = None
) -> RepositoryCandidate:
    return RepositoryCandidate(url=url, layout=LAYOUT_IVY, pattern=pattern, auth=auth)


__all__ = [
    "LAYOUT_MAVEN",
    "LAYOUT_IVY",
    "ArtifactCoordinate",
    "RepositoryAuth",
    "RepositoryCandidate",
    "expand_ivy_pattern",
    "maven_repository",
    "ivy_repository",
]
