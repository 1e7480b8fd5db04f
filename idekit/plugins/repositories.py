"""
Plugin repositories.

Three kinds of repository serve plugin archives:

- MarketplaceRepository: the JetBrains Marketplace Maven mirror. Channels
  map to Maven groups; the latest compatible version comes from the
  Marketplace list API.
- MavenPluginRepository: any Maven repository laid out like the mirror.
- CustomPluginRepository: a self-hosted XML feed, either the categorized
  ``<plugin-repository>`` schema or the flat ``<plugins>`` schema.

``resolve`` returns the downloaded archive, or None when the repository does
not list the plugin. Network and format failures raise; the plugin resolver
treats them as a failure of that repository only.
"""

import hashlib
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union

from idekit.constants import DEFAULT_INTELLIJ_PLUGINS_REPOSITORY, MARKETPLACE_HOST
from idekit.core.directory import get_global_cache_dir
from idekit.core.download import fetch_text
from idekit.core.exceptions import ConfigError, NotFoundError, ParseError
from idekit.plugins.notation import PluginNotation
from idekit.repository.coordinates import ArtifactCoordinate, RepositoryAuth, maven_repository
from idekit.repository.downloader import MirroredDownloader
from idekit.repository.maven_metadata import is_latest, resolve_latest_version
from idekit.versioning.build_number import compare, parse
from idekit.versioning.version import Version

logger = logging.getLogger(__name__)

PLUGINS_GROUP = "com.jetbrains.plugins"
PLUGIN_EXTENSIONS = ("zip", "jar")


class PluginRepository:
    """Base class of plugin repositories."""

    url: str = ""

    def resolve(
        self,
        notation: PluginNotation,
        target_build: Optional[str],
        downloader: MirroredDownloader,
    ) -> Optional[Path]:
        raise NotImplementedError

    def __str__(self) -> str:
        return f"{type(self).__name__}({self.url})"


# ============================================================================
# Maven Repositories
# ============================================================================


def plugin_group(channel: Optional[str]) -> str:
    """
    Maven group of a plugin channel.

    Example:
        >>> plugin_group("eap")
        'eap.com.jetbrains.plugins'
        >>> plugin_group(None)
        'com.jetbrains.plugins'
    """
    return f"{channel}.{PLUGINS_GROUP}" if channel else PLUGINS_GROUP


class MavenPluginRepository(PluginRepository):
    """Plugins published to a Maven repository."""

    def __init__(self, url: str, auth: Optional[RepositoryAuth] = None):
        self.url = url.rstrip("/")
        self.repository = maven_repository(self.url, auth)

    def latest_version(
        self,
        notation: PluginNotation,
        target_build: Optional[str],
        downloader: MirroredDownloader,
    ) -> Optional[str]:
        """Newest version listed in maven-metadata.xml."""
        url = self.repository.metadata_url(plugin_group(notation.channel), notation.id)
        return resolve_latest_version(
            url, session=downloader.session, headers=self.repository.headers()
        )

    def resolve(
        self,
        notation: PluginNotation,
        target_build: Optional[str],
        downloader: MirroredDownloader,
    ) -> Optional[Path]:
        if is_latest(notation.version):
            version = self.latest_version(notation, target_build, downloader)
            if not version:
                logger.debug(f"{self} lists no version of {notation.id}")
                return None
            notation = notation.with_version(version)

        group = plugin_group(notation.channel)
        last_error = None
        for extension in PLUGIN_EXTENSIONS:
            coordinate = ArtifactCoordinate(
                group, notation.id, notation.version, extension=extension
            )
            try:
                return downloader.resolve(coordinate, [self.repository])
            except NotFoundError as e:
                last_error = e
        raise last_error


class MarketplaceRepository(MavenPluginRepository):
    """
    JetBrains Marketplace.

    Without a requested version, the Marketplace list API picks the latest
    version compatible with the target build.
    """

    def __init__(
        self,
        url: str = DEFAULT_INTELLIJ_PLUGINS_REPOSITORY,
        host: str = MARKETPLACE_HOST,
        auth: Optional[RepositoryAuth] = None,
    ):
        super().__init__(url, auth)
        self.host = host.rstrip("/")

    def latest_version(
        self,
        notation: PluginNotation,
        target_build: Optional[str],
        downloader: MirroredDownloader,
    ) -> Optional[str]:
        if not target_build:
            return super().latest_version(notation, target_build, downloader)

        params = {"pluginId": notation.id, "build": target_build}
        if notation.channel:
            params["channel"] = notation.channel

        text = fetch_text(f"{self.host}/plugins/list", session=downloader.session, params=params)
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise ParseError(text[:80], f"malformed Marketplace response: {e}") from e

        version = root.findtext(".//idea-plugin/version")
        if version:
            logger.debug(f"Latest {notation.id} compatible with {target_build}: {version}")
        return version.strip() if version else None


# ============================================================================
# Custom Repositories
# ============================================================================


@dataclass(frozen=True)
class CustomPluginEntry:
    """One plugin listed by a custom repository feed."""

    id: str
    version: str
    url: str
    since_build: Optional[str] = None
    until_build: Optional[str] = None

    def compatible_with(self, build: Optional[str]) -> bool:
        if not build:
            return True
        try:
            if self.since_build and compare(build, parse(self.since_build)) < 0:
                return False
            if self.until_build and compare(build, parse(self.until_build)) > 0:
                return False
        except ParseError:
            return False
        return True


def _idea_version(element: ET.Element):
    idea_version = element.find("idea-version")
    if idea_version is None:
        return None, None
    return idea_version.get("since-build") or None, idea_version.get("until-build") or None


def parse_custom_feed(text: str, repository_url: str) -> List[CustomPluginEntry]:
    """
    Parse a custom repository feed.

    The schema is chosen by the root element: ``<plugin-repository>`` lists
    ``category/idea-plugin`` entries with download URLs relative to the
    repository, ``<plugins>`` lists ``plugin`` elements with ``id``, ``url``
    and ``version`` attributes.

    Raises:
        ParseError: If the document is malformed or has another root element
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ParseError(repository_url, f"malformed plugin feed: {e}") from e

    entries = []
    if root.tag == "plugin-repository":
        for plugin in root.findall("category/idea-plugin"):
            plugin_id = (plugin.findtext("id") or "").strip()
            version = (plugin.findtext("version") or "").strip()
            download = (plugin.findtext("download-url") or "").strip()
            if not (plugin_id and version and download):
                continue
            since, until = _idea_version(plugin)
            entries.append(
                CustomPluginEntry(plugin_id, version, _join(repository_url, download), since, until)
            )
    elif root.tag == "plugins":
        for plugin in root.findall("plugin"):
            plugin_id = plugin.get("id")
            version = plugin.get("version")
            url = plugin.get("url")
            if not (plugin_id and version and url):
                continue
            since, until = _idea_version(plugin)
            entries.append(
                CustomPluginEntry(plugin_id, version, _join(repository_url, url), since, until)
            )
    else:
        raise ParseError(
            repository_url,
            f"unexpected root element <{root.tag}>, expected <plugin-repository> or <plugins>",
        )
    return entries


def _join(base: str, url: str) -> str:
    if "://" in url:
        return url
    return f"{base.rstrip('/')}/{url.lstrip('/')}"


class CustomPluginRepository(PluginRepository):
    """
    Self-hosted plugin repository.

    The URL points either at the feed itself (``.../plugins.xml``) or at a
    directory containing ``updatePlugins.xml``.
    """

    def __init__(
        self,
        url: str,
        cache_dir: Optional[Path] = None,
        auth: Optional[RepositoryAuth] = None,
    ):
        url = url.rstrip("/")
        if url.endswith(".xml"):
            self.url = url[: url.rfind("/")]
            self.feed_url = url
        else:
            self.url = url
            self.feed_url = f"{url}/updatePlugins.xml"
        self.cache_dir = Path(cache_dir) if cache_dir else get_global_cache_dir() / "plugins"
        self.auth = auth

    @property
    def repository_cache_dir(self) -> Path:
        digest = hashlib.sha1(self.url.encode("utf-8")).hexdigest()
        return self.cache_dir / digest / PLUGINS_GROUP

    def headers(self, url: str) -> dict:
        """Credentials for url; only URLs inside the repository get them."""
        if self.auth is None or not url.startswith(self.url):
            return {}
        return self.auth.headers()

    def entries(self, downloader: MirroredDownloader) -> List[CustomPluginEntry]:
        logger.debug(f"Loading list of plugins from: {self.feed_url}")
        text = fetch_text(
            self.feed_url, session=downloader.session, headers=self.headers(self.feed_url)
        )
        return parse_custom_feed(text, self.url)

    def find(
        self,
        notation: PluginNotation,
        target_build: Optional[str],
        entries: Iterable[CustomPluginEntry],
    ) -> Optional[CustomPluginEntry]:
        """
        Find the entry for a notation.

        Ids and versions match case-insensitively. Without a requested
        version, or with ``latest``, the newest entry compatible with
        target_build is chosen.
        """
        matching = [e for e in entries if e.id.lower() == notation.id.lower()]
        if not is_latest(notation.version):
            wanted = notation.version.lower()
            return next((e for e in matching if e.version.lower() == wanted), None)

        compatible = [e for e in matching if e.compatible_with(target_build)]
        if not compatible:
            return None
        return max(compatible, key=lambda e: Version.parse(e.version))

    def resolve(
        self,
        notation: PluginNotation,
        target_build: Optional[str],
        downloader: MirroredDownloader,
    ) -> Optional[Path]:
        entry = self.find(notation, target_build, self.entries(downloader))
        if entry is None:
            return None

        target = self.repository_cache_dir / f"{notation.id}-{entry.version}.zip"
        return downloader.resolve_url(entry.url, target, headers=self.headers(entry.url))


# ============================================================================
# Configuration
# ============================================================================


def plugin_repositories_from_config(
    entries: Optional[Iterable] = None,
    cache_dir: Optional[Path] = None,
) -> List[PluginRepository]:
    """
    Build plugin repositories from configuration entries.

    Args:
        entries: Items with ``type`` ('marketplace', 'maven' or 'custom'),
            ``url`` and optional ``token`` or ``username``/``password``
            credentials, as objects or dicts; the Marketplace alone when empty
        cache_dir: Cache directory for custom repository downloads

    Raises:
        ConfigError: On an unknown repository type or a missing URL
    """
    repositories: List[PluginRepository] = []
    for entry in entries or []:
        kind = _field(entry, "type") or "maven"
        url = _field(entry, "url")
        auth = _auth(entry)

        if kind == "marketplace":
            if url:
                repositories.append(MarketplaceRepository(url, auth=auth))
            else:
                repositories.append(MarketplaceRepository(auth=auth))
        elif kind in ("maven", "custom"):
            if not url:
                raise ConfigError(f"Plugin repository of type '{kind}' requires a url")
            if kind == "maven":
                repositories.append(MavenPluginRepository(url, auth))
            else:
                repositories.append(CustomPluginRepository(url, cache_dir=cache_dir, auth=auth))
        else:
            raise ConfigError(
                f"Unknown plugin repository type '{kind}' "
                f"(expected marketplace, maven or custom)"
            )

    return repositories or [MarketplaceRepository()]


def _field(entry: Union[dict, object], name: str) -> Optional[str]:
    if isinstance(entry, dict):
        return entry.get(name)
    return getattr(entry, name, None)


def _auth(entry: Union[dict, object]) -> Optional[RepositoryAuth]:
    token = _field(entry, "token")
    if token:
        return RepositoryAuth("bearer", token=token)
    username = _field(entry, "username")
    if username:
        return RepositoryAuth("basic", username=username, password=_field(entry, "password"))
    return None


__all__ = [
    "PluginRepository",
    "MavenPluginRepository",
    "MarketplaceRepository",
    "CustomPluginRepository",
    "CustomPluginEntry",
    "parse_custom_feed",
    "plugin_group",
    "plugin_repositories_from_config",
]
