"""
Plugin dependency resolution.

A plugin is looked up among the plugins bundled with the target IDE first.
Otherwise the configured repositories are tried in order; the first one that
serves the plugin wins and a failing repository only moves resolution on to
the next. A resolved plugin must declare a since/until range that contains
the target build.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union

from idekit.core.archive_cache import ArchiveCache
from idekit.core.exceptions import (
    IncompatibleVersionError,
    NotFoundError,
    ParseError,
    PluginNotFoundError,
)
from idekit.ide.product_info import load_product_info
from idekit.plugins.descriptor import PluginDescriptor, read_descriptor
from idekit.plugins.notation import PluginNotation
from idekit.plugins.repositories import PluginRepository
from idekit.repository.downloader import MirroredDownloader
from idekit.repository.maven_metadata import is_latest
from idekit.runtime.chain import RECOVERABLE_ERRORS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PluginDependency:
    """
    A resolved plugin.

    Attributes:
        id: Plugin id
        version: Resolved version (None for a bundled plugin without one)
        channel: Marketplace channel it was requested from
        artifact_path: Plugin directory or jar
        builtin: True when the plugin ships with the target IDE
        descriptor: Parsed plugin.xml, when available
    """

    id: str
    version: Optional[str]
    channel: Optional[str]
    artifact_path: Path
    builtin: bool = False
    descriptor: Optional[PluginDescriptor] = None


def _plugin_root(extracted: Path) -> Path:
    """The plugin directory inside an extracted distribution zip."""
    children = [p for p in extracted.iterdir() if p.is_dir()]
    if len(children) == 1 and not (extracted / "lib").is_dir():
        return children[0]
    return extracted


class PluginDependencyResolver:
    """
    Resolves plugin notations to local plugin artifacts.

    Example:
        >>> resolver = PluginDependencyResolver(
        ...     plugin_repositories_from_config(), MirroredDownloader(), ide_dir=ide_dir
        ... )
        >>> dependency = resolver.resolve("org.intellij.plugins.markdown:213.5744.223")
    """

    def __init__(
        self,
        repositories: Iterable[PluginRepository],
        downloader: MirroredDownloader,
        archive_cache: Optional[ArchiveCache] = None,
        ide_dir: Optional[Path] = None,
    ):
        """
        Initialize resolver.

        Args:
            repositories: Plugin repositories, tried in order
            downloader: Downloader for plugin archives
            archive_cache: Extraction cache (a new one if omitted)
            ide_dir: Target IDE installation, for bundled plugins and the
                default target build
        """
        self.repositories = list(repositories)
        self.downloader = downloader
        self.archive_cache = archive_cache or ArchiveCache()
        self.ide_dir = Path(ide_dir) if ide_dir else None
        self._product_info = None

    @property
    def product_info(self):
        if self._product_info is None and self.ide_dir is not None:
            try:
                self._product_info = load_product_info(self.ide_dir)
            except NotFoundError:
                logger.debug(f"No product-info.json in {self.ide_dir}")
        return self._product_info

    def target_build(self) -> Optional[str]:
        """Build number of the target IDE, if known."""
        info = self.product_info
        return info.full_build_number if info else None

    # ------------------------------------------------------------------------
    # Bundled plugins
    # ------------------------------------------------------------------------

    def find_builtin(self, plugin_id: str) -> Optional[PluginDependency]:
        """
        Look up a plugin bundled with the target IDE.

        ``plugins/*`` directories match by directory name or descriptor id.
        A plugin listed only in product-info.json bundledPlugins resolves to
        the IDE directory itself.
        """
        if self.ide_dir is None:
            return None

        plugins_dir = self.ide_dir / "plugins"
        if plugins_dir.is_dir():
            for candidate in sorted(plugins_dir.iterdir()):
                if not candidate.is_dir():
                    continue
                if candidate.name == plugin_id:
                    descriptor = read_descriptor(candidate)
                else:
                    # A broken unrelated plugin must not hide the one asked for
                    try:
                        descriptor = read_descriptor(candidate)
                    except ParseError as e:
                        logger.debug(f"Skipping bundled plugin {candidate.name}: {e}")
                        continue
                    if descriptor is None or descriptor.id != plugin_id:
                        continue
                return PluginDependency(
                    id=plugin_id,
                    version=descriptor.version if descriptor else None,
                    channel=None,
                    artifact_path=candidate,
                    builtin=True,
                    descriptor=descriptor,
                )

        info = self.product_info
        if info and plugin_id in info.bundled_plugins:
            return PluginDependency(
                id=plugin_id,
                version=info.build_number,
                channel=None,
                artifact_path=self.ide_dir,
                builtin=True,
            )
        return None

    # ------------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------------

    def resolve(
        self,
        notation: Union[str, PluginNotation],
        target_build: Optional[str] = None,
    ) -> PluginDependency:
        """
        Resolve a plugin dependency.

        Args:
            notation: ``id[:version][@channel]`` or a parsed notation
            target_build: Build the plugin must be compatible with (default:
                the target IDE's build)

        Returns:
            The resolved plugin

        Raises:
            InvalidNotationError: If the notation has an empty id
            PluginNotFoundError: If no repository serves the plugin
            IncompatibleVersionError: If the plugin's range excludes target_build
        """
        if isinstance(notation, str):
            notation = PluginNotation.parse(notation)
        target_build = target_build or self.target_build()

        builtin = self.find_builtin(notation.id)
        if builtin is not None:
            logger.debug(f"Plugin {notation.id} is bundled: {builtin.artifact_path}")
            return builtin

        attempted = []
        for repository in self.repositories:
            attempted.append(str(repository))
            logger.debug(f"Looking for {notation} in {repository}")
            try:
                archive = repository.resolve(notation, target_build, self.downloader)
            except RECOVERABLE_ERRORS as e:
                logger.debug(f"{repository} failed for {notation}: {e}")
                continue

            if archive is None:
                logger.debug(f"{repository} does not provide {notation}")
                continue

            dependency = self._prepare(notation, archive)
            self._check_compatibility(dependency, target_build)
            logger.info(f"Resolved plugin {notation} from {repository}")
            return dependency

        raise PluginNotFoundError(notation, attempted)

    def resolve_all(
        self,
        notations: Iterable[Union[str, PluginNotation]],
        target_build: Optional[str] = None,
    ) -> List[PluginDependency]:
        return [self.resolve(notation, target_build) for notation in notations]

    def _prepare(self, notation: PluginNotation, archive: Path) -> PluginDependency:
        if archive.suffix == ".zip":
            extracted = self.archive_cache.extract(
                archive,
                archive.parent / archive.stem,
                cache_key=f"plugin:{notation}",
                discard_archive=True,
            )
            path = _plugin_root(extracted)
        else:
            path = archive

        descriptor = read_descriptor(path)
        requested = None if is_latest(notation.version) else notation.version
        version = requested or (descriptor.version if descriptor else None)
        return PluginDependency(
            id=notation.id,
            version=version,
            channel=notation.channel,
            artifact_path=path,
            descriptor=descriptor,
        )

    def _check_compatibility(
        self, dependency: PluginDependency, target_build: Optional[str]
    ) -> None:
        descriptor = dependency.descriptor
        if not target_build or descriptor is None:
            return
        if not descriptor.contains(target_build):
            raise IncompatibleVersionError(
                f"Plugin {dependency.id}:{dependency.version}",
                f"since/until {descriptor.range}",
                f"target build {target_build}",
            )


__all__ = ["PluginDependency", "PluginDependencyResolver"]
