"""
Java runtime resolution.

The runtime used to launch an IDE is found through an ordered chain:

1. runtime_dir    - an explicit runtime directory
2. jbr_version    - a named JetBrains Runtime, downloaded and extracted
3. toolchain      - the project toolchain, when its vendor is JetBrains
4. ide_bundled    - the runtime shipped inside the IDE directory
5. ide_declared   - the runtime build named in the IDE's dependencies.txt
6. host           - the Java installation of the current environment

The first candidate that exists and passes the caller's validation wins.
Individual steps never raise; exhausting the chain returns None and the
caller decides whether that is fatal.
"""

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from idekit.core.archive_cache import ArchiveCache
from idekit.core.exceptions import NotFoundError
from idekit.core.platform import PlatformInfo, detect_platform
from idekit.constants import JBR_VENDOR
from idekit.ide.product_info import read_dependencies_txt
from idekit.repository.coordinates import ArtifactCoordinate, ivy_repository
from idekit.repository.downloader import MirroredDownloader
from idekit.runtime.artifact import JbrArtifact
from idekit.runtime.chain import Strategy, StrategyResult, first_success
from idekit.runtime.toolchains import ToolchainService, ToolchainSpec

logger = logging.getLogger(__name__)

JBR_GROUP = "com.jetbrains"
JBR_MODULE = "jbre"
JBR_PATTERN = "[revision].tar.gz"


@dataclass(frozen=True)
class RuntimeOptions:
    """
    Inputs of a runtime resolution.

    Attributes:
        runtime_dir: Explicit runtime directory
        jbr_version: Runtime version to download, e.g. '17.0.2b469.1'
        jbr_variant: Runtime variant ('sdk', 'jcef', 'fd', 'dcevm', 'nomod')
        jbr_arch: Architecture override
        ide_dir: IDE installation directory
        toolchain: Project toolchain request
        validate: Predicate a candidate must satisfy
    """

    runtime_dir: Optional[Path] = None
    jbr_version: Optional[str] = None
    jbr_variant: Optional[str] = None
    jbr_arch: Optional[str] = None
    ide_dir: Optional[Path] = None
    toolchain: Optional[ToolchainSpec] = None
    validate: Optional[Callable[[Path], bool]] = None


@dataclass(frozen=True)
class Jbr:
    """A downloaded and extracted runtime."""

    version: str
    java_home: Path
    java_executable: Path


# ============================================================================
# Runtime Layout
# ============================================================================


def java_binary(platform_info: Optional[PlatformInfo] = None) -> str:
    platform_info = platform_info or detect_platform()
    return "bin/java.exe" if platform_info.is_windows else "bin/java"


def jbr_root(java_home: Path, platform_info: Optional[PlatformInfo] = None) -> Path:
    """
    Locate the runtime home inside a directory.

    A ``jbr*`` child directory takes precedence. On macOS the home lives
    under ``Contents/Home``.
    """
    platform_info = platform_info or detect_platform()
    java_home = Path(java_home)

    jbr = None
    if java_home.is_dir():
        jbr = next(
            (p for p in sorted(java_home.iterdir()) if p.name.startswith("jbr")),
            None,
        )

    if platform_info.is_macos:
        if java_home.parts[-2:] == ("Contents", "Home"):
            return java_home
        if jbr is not None:
            return jbr / "Contents" / "Home"
        return java_home / "jdk" / "Contents" / "Home"

    return jbr if jbr is not None else java_home


def find_java_executable(
    java_home: Path, platform_info: Optional[PlatformInfo] = None
) -> Optional[Path]:
    """Find the java executable in a runtime, preferring a nested jre/."""
    root = jbr_root(java_home, platform_info)
    jre = root / "jre"
    java = (jre if jre.exists() else root) / java_binary(platform_info)
    return java if java.exists() else None


def builtin_jbr_version(ide_dir: Path) -> Optional[str]:
    """Runtime build declared in the IDE's dependencies.txt."""
    properties = read_dependencies_txt(ide_dir)
    return properties.get("runtimeBuild") or properties.get("jdkBuild") or None


def host_java_home() -> Optional[Path]:
    """Java home of the current environment ($JAVA_HOME, else java on PATH)."""
    java_home = os.environ.get("JAVA_HOME")
    if java_home and Path(java_home).is_dir():
        return Path(java_home)

    java = shutil.which("java")
    if java:
        return Path(java).resolve().parent.parent
    return None


# ============================================================================
# Resolver
# ============================================================================


class RuntimeResolver:
    """
    Resolves Java runtimes through the ordered strategy chain.

    Example:
        >>> resolver = RuntimeResolver(MirroredDownloader())
        >>> java = resolver.resolve_runtime(RuntimeOptions(ide_dir=Path("ides/IC-2021.3")))
    """

    def __init__(
        self,
        downloader: MirroredDownloader,
        archive_cache: Optional[ArchiveCache] = None,
        jbr_repository: Optional[str] = None,
        toolchain_service: Optional[ToolchainService] = None,
        platform_info: Optional[PlatformInfo] = None,
    ):
        """
        Initialize resolver.

        Args:
            downloader: Downloader for runtime archives
            archive_cache: Extraction cache (a new one if omitted)
            jbr_repository: Runtime repository overriding the default mirror
            toolchain_service: Service answering project toolchain requests
            platform_info: Target platform (detected if omitted)
        """
        self.downloader = downloader
        self.archive_cache = archive_cache or ArchiveCache()
        self.jbr_repository = jbr_repository
        self.toolchain_service = toolchain_service
        self.platform = platform_info or detect_platform()

    def resolve_runtime(self, options: RuntimeOptions) -> Optional[Path]:
        """Resolve the java executable, or None if no strategy succeeds."""
        return self._resolve(options, executable=True)

    def resolve_runtime_dir(self, options: RuntimeOptions) -> Optional[Path]:
        """Resolve the runtime home directory, or None if no strategy succeeds."""
        return self._resolve(options, executable=False)

    def _resolve(self, options: RuntimeOptions, executable: bool) -> Optional[Path]:
        logger.debug("Resolving runtime directory.")
        result = first_success(self.strategies(options, executable), options.validate)
        if result is not None:
            logger.info(f"Resolved JVM Runtime directory: {result}")
        return result

    def strategies(self, options: RuntimeOptions, executable: bool) -> List[Strategy]:
        """The resolution chain for options, in priority order."""
        jbr_params = (
            f"jbrVersion='{options.jbr_version}', jbrVariant='{options.jbr_variant}', "
            f"jbrArch='{options.jbr_arch}'"
        )
        return [
            Strategy(
                "runtime_dir",
                lambda: self._from_runtime_dir(options.runtime_dir, executable),
                f"runtimeDir='{options.runtime_dir}'",
            ),
            Strategy(
                "jbr_version",
                lambda: self._from_jbr_version(options.jbr_version, options, executable),
                jbr_params,
            ),
            Strategy(
                "toolchain",
                lambda: self._from_toolchain(options.toolchain, executable),
                f"toolchain='{options.toolchain}'",
            ),
            Strategy(
                "ide_bundled",
                lambda: self._from_ide_bundled(options.ide_dir, executable),
                f"ideDir='{options.ide_dir}'",
            ),
            Strategy(
                "ide_declared",
                lambda: self._from_ide_declared(options, executable),
                f"ideDir='{options.ide_dir}'",
            ),
            Strategy("host", lambda: self._from_host(executable)),
        ]

    # ------------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------------

    def _existing(self, root: Path, executable: bool) -> StrategyResult:
        candidate = root / java_binary(self.platform) if executable else root
        if candidate.exists():
            return StrategyResult.resolved(candidate)
        return StrategyResult.failed(f"{candidate} does not exist")

    def _from_runtime_dir(self, runtime_dir: Optional[Path], executable: bool):
        if not runtime_dir:
            return StrategyResult.skipped("no runtime directory given")
        return self._existing(jbr_root(Path(runtime_dir), self.platform), executable)

    def _from_jbr_version(
        self, version: Optional[str], options: RuntimeOptions, executable: bool
    ):
        if not version:
            return StrategyResult.skipped("no runtime version given")
        jbr = self.download_jbr(version, options.jbr_variant, options.jbr_arch)
        if executable:
            return StrategyResult.resolved(jbr.java_executable)
        return StrategyResult.resolved(jbr_root(jbr.java_home, self.platform))

    def _from_toolchain(self, spec: Optional[ToolchainSpec], executable: bool):
        if spec is None or not spec.vendor:
            return StrategyResult.skipped("no toolchain vendor configured")
        if JBR_VENDOR.lower() not in spec.vendor.lower():
            return StrategyResult.skipped(f"toolchain vendor '{spec.vendor}' is not {JBR_VENDOR}")
        if self.toolchain_service is None:
            return StrategyResult.skipped("no toolchain service available")

        home = self.toolchain_service.find_installation(spec)
        if home is None:
            return StrategyResult.failed(f"no installation matches {spec}")
        return self._existing(jbr_root(home, self.platform), executable)

    def _from_ide_bundled(self, ide_dir: Optional[Path], executable: bool):
        if not ide_dir:
            return StrategyResult.skipped("no IDE directory given")
        root = jbr_root(Path(ide_dir), self.platform)
        java = root / java_binary(self.platform)
        if not java.exists():
            return StrategyResult.failed(f"{java} does not exist")
        return StrategyResult.resolved(java if executable else root)

    def _from_ide_declared(self, options: RuntimeOptions, executable: bool):
        if not options.ide_dir:
            return StrategyResult.skipped("no IDE directory given")
        version = builtin_jbr_version(options.ide_dir)
        if not version:
            return StrategyResult.failed("no runtimeBuild or jdkBuild in dependencies.txt")
        logger.debug(f"IDE declares runtime version '{version}'")
        return self._from_jbr_version(version, options, executable)

    def _from_host(self, executable: bool):
        home = host_java_home()
        if home is None:
            return StrategyResult.failed("no Java installation found in the environment")
        if executable:
            return self._existing(home, executable)
        return StrategyResult.resolved(jbr_root(home, self.platform))

    # ------------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------------

    def download_jbr(
        self,
        version: str,
        variant: Optional[str] = None,
        arch: Optional[str] = None,
    ) -> Jbr:
        """
        Download and extract a runtime.

        Raises:
            ArtifactNotFoundError: If the runtime archive is not available
            ExtractionError: If the archive cannot be extracted
            NotFoundError: If the extracted runtime has no java executable
        """
        artifact = JbrArtifact.from_version(version, variant, arch, self.platform)
        url = self.jbr_repository or artifact.repository_url
        coordinate = ArtifactCoordinate(
            JBR_GROUP, JBR_MODULE, artifact.name, extension="tar.gz"
        )

        archive = self.downloader.resolve(coordinate, [ivy_repository(url, JBR_PATTERN)])
        java_dir = archive.parent / "extracted"
        self.archive_cache.extract(
            archive, java_dir, cache_key=coordinate.cache_key, discard_archive=True
        )

        java = find_java_executable(java_dir, self.platform)
        if java is None:
            raise NotFoundError(f"Cannot find java executable in: {java_dir}")
        return Jbr(version=version, java_home=java_dir, java_executable=java)


__all__ = [
    "RuntimeOptions",
    "Jbr",
    "RuntimeResolver",
    "jbr_root",
    "java_binary",
    "find_java_executable",
    "builtin_jbr_version",
    "host_java_home",
]
