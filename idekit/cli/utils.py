"""
Shared utilities for CLI commands.

Provides configuration loading and construction of the resolver objects
shared by every command.
"""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from idekit.config.parser import CONFIG_FILE_NAME, IdekitConfig, parse_config
from idekit.core.archive_cache import ArchiveCache
from idekit.core.cache_registry import ArtifactCacheRegistry
from idekit.core.directory import ensure_global_cache_structure, get_global_cache_dir
from idekit.core.download import format_progress
from idekit.repository.downloader import MirroredDownloader

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Management
# ============================================================================


def load_config(args) -> IdekitConfig:
    """
    Load configuration for a command.

    Uses ``--config`` when given, else ``idekit.yaml`` in the project root,
    else built-in defaults.

    Raises:
        ConfigError: If an explicit or discovered configuration is invalid
    """
    config_file = getattr(args, "config", None)
    if config_file is None:
        project_root = Path(getattr(args, "project_root", None) or Path.cwd())
        default_config = project_root / CONFIG_FILE_NAME
        if not default_config.exists():
            logger.debug(f"Config file not found (optional): {default_config}")
            return IdekitConfig(version=1)
        config_file = default_config

    logger.debug(f"Loading configuration from {config_file}")
    return parse_config(Path(config_file))


# ============================================================================
# Resolver Wiring
# ============================================================================


@dataclass
class CommandContext:
    """Objects shared by the resolvers of one command."""

    config: IdekitConfig
    cache_dir: Path
    registry: ArtifactCacheRegistry
    downloader: MirroredDownloader
    runtime_downloader: MirroredDownloader
    archive_cache: ArchiveCache


def create_context(config: IdekitConfig, show_progress: bool = False) -> CommandContext:
    """
    Build the cache layout and resolver collaborators for a configuration.

    Args:
        config: Loaded configuration
        show_progress: Log download progress at info level
    """
    cache_dir = Path(config.cache_dir).expanduser() if config.cache_dir else get_global_cache_dir()
    layout = ensure_global_cache_structure(cache_dir)

    registry = ArtifactCacheRegistry(cache_dir / "registry.json")
    downloader = MirroredDownloader(
        cache_dir=layout["maven"],
        registry=registry,
        progress_callback=_log_progress if show_progress else None,
    )
    # Runtimes share the session but keep their own cache root
    runtime_downloader = MirroredDownloader(
        cache_dir=layout["jbr"],
        session=downloader.session,
        registry=registry,
        progress_callback=downloader.progress_callback,
    )
    return CommandContext(
        config=config,
        cache_dir=cache_dir,
        registry=registry,
        downloader=downloader,
        runtime_downloader=runtime_downloader,
        archive_cache=ArchiveCache(registry=registry),
    )


def _log_progress(progress) -> None:
    logger.info(format_progress(progress))


# ============================================================================
# User Interface / Output Formatting
# ============================================================================


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def print_warning(message: str):
    """Print warning message to stderr."""
    print(f"WARNING: {message}", file=sys.stderr)
