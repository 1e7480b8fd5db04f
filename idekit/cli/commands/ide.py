"""
IDE command implementation.

Resolves an IDE distribution and prints its directory.
"""

import logging

from idekit.cli.utils import create_context, load_config, print_error
from idekit.core.exceptions import IdekitError
from idekit.ide.resolver import IdeResolver
from idekit.versioning.ide_version import IdeVersion

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the ide command.

    Args:
        args: Parsed command-line arguments with:
            - ide_version: IDE version notation (optional)
            - local_path: Local IDE installation (optional)
            - source: 'auto', 'maven' or 'download'

    Returns:
        Exit code (0 for success, 1 for error)
    """
    config = load_config(args)
    context = create_context(config, show_progress=not args.quiet)

    resolver = IdeResolver(
        context.downloader,
        context.archive_cache,
        cache_dir=context.cache_dir,
        intellij_repository=config.repositories.intellij,
    )

    local_path = args.local_path or config.ide.local_path
    try:
        ide_version = IdeVersion.parse(args.ide_version or config.ide.notation)
        if local_path:
            ide_dir = resolver.resolve_local(local_path)
        elif args.source == "maven":
            ide_dir = resolver.resolve_maven(ide_version)
        elif args.source == "download":
            ide_dir = resolver.resolve_download(ide_version)
        else:
            ide_dir = resolver.resolve(ide_version)
    except IdekitError as e:
        print_error("IDE could not be resolved", str(e))
        return 1

    print(ide_dir)
    return 0
