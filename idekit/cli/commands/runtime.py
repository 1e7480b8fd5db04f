"""
Runtime command implementation.

Resolves a Java runtime and prints its java executable or home directory.
"""

import logging
from pathlib import Path

from idekit.cli.utils import create_context, load_config, print_error
from idekit.runtime.resolver import RuntimeOptions, RuntimeResolver
from idekit.runtime.toolchains import LocalToolchainService

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the runtime command.

    Args:
        args: Parsed command-line arguments with runtime_dir, jbr_version,
            jbr_variant, jbr_arch, ide_dir and home

    Returns:
        Exit code (0 for success, 1 if no runtime was found)
    """
    config = load_config(args)
    context = create_context(config, show_progress=not args.quiet)
    runtime_config = config.runtime

    resolver = RuntimeResolver(
        context.runtime_downloader,
        context.archive_cache,
        jbr_repository=config.repositories.jbr,
        toolchain_service=LocalToolchainService(),
    )

    runtime_dir = args.runtime_dir or runtime_config.dir
    options = RuntimeOptions(
        runtime_dir=Path(runtime_dir) if runtime_dir else None,
        jbr_version=args.jbr_version or runtime_config.version,
        jbr_variant=args.jbr_variant or runtime_config.variant,
        jbr_arch=args.jbr_arch or runtime_config.arch,
        ide_dir=args.ide_dir,
        toolchain=runtime_config.toolchain,
    )

    if args.home:
        result = resolver.resolve_runtime_dir(options)
    else:
        result = resolver.resolve_runtime(options)

    if result is None:
        print_error(
            "No Java runtime available",
            "Use --verbose to see why each resolution strategy was rejected",
        )
        return 1

    print(result)
    return 0
