"""
Compiler command implementation.

Resolves the java-compiler-ant-tasks artifact matching an IDE.
"""

import logging

from idekit.cli.utils import create_context, load_config, print_error
from idekit.core.exceptions import IdekitError
from idekit.ide.product_info import load_product_info
from idekit.repository.compiler import (
    compiler_version,
    resolve_java_compiler,
)
from idekit.versioning.ide_version import IdeVersion

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the compiler command.

    Args:
        args: Parsed command-line arguments with ide_version, build_number,
            version_suffix and ide_dir

    Returns:
        Exit code (0 for success, 1 for error)
    """
    config = load_config(args)
    context = create_context(config, show_progress=not args.quiet)

    build_number = args.build_number
    version_suffix = args.version_suffix
    try:
        ide_version = IdeVersion.parse(args.ide_version or config.ide.notation)
        if args.ide_dir:
            info = load_product_info(args.ide_dir)
            build_number = build_number or info.full_build_number
            version_suffix = version_suffix or info.version_suffix

        version = compiler_version(
            ide_version,
            build_number,
            version_suffix=version_suffix,
            local_path=str(args.ide_dir) if args.ide_dir else config.ide.local_path,
        )
        logger.debug(f"Compiler version for {ide_version}: {version}")

        path = resolve_java_compiler(
            version, context.downloader, intellij_repository=config.repositories.intellij
        )
    except IdekitError as e:
        print_error("Java compiler could not be resolved", str(e))
        return 1

    print(path)
    return 0
