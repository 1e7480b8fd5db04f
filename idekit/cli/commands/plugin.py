"""
Plugin command implementation.

Resolves plugin dependency notations and prints where each plugin lives.
"""

import logging

from idekit.cli.utils import create_context, load_config, print_error
from idekit.core.exceptions import IdekitError
from idekit.plugins.repositories import plugin_repositories_from_config
from idekit.plugins.resolver import PluginDependencyResolver

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the plugin command.

    Args:
        args: Parsed command-line arguments with notations, ide_dir and build

    Returns:
        Exit code (0 if every plugin resolved, 1 otherwise)
    """
    config = load_config(args)
    notations = args.notations or [str(n) for n in config.plugins]
    if not notations:
        print_error("No plugins given", "Pass notations or list them under 'plugins' in idekit.yaml")
        return 1

    context = create_context(config, show_progress=not args.quiet)
    repositories = plugin_repositories_from_config(
        config.repositories.plugins,
        cache_dir=context.cache_dir / "plugins",
    )
    resolver = PluginDependencyResolver(
        repositories,
        context.downloader,
        context.archive_cache,
        ide_dir=args.ide_dir,
    )

    failures = 0
    for notation in notations:
        try:
            dependency = resolver.resolve(notation, target_build=args.build)
        except IdekitError as e:
            print_error(f"Plugin {notation} could not be resolved", str(e))
            failures += 1
            continue

        kind = "bundled" if dependency.builtin else "downloaded"
        print(f"{dependency.id}:{dependency.version or '?'}\t{kind}\t{dependency.artifact_path}")

    return 1 if failures else 0
