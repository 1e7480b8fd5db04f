"""
Cache command implementation.

Lists, summarizes and forgets entries of the artifact cache registry.
"""

from idekit.cli.utils import create_context, load_config, print_error


def run(args) -> int:
    """
    Run the cache command.

    Args:
        args: Parsed command-line arguments with action ('list', 'stats',
            'forget') and key

    Returns:
        Exit code (0 for success, 1 for error)
    """
    config = load_config(args)
    registry = create_context(config).registry

    if args.action == "list":
        for key in registry.list_entries():
            entry = registry.get(key) or {}
            location = entry.get("extracted") or entry.get("path") or ""
            print(f"{key}\t{location}")
        return 0

    if args.action == "stats":
        stats = registry.stats()
        print(f"Artifacts: {stats['total_artifacts']}")
        print(f"Extracted: {stats['extracted']}")
        print(f"Missing:   {stats['missing']}")
        return 0

    if not args.key:
        print_error("cache forget requires a KEY")
        return 1

    if not registry.forget(args.key):
        print_error(f"No cache entry: {args.key}")
        return 1

    return 0
