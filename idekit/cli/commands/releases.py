"""
Releases command implementation.

Lists published IDE releases from the release feeds.
"""

import itertools
import logging

from idekit.ide.releases import Channel, ReleaseCatalog

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the releases command.

    Args:
        args: Parsed command-line arguments with since, until, channel,
            product and limit

    Returns:
        Exit code (0 for success)
    """
    catalog = ReleaseCatalog()
    releases = catalog.list_releases(
        since=args.since,
        until=args.until,
        channels=args.channel or [Channel.RELEASE],
        products=args.product,
    )

    count = 0
    for release in itertools.islice(releases, args.limit):
        print(f"{release.notation}\t{release.build.as_string_without_product_code()}\t{release.channel.value}")
        count += 1

    logger.debug(f"Listed {count} release(s)")
    return 0
