"""
Build range command implementation.

Prints the since-build and until-build derived from a platform build.
"""

from idekit.cli.utils import print_error
from idekit.core.exceptions import ParseError
from idekit.versioning.build_number import since_build, until_build


def run(args) -> int:
    try:
        since = since_build(args.build)
        until = until_build(args.build, same_since_until=args.same_since_until)
    except ParseError as e:
        print_error(str(e))
        return 1

    print(f"since-build: {since}")
    print(f"until-build: {until}")
    return 0
