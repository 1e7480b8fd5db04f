"""
Version parsing and comparison.

- build_number: platform build numbers and since/until ranges
- version: lenient major/minor/patch versions
- ide_version: product-qualified IDE versions
"""

from .build_number import (
    BuildNumber,
    parse,
    compare,
    baseline_version,
    is_wildcard_or_snapshot,
    since_build,
    until_build,
    strip_excess_components,
)
from .version import Version
from .ide_version import IdeType, IdeVersion, IDE_TYPES, get_ide_type

__all__ = [
    "BuildNumber",
    "parse",
    "compare",
    "baseline_version",
    "is_wildcard_or_snapshot",
    "since_build",
    "until_build",
    "strip_excess_components",
    "Version",
    "IdeType",
    "IdeVersion",
    "IDE_TYPES",
    "get_ide_type",
]
