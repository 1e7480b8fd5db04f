"""
Platform build numbers.

A build number is a dotted sequence of integers with an optional trailing
``SNAPSHOT`` or ``*`` marker and an optional product-code prefix, e.g.
``IC-213.1234.56``, ``213.*`` or ``IU-221.SNAPSHOT``.

Ordering rules:
- components compare numerically, position by position;
- a ``SNAPSHOT``/``*`` marker is greater than any number at its position;
  two markers at the same position compare equal;
- when the shared prefix is equal, the build with more components is
  greater (missing trailing components are absent, not zero);
- the product code does not take part in ordering.
"""

import functools
import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from idekit.constants import DEFAULT_PRODUCT_CODE
from idekit.core.exceptions import ParseError

logger = logging.getLogger(__name__)

SNAPSHOT = "SNAPSHOT"
WILDCARD = "*"
MARKERS = (SNAPSHOT, WILDCARD)

# Sorts above every concrete component
_MAX = float("inf")


def is_wildcard_or_snapshot(component: str) -> bool:
    """Return True for the ``SNAPSHOT`` and ``*`` markers."""
    return component in MARKERS


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class BuildNumber:
    """
    Parsed build number.

    Attributes:
        product_code: Two-letter product code ('IC', 'IU', 'PS', ...)
        components: Numeric components in order
        marker: Trailing 'SNAPSHOT' or '*', or None
        raw: The string the build number was parsed from
    """

    product_code: str
    components: Tuple[int, ...]
    marker: Optional[str] = None
    raw: str = field(default="", compare=False)

    @property
    def baseline_version(self) -> int:
        return self.components[0]

    def _sort_key(self) -> tuple:
        key = tuple(self.components)
        if self.marker:
            key += (_MAX,)
        return key

    def as_string_without_product_code(self) -> str:
        parts = [str(c) for c in self.components]
        if self.marker:
            parts.append(self.marker)
        return ".".join(parts)

    def __str__(self) -> str:
        return f"{self.product_code}-{self.as_string_without_product_code()}"

    def __eq__(self, other) -> bool:
        if not isinstance(other, BuildNumber):
            return NotImplemented
        return compare(self, other) == 0

    def __lt__(self, other) -> bool:
        if not isinstance(other, BuildNumber):
            return NotImplemented
        return compare(self, other) < 0

    def __hash__(self) -> int:
        return hash(self._sort_key())


def parse(value: str, default_product_code: str = DEFAULT_PRODUCT_CODE) -> BuildNumber:
    """
    Parse a build number string.

    Args:
        value: Build number, optionally prefixed with a product code
        default_product_code: Product code used when value has none

    Returns:
        Parsed BuildNumber

    Raises:
        ParseError: On empty input, a non-numeric leading component, an
            empty component, or a marker anywhere but last

    Example:
        >>> parse("IU-213.1234.56").components
        (213, 1234, 56)
        >>> parse("213.*").marker
        '*'
    """
    if value is None or not value.strip():
        raise ParseError(value or "", "empty build number")

    text = value.strip()
    product_code = default_product_code

    prefix, sep, rest = text.partition("-")
    if sep and prefix.isalpha():
        product_code = prefix.upper()
        text = rest

    parts = text.split(".")
    components = []
    marker = None

    for index, part in enumerate(parts):
        if part.isdigit():
            components.append(int(part))
            continue
        if is_wildcard_or_snapshot(part) and index == len(parts) - 1 and index > 0:
            marker = part
            continue
        if index == 0:
            raise ParseError(value, "leading component must be numeric")
        raise ParseError(value, f"invalid component '{part}'")

    return BuildNumber(
        product_code=product_code,
        components=tuple(components),
        marker=marker,
        raw=value,
    )


def _coerce(value: Union[str, BuildNumber]) -> BuildNumber:
    return value if isinstance(value, BuildNumber) else parse(value)


def compare(a: Union[str, BuildNumber], b: Union[str, BuildNumber]) -> int:
    """
    Compare two build numbers.

    Returns:
        -1, 0 or 1 as a is less than, equal to or greater than b

    Example:
        >>> compare("213.1234", "213.*")
        -1
        >>> compare("213.SNAPSHOT", "213.*")
        0
    """
    left = _coerce(a)._sort_key()
    right = _coerce(b)._sort_key()

    for x, y in zip(left, right):
        if x == _MAX and y == _MAX:
            return 0
        if x != y:
            return -1 if x < y else 1

    if len(left) == len(right):
        return 0
    return -1 if len(left) < len(right) else 1


def baseline_version(build: Union[str, BuildNumber]) -> int:
    """Return the first (branch) component of a build number."""
    return _coerce(build).baseline_version


def since_build(build: Union[str, BuildNumber]) -> str:
    """
    Derive the since-build value for a platform build.

    Example:
        >>> since_build("IC-213.1234.56")
        '213.1234'
    """
    build = _coerce(build)
    parts = [str(c) for c in build.components[:2]]
    if len(parts) < 2 and build.marker:
        parts.append(build.marker)
    return ".".join(parts)


def until_build(build: Union[str, BuildNumber], same_since_until: bool = False) -> str:
    """
    Derive the until-build value for a platform build.

    Args:
        build: Platform build number
        same_since_until: Restrict the range to the since-build branch

    Example:
        >>> until_build("213.1234.56")
        '213.*'
        >>> until_build("213.1234.56", same_since_until=True)
        '213.1234.*'
    """
    build = _coerce(build)
    if same_since_until:
        return f"{since_build(build)}.{WILDCARD}"
    return f"{build.baseline_version}.{WILDCARD}"


def strip_excess_components(value: str) -> str:
    """
    Truncate a build number to three numeric components.

    Components past the third are dropped unless they are a SNAPSHOT/*
    marker. A product-code prefix is kept. Applying it twice gives the same
    result as applying it once.

    Example:
        >>> strip_excess_components("IU-213.1234.56.789")
        'IU-213.1234.56'
        >>> strip_excess_components("213.1234.56.78.SNAPSHOT")
        '213.1234.56.SNAPSHOT'
    """
    prefix, sep, rest = value.partition("-")
    if not (sep and prefix.isalpha()):
        prefix, rest = "", value

    kept = [
        component
        for index, component in enumerate(rest.split("."))
        if index < 3 or is_wildcard_or_snapshot(component)
    ]
    stripped = ".".join(kept)
    return f"{prefix}-{stripped}" if prefix else stripped


__all__ = [
    "SNAPSHOT",
    "WILDCARD",
    "BuildNumber",
    "parse",
    "compare",
    "baseline_version",
    "is_wildcard_or_snapshot",
    "since_build",
    "until_build",
    "strip_excess_components",
]
