"""Lenient three-part version used for runtime build and compiler thresholds."""

import functools
import re
from typing import Tuple

_SEPARATORS = re.compile(r'[ .\-"_]')


@functools.total_ordering
class Version:
    """
    Major/minor/patch version parsed from loosely formatted strings.

    Every token that is an integer counts; everything else is ignored, so
    ``"17.0.2b469.1"`` and ``"1483.24"`` both parse.

    Example:
        >>> Version.parse("469.1") < Version.parse("1319.6")
        True
    """

    def __init__(self, major: int = 0, minor: int = 0, patch: int = 0, version: str = ""):
        self.major = major
        self.minor = minor
        self.patch = patch
        self.version = version or f"{major}.{minor}.{patch}"

    @classmethod
    def parse(cls, value: str) -> "Version":
        numbers = [int(token) for token in _SEPARATORS.split(value) if token.isdigit()]
        numbers += [0] * (3 - len(numbers))
        return cls(numbers[0], numbers[1], numbers[2], version=value)

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __lt__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.as_tuple() < other.as_tuple()

    def __hash__(self) -> int:
        return hash(self.as_tuple())

    def __repr__(self) -> str:
        return f"Version({self.version!r})"

    def __str__(self) -> str:
        return self.version


__all__ = ["Version"]
