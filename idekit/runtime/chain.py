"""
Ordered fallback chains.

A chain is a list of named strategies. Each strategy reports whether it
resolved a value, did not apply (skipped), or applied and failed. The
combinator runs them in order and returns the first resolved value that
passes validation.

Only resolution errors are absorbed into a FAILED outcome: IdekitError,
OSError and requests.RequestException. Anything else is a bug and
propagates.
"""

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

import requests

from idekit.core.exceptions import IdekitError

logger = logging.getLogger(__name__)

RECOVERABLE_ERRORS = (IdekitError, OSError, requests.RequestException)


class Outcome(enum.Enum):
    RESOLVED = "resolved"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StrategyResult:
    """Tagged result of one strategy."""

    outcome: Outcome
    value: Optional[Path] = None
    reason: str = ""

    @classmethod
    def resolved(cls, value: Path) -> "StrategyResult":
        return cls(Outcome.RESOLVED, value=value)

    @classmethod
    def skipped(cls, reason: str) -> "StrategyResult":
        return cls(Outcome.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, reason: str) -> "StrategyResult":
        return cls(Outcome.FAILED, reason=reason)


@dataclass(frozen=True)
class Strategy:
    """A named step of a fallback chain."""

    name: str
    run: Callable[[], StrategyResult]
    params: str = ""

    def __str__(self) -> str:
        return f"{self.name}({self.params})" if self.params else self.name


def run_strategy(strategy: Strategy) -> StrategyResult:
    """Run one strategy, turning resolution errors into FAILED."""
    try:
        return strategy.run()
    except RECOVERABLE_ERRORS as e:
        return StrategyResult.failed(f"{type(e).__name__}: {e}")


def first_success(
    strategies: Iterable[Strategy],
    validate: Optional[Callable[[Path], bool]] = None,
) -> Optional[Path]:
    """
    Run strategies in order and return the first accepted value.

    Args:
        strategies: Strategies in priority order
        validate: Optional predicate; a resolved value it rejects counts as
            FAILED and the chain continues

    Returns:
        The first resolved and accepted value, or None if the chain is
        exhausted
    """
    for strategy in strategies:
        result = run_strategy(strategy)

        if result.outcome is Outcome.RESOLVED and validate is not None:
            if not validate(result.value):
                result = StrategyResult.failed(f"{result.value} rejected by validation")

        if result.outcome is Outcome.RESOLVED:
            logger.debug(f"{strategy} resolved as: {result.value}")
            return result.value

        logger.debug(f"{strategy} {result.outcome.value}: {result.reason}")

    return None


__all__ = [
    "RECOVERABLE_ERRORS",
    "Outcome",
    "StrategyResult",
    "Strategy",
    "run_strategy",
    "first_success",
]
