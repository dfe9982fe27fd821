"""Ordered fallback chains.

Several lookups try a list of locations in order and stop at the first one
that yields something: looking up one skill in a clone, locating auxiliary
files for a remote install. Each step is a ``Strategy`` whose ``attempt``
returns a value, or None to fall through to the next step.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

from skillsync.utils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Strategy(Generic[T]):
    name: str
    attempt: Callable[[], Awaitable[T | None]]


async def first_available(strategies: Iterable[Strategy[T]]) -> T | None:
    """Run strategies in order and return the first non-None result."""
    for strategy in strategies:
        result = await strategy.attempt()
        if result is not None:
            logger.debug("Strategy '%s' succeeded", strategy.name)
            return result
        logger.debug("Strategy '%s' found nothing", strategy.name)
    return None
