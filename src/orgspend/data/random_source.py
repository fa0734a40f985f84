"""Random-number strategy used by the mock data generator.

The helpers draw only through ``RandomSource.random()`` rather than calling
``random.Random.randint``/``choice``/``sample``, so any object with a
``random()`` method can drive generation (tests pass scripted sources) and a
given seed consumes exactly one draw per integer or pick.
"""

from __future__ import annotations

import math
import random
from typing import Protocol, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    """Anything yielding floats in ``[0, 1)``; ``random.Random`` qualifies."""

    def random(self) -> float: ...


def seeded(seed: int | None = None) -> RandomSource:
    """A reproducible source for a given seed (ambient entropy when ``None``)."""
    return random.Random(seed)


def uniform(rng: RandomSource, low: float, high: float) -> float:
    """Float in ``[low, high)``."""
    return rng.random() * (high - low) + low


def randint(rng: RandomSource, low: int, high: int) -> int:
    """Integer in ``[low, high]``, both ends inclusive."""
    return math.floor(uniform(rng, low, high + 1))


def choice(rng: RandomSource, items: list[T] | tuple[T, ...]) -> T:
    return items[randint(rng, 0, len(items) - 1)]


def sample(rng: RandomSource, items: list[T] | tuple[T, ...], k: int) -> list[T]:
    """``k`` distinct items via a partial Fisher-Yates shuffle."""
    pool = list(items)
    k = min(k, len(pool))
    for i in range(k):
        j = randint(rng, i, len(pool) - 1)
        pool[i], pool[j] = pool[j], pool[i]
    return pool[:k]
