"""
Random Source - The single entry point for randomness in the engine.

Every probabilistic decision (shuffles, effect drops, jumble and lock
targets) is drawn from a RandomSource passed into the reducer. Tests swap
in subclasses to make the rolls deterministic.
"""

from __future__ import annotations
import random
from typing import Sequence, TypeVar

T = TypeVar("T")


class RandomSource:
    """
    Thin wrapper around random.Random.

    Usage:
        rng = RandomSource(seed=42)
        if rng.chance(0.1):
            ...
    """

    def __init__(self, seed: int | None = None, rng: random.Random | None = None):
        self._rng = rng if rng is not None else random.Random(seed)

    def chance(self, probability: float) -> bool:
        """Roll once; True with the given probability."""
        return self._rng.random() < probability

    def choice(self, items: Sequence[T]) -> T:
        """Pick one element uniformly."""
        return self._rng.choice(items)

    def sample(self, items: Sequence[T], k: int) -> list[T]:
        """Pick k distinct elements uniformly."""
        return self._rng.sample(list(items), k)

    def randint(self, low: int, high: int) -> int:
        """Integer in [low, high]."""
        return self._rng.randint(low, high)

    def randrange(self, stop: int) -> int:
        """Integer in [0, stop)."""
        return self._rng.randrange(stop)
