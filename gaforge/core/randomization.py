"""
Seedable randomness source shared by every stochastic operator.

All operators draw from a RandomSource rather than the ``random`` module so
that a run can be replayed exactly by seeding one object.
"""

from typing import List, MutableSequence, Optional, Sequence, Set, TypeVar

import numpy as np

from .errors import RangeError

T = TypeVar('T')


class RandomSource:
    """
    Uniform random numbers backed by a numpy Generator.

    Not thread-safe: the engine only draws from it on the evolve-loop thread.

    Args:
        seed: Seed for reproducible runs (None = fresh OS entropy)
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def uniform01(self) -> float:
        """A float in [0, 1)."""
        return float(self._rng.random())

    def uniform(self, min_value: float, max_value: float) -> float:
        """A float in [min_value, max_value)."""
        if min_value > max_value:
            raise RangeError(
                f"min_value ({min_value}) must not exceed max_value ({max_value})"
            )
        return min_value + self.uniform01() * (max_value - min_value)

    def int_in_range(self, min_value: int, max_value: int) -> int:
        """An int in [min_value, max_value); returns min_value when equal."""
        if min_value > max_value:
            raise RangeError(
                f"min_value ({min_value}) must not exceed max_value ({max_value})"
            )
        if min_value == max_value:
            return min_value
        return int(self._rng.integers(min_value, max_value))

    def ints(self, count: int, min_value: int, max_value: int) -> List[int]:
        """``count`` ints in [min_value, max_value), repeats allowed."""
        return [self.int_in_range(min_value, max_value) for _ in range(count)]

    def unique_ints_in_range(self, count: int, min_value: int, max_value: int) -> Set[int]:
        """
        ``count`` distinct ints in [min_value, max_value).

        Raises:
            RangeError: If count is negative or exceeds max_value - min_value
        """
        if count < 0:
            raise RangeError(f"count ({count}) must not be negative")
        if count > max_value - min_value:
            raise RangeError(
                f"count ({count}) must be less than or equal to "
                f"max - min ({max_value - min_value})"
            )
        picks = self._rng.choice(max_value - min_value, size=count, replace=False)
        return {int(p) + min_value for p in picks}

    def choice(self, items: Sequence[T]) -> T:
        """One element of a non-empty sequence."""
        if not items:
            raise RangeError("Cannot choose from an empty sequence")
        return items[self.int_in_range(0, len(items))]

    def shuffle(self, items: MutableSequence[T]) -> None:
        """Shuffle a mutable sequence in place."""
        self._rng.shuffle(items)

    def __repr__(self) -> str:
        return f"RandomSource(seed={self.seed})"


_default_random = RandomSource()


def default_random() -> RandomSource:
    """Return the process-wide source used when none is injected."""
    return _default_random


def set_default_random(source: RandomSource) -> None:
    """Replace the process-wide source, e.g. with a seeded one in tests."""
    global _default_random
    _default_random = source
