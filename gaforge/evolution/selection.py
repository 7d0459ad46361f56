"""
Selection operators: choose the parents of the next generation.

- EliteSelection: the top chromosomes by fitness, deterministic
- RouletteWheelSelection: fitness-proportionate sampling with replacement
- StochasticUniversalSamplingSelection: evenly spaced pointers on the wheel
- TournamentSelection: best of small random tournaments
"""

from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np

from ..core.errors import ArgumentError, SelectionError
from ..core.randomization import RandomSource, default_random
from .chromosome import Chromosome, fitness_key, sort_by_fitness
from .population import Generation


class Selection(ABC):
    """
    Base class for selection operators.

    select_chromosomes() validates its arguments and delegates to
    perform_select_chromosomes().
    """

    def __init__(self, random_source: Optional[RandomSource] = None):
        self.random_source = random_source

    @property
    def random(self) -> RandomSource:
        return self.random_source or default_random()

    def select_chromosomes(self, count: int, generation: Generation) -> List[Chromosome]:
        """
        Select ``count`` chromosomes from ``generation``.

        Raises:
            ArgumentError: If count < 2 or generation is None
            SelectionError: If the variant cannot satisfy the request
        """
        if count < 2:
            raise ArgumentError(
                f"The number of selected chromosomes should be at least 2, got {count}"
            )
        if generation is None:
            raise ArgumentError("generation must not be None")

        return self.perform_select_chromosomes(count, generation)

    @abstractmethod
    def perform_select_chromosomes(self, count: int, generation: Generation) -> List[Chromosome]:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class EliteSelection(Selection):
    """Pick the ``count`` fittest chromosomes (ties keep generation order)."""

    def perform_select_chromosomes(self, count: int, generation: Generation) -> List[Chromosome]:
        ordered = sort_by_fitness(generation.chromosomes)
        return ordered[:count]


def _cumulative_wheel(chromosomes: List[Chromosome], operator: Selection) -> np.ndarray:
    """
    Cumulative, normalized fitness for wheel-based selection.

    Falls back to a uniform wheel when every fitness is zero.
    """
    fitnesses = np.array([fitness_key(c) for c in chromosomes], dtype=float)
    if not np.all(np.isfinite(fitnesses)):
        raise SelectionError(operator, "All chromosomes must be evaluated before selection")
    if np.any(fitnesses < 0):
        raise SelectionError(operator, "Wheel selection requires non-negative fitness")

    total = fitnesses.sum()
    if total == 0:
        fitnesses = np.ones_like(fitnesses)
        total = fitnesses.sum()

    wheel = np.cumsum(fitnesses / total)
    wheel[-1] = 1.0
    return wheel


class RouletteWheelSelection(Selection):
    """Each spin picks a chromosome with probability proportional to fitness."""

    def perform_select_chromosomes(self, count: int, generation: Generation) -> List[Chromosome]:
        chromosomes = generation.chromosomes
        wheel = _cumulative_wheel(chromosomes, self)

        selected = []
        for _ in range(count):
            pointer = self.random.uniform01()
            index = int(np.searchsorted(wheel, pointer, side='right'))
            selected.append(chromosomes[min(index, len(chromosomes) - 1)])
        return selected


class StochasticUniversalSamplingSelection(Selection):
    """
    One spin, ``count`` evenly spaced pointers.

    Lower variance than repeated roulette spins: a chromosome holding a
    fraction p of the wheel is selected floor(p * count) or ceil(p * count)
    times.
    """

    def perform_select_chromosomes(self, count: int, generation: Generation) -> List[Chromosome]:
        chromosomes = generation.chromosomes
        wheel = _cumulative_wheel(chromosomes, self)

        step = 1.0 / count
        start = self.random.uniform01() * step
        pointers = start + step * np.arange(count)
        indexes = np.searchsorted(wheel, pointers, side='right')
        return [chromosomes[min(int(i), len(chromosomes) - 1)] for i in indexes]


class TournamentSelection(Selection):
    """
    Tournament selection.

    Randomly draws ``size`` distinct contestants and keeps the fittest.
    Repeats ``count`` times.

    Args:
        size: Contestants per tournament
        allow_winner_compete_next: If False, a winner is removed from the
            pool and cannot be selected again
    """

    def __init__(
        self,
        size: int = 2,
        allow_winner_compete_next: bool = True,
        random_source: Optional[RandomSource] = None,
    ):
        super().__init__(random_source)
        if size < 2:
            raise ArgumentError(f"Tournament size must be at least 2, got {size}")
        self.size = size
        self.allow_winner_compete_next = allow_winner_compete_next

    def perform_select_chromosomes(self, count: int, generation: Generation) -> List[Chromosome]:
        candidates = list(generation.chromosomes)

        if self.size > len(candidates):
            raise SelectionError(
                self,
                f"The tournament size ({self.size}) is greater than the "
                f"available chromosomes ({len(candidates)})",
            )
        if not self.allow_winner_compete_next and len(candidates) - count + 1 < self.size:
            raise SelectionError(
                self,
                f"Not enough chromosomes ({len(candidates)}) to run {count} "
                f"tournaments of size {self.size} without repeating winners",
            )

        selected = []
        while len(selected) < count:
            indexes = self.random.unique_ints_in_range(self.size, 0, len(candidates))
            # Sort indexes so ties go to the earliest contestant
            contestants = [candidates[i] for i in sorted(indexes)]
            winner = max(contestants, key=fitness_key)
            selected.append(winner)

            if not self.allow_winner_compete_next:
                candidates.remove(winner)

        return selected

    def __repr__(self) -> str:
        return (
            f"TournamentSelection(size={self.size}, "
            f"allow_winner_compete_next={self.allow_winner_compete_next})"
        )
