"""
Termination conditions: decide when the evolve loop stops.

A termination is asked after every generation is evaluated and ended. It
reads the engine snapshot (generations_number, best_chromosome,
time_evolving) and must not change it.
"""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import TYPE_CHECKING, Optional, Union

from ..core.errors import ArgumentError

if TYPE_CHECKING:
    from .engine import GeneticAlgorithm


class Termination(ABC):
    """Base class for termination conditions."""

    def has_reached(self, ga: 'GeneticAlgorithm') -> bool:
        if ga is None:
            raise ArgumentError("ga must not be None")
        return self.perform_has_reached(ga)

    @abstractmethod
    def perform_has_reached(self, ga: 'GeneticAlgorithm') -> bool:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class GenerationNumberTermination(Termination):
    """Reached once ``expected_generation_number`` generations have run."""

    def __init__(self, expected_generation_number: int = 100):
        if expected_generation_number < 1:
            raise ArgumentError(
                f"expected_generation_number must be at least 1, got {expected_generation_number}"
            )
        self.expected_generation_number = expected_generation_number

    def perform_has_reached(self, ga):
        return ga.generations_number >= self.expected_generation_number

    def __repr__(self) -> str:
        return f"GenerationNumberTermination({self.expected_generation_number})"


class FitnessThresholdTermination(Termination):
    """Reached when the best fitness is at least ``expected_fitness``."""

    def __init__(self, expected_fitness: float = 1.0):
        self.expected_fitness = expected_fitness

    def perform_has_reached(self, ga):
        best = ga.best_chromosome
        return best is not None and best.fitness is not None and best.fitness >= self.expected_fitness

    def __repr__(self) -> str:
        return f"FitnessThresholdTermination({self.expected_fitness})"


class TimeEvolvingTermination(Termination):
    """
    Reached when the run has evolved for ``max_time``.

    Args:
        max_time: Budget as seconds or a timedelta
    """

    def __init__(self, max_time: Union[float, timedelta]):
        if isinstance(max_time, timedelta):
            max_time = max_time.total_seconds()
        if max_time <= 0:
            raise ArgumentError(f"max_time must be positive, got {max_time}")
        self.max_time = float(max_time)

    def perform_has_reached(self, ga):
        return ga.time_evolving >= self.max_time

    def __repr__(self) -> str:
        return f"TimeEvolvingTermination({self.max_time}s)"


class FitnessStagnationTermination(Termination):
    """
    Reached when the best fitness has not changed for N generations.

    Keeps a counter between calls. Asking again about the same generation
    number returns the previous answer without advancing the counter.
    """

    def __init__(self, expected_stagnant_generations: int = 100):
        if expected_stagnant_generations < 1:
            raise ArgumentError(
                "expected_stagnant_generations must be at least 1, "
                f"got {expected_stagnant_generations}"
            )
        self.expected_stagnant_generations = expected_stagnant_generations
        self._last_fitness: Optional[float] = None
        self._last_generation: Optional[int] = None
        self._stagnant_generations = 0

    def perform_has_reached(self, ga):
        if ga.generations_number != self._last_generation:
            self._last_generation = ga.generations_number
            best = ga.best_chromosome
            fitness = best.fitness if best is not None else None

            if fitness is not None and fitness == self._last_fitness:
                self._stagnant_generations += 1
            else:
                self._stagnant_generations = 1
            self._last_fitness = fitness

        return self._stagnant_generations >= self.expected_stagnant_generations

    def __repr__(self) -> str:
        return f"FitnessStagnationTermination({self.expected_stagnant_generations})"


class LogicalOperatorTermination(Termination):
    """Combines two or more terminations."""

    def __init__(self, *terminations: Termination):
        if len(terminations) < 2:
            raise ArgumentError(
                f"{type(self).__name__} needs at least 2 terminations, got {len(terminations)}"
            )
        if any(t is None for t in terminations):
            raise ArgumentError("terminations must not contain None")
        self.terminations = list(terminations)

    def __repr__(self) -> str:
        inner = ', '.join(repr(t) for t in self.terminations)
        return f"{type(self).__name__}({inner})"


class OrTermination(LogicalOperatorTermination):
    """Reached when any sub-termination is reached."""

    def perform_has_reached(self, ga):
        # Every sub-termination sees every generation
        results = [t.has_reached(ga) for t in self.terminations]
        return any(results)


class AndTermination(LogicalOperatorTermination):
    """Reached when every sub-termination is reached."""

    def perform_has_reached(self, ga):
        results = [t.has_reached(ga) for t in self.terminations]
        return all(results)
