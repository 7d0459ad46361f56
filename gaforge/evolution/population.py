"""
Population and generation management.

Handles:
- Growing the initial generation from a prototype chromosome
- Appending new generations and ending them after evaluation
- Retention of old generations (keep all, or only the newest N)
- Tracking the best chromosome
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from ..core.constants import DEFAULT_GENERATIONS_TO_KEEP
from ..core.errors import ArgumentError, InvalidStateError
from .chromosome import Chromosome, sort_by_fitness

logger = logging.getLogger(__name__)


class Generation:
    """
    The chromosomes of one evolutionary step.

    Membership is fixed once end() has run; only the fitness fields of the
    members are written, during evaluation.

    Attributes:
        number: Generation number (1-based)
        created_at: Creation timestamp
        chromosomes: Members, sorted by fitness descending once ended
        best_chromosome: Fittest member (None until end())
    """

    def __init__(self, number: int, chromosomes: Sequence[Chromosome]):
        if number < 1:
            raise ArgumentError(
                f"Generation number {number} is invalid. Generation number "
                "should be positive and start in 1."
            )
        if chromosomes is None or len(chromosomes) < 2:
            raise ArgumentError("A generation should have at least 2 chromosomes.")

        self.number = number
        self.created_at = datetime.now()
        self.chromosomes: List[Chromosome] = list(chromosomes)
        self.best_chromosome: Optional[Chromosome] = None

    @property
    def size(self) -> int:
        return len(self.chromosomes)

    @property
    def is_ended(self) -> bool:
        return self.best_chromosome is not None

    def unevaluated(self) -> List[Chromosome]:
        return [c for c in self.chromosomes if c.fitness is None]

    def end(self, max_size: Optional[int] = None) -> None:
        """
        Sort members by fitness and pick the best.

        Args:
            max_size: If given, drop the weakest members beyond this size

        Raises:
            InvalidStateError: If any member is still unevaluated
        """
        if self.unevaluated():
            raise InvalidStateError(
                f"Generation {self.number} has chromosomes without fitness"
            )
        self.chromosomes = sort_by_fitness(self.chromosomes)
        if max_size is not None:
            self.chromosomes = self.chromosomes[:max_size]
        self.best_chromosome = self.chromosomes[0]

    def __repr__(self) -> str:
        best = self.best_chromosome.fitness if self.best_chromosome else None
        return f"Generation(number={self.number}, size={self.size}, best={best})"


# =============================================================================
# Retention strategies
# =============================================================================

class GenerationStrategy(ABC):
    """Decides which past generations a population keeps."""

    @abstractmethod
    def register_new_generation(self, population: 'Population') -> None:
        """Called after a generation is appended."""


class TrackingGenerationStrategy(GenerationStrategy):
    """Keep every generation (memory grows with the run)."""

    def register_new_generation(self, population: 'Population') -> None:
        pass


class PerformanceGenerationStrategy(GenerationStrategy):
    """Keep only the newest ``generations_number`` generations."""

    def __init__(self, generations_number: int = DEFAULT_GENERATIONS_TO_KEEP):
        if generations_number < 1:
            raise ArgumentError(
                f"generations_number must be at least 1, got {generations_number}"
            )
        self.generations_number = generations_number

    def register_new_generation(self, population: 'Population') -> None:
        excess = len(population.generations) - self.generations_number
        if excess > 0:
            del population.generations[:excess]


# =============================================================================
# Population
# =============================================================================

class Population:
    """
    Owns the generation history and the population size bounds.

    Only the engine mutates a population, between fitness batches.

    Args:
        min_size: Minimum number of chromosomes per generation (>= 2)
        max_size: Maximum number of chromosomes per generation (>= min_size)
        adam_chromosome: Prototype the initial generation is grown from
        generation_strategy: Retention policy (default: keep the newest 10)
    """

    def __init__(
        self,
        min_size: int,
        max_size: int,
        adam_chromosome: Chromosome,
        generation_strategy: Optional[GenerationStrategy] = None,
    ):
        if min_size < 2:
            raise ArgumentError("The minimum size for a population is 2 chromosomes.")
        if max_size < min_size:
            raise ArgumentError(
                "The maximum size for a population should be equal or greater "
                "than minimum size."
            )
        if adam_chromosome is None:
            raise ArgumentError("adam_chromosome must not be None")

        self.min_size = min_size
        self.max_size = max_size
        self.adam_chromosome = adam_chromosome
        self.generation_strategy = generation_strategy or PerformanceGenerationStrategy()
        self.generations: List[Generation] = []
        self.current_generation: Optional[Generation] = None
        self.generations_number = 0
        self.created_at: Optional[datetime] = None
        self._best_chromosome_listeners: List[Callable[['Population'], None]] = []
        self._best_chromosome: Optional[Chromosome] = None

    @property
    def best_chromosome(self) -> Optional[Chromosome]:
        """Fittest chromosome of the current generation (None before any ended)."""
        return self._best_chromosome

    def add_best_chromosome_listener(self, callback: Callable[['Population'], None]) -> None:
        self._best_chromosome_listeners.append(callback)

    def remove_best_chromosome_listener(self, callback: Callable[['Population'], None]) -> None:
        self._best_chromosome_listeners.remove(callback)

    def create_initial_generation(self) -> None:
        """Reset the history and grow generation 1 from the prototype."""
        self.generations = []
        self.generations_number = 0
        self._best_chromosome = None
        self.created_at = datetime.now()

        chromosomes = []
        for _ in range(self.min_size):
            chromosome = self.adam_chromosome.create_new()
            if chromosome is None or chromosome.length == 0:
                raise ArgumentError(
                    "The prototype's create_new() must return a chromosome with genes."
                )
            chromosomes.append(chromosome)

        self.create_new_generation(chromosomes)

    def create_new_generation(self, chromosomes: Sequence[Chromosome]) -> None:
        """Append a generation holding ``chromosomes`` and make it current."""
        if chromosomes is None:
            raise ArgumentError("chromosomes must not be None")

        self.generations_number += 1
        self.current_generation = Generation(self.generations_number, chromosomes)
        self.generations.append(self.current_generation)
        self.generation_strategy.register_new_generation(self)
        logger.debug(
            f"Created generation {self.generations_number} "
            f"with {len(chromosomes)} chromosomes"
        )

    def end_current_generation(self) -> None:
        """Close the current generation and update the best chromosome."""
        if self.current_generation is None:
            raise InvalidStateError("There is no current generation to end.")

        self.current_generation.end(self.max_size)
        best = self.current_generation.best_chromosome

        if best is not self._best_chromosome:
            self._best_chromosome = best
            for callback in list(self._best_chromosome_listeners):
                callback(self)

    def __repr__(self) -> str:
        return (
            f"Population(min_size={self.min_size}, max_size={self.max_size}, "
            f"generations={self.generations_number})"
        )
