"""
Reinsertion operators: decide which chromosomes survive into the next generation.

Every variant declares whether it can grow a short offspring set up to the
population minimum (can_expand) and whether it can shrink an oversized one
down to the maximum (can_collapse). The base class refuses offspring counts
the variant cannot bring within bounds.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..core.errors import ArgumentError, ReinsertionError
from ..core.randomization import RandomSource, default_random
from .chromosome import Chromosome, sort_by_fitness
from .population import Population


class Reinsertion(ABC):
    """
    Base class for reinsertion operators.

    Args:
        can_collapse: Variant can reduce more than max_size offspring
        can_expand: Variant can fill fewer than min_size offspring
    """

    def __init__(
        self,
        can_collapse: bool,
        can_expand: bool,
        random_source: Optional[RandomSource] = None,
    ):
        self.can_collapse = can_collapse
        self.can_expand = can_expand
        self.random_source = random_source

    @property
    def random(self) -> RandomSource:
        return self.random_source or default_random()

    def select_chromosomes(
        self,
        population: Population,
        offspring: List[Chromosome],
        parents: List[Chromosome],
    ) -> List[Chromosome]:
        """
        Build the chromosome set of the next generation.

        Raises:
            ArgumentError: If any argument is None
            ReinsertionError: If the offspring count is outside what the
                variant can bring within [min_size, max_size]
        """
        if population is None:
            raise ArgumentError("population must not be None")
        if offspring is None:
            raise ArgumentError("offspring must not be None")
        if parents is None:
            raise ArgumentError("parents must not be None")

        if not self.can_expand and len(offspring) < population.min_size:
            raise ReinsertionError(
                self,
                f"Cannot expand {len(offspring)} offspring to the population "
                f"minimum of {population.min_size}. Try another reinsertion!",
            )
        if not self.can_collapse and len(offspring) > population.max_size:
            raise ReinsertionError(
                self,
                f"Cannot collapse {len(offspring)} offspring to the population "
                f"maximum of {population.max_size}. Try another reinsertion!",
            )

        return self.perform_select_chromosomes(population, offspring, parents)

    @abstractmethod
    def perform_select_chromosomes(
        self,
        population: Population,
        offspring: List[Chromosome],
        parents: List[Chromosome],
    ) -> List[Chromosome]:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(can_collapse={self.can_collapse}, can_expand={self.can_expand})"


class ElitistReinsertion(Reinsertion):
    """All offspring plus the best parents needed to reach min_size."""

    def __init__(self):
        super().__init__(can_collapse=False, can_expand=True)

    def perform_select_chromosomes(self, population, offspring, parents):
        missing = population.min_size - len(offspring)
        if missing <= 0:
            return list(offspring)
        best_parents = sort_by_fitness(parents)[:missing]
        return list(offspring) + best_parents


class PureReinsertion(Reinsertion):
    """The offspring replace the parents entirely."""

    def __init__(self):
        super().__init__(can_collapse=False, can_expand=False)

    def perform_select_chromosomes(self, population, offspring, parents):
        return list(offspring)


class UniformReinsertion(Reinsertion):
    """Fill up to min_size with clones of randomly chosen offspring."""

    def __init__(self, random_source: Optional[RandomSource] = None):
        super().__init__(can_collapse=False, can_expand=True, random_source=random_source)

    def perform_select_chromosomes(self, population, offspring, parents):
        if not offspring:
            raise ReinsertionError(self, "The number of offspring should be greater than zero.")

        chosen = list(offspring)
        while len(chosen) < population.min_size:
            chosen.append(self.random.choice(offspring).clone())
        return chosen


class FitnessBasedReinsertion(Reinsertion):
    """
    Keep only the fittest offspring when there are more than max_size.

    Unevaluated offspring rank below every evaluated one.
    """

    def __init__(self):
        super().__init__(can_collapse=True, can_expand=False)

    def perform_select_chromosomes(self, population, offspring, parents):
        if len(offspring) > population.max_size:
            return sort_by_fitness(offspring)[:population.max_size]
        return list(offspring)
