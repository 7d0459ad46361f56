"""
Crossover operators: recombine parent genes into offspring.

Crossover never modifies the parents. Children start as clones of a parent
and receive genes positionally, so they keep the parents' length and shape.

Example (two-point, points 1 and 3):
    Parent 1: [A, B, C, D, E]
    Parent 2: [a, b, c, d, e]
    Child 1:  [A, B, c, d, E]
    Child 2:  [a, b, C, D, e]
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..core.errors import ArgumentError, CrossoverError
from ..core.randomization import RandomSource, default_random
from .chromosome import Chromosome


class Crossover(ABC):
    """
    Base class for crossover operators.

    Args:
        parents_number: Parents consumed per cross() call (>= 2)
        children_number: Children produced per cross() call (>= 1)
        min_chromosome_length: Shortest chromosome the variant can handle
    """

    def __init__(
        self,
        parents_number: int,
        children_number: int,
        min_chromosome_length: int = 2,
        random_source: Optional[RandomSource] = None,
    ):
        if parents_number < 2:
            raise ArgumentError(f"parents_number must be at least 2, got {parents_number}")
        if children_number < 1:
            raise ArgumentError(f"children_number must be at least 1, got {children_number}")
        self.parents_number = parents_number
        self.children_number = children_number
        self.min_chromosome_length = min_chromosome_length
        self.random_source = random_source

    @property
    def random(self) -> RandomSource:
        return self.random_source or default_random()

    def cross(self, parents: Sequence[Chromosome]) -> List[Chromosome]:
        """
        Produce ``children_number`` offspring from exactly ``parents_number`` parents.

        Raises:
            ArgumentError: Wrong number of parents, or parents of different lengths
            CrossoverError: Parents shorter than min_chromosome_length
        """
        if parents is None or len(parents) != self.parents_number:
            got = 0 if parents is None else len(parents)
            raise ArgumentError(
                f"The number of parents should be the same of parents_number "
                f"({self.parents_number}), got {got}"
            )

        length = parents[0].length
        if any(p.length != length for p in parents):
            raise ArgumentError("All parents must have the same length")
        if length < self.min_chromosome_length:
            raise CrossoverError(
                self,
                f"A chromosome should have at least {self.min_chromosome_length} "
                f"genes, got {length}",
            )

        return self.perform_cross(list(parents))

    @abstractmethod
    def perform_cross(self, parents: List[Chromosome]) -> List[Chromosome]:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def _child_of(parent: Chromosome) -> Chromosome:
    child = parent.clone()
    child.fitness = None
    return child


class UniformCrossover(Crossover):
    """
    Uniform crossover with gene-by-gene mixing.

    For every gene, child 1 takes parent 1's gene with probability
    ``mix_probability`` and parent 2's otherwise; child 2 gets the other one.

    Args:
        mix_probability: Probability of keeping the first parent's gene
    """

    def __init__(self, mix_probability: float = 0.5, random_source: Optional[RandomSource] = None):
        super().__init__(2, 2, random_source=random_source)
        if not 0.0 <= mix_probability <= 1.0:
            raise ArgumentError(f"mix_probability must be in [0, 1], got {mix_probability}")
        self.mix_probability = mix_probability

    def perform_cross(self, parents: List[Chromosome]) -> List[Chromosome]:
        parent1, parent2 = parents
        child1 = _child_of(parent1)
        child2 = _child_of(parent2)

        for i in range(parent1.length):
            if self.random.uniform01() < self.mix_probability:
                child1.replace_gene(i, parent1.get_gene(i))
                child2.replace_gene(i, parent2.get_gene(i))
            else:
                child1.replace_gene(i, parent2.get_gene(i))
                child2.replace_gene(i, parent1.get_gene(i))

        return [child1, child2]

    def __repr__(self) -> str:
        return f"UniformCrossover(mix_probability={self.mix_probability})"


class OnePointCrossover(Crossover):
    """
    Single-point crossover.

    Genes up to and including ``swap_point_index`` come from the first
    parent, the rest from the second (and the reverse for child 2).

    Args:
        swap_point_index: Fixed swap point (random per call when None)
    """

    def __init__(
        self,
        swap_point_index: Optional[int] = None,
        random_source: Optional[RandomSource] = None,
    ):
        super().__init__(2, 2, random_source=random_source)
        self.swap_point_index = swap_point_index

    def perform_cross(self, parents: List[Chromosome]) -> List[Chromosome]:
        parent1, parent2 = parents
        length = parent1.length
        point = self.swap_point_index
        if point is None:
            point = self.random.int_in_range(0, length - 1)
        if not 0 <= point < length - 1:
            raise CrossoverError(
                self,
                f"The swap point index ({point}) must be between 0 and {length - 2}",
            )

        genes1 = parent1.genes
        genes2 = parent2.genes
        child1 = _child_of(parent1)
        child2 = _child_of(parent2)
        child1.replace_genes(0, genes1[:point + 1] + genes2[point + 1:])
        child2.replace_genes(0, genes2[:point + 1] + genes1[point + 1:])
        return [child1, child2]


class TwoPointCrossover(Crossover):
    """
    Two-point crossover: swap the segment between two points.

    Genes in (first, second] are exchanged between the parents.

    Args:
        first_point: Fixed first swap point (random when None)
        second_point: Fixed second swap point (random when None)
    """

    def __init__(
        self,
        first_point: Optional[int] = None,
        second_point: Optional[int] = None,
        random_source: Optional[RandomSource] = None,
    ):
        super().__init__(2, 2, min_chromosome_length=3, random_source=random_source)
        if (first_point is None) != (second_point is None):
            raise ArgumentError("Give both swap points or neither")
        if first_point is not None and first_point >= second_point:
            raise ArgumentError(
                f"first_point ({first_point}) must be less than second_point ({second_point})"
            )
        self.first_point = first_point
        self.second_point = second_point

    def perform_cross(self, parents: List[Chromosome]) -> List[Chromosome]:
        parent1, parent2 = parents
        length = parent1.length

        if self.first_point is None:
            first, second = sorted(self.random.unique_ints_in_range(2, 0, length - 1))
        else:
            first, second = self.first_point, self.second_point
        if second >= length - 1:
            raise CrossoverError(
                self,
                f"The second swap point ({second}) must be less than {length - 1}",
            )

        genes1 = parent1.genes
        genes2 = parent2.genes
        child1 = _child_of(parent1)
        child2 = _child_of(parent2)
        child1.replace_genes(0, genes1[:first + 1] + genes2[first + 1:second + 1] + genes1[second + 1:])
        child2.replace_genes(0, genes2[:first + 1] + genes1[first + 1:second + 1] + genes2[second + 1:])
        return [child1, child2]

    def __repr__(self) -> str:
        return f"TwoPointCrossover(first_point={self.first_point}, second_point={self.second_point})"


class ThreeParentCrossover(Crossover):
    """
    Three-parent crossover: one child by majority vote.

    Where the first two parents agree on a gene the child inherits it,
    otherwise it takes the third parent's gene.
    """

    def __init__(self, random_source: Optional[RandomSource] = None):
        super().__init__(3, 1, random_source=random_source)

    def perform_cross(self, parents: List[Chromosome]) -> List[Chromosome]:
        parent1, parent2, parent3 = parents
        child = _child_of(parent1)

        for i in range(parent1.length):
            gene1 = parent1.get_gene(i)
            if gene1 == parent2.get_gene(i):
                child.replace_gene(i, gene1)
            else:
                child.replace_gene(i, parent3.get_gene(i))

        return [child]
