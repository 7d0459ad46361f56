"""
Mutation operators: perturb offspring genes in place.

Mutations never change the chromosome length.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from ..core.errors import ArgumentError, MutationError
from ..core.randomization import RandomSource, default_random
from .chromosome import Chromosome


class Mutation(ABC):
    """Base class for mutation operators."""

    def __init__(self, random_source: Optional[RandomSource] = None):
        self.random_source = random_source

    @property
    def random(self) -> RandomSource:
        return self.random_source or default_random()

    def mutate(self, chromosome: Chromosome, probability: float) -> None:
        """
        Mutate ``chromosome`` in place.

        Args:
            chromosome: Chromosome to mutate
            probability: Chance of mutation per mutable unit, in [0, 1]
        """
        if chromosome is None:
            raise ArgumentError("chromosome must not be None")
        if not 0.0 <= probability <= 1.0:
            raise ArgumentError(f"probability must be in [0, 1], got {probability}")

        self.perform_mutate(chromosome, probability)

    @abstractmethod
    def perform_mutate(self, chromosome: Chromosome, probability: float) -> None:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class UniformMutation(Mutation):
    """
    Replace genes with fresh random legal values.

    Each candidate gene is replaced independently with the given
    probability. With neither option set, one random position per call is
    the only candidate.

    Args:
        mutate_all_genes: Every gene is a candidate
        indexes: Only these gene positions are candidates
    """

    def __init__(
        self,
        mutate_all_genes: bool = False,
        indexes: Optional[Iterable[int]] = None,
        random_source: Optional[RandomSource] = None,
    ):
        super().__init__(random_source)
        self.mutate_all_genes = mutate_all_genes
        self.indexes = sorted(set(indexes)) if indexes is not None else None

    def perform_mutate(self, chromosome: Chromosome, probability: float) -> None:
        if self.mutate_all_genes:
            candidates = range(chromosome.length)
        elif self.indexes is not None:
            candidates = self.indexes
        else:
            candidates = [self.random.int_in_range(0, chromosome.length)]

        for index in candidates:
            if index >= chromosome.length:
                raise MutationError(
                    self,
                    f"Gene index {index} is out of range for a chromosome "
                    f"of length {chromosome.length}",
                )
            if self.random.uniform01() < probability:
                chromosome.replace_gene(index, chromosome.generate_gene(index))

    def __repr__(self) -> str:
        return f"UniformMutation(mutate_all_genes={self.mutate_all_genes}, indexes={self.indexes})"


class ReverseSequenceMutation(Mutation):
    """
    Reverse a random contiguous run of genes.

    With the given probability, picks two distinct positions and reverses
    the genes between them (inclusive).
    """

    def perform_mutate(self, chromosome: Chromosome, probability: float) -> None:
        if chromosome.length < 3:
            raise MutationError(
                self,
                f"A chromosome should have at least 3 genes, got {chromosome.length}",
            )

        if self.random.uniform01() < probability:
            first, last = sorted(self.random.unique_ints_in_range(2, 0, chromosome.length))
            segment = chromosome.genes[first:last + 1]
            segment.reverse()
            chromosome.replace_genes(first, segment)
