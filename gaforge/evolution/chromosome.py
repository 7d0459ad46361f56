"""
Chromosome representation for the genetic algorithm.

A Chromosome is a fixed-length, ordered list of genes plus a fitness score
that stays None until the engine evaluates it. Problem controllers subclass
Chromosome to define what a legal gene is; operators only ever see the
base-class API.
"""

import copy
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from ..core.errors import ArgumentError, RangeError
from ..core.randomization import RandomSource, default_random


class Chromosome(ABC):
    """
    Base class for problem-specific genotypes.

    Subclasses implement generate_gene() and create_new(), and usually call
    create_genes() from their constructor.

    Attributes:
        fitness: Score assigned by the fitness step (None if not yet evaluated)
    """

    def __init__(self, length: int):
        if length < 2:
            raise ArgumentError(
                f"The minimum length for a chromosome is 2 genes, got {length}"
            )
        self._genes: List[Any] = [None] * length
        self.fitness: Optional[float] = None

    @abstractmethod
    def generate_gene(self, index: int) -> Any:
        """Return a random legal gene for position ``index``."""

    @abstractmethod
    def create_new(self) -> 'Chromosome':
        """Return a new random chromosome of the same shape."""

    @property
    def length(self) -> int:
        return len(self._genes)

    @property
    def genes(self) -> List[Any]:
        """Copy of the gene list."""
        return list(self._genes)

    def get_gene(self, index: int) -> Any:
        self._check_index(index)
        return self._genes[index]

    def create_genes(self) -> None:
        """Fill every position with generate_gene()."""
        for index in range(self.length):
            self.replace_gene(index, self.generate_gene(index))

    def replace_gene(self, index: int, gene: Any) -> None:
        """Replace one gene in place; the fitness becomes stale."""
        self._check_index(index)
        self._genes[index] = gene
        self.fitness = None

    def replace_genes(self, start_index: int, genes: Sequence[Any]) -> None:
        """Replace consecutive genes starting at ``start_index``."""
        if genes is None:
            raise ArgumentError("genes must not be None")
        if not genes:
            return
        self._check_index(start_index)
        if start_index + len(genes) > self.length:
            raise ArgumentError(
                f"The number of genes to be replaced ({len(genes)}) starting at "
                f"{start_index} exceeds the chromosome length ({self.length})"
            )
        self._genes[start_index:start_index + len(genes)] = list(genes)
        self.fitness = None

    def clone(self) -> 'Chromosome':
        """Deep copy with independent gene storage; fitness is kept."""
        clone = copy.copy(self)
        clone._genes = copy.deepcopy(self._genes)
        clone.fitness = self.fitness
        return clone

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.length:
            raise RangeError(
                f"There is no gene at index {index}; length is {self.length}"
            )

    def __len__(self) -> int:
        return self.length

    def __repr__(self) -> str:
        fitness_str = f", fitness={self.fitness:.4f}" if self.fitness is not None else ""
        return f"{type(self).__name__}(genes={self._genes!r}{fitness_str})"


def fitness_key(chromosome: Chromosome) -> float:
    """Sort key treating unevaluated chromosomes as the worst."""
    return chromosome.fitness if chromosome.fitness is not None else float('-inf')


def sort_by_fitness(chromosomes: Sequence[Chromosome]) -> List[Chromosome]:
    """Stable descending sort: ties keep their original order."""
    return sorted(chromosomes, key=fitness_key, reverse=True)


class SymbolChromosome(Chromosome):
    """
    Chromosome whose genes are symbols drawn uniformly from an alphabet.

    The genotype used for word generation: each gene is one character.

    Example:
        >>> chromosome = SymbolChromosome('abc', length=4, random_source=RandomSource(1))
        >>> len(chromosome.to_string())
        4
    """

    def __init__(
        self,
        alphabet: Sequence[Any],
        length: int,
        random_source: Optional[RandomSource] = None,
    ):
        if not alphabet:
            raise ArgumentError("alphabet must contain at least one symbol")
        super().__init__(length)
        self.alphabet = tuple(alphabet)
        self.random_source = random_source
        self.create_genes()

    @property
    def random(self) -> RandomSource:
        return self.random_source or default_random()

    def generate_gene(self, index: int) -> Any:
        return self.random.choice(self.alphabet)

    def create_new(self) -> 'SymbolChromosome':
        return SymbolChromosome(self.alphabet, self.length, self.random_source)

    def to_string(self) -> str:
        return ''.join(str(gene) for gene in self._genes)
