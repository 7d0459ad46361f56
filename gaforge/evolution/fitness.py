"""
Fitness functions.

A fitness function maps a chromosome to a scalar score, higher is better.
The engine may call evaluate() from several worker threads at once, so
implementations must not mutate shared state. Data a fitness needs (word
lists, targets, datasets) is passed in at construction time.
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, Union

import numpy as np

from ..core.errors import ArgumentError
from .chromosome import Chromosome


class Fitness(ABC):
    """Contract for fitness functions."""

    @abstractmethod
    def evaluate(self, chromosome: Chromosome) -> float:
        """Score ``chromosome``; must be side-effect free."""


class FunctionFitness(Fitness):
    """Adapts a plain callable to the Fitness contract."""

    def __init__(self, func: Callable[[Chromosome], float]):
        if func is None or not callable(func):
            raise ArgumentError("func must be a callable")
        self.func = func

    def evaluate(self, chromosome: Chromosome) -> float:
        return float(self.func(chromosome))

    def __repr__(self) -> str:
        name = getattr(self.func, '__name__', repr(self.func))
        return f"FunctionFitness({name})"


FitnessLike = Union[Fitness, Callable[[Chromosome], float]]


def as_fitness(fitness: FitnessLike) -> Fitness:
    """Wrap callables in FunctionFitness, pass Fitness objects through."""
    if isinstance(fitness, Fitness):
        return fitness
    return FunctionFitness(fitness)


class WeightedFitness(Fitness):
    """
    Weighted mean of several fitness components.

    Lets a controller score independent criteria (length, dictionary matches,
    repeated symbols, ...) separately and combine them into one scalar.

    Args:
        components: Mapping of fitness component -> non-negative weight
    """

    def __init__(self, components: Dict[FitnessLike, float]):
        if not components:
            raise ArgumentError("WeightedFitness needs at least one component")
        weights = np.array(list(components.values()), dtype=float)
        if np.any(weights < 0) or weights.sum() <= 0:
            raise ArgumentError("Weights must be non-negative and sum to a positive value")
        self.components = [as_fitness(c) for c in components]
        self.weights = weights / weights.sum()

    def evaluate(self, chromosome: Chromosome) -> float:
        scores = np.array([c.evaluate(chromosome) for c in self.components], dtype=float)
        return float(np.dot(scores, self.weights))
