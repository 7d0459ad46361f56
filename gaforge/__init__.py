"""
gaforge: a general-purpose genetic algorithm engine.

Problem controllers supply a chromosome prototype and a fitness function;
gaforge evolves generations with pluggable selection, crossover, mutation,
reinsertion and termination operators, evaluating fitness sequentially or
on a thread pool.
"""

__version__ = "0.1.0"

from gaforge.core import (
    GeneticError,
    ArgumentError,
    RangeError,
    InvalidStateError,
    SelectionError,
    CrossoverError,
    MutationError,
    ReinsertionError,
    FitnessEvaluationError,
    ExecutorTimeoutError,
    RandomSource,
    LinearTaskExecutor,
    ParallelTaskExecutor,
    configure_logging,
)
from gaforge.evolution import (
    Chromosome,
    SymbolChromosome,
    Population,
    GeneticAlgorithm,
    GeneticAlgorithmState,
    GeneticAlgorithmEvent,
    EvolutionConfig,
)

__all__ = [
    "GeneticError",
    "ArgumentError",
    "RangeError",
    "InvalidStateError",
    "SelectionError",
    "CrossoverError",
    "MutationError",
    "ReinsertionError",
    "FitnessEvaluationError",
    "ExecutorTimeoutError",
    "RandomSource",
    "LinearTaskExecutor",
    "ParallelTaskExecutor",
    "configure_logging",
    "Chromosome",
    "SymbolChromosome",
    "Population",
    "GeneticAlgorithm",
    "GeneticAlgorithmState",
    "GeneticAlgorithmEvent",
    "EvolutionConfig",
    "__version__",
]
