"""Core services shared by the evolution engine."""

from .errors import (
    GeneticError,
    ArgumentError,
    RangeError,
    InvalidStateError,
    OperatorError,
    SelectionError,
    CrossoverError,
    MutationError,
    ReinsertionError,
    FitnessEvaluationError,
    ExecutorTimeoutError,
)
from .randomization import RandomSource, default_random, set_default_random
from .executors import TaskExecutor, LinearTaskExecutor, ParallelTaskExecutor
from .logs import configure_logging

__all__ = [
    'GeneticError',
    'ArgumentError',
    'RangeError',
    'InvalidStateError',
    'OperatorError',
    'SelectionError',
    'CrossoverError',
    'MutationError',
    'ReinsertionError',
    'FitnessEvaluationError',
    'ExecutorTimeoutError',
    'RandomSource',
    'default_random',
    'set_default_random',
    'TaskExecutor',
    'LinearTaskExecutor',
    'ParallelTaskExecutor',
    'configure_logging',
]
