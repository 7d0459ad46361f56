"""
Error taxonomy for the genetic algorithm engine.

Operator and evaluation errors propagate out of the evolve loop untouched:
the engine moves to STOPPED and re-raises them to the caller.
"""

from typing import Any, Optional


class GeneticError(Exception):
    """Base class for every error raised by gaforge."""


class ArgumentError(GeneticError, ValueError):
    """A constructor or call argument is missing or invalid."""


class RangeError(GeneticError, ValueError):
    """Bounds passed to the randomness source are inconsistent."""


class InvalidStateError(GeneticError, RuntimeError):
    """start/resume/stop called in a state that does not allow it."""


class OperatorError(GeneticError):
    """
    Raised by a genetic operator when one of its preconditions fails.

    Attributes:
        operator: The operator instance that raised the error
    """

    def __init__(self, operator: Any, message: str):
        self.operator = operator
        super().__init__(f"{type(operator).__name__}: {message}")


class SelectionError(OperatorError):
    pass


class CrossoverError(OperatorError):
    pass


class MutationError(OperatorError):
    pass


class ReinsertionError(OperatorError):
    pass


class FitnessEvaluationError(GeneticError):
    """
    Wraps an exception raised by a user fitness function.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, fitness: Any, chromosome: Any, message: str):
        self.fitness = fitness
        self.chromosome = chromosome
        super().__init__(message)


class ExecutorTimeoutError(GeneticError, TimeoutError):
    """A fitness batch did not complete inside the executor timeout."""

    def __init__(self, timeout: Optional[float]):
        self.timeout = timeout
        super().__init__(
            f"The fitness evaluation reached the {timeout}s timeout."
        )
