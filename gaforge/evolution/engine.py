"""
Main evolutionary optimization engine.

Orchestrates the evolution loop:
1. Create the initial generation
2. Evaluate fitness (through the task executor)
3. Select parents
4. Create offspring via crossover/mutation
5. Reinsert offspring and parents into a new generation
6. Repeat until termination is reached or a stop is requested

The loop runs on the thread that calls start()/resume(). Only fitness
evaluation is concurrent, and the population is never touched while a
fitness batch is running.
"""

import logging
import threading
import time
from dataclasses import dataclass, asdict, fields
from enum import Enum
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..core.constants import (
    DEFAULT_CROSSOVER_PROBABILITY,
    DEFAULT_GENERATIONS_TO_KEEP,
    DEFAULT_MAX_SIZE,
    DEFAULT_MAX_THREADS,
    DEFAULT_MIN_SIZE,
    DEFAULT_MIN_THREADS,
    DEFAULT_MUTATION_PROBABILITY,
)
from ..core.errors import (
    ArgumentError,
    ExecutorTimeoutError,
    FitnessEvaluationError,
    InvalidStateError,
)
from ..core.executors import LinearTaskExecutor, ParallelTaskExecutor, TaskExecutor
from ..core.randomization import RandomSource, default_random
from .chromosome import Chromosome, sort_by_fitness
from .crossover import Crossover
from .fitness import FitnessLike, as_fitness
from .history import EvolutionHistory
from .mutation import Mutation
from .population import (
    PerformanceGenerationStrategy,
    Population,
    TrackingGenerationStrategy,
)
from .reinsertion import ElitistReinsertion, Reinsertion
from .selection import Selection
from .termination import GenerationNumberTermination, Termination

logger = logging.getLogger(__name__)


class GeneticAlgorithmState(str, Enum):
    NOT_STARTED = 'not_started'
    STARTED = 'started'
    STOPPED = 'stopped'
    RESUMED = 'resumed'
    TERMINATION_REACHED = 'termination_reached'


class GeneticAlgorithmEvent(str, Enum):
    GENERATION_RAN = 'generation_ran'
    TERMINATION_REACHED = 'termination_reached'
    STOPPED = 'stopped'


Listener = Callable[['GeneticAlgorithm'], None]


class _FitnessBatch:
    """Shared state of one fitness batch; guarded by ``lock``."""

    def __init__(self):
        self.lock = threading.Lock()
        self.errors: List[Tuple[Chromosome, Exception]] = []
        self.abandoned = False


@dataclass
class EvolutionConfig:
    """Configuration for an evolution run."""
    # Population parameters
    min_size: int = DEFAULT_MIN_SIZE
    max_size: int = DEFAULT_MAX_SIZE
    generations_to_keep: Optional[int] = DEFAULT_GENERATIONS_TO_KEEP  # None keeps all

    # Evolution rates
    crossover_probability: float = DEFAULT_CROSSOVER_PROBABILITY
    mutation_probability: float = DEFAULT_MUTATION_PROBABILITY

    # Fitness evaluation
    parallel: bool = False
    min_threads: int = DEFAULT_MIN_THREADS
    max_threads: int = DEFAULT_MAX_THREADS
    timeout: Optional[float] = None  # seconds per fitness batch

    # Reproducibility
    seed: Optional[int] = None

    def validate(self) -> List[str]:
        """Return a list of configuration problems (empty when valid)."""
        issues = []
        if self.min_size < 2:
            issues.append(f"min_size must be at least 2, got {self.min_size}")
        if self.max_size < self.min_size:
            issues.append(f"max_size ({self.max_size}) must be >= min_size ({self.min_size})")
        if self.generations_to_keep is not None and self.generations_to_keep < 1:
            issues.append(f"generations_to_keep must be at least 1, got {self.generations_to_keep}")
        for name in ('crossover_probability', 'mutation_probability'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                issues.append(f"{name} must be in [0, 1], got {value}")
        if self.min_threads < 1:
            issues.append(f"min_threads must be at least 1, got {self.min_threads}")
        if self.max_threads < self.min_threads:
            issues.append(f"max_threads ({self.max_threads}) must be >= min_threads ({self.min_threads})")
        if self.timeout is not None and self.timeout <= 0:
            issues.append(f"timeout must be positive, got {self.timeout}")
        return issues

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EvolutionConfig':
        """Create from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def create_random_source(self) -> RandomSource:
        return RandomSource(self.seed)

    def create_task_executor(self) -> TaskExecutor:
        if self.parallel:
            return ParallelTaskExecutor(
                min_threads=self.min_threads,
                max_threads=self.max_threads,
                timeout=self.timeout,
            )
        return LinearTaskExecutor(timeout=self.timeout)

    def create_population(self, adam_chromosome: Chromosome) -> Population:
        if self.generations_to_keep is None:
            strategy = TrackingGenerationStrategy()
        else:
            strategy = PerformanceGenerationStrategy(self.generations_to_keep)
        return Population(self.min_size, self.max_size, adam_chromosome, strategy)


class GeneticAlgorithm:
    """
    The evolutionary engine.

    Composes a population, a fitness function and the five operators into
    the evolve loop, and exposes start/resume/stop plus generation events.

    Operators created without their own random source draw from the
    engine's, so seeding the engine makes the whole run reproducible.

    Args:
        population: Population to evolve
        fitness: Fitness object or plain callable chromosome -> float
        selection: Parent selection operator
        crossover: Crossover operator
        mutation: Mutation operator
        termination: Stop condition (default: after 1 generation)
        reinsertion: Survivor operator (default: ElitistReinsertion)
        task_executor: Fitness batch executor (default: LinearTaskExecutor)
        crossover_probability: Chance that a parent group is crossed
        mutation_probability: Chance passed to the mutation operator
        random_source: Source for the crossover coin flips
    """

    def __init__(
        self,
        population: Population,
        fitness: FitnessLike,
        selection: Selection,
        crossover: Crossover,
        mutation: Mutation,
        termination: Optional[Termination] = None,
        reinsertion: Optional[Reinsertion] = None,
        task_executor: Optional[TaskExecutor] = None,
        crossover_probability: float = DEFAULT_CROSSOVER_PROBABILITY,
        mutation_probability: float = DEFAULT_MUTATION_PROBABILITY,
        random_source: Optional[RandomSource] = None,
    ):
        for name, value in (
            ('population', population),
            ('fitness', fitness),
            ('selection', selection),
            ('crossover', crossover),
            ('mutation', mutation),
        ):
            if value is None:
                raise ArgumentError(f"{name} must not be None")
        for name, value in (
            ('crossover_probability', crossover_probability),
            ('mutation_probability', mutation_probability),
        ):
            if not 0.0 <= value <= 1.0:
                raise ArgumentError(f"{name} must be in [0, 1], got {value}")

        self.population = population
        self.fitness = as_fitness(fitness)
        self.selection = selection
        self.crossover = crossover
        self.mutation = mutation
        self.termination = termination or GenerationNumberTermination(1)
        self.reinsertion = reinsertion or ElitistReinsertion()
        self.task_executor = task_executor or LinearTaskExecutor()
        self.crossover_probability = crossover_probability
        self.mutation_probability = mutation_probability
        self.random_source = random_source

        if random_source is not None:
            for operator in (selection, crossover, mutation, self.reinsertion):
                if getattr(operator, 'random_source', False) is None:
                    operator.random_source = random_source

        self.history = EvolutionHistory()
        self._lock = threading.Lock()
        self._state = GeneticAlgorithmState.NOT_STARTED
        self._stop_requested = False
        self._loop_active = False
        self._time_evolving = 0.0
        self._listeners: Dict[GeneticAlgorithmEvent, List[Listener]] = {
            event: [] for event in GeneticAlgorithmEvent
        }

    @classmethod
    def from_config(
        cls,
        config: EvolutionConfig,
        adam_chromosome: Chromosome,
        fitness: FitnessLike,
        selection: Selection,
        crossover: Crossover,
        mutation: Mutation,
        termination: Optional[Termination] = None,
        reinsertion: Optional[Reinsertion] = None,
    ) -> 'GeneticAlgorithm':
        """Build an engine whose population, executor and randomness come from ``config``."""
        issues = config.validate()
        if issues:
            raise ArgumentError(f"Configuration errors: {issues}")

        return cls(
            population=config.create_population(adam_chromosome),
            fitness=fitness,
            selection=selection,
            crossover=crossover,
            mutation=mutation,
            termination=termination,
            reinsertion=reinsertion,
            task_executor=config.create_task_executor(),
            crossover_probability=config.crossover_probability,
            mutation_probability=config.mutation_probability,
            random_source=config.create_random_source(),
        )

    # =========================================================================
    # Read-only state
    # =========================================================================

    @property
    def state(self) -> GeneticAlgorithmState:
        with self._lock:
            return self._state

    @property
    def is_running(self) -> bool:
        return self.state in (GeneticAlgorithmState.STARTED, GeneticAlgorithmState.RESUMED)

    @property
    def generations_number(self) -> int:
        return self.population.generations_number

    @property
    def best_chromosome(self) -> Optional[Chromosome]:
        return self.population.best_chromosome

    @property
    def time_evolving(self) -> float:
        """Cumulative seconds spent evolving, across start and resumes."""
        return self._time_evolving

    @property
    def random(self) -> RandomSource:
        return self.random_source or default_random()

    # =========================================================================
    # Events
    # =========================================================================

    def add_listener(self, event: GeneticAlgorithmEvent, callback: Listener) -> None:
        """Register ``callback(ga)`` for ``event``; listeners run in registration order."""
        if callback is None or not callable(callback):
            raise ArgumentError("callback must be a callable")
        with self._lock:
            self._listeners[GeneticAlgorithmEvent(event)].append(callback)

    def remove_listener(self, event: GeneticAlgorithmEvent, callback: Listener) -> None:
        with self._lock:
            self._listeners[GeneticAlgorithmEvent(event)].remove(callback)

    def _notify(self, event: GeneticAlgorithmEvent) -> None:
        with self._lock:
            listeners = list(self._listeners[event])
        for callback in listeners:
            callback(self)

    def _set_state(self, value: GeneticAlgorithmState) -> None:
        with self._lock:
            previous = self._state
            self._state = value
        if value == GeneticAlgorithmState.STOPPED and previous != value:
            self._notify(GeneticAlgorithmEvent.STOPPED)

    # =========================================================================
    # Control
    # =========================================================================

    def start(self) -> None:
        """
        Create the initial generation and evolve until termination or stop.

        Raises:
            InvalidStateError: If the engine was already started
        """
        with self._lock:
            if self._state != GeneticAlgorithmState.NOT_STARTED:
                raise InvalidStateError(
                    f"Attempt to start a genetic algorithm in state {self._state.value}."
                )
            self._state = GeneticAlgorithmState.STARTED
            self._stop_requested = False
            self._loop_active = True

        try:
            logger.info(f"Starting evolution with {self.population!r}")
            started_at = time.perf_counter()
            try:
                self.population.create_initial_generation()
            except Exception as e:
                logger.error(f"Initial generation failed: {e}")
                self._set_state(GeneticAlgorithmState.STOPPED)
                raise
            self._time_evolving += time.perf_counter() - started_at

            # A stop() issued once generation 1 exists is kept
            self._run_loop()
        finally:
            with self._lock:
                self._loop_active = False

    def resume(self) -> None:
        """
        Continue evolving from the current generation.

        After termination was reached, supply a new or extended termination
        before resuming.

        Raises:
            InvalidStateError: If never started, already running, or the
                current termination is already reached
        """
        with self._lock:
            if self._loop_active:
                raise InvalidStateError("The genetic algorithm is already running.")
            self._loop_active = True
            self._stop_requested = False

        try:
            if self.generations_number == 0:
                raise InvalidStateError(
                    "Attempt to resume a genetic algorithm which was not yet started."
                )
            if self.generations_number > 1 and self.termination.has_reached(self):
                raise InvalidStateError(
                    f"Attempt to resume a genetic algorithm with a termination "
                    f"({self.termination!r}) already reached. Please, specify a new "
                    "termination or extend the current one."
                )
            self._set_state(GeneticAlgorithmState.RESUMED)

            self._run_loop()
        finally:
            with self._lock:
                self._loop_active = False

    def stop(self) -> None:
        """
        Request a stop at the end of the current generation.

        Raises:
            InvalidStateError: If the engine was never started
        """
        if self.generations_number == 0:
            raise InvalidStateError(
                "Attempt to stop a genetic algorithm which was not yet started."
            )
        with self._lock:
            self._stop_requested = True
        logger.info("Stop requested; finishing the current generation")

    # =========================================================================
    # Evolve loop
    # =========================================================================

    def _run_loop(self) -> None:
        try:
            if not self.population.current_generation.is_ended:
                if self._end_current_generation(time.perf_counter()):
                    return

            while not self._evolve_one_generation():
                pass

        except KeyboardInterrupt:
            logger.warning("Evolution interrupted by user")
            self._set_state(GeneticAlgorithmState.STOPPED)
            raise

        except Exception as e:
            logger.error(f"Evolution failed at generation {self.generations_number}: {e}")
            self._set_state(GeneticAlgorithmState.STOPPED)
            raise

    def _evolve_one_generation(self) -> bool:
        """Run one generation; True when the loop must exit."""
        started_at = time.perf_counter()

        parents = self.selection.select_chromosomes(
            self.population.min_size,
            self.population.current_generation,
        )
        offspring = self._cross(parents)
        self._mutate(offspring)
        chromosomes = self.reinsertion.select_chromosomes(self.population, offspring, parents)
        self.population.create_new_generation(chromosomes)

        return self._end_current_generation(started_at)

    def _cross(self, parents: List[Chromosome]) -> List[Chromosome]:
        """
        Cross consecutive groups of parents.

        A group that is not crossed (probability miss, or a short trailing
        group) passes to the offspring as clones.
        """
        offspring = []
        group_size = self.crossover.parents_number

        for i in range(0, len(parents), group_size):
            group = parents[i:i + group_size]
            if len(group) == group_size and self.random.uniform01() < self.crossover_probability:
                offspring.extend(self.crossover.cross(group))
            else:
                offspring.extend(parent.clone() for parent in group)

        return offspring

    def _mutate(self, chromosomes: List[Chromosome]) -> None:
        for chromosome in chromosomes:
            self.mutation.mutate(chromosome, self.mutation_probability)

    def _end_current_generation(self, started_at: float) -> bool:
        """
        Evaluate, sort and close the current generation, then fire events.

        Returns:
            True if termination was reached or a stop was requested
        """
        evaluations = self._evaluate_fitness()

        generation = self.population.current_generation
        generation.chromosomes = sort_by_fitness(generation.chromosomes)
        self.population.end_current_generation()

        duration = time.perf_counter() - started_at
        self._time_evolving += duration
        stats = self.history.record_generation(generation, evaluations, duration)
        logger.info(
            f"Generation {stats.generation}: best={stats.best_fitness:.4f} "
            f"mean={stats.mean_fitness:.4f} size={stats.population_size} "
            f"evaluations={evaluations} ({duration:.2f}s)"
        )

        self._notify(GeneticAlgorithmEvent.GENERATION_RAN)

        if self.termination.has_reached(self):
            logger.info(f"Termination {self.termination!r} reached at generation {stats.generation}")
            self._set_state(GeneticAlgorithmState.TERMINATION_REACHED)
            self._notify(GeneticAlgorithmEvent.TERMINATION_REACHED)
            return True

        with self._lock:
            stop_requested = self._stop_requested
        if stop_requested:
            logger.info(f"Evolution stopped after generation {stats.generation}")
            self.task_executor.stop()
            self._set_state(GeneticAlgorithmState.STOPPED)
            return True

        return False

    def _evaluate_fitness(self) -> int:
        """
        Score every unevaluated chromosome of the current generation.

        Each chromosome is one job and the job only writes that chromosome's
        fitness. Failures are collected and raised once the batch is over.
        A job still running after the batch returned (timeout or stop) is
        abandoned: its result is discarded instead of written.

        Returns:
            Number of evaluations performed
        """
        pending: Dict[int, Chromosome] = {}
        for chromosome in self.population.current_generation.unevaluated():
            pending.setdefault(id(chromosome), chromosome)

        batch = _FitnessBatch()

        try:
            for chromosome in pending.values():
                self.task_executor.add(partial(self._run_evaluate_fitness, chromosome, batch))
            completed = self.task_executor.start()
        finally:
            with batch.lock:
                batch.abandoned = True
            self.task_executor.stop()
            self.task_executor.clear()

        errors = batch.errors

        if errors:
            chromosome, error = errors[0]
            raise FitnessEvaluationError(
                self.fitness,
                chromosome,
                f"Error executing Fitness.evaluate for chromosome: {error}",
            ) from error

        if not completed:
            raise ExecutorTimeoutError(self.task_executor.timeout)

        return len(pending)

    def _run_evaluate_fitness(self, chromosome: Chromosome, batch: '_FitnessBatch') -> None:
        try:
            fitness = float(self.fitness.evaluate(chromosome))
        except Exception as e:
            with batch.lock:
                if not batch.abandoned:
                    batch.errors.append((chromosome, e))
            return

        with batch.lock:
            if batch.abandoned:
                logger.debug("Discarding fitness computed after its batch was abandoned")
                return
            chromosome.fitness = fitness

    def summary(self) -> str:
        """Generate summary string."""
        best = self.best_chromosome
        lines = [
            f"State: {self.state.value}",
            f"Generations: {self.generations_number}",
            f"Time evolving: {self.time_evolving:.1f}s",
        ]
        if best is not None:
            lines.append(f"Best fitness: {best.fitness:.4f}")
            lines.append(f"Best chromosome: {best!r}")
        return '\n'.join(lines)
