"""
Per-generation statistics for an evolutionary run.

Records best/mean/min/std fitness of every ended generation so observers
can plot progress or detect stagnation without keeping old generations.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

import numpy as np

from .population import Generation


@dataclass
class GenerationStats:
    """Statistics for a single generation."""
    generation: int
    best_fitness: float
    mean_fitness: float
    min_fitness: float
    std_fitness: float
    population_size: int
    evaluations_this_gen: int
    duration_seconds: float
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class EvolutionHistory:
    """
    Tracks evolution progress over generations.

    Records per-generation statistics for analysis and visualization.
    """

    def __init__(self):
        self.generations: List[GenerationStats] = []
        self.fitness_trajectory: List[float] = []

    def record_generation(
        self,
        generation: Generation,
        evaluations: int,
        duration_seconds: float,
    ) -> GenerationStats:
        """
        Record statistics for an ended generation.

        Args:
            generation: Generation whose members all have fitness
            evaluations: Number of fitness evaluations this generation
            duration_seconds: Time spent evolving this generation

        Returns:
            GenerationStats for this generation
        """
        fitnesses = np.array([c.fitness for c in generation.chromosomes], dtype=float)

        stats = GenerationStats(
            generation=generation.number,
            best_fitness=float(fitnesses.max()),
            mean_fitness=float(fitnesses.mean()),
            min_fitness=float(fitnesses.min()),
            std_fitness=float(fitnesses.std()),
            population_size=generation.size,
            evaluations_this_gen=evaluations,
            duration_seconds=duration_seconds,
            timestamp=generation.created_at.isoformat(),
        )

        self.generations.append(stats)
        self.fitness_trajectory.append(stats.best_fitness)
        return stats

    @property
    def latest(self) -> Optional[GenerationStats]:
        return self.generations[-1] if self.generations else None

    def clear(self) -> None:
        self.generations = []
        self.fitness_trajectory = []

    def to_dict(self) -> Dict[str, Any]:
        """Convert history to a plain dictionary."""
        return {
            'generations': [g.to_dict() for g in self.generations],
            'fitness_trajectory': self.fitness_trajectory,
        }

    def get_improvement_rate(self, window: int = 5) -> float:
        """
        Calculate recent improvement rate.

        Args:
            window: Number of recent generations to consider

        Returns:
            Improvement rate (positive = improving, inf if too few generations)
        """
        if len(self.fitness_trajectory) < window + 1:
            return float('inf')

        recent_best = max(self.fitness_trajectory[-window:])
        older_best = max(self.fitness_trajectory[:-window])
        return recent_best - older_best
