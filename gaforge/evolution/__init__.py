"""
gaforge evolution: the genetic algorithm and its operators.

Key components:
- Chromosome: Fixed-length genotype with a fitness score
- Population / Generation: Generation history and size bounds
- Operators: Selection, crossover, mutation, reinsertion, termination
- GeneticAlgorithm: The evolve loop with start/resume/stop control

Example usage:
    from gaforge.evolution import (
        GeneticAlgorithm, Population, SymbolChromosome, EliteSelection,
        UniformCrossover, UniformMutation, FitnessThresholdTermination,
    )

    target = 'gaforge'
    adam = SymbolChromosome('abcdefghijklmnopqrstuvwxyz', len(target))
    population = Population(min_size=50, max_size=100, adam_chromosome=adam)

    ga = GeneticAlgorithm(
        population,
        fitness=lambda c: sum(a == b for a, b in zip(c.to_string(), target)) / len(target),
        selection=EliteSelection(),
        crossover=UniformCrossover(),
        mutation=UniformMutation(),
        termination=FitnessThresholdTermination(1.0),
    )
    ga.start()

    print(ga.best_chromosome.to_string())
"""

from .chromosome import Chromosome, SymbolChromosome, fitness_key, sort_by_fitness
from .fitness import Fitness, FunctionFitness, WeightedFitness
from .population import (
    Generation,
    Population,
    GenerationStrategy,
    TrackingGenerationStrategy,
    PerformanceGenerationStrategy,
)
from .selection import (
    Selection,
    EliteSelection,
    RouletteWheelSelection,
    StochasticUniversalSamplingSelection,
    TournamentSelection,
)
from .crossover import (
    Crossover,
    UniformCrossover,
    OnePointCrossover,
    TwoPointCrossover,
    ThreeParentCrossover,
)
from .mutation import Mutation, UniformMutation, ReverseSequenceMutation
from .reinsertion import (
    Reinsertion,
    ElitistReinsertion,
    PureReinsertion,
    UniformReinsertion,
    FitnessBasedReinsertion,
)
from .termination import (
    Termination,
    GenerationNumberTermination,
    FitnessThresholdTermination,
    TimeEvolvingTermination,
    FitnessStagnationTermination,
    OrTermination,
    AndTermination,
)
from .history import EvolutionHistory, GenerationStats
from .engine import (
    GeneticAlgorithm,
    GeneticAlgorithmState,
    GeneticAlgorithmEvent,
    EvolutionConfig,
)

__all__ = [
    # Chromosomes
    'Chromosome',
    'SymbolChromosome',
    'fitness_key',
    'sort_by_fitness',
    # Fitness
    'Fitness',
    'FunctionFitness',
    'WeightedFitness',
    # Population
    'Generation',
    'Population',
    'GenerationStrategy',
    'TrackingGenerationStrategy',
    'PerformanceGenerationStrategy',
    # Selection
    'Selection',
    'EliteSelection',
    'RouletteWheelSelection',
    'StochasticUniversalSamplingSelection',
    'TournamentSelection',
    # Crossover
    'Crossover',
    'UniformCrossover',
    'OnePointCrossover',
    'TwoPointCrossover',
    'ThreeParentCrossover',
    # Mutation
    'Mutation',
    'UniformMutation',
    'ReverseSequenceMutation',
    # Reinsertion
    'Reinsertion',
    'ElitistReinsertion',
    'PureReinsertion',
    'UniformReinsertion',
    'FitnessBasedReinsertion',
    # Termination
    'Termination',
    'GenerationNumberTermination',
    'FitnessThresholdTermination',
    'TimeEvolvingTermination',
    'FitnessStagnationTermination',
    'OrTermination',
    'AndTermination',
    # Engine
    'EvolutionHistory',
    'GenerationStats',
    'GeneticAlgorithm',
    'GeneticAlgorithmState',
    'GeneticAlgorithmEvent',
    'EvolutionConfig',
]
