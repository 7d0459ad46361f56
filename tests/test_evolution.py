"""
Tests for chromosomes, population management and the genetic operators.

Run with: python -m pytest tests/test_evolution.py -v
"""

from datetime import timedelta
from types import SimpleNamespace
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from gaforge.core.errors import (
    ArgumentError,
    CrossoverError,
    InvalidStateError,
    MutationError,
    RangeError,
    ReinsertionError,
    SelectionError,
)
from gaforge.core.randomization import RandomSource
from gaforge.evolution.chromosome import Chromosome, SymbolChromosome, sort_by_fitness
from gaforge.evolution.fitness import FunctionFitness, WeightedFitness
from gaforge.evolution.population import (
    Generation,
    Population,
    PerformanceGenerationStrategy,
    TrackingGenerationStrategy,
)
from gaforge.evolution.selection import (
    EliteSelection,
    RouletteWheelSelection,
    StochasticUniversalSamplingSelection,
    TournamentSelection,
)
from gaforge.evolution.crossover import (
    OnePointCrossover,
    ThreeParentCrossover,
    TwoPointCrossover,
    UniformCrossover,
)
from gaforge.evolution.mutation import ReverseSequenceMutation, UniformMutation
from gaforge.evolution.reinsertion import (
    ElitistReinsertion,
    FitnessBasedReinsertion,
    PureReinsertion,
    UniformReinsertion,
)
from gaforge.evolution.termination import (
    AndTermination,
    FitnessStagnationTermination,
    FitnessThresholdTermination,
    GenerationNumberTermination,
    OrTermination,
    TimeEvolvingTermination,
)
from gaforge.evolution.history import EvolutionHistory


class ListChromosome(Chromosome):
    """Chromosome with explicit genes; freshly generated genes are 'X'."""

    def __init__(self, genes, fitness=None):
        super().__init__(len(genes))
        self.replace_genes(0, list(genes))
        self.fitness = fitness

    def generate_gene(self, index):
        return 'X'

    def create_new(self):
        return ListChromosome(['X'] * self.length)


def make_generation(fitnesses, number=1):
    chromosomes = [ListChromosome([i, i], fitness=f) for i, f in enumerate(fitnesses)]
    return Generation(number, chromosomes)


class TestChromosome:
    """Tests for Chromosome and SymbolChromosome."""

    def test_symbol_chromosome(self):
        """Test symbol chromosome genes come from the alphabet."""
        chromosome = SymbolChromosome('abc', 8, random_source=RandomSource(1))

        assert chromosome.length == 8
        assert all(g in 'abc' for g in chromosome.genes)
        assert len(chromosome.to_string()) == 8
        assert chromosome.fitness is None

    def test_create_new_keeps_shape(self):
        """Test create_new returns an unevaluated chromosome of the same length."""
        adam = SymbolChromosome('abc', 6, random_source=RandomSource(1))
        adam.fitness = 0.5
        child = adam.create_new()

        assert child.length == 6
        assert child.fitness is None
        assert child.alphabet == adam.alphabet

    def test_minimum_length(self):
        """Test chromosomes need at least two genes."""
        with pytest.raises(ArgumentError):
            ListChromosome(['a'])
        with pytest.raises(ArgumentError):
            SymbolChromosome('', 4)

    def test_clone_is_independent(self):
        """Test clone copies genes and fitness into independent storage."""
        original = ListChromosome([[1], [2], [3]], fitness=0.7)
        clone = original.clone()

        assert clone.genes == original.genes
        assert clone.fitness == 0.7

        clone.get_gene(0).append(99)
        clone.replace_gene(1, [42])

        assert original.genes == [[1], [2], [3]]
        assert original.fitness == 0.7
        assert clone.fitness is None

    def test_replace_gene(self):
        """Test in-place replacement resets fitness and checks bounds."""
        chromosome = ListChromosome(['a', 'b', 'c'], fitness=1.0)
        chromosome.replace_gene(2, 'z')

        assert chromosome.genes == ['a', 'b', 'z']
        assert chromosome.fitness is None

        with pytest.raises(RangeError):
            chromosome.replace_gene(3, 'q')

    def test_replace_genes_overflow(self):
        """Test replacing past the end is rejected."""
        chromosome = ListChromosome(['a', 'b', 'c'])

        with pytest.raises(ArgumentError):
            chromosome.replace_genes(2, ['x', 'y'])

    def test_sort_by_fitness_is_stable(self):
        """Test descending sort keeps ties in order and puts None last."""
        a = ListChromosome([1, 1], fitness=0.5)
        b = ListChromosome([2, 2], fitness=0.9)
        c = ListChromosome([3, 3], fitness=0.5)
        d = ListChromosome([4, 4])

        assert sort_by_fitness([a, d, b, c]) == [b, a, c, d]


class TestFitness:
    """Tests for fitness adapters."""

    def test_function_fitness(self):
        """Test callables are wrapped."""
        fitness = FunctionFitness(lambda c: c.length)
        assert fitness.evaluate(ListChromosome([1, 2, 3])) == 3.0

        with pytest.raises(ArgumentError):
            FunctionFitness(None)

    def test_weighted_fitness(self):
        """Test weighted mean of components."""
        fitness = WeightedFitness({
            FunctionFitness(lambda c: 1.0): 3,
            FunctionFitness(lambda c: 0.0): 1,
        })

        assert fitness.evaluate(ListChromosome([1, 2])) == pytest.approx(0.75)

        with pytest.raises(ArgumentError):
            WeightedFitness({FunctionFitness(lambda c: 1.0): -1})


class TestPopulation:
    """Tests for Generation and Population."""

    def test_generation_validation(self):
        """Test generation number and size checks."""
        with pytest.raises(ArgumentError):
            make_generation([0.1, 0.2], number=0)
        with pytest.raises(ArgumentError):
            make_generation([0.1])

    def test_generation_end_sorts(self):
        """Test end() sorts descending and picks the best."""
        generation = make_generation([0.2, 0.9, 0.5])
        generation.end()

        assert [c.fitness for c in generation.chromosomes] == [0.9, 0.5, 0.2]
        assert generation.best_chromosome.fitness == 0.9
        assert all(
            generation.best_chromosome.fitness >= c.fitness
            for c in generation.chromosomes
        )

    def test_generation_end_requires_fitness(self):
        """Test end() refuses unevaluated members."""
        generation = make_generation([0.2, None])

        with pytest.raises(InvalidStateError):
            generation.end()

    def test_population_bounds(self):
        """Test min/max size validation."""
        adam = ListChromosome(['a', 'b'])

        with pytest.raises(ArgumentError):
            Population(1, 4, adam)
        with pytest.raises(ArgumentError):
            Population(5, 4, adam)
        with pytest.raises(ArgumentError):
            Population(2, 4, None)

    def test_create_initial_generation(self):
        """Test the initial generation is grown from the prototype."""
        population = Population(5, 8, ListChromosome(['a', 'b', 'c']))
        population.create_initial_generation()

        assert population.generations_number == 1
        assert population.current_generation.number == 1
        assert population.current_generation.size == 5
        assert all(c.genes == ['X', 'X', 'X'] for c in population.current_generation.chromosomes)

    def test_performance_strategy_retention(self):
        """Test only the newest generations are kept."""
        population = Population(
            2, 4, ListChromosome(['a', 'b']),
            generation_strategy=PerformanceGenerationStrategy(2),
        )
        population.create_initial_generation()
        for _ in range(4):
            population.create_new_generation([ListChromosome([1, 2]), ListChromosome([3, 4])])

        assert population.generations_number == 5
        assert [g.number for g in population.generations] == [4, 5]

    def test_tracking_strategy_keeps_all(self):
        """Test every generation is kept."""
        population = Population(
            2, 4, ListChromosome(['a', 'b']),
            generation_strategy=TrackingGenerationStrategy(),
        )
        population.create_initial_generation()
        population.create_new_generation([ListChromosome([1, 2]), ListChromosome([3, 4])])

        assert len(population.generations) == 2

    def test_best_chromosome_listener(self):
        """Test listeners hear about a new best chromosome."""
        population = Population(2, 4, ListChromosome(['a', 'b']))
        seen = []
        population.add_best_chromosome_listener(lambda p: seen.append(p.best_chromosome.fitness))

        population.create_initial_generation()
        for i, c in enumerate(population.current_generation.chromosomes):
            c.fitness = float(i)
        population.end_current_generation()

        assert seen == [1.0]
        assert population.best_chromosome.fitness == 1.0


class TestSelection:
    """Tests for selection operators."""

    def test_elite_selection(self):
        """Test elite selection returns the top chromosomes in order."""
        generation = make_generation([0.1, 0.8, 0.5, 0.9, 0.3])
        selected = EliteSelection().select_chromosomes(3, generation)

        assert [c.fitness for c in selected] == [0.9, 0.8, 0.5]

    def test_count_validation(self):
        """Test at least two chromosomes must be selected."""
        generation = make_generation([0.1, 0.8])

        with pytest.raises(ArgumentError):
            EliteSelection().select_chromosomes(1, generation)
        with pytest.raises(ArgumentError):
            EliteSelection().select_chromosomes(2, None)

    def test_roulette_wheel_proportional(self):
        """Test roulette favours fitter chromosomes and skips zero fitness."""
        generation = make_generation([0.0, 1.0, 3.0])
        selection = RouletteWheelSelection(random_source=RandomSource(7))

        selected = selection.select_chromosomes(400, generation)
        counts = [sum(1 for c in selected if c is member) for member in generation.chromosomes]

        assert len(selected) == 400
        assert counts[0] == 0
        assert counts[2] > counts[1] > 0

    def test_roulette_rejects_negative_fitness(self):
        """Test wheel selection needs non-negative fitness."""
        generation = make_generation([-1.0, 1.0])

        with pytest.raises(SelectionError):
            RouletteWheelSelection().select_chromosomes(2, generation)

    def test_stochastic_universal_sampling(self):
        """Test SUS picks each chromosome in proportion to its share."""
        generation = make_generation([1.0, 1.0, 2.0])
        selection = StochasticUniversalSamplingSelection(random_source=RandomSource(3))

        selected = selection.select_chromosomes(4, generation)
        counts = [sum(1 for c in selected if c is member) for member in generation.chromosomes]

        assert counts == [1, 1, 2]

    def test_tournament_full_size_picks_best(self):
        """Test a tournament over the whole generation always picks the best."""
        generation = make_generation([0.1, 0.8, 0.5, 0.3])
        selection = TournamentSelection(size=4, random_source=RandomSource(1))

        selected = selection.select_chromosomes(3, generation)
        assert all(c.fitness == 0.8 for c in selected)

    def test_tournament_without_repeat_winners(self):
        """Test winners are removed from later tournaments."""
        generation = make_generation([0.1, 0.8, 0.5, 0.3])
        selection = TournamentSelection(
            size=2, allow_winner_compete_next=False, random_source=RandomSource(2),
        )

        selected = selection.select_chromosomes(3, generation)
        assert len({id(c) for c in selected}) == 3

        with pytest.raises(SelectionError):
            selection.select_chromosomes(4, generation)

    def test_tournament_size_too_big(self):
        """Test tournament larger than the generation is rejected."""
        generation = make_generation([0.1, 0.8])

        with pytest.raises(SelectionError):
            TournamentSelection(size=3).select_chromosomes(2, generation)


class TestCrossover:
    """Tests for crossover operators."""

    @pytest.fixture
    def parents(self):
        return (
            ListChromosome(['A', 'B', 'C', 'D', 'E'], fitness=0.4),
            ListChromosome(['a', 'b', 'c', 'd', 'e'], fitness=0.6),
        )

    def test_uniform_crossover_positional(self, parents):
        """Test each child gene comes from a parent at the same position."""
        parent1, parent2 = parents
        crossover = UniformCrossover(random_source=RandomSource(11))

        child1, child2 = crossover.cross([parent1, parent2])

        for i in range(5):
            assert {child1.get_gene(i), child2.get_gene(i)} == {parent1.get_gene(i), parent2.get_gene(i)}
        assert child1.fitness is None and child2.fitness is None
        # Parents untouched
        assert parent1.genes == ['A', 'B', 'C', 'D', 'E']
        assert parent1.fitness == 0.4

    def test_uniform_crossover_mix_probability_one(self, parents):
        """Test mix_probability=1 copies the first parent into the first child."""
        parent1, parent2 = parents
        child1, child2 = UniformCrossover(mix_probability=1.0).cross([parent1, parent2])

        assert child1.genes == parent1.genes
        assert child2.genes == parent2.genes

    def test_wrong_parent_count(self, parents):
        """Test cross() requires exactly parents_number parents."""
        with pytest.raises(ArgumentError):
            UniformCrossover().cross([parents[0]])
        with pytest.raises(ArgumentError):
            ThreeParentCrossover().cross(list(parents))

    def test_one_point_crossover(self, parents):
        """Test single point swap."""
        child1, child2 = OnePointCrossover(swap_point_index=1).cross(list(parents))

        assert child1.genes == ['A', 'B', 'c', 'd', 'e']
        assert child2.genes == ['a', 'b', 'C', 'D', 'E']

    def test_two_point_crossover(self, parents):
        """Test the middle segment is swapped."""
        child1, child2 = TwoPointCrossover(1, 3).cross(list(parents))

        assert child1.genes == ['A', 'B', 'c', 'd', 'E']
        assert child2.genes == ['a', 'b', 'C', 'D', 'e']

    def test_two_point_random_points(self, parents):
        """Test random swap points keep genes positional."""
        crossover = TwoPointCrossover(random_source=RandomSource(4))
        child1, child2 = crossover.cross(list(parents))

        for i in range(5):
            assert child1.get_gene(i).upper() == parents[0].get_gene(i)
            assert child2.get_gene(i).lower() == parents[1].get_gene(i)
        assert child1.genes != parents[0].genes

    def test_two_point_needs_three_genes(self):
        """Test two-point crossover rejects two-gene chromosomes."""
        with pytest.raises(CrossoverError):
            TwoPointCrossover().cross([ListChromosome(['A', 'B']), ListChromosome(['a', 'b'])])

    def test_three_parent_majority(self):
        """Test the child takes agreed genes, else the third parent's."""
        child, = ThreeParentCrossover().cross([
            ListChromosome(['a', 'b', 'c', 'd']),
            ListChromosome(['a', 'b', 'x', 'x']),
            ListChromosome(['z', 'z', 'z', 'z']),
        ])

        assert child.genes == ['a', 'b', 'z', 'z']


class TestMutation:
    """Tests for mutation operators."""

    def test_uniform_mutation_all_genes(self):
        """Test probability 1 replaces every gene."""
        chromosome = ListChromosome(['a', 'b', 'c'], fitness=0.5)
        UniformMutation(mutate_all_genes=True).mutate(chromosome, 1.0)

        assert chromosome.genes == ['X', 'X', 'X']
        assert chromosome.fitness is None

    def test_uniform_mutation_zero_probability(self):
        """Test probability 0 leaves the chromosome alone."""
        chromosome = ListChromosome(['a', 'b', 'c'], fitness=0.5)
        UniformMutation(mutate_all_genes=True).mutate(chromosome, 0.0)

        assert chromosome.genes == ['a', 'b', 'c']
        assert chromosome.fitness == 0.5

    def test_uniform_mutation_indexes(self):
        """Test only the listed positions mutate."""
        chromosome = ListChromosome(['a', 'b', 'c', 'd'])
        UniformMutation(indexes=[1, 3]).mutate(chromosome, 1.0)

        assert chromosome.genes == ['a', 'X', 'c', 'X']

    def test_uniform_mutation_single_random_gene(self):
        """Test the default mutates exactly one random gene."""
        chromosome = ListChromosome(['a', 'b', 'c', 'd'])
        UniformMutation(random_source=RandomSource(8)).mutate(chromosome, 1.0)

        assert chromosome.genes.count('X') == 1

    def test_probability_validation(self):
        """Test probabilities outside [0, 1] are rejected."""
        with pytest.raises(ArgumentError):
            UniformMutation().mutate(ListChromosome(['a', 'b']), 1.5)

    def test_reverse_sequence_mutation(self):
        """Test a contiguous run is reversed and length is kept."""
        original = list(range(10))
        chromosome = ListChromosome(original)
        ReverseSequenceMutation(random_source=RandomSource(6)).mutate(chromosome, 1.0)

        mutated = chromosome.genes
        assert len(mutated) == 10
        assert sorted(mutated) == original

        changed = [i for i in range(10) if mutated[i] != original[i]]
        first, last = changed[0], changed[-1]
        assert mutated[first:last + 1] == original[first:last + 1][::-1]

    def test_reverse_sequence_needs_three_genes(self):
        """Test reverse-sequence mutation rejects two-gene chromosomes."""
        with pytest.raises(MutationError):
            ReverseSequenceMutation().mutate(ListChromosome(['a', 'b']), 1.0)


class TestReinsertion:
    """Tests for reinsertion operators."""

    def make_population(self, min_size, max_size):
        return Population(min_size, max_size, ListChromosome(['a', 'b']))

    def make_chromosomes(self, count, fitness=None):
        return [ListChromosome([i, i], fitness=fitness) for i in range(count)]

    def test_cannot_expand(self):
        """Test a non-expanding reinsertion rejects too few offspring."""
        population = self.make_population(6, 8)

        with pytest.raises(ReinsertionError):
            PureReinsertion().select_chromosomes(
                population, self.make_chromosomes(4), self.make_chromosomes(6, 0.5),
            )

    def test_cannot_collapse(self):
        """Test a non-collapsing reinsertion rejects too many offspring."""
        population = self.make_population(2, 4)

        with pytest.raises(ReinsertionError):
            ElitistReinsertion().select_chromosomes(
                population, self.make_chromosomes(5), self.make_chromosomes(2, 0.5),
            )

    def test_elitist_fills_with_best_parents(self):
        """Test elitist reinsertion adds the best parents up to min_size."""
        population = self.make_population(5, 8)
        offspring = self.make_chromosomes(3)
        parents = [ListChromosome([i, i], fitness=f) for i, f in enumerate([0.1, 0.9, 0.5, 0.7])]

        chosen = ElitistReinsertion().select_chromosomes(population, offspring, parents)

        assert len(chosen) == 5
        assert chosen[:3] == offspring
        assert [c.fitness for c in chosen[3:]] == [0.9, 0.7]

    def test_pure_reinsertion(self):
        """Test pure reinsertion keeps offspring only."""
        population = self.make_population(4, 4)
        offspring = self.make_chromosomes(4)

        chosen = PureReinsertion().select_chromosomes(population, offspring, self.make_chromosomes(4, 1.0))
        assert chosen == offspring

    def test_uniform_reinsertion(self):
        """Test uniform reinsertion fills with clones of offspring."""
        population = self.make_population(6, 8)
        offspring = self.make_chromosomes(2)

        chosen = UniformReinsertion(random_source=RandomSource(1)).select_chromosomes(
            population, offspring, [],
        )

        assert len(chosen) == 6
        assert all(c.genes in ([0, 0], [1, 1]) for c in chosen)

    def test_fitness_based_collapse(self):
        """Test fitness-based reinsertion keeps the best max_size offspring."""
        population = self.make_population(2, 3)
        offspring = [ListChromosome([i, i], fitness=f) for i, f in enumerate([0.2, 0.8, 0.4, 0.9])]

        chosen = FitnessBasedReinsertion().select_chromosomes(population, offspring, [])
        assert [c.fitness for c in chosen] == [0.9, 0.8, 0.4]

    def test_none_arguments(self):
        """Test None arguments are rejected."""
        population = self.make_population(2, 4)

        with pytest.raises(ArgumentError):
            ElitistReinsertion().select_chromosomes(population, None, [])
        with pytest.raises(ArgumentError):
            ElitistReinsertion().select_chromosomes(None, [], [])


class TestTermination:
    """Tests for termination conditions."""

    def snapshot(self, generations=1, fitness=None, time_evolving=0.0):
        best = ListChromosome(['a', 'b'], fitness=fitness) if fitness is not None else None
        return SimpleNamespace(
            generations_number=generations,
            best_chromosome=best,
            time_evolving=time_evolving,
        )

    def test_generation_number(self):
        """Test generation count threshold."""
        termination = GenerationNumberTermination(5)

        assert not termination.has_reached(self.snapshot(generations=4))
        assert termination.has_reached(self.snapshot(generations=5))

    def test_fitness_threshold(self):
        """Test best fitness threshold."""
        termination = FitnessThresholdTermination(0.9)

        assert not termination.has_reached(self.snapshot(fitness=0.8))
        assert termination.has_reached(self.snapshot(fitness=0.9))
        assert not termination.has_reached(self.snapshot())

    def test_time_evolving(self):
        """Test wall-clock budget accepts seconds or timedelta."""
        termination = TimeEvolvingTermination(timedelta(seconds=2))

        assert not termination.has_reached(self.snapshot(time_evolving=1.5))
        assert termination.has_reached(self.snapshot(time_evolving=2.0))

        with pytest.raises(ArgumentError):
            TimeEvolvingTermination(0)

    def test_or_and(self):
        """Test logical combinators."""
        snap = self.snapshot(generations=10, fitness=0.5)
        reached = GenerationNumberTermination(10)
        not_reached = FitnessThresholdTermination(0.9)

        assert OrTermination(reached, not_reached).has_reached(snap)
        assert not AndTermination(reached, not_reached).has_reached(snap)

        with pytest.raises(ArgumentError):
            OrTermination(reached)

    def test_idempotent(self):
        """Test asking twice about the same snapshot gives the same answer."""
        snap = self.snapshot(generations=3, fitness=0.5)
        terminations = [
            GenerationNumberTermination(3),
            FitnessThresholdTermination(0.6),
            FitnessStagnationTermination(2),
            OrTermination(GenerationNumberTermination(9), FitnessStagnationTermination(1)),
        ]

        for termination in terminations:
            assert termination.has_reached(snap) == termination.has_reached(snap)

    def test_fitness_stagnation(self):
        """Test stagnation counts generations with an unchanged best."""
        termination = FitnessStagnationTermination(3)

        assert not termination.has_reached(self.snapshot(generations=1, fitness=0.5))
        assert not termination.has_reached(self.snapshot(generations=2, fitness=0.5))
        assert termination.has_reached(self.snapshot(generations=3, fitness=0.5))
        assert not termination.has_reached(self.snapshot(generations=4, fitness=0.6))


class TestHistory:
    """Tests for evolution history."""

    def test_record_generation(self):
        """Test per-generation statistics."""
        history = EvolutionHistory()
        generation = make_generation([0.2, 0.4, 0.6])
        generation.end()

        stats = history.record_generation(generation, evaluations=3, duration_seconds=0.5)

        assert stats.generation == 1
        assert stats.best_fitness == pytest.approx(0.6)
        assert stats.mean_fitness == pytest.approx(0.4)
        assert stats.min_fitness == pytest.approx(0.2)
        assert stats.population_size == 3
        assert history.fitness_trajectory == [pytest.approx(0.6)]
        assert history.to_dict()['generations'][0]['evaluations_this_gen'] == 3

    def test_improvement_rate(self):
        """Test improvement rate over a window."""
        history = EvolutionHistory()
        assert history.get_improvement_rate(window=2) == float('inf')

        history.fitness_trajectory = [0.1, 0.2, 0.5, 0.5]
        assert history.get_improvement_rate(window=2) == pytest.approx(0.3)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
