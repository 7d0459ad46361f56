#!/usr/bin/env python3
"""
Quick Start - Evolve a target word with gaforge.

Each chromosome is a string of lowercase letters; fitness is the fraction
of positions that already match the target word.

Usage:
    python examples/quick_start.py [options]

Options:
    --target WORD       Word to evolve (default: geneticalgorithm)
    --population N      Population size (default: 50)
    --generations N     Generation cap (default: 500)
    --parallel          Evaluate fitness on a thread pool
    --seed N            Random seed for reproducibility
"""

import argparse
import logging
import string
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from gaforge import configure_logging, RandomSource
from gaforge.evolution import (
    EvolutionConfig,
    FitnessThresholdTermination,
    GeneticAlgorithm,
    GeneticAlgorithmEvent,
    GenerationNumberTermination,
    OrTermination,
    SymbolChromosome,
    TournamentSelection,
    UniformCrossover,
    UniformMutation,
)


def parse_args():
    parser = argparse.ArgumentParser(description='Evolve a target word')
    parser.add_argument(
        '--target', type=str, default='geneticalgorithm',
        help='Word to evolve (default: geneticalgorithm)'
    )
    parser.add_argument(
        '--population', type=int, default=50,
        help='Population size (default: 50)'
    )
    parser.add_argument(
        '--generations', type=int, default=500,
        help='Generation cap (default: 500)'
    )
    parser.add_argument(
        '--parallel', action='store_true',
        help='Evaluate fitness on a thread pool'
    )
    parser.add_argument(
        '--seed', type=int, default=None,
        help='Random seed for reproducibility'
    )
    return parser.parse_args()


def main():
    args = parse_args()
    configure_logging(logging.WARNING)

    target = args.target.lower()

    def word_fitness(chromosome):
        text = chromosome.to_string()
        return sum(a == b for a, b in zip(text, target)) / len(target)

    config = EvolutionConfig(
        min_size=args.population,
        max_size=args.population * 2,
        parallel=args.parallel,
        seed=args.seed,
    )
    adam = SymbolChromosome(
        string.ascii_lowercase,
        len(target),
        random_source=RandomSource(args.seed),
    )

    ga = GeneticAlgorithm.from_config(
        config,
        adam,
        word_fitness,
        selection=TournamentSelection(size=3),
        crossover=UniformCrossover(),
        mutation=UniformMutation(),
        termination=OrTermination(
            FitnessThresholdTermination(1.0),
            GenerationNumberTermination(args.generations),
        ),
    )

    def on_generation(engine):
        best = engine.best_chromosome
        if engine.generations_number % 10 == 0 or best.fitness == 1.0:
            print(f"  gen {engine.generations_number:4d}  {best.to_string()}  "
                  f"fitness={best.fitness:.3f}")

    ga.add_listener(GeneticAlgorithmEvent.GENERATION_RAN, on_generation)

    print("gaforge - Quick Start")
    print("=" * 40)
    print(f"Target: {target}")
    print(f"Config: {config.to_dict()}\n")

    try:
        ga.start()
    except KeyboardInterrupt:
        print("\nInterrupted.")

    print()
    print(ga.summary())

    if ga.best_chromosome is not None and ga.best_chromosome.to_string() == target:
        print("\nSuccess! The target word was evolved.")
    else:
        print("\nTry a larger --population or more --generations!")


if __name__ == '__main__':
    main()
