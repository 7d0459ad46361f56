"""
Global constants for gaforge.
"""

# Engine defaults
DEFAULT_CROSSOVER_PROBABILITY = 0.75
DEFAULT_MUTATION_PROBABILITY = 0.2

# Population defaults
DEFAULT_MIN_SIZE = 50
DEFAULT_MAX_SIZE = 100
DEFAULT_GENERATIONS_TO_KEEP = 10

# Executor defaults
DEFAULT_MIN_THREADS = 2
DEFAULT_MAX_THREADS = 8

# Logging
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
