"""
(mu + lambda) evolutionary search for the Travelling Salesman Problem, with
composable crossover, mutation and selection operators.
"""

from .errors import ConfigurationError, InvalidGenomeError, InvalidInstanceError, OutOfRangeError, TSPError
from .evolutionary import EvolutionConfig, EvolutionarySearch, run
from .solvers import DistanceOracle, Genome

__all__ = [
    "data",
    "evaluation",
    "evolutionary",
    "experiments",
    "generators",
    "operators",
    "population",
    "solvers",
    "ConfigurationError",
    "DistanceOracle",
    "EvolutionConfig",
    "EvolutionarySearch",
    "Genome",
    "InvalidGenomeError",
    "InvalidInstanceError",
    "OutOfRangeError",
    "TSPError",
    "run",
]
