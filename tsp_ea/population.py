import random
from typing import List, Sequence

from .evaluation import evaluate_population
from .solvers.base import DistanceOracle
from .solvers.genome import Genome


def initialize_population(
    oracle: DistanceOracle, size: int, use_greedy: bool, rng: random.Random
) -> List[Genome]:
    """
    Start population of ``size`` evaluated genomes.

    With ``use_greedy`` exactly one member is a nearest-neighbour tour from a
    random start city; all others are uniform random permutations.
    """
    population: List[Genome] = []
    if use_greedy and size > 0:
        population.append(Genome.greedy(oracle, rng=rng))
    while len(population) < size:
        population.append(Genome.random(oracle.num_cities, rng))
    evaluate_population(oracle, population)
    return population


def survivors(merged: Sequence[Genome], mu: int) -> List[Genome]:
    # sorted() is stable, so equal fitness keeps merge order (parents first).
    return sorted(merged, key=lambda g: g.fitness)[:mu]


def best_of(population: Sequence[Genome]) -> Genome:
    return min(population, key=lambda g: g.fitness)


def average_fitness(population: Sequence[Genome]) -> float:
    if not population:
        return 0.0
    return sum(g.fitness for g in population) / len(population)
