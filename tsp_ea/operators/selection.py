import bisect
import itertools
import random
from typing import List, Sequence

from ..errors import ConfigurationError
from ..solvers.genome import Genome

SELECTION_KINDS = ["TOURNAMENT", "ROULETTE"]


def tournament_select(population: Sequence[Genome], k: int, rng: random.Random) -> Genome:
    """Best of ``k`` uniform draws with replacement; the earliest draw wins ties."""
    best = None
    for _ in range(k):
        candidate = population[rng.randrange(len(population))]
        if best is None or candidate.fitness < best.fitness:
            best = candidate
    return best


def roulette_weights(population: Sequence[Genome]) -> List[float]:
    # Shifted so the worst genome weighs 1 and better (shorter) tours weigh more.
    max_fitness = max(g.fitness for g in population)
    return [max_fitness - g.fitness + 1.0 for g in population]


def _spin(population: Sequence[Genome], cumulative: Sequence[float], rng: random.Random) -> Genome:
    total = cumulative[-1]
    if total <= 0:
        return population[rng.randrange(len(population))]
    r = rng.random() * total
    idx = bisect.bisect_left(cumulative, r)
    if idx >= len(population):
        return population[rng.randrange(len(population))]
    return population[idx]


def roulette_select(population: Sequence[Genome], rng: random.Random) -> Genome:
    """Fitness-proportionate draw for a minimisation problem."""
    cumulative = list(itertools.accumulate(roulette_weights(population)))
    return _spin(population, cumulative, rng)


def select_parents(
    population: Sequence[Genome],
    count: int,
    kind: str,
    rng: random.Random,
    tournament_size: int = 3,
) -> List[Genome]:
    if kind == "TOURNAMENT":
        return [tournament_select(population, tournament_size, rng) for _ in range(count)]
    if kind == "ROULETTE":
        cumulative = list(itertools.accumulate(roulette_weights(population)))
        return [_spin(population, cumulative, rng) for _ in range(count)]
    raise ConfigurationError(
        f"Unknown selection type: {kind!r} (expected one of {', '.join(SELECTION_KINDS)})"
    )
