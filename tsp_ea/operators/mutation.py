import random
from typing import Callable, Dict, Tuple

from ..errors import ConfigurationError
from ..solvers.base import Tour


def cut_points(n: int, rng: random.Random) -> Tuple[int, int]:
    """
    Two ordered, inclusive segment bounds with ``start < end`` for ``n >= 2``.

    Coinciding draws are widened by one position to the right, or to the left
    when already on the last index.
    """
    start = rng.randrange(n)
    end = rng.randrange(n)
    if start > end:
        start, end = end, start
    if start == end and n > 1:
        if end == n - 1:
            start -= 1
        else:
            end += 1
    return start, end


def swap_mutation(tour: Tour, rng: random.Random) -> None:
    n = len(tour)
    if n < 2:
        return
    i, j = rng.sample(range(n), 2)
    tour[i], tour[j] = tour[j], tour[i]


def insert_mutation(tour: Tour, rng: random.Random) -> None:
    n = len(tour)
    if n < 2:
        return
    source, target = rng.sample(range(n), 2)
    tour.insert(target, tour.pop(source))


def inversion_mutation(tour: Tour, rng: random.Random) -> None:
    n = len(tour)
    if n < 2:
        return
    start, end = cut_points(n, rng)
    tour[start:end + 1] = reversed(tour[start:end + 1])


MUTATION_OPERATORS: Dict[str, Callable[[Tour, random.Random], None]] = {
    "SWAP": swap_mutation,
    "INSERT": insert_mutation,
    "INVERT": inversion_mutation,
}


def get_mutation(kind: str) -> Callable[[Tour, random.Random], None]:
    try:
        return MUTATION_OPERATORS[kind]
    except (KeyError, TypeError):
        raise ConfigurationError(
            f"Unknown mutation type: {kind!r} (expected one of {', '.join(MUTATION_OPERATORS)})"
        ) from None


def mutate(tour: Tour, kind: str, rng: random.Random) -> None:
    get_mutation(kind)(tour, rng)
