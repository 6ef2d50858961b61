import logging
import random
from typing import Callable, Dict, Sequence, Set, Tuple

from ..errors import ConfigurationError
from ..solvers.base import Tour, is_permutation
from ..solvers.genome import Genome, random_tour
from .mutation import cut_points

logger = logging.getLogger(__name__)


def order_crossover(parent1: Sequence[int], parent2: Sequence[int], rng: random.Random) -> Tuple[Tour, Tour]:
    """
    OX: each child keeps one parent's segment in place and takes the remaining
    cities in the other parent's order, both read and written from just after
    the segment, wrapping around.
    """
    n = len(parent1)
    if n < 2:
        return list(parent1), list(parent2)
    start, end = cut_points(n, rng)
    return (
        _order_fill(parent1, parent2, start, end),
        _order_fill(parent2, parent1, start, end),
    )


def _order_fill(keep: Sequence[int], donor: Sequence[int], start: int, end: int) -> Tour:
    n = len(keep)
    child = [-1] * n
    child[start:end + 1] = keep[start:end + 1]
    placed = set(child[start:end + 1])
    pos = (end + 1) % n
    for i in range(n):
        city = donor[(end + 1 + i) % n]
        if city in placed:
            continue
        child[pos] = city
        placed.add(city)
        pos = (pos + 1) % n
    return child


def partially_mapped_crossover(
    parent1: Sequence[int], parent2: Sequence[int], rng: random.Random
) -> Tuple[Tour, Tour]:
    """
    PMX: each child keeps one parent's segment; every other position takes the
    other parent's city, chased through the segment mapping until it resolves
    to a city the segment does not already hold.
    """
    n = len(parent1)
    if n < 2:
        return list(parent1), list(parent2)
    start, end = cut_points(n, rng)
    # Keyed by the cities each child's segment holds.
    map1 = {parent1[i]: parent2[i] for i in range(start, end + 1)}
    map2 = {parent2[i]: parent1[i] for i in range(start, end + 1)}
    return (
        _mapped_fill(parent1, parent2, map1, start, end),
        _mapped_fill(parent2, parent1, map2, start, end),
    )


def _mapped_fill(
    keep: Sequence[int], donor: Sequence[int], mapping: Dict[int, int], start: int, end: int
) -> Tour:
    child = list(keep)
    for i in range(len(keep)):
        if start <= i <= end:
            continue
        city = donor[i]
        while city in mapping:
            city = mapping[city]
        child[i] = city
    return child


def edge_map(parent1: Sequence[int], parent2: Sequence[int]) -> Dict[int, Set[int]]:
    """Undirected neighbour sets built from both parents' cyclic edges."""
    neighbors: Dict[int, Set[int]] = {city: set() for city in parent1}
    for tour in (parent1, parent2):
        n = len(tour)
        for i in range(n):
            a = tour[i]
            b = tour[(i + 1) % n]
            neighbors[a].add(b)
            neighbors[b].add(a)
    return neighbors


def _edge_recombination(parent1: Sequence[int], parent2: Sequence[int], rng: random.Random) -> Tour:
    n = len(parent1)
    neighbors = edge_map(parent1, parent2)
    unvisited = set(parent1)

    def visit(city: int) -> None:
        unvisited.discard(city)
        for other in neighbors[city]:
            neighbors[other].discard(city)

    current = parent1[rng.randrange(n)]
    child = [current]
    visit(current)
    while len(child) < n:
        candidates = neighbors[current]
        if candidates:
            fewest = min(len(neighbors[c]) for c in candidates)
            best = sorted(c for c in candidates if len(neighbors[c]) == fewest)
            current = rng.choice(best)
        else:
            current = rng.choice(sorted(unvisited))
        child.append(current)
        visit(current)
    return child


def edge_recombination_crossover(
    parent1: Sequence[int], parent2: Sequence[int], rng: random.Random
) -> Tuple[Tour, Tour]:
    """
    ERX: build each child along the merged parental edge graph, preferring the
    neighbour with the fewest onward options. The second child repeats the
    walk with the parents swapped. A child that is not a complete permutation
    is replaced by a uniform random tour.
    """
    n = len(parent1)
    if n < 2:
        return list(parent1), list(parent2)
    children = []
    for first, second in ((parent1, parent2), (parent2, parent1)):
        child = _edge_recombination(first, second, rng)
        if not is_permutation(child, n):
            logger.warning("edge recombination produced an incomplete tour; using a random tour instead")
            child = random_tour(n, rng)
        children.append(child)
    return children[0], children[1]


CROSSOVER_OPERATORS: Dict[str, Callable[[Sequence[int], Sequence[int], random.Random], Tuple[Tour, Tour]]] = {
    "OX": order_crossover,
    "PMX": partially_mapped_crossover,
    "ERX": edge_recombination_crossover,
}


def get_crossover(kind: str):
    try:
        return CROSSOVER_OPERATORS[kind]
    except (KeyError, TypeError):
        raise ConfigurationError(
            f"Unknown crossover type: {kind!r} (expected one of {', '.join(CROSSOVER_OPERATORS)})"
        ) from None


def recombine(parent1: Genome, parent2: Genome, kind: str, rng: random.Random) -> Tuple[Genome, Genome]:
    tour1, tour2 = get_crossover(kind)(parent1.tour, parent2.tour, rng)
    return Genome(tour1), Genome(tour2)
