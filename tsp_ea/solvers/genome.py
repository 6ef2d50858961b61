from random import Random
from typing import Callable, Iterable, Optional, Tuple

from .base import DistanceOracle, Tour
from .heuristics import nearest_neighbor_tour


def random_tour(n: int, rng: Random) -> Tour:
    tour = list(range(n))
    rng.shuffle(tour)
    return tour


class Genome:
    """
    A tour (permutation of city indices) plus its cached cyclic length.

    The genome owns its tour buffer: ``tour`` hands out an immutable tuple and
    only ``mutate`` rearranges the buffer, which also drops the cached fitness
    until the next ``evaluate``.
    """

    __slots__ = ("_tour", "fitness")

    def __init__(self, tour: Iterable[int], fitness: Optional[float] = None):
        self._tour: Tour = [int(city) for city in tour]
        self.fitness = fitness

    @staticmethod
    def random(n: int, rng: Random) -> "Genome":
        return Genome(random_tour(n, rng))

    @staticmethod
    def greedy(
        oracle: DistanceOracle, start: Optional[int] = None, rng: Optional[Random] = None
    ) -> "Genome":
        if start is None:
            start = (rng or Random()).randrange(oracle.num_cities)
        genome = Genome(nearest_neighbor_tour(oracle, start))
        genome.evaluate(oracle)
        return genome

    @property
    def tour(self) -> Tuple[int, ...]:
        return tuple(self._tour)

    @property
    def size(self) -> int:
        return len(self._tour)

    def __len__(self) -> int:
        return len(self._tour)

    @property
    def is_evaluated(self) -> bool:
        return self.fitness is not None

    def evaluate(self, oracle: DistanceOracle) -> float:
        self.fitness = oracle.tour_length(self._tour)
        return self.fitness

    def mutate(self, operator: Callable[[Tour, Random], None], rng: Random) -> "Genome":
        operator(self._tour, rng)
        self.fitness = None
        return self

    def copy(self) -> "Genome":
        return Genome(self._tour, self.fitness)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Genome):
            return NotImplemented
        return self._tour == other._tour

    def __hash__(self) -> int:
        return hash(tuple(self._tour))

    def __repr__(self) -> str:
        return f"Genome(tour={self._tour!r}, fitness={self.fitness!r})"

    def __str__(self) -> str:
        if not self._tour:
            return "Tour: (empty)"
        path = " -> ".join(str(c) for c in self._tour + self._tour[:1])
        if self.fitness is None:
            return f"Tour: {path} (Distance: not evaluated)"
        return f"Tour: {path} (Distance: {self.fitness:.2f})"
