"""
Shared fixtures for the tsp_ea tests.
"""

import itertools
import random

import pytest

from tsp_ea.solvers import DistanceOracle

FOUR_CITY = [
    [0, 2, 9, 10],
    [1, 0, 6, 4],
    [15, 7, 0, 8],
    [6, 3, 12, 0],
]


def brute_force_optimum(oracle: DistanceOracle) -> float:
    n = oracle.num_cities
    return min(oracle.tour_length([0, *rest]) for rest in itertools.permutations(range(1, n)))


@pytest.fixture
def four_city():
    """The 4-city asymmetric instance."""
    return DistanceOracle(FOUR_CITY, name="four_city")


@pytest.fixture
def square():
    """Four cities on the corners of a unit square."""
    return DistanceOracle.from_coordinates([(0, 0), (1, 0), (1, 1), (0, 1)], name="square")


@pytest.fixture
def euclidean_10():
    rng = random.Random(7)
    coords = [(rng.uniform(0, 100), rng.uniform(0, 100)) for _ in range(10)]
    return DistanceOracle.from_coordinates(coords, name="euclid10")


@pytest.fixture
def rng():
    return random.Random(12345)
