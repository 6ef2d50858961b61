from .base import DistanceOracle, Solver, Tour, is_permutation, tour_length
from .genome import Genome, random_tour
from .heuristics import GreedySolver, mst_lower_bound, nearest_neighbor_tour

__all__ = [
    "DistanceOracle",
    "Solver",
    "Tour",
    "is_permutation",
    "tour_length",
    "Genome",
    "random_tour",
    "GreedySolver",
    "mst_lower_bound",
    "nearest_neighbor_tour",
]
