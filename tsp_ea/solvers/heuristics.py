import random
from typing import Optional

import networkx as nx
import numpy as np

from .base import DistanceOracle, Solver, Tour


def nearest_neighbor_tour(oracle: DistanceOracle, start: int) -> Tour:
    n = oracle.num_cities
    oracle.distance(start, start)  # range check
    visited = [False] * n
    tour = [start]
    visited[start] = True
    current = start
    for _ in range(1, n):
        row = oracle.matrix[current].tolist()
        nxt = -1
        min_dist = float("inf")
        for j in range(n):
            # Strict comparison keeps the first minimum on ties.
            if not visited[j] and row[j] < min_dist:
                min_dist = row[j]
                nxt = j
        if nxt == -1:
            nxt = visited.index(False)
        tour.append(nxt)
        visited[nxt] = True
        current = nxt
    return tour


def mst_lower_bound(oracle: DistanceOracle) -> float:
    """
    Weight of a minimum spanning tree over the symmetrised instance.

    Each tour edge costs at least min(d[i][j], d[j][i]) and a tour minus one
    edge is a spanning path, so this never exceeds the optimal tour length.
    """
    n = oracle.num_cities
    sym = np.minimum(oracle.matrix, oracle.matrix.T)
    graph = nx.Graph()
    graph.add_nodes_from(range(n))
    graph.add_weighted_edges_from(
        (i, j, float(sym[i, j])) for i in range(n) for j in range(i + 1, n)
    )
    mst = nx.minimum_spanning_tree(graph)
    return float(mst.size(weight="weight"))


class GreedySolver(Solver):
    name = "nearest_neighbor"

    def __init__(self, start: Optional[int] = None, rng: Optional[random.Random] = None):
        self.start = start
        self.rng = rng or random.Random()

    def solve(self, oracle: DistanceOracle) -> Tour:
        start = self.start if self.start is not None else self.rng.randrange(oracle.num_cities)
        return nearest_neighbor_tour(oracle, start)
