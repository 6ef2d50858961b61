from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import networkx as nx
import numpy as np

from ..errors import InvalidGenomeError, InvalidInstanceError, OutOfRangeError


Tour = List[int]


class DistanceOracle:
    """
    Immutable n x n distance lookup. Distances need not be symmetric.
    """

    def __init__(self, matrix, name: str = "Unknown", coordinates=None):
        try:
            mat = np.array(matrix, dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise InvalidInstanceError(f"Distance matrix is not numeric: {exc}") from exc
        if mat.ndim != 2:
            raise InvalidInstanceError(f"Distance matrix must be a square 2-D matrix, got {mat.ndim}-D input.")
        if mat.size == 0:
            raise InvalidInstanceError("Distance matrix cannot be empty.")
        if mat.shape[0] != mat.shape[1]:
            raise InvalidInstanceError(f"Distance matrix must be square, got shape {mat.shape}.")
        if not np.all(np.isfinite(mat)):
            raise InvalidInstanceError("Distance matrix contains non-finite values.")
        if np.any(mat < 0):
            raise InvalidInstanceError("Distance matrix contains negative distances.")
        mat.setflags(write=False)
        self._matrix = mat
        self._name = name if name is not None else "Unknown"
        self._coordinates = None
        if coordinates is not None:
            coords = np.array(coordinates, dtype=np.float64)
            if coords.shape != (mat.shape[0], 2):
                raise InvalidInstanceError(
                    f"Expected {mat.shape[0]} coordinate pairs, got shape {coords.shape}."
                )
            coords.setflags(write=False)
            self._coordinates = coords

    @classmethod
    def from_coordinates(cls, coordinates, name: str = "Unknown") -> "DistanceOracle":
        coords = np.asarray(coordinates, dtype=np.float64)
        if coords.ndim != 2 or coords.shape[0] == 0 or coords.shape[1] != 2:
            raise InvalidInstanceError("Coordinates must be a non-empty list of (x, y) pairs.")
        diff = coords[:, None, :] - coords[None, :, :]
        return cls(np.sqrt((diff ** 2).sum(axis=-1)), name=name, coordinates=coords)

    @classmethod
    def from_graph(cls, graph: nx.Graph, name: Optional[str] = None, weight: str = "weight") -> "DistanceOracle":
        nodes = list(graph.nodes())
        if not nodes:
            raise InvalidInstanceError("Graph has no nodes.")
        n = len(nodes)
        expected = n * (n - 1) if graph.is_directed() else n * (n - 1) // 2
        loops = nx.number_of_selfloops(graph)
        if graph.number_of_edges() - loops < expected:
            raise InvalidInstanceError("Graph must be complete to define a distance for every city pair.")
        mat = nx.to_numpy_array(graph, nodelist=nodes, weight=weight, nonedge=np.nan)
        mat[np.eye(n, dtype=bool) & np.isnan(mat)] = 0.0
        return cls(mat, name=name if name is not None else graph.graph.get("name", "Unknown"))

    @property
    def num_cities(self) -> int:
        return self._matrix.shape[0]

    def __len__(self) -> int:
        return self.num_cities

    @property
    def name(self) -> str:
        return self._name

    @property
    def matrix(self) -> np.ndarray:
        return self._matrix

    @property
    def coordinates(self) -> Optional[np.ndarray]:
        return self._coordinates

    def is_symmetric(self) -> bool:
        return bool(np.allclose(self._matrix, self._matrix.T))

    def distance(self, i: int, j: int) -> float:
        n = self.num_cities
        if not (0 <= i < n and 0 <= j < n):
            raise OutOfRangeError(f"City indices out of bounds: i={i}, j={j} (n={n})")
        return float(self._matrix[i, j])

    def tour_length(self, tour: Sequence[int]) -> float:
        if len(tour) != self.num_cities:
            raise InvalidGenomeError(
                f"Tour must contain all {self.num_cities} cities, got {len(tour)}."
            )
        return float(self.tour_lengths([tour])[0])

    def tour_lengths(self, tours) -> np.ndarray:
        try:
            raw = np.asarray(tours)
        except ValueError as exc:
            raise InvalidGenomeError(f"Tours must all have {self.num_cities} cities: {exc}") from exc
        if raw.size and not np.issubdtype(raw.dtype, np.integer):
            # Integral floats such as 2.0 pass; 1.7 or strings do not.
            if not np.issubdtype(raw.dtype, np.floating) or not np.all(raw == np.floor(raw)):
                raise InvalidGenomeError("Tours must contain integer city indices.")
        idx = raw.astype(np.int64)
        if idx.ndim != 2 or idx.shape[1] != self.num_cities:
            raise InvalidGenomeError(
                f"Tours must have shape (k, {self.num_cities}), got {idx.shape}."
            )
        if idx.size and (idx.min() < 0 or idx.max() >= self.num_cities):
            raise OutOfRangeError(f"Tour contains a city outside [0, {self.num_cities}).")
        nxt = np.roll(idx, -1, axis=1)
        return self._matrix[idx, nxt].sum(axis=1)

    def __repr__(self) -> str:
        return f"DistanceOracle(name={self._name!r}, cities={self.num_cities})"


def tour_length(oracle: DistanceOracle, tour: Sequence[int]) -> float:
    return oracle.tour_length(tour)


def is_permutation(tour: Sequence[int], n: int) -> bool:
    return len(tour) == n and sorted(tour) == list(range(n))


class Solver(ABC):
    name: str = "base"

    @abstractmethod
    def solve(self, oracle: DistanceOracle) -> Tour:
        raise NotImplementedError
