from pathlib import Path
from typing import Optional

import numpy as np

from .errors import InvalidInstanceError
from .solvers.base import DistanceOracle


def _rng(rng) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def random_euclidean(n: int, width: float = 100.0, height: float = 100.0, rng=None) -> np.ndarray:
    gen = _rng(rng)
    return np.column_stack([gen.random(n) * width, gen.random(n) * height])


def clustered(
    num_clusters: int,
    cities_per_cluster: int,
    width: float = 1000.0,
    height: float = 1000.0,
    spread: float = 50.0,
    rng=None,
) -> np.ndarray:
    gen = _rng(rng)
    centers = np.column_stack([gen.random(num_clusters) * width, gen.random(num_clusters) * height])
    centers = np.repeat(centers, cities_per_cluster, axis=0)
    offsets = (gen.random(centers.shape) - 0.5) * 2 * spread
    coords = centers + offsets
    coords[:, 0] = np.clip(coords[:, 0], 0, width)
    coords[:, 1] = np.clip(coords[:, 1], 0, height)
    return coords


def grid(grid_x: int, grid_y: int, spacing_x: float = 100.0, spacing_y: float = 100.0) -> np.ndarray:
    xs, ys = np.meshgrid(np.arange(grid_x) * spacing_x, np.arange(grid_y) * spacing_y, indexing="ij")
    return np.column_stack([xs.ravel(), ys.ravel()])


def random_instance(n: int, seed: Optional[int] = None) -> DistanceOracle:
    """Uniform cities on a 100 x 100 square with Euclidean distances."""
    return DistanceOracle.from_coordinates(random_euclidean(n, rng=seed), name=f"Random_TSP_{n}")


def write_tsplib(
    path: Path,
    name: str,
    coordinates=None,
    matrix=None,
    comment: Optional[str] = None,
) -> Path:
    """Write coordinates as EUC_2D or a matrix as EXPLICIT / FULL_MATRIX."""
    if (coordinates is None) == (matrix is None):
        raise ValueError("Pass exactly one of coordinates or matrix.")
    path = Path(path)
    lines = [f"NAME : {name.upper()}"]
    if coordinates is not None:
        coords = np.asarray(coordinates, dtype=np.float64)
        if coords.ndim != 2 or coords.shape[0] == 0 or coords.shape[1] != 2:
            raise InvalidInstanceError("Coordinates must be a non-empty list of (x, y) pairs.")
        lines += [
            f"COMMENT : {comment or 'Euclidean TSP instance'}",
            "TYPE : TSP",
            f"DIMENSION : {len(coords)}",
            "EDGE_WEIGHT_TYPE : EUC_2D",
            "NODE_COORD_SECTION",
        ]
        lines += [f"{i} {x:.6f} {y:.6f}" for i, (x, y) in enumerate(coords.tolist(), start=1)]
    else:
        mat = np.asarray(matrix, dtype=np.float64)
        if mat.ndim != 2 or mat.size == 0 or mat.shape[0] != mat.shape[1]:
            raise InvalidInstanceError("Distance matrix must be a non-empty square matrix.")
        lines += [
            f"COMMENT : {comment or 'Explicit distance matrix TSP instance'}",
            "TYPE : TSP" if np.allclose(mat, mat.T) else "TYPE : ATSP",
            f"DIMENSION : {len(mat)}",
            "EDGE_WEIGHT_TYPE : EXPLICIT",
            "EDGE_WEIGHT_FORMAT : FULL_MATRIX",
            "EDGE_WEIGHT_SECTION",
        ]
        if np.all(mat == np.round(mat)):
            lines += [" ".join(str(int(v)) for v in row) for row in mat.tolist()]
        else:
            lines += [" ".join(f"{v:.6f}" for v in row) for row in mat.tolist()]
    lines.append("EOF")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n")
    return path
