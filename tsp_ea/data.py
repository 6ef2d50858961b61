import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

import networkx as nx
import numpy as np
import tsplib95
from tsplib95.exceptions import TsplibError

from .errors import InvalidInstanceError, TSPError
from .solvers.base import DistanceOracle, Tour

logger = logging.getLogger(__name__)

# tsplib95 surfaces malformed files through any of these.
_PARSE_ERRORS = (TsplibError, ValueError, KeyError, IndexError, TypeError)


@dataclass
class Instance:
    name: str
    path: Path
    oracle: DistanceOracle
    optimum: Optional[float]


def _coordinates(problem, nodes: List[int], source: str) -> np.ndarray:
    coords = []
    for node in nodes:
        xy = problem.node_coords.get(node)
        if xy is None or len(xy) != 2:
            raise InvalidInstanceError(f"Could not parse coordinates of node {node} in {source}")
        coords.append(xy)
    return np.array(coords, dtype=np.float64)


def _to_oracle(problem, source: str) -> DistanceOracle:
    name = problem.name or "Unknown"
    dimension = problem.dimension
    if not dimension:
        raise InvalidInstanceError(f"DIMENSION not found in TSPLIB data: {source}")
    weight_type = (problem.edge_weight_type or "").upper()

    if weight_type in ("", "EUC_2D") and problem.node_coords:
        if not weight_type:
            logger.warning("EDGE_WEIGHT_TYPE not specified in %s; assuming EUC_2D", source)
        if len(problem.node_coords) != dimension:
            raise InvalidInstanceError(
                f"Mismatch between DIMENSION ({dimension}) and coordinates read "
                f"({len(problem.node_coords)}) in {source}"
            )
        # Plain Euclidean distances, not TSPLIB's nint-rounded EUC_2D weights.
        coords = _coordinates(problem, list(problem.get_nodes()), source)
        return DistanceOracle.from_coordinates(coords, name=name)

    if not weight_type:
        raise InvalidInstanceError(f"Neither node coordinates nor EDGE_WEIGHT_TYPE found in {source}")
    graph = problem.get_graph(normalize=True)
    if graph.number_of_nodes() != dimension:
        raise InvalidInstanceError(
            f"Mismatch between DIMENSION ({dimension}) and nodes read ({graph.number_of_nodes()}) in {source}"
        )
    graph.remove_edges_from(list(nx.selfloop_edges(graph)))
    return DistanceOracle.from_graph(graph, name=name)


def parse_tsplib(text: str, source: str = "<string>") -> DistanceOracle:
    try:
        problem = tsplib95.parse(text)
        return _to_oracle(problem, source)
    except TSPError:
        raise
    except _PARSE_ERRORS as exc:
        raise InvalidInstanceError(f"Invalid TSPLIB data in {source}: {exc}") from exc


def parse_tour(text: str, source: str = "<string>") -> Tour:
    """Cities of the first tour in a TSPLIB tour file, as 0-based indices."""
    try:
        tours = tsplib95.parse(text).tours
    except _PARSE_ERRORS as exc:
        raise InvalidInstanceError(f"Invalid TSPLIB tour in {source}: {exc}") from exc
    if not tours:
        raise InvalidInstanceError(f"TOUR_SECTION not found in {source}")
    return [int(city) - 1 for city in tours[0]]


def _solution_candidates(path: Path) -> Iterable[Path]:
    yield path.with_suffix(".opt.tour")
    for ext in (".opt.tour", ".opt", ".tour"):
        yield path.parent / "solutions" / f"{path.stem}{ext}"


def _read_dimension(path: Path) -> Optional[int]:
    try:
        with path.open("r") as f:
            for line in f:
                if "DIMENSION" in line.upper():
                    parts = line.replace(":", " ").split()
                    for token in parts:
                        if token.isdigit():
                            return int(token)
        return None
    except OSError:
        return None


def _load_optimum(oracle: DistanceOracle, path: Path) -> Optional[float]:
    for candidate in _solution_candidates(path):
        if not candidate.exists():
            continue
        try:
            tour = parse_tour(candidate.read_text(), source=str(candidate))
            return oracle.tour_length(tour)
        except (OSError, TSPError) as exc:
            logger.warning("ignoring unreadable tour file %s: %s", candidate, exc)
    return None


def load_instance(path: Path) -> Instance:
    path = Path(path)
    try:
        problem = tsplib95.load(path)
        oracle = _to_oracle(problem, str(path))
    except OSError as exc:
        raise InvalidInstanceError(f"Cannot read TSPLIB file {path}: {exc}") from exc
    except TSPError:
        raise
    except _PARSE_ERRORS as exc:
        raise InvalidInstanceError(f"Invalid TSPLIB data in {path}: {exc}") from exc
    optimum = _load_optimum(oracle, path)
    return Instance(name=oracle.name, path=path, oracle=oracle, optimum=optimum)


def load_tsplib_instances(
    root: Path, max_nodes: Optional[int] = None, max_instances: Optional[int] = None
) -> List[Instance]:
    tsp_files = sorted(Path(root).glob("*.tsp"))
    instances: List[Instance] = []
    for p in tsp_files:
        if max_nodes is not None:
            dim = _read_dimension(p)
            if dim is not None and dim > max_nodes:
                continue
        instances.append(load_instance(p))
        if max_instances is not None and len(instances) >= max_instances:
            break
    return instances
