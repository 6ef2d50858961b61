import math
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from .solvers.base import DistanceOracle, Solver, Tour
from .solvers.genome import Genome


@dataclass
class SolveResult:
    tour: Tour
    length: float
    runtime: float
    solver_name: str
    optimum: Optional[float] = None
    history: List[float] = field(default_factory=list)

    @property
    def gap(self) -> float:
        if self.optimum is None or math.isclose(self.optimum, 0.0):
            return float("inf")
        return (self.length - self.optimum) / self.optimum


def evaluate_population(oracle: DistanceOracle, genomes: Sequence[Genome]) -> None:
    """Score every genome with one batched lookup into the distance matrix."""
    if not genomes:
        return
    lengths = oracle.tour_lengths([g.tour for g in genomes])
    for genome, length in zip(genomes, lengths.tolist()):
        genome.fitness = length


def evaluate_solver(
    solver: Solver,
    oracle: DistanceOracle,
    optimum: Optional[float] = None,
) -> SolveResult:
    start = time.perf_counter()
    tour = solver.solve(oracle)
    runtime = time.perf_counter() - start
    length = oracle.tour_length(tour)
    return SolveResult(
        tour=list(tour),
        length=length,
        runtime=runtime,
        solver_name=getattr(solver, "name", solver.__class__.__name__),
        optimum=optimum,
        history=list(getattr(solver, "history", [])),
    )


def aggregate_results(results: List[SolveResult]) -> Dict[str, float]:
    if not results:
        return {
            "mean": float("inf"),
            "median": float("inf"),
            "std": float("inf"),
            "best": float("inf"),
            "runtime": float("inf"),
        }
    lengths = np.array([r.length for r in results], dtype=np.float64)
    return {
        "mean": float(lengths.mean()),
        "median": float(np.median(lengths)),
        # ddof=0: spread of the observed runs, not a sample estimate.
        "std": float(lengths.std()),
        "best": float(lengths.min()),
        "runtime": float(np.mean([r.runtime for r in results])),
    }
