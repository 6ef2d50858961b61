"""
Repeated runs of the evolutionary search while one parameter varies.
"""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import numpy as np

from .errors import ConfigurationError
from .evaluation import SolveResult, aggregate_results, evaluate_solver
from .evolutionary import EvolutionConfig, EvolutionarySolver
from .solvers.base import DistanceOracle

logger = logging.getLogger(__name__)

DEFAULT_SWEEPS: Dict[str, List] = {
    "mu": [25, 50, 75, 100],
    "lambda_": [50, 100, 150, 200],
    "generations": [500, 1000, 2000, 3000],
    "mutation_rate": [0.1, 0.15, 0.2, 0.25, 0.3, 0.4],
}

SWEEPABLE = {"mu", "lambda_", "generations", "mutation_rate", "tournament_size", "crossover", "mutation", "selection"}


@dataclass
class SweepResult:
    parameter: str
    value: object
    lengths: List[float] = field(default_factory=list)
    mean: float = float("inf")
    median: float = float("inf")
    std: float = float("inf")
    best: float = float("inf")
    runtime: float = float("inf")
    convergence_generation: float = float("nan")


def convergence_generation(history: Sequence[float]) -> int:
    """First generation whose best-ever fitness already equals the final one."""
    if not history:
        return 0
    final = history[-1]
    for gen, value in enumerate(history):
        if value <= final:
            return gen
    return len(history) - 1


def configure(base: EvolutionConfig, parameter: str, value) -> EvolutionConfig:
    if parameter not in SWEEPABLE:
        raise ConfigurationError(f"Cannot sweep parameter {parameter!r} (choose from {', '.join(sorted(SWEEPABLE))})")
    cfg = replace(base, **{parameter: value})
    if parameter == "mu":
        # Keep the lambda/mu ratio at 2 while the parent population grows.
        cfg = replace(cfg, lambda_=2 * value)
    return cfg.validate()


def run_sweep(
    oracle: DistanceOracle,
    base: EvolutionConfig,
    parameter: str,
    values: Sequence,
    runs: int = 5,
    seed: Optional[int] = None,
    optimum: Optional[float] = None,
) -> List[SweepResult]:
    if runs < 1:
        raise ConfigurationError(f"runs must be >= 1, got {runs}")
    results: List[SweepResult] = []
    for value in values:
        cfg = configure(base, parameter, value)
        logger.info("sweep %s=%s on %s (%d runs)", parameter, value, oracle.name, runs)
        solved: List[SolveResult] = []
        convergence = []
        for run_idx in range(runs):
            run_seed = None if seed is None else seed + run_idx
            solver = EvolutionarySolver(replace(cfg, random_seed=run_seed))
            result = evaluate_solver(solver, oracle, optimum)
            solved.append(result)
            convergence.append(convergence_generation(result.history))
            logger.info("  run %d: best=%.2f (%.2fs)", run_idx + 1, result.length, result.runtime)
        stats = aggregate_results(solved)
        results.append(
            SweepResult(
                parameter=parameter,
                value=value,
                lengths=[r.length for r in solved],
                mean=stats["mean"],
                median=stats["median"],
                std=stats["std"],
                best=stats["best"],
                runtime=stats["runtime"],
                convergence_generation=float(np.mean(convergence)),
            )
        )
    return results


def format_sweep_report(instance_name: str, num_cities: int, results: Sequence[SweepResult], runs: int) -> str:
    lines = [
        "--- EA parameter sweep ---",
        f"TSP Instance: {instance_name} ({num_cities} cities)",
        f"Runs per configuration: {runs}",
        "--------------------------",
    ]
    for res in results:
        lines += [
            "",
            f"{res.parameter} = {res.value}",
            f"Individual results: {', '.join(f'{v:.2f}' for v in res.lengths)}",
            f"Mean: {res.mean:.2f}",
            f"Median: {res.median:.2f}",
            f"Standard deviation: {res.std:.2f}",
            f"Best: {res.best:.2f}",
            f"Mean runtime: {res.runtime:.3f}s",
            f"Mean convergence generation: {res.convergence_generation:.0f}",
        ]
    if results:
        winner = min(results, key=lambda r: r.mean)
        lines += ["", f"Lowest mean tour length: {winner.parameter} = {winner.value} ({winner.mean:.2f})"]
    return "\n".join(lines) + "\n"


def write_sweep_report(
    path: Path, instance_name: str, num_cities: int, results: Sequence[SweepResult], runs: int
) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_sweep_report(instance_name, num_cities, results, runs))
    return path
