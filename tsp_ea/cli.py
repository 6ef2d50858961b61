import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from tsp_ea.data import load_instance
from tsp_ea.errors import ConfigurationError, TSPError
from tsp_ea.evolutionary import EvolutionConfig, EvolutionarySearch, ProgressEvent
from tsp_ea.experiments import DEFAULT_SWEEPS, SWEEPABLE, run_sweep, write_sweep_report
from tsp_ea.generators import clustered, grid, random_euclidean, random_instance, write_tsplib
from tsp_ea.operators import CROSSOVER_OPERATORS, MUTATION_OPERATORS, SELECTION_KINDS
from tsp_ea.solvers import DistanceOracle, Genome, mst_lower_bound


DEFAULT_OUTPUT = Path("best_tour_results.txt")
DEFAULT_SWEEP_OUTPUT = Path("parameter_sweep_results.txt")

# argparse destination -> EvolutionConfig field
_CONFIG_FLAGS = {
    "mu": "mu",
    "lambda_": "lambda_",
    "generations": "generations",
    "mutation_rate": "mutation_rate",
    "crossover": "crossover",
    "mutation": "mutation",
    "selection": "selection",
    "tournament_size": "tournament_size",
    "greedy": "use_greedy_init",
    "seed": "random_seed",
}

_PARAM_TYPES = {"mu": int, "lambda_": int, "generations": int, "tournament_size": int, "mutation_rate": float}


def log(msg: str) -> None:
    ts = time.strftime("%H:%M:%S")
    print(f"[{ts}] {msg}", flush=True)


def read_config_file(args) -> Dict:
    if not getattr(args, "config", None):
        return {}
    path = Path(args.config)
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a JSON object")
    return data


def load_config(args, data: Optional[Dict] = None) -> EvolutionConfig:
    """Defaults, then the JSON file given with --config, then explicit flags."""
    if data is None:
        data = read_config_file(args)
    cfg = EvolutionConfig.from_dict(data)
    for dest, field_name in _CONFIG_FLAGS.items():
        value = getattr(args, dest, None)
        if value is not None:
            setattr(cfg, field_name, value)
    return cfg.validate()


def load_oracle(args, seed: Optional[int] = None) -> Tuple[DistanceOracle, Optional[float]]:
    if args.file:
        log(f"reading TSP instance from {args.file}")
        instance = load_instance(Path(args.file))
        return instance.oracle, instance.optimum
    log(f"generating random TSP instance with {args.num_cities} cities")
    return random_instance(args.num_cities, seed=seed), None


def format_result(best: Genome, oracle: DistanceOracle, optimum: Optional[float], lower_bound: float) -> str:
    lines = [
        "--- TSP EA Results ---",
        f"TSP Instance: {oracle.name} ({oracle.num_cities} cities)",
        f"Best Fitness (Total Distance): {best.fitness:.2f}",
        "Best Tour Sequence (0-indexed cities):",
        ", ".join(str(c) for c in best.tour),
        "Complete Tour Path:",
        str(best),
    ]
    if optimum is not None:
        gap = (best.fitness - optimum) / optimum if optimum else float("inf")
        lines.append(f"Known Optimum: {optimum:.2f} (gap {gap:.2%})")
    if lower_bound > 0:
        lines.append(f"MST Lower Bound: {lower_bound:.2f} (tour is {best.fitness / lower_bound - 1:.2%} above)")
    else:
        lines.append(f"MST Lower Bound: {lower_bound:.2f}")
    lines.append("----------------------")
    return "\n".join(lines) + "\n"


def save_best_tour(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


def run(args) -> int:
    data = read_config_file(args)
    cfg = load_config(args, data)
    oracle, optimum = load_oracle(args, seed=cfg.random_seed)
    log(
        f"instance={oracle.name} ({oracle.num_cities} cities) mu={cfg.mu} lambda={cfg.lambda_} "
        f"generations={cfg.generations} mutation_rate={cfg.mutation_rate:.2f}"
    )
    log(
        f"crossover={cfg.crossover} mutation={cfg.mutation} selection={cfg.selection}"
        + (f" tournament_size={cfg.tournament_size}" if cfg.selection == "TOURNAMENT" else "")
        + f" greedy_init={cfg.use_greedy_init}"
    )

    sink = None
    if not args.quiet:
        if "progress_interval" not in data:
            cfg.progress_interval = max(1, cfg.generations // 10)

        def sink(event: ProgressEvent) -> None:
            log(f"gen {event.generation}: best={event.best_fitness:.2f} avg={event.average_fitness:.2f}")

    search = EvolutionarySearch(oracle, cfg, progress_sink=sink)
    log(f"initial best={search.best.fitness:.2f}")
    best = search.run()

    report = format_result(best, oracle, optimum, mst_lower_bound(oracle))
    print(report, end="")
    output = Path(args.output)
    save_best_tour(output, report)
    log(f"best tour saved to {output}")
    return 0


def _sweep_values(parameter: str, raw: Optional[List[str]]) -> List:
    if not raw:
        if parameter not in DEFAULT_SWEEPS:
            raise ConfigurationError(f"No default values for {parameter!r}; pass --values")
        return list(DEFAULT_SWEEPS[parameter])
    convert = _PARAM_TYPES.get(parameter, str)
    try:
        return [convert(v) if convert is not str else v.upper() for v in raw]
    except ValueError as exc:
        raise ConfigurationError(f"Invalid value for {parameter}: {exc}") from None


def sweep(args) -> int:
    cfg = load_config(args)
    oracle, optimum = load_oracle(args, seed=cfg.random_seed)
    values = _sweep_values(args.parameter, args.values)
    log(f"sweeping {args.parameter} over {values} with {args.runs} runs each")
    results = run_sweep(oracle, cfg, args.parameter, values, runs=args.runs, seed=cfg.random_seed, optimum=optimum)
    for res in results:
        log(
            f"{res.parameter}={res.value}: mean={res.mean:.2f} median={res.median:.2f} "
            f"std={res.std:.2f} best={res.best:.2f}"
        )
    output = write_sweep_report(Path(args.output), oracle.name, oracle.num_cities, results, args.runs)
    log(f"results saved to {output}")
    return 0


def generate(args) -> int:
    if args.kind == "random":
        coords = random_euclidean(args.num_cities, args.width, args.height, rng=args.seed)
        comment = "Randomly generated Euclidean TSP instance"
    elif args.kind == "clustered":
        coords = clustered(args.clusters, args.per_cluster, args.width, args.height, args.spread, rng=args.seed)
        comment = "Clustered Euclidean TSP instance"
    else:
        coords = grid(args.grid_x, args.grid_y, args.spacing, args.spacing)
        comment = "Grid-patterned Euclidean TSP instance"
    output = Path(args.output)
    name = args.name or output.stem
    write_tsplib(output, name, coordinates=coords, comment=comment)
    log(f"generated {args.kind} instance with {len(coords)} cities in {output}")
    return 0


def _ea_options() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument("-f", "--file", help="TSPLIB instance file (random instance when omitted)")
    parent.add_argument("-n", "--num-cities", type=int, default=50, help="cities in a random instance")
    parent.add_argument("--config", help="JSON file with EvolutionConfig fields")
    parent.add_argument("-m", "--mu", type=int, help="parent population size")
    parent.add_argument("-l", "--lambda", dest="lambda_", type=int, help="offspring per generation")
    parent.add_argument("-g", "--generations", type=int)
    parent.add_argument("--mutation-rate", type=float)
    parent.add_argument("--crossover", type=str.upper, choices=list(CROSSOVER_OPERATORS))
    parent.add_argument("--mutation", type=str.upper, choices=list(MUTATION_OPERATORS))
    parent.add_argument("--selection", type=str.upper, choices=SELECTION_KINDS)
    parent.add_argument("--tournament-size", type=int)
    parent.add_argument("--greedy", action="store_const", const=True, help="seed one nearest-neighbour tour")
    parent.add_argument("--seed", type=int)
    return parent


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tsp-ea", description="(mu + lambda) evolutionary TSP solver")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)
    ea_options = _ea_options()

    run_parser = subparsers.add_parser("run", parents=[ea_options], help="Solve one instance")
    run_parser.add_argument("-q", "--quiet", action="store_true", help="no per-generation progress")
    run_parser.add_argument("-o", "--output", default=str(DEFAULT_OUTPUT))
    run_parser.set_defaults(func=run)

    sweep_parser = subparsers.add_parser("sweep", parents=[ea_options], help="Repeat runs while one parameter varies")
    sweep_parser.add_argument("-p", "--parameter", required=True, choices=sorted(SWEEPABLE))
    sweep_parser.add_argument("--values", nargs="+")
    sweep_parser.add_argument("-r", "--runs", type=int, default=5)
    sweep_parser.add_argument("-o", "--output", default=str(DEFAULT_SWEEP_OUTPUT))
    sweep_parser.set_defaults(func=sweep)

    gen_parser = subparsers.add_parser("generate", help="Write a TSPLIB instance")
    gen_parser.add_argument("kind", choices=["random", "clustered", "grid"])
    gen_parser.add_argument("-o", "--output", required=True)
    gen_parser.add_argument("--name")
    gen_parser.add_argument("-n", "--num-cities", type=int, default=50)
    gen_parser.add_argument("--clusters", type=int, default=5)
    gen_parser.add_argument("--per-cluster", type=int, default=20)
    gen_parser.add_argument("--grid-x", type=int, default=10)
    gen_parser.add_argument("--grid-y", type=int, default=10)
    gen_parser.add_argument("--spacing", type=float, default=100.0)
    gen_parser.add_argument("--width", type=float, default=100.0)
    gen_parser.add_argument("--height", type=float, default=100.0)
    gen_parser.add_argument("--spread", type=float, default=50.0)
    gen_parser.add_argument("--seed", type=int)
    gen_parser.set_defaults(func=generate)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except (TSPError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
