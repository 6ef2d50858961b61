import random

from tsp_ea.evolutionary import ProgressEvent, run
from tsp_ea.solvers import DistanceOracle, mst_lower_bound


MATRIX = [
    [0, 2, 9, 10],
    [1, 0, 6, 4],
    [15, 7, 0, 8],
    [6, 3, 12, 0],
]


def report(event: ProgressEvent) -> None:
    print(f"gen {event.generation}: best={event.best_fitness:.2f} avg={event.average_fitness:.2f}")


def main():
    oracle = DistanceOracle(MATRIX, name="four_city")
    best = run(
        oracle,
        mu=50,
        lambda_=100,
        generations=200,
        mutation_rate=0.2,
        progress_sink=report,
        rng=random.Random(0),
        progress_interval=50,
    )
    print(best)
    print(f"mst lower bound: {mst_lower_bound(oracle):.2f}")


if __name__ == "__main__":
    main()
