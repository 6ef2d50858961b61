import logging
import random
from dataclasses import asdict, dataclass, fields
from typing import Callable, Dict, List, Optional

from .errors import ConfigurationError
from .evaluation import evaluate_population
from .operators.crossover import CROSSOVER_OPERATORS, recombine
from .operators.mutation import MUTATION_OPERATORS, get_mutation
from .operators.selection import SELECTION_KINDS, select_parents
from .population import average_fitness, best_of, initialize_population, survivors
from .solvers.base import DistanceOracle, Solver, Tour
from .solvers.genome import Genome

logger = logging.getLogger(__name__)


@dataclass
class EvolutionConfig:
    mu: int = 50
    lambda_: int = 100
    generations: int = 1000
    mutation_rate: float = 0.2
    crossover: str = "OX"
    mutation: str = "SWAP"
    selection: str = "TOURNAMENT"
    tournament_size: int = 3
    use_greedy_init: bool = False
    random_seed: Optional[int] = None
    progress_interval: int = 1

    def validate(self) -> "EvolutionConfig":
        """Normalise operator names and reject anything a run could trip over later."""
        self.crossover = _kind(self.crossover, CROSSOVER_OPERATORS, "crossover")
        self.mutation = _kind(self.mutation, MUTATION_OPERATORS, "mutation")
        self.selection = _kind(self.selection, SELECTION_KINDS, "selection")
        _at_least("mu", self.mu, 1)
        _at_least("lambda_", self.lambda_, 1)
        _at_least("generations", self.generations, 0)
        _at_least("tournament_size", self.tournament_size, 1)
        _at_least("progress_interval", self.progress_interval, 1)
        if isinstance(self.mutation_rate, bool) or not isinstance(self.mutation_rate, (int, float)):
            raise ConfigurationError(f"mutation_rate must be a number, got {self.mutation_rate!r}")
        if not 0.0 <= self.mutation_rate <= 1.0:
            raise ConfigurationError(f"mutation_rate must be within [0, 1], got {self.mutation_rate}")
        if self.random_seed is not None and not isinstance(self.random_seed, int):
            raise ConfigurationError(f"random_seed must be an integer, got {self.random_seed!r}")
        return self

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> "EvolutionConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)


def _kind(value, choices, label: str) -> str:
    if not isinstance(value, str) or value.upper() not in choices:
        raise ConfigurationError(
            f"Unknown {label} type: {value!r} (expected one of {', '.join(choices)})"
        )
    return value.upper()


def _at_least(name: str, value, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")


@dataclass(frozen=True)
class ProgressEvent:
    generation: int
    best_fitness: float
    average_fitness: float


ProgressSink = Callable[[ProgressEvent], None]


class EvolutionarySearch:
    """
    (mu + lambda) evolutionary search over tours of a single instance.

    The search object is the whole run context: oracle, configuration, random
    source, current population and the best genome seen so far. Nothing is
    shared between searches.
    """

    def __init__(
        self,
        oracle: DistanceOracle,
        config: EvolutionConfig,
        rng: Optional[random.Random] = None,
        progress_sink: Optional[ProgressSink] = None,
    ):
        self.cfg = config.validate()
        self.oracle = oracle
        self.rng = rng or random.Random(config.random_seed)
        self.progress_sink = progress_sink
        self._mutate_op = get_mutation(self.cfg.mutation)
        self.population: List[Genome] = initialize_population(
            oracle, self.cfg.mu, self.cfg.use_greedy_init, self.rng
        )
        self._best = best_of(self.population).copy()
        self.generation = 0
        self.history: List[float] = []
        self.state = "initialized" if self.cfg.generations > 0 else "terminated"
        logger.debug(
            "initialised %s: mu=%d lambda=%d crossover=%s mutation=%s selection=%s best=%.2f",
            oracle.name,
            self.cfg.mu,
            self.cfg.lambda_,
            self.cfg.crossover,
            self.cfg.mutation,
            self.cfg.selection,
            self._best.fitness,
        )

    @property
    def best(self) -> Genome:
        return self._best.copy()

    def breed(self, parents: List[Genome]) -> List[Genome]:
        """
        Exactly lambda children from pairs drawn with replacement from ``parents``.
        For odd lambda the second child of the last pair is dropped.
        """
        offspring: List[Genome] = []
        while len(offspring) < self.cfg.lambda_:
            p1 = parents[self.rng.randrange(len(parents))]
            p2 = parents[self.rng.randrange(len(parents))]
            child1, child2 = recombine(p1, p2, self.cfg.crossover, self.rng)
            offspring.append(child1)
            if len(offspring) < self.cfg.lambda_:
                offspring.append(child2)
        return offspring

    def step(self) -> None:
        if self.state == "terminated":
            raise RuntimeError("search already ran its configured number of generations")
        self.state = "evolving"
        parents = select_parents(
            self.population, self.cfg.lambda_, self.cfg.selection, self.rng, self.cfg.tournament_size
        )
        offspring = self.breed(parents)
        for child in offspring:
            if self.rng.random() < self.cfg.mutation_rate:
                child.mutate(self._mutate_op, self.rng)
        evaluate_population(self.oracle, offspring)

        self.population = survivors(self.population + offspring, self.cfg.mu)
        if self.population[0].fitness < self._best.fitness:
            self._best = self.population[0].copy()
        self.history.append(self._best.fitness)

        gen = self.generation
        self.generation += 1
        if self.generation >= self.cfg.generations:
            self.state = "terminated"
        if self.progress_sink is not None and (
            gen % self.cfg.progress_interval == 0 or self.state == "terminated"
        ):
            self.progress_sink(
                ProgressEvent(
                    generation=gen,
                    best_fitness=self.population[0].fitness,
                    average_fitness=average_fitness(self.population),
                )
            )

    def run(self) -> Genome:
        while self.state != "terminated":
            self.step()
        logger.debug(
            "finished %s after %d generations: best=%.2f", self.oracle.name, self.generation, self._best.fitness
        )
        return self.best


class EvolutionarySolver(Solver):
    name = "evolutionary"

    def __init__(self, config: EvolutionConfig, progress_sink: Optional[ProgressSink] = None):
        self.cfg = config
        self.progress_sink = progress_sink
        self.history: List[float] = []

    def solve(self, oracle: DistanceOracle) -> Tour:
        search = EvolutionarySearch(oracle, self.cfg, progress_sink=self.progress_sink)
        best = search.run()
        self.history = search.history
        return list(best.tour)


def run(
    oracle: DistanceOracle,
    mu: int,
    lambda_: int,
    generations: int,
    mutation_rate: float,
    crossover: str = "OX",
    mutation: str = "SWAP",
    selection: str = "TOURNAMENT",
    tournament_size: int = 3,
    use_greedy_init: bool = False,
    progress_sink: Optional[ProgressSink] = None,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
    progress_interval: int = 1,
) -> Genome:
    """Run one (mu + lambda) search and return the best genome found."""
    cfg = EvolutionConfig(
        mu=mu,
        lambda_=lambda_,
        generations=generations,
        mutation_rate=mutation_rate,
        crossover=crossover,
        mutation=mutation,
        selection=selection,
        tournament_size=tournament_size,
        use_greedy_init=use_greedy_init,
        random_seed=seed,
        progress_interval=progress_interval,
    )
    return EvolutionarySearch(oracle, cfg, rng=rng, progress_sink=progress_sink).run()
