import random
from collections import Counter

import pytest

from tsp_ea.errors import ConfigurationError
from tsp_ea.operators import roulette_select, select_parents, tournament_select
from tsp_ea.operators.selection import _spin, roulette_weights
from tsp_ea.solvers import Genome


class ScriptedRandom(random.Random):
    """Replays fixed draws for randrange and random."""

    def __init__(self, ranges=(), floats=()):
        super().__init__(0)
        self._ranges = list(ranges)
        self._floats = list(floats)

    def randrange(self, *args, **kwargs):
        return self._ranges.pop(0)

    def random(self):
        return self._floats.pop(0)


@pytest.fixture
def population():
    return [Genome([0, 1, 2], f) for f in (10.0, 4.0, 7.0, 4.0, 12.0)]


class TestTournament:
    def test_returns_best_of_draws(self, population):
        picked = tournament_select(population, 3, ScriptedRandom(ranges=[0, 2, 4]))
        assert picked is population[2]

    def test_earliest_draw_wins_ties(self, population):
        picked = tournament_select(population, 2, ScriptedRandom(ranges=[3, 1]))
        assert picked is population[3]

    def test_large_tournament_finds_best(self, population, rng):
        picked = tournament_select(population, 200, rng)
        assert picked.fitness == 4.0

    def test_size_one_is_uniform(self, population, rng):
        counts = Counter(id(tournament_select(population, 1, rng)) for _ in range(5000))
        assert len(counts) == len(population)


class TestRoulette:
    def test_weights(self, population):
        assert roulette_weights(population) == [3.0, 9.0, 6.0, 9.0, 1.0]

    def test_walks_cumulative_weights(self, population):
        # cumulative weights: 3, 12, 18, 27, 28
        assert roulette_select(population, ScriptedRandom(floats=[0.0])) is population[0]
        assert roulette_select(population, ScriptedRandom(floats=[11.5 / 28])) is population[1]
        assert roulette_select(population, ScriptedRandom(floats=[12.5 / 28])) is population[2]
        assert roulette_select(population, ScriptedRandom(floats=[27.5 / 28])) is population[4]

    def test_equal_fitness_is_uniform(self):
        population = [Genome([0, 1], 5.0) for _ in range(4)]
        assert roulette_weights(population) == [1.0] * 4
        rng = random.Random(99)
        counts = Counter(id(roulette_select(population, rng)) for _ in range(4000))
        assert len(counts) == 4
        for genome in population:
            assert 800 < counts[id(genome)] < 1200

    def test_zero_total_falls_back_to_uniform(self, population):
        picked = _spin(population, [0.0] * len(population), ScriptedRandom(ranges=[3]))
        assert picked is population[3]

    def test_prefers_shorter_tours(self, population, rng):
        counts = Counter(id(roulette_select(population, rng)) for _ in range(3000))
        assert counts[id(population[1])] > counts[id(population[4])]


class TestSelectParents:
    @pytest.mark.parametrize("kind", ["TOURNAMENT", "ROULETTE"])
    def test_returns_count_members(self, kind, population, rng):
        parents = select_parents(population, 17, kind, rng, tournament_size=2)
        assert len(parents) == 17
        assert all(any(p is g for g in population) for p in parents)

    def test_unknown_kind(self, population, rng):
        with pytest.raises(ConfigurationError):
            select_parents(population, 3, "RANK", rng)
