import random
import subprocess
import sys
from pathlib import Path

import pytest

from tsp_ea.errors import OutOfRangeError
from tsp_ea.operators import swap_mutation
from tsp_ea.population import average_fitness, best_of, initialize_population, survivors
from tsp_ea.solvers import DistanceOracle, Genome, GreedySolver, is_permutation, nearest_neighbor_tour, random_tour


class TestGenome:
    @pytest.mark.parametrize("n", [1, 2, 3, 10, 50])
    @pytest.mark.parametrize("seed", range(5))
    def test_random_is_permutation(self, n, seed):
        genome = Genome.random(n, random.Random(seed))
        assert is_permutation(genome.tour, n)
        assert not genome.is_evaluated

    def test_tour_is_immutable_view(self):
        genome = Genome([0, 1, 2])
        assert genome.tour == (0, 1, 2)
        with pytest.raises(TypeError):
            genome.tour[0] = 2

    def test_input_is_copied(self):
        cities = [0, 1, 2]
        genome = Genome(cities)
        cities[0] = 2
        assert genome.tour == (0, 1, 2)

    def test_evaluate(self, four_city):
        genome = Genome([0, 2, 3, 1])
        assert genome.evaluate(four_city) == 21
        assert genome.fitness == 21
        assert genome.is_evaluated

    def test_mutate_invalidates_fitness(self, four_city, rng):
        genome = Genome([0, 1, 2, 3])
        genome.evaluate(four_city)
        genome.mutate(swap_mutation, rng)
        assert genome.fitness is None
        assert is_permutation(genome.tour, 4)
        assert genome.tour != (0, 1, 2, 3)
        assert genome.evaluate(four_city) == four_city.tour_length(genome.tour)

    def test_copy_is_independent(self, rng):
        genome = Genome([0, 1, 2, 3], fitness=22.0)
        clone = genome.copy()
        clone.mutate(swap_mutation, rng)
        assert genome.tour == (0, 1, 2, 3)
        assert genome.fitness == 22.0

    def test_equality_is_exact_sequence(self, four_city):
        a = Genome([0, 2, 3, 1])
        rotated = Genome([2, 3, 1, 0])
        assert a == Genome([0, 2, 3, 1])
        assert a != rotated
        assert hash(a) == hash(Genome([0, 2, 3, 1]))
        assert a.evaluate(four_city) == rotated.evaluate(four_city)

    def test_str(self):
        assert str(Genome([0, 1, 2, 3], 22.0)) == "Tour: 0 -> 1 -> 2 -> 3 -> 0 (Distance: 22.00)"

    def test_single_city(self):
        oracle = DistanceOracle([[0]])
        genome = Genome.random(1, random.Random(0))
        assert genome.tour == (0,)
        assert genome.evaluate(oracle) == 0


class TestGreedy:
    def test_fixed_start(self, four_city):
        genome = Genome.greedy(four_city, start=0)
        assert genome.tour == (0, 1, 3, 2)
        assert genome.fitness == 33

    def test_deterministic_and_consumes_no_randomness(self, euclidean_10):
        rng = random.Random(3)
        state = rng.getstate()
        first = Genome.greedy(euclidean_10, start=4, rng=rng)
        second = Genome.greedy(euclidean_10, start=4, rng=rng)
        assert first == second
        assert rng.getstate() == state
        assert is_permutation(first.tour, 10)

    def test_first_minimum_wins_ties(self):
        oracle = DistanceOracle([[0, 1, 1], [1, 0, 1], [1, 1, 0]])
        assert nearest_neighbor_tour(oracle, 0) == [0, 1, 2]

    def test_random_start(self, euclidean_10, rng):
        genome = Genome.greedy(euclidean_10, rng=rng)
        assert genome.tour == tuple(nearest_neighbor_tour(euclidean_10, genome.tour[0]))

    def test_start_out_of_range(self, four_city):
        with pytest.raises(OutOfRangeError):
            Genome.greedy(four_city, start=4)

    def test_solver(self, four_city):
        assert GreedySolver(start=0).solve(four_city) == [0, 1, 3, 2]


class TestPopulation:
    @pytest.mark.parametrize("n", [1, 2, 3, 8])
    def test_initialize(self, n, rng):
        oracle = DistanceOracle([[0 if i == j else 1 for j in range(n)] for i in range(n)])
        population = initialize_population(oracle, 20, False, rng)
        assert len(population) == 20
        for genome in population:
            assert is_permutation(genome.tour, n)
            assert genome.fitness == oracle.tour_length(genome.tour)

    def test_greedy_seed_comes_first(self, euclidean_10, rng):
        population = initialize_population(euclidean_10, 10, True, rng)
        assert len(population) == 10
        head = population[0]
        assert head.tour == tuple(nearest_neighbor_tour(euclidean_10, head.tour[0]))
        assert all(g.is_evaluated for g in population)

    def test_survivors_keep_best_mu_stably(self):
        parents = [Genome([0, 1, 2], 5.0), Genome([0, 2, 1], 7.0)]
        offspring = [Genome([1, 0, 2], 5.0), Genome([2, 1, 0], 3.0)]
        kept = survivors(parents + offspring, 3)
        assert [g.fitness for g in kept] == [3.0, 5.0, 5.0]
        assert kept[1] is parents[0]
        assert kept[2] is offspring[0]

    def test_best_and_average(self):
        population = [Genome([0, 1], 4.0), Genome([1, 0], 2.0)]
        assert best_of(population).fitness == 2.0
        assert average_fitness(population) == 3.0
        assert average_fitness([]) == 0.0


def test_random_tour(rng):
    assert sorted(random_tour(6, rng)) == list(range(6))


def test_package_imports_in_fresh_interpreter():
    result = subprocess.run(
        [sys.executable, "-c", "import tsp_ea, tsp_ea.cli, tsp_ea.data"],
        cwd=Path(__file__).resolve().parents[1],
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0, result.stderr
