import random

import networkx as nx
import numpy as np
import pytest

from tsp_ea.errors import InvalidGenomeError, InvalidInstanceError, OutOfRangeError, TSPError
from tsp_ea.solvers import DistanceOracle, is_permutation, mst_lower_bound, nearest_neighbor_tour, tour_length

from .conftest import FOUR_CITY, brute_force_optimum


class TestConstruction:
    def test_stores_matrix(self, four_city):
        assert four_city.num_cities == 4
        assert len(four_city) == 4
        assert four_city.name == "four_city"
        assert four_city.distance(0, 1) == 2
        assert four_city.distance(1, 0) == 1

    def test_matrix_is_read_only_copy(self):
        raw = np.array(FOUR_CITY, dtype=float)
        oracle = DistanceOracle(raw)
        raw[0, 1] = 100
        assert oracle.distance(0, 1) == 2
        with pytest.raises(ValueError):
            oracle.matrix[0, 1] = 5

    @pytest.mark.parametrize(
        "matrix",
        [
            [],
            [[]],
            [[0, 1, 2], [1, 0, 2]],
            [[0, -1], [1, 0]],
            [[0, float("nan")], [1, 0]],
            [[0, "x"], [1, 0]],
        ],
    )
    def test_rejects_bad_matrices(self, matrix):
        with pytest.raises(InvalidInstanceError):
            DistanceOracle(matrix)

    @pytest.mark.parametrize("matrix", [[1, 2], [[[0]]]])
    def test_rejects_non_two_dimensional_input(self, matrix):
        with pytest.raises(InvalidInstanceError, match="square 2-D matrix"):
            DistanceOracle(matrix)

    def test_errors_share_a_base(self):
        with pytest.raises(TSPError):
            DistanceOracle([])

    def test_default_name(self):
        assert DistanceOracle([[0]]).name == "Unknown"

    def test_from_coordinates_is_euclidean(self, square):
        assert square.distance(0, 1) == pytest.approx(1.0)
        assert square.distance(0, 2) == pytest.approx(2 ** 0.5)
        assert square.coordinates.shape == (4, 2)
        assert square.is_symmetric()

    def test_from_graph(self):
        graph = nx.complete_graph(4)
        for u, v in graph.edges():
            graph[u][v]["weight"] = u + v
        oracle = DistanceOracle.from_graph(graph, name="k4")
        assert oracle.distance(1, 3) == 4
        assert oracle.distance(2, 2) == 0

    def test_from_incomplete_graph(self):
        with pytest.raises(InvalidInstanceError):
            DistanceOracle.from_graph(nx.path_graph(4))


class TestLookups:
    @pytest.mark.parametrize("i, j", [(-1, 0), (0, 4), (4, 4)])
    def test_distance_out_of_range(self, four_city, i, j):
        with pytest.raises(OutOfRangeError):
            four_city.distance(i, j)

    def test_out_of_range_is_index_error(self, four_city):
        with pytest.raises(IndexError):
            four_city.distance(0, 9)

    def test_tour_length_is_cyclic(self, four_city):
        assert four_city.tour_length([0, 1, 2, 3]) == 2 + 6 + 8 + 6
        assert tour_length(four_city, [0, 2, 3, 1]) == 21

    @pytest.mark.parametrize("tour", [[0, 1, 2], [0, 1, 2, 3, 0]])
    def test_tour_length_wrong_size(self, four_city, tour):
        with pytest.raises(InvalidGenomeError):
            four_city.tour_length(tour)

    def test_tour_length_bad_city(self, four_city):
        with pytest.raises(OutOfRangeError):
            four_city.tour_length([0, 1, 2, 7])

    @pytest.mark.parametrize("tour", [[0, 1.7, 2, 3], [0, 1, 2, 3.5], ["0", "1", "2", "3"]])
    def test_tour_length_rejects_non_integer_cities(self, four_city, tour):
        with pytest.raises(InvalidGenomeError, match="integer"):
            four_city.tour_length(tour)

    def test_tour_length_accepts_integral_floats(self, four_city):
        assert four_city.tour_length([0.0, 1.0, 2.0, 3.0]) == four_city.tour_length([0, 1, 2, 3])

    def test_ragged_batch(self, four_city):
        with pytest.raises(InvalidGenomeError):
            four_city.tour_lengths([[0, 1, 2, 3], [0, 1]])

    def test_single_city(self):
        oracle = DistanceOracle([[0]])
        assert oracle.tour_length([0]) == 0

    def test_batched_lengths_match(self, four_city):
        tours = [[0, 1, 2, 3], [3, 2, 1, 0], [0, 2, 3, 1]]
        lengths = four_city.tour_lengths(tours)
        assert lengths.tolist() == [four_city.tour_length(t) for t in tours]

    @pytest.mark.parametrize("seed", range(5))
    def test_rotation_and_reversal_invariance(self, euclidean_10, seed):
        rng = random.Random(seed)
        tour = list(range(10))
        rng.shuffle(tour)
        base = euclidean_10.tour_length(tour)
        shift = rng.randrange(10)
        assert euclidean_10.tour_length(tour[shift:] + tour[:shift]) == pytest.approx(base)
        assert euclidean_10.tour_length(tour[::-1]) == pytest.approx(base)

    def test_rotation_invariance_asymmetric(self, four_city):
        assert four_city.tour_length([2, 3, 1, 0]) == four_city.tour_length([0, 2, 3, 1])


def test_is_permutation():
    assert is_permutation([2, 0, 1], 3)
    assert not is_permutation([0, 0, 1], 3)
    assert not is_permutation([0, 1], 3)


def test_mst_lower_bound(four_city, euclidean_10):
    assert mst_lower_bound(four_city) <= brute_force_optimum(four_city)
    nn_tour = nearest_neighbor_tour(euclidean_10, 0)
    assert mst_lower_bound(euclidean_10) <= euclidean_10.tour_length(nn_tour)
    assert mst_lower_bound(DistanceOracle([[0]])) == 0
