import math

import networkx as nx
import numpy as np
import pytest

from tsp_ls.problem import TravelingSalesmanProblem, tour_cost


def test_cost_and_validity(square_tsp):
    tour = [3, 0, 1, 2]
    assert len(square_tsp) == 4
    assert set(square_tsp.cities()) == set(tour)
    assert square_tsp.is_valid(tour)
    assert not square_tsp.is_valid([0, 1, 2])
    assert not square_tsp.is_valid([0, 1, 2, 3, 4])
    assert not square_tsp.is_valid([2, 0, 1, 2])
    assert square_tsp.dist(1, 2) == pytest.approx(math.sqrt(2))
    assert square_tsp.cost(tour) == pytest.approx(2 + math.sqrt(2) + 1 + 1)


def test_cost_rejects_invalid_tour(square_tsp):
    with pytest.raises(ValueError, match="invalid tour"):
        square_tsp.cost([2, 0, 1, 2])
    with pytest.raises(ValueError):
        square_tsp.cost([0, 1, 2, 7])


def test_distance_matrix_is_read_only(square_tsp):
    with pytest.raises(ValueError):
        square_tsp.distance[0, 1] = 10.0


@pytest.mark.parametrize(
    "matrix",
    [
        np.zeros((3, 4)),
        np.zeros((2, 2)),
        [[0, 1, 2], [1, 0, 1], [3, 1, 0]],
        [[1, 1, 1], [1, 0, 1], [1, 1, 0]],
        [[0, -1, 1], [-1, 0, 1], [1, 1, 0]],
    ],
)
def test_rejects_malformed_distances(matrix):
    with pytest.raises(ValueError):
        TravelingSalesmanProblem(matrix)


def test_from_distance_function():
    points = [(0, 0), (0, 2), (3, 2), (3, 0)]
    manhattan = lambda a, b: abs(a[0] - b[0]) + abs(a[1] - b[1])
    tsp = TravelingSalesmanProblem.from_distance_function(points, manhattan)
    assert tsp.dist(0, 2) == 5
    assert tsp.dist(2, 0) == 5
    assert tsp.cost([0, 1, 2, 3]) == 10


def test_graph_round_trip(square_tsp):
    graph = square_tsp.to_graph()
    assert graph.number_of_edges() == 6
    assert graph[1][2]["weight"] == pytest.approx(math.sqrt(2))
    relabelled = nx.relabel_nodes(graph, {i: i + 1 for i in range(4)})
    back = TravelingSalesmanProblem.from_graph(relabelled)
    assert back.labels == [1, 2, 3, 4]
    np.testing.assert_allclose(back.distance, square_tsp.distance)
    assert back.labelled([3, 0, 1, 2]) == [4, 1, 2, 3]


def test_from_graph_requires_complete_graph():
    with pytest.raises(ValueError, match="complete"):
        TravelingSalesmanProblem.from_graph(nx.path_graph(4))


def test_tour_cost_matches_method(random_tsp):
    tour = list(range(12))
    assert tour_cost(random_tsp, tour) == pytest.approx(random_tsp.cost(tour))


def test_rejects_non_integer_cities(square_tsp):
    assert not square_tsp.is_valid([0.0, 1.0, 2.0, 3.0])
    assert square_tsp.is_valid(np.array([3, 0, 1, 2]))
    with pytest.raises(ValueError, match="invalid tour"):
        square_tsp.cost([0.0, 1.0, 2.0, 3.0])
