import numpy as np
import pytest

from tsp_ls.problem import TravelingSalesmanProblem


@pytest.fixture
def square_tsp():
    return TravelingSalesmanProblem.from_coordinates([[1, 1], [1, 3], [2, 2], [2, 1]], name="small")


@pytest.fixture
def random_tsp():
    rng = np.random.default_rng(42)
    return TravelingSalesmanProblem.from_coordinates(rng.random((12, 2)), name="random12")


@pytest.fixture
def flat_tsp():
    n = 6
    return TravelingSalesmanProblem(np.ones((n, n)) - np.eye(n), name="flat")
