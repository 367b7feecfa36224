import math
import random

import pytest

from tsp_ls.moves import apply_flip, apply_swap, flip_delta_matrix
from tsp_ls.solvers import (
    AnnealingConfig,
    CompositionSolver,
    HillClimbingConfig,
    TabuConfig,
    annealing_epochs,
    hill_climbing,
    improve,
    simulated_annealing,
    tabu_search,
)


def test_hill_climbing_is_monotone(random_tsp):
    start = random_tsp.cities()
    result = hill_climbing(random_tsp, start)
    assert random_tsp.is_valid(result.tour)
    assert result.trajectory[0] == pytest.approx(random_tsp.cost(start))
    assert all(b <= a for a, b in zip(result.trajectory, result.trajectory[1:]))
    assert result.cost <= random_tsp.cost(start)
    assert result.cost == pytest.approx(random_tsp.cost(result.tour))
    assert len(result.trajectory) == len(result.moves) + 1


def test_hill_climbing_reaches_two_opt_optimum(random_tsp):
    result = hill_climbing(random_tsp, random_tsp.cities())
    assert flip_delta_matrix(random_tsp, result.tour).min() >= -1e-9


def test_hill_climbing_does_not_touch_input(random_tsp):
    start = random_tsp.cities()
    hill_climbing(random_tsp, start)
    assert start == list(range(12))


def test_hill_climbing_iteration_cap(random_tsp):
    result = hill_climbing(random_tsp, random_tsp.cities(), HillClimbingConfig(max_iterations=2))
    assert len(result.moves) <= 2
    assert len(result.trajectory) <= 3


def test_hill_climbing_on_flat_distances(flat_tsp):
    result = hill_climbing(flat_tsp, flat_tsp.cities())
    assert result.moves == []
    assert result.tour == flat_tsp.cities()


@pytest.mark.parametrize("search", [hill_climbing, simulated_annealing, tabu_search])
def test_invalid_start_tour_fails_fast(square_tsp, search):
    with pytest.raises(ValueError, match="invalid tour"):
        search(square_tsp, [2, 0, 1, 2])


def test_annealing_epoch_count(random_tsp):
    config = AnnealingConfig(t_max=10.0, t_min=0.1, cooling_rate=0.8, epoch_length=20)
    expected = math.ceil((math.log(0.1) - math.log(10.0)) / math.log(0.8))
    assert annealing_epochs(config) == expected == 21
    result = simulated_annealing(random_tsp, random_tsp.cities(), config, random.Random(0))
    assert len(result.trajectory) - 1 == expected
    assert random_tsp.is_valid(result.tour)
    assert result.cost == pytest.approx(random_tsp.cost(result.tour), abs=1e-9)
    assert result.trajectory[-1] == result.cost


def test_annealing_is_reproducible(random_tsp):
    config = AnnealingConfig(t_max=1.0, t_min=0.01, cooling_rate=0.9, epoch_length=50)
    a = simulated_annealing(random_tsp, random_tsp.cities(), config, random.Random(11))
    b = simulated_annealing(random_tsp, random_tsp.cities(), config, random.Random(11))
    assert a.tour == b.tour
    assert a.trajectory == b.trajectory


def test_cold_annealing_never_worsens(random_tsp):
    config = AnnealingConfig(t_max=1e-9, t_min=1e-10, cooling_rate=0.5, epoch_length=200)
    result = simulated_annealing(random_tsp, random_tsp.cities(), config, random.Random(3))
    assert all(b <= a + 1e-12 for a, b in zip(result.trajectory, result.trajectory[1:]))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"t_min": 10.0, "t_max": 10.0},
        {"t_min": 0.0},
        {"cooling_rate": 1.0},
        {"cooling_rate": 0.0},
        {"epoch_length": 0},
    ],
)
def test_annealing_config_validation(kwargs):
    with pytest.raises(ValueError):
        AnnealingConfig(**kwargs)


def test_tabu_runs_every_iteration(random_tsp):
    result = tabu_search(random_tsp, random_tsp.cities(), TabuConfig(tabu_tenure=3, max_iterations=40))
    assert len(result.trajectory) == 41
    assert random_tsp.is_valid(result.tour)
    assert result.cost == pytest.approx(random_tsp.cost(result.tour))


def test_tabu_respects_tenure(random_tsp):
    tenure = 4
    result = tabu_search(random_tsp, random_tsp.cities(), TabuConfig(tabu_tenure=tenure, max_iterations=60))
    last_used = {}
    for iteration, i, j in result.moves:
        for pos in (i, j):
            if pos in last_used:
                assert iteration >= last_used[pos] + tenure
            last_used[pos] = iteration


def test_tabu_escapes_local_optimum(random_tsp):
    local = hill_climbing(random_tsp, random_tsp.cities())
    result = tabu_search(random_tsp, local.tour, TabuConfig(tabu_tenure=2, max_iterations=5))
    # nothing improves at a 2-opt optimum, yet tabu search keeps moving
    assert len(result.moves) == 5
    assert result.trajectory[1] >= result.trajectory[0] - 1e-9


def test_tabu_rejects_long_tenure(square_tsp):
    with pytest.raises(ValueError, match="tabu_tenure"):
        tabu_search(square_tsp, [0, 1, 2, 3], TabuConfig(tabu_tenure=4))
    with pytest.raises(ValueError):
        TabuConfig(max_iterations=0)


def test_tabu_on_flat_distances(flat_tsp):
    result = tabu_search(flat_tsp, flat_tsp.cities(), TabuConfig(tabu_tenure=2, max_iterations=10))
    assert flat_tsp.is_valid(result.tour)
    assert result.cost == pytest.approx(6.0)


def test_improve_dispatch(random_tsp):
    start = random_tsp.cities()
    assert improve(random_tsp, start, "none").cost == pytest.approx(random_tsp.cost(start))
    with pytest.raises(ValueError, match="unknown improvement strategy"):
        improve(random_tsp, start, "three_opt")
    with pytest.raises(ValueError, match="expects a TabuConfig"):
        improve(random_tsp, start, "tabu_search", HillClimbingConfig())


def test_composition_solver(random_tsp):
    solver = CompositionSolver("nearest_neighbor", "hill_climbing", rng=random.Random(0))
    result = solver.solve(random_tsp)
    assert result.solver_name == "nearest_neighbor+hill_climbing"
    assert random_tsp.is_valid(result.tour)
    assert result.cost == pytest.approx(random_tsp.cost(result.tour))
    assert result.trajectory[-1] == pytest.approx(result.cost)


def replay(problem, start, result, apply_move):
    steps = {}
    for step, p, q in result.moves:
        steps.setdefault(step, []).append((p, q))
    tour = list(start)
    for step in range(1, len(result.trajectory)):
        for p, q in steps.get(step, []):
            apply_move(tour, p, q)
            assert problem.is_valid(tour)
        assert problem.cost(tour) == pytest.approx(result.trajectory[step], abs=1e-9)
    return tour


def test_every_intermediate_tour_is_valid(random_tsp):
    start = [5, 3, 11, 0, 7, 1, 9, 2, 10, 4, 8, 6]
    climbed = hill_climbing(random_tsp, start)
    assert replay(random_tsp, start, climbed, apply_flip) == climbed.tour

    config = AnnealingConfig(t_max=1.0, t_min=0.1, cooling_rate=0.8, epoch_length=25, record_moves=True)
    annealed = simulated_annealing(random_tsp, start, config, random.Random(4))
    assert annealed.moves
    assert replay(random_tsp, start, annealed, apply_swap) == annealed.tour

    searched = tabu_search(random_tsp, start, TabuConfig(tabu_tenure=3, max_iterations=30))
    assert replay(random_tsp, start, searched, apply_flip) == searched.tour


def test_annealing_skips_move_log_by_default(random_tsp):
    config = AnnealingConfig(t_max=1.0, t_min=0.1, cooling_rate=0.8, epoch_length=25)
    result = simulated_annealing(random_tsp, random_tsp.cities(), config, random.Random(4))
    assert result.moves == []
