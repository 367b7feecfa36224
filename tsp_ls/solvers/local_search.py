"""
Local search on tours: hill climbing, simulated annealing and tabu search.

Hill climbing and tabu search explore the 2-opt neighborhood from
:func:`tsp_ls.moves.flip_neighborhood`; simulated annealing proposes random
swaps. Annealing and tabu search are heuristics only: they carry no
guarantee of reaching the optimal tour, and their result quality depends on
the schedule or tenure chosen.
"""

import enum
import math
import random
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from ..moves import apply_flip, apply_swap, delta_swap_cost, flip_delta_matrix
from ..problem import TravelingSalesmanProblem, Tour, tour_cost
from .base import LocalSearchResult, SolveResult, Solver
from .construction import CONSTRUCT_STRATEGIES, ConstructionConfig, construct


IMPROVE_STRATEGIES = ("none", "hill_climbing", "simulated_annealing", "tabu_search")

# deltas above this are not counted as improvements
IMPROVEMENT_EPS = 1e-9


class SearchState(enum.Enum):
    SCANNING = "scanning"
    APPLYING = "applying"
    CONVERGED = "converged"


@dataclass
class HillClimbingConfig:
    max_iterations: Optional[int] = None

    def __post_init__(self):
        if self.max_iterations is not None and self.max_iterations < 0:
            raise ValueError(f"max_iterations must be non-negative, got {self.max_iterations}")


@dataclass
class AnnealingConfig:
    t_max: float = 1000.0
    t_min: float = 1.0
    cooling_rate: float = 0.95
    epoch_length: int = 100
    # accepted swaps are kept in result.moves only when set
    record_moves: bool = False

    def __post_init__(self):
        if not 0 < self.t_min < self.t_max:
            raise ValueError(f"temperatures must satisfy 0 < t_min < t_max, got t_min={self.t_min}, t_max={self.t_max}")
        if not 0 < self.cooling_rate < 1:
            raise ValueError(f"cooling_rate must lie in (0, 1), got {self.cooling_rate}")
        if self.epoch_length < 1:
            raise ValueError(f"epoch_length must be at least 1, got {self.epoch_length}")


@dataclass
class TabuConfig:
    tabu_tenure: int = 5
    max_iterations: int = 100

    def __post_init__(self):
        if self.tabu_tenure < 0:
            raise ValueError(f"tabu_tenure must be non-negative, got {self.tabu_tenure}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {self.max_iterations}")


ImproveConfig = Union[HillClimbingConfig, AnnealingConfig, TabuConfig]

_CONFIG_TYPES = {
    "hill_climbing": HillClimbingConfig,
    "simulated_annealing": AnnealingConfig,
    "tabu_search": TabuConfig,
}


def annealing_epochs(config: AnnealingConfig) -> int:
    """Number of constant-temperature epochs before ``t_max * r**k`` reaches ``t_min``."""
    return math.ceil((math.log(config.t_min) - math.log(config.t_max)) / math.log(config.cooling_rate))


def hill_climbing(
    problem: TravelingSalesmanProblem, tour: Tour, config: Optional[HillClimbingConfig] = None
) -> LocalSearchResult:
    """
    Best-improvement 2-opt.

    Each round scans the whole flip neighborhood and applies the move with the
    most negative delta. Stops at a 2-opt local optimum or after
    ``max_iterations`` applied moves.
    """
    config = config or HillClimbingConfig()
    problem.check_tour(tour)
    current = list(tour)
    cost = tour_cost(problem, current)
    result = LocalSearchResult(tour=current, cost=cost, trajectory=[cost])
    n = problem.n
    iteration = 0
    state = SearchState.SCANNING
    while state is not SearchState.CONVERGED:
        if state is SearchState.SCANNING:
            if config.max_iterations is not None and iteration >= config.max_iterations:
                state = SearchState.CONVERGED
                continue
            deltas = flip_delta_matrix(problem, current)
            best = int(np.argmin(deltas))
            best_delta = float(deltas.flat[best])
            state = SearchState.APPLYING if best_delta < -IMPROVEMENT_EPS else SearchState.CONVERGED
        else:
            i, j = divmod(best, n)
            iteration += 1
            apply_flip(current, i, j)
            cost += best_delta
            result.trajectory.append(cost)
            result.moves.append((iteration, i, j))
            state = SearchState.SCANNING
    result.cost = cost
    return result


def simulated_annealing(
    problem: TravelingSalesmanProblem,
    tour: Tour,
    config: Optional[AnnealingConfig] = None,
    rng: Optional[random.Random] = None,
) -> LocalSearchResult:
    """
    Swap-move simulated annealing with a geometric cooling schedule.

    Every epoch runs ``epoch_length`` proposals at a fixed temperature; a
    worsening swap is accepted with probability ``exp(-delta / T)``. The
    number of epochs is :func:`annealing_epochs`. The tour returned is the one
    held when the schedule ends, not the best one visited. Accepted swaps are
    listed in ``moves`` only with ``record_moves=True``.
    """
    config = config or AnnealingConfig()
    rng = rng or random.Random()
    problem.check_tour(tour)
    current = list(tour)
    cost = tour_cost(problem, current)
    result = LocalSearchResult(tour=current, cost=cost, trajectory=[cost])
    positions = range(problem.n)
    temperature = config.t_max
    for epoch in range(1, annealing_epochs(config) + 1):
        for _ in range(config.epoch_length):
            p, q = rng.sample(positions, 2)
            delta = delta_swap_cost(problem, current, p, q)
            if delta < 0 or rng.random() < math.exp(-delta / temperature):
                apply_swap(current, p, q)
                cost += delta
                if config.record_moves:
                    result.moves.append((epoch, p, q))
        result.trajectory.append(cost)
        temperature *= config.cooling_rate
    result.cost = cost
    return result


def tabu_search(
    problem: TravelingSalesmanProblem, tour: Tour, config: Optional[TabuConfig] = None
) -> LocalSearchResult:
    """
    2-opt tabu search.

    Every iteration applies the best flip whose two positions are not tabu,
    even if it makes the tour longer, then forbids both positions for
    ``tabu_tenure`` iterations. Runs exactly ``max_iterations`` iterations.
    When every move is tabu the iteration leaves the tour unchanged.
    """
    config = config or TabuConfig()
    if config.tabu_tenure >= problem.n:
        raise ValueError(f"tabu_tenure must be smaller than the number of cities ({problem.n}), got {config.tabu_tenure}")
    problem.check_tour(tour)
    current = list(tour)
    cost = tour_cost(problem, current)
    result = LocalSearchResult(tour=current, cost=cost, trajectory=[cost])
    n = problem.n
    free_at = np.zeros(n, dtype=int)
    for iteration in range(1, config.max_iterations + 1):
        deltas = flip_delta_matrix(problem, current)
        tabu = free_at > iteration
        deltas[tabu, :] = np.inf
        deltas[:, tabu] = np.inf
        best = int(np.argmin(deltas))
        best_delta = float(deltas.flat[best])
        if np.isfinite(best_delta):
            i, j = divmod(best, n)
            apply_flip(current, i, j)
            cost += best_delta
            free_at[i] = free_at[j] = iteration + config.tabu_tenure
            result.moves.append((iteration, i, j))
        result.trajectory.append(cost)
    result.cost = cost
    return result


def improve(
    problem: TravelingSalesmanProblem,
    tour: Tour,
    strategy: str,
    config: Optional[ImproveConfig] = None,
    rng: Optional[random.Random] = None,
) -> LocalSearchResult:
    expected = _CONFIG_TYPES.get(strategy)
    if config is not None and expected is not None and not isinstance(config, expected):
        raise ValueError(f"{strategy} expects a {expected.__name__}, got {type(config).__name__}")
    if strategy == "none":
        problem.check_tour(tour)
        cost = tour_cost(problem, tour)
        return LocalSearchResult(tour=list(tour), cost=cost, trajectory=[cost])
    if strategy == "hill_climbing":
        return hill_climbing(problem, tour, config)
    if strategy == "simulated_annealing":
        return simulated_annealing(problem, tour, config, rng)
    if strategy == "tabu_search":
        return tabu_search(problem, tour, config)
    raise ValueError(f"unknown improvement strategy {strategy!r}; choose from {IMPROVE_STRATEGIES}")


class CompositionSolver(Solver):
    """
    Solver built from two phases: construct -> improve.
    """

    name = "composition"

    def __init__(
        self,
        construct: str,
        improve: str = "hill_climbing",
        construct_config: Optional[ConstructionConfig] = None,
        improve_config: Optional[ImproveConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        if construct not in CONSTRUCT_STRATEGIES:
            raise ValueError(f"unknown construction strategy {construct!r}; choose from {CONSTRUCT_STRATEGIES}")
        if improve not in IMPROVE_STRATEGIES:
            raise ValueError(f"unknown improvement strategy {improve!r}; choose from {IMPROVE_STRATEGIES}")
        self.construct = construct
        self.improve = improve
        self.construct_config = construct_config
        self.improve_config = improve_config
        self.rng = rng or random.Random()
        self.name = f"{construct}+{improve}"

    def solve(self, problem: TravelingSalesmanProblem) -> SolveResult:
        base, _ = construct(problem, self.construct, self.construct_config, self.rng)
        improved = improve(problem, base, self.improve, self.improve_config, self.rng)
        return SolveResult(
            tour=improved.tour,
            cost=improved.cost,
            solver_name=self.name,
            trajectory=improved.trajectory,
        )
