from .base import LocalSearchResult, Solver, SolveResult
from .construction import (
    CONSTRUCT_STRATEGIES,
    ConstructionConfig,
    ConstructiveSolver,
    best_nearest_neighbor_tour,
    construct,
    greedy_edge_tour,
    greedy_edges,
    nearest_neighbor_tour,
    random_insertion_tour,
)
from .local_search import (
    IMPROVE_STRATEGIES,
    AnnealingConfig,
    CompositionSolver,
    HillClimbingConfig,
    SearchState,
    TabuConfig,
    annealing_epochs,
    hill_climbing,
    improve,
    simulated_annealing,
    tabu_search,
)

__all__ = [
    "Solver",
    "SolveResult",
    "LocalSearchResult",
    "CONSTRUCT_STRATEGIES",
    "ConstructionConfig",
    "ConstructiveSolver",
    "nearest_neighbor_tour",
    "best_nearest_neighbor_tour",
    "greedy_edges",
    "greedy_edge_tour",
    "random_insertion_tour",
    "construct",
    "IMPROVE_STRATEGIES",
    "HillClimbingConfig",
    "AnnealingConfig",
    "TabuConfig",
    "SearchState",
    "annealing_epochs",
    "hill_climbing",
    "simulated_annealing",
    "tabu_search",
    "improve",
    "CompositionSolver",
]
