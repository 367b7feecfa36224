import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
from networkx.utils import UnionFind

from ..problem import TravelingSalesmanProblem, Tour
from .base import SolveResult, Solver


CONSTRUCT_STRATEGIES = ("nearest_neighbor", "best_nearest_neighbor", "greedy_edge", "random_insertion")


@dataclass
class ConstructionConfig:
    start_city: Optional[int] = None
    sample_size: Optional[int] = None

    def __post_init__(self):
        if self.sample_size is not None and self.sample_size < 1:
            raise ValueError(f"sample_size must be positive, got {self.sample_size}")


def nearest_neighbor_tour(problem: TravelingSalesmanProblem, start: int = 0) -> Tuple[Tour, float]:
    """
    Greedily hop to the closest unvisited city, starting from ``start``.

    Ties go to the lowest city index. The returned cost includes the edge
    closing the cycle.
    """
    if not 0 <= start < problem.n:
        raise ValueError(f"start city {start} out of range for {problem.n} cities")
    unvisited = np.ones(problem.n, dtype=bool)
    unvisited[start] = False
    tour = [start]
    current = start
    cost = 0.0
    for _ in range(problem.n - 1):
        row = np.where(unvisited, problem.distance[current], np.inf)
        nxt = int(np.argmin(row))
        cost += row[nxt]
        tour.append(nxt)
        unvisited[nxt] = False
        current = nxt
    cost += problem.distance[current, start]
    return tour, float(cost)


def best_nearest_neighbor_tour(
    problem: TravelingSalesmanProblem,
    sample_size: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> Tuple[Tour, float]:
    """Best nearest-neighbor tour over all start cities, or over a random sample of them."""
    cities = problem.cities()
    if sample_size is not None and sample_size < len(cities):
        rng = rng or random.Random()
        cities = rng.sample(cities, sample_size)
    best_tour: Tour = []
    best_cost = float("inf")
    for start in cities:
        tour, cost = nearest_neighbor_tour(problem, start)
        if cost < best_cost:
            best_tour = tour
            best_cost = cost
    return best_tour, best_cost


def greedy_edges(problem: TravelingSalesmanProblem) -> List[Tuple[int, int]]:
    """
    Edges of the greedy-edge tour: ``n`` edges forming one Hamiltonian cycle.

    Candidate edges are scanned by increasing weight. An edge is kept when both
    endpoints still have degree < 2 and lie in different components, which
    grows a single path of ``n - 1`` edges; the last edge joins its two ends.
    """
    n = problem.n
    uf = UnionFind(range(n))
    degree = [0] * n
    rows, cols = np.triu_indices(n, k=1)
    order = np.argsort(problem.distance[rows, cols], kind="stable")
    selected: List[Tuple[int, int]] = []
    for k in order:
        i, j = int(rows[k]), int(cols[k])
        if degree[i] < 2 and degree[j] < 2 and uf[i] != uf[j]:
            uf.union(i, j)
            selected.append((i, j))
            degree[i] += 1
            degree[j] += 1
            if len(selected) == n - 1:
                break
    ends = [c for c in range(n) if degree[c] == 1]
    assert len(selected) == n - 1 and len(ends) == 2, "greedy edge selection did not produce a Hamiltonian path"
    selected.append((ends[0], ends[1]))
    return selected


def greedy_edge_tour(problem: TravelingSalesmanProblem) -> Tuple[Tour, float]:
    edges = greedy_edges(problem)
    # the path edges come first; the closing edge is the last one
    path = edges[:-1]
    adjacency = {c: [] for c in problem.cities()}
    for i, j in path:
        adjacency[i].append(j)
        adjacency[j].append(i)
    current = edges[-1][0]
    tour = [current]
    prev = None
    while len(tour) < problem.n:
        nxt = next(c for c in adjacency[current] if c != prev)
        tour.append(nxt)
        prev, current = current, nxt
    cost = sum(problem.distance[i, j] for i, j in edges)
    return tour, float(cost)


def random_insertion_tour(
    problem: TravelingSalesmanProblem, rng: Optional[random.Random] = None
) -> Tuple[Tour, float]:
    rng = rng or random.Random()
    d = problem.distance
    nodes = problem.cities()
    rng.shuffle(nodes)
    tour = nodes[:1]
    cost = 0.0
    for node in nodes[1:]:
        best_pos = 0
        best_inc = float("inf")
        for i in range(len(tour)):
            a = tour[i]
            b = tour[(i + 1) % len(tour)]
            inc = d[a, node] + d[node, b] - d[a, b]
            if inc < best_inc:
                best_inc = inc
                best_pos = i + 1
        tour.insert(best_pos, node)
        cost += best_inc
    return tour, float(cost)


def construct(
    problem: TravelingSalesmanProblem,
    strategy: str,
    config: Optional[ConstructionConfig] = None,
    rng: Optional[random.Random] = None,
) -> Tuple[Tour, float]:
    config = config or ConstructionConfig()
    rng = rng or random.Random()
    if strategy == "nearest_neighbor":
        start = config.start_city if config.start_city is not None else rng.randrange(problem.n)
        return nearest_neighbor_tour(problem, start)
    if strategy == "best_nearest_neighbor":
        return best_nearest_neighbor_tour(problem, config.sample_size, rng)
    if strategy == "greedy_edge":
        return greedy_edge_tour(problem)
    if strategy == "random_insertion":
        return random_insertion_tour(problem, rng)
    raise ValueError(f"unknown construction strategy {strategy!r}; choose from {CONSTRUCT_STRATEGIES}")


class ConstructiveSolver(Solver):
    name = "constructive"

    def __init__(self, strategy: str, config: Optional[ConstructionConfig] = None, rng: Optional[random.Random] = None):
        if strategy not in CONSTRUCT_STRATEGIES:
            raise ValueError(f"unknown construction strategy {strategy!r}; choose from {CONSTRUCT_STRATEGIES}")
        self.strategy = strategy
        self.config = config
        self.rng = rng or random.Random()
        self.name = strategy

    def solve(self, problem: TravelingSalesmanProblem) -> SolveResult:
        tour, cost = construct(problem, self.strategy, self.config, self.rng)
        return SolveResult(tour=tour, cost=cost, solver_name=self.name, trajectory=[cost])
