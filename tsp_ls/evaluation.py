import concurrent.futures
import math
import random
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from .problem import TravelingSalesmanProblem
from .solvers.base import SolveResult, Solver


@dataclass
class Fitness:
    length: float
    runtime: float
    gap: float
    solver_name: str


def evaluate_solver(
    solver: Solver,
    problem: TravelingSalesmanProblem,
    optimum: Optional[float] = None,
) -> Fitness:
    start = time.perf_counter()
    result = solver.solve(problem)
    runtime = time.perf_counter() - start
    length = problem.cost(result.tour)
    if optimum is None or math.isclose(optimum, 0.0):
        gap = float("inf")
    else:
        gap = (length - optimum) / optimum
    return Fitness(length=length, runtime=runtime, gap=gap, solver_name=result.solver_name)


def aggregate_fitness(fitnesses: List[Fitness]) -> Dict[str, float]:
    if not fitnesses:
        return {"length": float("inf"), "gap": float("inf"), "runtime": float("inf")}
    length = sum(f.length for f in fitnesses) / len(fitnesses)
    known = [f.gap for f in fitnesses if f.gap != float("inf")]
    gap = sum(known) / len(known) if known else float("inf")
    runtime = sum(f.runtime for f in fitnesses) / len(fitnesses)
    return {"length": length, "gap": gap, "runtime": runtime}


def run_restarts(
    make_solver: Callable[[random.Random], Solver],
    problem: TravelingSalesmanProblem,
    seeds: Sequence[int],
    max_workers: Optional[int] = None,
) -> SolveResult:
    """
    Independent restarts, one solver and one random stream per seed.

    Restarts share nothing but the read-only problem, so they run in a thread
    pool. The cheapest result wins; on ties the earliest seed is kept.
    """
    if not seeds:
        raise ValueError("at least one seed is required")

    def worker(seed: int) -> SolveResult:
        return make_solver(random.Random(seed)).solve(problem)

    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers or min(8, len(seeds))) as ex:
        results = list(ex.map(worker, seeds))
    return min(results, key=lambda r: r.cost)
