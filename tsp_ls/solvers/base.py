import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..problem import TravelingSalesmanProblem, Tour


class Solver(ABC):
    name: str = "base"

    @abstractmethod
    def solve(self, problem: TravelingSalesmanProblem) -> "SolveResult":
        raise NotImplementedError


@dataclass
class LocalSearchResult:
    tour: Tour
    cost: float
    # trajectory[0] is the starting cost
    trajectory: List[float] = field(default_factory=list)
    # (iteration, p, q) of every applied move
    moves: List[Tuple[int, int, int]] = field(default_factory=list)


@dataclass
class SolveResult:
    tour: Tour
    cost: float
    solver_name: str
    trajectory: List[float] = field(default_factory=list)
    optimum: Optional[float] = None

    @property
    def gap(self) -> float:
        if self.optimum is None or math.isclose(self.optimum, 0.0):
            return float("inf")
        return (self.cost - self.optimum) / self.optimum
