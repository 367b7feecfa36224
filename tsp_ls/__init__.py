"""
Tour construction and local-search heuristics for the symmetric TSP.
"""

from .problem import TravelingSalesmanProblem, Tour, tour_cost

__all__ = [
    "TravelingSalesmanProblem",
    "Tour",
    "tour_cost",
    "data",
    "evaluation",
    "moves",
    "solvers",
]
