from typing import Callable, Hashable, List, Optional, Sequence

import networkx as nx
import numpy as np


Tour = List[int]


class TravelingSalesmanProblem:
    """
    A symmetric TSP instance: a dense distance matrix plus optional coordinates.

    Cities are identified by their index ``0..n-1``. ``labels`` keeps the
    original node names (for instance the 1-based TSPLIB ids) so tours can be
    reported in the caller's terms. The matrix is made read-only on
    construction; none of the heuristics mutate it.
    """

    def __init__(
        self,
        distance,
        coordinates=None,
        labels: Optional[Sequence[Hashable]] = None,
        name: str = "tsp",
    ):
        mat = np.array(distance, dtype=float)
        if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
            raise ValueError(f"distance matrix must be square, got shape {mat.shape}")
        n = mat.shape[0]
        if n < 3:
            raise ValueError(f"a TSP needs at least 3 cities, got {n}")
        if not np.all(np.isfinite(mat)):
            raise ValueError("distance matrix contains non-finite values")
        if np.any(mat < 0):
            raise ValueError("distances must be non-negative")
        if not np.allclose(np.diag(mat), 0.0):
            raise ValueError("distance from a city to itself must be zero")
        if not np.allclose(mat, mat.T):
            raise ValueError("distance matrix must be symmetric")
        mat.setflags(write=False)
        self.distance = mat
        if coordinates is not None:
            coordinates = np.array(coordinates, dtype=float)
            if coordinates.shape[0] != n:
                raise ValueError("one coordinate row per city is required")
            coordinates.setflags(write=False)
        self.coordinates = coordinates
        self.labels = list(labels) if labels is not None else list(range(n))
        if len(self.labels) != n:
            raise ValueError("one label per city is required")
        self.name = name

    @classmethod
    def from_coordinates(cls, coordinates, name: str = "tsp") -> "TravelingSalesmanProblem":
        coords = np.asarray(coordinates, dtype=float)
        if coords.ndim == 1:
            coords = coords[:, None]
        diff = coords[:, None, :] - coords[None, :, :]
        return cls(np.sqrt((diff ** 2).sum(axis=-1)), coordinates=coords, name=name)

    @classmethod
    def from_distance_function(
        cls, points: Sequence, metric: Callable[[object, object], float], name: str = "tsp"
    ) -> "TravelingSalesmanProblem":
        n = len(points)
        mat = np.zeros((n, n))
        for i in range(n):
            for j in range(i + 1, n):
                mat[i, j] = mat[j, i] = metric(points[i], points[j])
        return cls(mat, name=name)

    @classmethod
    def from_graph(cls, graph: nx.Graph, coordinates=None, name: Optional[str] = None) -> "TravelingSalesmanProblem":
        nodes = list(graph.nodes())
        idx_map = {node: i for i, node in enumerate(nodes)}
        mat = np.zeros((len(nodes), len(nodes)))
        for u, v, w in graph.edges(data="weight", default=1.0):
            if u == v:
                continue
            mat[idx_map[u], idx_map[v]] = w
            mat[idx_map[v], idx_map[u]] = w
        expected = len(nodes) * (len(nodes) - 1) // 2
        if sum(1 for u, v in graph.edges() if u != v) != expected:
            raise ValueError("graph must be complete")
        return cls(mat, coordinates=coordinates, labels=nodes, name=name or graph.name or "tsp")

    def to_graph(self) -> nx.Graph:
        graph = nx.complete_graph(self.n)
        for u, v in graph.edges():
            graph[u][v]["weight"] = float(self.distance[u, v])
        if self.coordinates is not None:
            for i in range(self.n):
                graph.nodes[i]["pos"] = tuple(self.coordinates[i])
        graph.name = self.name
        return graph

    def __len__(self) -> int:
        return self.distance.shape[0]

    @property
    def n(self) -> int:
        return self.distance.shape[0]

    def cities(self) -> List[int]:
        return list(range(self.n))

    def dist(self, i: int, j: int) -> float:
        """Distance (or cost) of going from city ``i`` to city ``j``."""
        return self.distance[i, j]

    def is_valid(self, tour: Sequence[int]) -> bool:
        return (
            len(tour) == self.n
            and all(isinstance(c, (int, np.integer)) for c in tour)
            and set(tour) == set(range(self.n))
        )

    def check_tour(self, tour: Sequence[int]) -> None:
        if not self.is_valid(tour):
            raise ValueError(f"invalid tour provided: expected a permutation of {self.n} cities, got {list(tour)!r}")

    def cost(self, tour: Sequence[int]) -> float:
        self.check_tour(tour)
        return tour_cost(self, tour)

    def labelled(self, tour: Sequence[int]) -> list:
        return [self.labels[c] for c in tour]

    def __repr__(self) -> str:
        return f"TravelingSalesmanProblem(name={self.name!r}, n={self.n})"


def tour_cost(problem: TravelingSalesmanProblem, tour: Sequence[int]) -> float:
    dist = 0.0
    n = len(tour)
    for i in range(n):
        a = tour[i]
        b = tour[(i + 1) % n]
        dist += problem.distance[a, b]
    return float(dist)
