"""
Incremental evaluation of swap and 2-opt (flip) moves.

Moves are addressed by tour *positions*, not city ids. Every ``delta_*``
function satisfies ``cost(tour after move) == cost(tour before) + delta``
and only looks at the handful of edges the move touches.
"""

from typing import Iterator, Tuple

import numpy as np

from .problem import TravelingSalesmanProblem, Tour


def delta_swap_cost(problem: TravelingSalesmanProblem, tour: Tour, p: int, q: int) -> float:
    if p == q:
        return 0.0
    d = problem.distance
    n = len(tour)
    if (q + 1) % n == p:
        p, q = q, p
    if (p + 1) % n == q:
        # q directly follows p: prev -> a -> b -> nxt becomes prev -> b -> a -> nxt
        prev, a, b, nxt = tour[p - 1], tour[p], tour[q], tour[(q + 1) % n]
        return float(d[prev, b] + d[a, nxt] - d[prev, a] - d[b, nxt])
    a, b = tour[p], tour[q]
    a_prev, a_next = tour[p - 1], tour[(p + 1) % n]
    b_prev, b_next = tour[q - 1], tour[(q + 1) % n]
    removed = d[a_prev, a] + d[a, a_next] + d[b_prev, b] + d[b, b_next]
    added = d[a_prev, b] + d[b, a_next] + d[b_prev, a] + d[a, b_next]
    return float(added - removed)


def apply_swap(tour: Tour, p: int, q: int) -> Tour:
    tour[p], tour[q] = tour[q], tour[p]
    return tour


def delta_flip_cost(problem: TravelingSalesmanProblem, tour: Tour, p: int, q: int) -> float:
    i, j = (p, q) if p <= q else (q, p)
    n = len(tour)
    if i == 0 and j == n - 1:
        # reversing the whole cycle leaves every edge in place
        return 0.0
    d = problem.distance
    before, first, last, after = tour[i - 1], tour[i], tour[j], tour[(j + 1) % n]
    return float(d[before, last] + d[first, after] - d[before, first] - d[last, after])


def apply_flip(tour: Tour, p: int, q: int) -> Tour:
    i, j = (p, q) if p <= q else (q, p)
    tour[i : j + 1] = tour[i : j + 1][::-1]
    return tour


def flip_neighborhood(n: int) -> Iterator[Tuple[int, int]]:
    """
    All 2-opt moves ``(i, j)`` with ``1 <= i < j <= n - 1``, in scan order.

    Position 0 is kept fixed: reversing a segment that contains it gives the
    same cycle as reversing the complementary segment, which is in the set.
    """
    for i in range(1, n - 1):
        for j in range(i + 1, n):
            yield i, j


def neighborhood_mask(n: int) -> np.ndarray:
    mask = np.triu(np.ones((n, n), dtype=bool), k=1)
    mask[0, :] = False
    return mask


def flip_delta_matrix(problem: TravelingSalesmanProblem, tour: Tour) -> np.ndarray:
    """
    Deltas of every move in :func:`flip_neighborhood` at once.

    Entry ``[i, j]`` equals ``delta_flip_cost(problem, tour, i, j)`` for
    neighborhood pairs and ``inf`` elsewhere, so a row-major ``argmin``
    picks the first minimal move in scan order.
    """
    d = problem.distance
    t = np.asarray(tour, dtype=np.intp)
    n = t.shape[0]
    before = np.roll(t, 1)
    after = np.roll(t, -1)
    added = d[before[:, None], t[None, :]] + d[t[:, None], after[None, :]]
    removed = d[before, t][:, None] + d[t, after][None, :]
    deltas = added - removed
    deltas[~neighborhood_mask(n)] = np.inf
    return deltas
