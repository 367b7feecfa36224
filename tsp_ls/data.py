from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

import numpy as np
import tsplib95
from tsplib95.exceptions import TsplibError

from .problem import TravelingSalesmanProblem, tour_cost


@dataclass
class Instance:
    name: str
    path: Optional[Path]
    problem: TravelingSalesmanProblem
    optimum: Optional[float]


def _solution_candidates(path: Path) -> Iterable[Path]:
    yield path.with_suffix(".opt.tour")
    for ext in (".opt.tour", ".opt", ".tour"):
        yield path.parent / "solutions" / f"{path.stem}{ext}"


def _read_dimension(path: Path) -> Optional[int]:
    try:
        with path.open("r") as f:
            for line in f:
                if "DIMENSION" in line.upper():
                    parts = line.replace(":", " ").split()
                    for token in parts:
                        if token.isdigit():
                            return int(token)
        return None
    except OSError:
        return None


def _load_optimum(problem: TravelingSalesmanProblem, path: Path) -> Optional[float]:
    index = {label: i for i, label in enumerate(problem.labels)}
    for candidate in _solution_candidates(path):
        if not candidate.exists():
            continue
        try:
            tour_file = tsplib95.parse(candidate.read_text())
            tour = [index[node] for node in tour_file.tours[0]]
        except (TsplibError, IndexError, KeyError):
            # not a usable tour for this instance; try the next candidate
            continue
        if problem.is_valid(tour):
            return tour_cost(problem, tour)
    return None


def load_problem(path: Path) -> TravelingSalesmanProblem:
    """Read a TSPLIB file, applying its own rounding rules to the distances."""
    raw = tsplib95.load(path)
    nodes = list(raw.get_nodes())
    n = len(nodes)
    mat = np.zeros((n, n))
    for i in range(n):
        for j in range(i + 1, n):
            mat[i, j] = mat[j, i] = raw.get_weight(nodes[i], nodes[j])
    coords = None
    if raw.node_coords:
        coords = [raw.node_coords[node] for node in nodes]
    elif raw.display_data:
        coords = [raw.display_data[node] for node in nodes]
    return TravelingSalesmanProblem(mat, coordinates=coords, labels=nodes, name=raw.name or path.stem)


def load_instance(path: Path) -> Instance:
    path = Path(path)
    problem = load_problem(path)
    optimum = _load_optimum(problem, path)
    return Instance(name=problem.name, path=path, problem=problem, optimum=optimum)


def load_tsplib_instances(
    root: Path, max_nodes: Optional[int] = None, max_instances: Optional[int] = None
) -> List[Instance]:
    tsp_files = sorted(Path(root).glob("*.tsp"))
    instances: List[Instance] = []
    for p in tsp_files:
        if max_nodes is not None:
            dim = _read_dimension(p)
            if dim is not None and dim > max_nodes:
                continue
        instances.append(load_instance(p))
        if max_instances is not None and len(instances) >= max_instances:
            break
    return instances


def random_instance(n: int, seed: Optional[int] = None, name: Optional[str] = None) -> Instance:
    """``n`` cities drawn uniformly from the unit square."""
    rng = np.random.default_rng(seed)
    coords = rng.random((n, 2))
    problem = TravelingSalesmanProblem.from_coordinates(coords, name=name or f"random{n}")
    return Instance(name=problem.name, path=None, problem=problem, optimum=None)
