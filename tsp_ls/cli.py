import argparse
import json
import math
import random
import time
from pathlib import Path
from typing import List, Optional

from tsp_ls.data import Instance, load_instance, load_tsplib_instances, random_instance
from tsp_ls.evaluation import Fitness, aggregate_fitness, evaluate_solver, run_restarts
from tsp_ls.solvers import (
    CONSTRUCT_STRATEGIES,
    IMPROVE_STRATEGIES,
    AnnealingConfig,
    CompositionSolver,
    ConstructionConfig,
    HillClimbingConfig,
    SolveResult,
    TabuConfig,
)


def log(msg: str) -> None:
    ts = time.strftime("%H:%M:%S")
    print(f"[{ts}] {msg}", flush=True)


def _improve_config(args, strategy: str):
    if strategy == "hill_climbing":
        return HillClimbingConfig(max_iterations=args.max_iterations)
    if strategy == "simulated_annealing":
        return AnnealingConfig(
            t_max=args.t_max,
            t_min=args.t_min,
            cooling_rate=args.cooling_rate,
            epoch_length=args.epoch_length,
        )
    if strategy == "tabu_search":
        max_iterations = 100 if args.max_iterations is None else args.max_iterations
        return TabuConfig(tabu_tenure=args.tabu_tenure, max_iterations=max_iterations)
    return None


def _make_solver(args, construct: str, improve: str):
    construct_config = ConstructionConfig(start_city=args.start_city, sample_size=args.sample_size)
    improve_config = _improve_config(args, improve)

    def factory(rng):
        return CompositionSolver(construct, improve, construct_config, improve_config, rng=rng)

    return factory


def _load_instances(args) -> List[Instance]:
    if args.random:
        return [random_instance(args.random, seed=args.seed)]
    path = Path(args.path)
    if path.is_dir():
        instances = load_tsplib_instances(path, max_nodes=args.max_nodes)
        if not instances:
            raise RuntimeError(f"No TSPLIB instances found in {path}. Place .tsp (and optional .opt.tour) files there.")
        return instances
    if not path.exists():
        raise FileNotFoundError(f"{path} does not exist")
    return [load_instance(path)]


def _write_result(path: Path, inst: Instance, result: SolveResult) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "instance": inst.name,
        "solver": result.solver_name,
        "cost": result.cost,
        "optimum": inst.optimum,
        "tour": inst.problem.labelled(result.tour),
        "trajectory": result.trajectory,
    }
    path.write_text(json.dumps(payload, indent=2, default=str))


def _format_gap(gap: float) -> str:
    return "    n/a" if math.isinf(gap) else f"{100 * gap:6.2f}%"


def solve(args) -> None:
    t0 = time.perf_counter()
    instances = _load_instances(args)
    log(f"loaded {len(instances)} instance(s) in {time.perf_counter() - t0:.2f}s")
    factory = _make_solver(args, args.construct, args.improve)
    seeds = [args.seed + k for k in range(args.restarts)]
    for inst in instances:
        start = time.perf_counter()
        result = run_restarts(factory, inst.problem, seeds)
        result.optimum = inst.optimum
        elapsed = time.perf_counter() - start
        gap = "" if inst.optimum is None else f" gap={_format_gap(result.gap).strip()}"
        log(
            f"{inst.name} (n={inst.problem.n}): {result.solver_name} cost={result.cost:.2f}{gap} "
            f"steps={len(result.trajectory) - 1} in {elapsed:.2f}s"
        )
        if args.output:
            out = Path(args.output)
            if len(instances) > 1:
                out = out.with_name(f"{out.stem}_{inst.name}{out.suffix}")
            _write_result(out, inst, result)
            log(f"wrote {out}")


def bench(args) -> None:
    instances = _load_instances(args)
    names = ", ".join(inst.name for inst in instances)
    log(f"using instances: {names} (count={len(instances)})")
    for construct in CONSTRUCT_STRATEGIES:
        for improve in IMPROVE_STRATEGIES:
            lines: List[str] = []
            fitnesses: List[Fitness] = []
            for idx, inst in enumerate(instances):
                solver = _make_solver(args, construct, improve)(random.Random(args.seed + idx))
                fitness = evaluate_solver(solver, inst.problem, inst.optimum)
                fitnesses.append(fitness)
                lines.append(f"[{inst.name}] cost={fitness.length:10.2f} gap={_format_gap(fitness.gap)}")
            agg = aggregate_fitness(fitnesses)
            summary = f"mean cost={agg['length']:10.2f} gap={_format_gap(agg['gap'])} t={agg['runtime']:6.2f}s"
            print(f"{construct + '+' + improve:42s} {summary} | " + " | ".join(lines), flush=True)


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("path", nargs="?", default="data/tsplib", help="TSPLIB .tsp file or a directory of them")
    p.add_argument("--random", type=int, default=None, metavar="N", help="use N random cities instead of a file")
    p.add_argument("--max-nodes", type=int, default=None)
    p.add_argument("--seed", type=int, default=123)
    p.add_argument("--start-city", type=int, default=None)
    p.add_argument("--sample-size", type=int, default=None)
    p.add_argument("--max-iterations", type=int, default=None)
    p.add_argument("--t-max", type=float, default=1000.0)
    p.add_argument("--t-min", type=float, default=1.0)
    p.add_argument("--cooling-rate", type=float, default=0.95)
    p.add_argument("--epoch-length", type=int, default=100)
    p.add_argument("--tabu-tenure", type=int, default=5)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="TSP construction and local search")
    subparsers = parser.add_subparsers(dest="command", required=True)

    solve_parser = subparsers.add_parser("solve", help="Construct and improve a tour")
    _add_common(solve_parser)
    solve_parser.add_argument("--construct", choices=CONSTRUCT_STRATEGIES, default="greedy_edge")
    solve_parser.add_argument("--improve", choices=IMPROVE_STRATEGIES, default="hill_climbing")
    solve_parser.add_argument("--restarts", type=int, default=1)
    solve_parser.add_argument("--output", default=None, help="write the best tour as JSON")
    solve_parser.set_defaults(func=solve)

    bench_parser = subparsers.add_parser("bench", help="Compare every construct+improve combination")
    _add_common(bench_parser)
    bench_parser.set_defaults(func=bench)
    return parser


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
