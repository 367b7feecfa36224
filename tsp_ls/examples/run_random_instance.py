import random

from tsp_ls.data import random_instance
from tsp_ls.solvers import AnnealingConfig, TabuConfig, construct, hill_climbing, simulated_annealing, tabu_search


def main():
    inst = random_instance(60, seed=7)
    problem = inst.problem
    rng = random.Random(7)
    tour, cost = construct(problem, "greedy_edge")
    print(f"greedy edge: cost={cost:.3f}")
    runs = [
        ("hill climbing", hill_climbing(problem, tour)),
        ("simulated annealing", simulated_annealing(problem, tour, AnnealingConfig(t_max=1.0, t_min=1e-3, cooling_rate=0.9), rng)),
        ("tabu search", tabu_search(problem, tour, TabuConfig(tabu_tenure=7, max_iterations=200))),
    ]
    for name, result in runs:
        print(f"{name}: cost={result.cost:.3f} after {len(result.trajectory) - 1} steps")


if __name__ == "__main__":
    main()
