import json

import pytest

from tsp_ls.cli import main


def test_solve_random_instance(tmp_path, capsys):
    out = tmp_path / "tour.json"
    main(
        [
            "solve",
            "--random", "15",
            "--construct", "nearest_neighbor",
            "--improve", "tabu_search",
            "--tabu-tenure", "3",
            "--max-iterations", "20",
            "--restarts", "2",
            "--output", str(out),
        ]
    )
    payload = json.loads(out.read_text())
    assert sorted(payload["tour"]) == list(range(15))
    assert payload["solver"] == "nearest_neighbor+tabu_search"
    assert len(payload["trajectory"]) == 21
    assert "cost=" in capsys.readouterr().out


def test_bench_random_instance(capsys):
    main(
        [
            "bench",
            "--random", "8",
            "--t-max", "2",
            "--t-min", "1",
            "--epoch-length", "5",
            "--tabu-tenure", "2",
            "--max-iterations", "5",
        ]
    )
    prefixes = ("nearest", "best", "greedy", "random")
    lines = [line for line in capsys.readouterr().out.splitlines() if line.startswith(prefixes)]
    assert len(lines) == 16
    assert all("mean cost=" in line for line in lines)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        main(["solve", str(tmp_path / "nope.tsp")])


def test_rejects_bad_schedule():
    with pytest.raises(ValueError):
        main(["solve", "--random", "10", "--improve", "simulated_annealing", "--cooling-rate", "1.5"])


def test_rejects_zero_tabu_iterations():
    with pytest.raises(ValueError, match="max_iterations"):
        main(["solve", "--random", "8", "--improve", "tabu_search", "--tabu-tenure", "2", "--max-iterations", "0"])
