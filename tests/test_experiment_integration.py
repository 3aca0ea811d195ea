import json
from pathlib import Path

from experiments import Experiment, RoutingConfiguration
from waypoint_routing import GridConfig


def _corridor_config():
    blocked = frozenset({(1, c) for c in range(5) if c != 2})
    return GridConfig(n=5, blocked=blocked, start=(0, 0), end=(0, 4), required=[(1, 2)])


def test_experiment_run_all_creates_outputs(tmp_path: Path):
    exp = Experiment(name="tiny_exp", config=_corridor_config(), output_dir=tmp_path)
    exp.add_configuration(RoutingConfiguration(name="in_order"))
    exp.add_configuration(
        RoutingConfiguration(name="state_search", order_policy="optimize", revisit_policy=False)
    )

    results = exp.run_all(save_images=True)
    assert [r.config_name for r in results] == ["in_order", "state_search"]
    ok, failed = results
    assert ok.status == "ok" and ok.metrics["length"] == 6
    assert ok.strategy == "in_order"
    assert failed.status == "no_route" and failed.path == []
    assert failed.strategy == "state_search"

    manifest = tmp_path / "tiny_exp" / "metrics_log.csv"
    metrics_dir = tmp_path / "tiny_exp" / "metrics"
    solutions_dir = tmp_path / "tiny_exp" / "solutions"
    images_dir = tmp_path / "tiny_exp" / "images"

    assert manifest.exists()
    assert len(list(metrics_dir.glob("*.json"))) == 2
    assert len(list(images_dir.glob("*.png"))) == 2
    solution = json.loads(ok.solution_path.read_text(encoding="utf-8"))
    assert solution["path"][0] == [0, 0] and solution["path"][-1] == [0, 4]
    assert solution["waypoint_order"] == [[1, 2]]

    df = Experiment.load_all_metrics(tmp_path)
    assert len(df) == 2
    assert set(df["config_name"]) == {"in_order", "state_search"}
    assert set(df["status"]) == {"ok", "no_route"}


def test_experiment_reload_from_directory(tmp_path: Path):
    exp = Experiment(name="reload_exp", config=_corridor_config(), output_dir=tmp_path)
    exp.add_configuration(
        RoutingConfiguration(name="held_karp", order_policy="optimize", engine_kwargs={"max_required": 4})
    )

    loaded = Experiment.load_from_directory(tmp_path / "reload_exp")
    assert loaded.config.blocked == exp.config.blocked
    assert loaded.config.required == ((1, 2),)
    result = loaded.run_configuration("held_karp")
    assert result.status == "ok"
    assert result.engine_state["max_required"] == 4


def test_custom_runner_is_used(tmp_path: Path):
    def runner(grid, config):
        return [grid.start, (0, 1), (0, 2), (1, 2), (0, 2), (0, 3), grid.end]

    exp = Experiment(name="runner_exp", config=_corridor_config(), output_dir=tmp_path)
    exp.add_configuration(RoutingConfiguration(name="manual", runner=runner))
    result = exp.run_configuration("manual")
    assert result.strategy == "custom"
    assert result.metrics["length"] == 6
    assert result.metrics["revisits"] == 1


def test_generate_random_case_is_seeded():
    a = Experiment.generate_random_case(8, 3, 0.25, seed=5)
    b = Experiment.generate_random_case(8, 3, 0.25, seed=5)
    assert a == b
    assert len(a.required) == 3
    assert a.start not in a.blocked and a.end not in a.blocked
