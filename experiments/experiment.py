"""
Experiment utilities for running waypoint routing scenarios.

The ``Experiment`` class runs routing policies from ``waypoint_routing`` over a
single grid, records metrics, and optionally saves visualization artefacts.
"""

from __future__ import annotations

import csv
import json
import logging
import random
import time
from dataclasses import dataclass, field
from datetime import datetime, UTC
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional
from uuid import uuid4

import pandas as pd

from waypoint_routing import GridConfig, OrderPolicy, RevisitPolicy, RoutingEngine, RoutingError
from waypoint_routing.metrics import path_metrics, waypoint_order
from waypoint_routing.snapshot import export_snapshot, import_snapshot
from waypoint_routing.visualize import visualize

logger = logging.getLogger(__name__)

PathType = List[tuple[int, int]]
RunnerType = Callable[[GridConfig, "RoutingConfiguration"], PathType]


@dataclass
class RoutingConfiguration:
    """Configuration that describes how a routing run should be executed."""

    name: str
    order_policy: str = OrderPolicy.AS_SPECIFIED.value
    revisit_policy: str = RevisitPolicy.ALLOWED.value
    engine_kwargs: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    runner: Optional[RunnerType] = None

    def __post_init__(self):
        self.order_policy = OrderPolicy(self.order_policy).value
        if isinstance(self.revisit_policy, bool):
            self.revisit_policy = RevisitPolicy.ALLOWED if self.revisit_policy else RevisitPolicy.FORBIDDEN
        self.revisit_policy = RevisitPolicy(self.revisit_policy).value

    def apply(self, config: GridConfig) -> GridConfig:
        return config.with_policies(self.order_policy, self.revisit_policy)


@dataclass
class RunResult:
    """Summary of a single routing execution."""

    run_id: str
    config_name: str
    strategy: str
    status: str
    timestamp: str
    metrics: Dict[str, Any]
    metadata: Mapping[str, Any]
    config_snapshot: Mapping[str, Any]
    engine_state: Mapping[str, Any]
    path: PathType
    metrics_path: Path
    solution_path: Path
    image_path: Optional[Path]
    manifest_path: Path
    snapshot_path: Path


class Experiment:
    """Orchestrates routing experiments and manages outputs on disk."""

    def __init__(
        self,
        name: str,
        config: GridConfig,
        output_dir: Path | str,
    ) -> None:
        self.name = name
        self.config = config
        self.output_root = Path(output_dir).expanduser()
        self.experiment_dir = self.output_root / self.name
        self.metrics_dir = self.experiment_dir / "metrics"
        self.images_dir = self.experiment_dir / "images"
        self.solutions_dir = self.experiment_dir / "solutions"
        self.snapshot_path = self.experiment_dir / "snapshot.json"
        self.definition_path = self.experiment_dir / "experiment.json"
        self.manifest_path = self.experiment_dir / "metrics_log.csv"
        self._ensure_directories()

        self._configurations: Dict[str, RoutingConfiguration] = {}
        self.history: Dict[str, RunResult] = {}
        self._manifest_fieldnames: Optional[List[str]] = None
        self._write_snapshot()
        self._write_experiment_definition()

    def add_configuration(self, config: RoutingConfiguration) -> None:
        """Register a routing configuration by name."""
        if config.name in self._configurations:
            raise ValueError(f"Configuration {config.name!r} already exists.")
        self._configurations[config.name] = config
        logger.debug("Configuration %s registered.", config.name)
        self._write_experiment_definition()

    def add_configurations(self, configs: Iterable[RoutingConfiguration]) -> None:
        """Register multiple configurations in one call."""
        for config in configs:
            self.add_configuration(config)

    def remove_configuration(self, name: str) -> None:
        """Remove a previously registered configuration."""
        self._configurations.pop(name, None)
        self.history.pop(name, None)
        logger.debug("Configuration %s removed.", name)
        self._write_experiment_definition()

    def run_configuration(
        self,
        name: str,
        *,
        save_image: bool = False,
        show_image: bool = False,
    ) -> RunResult:
        """Execute a single configuration; routing failures are recorded, not raised."""
        config = self._configurations.get(name)
        if config is None:
            raise KeyError(f"Configuration {name!r} is not registered.")

        grid = config.apply(self.config)
        logger.info("Running configuration %s (%s, %s).", name, config.order_policy, config.revisit_policy)
        path, strategy, status, engine_state, elapsed = self._execute(config, grid)
        metrics = self._compute_metrics(grid, path, status, elapsed)
        timestamp = self._timestamp()
        run_id = self._generate_run_id()
        config_snapshot = self._config_snapshot(config)

        metrics_path = self._write_metrics(config_snapshot, metrics, timestamp, run_id, strategy, engine_state)
        solution_path = self._write_solution(config_snapshot, grid, path, timestamp, run_id, strategy, status)

        image_path: Optional[Path] = None
        if save_image:
            image_path = self.images_dir / f"{config.name}_{timestamp}_{run_id}.png"
            visualize(grid, path, show=show_image, save_path=str(image_path), title=f"{config.name}: {status}")
        elif show_image:
            visualize(grid, path, show=True, save_path=None, title=f"{config.name}: {status}")

        self._append_manifest(
            run_id=run_id,
            config_snapshot=config_snapshot,
            engine_state=engine_state,
            strategy=strategy,
            timestamp=timestamp,
            metrics=metrics,
            metrics_path=metrics_path,
            solution_path=solution_path,
            image_path=image_path,
        )

        result = RunResult(
            run_id=run_id,
            config_name=config.name,
            strategy=strategy,
            status=status,
            timestamp=timestamp,
            metrics=metrics,
            metadata=config.metadata,
            config_snapshot=config_snapshot,
            engine_state=engine_state,
            path=path,
            metrics_path=metrics_path,
            solution_path=solution_path,
            image_path=image_path,
            manifest_path=self.manifest_path,
            snapshot_path=self.snapshot_path,
        )
        self.history[config.name] = result
        logger.info("Configuration %s completed with status %s.", name, status)
        return result

    def run_all(
        self,
        config_names: Iterable[str] | None = None,
        *,
        save_images: bool = False,
        show_images: bool = False,
    ) -> List[RunResult]:
        """Execute multiple configurations, returning the collected results."""
        names = list(config_names) if config_names is not None else list(self._configurations.keys())
        results: List[RunResult] = []
        for name in names:
            result = self.run_configuration(name, save_image=save_images, show_image=show_images)
            results.append(result)
        return results

    def _execute(
        self,
        config: RoutingConfiguration,
        grid: GridConfig,
    ) -> tuple[PathType, str, str, Dict[str, Any], float]:
        engine: Optional[RoutingEngine] = None
        if config.runner is not None:
            strategy = "custom"
            engine_state: Dict[str, Any] = dict(config.engine_kwargs)
        else:
            engine = RoutingEngine(**config.engine_kwargs)
            strategy = engine.strategy_for(grid)
            engine_state = engine.get_parameters()

        started = time.perf_counter()
        try:
            if engine is None:
                path = list(config.runner(grid, config))
            else:
                path = engine.route(grid)
            status = "ok"
        except RoutingError as exc:
            path = []
            status = exc.kind
        elapsed = time.perf_counter() - started
        return path, strategy, status, engine_state, elapsed

    @staticmethod
    def _compute_metrics(grid: GridConfig, path: PathType, status: str, elapsed: float) -> Dict[str, Any]:
        metrics = path_metrics(grid, path)
        metrics.update({
            "status": status,
            "required_count": len(grid.required),
            "blocked_count": len(grid.blocked),
            "time_sec": round(elapsed, 6),
        })
        return metrics

    def _write_metrics(
        self,
        config_snapshot: Mapping[str, Any],
        metrics: Dict[str, Any],
        timestamp: str,
        run_id: str,
        strategy: str,
        engine_state: Mapping[str, Any],
    ) -> Path:
        payload = {
            "experiment": self.name,
            "run_id": run_id,
            "name": config_snapshot["name"],
            "strategy": strategy,
            "config": config_snapshot,
            "engine_state": engine_state,
            "timestamp": timestamp,
            "metrics": metrics,
        }
        path = self.metrics_dir / f"{config_snapshot['name']}_{timestamp}_{run_id}.json"
        with path.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2)
        return path

    def _write_solution(
        self,
        config_snapshot: Mapping[str, Any],
        grid: GridConfig,
        path: PathType,
        timestamp: str,
        run_id: str,
        strategy: str,
        status: str,
    ) -> Path:
        out = self.solutions_dir / f"{config_snapshot['name']}_{timestamp}_{run_id}.json"
        payload = {
            "experiment": self.name,
            "run_id": run_id,
            "config": config_snapshot,
            "strategy": strategy,
            "status": status,
            "timestamp": timestamp,
            "path": [[int(r), int(c)] for r, c in path],
            "waypoint_order": [[int(r), int(c)] for r, c in waypoint_order(grid, path)],
        }
        with out.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2)
        return out

    def _ensure_directories(self) -> None:
        self.experiment_dir.mkdir(parents=True, exist_ok=True)
        for directory in (self.metrics_dir, self.images_dir, self.solutions_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def _append_manifest(
        self,
        *,
        run_id: str,
        config_snapshot: Mapping[str, Any],
        engine_state: Mapping[str, Any],
        strategy: str,
        timestamp: str,
        metrics: Mapping[str, Any],
        metrics_path: Path,
        solution_path: Path,
        image_path: Optional[Path],
    ) -> None:
        config_json = json.dumps(config_snapshot, ensure_ascii=False)
        engine_state_json = json.dumps(engine_state, ensure_ascii=False)
        fieldnames = self._manifest_fieldnames or self._build_manifest_fieldnames(metrics)
        self._ensure_manifest_header(fieldnames)
        row: Dict[str, Any] = {
            "experiment_name": self.name,
            "config_name": config_snapshot["name"],
            "run_id": run_id,
            "timestamp": timestamp,
            "order_policy": config_snapshot["order_policy"],
            "revisit_policy": config_snapshot["revisit_policy"],
            "strategy": strategy,
            "metrics_path": str(metrics_path),
            "solution_path": str(solution_path),
            "image_path": str(image_path) if image_path else "",
            "config_json": config_json,
            "engine_state_json": engine_state_json,
        }
        row.update(metrics)
        with self.manifest_path.open("a", newline="", encoding="utf-8") as fh:
            writer = csv.DictWriter(fh, fieldnames=fieldnames, extrasaction="ignore")
            writer.writerow(row)

    def _write_experiment_definition(self) -> None:
        self.definition_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "name": self.name,
            "output_dir": str(self.output_root),
            "snapshot_file": self.snapshot_path.name,
            "configs": [self._config_snapshot(cfg) for cfg in self._configurations.values()],
        }
        with self.definition_path.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2)

    def _build_manifest_fieldnames(self, metrics: Mapping[str, Any]) -> List[str]:
        base = [
            "experiment_name",
            "config_name",
            "run_id",
            "timestamp",
            "order_policy",
            "revisit_policy",
            "strategy",
            "metrics_path",
            "solution_path",
            "image_path",
            "config_json",
            "engine_state_json",
        ]
        fieldnames = base + sorted(metrics.keys())
        self._manifest_fieldnames = fieldnames
        return fieldnames

    def _ensure_manifest_header(self, fieldnames: List[str]) -> None:
        if not self.manifest_path.exists():
            self.manifest_path.parent.mkdir(parents=True, exist_ok=True)
            with self.manifest_path.open("w", newline="", encoding="utf-8") as fh:
                writer = csv.DictWriter(fh, fieldnames=fieldnames)
                writer.writeheader()

    @staticmethod
    def _config_snapshot(config: RoutingConfiguration) -> Dict[str, Any]:
        return {
            "name": config.name,
            "order_policy": config.order_policy,
            "revisit_policy": config.revisit_policy,
            "engine_kwargs": dict(config.engine_kwargs),
            "metadata": dict(config.metadata),
        }

    def _write_snapshot(self) -> None:
        if self.snapshot_path.exists():
            return
        with self.snapshot_path.open("w", encoding="utf-8") as fh:
            json.dump(export_snapshot(self.config), fh, indent=2)

    @classmethod
    def load_from_directory(cls, directory: Path | str) -> "Experiment":
        directory_path = Path(directory).expanduser()
        definition_file = directory_path / "experiment.json"
        if not definition_file.exists():
            raise FileNotFoundError(f"Experiment definition not found at {definition_file}")

        with definition_file.open("r", encoding="utf-8") as fh:
            definition = json.load(fh)

        name = definition.get("name") or directory_path.name
        snapshot_file = definition.get("snapshot_file", "snapshot.json")
        snapshot_path = directory_path / snapshot_file
        if not snapshot_path.exists():
            raise FileNotFoundError(f"Grid snapshot not found at {snapshot_path}")

        with snapshot_path.open("r", encoding="utf-8") as fh:
            config = import_snapshot(json.load(fh))

        experiment = cls(
            name=name,
            config=config,
            output_dir=directory_path.parent,
        )

        # Replace configurations using saved definitions
        experiment._configurations.clear()
        for cfg_data in definition.get("configs", []):
            routing_config = RoutingConfiguration(
                name=cfg_data["name"],
                order_policy=cfg_data.get("order_policy", OrderPolicy.AS_SPECIFIED.value),
                revisit_policy=cfg_data.get("revisit_policy", RevisitPolicy.ALLOWED.value),
                engine_kwargs=dict(cfg_data.get("engine_kwargs", {})),
                metadata=dict(cfg_data.get("metadata", {})),
            )
            experiment._configurations[routing_config.name] = routing_config

        experiment._write_experiment_definition()
        return experiment

    @staticmethod
    def _generate_run_id() -> str:
        return uuid4().hex[:12]

    @staticmethod
    def _timestamp() -> str:
        # Use timezone-aware UTC to avoid deprecated utcnow()
        return datetime.now(UTC).strftime("%Y%m%d_%H%M%S")

    @staticmethod
    def generate_random_case(
        n: int,
        required_count: int,
        blocked_ratio: float = 0.2,
        *,
        seed: int | None = None,
    ) -> GridConfig:
        """
        Build a random grid with start, end and required cells on distinct free cells.

        Roughly ``blocked_ratio`` of the remaining cells are blocked. Connectivity
        is not guaranteed; unreachable markers show up as routing failures.
        """
        if n <= 1:
            raise ValueError("n must be at least 2")
        if required_count < 0:
            raise ValueError("required_count must be non-negative")
        if not 0.0 <= blocked_ratio < 1.0:
            raise ValueError("blocked_ratio must be in [0, 1)")
        if required_count + 2 > n * n:
            raise ValueError("Grid too small for the requested number of markers")

        rng = random.Random(seed)
        cells = [(r, c) for r in range(n) for c in range(n)]
        rng.shuffle(cells)
        start, end = cells[0], cells[1]
        required = cells[2:2 + required_count]
        free = cells[2 + required_count:]
        blocked = free[: int(len(free) * blocked_ratio)]
        return GridConfig(
            n=n,
            blocked=frozenset(blocked),
            start=start,
            end=end,
            required=tuple(required),
        )

    @staticmethod
    def load_all_metrics(root_dir: Path | str) -> "pd.DataFrame":
        """Load metrics_log.csv from all experiments under a root directory."""
        root = Path(root_dir)
        frames: List["pd.DataFrame"] = []
        for csv_path in root.glob("*/metrics_log.csv"):
            df = pd.read_csv(csv_path)
            frames.append(df)
        if not frames:
            return pd.DataFrame()
        return pd.concat(frames, ignore_index=True)
