from __future__ import annotations
from pathlib import Path
import random
from experiments import Experiment, RoutingConfiguration
import logging
logging.basicConfig(level=logging.ERROR)

OUTPUT_DIR = Path("saved_experiments")


def register_configurations(experiment: Experiment) -> None:
    """Register every order/revisit policy pair plus the segment-wise simple-path variant."""
    experiment.add_configuration(
        RoutingConfiguration(
            name="in_order",
            order_policy="as-specified",
            revisit_policy="allowed",
        )
    )
    experiment.add_configuration(
        RoutingConfiguration(
            name="in_order_simple",
            order_policy="as-specified",
            revisit_policy="forbidden",
        )
    )
    experiment.add_configuration(
        RoutingConfiguration(
            name="held_karp",
            order_policy="optimize",
            revisit_policy="allowed",
        )
    )
    experiment.add_configuration(
        RoutingConfiguration(
            name="held_karp_simple",
            order_policy="optimize",
            revisit_policy="forbidden",
            engine_kwargs={"simple_path_strategy": "segment"},
            metadata={"description": "Held-Karp order routed segment by segment without revisits"},
        )
    )
    experiment.add_configuration(
        RoutingConfiguration(
            name="state_search",
            order_policy="optimize",
            revisit_policy="forbidden",
            engine_kwargs={"simple_path_strategy": "global", "max_states": 200_000},
            metadata={"description": "Uniform-cost search over (cell, mask, visited cells)"},
        )
    )


def compare_two_configs_by_routed_share(config_a: str, config_b: str, df) -> float:
    """Compute the difference in percentage points of successfully routed cases."""
    subset = df[df["config_name"].isin([config_a, config_b])]
    share = subset.groupby("config_name")["status"].apply(lambda s: (s == "ok").mean() * 100)
    return share.get(config_b, 0.0) - share.get(config_a, 0.0)


def compare_two_configs_by_length(config_a: str, config_b: str, df) -> float:
    """Compute average % delta in path length, comparing only cases both configs routed."""
    subset = df[df["config_name"].isin([config_a, config_b]) & (df["status"] == "ok")]
    pivot = subset.pivot_table(
        index="experiment_name",
        columns="config_name",
        values="length",
        aggfunc="mean",
    ).dropna()
    if pivot.empty:
        return 0.0
    pivot["length_ratio_pct"] = (pivot[config_b] / pivot[config_a] - 1) * 100
    return pivot["length_ratio_pct"].mean()


def main() -> None:
    """Generate random 10x10 grids and run all configs, storing outputs under saved_experiments/."""
    for experiment_id in range(200):
        config = Experiment.generate_random_case(
            n=10,
            required_count=random.randint(0, 5),
            blocked_ratio=random.uniform(0.0, 0.3),
        )
        experiment = Experiment(
            name=f"compare_policies_10x10_{experiment_id}",
            config=config,
            output_dir=OUTPUT_DIR,
        )
        register_configurations(experiment)
        experiment.run_all(save_images=False)
        print(f"Completed experiment {experiment_id}")


def main2() -> None:
    """Compare policies using metrics already stored in saved_experiments."""
    df = Experiment.load_all_metrics(OUTPUT_DIR)
    if df.empty:
        print(f"No metrics found under {OUTPUT_DIR}; run main() first.")
        return
    print("Held-Karp vs In-Order by Length (%):", compare_two_configs_by_length("in_order", "held_karp", df))
    print("State Search vs Held-Karp Simple by Length (%):",
          compare_two_configs_by_length("held_karp_simple", "state_search", df))
    print("State Search vs In-Order Simple by Length (%):",
          compare_two_configs_by_length("in_order_simple", "state_search", df))

    print("State Search vs Held-Karp Simple by Routed Share (pp):",
          compare_two_configs_by_routed_share("held_karp_simple", "state_search", df))
    print("In-Order Simple vs In-Order by Routed Share (pp):",
          compare_two_configs_by_routed_share("in_order", "in_order_simple", df))


if __name__ == "__main__":
    main()
    main2()
