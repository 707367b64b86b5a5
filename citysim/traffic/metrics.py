"""
Metrics calculation module for traffic simulation evaluation.

Computes speeds, waiting times, throughput, population and spawn
statistics from the data collected during a run.
"""

import pandas as pd
from typing import Callable
from pathlib import Path


class MetricsCalculator:
    """
    Calculates evaluation metrics from collected simulation data.

    Uses a schema-based approach to define and compute metrics dynamically.
    """

    def __init__(self, output_dir: str | None = None):
        """
        Initialize metrics calculator.

        Args:
            output_dir: Directory to save metrics CSV (None = no file output)
        """
        self.output_dir = Path(output_dir) if output_dir else None

        if self.output_dir:
            self.output_dir.mkdir(parents=True, exist_ok=True)

        # Define what to compute for each category and column
        self.metric_schema = {
            "vehicle": {
                "speed": ["mean", "max", "min"],
                "waiting_time": ["mean", "max"],
                "vehicle_id": ["nunique"],
            },
            "simulation": {
                "vehicle_count": ["mean", "max"],
                "curving_count": ["mean"],
                "stopped_count": ["mean", "max"],
                "spawned_count": ["max"],
                "despawned_count": ["max"],
                "rejected_spawns": ["max"],
                "time": ["max"],
            },
        }

        # Map aggregation names to actual callables
        self.agg_funcs: dict[str, Callable[[pd.Series], float]] = {
            "mean": pd.Series.mean,
            "max": pd.Series.max,
            "min": pd.Series.min,
            "sum": pd.Series.sum,
            "nunique": pd.Series.nunique,
        }

        self._display_names = {
            "vehicle_speed_mean": "average_speed",
            "vehicle_speed_max": "max_speed",
            "vehicle_speed_min": "min_speed",
            "vehicle_waiting_time_mean": "average_waiting_time",
            "vehicle_waiting_time_max": "max_waiting_time",
            "vehicle_vehicle_id_nunique": "unique_vehicles",
            "simulation_vehicle_count_mean": "average_vehicle_count",
            "simulation_vehicle_count_max": "max_vehicle_count",
            "simulation_curving_count_mean": "average_curving_count",
            "simulation_stopped_count_mean": "average_stopped_count",
            "simulation_stopped_count_max": "max_stopped_count",
            "simulation_spawned_count_max": "total_spawned",
            "simulation_despawned_count_max": "throughput",
            "simulation_rejected_spawns_max": "rejected_spawns",
            "simulation_time_max": "simulation_duration",
        }

    def calculate_metrics(
        self,
        vehicle_df: pd.DataFrame,
        simulation_df: pd.DataFrame,
    ) -> dict[str, float]:
        """
        Calculate all evaluation metrics from collected data.

        Args:
            vehicle_df: DataFrame with vehicle data
            simulation_df: DataFrame with simulation state data

        Returns:
            Dictionary of metric names to values
        """
        dfs = {
            "vehicle": vehicle_df,
            "simulation": simulation_df,
        }

        metrics = {}
        for name, df in dfs.items():
            if df is not None and not df.empty:
                schema_metrics = self._calculate_metrics_from_schema(name, df)
                for schema_name, value in schema_metrics.items():
                    metrics[self._display_names.get(schema_name, schema_name)] = value

        return metrics

    def _calculate_metrics_from_schema(self, category: str, df: pd.DataFrame) -> dict[str, float]:
        """Calculate metrics from a category DataFrame based on the schema."""
        metrics = {}
        schema = self.metric_schema.get(category, {})

        for col, aggs in schema.items():
            if col not in df.columns:
                # Fill zeros if missing
                for agg in aggs:
                    metrics[f"{category}_{col}_{agg}"] = 0.0
                continue

            for agg in aggs:
                func = self.agg_funcs[agg]
                val = func(df[col]) if not df[col].empty else 0.0
                # Handle NaN values from pandas operations
                if pd.isna(val):
                    val = 0.0
                metrics[f"{category}_{col}_{agg}"] = float(val)

        return metrics

    def lane_summary(self, vehicle_df: pd.DataFrame) -> pd.DataFrame:
        """Per-lane mean speed, stopped share and sample count of straight vehicles."""
        columns = ["lane", "mean_speed", "stopped_share", "samples"]
        if vehicle_df is None or vehicle_df.empty:
            return pd.DataFrame(columns=columns)

        straight = vehicle_df[vehicle_df["state"] == "straight"]
        if straight.empty:
            return pd.DataFrame(columns=columns)

        grouped = straight.groupby("lane")["speed"]
        summary = pd.DataFrame({
            "mean_speed": grouped.mean(),
            "stopped_share": grouped.apply(lambda s: float((s == 0.0).mean())),
            "samples": grouped.size(),
        }).reset_index()
        return summary[columns]

    def export_metrics(self, metrics: dict[str, float]):
        """
        Export metrics to CSV file.

        Args:
            metrics: Dictionary of metric names to values
        """
        if not self.output_dir:
            return

        metrics_df = pd.DataFrame([metrics])

        filepath = self.output_dir / 'metrics_summary.csv'
        metrics_df.to_csv(filepath, index=False)
        print(f">>> Exported metrics_summary.csv to {filepath}")

    def print_metrics(self, metrics: dict[str, float]):
        """
        Print metrics in a formatted way.

        Args:
            metrics: Dictionary of metric names to values
        """
        print("\n" + "=" * 60)
        print("TRAFFIC METRICS SUMMARY")
        print("=" * 60)

        print("\n--- Flow ---")
        if 'throughput' in metrics:
            print(f"Throughput: {metrics['throughput']:.0f} vehicles")
        if 'total_spawned' in metrics:
            print(f"Spawned: {metrics['total_spawned']:.0f} vehicles")
        if 'rejected_spawns' in metrics:
            print(f"Rejected Spawns: {metrics['rejected_spawns']:.0f}")

        print("\n--- Speed & Waiting ---")
        if 'average_speed' in metrics:
            print(f"Average Speed: {metrics['average_speed']:.2f} u/s")
        if 'average_waiting_time' in metrics:
            print(f"Average Waiting Time: {metrics['average_waiting_time']:.2f} s")
        if 'max_waiting_time' in metrics:
            print(f"Max Waiting Time: {metrics['max_waiting_time']:.2f} s")

        print("\n--- Population ---")
        if 'average_vehicle_count' in metrics:
            print(f"Average Vehicle Count: {metrics['average_vehicle_count']:.2f}")
        if 'max_vehicle_count' in metrics:
            print(f"Max Vehicle Count: {metrics['max_vehicle_count']:.0f}")
        if 'unique_vehicles' in metrics:
            print(f"Unique Vehicles: {metrics['unique_vehicles']:.0f}")

        print("\n--- Simulation Info ---")
        if 'simulation_duration' in metrics:
            print(f"Simulation Duration: {metrics['simulation_duration']:.2f} s")

        print("=" * 60 + "\n")
