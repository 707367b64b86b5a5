"""
Data collection module for the traffic simulator.

Samples vehicle and simulation state at configurable intervals, keeps it
in memory as pandas DataFrames and exports to CSV files.
"""

import pandas as pd
from pathlib import Path

from .simulator import TrafficSimulator


class DataCollector:
    """
    Collects per-tick data from a TrafficSimulator.

    Stores rows in memory and exposes them as pandas DataFrames.
    """

    def __init__(
        self,
        collect_interval: int = 1,
        output_dir: str | None = None,
    ):
        """
        Initialize data collector.

        Args:
            collect_interval: Collect data every N ticks (default: 1)
            output_dir: Directory to save CSV files (None = no file output)
        """
        if collect_interval < 1:
            raise ValueError("collect_interval must be at least 1")
        self.collect_interval = collect_interval
        self.output_dir = Path(output_dir) if output_dir else None

        if self.output_dir:
            self.output_dir.mkdir(parents=True, exist_ok=True)

        # Data storage (in-memory rows)
        self.vehicle_data = []
        self.simulation_data = []

        self.current_step = 0

    def should_collect(self, step: int) -> bool:
        """Check if data should be collected at this step."""
        return step % self.collect_interval == 0

    def collect_step(self, step: int, simulator: TrafficSimulator):
        """
        Collect vehicle and simulation data at the current tick.

        Args:
            step: Current tick number
            simulator: Simulator to sample
        """
        if not self.should_collect(step):
            return

        self.current_step = step
        current_time = simulator.stats.time

        self._collect_vehicle_data(step, current_time, simulator)
        self._collect_simulation_data(step, current_time, simulator)

    def _collect_vehicle_data(
        self, step: int, current_time: float, simulator: TrafficSimulator
    ):
        for agent in simulator.agents:
            self.vehicle_data.append({
                "step": step,
                "time": current_time,
                "vehicle_id": agent.id,
                "vehicle_class": agent.vehicle_class,
                "lane": agent.lane,
                "state": agent.state.value,
                "x": agent.x,
                "z": agent.z,
                "heading": agent.heading,
                "speed": agent.speed,
                "waiting_time": agent.waiting_time,
            })

    def _collect_simulation_data(
        self, step: int, current_time: float, simulator: TrafficSimulator
    ):
        agents = simulator.agents
        stats = simulator.stats
        self.simulation_data.append({
            "step": step,
            "time": current_time,
            "vehicle_count": len(agents),
            "curving_count": sum(1 for a in agents if a.is_curving),
            "stopped_count": sum(1 for a in agents if a.speed == 0.0),
            "spawned_count": stats.spawned,
            "despawned_count": stats.despawned,
            "rejected_spawns": stats.rejected_spawns,
        })

    def get_dataframes(self) -> dict[str, pd.DataFrame]:
        """
        Get collected data as pandas DataFrames.

        Returns:
            Dictionary with 'vehicles' and 'simulation' DataFrames
        """
        return {
            "vehicles": pd.DataFrame(self.vehicle_data),
            "simulation": pd.DataFrame(self.simulation_data),
        }

    def export_to_csv(self):
        """Export all collected data to CSV files in output_dir."""
        if not self.output_dir:
            return

        for name, df in self.get_dataframes().items():
            if df.empty:
                continue
            filename = f"{name}.csv"
            filepath = self.output_dir / filename
            df.to_csv(filepath, index=False)
            print(f">>> Exported {filename} to {filepath}")

    def clear(self):
        """Drop all collected rows."""
        self.vehicle_data = []
        self.simulation_data = []
        self.current_step = 0
