from pathlib import Path
from typing import Any, Callable, Iterable, Optional

import numpy as np

from citysim.scenarios import Scenario, load_scenario, load_scenario_from_path

from .crosswalk import CrosswalkYieldOracle
from .data_collector import DataCollector
from .metrics import MetricsCalculator
from .simulator import TrafficSimulator

PedestrianSource = Callable[[], Iterable[tuple[float, float]]]


def build_simulator(
    scenario: Scenario,
    seed: Optional[int] = None,
    occupied_crosswalks: Iterable[str] = (),
) -> tuple[TrafficSimulator, CrosswalkYieldOracle]:
    """
    Wire a simulator and its crosswalk oracle for a scenario.

    Args:
        scenario: Loaded scenario
        seed: Seed for the shared random generator (None = nondeterministic)
        occupied_crosswalks: Crosswalk IDs to hold as permanently occupied

    Returns:
        (simulator, oracle) tuple
    """
    network = scenario.network
    config = scenario.config
    oracle = CrosswalkYieldOracle(
        network.crosswalks,
        network.lanes,
        near=config.yield_near,
        far=config.yield_far,
    )
    for crosswalk_id in occupied_crosswalks:
        oracle.set_occupied(crosswalk_id, True)

    simulator = TrafficSimulator(
        network,
        config=config,
        yield_oracle=oracle,
        rng=np.random.default_rng(seed),
    )
    return simulator, oracle


def _run_simulation_loop(
    simulator: TrafficSimulator,
    oracle: CrosswalkYieldOracle,
    max_steps: int,
    frame_time: float,
    data_collector: Optional[DataCollector],
    pedestrian_source: Optional[PedestrianSource],
) -> None:
    """Tick the simulator, refreshing crosswalks and collecting data."""
    PROGRESS_REPORT_INTERVAL = 600

    print(f">>> Starting simulation (max {max_steps} steps)...")
    for step in range(max_steps):
        if pedestrian_source is not None:
            oracle.update(pedestrian_source())

        simulator.tick(frame_time)

        if data_collector:
            data_collector.collect_step(step, simulator)

        if step % PROGRESS_REPORT_INTERVAL == 0:
            stats = simulator.stats
            print(
                f">>> Step {step}: {len(simulator.agents)} vehicles, "
                f"{stats.spawned} spawned, {stats.despawned} despawned"
            )


def run_headless(
    scenario_name: str = "ring_road",
    scenario_path: Optional[str] = None,
    duration: float = 120.0,
    frame_time: float = 1.0 / 60.0,
    seed: Optional[int] = None,
    collect_interval: int = 10,
    output_dir: Optional[str] = None,
    enable_data_collection: bool = True,
    occupied_crosswalks: Iterable[str] = (),
    pedestrian_source: Optional[PedestrianSource] = None,
) -> dict[str, Any]:
    """
    Run a scenario without a renderer.

    Steps the simulator at a fixed frame time, the way the render loop
    would, and optionally collects data and computes metrics.

    Args:
        scenario_name: Scenario under experiments/networks (default: ring_road)
        scenario_path: Explicit YAML path, overrides scenario_name
        duration: Simulated seconds
        frame_time: Seconds per frame (default: 1/60)
        seed: Random seed for reproducible runs
        collect_interval: Collect data every N frames (default: 10)
        output_dir: Directory for CSV files (None = in-memory only)
        enable_data_collection: Enable data collection (default: True)
        occupied_crosswalks: Crosswalk IDs held occupied for the whole run
        pedestrian_source: Callable returning pedestrian positions each frame

    Returns:
        Dictionary containing:
            - 'data': Dict of pandas DataFrames (vehicles, simulation)
            - 'metrics': Dict of computed metrics
            - 'lanes': Per-lane summary DataFrame
            - 'simulator': The TrafficSimulator after the run

    Example:
        >>> result = run_headless(duration=60, seed=7)
        >>> print(result['metrics']['throughput'])
    """
    if frame_time <= 0:
        raise ValueError("frame_time must be positive")
    if duration < 0:
        raise ValueError("duration must not be negative")

    if scenario_path is not None:
        print(f">>> Loading scenario from {scenario_path}")
        scenario = load_scenario_from_path(Path(scenario_path))
    else:
        print(f">>> Loading scenario: {scenario_name}")
        scenario = load_scenario(scenario_name)

    simulator, oracle = build_simulator(
        scenario, seed=seed, occupied_crosswalks=occupied_crosswalks
    )
    agents = simulator.initialize()
    print(f">>> Seeded {len(agents)} vehicles on '{scenario.name}'")

    data_collector = None
    metrics_calculator = None
    if enable_data_collection:
        print(f">>> Initializing data collection (interval: {collect_interval} steps)")
        data_collector = DataCollector(
            collect_interval=collect_interval,
            output_dir=output_dir,
        )
        metrics_calculator = MetricsCalculator(output_dir=output_dir)

    max_steps = int(round(duration / frame_time))
    _run_simulation_loop(
        simulator,
        oracle,
        max_steps=max_steps,
        frame_time=frame_time,
        data_collector=data_collector,
        pedestrian_source=pedestrian_source,
    )
    print(">>> Simulation complete.")

    result = {
        'data': {},
        'metrics': {},
        'lanes': None,
        'simulator': simulator,
    }
    if not data_collector:
        return result

    print(">>> Computing final metrics...")
    dfs = data_collector.get_dataframes()
    result['data'] = dfs

    metrics = metrics_calculator.calculate_metrics(dfs['vehicles'], dfs['simulation'])
    result['metrics'] = metrics
    metrics_calculator.print_metrics(metrics)
    metrics_calculator.export_metrics(metrics)

    lanes = metrics_calculator.lane_summary(dfs['vehicles'])
    result['lanes'] = lanes
    if output_dir and not lanes.empty:
        filepath = Path(output_dir) / 'lane_summary.csv'
        lanes.to_csv(filepath, index=False)
        print(f">>> Exported lane_summary.csv to {filepath}")

    if output_dir:
        print(">>> Exporting data to CSV...")
        data_collector.export_to_csv()

    return result
