import pandas as pd
import pytest

from citysim.traffic.data_collector import DataCollector
from citysim.traffic.metrics import MetricsCalculator


def _vehicle_rows():
    return pd.DataFrame([
        {"vehicle_id": "veh0", "lane": "mainWest", "state": "straight",
         "speed": 9.0, "waiting_time": 0.0},
        {"vehicle_id": "veh1", "lane": "mainWest", "state": "straight",
         "speed": 0.0, "waiting_time": 1.5},
        {"vehicle_id": "veh2", "lane": "southUp", "state": "curving",
         "speed": 9.0, "waiting_time": 0.0},
        {"vehicle_id": "veh2", "lane": "southUp", "state": "straight",
         "speed": 3.0, "waiting_time": 0.5},
    ])


def _simulation_rows():
    return pd.DataFrame([
        {"time": 1.0, "vehicle_count": 3, "curving_count": 1, "stopped_count": 0,
         "spawned_count": 1, "despawned_count": 0, "rejected_spawns": 0},
        {"time": 2.0, "vehicle_count": 5, "curving_count": 0, "stopped_count": 2,
         "spawned_count": 4, "despawned_count": 2, "rejected_spawns": 1},
    ])


def test_calculate_metrics():
    metrics = MetricsCalculator().calculate_metrics(_vehicle_rows(), _simulation_rows())

    assert metrics["average_speed"] == pytest.approx(5.25)
    assert metrics["max_speed"] == 9.0
    assert metrics["min_speed"] == 0.0
    assert metrics["average_waiting_time"] == pytest.approx(0.5)
    assert metrics["max_waiting_time"] == 1.5
    assert metrics["unique_vehicles"] == 3
    assert metrics["average_vehicle_count"] == 4.0
    assert metrics["max_vehicle_count"] == 5
    assert metrics["average_curving_count"] == 0.5
    assert metrics["max_stopped_count"] == 2
    assert metrics["total_spawned"] == 4
    assert metrics["throughput"] == 2
    assert metrics["rejected_spawns"] == 1
    assert metrics["simulation_duration"] == 2.0


def test_empty_frames_give_no_metrics():
    assert MetricsCalculator().calculate_metrics(pd.DataFrame(), pd.DataFrame()) == {}


def test_missing_columns_default_to_zero():
    metrics = MetricsCalculator().calculate_metrics(
        pd.DataFrame([{"speed": 4.0}]), None
    )
    assert metrics["average_speed"] == 4.0
    assert metrics["average_waiting_time"] == 0.0
    assert "throughput" not in metrics


def test_lane_summary_counts_straight_samples():
    summary = MetricsCalculator().lane_summary(_vehicle_rows()).set_index("lane")

    assert summary.loc["mainWest", "mean_speed"] == 4.5
    assert summary.loc["mainWest", "stopped_share"] == 0.5
    assert summary.loc["mainWest", "samples"] == 2
    assert summary.loc["southUp", "mean_speed"] == 3.0
    assert summary.loc["southUp", "samples"] == 1


def test_lane_summary_of_empty_frame():
    summary = MetricsCalculator().lane_summary(pd.DataFrame())
    assert summary.empty
    assert list(summary.columns) == ["lane", "mean_speed", "stopped_share", "samples"]


def test_export_metrics_writes_csv(tmp_path):
    calculator = MetricsCalculator(output_dir=str(tmp_path))
    calculator.export_metrics({"throughput": 3.0})

    written = pd.read_csv(tmp_path / "metrics_summary.csv")
    assert written.loc[0, "throughput"] == 3.0


def test_collector_samples_every_interval(make_simulator):
    sim = make_simulator()
    sim.place_vehicle("mainWest", 100)
    sim.place_vehicle("southUp", -100)
    collector = DataCollector(collect_interval=2)

    for step in range(3):
        sim.tick(0.1)
        collector.collect_step(step, sim)

    dfs = collector.get_dataframes()
    assert len(dfs["vehicles"]) == 4
    assert list(dfs["simulation"]["step"]) == [0, 2]
    assert set(dfs["vehicles"].columns) == {
        "step", "time", "vehicle_id", "vehicle_class", "lane", "state",
        "x", "z", "heading", "speed", "waiting_time",
    }
    assert dfs["simulation"]["vehicle_count"].tolist() == [2, 2]
    assert dfs["vehicles"]["state"].unique().tolist() == ["straight"]


def test_collector_exports_and_clears(tmp_path, make_simulator):
    sim = make_simulator()
    sim.place_vehicle("mainWest", 100)
    collector = DataCollector(output_dir=str(tmp_path / "out"))
    collector.collect_step(0, sim)

    collector.export_to_csv()
    assert (tmp_path / "out" / "vehicles.csv").exists()
    assert (tmp_path / "out" / "simulation.csv").exists()

    collector.clear()
    assert collector.get_dataframes()["vehicles"].empty


def test_collector_rejects_zero_interval():
    with pytest.raises(ValueError):
        DataCollector(collect_interval=0)
