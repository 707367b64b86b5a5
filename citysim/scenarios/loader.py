"""
YAML loader and saver for scenario configurations with JSON schema validation.
"""

import json
import math
from pathlib import Path
from typing import Any

import jsonschema
import yaml

from citysim.network import (
    Crosswalk,
    CurveConnector,
    EntryPoint,
    Lane,
    PopulationSlot,
    RoadNetwork,
)
from citysim.traffic.config import SimulationConfig

from .scenario import Scenario


def _get_schema_path() -> Path:
    """Get the path to the JSON schema file."""
    # Schema is in experiments/networks/schema.json
    # This file is in citysim/scenarios/, so go up to project root
    project_root = Path(__file__).parent.parent.parent
    return project_root / "experiments" / "networks" / "schema.json"


def _get_networks_dir() -> Path:
    """Get the path to the scenario directory."""
    project_root = Path(__file__).parent.parent.parent
    return project_root / "experiments" / "networks"


def validate_scenario(
    data: dict[str, Any], schema_path: Path | None = None
) -> None:
    """
    Validate scenario data against JSON schema.

    Args:
        data: Dictionary containing scenario data
        schema_path: Optional path to schema file. If None, uses default.

    Raises:
        jsonschema.ValidationError: If validation fails
        FileNotFoundError: If schema file not found
    """
    if schema_path is None:
        schema_path = _get_schema_path()

    if not schema_path.exists():
        raise FileNotFoundError(
            f"Schema file not found: {schema_path}. "
            "Please ensure experiments/networks/schema.json exists."
        )

    with open(schema_path, "r", encoding="utf-8") as f:
        schema = json.load(f)

    jsonschema.validate(instance=data, schema=schema)


def _get_field(
    data: dict[str, Any], snake_key: str, camel_key: str, default: Any = None
) -> Any:
    """Get field from dict supporting both snake_case and camelCase."""
    return data.get(snake_key, data.get(camel_key, default))


def _dict_to_lane(data: dict[str, Any]) -> Lane:
    """Convert dictionary to Lane dataclass."""
    return Lane(
        id=data["id"],
        axis=data["axis"],
        fixed=float(data["fixed"]),
        min=float(data["min"]),
        max=float(data["max"]),
        direction=int(data["direction"]),
        exit_margin=float(_get_field(data, "exit_margin", "exitMargin", 20.0)),
    )


def _dict_to_curve(data: dict[str, Any]) -> CurveConnector:
    """Convert dictionary to CurveConnector dataclass (angles in degrees)."""
    center = data["center"]
    return CurveConnector(
        id=data["id"],
        source_lane=_get_field(data, "source_lane", "sourceLane"),
        target_lane=_get_field(data, "target_lane", "targetLane"),
        center=(float(center[0]), float(center[1])),
        radius=float(data["radius"]),
        start_angle=math.radians(_get_field(data, "start_angle", "startAngle")),
        end_angle=math.radians(_get_field(data, "end_angle", "endAngle")),
        trigger=float(data["trigger"]),
    )


def _dict_to_entry_point(data: dict[str, Any]) -> EntryPoint:
    """Convert dictionary to EntryPoint dataclass."""
    return EntryPoint(
        lane=data["lane"],
        weight=float(data.get("weight", 1.0)),
        offset=float(data.get("offset", 10.0)),
    )


def _dict_to_crosswalk(data: dict[str, Any]) -> Crosswalk:
    """Convert dictionary to Crosswalk dataclass."""
    center = data["center"]
    size = data["size"]
    return Crosswalk(
        id=data["id"],
        center=(float(center[0]), float(center[1])),
        size=(float(size[0]), float(size[1])),
        lanes=tuple(data.get("lanes", [])),
    )


def _dict_to_population_slot(data: dict[str, Any]) -> PopulationSlot:
    """Convert dictionary to PopulationSlot dataclass."""
    lo, hi = data["range"]
    return PopulationSlot(
        lane=data["lane"],
        count=int(data["count"]),
        range=(float(lo), float(hi)),
    )


def _dict_to_config(data: dict[str, Any] | None) -> SimulationConfig:
    """Convert the optional simulation section to SimulationConfig."""
    data = data or {}
    defaults = SimulationConfig()
    return SimulationConfig(
        full_speed=_get_field(data, "full_speed", "fullSpeed", defaults.full_speed),
        stop_distance=_get_field(
            data, "stop_distance", "stopDistance", defaults.stop_distance
        ),
        slow_distance=_get_field(
            data, "slow_distance", "slowDistance", defaults.slow_distance
        ),
        spawn_interval=_get_field(
            data, "spawn_interval", "spawnInterval", defaults.spawn_interval
        ),
        max_vehicles=_get_field(
            data, "max_vehicles", "maxVehicles", defaults.max_vehicles
        ),
        spawn_clearance=_get_field(
            data, "spawn_clearance", "spawnClearance", defaults.spawn_clearance
        ),
        max_delta_time=_get_field(
            data, "max_delta_time", "maxDeltaTime", defaults.max_delta_time
        ),
        road_height=_get_field(
            data, "road_height", "roadHeight", defaults.road_height
        ),
        yield_near=_get_field(data, "yield_near", "yieldNear", defaults.yield_near),
        yield_far=_get_field(data, "yield_far", "yieldFar", defaults.yield_far),
        placement_attempts=_get_field(
            data, "placement_attempts", "placementAttempts", defaults.placement_attempts
        ),
    )


def _dict_to_scenario(data: dict[str, Any]) -> Scenario:
    """Convert dictionary to Scenario dataclass."""
    network = RoadNetwork.from_lists(
        name=data["name"],
        lanes=[_dict_to_lane(lane) for lane in data["lanes"]],
        curves=[_dict_to_curve(c) for c in data.get("curves", [])],
        entry_points=[
            _dict_to_entry_point(e)
            for e in _get_field(data, "entry_points", "entryPoints", [])
        ],
        crosswalks=[_dict_to_crosswalk(c) for c in data.get("crosswalks", [])],
        initial_population=[
            _dict_to_population_slot(p)
            for p in _get_field(data, "initial_population", "initialPopulation", [])
        ],
    )
    return Scenario(network=network, config=_dict_to_config(data.get("simulation")))


def load_scenario_from_path(path: Path, validate: bool = True) -> Scenario:
    """
    Load scenario from a YAML file path.

    Args:
        path: Path to YAML file
        validate: Whether to validate against JSON schema

    Returns:
        Scenario object

    Raises:
        FileNotFoundError: If file not found
        yaml.YAMLError: If YAML parsing fails
        jsonschema.ValidationError: If validation fails
        NetworkConfigError: If lanes and curves do not connect
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scenario file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        raise ValueError(f"Empty or invalid YAML file: {path}")

    if validate:
        validate_scenario(data)

    return _dict_to_scenario(data)


def load_scenario(scenario_name: str, validate: bool = True) -> Scenario:
    """
    Load scenario from the experiments directory.

    Args:
        scenario_name: Name of the scenario file without extension
                       (e.g., "ring_road")
        validate: Whether to validate against JSON schema

    Returns:
        Scenario object
    """
    scenario_path = _get_networks_dir() / f"{scenario_name}.yaml"
    return load_scenario_from_path(scenario_path, validate=validate)


def _lane_to_dict(lane: Lane) -> dict[str, Any]:
    """Convert Lane to dictionary."""
    return {
        "id": lane.id,
        "axis": lane.axis,
        "fixed": lane.fixed,
        "min": lane.min,
        "max": lane.max,
        "direction": lane.direction,
        "exit_margin": lane.exit_margin,
    }


def _curve_to_dict(curve: CurveConnector) -> dict[str, Any]:
    """Convert CurveConnector to dictionary."""
    return {
        "id": curve.id,
        "source_lane": curve.source_lane,
        "target_lane": curve.target_lane,
        "center": list(curve.center),
        "radius": curve.radius,
        "start_angle": math.degrees(curve.start_angle),
        "end_angle": math.degrees(curve.end_angle),
        "trigger": curve.trigger,
    }


def _config_to_dict(config: SimulationConfig) -> dict[str, Any]:
    """Convert SimulationConfig to dictionary."""
    return {
        "full_speed": config.full_speed,
        "stop_distance": config.stop_distance,
        "slow_distance": config.slow_distance,
        "spawn_interval": config.spawn_interval,
        "max_vehicles": config.max_vehicles,
        "spawn_clearance": config.spawn_clearance,
        "max_delta_time": config.max_delta_time,
        "road_height": config.road_height,
        "yield_near": config.yield_near,
        "yield_far": config.yield_far,
        "placement_attempts": config.placement_attempts,
    }


def _scenario_to_dict(scenario: Scenario) -> dict[str, Any]:
    """Convert Scenario dataclass to dictionary."""
    network = scenario.network
    result = {
        "name": network.name,
        "lanes": [_lane_to_dict(lane) for lane in network.lanes.values()],
        "curves": [_curve_to_dict(c) for c in network.curves.values()],
        "entry_points": [
            {"lane": e.lane, "weight": e.weight, "offset": e.offset}
            for e in network.entry_points
        ],
    }

    if network.crosswalks:
        result["crosswalks"] = [
            {
                "id": c.id,
                "center": list(c.center),
                "size": list(c.size),
                "lanes": list(c.lanes),
            }
            for c in network.crosswalks
        ]

    if network.initial_population:
        result["initial_population"] = [
            {"lane": p.lane, "count": p.count, "range": list(p.range)}
            for p in network.initial_population
        ]

    result["simulation"] = _config_to_dict(scenario.config)
    return result


def save_scenario_to_path(
    scenario: Scenario, path: Path, validate: bool = True
) -> None:
    """
    Save scenario to a YAML file path.

    Args:
        scenario: Scenario object to save
        path: Path to save YAML file
        validate: Whether to validate before saving

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    data = _scenario_to_dict(scenario)

    if validate:
        validate_scenario(data)

    path = Path(path)
    # Ensure directory exists
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def list_scenarios() -> list[str]:
    """
    List available scenarios.

    Returns:
        List of scenario names (without .yaml extension)

    Raises:
        FileNotFoundError: If the scenario directory doesn't exist
    """
    networks_dir = _get_networks_dir()

    if not networks_dir.exists():
        raise FileNotFoundError(f"Scenario directory not found: {networks_dir}")

    return sorted(file.stem for file in networks_dir.glob("*.yaml"))
