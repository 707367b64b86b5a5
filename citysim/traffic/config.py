"""
Simulation parameters for the traffic simulator.
"""

import math
from dataclasses import dataclass


@dataclass
class SimulationConfig:
    """Tunable constants of the car-following and spawn model."""

    full_speed: float = 9.0
    stop_distance: float = 8.0
    slow_distance: float = 15.0
    spawn_interval: float = 2.5
    max_vehicles: int = 40
    spawn_clearance: float = 25.0
    # Frames longer than this (e.g. a resumed tab) are clamped
    max_delta_time: float = 0.1
    road_height: float = 0.0
    # Forward window in which an occupied crosswalk makes a vehicle yield
    yield_near: float = 2.0
    yield_far: float = 15.0
    # Placement retries per vehicle when seeding the initial population
    placement_attempts: int = 20

    def __post_init__(self):
        for name in (
            "full_speed",
            "stop_distance",
            "slow_distance",
            "spawn_interval",
            "spawn_clearance",
            "max_delta_time",
            "road_height",
            "yield_near",
            "yield_far",
        ):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be finite")

        if self.full_speed <= 0:
            raise ValueError("full_speed must be positive")
        if self.stop_distance < 0:
            raise ValueError("stop_distance must not be negative")
        if self.slow_distance <= self.stop_distance:
            raise ValueError("slow_distance must be greater than stop_distance")
        if self.spawn_interval <= 0:
            raise ValueError("spawn_interval must be positive")
        if self.max_vehicles < 0:
            raise ValueError("max_vehicles must not be negative")
        if self.spawn_clearance < 0:
            raise ValueError("spawn_clearance must not be negative")
        if self.max_delta_time <= 0:
            raise ValueError("max_delta_time must be positive")
        if not 0 <= self.yield_near < self.yield_far:
            raise ValueError("yield window must satisfy 0 <= yield_near < yield_far")
        if self.placement_attempts < 1:
            raise ValueError("placement_attempts must be at least 1")
