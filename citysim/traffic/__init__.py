"""
Traffic simulation module.

Vehicle agents, the frame-driven simulator, pedestrian yield oracles and
the data collection around them.
"""

from .config import SimulationConfig
from .crosswalk import CrosswalkYieldOracle, YieldOracle, never_yield
from .factory import CLASS_WEIGHTS, VehicleClass, VehicleFactory
from .scene import Scene, VehicleHandle
from .simulator import SimulationStats, TrafficSimulator, resolve_speed
from .vehicle import CurveProgress, MotionState, VehicleAgent

__all__ = [
    'SimulationConfig',
    'CrosswalkYieldOracle',
    'YieldOracle',
    'never_yield',
    'CLASS_WEIGHTS',
    'VehicleClass',
    'VehicleFactory',
    'Scene',
    'VehicleHandle',
    'SimulationStats',
    'TrafficSimulator',
    'resolve_speed',
    'CurveProgress',
    'MotionState',
    'VehicleAgent',
]
