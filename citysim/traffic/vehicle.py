"""
Per-vehicle simulation state.
"""

from dataclasses import dataclass
from enum import Enum

from .scene import VehicleHandle


class MotionState(Enum):
    """Motion model a vehicle is currently following."""

    STRAIGHT = "straight"
    CURVING = "curving"


@dataclass
class CurveProgress:
    """Bookkeeping carried only while a vehicle is on a curve connector."""

    connector: str
    radius: float
    angle: float
    target_lane: str


@dataclass(eq=False)
class VehicleAgent:
    """A simulated vehicle bound to one lane or one curve at a time."""

    id: str
    handle: VehicleHandle
    lane: str
    x: float
    z: float
    heading: float
    full_speed: float
    speed: float = 0.0
    state: MotionState = MotionState.STRAIGHT
    curve: CurveProgress | None = None
    waiting_time: float = 0.0
    age: float = 0.0

    @property
    def is_curving(self) -> bool:
        return self.state is MotionState.CURVING

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.z)

    @property
    def vehicle_class(self) -> str:
        return self.handle.vehicle_class

    def start_curve(self, progress: CurveProgress) -> None:
        self.state = MotionState.CURVING
        self.curve = progress

    def finish_curve(self, lane: str, heading: float) -> None:
        self.state = MotionState.STRAIGHT
        self.curve = None
        self.lane = lane
        self.heading = heading

    def sync_handle(self, road_height: float) -> None:
        """Write the current transform into the visual handle."""
        self.handle.set_transform(self.x, road_height, self.z, self.heading)
