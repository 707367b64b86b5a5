"""
Pedestrian yield oracles.

A yield oracle answers, for a vehicle position and lane, whether a
pedestrian occupies a crosswalk the vehicle is about to drive over. It is
a pure query: the simulator calls it for every straight-lane vehicle on
every tick.
"""

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Callable

from citysim.network import Crosswalk, Lane

from .vehicle import VehicleAgent

YieldOracle = Callable[[tuple[float, float], str], bool]

# How far around a crosswalk a vehicle counts as blocking it
VEHICLE_APPROACH_MARGIN = 8.0
VEHICLE_SIDE_MARGIN = 3.0


def never_yield(position: tuple[float, float], lane_id: str) -> bool:
    """Oracle for scenes without pedestrians."""
    return False


class CrosswalkYieldOracle:
    """
    Yield oracle backed by crosswalk occupancy.

    The host refreshes occupancy once per frame with `update()`, passing
    the current pedestrian positions; calls in between are side-effect free.
    """

    def __init__(
        self,
        crosswalks: Iterable[Crosswalk],
        lanes: Mapping[str, Lane],
        near: float = 2.0,
        far: float = 15.0,
    ):
        """
        Initialize the oracle.

        Args:
            crosswalks: Crosswalks of the network
            lanes: Lane table used to measure forward distance
            near: Vehicles closer than this keep going to clear the crossing
            far: Vehicles further than this are not affected yet
        """
        if not 0 <= near < far:
            raise ValueError("Yield window must satisfy 0 <= near < far")
        self.crosswalks = list(crosswalks)
        self.lanes = lanes
        self.near = near
        self.far = far
        self._occupied = {cw.id: False for cw in self.crosswalks}
        self._by_lane: dict[str, list[Crosswalk]] = {}
        for cw in self.crosswalks:
            for lane_id in cw.lanes:
                self._by_lane.setdefault(lane_id, []).append(cw)

    @property
    def occupied(self) -> Mapping[str, bool]:
        return MappingProxyType(self._occupied)

    def update(self, pedestrian_positions: Iterable[tuple[float, float]]) -> None:
        """Recompute which crosswalks have a pedestrian on them."""
        positions = list(pedestrian_positions)
        for cw in self.crosswalks:
            self._occupied[cw.id] = any(cw.contains(px, pz) for px, pz in positions)

    def set_occupied(self, crosswalk_id: str, occupied: bool = True) -> None:
        """Force a crosswalk state, e.g. from pedestrian crossing bookkeeping."""
        if crosswalk_id not in self._occupied:
            raise KeyError(f"Unknown crosswalk: {crosswalk_id}")
        self._occupied[crosswalk_id] = occupied

    def __call__(self, position: tuple[float, float], lane_id: str) -> bool:
        lane = self.lanes.get(lane_id)
        if lane is None:
            return False

        x, z = position
        vehicle_coord = lane.coord_of(x, z)
        for cw in self._by_lane.get(lane_id, ()):
            if not self._occupied[cw.id]:
                continue
            ahead = (lane.coord_of(*cw.center) - vehicle_coord) * lane.direction
            if self.near < ahead < self.far:
                return True
        return False

    should_yield = __call__

    def vehicle_on_crosswalk(
        self, crosswalk_id: str, agents: Iterable[VehicleAgent]
    ) -> bool:
        """
        Check whether any vehicle is on or approaching a crosswalk.

        Pedestrian logic uses this to wait at the kerb before crossing.
        """
        cw = next((c for c in self.crosswalks if c.id == crosswalk_id), None)
        if cw is None:
            return False

        cx, cz = cw.center
        span_x, span_z = cw.size
        # Traffic runs along the short side of the footprint
        approach = max(span_x, span_z) / 2 + VEHICLE_APPROACH_MARGIN
        side = min(span_x, span_z) / 2 + VEHICLE_SIDE_MARGIN
        if span_x <= span_z:
            reach_x, reach_z = approach, side
        else:
            reach_x, reach_z = side, approach

        for agent in agents:
            if abs(agent.x - cx) < reach_x and abs(agent.z - cz) < reach_z:
                return True
        return False
