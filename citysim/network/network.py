"""
Core dataclasses for the road network.

Defines straight lanes, circular curve connectors between lanes, entry
points, crosswalks and the initial population slots, plus the
construction-time validation that keeps hand-offs continuous.
"""

import math
from dataclasses import dataclass, field

# Geometry checks tolerate float noise from degree/radian conversion
CONTINUITY_TOLERANCE = 1e-6


class NetworkConfigError(ValueError):
    """Raised when lane/curve tables are inconsistent."""


def heading_for_direction(dx: float, dz: float) -> float:
    """Yaw of a travel direction: +z is 0, +x is pi/2."""
    return math.atan2(dx, dz)


def _close(a: float, b: float) -> bool:
    return math.isclose(a, b, rel_tol=0.0, abs_tol=CONTINUITY_TOLERANCE)


@dataclass(frozen=True)
class Lane:
    """Straight one-way lane running along `axis` at a constant cross coordinate."""

    id: str
    axis: str
    fixed: float
    min: float
    max: float
    direction: int
    exit_margin: float = 20.0

    @property
    def leading_bound(self) -> float:
        return self.max if self.direction > 0 else self.min

    @property
    def trailing_bound(self) -> float:
        return self.min if self.direction > 0 else self.max

    @property
    def unit_vector(self) -> tuple[float, float]:
        if self.axis == "x":
            return (float(self.direction), 0.0)
        return (0.0, float(self.direction))

    @property
    def heading(self) -> float:
        return heading_for_direction(*self.unit_vector)

    def point_at(self, coord: float) -> tuple[float, float]:
        """World (x, z) of the lane point whose free coordinate is `coord`."""
        if self.axis == "x":
            return (coord, self.fixed)
        return (self.fixed, coord)

    def coord_of(self, x: float, z: float) -> float:
        """Free-axis coordinate of a world position."""
        return x if self.axis == "x" else z

    def progress(self, x: float, z: float) -> float:
        """Distance travelled along the lane, up to a constant offset."""
        return self.coord_of(x, z) * self.direction

    def past_exit(self, x: float, z: float) -> bool:
        limit = self.leading_bound + self.direction * self.exit_margin
        return (self.coord_of(x, z) - limit) * self.direction > 0


@dataclass(frozen=True)
class CurveConnector:
    """Circular arc carrying traffic from the end of one lane into another."""

    id: str
    source_lane: str
    target_lane: str
    center: tuple[float, float]
    radius: float
    start_angle: float
    end_angle: float
    trigger: float

    @property
    def sweep(self) -> int:
        """+1 for counterclockwise (increasing angle), -1 for clockwise."""
        return 1 if self.end_angle > self.start_angle else -1

    @property
    def length(self) -> float:
        return abs(self.end_angle - self.start_angle) * self.radius

    def point_at(self, angle: float) -> tuple[float, float]:
        cx, cz = self.center
        return (
            cx + math.cos(angle) * self.radius,
            cz + math.sin(angle) * self.radius,
        )

    def tangent_at(self, angle: float) -> tuple[float, float]:
        return (
            -math.sin(angle) * self.sweep,
            math.cos(angle) * self.sweep,
        )

    def heading_at(self, angle: float) -> float:
        return heading_for_direction(*self.tangent_at(angle))

    def reached_end(self, angle: float) -> bool:
        return (angle - self.end_angle) * self.sweep >= 0

    def advance(self, angle: float, distance: float) -> float:
        """Move `distance` along the arc from `angle`, clamped at the end angle."""
        angle += self.sweep * distance / self.radius
        if self.reached_end(angle):
            return self.end_angle
        return angle


@dataclass(frozen=True)
class EntryPoint:
    """Network entry where new vehicles appear, `offset` before the lane's start."""

    lane: str
    weight: float = 1.0
    offset: float = 10.0

    def spawn_position(self, lane: Lane) -> tuple[float, float]:
        return lane.point_at(lane.trailing_bound - lane.direction * self.offset)


@dataclass(frozen=True)
class Crosswalk:
    """Axis-aligned pedestrian crossing conflicting with the listed lanes."""

    id: str
    center: tuple[float, float]
    size: tuple[float, float]
    lanes: tuple[str, ...] = ()

    def contains(self, x: float, z: float) -> bool:
        cx, cz = self.center
        span_x, span_z = self.size
        return abs(x - cx) < span_x / 2 and abs(z - cz) < span_z / 2


@dataclass(frozen=True)
class PopulationSlot:
    """Initial vehicles to place on a lane within a free-axis range."""

    lane: str
    count: int
    range: tuple[float, float]


@dataclass
class RoadNetwork:
    """
    Complete static road network.

    Validated on construction; a malformed table raises NetworkConfigError
    so that no inconsistency can surface while vehicles are moving.
    """

    name: str
    lanes: dict[str, Lane]
    curves: dict[str, CurveConnector] = field(default_factory=dict)
    entry_points: list[EntryPoint] = field(default_factory=list)
    crosswalks: list[Crosswalk] = field(default_factory=list)
    initial_population: list[PopulationSlot] = field(default_factory=list)

    def __post_init__(self):
        self._curve_by_source: dict[str, CurveConnector] = {}
        self.validate()

    @classmethod
    def from_lists(
        cls,
        name: str,
        lanes: list[Lane],
        curves: list[CurveConnector] | None = None,
        entry_points: list[EntryPoint] | None = None,
        crosswalks: list[Crosswalk] | None = None,
        initial_population: list[PopulationSlot] | None = None,
    ) -> "RoadNetwork":
        """Build a network from plain lists, rejecting duplicate ids."""
        lane_map = _index_unique(lanes, "lane")
        curve_map = _index_unique(curves or [], "curve")
        return cls(
            name=name,
            lanes=lane_map,
            curves=curve_map,
            entry_points=list(entry_points or []),
            crosswalks=list(crosswalks or []),
            initial_population=list(initial_population or []),
        )

    def lane(self, lane_id: str) -> Lane:
        try:
            return self.lanes[lane_id]
        except KeyError:
            raise KeyError(f"Unknown lane: {lane_id}") from None

    def curve_from(self, lane_id: str) -> CurveConnector | None:
        """Curve fed by `lane_id`, if any."""
        return self._curve_by_source.get(lane_id)

    def validate(self) -> None:
        """
        Check the whole network.

        Raises:
            NetworkConfigError: On the first inconsistency found
        """
        if not self.lanes:
            raise NetworkConfigError(f"Network '{self.name}' has no lanes")

        for lane_id, lane in self.lanes.items():
            if lane_id != lane.id:
                raise NetworkConfigError(
                    f"Lane key '{lane_id}' does not match lane id '{lane.id}'"
                )
            _validate_lane(lane)

        self._curve_by_source = {}
        for curve_id, curve in self.curves.items():
            if curve_id != curve.id:
                raise NetworkConfigError(
                    f"Curve key '{curve_id}' does not match curve id '{curve.id}'"
                )
            self._validate_curve(curve)
            if curve.source_lane in self._curve_by_source:
                other = self._curve_by_source[curve.source_lane]
                raise NetworkConfigError(
                    f"Lane '{curve.source_lane}' feeds both '{other.id}' "
                    f"and '{curve.id}'"
                )
            self._curve_by_source[curve.source_lane] = curve

        if not self.entry_points:
            raise NetworkConfigError(f"Network '{self.name}' has no entry points")
        for entry in self.entry_points:
            self._require_lane(entry.lane, "entry point")
            if not entry.weight > 0:
                raise NetworkConfigError(
                    f"Entry point on '{entry.lane}' has non-positive weight "
                    f"{entry.weight}"
                )
            if entry.offset < 0:
                raise NetworkConfigError(
                    f"Entry point on '{entry.lane}' has negative offset"
                )

        crosswalk_ids = set()
        for crosswalk in self.crosswalks:
            if crosswalk.id in crosswalk_ids:
                raise NetworkConfigError(f"Duplicate crosswalk id: {crosswalk.id}")
            crosswalk_ids.add(crosswalk.id)
            if min(crosswalk.size) <= 0:
                raise NetworkConfigError(
                    f"Crosswalk '{crosswalk.id}' has an empty footprint"
                )
            for lane_id in crosswalk.lanes:
                self._require_lane(lane_id, f"crosswalk '{crosswalk.id}'")

        for slot in self.initial_population:
            self._validate_population_slot(slot)

    def _require_lane(self, lane_id: str, owner: str) -> Lane:
        if lane_id not in self.lanes:
            raise NetworkConfigError(f"Unknown lane '{lane_id}' in {owner}")
        return self.lanes[lane_id]

    def _validate_curve(self, curve: CurveConnector) -> None:
        source = self._require_lane(curve.source_lane, f"curve '{curve.id}'")
        target = self._require_lane(curve.target_lane, f"curve '{curve.id}'")

        if not curve.radius > 0:
            raise NetworkConfigError(f"Curve '{curve.id}' has non-positive radius")
        if _close(curve.start_angle, curve.end_angle):
            raise NetworkConfigError(f"Curve '{curve.id}' has zero sweep")
        if abs(curve.end_angle - curve.start_angle) > 2 * math.pi:
            raise NetworkConfigError(f"Curve '{curve.id}' sweeps more than a turn")

        # Start point: on the source lane, exactly at the trigger
        sx, sz = curve.point_at(curve.start_angle)
        start_fixed = sz if source.axis == "x" else sx
        start_free = sx if source.axis == "x" else sz
        if not _close(start_fixed, source.fixed):
            raise NetworkConfigError(
                f"Curve '{curve.id}' starts at {start_fixed:.3f}, off lane "
                f"'{source.id}' ({source.fixed})"
            )
        if not _close(start_free, curve.trigger):
            raise NetworkConfigError(
                f"Curve '{curve.id}' trigger {curve.trigger} does not match "
                f"its start point {start_free:.3f}"
            )

        # End point: on the target lane
        ex, ez = curve.point_at(curve.end_angle)
        end_fixed = ez if target.axis == "x" else ex
        if not _close(end_fixed, target.fixed):
            raise NetworkConfigError(
                f"Curve '{curve.id}' ends at {end_fixed:.3f}, off lane "
                f"'{target.id}' ({target.fixed})"
            )

        # Tangents must match the lanes' travel directions
        for angle, lane, where in (
            (curve.start_angle, source, "start"),
            (curve.end_angle, target, "end"),
        ):
            tx, tz = curve.tangent_at(angle)
            ux, uz = lane.unit_vector
            if not (_close(tx, ux) and _close(tz, uz)):
                raise NetworkConfigError(
                    f"Curve '{curve.id}' {where} tangent ({tx:.3f}, {tz:.3f}) "
                    f"does not follow lane '{lane.id}'"
                )

    def _validate_population_slot(self, slot: PopulationSlot) -> None:
        lane = self._require_lane(slot.lane, "initial population")
        lo, hi = slot.range
        if slot.count < 0:
            raise NetworkConfigError(
                f"Initial population on '{slot.lane}' has negative count"
            )
        if lo > hi:
            raise NetworkConfigError(
                f"Initial population range on '{slot.lane}' is reversed"
            )
        if lo < lane.min or hi > lane.max:
            raise NetworkConfigError(
                f"Initial population range {slot.range} leaves lane "
                f"'{slot.lane}' bounds ({lane.min}, {lane.max})"
            )
        curve = self.curve_from(slot.lane)
        if curve is not None:
            # Seeded vehicles must not start on or past the curve trigger
            nearest = hi if lane.direction > 0 else lo
            if (curve.trigger - nearest) * lane.direction <= 0:
                raise NetworkConfigError(
                    f"Initial population range {slot.range} on '{slot.lane}' "
                    f"reaches the curve trigger {curve.trigger}"
                )


def _validate_lane(lane: Lane) -> None:
    if lane.axis not in ("x", "z"):
        raise NetworkConfigError(f"Lane '{lane.id}' has invalid axis '{lane.axis}'")
    if lane.direction not in (1, -1):
        raise NetworkConfigError(
            f"Lane '{lane.id}' direction must be +1 or -1, got {lane.direction}"
        )
    if not lane.min < lane.max:
        raise NetworkConfigError(f"Lane '{lane.id}' has empty bounds")
    if lane.exit_margin < 0:
        raise NetworkConfigError(f"Lane '{lane.id}' has negative exit margin")
    for value in (lane.fixed, lane.min, lane.max, lane.exit_margin):
        if not math.isfinite(value):
            raise NetworkConfigError(f"Lane '{lane.id}' has non-finite geometry")


def _index_unique(items, kind: str) -> dict:
    index = {}
    for item in items:
        if item.id in index:
            raise NetworkConfigError(f"Duplicate {kind} id: {item.id}")
        index[item.id] = item
    return index
