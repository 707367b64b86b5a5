"""
Traffic simulator.

Owns the live vehicle population on a road network and advances it one
frame at a time: car-following, pedestrian yielding, lane/curve
hand-offs, despawning past the network edge and spawning at entry lanes.
"""

import math
from dataclasses import dataclass

import numpy as np

from citysim.network import (
    CurveConnector,
    EntryPoint,
    Lane,
    PopulationSlot,
    RoadNetwork,
)

from .config import SimulationConfig
from .crosswalk import YieldOracle, never_yield
from .factory import VehicleFactory
from .scene import Scene
from .vehicle import CurveProgress, MotionState, VehicleAgent


def resolve_speed(
    full_speed: float,
    leader_distance: float,
    yielding: bool,
    stop_distance: float,
    slow_distance: float,
) -> float:
    """
    Speed for one tick given the gap to the vehicle ahead.

    Stops when yielding or closer than `stop_distance`, ramps linearly
    between `stop_distance` and `slow_distance`, full speed beyond.
    """
    if yielding or leader_distance < stop_distance:
        return 0.0
    if leader_distance < slow_distance:
        ratio = (leader_distance - stop_distance) / (slow_distance - stop_distance)
        return full_speed * min(max(ratio, 0.0), 1.0)
    return full_speed


@dataclass
class SimulationStats:
    """Running counters of one simulation session."""

    ticks: int = 0
    time: float = 0.0
    spawned: int = 0
    despawned: int = 0
    rejected_spawns: int = 0


class TrafficSimulator:
    """
    Frame-driven traffic simulation over a RoadNetwork.

    The host calls `initialize()` once and then `tick(dt)` once per
    rendered frame. Only these two methods mutate the vehicle set.
    """

    def __init__(
        self,
        network: RoadNetwork,
        config: SimulationConfig | None = None,
        yield_oracle: YieldOracle | None = None,
        factory: VehicleFactory | None = None,
        scene: Scene | None = None,
        rng: np.random.Generator | None = None,
    ):
        """
        Initialize the simulator.

        Args:
            network: Validated road network
            config: Simulation parameters (default: SimulationConfig())
            yield_oracle: Pedestrian yield predicate (default: never yield)
            factory: Vehicle factory (default: one sharing `rng`)
            scene: Scene graph receiving vehicle handles (default: new Scene)
            rng: Random generator for entry choice and initial placement
        """
        self.network = network
        self.config = config or SimulationConfig()
        self.yield_oracle: YieldOracle = yield_oracle or never_yield
        self.rng = rng if rng is not None else np.random.default_rng()
        self.factory = factory or VehicleFactory(rng=self.rng)
        self.scene = scene if scene is not None else Scene()

        self._agents: list[VehicleAgent] = []
        self._spawn_timer = 0.0
        self._next_id = 0
        self.stats = SimulationStats()

        entry_weights = np.array([e.weight for e in network.entry_points], dtype=float)
        self._entry_probabilities = entry_weights / entry_weights.sum()

    @property
    def agents(self) -> tuple[VehicleAgent, ...]:
        return tuple(self._agents)

    def set_yield_oracle(self, oracle: YieldOracle | None) -> None:
        """Replace the pedestrian yield predicate."""
        self.yield_oracle = oracle or never_yield

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(
        self, population: list[PopulationSlot] | None = None
    ) -> list[VehicleAgent]:
        """
        Reset the simulation and seed the initial population.

        Vehicles are spread uniformly over each slot's range, keeping
        `spawn_clearance` between them. A vehicle that finds no free spot
        after `placement_attempts` draws is skipped.

        Args:
            population: Slots to seed (default: the network's own)

        Returns:
            The live vehicles after seeding
        """
        for agent in self._agents:
            self.scene.remove(agent.handle)
        self._agents = []
        self._spawn_timer = 0.0
        self._next_id = 0
        self.stats = SimulationStats()

        slots = self.network.initial_population if population is None else population
        for slot in slots:
            lane = self.network.lane(slot.lane)
            lo, hi = slot.range
            for _ in range(slot.count):
                if len(self._agents) >= self.config.max_vehicles:
                    break
                for _ in range(self.config.placement_attempts):
                    coord = float(self.rng.uniform(lo, hi))
                    x, z = lane.point_at(coord)
                    if self.is_spawn_clear(x, z):
                        self._add_agent(lane, x, z)
                        break

        return list(self._agents)

    def tick(self, delta_time: float) -> None:
        """
        Advance the simulation by one frame.

        Negative or non-finite frame times are ignored; long frames are
        clamped to `config.max_delta_time`.
        """
        if not math.isfinite(delta_time) or delta_time < 0:
            return
        dt = min(delta_time, self.config.max_delta_time)

        gaps = self._leader_distances()
        removed: list[VehicleAgent] = []

        for agent in self._agents:
            agent.age += dt
            if agent.state is MotionState.CURVING:
                self._advance_on_curve(agent, dt)
            elif self._advance_straight(agent, gaps.get(agent.id, math.inf), dt):
                removed.append(agent)

            if agent.speed == 0.0:
                agent.waiting_time += dt

        if removed:
            self._remove(removed)

        self._spawn_pass(dt)

        self.stats.ticks += 1
        self.stats.time += dt

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def leader_distance(self, agent: VehicleAgent) -> float:
        """Forward gap from `agent` to the nearest straight vehicle ahead in its lane."""
        return self._leader_distances().get(agent.id, math.inf)

    def is_spawn_clear(self, x: float, z: float) -> bool:
        """True when no vehicle, in any lane, lies within spawn clearance."""
        clearance = self.config.spawn_clearance
        for agent in self._agents:
            if math.hypot(agent.x - x, agent.z - z) < clearance:
                return False
        return True

    def curve_clear(self, curve: CurveConnector) -> bool:
        """
        True when a vehicle may enter `curve` now.

        Curving vehicles do not follow, so a target lane takes one curving
        vehicle at a time, and only while no straight vehicle on it is
        within `stop_distance` of the curve exit.
        """
        target = self.network.lane(curve.target_lane)
        exit_progress = target.progress(*curve.point_at(curve.end_angle))
        for other in self._agents:
            if other.state is MotionState.CURVING:
                if other.curve.target_lane == target.id:
                    return False
            elif other.lane == target.id:
                offset = target.progress(other.x, other.z) - exit_progress
                if abs(offset) < self.config.stop_distance:
                    return False
        return True

    def lane_agents(self, lane_id: str) -> list[VehicleAgent]:
        """Straight vehicles on a lane, rearmost first."""
        lane = self.network.lane(lane_id)
        members = [
            a for a in self._agents
            if a.state is MotionState.STRAIGHT and a.lane == lane_id
        ]
        return sorted(members, key=lambda a: lane.progress(a.x, a.z))

    # ------------------------------------------------------------------
    # Per-tick steps
    # ------------------------------------------------------------------

    def _leader_distances(self) -> dict[str, float]:
        """
        Gap to the vehicle ahead for every straight vehicle.

        Computed from the positions before anyone moves this tick. Curving
        vehicles neither have a leader nor act as one. Vehicles at the
        same progress keep list order; the earlier one sees a zero gap.
        """
        by_lane: dict[str, list[tuple[float, int, VehicleAgent]]] = {}
        for order, agent in enumerate(self._agents):
            if agent.state is not MotionState.STRAIGHT:
                continue
            lane = self.network.lane(agent.lane)
            by_lane.setdefault(agent.lane, []).append(
                (lane.progress(agent.x, agent.z), order, agent)
            )

        gaps: dict[str, float] = {}
        for members in by_lane.values():
            members.sort(key=lambda m: (m[0], m[1]))
            for (progress, _, agent), (ahead, _, _) in zip(members, members[1:]):
                gaps[agent.id] = ahead - progress
            last = members[-1][2]
            gaps[last.id] = math.inf
        return gaps

    def _advance_straight(
        self, agent: VehicleAgent, leader_distance: float, dt: float
    ) -> bool:
        """Move a straight vehicle; returns True when it should be removed."""
        cfg = self.config
        lane = self.network.lane(agent.lane)

        yielding = self.yield_oracle(agent.position, agent.lane)
        agent.speed = resolve_speed(
            agent.full_speed,
            leader_distance,
            yielding,
            cfg.stop_distance,
            cfg.slow_distance,
        )

        coord = lane.coord_of(agent.x, agent.z)
        target = coord + agent.speed * lane.direction * dt

        curve = self.network.curve_from(agent.lane)
        if curve is not None and (target - curve.trigger) * lane.direction >= 0:
            if not self.curve_clear(curve):
                # Hold at the trigger until the curve and its exit are free
                agent.speed = 0.0
                agent.x, agent.z = lane.point_at(curve.trigger)
                agent.heading = lane.heading
                agent.sync_handle(cfg.road_height)
                return False

            # Stop at the trigger point, which is also the arc start
            agent.start_curve(
                CurveProgress(
                    connector=curve.id,
                    radius=curve.radius,
                    angle=curve.start_angle,
                    target_lane=curve.target_lane,
                )
            )
            agent.x, agent.z = curve.point_at(curve.start_angle)
            agent.heading = curve.heading_at(curve.start_angle)
            agent.sync_handle(cfg.road_height)
            return False

        agent.x, agent.z = lane.point_at(target)
        agent.heading = lane.heading
        agent.sync_handle(cfg.road_height)
        return lane.past_exit(agent.x, agent.z)

    def _advance_on_curve(self, agent: VehicleAgent, dt: float) -> None:
        """Move a curving vehicle along its arc, handing off at the end."""
        progress = agent.curve
        curve = self.network.curves[progress.connector]

        # Curves carry no following or yield constraint
        agent.speed = agent.full_speed
        progress.angle = curve.advance(progress.angle, agent.speed * dt)
        agent.x, agent.z = curve.point_at(progress.angle)
        agent.heading = curve.heading_at(progress.angle)

        if curve.reached_end(progress.angle):
            target = self.network.lane(progress.target_lane)
            # Snap onto the lane's fixed coordinate to shed float noise
            agent.x, agent.z = target.point_at(target.coord_of(agent.x, agent.z))
            agent.finish_curve(target.id, target.heading)

        agent.sync_handle(self.config.road_height)

    def _remove(self, removed: list[VehicleAgent]) -> None:
        gone = set(id(a) for a in removed)
        for agent in removed:
            self.scene.remove(agent.handle)
        self._agents = [a for a in self._agents if id(a) not in gone]
        self.stats.despawned += len(removed)

    def _spawn_pass(self, dt: float) -> None:
        self._spawn_timer += dt
        if self._spawn_timer < self.config.spawn_interval:
            return
        if len(self._agents) >= self.config.max_vehicles:
            return

        self._spawn_timer = 0.0
        entry = self._choose_entry()
        self.spawn_at(entry)

    def _choose_entry(self) -> EntryPoint:
        index = self.rng.choice(len(self.network.entry_points), p=self._entry_probabilities)
        return self.network.entry_points[int(index)]

    def spawn_at(self, entry: EntryPoint) -> VehicleAgent | None:
        """
        Spawn one vehicle at an entry point.

        Returns None, without side effects, when the population is at its
        cap or another vehicle is within spawn clearance.
        """
        if len(self._agents) >= self.config.max_vehicles:
            return None

        lane = self.network.lane(entry.lane)
        x, z = entry.spawn_position(lane)
        if not self.is_spawn_clear(x, z):
            self.stats.rejected_spawns += 1
            return None

        agent = self._add_agent(lane, x, z)
        self.stats.spawned += 1
        return agent

    def place_vehicle(self, lane_id: str, coord: float) -> VehicleAgent:
        """
        Put a straight-state vehicle on a lane at a free-axis coordinate.

        Bypasses spawn clearance and the population cap; meant for
        scripted scenes and tests.
        """
        lane = self.network.lane(lane_id)
        if not math.isfinite(coord):
            raise ValueError("Vehicle coordinate must be finite")
        x, z = lane.point_at(coord)
        return self._add_agent(lane, x, z)

    def _add_agent(self, lane: Lane, x: float, z: float) -> VehicleAgent:
        handle = self.factory.create_random_vehicle()
        agent = VehicleAgent(
            id=f"veh{self._next_id}",
            handle=handle,
            lane=lane.id,
            x=x,
            z=z,
            heading=lane.heading,
            full_speed=self.config.full_speed,
            speed=self.config.full_speed,
        )
        self._next_id += 1
        self.scene.add(handle)
        agent.sync_handle(self.config.road_height)
        self._agents.append(agent)
        return agent
