"""Shared fixtures: the ring-road network built in code."""

import math

import numpy as np
import pytest

from citysim.network import (
    Crosswalk,
    CurveConnector,
    EntryPoint,
    Lane,
    PopulationSlot,
    RoadNetwork,
)
from citysim.traffic import SimulationConfig, TrafficSimulator


def ring_lanes() -> list[Lane]:
    return [
        Lane("mainEast", "x", -17, -40, 280, 1, exit_margin=20),
        Lane("mainWest", "x", -23, -40, 280, -1, exit_margin=30),
        Lane("southDown", "z", -52, -240, -35, -1, exit_margin=20),
        Lane("southUp", "z", -58, -240, -35, 1, exit_margin=30),
    ]


def ring_curves() -> list[CurveConnector]:
    return [
        CurveConnector(
            id="westToSouth",
            source_lane="mainWest",
            target_lane="southDown",
            center=(-40, -35),
            radius=12,
            start_angle=math.pi / 2,
            end_angle=math.pi,
            trigger=-40,
        ),
        CurveConnector(
            id="southToEast",
            source_lane="southUp",
            target_lane="mainEast",
            center=(-40, -35),
            radius=18,
            start_angle=math.pi,
            end_angle=math.pi / 2,
            trigger=-35,
        ),
    ]


def build_ring_road(**overrides) -> RoadNetwork:
    parts = dict(
        name="ring_road",
        lanes=ring_lanes(),
        curves=ring_curves(),
        entry_points=[
            EntryPoint("mainWest", weight=0.6, offset=10),
            EntryPoint("southUp", weight=0.4, offset=10),
        ],
        crosswalks=[
            Crosswalk("main1", (25, -20), (4, 10), ("mainWest", "mainEast")),
            Crosswalk("main2", (-35, -20), (4, 10), ("mainWest", "mainEast")),
            Crosswalk("south1", (-55, -90), (10, 4), ("southUp", "southDown")),
        ],
        initial_population=[
            PopulationSlot("mainWest", 4, (20, 220)),
            PopulationSlot("southUp", 2, (-240, -80)),
        ],
    )
    parts.update(overrides)
    return RoadNetwork.from_lists(**parts)


@pytest.fixture
def ring_road() -> RoadNetwork:
    return build_ring_road()


@pytest.fixture
def make_simulator(ring_road):
    """Factory for simulators on the ring road with a seeded generator."""

    def _make(seed: int = 0, yield_oracle=None, **config_overrides) -> TrafficSimulator:
        return TrafficSimulator(
            ring_road,
            config=SimulationConfig(**config_overrides),
            yield_oracle=yield_oracle,
            rng=np.random.default_rng(seed),
        )

    return _make


@pytest.fixture
def ring_road_parts():
    """Builder accepting keyword overrides of the ring-road tables."""
    return build_ring_road
