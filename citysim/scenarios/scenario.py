"""
Scenario definition: a road network plus the simulation parameters run on it.
"""

from dataclasses import dataclass, field

from citysim.network import RoadNetwork
from citysim.traffic.config import SimulationConfig


@dataclass
class Scenario:
    """Complete scenario definition."""

    network: RoadNetwork
    config: SimulationConfig = field(default_factory=SimulationConfig)

    @property
    def name(self) -> str:
        return self.network.name
