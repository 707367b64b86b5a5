"""
Road network module.

Static description of lanes, curve connectors, entry points and
crosswalks that the traffic simulator runs on.
"""

from .network import (
    CONTINUITY_TOLERANCE,
    Crosswalk,
    CurveConnector,
    EntryPoint,
    Lane,
    NetworkConfigError,
    PopulationSlot,
    RoadNetwork,
    heading_for_direction,
)

__all__ = [
    'CONTINUITY_TOLERANCE',
    'Crosswalk',
    'CurveConnector',
    'EntryPoint',
    'Lane',
    'NetworkConfigError',
    'PopulationSlot',
    'RoadNetwork',
    'heading_for_direction',
]
