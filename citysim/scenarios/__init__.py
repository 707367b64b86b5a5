"""
Scenario module.

Loads, validates and saves YAML scenarios: a road network together with
the simulation parameters to run on it.
"""

from .scenario import Scenario
from .loader import (
    load_scenario,
    load_scenario_from_path,
    save_scenario_to_path,
    validate_scenario,
    list_scenarios,
)

__all__ = [
    # Dataclasses
    'Scenario',
    # Loader functions
    'load_scenario',
    'load_scenario_from_path',
    'save_scenario_to_path',
    'validate_scenario',
    'list_scenarios',
]
