"""
Night-city traffic simulation.

Provides the road network model, the traffic simulator that animates
vehicles on it, and a headless runner for batch experiments.
"""

__version__ = "0.1.0"

from .network import RoadNetwork, NetworkConfigError
from .traffic import SimulationConfig, TrafficSimulator


# Runner imports the scenario loader; load it on first use
def run_headless(*args, **kwargs):
    """
    Run a scenario headless and return collected data and metrics.

    Loads a YAML scenario, seeds the initial population and ticks the
    simulator at a fixed frame time, the way a render loop would.

    Args:
        scenario_name (str): Scenario under experiments/networks
                             (default: "ring_road")
        duration (float): Simulated seconds. Default: 120
        *args, **kwargs: Additional arguments passed to the runner

    Example:
        >>> result = run_headless("ring_road", duration=300, seed=1)
        >>> result['metrics']['throughput']
    """
    from .traffic.runner import run_headless as _run_headless
    return _run_headless(*args, **kwargs)


def list_scenarios():
    """List all available scenarios."""
    from .scenarios import list_scenarios as _list_scenarios
    return _list_scenarios()


__all__ = [
    'RoadNetwork',
    'NetworkConfigError',
    'SimulationConfig',
    'TrafficSimulator',
    'run_headless',
    'list_scenarios',
]
