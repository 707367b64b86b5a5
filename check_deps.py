"""
Dependency check script for the night-city traffic project.

Checks installation and basic functionality of required Python packages.
"""

import sys


print("🐍 Python version:", sys.version)

# --- NumPy ---
try:
    import numpy as np

    rng = np.random.default_rng(0)
    print("✅ NumPy OK, draw:", rng.choice(5, p=[0.3, 0.3, 0.1, 0.15, 0.15]))
except Exception as e:
    print("❌ NumPy FAIL:", e)

# --- pandas ---
try:
    import pandas as pd

    df = pd.DataFrame([{"speed": 9.0}, {"speed": 0.0}])
    print("✅ pandas OK, mean speed:", df["speed"].mean())
except Exception as e:
    print("❌ pandas FAIL:", e)

# --- PyYAML ---
try:
    import yaml

    print("✅ PyYAML OK, parsed:", yaml.safe_load("lanes: [mainWest]"))
except Exception as e:
    print("❌ PyYAML FAIL:", e)

# --- jsonschema ---
try:
    import jsonschema

    jsonschema.validate(instance={"name": "x"}, schema={"type": "object"})
    print("✅ jsonschema OK")
except Exception as e:
    print("❌ jsonschema FAIL:", e)

# --- Scenario ---
try:
    from citysim.scenarios import load_scenario

    scenario = load_scenario("ring_road")
    print("✅ Scenario OK, lanes:", list(scenario.network.lanes))
except Exception as e:
    print("❌ Scenario FAIL:", e)

print("All checks done.")
