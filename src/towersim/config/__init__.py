"""Configuration objects and helpers for towersim.

This package loads the YAML descriptor of a simulation run and turns it into
typed objects used everywhere else:
- :mod:`sensors` holds the fixed five-sensor registry (rates, time constants)
- :mod:`parameters` holds the operator-editable process parameters
- :mod:`runtime` holds tick/batch tuning knobs and the YAML loader
"""

from .parameters import ParameterStore, ProcessParameters
from .runtime import (
    SimulationConfig,
    SimulationSetup,
    config_from_mapping,
    load_config,
    load_setup,
)
from .sensors import SENSOR_ORDER, SensorId, SensorSpec, default_specs

__all__ = [
    "ParameterStore",
    "ProcessParameters",
    "SimulationConfig",
    "SimulationSetup",
    "config_from_mapping",
    "load_config",
    "load_setup",
    "SENSOR_ORDER",
    "SensorId",
    "SensorSpec",
    "default_specs",
]
