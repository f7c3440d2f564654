"""Runtime configuration for the tick driver and the analysis pipeline."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping

import yaml

from ..errors import ConfigError
from .parameters import ProcessParameters
from .sensors import SensorSpecs, default_specs, specs_from_mapping

DEFAULT_LOOP_GAINS: Dict[str, float] = {
    "k_t": 1.0,
    "k_f": 1.0,
    "k_rh": 1.0,
    "k_eff": 1.0,
    "k_fb": 0.5,
}

BUNDLED_CONFIG = Path(__file__).with_name("default.yaml")


@dataclass(slots=True)
class SimulationConfig:
    """
    Tuning knobs for the real-time stream and the static analysis batch.

    The defaults reproduce the reference setup: a 50 ms tick advancing the
    simulated clock by 50 ms, a 10 s display window and batches of at least
    128 samples / 60 s, capped at 200k samples per sensor.
    """

    tick_interval_s: float = 0.05
    time_step_s: float = 0.05
    window_seconds: float = 10.0

    min_samples: int = 128
    baseline_duration_s: float = 60.0
    max_total_samples: int = 200_000

    noise_seed: int = 42
    max_workers: int = 5

    reference_zero: float = -0.5
    loop_gains: Dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_LOOP_GAINS)
    )

    def sanitized(self) -> SimulationConfig:
        """Return a copy with derived limits applied."""
        gains = dict(DEFAULT_LOOP_GAINS)
        overrides = self.loop_gains or {}
        if not isinstance(overrides, Mapping):
            raise ConfigError("loop_gains must be a mapping")
        for key, value in overrides.items():
            if key not in DEFAULT_LOOP_GAINS:
                raise ConfigError(f"Unknown loop gain {key!r}")
            gains[key] = float(value)
        zero = float(self.reference_zero)
        if not math.isfinite(zero):
            raise ConfigError(f"reference_zero must be finite, got {zero!r}")
        return SimulationConfig(
            tick_interval_s=max(0.001, float(self.tick_interval_s)),
            time_step_s=max(1e-6, float(self.time_step_s)),
            window_seconds=max(0.1, float(self.window_seconds)),
            min_samples=max(2, int(self.min_samples)),
            baseline_duration_s=max(0.0, float(self.baseline_duration_s)),
            max_total_samples=max(2, int(self.max_total_samples)),
            noise_seed=_non_negative_seed(self.noise_seed),
            max_workers=max(1, min(5, int(self.max_workers))),
            reference_zero=zero,
            loop_gains=gains,
        )


def _non_negative_seed(value: Any) -> int:
    seed = int(value)
    if seed < 0:
        raise ConfigError(f"noise_seed must be >= 0, got {seed}")
    return seed


@dataclass
class SimulationSetup:
    """Everything needed to construct a session, loaded from one YAML file."""

    config: SimulationConfig = field(default_factory=SimulationConfig)
    specs: SensorSpecs = field(default_factory=default_specs)
    parameters: ProcessParameters = field(default_factory=ProcessParameters)


def _recognized_fields() -> set[str]:
    """Return the dataclass field names accepted by :class:`SimulationConfig`."""
    return {f.name for f in fields(SimulationConfig)}


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Flatten the optional top-level ``simulation`` block."""
    if "simulation" in data and isinstance(data["simulation"], Mapping):
        merged: MutableMapping[str, Any] = {}
        for key, value in data.items():
            if key == "simulation":
                merged.update(value)
            else:
                merged[key] = value
        return merged
    return dict(data)


def config_from_mapping(data: Mapping[str, Any] | None) -> SimulationConfig:
    """Build :class:`SimulationConfig` from ``data`` (ignoring unknown keys)."""
    if not data:
        return SimulationConfig()
    normalized = _normalize_mapping(data)
    known = _recognized_fields()
    payload = {key: normalized[key] for key in normalized.keys() & known}
    try:
        return SimulationConfig(**payload).sanitized()
    except (TypeError, ValueError) as exc:
        if isinstance(exc, ConfigError):
            raise
        raise ConfigError(f"Invalid simulation config: {exc}") from exc


def setup_from_mapping(data: Mapping[str, Any] | None) -> SimulationSetup:
    """Build config, sensor registry and initial parameters from one mapping."""
    payload: Mapping[str, Any] = data or {}
    return SimulationSetup(
        config=config_from_mapping(payload),
        specs=specs_from_mapping(payload.get("sensors")),
        parameters=ProcessParameters.from_mapping(payload.get("parameters")),
    )


def _read_yaml(path: str | Path | None) -> Mapping[str, Any]:
    if path is None:
        return {}
    cfg_path = Path(path)
    if not cfg_path.exists():
        return {}
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ConfigError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return raw


def load_config(path: str | Path | None) -> SimulationConfig:
    """
    Load configuration from ``path``.

    Missing files fall back to default :class:`SimulationConfig`.
    """
    return config_from_mapping(_read_yaml(path))


def load_setup(path: str | Path | None) -> SimulationSetup:
    """Load the full :class:`SimulationSetup` (config, sensors, parameters)."""
    return setup_from_mapping(_read_yaml(path))


__all__ = [
    "BUNDLED_CONFIG",
    "DEFAULT_LOOP_GAINS",
    "SimulationConfig",
    "SimulationSetup",
    "config_from_mapping",
    "setup_from_mapping",
    "load_config",
    "load_setup",
]
