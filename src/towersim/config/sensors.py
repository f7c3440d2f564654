"""Sensor registry: native sampling rates and first-order time constants."""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Mapping, Tuple

from ..errors import ConfigError


class SensorId(str, Enum):
    """The five cooling-tower sensors, in display/tick order."""

    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    AIRFLOW = "airflow"
    VIBRATION = "vibration"
    DISSOLVED_OXYGEN = "dissolved_oxygen"

    @classmethod
    def parse(cls, value: Any) -> "SensorId":
        """Resolve a config key such as ``"DO"`` or ``"dissolved-oxygen"``."""
        if isinstance(value, SensorId):
            return value
        raw = str(value).strip().lower().replace("-", "_").replace(" ", "_")
        raw = _SENSOR_ALIASES.get(raw, raw)
        try:
            return cls(raw)
        except ValueError:
            raise ConfigError(f"Unknown sensor {value!r}") from None


_SENSOR_ALIASES = {
    "temp": "temperature",
    "t": "temperature",
    "rh": "humidity",
    "air": "airflow",
    "vib": "vibration",
    "do": "dissolved_oxygen",
    "oxygen": "dissolved_oxygen",
}


@dataclass(frozen=True)
class SensorSpec:
    """Static description of one sensor (rate in Hz, time constant in s)."""

    id: SensorId
    native_rate_hz: float
    time_constant_s: float
    label: str
    unit: str

    @property
    def sample_interval_s(self) -> float:
        """Native sampling interval ``1 / native_rate_hz``."""
        return 1.0 / self.native_rate_hz

    @property
    def nyquist_hz(self) -> float:
        return 0.5 * self.native_rate_hz


SensorSpecs = Dict[SensorId, SensorSpec]

# SHT85 (temperature/humidity), Testo anemometer, PCB accelerometer, DO probe.
DEFAULT_SENSOR_SPECS: Mapping[SensorId, SensorSpec] = {
    SensorId.TEMPERATURE: SensorSpec(
        SensorId.TEMPERATURE, 400.0, 0.5, "Temperature", "°C"
    ),
    SensorId.HUMIDITY: SensorSpec(
        SensorId.HUMIDITY, 400.0, 0.67, "Humidity", "%RH"
    ),
    SensorId.AIRFLOW: SensorSpec(
        SensorId.AIRFLOW, 1.25, 0.2, "Airflow", "m/s"
    ),
    SensorId.VIBRATION: SensorSpec(
        SensorId.VIBRATION, 10000.0, 0.02, "Vibration", "g"
    ),
    SensorId.DISSOLVED_OXYGEN: SensorSpec(
        SensorId.DISSOLVED_OXYGEN, 0.033, 1.25, "Dissolved Oxygen", "mg/L"
    ),
}

SENSOR_ORDER: Tuple[SensorId, ...] = tuple(SensorId)

# sensor whose pole and sampling interval feed the z-domain analysis
REFERENCE_SENSOR = SensorId.DISSOLVED_OXYGEN


def default_specs() -> SensorSpecs:
    """Return a fresh mapping of the built-in sensor specs."""
    return dict(DEFAULT_SENSOR_SPECS)


def validate_specs(specs: Mapping[SensorId, SensorSpec]) -> None:
    """
    Check the startup invariants of the registry.

    All five sensors must be present and every time constant must be a
    finite positive number. The reference sensor also needs a finite
    positive rate, since its sampling interval drives the z-domain
    analysis. Other rates are *not* checked here: a bad rate only disables
    that sensor's analysis (see :class:`~towersim.errors.InvalidSampleCount`).
    """
    missing = [sid.value for sid in SENSOR_ORDER if sid not in specs]
    if missing:
        raise ConfigError(f"Missing sensor specs: {', '.join(missing)}")
    for sid, spec in specs.items():
        tau = spec.time_constant_s
        if not math.isfinite(tau) or tau <= 0:
            raise ConfigError(
                f"{sid.value}: time_constant_s must be > 0, got {tau!r}"
            )
        if math.isnan(spec.native_rate_hz):
            raise ConfigError(f"{sid.value}: native_rate_hz is NaN")
    ref_rate = specs[REFERENCE_SENSOR].native_rate_hz
    if not math.isfinite(ref_rate) or ref_rate <= 0:
        raise ConfigError(
            f"{REFERENCE_SENSOR.value}: native_rate_hz must be > 0, got {ref_rate!r}"
        )


def _coerce_float(value: Any, name: str, sensor: SensorId) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(
            f"{sensor.value}: {name} must be a number, got {value!r}"
        ) from None


def specs_from_mapping(mapping: Mapping[str, Any] | None) -> SensorSpecs:
    """
    Build the sensor registry from a ``sensors`` block such as::

        sensors:
          dissolved_oxygen:
            native_rate_hz: 0.033
            time_constant_s: 1.25

    Sensors that are not mentioned keep their defaults.
    """
    specs = default_specs()
    payload: Mapping[str, Any] = mapping or {}
    if not isinstance(payload, Mapping):
        raise ConfigError(
            f"'sensors' must be a mapping, got {type(payload).__name__}"
        )

    for key, block in payload.items():
        sid = SensorId.parse(key)
        if not isinstance(block, Mapping):
            raise ConfigError(f"{sid.value}: expected a mapping of overrides")
        changes: Dict[str, Any] = {}
        if "native_rate_hz" in block:
            changes["native_rate_hz"] = _coerce_float(
                block["native_rate_hz"], "native_rate_hz", sid
            )
        if "time_constant_s" in block:
            changes["time_constant_s"] = _coerce_float(
                block["time_constant_s"], "time_constant_s", sid
            )
        if "label" in block:
            changes["label"] = str(block["label"])
        if "unit" in block:
            changes["unit"] = str(block["unit"])
        specs[sid] = replace(specs[sid], **changes)

    validate_specs(specs)
    return specs


def specs_to_mapping(specs: Mapping[SensorId, SensorSpec]) -> dict:
    """Serialize the registry back into a YAML-friendly mapping."""
    return {
        "sensors": {
            sid.value: {
                "native_rate_hz": float(spec.native_rate_hz),
                "time_constant_s": float(spec.time_constant_s),
            }
            for sid, spec in specs.items()
        }
    }


__all__ = [
    "SensorId",
    "SensorSpec",
    "SensorSpecs",
    "DEFAULT_SENSOR_SPECS",
    "SENSOR_ORDER",
    "REFERENCE_SENSOR",
    "default_specs",
    "validate_specs",
    "specs_from_mapping",
    "specs_to_mapping",
]
