"""Process parameters and the snapshot store shared by tick and batch paths."""

from __future__ import annotations

import threading
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Tuple

from ..errors import ConfigError

# (default, minimum, maximum) as offered by the operator input form.
PARAMETER_BOUNDS: Dict[str, Tuple[float, float, float]] = {
    "ambient_temp": (25.0, 0.0, 50.0),
    "humidity": (60.0, 0.0, 100.0),
    "wind_speed": (5.0, 0.0, 30.0),
    "mechanical_vibration_base": (0.5, 0.0, 5.0),
    "water_temp": (30.0, 10.0, 60.0),
}


@dataclass(frozen=True, slots=True)
class ProcessParameters:
    """
    Operating point of the cooling tower.

    Units: ambient/water temperature in °C, humidity in %RH, wind speed in
    m/s and the mechanical vibration base amplitude in g. Values are taken
    as-is; NaN/Inf are passed through to the signal models on purpose.
    """

    ambient_temp: float = 25.0
    humidity: float = 60.0
    wind_speed: float = 5.0
    mechanical_vibration_base: float = 0.5
    water_temp: float = 30.0

    def clamped(self) -> ProcessParameters:
        """Return a copy limited to the operator form bounds."""
        values = {}
        for name, (_, lo, hi) in PARAMETER_BOUNDS.items():
            values[name] = min(hi, max(lo, float(getattr(self, name))))
        return ProcessParameters(**values)

    def with_changes(self, **changes: float) -> ProcessParameters:
        unknown = set(changes) - _field_names()
        if unknown:
            raise ConfigError(f"Unknown process parameter(s): {sorted(unknown)}")
        return replace(self, **{k: float(v) for k, v in changes.items()})

    def to_mapping(self) -> dict:
        return {name: float(getattr(self, name)) for name in _field_names()}

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> ProcessParameters:
        """Build parameters from a mapping, ignoring unknown keys."""
        if not mapping:
            return cls()
        if not isinstance(mapping, Mapping):
            raise ConfigError(
                f"'parameters' must be a mapping, got {type(mapping).__name__}"
            )
        payload = {}
        for key in mapping.keys() & _field_names():
            try:
                payload[key] = float(mapping[key])
            except (TypeError, ValueError):
                raise ConfigError(
                    f"parameter {key!r} must be a number, got {mapping[key]!r}"
                ) from None
        return cls(**payload)


def _field_names() -> set[str]:
    return {f.name for f in fields(ProcessParameters)}


class ParameterStore:
    """
    Holder for the current :class:`ProcessParameters` snapshot.

    Writers publish a whole new frozen object; readers grab the reference.
    A reader therefore always sees one consistent operating point, even
    though consecutive reads may observe different ones.
    """

    def __init__(self, initial: ProcessParameters | None = None) -> None:
        self._current = initial or ProcessParameters()
        self._lock = threading.Lock()

    def snapshot(self) -> ProcessParameters:
        """Return the current immutable parameter set."""
        return self._current

    def publish(self, params: ProcessParameters) -> None:
        """Replace the current snapshot."""
        if not isinstance(params, ProcessParameters):
            raise TypeError(
                f"expected ProcessParameters, got {type(params).__name__}"
            )
        with self._lock:
            self._current = params

    def update(self, **changes: float) -> ProcessParameters:
        """Publish a copy of the current snapshot with ``changes`` applied."""
        with self._lock:
            updated = self._current.with_changes(**changes)
            self._current = updated
        return updated


__all__ = ["PARAMETER_BOUNDS", "ProcessParameters", "ParameterStore"]
