"""Exception types raised by the simulation and analysis engine."""

from __future__ import annotations

from typing import Optional


def _sensor_label(sensor_id: object) -> object:
    return getattr(sensor_id, "value", sensor_id)


class TowerSimError(Exception):
    """Base class for all towersim errors."""


class ConfigError(TowerSimError, ValueError):
    """Invalid sensor or loop configuration detected at startup."""


class InvalidSampleCount(TowerSimError, ValueError):
    """A sensor's planned batch has no samples (e.g. a rate <= 0)."""

    def __init__(self, sensor_id: object, sample_count: int, detail: str = "") -> None:
        self.sensor_id = sensor_id
        self.sample_count = int(sample_count)
        msg = f"{_sensor_label(sensor_id)}: planned sample count {self.sample_count} is not positive"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)


class NonFiniteSignal(TowerSimError, ValueError):
    """Generated samples contain NaN/Inf, usually from malformed parameters."""

    def __init__(self, sensor_id: Optional[object], bad_count: int, total: int) -> None:
        self.sensor_id = sensor_id
        self.bad_count = int(bad_count)
        self.total = int(total)
        label = _sensor_label(sensor_id) if sensor_id is not None else "signal"
        super().__init__(
            f"{label}: {self.bad_count} of {self.total} samples are not finite; "
            "check the process parameters"
        )


class DegenerateSpectrum(TowerSimError, ValueError):
    """Signal too short to produce a spectrum."""

    def __init__(self, n_samples: int) -> None:
        self.n_samples = int(n_samples)
        super().__init__(
            f"spectrum needs at least 2 samples, got {self.n_samples}"
        )


__all__ = [
    "TowerSimError",
    "ConfigError",
    "InvalidSampleCount",
    "NonFiniteSignal",
    "DegenerateSpectrum",
]
