"""Batch sizing for the static analysis of multi-rate sensors."""
from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from ..config.sensors import SensorSpec
from ..errors import InvalidSampleCount

DEFAULT_MIN_SAMPLES = 128
DEFAULT_BASELINE_DURATION_S = 60.0
DEFAULT_MAX_TOTAL_SAMPLES = 200_000


@dataclass(frozen=True)
class BatchPlan:
    """Number of samples and spacing for one sensor's analysis batch."""

    sample_count: int
    dt: float
    duration_s: float

    @property
    def sample_rate_hz(self) -> float:
        return 1.0 / self.dt

    def times(self) -> np.ndarray:
        """Sample instants ``i * dt`` for ``i`` in ``[0, sample_count)``."""
        return np.arange(self.sample_count, dtype=np.float64) * self.dt


def plan_batch(
    spec: SensorSpec,
    min_samples: int = DEFAULT_MIN_SAMPLES,
    baseline_duration_s: float = DEFAULT_BASELINE_DURATION_S,
    max_total_samples: int = DEFAULT_MAX_TOTAL_SAMPLES,
) -> BatchPlan:
    """
    Size a static batch so every sensor yields a usable spectrum.

    Slow sensors (e.g. dissolved oxygen at 0.033 Hz) get their duration
    stretched until ``min_samples`` fit; fast sensors (vibration at 10 kHz)
    are capped at ``max_total_samples``. A capped batch may cover less than
    one native period; that is accepted.

    Raises
    ------
    InvalidSampleCount
        If the native rate is not a finite positive number or the plan ends
        up with no samples.
    """
    rate = float(spec.native_rate_hz)
    if not math.isfinite(rate) or rate <= 0:
        raise InvalidSampleCount(
            spec.id, 0, f"native_rate_hz must be > 0, got {rate!r}"
        )

    required_duration = min_samples / rate
    duration = max(float(baseline_duration_s), required_duration)
    if duration * rate > max_total_samples:
        duration = max_total_samples / rate

    # absorb float error in rate * duration before flooring
    sample_count = int(math.floor(round(rate * duration, 9)))
    if sample_count <= 0:
        raise InvalidSampleCount(spec.id, sample_count)

    return BatchPlan(sample_count=sample_count, dt=1.0 / rate, duration_s=duration)


__all__ = [
    "DEFAULT_MIN_SAMPLES",
    "DEFAULT_BASELINE_DURATION_S",
    "DEFAULT_MAX_TOTAL_SAMPLES",
    "BatchPlan",
    "plan_batch",
]
