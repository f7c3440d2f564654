"""Zero-order-hold mapping of continuous poles/zeros to the z-plane."""

from __future__ import annotations

import cmath
import math
from dataclasses import dataclass
from typing import Mapping, Tuple

import numpy as np
from scipy import signal

from ..config.sensors import REFERENCE_SENSOR, SensorId, SensorSpec
from ..errors import ConfigError

DEFAULT_REFERENCE_ZERO = -0.5


def to_discrete(s: complex | float, sample_interval_s: float) -> complex | float:
    """
    Map a continuous-time root to the z-plane via ``z = exp(s * T)``.

    Exact for a pole under zero-order hold; applied to an isolated zero it is
    the usual illustrative convention. Real input gives a real result.
    """
    if sample_interval_s <= 0:
        raise ValueError(f"sample_interval_s must be > 0, got {sample_interval_s}")
    if isinstance(s, complex):
        return cmath.exp(s * sample_interval_s)
    return math.exp(float(s) * sample_interval_s)


def is_stable(z: complex | float) -> bool:
    """Unit-circle criterion: ``|z| < 1``."""
    return abs(z) < 1.0


@dataclass(frozen=True)
class DiscretePoleZero:
    """Continuous pole/zero pair and its z-domain image at interval ``T``."""

    sensor_id: SensorId
    sample_interval_s: float
    s_pole: float
    s_zero: float
    z_pole: float
    z_zero: float

    @property
    def stable(self) -> bool:
        return is_stable(self.z_pole)


def discretize_pole_zero(
    sensor_id: SensorId,
    s_pole: float,
    s_zero: float,
    sample_interval_s: float,
) -> DiscretePoleZero:
    return DiscretePoleZero(
        sensor_id=sensor_id,
        sample_interval_s=sample_interval_s,
        s_pole=s_pole,
        s_zero=s_zero,
        z_pole=to_discrete(s_pole, sample_interval_s),
        z_zero=to_discrete(s_zero, sample_interval_s),
    )


def discretize_reference(
    specs: Mapping[SensorId, SensorSpec],
    zero: float = DEFAULT_REFERENCE_ZERO,
    sensor_id: SensorId = REFERENCE_SENSOR,
) -> DiscretePoleZero:
    """
    Discretize the reference sensor's pole ``-1/tau`` and an example zero.

    The reference is the dissolved-oxygen sensor, sampled every
    ``1 / 0.033 Hz ~ 30.3 s``; its pole ``-0.8`` lands at ``~3e-11``.
    """
    spec = specs[sensor_id]
    tau = spec.time_constant_s
    if not math.isfinite(tau) or tau <= 0:
        raise ConfigError(f"{sensor_id.value}: time_constant_s must be > 0, got {tau!r}")
    rate = spec.native_rate_hz
    if not math.isfinite(rate) or rate <= 0:
        raise ConfigError(f"{sensor_id.value}: native_rate_hz must be > 0, got {rate!r}")
    return discretize_pole_zero(sensor_id, -1.0 / tau, float(zero), 1.0 / rate)


def zoh_transfer_function(
    gain: float,
    time_constant: float,
    sample_interval_s: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Exact ZOH equivalent of ``gain / (time_constant*s + 1)``.

    Returns ``(num, den)`` coefficient arrays in descending powers of ``z``;
    the single root of ``den`` is ``exp(-T / time_constant)``.
    """
    if time_constant <= 0:
        raise ConfigError(f"time_constant must be > 0, got {time_constant!r}")
    if sample_interval_s <= 0:
        raise ValueError(f"sample_interval_s must be > 0, got {sample_interval_s}")
    num_d, den_d, _ = signal.cont2discrete(
        ([gain], [time_constant, 1.0]), sample_interval_s, method="zoh"
    )
    return np.atleast_1d(np.squeeze(num_d)), np.atleast_1d(np.squeeze(den_d))


__all__ = [
    "DEFAULT_REFERENCE_ZERO",
    "to_discrete",
    "is_stable",
    "DiscretePoleZero",
    "discretize_pole_zero",
    "discretize_reference",
    "zoh_transfer_function",
]
