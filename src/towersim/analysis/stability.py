"""
Continuous-time (Laplace) stability of the coupled cooling-tower loop.

Each sensor is modelled as ``G(s) = K / (tau*s + 1)``. Efficiency is taken as

             K_eff * G_F(s) * G_RH(s)
    G_eff = --------------------------
             1 + G_T(s) * G_F(s) * K_fb

and reduced to one first-order equivalent ``K_sys / (tau_sys*s + 1)`` with
``tau_sys`` the slowest contributing time constant (dominant pole). The
reduction is a deliberate approximation: downstream reporting assumes a
single real pole, and the result depends only on the static sensor time
constants, never on the live process parameters.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

import numpy as np
from numpy.typing import ArrayLike

from ..config.sensors import SensorId, SensorSpec
from ..errors import ConfigError


@dataclass(frozen=True)
class FirstOrderModel:
    """``gain / (time_constant * s + 1)``."""

    gain: float
    time_constant: float

    @property
    def pole(self) -> float:
        return -1.0 / self.time_constant

    def evaluate(self, s: complex | np.ndarray) -> complex | np.ndarray:
        """Value of the transfer function at complex frequency ``s``."""
        return self.gain / (self.time_constant * np.asarray(s) + 1.0)


@dataclass(frozen=True)
class LoopTimeConstants:
    """Time constants (s) of temperature, airflow and humidity sensors."""

    tau_t: float
    tau_f: float
    tau_rh: float

    def validate(self) -> None:
        for name in ("tau_t", "tau_f", "tau_rh"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ConfigError(f"{name} must be > 0, got {value!r}")


@dataclass(frozen=True)
class LoopGains:
    k_t: float = 1.0
    k_f: float = 1.0
    k_rh: float = 1.0
    k_eff: float = 1.0
    k_fb: float = 0.5

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> "LoopGains":
        if not mapping:
            return cls()
        known = {"k_t", "k_f", "k_rh", "k_eff", "k_fb"}
        return cls(**{k: float(v) for k, v in mapping.items() if k in known})

    @property
    def feedback_factor(self) -> float:
        """Loop denominator ``1 + K_T * K_F * K_fb``."""
        return 1.0 + self.k_t * self.k_f * self.k_fb

    @property
    def open_loop_gain(self) -> float:
        return self.k_f * self.k_rh


@dataclass(frozen=True)
class ClosedLoopResult:
    """Dominant-pole summary of the closed loop."""

    pole: float
    tau_sys: float
    k_sys: float
    settling_time: float
    bandwidth: float
    natural_frequency: float
    stable: bool
    time_constants: LoopTimeConstants
    gains: LoopGains

    @property
    def open_loop_gain(self) -> float:
        return self.gains.open_loop_gain

    @property
    def feedback_factor(self) -> float:
        return self.gains.feedback_factor

    @property
    def gain_reduction_pct(self) -> float:
        """Percentage by which feedback lowers the gain versus open loop."""
        open_loop = self.open_loop_gain
        if open_loop == 0:
            return 0.0
        return (1.0 - self.k_sys / open_loop) * 100.0

    @property
    def model(self) -> FirstOrderModel:
        return FirstOrderModel(self.k_sys, self.tau_sys)

    def step_response(self, t: ArrayLike) -> np.ndarray:
        """Unit-step response ``K_sys * (1 - exp(s_p * t))``."""
        t_arr = np.asarray(t, dtype=np.float64)
        return self.k_sys * (1.0 - np.exp(self.pole * t_arr))


def closed_loop_pole(
    time_constants: LoopTimeConstants,
    gains: LoopGains | None = None,
) -> ClosedLoopResult:
    """
    Reduce the coupled loop to its dominant first-order pole.

    ``tau_sys = max(tau_T, tau_F, tau_RH)`` and
    ``K_sys = K_eff*K_F*K_RH / (1 + K_T*K_F*K_fb)``; the pole is
    ``s_p = -1/tau_sys``. With positive time constants the pole always lies
    in the left half-plane.

    Raises
    ------
    ConfigError
        If any time constant is not a finite positive number.
    """
    gains = gains or LoopGains()
    time_constants.validate()

    tau_sys = max(time_constants.tau_t, time_constants.tau_f, time_constants.tau_rh)
    k_sys = (gains.k_eff * gains.k_f * gains.k_rh) / gains.feedback_factor
    s_p = -1.0 / tau_sys

    return ClosedLoopResult(
        pole=s_p,
        tau_sys=tau_sys,
        k_sys=k_sys,
        settling_time=-5.0 / s_p,
        bandwidth=abs(s_p),
        natural_frequency=abs(s_p) / (2.0 * math.pi),
        stable=s_p < 0,
        time_constants=time_constants,
        gains=gains,
    )


def time_constants_from_specs(specs: Mapping[SensorId, SensorSpec]) -> LoopTimeConstants:
    """Pick the loop's temperature, airflow and humidity time constants."""
    return LoopTimeConstants(
        tau_t=specs[SensorId.TEMPERATURE].time_constant_s,
        tau_f=specs[SensorId.AIRFLOW].time_constant_s,
        tau_rh=specs[SensorId.HUMIDITY].time_constant_s,
    )


__all__ = [
    "FirstOrderModel",
    "LoopTimeConstants",
    "LoopGains",
    "ClosedLoopResult",
    "closed_loop_pole",
    "time_constants_from_specs",
]
