"""
Physical signal models for the five cooling-tower sensors.

Every model is a sum of a baseline tied to one process parameter, fixed
frequency sinusoids, linear cross-coupling terms and a bounded uniform noise
term ``amplitude * (U - 0.5)``. The functions accept either a scalar time or
a NumPy array of times together with a matching draw ``u`` so that the
real-time tick and the bulk analysis batch share the exact same formula.

Humidity is clamped to [0, 100]; airflow and dissolved oxygen are floored at
0. Temperature and vibration are left unclamped. NaN inputs propagate.
"""

from __future__ import annotations

from typing import Callable, Dict, Union

import numpy as np
from numpy.typing import ArrayLike

from ..config.parameters import ProcessParameters
from ..config.sensors import SensorId
from .noise import UniformSource

TWO_PI = 2.0 * np.pi

Value = Union[float, np.ndarray]
SignalFn = Callable[[ArrayLike, ProcessParameters, ArrayLike], Value]


def temperature(t: ArrayLike, p: ProcessParameters, u: ArrayLike) -> Value:
    periodic = 2.0 * np.sin(TWO_PI * 0.5 * t)
    wind_effect = -0.8 * (p.wind_speed - 5.0)
    vib_effect = 0.3 * p.mechanical_vibration_base
    noise = 0.5 * (u - 0.5)
    return p.ambient_temp + periodic + wind_effect + vib_effect + noise


def humidity(t: ArrayLike, p: ProcessParameters, u: ArrayLike) -> Value:
    temp_effect = -1.5 * (p.ambient_temp - 25.0)
    water_effect = 0.8 * (p.water_temp - 30.0)
    periodic = 5.0 * np.sin(TWO_PI * 0.3 * t)
    wind_effect = -0.5 * (p.wind_speed - 5.0)
    noise = 1.0 * (u - 0.5)
    raw = p.humidity + temp_effect + water_effect + periodic + wind_effect + noise
    return np.clip(raw, 0.0, 100.0)


def airflow(t: ArrayLike, p: ProcessParameters, u: ArrayLike) -> Value:
    periodic = 1.5 * np.sin(TWO_PI * 1.0 * t) + 0.5 * np.sin(TWO_PI * 3.0 * t)
    temp_effect = 0.3 * (p.ambient_temp - 25.0)
    humidity_effect = -0.05 * (p.humidity - 60.0)
    noise = 0.3 * (u - 0.5)
    raw = p.wind_speed + periodic + temp_effect + humidity_effect + noise
    return np.maximum(raw, 0.0)


def vibration(t: ArrayLike, p: ProcessParameters, u: ArrayLike) -> Value:
    # 60 Hz fan fundamental, 120 Hz harmonic, 5 Hz wind buffeting
    fundamental = p.mechanical_vibration_base * np.sin(TWO_PI * 60.0 * t)
    harmonic = 0.2 * np.sin(TWO_PI * 120.0 * t)
    wind_effect = 0.05 * p.wind_speed * np.sin(TWO_PI * 5.0 * t)
    noise = 0.1 * (u - 0.5)
    return fundamental + harmonic + wind_effect + noise


def dissolved_oxygen(t: ArrayLike, p: ProcessParameters, u: ArrayLike) -> Value:
    temp_factor = (p.water_temp - 20.0) / 10.0
    base = 8.0 - 2.0 * temp_factor
    periodic = 0.5 * np.sin(TWO_PI * 0.2 * t)
    aeration = 0.5 * (p.wind_speed - 5.0)
    ambient_effect = -0.15 * (p.ambient_temp - 25.0)
    noise = 0.2 * (u - 0.5)
    return np.maximum(base + periodic + aeration + ambient_effect + noise, 0.0)


SIGNAL_MODELS: Dict[SensorId, SignalFn] = {
    SensorId.TEMPERATURE: temperature,
    SensorId.HUMIDITY: humidity,
    SensorId.AIRFLOW: airflow,
    SensorId.VIBRATION: vibration,
    SensorId.DISSOLVED_OXYGEN: dissolved_oxygen,
}


def generate(
    sensor_id: SensorId,
    t: float,
    params: ProcessParameters,
    noise: UniformSource,
) -> float:
    """
    Return one instantaneous reading of ``sensor_id`` at time ``t``.

    Consumes exactly one draw from ``noise``.
    """
    model = SIGNAL_MODELS[SensorId(sensor_id)]
    return float(model(float(t), params, noise.uniform()))


def generate_batch(
    sensor_id: SensorId,
    times: ArrayLike,
    params: ProcessParameters,
    noise: UniformSource,
) -> np.ndarray:
    """
    Vectorised :func:`generate` over ``times``.

    Draws one noise value per sample, in time order.
    """
    model = SIGNAL_MODELS[SensorId(sensor_id)]
    t_arr = np.asarray(times, dtype=np.float64).reshape(-1)
    u = noise.uniform_array(t_arr.size)
    values = model(t_arr, params, u)
    return np.asarray(values, dtype=np.float64).reshape(-1)


__all__ = [
    "SIGNAL_MODELS",
    "temperature",
    "humidity",
    "airflow",
    "vibration",
    "dissolved_oxygen",
    "generate",
    "generate_batch",
]
