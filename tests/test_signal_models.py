import math

import numpy as np
import pytest

from towersim.config.parameters import ProcessParameters
from towersim.config.sensors import SENSOR_ORDER, SensorId
from towersim.sensors.models import generate, generate_batch
from towersim.sensors.noise import NoiseSource


class CountingSource:
    """Uniform source that records how many draws were requested."""

    def __init__(self, value: float = 0.5) -> None:
        self.value = value
        self.draws = 0

    def uniform(self) -> float:
        self.draws += 1
        return self.value

    def uniform_array(self, n: int) -> np.ndarray:
        self.draws += n
        return np.full(n, self.value)


EXTREMES = [
    ProcessParameters(),
    ProcessParameters(ambient_temp=0.0, humidity=100.0, wind_speed=0.0, water_temp=60.0),
    ProcessParameters(ambient_temp=50.0, humidity=0.0, wind_speed=30.0, water_temp=10.0),
    ProcessParameters(ambient_temp=50.0, humidity=100.0, wind_speed=0.0,
                      mechanical_vibration_base=5.0, water_temp=60.0),
]


@pytest.mark.parametrize("params", EXTREMES)
def test_clamped_sensors_stay_in_range(params: ProcessParameters) -> None:
    times = np.linspace(0.0, 50.0, 5001)
    noise = NoiseSource(7)
    rh = generate_batch(SensorId.HUMIDITY, times, params, noise)
    flow = generate_batch(SensorId.AIRFLOW, times, params, noise)
    oxygen = generate_batch(SensorId.DISSOLVED_OXYGEN, times, params, noise)
    assert rh.min() >= 0.0 and rh.max() <= 100.0
    assert flow.min() >= 0.0
    assert oxygen.min() >= 0.0


def test_vibration_at_time_zero_is_only_noise() -> None:
    noise = NoiseSource(3)
    for _ in range(200):
        value = generate(SensorId.VIBRATION, 0.0, ProcessParameters(), noise)
        assert abs(value) <= 0.05


def test_temperature_without_noise_matches_formula() -> None:
    params = ProcessParameters(ambient_temp=20.0, wind_speed=6.0, mechanical_vibration_base=1.0)
    value = generate(SensorId.TEMPERATURE, 0.5, params, CountingSource(0.5))
    expected = 20.0 + 2.0 * math.sin(2 * math.pi * 0.25) - 0.8 + 0.3
    assert value == pytest.approx(expected)


def test_each_call_consumes_one_draw() -> None:
    source = CountingSource()
    for sid in SENSOR_ORDER:
        generate(sid, 1.0, ProcessParameters(), source)
    assert source.draws == len(SENSOR_ORDER)

    source = CountingSource()
    generate_batch(SensorId.AIRFLOW, np.arange(17) * 0.8, ProcessParameters(), source)
    assert source.draws == 17


def test_same_seed_gives_same_stream() -> None:
    times = np.arange(256) / 400.0
    a = generate_batch(SensorId.HUMIDITY, times, ProcessParameters(), NoiseSource(42))
    b = generate_batch(SensorId.HUMIDITY, times, ProcessParameters(), NoiseSource(42))
    c = generate_batch(SensorId.HUMIDITY, times, ProcessParameters(), NoiseSource(43))
    np.testing.assert_array_equal(a, b)
    assert not np.array_equal(a, c)


def test_nan_parameters_propagate() -> None:
    params = ProcessParameters(ambient_temp=float("nan"))
    noise = NoiseSource(1)
    assert math.isnan(generate(SensorId.TEMPERATURE, 1.0, params, noise))
    assert math.isnan(generate(SensorId.HUMIDITY, 1.0, params, noise))
    assert math.isnan(generate(SensorId.AIRFLOW, 1.0, params, noise))
    assert math.isnan(generate(SensorId.DISSOLVED_OXYGEN, 1.0, params, noise))
    assert math.isfinite(generate(SensorId.VIBRATION, 1.0, params, noise))


def test_spawned_sources_are_independent() -> None:
    root = NoiseSource(42)
    first = root.spawn(0).uniform_array(8)
    again = NoiseSource(42).spawn(0).uniform_array(8)
    other = root.spawn(1).uniform_array(8)
    nested = root.spawn(1).spawn(0).uniform_array(8)
    np.testing.assert_array_equal(first, again)
    assert not np.array_equal(first, other)
    assert not np.array_equal(other, nested)


def test_negative_draw_count_rejected() -> None:
    with pytest.raises(ValueError):
        NoiseSource(0).uniform_array(-1)
