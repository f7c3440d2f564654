import pathlib
import sys
import unittest
from dataclasses import replace

# Ensure src/ is on path for direct test execution
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from towersim.analysis.sampling import plan_batch  # noqa: E402
from towersim.config.sensors import DEFAULT_SENSOR_SPECS, SensorId  # noqa: E402
from towersim.errors import InvalidSampleCount  # noqa: E402


class PlanBatchTest(unittest.TestCase):
    def test_every_default_sensor_gets_enough_samples(self):
        for sid, spec in DEFAULT_SENSOR_SPECS.items():
            plan = plan_batch(spec)
            self.assertGreaterEqual(plan.sample_count, 128, sid.value)
            self.assertLessEqual(plan.sample_count, 200_000, sid.value)
            self.assertAlmostEqual(plan.dt, 1.0 / spec.native_rate_hz)

    def test_fast_sensor_is_capped(self):
        plan = plan_batch(DEFAULT_SENSOR_SPECS[SensorId.VIBRATION])
        self.assertEqual(plan.sample_count, 200_000)
        self.assertAlmostEqual(plan.duration_s, 20.0)

    def test_slow_sensor_duration_is_stretched(self):
        plan = plan_batch(DEFAULT_SENSOR_SPECS[SensorId.DISSOLVED_OXYGEN])
        self.assertEqual(plan.sample_count, 128)
        self.assertAlmostEqual(plan.duration_s, 128 / 0.033, places=6)

    def test_baseline_duration_wins_for_mid_rate_sensor(self):
        plan = plan_batch(DEFAULT_SENSOR_SPECS[SensorId.TEMPERATURE])
        self.assertEqual(plan.sample_count, 24_000)
        self.assertAlmostEqual(plan.duration_s, 60.0)

    def test_airflow_needs_more_than_baseline(self):
        plan = plan_batch(DEFAULT_SENSOR_SPECS[SensorId.AIRFLOW])
        self.assertEqual(plan.sample_count, 128)
        self.assertAlmostEqual(plan.duration_s, 102.4)

    def test_zero_rate_is_rejected(self):
        spec = replace(DEFAULT_SENSOR_SPECS[SensorId.AIRFLOW], native_rate_hz=0.0)
        with self.assertRaises(InvalidSampleCount) as ctx:
            plan_batch(spec)
        self.assertEqual(ctx.exception.sensor_id, SensorId.AIRFLOW)
        self.assertEqual(ctx.exception.sample_count, 0)
        self.assertTrue(str(ctx.exception).startswith("airflow: "))

    def test_negative_and_nan_rates_are_rejected(self):
        base = DEFAULT_SENSOR_SPECS[SensorId.HUMIDITY]
        for rate in (-5.0, float("nan"), float("inf")):
            with self.assertRaises(InvalidSampleCount):
                plan_batch(replace(base, native_rate_hz=rate))


def test_times_are_evenly_spaced() -> None:
    plan = plan_batch(DEFAULT_SENSOR_SPECS[SensorId.AIRFLOW])
    times = plan.times()
    assert times.size == plan.sample_count
    assert times[0] == 0.0
    assert abs(times[1] - 0.8) < 1e-12
    assert abs(plan.sample_rate_hz - 1.25) < 1e-12


def test_custom_limits_are_honoured() -> None:
    spec = DEFAULT_SENSOR_SPECS[SensorId.TEMPERATURE]
    plan = plan_batch(spec, min_samples=16, baseline_duration_s=1.0, max_total_samples=100)
    assert plan.sample_count == 100
