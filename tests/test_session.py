import threading
import time
from dataclasses import replace

import numpy as np
import pytest

from towersim.config.parameters import ParameterStore, ProcessParameters
from towersim.config.runtime import SimulationConfig
from towersim.config.sensors import SENSOR_ORDER, SensorId, default_specs
from towersim.core.pipeline import run_analysis, seeded_noise_factory
from towersim.core.session import SimulationSession
from towersim.core.sinks import MemorySink
from towersim.errors import ConfigError


def test_run_for_advances_clock_and_fills_buffers() -> None:
    sink = MemorySink()
    session = SimulationSession(sink=sink)
    session.run_for(20)
    assert session.tick_count == 20
    assert session.current_time == pytest.approx(1.0)
    for sid in SENSOR_ORDER:
        assert len(session.buffers[sid]) == 20
    assert len(sink.ticks) == 20 * len(SENSOR_ORDER)
    # fixed per-tick order
    assert [sid for sid, _, _ in sink.ticks[:5]] == list(SENSOR_ORDER)
    temps = sink.ticks_for(SensorId.TEMPERATURE)
    assert [t for t, _ in temps] == [t for t, _ in session.buffers[SensorId.TEMPERATURE]]


def test_buffers_keep_trailing_window() -> None:
    session = SimulationSession(SimulationConfig(window_seconds=2.0))
    session.run_for(100)
    for buf in session.buffers.values():
        oldest, newest = buf.time_span()
        assert oldest >= newest - 2.0
        assert newest == pytest.approx(5.0)


def test_reset_clears_state() -> None:
    session = SimulationSession()
    session.run_for(5)
    session.reset()
    assert session.current_time == 0.0
    assert session.tick_count == 0
    assert all(len(buf) == 0 for buf in session.buffers.values())


def test_same_seed_sessions_match() -> None:
    a = SimulationSession(SimulationConfig(noise_seed=5))
    b = SimulationSession(SimulationConfig(noise_seed=5))
    a.run_for(30)
    b.run_for(30)
    for sid in SENSOR_ORDER:
        assert a.buffers[sid].snapshot() == b.buffers[sid].snapshot()


def test_parameter_changes_apply_to_next_tick() -> None:
    session = SimulationSession()
    session.run_for(1)
    session.store.update(mechanical_vibration_base=5.0, ambient_temp=45.0)
    values = session.tick()
    assert values[SensorId.TEMPERATURE] > 40.0


def test_background_ticker_starts_and_stops() -> None:
    session = SimulationSession(SimulationConfig(tick_interval_s=0.01))
    session.start(analyze=False)
    try:
        deadline = time.monotonic() + 5.0
        while session.tick_count < 3 and time.monotonic() < deadline:
            time.sleep(0.01)
        assert session.is_running
    finally:
        session.stop(timeout=2.0)
    assert not session.is_running
    count = session.tick_count
    assert count >= 3
    time.sleep(0.05)
    assert session.tick_count == count


class BlockingSink:
    """Holds the ticker inside on_tick until released."""

    def __init__(self) -> None:
        self.entered = threading.Event()
        self.release = threading.Event()

    def on_tick(self, sensor_id, time, value) -> None:
        self.entered.set()
        self.release.wait(5.0)

    def on_analysis(self, report) -> None:
        return


def test_stop_timeout_keeps_session_running() -> None:
    sink = BlockingSink()
    session = SimulationSession(SimulationConfig(tick_interval_s=0.01), sink=sink)
    session.start(analyze=False)
    try:
        assert sink.entered.wait(5.0)
        with pytest.raises(RuntimeError):
            session.stop(timeout=0.05)
        assert session.is_running
        with pytest.raises(RuntimeError):
            session.run_for(1)
    finally:
        sink.release.set()
        session.stop(timeout=5.0)
    assert not session.is_running
    count = session.tick_count
    time.sleep(0.05)
    assert session.tick_count == count


def test_manual_stepping_refused_while_ticking() -> None:
    session = SimulationSession(SimulationConfig(tick_interval_s=0.5))
    session.start(analyze=False)
    try:
        with pytest.raises(RuntimeError):
            session.run_for(1)
    finally:
        session.stop(timeout=2.0)


def test_restart_resets_clock() -> None:
    session = SimulationSession(SimulationConfig(tick_interval_s=0.01))
    session.run_for(50)
    session.start(analyze=False)
    session.stop(timeout=2.0)
    assert session.current_time < 2.5


def test_update_analysis_reaches_sink() -> None:
    sink = MemorySink()
    session = SimulationSession(sink=sink)
    report = session.update_analysis()
    assert sink.latest_report() is report
    assert report.ok
    assert list(report.sensors) == list(SENSOR_ORDER)
    assert report.sensors[SensorId.VIBRATION].plan.sample_count == 200_000
    assert report.stability.pole == pytest.approx(-1.0 / 0.67)
    assert report.discrete.stable
    assert "STABLE" in report.laplace_text


def test_update_analysis_is_reproducible_and_fresh() -> None:
    a = SimulationSession().update_analysis()
    b = SimulationSession().update_analysis()
    np.testing.assert_array_equal(
        a.spectrum(SensorId.TEMPERATURE).magnitude,
        b.spectrum(SensorId.TEMPERATURE).magnitude,
    )
    session = SimulationSession()
    first = session.update_analysis()
    second = session.update_analysis()
    assert not np.array_equal(
        first.spectrum(SensorId.HUMIDITY).magnitude,
        second.spectrum(SensorId.HUMIDITY).magnitude,
    )


def test_zero_rate_sensor_fails_alone() -> None:
    specs = default_specs()
    specs[SensorId.AIRFLOW] = replace(specs[SensorId.AIRFLOW], native_rate_hz=0.0)
    report = run_analysis(specs, ParameterStore(), noise_factory=seeded_noise_factory(1))
    assert set(report.failures) == {SensorId.AIRFLOW}
    assert report.failures[SensorId.AIRFLOW].kind == "InvalidSampleCount"
    assert set(report.sensors) == set(SENSOR_ORDER) - {SensorId.AIRFLOW}
    assert not report.ok
    assert report.stability is not None


def test_reference_sensor_zero_rate_keeps_other_spectra() -> None:
    specs = default_specs()
    specs[SensorId.DISSOLVED_OXYGEN] = replace(
        specs[SensorId.DISSOLVED_OXYGEN], native_rate_hz=0.0
    )
    report = run_analysis(specs, ParameterStore(), noise_factory=seeded_noise_factory(1))
    assert set(report.sensors) == set(SENSOR_ORDER) - {SensorId.DISSOLVED_OXYGEN}
    assert report.failures[SensorId.DISSOLVED_OXYGEN].kind == "InvalidSampleCount"
    assert report.discrete is None
    assert report.stability is not None
    assert "unavailable" in report.z_text
    assert not report.ok


def test_reference_sensor_zero_rate_rejected_at_startup() -> None:
    specs = default_specs()
    specs[SensorId.DISSOLVED_OXYGEN] = replace(
        specs[SensorId.DISSOLVED_OXYGEN], native_rate_hz=0.0
    )
    with pytest.raises(ConfigError):
        SimulationSession(specs=specs)


def test_non_finite_parameters_fail_affected_sensors() -> None:
    store = ParameterStore(ProcessParameters(ambient_temp=float("nan")))
    report = run_analysis(default_specs(), store)
    assert set(report.sensors) == {SensorId.VIBRATION}
    assert {f.kind for f in report.failures.values()} == {"NonFiniteSignal"}


def test_keep_signals_exposes_time_series() -> None:
    report = run_analysis(
        default_specs(),
        ParameterStore(),
        SimulationConfig(max_total_samples=1000),
        keep_signals=True,
    )
    sig = report.sensors[SensorId.TEMPERATURE].signal
    assert sig is not None
    assert len(sig) == 1000
    assert sig.sample_rate_hz == 400.0


def test_invalid_time_constant_is_rejected_at_startup() -> None:
    specs = default_specs()
    specs[SensorId.HUMIDITY] = replace(specs[SensorId.HUMIDITY], time_constant_s=0.0)
    with pytest.raises(ConfigError):
        SimulationSession(specs=specs)
