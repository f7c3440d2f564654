"""Per-sensor analysis pipeline: plan -> generate -> spectrum, fanned out."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional

import numpy as np

from ..analysis.discretization import DiscretePoleZero, discretize_reference
from ..analysis.fft import Spectrum, compute_spectrum
from ..analysis.report import render_laplace_report, render_z_report
from ..analysis.sampling import BatchPlan, plan_batch
from ..analysis.stability import (
    ClosedLoopResult,
    LoopGains,
    closed_loop_pole,
    time_constants_from_specs,
)
from ..config.parameters import ParameterStore
from ..config.runtime import SimulationConfig
from ..config.sensors import REFERENCE_SENSOR, SENSOR_ORDER, SensorId, SensorSpec
from ..errors import ConfigError, DegenerateSpectrum, InvalidSampleCount, NonFiniteSignal
from ..sensors.models import generate_batch
from ..sensors.noise import NoiseSource, UniformSource
from ..tools.debug import format_timings, time_block

logger = logging.getLogger(__name__)

MAX_WORKERS = 5

NoiseFactory = Callable[[SensorId], UniformSource]


@dataclass(frozen=True)
class Signal:
    """One generated batch for one sensor."""

    sensor_id: SensorId
    time: np.ndarray
    value: np.ndarray
    sample_rate_hz: float

    def __len__(self) -> int:
        return int(self.time.size)


@dataclass(frozen=True)
class SensorAnalysis:
    sensor_id: SensorId
    plan: BatchPlan
    spectrum: Spectrum
    signal: Optional[Signal] = None


@dataclass(frozen=True)
class SensorFailure:
    """A per-sensor error that did not stop the other sensors."""

    sensor_id: SensorId
    kind: str
    message: str


@dataclass
class AnalysisReport:
    """Everything an "update analysis" request hands to the rendering sink."""

    sensors: Dict[SensorId, SensorAnalysis] = field(default_factory=dict)
    failures: Dict[SensorId, SensorFailure] = field(default_factory=dict)
    stability: Optional[ClosedLoopResult] = None
    discrete: Optional[DiscretePoleZero] = None
    laplace_text: str = ""
    z_text: str = ""
    elapsed_s: float = 0.0
    timings: Dict[str, float] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    def spectrum(self, sensor_id: SensorId) -> Optional[Spectrum]:
        entry = self.sensors.get(sensor_id)
        return entry.spectrum if entry is not None else None


def analyze_sensor(
    spec: SensorSpec,
    store: ParameterStore,
    noise: UniformSource,
    config: SimulationConfig | None = None,
    *,
    keep_signal: bool = False,
) -> SensorAnalysis:
    """
    Run the plan/generate/spectrum chain for one sensor.

    Parameters are snapshotted once, at generation time; other sensors in
    the same request may observe a later snapshot.
    """
    cfg = config or SimulationConfig()
    plan = plan_batch(
        spec,
        min_samples=cfg.min_samples,
        baseline_duration_s=cfg.baseline_duration_s,
        max_total_samples=cfg.max_total_samples,
    )
    times = plan.times()
    values = generate_batch(spec.id, times, store.snapshot(), noise)
    spectrum = compute_spectrum(values, spec.native_rate_hz, sensor_id=spec.id.value)
    logger.debug(
        "%s: %d samples over %.1f s, %d bins",
        spec.id.value,
        plan.sample_count,
        plan.duration_s,
        len(spectrum),
    )
    signal = None
    if keep_signal:
        signal = Signal(spec.id, times, values, spec.native_rate_hz)
    return SensorAnalysis(spec.id, plan, spectrum, signal)


def seeded_noise_factory(seed: int | NoiseSource) -> NoiseFactory:
    """One independent source per sensor, derived from a seed or a parent source."""
    root = seed if isinstance(seed, NoiseSource) else NoiseSource(seed)

    def factory(sensor_id: SensorId) -> UniformSource:
        return root.spawn(SENSOR_ORDER.index(sensor_id))

    return factory


def run_analysis(
    specs: Mapping[SensorId, SensorSpec],
    store: ParameterStore,
    config: SimulationConfig | None = None,
    *,
    noise_factory: NoiseFactory | None = None,
    keep_signals: bool = False,
) -> AnalysisReport:
    """
    Analyse every sensor concurrently and attach the s/z-domain results.

    ``InvalidSampleCount``, ``NonFiniteSignal`` and ``DegenerateSpectrum``
    are recorded per sensor; the remaining sensors still complete. A
    reference sensor that cannot be discretized leaves ``discrete`` unset
    and is recorded as a failure instead of aborting the report.
    """
    cfg = config or SimulationConfig()
    factory = noise_factory or seeded_noise_factory(cfg.noise_seed)
    report = AnalysisReport()
    start = time.monotonic()

    ordered: List[SensorSpec] = [specs[sid] for sid in SENSOR_ORDER if sid in specs]
    workers = max(1, min(MAX_WORKERS, int(cfg.max_workers), len(ordered) or 1))

    with time_block("spectra", report.timings):
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="towersim-analysis") as pool:
            futures = {
                pool.submit(
                    analyze_sensor,
                    spec,
                    store,
                    factory(spec.id),
                    cfg,
                    keep_signal=keep_signals,
                ): spec.id
                for spec in ordered
            }
            for fut in as_completed(futures):
                sid = futures[fut]
                try:
                    report.sensors[sid] = fut.result()
                except (InvalidSampleCount, NonFiniteSignal, DegenerateSpectrum) as exc:
                    kind = type(exc).__name__
                    report.failures[sid] = SensorFailure(sid, kind, str(exc))
                    logger.warning("analysis failed for %s: %s", sid.value, exc)

    # keep sensor order stable regardless of completion order
    report.sensors = {sid: report.sensors[sid] for sid in SENSOR_ORDER if sid in report.sensors}

    with time_block("s/z-domain", report.timings):
        gains = LoopGains.from_mapping(cfg.loop_gains)
        report.stability = closed_loop_pole(time_constants_from_specs(specs), gains)
        report.laplace_text = render_laplace_report(report.stability)
        try:
            report.discrete = discretize_reference(
                specs, zero=cfg.reference_zero, sensor_id=REFERENCE_SENSOR
            )
        except ConfigError as exc:
            logger.warning("z-domain analysis skipped: %s", exc)
            report.failures.setdefault(
                REFERENCE_SENSOR,
                SensorFailure(REFERENCE_SENSOR, type(exc).__name__, str(exc)),
            )
            report.z_text = f"Z-domain analysis unavailable: {exc}\n"
        else:
            report.z_text = render_z_report(report.discrete)

    report.elapsed_s = time.monotonic() - start
    logger.info(
        "analysis done in %.3f s: %d ok, %d failed, pole %.4f rad/s",
        report.elapsed_s,
        len(report.sensors),
        len(report.failures),
        report.stability.pole,
    )
    logger.debug("analysis phases: %s", format_timings(report.timings))
    return report


__all__ = [
    "MAX_WORKERS",
    "NoiseFactory",
    "Signal",
    "SensorAnalysis",
    "SensorFailure",
    "AnalysisReport",
    "analyze_sensor",
    "seeded_noise_factory",
    "run_analysis",
]
