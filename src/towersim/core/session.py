"""Simulation session: real-time tick driver plus on-demand analysis."""

from __future__ import annotations

import logging
import threading
from typing import Dict, Mapping, Optional

from ..config.parameters import ParameterStore, ProcessParameters
from ..config.runtime import SimulationConfig, SimulationSetup
from ..config.sensors import SENSOR_ORDER, SensorId, SensorSpec, default_specs, validate_specs
from ..sensors.models import generate
from ..sensors.noise import NoiseSource
from .pipeline import AnalysisReport, run_analysis, seeded_noise_factory
from .sinks import NullSink, RenderSink
from .window_buffer import StreamWindowBuffer, initialize_window_buffers

logger = logging.getLogger(__name__)


class SimulationSession:
    """
    Owns the live state of one simulation run.

    A background ticker advances ``current_time`` by ``time_step_s`` every
    ``tick_interval_s`` and appends one fresh reading per sensor to its
    :class:`StreamWindowBuffer`. Each tick runs under the session lock, so
    :meth:`stop` (which joins the ticker) and :meth:`reset` never observe a
    half-advanced clock or a partially evicted buffer.
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        specs: Mapping[SensorId, SensorSpec] | None = None,
        store: ParameterStore | None = None,
        sink: RenderSink | None = None,
    ) -> None:
        self.config = (config or SimulationConfig()).sanitized()
        self.specs: Dict[SensorId, SensorSpec] = dict(specs or default_specs())
        validate_specs(self.specs)
        self.store = store or ParameterStore()
        self.sink: RenderSink = sink or NullSink()

        self.noise = NoiseSource(self.config.noise_seed)
        self.buffers: Dict[SensorId, StreamWindowBuffer] = initialize_window_buffers(
            SENSOR_ORDER, window_seconds=self.config.window_seconds
        )
        self.current_time = 0.0
        self.tick_count = 0
        self._analysis_count = 0

        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @classmethod
    def from_setup(
        cls, setup: SimulationSetup, sink: RenderSink | None = None
    ) -> SimulationSession:
        return cls(
            config=setup.config,
            specs=setup.specs,
            store=ParameterStore(setup.parameters),
            sink=sink,
        )

    # ------------------------------------------------------------------ state
    @property
    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    @property
    def parameters(self) -> ProcessParameters:
        return self.store.snapshot()

    def reset(self) -> None:
        """Clear every window buffer and rewind the clock to 0."""
        with self._lock:
            for buf in self.buffers.values():
                buf.clear()
            self.current_time = 0.0
            self.tick_count = 0

    # ------------------------------------------------------------------- tick
    def tick(self) -> Dict[SensorId, float]:
        """
        Advance the clock one step and sample every sensor once.

        The parameter snapshot is taken once per tick, so all five readings
        of a tick share the same operating point.
        """
        with self._lock:
            self.current_time += self.config.time_step_s
            self.tick_count += 1
            t = self.current_time
            params = self.store.snapshot()
            values: Dict[SensorId, float] = {}
            for sid in SENSOR_ORDER:
                value = generate(sid, t, params, self.noise)
                self.buffers[sid].append(t, value)
                values[sid] = value

        for sid, value in values.items():
            try:
                self.sink.on_tick(sid, t, value)
            except Exception:
                logger.exception("sink rejected tick for %s at t=%.3f", sid.value, t)
        return values

    def run_for(self, n_ticks: int) -> None:
        """Advance ``n_ticks`` synchronously (headless runs and tests)."""
        if self.is_running:
            raise RuntimeError("stop the ticker before stepping manually")
        for _ in range(int(n_ticks)):
            self.tick()

    # -------------------------------------------------------------- lifecycle
    def start(self, *, analyze: bool = True) -> None:
        """
        (Re)start the real-time stream from ``t = 0``.

        Any running ticker is stopped first. When ``analyze`` is true an
        initial :meth:`update_analysis` runs right after the ticker starts.
        """
        self.stop()
        self.reset()
        self._stop_event = threading.Event()
        thread = threading.Thread(
            target=self._run,
            args=(self._stop_event,),
            name="TowerSimTicker",
            daemon=True,
        )
        self._thread = thread
        thread.start()
        logger.info(
            "simulation started: step %.3f s every %.3f s, window %.1f s",
            self.config.time_step_s,
            self.config.tick_interval_s,
            self.config.window_seconds,
        )
        if analyze:
            self.update_analysis()

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Stop the ticker and wait for the in-flight tick to finish.

        Raises ``RuntimeError`` if the ticker is still alive after
        ``timeout``; the session then stays marked as running, so neither
        :meth:`run_for` nor :meth:`start` can mutate state under it.
        """
        thread = self._thread
        if thread is None:
            return
        self._stop_event.set()
        if thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning(
                    "ticker did not stop within %s s; session still running", timeout
                )
                raise RuntimeError("ticker thread did not stop in time")
        self._thread = None
        logger.info(
            "simulation stopped at t=%.2f s after %d ticks",
            self.current_time,
            self.tick_count,
        )

    def _run(self, stop_event: threading.Event) -> None:
        interval = self.config.tick_interval_s
        while not stop_event.wait(interval):
            self.tick()

    # --------------------------------------------------------------- analysis
    def update_analysis(self, *, keep_signals: bool = False) -> AnalysisReport:
        """
        Regenerate the static batches and recompute every analysis.

        Each request draws from fresh per-sensor noise streams derived from
        the session seed and the request number.
        """
        with self._lock:
            request_no = self._analysis_count
            self._analysis_count += 1
        factory = seeded_noise_factory(self.noise.spawn(request_no))
        report = run_analysis(
            self.specs,
            self.store,
            self.config,
            noise_factory=factory,
            keep_signals=keep_signals,
        )
        try:
            self.sink.on_analysis(report)
        except Exception:
            logger.exception("sink rejected analysis report")
        return report


__all__ = ["SimulationSession"]
