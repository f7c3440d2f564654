"""Rendering sinks that receive live ticks and analysis reports."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Protocol, Tuple

from ..config.sensors import SensorId

if TYPE_CHECKING:  # pragma: no cover - circular import guard
    from .pipeline import AnalysisReport

TickRecord = Tuple[SensorId, float, float]


class RenderSink(Protocol):
    """Interface implemented by anything that displays engine output."""

    def on_tick(self, sensor_id: SensorId, time: float, value: float) -> None:  # pragma: no cover - protocol
        ...

    def on_analysis(self, report: "AnalysisReport") -> None:  # pragma: no cover - protocol
        ...


@dataclass(slots=True)
class NullSink:
    """No-op sink used when nothing is attached."""

    def on_tick(self, sensor_id: SensorId, time: float, value: float) -> None:  # pragma: no cover - trivial
        return

    def on_analysis(self, report: "AnalysisReport") -> None:  # pragma: no cover - trivial
        return


@dataclass(slots=True)
class MemorySink:
    """Keeps every tick and the latest report; handy for headless runs."""

    ticks: List[TickRecord] = field(default_factory=list)
    reports: List["AnalysisReport"] = field(default_factory=list)
    _lock: threading.Lock = field(init=False, default_factory=threading.Lock, repr=False)

    def on_tick(self, sensor_id: SensorId, time: float, value: float) -> None:
        with self._lock:
            self.ticks.append((sensor_id, time, value))

    def on_analysis(self, report: "AnalysisReport") -> None:
        with self._lock:
            self.reports.append(report)

    def latest_report(self) -> Optional["AnalysisReport"]:
        with self._lock:
            return self.reports[-1] if self.reports else None

    def ticks_for(self, sensor_id: SensorId) -> List[Tuple[float, float]]:
        with self._lock:
            return [(t, v) for sid, t, v in self.ticks if sid == sensor_id]


__all__ = ["TickRecord", "RenderSink", "NullSink", "MemorySink"]
