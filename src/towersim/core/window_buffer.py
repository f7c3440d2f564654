"""Trailing time-window buffers feeding the live time-domain display."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator
from typing import Deque, Dict, List, Optional, Tuple

import numpy as np

from ..config.sensors import SENSOR_ORDER, SensorId

DEFAULT_WINDOW_SECONDS = 10.0

WindowSample = Tuple[float, float]


class StreamWindowBuffer:
    """
    Time-ordered ``(time, value)`` samples limited to a trailing window.

    Samples must arrive with non-decreasing timestamps (one per tick). After
    each append, entries older than ``newest - window_seconds`` are dropped
    from the front, so every sample is evicted at most once.
    """

    __slots__ = ("_samples", "window_seconds")

    def __init__(self, window_seconds: float = DEFAULT_WINDOW_SECONDS) -> None:
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be > 0, got {window_seconds}")
        self.window_seconds = float(window_seconds)
        self._samples: Deque[WindowSample] = deque()

    def append(self, time: float, value: float) -> None:
        """Append a sample and evict whatever fell out of the window."""
        t = float(time)
        if self._samples and t < self._samples[-1][0]:
            raise ValueError(
                f"timestamps must be non-decreasing: {t} < {self._samples[-1][0]}"
            )
        self._samples.append((t, float(value)))
        self.evict(self.window_seconds)

    def evict(self, window_seconds: float) -> int:
        """Drop front samples with ``time < newest - window_seconds``."""
        buf = self._samples
        if not buf:
            return 0
        threshold = buf[-1][0] - float(window_seconds)
        dropped = 0
        while buf and buf[0][0] < threshold:
            buf.popleft()
            dropped += 1
        return dropped

    def clear(self) -> None:
        self._samples.clear()

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[WindowSample]:
        return iter(self._samples)

    def latest(self) -> Optional[WindowSample]:
        if not self._samples:
            return None
        return self._samples[-1]

    def snapshot(self) -> List[WindowSample]:
        return list(self._samples)

    def time_span(self) -> Optional[Tuple[float, float]]:
        """``(oldest, newest)`` timestamps currently held."""
        if not self._samples:
            return None
        return self._samples[0][0], self._samples[-1][0]

    def current_range(self) -> Tuple[float, float]:
        """
        X-axis range for the display.

        Stays at ``(0, W)`` until the newest sample passes ``W`` and then
        slides as ``(newest - W, newest)``.
        """
        latest = self.latest()
        if latest is None or latest[0] <= self.window_seconds:
            return 0.0, self.window_seconds
        return latest[0] - self.window_seconds, latest[0]

    def series(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return ``(times, values)`` as float64 arrays for a plotting sink."""
        count = len(self._samples)
        if count == 0:
            return np.empty(0, dtype=np.float64), np.empty(0, dtype=np.float64)
        times = np.fromiter((s[0] for s in self._samples), dtype=np.float64, count=count)
        values = np.fromiter((s[1] for s in self._samples), dtype=np.float64, count=count)
        return times, values


def initialize_window_buffers(
    sensor_ids: Iterable[SensorId] = SENSOR_ORDER,
    *,
    window_seconds: float = DEFAULT_WINDOW_SECONDS,
) -> Dict[SensorId, StreamWindowBuffer]:
    """Create one independent buffer per sensor."""
    return {sid: StreamWindowBuffer(window_seconds) for sid in sensor_ids}


__all__ = [
    "DEFAULT_WINDOW_SECONDS",
    "WindowSample",
    "StreamWindowBuffer",
    "initialize_window_buffers",
]
