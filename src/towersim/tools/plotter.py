"""
Headless Matplotlib renderer for towersim output.

Draws the same panels an interactive front-end would: the live time-domain
windows, one spectrum per sensor (x-axis capped at Nyquist), the s-plane
pole and the z-plane pole/zero against the unit circle. Figures are built
on an explicit Agg canvas so no GUI backend is needed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

import numpy as np
from matplotlib.axes import Axes
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from ..config.sensors import SENSOR_ORDER, DEFAULT_SENSOR_SPECS, SensorId, SensorSpec
from ..core.pipeline import AnalysisReport
from ..core.window_buffer import StreamWindowBuffer


def _label(sensor_id: SensorId, specs: Mapping[SensorId, SensorSpec] | None) -> str:
    spec = (specs or DEFAULT_SENSOR_SPECS).get(sensor_id)
    if spec is None:
        return sensor_id.value
    return f"{spec.label} [{spec.unit}]"


def _format_interval(seconds: float) -> str:
    return f"{seconds * 1000:.2f} ms" if seconds < 1.0 else f"{seconds:.2f} s"


def build_stream_figure(
    buffers: Mapping[SensorId, StreamWindowBuffer],
    specs: Mapping[SensorId, SensorSpec] | None = None,
) -> Figure:
    """One subplot per sensor showing its current trailing window."""
    sensor_ids = [sid for sid in SENSOR_ORDER if sid in buffers]
    fig = Figure(figsize=(10, 2.0 * max(1, len(sensor_ids))))
    FigureCanvasAgg(fig)
    axes = fig.subplots(len(sensor_ids), 1, squeeze=False)[:, 0]
    for ax, sid in zip(axes, sensor_ids):
        buf = buffers[sid]
        t, y = buf.series()
        ax.plot(t, y, linewidth=1.0)
        x_min, x_max = buf.current_range()
        ax.set_xlim(x_min, x_max)
        ax.set_ylabel(_label(sid, specs))
        ax.grid(True)
    axes[-1].set_xlabel("Time (s)")
    fig.tight_layout()
    return fig


def _plot_s_plane(ax: Axes, report: AnalysisReport) -> None:
    result = report.stability
    if result is None:
        ax.set_visible(False)
        return
    pole = result.pole
    margin = max(0.5, abs(pole) * 0.5)
    x_min, x_max = pole - margin, margin * 0.5
    y_half = (x_max - x_min) * 0.4
    ax.axvspan(x_min, 0.0, color="tab:green", alpha=0.08, label="stable (LHP)")
    ax.axhline(0.0, color="black", linewidth=0.8)
    ax.axvline(0.0, color="black", linewidth=0.8)
    ax.plot([pole], [0.0], "rx", markersize=12, markeredgewidth=3,
            label=f"s_p = {pole:.4f}")
    ax.set_xlim(x_min, x_max)
    ax.set_ylim(-y_half, y_half)
    ax.set_xlabel("Real (sigma)")
    ax.set_ylabel("Imag (j omega)")
    ax.set_title(f"s-plane, tau_sys = {result.tau_sys:.2f} s")
    ax.legend(loc="upper left")
    ax.grid(True)


def _plot_z_plane(ax: Axes, report: AnalysisReport) -> None:
    dpz = report.discrete
    if dpz is None:
        ax.set_visible(False)
        return
    theta = np.linspace(0.0, 2.0 * np.pi, 1000)
    ax.plot(np.cos(theta), np.sin(theta), "k--", linewidth=1.0, label="|z| = 1")
    ax.plot([dpz.z_pole], [0.0], "rx", markersize=12, markeredgewidth=3, label="pole")
    ax.plot([dpz.z_zero], [0.0], "o", markersize=12, markerfacecolor="none",
            markeredgecolor="tab:blue", markeredgewidth=2, label="zero")
    ax.set_xlim(-1.5, 1.5)
    ax.set_ylim(-1.5, 1.5)
    ax.set_aspect("equal")
    ax.set_title(f"z-plane, T = {dpz.sample_interval_s:.1f} s")
    ax.legend(loc="upper right")
    ax.grid(True)


def build_analysis_figure(
    report: AnalysisReport,
    specs: Mapping[SensorId, SensorSpec] | None = None,
) -> Figure:
    """Spectra of every analysed sensor plus the s- and z-plane panels."""
    fig = Figure(figsize=(14, 10))
    FigureCanvasAgg(fig)
    grid = fig.add_gridspec(3, 3)
    slots = [grid[0, 0], grid[0, 1], grid[0, 2], grid[1, 0], grid[1, 1]]
    for slot, sid in zip(slots, SENSOR_ORDER):
        ax = fig.add_subplot(slot)
        entry = report.sensors.get(sid)
        if entry is None:
            failure = report.failures.get(sid)
            msg = failure.kind if failure is not None else "not analysed"
            ax.text(0.5, 0.5, msg, ha="center", va="center", transform=ax.transAxes)
            ax.set_title(_label(sid, specs))
            continue
        spectrum = entry.spectrum
        freqs, mags = spectrum.as_series()
        ax.plot(freqs, mags, color="tab:red", linewidth=1.2)
        ax.set_xlim(0.0, spectrum.nyquist_hz)
        ax.set_title(
            f"{_label(sid, specs)}\nfs = {spectrum.sample_rate_hz:g} Hz, "
            f"Ts = {_format_interval(spectrum.sample_interval_s)}",
            fontsize=9,
        )
        ax.set_xlabel("Frequency (Hz)")
        ax.set_ylabel("Magnitude")
        ax.grid(True)

    _plot_s_plane(fig.add_subplot(grid[1, 2]), report)
    _plot_z_plane(fig.add_subplot(grid[2, 0]), report)

    text_ax = fig.add_subplot(grid[2, 1:])
    text_ax.axis("off")
    text_ax.text(0.0, 1.0, report.z_text, va="top", family="monospace", fontsize=8)

    fig.tight_layout()
    return fig


def save_stream_figure(
    buffers: Mapping[SensorId, StreamWindowBuffer],
    path: str | Path,
    specs: Mapping[SensorId, SensorSpec] | None = None,
) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    build_stream_figure(buffers, specs).savefig(out, dpi=100)
    return out


def save_analysis_figure(
    report: AnalysisReport,
    path: str | Path,
    specs: Mapping[SensorId, SensorSpec] | None = None,
) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    build_analysis_figure(report, specs).savefig(out, dpi=100)
    return out


__all__ = [
    "build_stream_figure",
    "build_analysis_figure",
    "save_stream_figure",
    "save_analysis_figure",
]
