"""Core streaming and analysis orchestration.

This package sits between the pure signal/analysis helpers and whatever
renders their output: the session drives the real-time tick into per-sensor
window buffers, and the pipeline fans the static analysis out over sensors.
"""

from .pipeline import (
    AnalysisReport,
    SensorAnalysis,
    SensorFailure,
    Signal,
    analyze_sensor,
    run_analysis,
)
from .session import SimulationSession
from .sinks import MemorySink, NullSink, RenderSink
from .window_buffer import StreamWindowBuffer, initialize_window_buffers

__all__ = [
    "AnalysisReport",
    "SensorAnalysis",
    "SensorFailure",
    "Signal",
    "analyze_sensor",
    "run_analysis",
    "SimulationSession",
    "MemorySink",
    "NullSink",
    "RenderSink",
    "StreamWindowBuffer",
    "initialize_window_buffers",
]
