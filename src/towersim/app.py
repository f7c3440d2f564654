"""Command-line entry point: run a headless simulation and print the analysis."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, Sequence

from .config.runtime import BUNDLED_CONFIG, load_setup
from .config.sensors import SENSOR_ORDER
from .core.pipeline import AnalysisReport
from .core.session import SimulationSession
from .errors import TowerSimError

logger = logging.getLogger(__name__)

# CLI flag -> ProcessParameters field
_PARAM_FLAGS: Dict[str, str] = {
    "ambient_temp": "ambient_temp",
    "humidity": "humidity",
    "wind_speed": "wind_speed",
    "vibration_base": "mechanical_vibration_base",
    "water_temp": "water_temp",
}


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="towersim",
        description="Cooling-tower five-sensor simulation and stability analysis.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=BUNDLED_CONFIG,
        help="YAML configuration file (default: bundled default.yaml)",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=10.0,
        help="Simulated seconds of real-time stream to run before analysing",
    )
    parser.add_argument("--ambient-temp", type=float, help="Ambient temperature in °C")
    parser.add_argument("--humidity", type=float, help="Relative humidity in %%")
    parser.add_argument("--wind-speed", type=float, help="Wind speed in m/s")
    parser.add_argument(
        "--vibration-base", type=float, help="Mechanical vibration base amplitude in g"
    )
    parser.add_argument("--water-temp", type=float, help="Water temperature in °C")
    parser.add_argument(
        "--plot-dir",
        type=Path,
        default=None,
        help="Write stream.png and analysis.png into this directory",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser


def format_spectrum_summary(report: AnalysisReport) -> str:
    """One line per sensor: sample count, rate and the strongest non-DC bin."""
    lines = ["SPECTRUM SUMMARY"]
    for sid in SENSOR_ORDER:
        entry = report.sensors.get(sid)
        if entry is None:
            failure = report.failures.get(sid)
            reason = f"{failure.kind}: {failure.message}" if failure else "not analysed"
            lines.append(f"  {sid.value:<17} FAILED ({reason})")
            continue
        spectrum = entry.spectrum
        peak = spectrum.peak()
        peak_text = "n/a" if peak is None else f"{peak[0]:.4g} Hz (|X| = {peak[1]:.4g})"
        lines.append(
            f"  {sid.value:<17} N={entry.plan.sample_count:<7d} "
            f"fs={spectrum.sample_rate_hz:<8g} peak {peak_text}"
        )
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        setup = load_setup(args.config)
        overrides = {
            field: getattr(args, flag)
            for flag, field in _PARAM_FLAGS.items()
            if getattr(args, flag) is not None
        }
        if overrides:
            setup.parameters = setup.parameters.with_changes(**overrides)
        session = SimulationSession.from_setup(setup)
    except TowerSimError as exc:
        print(f"[towersim] configuration error: {exc}", file=sys.stderr)
        return 2

    n_ticks = max(0, int(round(args.duration / session.config.time_step_s)))
    session.run_for(n_ticks)
    logger.info("ran %d ticks, t=%.2f s", session.tick_count, session.current_time)

    try:
        report = session.update_analysis()
    except TowerSimError as exc:
        print(f"[towersim] analysis error: {exc}", file=sys.stderr)
        return 2
    print(report.laplace_text)
    print()
    print(report.z_text)
    print()
    print(format_spectrum_summary(report))

    if args.plot_dir is not None:
        # deferred so text-only runs do not import matplotlib
        from .tools.plotter import save_analysis_figure, save_stream_figure

        stream_png = save_stream_figure(
            session.buffers, args.plot_dir / "stream.png", session.specs
        )
        analysis_png = save_analysis_figure(
            report, args.plot_dir / "analysis.png", session.specs
        )
        print(f"\n[towersim] wrote {stream_png} and {analysis_png}")

    return 0 if report.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
