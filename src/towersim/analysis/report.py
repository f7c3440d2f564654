"""Plain-text reports for the s-domain and z-domain analysis panels."""

from __future__ import annotations

from typing import List

from .discretization import DiscretePoleZero
from .stability import ClosedLoopResult

RULE = "-" * 60
BANNER = "=" * 60


def _section(lines: List[str], title: str) -> None:
    lines.append(title)
    lines.append(RULE)


def render_laplace_report(result: ClosedLoopResult) -> str:
    """Describe the closed-loop first-order equivalent and its pole."""
    g = result.gains
    tc = result.time_constants
    s_p = result.pole
    lines: List[str] = [
        BANNER,
        "  S-DOMAIN STABILITY ANALYSIS - COOLING TOWER SYSTEM",
        BANNER,
        "",
    ]

    _section(lines, "Individual transfer functions:")
    lines += [
        f"  G_T(s)  = K_T / (tau_T*s + 1)    K_T = {g.k_t:.2f}, tau_T = {tc.tau_t:.2f} s",
        f"  G_F(s)  = K_F / (tau_F*s + 1)    K_F = {g.k_f:.2f}, tau_F = {tc.tau_f:.2f} s",
        f"  G_RH(s) = K_RH / (tau_RH*s + 1)  K_RH = {g.k_rh:.2f}, tau_RH = {tc.tau_rh:.2f} s",
        "",
        "  G_eff(s) = K_eff*G_F(s)*G_RH(s) / (1 + G_T(s)*G_F(s)*K_fb)",
        "",
    ]

    _section(lines, "Equivalent system:")
    lines += [
        "  K_sys = (K_eff*K_F*K_RH) / (1 + K_T*K_F*K_fb)",
        f"        = ({g.k_eff:.2f}*{g.k_f:.2f}*{g.k_rh:.2f}) / "
        f"(1 + {g.k_t:.2f}*{g.k_f:.2f}*{g.k_fb:.2f})",
        f"        = {result.k_sys:.4f}",
        "  G_sys(s) = K_sys / (tau_sys*s + 1)",
        f"  tau_sys ~ {result.tau_sys:.2f} s (dominant time constant)",
        "",
    ]

    _section(lines, "System pole:")
    lines += [
        f"  s_p = -1/tau_sys = -1/{result.tau_sys:.2f} = {s_p:.4f} rad/s",
        f"  Re(s_p) = {s_p:.4f}, Im(s_p) = 0 (real pole)",
        "  Criterion: Re(s) < 0 (left half-plane)",
    ]
    if result.stable:
        lines += [f"  Re(s_p) = {s_p:.4f} < 0  [STABLE]", ""]
    else:
        lines += [f"  Re(s_p) = {s_p:.4f} >= 0  [UNSTABLE]", ""]

    _section(lines, "Response characteristics:")
    lines += [
        f"  Time constant:      {result.tau_sys:.2f} s",
        f"  Settling time (5t): {result.settling_time:.2f} s "
        f"({result.settling_time / 60.0:.2f} min)",
        f"  Bandwidth:          {result.bandwidth:.4f} rad/s",
        f"  Natural frequency:  {result.natural_frequency:.6f} Hz",
        f"  System gain:        {result.k_sys:.4f}",
        f"  Decay:              e^({s_p:.4f}*t)",
        "",
    ]

    _section(lines, "Physical interpretation:")
    lines += [
        "  - the pole represents the cooling tower system dynamics",
        "  - negative feedback keeps the loop stable",
        f"  - dominant time constant: {result.tau_sys:.2f} s",
        "  - the slowest sensor sets the system response",
        "  - closed-loop feedback lowers sensitivity to disturbances",
        "",
    ]

    _section(lines, "Feedback effect:")
    lines += [
        f"  Open-loop gain K_F*K_RH:      {result.open_loop_gain:.2f}",
        f"  Closed-loop gain K_sys:       {result.k_sys:.4f}",
        f"  Feedback factor 1+K_T*K_F*K_fb: {result.feedback_factor:.2f}",
        f"  Gain reduction:               {result.gain_reduction_pct:.1f}%",
        "",
    ]

    _section(lines, "Design guidelines:")
    lines += [
        "  - keep negative feedback (K_fb > 0)",
        "  - keep all sensor time constants positive",
        f"  - sampling frequency >> {2.0 * result.natural_frequency:.6f} Hz (Nyquist)",
        f"  - control delay << {-0.5 / s_p:.2f} s",
        "  - monitor the dominant pole for stability margin",
    ]
    return "\n".join(lines) + "\n"


def render_z_report(dpz: DiscretePoleZero) -> str:
    """Describe the ZOH mapping of the reference pole and zero."""
    T = dpz.sample_interval_s
    verdict = "STABLE" if dpz.stable else "UNSTABLE"
    lines = [
        "Z-domain transfer function: G(z) = Z{G(s)} (ZOH)",
        "Conversion: z = e^(sT), T per sensor",
        "",
        f"Dominant pole (s-domain): p = {dpz.s_pole:.2f}",
        f"  T = {T:.1f} s ({dpz.sensor_id.value})",
        f"  z_p = e^({dpz.s_pole:.2f} * {T:.1f}) = {dpz.z_pole:.6g}",
        "",
        f"Example zero (s-domain): z_s = {dpz.s_zero:.2f}",
        f"  z_z = e^({dpz.s_zero:.2f} * {T:.1f}) = {dpz.z_zero:.6g}",
        "",
        f"Stability: |z_p| = {abs(dpz.z_pole):.3g} "
        f"{'<' if dpz.stable else '>='} 1 -> {verdict}",
    ]
    return "\n".join(lines) + "\n"


__all__ = ["render_laplace_report", "render_z_report"]
