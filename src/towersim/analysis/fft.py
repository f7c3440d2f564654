"""One-sided magnitude spectra of synthesized sensor signals."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from numpy.typing import ArrayLike

from ..errors import DegenerateSpectrum, NonFiniteSignal


@dataclass(frozen=True)
class Spectrum:
    """
    One-sided magnitude spectrum.

    ``frequency_hz`` starts at 0 and is strictly increasing; every bin is at
    or below the Nyquist frequency ``sample_rate_hz / 2``.
    """

    frequency_hz: np.ndarray
    magnitude: np.ndarray
    sample_rate_hz: float
    n_fft: int

    @property
    def nyquist_hz(self) -> float:
        return 0.5 * self.sample_rate_hz

    @property
    def sample_interval_s(self) -> float:
        return 1.0 / self.sample_rate_hz

    @property
    def resolution_hz(self) -> float:
        """Bin spacing ``fs / N``."""
        return self.sample_rate_hz / self.n_fft

    def __len__(self) -> int:
        return int(self.frequency_hz.size)

    def peak(self) -> Optional[Tuple[float, float]]:
        """Return ``(frequency, magnitude)`` of the strongest non-DC bin."""
        if self.frequency_hz.size < 2:
            return None
        idx = int(np.argmax(self.magnitude[1:])) + 1
        return float(self.frequency_hz[idx]), float(self.magnitude[idx])

    def as_series(self) -> Tuple[np.ndarray, np.ndarray]:
        """``(x, y)`` arrays for a plotting sink."""
        return self.frequency_hz, self.magnitude


def compute_spectrum(
    signal: ArrayLike,
    sample_rate_hz: float,
    *,
    sensor_id: object = None,
) -> Spectrum:
    """
    Compute the one-sided magnitude spectrum of a real-valued signal.

    Parameters
    ----------
    signal:
        1-D array-like of samples taken at ``sample_rate_hz``.
    sample_rate_hz:
        Sampling rate in Hz. Must be > 0.
    sensor_id:
        Optional label used in error messages.

    Returns
    -------
    Spectrum
        Bins ``f[k] = k * fs / N`` with magnitude ``|X[k]| * 2 / N`` for
        ``k`` in ``[0, N/2)``. Odd-length input is zero-padded by one sample
        first, so ``N`` is always even. No window is applied; the bins come
        from ``numpy.fft.rfft``, which for real input equals the first half
        of the full ``numpy.fft.fft``.

    Raises
    ------
    DegenerateSpectrum
        If fewer than two samples are given.
    NonFiniteSignal
        If any sample is NaN or infinite.
    """
    if sample_rate_hz <= 0:
        raise ValueError(f"sample_rate_hz must be > 0, got {sample_rate_hz}")

    arr = np.asarray(signal, dtype=float).reshape(-1)
    if arr.size < 2:
        raise DegenerateSpectrum(arr.size)

    finite = np.isfinite(arr)
    if not finite.all():
        raise NonFiniteSignal(sensor_id, int(arr.size - finite.sum()), arr.size)

    if arr.size % 2 != 0:
        arr = np.append(arr, 0.0)
    n = arr.size
    half_n = n // 2

    fs = float(sample_rate_hz)
    fft_result = np.fft.rfft(arr)[:half_n]
    freqs = np.arange(half_n, dtype=np.float64) * fs / n
    magnitude = np.abs(fft_result) * 2.0 / n

    keep = freqs <= fs / 2.0
    return Spectrum(
        frequency_hz=freqs[keep],
        magnitude=magnitude[keep],
        sample_rate_hz=fs,
        n_fft=n,
    )


__all__ = ["Spectrum", "compute_spectrum"]
