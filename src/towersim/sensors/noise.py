"""Seeded uniform noise source shared by the signal models."""

from __future__ import annotations

from typing import Protocol, Tuple

import numpy as np

DEFAULT_NOISE_SEED = 42


class UniformSource(Protocol):
    """Anything that can hand out U(0, 1) draws."""

    def uniform(self) -> float:  # pragma: no cover - protocol
        ...

    def uniform_array(self, n: int) -> np.ndarray:  # pragma: no cover - protocol
        ...


class NoiseSource:
    """
    Uniform ``[0, 1)`` generator owned by a simulation session.

    The generator is seeded once and never reseeded, so two sessions built
    with the same seed produce identical streams. Instances are not
    thread-safe; use :meth:`spawn` to hand independent sources to workers.
    """

    def __init__(self, seed: int = DEFAULT_NOISE_SEED) -> None:
        self.seed = int(seed)
        self._key: Tuple[int, ...] = (self.seed,)
        self._rng = np.random.default_rng(self.seed)

    def uniform(self) -> float:
        return float(self._rng.random())

    def uniform_array(self, n: int) -> np.ndarray:
        if n < 0:
            raise ValueError(f"n must be >= 0, got {n}")
        return self._rng.random(int(n))

    def spawn(self, stream: int) -> NoiseSource:
        """Return an independent source keyed by this source and ``stream``."""
        child = NoiseSource.__new__(NoiseSource)
        child.seed = self.seed
        child._key = (*self._key, int(stream))
        child._rng = np.random.default_rng(list(child._key))
        return child


__all__ = ["DEFAULT_NOISE_SEED", "UniformSource", "NoiseSource"]
