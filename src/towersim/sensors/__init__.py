"""Sensor signal models and the noise source they draw from.

:mod:`models` holds one closed-form function per sensor plus the
``generate`` / ``generate_batch`` entry points; :mod:`noise` provides the
seeded uniform generator injected into them.
"""

from .models import SIGNAL_MODELS, generate, generate_batch
from .noise import NoiseSource

__all__ = ["SIGNAL_MODELS", "generate", "generate_batch", "NoiseSource"]
