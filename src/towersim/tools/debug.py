"""Phase timing for the analysis pipeline, logged when TOWERSIM_DEBUG is set."""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from typing import Dict, Iterator, MutableMapping, Optional

logger = logging.getLogger(__name__)

DEBUG_TOWERSIM = os.getenv("TOWERSIM_DEBUG", "").lower() in {"1", "true", "yes", "on"}


@contextmanager
def time_block(
    label: str,
    timings: Optional[MutableMapping[str, float]] = None,
) -> Iterator[None]:
    """
    Measure the enclosed block.

    The elapsed seconds are stored under ``label`` in ``timings`` when a
    mapping is given. A debug log line is emitted only with TOWERSIM_DEBUG
    enabled, so the disabled cost is two perf_counter() calls.
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if timings is not None:
            timings[label] = elapsed
        if DEBUG_TOWERSIM:
            logger.debug("%s took %.3f ms", label, elapsed * 1000.0)


def format_timings(timings: Dict[str, float]) -> str:
    """Render ``{"phase": seconds}`` as ``phase=12.3ms, ...``."""
    return ", ".join(f"{label}={sec * 1000.0:.1f}ms" for label, sec in timings.items())


__all__ = ["DEBUG_TOWERSIM", "time_block", "format_timings"]
