"""Timing utilities for diagnostic stages."""

from __future__ import annotations

import contextlib
import logging
import time
from typing import Callable, Dict, Iterator


@contextlib.contextmanager
def timed(section: str, sink: Callable[[str, float], None]) -> Iterator[None]:
    """Measure the wall time of a block and hand it to *sink* in milliseconds."""

    start = time.perf_counter()
    try:
        yield
    finally:
        sink(section, (time.perf_counter() - start) * 1000.0)


def collect_into(timings: Dict[str, float], logger: logging.Logger | None = None) -> Callable[[str, float], None]:
    """Build a sink that records durations into *timings* and logs them at debug."""

    def _sink(section: str, elapsed_ms: float) -> None:
        timings[section] = round(elapsed_ms, 3)
        if logger is not None:
            logger.debug("%s took %.1f ms", section, elapsed_ms)

    return _sink
