from __future__ import annotations

import logging
import time
from typing import Optional


class Timer:
    """
    Wall-clock timer usable as a context manager.
    On exit the elapsed time is logged (milliseconds) to the given logger.
    """

    def __init__(self, name: str, logger: Optional[logging.Logger] = None,
                 level: int = logging.DEBUG) -> None:
        self.name = name
        self.logger = logger or logging.getLogger(__name__)
        self.level = level
        self._start = time.perf_counter()
        self._stop: Optional[float] = None

    def reset(self) -> None:
        self._start = time.perf_counter()
        self._stop = None

    @property
    def elapsed_ms(self) -> float:
        end = self._stop if self._stop is not None else time.perf_counter()
        return (end - self._start) * 1000.0

    def __enter__(self) -> "Timer":
        self.reset()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._stop = time.perf_counter()
        self.logger.log(self.level, "%s: %.2f ms", self.name, self.elapsed_ms)
