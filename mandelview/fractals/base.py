from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, NamedTuple, Optional

import numpy as np
from mpmath import mp

from mandelview.utils.enums import PrecisionMode, EscapeStatus


class Sample(NamedTuple):
    """A point of the complex plane at the precision it was mapped with."""
    real: Any
    imag: Any


class EscapeResult(NamedTuple):
    status: EscapeStatus
    squared_modulus: Any
    iterations: int


_PRECISION_TAGS = {
    PrecisionMode.Single: "f32",
    PrecisionMode.Double: "f64",
    PrecisionMode.Arbitrary: "mp",
}

_PRECISION_DTYPES = {
    PrecisionMode.Single: np.float32,
    PrecisionMode.Double: np.float64,
    PrecisionMode.Arbitrary: object,
}


def precision_tag(precision: PrecisionMode) -> str:
    return _PRECISION_TAGS[precision]


def precision_dtype(precision: PrecisionMode):
    """numpy dtype used to store samples; mpmath values live in object arrays."""
    return _PRECISION_DTYPES[precision]


def precision_cast(precision: PrecisionMode) -> Callable[[Any], Any]:
    """
    Scalar constructor for a precision mode.
    Arbitrary precision uses mpmath at the currently active mp.dps.
    """
    if precision == PrecisionMode.Arbitrary:
        return mp.mpf
    return _PRECISION_DTYPES[precision]


@dataclass
class RenderSettings:
    """
    Holds the settings for computing a frame.
    Max_iter is the iteration budget per sample.
    Radius is the escape radius and epsilon the derivative threshold below
    which a sample is declared interior.
    Precision selects the floating type the kernel runs at; mp_dps is the
    number of decimal digits used for PrecisionMode.Arbitrary.
    Workers is the number of chunks/threads per frame (None = cpu count).
    With iteration_scaling the budget grows with the logarithm of the zoom.
    """
    max_iter: int = 256
    radius: float = 100.0
    epsilon: float = 0.1
    precision: PrecisionMode = PrecisionMode.Double
    workers: Optional[int] = None
    mp_dps: int = 30
    iteration_scaling: bool = False

    def validate(self) -> None:
        if int(self.max_iter) < 1:
            raise ValueError(f"max_iter must be >= 1, got {self.max_iter}.")
        if not (math.isfinite(self.radius) and self.radius > 0):
            raise ValueError(f"radius must be positive, got {self.radius}.")
        if not (math.isfinite(self.epsilon) and self.epsilon >= 0):
            raise ValueError(f"epsilon must be non-negative, got {self.epsilon}.")
        if self.workers is not None and int(self.workers) < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}.")
        if int(self.mp_dps) < 1:
            raise ValueError(f"mp_dps must be >= 1, got {self.mp_dps}.")
        if not isinstance(self.precision, PrecisionMode):
            raise ValueError(f"Unknown precision: {self.precision!r}.")

    def effective_max_iter(self, magnification: float) -> int:
        if not self.iteration_scaling:
            return int(self.max_iter)
        scaled = int(self.max_iter * math.log1p(magnification))
        return max(int(self.max_iter), scaled)
