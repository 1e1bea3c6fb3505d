from abc import ABC, abstractmethod
from typing import Tuple

import numpy as np

from mandelview.fractals.base import EscapeResult

Pixel = Tuple[int, int, int, int]


class ColoringStrategy(ABC):
    @abstractmethod
    def pixel(self, result: EscapeResult, max_iter: int) -> Pixel:
        ...

    @abstractmethod
    def apply(self, mod2: np.ndarray, iterations: np.ndarray,
              max_iter: int) -> np.ndarray:
        ...

    @abstractmethod
    def kernel_params(self) -> Tuple[float, float, float, float]:
        """Scalars handed to the fused shade kernel: (offset, freq_r, freq_g, freq_b)."""
        ...
