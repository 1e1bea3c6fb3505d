from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from mandelview.buffers.grid import DenseGrid
from mandelview.coloring.base import ColoringStrategy, Pixel
from mandelview.fractals.base import EscapeResult
from mandelview.kernel_sources.cpu.escape import colorize

BACKGROUND: Pixel = (0, 0, 0, 0xFF)
LOG2 = math.log(2.0)


@dataclass(frozen=True)
class CosineColoring(ColoringStrategy):
    """
    Lookup-free cyclic palette.

    Every channel is 0xFF * (1 + offset/2 - (1 - offset) * cos(m * x)) / 2,
    where x is the smooth escape count and m a per-channel frequency; the
    distinct frequencies keep R, G and B out of phase. Samples that used
    the whole iteration budget get BACKGROUND.
    """
    offset: float = 0.2
    freq_r: float = 0.10
    freq_g: float = 0.13
    freq_b: float = 0.17

    def kernel_params(self) -> Tuple[float, float, float, float]:
        return float(self.offset), float(self.freq_r), float(self.freq_g), float(self.freq_b)

    def pixel(self, result: EscapeResult, max_iter: int) -> Pixel:
        return tuple(colorize(float(result.squared_modulus), int(result.iterations),
                              int(max_iter), *self.kernel_params()))

    # ---- Vectorised -----------------------------------------------------

    @staticmethod
    def phase(mod2: np.ndarray, iterations: np.ndarray) -> np.ndarray:
        mod2 = np.asarray(mod2, dtype=np.float64)
        its = np.asarray(iterations, dtype=np.float64)
        escaped = mod2 > 1.0
        # Substituting 2.0 keeps the logs finite where the mask discards them.
        log2_zn = 0.5 * np.log(np.where(escaped, mod2, 2.0)) / LOG2
        return np.where(escaped, its + 1.0 - np.log(log2_zn) / LOG2, its)

    def palette(self, phase: np.ndarray) -> np.ndarray:
        """(n,) phases -> (n, 4) uint8; NaN phases map to BACKGROUND."""
        phase = np.asarray(phase, dtype=np.float64)
        out = np.empty(phase.shape + (4,), dtype=np.uint8)
        inside = np.isnan(phase)
        safe = np.where(inside, 0.0, phase)
        off = self.offset
        for ch, freq in enumerate((self.freq_r, self.freq_g, self.freq_b)):
            v = 255.0 * (1.0 + off / 2.0 - (1.0 - off) * np.cos(freq * safe)) / 2.0
            out[..., ch] = np.floor(v + 0.5).astype(np.uint8)
        out[..., 3] = 0xFF
        out[inside] = BACKGROUND
        return out

    def apply(self, mod2: np.ndarray, iterations: np.ndarray,
              max_iter: int) -> np.ndarray:
        ph = self.phase(mod2, iterations)
        ph[np.asarray(iterations) == max_iter] = np.nan
        return self.palette(ph)

    def colorize_grids(self, mod2: DenseGrid, iterations: DenseGrid,
                       max_iter: int) -> DenseGrid:
        """Colour escape grids produced by RenderExecutor.compute_escape()."""
        phase = DenseGrid(iterations.width, iterations.height,
                          dtype=np.float64, workers=iterations.workers)
        phase.zip_in_place(iterations, lambda _, its: its)
        phase.zip_in_place(mod2, lambda its, m2: np.where(
            its == max_iter, np.nan, self.phase(m2, its)))

        rgba = DenseGrid(iterations.width, iterations.height, dtype=np.uint8,
                         channels=4, workers=iterations.workers)
        rgba.zip_in_place(phase, lambda _, ph: self.palette(ph))
        return rgba
