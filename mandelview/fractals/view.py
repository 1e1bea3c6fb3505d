from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, Tuple

import numpy as np

from mandelview.fractals.base import Sample, precision_cast, precision_dtype
from mandelview.utils.enums import PrecisionMode

# Plane units spanned by the frame height at magnification 1.
WINDOW_SPAN = 4


class MagnificationError(ValueError):
    pass


def _check_magnification(value) -> None:
    if not (math.isfinite(value) and value > 0):
        raise MagnificationError(f"Magnification must be positive and finite, got {value}.")


def _check_size(width: int, height: int) -> Tuple[int, int]:
    width, height = int(width), int(height)
    if width <= 0 or height <= 0:
        raise ValueError(f"View dimensions must be positive, got {width}x{height}.")
    return width, height


@dataclass(frozen=True)
class ViewState:
    """
    Camera parameters for one frame.

    The frame height always spans WINDOW_SPAN / magnification plane units and
    the width keeps the pixel aspect ratio. Pixel (0, 0) samples the centre of
    the cell with the smallest real and imaginary parts, so row 0 is the
    bottom of the plane.
    """
    x_center: Any = 0.0
    y_center: Any = 0.0
    magnification: Any = 1.0
    width: int = 800
    height: int = 600

    def __post_init__(self):
        _check_magnification(self.magnification)
        width, height = _check_size(self.width, self.height)
        object.__setattr__(self, "width", width)
        object.__setattr__(self, "height", height)

    # ---- Derived mapping parameters (Double precision) -------------------

    @property
    def aspect(self) -> float:
        return self.width / self.height

    @property
    def x_delta(self) -> float:
        return (WINDOW_SPAN / self.width * self.aspect) / self.magnification

    @property
    def y_delta(self) -> float:
        return (WINDOW_SPAN / self.height) / self.magnification

    @property
    def offset_x(self) -> float:
        return self.x_center - (WINDOW_SPAN / 2 * self.aspect) / self.magnification

    @property
    def offset_y(self) -> float:
        return self.y_center - (WINDOW_SPAN / 2) / self.magnification

    # ---- Mapping --------------------------------------------------------

    def _mapping(self, precision: PrecisionMode):
        cast = precision_cast(precision)
        width, height = cast(self.width), cast(self.height)
        mag = cast(self.magnification)
        span = cast(WINDOW_SPAN)

        aspect = width / height
        x_delta = (span / width * aspect) / mag
        y_delta = (span / height) / mag
        offset_x = cast(self.x_center) - (span / 2 * aspect) / mag
        offset_y = cast(self.y_center) - (span / 2) / mag
        return x_delta, y_delta, x_delta / 2, y_delta / 2, offset_x, offset_y

    def sample_at(self, px: int, py: int,
                  precision: PrecisionMode = PrecisionMode.Double) -> Sample:
        """Plane coordinates of the centre of pixel (px, py)."""
        cast = precision_cast(precision)
        x_delta, y_delta, half_x, half_y, offset_x, offset_y = self._mapping(precision)
        return Sample(cast(px) * x_delta + half_x + offset_x,
                      cast(py) * y_delta + half_y + offset_y)

    def axes(self, precision: PrecisionMode = PrecisionMode.Double) -> Tuple[np.ndarray, np.ndarray]:
        """
        Real part of every column and imaginary part of every row.
        The mapping is separable, so sample_at(px, py) == (xs[px], ys[py]).
        """
        x_delta, y_delta, half_x, half_y, offset_x, offset_y = self._mapping(precision)
        if precision == PrecisionMode.Arbitrary:
            cast = precision_cast(precision)
            xs = np.array([cast(px) * x_delta + half_x + offset_x
                           for px in range(self.width)], dtype=object)
            ys = np.array([cast(py) * y_delta + half_y + offset_y
                           for py in range(self.height)], dtype=object)
            return xs, ys
        dt = precision_dtype(precision)
        xs = np.arange(self.width, dtype=dt) * x_delta + half_x + offset_x
        ys = np.arange(self.height, dtype=dt) * y_delta + half_y + offset_y
        return xs.astype(dt, copy=False), ys.astype(dt, copy=False)

    def with_size(self, width: int, height: int) -> "ViewState":
        width, height = _check_size(width, height)
        return replace(self, width=width, height=height)

    def with_center(self, x, y) -> "ViewState":
        return replace(self, x_center=x, y_center=y)


class Camera:
    """
    Mutable view session owned by the application.
    Changes are applied between frames; every frame works on a snapshot().
    """

    def __init__(self, width: int = 800, height: int = 600,
                 x_center: float = 0.0, y_center: float = 0.0,
                 magnification: float = 1.0, speed: float = 1.0) -> None:
        self.width, self.height = _check_size(width, height)
        _check_magnification(magnification)
        self.x_center = x_center
        self.y_center = y_center
        self.magnification = magnification
        self.speed = float(speed)
        # Bumped whenever the pixel dimensions change.
        self.generation = 0

    def snapshot(self) -> ViewState:
        return ViewState(self.x_center, self.y_center, self.magnification,
                         self.width, self.height)

    def magnify(self, factor) -> float:
        """Multiply the magnification; factor > 1 zooms in."""
        if not (math.isfinite(factor) and factor > 0):
            raise MagnificationError(f"Zoom factor must be positive and finite, got {factor}.")
        new_mag = self.magnification * factor
        _check_magnification(new_mag)
        self.magnification = new_mag
        return self.magnification

    def zoom_step(self, direction: float, multiplier: float = 1.1) -> float:
        """Scroll-wheel style zoom: in for positive direction, out otherwise."""
        return self.magnify(multiplier if direction > 0 else 1 / multiplier)

    def recenter(self, x, y) -> None:
        self.x_center = x
        self.y_center = y

    def pan(self, dx: float, dy: float, dt: float = 1.0) -> None:
        """Move by a screen-space delta; the plane distance shrinks as we zoom in."""
        scale = self.speed * dt / self.magnification
        self.x_center = self.x_center + dx * scale
        self.y_center = self.y_center + dy * scale

    def adjust_speed(self, factor: float) -> float:
        if not factor > 0:
            raise ValueError(f"Speed factor must be positive, got {factor}.")
        self.speed *= factor
        return self.speed

    def resize(self, width: int, height: int) -> bool:
        """Returns True when the dimensions actually changed."""
        width, height = _check_size(width, height)
        if (width, height) == (self.width, self.height):
            return False
        self.width, self.height = width, height
        self.generation += 1
        return True

    def reset(self, reset_zoom: bool = True) -> None:
        self.x_center = 0.0
        self.y_center = 0.0
        if reset_zoom:
            self.magnification = 1.0
