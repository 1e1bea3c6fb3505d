from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from mandelview.buffers.grid import DenseGrid
from mandelview.coloring.base import ColoringStrategy
from mandelview.coloring.cosine import CosineColoring
from mandelview.fractals.base import RenderSettings
from mandelview.fractals.view import Camera, ViewState
from mandelview.rendering.events import FrameEvent
from mandelview.rendering.executor import EscapeGrids, RenderExecutor
from mandelview.utils.enums import PrecisionMode
from mandelview.utils.timer import Timer

logger = logging.getLogger(__name__)


class Renderer:

    """
    Facade that binds together:
      - the camera session (center, zoom, viewport size),
      - the render settings and coloring strategy,
      - the render executor and the output buffer it fills.

    View and settings changes go through the mutators below and are only
    accepted between frames. render_frame() blocks until the frame is done
    and returns the RGBA buffer, which is reused (overwritten) by the next
    frame unless the viewport size changed.
    """

    def __init__(
        self,
        width: int = 800,
        height: int = 600,
        settings: Optional[RenderSettings] = None,
        *,
        camera: Optional[Camera] = None,
        coloring: Optional[ColoringStrategy] = None,
        executor: Optional[RenderExecutor] = None,
        telemetry: Optional[Callable[[str], None]] = None,
    ):
        # Core state
        self.settings = settings or RenderSettings()
        self.settings.validate()
        self.camera = camera or Camera(width, height)
        self.coloring = coloring or CosineColoring()

        # Execution
        self.executor = executor or RenderExecutor(workers=self.settings.workers,
                                                   telemetry=telemetry)

        # Output buffer, tied to the camera generation it was sized for
        self._canvas: Optional[DenseGrid] = None
        self._canvas_generation = -1

        self._frame_lock = threading.Lock()
        self._seq = 0
        self.last_frame_ms: Optional[float] = None

        # Callbacks
        self.on_frame: Optional[Callable[[FrameEvent], None]] = None

    # ----------------------------
    # Mutators (between frames)
    # ----------------------------

    def _ensure_idle(self) -> None:
        if self._frame_lock.locked():
            raise RuntimeError("View and settings cannot change while a frame is in flight.")

    def resize(self, width: int, height: int) -> None:
        self._ensure_idle()
        if self.camera.resize(width, height):
            self._canvas = None
            logger.debug("Viewport resized to %dx%d; output buffer discarded.", width, height)

    def pan(self, dx: float, dy: float, dt: float = 1.0) -> None:
        self._ensure_idle()
        self.camera.pan(dx, dy, dt)

    def zoom(self, factor: float) -> float:
        self._ensure_idle()
        return self.camera.magnify(factor)

    def zoom_step(self, direction: float, multiplier: float = 1.1) -> float:
        self._ensure_idle()
        return self.camera.zoom_step(direction, multiplier)

    def recenter(self, x, y) -> None:
        self._ensure_idle()
        self.camera.recenter(x, y)

    def reset_camera(self, reset_zoom: bool = True) -> None:
        self._ensure_idle()
        self.camera.reset(reset_zoom)

    def set_max_iter(self, max_iter: int) -> None:
        self._update_settings(max_iter=int(max_iter))

    def set_radius(self, radius: float) -> None:
        self._update_settings(radius=float(radius))

    def set_epsilon(self, epsilon: float) -> None:
        self._update_settings(epsilon=float(epsilon))

    def set_precision(self, precision: PrecisionMode) -> None:
        self._update_settings(precision=precision)

    def set_workers(self, workers: Optional[int]) -> None:
        self._update_settings(workers=workers)

    def set_coloring(self, coloring: ColoringStrategy) -> None:
        self._ensure_idle()
        self.coloring = coloring

    def _update_settings(self, **changes) -> None:
        self._ensure_idle()
        old = {k: getattr(self.settings, k) for k in changes}
        for k, v in changes.items():
            setattr(self.settings, k, v)
        try:
            self.settings.validate()
        except ValueError:
            for k, v in old.items():
                setattr(self.settings, k, v)
            raise

    # ----------------------------
    # Frames
    # ----------------------------

    @property
    def view(self) -> ViewState:
        return self.camera.snapshot()

    @property
    def canvas(self) -> Optional[DenseGrid]:
        return self._canvas

    def _begin_frame(self) -> None:
        if not self._frame_lock.acquire(blocking=False):
            raise RuntimeError("A frame is already in flight; frame requests must be serialized.")

    def render_frame(self) -> DenseGrid:
        self._begin_frame()
        try:
            view = self.camera.snapshot()
            if self._canvas_generation != self.camera.generation:
                self._canvas = None
                self._canvas_generation = self.camera.generation

            with Timer("frame", logger) as timer:
                self._canvas = self.executor.render(view, self.settings, self.coloring,
                                                    out=self._canvas)
            self._seq += 1
            self.last_frame_ms = timer.elapsed_ms
            max_iter = self.settings.effective_max_iter(view.magnification)
            logger.info("Frame %d: %dx%d mag=%.6g center=(%.12g, %.12g) iter=%d in %.1f ms",
                        self._seq, view.width, view.height, view.magnification,
                        float(view.x_center), float(view.y_center), max_iter,
                        self.last_frame_ms)

            if self.on_frame:
                self.on_frame(FrameEvent(self._canvas, view.width, view.height, self._seq,
                                         view, max_iter, self.last_frame_ms))
            return self._canvas
        finally:
            self._frame_lock.release()

    def compute_escape(self) -> EscapeGrids:
        """Raw escape grids for the current view (no coloring)."""
        self._begin_frame()
        try:
            return self.executor.compute_escape(self.camera.snapshot(), self.settings)
        finally:
            self._frame_lock.release()
