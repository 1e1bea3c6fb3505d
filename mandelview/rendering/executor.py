from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import numpy as np
from mpmath import mp

from mandelview.buffers.grid import DenseGrid
from mandelview.coloring.base import ColoringStrategy
from mandelview.coloring.cosine import CosineColoring
from mandelview.fractals.base import RenderSettings, precision_cast, precision_tag
from mandelview.fractals.view import ViewState
from mandelview.kernel_sources.loader import load_kernel
from mandelview.rendering.partition import split_range, run_chunks
from mandelview.utils.timer import Timer

logger = logging.getLogger(__name__)

__all__ = ["RenderExecutor", "EscapeGrids", "FrameRenderError", "split_range"]


class FrameRenderError(RuntimeError):
    pass


@dataclass
class EscapeGrids:
    """Raw kernel output for one frame, one element per pixel."""
    mod2: DenseGrid
    iterations: DenseGrid
    status: DenseGrid
    max_iter: int


class RenderExecutor:
    """
    Fans one frame out over a fixed pool of worker threads.

    The flat pixel range [0, width * height) is split into one contiguous
    chunk per worker; each chunk maps its pixels to plane samples, runs the
    escape kernel (and the colorizer for shade()) and writes only its own
    slice of the output. render() returns after every chunk has finished.
    Results do not depend on the worker count.
    """

    def __init__(self, workers: Optional[int] = None,
                 telemetry: Optional[Callable[[str], None]] = None) -> None:
        self.workers = int(workers) if workers else (os.cpu_count() or 1)
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}.")
        self.log = telemetry or (lambda *_: None)

    def _workers_for(self, settings: RenderSettings) -> int:
        return int(settings.workers) if settings.workers else self.workers

    def _common_args(self, view: ViewState, settings: RenderSettings) -> Dict[str, object]:
        cast = precision_cast(settings.precision)
        xs, ys = view.axes(settings.precision)
        radius, eps = cast(settings.radius), cast(settings.epsilon)
        return {
            "width": view.width,
            "xs": xs,
            "ys": ys,
            "max_iter": settings.effective_max_iter(view.magnification),
            "radius2": radius * radius,
            "eps2": eps * eps,
        }

    def _run(self, op_name: str, view: ViewState, settings: RenderSettings,
             buffers: Dict[str, np.ndarray], extra: Dict[str, object]) -> int:
        settings.validate()
        meta = load_kernel(op_name, precision_tag(settings.precision))
        func, arg_order = meta["func"], meta["arg_order"]
        workers = self._workers_for(settings)

        with mp.workdps(int(settings.mp_dps)):
            args = self._common_args(view, settings)
            args.update(extra)
            args.update(buffers)

            def chunk(start: int, stop: int) -> None:
                call = dict(args, start=start, stop=stop)
                func(*[call[name] for name in arg_order])

            chunks = split_range(view.width * view.height, workers)
            try:
                with Timer(f"{op_name} {view.width}x{view.height} on {len(chunks)} chunks", logger):
                    run_chunks(chunk, chunks, workers)
            except Exception as e:
                logger.exception("Frame failed in %s kernel: %s", op_name, e)
                raise FrameRenderError(f"{op_name} failed for {view.width}x{view.height} frame: {e}") from e
        return int(args["max_iter"])

    # ---- Frame entry points ---------------------------------------------

    def render(self, view: ViewState, settings: RenderSettings,
               coloring: Optional[ColoringStrategy] = None,
               out: Optional[DenseGrid] = None) -> DenseGrid:
        """
        Compute one RGBA frame. `out` is reused when its size matches the
        view, otherwise a fresh zeroed grid is allocated.
        """
        coloring = coloring or CosineColoring()
        workers = self._workers_for(settings)
        if out is None or not out.size_matches(view.width, view.height) or out.channels != 4:
            out = DenseGrid(view.width, view.height, dtype=np.uint8, channels=4, workers=workers)

        offset, freq_r, freq_g, freq_b = coloring.kernel_params()
        extra = {"offset": offset, "freq_r": freq_r, "freq_g": freq_g, "freq_b": freq_b}
        self._run("shade", view, settings, {"rgba": out.data}, extra)
        self.log(f"[RenderExecutor] frame {view.width}x{view.height} on {workers} workers")
        return out

    def compute_escape(self, view: ViewState, settings: RenderSettings) -> EscapeGrids:
        workers = self._workers_for(settings)
        w, h = view.width, view.height
        grids = EscapeGrids(
            mod2=DenseGrid(w, h, dtype=np.float64, workers=workers),
            iterations=DenseGrid(w, h, dtype=np.int64, workers=workers),
            status=DenseGrid(w, h, dtype=np.uint8, workers=workers),
            max_iter=0,
        )
        grids.max_iter = self._run("escape", view, settings, {
            "mod2": grids.mod2.data,
            "iterations": grids.iterations.data,
            "status": grids.status.data,
        }, {})
        return grids
