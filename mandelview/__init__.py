"""
mandelview: escape-time Mandelbrot frames computed on a fixed CPU worker pool.
"""
from mandelview.buffers.grid import DenseGrid, GridIndexError, GridSizeError
from mandelview.coloring.cosine import CosineColoring
from mandelview.fractals.base import EscapeResult, RenderSettings, Sample
from mandelview.fractals.view import Camera, MagnificationError, ViewState
from mandelview.rendering.core import Renderer
from mandelview.rendering.executor import FrameRenderError, RenderExecutor
from mandelview.utils.enums import EscapeStatus, PrecisionMode

__all__ = [
    "Camera",
    "CosineColoring",
    "DenseGrid",
    "EscapeResult",
    "EscapeStatus",
    "FrameRenderError",
    "GridIndexError",
    "GridSizeError",
    "MagnificationError",
    "PrecisionMode",
    "RenderExecutor",
    "RenderSettings",
    "Renderer",
    "Sample",
    "ViewState",
]
__version__ = "0.1.0"
