from dataclasses import dataclass

from mandelview.buffers.grid import DenseGrid
from mandelview.fractals.view import ViewState


@dataclass(frozen=True)
class FrameEvent:
    data: DenseGrid
    width: int
    height: int
    seq: int            # render sequence number
    view: ViewState
    max_iter: int
    elapsed_ms: float
