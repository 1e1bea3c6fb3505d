from __future__ import annotations

import numpy as np
from PIL import Image

from mandelview.buffers.grid import DenseGrid
from mandelview.utils.enums import Origin


def to_image(grid: DenseGrid, origin: Origin = Origin.TOP_LEFT) -> Image.Image:
    """
    Wrap an RGBA frame in a PIL image.

    Frames are stored bottom row first (row 0 = smallest imaginary part);
    image files expect the top row first, so rows are flipped for TOP_LEFT.
    """
    if grid.channels != 4 or grid.dtype != np.uint8:
        raise ValueError(f"Expected an RGBA uint8 grid, got {grid!r}.")
    pixels = grid.as_array()
    if origin == Origin.TOP_LEFT:
        pixels = pixels[::-1]
    return Image.fromarray(np.ascontiguousarray(pixels))


def save_png(grid: DenseGrid, path: str) -> None:
    to_image(grid).save(path, format="PNG")


def ascii_preview(iterations: DenseGrid, max_iter: int,
                  inside: str = "##", outside: str = "  ") -> str:
    """
    Text picture of a frame: `inside` for samples that used the whole
    budget, `outside` for escaped ones. The top line is the top of the plane.
    """
    rows = iterations.as_array() == max_iter
    lines = []
    for row in rows[::-1]:
        lines.append("".join(inside if cell else outside for cell in row))
    return "\n".join(lines)
