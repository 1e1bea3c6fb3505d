from __future__ import annotations

import os
from typing import Any, Callable, Optional, Tuple, Union

import numpy as np

from mandelview.rendering.partition import split_range, run_chunks


class GridIndexError(IndexError):
    pass


class GridSizeError(ValueError):
    pass


class DenseGrid:
    """
    Flat, row-major 2D buffer.

    Element (col, row) lives at index row * width + col of a numpy array of
    exactly width * height elements. With `channels` set, every element is a
    small vector (e.g. 4 bytes of RGBA) and the backing array has shape
    (width * height, channels).

    map_in_place / zip_in_place split the flat range into contiguous chunks
    and run them on a fixed thread pool; the functions they take must be
    element-wise (vectorised numpy expressions), since chunks are processed
    in no particular order.
    """

    def __init__(
        self,
        width: int,
        height: int,
        dtype: Any = np.float64,
        channels: Optional[int] = None,
        workers: Optional[int] = None,
    ) -> None:
        width, height = int(width), int(height)
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}.")
        self.width = width
        self.height = height
        self.channels = None if channels is None else int(channels)
        self.workers = int(workers) if workers else (os.cpu_count() or 1)

        n = width * height
        shape = (n,) if self.channels is None else (n, self.channels)
        self._data = np.zeros(shape, dtype=dtype)

    # ---- Shape ----------------------------------------------------------

    def __len__(self) -> int:
        return self.width * self.height

    @property
    def shape(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    @property
    def data(self) -> np.ndarray:
        """The flat backing array (a live view, not a copy)."""
        return self._data

    def size_matches(self, width: int, height: int) -> bool:
        return self.width == int(width) and self.height == int(height)

    def as_array(self) -> np.ndarray:
        """(height, width[, channels]) view onto the same storage."""
        tail = () if self.channels is None else (self.channels,)
        return self._data.reshape((self.height, self.width) + tail)

    def to_bytes(self) -> bytes:
        return self._data.tobytes()

    # ---- Element access -------------------------------------------------

    def index(self, col: int, row: int) -> int:
        col, row = int(col), int(row)
        if col < 0 or row < 0 or col >= self.width or row >= self.height:
            raise GridIndexError(
                f"({col}, {row}) is out of bounds for a {self.width}x{self.height} grid.")
        return row * self.width + col

    def get(self, col: int, row: int):
        value = self._data[self.index(col, row)]
        if self.channels is not None:
            return value.copy()
        return value

    def set(self, col: int, row: int, value) -> None:
        self._data[self.index(col, row)] = value

    def __getitem__(self, key: Tuple[int, int]):
        col, row = key
        return self.get(col, row)

    def __setitem__(self, key: Tuple[int, int], value) -> None:
        col, row = key
        self.set(col, row, value)

    def fill(self, value) -> None:
        self._data[...] = value

    def copy(self) -> "DenseGrid":
        out = DenseGrid(self.width, self.height, dtype=self.dtype,
                        channels=self.channels, workers=self.workers)
        out._data[...] = self._data
        return out

    # ---- Parallel transforms --------------------------------------------

    def map_in_place(self, func: Callable[[np.ndarray], np.ndarray]) -> None:
        data = self._data

        def _apply(start: int, stop: int) -> None:
            chunk = data[start:stop]
            chunk[...] = func(chunk)

        run_chunks(_apply, split_range(len(self), self.workers), self.workers)

    def zip_in_place(
        self,
        other: Union["DenseGrid", np.ndarray],
        func: Callable[[np.ndarray, np.ndarray], np.ndarray],
    ) -> None:
        """
        self[i] = func(self[i], other[i]) for every i.
        Only the total lengths have to agree; other may be self.
        """
        src = other.data if isinstance(other, DenseGrid) else np.asarray(other)
        if not isinstance(other, DenseGrid) and src.shape != self._data.shape \
                and src.size == self._data.size:
            src = src.reshape(self._data.shape)
        if len(src) != len(self):
            raise GridSizeError(
                f"Cannot zip a grid of length {len(self)} with one of length {len(src)}.")

        data = self._data
        # Overlapping but differently laid out storage would let one chunk
        # read values another chunk already wrote.
        if src is not data and np.may_share_memory(data, src):
            src = src.copy()

        def _apply(start: int, stop: int) -> None:
            chunk = data[start:stop]
            chunk[...] = func(chunk, src[start:stop])

        run_chunks(_apply, split_range(len(self), self.workers), self.workers)

    def __repr__(self) -> str:
        ch = "" if self.channels is None else f", channels={self.channels}"
        return f"DenseGrid({self.width}x{self.height}, dtype={self.dtype}{ch})"
