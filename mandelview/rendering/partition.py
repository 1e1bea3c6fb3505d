from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Tuple

Chunk = Tuple[int, int]


def split_range(total: int, parts: int) -> List[Chunk]:
    """
    Split the linear index range [0, total) into contiguous (start, stop) chunks.

    Every chunk gets total // parts indices and the last one absorbs the
    remainder, so the chunks cover the range exactly once. parts is clamped
    to [1, total] so no chunk is ever empty (except for total == 0).
    """
    total = int(total)
    if total < 0:
        raise ValueError(f"total must be non-negative, got {total}")
    if total == 0:
        return [(0, 0)]
    parts = max(1, min(int(parts), total))
    base = total // parts
    chunks: List[Chunk] = []
    off = 0
    for i in range(parts):
        size = base if i < parts - 1 else total - base * (parts - 1)
        chunks.append((off, off + size))
        off += size
    return chunks


def run_chunks(func: Callable[[int, int], None], chunks: List[Chunk],
               workers: int) -> None:
    """
    Run func(start, stop) for every chunk on a pool of `workers` threads and
    block until all of them are done.

    The first exception raised by a chunk is re-raised once the pool has
    been joined; chunks that have not started yet are cancelled.
    """
    with ThreadPoolExecutor(max_workers=max(1, int(workers))) as ex:
        futs = [ex.submit(func, start, stop) for start, stop in chunks]
        try:
            for fut in as_completed(futs):
                fut.result()
        except BaseException:
            for fut in futs:
                fut.cancel()
            raise
