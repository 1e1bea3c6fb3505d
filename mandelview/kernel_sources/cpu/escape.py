import math

from numba import njit

from mandelview.kernel_sources.registry import register_kernel

# Status codes, mirrored by utils.enums.EscapeStatus.
EXTERIOR = 0
INTERIOR = 1
UNRESOLVED = 2

LOG2 = math.log(2.0)


# ---- Per-sample kernels ----------------------------------------------------

@njit(cache=True, nogil=True)
def escape_time(cr, ci, max_iter, radius2, eps2):
    """
    Iterate z <- z^2 + c from z = c.

    Returns (status, |z|^2, iterations). The derivative estimate der starts
    at 1 and is multiplied by 2z every step; once |der|^2 drops below eps2
    the orbit is treated as attracted to a cycle and the sample is interior.
    The arithmetic follows the type of cr/ci, so the same source serves
    float32, float64 and (through .py_func) mpmath values. radius2 must be
    positive.
    """
    zr = cr
    zi = ci
    # Unit and zero in the type of the inputs.
    dr = radius2 / radius2
    di = cr - cr
    i = 0
    while i < max_iter:
        mod2 = zr * zr + zi * zi
        if mod2 > radius2:
            return EXTERIOR, mod2, i
        tr = dr * zr - di * zi
        ti = dr * zi + di * zr
        dr = tr + tr
        di = ti + ti
        if dr * dr + di * di < eps2:
            return INTERIOR, zr - zr, max_iter
        zr, zi = zr * zr - zi * zi + cr, (zr + zr) * zi + ci
        i += 1
    return UNRESOLVED, zr * zr + zi * zi, max_iter


@njit(cache=True, nogil=True)
def smooth_phase(mod2, iterations):
    """Continuous escape count i + 1 - log2(log2|z|); plain i when |z| <= 1."""
    if mod2 > 1.0:
        log2_zn = 0.5 * math.log(mod2) / LOG2
        return iterations + 1.0 - math.log(log2_zn) / LOG2
    return iterations * 1.0


@njit(cache=True, nogil=True)
def _channel(x, freq, offset):
    v = 255.0 * (1.0 + offset / 2.0 - (1.0 - offset) * math.cos(freq * x)) / 2.0
    return int(math.floor(v + 0.5))


@njit(cache=True, nogil=True)
def colorize(mod2, iterations, max_iter, offset, freq_r, freq_g, freq_b):
    if iterations == max_iter:
        return 0, 0, 0, 255
    x = smooth_phase(mod2, iterations)
    return (_channel(x, freq_r, offset),
            _channel(x, freq_g, offset),
            _channel(x, freq_b, offset),
            255)


# ---- Chunk kernels ---------------------------------------------------------
# Each call handles the flat pixel range [start, stop) and only writes there,
# so several calls can run concurrently on one output array.

SHADE_ARGS = ["start", "stop", "width", "xs", "ys",
              "max_iter", "radius2", "eps2",
              "offset", "freq_r", "freq_g", "freq_b",
              "rgba"]

ESCAPE_ARGS = ["start", "stop", "width", "xs", "ys",
               "max_iter", "radius2", "eps2",
               "mod2", "iterations", "status"]


@njit(cache=True, nogil=True)
def shade_chunk(start, stop, width, xs, ys, max_iter, radius2, eps2,
                offset, freq_r, freq_g, freq_b, rgba):
    for idx in range(start, stop):
        _, mod2, it = escape_time(xs[idx % width], ys[idx // width],
                                  max_iter, radius2, eps2)
        r, g, b, a = colorize(mod2, it, max_iter, offset, freq_r, freq_g, freq_b)
        rgba[idx, 0] = r
        rgba[idx, 1] = g
        rgba[idx, 2] = b
        rgba[idx, 3] = a


@njit(cache=True, nogil=True)
def escape_chunk(start, stop, width, xs, ys, max_iter, radius2, eps2,
                 mod2, iterations, status):
    for idx in range(start, stop):
        st, m2, it = escape_time(xs[idx % width], ys[idx // width],
                                 max_iter, radius2, eps2)
        status[idx] = st
        mod2[idx] = m2
        iterations[idx] = it


def shade_chunk_mp(start, stop, width, xs, ys, max_iter, radius2, eps2,
                   offset, freq_r, freq_g, freq_b, rgba):
    """Arbitrary-precision variant: iterate on mpmath values, colour in float."""
    kernel = escape_time.py_func
    for idx in range(start, stop):
        _, mod2, it = kernel(xs[idx % width], ys[idx // width],
                             max_iter, radius2, eps2)
        rgba[idx] = colorize(float(mod2), it, max_iter, offset, freq_r, freq_g, freq_b)


def escape_chunk_mp(start, stop, width, xs, ys, max_iter, radius2, eps2,
                    mod2, iterations, status):
    kernel = escape_time.py_func
    for idx in range(start, stop):
        st, m2, it = kernel(xs[idx % width], ys[idx // width],
                            max_iter, radius2, eps2)
        status[idx] = st
        mod2[idx] = float(m2)
        iterations[idx] = it


for _tag in ("f32", "f64"):
    register_kernel("shade", _tag, func=shade_chunk, arg_order=SHADE_ARGS, compiled=True)
    register_kernel("escape", _tag, func=escape_chunk, arg_order=ESCAPE_ARGS, compiled=True)

register_kernel("shade", "mp", func=shade_chunk_mp, arg_order=SHADE_ARGS, compiled=False)
register_kernel("escape", "mp", func=escape_chunk_mp, arg_order=ESCAPE_ARGS, compiled=False)
