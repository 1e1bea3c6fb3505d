import numpy as np
import pytest

from mandelview.buffers.grid import DenseGrid
from mandelview.coloring.cosine import BACKGROUND, CosineColoring
from mandelview.fractals.base import EscapeResult
from mandelview.utils.enums import EscapeStatus


@pytest.fixture
def coloring():
    return CosineColoring()


@pytest.mark.parametrize("mod2", [0.0, 4.0, 1e9])
def test_budget_sentinel_is_background(coloring, mod2):
    for status in (EscapeStatus.INTERIOR, EscapeStatus.UNRESOLVED):
        assert coloring.pixel(EscapeResult(status, mod2, 100), 100) == (0, 0, 0, 0xFF)
    assert BACKGROUND == (0, 0, 0, 0xFF)


def test_pixel_is_pure(coloring):
    for it in (0, 1, 7, 99):
        result = EscapeResult(EscapeStatus.EXTERIOR, 12345.6, it)
        first = coloring.pixel(result, 100)
        for _ in range(3):
            assert coloring.pixel(result, 100) == first
        assert first[3] == 0xFF
        assert all(0 <= ch <= 0xFF for ch in first)


def test_channels_are_out_of_phase(coloring):
    r, g, b, _ = coloring.pixel(EscapeResult(EscapeStatus.EXTERIOR, 1e6, 20), 100)
    assert len({r, g, b}) > 1


def test_channel_formula_without_modulus(coloring):
    # |z|^2 <= 1 leaves the phase at the raw iteration count.
    it = 10
    got = coloring.pixel(EscapeResult(EscapeStatus.EXTERIOR, 0.5, it), 100)
    for ch, freq in zip(got[:3], (coloring.freq_r, coloring.freq_g, coloring.freq_b)):
        v = 0xFF * (1 + 0.2 / 2 - (1 - 0.2) * np.cos(freq * it)) / 2
        assert ch == int(np.floor(v + 0.5))


def test_vectorised_apply_matches_pixel(coloring):
    mod2 = np.array([0.5, 2.0, 150.0, 1e8, 3.0])
    its = np.array([3, 0, 17, 42, 64])
    out = coloring.apply(mod2, its, 64)
    assert out.shape == (5, 4) and out.dtype == np.uint8
    assert tuple(out[4]) == BACKGROUND
    for i in range(4):
        expected = coloring.pixel(EscapeResult(EscapeStatus.EXTERIOR, mod2[i], int(its[i])), 64)
        assert np.abs(out[i].astype(int) - np.array(expected)).max() <= 1


def test_colorize_grids(coloring):
    mod2 = DenseGrid(3, 2, workers=2)
    its = DenseGrid(3, 2, dtype=np.int64, workers=2)
    mod2.data[:] = [1e4, 2e5, 0.0, 5.0, 1e6, 0.0]
    its.data[:] = [1, 2, 30, 4, 5, 30]
    rgba = coloring.colorize_grids(mod2, its, 30)
    assert rgba.shape == (3, 2) and rgba.channels == 4
    np.testing.assert_array_equal(rgba.data, coloring.apply(mod2.data, its.data, 30))
    assert tuple(rgba.get(2, 0)) == BACKGROUND
