import numpy as np
import pytest

from mandelview.fractals.base import RenderSettings, Sample
from mandelview.fractals.mandelbrot import escape_pixel, escape_sample
from mandelview.fractals.view import ViewState
from mandelview.kernel_sources import list_kernels, load_kernel
from mandelview.kernel_sources.cpu.escape import EXTERIOR, INTERIOR, UNRESOLVED, escape_time
from mandelview.utils.enums import EscapeStatus, PrecisionMode

ALL_PRECISIONS = [PrecisionMode.Single, PrecisionMode.Double, PrecisionMode.Arbitrary]


@pytest.mark.parametrize("precision", ALL_PRECISIONS)
def test_far_point_escapes_immediately(precision):
    settings = RenderSettings(max_iter=50, radius=2.0, precision=precision)
    result = escape_sample(Sample(3.0, 0.0), settings)
    assert result.status == EscapeStatus.EXTERIOR
    assert result.iterations <= 2
    assert float(result.squared_modulus) == pytest.approx(9.0)


@pytest.mark.parametrize("precision", ALL_PRECISIONS)
def test_origin_is_interior_after_one_step(precision):
    settings = RenderSettings(max_iter=50, epsilon=1.0, precision=precision)
    result = escape_sample(Sample(0.0, 0.0), settings)
    assert result.status == EscapeStatus.INTERIOR
    assert float(result.squared_modulus) == 0.0
    assert result.iterations == 50


def test_derivative_bailout_does_not_walk_the_budget():
    # Run uncompiled: a full walk of this budget would not finish in time.
    status, mod2, iterations = escape_time.py_func(0.0, 0.0, 10 ** 12, 10000.0, 1.0)
    assert status == INTERIOR
    assert mod2 == 0.0
    assert iterations == 10 ** 12


def test_boundary_point_runs_out_of_budget():
    # c = -2 lands on the fixed point 2 and the derivative keeps growing.
    settings = RenderSettings(max_iter=40)
    result = escape_sample(Sample(-2.0, 0.0), settings)
    assert result.status == EscapeStatus.UNRESOLVED
    assert result.iterations == 40
    assert float(result.squared_modulus) == pytest.approx(4.0)


def test_interior_point_detected_before_budget():
    status, _, iterations = escape_time(-0.1, 0.1, 1000, 100.0 ** 2, 0.1 ** 2)
    assert status == INTERIOR
    assert iterations == 1000


def test_precisions_agree_on_simple_orbits():
    for c in [Sample(1.0, 1.0), Sample(-1.0, -1.0), Sample(0.5, 0.6), Sample(-0.1, 0.1)]:
        results = [escape_sample(c, RenderSettings(max_iter=100, precision=p))
                   for p in ALL_PRECISIONS]
        assert len({(r.status, r.iterations) for r in results}) == 1


def test_status_codes_match_enum():
    assert (EXTERIOR, INTERIOR, UNRESOLVED) == (EscapeStatus.EXTERIOR,
                                                EscapeStatus.INTERIOR,
                                                EscapeStatus.UNRESOLVED)


def test_escape_pixel_uses_view_mapping():
    view = ViewState(0.0, 0.0, 1.0, 5, 5)
    settings = RenderSettings(max_iter=64)
    assert escape_pixel(view, 2, 2, settings).status == EscapeStatus.INTERIOR
    assert escape_pixel(view, 0, 0, settings).status == EscapeStatus.EXTERIOR


def test_iteration_scaling_grows_budget_with_zoom():
    settings = RenderSettings(max_iter=100, iteration_scaling=True)
    assert settings.effective_max_iter(1.0) == 100
    assert settings.effective_max_iter(1e6) > 100
    assert RenderSettings(max_iter=100).effective_max_iter(1e6) == 100


def test_registry_lists_kernels_per_precision():
    for tag in ("f32", "f64", "mp"):
        assert list_kernels(tag) == ["escape", "shade"]
    assert load_kernel("shade", "f64")["compiled"] is True
    assert load_kernel("shade", "mp")["compiled"] is False
    with pytest.raises(KeyError):
        load_kernel("shade", "f128")


@pytest.mark.parametrize("changes", [{"max_iter": 0}, {"radius": 0.0},
                                     {"epsilon": -1.0}, {"workers": 0}])
def test_invalid_settings(changes):
    settings = RenderSettings(**changes)
    with pytest.raises(ValueError):
        settings.validate()


def test_single_precision_kernel_matches_float32_source():
    f32 = np.float32
    for cr, ci in [(-0.1, 0.1), (0.3, 0.0), (-0.5, 0.5), (3.0, 0.0), (0.25, 0.0)]:
        args = (f32(cr), f32(ci), 200, f32(100.0) * f32(100.0), f32(0.1) * f32(0.1))
        compiled = escape_time(*args)
        source = escape_time.py_func(*args)
        assert (compiled[0], compiled[2]) == (source[0], source[2])
        assert np.float32(compiled[1]) == source[1]
