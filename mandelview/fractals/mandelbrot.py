from __future__ import annotations

from typing import Optional

from mpmath import mp

from mandelview.fractals.base import (EscapeResult, RenderSettings, Sample,
                                      precision_cast)
from mandelview.fractals.view import ViewState
from mandelview.kernel_sources.cpu.escape import escape_time
from mandelview.utils.enums import EscapeStatus, PrecisionMode


def escape_sample(sample: Sample, settings: RenderSettings,
                  max_iter: Optional[int] = None) -> EscapeResult:
    """
    Run the escape-time kernel on a single sample at settings.precision.
    Single/Double go through the compiled kernel, Arbitrary through its
    pure-Python source on mpmath values.
    """
    settings.validate()
    budget = int(settings.max_iter if max_iter is None else max_iter)
    with mp.workdps(int(settings.mp_dps)):
        cast = precision_cast(settings.precision)
        cr, ci = cast(sample.real), cast(sample.imag)
        radius, eps = cast(settings.radius), cast(settings.epsilon)
        kernel = escape_time.py_func if settings.precision == PrecisionMode.Arbitrary else escape_time
        status, mod2, iterations = kernel(cr, ci, budget, radius * radius, eps * eps)
    return EscapeResult(EscapeStatus(status), mod2, int(iterations))


def escape_pixel(view: ViewState, px: int, py: int,
                 settings: RenderSettings) -> EscapeResult:
    """Map pixel (px, py) of the view and classify it, as a frame would."""
    with mp.workdps(int(settings.mp_dps)):
        sample = view.sample_at(px, py, settings.precision)
        return escape_sample(sample, settings,
                             settings.effective_max_iter(view.magnification))
