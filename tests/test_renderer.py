import pytest

from mandelview.fractals.base import RenderSettings
from mandelview.fractals.view import MagnificationError
from mandelview.rendering.core import Renderer
from mandelview.utils.enums import PrecisionMode


@pytest.fixture
def renderer():
    return Renderer(24, 16, RenderSettings(max_iter=40, workers=3))


def test_default_view(renderer):
    view = renderer.view
    assert (view.x_center, view.y_center, view.magnification) == (0.0, 0.0, 1.0)
    assert (view.width, view.height) == (24, 16)


def test_render_frame_returns_rgba_buffer(renderer):
    frame = renderer.render_frame()
    assert frame.shape == (24, 16)
    assert len(frame.to_bytes()) == 24 * 16 * 4
    assert renderer.canvas is frame
    assert renderer.last_frame_ms is not None


def test_buffer_reused_until_resize(renderer):
    first = renderer.render_frame()
    renderer.pan(0.5, 0.0)
    second = renderer.render_frame()
    assert second is first

    renderer.resize(12, 8)
    assert renderer.canvas is None
    third = renderer.render_frame()
    assert third is not first
    assert third.shape == (12, 8)


def test_camera_resize_outside_renderer_discards_buffer(renderer):
    first = renderer.render_frame()
    renderer.camera.resize(30, 10)
    assert renderer.render_frame() is not first


def test_pan_and_zoom_change_the_frame(renderer):
    before = renderer.render_frame().to_bytes()
    renderer.zoom(4.0)
    renderer.pan(-0.5, 0.25)
    after = renderer.render_frame().to_bytes()
    assert before != after
    renderer.reset_camera()
    assert renderer.render_frame().to_bytes() == before


def test_rejects_bad_zoom(renderer):
    with pytest.raises(MagnificationError):
        renderer.zoom(0.0)
    with pytest.raises(MagnificationError):
        renderer.zoom(-3.0)
    assert renderer.view.magnification == 1.0


def test_invalid_setting_is_rolled_back(renderer):
    with pytest.raises(ValueError):
        renderer.set_max_iter(0)
    assert renderer.settings.max_iter == 40
    renderer.set_max_iter(64)
    renderer.set_radius(50.0)
    renderer.set_precision(PrecisionMode.Single)
    assert renderer.settings.max_iter == 64
    assert renderer.render_frame().shape == (24, 16)


def test_frame_events_and_overlap_protection(renderer):
    events, errors = [], []

    def on_frame(evt):
        events.append(evt)
        for action in (renderer.render_frame, lambda: renderer.pan(1.0, 0.0),
                       lambda: renderer.set_max_iter(10)):
            try:
                action()
            except RuntimeError as e:
                errors.append(e)

    renderer.on_frame = on_frame
    renderer.render_frame()
    renderer.render_frame()

    assert [e.seq for e in events] == [1, 2]
    assert events[0].width == 24 and events[0].height == 16
    assert events[0].max_iter == 40
    assert len(errors) == 6
    assert renderer.view.x_center == 0.0
    assert renderer.settings.max_iter == 40


def test_compute_escape_uses_scaled_budget():
    r = Renderer(8, 8, RenderSettings(max_iter=20, iteration_scaling=True))
    r.zoom(1000.0)
    grids = r.compute_escape()
    assert grids.max_iter == r.settings.effective_max_iter(1000.0)
    assert grids.max_iter > 20
