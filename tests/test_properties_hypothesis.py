import numpy as np
import pytest

hypothesis = pytest.importorskip("hypothesis", reason="hypothesis is a dev optional dependency")
from hypothesis import given, settings, strategies as st  # type: ignore

from api.harness import SketchHarness
from engine.core import raster
from engine.core.container import ViewContainer
from tests._utils.sketches import DRAW_SKETCH, ErrorLog
from util.color import p5_color

W, H = 24, 16

SOURCES = {
    "empty": "",
    "ok": DRAW_SKETCH,
    "syntax": "def draw(:\n",
    "construct": "x = 1 / 0\n",
    "frame": "@p.draw\ndef draw():\n    p.rect(0, 0, undefined_name, 1)\n",
}


@given(
    x=st.integers(-30, 30),
    y=st.integers(-30, 30),
    w=st.integers(-30, 30),
    h=st.integers(-30, 30),
)
def test_fill_rect_covers_the_clipped_box(x, y, w, h):
    px = np.zeros((H, W, 4), dtype=np.uint8)
    raster.fill_rect(px, x, y, w, h, (255, 255, 255, 255))
    x0, x1 = sorted((x, x + w))
    y0, y1 = sorted((y, y + h))
    cols = max(0, min(W, x1) - max(0, x0))
    rows = max(0, min(H, y1) - max(0, y0))
    assert int((px[..., 3] == 255).sum()) == cols * rows


@given(st.lists(st.integers(-1000, 1000), min_size=1, max_size=4))
def test_p5_color_is_always_byte_rgba(values):
    rgba = p5_color(*values)
    assert len(rgba) == 4
    assert all(isinstance(c, int) and 0 <= c <= 255 for c in rgba)


@settings(max_examples=40, deadline=None)
@given(steps=st.lists(st.sampled_from(sorted(SOURCES) + ["tick", "resize"]), min_size=1, max_size=12))
def test_harness_never_holds_more_than_one_surface(steps):
    container = ViewContainer(W, H)
    log = ErrorLog()
    harness = SketchHarness(container, log, guard_frames=True, coalesce_resize=False, seed=0)
    try:
        for i, step in enumerate(steps):
            if step == "tick":
                harness.tick(1 / 60)
            elif step == "resize":
                container.resize(W + i, H + i)
            else:
                harness.mount(SOURCES[step])
            assert len(container.children) <= 1
            if harness.surface is None:
                assert container.children == ()
            else:
                assert container.children == (harness.surface,)
                assert harness.surface.dimensions.as_tuple() == (container.width, container.height)
    finally:
        harness.close()
    assert container.children == ()
    assert all(e.phase in ("compile", "construct", "frame") for e in log.errors)
