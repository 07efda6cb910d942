from __future__ import annotations

import math

import pytest

from engine.core.events import InputEvent
from engine.sandbox.binding import (
    CALLBACK_NAMES,
    MAX_LABELS,
    LifecycleCallbacks,
    SketchBinding,
    SurfaceGate,
    callbacks_of,
)


@pytest.fixture()
def gate() -> SurfaceGate:
    return SurfaceGate()


@pytest.fixture()
def p(gate: SurfaceGate) -> SketchBinding:
    gate.allocate(20, 10)
    return SketchBinding(gate, seed=1)


# ---- ゲート -------------------------------------------------------------


def test_gate_allocates_once() -> None:
    g = SurfaceGate()
    first = g.allocate(8, 6)
    second = g.allocate(100, 100)
    assert first is second
    assert (first.width, first.height) == (8, 6)
    assert g.ignored_requests == 1


def test_gate_release_closes() -> None:
    g = SurfaceGate()
    s = g.allocate(4, 4)
    g.release()
    g.release()
    assert s.released
    with pytest.raises(RuntimeError):
        g.allocate(4, 4)


# ---- コールバック登録 ---------------------------------------------------


def test_decorator_and_assignment_register_the_same_slot(gate: SurfaceGate) -> None:
    p = SketchBinding(gate)

    @p.draw
    def draw() -> None:
        pass

    def on_key() -> None:
        pass

    p.key_pressed = on_key
    cbs = callbacks_of(p)
    assert cbs.draw is draw
    assert cbs.key_pressed is on_key
    assert set(cbs.registered()) == {"draw", "key_pressed"}


def test_registering_non_callable_is_type_error(gate: SurfaceGate) -> None:
    p = SketchBinding(gate)
    with pytest.raises(TypeError):
        p.draw = 3  # type: ignore[assignment]


def test_unknown_attribute_assignment_is_rejected(gate: SurfaceGate) -> None:
    p = SketchBinding(gate)
    with pytest.raises(AttributeError):
        p.x = 1  # type: ignore[attr-defined]


def test_lifecycle_callbacks_get_and_clear() -> None:
    cbs = LifecycleCallbacks(draw=lambda: None)
    assert cbs.get("draw") is not None
    assert cbs.get("setup") is None
    with pytest.raises(KeyError):
        cbs.get("window_resized")
    cbs.clear()
    assert cbs.registered() == ()
    assert len(CALLBACK_NAMES) == 8


# ---- サーフェス ---------------------------------------------------------


def test_dimensions_are_zero_before_allocation(gate: SurfaceGate) -> None:
    p = SketchBinding(gate)
    assert (p.width, p.height) == (0, 0)
    assert p.canvas is None
    assert p.create_canvas(100, 100) is None
    assert gate.surface is None


def test_drawing_before_allocation_raises(gate: SurfaceGate) -> None:
    p = SketchBinding(gate)
    with pytest.raises(RuntimeError):
        p.background(0)


def test_create_canvas_after_allocation_returns_existing(p: SketchBinding, gate: SurfaceGate) -> None:
    assert p.create_canvas(999, 999) is gate.surface
    assert p.resize_canvas(1, 1) is gate.surface
    assert (p.width, p.height) == (20, 10)


# ---- 描画/スタイル ------------------------------------------------------


def test_background_fills_and_clears_labels(p: SketchBinding, gate: SurfaceGate) -> None:
    p.text("hi", 1, 2)
    p.background(10, 20, 30)
    s = gate.surface
    assert s is not None
    assert tuple(s.pixels[5, 5]) == (10, 20, 30, 255)
    assert s.labels == []


def test_no_fill_no_stroke_draws_nothing(p: SketchBinding, gate: SurfaceGate) -> None:
    s = gate.surface
    assert s is not None
    p.no_fill()
    p.no_stroke()
    p.rect(0, 0, 10, 10)
    assert int(s.pixels.sum()) == 0


def test_rect_uses_fill_colour(p: SketchBinding, gate: SurfaceGate) -> None:
    s = gate.surface
    assert s is not None
    p.no_stroke()
    p.fill("#00ff00")
    p.square(2, 2, 3)
    assert tuple(s.pixels[3, 3]) == (0, 255, 0, 255)
    assert tuple(s.pixels[6, 6]) == (0, 0, 0, 0)


def test_push_pop_restores_style(p: SketchBinding, gate: SurfaceGate) -> None:
    s = gate.surface
    assert s is not None
    p.no_stroke()
    p.fill(255, 0, 0)
    p.push()
    p.fill(0, 0, 255)
    p.pop()
    p.pop()  # 対応する push がない pop は無視
    p.rect(0, 0, 2, 2)
    assert tuple(s.pixels[0, 0]) == (255, 0, 0, 255)


def test_text_records_labels_with_cap(p: SketchBinding, gate: SurfaceGate) -> None:
    s = gate.surface
    assert s is not None
    p.text_size(20)
    p.fill(1, 2, 3)
    p.text(42, 5, 6)
    label = s.labels[0]
    assert (label.text, label.x, label.y, label.size, label.color) == ("42", 5.0, 6.0, 20.0, (1, 2, 3, 255))
    for i in range(MAX_LABELS + 10):
        p.text(i, 0, 0)
    assert len(s.labels) == MAX_LABELS
    assert s.labels[-1].text == str(MAX_LABELS + 9)


def test_drawing_bumps_version(p: SketchBinding, gate: SurfaceGate) -> None:
    s = gate.surface
    assert s is not None
    before = s.version
    p.line(0, 0, 5, 5)
    p.point(1, 1)
    assert s.version == before + 2


def test_zero_stroke_weight_skips_lines(p: SketchBinding, gate: SurfaceGate) -> None:
    s = gate.surface
    assert s is not None
    before = s.version
    p.stroke_weight(-3)
    p.line(0, 0, 5, 5)
    assert s.version == before
    assert int(s.pixels.sum()) == 0


# ---- 入力/環境 ----------------------------------------------------------


def test_input_state_tracks_mouse_and_keys(p: SketchBinding) -> None:
    p._apply_input(InputEvent.mouse_event("mouse_moved", 3, 4))
    p._apply_input(InputEvent.mouse_event("mouse_pressed", 5, 6, button=p.LEFT))
    assert (p.pmouse_x, p.pmouse_y, p.mouse_x, p.mouse_y) == (3.0, 4.0, 5.0, 6.0)
    assert p.mouse_is_pressed and p.mouse_button == p.LEFT
    p._apply_input(InputEvent.mouse_event("mouse_released", 5, 6, button=p.LEFT))
    assert not p.mouse_is_pressed

    p._apply_input(InputEvent.key_event("key_pressed", "a", 97))
    assert p.key == "a" and p.key_code == 97
    assert p.key_is_pressed and p.key_is_down("a")
    p._apply_input(InputEvent.key_event("key_released", "a", 97))
    assert not p.key_is_pressed


def test_frame_count_and_delta_time(p: SketchBinding) -> None:
    assert p.frame_count == 0
    p._begin_frame(0.5)
    assert p.frame_count == 1
    assert p.delta_time == pytest.approx(500.0)
    assert p.millis() >= 0.0


def test_loop_control(p: SketchBinding) -> None:
    assert p.is_looping()
    p.no_loop()
    assert not p.is_looping()
    p.loop()
    assert p.is_looping()


# ---- 数学 ---------------------------------------------------------------


def test_random_is_seeded() -> None:
    a = SketchBinding(SurfaceGate(), seed=3)
    b = SketchBinding(SurfaceGate(), seed=3)
    assert [a.random(10) for _ in range(5)] == [b.random(10) for _ in range(5)]
    a.random_seed(9)
    b.random_seed(9)
    assert a.random(2, 4) == b.random(2, 4)


def test_random_forms(p: SketchBinding) -> None:
    assert 0.0 <= p.random() < 1.0
    assert 0.0 <= p.random(5) < 5.0
    assert 2.0 <= p.random(2, 3) < 3.0
    assert p.random(["x", "y"]) in ("x", "y")
    assert p.random([]) is None


def test_math_helpers() -> None:
    assert SketchBinding.constrain(12, 0, 10) == 10
    assert SketchBinding.dist(0, 0, 3, 4) == 5.0
    assert SketchBinding.lerp(0, 10, 0.25) == 2.5
    assert SketchBinding.map_range(5, 0, 10, 100, 200) == 150.0
    assert SketchBinding.map_range(5, 1, 1, 7, 9) == 7
    assert SketchBinding.TWO_PI == pytest.approx(2 * math.pi)
