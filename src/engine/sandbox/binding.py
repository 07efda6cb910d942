"""
どこで: `engine.sandbox.binding`。
何を: スケッチに渡す能力オブジェクト `SketchBinding`（名前 `p`）と、コールバック枠 `LifecycleCallbacks`、
      単回確保ゲート `SurfaceGate` を定義。
なぜ: 生成コードが触れる面を「コールバック登録・描画命令・環境値」に限定し、
      サーフェス確保/寸法変更をハーネスだけが行えるようにするため。

要点:
- コールバック登録は明示的なセッター（デコレータ可）: `@p.setup`, `@p.draw`, `@p.key_pressed` ...
  互換のため `p.draw = fn` 形式の代入も同じ枠へ登録する。その他の公開属性への代入は `AttributeError`。
- `p.create_canvas()` / `p.resize_canvas()` はハーネス確保後は既存サーフェスを返すだけ（警告ログ）。
- 描画命令はサーフェス確保前（= setup 前のトップレベル）に呼ぶと `RuntimeError`。
- 内部状態（`_gate` など）はスケッチから触れない（`engine.sandbox.compiler` が `_` 始まりの属性を拒否）。
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Sequence

import numpy as np

from common.types import RGBA8
from engine.core import events, raster
from engine.core.events import InputEvent
from engine.core.surface import Surface, TextLabel
from util.color import p5_color

logger = logging.getLogger(__name__)

Callback = Callable[[], Any]

CALLBACK_NAMES: tuple[str, ...] = ("setup", "draw") + events.INPUT_KINDS

# 背景を塗らないスケッチで文字ラベルが溜まり続けないための上限
MAX_LABELS = 512


@dataclass
class LifecycleCallbacks:
    """スケッチが登録するコールバック枠（未登録は None）。"""

    setup: Callback | None = None
    draw: Callback | None = None
    key_pressed: Callback | None = None
    key_released: Callback | None = None
    mouse_pressed: Callback | None = None
    mouse_released: Callback | None = None
    mouse_moved: Callback | None = None
    mouse_dragged: Callback | None = None

    def get(self, name: str) -> Callback | None:
        if name not in CALLBACK_NAMES:
            raise KeyError(name)
        return getattr(self, name)

    def registered(self) -> tuple[str, ...]:
        return tuple(f.name for f in fields(self) if getattr(self, f.name) is not None)

    def clear(self) -> None:
        for f in fields(self):
            setattr(self, f.name, None)


class SurfaceGate:
    """サーフェスの単回確保ゲート。

    最初の `allocate()` だけが実体を作り、以降はサイズ引数を無視してキャッシュを返す。
    """

    def __init__(self, factory: Callable[[int, int], Surface] = Surface):
        self._factory = factory
        self._surface: Surface | None = None
        self._closed = False
        self.ignored_requests = 0

    @property
    def surface(self) -> Surface | None:
        return self._surface

    def allocate(self, width: int, height: int) -> Surface:
        if self._closed:
            raise RuntimeError("surface gate is closed")
        if self._surface is None:
            self._surface = self._factory(int(width), int(height))
            return self._surface
        self.ignored_requests += 1
        logger.warning("create_canvas() call from sketch was ignored; the canvas is managed by the host")
        return self._surface

    def release(self) -> None:
        """確保済みサーフェスを解放してゲートを閉じる（冪等）。"""
        if self._surface is not None:
            self._surface.release()
        self._closed = True


@dataclass
class _DrawState:
    fill: RGBA8 | None = (255, 255, 255, 255)
    stroke: RGBA8 | None = (0, 0, 0, 255)
    stroke_weight: float = 1.0
    text_size: float = 12.0


@dataclass
class _InputState:
    mouse_x: float = 0.0
    mouse_y: float = 0.0
    pmouse_x: float = 0.0
    pmouse_y: float = 0.0
    mouse_is_pressed: bool = False
    mouse_button: str | None = None
    key: str = ""
    key_code: int = 0
    # 押下中キー（大小を区別しない識別子 -> 押下時のキー名）
    keys_down: dict[int | str, str] = field(default_factory=dict)


def _held_key(name: str) -> int | str:
    """押下状態の識別子。Shift の有無で名前が変わる英字も同じキーとして扱う。"""
    return events.key_code_of(name) or name


def _event_key_code(event: InputEvent) -> int:
    if event.key_code is not None:
        return int(event.key_code)
    return events.key_code_of(event.key) if event.key else 0


class SketchBinding:
    """スケッチ側から `p` として見える能力オブジェクト。"""

    LEFT_ARROW = events.LEFT_ARROW
    RIGHT_ARROW = events.RIGHT_ARROW
    UP_ARROW = events.UP_ARROW
    DOWN_ARROW = events.DOWN_ARROW
    ENTER = events.ENTER
    ESCAPE = events.ESCAPE
    BACKSPACE = events.BACKSPACE
    SPACE = events.SPACE
    LEFT = events.LEFT
    RIGHT = events.RIGHT
    CENTER = events.CENTER
    PI = math.pi
    TWO_PI = math.tau
    HALF_PI = math.pi / 2

    def __init__(self, gate: SurfaceGate, *, seed: int | None = None):
        self._callbacks = LifecycleCallbacks()
        self._gate = gate
        self._style = _DrawState()
        self._style_stack: list[_DrawState] = []
        self._input = _InputState()
        self._frame_count = 0
        self._delta_time = 0.0
        self._started_at = time.perf_counter()
        self._looping = True
        self._rng = np.random.default_rng(seed)

    # ------------------------------------------------------------------ #
    # 代入の制限                                                          #
    # ------------------------------------------------------------------ #
    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        if name in CALLBACK_NAMES:
            self._register(name, value)
            return
        raise AttributeError(
            f"cannot assign '{name}' on the sketch object; keep sketch state in module-level variables"
        )

    # ------------------------------------------------------------------ #
    # コールバック登録                                                    #
    # ------------------------------------------------------------------ #
    def _register(self, name: str, fn: Callback) -> Callback:
        if not callable(fn):
            raise TypeError(f"{name} expects a callable, got {type(fn).__name__}")
        setattr(self._callbacks, name, fn)
        return fn

    def setup(self, fn: Callback) -> Callback:
        return self._register("setup", fn)

    def draw(self, fn: Callback) -> Callback:
        return self._register("draw", fn)

    def key_pressed(self, fn: Callback) -> Callback:
        return self._register("key_pressed", fn)

    def key_released(self, fn: Callback) -> Callback:
        return self._register("key_released", fn)

    def mouse_pressed(self, fn: Callback) -> Callback:
        return self._register("mouse_pressed", fn)

    def mouse_released(self, fn: Callback) -> Callback:
        return self._register("mouse_released", fn)

    def mouse_moved(self, fn: Callback) -> Callback:
        return self._register("mouse_moved", fn)

    def mouse_dragged(self, fn: Callback) -> Callback:
        return self._register("mouse_dragged", fn)

    # ------------------------------------------------------------------ #
    # 環境値                                                              #
    # ------------------------------------------------------------------ #
    @property
    def width(self) -> int:
        s = self._gate.surface
        return 0 if s is None or s.released else s.width

    @property
    def height(self) -> int:
        s = self._gate.surface
        return 0 if s is None or s.released else s.height

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def delta_time(self) -> float:
        """直前フレームからの経過 [ms]（p5 の deltaTime と同じ単位）。"""
        return self._delta_time * 1000.0

    @property
    def mouse_x(self) -> float:
        return self._input.mouse_x

    @property
    def mouse_y(self) -> float:
        return self._input.mouse_y

    @property
    def pmouse_x(self) -> float:
        return self._input.pmouse_x

    @property
    def pmouse_y(self) -> float:
        return self._input.pmouse_y

    @property
    def mouse_is_pressed(self) -> bool:
        return self._input.mouse_is_pressed

    @property
    def mouse_button(self) -> str | None:
        return self._input.mouse_button

    @property
    def key(self) -> str:
        return self._input.key

    @property
    def key_code(self) -> int:
        """p5 互換の数値キーコード（左矢印 37、Enter 13、英字は大文字の ASCII）。

        `LEFT_ARROW` などの定数はキー名なので `p.key` / `p.key_is_down()` と比較する。
        """
        return self._input.key_code

    @property
    def key_is_pressed(self) -> bool:
        return bool(self._input.keys_down)

    def key_is_down(self, key: str) -> bool:
        return _held_key(key) in self._input.keys_down

    def millis(self) -> float:
        return (time.perf_counter() - self._started_at) * 1000.0

    # ------------------------------------------------------------------ #
    # サーフェス（ハーネス管理）                                          #
    # ------------------------------------------------------------------ #
    def create_canvas(self, *args: Any, **kwargs: Any) -> Surface | None:
        """ハーネス確保済みのサーフェスを返す。サイズ引数は無視される。"""
        surface = self._gate.surface
        if surface is None:
            logger.warning("create_canvas() before setup was ignored; the canvas is managed by the host")
            return None
        return self._gate.allocate(surface.width, surface.height)

    def resize_canvas(self, *args: Any, **kwargs: Any) -> Surface | None:
        return self.create_canvas(*args, **kwargs)

    @property
    def canvas(self) -> Surface | None:
        return self._gate.surface

    def _target(self) -> Surface:
        surface = self._gate.surface
        if surface is None:
            raise RuntimeError("drawing is only available once setup has run (the canvas does not exist yet)")
        return surface

    # ------------------------------------------------------------------ #
    # スタイル                                                            #
    # ------------------------------------------------------------------ #
    def fill(self, *color: Any) -> None:
        self._style.fill = p5_color(*color)

    def no_fill(self) -> None:
        self._style.fill = None

    def stroke(self, *color: Any) -> None:
        self._style.stroke = p5_color(*color)

    def no_stroke(self) -> None:
        self._style.stroke = None

    def stroke_weight(self, weight: float) -> None:
        self._style.stroke_weight = max(0.0, float(weight))

    def text_size(self, size: float) -> None:
        self._style.text_size = max(1.0, float(size))

    def push(self) -> None:
        self._style_stack.append(replace(self._style))

    def pop(self) -> None:
        if not self._style_stack:
            logger.debug("pop() without matching push() ignored")
            return
        self._style = self._style_stack.pop()

    # ------------------------------------------------------------------ #
    # 描画                                                                #
    # ------------------------------------------------------------------ #
    def background(self, *color: Any) -> None:
        surface = self._target()
        raster.fill_all(surface.pixels, p5_color(*color))
        surface.labels.clear()
        surface.touch()

    def clear(self) -> None:
        surface = self._target()
        surface.pixels[...] = 0
        surface.labels.clear()
        surface.touch()

    def rect(self, x: float, y: float, w: float, h: float | None = None) -> None:
        surface = self._target()
        h = w if h is None else h
        if self._style.fill is not None:
            raster.fill_rect(surface.pixels, x, y, w, h, self._style.fill)
        if self._style.stroke is not None and self._style.stroke_weight > 0:
            raster.stroke_rect(surface.pixels, x, y, w, h, self._style.stroke_weight, self._style.stroke)
        surface.touch()

    def square(self, x: float, y: float, size: float) -> None:
        self.rect(x, y, size, size)

    def ellipse(self, x: float, y: float, w: float, h: float | None = None) -> None:
        surface = self._target()
        h = w if h is None else h
        if self._style.fill is not None:
            raster.fill_ellipse(surface.pixels, x, y, w, h, self._style.fill)
        if self._style.stroke is not None and self._style.stroke_weight > 0:
            raster.stroke_ellipse(
                surface.pixels, x, y, w, h, self._style.stroke_weight, self._style.stroke
            )
        surface.touch()

    def circle(self, x: float, y: float, d: float) -> None:
        self.ellipse(x, y, d, d)

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        surface = self._target()
        if self._style.stroke is None or self._style.stroke_weight <= 0:
            return
        raster.draw_line(surface.pixels, x1, y1, x2, y2, self._style.stroke_weight, self._style.stroke)
        surface.touch()

    def point(self, x: float, y: float) -> None:
        self.line(x, y, x, y)

    def triangle(self, x1: float, y1: float, x2: float, y2: float, x3: float, y3: float) -> None:
        self._polygon([(x1, y1), (x2, y2), (x3, y3)])

    def quad(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        x3: float,
        y3: float,
        x4: float,
        y4: float,
    ) -> None:
        self._polygon([(x1, y1), (x2, y2), (x3, y3), (x4, y4)])

    def _polygon(self, pts: Sequence[tuple[float, float]]) -> None:
        surface = self._target()
        if self._style.fill is not None:
            # 凸多角形を扇形に三角形分割
            for i in range(1, len(pts) - 1):
                raster.fill_triangle(surface.pixels, (pts[0], pts[i], pts[i + 1]), self._style.fill)
        if self._style.stroke is not None and self._style.stroke_weight > 0:
            raster.stroke_polygon(surface.pixels, pts, self._style.stroke_weight, self._style.stroke)
        surface.touch()

    def text(self, value: Any, x: float, y: float) -> None:
        surface = self._target()
        if self._style.fill is None:
            return
        surface.labels.append(
            TextLabel(str(value), float(x), float(y), self._style.text_size, self._style.fill)
        )
        if len(surface.labels) > MAX_LABELS:
            del surface.labels[: len(surface.labels) - MAX_LABELS]
        surface.touch()

    # ------------------------------------------------------------------ #
    # ループ制御                                                          #
    # ------------------------------------------------------------------ #
    def no_loop(self) -> None:
        self._looping = False

    def loop(self) -> None:
        self._looping = True

    def is_looping(self) -> bool:
        return self._looping

    # ------------------------------------------------------------------ #
    # 数学ユーティリティ                                                  #
    # ------------------------------------------------------------------ #
    def random(self, a: Any = None, b: Any = None) -> Any:
        """p5 の random(): 引数なし [0,1) / 1 数値 [0,a) / 2 数値 [a,b) / シーケンスから 1 要素。"""
        if a is None:
            return float(self._rng.random())
        if b is None:
            if isinstance(a, (list, tuple)):
                if not a:
                    return None
                return a[int(self._rng.integers(0, len(a)))]
            return float(self._rng.random() * float(a))
        lo, hi = float(a), float(b)
        return lo + float(self._rng.random()) * (hi - lo)

    def random_seed(self, seed: int) -> None:
        self._rng = np.random.default_rng(int(seed))

    @staticmethod
    def constrain(value: float, low: float, high: float) -> float:
        return max(low, min(high, value))

    @staticmethod
    def dist(x1: float, y1: float, x2: float, y2: float) -> float:
        return math.hypot(x2 - x1, y2 - y1)

    @staticmethod
    def lerp(start: float, stop: float, amt: float) -> float:
        return start + (stop - start) * amt

    @staticmethod
    def map_range(
        value: float, start1: float, stop1: float, start2: float, stop2: float
    ) -> float:
        if stop1 == start1:
            return start2
        return start2 + (stop2 - start2) * ((value - start1) / (stop1 - start1))

    # ------------------------------------------------------------------ #
    # ホスト側フック（スケッチからは使わない）                            #
    # ------------------------------------------------------------------ #
    def _begin_frame(self, dt: float) -> None:
        self._delta_time = float(dt)
        self._frame_count += 1

    def _apply_input(self, event: InputEvent) -> None:
        st = self._input
        if event.x is not None and event.y is not None:
            st.pmouse_x, st.pmouse_y = st.mouse_x, st.mouse_y
            st.mouse_x, st.mouse_y = float(event.x), float(event.y)
        if event.kind == "mouse_pressed":
            st.mouse_is_pressed = True
            st.mouse_button = event.button
        elif event.kind == "mouse_released":
            st.mouse_is_pressed = False
        elif event.kind == "key_pressed":
            st.key = event.key or ""
            st.key_code = _event_key_code(event)
            if event.key:
                st.keys_down[_held_key(event.key)] = event.key
        elif event.kind == "key_released":
            st.key = event.key or st.key
            st.key_code = _event_key_code(event) or st.key_code
            if event.key:
                st.keys_down.pop(_held_key(event.key), None)

    def __repr__(self) -> str:  # pragma: no cover - 表示用
        return f"SketchBinding(callbacks={self._callbacks.registered()})"


def callbacks_of(binding: SketchBinding) -> LifecycleCallbacks:
    """ハーネス/インスタンスがコールバック枠へ触れるための入口。"""
    return binding._callbacks


__all__ = [
    "CALLBACK_NAMES",
    "LifecycleCallbacks",
    "SurfaceGate",
    "SketchBinding",
    "callbacks_of",
]
