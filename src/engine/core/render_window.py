"""
どこで: `engine.core` の描画ウィンドウ薄ラッパ。
何を: Pyglet Window（背景クリア/描画コールバック/入力転送）と、その表示領域をハーネス用コンテナとして
      見せる `WindowView` を提供する。
なぜ: ハーネス/プレゼンタから GUI 依存を切り離し、`ViewContainer` と同じ契約で扱うため。

使用例:
    win = RenderWindow(800, 600, bg_color=(0.06, 0.06, 0.09, 1.0))
    harness = SketchHarness(win.view)
    win.add_draw_callback(lambda: presenter.draw(win.view.children))
    win.set_input_handler(harness.dispatch)
    pyglet.app.run()
"""

from __future__ import annotations

from typing import Callable

import pyglet
from pyglet.gl import Config, glClearColor
from pyglet.window import key as _key

from .container import SurfaceHost
from .events import InputEvent, button_name, key_code_of, key_name


class WindowView(SurfaceHost):
    """ウィンドウのクライアント領域。寸法はウィンドウの論理ピクセルに一致する。"""

    def __init__(self, window: pyglet.window.Window):
        self._init_host()
        self._window = window

    @property
    def width(self) -> int:
        return int(self._window.width)

    @property
    def height(self) -> int:
        return int(self._window.height)


class RenderWindow(pyglet.window.Window):
    def __init__(
        self,
        width: int,
        height: int,
        *,
        bg_color: tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0),
        caption: str = "CanvasAI",
        resizable: bool = True,
    ):
        """ウィンドウを生成する。

        引数:
            width: ウィンドウ幅（ピクセル）。
            height: ウィンドウ高さ（ピクセル）。
            bg_color: 背景色 RGBA（0.0〜1.0）。サーフェスの透明部分に見える。
            caption: タイトル。
            resizable: True でユーザーによるリサイズを許可（サーフェスが追従する）。
        """
        # super().__init__ 中に on_resize が来る環境があるため先に用意する
        self.view = WindowView(self)
        self._bg_color = bg_color
        self._draw_callbacks: list[Callable[[], None]] = []
        self._input_handler: Callable[[InputEvent], None] | None = None
        config = Config(double_buffer=True, vsync=True)
        super().__init__(
            width=width, height=height, caption=caption, resizable=resizable, config=config
        )

    # ---- 描画 ----
    def add_draw_callback(self, func: Callable[[], None]) -> None:
        """
        `on_draw` 中に呼び出す描画関数を登録する。

        - 関数は引数を取らず、副作用で描画を行うこと。
        - 登録順に呼び出される。
        """
        self._draw_callbacks.append(func)

    def on_draw(self):  # Pyglet 既定のイベント名
        """ウィンドウ描画イベントハンドラ。登録された描画コールバックを呼び出す。"""
        r, g, b, a = self._bg_color
        glClearColor(r, g, b, a)
        self.clear()
        for cb in self._draw_callbacks:
            cb()

    def on_resize(self, width, height):
        result = super().on_resize(width, height)
        self.view._notify_resize(width, height)
        return result

    # ---- 入力 ----
    def set_input_handler(self, handler: Callable[[InputEvent], None] | None) -> None:
        self._input_handler = handler

    def _emit(self, event: InputEvent) -> None:
        if self._input_handler is not None:
            self._input_handler(event)

    def _to_surface_y(self, y: float) -> float:
        # pyglet は左下原点、サーフェスは左上原点
        return float(self.height) - float(y)

    def on_key_press(self, symbol, modifiers):
        if symbol == _key.ESCAPE:
            # 既定動作（on_close の発火）を維持
            return super().on_key_press(symbol, modifiers)
        name = key_name(_key.symbol_string(symbol), shift=bool(modifiers & _key.MOD_SHIFT))
        self._emit(InputEvent.key_event("key_pressed", name, key_code_of(name)))

    def on_key_release(self, symbol, modifiers):
        name = key_name(_key.symbol_string(symbol), shift=bool(modifiers & _key.MOD_SHIFT))
        self._emit(InputEvent.key_event("key_released", name, key_code_of(name)))

    def on_mouse_press(self, x, y, button, modifiers):
        self._emit(
            InputEvent.mouse_event("mouse_pressed", x, self._to_surface_y(y), button_name(button))
        )

    def on_mouse_release(self, x, y, button, modifiers):
        self._emit(
            InputEvent.mouse_event("mouse_released", x, self._to_surface_y(y), button_name(button))
        )

    def on_mouse_motion(self, x, y, dx, dy):
        self._emit(InputEvent.mouse_event("mouse_moved", x, self._to_surface_y(y)))

    def on_mouse_drag(self, x, y, dx, dy, buttons, modifiers):
        self._emit(
            InputEvent.mouse_event("mouse_dragged", x, self._to_surface_y(y), button_name(buttons))
        )

    # ---- helpers ----
    def set_background_color(self, rgba: tuple[float, float, float, float]) -> None:
        """背景色 RGBA(0–1) を更新する。次フレームから反映。"""
        r, g, b, a = rgba
        self._bg_color = (float(r), float(g), float(b), float(a))


__all__ = ["RenderWindow", "WindowView"]
