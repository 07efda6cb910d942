"""
どこで: `engine.ui` のオーバーレイ表示モジュール。
何を: スケッチのエラーと一時メッセージを pyglet の Label でウィンドウ上に重ねて描画する。
なぜ: 生成コードが壊れたときに、コンソールを見なくても原因（種別/行/コールバック）が分かるようにするため。
"""

from __future__ import annotations

import time
from typing import Literal

from engine.sandbox.errors import SketchError

from ..core.tickable import Tickable

Level = Literal["info", "warn", "error"]

_LEVEL_COLORS: dict[str, tuple[int, int, int, int]] = {
    "info": (230, 230, 230, 220),
    "warn": (230, 160, 40, 230),
    "error": (235, 80, 80, 240),
}


class ErrorOverlay(Tickable):
    """直近のスケッチエラー（消すまで残る）と一時メッセージ（期限付き）を保持して描く。"""

    def __init__(
        self,
        *,
        font_size: int = 12,
        error_color: tuple[int, int, int, int] | None = None,
        font_name: str | None = None,
    ):
        self.font_size = int(font_size)
        self._font = font_name
        self._error_color = error_color or _LEVEL_COLORS["error"]
        self._error_text: str | None = None
        self._messages: list[tuple[str, float, Level]] = []

    # -------- 状態 --------
    @property
    def error_text(self) -> str | None:
        return self._error_text

    @property
    def messages(self) -> list[str]:
        return [m[0] for m in self._messages]

    def show_error(self, err: SketchError) -> None:
        self._error_text = f"[{err.phase}] {err.describe()}"

    def clear_error(self) -> None:
        self._error_text = None

    def show_message(self, text: str, level: Level = "info", timeout_sec: float = 3) -> None:
        expire = time.monotonic() + max(0.1, float(timeout_sec))
        self._messages.append((text, expire, level))

    # -------- Tickable --------
    def tick(self, dt: float) -> None:
        now = time.monotonic()
        self._messages = [m for m in self._messages if m[1] > now]

    # -------- draw --------
    def draw(self, view_width: int, view_height: int) -> None:
        import pyglet

        y = view_height - 10
        if self._error_text is not None:
            lbl = pyglet.text.Label(
                text=self._error_text,
                x=10,
                y=y,
                width=max(50, view_width - 20),
                multiline=True,
                anchor_x="left",
                anchor_y="top",
                font_name=self._font,
                font_size=self.font_size,
                color=self._error_color,
            )
            lbl.draw()
            y -= int(lbl.content_height) + 6
        for text, _expire, level in self._messages:
            lbl = pyglet.text.Label(
                text=text,
                x=10,
                y=y,
                anchor_x="left",
                anchor_y="top",
                font_name=self._font,
                font_size=self.font_size,
                color=_LEVEL_COLORS[level],
            )
            lbl.draw()
            y -= self.font_size + 8


__all__ = ["ErrorOverlay"]
