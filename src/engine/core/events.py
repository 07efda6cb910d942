"""
どこで: `engine.core.events`。
何を: ウィンドウ入力をスケッチ側の入力コールバックへ渡すための `InputEvent` と、キー/ボタン名の変換。
なぜ: pyglet のシンボル値に依存しない形へ正規化し、ヘッドレスでも同じイベントを合成できるようにするため。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

InputKind = Literal[
    "key_pressed",
    "key_released",
    "mouse_pressed",
    "mouse_released",
    "mouse_moved",
    "mouse_dragged",
]

INPUT_KINDS: tuple[str, ...] = (
    "key_pressed",
    "key_released",
    "mouse_pressed",
    "mouse_released",
    "mouse_moved",
    "mouse_dragged",
)

# キー名（p5 の keyCode 定数に相当するもの）
LEFT_ARROW = "LEFT"
RIGHT_ARROW = "RIGHT"
UP_ARROW = "UP"
DOWN_ARROW = "DOWN"
ENTER = "ENTER"
ESCAPE = "ESCAPE"
BACKSPACE = "BACKSPACE"
SPACE = " "

# マウスボタン名
LEFT = "LEFT"
RIGHT = "RIGHT"
CENTER = "CENTER"

# pyglet.window.mouse の値（LEFT=1, MIDDLE=2, RIGHT=4）
_BUTTONS = {1: LEFT, 2: CENTER, 4: RIGHT}

_KEY_ALIASES = {
    "SPACE": SPACE,
    "RETURN": ENTER,
    "ENTER": ENTER,
    "NUM_ENTER": ENTER,
}


def key_name(symbol_string: str, *, shift: bool = False) -> str:
    """`pyglet.window.key.symbol_string()` の結果をスケッチ向けキー名へ変換する。

    - 英字は 1 文字（Shift で大文字）、数字 `_1` は `"1"`
    - SPACE/RETURN はエイリアス、その他はシンボル名のまま（"LEFT" など）
    """
    s = symbol_string.strip()
    if s in _KEY_ALIASES:
        return _KEY_ALIASES[s]
    if len(s) == 1 and s.isalpha():
        return s.upper() if shift else s.lower()
    if len(s) == 2 and s[0] == "_" and s[1].isdigit():
        return s[1]
    return s


# p5 の keyCode に合わせた数値コード（英字は大文字の ASCII、大小を区別しない）
_NAMED_KEY_CODES = {
    BACKSPACE: 8,
    "TAB": 9,
    ENTER: 13,
    "LSHIFT": 16,
    "RSHIFT": 16,
    "LCTRL": 17,
    "RCTRL": 17,
    "LALT": 18,
    "RALT": 18,
    ESCAPE: 27,
    SPACE: 32,
    LEFT_ARROW: 37,
    UP_ARROW: 38,
    RIGHT_ARROW: 39,
    DOWN_ARROW: 40,
    "DELETE": 46,
}


def key_code_of(name: str) -> int:
    """キー名から p5 互換のキーコードを返す（不明なキーは 0）。

    `"a"` と `"A"` は同じコード（65）になる。
    """
    if name in _NAMED_KEY_CODES:
        return _NAMED_KEY_CODES[name]
    if len(name) == 1:
        return ord(name.upper())
    return 0


def button_name(button: int) -> str | None:
    return _BUTTONS.get(int(button))


@dataclass(frozen=True)
class InputEvent:
    """1 件の入力。座標はサーフェス座標（左上原点、y 下向き）。"""

    kind: InputKind
    x: float | None = None
    y: float | None = None
    key: str | None = None
    key_code: int | None = None
    button: str | None = None

    def __post_init__(self) -> None:
        if self.kind not in INPUT_KINDS:
            raise ValueError(f"unknown input kind: {self.kind!r}")

    @property
    def is_key(self) -> bool:
        return self.kind.startswith("key_")

    @classmethod
    def key_event(cls, kind: InputKind, key: str, key_code: int | None = None) -> "InputEvent":
        return cls(kind=kind, key=key, key_code=key_code)

    @classmethod
    def mouse_event(
        cls, kind: InputKind, x: float, y: float, button: str | None = None
    ) -> "InputEvent":
        return cls(kind=kind, x=float(x), y=float(y), button=button)


__all__ = [
    "InputKind",
    "INPUT_KINDS",
    "InputEvent",
    "key_name",
    "key_code_of",
    "button_name",
    "LEFT_ARROW",
    "RIGHT_ARROW",
    "UP_ARROW",
    "DOWN_ARROW",
    "ENTER",
    "ESCAPE",
    "BACKSPACE",
    "SPACE",
    "LEFT",
    "RIGHT",
    "CENTER",
]
