"""
どこで: `engine.core` の描画ターゲット。
何を: ハーネスが独占所有する RGBA ピクセルサーフェス（numpy 配列）と寸法値オブジェクトを定義。
なぜ: スケッチの描画先を GUI から切り離し、ヘッドレスでも検証可能な 1 枚のキャンバスとして扱うため。

使用例:
    surf = Surface(320, 240)
    surf.resize(640, 480)   # 再確保（内容はクリアされる）
    surf.pixels.shape       # (480, 640, 4)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import numpy as np

from common.types import RGBA8


class _HasSize(Protocol):
    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...


@dataclass(frozen=True)
class SurfaceDimensions:
    """コンテナ/サーフェスの幅と高さ（ピクセル、1 以上）。"""

    width: int
    height: int

    def __post_init__(self) -> None:
        if int(self.width) <= 0 or int(self.height) <= 0:
            raise ValueError(f"surface dimensions must be positive, got {self.width}x{self.height}")

    @classmethod
    def of(cls, view: _HasSize) -> "SurfaceDimensions":
        """コンテナの現在寸法を読み取る（0 以下は 1 に丸める）。"""
        return cls(max(1, int(view.width)), max(1, int(view.height)))

    def as_tuple(self) -> tuple[int, int]:
        return (int(self.width), int(self.height))


@dataclass(frozen=True)
class TextLabel:
    """フレーム中に要求された文字描画（プレゼンタが pyglet Label で描く）。"""

    text: str
    x: float
    y: float
    size: float
    color: RGBA8


class Surface:
    """スケッチの描画先となる RGBA8 ピクセルバッファ。

    - 座標系は左上原点、y 下向き（p5 と同じ）。
    - `pixels` は shape `(height, width, 4)` / dtype `uint8`。
    - `version` は内容が変わるたびに増え、プレゼンタが再アップロード要否の判定に使う。
    """

    def __init__(self, width: int, height: int):
        dims = SurfaceDimensions(int(width), int(height))
        self._pixels = np.zeros((dims.height, dims.width, 4), dtype=np.uint8)
        self.labels: list[TextLabel] = []
        self._released = False
        self.version = 0

    # ---- 寸法 ----
    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def dimensions(self) -> SurfaceDimensions:
        return SurfaceDimensions(self.width, self.height)

    @property
    def pixels(self) -> np.ndarray:
        if self._released:
            raise RuntimeError("surface has been released")
        return self._pixels

    @property
    def released(self) -> bool:
        return self._released

    # ---- 操作 ----
    def touch(self) -> None:
        """内容変更を記録する（ラスタライザが描画後に呼ぶ）。"""
        self.version += 1

    def resize(self, width: int, height: int) -> None:
        """ピクセルバッファを再確保する。内容と文字ラベルはクリアされる。"""
        if self._released:
            raise RuntimeError("cannot resize a released surface")
        dims = SurfaceDimensions(int(width), int(height))
        if dims == self.dimensions:
            return
        self._pixels = np.zeros((dims.height, dims.width, 4), dtype=np.uint8)
        self.labels.clear()
        self.touch()

    def release(self) -> None:
        """バッファを解放する。以後の描画は `RuntimeError`。冪等。"""
        if self._released:
            return
        self._pixels = np.zeros((0, 0, 4), dtype=np.uint8)
        self.labels.clear()
        self._released = True
        self.touch()

    def __repr__(self) -> str:  # pragma: no cover - 表示用
        state = "released" if self._released else f"{self.width}x{self.height}"
        return f"Surface({state})"


__all__ = ["Surface", "SurfaceDimensions", "TextLabel"]
