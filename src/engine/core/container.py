"""
どこで: `engine.core` の表示領域抽象。
何を: サーフェスを子として保持し、寸法とリサイズ通知を提供する `Container` Protocol と
      ヘッドレス実装 `ViewContainer` を定義。
なぜ: ハーネスを pyglet ウィンドウから切り離し、同じ契約でテスト/オフスクリーン実行できるようにするため。
"""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from .surface import Surface

ResizeListener = Callable[[int, int], None]

logger = logging.getLogger(__name__)


class Container(Protocol):
    """ハーネスが独占的に書き込む表示領域。"""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    @property
    def children(self) -> tuple[Surface, ...]: ...

    def attach(self, surface: Surface) -> None: ...

    def detach(self, surface: Surface) -> None: ...

    def clear(self) -> None: ...

    def add_resize_listener(self, listener: ResizeListener) -> None: ...

    def remove_resize_listener(self, listener: ResizeListener) -> None: ...


class SurfaceHost:
    """子サーフェスとリサイズ購読者を管理する共通実装（mixin）。

    `ViewContainer` と `WindowView` の双方がこれを継承し、寸法の取得方法だけを差し替える。
    """

    def _init_host(self) -> None:
        self._children: list[Surface] = []
        self._resize_listeners: list[ResizeListener] = []

    @property
    def children(self) -> tuple[Surface, ...]:
        return tuple(self._children)

    def attach(self, surface: Surface) -> None:
        if surface in self._children:
            return
        self._children.append(surface)

    def detach(self, surface: Surface) -> None:
        try:
            self._children.remove(surface)
        except ValueError:
            pass

    def clear(self) -> None:
        """子サーフェスをすべて外す（解放は所有者の責務）。"""
        self._children.clear()

    def add_resize_listener(self, listener: ResizeListener) -> None:
        if listener not in self._resize_listeners:
            self._resize_listeners.append(listener)

    def remove_resize_listener(self, listener: ResizeListener) -> None:
        try:
            self._resize_listeners.remove(listener)
        except ValueError:
            pass

    def _notify_resize(self, width: int, height: int) -> None:
        # 通知中の購読解除に備えてコピーを回す
        for listener in list(self._resize_listeners):
            listener(int(width), int(height))


class ViewContainer(SurfaceHost):
    """メモリ上のコンテナ。`resize()` で寸法を変えると購読者へ同期通知する。"""

    def __init__(self, width: int, height: int):
        self._init_host()
        self._width = int(width)
        self._height = int(height)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def resize(self, width: int, height: int) -> None:
        self._width = int(width)
        self._height = int(height)
        logger.debug("container resized to %dx%d", self._width, self._height)
        self._notify_resize(self._width, self._height)

    def __repr__(self) -> str:  # pragma: no cover - 表示用
        return f"ViewContainer({self._width}x{self._height}, children={len(self._children)})"


__all__ = ["Container", "ResizeListener", "SurfaceHost", "ViewContainer"]
