"""
どこで: `engine.sandbox.instance`。
何を: 1 つのコンテナに結び付いた稼働中スケッチ `SketchInstance`（能力オブジェクトの生成・起動・
      フレーム/入力駆動・サーフェス再確保・撤去）。
なぜ: ハーネスから「インスタンスの寿命」だけを切り出し、撤去時にサーフェスと入力経路を確実に外すため。

起動順序:
1) `SketchBinding` を生成
2) `init(binding)` を呼ぶ（ハーネスがスケッチ本体の実行と setup のラップを行う）
3) 登録済み `setup` を 1 回だけ呼ぶ
いずれかで例外が出ると生の例外がそのまま伝播する（分類と後始末はハーネス側）。
"""

from __future__ import annotations

import logging
from typing import Callable

from engine.core.container import Container
from engine.core.events import InputEvent
from engine.core.surface import Surface, SurfaceDimensions
from engine.core.tickable import Tickable

from .binding import SketchBinding, SurfaceGate, callbacks_of

logger = logging.getLogger(__name__)

SketchInit = Callable[[SketchBinding], None]


class SketchInstance(Tickable):
    """稼働中のスケッチ。ハーネスが排他的に所有する。"""

    def __init__(
        self,
        init: SketchInit,
        container: Container,
        *,
        gate: SurfaceGate | None = None,
        seed: int | None = None,
    ):
        self._container = container
        self._gate = gate if gate is not None else SurfaceGate()
        self._removed = False
        self.binding = SketchBinding(self._gate, seed=seed)

        init(self.binding)
        setup = callbacks_of(self.binding).setup
        if setup is not None:
            setup()

    # ---- 状態 ----
    @property
    def surface(self) -> Surface | None:
        return self._gate.surface

    @property
    def removed(self) -> bool:
        return self._removed

    @property
    def container(self) -> Container:
        return self._container

    # ---- Tickable ----
    def tick(self, dt: float) -> None:
        """1 フレーム進める。`no_loop()` 中は draw を呼ばない。"""
        if self._removed:
            return
        draw = callbacks_of(self.binding).draw
        if draw is None or not self.binding.is_looping():
            return
        self.binding._begin_frame(dt)
        draw()

    # ---- 入力 ----
    def dispatch(self, event: InputEvent) -> None:
        if self._removed:
            return
        self.binding._apply_input(event)
        cb = callbacks_of(self.binding).get(event.kind)
        if cb is not None:
            cb()

    # ---- サーフェス ----
    def resize_surface(self, width: int, height: int) -> None:
        """サーフェスを再確保する（setup は再実行しない）。"""
        if self._removed:
            return
        surface = self._gate.surface
        if surface is None:
            return
        dims = SurfaceDimensions(max(1, int(width)), max(1, int(height)))
        surface.resize(*dims.as_tuple())

    # ---- 撤去 ----
    def remove(self) -> None:
        """サーフェスをコンテナから外して解放し、全コールバックを破棄する（冪等）。"""
        if self._removed:
            return
        self._removed = True
        surface = self._gate.surface
        if surface is not None:
            self._container.detach(surface)
        self._gate.release()
        callbacks_of(self.binding).clear()
        logger.debug("sketch instance removed")


__all__ = ["SketchInstance", "SketchInit"]
