"""
どこで: `api.resize`。
何を: コンテナのリサイズ通知を購読し、稼働中インスタンスのサーフェスを新寸法へ再確保する `ResizeCoordinator`。
なぜ: スケッチの振る舞いとは独立に、表示領域とピクセル寸法を常に一致させるため。

- 既定は通知ごとに同期で再確保する。
- `coalesce=True` の場合はバースト中の最後の寸法だけを、スケジューラ経由で 1 回だけ反映する。
"""

from __future__ import annotations

import logging
from typing import Callable

from engine.core.container import Container
from engine.sandbox.instance import SketchInstance

logger = logging.getLogger(__name__)

Scheduler = Callable[[Callable[[], None]], None]


class ResizeCoordinator:
    """コンテナ寸法 → サーフェス寸法の同期係。"""

    def __init__(
        self,
        container: Container,
        *,
        coalesce: bool = False,
        scheduler: Scheduler | None = None,
    ):
        self._container = container
        self._coalesce = bool(coalesce) and scheduler is not None
        self._scheduler = scheduler
        self._instance: SketchInstance | None = None
        self._pending: tuple[int, int] | None = None
        self._flush_scheduled = False
        self._closed = False
        self.reallocations = 0
        container.add_resize_listener(self._on_resize)

    @property
    def instance(self) -> SketchInstance | None:
        return self._instance

    def attach(self, instance: SketchInstance) -> None:
        self._instance = instance
        self._pending = None

    def detach(self) -> None:
        self._instance = None
        self._pending = None

    def close(self) -> None:
        """購読を解除する（冪等）。"""
        if self._closed:
            return
        self._closed = True
        self._container.remove_resize_listener(self._on_resize)
        self.detach()

    # ---- 通知 ----
    def _on_resize(self, width: int, height: int) -> None:
        if self._instance is None or self._instance.removed:
            return
        if not self._coalesce:
            self._apply(width, height)
            return
        self._pending = (int(width), int(height))
        if not self._flush_scheduled and self._scheduler is not None:
            self._flush_scheduled = True
            self._scheduler(self.flush)

    def flush(self) -> None:
        """保留中の最終寸法を反映する。"""
        self._flush_scheduled = False
        pending, self._pending = self._pending, None
        if pending is None:
            return
        if self._instance is None or self._instance.removed:
            return
        self._apply(*pending)

    def _apply(self, width: int, height: int) -> None:
        assert self._instance is not None
        self._instance.resize_surface(width, height)
        self.reallocations += 1
        logger.debug("surface reallocated to %dx%d", width, height)


__all__ = ["ResizeCoordinator", "Scheduler"]
