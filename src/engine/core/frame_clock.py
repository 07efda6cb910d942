"""
どこで: `engine.core` の簡易フレームドライバ。
何を: `Tickable` の列を固定順序で呼び出す FrameClock（dt 測定・経過時間/フレーム数の保持）。
なぜ: pyglet の clock から呼ぶだけでソース監視→ハーネス→オーバーレイの更新順を統一するため。
"""

from __future__ import annotations

import time
from typing import Sequence

from .tickable import Tickable


class FrameClock:
    """登録された Tickable を固定順序で実行するだけの極小クラス。"""

    def __init__(self, tickables: Sequence[Tickable]):
        self._tickables = tuple(tickables)
        self._last_time = time.perf_counter()
        self._elapsed = 0.0
        self._frames = 0

    @property
    def elapsed(self) -> float:
        """tick に渡された dt の累計 [sec]。"""
        return self._elapsed

    @property
    def frames(self) -> int:
        return self._frames

    # GUI フレームワークから schedule_interval で呼ばせる
    def tick(self, dt: float | None = None) -> None:
        if dt is None:  # pyglet は dt を渡してくれる
            now = time.perf_counter()  # 他フレームワーク用
            dt = now - self._last_time
            self._last_time = now

        self._elapsed += dt
        self._frames += 1
        for t in self._tickables:
            t.tick(dt)
