"""
どこで: `api.sources`。
何を: ハーネスへスケッチソースを供給するコードソース（固定文字列 / ファイル監視）。
なぜ: 保存済みのスケッチを読み込み、編集のたびに丸ごと差し替えてライブ再実行するため。
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol

from engine.core.tickable import Tickable

logger = logging.getLogger(__name__)


class _Mountable(Protocol):
    def mount(self, source: str | None) -> None: ...


class StaticSource(Tickable):
    """固定文字列のソース。`bind()` 時に 1 回だけマウントする。"""

    def __init__(self, code: str):
        self.code = code

    def bind(self, harness: _Mountable) -> None:
        harness.mount(self.code)

    def tick(self, dt: float) -> None:
        return None


class FileSource(Tickable):
    """ファイルの更新時刻を一定間隔で確認し、変化したら内容全体を再マウントする。

    - 読み込み失敗（削除/権限など）は警告ログのみで、現在のインスタンスはそのまま残す。
    - 内容が前回と同一なら再マウントしない。
    """

    def __init__(
        self, path: str | os.PathLike[str], *, interval: float | None = None, encoding: str = "utf-8"
    ):
        if interval is None:
            from common.settings import get as _get_settings

            interval = _get_settings().WATCH_INTERVAL
        self.path = Path(path)
        self.interval = max(0.0, float(interval))
        self.encoding = encoding
        self._harness: _Mountable | None = None
        self._mtime: float | None = None
        self._code: str | None = None
        self._acc = 0.0
        self.reloads = 0

    @property
    def code(self) -> str | None:
        return self._code

    def read(self) -> str:
        return self.path.read_text(encoding=self.encoding)

    def bind(self, harness: _Mountable) -> None:
        self._harness = harness
        self._acc = 0.0
        self.check(force=True)

    def tick(self, dt: float) -> None:
        if self._harness is None:
            return
        self._acc += float(dt)
        if self._acc < self.interval:
            return
        self._acc = 0.0
        self.check()

    def check(self, *, force: bool = False) -> bool:
        """変更があればマウントして True を返す。"""
        if self._harness is None:
            return False
        try:
            mtime = self.path.stat().st_mtime
        except OSError as e:
            if self._mtime is not None or force:
                logger.warning("sketch file unavailable: %s (%s)", self.path, e)
            self._mtime = None
            return False
        if not force and self._mtime is not None and mtime == self._mtime:
            return False
        # 読めないファイルでも mtime を記録し、警告は変更ごとに 1 回だけ
        self._mtime = mtime
        try:
            code = self.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("sketch file could not be read: %s (%s)", self.path, e)
            return False
        if not force and code == self._code:
            return False
        self._code = code
        self.reloads += 1
        logger.info("loading sketch from %s", self.path)
        self._harness.mount(code)
        return True


__all__ = ["StaticSource", "FileSource"]
