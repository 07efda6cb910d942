"""
プロジェクト向けの軽量ロギングユーティリティ。

要点:
- 各モジュールは `logging.getLogger(__name__)` でロガーを取得する。
- スケッチ内の `print()` は `SKETCH_LOGGER` へ流し、ホスト側の出力と区別する。
- アプリ側で設定が無い場合でも、妥当な最小構成を 1 度だけ適用するヘルパーを提供する。
"""

from __future__ import annotations

import logging

SKETCH_LOGGER = "canvasai.sketch"


def setup_default_logging(level: int | str | None = None) -> None:
    """最小限のロギング設定を 1 度だけ適用する。

    - `level` が None なら `common.settings` の `LOG_LEVEL` を使う
    - ルートロガーにハンドラが既にあれば何もしない（no-op）
    - 上位のランナー/CLI から呼び出す想定
    """
    if level is None:
        from .settings import get as _get_settings

        level = _get_settings().LOG_LEVEL
    if isinstance(level, str):
        lvl = getattr(logging, level.upper(), logging.INFO)
    else:
        lvl = int(level)

    root = logging.getLogger()
    if root.handlers:
        # Assume the app has configured logging
        return
    logging.basicConfig(
        level=lvl,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def sketch_logger() -> logging.Logger:
    """スケッチ出力用ロガーを返す。"""
    return logging.getLogger(SKETCH_LOGGER)


__all__ = ["SKETCH_LOGGER", "setup_default_logging", "sketch_logger"]
