"""
どこで: `common.settings`
何を: CanvasAI の環境変数（`CANVASAI_*`）を型付きで一元管理し、起動時に読み込む。
なぜ: ランナー/ハーネス/ソース監視に散らばる既定値を 1 箇所へ集め、テストで差し替えやすくするため。
"""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_float, env_int, env_str


@dataclass
class _Settings:
    # ランナー
    FPS: int = 60
    WIDTH: int = 800
    HEIGHT: int = 600
    LOG_LEVEL: str = "INFO"

    # ハーネス
    GUARD_FRAMES: bool = True
    COALESCE_RESIZE: bool = False
    MAX_SOURCE_BYTES: int = 200 * 1024

    # ソース監視
    WATCH_INTERVAL: float = 0.5


_settings = _Settings()


def reload_from_env() -> None:
    """環境変数から設定を再読込。

    - 数値は下限丸めを適用（FPS/サイズは 1 以上、監視間隔は 0 以上）。
    - 不正値は既定値へフォールバックする。
    """
    defaults = _Settings()

    _settings.FPS = env_int("CANVASAI_FPS", defaults.FPS, min_value=1) or defaults.FPS
    _settings.WIDTH = env_int("CANVASAI_WIDTH", defaults.WIDTH, min_value=1) or defaults.WIDTH
    _settings.HEIGHT = (
        env_int("CANVASAI_HEIGHT", defaults.HEIGHT, min_value=1) or defaults.HEIGHT
    )
    _settings.LOG_LEVEL = env_str("CANVASAI_LOG_LEVEL", defaults.LOG_LEVEL).upper()

    _settings.GUARD_FRAMES = env_bool("CANVASAI_GUARD_FRAMES", defaults.GUARD_FRAMES)
    _settings.COALESCE_RESIZE = env_bool("CANVASAI_COALESCE_RESIZE", defaults.COALESCE_RESIZE)
    _settings.MAX_SOURCE_BYTES = (
        env_int("CANVASAI_MAX_SOURCE_BYTES", defaults.MAX_SOURCE_BYTES, min_value=1)
        or defaults.MAX_SOURCE_BYTES
    )

    interval = env_float("CANVASAI_WATCH_INTERVAL", defaults.WATCH_INTERVAL, min_value=0.0)
    _settings.WATCH_INTERVAL = defaults.WATCH_INTERVAL if interval is None else interval


def get() -> _Settings:
    """現在の設定スナップショットを返す。"""
    return _settings


# 初期ロード
reload_from_env()


__all__ = ["get", "reload_from_env", "_Settings"]
