"""
どこで: `api.sketch_runner.utils`（純粋関数/小ヘルパ）。
何を: FPS/ウィンドウ寸法/背景色/ハーネス既定値の解決と、スケッチソース引数の読み取りを提供。
なぜ: `api.sketch` を薄く保ち、テスト容易性と再利用性を上げるため。

優先順位はいずれも「引数の明示指定 > YAML 設定（`configs/default.yaml` + `config.yaml`）> 環境変数/既定値」。
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from common.settings import get as _get_settings

logger = logging.getLogger(__name__)

RGBA = tuple[float, float, float, float]

_DEFAULT_BACKGROUND: RGBA = (1.0, 1.0, 1.0, 1.0)


def _runner_cfg() -> dict[str, Any]:
    try:
        from util.utils import config_section

        return config_section("runner")
    except Exception:
        logger.debug("runner config unavailable", exc_info=True)
        return {}


def _positive_int(value: Any) -> int | None:
    try:
        v = int(value)
    except (TypeError, ValueError):
        return None
    return v if v > 0 else None


def resolve_fps(requested_fps: int | None) -> int:
    """FPS を解決して 1 以上の int を返す。

    - 明示指定があればそれを優先（数値化できない/<=0 は設定値へ）。
    - それ以外は `runner.fps`、無ければ `CANVASAI_FPS`。
    """
    settings = _get_settings()
    if requested_fps is not None:
        v = _positive_int(requested_fps)
        return v if v is not None else max(1, int(settings.FPS))
    v = _positive_int(_runner_cfg().get("fps"))
    return v if v is not None else max(1, int(settings.FPS))


def resolve_window_size(width: int | None, height: int | None) -> tuple[int, int]:
    """ウィンドウ寸法 [px] を解決する。明示指定の 0 以下は `ValueError`。"""
    for name, value in (("width", width), ("height", height)):
        if value is not None and _positive_int(value) is None:
            raise ValueError(f"window {name} must be a positive integer, got: {value!r}")
    settings = _get_settings()
    cfg = _runner_cfg()
    w = _positive_int(width) or _positive_int(cfg.get("width")) or int(settings.WIDTH)
    h = _positive_int(height) or _positive_int(cfg.get("height")) or int(settings.HEIGHT)
    return int(w), int(h)


def resolve_background(background: Any) -> RGBA:
    """背景色 RGBA(0–1) を解決する。不正な設定値は警告して白にフォールバックする。"""
    from util.color import normalize_color

    if background is not None:
        return normalize_color(background)
    cfg_bg = _runner_cfg().get("background_color")
    if cfg_bg is None:
        return _DEFAULT_BACKGROUND
    try:
        return normalize_color(cfg_bg)
    except ValueError as e:
        logger.warning("invalid runner.background_color %r: %s", cfg_bg, e)
        return _DEFAULT_BACKGROUND


def resolve_caption(caption: str | None = None) -> str:
    if caption:
        return str(caption)
    cfg_caption = _runner_cfg().get("caption")
    return str(cfg_caption) if isinstance(cfg_caption, str) and cfg_caption else "CanvasAI"


def resolve_harness_options() -> dict[str, bool]:
    """YAML の `harness` 節から `SketchHarness` のキーワード引数を作る（未指定キーは含めない）。"""
    try:
        from util.utils import config_section

        cfg = config_section("harness")
    except Exception:
        logger.debug("harness config unavailable", exc_info=True)
        return {}
    opts: dict[str, bool] = {}
    for key in ("guard_frames", "coalesce_resize"):
        if isinstance(cfg.get(key), bool):
            opts[key] = bool(cfg[key])
    return opts


def read_source_arg(source_or_path: str | os.PathLike[str]) -> tuple[str, Path | None]:
    """`run_sketch` の第 1 引数を (ソース文字列, ファイルパス or None) に分ける。

    - `PathLike`、または改行を含まず既存ファイルを指す文字列はパスとして扱う。
    - それ以外はスケッチソースそのものとして扱う。
    - `PathLike` が存在しない場合は `FileNotFoundError`。
    """
    if isinstance(source_or_path, os.PathLike):
        path = Path(source_or_path)
        if not path.is_file():
            raise FileNotFoundError(f"sketch file not found: {path}")
        return path.read_text(encoding="utf-8"), path
    text = str(source_or_path)
    if "\n" not in text and text.strip():
        candidate = Path(text)
        try:
            if candidate.is_file():
                return candidate.read_text(encoding="utf-8"), candidate
        except OSError:
            pass
    return text, None


__all__ = [
    "resolve_fps",
    "resolve_window_size",
    "resolve_background",
    "resolve_caption",
    "resolve_harness_options",
    "read_source_arg",
]
