"""
どこで: `engine.export.image`。
何を: スケッチのサーフェス（numpy RGBA8）を PNG として保存する。
なぜ: ワンアクションで描画結果を残せるようにするため（ウィンドウ背景/オーバーレイは含まない）。
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import numpy as np

from engine.core.surface import Surface
from util.paths import ensure_screenshots_dir, unique_path


def default_png_path(surface: Surface, out_dir: Path | None = None, *, prefix: str | None = None) -> Path:
    """`<out_dir>/<prefix_>YYYYmmdd_HHMMSS_<w>x<h>.png` の未使用パスを返す。"""
    out = out_dir if out_dir is not None else ensure_screenshots_dir()
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    head = f"{prefix}_" if prefix else ""
    return unique_path(Path(out) / f"{head}{ts}_{surface.width}x{surface.height}.png")


def save_surface_png(surface: Surface, path: Path | None = None, *, prefix: str | None = None) -> Path:
    """サーフェスの現在内容を PNG として保存し、保存先を返す。

    Raises
    ------
    RuntimeError
        サーフェスが解放済み、またはエンコードに失敗した場合。
    """
    if surface.released:
        raise RuntimeError("cannot save a released surface")
    if path is None:
        path = default_png_path(surface, prefix=prefix)
    data = np.ascontiguousarray(surface.pixels).tobytes()
    try:
        import pyglet

        # 負の pitch は「先頭行が画像の上端」を意味する（サーフェスは左上原点）
        img = pyglet.image.ImageData(
            surface.width, surface.height, "RGBA", data, pitch=-surface.width * 4
        )
        img.save(str(path))
    except Exception as e:
        raise RuntimeError(f"PNG 書き出しに失敗: {e}") from e
    return path


__all__ = ["default_png_path", "save_surface_png"]
