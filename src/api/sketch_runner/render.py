"""
どこで: `api.sketch_runner.render`
何を: RenderWindow/ModernGL/SurfacePresenter/ErrorOverlay の初期化。
なぜ: `api.sketch` を薄くし、描画初期化の責務を分離するため。
"""

from __future__ import annotations

from typing import Any

import moderngl


def create_window_and_presenter(
    window_width: int,
    window_height: int,
    *,
    bg_rgba: tuple[float, float, float, float],
    caption: str = "CanvasAI",
):
    """ウィンドウ/ModernGL/SurfacePresenter/ErrorOverlay を生成して返す。

    Returns
    -------
    (rendering_window, mgl_ctx, presenter, overlay)
    """

    from engine.core.render_window import RenderWindow
    from engine.render.presenter import SurfacePresenter
    from engine.ui.overlay import ErrorOverlay

    rendering_window = RenderWindow(window_width, window_height, bg_color=bg_rgba, caption=caption)

    # ModernGL コンテキスト（pyglet が作った GL コンテキストを共有）
    mgl_ctx: moderngl.Context = moderngl.create_context()
    mgl_ctx.enable(moderngl.BLEND)
    mgl_ctx.blend_func = (moderngl.SRC_ALPHA, moderngl.ONE_MINUS_SRC_ALPHA)

    presenter = SurfacePresenter(mgl_ctx)
    overlay = ErrorOverlay(**_overlay_options())
    return rendering_window, mgl_ctx, presenter, overlay


def _overlay_options() -> dict[str, Any]:
    """YAML の `overlay` 節から ErrorOverlay の引数を作る（不正値は無視）。"""
    from util.utils import config_section

    cfg = config_section("overlay")
    opts: dict[str, Any] = {}
    fs = cfg.get("font_size")
    if isinstance(fs, (int, float)) and fs > 0:
        opts["font_size"] = int(fs)
    col = cfg.get("error_color")
    if col is not None:
        try:
            from util.color import p5_color

            opts["error_color"] = p5_color(col)
        except ValueError:
            pass
    fn = cfg.get("font_name")
    if isinstance(fn, str) and fn.strip():
        opts["font_name"] = fn.strip()
    return opts


__all__ = ["create_window_and_presenter"]
