"""
どこで: `api.sketch`（実行ランナー）。
何を: スケッチソース（文字列/ファイル）をハーネスへマウントし、pyglet ウィンドウ上で
      ModernGL によるサーフェス表示・入力転送・エラー表示・ファイル監視を統合して実行する。
なぜ: 生成/編集したスケッチを 1 行で対話的に動かし、壊れたコードでもランナーを落とさずに
      原因をその場で確認できるようにするため。

主エントリポイント:
- `run_sketch(source_or_path, *, width=None, height=None, fps=None, background=None,
  watch=True, init_only=False)`

実行フロー（概要）:
1) 設定解決: FPS/ウィンドウ寸法/背景色を「引数 > YAML 設定 > 環境変数/既定」で決定。
2) ソース解決: 既存ファイルを指す引数はファイル、それ以外はソース文字列として扱う。
3) ウィンドウ/GL: `RenderWindow` と ModernGL コンテキスト、`SurfacePresenter`、`ErrorOverlay` を生成。
4) ハーネス: `SketchHarness(window.view, scheduler=pyglet.clock.schedule_once 相当)` を作り、
   エラーチャネルをオーバーレイへ接続。
5) フレーム駆動: `FrameClock([source, harness, overlay])` を `pyglet.clock.schedule_interval` で駆動。
6) キー: `ESC` で終了（ハーネス撤去と GL 資源解放）、`Ctrl+P` でサーフェスを PNG 保存。

例:
    from api.sketch import run_sketch

    run_sketch('''
    @p.draw
    def draw():
        p.background(20)
        p.circle(p.mouse_x, p.mouse_y, 40)
    ''')

注意/制限:
- ヘッドレス/仮想環境では `pyglet`/`ModernGL` の初期化に失敗する場合がある。
  `init_only=True` なら重い依存を読み込まずに引数の検証だけを行って戻る。
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any

from engine.core.tickable import Tickable

from .harness import SketchHarness
from .sketch_runner.utils import (
    read_source_arg,
    resolve_background,
    resolve_caption,
    resolve_fps,
    resolve_harness_options,
    resolve_window_size,
)
from .sources import FileSource, StaticSource

logger = logging.getLogger(__name__)


class _OverlayMount:
    """ソースからの `mount()` を中継し、新しいソースを読むたびに前回のエラー表示を消す。"""

    def __init__(self, harness: SketchHarness, overlay: Any):
        self.harness = harness
        self.overlay = overlay

    def mount(self, source: str | None) -> None:
        self.overlay.clear_error()
        self.harness.mount(source)


def run_sketch(
    source_or_path: str | os.PathLike[str],
    *,
    width: int | None = None,
    height: int | None = None,
    fps: int | None = None,
    background: str | tuple[float, float, float] | tuple[float, float, float, float] | None = None,
    watch: bool = True,
    init_only: bool = False,
) -> None:
    """スケッチを実行し、サーフェスをウィンドウへ表示する。

    Parameters
    ----------
    source_or_path : str | os.PathLike[str]
        スケッチソース文字列、またはスケッチファイルのパス。
    width, height : int | None
        ウィンドウ（= サーフェス）初期寸法 [px]。None で設定から解決。
    fps : int | None
        フレームレート。None で設定から解決。最終的に 1 以上にクランプ。
    background : tuple[float,float,float,(float)] | str | None
        ウィンドウ背景色（RGBA 0–1 または #RRGGBB/#RRGGBBAA）。サーフェスの透明部分に見える。
    watch : bool, default True
        ファイル指定時、更新を検知して丸ごと再マウントする。
    init_only : bool, default False
        True で重い依存の初期化をスキップし、引数の検証だけを行って終了。
    """
    # ---- ① 設定解決 ----------------------------------------------
    fps = resolve_fps(fps)
    window_width, window_height = resolve_window_size(width, height)
    bg_rgba = resolve_background(background)
    code, path = read_source_arg(source_or_path)

    # init_only の場合は重い依存を読み込まずに早期リターン
    if init_only:
        return None

    # 遅延インポート（ヘッドレス環境でのウィンドウ生成を避ける）
    import pyglet
    from pyglet.window import key

    from engine.core.frame_clock import FrameClock
    from engine.export.image import save_surface_png

    from .sketch_runner.render import create_window_and_presenter

    # ---- ② Window & ModernGL --------------------------------------
    rendering_window, _mgl_ctx, presenter, overlay = create_window_and_presenter(
        window_width, window_height, bg_rgba=bg_rgba, caption=resolve_caption()
    )
    view = rendering_window.view

    # ---- ③ Harness ------------------------------------------------
    def _schedule(fn) -> None:  # type: ignore[no-untyped-def]
        pyglet.clock.schedule_once(lambda _dt: fn(), 0)

    harness = SketchHarness(
        view,
        on_sketch_error=overlay.show_error,
        scheduler=_schedule,
        **resolve_harness_options(),
    )
    rendering_window.set_input_handler(harness.dispatch)

    source: FileSource | StaticSource
    if path is not None and watch:
        source = FileSource(path)
        logger.info("watching %s", path)
    else:
        source = StaticSource(code)

    # ---- ④ Draw callbacks -----------------------------------------
    def _draw_main() -> None:
        presenter.draw(view.children, rendering_window.width, rendering_window.height)
        overlay.draw(rendering_window.width, rendering_window.height)

    rendering_window.add_draw_callback(_draw_main)

    # ---- ⑤ FrameClock ---------------------------------------------
    tickables: list[Tickable] = [source, harness, overlay]
    frame_clock = FrameClock(tickables)
    pyglet.clock.schedule_interval(frame_clock.tick, 1 / fps)

    # ---- ⑥ pyglet イベント -----------------------------------------
    def _handle_save_png() -> None:
        surface = harness.surface
        if surface is None:
            overlay.show_message("No surface to save", level="warn")
            return
        try:
            _name_prefix = Path(sys.argv[0]).stem if sys.argv and sys.argv[0] else None
            p = save_surface_png(surface, prefix=_name_prefix)
            overlay.show_message(f"Saved PNG: {p}")
        except RuntimeError as e:
            overlay.show_message(f"PNG 保存失敗: {e}", level="error")

    @rendering_window.event
    def on_key_press(sym, mods):  # noqa: ANN001
        if sym == key.P and (mods & key.MOD_CTRL):
            _handle_save_png()
            # スケッチへは転送しない
            return pyglet.event.EVENT_HANDLED
        return None

    @rendering_window.event
    def on_close():  # noqa: ANN001
        # 冪等なクリーンアップ
        if getattr(on_close, "_closed", False):
            return
        pyglet.clock.unschedule(frame_clock.tick)
        harness.close()
        presenter.release()
        setattr(on_close, "_closed", True)
        pyglet.app.exit()

    source.bind(_OverlayMount(harness, overlay))
    logger.info("sketch runner started (%dx%d @ %d fps)", window_width, window_height, fps)
    pyglet.app.run()


__all__ = ["run_sketch"]
