"""
どこで: `engine.render` の表示層。
何を: `Surface`（numpy RGBA8）を ModernGL テクスチャへ転送し、ウィンドウ左上基準の矩形に描画する。
      サーフェスの文字ラベルは pyglet の Label（Batch）で重ねる。
なぜ: 描画計算（CPU 側のラスタライズ）と GPU 転送/リソース寿命を分離し、内容が変わった時だけ
      アップロードするため。
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

import numpy as np

from engine.core.surface import Surface

logger = logging.getLogger(__name__)

_VERTEX_SHADER = """
#version 330
in vec2 in_vert;
uniform vec2 u_size;
uniform vec2 u_view;
out vec2 v_uv;
void main() {
    // in_vert は左上原点の単位正方形
    vec2 px = in_vert * u_size;
    vec2 ndc = vec2(px.x / u_view.x * 2.0 - 1.0, 1.0 - px.y / u_view.y * 2.0);
    gl_Position = vec4(ndc, 0.0, 1.0);
    v_uv = in_vert;
}
"""

_FRAGMENT_SHADER = """
#version 330
uniform sampler2D u_tex;
in vec2 v_uv;
out vec4 f_color;
void main() {
    f_color = texture(u_tex, v_uv);
}
"""

# TRIANGLE_STRIP 用の単位正方形（左上, 右上, 左下, 右下）
_QUAD = np.array([0.0, 0.0, 1.0, 0.0, 0.0, 1.0, 1.0, 1.0], dtype="f4")


class _SurfaceSlot:
    """1 枚のサーフェスに対応する GPU テクスチャと文字ラベルのキャッシュ。"""

    def __init__(self) -> None:
        self.texture: Any = None
        self.size: tuple[int, int] = (0, 0)
        self.version = -1
        self.batch: Any = None
        self.labels: list[Any] = []
        self.label_view_height = -1

    def release(self) -> None:
        if self.texture is not None:
            self.texture.release()
            self.texture = None
        self.labels = []
        self.batch = None


class SurfacePresenter:
    """コンテナに貼られたサーフェスを毎フレーム描画する。

    Parameters
    ----------
    ctx : moderngl.Context
        pyglet ウィンドウの GL コンテキストから作った ModernGL コンテキスト。
    font_name : str | None
        文字ラベルのフォント名。None で pyglet 既定。
    """

    def __init__(self, ctx: Any, *, font_name: str | None = None):
        self.ctx = ctx
        self.font_name = font_name
        self.program = ctx.program(vertex_shader=_VERTEX_SHADER, fragment_shader=_FRAGMENT_SHADER)
        self.vbo = ctx.buffer(_QUAD.tobytes())
        self.vao = ctx.simple_vertex_array(self.program, self.vbo, "in_vert")
        self._slots: dict[int, _SurfaceSlot] = {}
        self.uploads = 0

    # ------------------------------------------------------------------ #
    # 描画                                                                #
    # ------------------------------------------------------------------ #
    def draw(self, surfaces: Iterable[Surface], view_width: int, view_height: int) -> None:
        """`surfaces` を貼り付け順に描画する。解放済みサーフェスは読み飛ばす。"""
        import moderngl

        vw = max(1, int(view_width))
        vh = max(1, int(view_height))
        alive: set[int] = set()
        for surface in surfaces:
            if surface.released:
                continue
            key = id(surface)
            alive.add(key)
            slot = self._slots.get(key)
            if slot is None:
                slot = self._slots[key] = _SurfaceSlot()
            self._sync(slot, surface)
            self.program["u_size"].value = (float(surface.width), float(surface.height))
            self.program["u_view"].value = (float(vw), float(vh))
            slot.texture.use(location=0)
            self.vao.render(moderngl.TRIANGLE_STRIP)
            self._draw_labels(slot, surface, vh)
        # コンテナから外れたサーフェスの GPU 資源を返す
        for key in [k for k in self._slots if k not in alive]:
            self._slots.pop(key).release()

    def _sync(self, slot: _SurfaceSlot, surface: Surface) -> None:
        size = (surface.width, surface.height)
        if slot.texture is None or slot.size != size:
            if slot.texture is not None:
                slot.texture.release()
            slot.texture = self.ctx.texture(size, 4, dtype="f1")
            slot.texture.filter = (self._nearest(), self._nearest())
            slot.size = size
            slot.version = -1
        if slot.version != surface.version:
            slot.texture.write(np.ascontiguousarray(surface.pixels).tobytes())
            slot.version = surface.version
            slot.label_view_height = -1
            self.uploads += 1

    def _nearest(self) -> int:
        import moderngl

        return moderngl.NEAREST

    def _draw_labels(self, slot: _SurfaceSlot, surface: Surface, view_height: int) -> None:
        if not surface.labels:
            slot.labels = []
            slot.batch = None
            return
        if slot.batch is None or slot.label_view_height != view_height:
            import pyglet

            batch = pyglet.graphics.Batch()
            # pyglet は左下原点なので y を反転する
            slot.labels = [
                pyglet.text.Label(
                    lb.text,
                    font_name=self.font_name,
                    font_size=lb.size,
                    x=lb.x,
                    y=view_height - lb.y,
                    anchor_y="baseline",
                    color=tuple(int(c) for c in lb.color),
                    batch=batch,
                )
                for lb in surface.labels
            ]
            slot.batch = batch
            slot.label_view_height = view_height
        slot.batch.draw()

    # ------------------------------------------------------------------ #
    # 後始末                                                              #
    # ------------------------------------------------------------------ #
    def release(self) -> None:
        """GPU 資源を解放する（終了時）。"""
        for slot in self._slots.values():
            slot.release()
        self._slots.clear()
        for res in (self.vao, self.vbo, self.program):
            try:
                res.release()
            except Exception:  # pragma: no cover - コンテキスト破棄後
                logger.debug("GL resource release failed", exc_info=True)


__all__ = ["SurfacePresenter"]
