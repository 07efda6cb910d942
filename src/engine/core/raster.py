"""
どこで: `engine.core` のラスタライザ。
何を: RGBA8 ピクセル配列へ矩形/楕円/太線/三角形をマスク + アルファブレンドで描く純関数群。
なぜ: GPU を使わずにサーフェス内容を確定させ、ヘッドレス環境でもピクセル単位で検証できるようにするため。

規約:
- 座標は浮動小数、ピクセル中心は `(i + 0.5, j + 0.5)`。
- すべての関数はサーフェス外を自動でクリップし、範囲外なら何もしない。
- 色は RGBA8（0–255）。アルファ 255 かつ全面被覆なら代入、それ以外は "over" 合成。
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from common.types import RGBA8


def _clip_box(
    pixels: np.ndarray, x0: float, y0: float, x1: float, y1: float
) -> tuple[int, int, int, int] | None:
    """浮動小数の外接矩形を整数インデックス範囲へ丸めてクリップする。"""
    h, w = pixels.shape[:2]
    ix0 = max(0, int(math.floor(x0)))
    iy0 = max(0, int(math.floor(y0)))
    ix1 = min(w, int(math.ceil(x1)))
    iy1 = min(h, int(math.ceil(y1)))
    if ix0 >= ix1 or iy0 >= iy1:
        return None
    return ix0, iy0, ix1, iy1


def _centers(box: tuple[int, int, int, int]) -> tuple[np.ndarray, np.ndarray]:
    ix0, iy0, ix1, iy1 = box
    xs = np.arange(ix0, ix1, dtype=np.float64) + 0.5
    ys = np.arange(iy0, iy1, dtype=np.float64) + 0.5
    return xs[None, :], ys[:, None]


def blend(pixels: np.ndarray, box: tuple[int, int, int, int], mask: np.ndarray, color: RGBA8) -> None:
    """`box` 範囲へ `mask`（bool）で色を合成する。"""
    ix0, iy0, ix1, iy1 = box
    if not mask.any():
        return
    region = pixels[iy0:iy1, ix0:ix1]
    r, g, b, a = color
    if a <= 0:
        return
    if a >= 255:
        region[mask] = (r, g, b, 255)
        return
    alpha = a / 255.0
    src = np.array([r, g, b], dtype=np.float64)
    dst = region[mask].astype(np.float64)
    out_rgb = src * alpha + dst[:, :3] * (1.0 - alpha)
    out_a = 255.0 * alpha + dst[:, 3] * (1.0 - alpha)
    region[mask] = np.concatenate([out_rgb, out_a[:, None]], axis=1).round().astype(np.uint8)


def fill_all(pixels: np.ndarray, color: RGBA8) -> None:
    """全面を塗る（`background()` 相当）。"""
    h, w = pixels.shape[:2]
    if h == 0 or w == 0:
        return
    if color[3] >= 255:
        pixels[...] = color
        return
    blend(pixels, (0, 0, w, h), np.ones((h, w), dtype=bool), color)


def fill_rect(pixels: np.ndarray, x: float, y: float, w: float, h: float, color: RGBA8) -> None:
    """軸平行矩形を塗る。負の幅/高さは反対方向へ伸ばす。"""
    if w < 0:
        x, w = x + w, -w
    if h < 0:
        y, h = y + h, -h
    x0, y0 = round(x), round(y)
    box = _clip_box(pixels, x0, y0, round(x + w), round(y + h))
    if box is None:
        return
    ix0, iy0, ix1, iy1 = box
    blend(pixels, box, np.ones((iy1 - iy0, ix1 - ix0), dtype=bool), color)


def stroke_rect(
    pixels: np.ndarray, x: float, y: float, w: float, h: float, weight: float, color: RGBA8
) -> None:
    """矩形の輪郭を `weight` 幅で描く。"""
    if w < 0:
        x, w = x + w, -w
    if h < 0:
        y, h = y + h, -h
    half = max(float(weight), 1.0) / 2.0
    box = _clip_box(pixels, x - half, y - half, x + w + half, y + h + half)
    if box is None:
        return
    px, py = _centers(box)
    outer = (px >= x - half) & (px <= x + w + half) & (py >= y - half) & (py <= y + h + half)
    inner = (px > x + half) & (px < x + w - half) & (py > y + half) & (py < y + h - half)
    blend(pixels, box, outer & ~inner, color)


def _ellipse_norm(
    px: np.ndarray, py: np.ndarray, cx: float, cy: float, rx: float, ry: float
) -> np.ndarray:
    rx = max(rx, 1e-9)
    ry = max(ry, 1e-9)
    return ((px - cx) / rx) ** 2 + ((py - cy) / ry) ** 2


def fill_ellipse(
    pixels: np.ndarray, cx: float, cy: float, w: float, h: float, color: RGBA8
) -> None:
    """中心 `(cx, cy)`、直径 `w`×`h` の楕円を塗る。"""
    rx, ry = abs(w) / 2.0, abs(h) / 2.0
    if rx <= 0 or ry <= 0:
        return
    box = _clip_box(pixels, cx - rx, cy - ry, cx + rx, cy + ry)
    if box is None:
        return
    px, py = _centers(box)
    blend(pixels, box, _ellipse_norm(px, py, cx, cy, rx, ry) <= 1.0, color)


def stroke_ellipse(
    pixels: np.ndarray, cx: float, cy: float, w: float, h: float, weight: float, color: RGBA8
) -> None:
    """楕円の輪郭を `weight` 幅のリングとして描く。"""
    half = max(float(weight), 1.0) / 2.0
    rx, ry = abs(w) / 2.0, abs(h) / 2.0
    box = _clip_box(pixels, cx - rx - half, cy - ry - half, cx + rx + half, cy + ry + half)
    if box is None:
        return
    px, py = _centers(box)
    outer = _ellipse_norm(px, py, cx, cy, rx + half, ry + half) <= 1.0
    if rx - half <= 0 or ry - half <= 0:
        blend(pixels, box, outer, color)
        return
    inner = _ellipse_norm(px, py, cx, cy, rx - half, ry - half) < 1.0
    blend(pixels, box, outer & ~inner, color)


def draw_line(
    pixels: np.ndarray, x1: float, y1: float, x2: float, y2: float, weight: float, color: RGBA8
) -> None:
    """太さ `weight` の線分（丸端）を描く。端点が一致すれば円点になる。"""
    half = max(float(weight), 1.0) / 2.0
    box = _clip_box(
        pixels,
        min(x1, x2) - half,
        min(y1, y2) - half,
        max(x1, x2) + half,
        max(y1, y2) + half,
    )
    if box is None:
        return
    px, py = _centers(box)
    dx, dy = x2 - x1, y2 - y1
    seg_len2 = dx * dx + dy * dy
    if seg_len2 <= 0.0:
        t = np.zeros_like(px * py)
    else:
        t = np.clip(((px - x1) * dx + (py - y1) * dy) / seg_len2, 0.0, 1.0)
    qx = x1 + t * dx
    qy = y1 + t * dy
    dist2 = (px - qx) ** 2 + (py - qy) ** 2
    blend(pixels, box, dist2 <= half * half, color)


def fill_triangle(pixels: np.ndarray, pts: Sequence[tuple[float, float]], color: RGBA8) -> None:
    """3 頂点の三角形を辺関数の符号判定で塗る（頂点順は問わない）。"""
    (ax, ay), (bx, by), (cx, cy) = pts
    box = _clip_box(pixels, min(ax, bx, cx), min(ay, by, cy), max(ax, bx, cx), max(ay, by, cy))
    if box is None:
        return
    px, py = _centers(box)
    e0 = (bx - ax) * (py - ay) - (by - ay) * (px - ax)
    e1 = (cx - bx) * (py - by) - (cy - by) * (px - bx)
    e2 = (ax - cx) * (py - cy) - (ay - cy) * (px - cx)
    inside = ((e0 >= 0) & (e1 >= 0) & (e2 >= 0)) | ((e0 <= 0) & (e1 <= 0) & (e2 <= 0))
    blend(pixels, box, inside, color)


def stroke_polygon(
    pixels: np.ndarray, pts: Sequence[tuple[float, float]], weight: float, color: RGBA8
) -> None:
    """閉じた折れ線として輪郭を描く。"""
    n = len(pts)
    for i in range(n):
        x1, y1 = pts[i]
        x2, y2 = pts[(i + 1) % n]
        draw_line(pixels, x1, y1, x2, y2, weight, color)


__all__ = [
    "blend",
    "fill_all",
    "fill_rect",
    "stroke_rect",
    "fill_ellipse",
    "stroke_ellipse",
    "draw_line",
    "fill_triangle",
    "stroke_polygon",
]
