"""
どこで: `util.color`。
何を: 色指定の正規化/変換（Hex, RGBA 0–1, RGBA 0–255, p5 流の可変長引数）を一元化。
なぜ: スケッチ API/ウィンドウ背景/設定ファイルで同一の受理仕様とエラーメッセージを提供するため。
"""

from __future__ import annotations

from typing import Sequence

from common.types import RGBA, RGBA8


def _clamp01(x: float) -> float:
    return 0.0 if x < 0.0 else 1.0 if x > 1.0 else float(x)


def _clamp255(x: float) -> int:
    v = int(round(float(x)))
    return 0 if v < 0 else 255 if v > 255 else v


def parse_hex_color_str(s: str) -> RGBA:
    """Hex 文字列から RGBA(0–1) を返す。

    受理形式: "#RRGGBB", "#RRGGBBAA", "0xRRGGBB", "0xRRGGBBAA", "RRGGBB", "RRGGBBAA"。
    大文字/小文字は不問。
    """
    t = s.strip()
    if t.startswith("#"):
        t = t[1:]
    elif t.lower().startswith("0x"):
        t = t[2:]
    if len(t) not in (6, 8):
        raise ValueError(f"invalid hex color length: '{s}' (expected RRGGBB or RRGGBBAA)")
    try:
        r = int(t[0:2], 16)
        g = int(t[2:4], 16)
        b = int(t[4:6], 16)
        a = int(t[6:8], 16) if len(t) == 8 else 255
    except ValueError as e:
        raise ValueError(f"invalid hex color: '{s}'") from e
    return (r / 255.0, g / 255.0, b / 255.0, a / 255.0)


def _as_sequence(value: object) -> Sequence[float | int] | None:
    if isinstance(value, (list, tuple)):
        return value  # type: ignore[return-value]
    return None


def normalize_color(value: object) -> RGBA:
    """色を RGBA(0–1) へ正規化する（設定ファイル/ウィンドウ背景用）。

    - 受理: Hex 文字列, (r,g,b[,a]) （0–1 または 0–255）
    - 返値: (r,g,b,a) （0–1）
    """
    if isinstance(value, str):
        return parse_hex_color_str(value)
    seq = _as_sequence(value)
    if seq is None:
        raise ValueError(f"unsupported color type: {type(value)!r}")
    if len(seq) not in (3, 4):
        raise ValueError("color tuple/list must be length 3 or 4")
    try:
        fseq = [float(x) for x in seq]
    except (TypeError, ValueError) as e:
        raise ValueError(f"invalid color tuple/list: {value!r}") from e
    if len(fseq) == 3:
        fseq.append(1.0)
    # 全要素が 0..1 ならそのまま、そうでなければ 0–255 とみなす
    if all(0.0 <= x <= 1.0 for x in fseq):
        r, g, b, a = fseq
        return (_clamp01(r), _clamp01(g), _clamp01(b), _clamp01(a))
    if len(seq) == 3:
        fseq[3] = 255.0
    r8, g8, b8, a8 = (_clamp255(x) for x in fseq)
    return (r8 / 255.0, g8 / 255.0, b8 / 255.0, a8 / 255.0)


def p5_color(*args: object) -> RGBA8:
    """p5 流の色引数を RGBA(0–255) へ正規化する。

    受理形式:
    - `(gray)` / `(gray, alpha)`
    - `(r, g, b)` / `(r, g, b, a)`
    - `("#RRGGBB")` などの Hex 文字列
    - `((r, g, b[, a]),)` のようにタプル/リストを 1 引数で渡す形
    """
    if len(args) == 1:
        only = args[0]
        if isinstance(only, str):
            r, g, b, a = parse_hex_color_str(only)
            return (_clamp255(r * 255), _clamp255(g * 255), _clamp255(b * 255), _clamp255(a * 255))
        seq = _as_sequence(only)
        if seq is not None:
            return p5_color(*seq)
    try:
        vals = [float(x) for x in args]  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise ValueError(f"invalid color arguments: {args!r}") from e
    if len(vals) == 1:
        g = _clamp255(vals[0])
        return (g, g, g, 255)
    if len(vals) == 2:
        g = _clamp255(vals[0])
        return (g, g, g, _clamp255(vals[1]))
    if len(vals) == 3:
        return (_clamp255(vals[0]), _clamp255(vals[1]), _clamp255(vals[2]), 255)
    if len(vals) == 4:
        r, g, b, a = (_clamp255(v) for v in vals)
        return (r, g, b, a)
    raise ValueError(f"color takes 1 to 4 values, got {len(vals)}")


__all__ = ["parse_hex_color_str", "normalize_color", "p5_color"]
