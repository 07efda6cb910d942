"""
どこで: `common` の型定義。
何を: 色・座標などの軽量エイリアス（組込みジェネリックで記述）。
なぜ: 依存の少ない場所に配置して循環と分散定義を避けるため。
"""

Vec2 = tuple[float, float]

# RGBA（0.0–1.0）。ウィンドウ背景など GL 側で使う。
RGBA = tuple[float, float, float, float]

# RGBA（0–255 の整数）。サーフェスのピクセル値として使う。
RGBA8 = tuple[int, int, int, int]


__all__ = ["Vec2", "RGBA", "RGBA8"]
