"""
どこで: `api` 入口（高レベル公開 API）。
何を: 実行ハーネス・リサイズ同期・コードソース・ホストセッション・ランナーを再輸出。
なぜ: 利用者が単一名前空間から「ソースを渡す → 動かす → 壊れたら直す」まで完結できるようにするため。

Usage:
    from api import SketchHarness, ViewContainer

    harness = SketchHarness(ViewContainer(320, 240), on_sketch_error=print)
    harness.mount("@p.draw\\ndef draw():\\n    p.background(0)\\n")
    harness.tick(1 / 60)
"""

# コアクラス（高度な使用）
from engine.core.container import ViewContainer
from engine.core.events import InputEvent
from engine.sandbox.errors import (
    CompilationError,
    ConstructionError,
    RuntimeFrameError,
    SketchError,
)

# 主要API
from .harness import SketchHarness
from .resize import ResizeCoordinator
from .session import CodeGenerator, GenerationError, GenerationResult, SketchSession
from .sketch import run_sketch as run
from .sketch import run_sketch as run_sketch
from .sources import FileSource, StaticSource

__all__ = [
    # メインAPI
    "SketchHarness",
    "ResizeCoordinator",
    "SketchSession",
    "run_sketch",  # 実行（詳細指定）
    "run",  # 実行（エイリアス、簡易）
    # ソース/生成器
    "StaticSource",
    "FileSource",
    "CodeGenerator",
    "GenerationResult",
    "GenerationError",
    # クラス（高度な使用）
    "ViewContainer",
    "InputEvent",
    "SketchError",
    "CompilationError",
    "ConstructionError",
    "RuntimeFrameError",
]

# バージョン情報
__version__ = "2026.10"
