"""
どこで: `engine.sandbox` サブパッケージ。
何を: スケッチソースのコンパイル・能力オブジェクト・稼働インスタンス・エラー型を提供。
なぜ: 信頼できない生成コードを扱う部分を 1 箇所へ閉じ込め、API 層（ハーネス）からは薄く使えるようにするため。
"""

from engine.core.events import InputEvent

from .binding import LifecycleCallbacks, SketchBinding, SurfaceGate
from .compiler import SketchBody, compile_sketch
from .errors import CompilationError, ConstructionError, RuntimeFrameError, SketchError
from .instance import SketchInstance

__all__ = [
    "CompilationError",
    "ConstructionError",
    "InputEvent",
    "LifecycleCallbacks",
    "RuntimeFrameError",
    "SketchBinding",
    "SketchBody",
    "SketchError",
    "SketchInstance",
    "SurfaceGate",
    "compile_sketch",
]
