"""
どこで: `engine.sandbox.compiler`。
何を: スケッチソース文字列を `compile()` し、能力オブジェクト `p` だけが見える制限名前空間で実行する
      呼び出し可能な本体 `SketchBody` を作る。
なぜ: 構文エラーを実行時エラーと同じ経路（`SketchError`）で捕捉し、生成コードから
      ファイル/プロセス/ネットワーク系の組込みを遠ざけるため。

制限:
- import は `ALLOWED_MODULES` のみ。`open`/`eval`/`exec` などの組込みは見えない。
- `_` で始まる属性（`__init__` を除く）とフレーム/トレースバック系の属性は、属性式でも
  `getattr` 系でも使えない。属性式はコンパイル時に `CompilationError` になる。

スケッチの書き方:
    ball_x = 0

    @p.setup
    def setup():
        p.background(20)

    @p.draw
    def draw():
        global ball_x
        ball_x = (ball_x + 2) % p.width
        p.background(20)
        p.circle(ball_x, p.height / 2, 24)
"""

from __future__ import annotations

import ast
import builtins
from dataclasses import dataclass
from types import CodeType
from typing import Any

from common.logging import sketch_logger

from .errors import SKETCH_FILENAME, CompilationError

# スケッチから import できるモジュール（トップレベル名で判定）
ALLOWED_MODULES = frozenset(
    {
        "math",
        "random",
        "colorsys",
        "itertools",
        "functools",
        "collections",
        "dataclasses",
        "enum",
        "typing",
        "numpy",
    }
)

_SAFE_BUILTIN_NAMES = (
    "abs",
    "all",
    "any",
    "bool",
    "callable",
    "chr",
    "dict",
    "divmod",
    "enumerate",
    "filter",
    "float",
    "format",
    "frozenset",
    "hash",
    "int",
    "isinstance",
    "issubclass",
    "iter",
    "len",
    "list",
    "map",
    "max",
    "min",
    "next",
    "object",
    "ord",
    "pow",
    "property",
    "range",
    "repr",
    "reversed",
    "round",
    "set",
    "slice",
    "sorted",
    "staticmethod",
    "classmethod",
    "str",
    "sum",
    "super",
    "tuple",
    "type",
    "zip",
    # 例外型（スケッチ内 try/except 用）
    "Exception",
    "ArithmeticError",
    "AttributeError",
    "IndexError",
    "KeyError",
    "LookupError",
    "NameError",
    "RuntimeError",
    "StopIteration",
    "TypeError",
    "ValueError",
    "ZeroDivisionError",
    # class 文に必要
    "__build_class__",
)


def _guarded_import(
    name: str,
    globals: Any = None,
    locals: Any = None,
    fromlist: Any = (),
    level: int = 0,
) -> Any:
    root = name.split(".", 1)[0]
    if level != 0 or root not in ALLOWED_MODULES:
        raise ImportError(f"import of '{name}' is not allowed in sketches")
    return builtins.__import__(name, globals, locals, fromlist, level)


# super().__init__() 用に許す dunder 属性（他の `_` 始まりの属性は不可）
_ALLOWED_PRIVATE_ATTRS = frozenset({"__init__"})

# フレーム/トレースバック経由でホスト側の名前空間へ届く属性
_INTROSPECTION_ATTRS = frozenset(
    {
        "gi_frame",
        "gi_code",
        "cr_frame",
        "cr_code",
        "ag_frame",
        "ag_code",
        "f_back",
        "f_globals",
        "f_locals",
        "f_builtins",
        "f_code",
        "tb_frame",
        "tb_next",
    }
)


def _is_private(name: str) -> bool:
    if name in _INTROSPECTION_ATTRS:
        return True
    return name.startswith("_") and name not in _ALLOWED_PRIVATE_ATTRS


def _check_attr_name(name: object) -> None:
    if isinstance(name, str) and _is_private(name):
        raise AttributeError(f"access to attribute '{name}' is not allowed in sketches")


def _sketch_getattr(obj: Any, name: str, *default: Any) -> Any:
    _check_attr_name(name)
    return getattr(obj, name, *default)


def _sketch_hasattr(obj: Any, name: str) -> bool:
    _check_attr_name(name)
    return hasattr(obj, name)


def _sketch_setattr(obj: Any, name: str, value: Any) -> None:
    _check_attr_name(name)
    setattr(obj, name, value)


def _private_access(tree: ast.AST) -> tuple[str, int] | None:
    """`_` で始まる属性への参照（属性式・文字列定数での getattr 系・クラスパターン）を探す。"""
    for node in ast.walk(tree):
        if isinstance(node, ast.Attribute) and _is_private(node.attr):
            return node.attr, node.lineno
        if (
            isinstance(node, ast.Call)
            and isinstance(node.func, ast.Name)
            and node.func.id in ("getattr", "hasattr", "setattr")
            and len(node.args) >= 2
            and isinstance(node.args[1], ast.Constant)
            and isinstance(node.args[1].value, str)
            and _is_private(node.args[1].value)
        ):
            return node.args[1].value, node.lineno
        if isinstance(node, ast.MatchClass):
            for name in node.kwd_attrs:
                if _is_private(name):
                    return name, node.lineno
    return None


def _sketch_print(*args: object, sep: str | None = " ", end: str | None = "\n", **_: Any) -> None:
    sketch_logger().info((sep if sep is not None else " ").join(str(a) for a in args))


def safe_builtins() -> dict[str, Any]:
    """スケッチ名前空間用の `__builtins__` を新しく組み立てて返す。"""
    table: dict[str, Any] = {name: getattr(builtins, name) for name in _SAFE_BUILTIN_NAMES}
    table["__import__"] = _guarded_import
    table["getattr"] = _sketch_getattr
    table["hasattr"] = _sketch_hasattr
    table["setattr"] = _sketch_setattr
    table["print"] = _sketch_print
    table["True"] = True
    table["False"] = False
    table["None"] = None
    return table


@dataclass(frozen=True)
class SketchBody:
    """コンパイル済みスケッチ。`body(binding)` でトップレベルを 1 回実行する。"""

    code: CodeType
    source: str

    def __call__(self, binding: object) -> dict[str, Any]:
        namespace: dict[str, Any] = {
            "__builtins__": safe_builtins(),
            "__name__": "__sketch__",
            "p": binding,
        }
        exec(self.code, namespace)  # noqa: S102 - 制限名前空間で意図的に実行
        return namespace


def compile_sketch(source: str, *, max_bytes: int | None = None) -> SketchBody:
    """ソースをコンパイルする。失敗は `CompilationError` に変換して送出。

    Parameters
    ----------
    source : str
        スケッチのソース文字列。
    max_bytes : int | None
        UTF-8 換算の上限。None で `common.settings` の `MAX_SOURCE_BYTES`。
    """
    if not isinstance(source, str):
        raise CompilationError(
            f"sketch source must be str, got {type(source).__name__}", error_type="TypeError"
        )
    if max_bytes is None:
        from common.settings import get as _get_settings

        max_bytes = _get_settings().MAX_SOURCE_BYTES
    size = len(source.encode("utf-8", errors="replace"))
    if size > max_bytes:
        raise CompilationError(
            f"sketch source too large ({size} > {max_bytes} bytes)", error_type="ValueError"
        )
    try:
        tree = compile(source, SKETCH_FILENAME, "exec", ast.PyCF_ONLY_AST, dont_inherit=True)
    except (SyntaxError, ValueError) as e:
        # ValueError: ヌルバイトを含むソースなど
        raise CompilationError.from_exception(e) from e
    denied = _private_access(tree)
    if denied is not None:
        name, line = denied
        raise CompilationError(
            f"access to attribute '{name}' is not allowed in sketches",
            error_type="AttributeError",
            line=line,
        )
    try:
        # return の位置など、AST 化の後で検出される構文エラーもある
        code = compile(tree, SKETCH_FILENAME, "exec", dont_inherit=True)
    except SyntaxError as e:
        raise CompilationError.from_exception(e) from e
    return SketchBody(code=code, source=source)


__all__ = ["ALLOWED_MODULES", "SketchBody", "compile_sketch", "safe_builtins"]
