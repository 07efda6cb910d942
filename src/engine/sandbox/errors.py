"""
どこで: `engine.sandbox.errors`。
何を: サンドボックス実行で捕捉した例外を表す `SketchError` 階層（コンパイル/構築/フレーム）。
なぜ: 生の例外をホストへそのまま投げず、メッセージ・スタック・スケッチ内行番号を揃えて 1 回だけ届けるため。
"""

from __future__ import annotations

import traceback
from typing import Literal

Phase = Literal["compile", "construct", "frame"]

SKETCH_FILENAME = "<sketch>"


def _sketch_line(exc: BaseException) -> int | None:
    """例外が発生したスケッチ内の行番号（最も内側のフレーム）を返す。"""
    if isinstance(exc, SyntaxError):
        return exc.lineno
    line: int | None = None
    tb = exc.__traceback__
    while tb is not None:
        if tb.tb_frame.f_code.co_filename == SKETCH_FILENAME:
            line = tb.tb_lineno
        tb = tb.tb_next
    return line


class SketchError(Exception):
    """スケッチ由来のエラー。

    Attributes
    ----------
    message : str
        元の例外メッセージ（`str(exc)`、SyntaxError は `exc.msg`）。
    error_type : str
        元の例外クラス名（例: "NameError"）。
    stack : str | None
        整形済みトレースバック。
    line : int | None
        スケッチソース内の行番号（判明した場合）。
    callback : str | None
        失敗したライフサイクルコールバック名（フレームエラー時）。
    """

    phase: Phase = "construct"

    def __init__(
        self,
        message: str,
        *,
        error_type: str | None = None,
        stack: str | None = None,
        line: int | None = None,
        callback: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_type = error_type or type(self).__name__
        self.stack = stack
        self.line = line
        self.callback = callback

    @classmethod
    def from_exception(cls, exc: BaseException, *, callback: str | None = None) -> "SketchError":
        if isinstance(exc, SyntaxError):
            message = str(exc.msg)
        else:
            message = str(exc)
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return cls(
            message,
            error_type=type(exc).__name__,
            stack=stack,
            line=_sketch_line(exc),
            callback=callback,
        )

    def describe(self) -> str:
        """修復フローへ渡す 1 行要約（例: "NameError: name 'x' is not defined (line 3)"）。"""
        text = f"{self.error_type}: {self.message}" if self.message else self.error_type
        if self.line is not None:
            text += f" (line {self.line})"
        if self.callback is not None:
            text += f" in {self.callback}()"
        return text


class CompilationError(SketchError):
    """ソース文字列が実行可能コードとして解釈できない。"""

    phase: Phase = "compile"


class ConstructionError(SketchError):
    """トップレベル実行・コールバック結線・setup が初回フレーム前に失敗した。"""

    phase: Phase = "construct"


class RuntimeFrameError(SketchError):
    """マウント成功後、フレーム/入力コールバックが失敗した。"""

    phase: Phase = "frame"


__all__ = [
    "SKETCH_FILENAME",
    "SketchError",
    "CompilationError",
    "ConstructionError",
    "RuntimeFrameError",
]
