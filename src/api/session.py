"""
どこで: `api.session`（ホスト側のセッション）。
何を: 自然言語の要求 → コード生成/修正 → ハーネスへマウント → エラー捕捉 → 修復、の一連を保持する
      `SketchSession` と、コード生成器の差し込み口 `CodeGenerator` Protocol。
なぜ: 再試行（修復フロー）をハーネスではなくホストの判断として扱い、生成器の実装（LLM 呼び出し）を
      この層から切り離すため。

使用例:
    session = SketchSession(harness, generator)
    session.submit("a simple breakout-style game")   # コード無し → generate
    session.submit("make the ball faster")            # コード有り → modify
    if session.error is not None:
        session.fix()                                 # 直近エラーで修復
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Protocol

from engine.sandbox.errors import SketchError

from .harness import SketchHarness

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^\s*```[\w+-]*\s*\n(?P<body>.*?)\n?\s*```\s*$", re.DOTALL)


@dataclass(frozen=True)
class GenerationResult:
    """生成器の出力: 思考過程（markdown）とスケッチコード。"""

    thoughts: str
    code: str


class CodeGenerator(Protocol):
    """コード生成器（LLM 呼び出しなど外部協調者）の契約。"""

    def generate(self, prompt: str) -> GenerationResult: ...

    def modify(self, prompt: str, current_code: str) -> GenerationResult: ...

    def fix(self, code: str, error_message: str) -> GenerationResult: ...


class GenerationError(RuntimeError):
    """生成器の呼び出しに失敗した。セッション状態は変更されない。"""

    def __init__(self, action: str, cause: BaseException):
        super().__init__(f"{action} failed: {cause}")
        self.action = action
        self.cause = cause


def strip_code_fences(text: str) -> str:
    """LLM 出力を包む markdown のコードフェンス（```python ... ```）を取り除く。"""
    m = _FENCE_RE.match(text)
    if m is None:
        return text.strip("\n")
    return m.group("body")


class SketchSession:
    """1 つのハーネスに紐づくホスト状態（コード/思考過程/直近エラー）。"""

    def __init__(self, harness: SketchHarness, generator: CodeGenerator):
        self.harness = harness
        self.generator = generator
        self.code = ""
        self.thoughts = ""
        self.error: SketchError | None = None
        self.fix_attempts = 0
        harness.on_sketch_error = self.handle_sketch_error

    # ---- エラーチャネル ----
    def handle_sketch_error(self, error: SketchError) -> None:
        self.error = error

    # ---- 操作 ----
    def submit(self, prompt: str) -> GenerationResult | None:
        """要求を送る。コードが無ければ生成、あれば現コードを修正する。空要求は何もしない。"""
        if not prompt or not prompt.strip():
            return None
        self.error = None
        action = "modify" if self.code else "generate"
        try:
            if self.code:
                result = self.generator.modify(prompt, self.code)
            else:
                result = self.generator.generate(prompt)
        except Exception as e:
            logger.error("%s failed: %s", action, e, exc_info=True)
            raise GenerationError(action, e) from e
        self.fix_attempts = 0
        self._apply(result)
        return result

    def fix(self) -> GenerationResult | None:
        """直近のエラーメッセージで修復を依頼する。エラーかコードが無ければ何もしない。"""
        if self.error is None or not self.code:
            return None
        try:
            result = self.generator.fix(self.code, self.error.describe())
        except Exception as e:
            logger.error("fix failed: %s", e, exc_info=True)
            raise GenerationError("fix", e) from e
        self.fix_attempts += 1
        self.error = None
        self._apply(result)
        return result

    def restore(self, code: str, thoughts: str = "") -> None:
        """保存済みのコードを読み戻してマウントする。"""
        self.error = None
        self._apply(GenerationResult(thoughts=thoughts, code=code))

    def clear(self) -> None:
        """コード/思考過程/エラーを消し、ハーネスを空にする。"""
        self.code = ""
        self.thoughts = ""
        self.error = None
        self.fix_attempts = 0
        self.harness.unmount()

    def _apply(self, result: GenerationResult) -> None:
        self.code = strip_code_fences(result.code)
        self.thoughts = result.thoughts
        self.harness.mount(self.code)


__all__ = [
    "CodeGenerator",
    "GenerationError",
    "GenerationResult",
    "SketchSession",
    "strip_code_fences",
]
