from __future__ import annotations

import pytest

from api.harness import SketchHarness
from api.session import GenerationError, GenerationResult, SketchSession, strip_code_fences
from engine.core.container import ViewContainer

GOOD = "@p.draw\ndef draw():\n    p.background(0)\n"
BAD = "@p.draw\ndef draw():\n    p.background(\n"


class FakeGenerator:
    """呼び出しを記録し、用意した結果を順に返す生成器。"""

    def __init__(self, *results: GenerationResult | Exception):
        self.results = list(results)
        self.calls: list[tuple[str, ...]] = []

    def _next(self) -> GenerationResult:
        item = self.results.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def generate(self, prompt: str) -> GenerationResult:
        self.calls.append(("generate", prompt))
        return self._next()

    def modify(self, prompt: str, current_code: str) -> GenerationResult:
        self.calls.append(("modify", prompt, current_code))
        return self._next()

    def fix(self, code: str, error_message: str) -> GenerationResult:
        self.calls.append(("fix", code, error_message))
        return self._next()


@pytest.fixture()
def harness():
    h = SketchHarness(ViewContainer(32, 32))
    yield h
    h.close()


def test_first_submit_generates_then_modifies(harness) -> None:
    gen = FakeGenerator(GenerationResult("plan", GOOD), GenerationResult("faster", GOOD + "\n"))
    session = SketchSession(harness, gen)
    session.submit("a game")
    assert gen.calls[0] == ("generate", "a game")
    assert session.code == GOOD.strip("\n")
    assert session.thoughts == "plan"
    assert harness.state == "running"

    session.submit("make it faster")
    assert gen.calls[1] == ("modify", "make it faster", GOOD.strip("\n"))


def test_blank_prompt_is_ignored(harness) -> None:
    gen = FakeGenerator()
    session = SketchSession(harness, gen)
    assert session.submit("   ") is None
    assert gen.calls == []


def test_sketch_error_is_captured_and_fix_uses_it(harness) -> None:
    gen = FakeGenerator(GenerationResult("", BAD), GenerationResult("fixed", GOOD))
    session = SketchSession(harness, gen)
    session.submit("draw")
    assert harness.state == "empty"
    assert session.error is not None
    assert session.error.phase == "compile"

    session.fix()
    kind, code, message = gen.calls[-1]
    assert kind == "fix"
    assert code == BAD.strip("\n")
    assert message.startswith("SyntaxError")
    assert session.error is None
    assert session.fix_attempts == 1
    assert harness.state == "running"


def test_fix_without_error_does_nothing(harness) -> None:
    gen = FakeGenerator(GenerationResult("", GOOD))
    session = SketchSession(harness, gen)
    session.submit("x")
    assert session.fix() is None
    assert len(gen.calls) == 1


def test_generator_failure_leaves_state_untouched(harness) -> None:
    gen = FakeGenerator(GenerationResult("t", GOOD), ConnectionError("offline"))
    session = SketchSession(harness, gen)
    session.submit("first")
    instance = harness.instance
    with pytest.raises(GenerationError) as ei:
        session.submit("second")
    assert ei.value.action == "modify"
    assert isinstance(ei.value.cause, ConnectionError)
    assert session.code == GOOD.strip("\n")
    assert harness.instance is instance


def test_restore_and_clear(harness) -> None:
    session = SketchSession(harness, FakeGenerator())
    session.restore(GOOD, "saved")
    assert harness.state == "running"
    assert session.thoughts == "saved"
    session.clear()
    assert session.code == ""
    assert session.error is None
    assert harness.state == "empty"


def test_runtime_error_reaches_session(harness) -> None:
    session = SketchSession(harness, FakeGenerator())
    session.restore("@p.draw\ndef draw():\n    return missing\n")
    harness.tick(1 / 60)
    assert session.error is not None
    assert session.error.phase == "frame"
    assert "missing" in session.error.describe()


def test_strip_code_fences() -> None:
    assert strip_code_fences("```python\nx = 1\n```") == "x = 1"
    assert strip_code_fences("```\nx = 1\ny = 2\n```\n") == "x = 1\ny = 2"
    assert strip_code_fences("\nx = 1\n") == "x = 1"
