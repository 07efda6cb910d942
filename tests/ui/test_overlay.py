from __future__ import annotations

import pytest

from engine.sandbox.errors import CompilationError, RuntimeFrameError
from engine.ui import overlay as overlay_mod
from engine.ui.overlay import ErrorOverlay


def test_error_is_kept_until_cleared() -> None:
    ov = ErrorOverlay()
    assert ov.error_text is None
    ov.show_error(RuntimeFrameError("bad", error_type="ValueError", line=4, callback="draw"))
    assert ov.error_text == "[frame] ValueError: bad (line 4) in draw()"
    ov.tick(10.0)
    assert ov.error_text is not None
    ov.show_error(CompilationError("invalid syntax", error_type="SyntaxError", line=1))
    assert ov.error_text is not None and ov.error_text.startswith("[compile] SyntaxError")
    ov.clear_error()
    assert ov.error_text is None


def test_messages_expire(monkeypatch: pytest.MonkeyPatch) -> None:
    now = [100.0]
    monkeypatch.setattr(overlay_mod.time, "monotonic", lambda: now[0])
    ov = ErrorOverlay()
    ov.show_message("saved", timeout_sec=1)
    ov.show_message("still here", level="warn", timeout_sec=5)
    ov.tick(0.0)
    assert ov.messages == ["saved", "still here"]
    now[0] = 102.0
    ov.tick(0.0)
    assert ov.messages == ["still here"]
    now[0] = 106.0
    ov.tick(0.0)
    assert ov.messages == []
