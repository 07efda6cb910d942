from __future__ import annotations

import pytest

from engine.core import events
from engine.core.events import InputEvent, button_name, key_code_of, key_name


@pytest.mark.parametrize(
    "symbol,shift,expected",
    [
        ("A", False, "a"),
        ("A", True, "A"),
        ("_7", False, "7"),
        ("SPACE", False, " "),
        ("RETURN", False, events.ENTER),
        ("LEFT", False, events.LEFT_ARROW),
        ("BACKSPACE", False, events.BACKSPACE),
    ],
)
def test_key_name(symbol: str, shift: bool, expected: str) -> None:
    assert key_name(symbol, shift=shift) == expected


def test_button_name() -> None:
    assert button_name(1) == events.LEFT
    assert button_name(2) == events.CENTER
    assert button_name(4) == events.RIGHT
    assert button_name(8) is None


def test_input_event_validation_and_factories() -> None:
    with pytest.raises(ValueError):
        InputEvent(kind="scroll")  # type: ignore[arg-type]
    k = InputEvent.key_event("key_released", "q", 113)
    assert k.is_key and k.x is None
    m = InputEvent.mouse_event("mouse_moved", 1, 2)
    assert not m.is_key
    assert (m.x, m.y) == (1.0, 2.0)


@pytest.mark.parametrize(
    "name, code",
    [("LEFT", 37), ("UP", 38), ("ENTER", 13), (" ", 32), ("a", 65), ("A", 65), ("7", 55), ("F1", 0)],
)
def test_key_code_of_matches_p5_codes(name: str, code: int) -> None:
    assert key_code_of(name) == code
