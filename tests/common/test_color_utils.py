from __future__ import annotations

import pytest

from util.color import normalize_color, p5_color, parse_hex_color_str


def _approx_tuple(t):
    return tuple(round(v, 6) for v in t)


def test_parse_hex_color_valid_variants() -> None:
    expected = (round(0x11 / 255.0, 6), round(0x22 / 255.0, 6), round(0x33 / 255.0, 6))
    assert _approx_tuple(parse_hex_color_str("#112233")) == expected + (1.0,)
    assert _approx_tuple(parse_hex_color_str("112233")) == expected + (1.0,)
    assert _approx_tuple(parse_hex_color_str("0x112233CC")) == expected + (round(0xCC / 255.0, 6),)


def test_parse_hex_color_invalid() -> None:
    with pytest.raises(ValueError):
        parse_hex_color_str("#123")
    with pytest.raises(ValueError):
        parse_hex_color_str("#zzzzzz")


def test_normalize_color_from_tuple_01() -> None:
    assert _approx_tuple(normalize_color((0.1, 0.2, 0.3))) == (0.1, 0.2, 0.3, 1.0)


def test_normalize_color_from_tuple_255() -> None:
    rgba = normalize_color((255, 128, 0, 64))
    assert _approx_tuple(rgba) == (1.0, round(128 / 255.0, 6), 0.0, round(64 / 255.0, 6))
    # 3 要素 0–255 は不透明
    assert normalize_color((255, 0, 0))[3] == 1.0


@pytest.mark.parametrize("bad", [None, 3, (1, 2), (1, 2, 3, 4, 5), ("a", 0, 0)])
def test_normalize_color_rejects(bad) -> None:
    with pytest.raises(ValueError):
        normalize_color(bad)


@pytest.mark.parametrize(
    "args, expected",
    [
        ((0,), (0, 0, 0, 255)),
        ((128, 64), (128, 128, 128, 64)),
        ((10, 20, 30), (10, 20, 30, 255)),
        ((10, 20, 30, 40), (10, 20, 30, 40)),
        (("#ff8000",), (255, 128, 0, 255)),
        (((1, 2, 3),), (1, 2, 3, 255)),
        (([1, 2, 3, 4],), (1, 2, 3, 4)),
        ((300, -5, 12.6), (255, 0, 13, 255)),
    ],
)
def test_p5_color_forms(args, expected) -> None:
    assert p5_color(*args) == expected


@pytest.mark.parametrize("args", [(), (1, 2, 3, 4, 5), ("red", 1), (object(),)])
def test_p5_color_rejects(args) -> None:
    with pytest.raises(ValueError):
        p5_color(*args)
