from __future__ import annotations

from engine.core.container import ViewContainer
from engine.core.surface import Surface


def test_attach_is_deduplicated_and_detach_is_silent() -> None:
    c = ViewContainer(10, 10)
    s = Surface(10, 10)
    c.attach(s)
    c.attach(s)
    assert c.children == (s,)
    c.detach(Surface(1, 1))
    c.detach(s)
    c.detach(s)
    assert c.children == ()


def test_clear_removes_children_without_releasing() -> None:
    c = ViewContainer(10, 10)
    a, b = Surface(1, 1), Surface(2, 2)
    c.attach(a)
    c.attach(b)
    c.clear()
    assert c.children == ()
    assert not a.released and not b.released


def test_resize_notifies_listeners_in_order() -> None:
    c = ViewContainer(10, 10)
    seen: list[tuple[str, int, int]] = []
    c.add_resize_listener(lambda w, h: seen.append(("a", w, h)))
    c.add_resize_listener(lambda w, h: seen.append(("b", w, h)))
    c.resize(30, 20)
    assert (c.width, c.height) == (30, 20)
    assert seen == [("a", 30, 20), ("b", 30, 20)]


def test_listener_may_unsubscribe_during_notification() -> None:
    c = ViewContainer(10, 10)
    calls: list[int] = []

    def once(w: int, h: int) -> None:
        calls.append(w)
        c.remove_resize_listener(once)

    c.add_resize_listener(once)
    c.add_resize_listener(once)
    c.resize(11, 11)
    c.resize(12, 12)
    assert calls == [11]
    c.remove_resize_listener(once)
