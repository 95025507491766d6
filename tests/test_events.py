"""Tests for uno.events: EventBus subscribe and emit."""

import pytest

from uno.events import EventBus


class TestEventBus:
    def test_emit_without_handlers_is_noop(self) -> None:
        bus = EventBus()
        bus.emit("nothing", 1, 2)

    def test_handlers_called_in_order(self) -> None:
        bus = EventBus()
        calls: list[str] = []
        bus.on("ping", lambda: calls.append("first"))
        bus.on("ping", lambda: calls.append("second"))
        bus.emit("ping")
        assert calls == ["first", "second"]

    def test_arguments_passed_through(self) -> None:
        bus = EventBus()
        seen: list[tuple] = []
        bus.on("saved", lambda *args: seen.append(args))
        bus.emit("saved", "user", 7)
        assert seen == [("user", 7)]

    def test_names_are_independent(self) -> None:
        bus = EventBus()
        calls: list[str] = []
        bus.on("a", lambda: calls.append("a"))
        bus.on("b", lambda: calls.append("b"))
        bus.emit("b")
        assert calls == ["b"]

    def test_same_handler_twice_runs_twice(self) -> None:
        bus = EventBus()
        calls: list[int] = []

        def handler() -> None:
            calls.append(1)

        bus.on("x", handler)
        bus.on("x", handler)
        bus.emit("x")
        assert len(calls) == 2

    def test_failing_handler_stops_emission(self) -> None:
        bus = EventBus()
        calls: list[str] = []

        def fail() -> None:
            raise ValueError("nope")

        bus.on("x", fail)
        bus.on("x", lambda: calls.append("after"))
        with pytest.raises(ValueError, match="nope"):
            bus.emit("x")
        assert calls == []

    def test_subscribing_during_emit_applies_next_time(self) -> None:
        bus = EventBus()
        calls: list[str] = []

        def subscribe() -> None:
            calls.append("outer")
            bus.on("x", lambda: calls.append("late"))

        bus.on("x", subscribe)
        bus.emit("x")
        assert calls == ["outer"]
        assert len(bus.handlers("x")) == 2
