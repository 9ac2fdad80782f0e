"""Tests for the event bus."""

from __future__ import annotations

import logging

import pytest

from reqsender.engine.events import EventBus, EventKind


class TestEventBus:
    def test_handlers_called_in_order(self):
        bus = EventBus()
        calls: list[tuple[str, tuple]] = []
        bus.on(EventKind.REPEATER_STOP, lambda *a: calls.append(("first", a)))
        bus.on(EventKind.REPEATER_STOP, lambda *a: calls.append(("second", a)))

        bus.emit(EventKind.REPEATER_STOP, 3, 1)

        assert calls == [("first", (3, 1)), ("second", (3, 1))]

    def test_string_names_accepted(self):
        bus = EventBus()
        calls = []
        bus.on("repeater-start", lambda *a: calls.append(a))
        bus.emit(EventKind.REPEATER_START, 100, 0)
        assert calls == [(100, 0)]

    def test_unknown_event_name_rejected(self):
        with pytest.raises(ValueError):
            EventBus().on("not-an-event", print)

    def test_other_events_not_delivered(self):
        bus = EventBus()
        calls = []
        bus.on(EventKind.REQUEST_FAIL, lambda *a: calls.append(a))
        bus.emit(EventKind.REQUEST_SUCCESS, {}, None, None)
        assert calls == []

    def test_once(self):
        bus = EventBus()
        calls = []
        bus.once(EventKind.REPEATER_START, lambda *a: calls.append(a))
        bus.emit(EventKind.REPEATER_START, 1, 0)
        bus.emit(EventKind.REPEATER_START, 2, 0)
        assert calls == [(1, 0)]
        assert bus.handler_count(EventKind.REPEATER_START) == 0

    def test_off(self):
        bus = EventBus()
        calls = []

        def handler(*args):
            calls.append(args)

        bus.on(EventKind.REPEATER_START, handler)
        bus.off(EventKind.REPEATER_START, handler)
        bus.off(EventKind.REPEATER_START, handler)
        bus.emit(EventKind.REPEATER_START, 1, 0)
        assert calls == []

    def test_off_removes_once_handler(self):
        bus = EventBus()
        calls = []

        def handler(*args):
            calls.append(args)

        bus.once(EventKind.REPEATER_START, handler)
        bus.off(EventKind.REPEATER_START, handler)
        bus.emit(EventKind.REPEATER_START, 1, 0)

        assert calls == []
        assert bus.handler_count(EventKind.REPEATER_START) == 0

    def test_off_removes_one_registration(self):
        bus = EventBus()
        calls = []

        def handler(*args):
            calls.append(args)

        bus.on(EventKind.REPEATER_START, handler)
        bus.once(EventKind.REPEATER_START, handler)
        bus.off(EventKind.REPEATER_START, handler)
        bus.emit(EventKind.REPEATER_START, 1, 0)
        bus.emit(EventKind.REPEATER_START, 2, 0)

        assert calls == [(1, 0)]

    def test_failing_handler_does_not_stop_others(
        self, caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setattr(logging.getLogger("reqsender"), "propagate", True)
        bus = EventBus()
        calls = []

        def broken(*args):
            raise RuntimeError("boom")

        bus.on(EventKind.REPEATER_STOP, broken)
        bus.on(EventKind.REPEATER_STOP, lambda *a: calls.append(a))

        with caplog.at_level(logging.ERROR, logger="reqsender"):
            bus.emit(EventKind.REPEATER_STOP, 0, 0)

        assert calls == [(0, 0)]
        assert "failed" in caplog.text
