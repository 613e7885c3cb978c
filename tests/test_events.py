"""Tests for event records and the channel primitive."""

from __future__ import annotations

import gc
import weakref

import pytest
from loguru import logger

from evented import events
from evented.bus import BusHandle
from evented.config import cfg
from evented.core.errors import InvalidEventType, InvalidListener
from evented.events import Event, fix_event
from evented.identity import guid_of
from tests.mocks import Recorder


class TestFixEvent:
    """Test Event record construction."""

    def test_from_string(self):
        handle = BusHandle()

        evt = fix_event("foo", handle)

        assert evt.type == "foo"
        assert evt.target is handle
        assert evt.data == {}
        assert not evt.default_prevented

    def test_from_dict_moves_extra_keys_into_data(self):
        evt = fix_event({"type": "foo", "x": 1}, BusHandle())

        assert evt.type == "foo"
        assert evt["x"] == 1

    def test_hash_is_merged_into_data(self):
        evt = fix_event({"type": "foo", "x": 1}, BusHandle(), {"y": 2})

        assert evt.data == {"x": 1, "y": 2}

    def test_prebuilt_event_keeps_its_target(self):
        other = BusHandle()
        evt = Event(type="foo", target=other)

        assert fix_event(evt, BusHandle()) is evt
        assert evt.target is other

    @pytest.mark.parametrize("bad", ["", "  ", {"x": 1}, {"type": 3}])
    def test_invalid_type(self, bad):
        with pytest.raises(InvalidEventType):
            fix_event(bad, BusHandle())


class TestChannel:
    """Test on/one/off/trigger on a bus handle."""

    def test_listeners_called_in_registration_order(self):
        handle = BusHandle()
        order: list[str] = []

        events.on(handle, "foo", lambda e: order.append("first"))
        events.on(handle, "foo", lambda e: order.append("second"))
        events.trigger(handle, "foo")

        assert order == ["first", "second"]

    def test_one_removed_before_call(self):
        handle = BusHandle()
        seen: list[int] = []

        events.one(handle, "foo", lambda e: seen.append(len(events.listeners(handle, "foo"))))
        events.trigger(handle, "foo")
        events.trigger(handle, "foo")

        assert seen == [0]

    def test_one_is_at_most_once_under_reentrant_trigger(self):
        handle = BusHandle()
        calls: list[int] = []

        def listener(event):
            calls.append(1)
            events.trigger(handle, "foo")

        events.one(handle, "foo", listener)
        events.trigger(handle, "foo")

        assert calls == [1]

    def test_off_wildcards(self):
        handle = BusHandle()
        spy1, spy2 = Recorder(), Recorder()
        events.on(handle, "foo", spy1)
        events.on(handle, "foo", spy2)
        events.on(handle, "bar", spy1)

        events.off(handle, "foo", spy1)
        assert events.listeners(handle, "foo") == (spy2,)

        events.off(handle, "foo")
        assert events.listeners(handle, "foo") == ()
        assert events.listeners(handle, "bar") == (spy1,)

        events.off(handle)
        assert events.listeners(handle) == ()

    def test_off_on_unknown_handle_is_safe(self):
        events.off(BusHandle(), "foo", Recorder())

    def test_identity_match_removes_wrappers(self):
        handle = BusHandle()
        spy = Recorder()

        def wrapper(event):
            spy(event)

        wrapper.guid = guid_of(spy)
        events.on(handle, "foo", wrapper)
        events.off(handle, "foo", spy)

        assert events.listeners(handle) == ()

    def test_removed_listener_still_gets_in_flight_event(self):
        handle = BusHandle()
        spy = Recorder()

        events.on(handle, "foo", lambda e: events.off(handle))
        events.on(handle, "foo", spy)
        events.trigger(handle, "foo")

        assert spy.count == 1
        assert events.listeners(handle) == ()

    def test_listener_added_during_dispatch_waits_for_next_trigger(self):
        handle = BusHandle()
        spy = Recorder()

        events.one(handle, "foo", lambda e: events.on(handle, "foo", spy))
        events.trigger(handle, "foo")
        assert spy.count == 0

        events.trigger(handle, "foo")
        assert spy.count == 1

    def test_stop_immediate_propagation(self):
        handle = BusHandle()
        spy = Recorder()

        events.on(handle, "foo", lambda e: e.stop_immediate_propagation())
        events.on(handle, "foo", spy)
        events.trigger(handle, "foo")

        assert spy.count == 0

    def test_prevent_default_reported_by_trigger(self):
        handle = BusHandle()

        assert events.trigger(handle, "foo") is True
        events.on(handle, "foo", lambda e: e.prevent_default())
        assert events.trigger(handle, "foo") is False

    def test_non_callable_rejected(self):
        with pytest.raises(InvalidListener):
            events.on(BusHandle(), "foo", "nope")

    def test_listener_error_is_logged_and_dispatch_continues(self):
        handle = BusHandle()
        spy = Recorder()
        messages: list[str] = []
        sink_id = logger.add(messages.append, level="ERROR", format="{message}")

        def failing(event):
            raise RuntimeError("boom")

        try:
            events.on(handle, "foo", failing)
            events.on(handle, "foo", spy)
            events.trigger(handle, "foo")
        finally:
            logger.remove(sink_id)

        assert spy.count == 1
        assert any("failed for 'foo' event" in m for m in messages)

    def test_listener_error_reraised_when_configured(self):
        handle = BusHandle()
        spy = Recorder()

        def failing(event):
            raise RuntimeError("boom")

        events.on(handle, "foo", failing)
        events.on(handle, "foo", spy)
        cfg.reload({"raise_listener_errors": True})
        try:
            with pytest.raises(RuntimeError, match="boom"):
                events.trigger(handle, "foo")
        finally:
            cfg.reload({})

        assert spy.count == 0

    def test_discarded_handle_drops_its_listeners(self):
        handle = BusHandle()
        spy = Recorder()
        # Listener holding its own handle, as evented objects' hooks do.
        spy.handle = handle
        events.on(handle, "foo", spy)
        handle_ref, spy_ref = weakref.ref(handle), weakref.ref(spy)

        del handle, spy
        gc.collect()

        assert handle_ref() is None
        assert spy_ref() is None

    def test_listeners_live_on_the_handle(self):
        handle = BusHandle()
        spy = Recorder()

        events.on(handle, ["foo", "bar"], spy)
        events.off(handle, "foo")

        assert list(handle.handlers) == ["bar"]
        events.off(handle)
        assert handle.handlers == {}
