"""Event records and the channel primitive: register, fire and remove listeners on bus handles."""

from __future__ import annotations

import re
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass, field
from typing import Any, Protocol, Union, runtime_checkable

from loguru import logger

from evented.bus import BusHandle
from evented.config import cfg
from evented.core.errors import InvalidEventType, InvalidListener
from evented.identity import guid_of

EventType = Union[str, list[str], tuple[str, ...]]


@dataclass
class Event:
    """Event record delivered to listeners."""

    type: str
    target: Any = None
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)
    default_prevented: bool = False
    _immediate_stopped: bool = field(default=False, repr=False)

    def prevent_default(self) -> None:
        self.default_prevented = True

    def stop_immediate_propagation(self) -> None:
        """Skip the listeners not yet called for this dispatch."""
        self._immediate_stopped = True

    @property
    def is_immediate_propagation_stopped(self) -> bool:
        return self._immediate_stopped

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


@runtime_checkable
class Evented(Protocol):
    """Capability interface: an object with its own bus and on/one/off/trigger."""

    event_bus: BusHandle

    def on(self, *args: Any) -> Any:
        """Listen on this object, or on another evented object."""
        ...

    def one(self, *args: Any) -> Any:
        """Listen at most once."""
        ...

    def off(self, target_or_type: Any = None, type_or_listener: Any = None, listener: Any = None) -> Any:
        """Remove listeners."""
        ...

    def trigger(self, event: Any, hash: dict[str, Any] | None = None) -> Any:
        """Fire an event on this object's bus."""
        ...


def fix_event(
    event: str | dict[str, Any] | Event,
    target: Any = None,
    hash: dict[str, Any] | None = None,
) -> Event:
    """Normalize a type string, dict or Event into an Event, merging hash into data."""
    if isinstance(event, Event):
        evt = event
    elif isinstance(event, dict):
        extra = dict(event)
        evt = Event(type=extra.pop("type", None), target=extra.pop("target", None), data=extra)
    else:
        evt = Event(type=event)

    if not isinstance(evt.type, str) or not re.search(r"\S", evt.type):
        raise InvalidEventType(evt.type)
    if evt.target is None:
        evt.target = target
    if hash:
        evt.data.update(hash)
    return evt


@dataclass
class _Entry:
    listener: Callable[..., Any]
    guid: Hashable
    once: bool = False


def _types(event_type: EventType) -> list[str]:
    if isinstance(event_type, (list, tuple)):
        return list(event_type)
    return [event_type]


def _add(handle: BusHandle, event_type: EventType, fn: Callable[..., Any], once: bool) -> None:
    if not callable(fn):
        raise InvalidListener(fn)
    guid = guid_of(fn)
    for t in _types(event_type):
        handle.handlers.setdefault(t, []).append(_Entry(listener=fn, guid=guid, once=once))


def _discard(handle: BusHandle, event_type: str, entry: _Entry) -> bool:
    """Remove one entry; False if it was already gone."""
    entries = handle.handlers.get(event_type)
    if not entries or not any(e is entry for e in entries):
        return False
    entries[:] = [e for e in entries if e is not entry]
    _clean_up(handle, event_type)
    return True


def _clean_up(handle: BusHandle, event_type: str) -> None:
    """Drop an empty per-type list."""
    if not handle.handlers.get(event_type):
        handle.handlers.pop(event_type, None)


def on(handle: BusHandle, event_type: EventType, fn: Callable[..., Any]) -> None:
    """Register a persistent listener for one or more event types."""
    _add(handle, event_type, fn, once=False)


def one(handle: BusHandle, event_type: EventType, fn: Callable[..., Any]) -> None:
    """Register a listener removed before its first call."""
    _add(handle, event_type, fn, once=True)


def off(
    handle: BusHandle,
    event_type: EventType | None = None,
    fn: Callable[..., Any] | None = None,
) -> None:
    """Remove listeners. Omitting fn, or fn and type, widens the removal."""
    if not handle.handlers:
        return

    if event_type is None:
        handle.handlers.clear()
        return

    guid = guid_of(fn) if fn is not None else None
    for t in _types(event_type):
        entries = handle.handlers.get(t)
        if not entries:
            continue
        if guid is None:
            entries.clear()
        else:
            entries[:] = [e for e in entries if e.guid != guid]
        _clean_up(handle, t)


def trigger(
    handle: BusHandle,
    event: str | dict[str, Any] | Event,
    hash: dict[str, Any] | None = None,
) -> bool:
    """Fire event on handle. Returns False if a listener called prevent_default()."""
    evt = fix_event(event, handle, hash)
    entries = list(handle.handlers.get(evt.type, ()))

    for entry in entries:
        if evt.is_immediate_propagation_stopped:
            break
        if entry.once and not _discard(handle, evt.type, entry):
            continue
        try:
            entry.listener(evt)
        except Exception as exc:
            logger.exception("Listener {} failed for {!r} event: {}", entry.listener, evt.type, exc)
            if cfg.raise_listener_errors:
                raise

    return not evt.default_prevented


def listeners(handle: BusHandle, event_type: str | None = None) -> tuple[Callable[..., Any], ...]:
    """Registered listeners on handle, for one type or all types."""
    if event_type is not None:
        return tuple(e.listener for e in handle.handlers.get(event_type, ()))
    return tuple(e.listener for entries in handle.handlers.values() for e in entries)
