"""Predicates and assertions on targets, event types and listeners."""

from __future__ import annotations

import re
from typing import Any

from evented.bus import is_bus_handle
from evented.core.constants import EVENT_BUS_ATTR, LISTEN_METHODS
from evented.core.errors import InvalidEventType, InvalidListener, InvalidTarget
from evented.events import Evented


def is_evented(obj: Any) -> bool:
    """Whether obj owns a bus handle and exposes callable on/one/off/trigger."""
    return (
        isinstance(obj, Evented)
        and is_bus_handle(getattr(obj, EVENT_BUS_ATTR, None))
        and all(callable(getattr(obj, name, None)) for name in LISTEN_METHODS)
    )


def is_valid_event_type(event_type: Any) -> bool:
    """Non-blank string, or non-empty list/tuple of strings."""
    if isinstance(event_type, str):
        return re.search(r"\S", event_type) is not None
    if isinstance(event_type, (list, tuple)):
        return bool(event_type) and all(isinstance(t, str) for t in event_type)
    return False


def validate_target(target: Any) -> None:
    if not is_bus_handle(target) and not is_evented(target):
        raise InvalidTarget(target)


def validate_event_type(event_type: Any) -> None:
    if not is_valid_event_type(event_type):
        raise InvalidEventType(event_type)


def validate_listener(listener: Any) -> None:
    if not callable(listener):
        raise InvalidListener(listener)
