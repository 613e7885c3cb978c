"""Mixin constants."""

from __future__ import annotations

from typing import Literal

MixinMethod = Literal["off", "on", "one", "trigger", "dispose"]

# Public surface probed by is_evented(); attach order matches this tuple.
LISTEN_METHODS: tuple[MixinMethod, ...] = ("off", "on", "one", "trigger")
MIXIN_METHODS: tuple[MixinMethod, ...] = (*LISTEN_METHODS, "dispose")

DISPOSE_EVENT = "dispose"
EVENT_BUS_ATTR = "event_bus"
