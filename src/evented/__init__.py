"""Evented: a pub/sub capability that can be attached to any object."""

__version__ = "0.1.0"

from evented.bus import BusHandle, create_bus_handle, is_bus_handle
from evented.core.errors import (
    EventedConfigurationError,
    EventedError,
    InvalidEventBusKey,
    InvalidEventType,
    InvalidListener,
    InvalidTarget,
)
from evented.events import Event, Evented
from evented.identity import current_receiver
from evented.mixin import EventedMixin, Linkage, evented, linkages
from evented.validation import is_evented

__all__ = [
    "__version__",
    "BusHandle",
    "Event",
    "Evented",
    "EventedConfigurationError",
    "EventedError",
    "EventedMixin",
    "InvalidEventBusKey",
    "InvalidEventType",
    "InvalidListener",
    "InvalidTarget",
    "Linkage",
    "create_bus_handle",
    "current_receiver",
    "evented",
    "is_bus_handle",
    "is_evented",
    "linkages",
]
