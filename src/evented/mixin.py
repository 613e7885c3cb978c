"""Evented mixin: on/one/off/trigger for any object.

Listeners can be attached to the object's own bus or to another evented
object. A cross-object ``on`` is severed automatically when either side is
disposed: the receiver keeps a hook on its own ``dispose`` event that removes
the listener from the target, and the target gets a hook that removes the
receiver's hook. Both hooks carry the listener's guid, so
``off(target, type, listener)`` clears all three.
"""

from __future__ import annotations

import types
from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass
from typing import Any, ClassVar

from loguru import logger

from evented import events
from evented.bus import BusHandle, create_bus_handle, is_bus_handle
from evented.config import cfg
from evented.core.constants import DISPOSE_EVENT, EVENT_BUS_ATTR, MIXIN_METHODS
from evented.core.errors import InvalidEventBusKey
from evented.events import Evented, EventType
from evented.identity import BoundListener, bind
from evented.validation import (
    is_valid_event_type,
    validate_event_type,
    validate_listener,
    validate_target,
)

Target = BusHandle | Evented


@dataclass(frozen=True)
class ListenSelf:
    """Call shape of ``on(type, listener)``; target is the receiver's bus."""

    target: BusHandle
    type: EventType
    listener: BoundListener
    is_self_target: ClassVar[bool] = True


@dataclass(frozen=True)
class ListenOther:
    """Call shape of ``on(other, type, listener)``."""

    target: Target
    type: EventType
    listener: BoundListener
    is_self_target: ClassVar[bool] = False


@dataclass(frozen=True)
class Linkage:
    """Dispose hooks tying a cross-object listener to both objects' lifetimes."""

    target: Target
    type: EventType
    guid: Hashable
    owner_hook: BoundListener
    target_hook: BoundListener


def linkages(obj: Any) -> tuple[Linkage, ...]:
    """Cross-object subscriptions obj currently holds."""
    return tuple(_bus(obj).linkages)


def _bus(obj: Any) -> BusHandle:
    return getattr(obj, EVENT_BUS_ATTR)


def _drop_linkages(self: Any, target: Target, guid: Hashable) -> None:
    links = _bus(self).linkages
    links[:] = [link for link in links if not (link.target is target and link.guid == guid)]


def normalize_listen_args(self: Any, args: tuple[Any, ...]) -> ListenSelf | ListenOther:
    """Resolve the positional arguments of on()/one() into a call shape.

    Fewer than three arguments, or a first argument that is the receiver or
    its bus, means the receiver listens to itself.
    """
    bus = _bus(self)
    is_targeting_self = len(args) < 3 or args[0] is self or args[0] is bus

    if is_targeting_self:
        rest = args[1:] if len(args) >= 3 else args
        event_type, listener = (tuple(rest) + (None, None))[:2]
        target: Any = bus
    else:
        target, event_type, listener = args[:3]

    validate_target(target)
    validate_event_type(event_type)
    validate_listener(listener)

    bound = bind(self, listener)
    if is_targeting_self:
        return ListenSelf(target, event_type, bound)
    return ListenOther(target, event_type, bound)


def _listen(target: Target, event_type: EventType, listener: Callable[..., Any], once: bool = False) -> None:
    """Add listener on target, whether it is a bus handle or an evented object."""
    validate_target(target)

    if is_bus_handle(target):
        (events.one if once else events.on)(target, event_type, listener)
    else:
        (target.one if once else target.on)(event_type, listener)


def on(self: Any, *args: Any) -> Any:
    """Add a listener to an event (or events) on this object or another evented object.

    ``on(type, listener)`` listens on this object. ``on(other, type, listener)``
    listens on ``other``. Either way the listener runs with this object as
    its receiver (see ``evented.identity.current_receiver``).

    Returns this object.
    """
    call = normalize_listen_args(self, args)
    _listen(call.target, call.type, call.listener)

    if not call.is_self_target:
        target, event_type, listener = call.target, call.type, call.listener

        def remove_listener_on_dispose(*_: Any) -> None:
            off(self, target, event_type, listener)

        # Same guid as the listener so off(target, type, listener) finds it.
        owner_hook = bind(self, remove_listener_on_dispose, guid=listener.guid)

        def remove_remover_on_target_dispose(*_: Any) -> None:
            off(self, DISPOSE_EVENT, owner_hook)
            _drop_linkages(self, target, listener.guid)

        target_hook = bind(self, remove_remover_on_target_dispose, guid=listener.guid)

        _listen(_bus(self), DISPOSE_EVENT, owner_hook)
        _listen(target, DISPOSE_EVENT, target_hook)
        _bus(self).linkages.append(
            Linkage(target, event_type, listener.guid, owner_hook, target_hook)
        )
        logger.debug("Linked {} to {!r} on {}", type(self).__name__, event_type, type(target).__name__)

    return self


def one(self: Any, *args: Any) -> Any:
    """Like on(), but the listener is removed after it first runs.

    Listening once on another object installs no dispose hooks.
    """
    call = normalize_listen_args(self, args)

    if call.is_self_target:
        _listen(call.target, call.type, call.listener, once=True)
    else:
        target, event_type, listener = call.target, call.type, call.listener

        def wrapper(*largs: Any) -> None:
            off(self, target, event_type, wrapper)
            listener(*largs)

        wrapper.guid = listener.guid  # type: ignore[attr-defined]
        _listen(target, event_type, wrapper, once=True)

    return self


def off(
    self: Any,
    target_or_type: Any = None,
    type_or_listener: Any = None,
    listener: Any = None,
) -> Any:
    """Remove listener(s) from event(s).

    With no arguments, removes every listener on this object. With a type
    (and optionally a listener) first, removes from this object. With
    another object first, all three arguments are required.

    Returns this object.
    """
    if target_or_type is None or is_valid_event_type(target_or_type):
        if target_or_type is not None and type_or_listener is not None:
            validate_listener(type_or_listener)
        events.off(_bus(self), target_or_type, type_or_listener)
        return self

    target = target_or_type
    event_type = type_or_listener

    validate_target(target)
    validate_event_type(event_type)
    validate_listener(listener)

    # Ensure there's at least a guid, even if the listener was never used.
    listener = bind(self, listener)

    # Drops the owner hook on() gave this listener's guid.
    off(self, DISPOSE_EVENT, listener)
    _drop_linkages(self, target, listener.guid)

    if is_bus_handle(target):
        events.off(target, event_type, listener)
        events.off(target, DISPOSE_EVENT, listener)
    else:
        target.off(event_type, listener)
        target.off(DISPOSE_EVENT, listener)

    return self


def trigger(self: Any, event: Any, hash: dict[str, Any] | None = None) -> Any:
    """Fire an event (type string, dict or Event) on this object. Returns this object."""
    events.trigger(_bus(self), event, hash)
    return self


def dispose(self: Any) -> Any:
    """Tear this object down: fire ``dispose``, which removes all its listeners."""
    events.trigger(_bus(self), DISPOSE_EVENT)
    return self


_METHODS: dict[str, Callable[..., Any]] = {
    "off": off,
    "on": on,
    "one": one,
    "trigger": trigger,
    "dispose": dispose,
}


def evented(
    target: Any,
    *,
    exclude: Iterable[str] | None = None,
    event_bus_key: str | None = None,
) -> Any:
    """Make target evented in place and return it.

    Args:
        target: Object to receive the methods; needs a ``__dict__``.
        exclude: Method names to leave off (``on``, ``one``, ``off``,
            ``trigger``, ``dispose``); a single name may be given as a str.
            Defaults to ``cfg.default_exclude``.
        event_bus_key: Attribute of target holding an existing bus handle to
            reuse instead of creating one.

    Raises:
        InvalidEventBusKey: event_bus_key does not name a bus handle.
    """
    existing = getattr(target, EVENT_BUS_ATTR, None)

    if event_bus_key:
        handle = getattr(target, event_bus_key, None)
        if not is_bus_handle(handle):
            raise InvalidEventBusKey(event_bus_key)
    elif is_bus_handle(existing):
        handle = existing
    else:
        handle = create_bus_handle()

    if isinstance(exclude, str):
        exclude = (exclude,)
    excluded = set(cfg.default_exclude if exclude is None else exclude)
    unknown = excluded.difference(MIXIN_METHODS)
    if unknown:
        logger.warning("Ignoring unknown mixin methods in exclude: {}", sorted(unknown))

    setattr(target, EVENT_BUS_ATTR, handle)
    for name in MIXIN_METHODS:
        if name in excluded:
            continue
        # A class's own dispose() is expected to trigger "dispose" itself.
        if name == "dispose" and callable(getattr(type(target), "dispose", None)):
            continue
        setattr(target, name, types.MethodType(_METHODS[name], target))

    # When any evented object is disposed, it removes all its listeners.
    if handle.dispose_hook not in events.listeners(handle, DISPOSE_EVENT):
        handle.dispose_hook = bind(target, lambda *_: off(target))
        events.on(handle, DISPOSE_EVENT, handle.dispose_hook)

    logger.debug("Evented {} (bus {}, excluded {})", type(target).__name__, handle, sorted(excluded))
    return target


class EventedMixin:
    """Base class for objects that are evented from construction.

    Subclasses may set ``event_bus_key`` to reuse a bus handle created
    before ``super().__init__()`` runs, and ``evented_exclude`` to trim the
    public surface.
    """

    event_bus_key: ClassVar[str | None] = None
    evented_exclude: ClassVar[tuple[str, ...] | None] = None

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        evented(self, exclude=self.evented_exclude, event_bus_key=self.event_bus_key)
