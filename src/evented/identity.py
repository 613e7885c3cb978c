"""Listener identity: guid tokens and receiver binding.

A listener registered through the mixin is wrapped in a ``BoundListener``.
The wrapper shares the original's guid, so removing by the original callable
still finds the wrapper in the channel's bookkeeping.
"""

from __future__ import annotations

import inspect
import itertools
from collections.abc import Callable, Hashable
from contextvars import ContextVar
from typing import Any

_guids = itertools.count(1)
_receiver: ContextVar[Any] = ContextVar("evented_receiver", default=None)


def new_guid() -> int:
    """Mint a new listener identity."""
    return next(_guids)


def guid_of(fn: Callable[..., Any]) -> Hashable:
    """Return fn's identity token, assigning one on first use.

    Bound methods are rebuilt on every attribute access and reject attribute
    assignment; reading ``guid`` through one would also return the token of
    the underlying function, shared by every instance. The bound method
    itself is used as the token instead: two accesses of ``obj.method``
    compare equal.
    """
    if inspect.ismethod(fn):
        return fn
    guid = getattr(fn, "guid", None)
    if guid is not None:
        return guid
    guid = new_guid()
    try:
        fn.guid = guid  # type: ignore[attr-defined]
    except (AttributeError, TypeError):
        # builtins and slotted callables
        return fn
    return guid


def current_receiver() -> Any:
    """Object whose bound listener is running, or None outside dispatch."""
    return _receiver.get()


class BoundListener:
    """Callable wrapper binding a listener to a receiver, carrying its guid."""

    def __init__(self, fn: Callable[..., Any], context: Any, guid: Hashable) -> None:
        self.fn = fn
        self.context = context
        self.guid = guid

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        token = _receiver.set(self.context)
        try:
            return self.fn(*args, **kwargs)
        finally:
            _receiver.reset(token)

    def __repr__(self) -> str:
        return f"<BoundListener {self.fn!r} guid={self.guid!r} context={self.context!r}>"


def bind(
    context: Any, fn: Callable[..., Any], guid: Hashable | None = None
) -> BoundListener:
    """Bind fn to context. The wrapper takes fn's guid unless one is given."""
    return BoundListener(fn, context, guid if guid is not None else guid_of(fn))
