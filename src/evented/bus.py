"""Bus handles: opaque per-object endpoints that listeners are registered on."""

from __future__ import annotations

from typing import Any

from evented.config import cfg


class BusHandle:
    """Identity-hashed channel endpoint. Owned by exactly one evented object.

    The handle carries its own listener table and the owner's cross-object
    linkages. Listeners usually refer back to the owner, so keeping them here
    leaves owner and handle as one cycle the collector can free together.
    """

    __slots__ = ("node_name", "class_name", "handlers", "linkages", "dispose_hook", "__weakref__")

    def __init__(self, node_name: str = "span", class_name: str = "") -> None:
        self.node_name = node_name
        self.class_name = class_name
        # type -> [entries], see evented.events
        self.handlers: dict[str, list[Any]] = {}
        self.linkages: list[Any] = []
        # owner's self-dispose hook, set by evented()
        self.dispose_hook: Any = None

    def __repr__(self) -> str:
        return f"<BusHandle {self.node_name}.{self.class_name} at {id(self):#x}>"


def create_bus_handle() -> BusHandle:
    """Create a fresh bus handle using configured names."""
    return BusHandle(cfg.bus_node_name, cfg.bus_class_name)


def is_bus_handle(value: object) -> bool:
    """Return True if value can be used directly as a channel target."""
    return isinstance(value, BusHandle)
