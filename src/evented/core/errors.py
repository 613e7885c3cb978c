"""Evented domain exceptions. All are raised before any listener set is touched."""

from __future__ import annotations


class EventedError(Exception):
    """Base for evented domain errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, object] | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}
        self.original_error = original_error


class EventedConfigurationError(EventedError):
    """Config validation or load failure."""


class InvalidTarget(EventedError, TypeError):
    """Value in a target position is neither a bus handle nor an evented object."""

    def __init__(self, target: object) -> None:
        super().__init__(
            "invalid target; must be a bus handle or evented object",
            code="invalid_target",
            details={"type": type(target).__name__},
        )


class InvalidEventType(EventedError, ValueError):
    """Event type is not a non-blank string or a non-empty sequence of strings."""

    def __init__(self, event_type: object) -> None:
        super().__init__(
            "invalid event type; must be a non-empty string or list of strings",
            code="invalid_event_type",
            details={"type": type(event_type).__name__, "value": repr(event_type)},
        )


class InvalidListener(EventedError, TypeError):
    """Listener is not callable."""

    def __init__(self, listener: object) -> None:
        super().__init__(
            "invalid listener; must be callable",
            code="invalid_listener",
            details={"type": type(listener).__name__},
        )


class InvalidEventBusKey(EventedError, ValueError):
    """``event_bus_key`` does not name a bus handle on the target."""

    def __init__(self, key: str) -> None:
        super().__init__(
            f'event_bus_key "{key}" does not refer to a bus handle',
            code="invalid_event_bus_key",
            details={"key": key},
        )
