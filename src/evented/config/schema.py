"""Config schema and accessor."""

from __future__ import annotations

import os
from typing import Any

from loguru import logger

from evented.config.loader import _deep_update
from evented.core.constants import MIXIN_METHODS
from evented.core.errors import EventedConfigurationError

# Env keys that override config (loaded once per reload)
_ENV_OVERRIDE_KEYS = (
    "EVENTED_RAISE_LISTENER_ERRORS",
    "EVENTED_DEFAULT_EXCLUDE",
)


# Built-in settings; file data is merged over these
DEFAULTS: dict[str, Any] = {
    "raise_listener_errors": False,
    "default_exclude": [],
    "bus_node_name": "span",
    "bus_class_name": "event-bus",
}


def _load_env_overrides() -> dict[str, str]:
    """Load env overrides once per reload."""
    return {k: os.environ.get(k, "") for k in _ENV_OVERRIDE_KEYS}


def _parse_bool_env(val: str) -> bool | None:
    """Parse env string to bool; None if not a recognized bool."""
    v = val.lower()
    if v in ("1", "true", "yes"):
        return True
    if v in ("0", "false", "no"):
        return False
    return None


class Config:
    """Config accessor with attribute-style access for nested keys."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data = _deep_update(DEFAULTS, data or {})
        self._env: dict[str, str] = _load_env_overrides()

    def reload(self, data: dict[str, Any], *, validate: bool = True) -> None:
        """Replace config data (e.g. after loading a new file)."""
        self._data = _deep_update(DEFAULTS, data or {})
        self._env = _load_env_overrides()
        if validate:
            self._validate()
        logger.debug("Config reloaded: {} keys", len(self._data))

    def _validate(self) -> None:
        """Validate config structure; raise EventedConfigurationError on failure."""
        exclude = self._data["default_exclude"]
        if not isinstance(exclude, list):
            raise EventedConfigurationError(
                "default_exclude must be a list",
                code="invalid_default_exclude",
                details={"type": type(exclude).__name__},
            )
        for i, name in enumerate(self.default_exclude):
            if name not in MIXIN_METHODS:
                raise EventedConfigurationError(
                    f"default_exclude[{i}] is not a mixin method: {name!r}",
                    code="unknown_mixin_method",
                    details={"index": i, "name": name},
                )
        for key in ("bus_node_name", "bus_class_name"):
            val = self._data[key]
            if not isinstance(val, str):
                raise EventedConfigurationError(
                    f"{key} must be a string",
                    code=f"invalid_{key}",
                    details={"type": type(val).__name__},
                )

    @property
    def raw(self) -> dict[str, Any]:
        """Config dict with defaults filled in."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Get value by dot-separated path."""
        parts = key.split(".")
        obj: Any = self._data
        for part in parts:
            if isinstance(obj, dict) and part in obj:
                obj = obj[part]
            else:
                return default
        return obj

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __contains__(self, key: str) -> bool:
        return key in self._data

    @property
    def raise_listener_errors(self) -> bool:
        """Re-raise listener exceptions after logging them."""
        env_val = self._env.get("EVENTED_RAISE_LISTENER_ERRORS", "")
        parsed = _parse_bool_env(env_val)
        if parsed is not None:
            return parsed
        return bool(self._data["raise_listener_errors"])

    @property
    def default_exclude(self) -> list[str]:
        """Methods left off when evented() is called without ``exclude``."""
        env_val = self._env.get("EVENTED_DEFAULT_EXCLUDE", "")
        if env_val.strip():
            return [name.strip() for name in env_val.split(",") if name.strip()]
        val = self._data["default_exclude"]
        if isinstance(val, list):
            return [str(name) for name in val]
        return []

    @property
    def bus_node_name(self) -> str:
        return str(self._data["bus_node_name"])

    @property
    def bus_class_name(self) -> str:
        return str(self._data["bus_class_name"])

    def effective(self) -> dict[str, Any]:
        """Resolved settings, env overrides applied."""
        return {
            "raise_listener_errors": self.raise_listener_errors,
            "default_exclude": self.default_exclude,
            "bus_node_name": self.bus_node_name,
            "bus_class_name": self.bus_class_name,
        }


# Global config instance (set by __main__ or by the embedding application)
cfg: Config = Config({})
