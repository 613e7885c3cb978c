"""Config loading: YAML file + .env overlay.

A file may hold the settings at top level, or under an ``evented:`` section
when it is shared with the embedding application. Section values win over
top-level ones.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from loguru import logger

SECTION = "evented"


def _deep_update(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base; neither input is mutated."""
    result = dict(base)
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = _deep_update(result[key], value)
        else:
            result[key] = value
    return result


def _read_yaml(path: Path) -> dict[str, Any]:
    """Parse path with SafeLoader. Missing or non-mapping files read as {}."""
    if not path.is_file():
        logger.warning("Config file not found: {}", path)
        return {}

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        logger.error("Failed to parse config {}: {}", path, exc)
        raise

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Config file {} has invalid structure (expected mapping, got {})", path, type(data).__name__)
        return {}
    return data


def load_config(path: str | Path, *, section: str = SECTION) -> dict[str, Any]:
    """Load settings from a YAML file, flattening the ``section`` mapping if present."""
    data = _read_yaml(Path(path))
    nested = data.pop(section, None)
    if nested is None:
        return data
    if not isinstance(nested, dict):
        logger.warning("Ignoring {!r} section in {}: expected mapping", section, path)
        return data
    return _deep_update(data, nested)


def load_config_with_env(path: str | Path) -> dict[str, Any]:
    """Load the .env beside the config file (else the working directory's), then the YAML.

    Variables already set in the environment are left alone.
    """
    from dotenv import load_dotenv

    beside = Path(path).parent / ".env"
    if beside.is_file():
        logger.debug("Loading environment from {}", beside)
        load_dotenv(beside)
    else:
        load_dotenv()
    return load_config(path)
