"""Command line entrypoint. Loads config, configures logging, prints effective settings."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import yaml
from loguru import logger

from evented import __version__
from evented.config import Config, cfg, load_config_with_env
from evented.core.errors import EventedConfigurationError


def setup_logging(verbose: bool = False) -> None:
    """Configure loguru. Replace default logging."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "INFO",
        format=(
            "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
            "<cyan>{name}</cyan> | {message}"
        ),
    )


def reload_config(config_path: Path) -> Config:
    """Load config from path and update global cfg."""
    data = load_config_with_env(config_path)
    cfg.reload(data)
    return cfg


def main(argv: list[str] | None = None) -> None:
    """Main entrypoint."""
    parser = argparse.ArgumentParser(
        prog="evented",
        description="Evented: show the effective event-capability settings",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("evented.yaml"),
        help="Path to config file (default: evented.yaml)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        config = reload_config(args.config)
    except (EventedConfigurationError, yaml.YAMLError) as exc:
        logger.error("Invalid config {}: {}", args.config, exc)
        sys.exit(1)
    logger.debug("Config loaded from {}", args.config)

    sys.stdout.write(yaml.safe_dump(config.effective(), sort_keys=True))


if __name__ == "__main__":
    main()
