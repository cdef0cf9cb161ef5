"""
Configuration loader — reads upkeep.yml into UpkeepConfig.

The file is optional.  It is looked up in this order:

    --config PATH  >  $XDG_CONFIG_HOME/upkeep.yml  >  ~/.config/upkeep.yml

A missing file yields the defaults; an unreadable or invalid one is a
ConfigError.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from upkeep.core.models.config import UpkeepConfig

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "upkeep.yml"


class ConfigError(Exception):
    """Raised when the configuration file is invalid or unreadable."""


def config_dir(home: Path | None = None) -> Path:
    """User configuration directory (XDG aware)."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return (home or Path.home()) / ".config"


def find_config_file(home: Path | None = None) -> Path | None:
    """Return the default config file if it exists."""
    candidate = config_dir(home) / CONFIG_FILE
    return candidate if candidate.is_file() else None


def load_config(path: Path | None = None) -> UpkeepConfig:
    """Load and validate configuration.

    Args:
        path: Explicit path to upkeep.yml. If None, uses the default
            location and falls back to defaults when absent.

    Returns:
        Validated UpkeepConfig.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    if path is None:
        path = find_config_file()
        if path is None:
            logger.debug("No %s found, using defaults", CONFIG_FILE)
            return UpkeepConfig()
    elif not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return UpkeepConfig()

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = UpkeepConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info("Loaded config from %s", path)
    return config
