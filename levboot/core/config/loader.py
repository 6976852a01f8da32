"""
Configuration loader — reads levboot.yml into InstallerConfig.

The file is optional. Lookup order:
    --config PATH  >  $LEVBOOT_CONFIG  >  ~/.config/levboot/levboot.yml
With nothing found, the built-in defaults install Levanter the safe way.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from levboot.core.models.settings import InstallerConfig

logger = logging.getLogger(__name__)

CONFIG_FILE = "levboot.yml"
ENV_CONFIG = "LEVBOOT_CONFIG"


class ConfigError(Exception):
    """Raised when levboot.yml is unreadable or invalid."""


def default_config_path() -> Path:
    return Path.home() / ".config" / "levboot" / CONFIG_FILE


def find_config(explicit: Path | None = None) -> Path | None:
    """Resolve which config file to use.

    An explicit or environment-supplied path is returned even when it
    does not exist, so ``load_config`` can report it. The default
    location is only used when present.
    """
    if explicit is not None:
        return explicit
    env_path = os.environ.get(ENV_CONFIG)
    if env_path:
        return Path(env_path).expanduser()
    candidate = default_config_path()
    if candidate.is_file():
        return candidate
    return None


def load_config(path: Path | None = None) -> InstallerConfig:
    """Load and validate installer configuration.

    Raises:
        ConfigError: If a named file is missing, unreadable or invalid.
    """
    path = find_config(path)
    if path is None:
        logger.debug("No %s found, using defaults", CONFIG_FILE)
        return InstallerConfig()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading installer config from %s", path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return InstallerConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # Allow the settings to sit under a top-level "levboot" key
    data = data.get("levboot", data)

    try:
        config = InstallerConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid installer configuration in {path}: {e}") from e

    logger.info("Loaded config from %s (profile=%s)", path, config.profile)
    return config
