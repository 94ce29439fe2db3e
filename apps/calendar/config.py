"""
Calendar service configuration

Resolves the service configuration from the CONFIG environment variable or,
when it is not set, from a JSON file on disk. The two sources are never merged.
"""
import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from apps.calendar.schemas import AppConfig
from apps.shared.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "CONFIG"
CONFIG_PATH_ENV_VAR = "CONFIG_PATH"
DEFAULT_CONFIG_FILE = "config.json"

# Values deployments use to mean "no config in the environment"
PLACEHOLDER_VALUES = {"", "{}"}


def get_config_path() -> Path:
    """Config file location, relative to the working directory unless absolute."""
    return Path(os.getenv(CONFIG_PATH_ENV_VAR) or DEFAULT_CONFIG_FILE)


def _read_source() -> tuple[str, str]:
    raw = os.getenv(CONFIG_ENV_VAR)
    if raw is not None and raw.strip() not in PLACEHOLDER_VALUES:
        return raw, f"{CONFIG_ENV_VAR} environment variable"

    path = get_config_path()
    if not path.is_file():
        logger.error("No config file at %s and %s is not set", path, CONFIG_ENV_VAR)
        raise ConfigError(
            f"No config file found and {CONFIG_ENV_VAR} environment variable not set"
        )

    try:
        return path.read_text(encoding="utf-8"), f"config file {path}"
    except OSError as e:
        logger.error("Failed to read config file %s: %s", path, e)
        raise ConfigError(f"Could not read config file {path}") from e


def load_config() -> AppConfig:
    """
    Load the service configuration.

    Returns:
        Parsed AppConfig

    Raises:
        ConfigError: If no source exists or the source is not a valid config document
    """
    raw, source = _read_source()

    try:
        document = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse %s: %s", source, e)
        raise ConfigError(f"Invalid JSON in {source}") from e

    if not isinstance(document, dict):
        logger.error("Config from %s is not a JSON object", source)
        raise ConfigError(f"Config from {source} must be a JSON object")

    try:
        return AppConfig.model_validate(document)
    except ValidationError as e:
        logger.error("Invalid config from %s: %s", source, e)
        raise ConfigError(f"Invalid config from {source}") from e
