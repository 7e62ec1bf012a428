"""Config Loader - Loads transport configuration from YAML.

String values may reference environment variables as ${ENV_VAR}; every
referenced variable must be set.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from restwire.models import HttpConfig

logger = logging.getLogger(__name__)

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


class ConfigError(Exception):
    """Raised when configuration loading fails."""


def load_http_config(config_path: Path) -> HttpConfig:
    """Load HttpConfig from YAML with ${ENV_VAR} substitution.

    An empty file yields the default configuration.
    """
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}") from e

    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ConfigError("Config file must be a YAML mapping")

    raw_config = _substitute_env_vars(raw_config)

    try:
        config = HttpConfig.model_validate(raw_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid config structure: {e}") from e

    logger.debug("Loaded config from %s", config_path)
    return config


def _substitute_env_vars(raw_config: dict[str, Any]) -> dict[str, Any]:
    """Expand ${ENV_VAR} references in the top-level string settings.

    HttpConfig is flat, so only top-level values are considered.
    """
    return {
        key: _ENV_VAR_PATTERN.sub(_env_value, value) if isinstance(value, str) else value
        for key, value in raw_config.items()
    }


def _env_value(match: re.Match[str]) -> str:
    var_name = match.group(1)
    value = os.environ.get(var_name)
    if value is None:
        raise ConfigError(f"Environment variable '{var_name}' is not set")
    return value
