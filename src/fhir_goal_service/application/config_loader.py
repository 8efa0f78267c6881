"""Runtime configuration loader for the FHIR Goal service.

Reads default values from a YAML settings file (``GOAL_SERVICE_CONFIG`` or
``config/goal_service.yaml`` under the working directory) and lets
environment variables prefixed with ``GOAL_SERVICE_`` override them.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fhir_goal_service.exceptions import ConfigurationError
from fhir_goal_service.utils.logging import get_logger

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
CONFIG_ENV_VAR = "GOAL_SERVICE_CONFIG"
_DEFAULT_CONFIG_FILE = Path("config") / "goal_service.yaml"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Configuration model for the Goal service."""

    model_config = SettingsConfigDict(env_prefix="GOAL_SERVICE_", case_sensitive=False)

    log_level: str = Field("INFO", description="Root log level")
    language: str = Field("en", description="Language used to localize code displays")
    terminology_file: Optional[Path] = Field(None, description="YAML code table for the terminology service")
    translations_file: Optional[Path] = Field(None, description="YAML translation catalog")
    provenance_organization: str = Field(
        "Organization/default",
        description="Reference recorded as the author agent on Provenance resources",
    )

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        if v.upper() not in _LOG_LEVELS:
            raise ValueError(f"Log level must be one of {list(_LOG_LEVELS)}")
        return v.upper()


def load_yaml_file(file_path: Path | str) -> Dict[str, Any]:
    """Load a YAML mapping, returning an empty dict if it is missing or unreadable."""
    file_path = Path(file_path)
    if not file_path.exists():
        logger.warning(f"Config file not found: {file_path}")
        return {}

    with file_path.open("r", encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh)
        except yaml.YAMLError as e:
            logger.error(f"Error loading YAML file {file_path}: {e}")
            return {}

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring YAML file without a top-level mapping: {file_path}")
        return {}
    return data


def _settings_file() -> Path:
    return Path(os.environ.get(CONFIG_ENV_VAR, _DEFAULT_CONFIG_FILE))


def load_settings(config_file: Path | str | None = None) -> Settings:
    """Build Settings from a YAML file plus environment overrides.

    Environment variables win over values from the file.
    """
    path = Path(config_file) if config_file is not None else _settings_file()
    file_values = load_yaml_file(path) if path.exists() else {}

    # Init kwargs take precedence over the environment in BaseSettings, so
    # drop file values that an environment variable overrides.
    env_keys = {k.upper() for k in os.environ}
    for key in list(file_values):
        if f"GOAL_SERVICE_{key}".upper() in env_keys:
            file_values.pop(key)

    try:
        return Settings(**file_values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings in {path}: {e}") from e


# ---------------------------------------------------------------------------
# Module cache - loaded on first use
# ---------------------------------------------------------------------------
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return cached Settings instance."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Forget the cached Settings so the next call reloads them."""
    global _settings
    _settings = None
