"""Configuration schema and loading for Playground Pricing."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from playground_pricing.core.errors import APIKeyError, ConfigFileError

DEFAULT_API_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_DATABASE_URL = "duckdb:///playground.duckdb"
API_KEY_ENV_VAR = "GROQ_API_KEY"


class AnalyticsConfig(BaseModel):
    """Admin analytics defaults."""

    days: int = Field(default=30, ge=1, le=365)


class AppConfig(BaseModel):
    """Complete application configuration."""

    database_url: str = DEFAULT_DATABASE_URL
    api_base_url: str = DEFAULT_API_BASE_URL
    api_key: str | None = None
    request_timeout: float = Field(default=30.0, gt=0)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)

    @field_validator("database_url", "api_base_url")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Ensure URLs are non-empty strings."""
        if not v or not v.strip():
            msg = "URL cannot be empty"
            raise ValueError(msg)
        return v.strip()

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def get_api_key(self) -> str:
        """Get API key from config or environment."""
        key = self.api_key or os.environ.get(API_KEY_ENV_VAR)
        if not key:
            raise APIKeyError()
        return key


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to YAML configuration file. Defaults apply when None.

    Returns:
        Validated AppConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigFileError: If the file is not a YAML mapping.
        pydantic.ValidationError: If a field value is invalid.
    """
    if path is None:
        return AppConfig()

    config_path = Path(path)
    if not config_path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    with config_path.open() as f:
        data = yaml.safe_load(f)

    if data is None:
        return AppConfig()
    if not isinstance(data, dict):
        raise ConfigFileError(str(config_path), "Top level must be a YAML mapping.")

    return AppConfig.model_validate(data)
