"""Core configuration and errors for Playground Pricing."""

from playground_pricing.core.config import (
    API_KEY_ENV_VAR,
    DEFAULT_API_BASE_URL,
    DEFAULT_DATABASE_URL,
    AnalyticsConfig,
    AppConfig,
    load_config,
)
from playground_pricing.core.errors import (
    APIKeyError,
    ConfigFileError,
    ConfigurationError,
    ModelSyncError,
    PlaygroundError,
)

__all__ = [
    "API_KEY_ENV_VAR",
    "DEFAULT_API_BASE_URL",
    "DEFAULT_DATABASE_URL",
    "APIKeyError",
    "AnalyticsConfig",
    "AppConfig",
    "ConfigFileError",
    "ConfigurationError",
    "ModelSyncError",
    "PlaygroundError",
    "load_config",
]
