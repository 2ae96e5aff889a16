"""Exceptions that carry an optional suggestion for the operator."""

from __future__ import annotations


class PlaygroundError(Exception):
    """Base exception rendered as ``[label] message`` plus a suggestion line."""

    label = "Error"

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"[{self.label}] {self.message}"
        if self.suggestion:
            msg += f"\n[Suggestion] {self.suggestion}"
        return msg


class ConfigurationError(PlaygroundError):
    """Base exception for configuration errors."""

    label = "Configuration Error"


class APIKeyError(ConfigurationError):
    """Error when the provider API key is missing."""

    def __init__(self) -> None:
        super().__init__(
            "API key required to refresh models from the provider",
            "Set GROQ_API_KEY or add api_key to config.yaml, or use --dry-run.",
        )


class ConfigFileError(ConfigurationError):
    """Error when a config file cannot be used as a whole."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Invalid configuration file: {path}", reason)


class ModelSyncError(PlaygroundError):
    """Error when the provider listing cannot be synced."""

    label = "Sync Error"

    def __init__(self, message: str) -> None:
        super().__init__(message, "Check api_base_url and that the API key can list models.")
