"""Tests for the command-line interface."""

import json
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from playground_pricing import __version__
from playground_pricing.cli import app
from playground_pricing.services.llm.pricing import list_priced_models

runner = CliRunner()


@pytest.fixture
def config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Config file pointing at a scratch SQLite database."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({"database_url": f"sqlite:///{tmp_path / 'playground.db'}"}))
    return path


class TestGlobalOptions:
    """Tests for top-level options and info."""

    def test_version(self):
        """--version prints the version and exits cleanly."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"v{__version__}" in result.output

    def test_info(self):
        """info lists example commands."""
        result = runner.invoke(app, ["info"])
        assert result.exit_code == 0
        assert "Example Commands" in result.output


class TestPricingCommands:
    """Tests for tool-cost and message-cost."""

    def test_tool_cost(self):
        """Payload costs are itemized and totaled."""
        payload = json.dumps(
            [
                {"type": "browser_search", "arguments": json.dumps({"action": "search"})},
                {"type": "browser_search", "arguments": json.dumps({"action": "search"})},
            ]
        )
        result = runner.invoke(app, ["tool-cost", payload])
        assert result.exit_code == 0
        assert "Browser Search" in result.output
        assert "$0.0100" in result.output

    def test_tool_cost_invalid_payload(self):
        """Malformed payloads report no usage instead of failing."""
        result = runner.invoke(app, ["tool-cost", "{not json"])
        assert result.exit_code == 0
        assert "No tool usage" in result.output

    def test_message_cost(self):
        """Token costs follow the pricing table."""
        result = runner.invoke(app, ["message-cost", "llama-3.3-70b-versatile", "1000000", "0"])
        assert result.exit_code == 0
        assert "$0.5900" in result.output

    def test_message_cost_unknown_model(self):
        """Unknown models are free."""
        result = runner.invoke(app, ["message-cost", "acme/unreleased", "100", "100"])
        assert result.exit_code == 0
        assert "Free" in result.output


class TestCatalogCommands:
    """Tests for refresh-models and models."""

    def test_refresh_dry_run_then_list(self, config_path: Path):
        """Dry-run refresh fills the catalog that models then lists."""
        result = runner.invoke(app, ["refresh-models", "--dry-run", "--config", str(config_path)])
        assert result.exit_code == 0, result.output
        assert f"Successfully refreshed {len(list_priced_models())} models" in result.output

        result = runner.invoke(app, ["models", "--config", str(config_path)])
        assert result.exit_code == 0, result.output
        assert "Active models" in result.output

    def test_models_empty_catalog(self, config_path: Path):
        """An empty catalog points at refresh-models."""
        result = runner.invoke(app, ["models", "--config", str(config_path)])
        assert result.exit_code == 0
        assert "refresh-models" in result.output

    def test_refresh_without_key_fails(self, config_path: Path):
        """A real refresh needs an API key."""
        result = runner.invoke(app, ["refresh-models", "--config", str(config_path)])
        assert result.exit_code == 1
        assert "API key required" in result.output

    def test_missing_config_fails(self, tmp_path: Path):
        """A missing config file is reported."""
        result = runner.invoke(app, ["models", "--config", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_invalid_config_value_fails_cleanly(self, config_path: Path):
        """Out-of-range config values are reported, not raised."""
        config_path.write_text(yaml.dump({"analytics": {"days": 0}}))
        result = runner.invoke(app, ["models", "--config", str(config_path)])
        assert result.exit_code == 1
        assert "Unexpected error" in result.output
        assert isinstance(result.exception, SystemExit)


class TestAnalyticsCommand:
    """Tests for analytics."""

    def test_admin_view(self, config_path: Path):
        """Without --user the admin summary is shown."""
        result = runner.invoke(app, ["analytics", "--config", str(config_path), "--days", "7"])
        assert result.exit_code == 0, result.output
        assert "last 7 days" in result.output

    def test_user_view(self, config_path: Path):
        """--user shows that user's totals."""
        result = runner.invoke(app, ["analytics", "--config", str(config_path), "--user", "alice"])
        assert result.exit_code == 0, result.output
        assert "Analytics for alice" in result.output
        assert "Sessions: 0" in result.output

    def test_invalid_config_value_fails_cleanly(self, config_path: Path):
        """A config that fails validation exits with a message."""
        config_path.write_text(yaml.dump({"analytics": {"days": 0}}))
        result = runner.invoke(app, ["analytics", "--config", str(config_path)])
        assert result.exit_code == 1
        assert "Unexpected error" in result.output
        assert isinstance(result.exception, SystemExit)


class TestValidateCommand:
    """Tests for validate."""

    def test_valid(self, config_path: Path):
        """A valid file is summarized."""
        result = runner.invoke(app, ["validate", str(config_path)])
        assert result.exit_code == 0
        assert "Configuration is valid!" in result.output

    def test_invalid(self, tmp_path: Path):
        """Invalid values fail validation."""
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"analytics": {"days": 0}}))
        result = runner.invoke(app, ["validate", str(path)])
        assert result.exit_code == 1
        assert "Validation error" in result.output
