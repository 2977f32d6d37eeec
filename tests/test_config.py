"""Tests for configuration settings."""

import os
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from inbox_relay.config import ConfigError, Settings, get_settings_eager
from inbox_relay.defaults import DEFAULT_DATABASE_URL, DEFAULT_INBOX_LIMIT


@pytest.fixture(autouse=True)
def isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Keep real config files and environment out of the tests."""
    monkeypatch.chdir(tmp_path)
    with (
        patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path / "xdg")}, clear=True),
        patch("pathlib.Path.home", return_value=tmp_path),
    ):
        yield tmp_path


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()

        assert settings.database_url == DEFAULT_DATABASE_URL
        assert settings.inbox_limit == DEFAULT_INBOX_LIMIT
        assert settings.admin_password is None
        assert settings.session_secret.get_secret_value() == ""
        assert settings.google.client_id == ""

    def test_env_overrides(self) -> None:
        env = {
            "INBOX_RELAY_DATABASE_URL": "postgresql+psycopg://relay@db/relay",
            "INBOX_RELAY_INBOX_LIMIT": "25",
            "INBOX_RELAY_GOOGLE__CLIENT_ID": "client-id",
            "INBOX_RELAY_GOOGLE__CLIENT_SECRET": "client-secret",
            "INBOX_RELAY_ADMIN_PASSWORD": "hunter2",
        }
        with patch.dict(os.environ, env):
            settings = Settings()

        assert settings.database_url == "postgresql+psycopg://relay@db/relay"
        assert settings.inbox_limit == 25
        assert settings.google.client_id == "client-id"
        assert settings.google.client_secret.get_secret_value() == "client-secret"
        assert settings.admin_password is not None
        assert settings.admin_password.get_secret_value() == "hunter2"

    @pytest.mark.parametrize("field", ["INBOX_LIMIT", "SESSION_MAX_AGE", "REMOTE_TIMEOUT", "STORE_TIMEOUT"])
    def test_positive_values_required(self, field: str) -> None:
        with patch.dict(os.environ, {f"INBOX_RELAY_{field}": "0"}):
            with pytest.raises(ValidationError, match="must be positive"):
                Settings()


class TestYamlConfigLoading:
    def test_load_from_config_file_env(self, tmp_path: Path) -> None:
        config_file = tmp_path / "custom.yaml"
        config_file.write_text(
            "inbox_limit: 5\n"
            "google:\n"
            "  client_id: yaml-client\n"
            "  redirect_uri: https://relay.example.com/auth/google/callback\n"
        )
        with patch.dict(os.environ, {"INBOX_RELAY_CONFIG_FILE": str(config_file)}):
            settings = Settings()

        assert settings.inbox_limit == 5
        assert settings.google.client_id == "yaml-client"
        assert settings.google.redirect_uri == "https://relay.example.com/auth/google/callback"

    def test_load_from_current_directory(self, tmp_path: Path) -> None:
        (tmp_path / "inbox-relay.yaml").write_text("post_login_redirect: /app\n")

        settings = Settings()

        assert settings.post_login_redirect == "/app"

    def test_load_from_xdg_config(self, tmp_path: Path) -> None:
        config_dir = tmp_path / "xdg" / "inbox-relay"
        config_dir.mkdir(parents=True)
        (config_dir / "config.yaml").write_text("inbox_limit: 3\n")

        settings = Settings()

        assert settings.inbox_limit == 3

    def test_env_wins_over_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "inbox-relay.yaml").write_text("inbox_limit: 3\n")
        with patch.dict(os.environ, {"INBOX_RELAY_INBOX_LIMIT": "7"}):
            settings = Settings()

        assert settings.inbox_limit == 7

    def test_empty_file(self, tmp_path: Path) -> None:
        (tmp_path / "inbox-relay.yaml").write_text("")

        settings = Settings()

        assert settings.inbox_limit == DEFAULT_INBOX_LIMIT

    def test_invalid_yaml_reports_location(self, tmp_path: Path) -> None:
        config_file = tmp_path / "inbox-relay.yaml"
        config_file.write_text("google:\n  client_id: [unclosed\n")

        with pytest.raises(ConfigError) as exc_info:
            Settings()

        assert exc_info.value.file_path == str(config_file)
        assert exc_info.value.line is not None
        assert "Invalid YAML syntax" in str(exc_info.value)

    def test_non_mapping_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "inbox-relay.yaml").write_text("- just\n- a list\n")

        with pytest.raises(ConfigError, match="mapping"):
            Settings()


class TestGetSettingsEager:
    def test_requires_session_secret(self) -> None:
        with pytest.raises(ConfigError, match="INBOX_RELAY_SESSION_SECRET"):
            get_settings_eager()

    def test_session_secret_optional_for_maintenance(self) -> None:
        settings = get_settings_eager(require_session_secret=False)

        assert settings.database_url == DEFAULT_DATABASE_URL

    def test_friendly_validation_message(self) -> None:
        env = {"INBOX_RELAY_SESSION_SECRET": "s3cret", "INBOX_RELAY_INBOX_LIMIT": "-1"}
        with patch.dict(os.environ, env):
            with pytest.raises(ConfigError, match="Invalid value for 'inbox_limit'"):
                get_settings_eager()

    def test_valid(self) -> None:
        with patch.dict(os.environ, {"INBOX_RELAY_SESSION_SECRET": "s3cret"}):
            settings = get_settings_eager()

        assert settings.session_secret.get_secret_value() == "s3cret"
