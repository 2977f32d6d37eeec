"""Configuration settings for inbox-relay using pydantic-settings."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, SecretStr, field_validator
from pydantic_core import ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from inbox_relay.defaults import (
    DEFAULT_DATABASE_URL,
    DEFAULT_INBOX_LIMIT,
    DEFAULT_REMOTE_TIMEOUT,
    DEFAULT_SESSION_MAX_AGE,
    DEFAULT_STORE_TIMEOUT,
)
from inbox_relay.email.connectors.config import GoogleClientConfig
from inbox_relay.exceptions import ConfigError as _BaseConfigError


class ConfigError(_BaseConfigError):
    """Configuration error with an optional file location."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        line: int | None = None,
        col: int | None = None,
    ) -> None:
        self.file_path = file_path
        self.line = line
        self.col = col
        full_message = message
        if file_path:
            location = f" in {file_path}"
            if line is not None:
                location += f" at line {line}"
                if col is not None:
                    location += f", column {col}"
            full_message = f"Configuration error{location}: {message}"
        super().__init__(full_message)


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Settings source that loads configuration from a YAML file.

    Looks for config file in the following order:
    1. INBOX_RELAY_CONFIG_FILE environment variable
    2. ./inbox-relay.yaml (current directory)
    3. $XDG_CONFIG_HOME/inbox-relay/config.yaml (defaults to ~/.config)
    """

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get field value from YAML config."""
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all settings from YAML config."""
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load and cache YAML config file."""
        if not hasattr(self, "_yaml_data"):
            self._yaml_data = self._read_yaml_file()
        return self._yaml_data

    def _read_yaml_file(self) -> dict[str, Any]:
        """Read YAML config from the first existing candidate path."""
        xdg_config = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        config_paths = [
            os.environ.get("INBOX_RELAY_CONFIG_FILE"),
            Path.cwd() / "inbox-relay.yaml",
            Path(xdg_config) / "inbox-relay" / "config.yaml",
        ]

        for path in config_paths:
            if not path:
                continue
            path_obj = Path(path)
            if not path_obj.exists():
                continue
            try:
                with open(path_obj) as f:
                    data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                mark = getattr(e, "problem_mark", None)
                raise ConfigError(
                    f"Invalid YAML syntax: {getattr(e, 'problem', None) or e}",
                    file_path=str(path_obj),
                    line=mark.line if mark else None,
                    col=mark.column if mark else None,
                ) from e
            except PermissionError as e:
                raise ConfigError(
                    "Cannot read config file: permission denied",
                    file_path=str(path_obj),
                ) from e
            except OSError as e:
                raise ConfigError(
                    f"Cannot read config file: {e}",
                    file_path=str(path_obj),
                ) from e

            if data is None:
                return {}
            if not isinstance(data, dict):
                raise ConfigError("Top-level YAML value must be a mapping", file_path=str(path_obj))
            return data

        return {}


def _parse_validation_error(error: ValidationError) -> str:
    """Convert Pydantic ValidationError to user-friendly message."""
    errors = error.errors()
    if not errors:
        return "Unknown validation error"

    err = errors[0]
    loc = err.get("loc", ())
    msg = err.get("msg", "")
    field_name = ".".join(str(part) for part in loc)

    if err.get("type") == "missing" and loc:
        return f"Missing required field '{field_name}'"
    if loc:
        return f"Invalid value for '{field_name}': {msg}"
    return str(error)


class Settings(BaseSettings):
    """Application settings loaded from environment variables with INBOX_RELAY_ prefix.

    Nested values use a double underscore, e.g. INBOX_RELAY_GOOGLE__CLIENT_ID.
    The same keys can be set in a YAML file:

        database_url: "postgresql+psycopg://relay@db/relay"
        google:
          client_id: "1234.apps.googleusercontent.com"
          redirect_uri: "https://relay.example.com/auth/google/callback"

    Secrets (session_secret, google.client_secret, admin_password) are best
    passed through the environment.
    """

    model_config = SettingsConfigDict(env_prefix="INBOX_RELAY_", env_nested_delimiter="__")

    # Storage
    database_url: str = DEFAULT_DATABASE_URL
    store_timeout: float = DEFAULT_STORE_TIMEOUT

    # Sessions
    session_secret: SecretStr = SecretStr("")
    session_max_age: int = DEFAULT_SESSION_MAX_AGE

    # Provider
    google: GoogleClientConfig = Field(default_factory=GoogleClientConfig)
    remote_timeout: float = DEFAULT_REMOTE_TIMEOUT
    inbox_limit: int = DEFAULT_INBOX_LIMIT

    # Web
    admin_password: SecretStr | None = None
    post_login_redirect: str = "/inbox.html"
    cors_origins: list[str] = []

    @field_validator("inbox_limit", "session_max_age")
    @classmethod
    def _validate_positive_int(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @field_validator("remote_timeout", "store_timeout")
    @classmethod
    def _validate_positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config."""
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls),
            dotenv_settings,
            file_secret_settings,
        )


def get_settings_eager(require_session_secret: bool = True) -> Settings:
    """Load settings with eager validation at startup.

    Args:
        require_session_secret: Fail when no session secret is set (needed
            by the web app, not by maintenance commands).

    Raises:
        ConfigError: If configuration is invalid, with a user-friendly message.
    """
    try:
        settings = Settings()
    except ValidationError as e:
        raise ConfigError(_parse_validation_error(e)) from e

    if require_session_secret and not settings.session_secret.get_secret_value():
        raise ConfigError(
            "No session secret configured. Set INBOX_RELAY_SESSION_SECRET to a long random value."
        )
    return settings
