"""Configuration loading and validation for the completion chat client."""

from __future__ import annotations

from copy import deepcopy
import logging
import os
from pathlib import Path
import tomllib
from typing import Any
from urllib.parse import urlparse

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .exceptions import ConfigValidationError

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "completion-chat"
CONFIG_PATH = CONFIG_DIR / "config.toml"

VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
VALID_AUTH_SCHEMES = {"", "Bearer"}


def _required_string(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("Expected a string value.")
    normalized = value.strip()
    if not normalized:
        raise ValueError("String value must not be empty.")
    return normalized


class AppConfig(BaseModel):
    """Window title and terminal class name."""

    model_config = ConfigDict(populate_by_name=True)
    title: str = "Completion Chat"
    window_class: str = Field(default="completion-chat", alias="class")

    @field_validator("title", "window_class", mode="before")
    @classmethod
    def _validate_non_empty_string(cls, value: Any) -> str:
        return _required_string(value)


class CompletionConfig(BaseModel):
    """Completion endpoint, credential lookup and request timeout."""

    endpoint_url: str = "http://localhost:8787/v1/completions"
    api_key_header: str = "X-API-Key"
    api_key_scheme: str = ""
    api_key_env: str = "COMPLETION_API_KEY"
    response_timeout_seconds: float = Field(default=120.0, ge=0, le=3600)

    @field_validator("endpoint_url", "api_key_header", mode="before")
    @classmethod
    def _validate_required_string(cls, value: Any) -> str:
        return _required_string(value)

    @field_validator("api_key_env", "api_key_scheme", mode="before")
    @classmethod
    def _normalize_optional_string(cls, value: Any) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ValueError("Expected a string value.")
        return value.strip()

    @field_validator("api_key_scheme")
    @classmethod
    def _validate_scheme(cls, value: str) -> str:
        if value not in VALID_AUTH_SCHEMES:
            raise ValueError(f"Unsupported api_key_scheme {value!r}.")
        return value


class UIConfig(BaseModel):
    """Theme and layout switches for the chat screen."""

    dark_mode: bool = False
    show_history: bool = True
    pending_indicator: str = "..."

    @field_validator("pending_indicator", mode="before")
    @classmethod
    def _validate_indicator(cls, value: Any) -> str:
        return _required_string(value)


class HistoryEntryConfig(BaseModel):
    """Static chat-history entry shown in the sidebar."""

    id: int = Field(ge=0)
    title: str

    @field_validator("title", mode="before")
    @classmethod
    def _validate_title(cls, value: Any) -> str:
        return _required_string(value)


class HistoryConfig(BaseModel):
    """Read-only list displayed in the sidebar."""

    entries: list[HistoryEntryConfig] = Field(
        default_factory=lambda: [
            HistoryEntryConfig(id=1, title="Chat 1"),
            HistoryEntryConfig(id=2, title="Chat 2"),
            HistoryEntryConfig(id=3, title="Chat 3"),
        ]
    )

    @field_validator("entries")
    @classmethod
    def _validate_unique_ids(
        cls, value: list[HistoryEntryConfig]
    ) -> list[HistoryEntryConfig]:
        seen: set[int] = set()
        for entry in value:
            if entry.id in seen:
                raise ValueError(f"Duplicate history entry id {entry.id}.")
            seen.add(entry.id)
        return value


class SecurityConfig(BaseModel):
    """Transport policy for the completion endpoint."""

    allow_insecure_http: bool = False
    loopback_hosts: list[str] = ["localhost", "127.0.0.1", "::1"]

    @field_validator("loopback_hosts", mode="before")
    @classmethod
    def _validate_loopback_hosts(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            raise ValueError("loopback_hosts must be a list.")
        return [
            item.strip().lower()
            for item in value
            if isinstance(item, str) and item.strip()
        ]


class LoggingConfig(BaseModel):
    """Log level, rendering and optional log file."""

    level: str = "INFO"
    structured: bool = True
    log_to_file: bool = False
    log_file_path: str = "~/.local/state/completion-chat/app.log"

    @field_validator("level", mode="before")
    @classmethod
    def _validate_level(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Logging level must be a string.")
        normalized = value.strip().upper()
        if normalized not in VALID_LOG_LEVELS:
            raise ValueError(f"Unsupported log level {normalized!r}.")
        return normalized

    @field_validator("log_file_path", mode="before")
    @classmethod
    def _validate_log_file_path(cls, value: Any) -> str:
        return _required_string(value)


class Config(BaseModel):
    """Whole config file; also checks the endpoint against the transport policy."""

    model_config = ConfigDict(populate_by_name=True)
    app: AppConfig = AppConfig()
    completion: CompletionConfig = CompletionConfig()
    ui: UIConfig = UIConfig()
    history: HistoryConfig = HistoryConfig()
    security: SecurityConfig = SecurityConfig()
    logging: LoggingConfig = LoggingConfig()

    @model_validator(mode="after")
    def _validate_endpoint_policy(self) -> Config:
        parsed = urlparse(self.completion.endpoint_url)
        scheme = parsed.scheme.lower()
        hostname = (parsed.hostname or "").strip().lower()

        if scheme not in {"http", "https"}:
            raise ValueError("completion.endpoint_url must use http or https scheme.")
        if not hostname:
            raise ValueError("completion.endpoint_url must include a hostname.")
        if (
            scheme == "http"
            and not self.security.allow_insecure_http
            and hostname not in set(self.security.loopback_hosts)
        ):
            raise ValueError(
                "completion.endpoint_url must use https for non-loopback hosts "
                "unless security.allow_insecure_http is true."
            )
        return self


DEFAULT_CONFIG: dict[str, Any] = Config().model_dump(by_alias=True)


def ensure_config_dir(config_dir: Path | None = None) -> Path:
    """Create the config directory if needed; failures are only logged."""
    directory = config_dir or CONFIG_DIR
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        LOGGER.warning("Unable to create config directory %s: %s", directory, exc)
    return directory


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge nested user tables onto the defaults; lists are replaced wholesale."""
    merged: dict[str, Any] = deepcopy(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _enforce_private_permissions(path: Path) -> None:
    """Best-effort 0600 on POSIX; the file may reference credential settings."""
    if os.name != "posix" or not path.exists():
        return
    try:
        path.chmod(0o600)
    except OSError as exc:
        LOGGER.warning("Unable to enforce 0600 permissions for %s: %s", path, exc)


def _validate_config(raw: dict[str, Any]) -> dict[str, Any]:
    """Validate merged config and fall back to safe defaults when possible."""
    try:
        return Config.model_validate(raw).model_dump(by_alias=True)
    except ValidationError as exc:
        LOGGER.warning("Configuration validation failed, using safe defaults: %s", exc)
        return deepcopy(DEFAULT_CONFIG)
    except Exception as exc:  # noqa: BLE001 - unexpected model construction failure.
        raise ConfigValidationError(f"Unable to validate configuration: {exc}") from exc


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """
    Load configuration from TOML, merge with defaults, and validate.

    The optional ``config_path`` argument is intended for tests and the
    ``--config`` command-line flag.
    """
    target_path = config_path or CONFIG_PATH
    ensure_config_dir(target_path.parent)

    raw_data: dict[str, Any] = {}
    if target_path.exists():
        _enforce_private_permissions(target_path)
        try:
            raw_data = tomllib.loads(target_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
            LOGGER.warning("Failed to parse config at %s: %s", target_path, exc)
            raw_data = {}

    return _validate_config(_deep_merge(DEFAULT_CONFIG, raw_data))
