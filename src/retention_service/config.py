"""
Configuration management for the blob retention service.

Loads configuration from YAML with ZERO defaults.
Every value must be explicitly specified or startup fails.
"""

from __future__ import annotations

import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator


class ServiceConfig(BaseModel):
    """Service identity configuration."""

    model_config = ConfigDict(extra="forbid")

    name: str
    version: str


class RetryConfig(BaseModel):
    """Retry policy for idempotent store reads."""

    model_config = ConfigDict(extra="forbid")

    max_attempts: int = Field(ge=1)
    initial_backoff_seconds: float = Field(ge=0)
    max_backoff_seconds: float = Field(ge=0)
    jitter_seconds: float = Field(ge=0)


class HttpStoreConfig(BaseModel):
    """Remote blob store reached over HTTP."""

    model_config = ConfigDict(extra="forbid")

    base_url: str
    timeout_seconds: float = Field(gt=0)
    connect_timeout_seconds: float = Field(gt=0)
    page_size: int = Field(ge=1)
    retry: RetryConfig


class FileStoreConfig(BaseModel):
    """Filesystem-backed blob store for local development."""

    model_config = ConfigDict(extra="forbid")

    path: str


class StoreConfig(BaseModel):
    """Blob store backend selection."""

    model_config = ConfigDict(extra="forbid")

    backend: Literal["http", "file"]
    http: HttpStoreConfig | None
    file: FileStoreConfig | None

    @model_validator(mode="after")
    def _selected_backend_configured(self) -> StoreConfig:
        if self.backend == "http" and self.http is None:
            raise ValueError("store.http must be set when store.backend is 'http'")
        if self.backend == "file" and self.file is None:
            raise ValueError("store.file must be set when store.backend is 'file'")
        return self


class CollectionsConfig(BaseModel):
    """Store names backing each collection."""

    model_config = ConfigDict(extra="forbid")

    shares: str
    assets: str


class SweepConfig(BaseModel):
    """Garbage-collection sweep tuning."""

    model_config = ConfigDict(extra="forbid")

    concurrency: int = Field(ge=1)
    timeout_seconds: Annotated[float, Field(gt=0)] | None


class RetrievalConfig(BaseModel):
    """Read path response headers."""

    model_config = ConfigDict(extra="forbid")

    cache_control: str
    default_content_type: str


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    model_config = ConfigDict(extra="forbid")

    host: str
    port: int
    log_level: str


class Settings(BaseModel):
    """
    Root configuration container.

    All fields are REQUIRED. No defaults exist.
    Missing fields cause immediate startup failure.

    Usage:
        from retention_service.config import get_settings
        settings = get_settings()
    """

    model_config = ConfigDict(extra="forbid")

    service: ServiceConfig
    store: StoreConfig
    collections: CollectionsConfig
    sweep: SweepConfig
    retrieval: RetrievalConfig
    server: ServerConfig


class ConfigurationError(Exception):
    """Raised when configuration is invalid or missing."""


def load_yaml_config(config_path: Path) -> dict[str, Any]:
    """
    Load and parse YAML configuration file.

    Args:
        config_path: Path to config.yaml

    Returns:
        Parsed configuration dictionary

    Raises:
        ConfigurationError: If file is missing, empty, or invalid
    """
    if not config_path.exists():
        raise ConfigurationError(
            f"Configuration file not found: {config_path}\n"
            f"Expected location: {config_path.absolute()}\n"
            f"Create the file or set CONFIG_PATH environment variable."
        )

    try:
        with config_path.open() as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if config is None:
        raise ConfigurationError(
            f"Configuration file is empty: {config_path}\n"
            f"All configuration values must be explicitly specified."
        )

    if not isinstance(config, dict):
        raise ConfigurationError(
            f"Configuration must be a YAML mapping, got {type(config).__name__}"
        )

    return config


def get_config_path() -> Path:
    """
    Determine configuration file path.

    Uses CONFIG_PATH environment variable if set, otherwise defaults
    to ./config.yaml relative to working directory.
    """
    return Path(os.environ.get("CONFIG_PATH", "config.yaml"))


@lru_cache
def get_settings() -> Settings:
    """
    Load and validate configuration.

    Cached so the whole process shares one instance. The HTTP service and
    the sweep CLI both call this once at startup and fail fast.

    Raises:
        ConfigurationError: Config file missing or invalid
    """
    yaml_config = load_yaml_config(get_config_path())

    try:
        return Settings(**yaml_config)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed: {e}\n"
            f"All configuration values must be explicitly specified.\n"
            f"No default values are allowed."
        ) from e


def clear_settings_cache() -> None:
    """Clear the settings cache. Used in testing."""
    get_settings.cache_clear()


# Keywords that indicate sensitive data (case-insensitive)
SENSITIVE_KEYWORDS: frozenset[str] = frozenset(
    {
        "secret",
        "password",
        "token",
        "credential",
        "auth",
        "api_key",
        "apikey",
        "private",
        "bearer",
    }
)

_SENSITIVE_PATTERN = re.compile(
    r"(" + "|".join(re.escape(kw) for kw in SENSITIVE_KEYWORDS) + r")",
    re.IGNORECASE,
)

REDACTION_MARKER: str = "[REDACTED]"


def is_sensitive_key(key: str) -> bool:
    """Check if a configuration key contains sensitive keywords."""
    return bool(_SENSITIVE_PATTERN.search(key))


def redact_sensitive_values(
    data: dict[str, Any],
    redaction_marker: str,
) -> dict[str, Any]:
    """
    Recursively redact sensitive values from configuration.

    Store URLs may embed credentials in their userinfo part, so any
    ``base_url`` is also stripped down to scheme, host and path.

    Args:
        data: Configuration dictionary
        redaction_marker: String to replace sensitive values

    Returns:
        New dictionary with sensitive values redacted
    """
    result: dict[str, Any] = {}

    for key, value in data.items():
        if is_sensitive_key(key):
            result[key] = redaction_marker
        elif isinstance(value, dict):
            result[key] = redact_sensitive_values(value, redaction_marker)
        elif key == "base_url" and isinstance(value, str):
            result[key] = _strip_userinfo(value)
        else:
            result[key] = value

    return result


def _strip_userinfo(url: str) -> str:
    scheme, sep, rest = url.partition("://")
    if not sep or "@" not in rest.split("/", 1)[0]:
        return url
    return f"{scheme}://{rest.split('@', 1)[1]}"


def get_safe_config() -> dict[str, Any]:
    """Configuration with sensitive values redacted, for /info."""
    return redact_sensitive_values(get_settings().model_dump(), REDACTION_MARKER)
