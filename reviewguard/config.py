"""Application settings for reviewguard, layered from env, YAML and defaults."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "default.yaml"

DEFAULT_WEAK_SEQUENCES: tuple[str, ...] = ("123456", "abcdef", "qwerty")
DEFAULT_WEAK_WORDS: tuple[str, ...] = ("password", "admin", "user")

AUTH_MAX_ATTEMPTS = 5
AUTH_WINDOW_MS = 15 * 60 * 1000
GENERAL_MAX_ATTEMPTS = 10
GENERAL_WINDOW_MS = 5 * 60 * 1000


class Settings(BaseSettings):
    """Global settings, loadable from RG_-prefixed env vars or a YAML file."""

    model_config = SettingsConfigDict(env_prefix="RG_", env_nested_delimiter="__")

    app_name: str = "reviewguard"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "info"
    api_key: str = ""
    cors_allowed_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
    )
    max_request_body_bytes: int = Field(default=256 * 1024, ge=1)
    # Set only behind a proxy that overwrites this header.
    trusted_client_key_header: str = ""

    max_field_length: int = Field(default=10_000, ge=1)

    auth_max_attempts: int = Field(default=AUTH_MAX_ATTEMPTS, ge=1)
    auth_window_ms: int = Field(default=AUTH_WINDOW_MS, ge=1)
    general_max_attempts: int = Field(default=GENERAL_MAX_ATTEMPTS, ge=1)
    general_window_ms: int = Field(default=GENERAL_WINDOW_MS, ge=1)
    rate_limit_store: Literal["memory", "ttl"] = "memory"
    rate_limit_max_keys: int = Field(default=10_000, ge=1)

    password_min_length: int = Field(default=8, ge=1)
    password_max_length: int = Field(default=128, ge=1)
    weak_sequences: list[str] = Field(
        default_factory=lambda: list(DEFAULT_WEAK_SEQUENCES),
    )
    weak_words: list[str] = Field(
        default_factory=lambda: list(DEFAULT_WEAK_WORDS),
    )

    @field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("debug", "info", "warning", "error", "critical"):
            raise ValueError(f"Invalid log_level: {v!r}")
        return v

    @classmethod
    def from_yaml(cls, path: Path | str | None = None) -> Settings:
        config_path = Path(path) if path else _DEFAULT_CONFIG_PATH
        overrides: dict[str, Any] = {}
        if config_path.exists():
            with open(config_path) as fh:
                raw = yaml.safe_load(fh) or {}
            if not isinstance(raw, dict):
                logger.warning("YAML config at %s is not a mapping, ignoring", config_path)
                raw = {}
            overrides = raw
        else:
            logger.debug("Config file not found at %s, using defaults", config_path)
        return cls(**overrides)


def get_settings(config_path: Path | str | None = None) -> Settings:
    """Factory: returns a Settings instance (from YAML if path given, else env+defaults)."""
    if config_path:
        return Settings.from_yaml(config_path)
    return Settings()


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
