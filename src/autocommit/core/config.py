"""Application configuration management.

Handles loading and validating configuration from multiple sources:
    - Environment variables (ANTHROPIC_API_KEY, OPENAI_API_KEY, AUTOCOMMIT_*)
    - A .env file in the working directory
    - An optional TOML/JSON config file
    - Default values

Key components:
    - AppConfig: Main configuration model
    - load_config(): Safe config loading with fallback
    - ConfigLoadResult: Metadata about config source

The loaded AppConfig is built once at startup and passed explicitly to
every component that needs it.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from autocommit.core.result import ConfigurationError

CONFIG_ENV_VAR = "AUTOCOMMIT_CONFIG"
DEFAULT_MODEL = "claude-sonnet-4-20250514"


class AppConfig(BaseSettings):
    """Application-wide configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AUTOCOMMIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    anthropic_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("ANTHROPIC_API_KEY", "anthropic_api_key"),
        description="API key for Anthropic models.",
    )
    openai_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "openai_api_key"),
        description="API key for OpenAI models.",
    )
    model: str = Field(default=DEFAULT_MODEL, description="Model used for generation.")
    max_diff_size: int = Field(
        default=8000, gt=0, description="Byte ceiling for staged diffs sent to the model."
    )
    commit_max_tokens: int = Field(
        default=256, gt=0, description="Output token budget for commit messages."
    )
    pr_max_tokens: int = Field(
        default=1024, gt=0, description="Output token budget for PR content."
    )
    log_level: str = Field(default="WARNING", description="Log level for autocommit output.")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
    ]:
        # Ensure environment variables override config file entries.
        return (env_settings, init_settings, dotenv_settings, file_secret_settings)

    def api_key_for(self, provider: str) -> str:
        """Return the API key for *provider* or raise ConfigurationError."""
        key = self.anthropic_api_key if provider == "anthropic" else self.openai_api_key
        if key is None or not key.get_secret_value():
            env_name = "ANTHROPIC_API_KEY" if provider == "anthropic" else "OPENAI_API_KEY"
            raise ConfigurationError(
                f"{env_name} environment variable is required. "
                "Please set it in your .env file or environment."
            )
        return key.get_secret_value()


@dataclass
class ConfigLoadResult:
    path: Path
    file_loaded: bool
    env_overrides: set[str]
    error: str | None = None


def _resolve_config_path(config_path: Path | None, env_vars: Mapping[str, str]) -> Path:
    candidate = config_path or env_vars.get(CONFIG_ENV_VAR) or (Path.home() / ".autocommit.toml")
    return Path(candidate).expanduser()


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}

    raw = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    parser = json.loads if suffix == ".json" else tomllib.loads

    try:
        data = parser(raw)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigurationError(f"Syntax error in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config root in {path} must be a mapping.")

    return data


def _detect_env_overrides(env_vars: Mapping[str, str]) -> set[str]:
    """Detect which fields are set through environment variables."""
    prefix = AppConfig.model_config.get("env_prefix", "")
    overrides: set[str] = set()
    for name, field in AppConfig.model_fields.items():
        alias = field.validation_alias
        if isinstance(alias, AliasChoices):
            keys = [str(choice) for choice in alias.choices]
        else:
            keys = [f"{prefix}{name}"]
        if any(key.upper() in env_vars for key in keys):
            overrides.add(name)
    return overrides


def load_config(config_path: Path | None = None) -> tuple[AppConfig, ConfigLoadResult]:
    """
    Load configuration with Safe Mode fallback.
    If the file is invalid, returns env/default config + error message.
    """
    env_vars: Mapping[str, str] = os.environ
    resolved_path = _resolve_config_path(config_path, env_vars)
    env_overrides = _detect_env_overrides(env_vars)

    error: str | None = None
    file_loaded = False
    file_data: dict[str, Any] = {}

    try:
        file_data = _read_config_file(resolved_path)
        file_loaded = resolved_path.exists()
    except ConfigurationError as exc:
        error = str(exc)

    try:
        config = AppConfig(**file_data)
    except ValidationError as exc:
        error = str(exc)
        try:
            config = AppConfig()
        except ValidationError as env_exc:
            raise ConfigurationError(f"Invalid configuration: {env_exc}") from env_exc

    load_result = ConfigLoadResult(
        path=resolved_path,
        file_loaded=file_loaded,
        env_overrides=env_overrides,
        error=error,
    )

    return config, load_result


__all__ = [
    "AppConfig",
    "CONFIG_ENV_VAR",
    "ConfigLoadResult",
    "DEFAULT_MODEL",
    "load_config",
]
