"""Configuration management with Pydantic Settings + optional YAML."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_config_dir() -> Path:
    env = os.environ.get("ROCKETLETS_CONFIG_DIR")
    if env:
        return Path(env)
    if sys.platform == "win32":
        return Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming")) / "rocketlets"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "rocketlets"
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "rocketlets"


class ProxyConfig(BaseModel):
    timeout_ms: int = Field(default=100, gt=0)
    # Top-level module names rocketlets may require()
    allowed_modules: list[str] = Field(
        default_factory=lambda: ["datetime", "json", "math", "re", "string"]
    )

    @property
    def timeout(self) -> float:
        return self.timeout_ms / 1000


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ROCKETLETS_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    proxy: ProxyConfig = Field(default_factory=ProxyConfig)
    log_level: str = "INFO"
    log_json: bool = False


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from env vars, optionally overlaying a YAML config."""
    yaml_data: dict[str, Any] = {}

    # Determine config file path
    if config_path is None:
        config_path = os.environ.get("ROCKETLETS_CONFIG")
    if config_path is None:
        default = get_config_dir() / "config.yaml"
        if default.exists():
            config_path = default

    # Load YAML if found
    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                yaml_data = yaml.safe_load(f) or {}

    if overrides:
        yaml_data = _deep_merge(yaml_data, overrides)

    return Settings(**yaml_data)
