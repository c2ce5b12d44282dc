"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "MDBLOCKS_"
CONFIG_ENV = f"{ENV_PREFIX}CONFIG"


class Settings(BaseModel):
    # A misspelt key in config.yaml is an error, not a silent default.
    model_config = ConfigDict(extra="forbid")

    app_name:         str   = "mdblocks"
    encoding:         str   = Field(default="utf-8", description="Text encoding for document reads and writes")
    log_level:        str   = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR)$")
    lock_timeout:     float = Field(default=5.0, gt=0, description="Seconds to wait for the document map lock")
    echo_window_ms:   int   = Field(default=2000, ge=0, description="Window in which a self-write is treated as an echo")
    echo_retention_s: float = Field(default=10.0, gt=0, description="How long recorded writes are kept")


def _config_path() -> Path:
    return Path(os.getenv(CONFIG_ENV) or CONFIG_FILE)


def _file_settings(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid {path.name}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Invalid {path.name}: expected a mapping, got {type(data).__name__}")
    return data


def _env_settings() -> dict[str, str]:
    """Raw MDBLOCKS_<FIELD> strings; pydantic coerces them to the field types."""
    return {
        name: val
        for name in Settings.model_fields
        if (val := os.getenv(f"{ENV_PREFIX}{name.upper()}"))
    }


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml (or $MDBLOCKS_CONFIG), then MDBLOCKS_<FIELD> env vars, then non-None overrides."""
    data = _file_settings(_config_path())
    data.update(_env_settings())
    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
