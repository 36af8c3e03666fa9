# singleton_registry/config/settings.py
"""
Typed configuration for singleton registries.

* Loads defaults from `singleton_registry.config.defaults.DEFAULT_CONFIG`
* Overrides with values read from `config.yaml` in the working directory
* Overrides with `SINGLETON_*` environment variables (a `.env` file is honoured)
* Allows optional in-memory overrides (useful for tests)
* Exposes values through a Pydantic model called `AppConfig`
* Provides a global `settings` object loaded at import time
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from singleton_registry.config.defaults import CONFLICT_POLICIES, DEFAULT_CONFIG, ENV_PREFIX
from singleton_registry.utils.exceptions import ConfigurationError

# --------------------------------------------------------------------------- #
# Helpers                                                                     #
# --------------------------------------------------------------------------- #

CONFIG_FILENAME = "config.yaml"


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML file; return an empty dict if the file is missing/empty."""
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping, got {type(data).__name__}")
    # Accept both a flat file and one nested under a 'settings' key
    if isinstance(data.get("settings"), dict):
        data = {**data, **data.pop("settings")}
    return data


def _env_to_dict() -> Dict[str, Any]:
    """Collect SINGLETON_* environment variables with the prefix stripped."""
    return {
        k[len(ENV_PREFIX):]: v
        for k, v in os.environ.items()
        if k.startswith(ENV_PREFIX)
    }


def _normalise_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    return {str(k).lower(): v for k, v in data.items()}


# --------------------------------------------------------------------------- #
# Pydantic model                                                              #
# --------------------------------------------------------------------------- #


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    # ---- registry behaviour ---------------------------------------------- #
    strategy: str = Field(default=DEFAULT_CONFIG["STRATEGY"])
    conflict_policy: str = Field(default=DEFAULT_CONFIG["CONFLICT_POLICY"])
    # ---- logging ---------------------------------------------------------- #
    log_level: str = Field(default=DEFAULT_CONFIG["LOG_LEVEL"])
    log_to_file: bool = Field(default=DEFAULT_CONFIG["LOG_TO_FILE"])
    log_dir: str = Field(default=DEFAULT_CONFIG["LOG_DIR"])

    @field_validator("strategy", "conflict_policy", "log_level")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @field_validator("conflict_policy")
    @classmethod
    def _check_policy(cls, value: str) -> str:
        value = value.lower()
        if value not in CONFLICT_POLICIES:
            raise ValueError(f"conflict_policy must be one of {CONFLICT_POLICIES}, got {value!r}")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {value!r}")
        return value

    # ---- dict-like helpers ------------------------------------------------ #
    def __getitem__(self, item: str) -> Any:  # noqa: Dunder
        return getattr(self, item.lower())

    def get(self, item: str, default: Any | None = None) -> Any:  # noqa: A003
        return getattr(self, item.lower(), default)


# --------------------------------------------------------------------------- #
# Public loader                                                               #
# --------------------------------------------------------------------------- #


def load_settings(
    overrides: Optional[Dict[str, Any]] = None,
    config_path: Optional[Path] = None,
) -> AppConfig:
    """
    Build an ``AppConfig`` by merging:

    1.  ``DEFAULT_CONFIG``                         (hard-coded defaults)
    2.  Values from ``config.yaml``                (working-directory overrides)
    3.  ``SINGLETON_*`` environment variables      (.env, shell)
    4.  *overrides* dict passed in programmatically (tests / cli flags)

    Later items win on conflict.
    """
    load_dotenv(Path.cwd() / ".env")
    path = config_path if config_path is not None else Path.cwd() / CONFIG_FILENAME

    merged = _normalise_keys(DEFAULT_CONFIG)
    merged.update(_normalise_keys(_load_yaml(path)))
    merged.update(_normalise_keys(_env_to_dict()))
    if overrides:
        merged.update(_normalise_keys(overrides))

    try:
        return AppConfig(**merged)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid singleton registry settings: {exc}") from exc


# --------------------------------------------------------------------------- #
# Global settings, initialized immediately                                    #
# --------------------------------------------------------------------------- #

settings: AppConfig = load_settings()
