# SPDX-License-Identifier: MIT
"""Engine configuration management.

This module exposes :class:`Settings`, a ``pydantic-settings`` model that
combines values sourced from an optional YAML configuration file and
environment variables. Environment variables take precedence over file-based
values and the merged configuration is validated before use.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import logfire
import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..constants import DEFAULT_UPDATE_CONCURRENCY, ENV_PREFIX, ID_FIELD, VERSION_FIELD


class Settings(BaseSettings):
    """Migration engine settings."""

    version_field: str = Field(
        VERSION_FIELD, min_length=1, description="Document field holding the version."
    )
    id_field: str = Field(
        ID_FIELD, min_length=1, description="Identifier field used when persisting."
    )
    missing_version: Literal["zero", "error"] = Field(
        "zero",
        description=(
            "Treatment of documents without a version field: 'zero' migrates them"
            " from version 0, 'error' rejects them before any revision runs."
        ),
    )
    update_concurrency: int = Field(
        DEFAULT_UPDATE_CONCURRENCY,
        ge=1,
        description="Maximum concurrent per-document updater calls in one level.",
    )
    bulk_writes: bool = Field(
        True, description="Persist lists of documents with a single bulk write."
    )
    log_level: Literal[
        "fatal", "error", "warn", "notice", "info", "debug", "trace"
    ] = Field("warn", description="Logging verbosity level for the CLI.")
    logfire_token: str | None = Field(
        None, description="Logfire authentication token, if available.", repr=False
    )

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore")


def _read_config_file(path: Path) -> dict[str, Any]:
    """Return the mapping stored in the YAML file at ``path``."""
    with logfire.span("fs.read_yaml", attributes={"path": str(path)}):
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise RuntimeError(f"Invalid configuration file {path}: {exc}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise RuntimeError(f"Configuration file {path} must contain a mapping")
        return data


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load and validate engine settings.

    Values are read from ``config_path`` when given and then merged with
    ``LAZY_SCHEMA_*`` environment variables. When a value is provided in both
    sources the environment variable wins.

    Args:
        config_path: Optional path to a YAML configuration file.

    Returns:
        Settings: Fully validated configuration.

    Raises:
        FileNotFoundError: If ``config_path`` does not exist.
        RuntimeError: If the file or any configuration value is invalid.
    """
    file_values = _read_config_file(Path(config_path)) if config_path else {}
    env_keys = {key.upper() for key in os.environ}
    # Keys also set in the environment are left for pydantic-settings to read.
    overrides = {
        key: value
        for key, value in file_values.items()
        if f"{ENV_PREFIX}{key}".upper() not in env_keys
    }
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        # Summarise validation issues so the caller receives clear feedback.
        details = "; ".join(
            f"{'.'.join(map(str, error['loc']))}: {error['msg']}"
            for error in exc.errors()
        )
        raise RuntimeError(f"Invalid configuration: {details}") from exc


__all__ = ["Settings", "load_settings"]
