"""
User configuration for cchistory.

Config file: ~/.config/cchistory/config.yaml

    export_dir: ~/cchistory/exports
    date_format: "%Y/%m/%d %H:%M:%S"
    max_preview_length: 100
    max_result_length: 3000
    allowed_base_path: null         # optional, defaults to the home directory

A missing file is created with the defaults. An unreadable or invalid file is
ignored (with a warning) and the defaults are used instead.

Environment variables:
- $CCHISTORY_EXPORT_DIR: overrides the default export directory
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from cchistory.blocks import DEFAULT_MAX_RESULT_LENGTH
from cchistory.paths import get_config_path

logger = logging.getLogger(__name__)


def default_export_dir() -> str:
    return os.environ.get("CCHISTORY_EXPORT_DIR") or str(Path.home() / "cchistory" / "exports")


class Config(BaseModel):
    """Validated cchistory settings."""

    export_dir: str = Field(default_factory=default_export_dir)
    date_format: str = Field("%Y/%m/%d %H:%M:%S", description="strftime format for listings.")
    max_preview_length: int = Field(100, gt=0)
    max_result_length: int = Field(
        DEFAULT_MAX_RESULT_LENGTH, gt=0, description="Characters of tool output to keep."
    )
    allowed_base_path: str | None = Field(
        None, description="Exports must stay inside this directory (default: home)."
    )


def _write_default_config(path: Path, config: Config) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config.model_dump(exclude_none=True), f, sort_keys=False)


def load_config(path: Path | None = None) -> Config:
    """
    Load configuration from YAML, creating the file with defaults if needed.

    Args:
        path: Config file location (default: ~/.config/cchistory/config.yaml)

    Returns:
        Config: Loaded settings, or defaults if the file is unusable
    """
    config_path = path or get_config_path()
    defaults = Config()

    if not config_path.exists():
        try:
            _write_default_config(config_path, defaults)
            logger.info("Created config file: %s", config_path)
        except OSError as e:
            logger.warning("Could not write default config to %s: %s", config_path, e)
        return defaults

    try:
        with open(config_path, encoding="utf-8") as f:
            data: Any = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError("top level must be a mapping")
        return Config.model_validate({**defaults.model_dump(), **data})
    except (OSError, yaml.YAMLError, ValueError, ValidationError) as e:
        logger.warning("Failed to load config from %s, using defaults: %s", config_path, e)
        return defaults
