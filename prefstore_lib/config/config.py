"""Store configuration loaded from a YAML file.

Example ``data/config/prefstore_config.yml``::

    backend: single_file
    file_path: data/prefs/preferences.yml
    caching_enabled: true
    log_level: debug
"""
from __future__ import annotations
import logging
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, ValidationError, field_validator, model_validator

from prefstore_lib.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("data/config/prefstore_config.yml")


class StoreConfig(BaseModel):
    backend: Literal["file", "single_file", "memory"] = "file"
    data_dir: str = "./data/prefs"
    file_path: Optional[str] = None
    serializer: Optional[Literal["text", "pickle", "json", "yaml"]] = None
    caching_enabled: bool = True
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {v!r}")
        return level

    @model_validator(mode="after")
    def _serializer_fits_backend(self) -> "StoreConfig":
        # The single file holds a mapping of fields, which plain text cannot carry
        if self.backend == "single_file" and self.serializer == "text":
            raise ValueError("serializer 'text' cannot store the single_file mapping; use yaml, json or pickle")
        return self


def load_config(path: Optional[Path | str] = None, **overrides: Any) -> StoreConfig:
    """Read a `StoreConfig` from YAML; a missing file gives the defaults.

    Keyword overrides whose value is not None replace values from the file.
    """
    cfg_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    data: Any = {}
    if cfg_path.exists():
        try:
            with cfg_path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid config format in {cfg_path}: parse error") from e
        if not isinstance(data, dict):
            raise ConfigError(f"invalid config format in {cfg_path}: expected mapping")
        logger.debug("Loaded config from %s", cfg_path)
    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return StoreConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid config in {cfg_path}: {e}") from e
