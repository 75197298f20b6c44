"""Load a :class:`VolumeBotConfig` from YAML/JSON files or plain mappings."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from volume_bot.config.schemas import VolumeBotConfig
from volume_bot.errors import ConfigurationError
from volume_bot.utilities.logging_patterns import get_logger

logger = get_logger(__name__, component="config")


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "config"
        parts.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "; ".join(parts)


def config_from_mapping(data: Mapping[str, Any], *, source: str = "mapping") -> VolumeBotConfig:
    """Validate a mapping into a config, raising :class:`ConfigurationError` on failure."""
    try:
        return VolumeBotConfig.model_validate(dict(data))
    except ValidationError as e:
        first_key = None
        errors = e.errors()
        if errors and errors[0].get("loc"):
            first_key = str(errors[0]["loc"][0])
        raise ConfigurationError(
            f"Invalid volume-bot configuration from {source}: {_format_validation_error(e)}",
            config_key=first_key,
            original_error=e,
        ) from e


def load_config(path: str | Path | None = None) -> VolumeBotConfig:
    """Load configuration from ``path``; defaults when ``path`` is ``None``.

    ``.json`` files are parsed as JSON, everything else as YAML.  An empty file yields the
    defaults.
    """
    if path is None:
        logger.debug("No config file given, using defaults")
        return VolumeBotConfig()

    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(
            f"Config file not found: {config_path}", config_key="config_path"
        )

    try:
        with open(config_path, encoding="utf-8") as f:
            if config_path.suffix == ".json":
                raw = json.load(f)
            else:
                raw = yaml.safe_load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Failed to read config file {config_path}: {e}",
            config_key="config_path",
            original_error=e,
        ) from e

    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ConfigurationError(
            f"Config file {config_path} must contain a mapping, got {type(raw).__name__}",
            config_key="config_path",
        )

    config = config_from_mapping(raw, source=str(config_path))
    logger.info(
        f"Loaded configuration from {config_path}",
        config_path=str(config_path),
        pattern_count=len(config.patterns),
    )
    return config


__all__ = ["config_from_mapping", "load_config"]
