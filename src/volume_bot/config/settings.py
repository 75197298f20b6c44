"""Typed process settings backed by environment variables."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import ClassVar

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_ENV_FILES: tuple[Path, ...] = (
    Path(".env"),
    Path("config/.env"),
)


class Settings(BaseSettings):
    """Process configuration loaded from ``VOLUME_BOT_*`` variables and optional `.env` files."""

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="VOLUME_BOT_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    token_address: str | None = Field(
        default=None, description="Address or symbol of the asset to trade."
    )
    config_path: Path | None = Field(
        default=None, description="YAML/JSON file with engine configuration."
    )
    log_dir: Path = Field(
        default=Path("var/logs"),
        description="Directory where runtime logs and exports are written.",
    )
    executor: str = Field(
        default="paper", description="Trade executor backend."
    )
    seed: int | None = Field(
        default=None, description="Seed for pattern selection and sizing randomness."
    )
    listed: bool = Field(
        default=False,
        description="Whether the paper executor reports the asset as listed on the pool.",
    )


def _existing_env_files() -> list[str]:
    return [str(path) for path in _DEFAULT_ENV_FILES if path.exists()]


@lru_cache
def get_settings(_env_files: tuple[str, ...] | None = None) -> Settings:
    """Load settings once per process, respecting `.env` fallbacks.

    ``_env_files`` is part of the cache key, so it must be a tuple.
    """
    env_files = list(_env_files) if _env_files is not None else _existing_env_files()
    if env_files:
        return Settings(_env_file=env_files)
    return Settings()


__all__ = ["Settings", "get_settings"]
