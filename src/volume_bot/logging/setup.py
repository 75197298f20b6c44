"""Centralized logging setup for volume-bot."""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

from volume_bot.logging.json_formatter import StructuredJSONFormatter

DEFAULT_LOG_DIR = Path("var/logs")
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
JSON_LOGGER_NAME = "volume_bot.json"


def _env_flag(name: str, default: str = "0") -> bool:
    raw_value = os.environ.get(name, default)
    return str(raw_value).strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw_value = os.environ.get(name)
    if raw_value is None or not raw_value.strip():
        return default
    return int(raw_value)


def _rotating_handler(path: Path, level: int, max_bytes: int, backups: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backups)
    handler.setLevel(level)
    return handler


def configure_logging(log_dir: Path | str | None = None, *, console: bool = True) -> Path:
    """
    Configure console output plus rotating text and JSON-lines log files.

    Args:
        log_dir: Target directory; falls back to ``VOLUME_BOT_LOG_DIR`` then ``var/logs``.
        console: Attach a console StreamHandler when none is present.

    Returns:
        The directory the log files are written to.
    """

    env_dir = os.environ.get("VOLUME_BOT_LOG_DIR")
    resolved_dir = Path(log_dir) if log_dir else Path(env_dir) if env_dir else DEFAULT_LOG_DIR
    resolved_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    existing_targets = {getattr(handler, "baseFilename", None) for handler in root.handlers}

    if console:
        console_handlers = [
            h
            for h in root.handlers
            if isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
            and type(h).__name__ not in {"LogCaptureHandler", "_LiveLoggingNullHandler"}
        ]
        if not console_handlers:
            stream = logging.StreamHandler()
            stream.setLevel(logging.INFO)
            stream.setFormatter(logging.Formatter(CONSOLE_FORMAT))
            root.addHandler(stream)

    max_bytes = _env_int("VOLUME_BOT_LOG_MAX_BYTES", 50 * 1024 * 1024)
    backups = _env_int("VOLUME_BOT_LOG_BACKUP_COUNT", 10)

    text_targets = (
        (resolved_dir / "volume_bot.log", logging.INFO),
        (resolved_dir / "critical_events.log", logging.WARNING),
    )
    for path, level in text_targets:
        if os.path.abspath(path) in existing_targets:
            continue
        handler = _rotating_handler(path, level, max_bytes, backups)
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        root.addHandler(handler)

    # The JSON sink hangs off the package logger so every structured record lands there.
    json_logger = logging.getLogger("volume_bot")
    json_logger.setLevel(logging.DEBUG)
    json_targets = {getattr(handler, "baseFilename", None) for handler in json_logger.handlers}
    json_path = resolved_dir / "volume_bot.jsonl"
    if os.path.abspath(json_path) not in json_targets:
        json_handler = _rotating_handler(json_path, logging.DEBUG, max_bytes, backups)
        json_handler.setFormatter(StructuredJSONFormatter(sort_keys=True))
        json_handler.set_name(JSON_LOGGER_NAME)
        json_logger.addHandler(json_handler)

    if _env_flag("VOLUME_BOT_DEBUG"):
        logging.getLogger("volume_bot.orchestration").setLevel(logging.DEBUG)
        logging.getLogger("volume_bot.execution").setLevel(logging.DEBUG)

    return resolved_dir


__all__ = ["configure_logging", "DEFAULT_LOG_DIR"]
