"""
Centralized error handling for volume-bot.

Two error classes exist: trade execution faults, which are converted into failed trade
results at the step boundary and only abort the current pattern, and startup faults,
which are fatal and abort the run before any trade is dispatched.
"""

from __future__ import annotations

import sys
import traceback
from datetime import datetime
from enum import Enum
from typing import Any

from volume_bot.utilities.time_provider import get_clock


def _capture_traceback() -> str:
    """Return the active traceback or an empty string when not handling an exception."""

    exc_type, exc_value, exc_tb = sys.exc_info()
    if exc_type is not None and exc_tb is not None:
        return "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
    return ""


class ErrorKind(str, Enum):
    """Closed set of error kinds raised by the engine."""

    TRADE_EXECUTION = "TRADE_EXECUTION"
    STARTUP = "STARTUP"


class VolumeBotError(Exception):
    """Base exception class for all volume-bot errors"""

    kind: ErrorKind = ErrorKind.STARTUP

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        recoverable: bool = True,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.recoverable = recoverable
        self.timestamp: datetime = get_clock().now_utc()
        self.traceback = _capture_traceback()
        self.original_error = original_error

    def add_context(self, **kwargs: Any) -> VolumeBotError:
        """Add additional context to the error"""
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization"""
        return {
            "kind": self.kind.value,
            "error_type": type(self).__name__,
            "message": self.message,
            "context": self.context,
            "recoverable": self.recoverable,
            "timestamp": self.timestamp.isoformat(),
            "original_error": repr(self.original_error) if self.original_error else None,
        }

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} ({details})"


class TradeExecutionError(VolumeBotError):
    """Raised when a single buy or sell could not be executed"""

    kind = ErrorKind.TRADE_EXECUTION

    def __init__(
        self,
        message: str,
        *,
        pattern: str | None = None,
        step_index: int | None = None,
        action: str | None = None,
        amount: float | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, recoverable=True, **kwargs)
        for key, value in (
            ("pattern", pattern),
            ("step_index", step_index),
            ("action", action),
            ("amount", amount),
        ):
            if value is not None:
                self.context.setdefault(key, value)


class StartupError(VolumeBotError):
    """Raised when the run cannot start (backend unreachable, bad credentials, bad config)"""

    kind = ErrorKind.STARTUP

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("recoverable", False)
        super().__init__(message, **kwargs)


class ConfigurationError(StartupError):
    """Raised when there are configuration issues"""

    def __init__(self, message: str, config_key: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        if config_key:
            self.add_context(config_key=config_key)


__all__ = [
    "ErrorKind",
    "VolumeBotError",
    "TradeExecutionError",
    "StartupError",
    "ConfigurationError",
]
