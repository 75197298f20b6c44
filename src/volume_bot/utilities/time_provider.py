"""Clock abstractions for deterministic time handling.

The engine, metrics collector and alert engine stamp every trade and alert through the
active clock so tests can pin wall time and measure elapsed hours without sleeping.
"""

from __future__ import annotations

import time as time_module
from datetime import UTC, datetime, timedelta
from typing import Protocol, runtime_checkable


def utc_now() -> datetime:
    """Return current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def _normalize_to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@runtime_checkable
class TimeProvider(Protocol):
    """Protocol for retrieving current time values."""

    def now_utc(self) -> datetime:
        """Return the current UTC time as a timezone-aware datetime."""

    def time(self) -> float:
        """Return the current Unix timestamp (seconds since epoch)."""

    def monotonic(self) -> float:
        """Return a monotonic clock value for measuring durations."""


class SystemClock:
    """Clock backed by the system time sources."""

    def now_utc(self) -> datetime:
        return utc_now()

    def time(self) -> float:
        return time_module.time()

    def monotonic(self) -> float:
        return time_module.monotonic()


class FakeClock:
    """Deterministic clock for tests that can be advanced or reset."""

    def __init__(
        self,
        start_datetime: datetime | None = None,
        *,
        start_monotonic: float | None = None,
    ) -> None:
        now = _normalize_to_utc(start_datetime) if start_datetime else utc_now()
        self._now = now
        self._monotonic = float(start_monotonic if start_monotonic is not None else now.timestamp())

    def now_utc(self) -> datetime:
        return self._now

    def time(self) -> float:
        return self._now.timestamp()

    def monotonic(self) -> float:
        return self._monotonic

    def set_datetime(self, value: datetime) -> None:
        self._now = _normalize_to_utc(value)
        self._monotonic = float(self._now.timestamp())

    def advance(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError("advance() requires a non-negative duration")
        delta = float(seconds)
        self._now = self._now + timedelta(seconds=delta)
        self._monotonic += delta


_default_clock = SystemClock()
_clock: TimeProvider = _default_clock


def get_clock() -> TimeProvider:
    """Return the current active clock implementation."""

    return _clock


def set_clock(clock: TimeProvider) -> None:
    """Override the active clock (useful for deterministic tests)."""

    global _clock
    _clock = clock


def reset_clock() -> None:
    """Reset the active clock to the system clock."""

    global _clock
    _clock = _default_clock


__all__ = [
    "TimeProvider",
    "SystemClock",
    "FakeClock",
    "utc_now",
    "get_clock",
    "set_clock",
    "reset_clock",
]
