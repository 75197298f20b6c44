"""Run statistics owned by the volume generation engine.

``RunStats`` is the single mutable record of a run. Only the engine (and the
orchestrator acting on its behalf) mutates it, through :meth:`RunStats.record_step`;
every other reader works from an immutable :class:`StatsSnapshot`.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping

from volume_bot.core.types import TradeAction, TradeResult


def parse_gas(value: Any) -> int:
    """Gas as reported by a backend; anything non-numeric counts as zero."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        try:
            return int(float(str(value).strip()))
        except (TypeError, ValueError, OverflowError):
            return 0


@dataclass(frozen=True)
class StatsSnapshot:
    """Immutable view of :class:`RunStats` at one point in time."""

    total_trades: int
    successful_trades: int
    failed_trades: int
    total_volume: float
    total_gas_used: int
    current_position: float
    profit_loss: float
    start_time: datetime
    patterns_used: Mapping[str, int]

    @property
    def success_rate(self) -> float | None:
        if self.total_trades == 0:
            return None
        return self.successful_trades / self.total_trades * 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_trades": self.total_trades,
            "successful_trades": self.successful_trades,
            "failed_trades": self.failed_trades,
            "total_volume": self.total_volume,
            "total_gas_used": str(self.total_gas_used),
            "current_position": self.current_position,
            "profit_loss": self.profit_loss,
            "start_time": self.start_time.isoformat(),
            "patterns_used": dict(self.patterns_used),
        }


@dataclass
class RunStats:
    start_time: datetime
    total_trades: int = 0
    successful_trades: int = 0
    failed_trades: int = 0
    total_volume: float = 0.0
    total_gas_used: int = 0
    current_position: float = 0.0
    profit_loss: float = 0.0
    patterns_used: Counter[str] = field(default_factory=Counter)

    def record_step(self, pattern: str, result: TradeResult) -> None:
        """Apply one executed step.

        Counts, volume, gas and pattern usage move on every step; position and
        realized P&L only move when the trade succeeded.
        """
        self.total_trades += 1
        self.total_volume += result.amount
        self.total_gas_used += parse_gas(result.gas_used)
        self.patterns_used[pattern] += 1

        if result.success:
            self.successful_trades += 1
            if result.action is TradeAction.BUY:
                self.current_position += result.amount
            else:
                self.current_position -= result.amount
            self.profit_loss -= result.fee
        else:
            self.failed_trades += 1

    def reset(self, start_time: datetime) -> None:
        self.start_time = start_time
        self.total_trades = 0
        self.successful_trades = 0
        self.failed_trades = 0
        self.total_volume = 0.0
        self.total_gas_used = 0
        self.current_position = 0.0
        self.profit_loss = 0.0
        self.patterns_used.clear()

    def snapshot(self) -> StatsSnapshot:
        return StatsSnapshot(
            total_trades=self.total_trades,
            successful_trades=self.successful_trades,
            failed_trades=self.failed_trades,
            total_volume=self.total_volume,
            total_gas_used=self.total_gas_used,
            current_position=self.current_position,
            profit_loss=self.profit_loss,
            start_time=self.start_time,
            patterns_used=MappingProxyType(dict(self.patterns_used)),
        )


__all__ = ["RunStats", "StatsSnapshot", "parse_gas"]
