"""
Per-trade logging and aggregate performance metrics.

The collector keeps one :class:`TradeLog` row per executed step and a running
:class:`PerformanceMetrics` aggregate. Readers always receive deep copies, and the whole
state can be exported to (and re-parsed from) a JSON document.
"""

from __future__ import annotations

import copy
import json
import math
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from volume_bot.core.stats import parse_gas
from volume_bot.core.types import TradeAction, TradeResult
from volume_bot.utilities.logging_patterns import get_logger
from volume_bot.utilities.time_provider import TimeProvider, get_clock

logger = get_logger(__name__, component="metrics_collector")

WEI_PER_UNIT = 1e18
SECONDS_PER_HOUR = 3600


@dataclass(frozen=True, slots=True)
class TradeLog:
    timestamp: datetime
    pattern: str
    action: TradeAction
    amount: float
    success: bool
    tx_id: str
    gas_used: str
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "pattern": self.pattern,
            "action": self.action.value,
            "amount": self.amount,
            "success": self.success,
            "tx_id": self.tx_id,
            "gas_used": self.gas_used,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TradeLog:
        return cls(
            timestamp=datetime.fromisoformat(data["timestamp"]),
            pattern=str(data["pattern"]),
            action=TradeAction(data["action"]),
            amount=float(data["amount"]),
            success=bool(data["success"]),
            tx_id=str(data.get("tx_id", "")),
            gas_used=str(data.get("gas_used", "0")),
            error=data.get("error"),
        )


@dataclass
class PerformanceMetrics:
    """Aggregate view over every logged trade.

    ``success_rate`` stays ``None`` until a trade is logged and ``gas_efficiency``
    stays ``None`` until gas has been spent.
    """

    total_volume: float = 0.0
    total_gas_used: int = 0
    total_trades: int = 0
    successful_trades: int = 0
    failed_trades: int = 0
    average_trade_time_ms: float = 0.0
    patterns_used: dict[str, int] = field(default_factory=dict)
    hourly_volume: dict[int, float] = field(default_factory=dict)
    gas_efficiency: float | None = None
    success_rate: float | None = None
    profit_loss: float = 0.0
    max_drawdown: float = 0.0
    current_drawdown: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_volume": self.total_volume,
            "total_gas_used": self.total_gas_used,
            "total_trades": self.total_trades,
            "successful_trades": self.successful_trades,
            "failed_trades": self.failed_trades,
            "average_trade_time_ms": self.average_trade_time_ms,
            "patterns_used": dict(self.patterns_used),
            # JSON object keys are strings; from_dict converts them back.
            "hourly_volume": {str(hour): volume for hour, volume in self.hourly_volume.items()},
            "gas_efficiency": self.gas_efficiency,
            "success_rate": self.success_rate,
            "profit_loss": self.profit_loss,
            "max_drawdown": self.max_drawdown,
            "current_drawdown": self.current_drawdown,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PerformanceMetrics:
        def _optional(value: Any) -> float | None:
            return None if value is None else float(value)

        return cls(
            total_volume=float(data.get("total_volume", 0.0)),
            total_gas_used=int(data.get("total_gas_used", 0)),
            total_trades=int(data.get("total_trades", 0)),
            successful_trades=int(data.get("successful_trades", 0)),
            failed_trades=int(data.get("failed_trades", 0)),
            average_trade_time_ms=float(data.get("average_trade_time_ms", 0.0)),
            patterns_used={str(k): int(v) for k, v in data.get("patterns_used", {}).items()},
            hourly_volume={int(k): float(v) for k, v in data.get("hourly_volume", {}).items()},
            gas_efficiency=_optional(data.get("gas_efficiency")),
            success_rate=_optional(data.get("success_rate")),
            profit_loss=float(data.get("profit_loss", 0.0)),
            max_drawdown=float(data.get("max_drawdown", 0.0)),
            current_drawdown=float(data.get("current_drawdown", 0.0)),
        )


@dataclass(frozen=True)
class MetricsExport:
    """Parsed form of an exported metrics document."""

    logs: list[TradeLog]
    metrics: PerformanceMetrics
    export_time: datetime


class MetricsCollector:
    def __init__(self, clock: TimeProvider | None = None) -> None:
        self._clock = clock or get_clock()
        self._logs: list[TradeLog] = []
        self._metrics = PerformanceMetrics()
        self._start_time = self._clock.now_utc()
        self._peak_profit_loss = 0.0

    @property
    def start_time(self) -> datetime:
        return self._start_time

    def log_trade(self, result: TradeResult, pattern: str) -> TradeLog:
        """Record one executed step and fold it into the aggregate metrics."""
        entry = TradeLog(
            timestamp=result.timestamp,
            pattern=pattern,
            action=result.action,
            amount=result.amount,
            success=result.success,
            tx_id=result.tx_id,
            gas_used=result.gas_used,
            error=result.error,
        )
        self._logs.append(entry)
        self._update_metrics(entry, result)

        logger.info(
            f"{'OK' if entry.success else 'FAILED'} {entry.action.value.upper()} "
            f"{entry.amount:.6f} | pattern={pattern} | gas={entry.gas_used}",
            pattern=pattern,
            action=entry.action.value,
            amount=entry.amount,
            success=entry.success,
            tx_id=entry.tx_id,
            gas_used=entry.gas_used,
            trade_error=entry.error,
        )
        return entry

    def _update_metrics(self, entry: TradeLog, result: TradeResult) -> None:
        m = self._metrics
        m.total_trades += 1
        m.total_volume += entry.amount
        if entry.success:
            m.successful_trades += 1
        else:
            m.failed_trades += 1

        m.patterns_used[entry.pattern] = m.patterns_used.get(entry.pattern, 0) + 1

        elapsed = (entry.timestamp - self._start_time).total_seconds()
        hour = math.floor(elapsed / SECONDS_PER_HOUR)
        m.hourly_volume[hour] = m.hourly_volume.get(hour, 0.0) + entry.amount

        m.success_rate = m.successful_trades / m.total_trades * 100

        m.total_gas_used += parse_gas(entry.gas_used)
        if m.total_gas_used > 0:
            m.gas_efficiency = m.total_volume / (m.total_gas_used / WEI_PER_UNIT)

        m.average_trade_time_ms += (result.duration_ms - m.average_trade_time_ms) / m.total_trades

        if entry.success:
            m.profit_loss -= result.fee
        self._peak_profit_loss = max(self._peak_profit_loss, m.profit_loss)
        m.current_drawdown = self._peak_profit_loss - m.profit_loss
        m.max_drawdown = max(m.max_drawdown, m.current_drawdown)

    def get_metrics(self) -> PerformanceMetrics:
        return copy.deepcopy(self._metrics)

    def get_logs(self) -> list[TradeLog]:
        return list(self._logs)

    def clear_logs(self) -> None:
        """Drop every log row, reset the metrics and restart the hourly clock."""
        self._logs = []
        self._metrics = PerformanceMetrics()
        self._start_time = self._clock.now_utc()
        self._peak_profit_loss = 0.0

    def export_logs(self) -> str:
        document = {
            "logs": [entry.to_dict() for entry in self._logs],
            "metrics": self._metrics.to_dict(),
            "export_time": self._clock.now_utc().isoformat(),
        }
        return json.dumps(document, indent=2)

    def write_export(self, path: str | Path) -> Path:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.export_logs(), encoding="utf-8")
        logger.info(
            f"Exported {len(self._logs)} trade logs to {target}",
            path=str(target),
            entries=len(self._logs),
        )
        return target

    @staticmethod
    def load_export(text: str) -> MetricsExport:
        """Parse a document produced by :meth:`export_logs`."""
        data = json.loads(text)
        return MetricsExport(
            logs=[TradeLog.from_dict(row) for row in data.get("logs", [])],
            metrics=PerformanceMetrics.from_dict(data.get("metrics", {})),
            export_time=datetime.fromisoformat(data["export_time"]),
        )


__all__ = [
    "MetricsCollector",
    "MetricsExport",
    "PerformanceMetrics",
    "TradeLog",
]
