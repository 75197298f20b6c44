"""Risk limits that halt the volume generation loop."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from volume_bot.config.schemas import RiskThresholds
from volume_bot.core.stats import StatsSnapshot
from volume_bot.utilities.logging_patterns import get_logger

logger = get_logger(__name__, component="risk_monitor")


class RiskBreach(str, Enum):
    FAILURE_LIMIT = "failure_limit"
    POSITION_LIMIT = "position_limit"
    DRAWDOWN_LIMIT = "drawdown_limit"


@dataclass(frozen=True)
class RiskDecision:
    """Outcome of one risk evaluation; truthy when the run must stop."""

    should_stop: bool
    reason: RiskBreach | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.should_stop

    @property
    def message(self) -> str:
        if not self.should_stop or self.reason is None:
            return "within limits"
        return f"{self.reason.value}: " + ", ".join(
            f"{key}={value}" for key, value in self.details.items()
        )


CLEAR = RiskDecision(should_stop=False)


class RiskMonitor:
    """Evaluate a stats snapshot against :class:`RiskThresholds`.

    Checks run in order and the first breach wins:

    1. lifetime failed trades reached ``max_consecutive_losses``
    2. ``|position|`` reached ``emergency_stop_loss``
    3. realized P&L as a percent of volume at or below ``-max_drawdown_percent``
    """

    def __init__(self, thresholds: RiskThresholds | None = None) -> None:
        self.thresholds = thresholds or RiskThresholds()

    def evaluate(self, stats: StatsSnapshot) -> RiskDecision:
        t = self.thresholds

        # Cumulative count, not a streak: successes in between do not reset it.
        if stats.failed_trades >= t.max_consecutive_losses:
            return self._stop(
                RiskBreach.FAILURE_LIMIT,
                failed_trades=stats.failed_trades,
                limit=t.max_consecutive_losses,
            )

        if abs(stats.current_position) >= t.emergency_stop_loss:
            return self._stop(
                RiskBreach.POSITION_LIMIT,
                position=stats.current_position,
                limit=t.emergency_stop_loss,
            )

        if stats.total_volume > 0:
            drawdown_percent = stats.profit_loss / stats.total_volume * 100
            if drawdown_percent <= -t.max_drawdown_percent:
                return self._stop(
                    RiskBreach.DRAWDOWN_LIMIT,
                    drawdown_percent=round(drawdown_percent, 4),
                    limit=t.max_drawdown_percent,
                )

        return CLEAR

    def _stop(self, reason: RiskBreach, **details: Any) -> RiskDecision:
        decision = RiskDecision(should_stop=True, reason=reason, details=details)
        logger.warning(f"Risk limit breached: {decision.message}", breach=reason.value, **details)
        return decision


__all__ = ["RiskMonitor", "RiskDecision", "RiskBreach", "CLEAR"]
