"""Core value types shared by the engine, executors and monitoring."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class TradeAction(str, Enum):
    """Direction of a single trade step."""

    BUY = "buy"
    SELL = "sell"

    @property
    def sign(self) -> int:
        """+1 for buys, -1 for sells (position contribution)."""
        return 1 if self is TradeAction.BUY else -1


class RiskLevel(str, Enum):
    """Qualitative risk label attached to a pattern."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PatternType(str, Enum):
    """Type tags of the built-in pattern catalog."""

    BUY_BUY_BUY = "buy-buy-buy"
    SELL_SELL_BUY = "sell-sell-buy"
    SELL_BUY_SELL = "sell-buy-sell"
    BUY_SELL_BUY = "buy-sell-buy"
    MIXED_RANDOM = "mixed-random"
    VOLUME_SPIKE = "volume-spike"
    STEALTH_MODE = "stealth-mode"


class ExecutionMode(str, Enum):
    """Venue the asset currently trades on; fixed for a run once queried."""

    PRE_LISTING = "pre_listing"
    POST_LISTING = "post_listing"


@dataclass(frozen=True)
class TradeStep:
    """One buy or sell inside a pattern, sized as a percent of the pattern's base amount."""

    action: TradeAction
    amount_percent: float
    delay_ms: int = 0

    def __post_init__(self) -> None:
        # Percents above 100 are allowed for spike patterns.
        if self.amount_percent <= 0:
            raise ValueError(f"amount_percent must be positive, got {self.amount_percent}")
        if self.delay_ms < 0:
            raise ValueError(f"delay_ms must be non-negative, got {self.delay_ms}")
        object.__setattr__(self, "action", TradeAction(self.action))

    def amount_for(self, base_amount: float) -> float:
        return base_amount * (self.amount_percent / 100)


@dataclass(frozen=True)
class TradingPattern:
    """Named, ordered sequence of trade steps."""

    type: str
    steps: tuple[TradeStep, ...]
    description: str = ""
    risk_level: RiskLevel = RiskLevel.MEDIUM

    def __post_init__(self) -> None:
        if not self.steps:
            raise ValueError(f"pattern {self.type!r} must contain at least one step")
        object.__setattr__(self, "steps", tuple(self.steps))
        object.__setattr__(self, "risk_level", RiskLevel(self.risk_level))
        if isinstance(self.type, PatternType):
            object.__setattr__(self, "type", self.type.value)

    @property
    def name(self) -> str:
        return str(self.type)

    @property
    def total_percent(self) -> float:
        return sum(step.amount_percent for step in self.steps)


@dataclass(frozen=True, slots=True)
class TradeResult:
    """Outcome of one executed trade step."""

    success: bool
    tx_id: str
    amount: float
    action: TradeAction
    timestamp: datetime
    gas_used: str = "0"
    error: str | None = None
    fee: float = 0.0
    duration_ms: float = 0.0
    step_index: int | None = None
    error_context: dict[str, Any] = field(default_factory=dict)

    @property
    def signed_amount(self) -> float:
        """Position contribution of this result (zero when the trade failed)."""
        return self.action.sign * self.amount if self.success else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "tx_id": self.tx_id,
            "amount": self.amount,
            "action": self.action.value,
            "timestamp": self.timestamp.isoformat(),
            "gas_used": self.gas_used,
            "error": self.error,
            "fee": self.fee,
            "duration_ms": self.duration_ms,
            "step_index": self.step_index,
            "error_context": dict(self.error_context),
        }


__all__ = [
    "TradeAction",
    "RiskLevel",
    "PatternType",
    "ExecutionMode",
    "TradeStep",
    "TradingPattern",
    "TradeResult",
]
