"""Pydantic schemas for volume-bot configuration validation."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from volume_bot.core.types import RiskLevel, TradeAction, TradeStep, TradingPattern
from volume_bot.patterns.catalog import DEFAULT_PATTERN_WEIGHTS, DEFAULT_PATTERNS

WEIGHT_SUM_TOLERANCE = 1e-6


class TradeStepSchema(BaseModel):
    """One step of a user-defined pattern."""

    model_config = ConfigDict(extra="forbid")

    action: TradeAction
    amount_percent: float = Field(gt=0)
    delay_ms: int = Field(default=0, ge=0)

    def to_step(self) -> TradeStep:
        return TradeStep(self.action, self.amount_percent, self.delay_ms)


class TradingPatternSchema(BaseModel):
    """User-defined pattern as it appears in a YAML/JSON config file."""

    model_config = ConfigDict(extra="forbid")

    type: str = Field(min_length=1)
    steps: list[TradeStepSchema] = Field(min_length=1)
    description: str = ""
    risk_level: RiskLevel = RiskLevel.MEDIUM

    def to_pattern(self) -> TradingPattern:
        return TradingPattern(
            type=self.type,
            steps=tuple(step.to_step() for step in self.steps),
            description=self.description,
            risk_level=self.risk_level,
        )


class AlertThresholds(BaseModel):
    """Thresholds evaluated by the alert engine after every trade step."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    min_success_rate: float = Field(default=80.0, ge=0, le=100)
    max_failures: int = Field(default=5, ge=0)
    min_gas_efficiency: float = Field(default=0.001, ge=0)
    max_position_size: float = Field(default=0.01, gt=0)


class RiskThresholds(BaseModel):
    """Limits that halt the run when breached."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_drawdown_percent: float = Field(default=15.0, gt=0)
    # Compared against the lifetime failure count, not a streak.
    max_consecutive_losses: int = Field(default=5, ge=1)
    emergency_stop_loss: float = Field(default=0.01, gt=0)


class VolumeBotConfig(BaseModel):
    """Complete engine configuration, validated at construction."""

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    # Trading parameters (base currency)
    min_trade_amount: float = Field(default=0.0001, gt=0)
    max_trade_amount: float = Field(default=0.001, gt=0)
    total_volume_target: float = Field(default=0.01, gt=0)

    # Pattern configuration
    patterns: tuple[TradingPattern, ...] = DEFAULT_PATTERNS
    pattern_weights: tuple[float, ...] = DEFAULT_PATTERN_WEIGHTS

    # Timing configuration
    min_interval_ms: int = Field(default=10_000, ge=0)
    max_interval_ms: int = Field(default=30_000, ge=0)
    burst_mode: bool = False

    # Risk management
    max_drawdown_percent: float = Field(default=15.0, gt=0)
    max_consecutive_losses: int = Field(default=5, ge=1)
    emergency_stop_loss: float = Field(default=0.01, gt=0)

    alert_thresholds: AlertThresholds = Field(default_factory=AlertThresholds)

    @field_validator("patterns", mode="before")
    @classmethod
    def validate_patterns(cls, v: Any) -> tuple[TradingPattern, ...]:
        """Accept pattern objects or their mapping form."""
        if not isinstance(v, (list, tuple)):
            raise PydanticCustomError(
                "patterns_invalid_type",
                "patterns must be a list or tuple, got {type}",
                {"type": type(v).__name__},
            )
        if not v:
            raise PydanticCustomError("patterns_empty", "at least one pattern is required")

        patterns: list[TradingPattern] = []
        for item in v:
            if isinstance(item, TradingPattern):
                patterns.append(item)
            elif isinstance(item, TradingPatternSchema):
                patterns.append(item.to_pattern())
            else:
                patterns.append(TradingPatternSchema.model_validate(item).to_pattern())

        names = [pattern.type for pattern in patterns]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise PydanticCustomError(
                "patterns_duplicate_type",
                "pattern types must be unique, duplicated: {duplicates}",
                {"duplicates": ", ".join(duplicates)},
            )
        return tuple(patterns)

    @field_validator("pattern_weights", mode="before")
    @classmethod
    def validate_pattern_weights(cls, v: Any) -> tuple[float, ...]:
        if not isinstance(v, (list, tuple)):
            raise PydanticCustomError(
                "pattern_weights_invalid_type",
                "pattern_weights must be a list or tuple, got {type}",
                {"type": type(v).__name__},
            )
        try:
            weights = tuple(float(w) for w in v)
        except (TypeError, ValueError) as e:
            raise PydanticCustomError(
                "pattern_weights_invalid",
                "pattern_weights must be numeric: {error}",
                {"error": str(e)},
            ) from e

        negative = [w for w in weights if w < 0 or math.isnan(w)]
        if negative:
            raise PydanticCustomError(
                "pattern_weights_negative",
                "pattern_weights must be non-negative, got {values}",
                {"values": negative},
            )
        return weights

    @model_validator(mode="after")
    def validate_consistency(self) -> VolumeBotConfig:
        errors: list[str] = []

        if len(self.pattern_weights) != len(self.patterns):
            errors.append(
                f"[pattern_weights_length] {len(self.pattern_weights)} weights for "
                f"{len(self.patterns)} patterns"
            )

        weight_sum = math.fsum(self.pattern_weights)
        if not math.isclose(weight_sum, 1.0, abs_tol=WEIGHT_SUM_TOLERANCE):
            errors.append(f"[pattern_weights_sum] weights must sum to 1, got {weight_sum:.6f}")

        if self.min_trade_amount > self.max_trade_amount:
            errors.append(
                f"[trade_amount_range] min_trade_amount ({self.min_trade_amount}) must be <= "
                f"max_trade_amount ({self.max_trade_amount})"
            )

        if self.min_interval_ms > self.max_interval_ms:
            errors.append(
                f"[interval_range] min_interval_ms ({self.min_interval_ms}) must be <= "
                f"max_interval_ms ({self.max_interval_ms})"
            )

        if errors:
            raise ValueError("; ".join(errors))

        return self

    @property
    def risk_thresholds(self) -> RiskThresholds:
        return RiskThresholds(
            max_drawdown_percent=self.max_drawdown_percent,
            max_consecutive_losses=self.max_consecutive_losses,
            emergency_stop_loss=self.emergency_stop_loss,
        )

    def to_summary(self) -> dict[str, Any]:
        """Flat, JSON-friendly view used by the CLI and startup logging."""
        return {
            "min_trade_amount": self.min_trade_amount,
            "max_trade_amount": self.max_trade_amount,
            "total_volume_target": self.total_volume_target,
            "patterns": [pattern.type for pattern in self.patterns],
            "pattern_weights": list(self.pattern_weights),
            "min_interval_ms": self.min_interval_ms,
            "max_interval_ms": self.max_interval_ms,
            "burst_mode": self.burst_mode,
            "risk": self.risk_thresholds.model_dump(),
            "alerts": self.alert_thresholds.model_dump(),
        }


__all__ = [
    "AlertThresholds",
    "RiskThresholds",
    "TradeStepSchema",
    "TradingPatternSchema",
    "VolumeBotConfig",
    "WEIGHT_SUM_TOLERANCE",
]
