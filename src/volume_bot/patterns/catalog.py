"""Built-in trading pattern catalog and its default selection weights."""

from __future__ import annotations

from volume_bot.core.types import PatternType, RiskLevel, TradeAction, TradeStep, TradingPattern

BUY = TradeAction.BUY
SELL = TradeAction.SELL

DEFAULT_PATTERNS: tuple[TradingPattern, ...] = (
    TradingPattern(
        type=PatternType.BUY_BUY_BUY,
        steps=(
            TradeStep(BUY, 30, 2000),
            TradeStep(BUY, 50, 3000),
            TradeStep(BUY, 20, 0),
        ),
        description="Aggressive buying pattern",
        risk_level=RiskLevel.HIGH,
    ),
    TradingPattern(
        type=PatternType.SELL_SELL_BUY,
        steps=(
            TradeStep(SELL, 25, 1500),
            TradeStep(SELL, 35, 2500),
            TradeStep(BUY, 60, 0),
        ),
        description="Sell pressure followed by buy",
        risk_level=RiskLevel.MEDIUM,
    ),
    TradingPattern(
        type=PatternType.SELL_BUY_SELL,
        steps=(
            TradeStep(SELL, 40, 2000),
            TradeStep(BUY, 80, 3000),
            TradeStep(SELL, 40, 0),
        ),
        description="Volatile trading pattern",
        risk_level=RiskLevel.HIGH,
    ),
    TradingPattern(
        type=PatternType.BUY_SELL_BUY,
        steps=(
            TradeStep(BUY, 50, 2000),
            TradeStep(SELL, 30, 2500),
            TradeStep(BUY, 40, 0),
        ),
        description="Buy-sell-buy pattern",
        risk_level=RiskLevel.MEDIUM,
    ),
    TradingPattern(
        type=PatternType.MIXED_RANDOM,
        steps=(
            TradeStep(BUY, 35, 1000),
            TradeStep(SELL, 25, 1500),
            TradeStep(BUY, 30, 2000),
            TradeStep(SELL, 20, 0),
        ),
        description="Mixed random pattern",
        risk_level=RiskLevel.LOW,
    ),
    TradingPattern(
        type=PatternType.VOLUME_SPIKE,
        steps=(
            TradeStep(BUY, 100, 500),
            TradeStep(SELL, 80, 1000),
            TradeStep(BUY, 60, 0),
        ),
        description="High volume spike pattern",
        risk_level=RiskLevel.HIGH,
    ),
    TradingPattern(
        type=PatternType.STEALTH_MODE,
        steps=(
            TradeStep(BUY, 15, 5000),
            TradeStep(SELL, 10, 8000),
            TradeStep(BUY, 12, 0),
        ),
        description="Stealth low-volume pattern",
        risk_level=RiskLevel.LOW,
    ),
)

# Index-aligned with DEFAULT_PATTERNS.
DEFAULT_PATTERN_WEIGHTS: tuple[float, ...] = (0.15, 0.20, 0.15, 0.20, 0.15, 0.10, 0.05)


def get_pattern(pattern_type: str, patterns: tuple[TradingPattern, ...] = DEFAULT_PATTERNS) -> TradingPattern:
    """Look a pattern up by its type tag."""
    key = pattern_type.value if isinstance(pattern_type, PatternType) else str(pattern_type)
    for pattern in patterns:
        if pattern.type == key:
            return pattern
    raise KeyError(f"Unknown pattern type: {pattern_type!r}")


__all__ = ["DEFAULT_PATTERNS", "DEFAULT_PATTERN_WEIGHTS", "get_pattern"]
