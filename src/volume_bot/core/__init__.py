"""Core domain types for the volume generation engine."""

from .stats import RunStats, StatsSnapshot, parse_gas
from .types import (
    ExecutionMode,
    PatternType,
    RiskLevel,
    TradeAction,
    TradeResult,
    TradeStep,
    TradingPattern,
)

__all__ = [
    "ExecutionMode",
    "PatternType",
    "RiskLevel",
    "TradeAction",
    "TradeResult",
    "TradeStep",
    "TradingPattern",
    "RunStats",
    "StatsSnapshot",
    "parse_gas",
]
