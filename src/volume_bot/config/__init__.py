"""Engine configuration: validated schemas, YAML loading and environment settings."""

from .loader import config_from_mapping, load_config
from .schemas import (
    AlertThresholds,
    RiskThresholds,
    TradeStepSchema,
    TradingPatternSchema,
    VolumeBotConfig,
)
from .settings import Settings, get_settings

__all__ = [
    "AlertThresholds",
    "RiskThresholds",
    "TradeStepSchema",
    "TradingPatternSchema",
    "VolumeBotConfig",
    "config_from_mapping",
    "load_config",
    "Settings",
    "get_settings",
]
