"""Pattern catalog and weighted selection."""

from .catalog import DEFAULT_PATTERN_WEIGHTS, DEFAULT_PATTERNS, get_pattern
from .selector import PatternSelector, calculate_base_amount

__all__ = [
    "DEFAULT_PATTERNS",
    "DEFAULT_PATTERN_WEIGHTS",
    "get_pattern",
    "PatternSelector",
    "calculate_base_amount",
]
