"""
Shared utilities.
"""

from .logging_patterns import get_logger, log_operation
from .time_provider import get_clock, utc_now

__all__ = ["get_logger", "log_operation", "get_clock", "utc_now"]
