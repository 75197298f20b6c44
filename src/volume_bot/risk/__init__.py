"""Risk monitoring."""

from .monitor import CLEAR, RiskBreach, RiskDecision, RiskMonitor

__all__ = ["CLEAR", "RiskBreach", "RiskDecision", "RiskMonitor"]
