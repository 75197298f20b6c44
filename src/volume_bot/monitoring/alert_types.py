from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class AlertSeverity(Enum):
    """Alert severity levels raised by the alert engine."""

    WARNING = "warning"
    CRITICAL = "critical"


class AlertType(str, Enum):
    """Which threshold an alert reports on."""

    SUCCESS_RATE = "success_rate"
    FAILURE_RATE = "failure_rate"
    GAS_EFFICIENCY = "gas_efficiency"
    POSITION_SIZE = "position_size"


@dataclass(frozen=True, slots=True)
class Alert:
    """One threshold breach, appended to the alert log."""

    type: AlertType
    severity: AlertSeverity
    message: str
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }


__all__ = ["Alert", "AlertSeverity", "AlertType"]
