"""Trade metrics, threshold alerts and run reporting."""

from .alert_types import Alert, AlertSeverity, AlertType
from .alerts import AlertEngine
from .metrics_collector import MetricsCollector, MetricsExport, PerformanceMetrics, TradeLog
from .report import render_run_report

__all__ = [
    "Alert",
    "AlertEngine",
    "AlertSeverity",
    "AlertType",
    "MetricsCollector",
    "MetricsExport",
    "PerformanceMetrics",
    "TradeLog",
    "render_run_report",
]
