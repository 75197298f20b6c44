"""Threshold alerts evaluated after every trade step."""

from __future__ import annotations

from collections.abc import Iterable

from volume_bot.config.schemas import AlertThresholds
from volume_bot.core.stats import StatsSnapshot
from volume_bot.monitoring.alert_types import Alert, AlertSeverity, AlertType
from volume_bot.monitoring.metrics_collector import PerformanceMetrics
from volume_bot.utilities.logging_patterns import get_logger
from volume_bot.utilities.time_provider import TimeProvider, get_clock

logger = get_logger(__name__, component="alerts")


class AlertEngine:
    """Append-only alert log fed by :meth:`check`.

    Every breach appends one alert per evaluation; repeated breaches are not
    de-duplicated. Metrics that are still undefined never alert.
    """

    def __init__(
        self, thresholds: AlertThresholds | None = None, clock: TimeProvider | None = None
    ) -> None:
        self.thresholds = thresholds or AlertThresholds()
        self._clock = clock or get_clock()
        self._alerts: list[Alert] = []

    def check(self, metrics: PerformanceMetrics, stats: StatsSnapshot) -> list[Alert]:
        """Evaluate all thresholds and return the alerts raised by this evaluation."""
        now = self._clock.now_utc()
        t = self.thresholds
        new_alerts: list[Alert] = []

        if metrics.success_rate is not None and metrics.success_rate < t.min_success_rate:
            new_alerts.append(
                Alert(
                    AlertType.SUCCESS_RATE,
                    AlertSeverity.WARNING,
                    f"Success rate dropped to {metrics.success_rate:.1f}%",
                    now,
                )
            )

        if stats.failed_trades > t.max_failures:
            new_alerts.append(
                Alert(
                    AlertType.FAILURE_RATE,
                    AlertSeverity.CRITICAL,
                    f"Too many failed trades: {stats.failed_trades}",
                    now,
                )
            )

        if metrics.gas_efficiency is not None and metrics.gas_efficiency < t.min_gas_efficiency:
            new_alerts.append(
                Alert(
                    AlertType.GAS_EFFICIENCY,
                    AlertSeverity.WARNING,
                    f"Gas efficiency below threshold: {metrics.gas_efficiency:.2f}",
                    now,
                )
            )

        if abs(stats.current_position) > t.max_position_size:
            new_alerts.append(
                Alert(
                    AlertType.POSITION_SIZE,
                    AlertSeverity.CRITICAL,
                    f"Position size exceeded limit: {stats.current_position:.6f}",
                    now,
                )
            )

        self._alerts.extend(new_alerts)
        return new_alerts

    def emit(self, alerts: Iterable[Alert]) -> None:
        for alert in alerts:
            message = f"ALERT [{alert.type.value.upper()}]: {alert.message}"
            if alert.severity is AlertSeverity.CRITICAL:
                logger.critical(message, alert_type=alert.type.value, severity=alert.severity.value)
            else:
                logger.warning(message, alert_type=alert.type.value, severity=alert.severity.value)

    def get_all_alerts(self) -> list[Alert]:
        return list(self._alerts)

    def has_critical(self) -> bool:
        return any(alert.severity is AlertSeverity.CRITICAL for alert in self._alerts)


__all__ = ["AlertEngine"]
