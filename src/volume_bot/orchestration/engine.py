"""Volume generation loop.

The engine selects weighted patterns, hands them to the :class:`TradeOrchestrator`,
and waits a randomized interval between patterns until the volume target is reached,
a stop is requested, or a risk limit is breached.

State machine::

    INIT -> RUNNING -> STOPPING -> COMPLETED
                    -> COMPLETED            (target reached)
                    -> EMERGENCY_STOPPED    (risk limit or manual emergency stop)
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from volume_bot.config.schemas import VolumeBotConfig
from volume_bot.core.stats import RunStats, StatsSnapshot
from volume_bot.core.types import ExecutionMode
from volume_bot.errors import StartupError
from volume_bot.execution.base import TradeExecutor
from volume_bot.logging.correlation import run_context, update_domain_context
from volume_bot.monitoring.alert_types import Alert
from volume_bot.monitoring.alerts import AlertEngine
from volume_bot.monitoring.metrics_collector import MetricsCollector, PerformanceMetrics
from volume_bot.orchestration.orchestrator import PatternOutcome, TradeOrchestrator
from volume_bot.patterns.selector import PatternSelector, calculate_base_amount
from volume_bot.risk.monitor import CLEAR, RiskDecision, RiskMonitor
from volume_bot.utilities.logging_patterns import get_logger, log_operation
from volume_bot.utilities.time_provider import TimeProvider, get_clock

logger = get_logger(__name__, component="engine")


class EngineState(str, Enum):
    INIT = "init"
    RUNNING = "running"
    STOPPING = "stopping"
    COMPLETED = "completed"
    EMERGENCY_STOPPED = "emergency_stopped"

    @property
    def is_terminal(self) -> bool:
        return self in (EngineState.COMPLETED, EngineState.EMERGENCY_STOPPED)


class StopReason(str, Enum):
    TARGET_REACHED = "target_reached"
    STOP_REQUESTED = "stop_requested"
    RISK_LIMIT = "risk_limit"
    MANUAL_EMERGENCY = "manual_emergency"


@dataclass(frozen=True)
class RunSummary:
    """Final report produced on every terminal transition."""

    run_id: str
    asset: str
    state: EngineState
    reason: StopReason
    execution_mode: ExecutionMode
    stats: StatsSnapshot
    metrics: PerformanceMetrics
    alerts: tuple[Alert, ...]
    patterns_executed: int
    started_at: datetime
    finished_at: datetime
    risk: RiskDecision = CLEAR

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "asset": self.asset,
            "state": self.state.value,
            "reason": self.reason.value,
            "execution_mode": self.execution_mode.value,
            "patterns_executed": self.patterns_executed,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "duration_seconds": self.duration_seconds,
            "stats": self.stats.to_dict(),
            "metrics": self.metrics.to_dict(),
            "alerts": [alert.to_dict() for alert in self.alerts],
            "risk": {
                "should_stop": self.risk.should_stop,
                "reason": self.risk.reason.value if self.risk.reason else None,
                "details": dict(self.risk.details),
            },
        }


class VolumeBot:
    """Single-task engine that owns the run stats, metrics and alert log of one run.

    ``sleep_fn`` replaces the interruptible default sleep; tests pass a recorder so
    runs complete instantly.
    """

    def __init__(
        self,
        config: VolumeBotConfig,
        executor: TradeExecutor,
        *,
        rng: random.Random | None = None,
        clock: TimeProvider | None = None,
        sleep_fn: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        self.config = config
        self.executor = executor
        self._rng = rng or random.Random()
        self._clock = clock or get_clock()
        self._sleep_fn = sleep_fn

        self.stats = RunStats(start_time=self._clock.now_utc())
        self.metrics = MetricsCollector(clock=self._clock)
        self.alerts = AlertEngine(config.alert_thresholds, clock=self._clock)
        self.risk_monitor = RiskMonitor(config.risk_thresholds)
        self.selector = PatternSelector(config.patterns, config.pattern_weights, rng=self._rng)
        self.orchestrator = TradeOrchestrator(
            executor,
            self.stats,
            self.metrics,
            self.risk_monitor,
            self.alerts,
            sleep=self._pause,
            stop_requested=lambda: self._stop_requested,
            clock=self._clock,
        )

        self._state = EngineState.INIT
        self._stop_requested = False
        self._emergency = False
        self._stop_event = asyncio.Event()
        self._execution_mode: ExecutionMode | None = None
        self._summary: RunSummary | None = None

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def execution_mode(self) -> ExecutionMode | None:
        return self._execution_mode

    @property
    def summary(self) -> RunSummary | None:
        return self._summary

    # ---- Control ----
    def stop(self) -> None:
        """Finish the in-flight step, then complete without starting new work."""
        if self._state.is_terminal:
            return
        logger.info("Stop requested", state=self._state.value)
        self._stop_requested = True
        if self._state is EngineState.RUNNING:
            self._state = EngineState.STOPPING
        self._stop_event.set()

    def emergency_stop(self) -> None:
        """Operator kill switch: same drain as :meth:`stop` but ends in EMERGENCY_STOPPED."""
        if self._state.is_terminal:
            return
        logger.critical("EMERGENCY STOP requested", state=self._state.value)
        self._emergency = True
        self.stop()

    # ---- Main loop ----
    async def run(self, asset: str) -> RunSummary:
        if self._state is not EngineState.INIT:
            raise RuntimeError(f"engine already started (state={self._state.value})")

        with run_context(asset=asset) as run_id:
            started_at = self._clock.now_utc()
            self.stats.reset(started_at)
            self.metrics.clear_logs()
            logger.info(
                f"Starting volume generation for {asset} "
                f"(target {self.config.total_volume_target}, {len(self.config.patterns)} patterns)",
                asset=asset,
                config=self.config.to_summary(),
            )

            mode = await self._query_execution_mode(asset)
            self._execution_mode = mode
            update_domain_context(execution_mode=mode.value)
            if self._state is EngineState.INIT:
                self._state = EngineState.RUNNING

            patterns_executed = 0
            risk_decision = CLEAR
            reason = self._termination_reason()
            while reason is None:
                outcome = await self._run_pattern(asset, mode)
                patterns_executed += 1

                if outcome.risk:
                    risk_decision = outcome.risk
                    reason = StopReason.RISK_LIMIT
                    break

                reason = self._termination_reason()
                if reason is None and not self.config.burst_mode:
                    await self._inter_pattern_delay()
                    reason = self._termination_reason()

            return self._finish(
                run_id, asset, mode, reason, patterns_executed, started_at, risk_decision
            )

    async def _query_execution_mode(self, asset: str) -> ExecutionMode:
        try:
            with log_operation("query_execution_mode", logger, asset=asset):
                mode = await self.executor.query_execution_mode(asset)
        except StartupError:
            logger.error(f"Startup failed for {asset}", asset=asset, exc_info=True)
            raise
        except Exception as exc:
            logger.error(f"Startup failed for {asset}", asset=asset, exc_info=True)
            raise StartupError(
                f"Could not determine execution mode for {asset}: {exc}",
                context={"asset": asset},
                original_error=exc,
            ) from exc
        logger.info(f"Execution mode: {mode.value}", asset=asset, mode=mode.value)
        return mode

    async def _run_pattern(self, asset: str, mode: ExecutionMode) -> PatternOutcome:
        pattern = self.selector.select()
        base_amount = calculate_base_amount(
            self.config.min_trade_amount, self.config.max_trade_amount, self._rng
        )
        outcome = await self.orchestrator.execute_pattern(asset, pattern, base_amount, mode)
        logger.info(
            f"Pattern {pattern.type} finished: {outcome.steps_completed}/{len(pattern.steps)} "
            f"steps, volume {outcome.volume:.6f}",
            pattern=pattern.type,
            steps_completed=outcome.steps_completed,
            pattern_volume=outcome.volume,
            total_volume=self.stats.total_volume,
            aborted=outcome.aborted,
        )
        return outcome

    def _termination_reason(self) -> StopReason | None:
        if self._emergency:
            return StopReason.MANUAL_EMERGENCY
        if self._stop_requested:
            return StopReason.STOP_REQUESTED
        if self.stats.total_volume >= self.config.total_volume_target:
            return StopReason.TARGET_REACHED
        return None

    async def _inter_pattern_delay(self) -> None:
        delay_ms = self._rng.uniform(self.config.min_interval_ms, self.config.max_interval_ms)
        logger.info(
            f"Waiting {delay_ms / 1000:.1f}s before next pattern", delay_ms=round(delay_ms, 1)
        )
        await self._pause(delay_ms / 1000)

    async def _pause(self, seconds: float) -> None:
        if self._sleep_fn is not None:
            await self._sleep_fn(seconds)
            return
        if self._stop_event.is_set():
            return
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass

    def _finish(
        self,
        run_id: str,
        asset: str,
        mode: ExecutionMode,
        reason: StopReason,
        patterns_executed: int,
        started_at: datetime,
        risk_decision: RiskDecision,
    ) -> RunSummary:
        if reason in (StopReason.RISK_LIMIT, StopReason.MANUAL_EMERGENCY):
            self._state = EngineState.EMERGENCY_STOPPED
            logger.critical(
                f"Emergency stop: {reason.value} ({risk_decision.message})",
                reason=reason.value,
            )
        else:
            self._state = EngineState.COMPLETED
            logger.info(f"Volume generation completed: {reason.value}", reason=reason.value)

        self._summary = RunSummary(
            run_id=run_id,
            asset=asset,
            state=self._state,
            reason=reason,
            execution_mode=mode,
            stats=self.stats.snapshot(),
            metrics=self.metrics.get_metrics(),
            alerts=tuple(self.alerts.get_all_alerts()),
            patterns_executed=patterns_executed,
            started_at=started_at,
            finished_at=self._clock.now_utc(),
            risk=risk_decision,
        )
        return self._summary

    # ---- Read access ----
    def get_stats(self) -> StatsSnapshot:
        return self.stats.snapshot()

    def get_monitoring_metrics(self) -> PerformanceMetrics:
        return self.metrics.get_metrics()

    def get_all_alerts(self) -> list[Alert]:
        return self.alerts.get_all_alerts()

    def export_logs(self) -> str:
        return self.metrics.export_logs()


__all__ = ["EngineState", "RunSummary", "StopReason", "VolumeBot"]
