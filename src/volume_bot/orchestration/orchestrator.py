"""Sequential execution of one trading pattern.

Every step is executed, logged to the metrics collector, recorded into the run stats,
and then checked against the risk monitor and alert engine before the next step starts.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from volume_bot.core.stats import RunStats
from volume_bot.core.types import ExecutionMode, TradeAction, TradeResult, TradeStep, TradingPattern
from volume_bot.errors import TradeExecutionError
from volume_bot.execution.base import TradeExecutor
from volume_bot.monitoring.alerts import AlertEngine
from volume_bot.monitoring.metrics_collector import MetricsCollector
from volume_bot.risk.monitor import CLEAR, RiskDecision, RiskMonitor
from volume_bot.utilities.logging_patterns import get_logger, log_error_with_context
from volume_bot.utilities.time_provider import TimeProvider, get_clock

logger = get_logger(__name__, component="orchestrator")

SleepFn = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class PatternOutcome:
    """What happened while executing one pattern."""

    pattern: TradingPattern
    base_amount: float
    results: tuple[TradeResult, ...]
    aborted: bool = False
    stopped: bool = False
    risk: RiskDecision = CLEAR

    @property
    def steps_completed(self) -> int:
        return len(self.results)

    @property
    def successful_steps(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def volume(self) -> float:
        return sum(result.amount for result in self.results)

    @property
    def risk_stop(self) -> bool:
        return bool(self.risk)


class TradeOrchestrator:
    def __init__(
        self,
        executor: TradeExecutor,
        stats: RunStats,
        metrics: MetricsCollector,
        risk_monitor: RiskMonitor,
        alerts: AlertEngine,
        *,
        sleep: SleepFn,
        stop_requested: Callable[[], bool] = lambda: False,
        clock: TimeProvider | None = None,
    ) -> None:
        self.executor = executor
        self.stats = stats
        self.metrics = metrics
        self.risk_monitor = risk_monitor
        self.alerts = alerts
        self._sleep = sleep
        self._stop_requested = stop_requested
        self._clock = clock or get_clock()

    async def execute_pattern(
        self,
        asset: str,
        pattern: TradingPattern,
        base_amount: float,
        mode: ExecutionMode,
    ) -> PatternOutcome:
        """Run ``pattern`` step by step.

        Stops early when a stop is requested (checked before each step), when the risk
        monitor signals a breach, or when a step fails. Trades already issued are never
        reversed.
        """
        logger.info(
            f"Executing pattern {pattern.type} ({pattern.description}) "
            f"with base amount {base_amount:.6f}",
            pattern=pattern.type,
            base_amount=base_amount,
            steps=len(pattern.steps),
        )

        results: list[TradeResult] = []
        last_index = len(pattern.steps) - 1
        for index, step in enumerate(pattern.steps):
            if self._stop_requested():
                logger.info(
                    f"Stop requested; skipping remaining {len(pattern.steps) - index} step(s)",
                    pattern=pattern.type,
                    step_index=index,
                )
                return PatternOutcome(pattern, base_amount, tuple(results), stopped=True)

            amount = step.amount_for(base_amount)
            result = await self._execute_step(asset, mode, pattern, index, step, amount)
            results.append(result)

            decision = self._observe(pattern, result)
            if decision:
                return PatternOutcome(pattern, base_amount, tuple(results), risk=decision)

            if not result.success:
                logger.warning(
                    f"Step {index} of {pattern.type} failed; aborting pattern",
                    pattern=pattern.type,
                    step_index=index,
                )
                return PatternOutcome(pattern, base_amount, tuple(results), aborted=True)

            if step.delay_ms > 0 and index < last_index and not self._stop_requested():
                await self._sleep(step.delay_ms / 1000)

        return PatternOutcome(pattern, base_amount, tuple(results))

    async def _execute_step(
        self,
        asset: str,
        mode: ExecutionMode,
        pattern: TradingPattern,
        index: int,
        step: TradeStep,
        amount: float,
    ) -> TradeResult:
        started = self._clock.monotonic()
        try:
            if step.action is TradeAction.BUY:
                receipt = await self.executor.buy(asset, amount, mode)
            else:
                receipt = await self.executor.sell(asset, amount, mode)
        except Exception as exc:
            error = (
                exc
                if isinstance(exc, TradeExecutionError)
                else TradeExecutionError(str(exc) or type(exc).__name__, original_error=exc)
            )
            error.add_context(
                pattern=pattern.type,
                step_index=index,
                action=step.action.value,
                amount=amount,
            )
            log_error_with_context(
                error,
                operation="execute_step",
                component="orchestrator",
                logger=logger,
                pattern=pattern.type,
                step_index=index,
            )
            return TradeResult(
                success=False,
                tx_id="",
                amount=amount,
                action=step.action,
                timestamp=self._clock.now_utc(),
                gas_used="0",
                error=error.message,
                duration_ms=(self._clock.monotonic() - started) * 1000,
                step_index=index,
                error_context=dict(error.context),
            )

        return TradeResult(
            success=True,
            tx_id=receipt.tx_id,
            amount=amount,
            action=step.action,
            timestamp=self._clock.now_utc(),
            gas_used=receipt.gas_used,
            fee=receipt.fee,
            duration_ms=(self._clock.monotonic() - started) * 1000,
            step_index=index,
        )

    def _observe(self, pattern: TradingPattern, result: TradeResult) -> RiskDecision:
        self.metrics.log_trade(result, pattern.type)
        self.stats.record_step(pattern.type, result)

        snapshot = self.stats.snapshot()
        decision = self.risk_monitor.evaluate(snapshot)
        new_alerts = self.alerts.check(self.metrics.get_metrics(), snapshot)
        self.alerts.emit(new_alerts)
        return decision


__all__ = ["PatternOutcome", "SleepFn", "TradeOrchestrator"]
