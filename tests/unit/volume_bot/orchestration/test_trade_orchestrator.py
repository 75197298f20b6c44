from __future__ import annotations

import pytest

from tests.fixtures.volume_bot import START, RecordingSleep, ScriptedExecutor
from volume_bot.config import AlertThresholds, RiskThresholds
from volume_bot.core.stats import RunStats
from volume_bot.core.types import ExecutionMode, TradeAction, TradeStep, TradingPattern
from volume_bot.monitoring import AlertEngine, AlertType, MetricsCollector
from volume_bot.orchestration import TradeOrchestrator
from volume_bot.risk import RiskBreach, RiskMonitor
from volume_bot.utilities.time_provider import FakeClock

BUY_SELL_BUY = TradingPattern(
    type="buy-sell-buy",
    steps=(
        TradeStep(TradeAction.BUY, 30, 2000),
        TradeStep(TradeAction.SELL, 50, 3000),
        TradeStep(TradeAction.BUY, 20, 1500),
    ),
)

PRE = ExecutionMode.PRE_LISTING


class Harness:
    def __init__(
        self,
        executor: ScriptedExecutor,
        *,
        risk: RiskThresholds | None = None,
        alerts: AlertThresholds | None = None,
    ) -> None:
        self.clock = FakeClock(START)
        self.sleep = RecordingSleep(clock=self.clock)
        self.executor = executor
        self.stats = RunStats(start_time=START)
        self.metrics = MetricsCollector(clock=self.clock)
        self.alerts = AlertEngine(alerts or AlertThresholds(), clock=self.clock)
        self.stop = False
        self.orchestrator = TradeOrchestrator(
            executor,
            self.stats,
            self.metrics,
            RiskMonitor(risk or RiskThresholds()),
            self.alerts,
            sleep=self.sleep,
            stop_requested=lambda: self.stop,
            clock=self.clock,
        )


@pytest.mark.asyncio
async def test_steps_are_sized_from_base_amount() -> None:
    h = Harness(ScriptedExecutor())
    outcome = await h.orchestrator.execute_pattern("0xfeed", BUY_SELL_BUY, 0.001, PRE)

    assert [call.action for call in h.executor.calls] == [
        TradeAction.BUY,
        TradeAction.SELL,
        TradeAction.BUY,
    ]
    assert [call.amount for call in h.executor.calls] == pytest.approx([0.0003, 0.0005, 0.0002])
    assert all(call.mode is PRE and call.asset == "0xfeed" for call in h.executor.calls)

    assert not outcome.aborted and not outcome.stopped and not outcome.risk_stop
    assert outcome.steps_completed == 3
    assert outcome.volume == pytest.approx(0.001)
    assert h.stats.total_volume == pytest.approx(0.001)
    assert h.stats.current_position == pytest.approx(0.0)
    assert h.stats.patterns_used == {"buy-sell-buy": 3}


@pytest.mark.asyncio
async def test_delays_follow_every_step_but_the_last() -> None:
    h = Harness(ScriptedExecutor())
    await h.orchestrator.execute_pattern("0xfeed", BUY_SELL_BUY, 0.001, PRE)
    assert h.sleep.calls == [2.0, 3.0]


@pytest.mark.asyncio
async def test_results_carry_receipt_fields() -> None:
    h = Harness(ScriptedExecutor(gas_used="150000", fee=0.00001))
    outcome = await h.orchestrator.execute_pattern("0xfeed", BUY_SELL_BUY, 0.001, PRE)

    first = outcome.results[0]
    assert first.success
    assert first.tx_id == "0x0001"
    assert first.gas_used == "150000"
    assert first.step_index == 0
    assert first.timestamp == START
    assert outcome.results[1].timestamp.timestamp() == START.timestamp() + 2
    assert h.stats.total_gas_used == 450_000
    assert h.stats.profit_loss == pytest.approx(-0.00003)


@pytest.mark.asyncio
async def test_failed_step_aborts_remaining_steps() -> None:
    h = Harness(ScriptedExecutor(failures={2}))
    outcome = await h.orchestrator.execute_pattern("0xfeed", BUY_SELL_BUY, 0.001, PRE)

    assert outcome.aborted
    assert outcome.steps_completed == 2
    assert len(h.executor.calls) == 2
    assert h.sleep.calls == [2.0]

    failed = outcome.results[1]
    assert not failed.success
    assert failed.tx_id == ""
    assert failed.gas_used == "0"
    assert failed.error == "scripted failure"
    assert failed.error_context["pattern"] == "buy-sell-buy"
    assert failed.error_context["step_index"] == 1

    assert h.stats.failed_trades == 1
    assert h.stats.total_volume == pytest.approx(0.0008)
    assert h.stats.current_position == pytest.approx(0.0003)
    assert h.metrics.get_metrics().failed_trades == 1


@pytest.mark.asyncio
async def test_unexpected_exceptions_become_failed_results() -> None:
    class ExplodingExecutor(ScriptedExecutor):
        async def buy(self, asset, base_amount, mode):  # type: ignore[override]
            raise ConnectionError("rpc timeout")

    h = Harness(ExplodingExecutor())
    outcome = await h.orchestrator.execute_pattern("0xfeed", BUY_SELL_BUY, 0.001, PRE)

    assert outcome.aborted
    assert outcome.results[0].error == "rpc timeout"
    assert outcome.results[0].error_context["action"] == "buy"


@pytest.mark.asyncio
async def test_stop_request_is_honoured_between_steps() -> None:
    executor = ScriptedExecutor()
    h = Harness(executor)

    def request_stop(call) -> None:
        h.stop = True

    executor.on_trade = request_stop
    outcome = await h.orchestrator.execute_pattern("0xfeed", BUY_SELL_BUY, 0.001, PRE)

    assert outcome.stopped
    assert outcome.steps_completed == 1
    assert h.sleep.calls == []


@pytest.mark.asyncio
async def test_risk_breach_ends_pattern_after_the_breaching_step() -> None:
    h = Harness(ScriptedExecutor(), risk=RiskThresholds(emergency_stop_loss=0.0002))
    outcome = await h.orchestrator.execute_pattern("0xfeed", BUY_SELL_BUY, 0.001, PRE)

    assert outcome.risk_stop
    assert outcome.risk.reason is RiskBreach.POSITION_LIMIT
    assert outcome.steps_completed == 1
    assert h.sleep.calls == []


@pytest.mark.asyncio
async def test_alerts_are_checked_after_each_step() -> None:
    h = Harness(ScriptedExecutor(), alerts=AlertThresholds(max_position_size=0.00025))
    await h.orchestrator.execute_pattern("0xfeed", BUY_SELL_BUY, 0.001, PRE)

    position_alerts = [a for a in h.alerts.get_all_alerts() if a.type is AlertType.POSITION_SIZE]
    # Positions after each step: +0.0003, about -0.0002, about 0.0; only the first crosses.
    assert len(position_alerts) == 1
