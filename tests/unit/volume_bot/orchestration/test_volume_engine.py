from __future__ import annotations

import asyncio
import json
import random

import pytest

from tests.fixtures.volume_bot import RecordingSleep, ScriptedExecutor, single_pattern_config
from volume_bot.config import VolumeBotConfig
from volume_bot.core.types import ExecutionMode, TradeAction, TradeStep
from volume_bot.errors import StartupError
from volume_bot.orchestration import EngineState, StopReason, VolumeBot
from volume_bot.risk import RiskBreach
from volume_bot.utilities.time_provider import FakeClock

SINGLE_BUY = (TradeStep(TradeAction.BUY, 100),)


def make_bot(
    config: VolumeBotConfig,
    executor: ScriptedExecutor,
    clock: FakeClock,
    sleep: RecordingSleep | None = None,
    seed: int = 1234,
) -> VolumeBot:
    return VolumeBot(
        config,
        executor,
        rng=random.Random(seed),
        clock=clock,
        sleep_fn=sleep or RecordingSleep(clock=clock),
    )


class TestTermination:
    @pytest.mark.asyncio
    async def test_runs_until_volume_target(
        self, scripted_executor: ScriptedExecutor, fake_clock: FakeClock
    ) -> None:
        sleep = RecordingSleep(clock=fake_clock)
        config = single_pattern_config(SINGLE_BUY, total_volume_target=0.0025)
        bot = make_bot(config, scripted_executor, fake_clock, sleep)

        summary = await bot.run("0xfeed")

        assert summary.state is EngineState.COMPLETED
        assert summary.reason is StopReason.TARGET_REACHED
        assert summary.patterns_executed == 3
        assert summary.stats.total_volume >= 0.0025
        assert summary.execution_mode is ExecutionMode.PRE_LISTING
        assert bot.state is EngineState.COMPLETED
        # No wait after the pattern that reached the target.
        assert sleep.calls == [1.0, 1.0]
        assert summary.duration_seconds == pytest.approx(2.0)

    @pytest.mark.asyncio
    async def test_base_amounts_stay_within_jittered_range(
        self, scripted_executor: ScriptedExecutor, fake_clock: FakeClock
    ) -> None:
        config = single_pattern_config(SINGLE_BUY, total_volume_target=0.005)
        await make_bot(config, scripted_executor, fake_clock).run("0xfeed")
        for call in scripted_executor.calls:
            assert 0.001 <= call.amount <= 0.001 * 1.05 + 1e-12

    @pytest.mark.asyncio
    async def test_stop_completes_after_current_pattern(
        self, scripted_executor: ScriptedExecutor, fake_clock: FakeClock
    ) -> None:
        sleep = RecordingSleep(clock=fake_clock)
        config = single_pattern_config(SINGLE_BUY, total_volume_target=1.0)
        bot = make_bot(config, scripted_executor, fake_clock, sleep)
        sleep.on_call = lambda _seconds: bot.stop()

        summary = await bot.run("0xfeed")

        assert summary.state is EngineState.COMPLETED
        assert summary.reason is StopReason.STOP_REQUESTED
        assert summary.patterns_executed == 1
        assert len(scripted_executor.calls) == 1

    @pytest.mark.asyncio
    async def test_manual_emergency_stop(
        self, scripted_executor: ScriptedExecutor, fake_clock: FakeClock
    ) -> None:
        sleep = RecordingSleep(clock=fake_clock)
        config = single_pattern_config(SINGLE_BUY, total_volume_target=1.0)
        bot = make_bot(config, scripted_executor, fake_clock, sleep)
        sleep.on_call = lambda _seconds: bot.emergency_stop()

        summary = await bot.run("0xfeed")

        assert summary.state is EngineState.EMERGENCY_STOPPED
        assert summary.reason is StopReason.MANUAL_EMERGENCY

    @pytest.mark.asyncio
    async def test_position_limit_is_emergency_stop(
        self, scripted_executor: ScriptedExecutor, fake_clock: FakeClock
    ) -> None:
        config = single_pattern_config(
            SINGLE_BUY, total_volume_target=1.0, emergency_stop_loss=0.0015
        )
        bot = make_bot(config, scripted_executor, fake_clock)

        summary = await bot.run("0xfeed")

        assert summary.state is EngineState.EMERGENCY_STOPPED
        assert summary.reason is StopReason.RISK_LIMIT
        assert summary.risk.reason is RiskBreach.POSITION_LIMIT
        assert summary.patterns_executed == 2

    @pytest.mark.asyncio
    async def test_repeated_failures_trip_failure_limit(self, fake_clock: FakeClock) -> None:
        executor = ScriptedExecutor(failures=set(range(1, 50)))
        config = single_pattern_config(
            SINGLE_BUY, total_volume_target=1.0, max_consecutive_losses=3
        )
        summary = await make_bot(config, executor, fake_clock).run("0xfeed")

        assert summary.reason is StopReason.RISK_LIMIT
        assert summary.risk.reason is RiskBreach.FAILURE_LIMIT
        assert summary.stats.failed_trades == 3
        assert summary.stats.current_position == 0.0

    @pytest.mark.asyncio
    async def test_burst_mode_skips_inter_pattern_waits(
        self, scripted_executor: ScriptedExecutor, fake_clock: FakeClock
    ) -> None:
        sleep = RecordingSleep(clock=fake_clock)
        config = single_pattern_config(SINGLE_BUY, total_volume_target=0.0025, burst_mode=True)
        summary = await make_bot(config, scripted_executor, fake_clock, sleep).run("0xfeed")

        assert summary.patterns_executed == 3
        assert sleep.calls == []


class TestStartup:
    @pytest.mark.asyncio
    async def test_mode_query_failure_aborts_before_trading(self, fake_clock: FakeClock) -> None:
        executor = ScriptedExecutor(mode_error=ConnectionError("rpc unreachable"))
        bot = make_bot(single_pattern_config(SINGLE_BUY), executor, fake_clock)

        with pytest.raises(StartupError, match="rpc unreachable") as excinfo:
            await bot.run("0xfeed")

        assert isinstance(excinfo.value.original_error, ConnectionError)
        assert executor.calls == []
        assert bot.state is EngineState.INIT
        assert bot.get_stats().total_trades == 0

    @pytest.mark.asyncio
    async def test_post_listing_mode_is_passed_to_every_trade(self, fake_clock: FakeClock) -> None:
        executor = ScriptedExecutor(mode=ExecutionMode.POST_LISTING)
        config = single_pattern_config(SINGLE_BUY, total_volume_target=0.0025)
        summary = await make_bot(config, executor, fake_clock).run("0xfeed")

        assert summary.execution_mode is ExecutionMode.POST_LISTING
        assert {call.mode for call in executor.calls} == {ExecutionMode.POST_LISTING}

    @pytest.mark.asyncio
    async def test_engine_runs_only_once(
        self, scripted_executor: ScriptedExecutor, fake_clock: FakeClock
    ) -> None:
        config = single_pattern_config(SINGLE_BUY, total_volume_target=0.001)
        bot = make_bot(config, scripted_executor, fake_clock)
        await bot.run("0xfeed")
        with pytest.raises(RuntimeError, match="already started"):
            await bot.run("0xfeed")


class TestReadAccess:
    @pytest.mark.asyncio
    async def test_accessors_and_summary_serialise(
        self, scripted_executor: ScriptedExecutor, fake_clock: FakeClock
    ) -> None:
        config = single_pattern_config(SINGLE_BUY, total_volume_target=0.0025)
        bot = make_bot(config, scripted_executor, fake_clock)
        summary = await bot.run("0xfeed")

        assert bot.summary is summary
        assert bot.get_stats() == summary.stats
        assert bot.get_monitoring_metrics().total_trades == 3
        assert bot.get_all_alerts() == list(summary.alerts)

        payload = json.loads(json.dumps(summary.to_dict()))
        assert payload["state"] == "completed"
        assert payload["reason"] == "target_reached"
        assert payload["stats"]["total_trades"] == 3
        assert payload["risk"]["should_stop"] is False

        exported = json.loads(bot.export_logs())
        assert len(exported["logs"]) == 3

    @pytest.mark.asyncio
    async def test_same_seed_gives_same_run(self, fake_clock: FakeClock) -> None:
        config = VolumeBotConfig(
            total_volume_target=0.005, min_interval_ms=0, max_interval_ms=0
        )

        async def run_once() -> list[tuple[TradeAction, float]]:
            executor = ScriptedExecutor()
            await make_bot(config, executor, FakeClock(fake_clock.now_utc()), seed=99).run("0xfeed")
            return [(call.action, call.amount) for call in executor.calls]

        assert await run_once() == await run_once()


@pytest.mark.asyncio
async def test_default_sleep_is_interrupted_by_stop(scripted_executor: ScriptedExecutor) -> None:
    config = single_pattern_config(
        SINGLE_BUY, total_volume_target=1.0, min_interval_ms=60_000, max_interval_ms=60_000
    )
    bot = VolumeBot(config, scripted_executor, rng=random.Random(1))
    task = asyncio.create_task(bot.run("0xfeed"))

    while not scripted_executor.calls:
        await asyncio.sleep(0)
    bot.stop()
    summary = await asyncio.wait_for(task, timeout=5)

    assert summary.reason is StopReason.STOP_REQUESTED
    assert summary.patterns_executed == 1
