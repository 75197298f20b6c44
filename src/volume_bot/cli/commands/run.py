"""``volume-bot run``: generate volume for one asset until a terminal state."""

from __future__ import annotations

import asyncio
import random
import signal
from argparse import Namespace
from pathlib import Path
from typing import Any

from volume_bot.cli.options import add_config_option, add_output_options
from volume_bot.cli.response import CliResponse
from volume_bot.config import Settings, config_from_mapping, get_settings, load_config
from volume_bot.config.schemas import VolumeBotConfig
from volume_bot.errors import ConfigurationError
from volume_bot.execution import create_executor
from volume_bot.monitoring.alert_types import AlertSeverity
from volume_bot.monitoring.report import render_run_report
from volume_bot.orchestration.engine import EngineState, RunSummary, VolumeBot
from volume_bot.utilities.logging_patterns import get_logger

logger = get_logger(__name__, component="cli.run")

COMMAND_NAME = "run"


def register(subparsers: Any) -> None:
    parser = subparsers.add_parser(COMMAND_NAME, help="Run the volume generation loop")
    parser.add_argument(
        "--token",
        "--asset",
        dest="asset",
        type=str,
        help="Asset to trade (defaults to VOLUME_BOT_TOKEN_ADDRESS)",
    )
    add_config_option(parser)
    parser.add_argument("--seed", type=int, help="Seed for pattern selection and sizing")
    parser.add_argument("--target", type=float, help="Override the total volume target")
    parser.add_argument(
        "--burst", action="store_true", help="Skip the delay between patterns"
    )
    parser.add_argument(
        "--listed",
        action="store_true",
        help="Paper executor: treat the asset as listed on the exchange pool",
    )
    parser.add_argument(
        "--export", type=Path, help="Write the trade log and metrics JSON to this path"
    )
    add_output_options(parser)
    parser.set_defaults(handler=execute)


def execute(args: Namespace) -> CliResponse | int:
    settings = get_settings()
    if args.listed:
        settings = settings.model_copy(update={"listed": True})

    asset = args.asset or settings.token_address
    if not asset:
        raise ConfigurationError(
            "No asset given; pass --token or set VOLUME_BOT_TOKEN_ADDRESS",
            config_key="token_address",
        )

    config = _resolve_config(args, settings)
    executor = create_executor(settings)
    seed = args.seed if args.seed is not None else settings.seed
    engine = VolumeBot(config, executor, rng=random.Random(seed))

    summary = asyncio.run(_run_engine(engine, asset))

    if args.export:
        engine.metrics.write_export(args.export)

    if args.output_format == "json":
        response = CliResponse.success_response(COMMAND_NAME, data=summary.to_dict())
        if summary.state is EngineState.EMERGENCY_STOPPED:
            response.add_warning(f"Run ended in emergency stop: {summary.reason.value}")
        if engine.alerts.has_critical():
            critical = sum(1 for alert in summary.alerts if alert.severity is AlertSeverity.CRITICAL)
            response.add_warning(f"{critical} critical alert(s) raised during the run")
        return response

    render_run_report(summary)
    return 0


def _resolve_config(args: Namespace, settings: Settings) -> VolumeBotConfig:
    config = load_config(args.config_path or settings.config_path)
    overrides: dict[str, Any] = {}
    if args.target is not None:
        overrides["total_volume_target"] = args.target
    if args.burst:
        overrides["burst_mode"] = True
    if not overrides:
        return config
    return config_from_mapping({**dict(config), **overrides}, source="command line")


async def _run_engine(engine: VolumeBot, asset: str) -> RunSummary:
    loop = asyncio.get_running_loop()

    def _on_signal() -> None:
        # A second signal while draining escalates to an emergency stop.
        if engine.state is EngineState.STOPPING:
            engine.emergency_stop()
        else:
            engine.stop()

    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _on_signal)
        except (NotImplementedError, RuntimeError, ValueError):
            logger.debug(f"Signal handler for {sig.name} unavailable on this platform")
            continue
        installed.append(sig)

    try:
        return await engine.run(asset)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


__all__ = ["register", "execute"]
