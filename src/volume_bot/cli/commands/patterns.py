"""``volume-bot patterns``: show the configured pattern catalog and weights."""

from __future__ import annotations

from argparse import Namespace
from typing import Any

from rich.console import Console
from rich.table import Table

from volume_bot.cli.options import add_config_option, add_output_options
from volume_bot.cli.response import CliResponse
from volume_bot.config import get_settings, load_config

COMMAND_NAME = "patterns"


def register(subparsers: Any) -> None:
    parser = subparsers.add_parser(COMMAND_NAME, help="List trading patterns and weights")
    add_config_option(parser)
    add_output_options(parser)
    parser.set_defaults(handler=execute)


def execute(args: Namespace) -> CliResponse | int:
    config = load_config(args.config_path or get_settings().config_path)
    rows = [
        {
            "type": pattern.type,
            "weight": weight,
            "risk_level": pattern.risk_level.value,
            "description": pattern.description,
            "steps": [
                {
                    "action": step.action.value,
                    "amount_percent": step.amount_percent,
                    "delay_ms": step.delay_ms,
                }
                for step in pattern.steps
            ],
        }
        for pattern, weight in zip(config.patterns, config.pattern_weights)
    ]

    if args.output_format == "json":
        return CliResponse.success_response(COMMAND_NAME, data={"patterns": rows})

    table = Table(title="Trading Patterns")
    table.add_column("Pattern", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Risk")
    table.add_column("Steps")
    table.add_column("Description", style="dim")
    for row in rows:
        steps = " -> ".join(
            f"{step['action']} {step['amount_percent']:g}%"
            + (f" +{step['delay_ms']}ms" if step["delay_ms"] else "")
            for step in row["steps"]
        )
        table.add_row(row["type"], f"{row['weight']:.2f}", row["risk_level"], steps, row["description"])
    Console().print(table)
    return 0


__all__ = ["register", "execute"]
