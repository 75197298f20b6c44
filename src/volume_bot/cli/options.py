"""Argument helpers shared by CLI commands."""

from __future__ import annotations

from argparse import ArgumentParser
from pathlib import Path

OUTPUT_FORMAT_CHOICES = ["text", "json"]


def add_output_options(parser: ArgumentParser) -> None:
    parser.add_argument(
        "--format",
        "--output-format",
        dest="output_format",
        type=str,
        choices=OUTPUT_FORMAT_CHOICES,
        default="text",
        help="Output format: text for human-readable, json for machine-readable",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Write output to file instead of stdout",
    )


def add_config_option(parser: ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        "-c",
        dest="config_path",
        type=Path,
        help="YAML/JSON engine configuration (defaults to VOLUME_BOT_CONFIG_PATH)",
    )


__all__ = ["OUTPUT_FORMAT_CHOICES", "add_config_option", "add_output_options"]
