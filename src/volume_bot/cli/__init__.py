"""Command line interface entry point for the volume bot."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from volume_bot.cli.commands import patterns, run
from volume_bot.errors import ConfigurationError, StartupError
from volume_bot.logging import configure_logging
from volume_bot.utilities.logging_patterns import get_logger

from .response import CliErrorCode, CliResponse, format_response

logger = get_logger(__name__, component="cli")

EXIT_OK = 0
EXIT_RUNTIME_ERROR = 1
EXIT_STARTUP_ERROR = 2

__all__ = ["main", "EXIT_OK", "EXIT_RUNTIME_ERROR", "EXIT_STARTUP_ERROR"]


def main(argv: Sequence[str] | None = None) -> int:
    # Preserve host-provided variables; only fill gaps from .env
    load_dotenv()

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else sys.argv[1:])

    configure_logging(getattr(args, "log_dir", None))

    output_format = getattr(args, "output_format", "text")
    output_file: Path | None = getattr(args, "output", None)
    command_name = args.command

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.error("No command handler configured.")

    try:
        result = handler(args)
        return _handle_result(result, output_format, output_file, command_name)
    except StartupError as e:
        return _handle_startup_error(e, output_format, output_file, command_name)
    except Exception as e:
        return _handle_exception(e, output_format, output_file, command_name)


def _handle_result(
    result: Any, output_format: str, output_file: Path | None, command_name: str
) -> int:
    if isinstance(result, CliResponse):
        _write_output(format_response(result, output_format), output_file)
        return result.exit_code
    if isinstance(result, int):
        if output_format == "json":
            response = CliResponse(success=result == 0, command=command_name, exit_code=result)
            _write_output(response.to_json(), output_file)
        # Text mode: command already printed output
        return result
    if output_format == "json":
        _write_output(CliResponse.success_response(command_name).to_json(), output_file)
    return EXIT_OK


def _handle_startup_error(
    error: StartupError, output_format: str, output_file: Path | None, command_name: str
) -> int:
    logger.error(f"Startup failed: {error}", error_type=type(error).__name__)
    if isinstance(error, ConfigurationError):
        missing = error.context.get("config_key") == "config_path" and "not found" in error.message
        code = CliErrorCode.CONFIG_NOT_FOUND if missing else CliErrorCode.CONFIG_INVALID
    else:
        code = CliErrorCode.STARTUP_FAILED

    if output_format == "json":
        response = CliResponse.error_response(
            command=command_name,
            code=code,
            message=error.message,
            details={"context": error.context, "error_type": type(error).__name__},
            exit_code=EXIT_STARTUP_ERROR,
        )
        _write_output(response.to_json(), output_file)
    else:
        print(f"Error [{code.value}]: {error}", file=sys.stderr)
    return EXIT_STARTUP_ERROR


def _handle_exception(
    error: Exception, output_format: str, output_file: Path | None, command_name: str
) -> int:
    logger.exception("Command failed with exception")

    if output_format == "json":
        response = CliResponse.error_response(
            command=command_name,
            code=CliErrorCode.INTERNAL_ERROR,
            message=str(error),
            details={"exception_type": type(error).__name__},
        )
        _write_output(response.to_json(), output_file)
    else:
        print(f"Error: {error}", file=sys.stderr)

    return EXIT_RUNTIME_ERROR


def _write_output(content: str, output_file: Path | None) -> None:
    if not content:
        return
    if output_file:
        output_file.write_text(content)
    else:
        print(content)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="volume-bot", description="Pattern-based trading volume generator"
    )
    parser.add_argument(
        "--log-dir", type=Path, help="Log directory (defaults to VOLUME_BOT_LOG_DIR)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run.register(subparsers)
    patterns.register(subparsers)

    return parser


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
