"""Standard CLI response envelope.

Provides structured, machine-readable output for CLI commands with:
- Consistent success/error indication
- Typed error codes for programmatic handling
- Warnings separate from errors
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from volume_bot import __version__


class CliErrorCode(str, Enum):
    """Standardized error codes for CLI operations.

    Using str inheritance allows JSON serialization as plain strings.
    """

    INTERNAL_ERROR = "INTERNAL_ERROR"

    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
    CONFIG_INVALID = "CONFIG_INVALID"
    STARTUP_FAILED = "STARTUP_FAILED"


@dataclass
class CliError:
    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            result["details"] = self.details
        return result

    @classmethod
    def from_code(cls, code: CliErrorCode, message: str, **details: Any) -> CliError:
        return cls(code=code.value, message=message, details=details)


@dataclass
class CliResponse:
    """Response envelope returned by every command in JSON mode.

    Success example:
        {
            "success": true,
            "exit_code": 0,
            "command": "run",
            "data": {"state": "completed", ...},
            "errors": [],
            "warnings": [],
            "metadata": {"timestamp": "...", "version": "1.0.0"}
        }
    """

    success: bool
    command: str
    data: Any = None
    errors: list[CliError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    exit_code: int = 0

    _timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.success and self.exit_code == 0:
            self.exit_code = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "exit_code": self.exit_code,
            "command": self.command,
            "data": self.data,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": self.warnings,
            "metadata": {
                "timestamp": self._timestamp.isoformat(),
                "version": __version__,
            },
        }

    def to_json(self, compact: bool = False) -> str:
        indent = None if compact else 2
        return json.dumps(self.to_dict(), indent=indent, default=str)

    def add_warning(self, message: str) -> CliResponse:
        self.warnings.append(message)
        return self

    @classmethod
    def success_response(
        cls, command: str, data: Any = None, warnings: list[str] | None = None
    ) -> CliResponse:
        return cls(success=True, command=command, data=data, warnings=warnings or [], exit_code=0)

    @classmethod
    def error_response(
        cls,
        command: str,
        code: CliErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
        exit_code: int = 1,
    ) -> CliResponse:
        error = CliError.from_code(code, message, **(details or {}))
        return cls(success=False, command=command, errors=[error], exit_code=exit_code)


def format_response(response: CliResponse, output_format: str = "text") -> str:
    """Format a CLI response as JSON or as human-readable text."""
    if output_format == "json":
        return response.to_json()

    if response.success:
        if response.data is None:
            return "Operation completed successfully."
        if isinstance(response.data, str):
            return response.data
        return json.dumps(response.data, indent=2, default=str)

    lines = []
    for error in response.errors:
        lines.append(f"Error [{error.code}]: {error.message}")
        for key, value in error.details.items():
            lines.append(f"  {key}: {value}")
    return "\n".join(lines)


__all__ = ["CliError", "CliErrorCode", "CliResponse", "format_response"]
