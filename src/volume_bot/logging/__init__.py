"""Logging configuration and run-scoped context for the ``volume_bot`` package."""

from __future__ import annotations

from .correlation import get_run_id, run_context, update_domain_context
from .json_formatter import StructuredJSONFormatter
from .setup import configure_logging

__all__ = [
    "configure_logging",
    "get_run_id",
    "run_context",
    "update_domain_context",
    "StructuredJSONFormatter",
]
