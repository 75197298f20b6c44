"""Run-scoped logging context so every record of one engine run carries its run id."""

from __future__ import annotations

import contextvars
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

run_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("run_id", default="")

domain_context_var: contextvars.ContextVar[dict[str, Any] | None] = contextvars.ContextVar(
    "domain_context", default=None
)


def get_run_id() -> str:
    """Get the current run id from the context."""
    return run_id_var.get()


def generate_run_id() -> str:
    """Generate a new run id."""
    return uuid.uuid4().hex[:12]


def get_domain_context() -> dict[str, Any]:
    """Get the current domain context (asset, execution mode ...)."""
    return dict(domain_context_var.get() or {})


def update_domain_context(**kwargs: Any) -> None:
    """Update the domain context with additional key-value pairs."""
    domain_context_var.set({**get_domain_context(), **kwargs})


def get_log_context() -> dict[str, Any]:
    """Return the fields the JSON formatter merges into every record."""
    context = get_domain_context()
    run_id = get_run_id()
    if run_id:
        context["run_id"] = run_id
    return context


@contextmanager
def run_context(run_id: str | None = None, **domain: Any) -> Iterator[str]:
    """Bind a run id (and optional domain fields) for the duration of the block."""
    active_id = run_id or generate_run_id()
    run_token = run_id_var.set(active_id)
    domain_token = domain_context_var.set({**get_domain_context(), **domain})
    try:
        yield active_id
    finally:
        domain_context_var.reset(domain_token)
        run_id_var.reset(run_token)


__all__ = [
    "get_run_id",
    "generate_run_id",
    "get_domain_context",
    "update_domain_context",
    "get_log_context",
    "run_context",
]
