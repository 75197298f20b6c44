"""
Structured logging helpers.

``StructuredLogger`` forwards keyword arguments as ``extra`` fields so the JSON formatter
can emit them as top-level keys (``component``, ``pattern``, ``tx_id`` ...).
"""

from __future__ import annotations

import contextlib
import logging
import time
from collections.abc import Generator
from typing import Any


class StructuredLogger:
    def __init__(self, name: str, component: str | None = None):
        self.logger = logging.getLogger(name)
        self.component = component
        self.name = name

    def _prepare_extra_and_standard_kwargs(
        self, kwargs: dict[str, Any]
    ) -> tuple[dict[str, Any], dict[str, Any]]:
        standard_logging_kwargs = {"exc_info", "stack_info", "stacklevel"}

        extracted_kwargs: dict[str, Any] = {}
        extra_kwargs: dict[str, Any] = {}

        for key, value in kwargs.items():
            if key in standard_logging_kwargs:
                extracted_kwargs[key] = value
            else:
                extra_kwargs[key] = value

        if self.component:
            extra_kwargs["component"] = self.component

        return extracted_kwargs, extra_kwargs

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        extracted_kwargs, extra_kwargs = self._prepare_extra_and_standard_kwargs(kwargs)
        self.logger.info(msg, *args, extra=extra_kwargs, **extracted_kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        extracted_kwargs, extra_kwargs = self._prepare_extra_and_standard_kwargs(kwargs)
        self.logger.error(msg, *args, extra=extra_kwargs, **extracted_kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        extracted_kwargs, extra_kwargs = self._prepare_extra_and_standard_kwargs(kwargs)
        self.logger.warning(msg, *args, extra=extra_kwargs, **extracted_kwargs)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        extracted_kwargs, extra_kwargs = self._prepare_extra_and_standard_kwargs(kwargs)
        self.logger.debug(msg, *args, extra=extra_kwargs, **extracted_kwargs)

    def critical(self, msg: str, *args: Any, **kwargs: Any) -> None:
        extracted_kwargs, extra_kwargs = self._prepare_extra_and_standard_kwargs(kwargs)
        self.logger.critical(msg, *args, extra=extra_kwargs, **extracted_kwargs)

    def log(self, level: int, msg: str, *args: Any, **kwargs: Any) -> None:
        extracted_kwargs, extra_kwargs = self._prepare_extra_and_standard_kwargs(kwargs)
        self.logger.log(level, msg, *args, extra=extra_kwargs, **extracted_kwargs)

    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None:
        extracted_kwargs, extra_kwargs = self._prepare_extra_and_standard_kwargs(kwargs)
        extracted_kwargs["exc_info"] = True
        self.logger.error(msg, *args, extra=extra_kwargs, **extracted_kwargs)


def get_logger(name: str, component: str | None = None) -> StructuredLogger:
    return StructuredLogger(name, component=component)


def _ensure_structured(logger: Any) -> StructuredLogger:
    if isinstance(logger, StructuredLogger):
        return logger
    if isinstance(logger, logging.Logger):
        return StructuredLogger(logger.name)
    return StructuredLogger(getattr(logger, "name", "unknown"))


@contextlib.contextmanager
def log_operation(
    operation: str, logger: Any = None, level: int = logging.INFO, **context: Any
) -> Generator[None, None, None]:
    logger = get_logger("operation") if logger is None else _ensure_structured(logger)

    start_context = {"operation": operation}
    start_context.update(context)

    logger.log(level, f"Started {operation}", **start_context)

    start_time = time.monotonic()
    try:
        yield
    finally:
        duration = (time.monotonic() - start_time) * 1000
        final_context = dict(start_context)
        final_context["duration_ms"] = f"{duration:.2f}"
        logger.log(level, f"Completed {operation}", **final_context)


def log_error_with_context(
    exc: Exception, operation: str, component: str | None = None, logger: Any = None, **kwargs: Any
) -> None:
    logger = get_logger("error") if logger is None else _ensure_structured(logger)

    context: dict[str, Any] = {"operation": operation, "error_type": type(exc).__name__}
    if component:
        context["error_component"] = component
    context.update(kwargs)
    logger.error(str(exc), **context)


__all__ = [
    "get_logger",
    "log_operation",
    "log_error_with_context",
    "StructuredLogger",
]
