"""Trade execution backends."""

from __future__ import annotations

from typing import TYPE_CHECKING

from volume_bot.errors import StartupError

from .base import ExecutionReceipt, TradeExecutor
from .paper import PaperTradeExecutor

if TYPE_CHECKING:
    from volume_bot.config.settings import Settings


def create_executor(settings: Settings) -> TradeExecutor:
    """Build the executor named by ``settings.executor``."""
    kind = settings.executor.strip().lower()
    if kind == "paper":
        return PaperTradeExecutor(listed=settings.listed)
    raise StartupError(
        f"Unknown executor backend: {settings.executor!r}",
        context={"executor": settings.executor, "supported": ["paper"]},
    )


__all__ = ["ExecutionReceipt", "TradeExecutor", "PaperTradeExecutor", "create_executor"]
