"""Trade executor interface consumed by the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from volume_bot.core.types import ExecutionMode


@dataclass(frozen=True, slots=True)
class ExecutionReceipt:
    """What the backend reports for one confirmed trade."""

    tx_id: str
    gas_used: str = "0"
    fee: float = 0.0


@runtime_checkable
class TradeExecutor(Protocol):
    """Backend that executes buys and sells for one asset.

    Implementations raise on failure; the orchestrator converts the exception into a
    failed trade result.
    """

    async def query_execution_mode(self, asset: str) -> ExecutionMode: ...

    async def buy(self, asset: str, base_amount: float, mode: ExecutionMode) -> ExecutionReceipt: ...

    async def sell(
        self, asset: str, asset_amount: float, mode: ExecutionMode
    ) -> ExecutionReceipt: ...


__all__ = ["ExecutionReceipt", "TradeExecutor"]
