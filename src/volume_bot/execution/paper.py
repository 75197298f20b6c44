"""Deterministic in-process trade executor for development, dry runs and tests."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from dataclasses import dataclass

from volume_bot.core.types import ExecutionMode, TradeAction
from volume_bot.errors import StartupError, TradeExecutionError
from volume_bot.execution.base import ExecutionReceipt
from volume_bot.utilities.logging_patterns import get_logger

logger = get_logger(__name__, component="paper_executor")

# Gas units per operation; fixed so runs are reproducible.
SALE_BUY_GAS = 150_000
SALE_SELL_GAS = 120_000
POOL_SWAP_GAS = 180_000
APPROVAL_GAS = 46_000


@dataclass(frozen=True, slots=True)
class SwapQuote:
    """Pool quote for an exact-input swap."""

    action: TradeAction
    amount_in: float
    amount_out: float
    min_out: float
    fee: float


@dataclass(slots=True)
class PaperFill:
    tx_id: str
    mode: ExecutionMode
    action: TradeAction
    amount_in: float
    amount_out: float
    fee: float
    gas_used: int


class PaperTradeExecutor:
    """Simulated backend with a pre-listing sale venue and a post-listing pool venue.

    - Fixed price (base currency per token); no price impact.
    - Buys spend base currency and credit token inventory net of fees.
    - Sells debit token inventory; selling more than held raises.
    - Spend authorization is established lazily before the first sell on each venue
      and its gas is charged to that sell.
    - Pool trades go through quote -> submit -> confirm with a ``min_out`` guard.
    - ``fail_calls`` holds 1-based trade call numbers that raise instead of filling.
    """

    def __init__(
        self,
        *,
        listed: bool = False,
        price: float = 1.0,
        token_inventory: float = 1.0,
        sale_fee_rate: float = 0.01,
        pool_fee_rate: float = 0.0025,
        slippage_tolerance: float = 0.005,
        fail_calls: Iterable[int] = (),
        mode_error: Exception | None = None,
    ) -> None:
        if price <= 0:
            raise ValueError(f"price must be positive, got {price}")
        self.listed = listed
        self.price = float(price)
        self.token_inventory = float(token_inventory)
        self.sale_fee_rate = float(sale_fee_rate)
        self.pool_fee_rate = float(pool_fee_rate)
        self.slippage_tolerance = float(slippage_tolerance)
        self.mode_error = mode_error
        self._fail_calls = set(fail_calls)
        self._approved: set[ExecutionMode] = set()
        self._calls = 0
        self.fills: list[PaperFill] = []

    # ---- Failure injection ----
    def fail_next(self, count: int = 1) -> None:
        """Make the next ``count`` trade calls raise."""
        start = self._calls + 1
        self._fail_calls.update(range(start, start + count))

    @property
    def call_count(self) -> int:
        return self._calls

    def is_approved(self, mode: ExecutionMode) -> bool:
        return mode in self._approved

    # ---- Venue discovery ----
    async def query_execution_mode(self, asset: str) -> ExecutionMode:
        if self.mode_error is not None:
            raise StartupError(
                f"Could not determine listing status for {asset}",
                context={"asset": asset},
                original_error=self.mode_error,
            )
        mode = ExecutionMode.POST_LISTING if self.listed else ExecutionMode.PRE_LISTING
        logger.info(f"Listing status for {asset}: {mode.value}", asset=asset, mode=mode.value)
        return mode

    # ---- Trading ----
    async def buy(self, asset: str, base_amount: float, mode: ExecutionMode) -> ExecutionReceipt:
        self._begin_call(asset, TradeAction.BUY, base_amount)
        if mode is ExecutionMode.POST_LISTING:
            return self._swap(asset, TradeAction.BUY, base_amount)

        fee = base_amount * self.sale_fee_rate
        tokens = (base_amount - fee) / self.price
        self.token_inventory += tokens
        return self._record(asset, mode, TradeAction.BUY, base_amount, tokens, fee, SALE_BUY_GAS)

    async def sell(
        self, asset: str, asset_amount: float, mode: ExecutionMode
    ) -> ExecutionReceipt:
        self._begin_call(asset, TradeAction.SELL, asset_amount)
        self._require_inventory(asset, asset_amount)
        approval_gas = self._ensure_approval(asset, mode)
        if mode is ExecutionMode.POST_LISTING:
            return self._swap(asset, TradeAction.SELL, asset_amount, extra_gas=approval_gas)

        proceeds = asset_amount * self.price
        fee = proceeds * self.sale_fee_rate
        self.token_inventory -= asset_amount
        return self._record(
            asset,
            mode,
            TradeAction.SELL,
            asset_amount,
            proceeds - fee,
            fee,
            SALE_SELL_GAS + approval_gas,
        )

    # ---- Pool venue ----
    def quote(self, action: TradeAction, amount_in: float) -> SwapQuote:
        if action is TradeAction.BUY:
            fee = amount_in * self.pool_fee_rate
            amount_out = (amount_in - fee) / self.price
        else:
            gross = amount_in * self.price
            fee = gross * self.pool_fee_rate
            amount_out = gross - fee
        min_out = amount_out * (1 - self.slippage_tolerance)
        return SwapQuote(action, amount_in, amount_out, min_out, fee)

    def _swap(
        self, asset: str, action: TradeAction, amount_in: float, *, extra_gas: int = 0
    ) -> ExecutionReceipt:
        quote = self.quote(action, amount_in)
        # Submit at the current price, then confirm against the quoted floor.
        executed = self.quote(action, amount_in)
        if executed.amount_out < quote.min_out:
            raise TradeExecutionError(
                "Swap output below minimum",
                action=action.value,
                amount=amount_in,
                context={"asset": asset, "min_out": quote.min_out, "out": executed.amount_out},
            )
        if action is TradeAction.BUY:
            self.token_inventory += executed.amount_out
        else:
            self.token_inventory -= amount_in
        return self._record(
            asset,
            ExecutionMode.POST_LISTING,
            action,
            amount_in,
            executed.amount_out,
            executed.fee,
            POOL_SWAP_GAS + extra_gas,
        )

    # ---- Helpers ----
    def _begin_call(self, asset: str, action: TradeAction, amount: float) -> None:
        self._calls += 1
        if amount <= 0:
            raise TradeExecutionError(
                "Trade amount must be positive",
                action=action.value,
                amount=amount,
                context={"asset": asset},
            )
        if self._calls in self._fail_calls:
            raise TradeExecutionError(
                "Simulated execution failure",
                action=action.value,
                amount=amount,
                context={"asset": asset, "call": self._calls},
            )

    def _require_inventory(self, asset: str, amount: float) -> None:
        if amount > self.token_inventory:
            raise TradeExecutionError(
                "Insufficient token balance",
                action=TradeAction.SELL.value,
                amount=amount,
                context={"asset": asset, "held": self.token_inventory},
            )

    def _ensure_approval(self, asset: str, mode: ExecutionMode) -> int:
        if mode in self._approved:
            return 0
        self._approved.add(mode)
        logger.info(
            f"Approved {asset} spending on {mode.value} venue",
            asset=asset,
            mode=mode.value,
        )
        return APPROVAL_GAS

    def _record(
        self,
        asset: str,
        mode: ExecutionMode,
        action: TradeAction,
        amount_in: float,
        amount_out: float,
        fee: float,
        gas: int,
    ) -> ExecutionReceipt:
        tx_id = self._tx_id(asset, mode, action, amount_in)
        self.fills.append(PaperFill(tx_id, mode, action, amount_in, amount_out, fee, gas))
        return ExecutionReceipt(tx_id=tx_id, gas_used=str(gas), fee=fee)

    def _tx_id(self, asset: str, mode: ExecutionMode, action: TradeAction, amount: float) -> str:
        payload = f"{asset}:{mode.value}:{action.value}:{amount!r}:{self._calls}"
        return "0x" + hashlib.sha256(payload.encode()).hexdigest()


__all__ = [
    "PaperTradeExecutor",
    "PaperFill",
    "SwapQuote",
    "SALE_BUY_GAS",
    "SALE_SELL_GAS",
    "POOL_SWAP_GAS",
    "APPROVAL_GAS",
]
