"""Hypothesis strategies for volume bot invariants."""

from __future__ import annotations

from datetime import UTC, datetime

from hypothesis import strategies as st

from volume_bot.core.types import TradeAction, TradeResult

T0 = datetime(2024, 1, 1, tzinfo=UTC)

amount_strategy = st.floats(min_value=1e-6, max_value=1.0, allow_nan=False, allow_infinity=False)

gas_strategy = st.one_of(
    st.integers(min_value=0, max_value=500_000).map(str),
    st.sampled_from(["", "n/a", "0x"]),
)

trade_result_strategy = st.builds(
    lambda success, action, amount, gas, fee: TradeResult(
        success=success,
        tx_id="0xabc" if success else "",
        amount=amount,
        action=action,
        timestamp=T0,
        gas_used=gas if success else "0",
        error=None if success else "reverted",
        fee=fee,
    ),
    success=st.booleans(),
    action=st.sampled_from(list(TradeAction)),
    amount=amount_strategy,
    gas=gas_strategy,
    fee=st.floats(min_value=0.0, max_value=0.01, allow_nan=False),
)

weights_strategy = st.lists(
    st.integers(min_value=0, max_value=100), min_size=1, max_size=8
).filter(lambda raw: sum(raw) > 0).map(lambda raw: [w / sum(raw) for w in raw])
