"""Weighted pattern selection and randomized base-amount sizing.

Both draw from an injectable :class:`random.Random` so a seeded run is reproducible.
"""

from __future__ import annotations

import random
from bisect import bisect_left
from collections.abc import Sequence
from itertools import accumulate

from volume_bot.core.types import TradingPattern
from volume_bot.utilities.logging_patterns import get_logger

logger = get_logger(__name__, component="pattern_selector")

BASE_AMOUNT_VARIANCE = 0.1


class PatternSelector:
    """Pick patterns with probability proportional to their configured weight.

    The cumulative-weight table is built once; a draw ``r`` in ``[0, 1)`` selects the
    first pattern whose cumulative weight is ``>= r``.  When floating-point drift leaves
    ``r`` above the last cumulative weight the first catalog entry is returned.
    """

    def __init__(
        self,
        patterns: Sequence[TradingPattern],
        weights: Sequence[float],
        rng: random.Random | None = None,
    ) -> None:
        if not patterns:
            raise ValueError("at least one pattern is required")
        if len(patterns) != len(weights):
            raise ValueError(
                f"weights ({len(weights)}) must align with patterns ({len(patterns)})"
            )
        self._patterns = tuple(patterns)
        self._weights = tuple(float(w) for w in weights)
        self._cumulative = tuple(accumulate(self._weights))
        self._rng = rng or random.Random()

    @property
    def patterns(self) -> tuple[TradingPattern, ...]:
        return self._patterns

    @property
    def cumulative_weights(self) -> tuple[float, ...]:
        return self._cumulative

    def pick(self, r: float) -> TradingPattern:
        """Resolve a draw ``r`` against the cumulative table."""
        index = bisect_left(self._cumulative, r)
        if index >= len(self._patterns):
            logger.debug(
                f"Draw {r:.6f} exceeded cumulative weight {self._cumulative[-1]:.6f}; "
                "falling back to first pattern",
                draw=r,
            )
            return self._patterns[0]
        return self._patterns[index]

    def select(self) -> TradingPattern:
        return self.pick(self._rng.random())


def calculate_base_amount(
    min_amount: float,
    max_amount: float,
    rng: random.Random,
    variance: float = BASE_AMOUNT_VARIANCE,
) -> float:
    """Uniform amount in ``[min, max]`` with +/- ``variance/2`` jitter, floored at ``min``.

    There is no upper clamp: jitter can push the result up to 5% above ``max_amount``.
    """
    base = min_amount + rng.random() * (max_amount - min_amount)
    jitter = base * (rng.random() - 0.5) * variance
    return max(min_amount, base + jitter)


__all__ = ["PatternSelector", "calculate_base_amount", "BASE_AMOUNT_VARIANCE"]
