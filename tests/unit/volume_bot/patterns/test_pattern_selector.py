"""Tests for weighted pattern selection and base-amount sizing."""

from __future__ import annotations

import random

import pytest

from volume_bot.core.types import PatternType
from volume_bot.patterns import (
    DEFAULT_PATTERN_WEIGHTS,
    DEFAULT_PATTERNS,
    PatternSelector,
    calculate_base_amount,
)


class SequenceRandom:
    """Returns the given draws in order."""

    def __init__(self, *draws: float) -> None:
        self._draws = list(draws)

    def random(self) -> float:
        return self._draws.pop(0)


@pytest.fixture
def selector() -> PatternSelector:
    return PatternSelector(DEFAULT_PATTERNS, DEFAULT_PATTERN_WEIGHTS, rng=random.Random(7))


class TestPick:
    def test_cumulative_table_ends_at_one(self, selector: PatternSelector) -> None:
        assert selector.cumulative_weights[-1] == pytest.approx(1.0)
        assert len(selector.cumulative_weights) == len(DEFAULT_PATTERNS)

    @pytest.mark.parametrize(
        ("draw", "expected"),
        [
            (0.0, PatternType.BUY_BUY_BUY),
            (0.10, PatternType.BUY_BUY_BUY),
            (0.20, PatternType.SELL_SELL_BUY),
            (0.40, PatternType.SELL_BUY_SELL),
            (0.60, PatternType.BUY_SELL_BUY),
            (0.80, PatternType.MIXED_RANDOM),
            (0.90, PatternType.VOLUME_SPIKE),
            (0.99, PatternType.STEALTH_MODE),
        ],
    )
    def test_draw_selects_first_pattern_with_cumulative_weight_at_or_above(
        self, selector: PatternSelector, draw: float, expected: PatternType
    ) -> None:
        assert selector.pick(draw).type == expected.value

    def test_exact_boundary_selects_lower_pattern(self, selector: PatternSelector) -> None:
        boundary = selector.cumulative_weights[0]
        assert selector.pick(boundary).type == PatternType.BUY_BUY_BUY.value

    def test_draw_beyond_table_falls_back_to_first_pattern(
        self, selector: PatternSelector
    ) -> None:
        assert selector.pick(1.5).type == DEFAULT_PATTERNS[0].type

    def test_weights_short_of_one_fall_back_to_first(self) -> None:
        patterns = DEFAULT_PATTERNS[:2]
        selector = PatternSelector(patterns, (0.3, 0.3))
        assert selector.pick(0.9) is patterns[0]

    def test_zero_weight_pattern_is_never_selected(self) -> None:
        patterns = DEFAULT_PATTERNS[:3]
        selector = PatternSelector(patterns, (0.5, 0.0, 0.5), rng=random.Random(3))
        picks = {selector.select().type for _ in range(500)}
        assert patterns[1].type not in picks


class TestSelect:
    def test_same_seed_gives_same_sequence(self) -> None:
        a = PatternSelector(DEFAULT_PATTERNS, DEFAULT_PATTERN_WEIGHTS, rng=random.Random(99))
        b = PatternSelector(DEFAULT_PATTERNS, DEFAULT_PATTERN_WEIGHTS, rng=random.Random(99))
        assert [a.select().type for _ in range(50)] == [b.select().type for _ in range(50)]

    def test_rejects_misaligned_weights(self) -> None:
        with pytest.raises(ValueError, match="align"):
            PatternSelector(DEFAULT_PATTERNS, (0.5, 0.5))

    def test_rejects_empty_catalog(self) -> None:
        with pytest.raises(ValueError):
            PatternSelector((), ())


class TestBaseAmount:
    def test_midpoint_with_positive_jitter(self) -> None:
        amount = calculate_base_amount(0.0001, 0.001, SequenceRandom(0.5, 1.0))
        assert amount == pytest.approx(0.00055 * 1.05)

    def test_midpoint_with_negative_jitter(self) -> None:
        amount = calculate_base_amount(0.0001, 0.001, SequenceRandom(0.5, 0.0))
        assert amount == pytest.approx(0.00055 * 0.95)

    def test_floor_at_minimum(self) -> None:
        assert calculate_base_amount(0.0001, 0.001, SequenceRandom(0.0, 0.0)) == 0.0001

    def test_can_exceed_maximum_by_jitter(self) -> None:
        amount = calculate_base_amount(0.0001, 0.001, SequenceRandom(0.999999, 0.999999))
        assert amount > 0.001
        assert amount <= 0.001 * 1.05

    def test_equal_bounds_never_go_below_minimum(self) -> None:
        rng = random.Random(5)
        for _ in range(100):
            assert calculate_base_amount(0.001, 0.001, rng) >= 0.001
