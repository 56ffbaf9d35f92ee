"""Tests for cycle length statistics."""

from __future__ import annotations

from datetime import date

import pytest

from custom_components.period_tracker.cycle_stats import (
    CycleAnalytics,
    CycleStatistics,
    average_period_length,
    calculate_cycle_analytics,
    calculate_cycle_statistics,
    cycle_lengths,
    cycle_variance,
    most_common_cycle_length,
    prediction_accuracy,
    prediction_confidence,
)

from .conftest import REGULAR_STARTS


def test_regular_cycles() -> None:
    stats = calculate_cycle_statistics(REGULAR_STARTS)
    assert stats == CycleStatistics(average=28, minimum=28, maximum=28, cycles=2)
    assert stats.has_data


def test_fewer_than_two_dates_returns_defaults() -> None:
    for starts in ([], [date(2026, 1, 15)]):
        stats = calculate_cycle_statistics(starts)
        assert (stats.average, stats.minimum, stats.maximum) == (28, 0, 0)
        assert not stats.has_data


def test_irregular_cycles() -> None:
    starts = [date(2026, 1, 1), date(2026, 1, 28), date(2026, 3, 2), date(2026, 3, 31)]
    assert cycle_lengths(starts) == [27, 33, 29]
    stats = calculate_cycle_statistics(starts)
    assert (stats.average, stats.minimum, stats.maximum) == (29, 27, 33)


def test_average_is_truncated() -> None:
    # Intervals 28 and 29: mean 28.5
    starts = [date(2026, 1, 1), date(2026, 1, 29), date(2026, 2, 27)]
    assert calculate_cycle_statistics(starts).average == 28


def test_intervals_across_leap_day() -> None:
    starts = [date(2024, 2, 10), date(2024, 3, 9)]
    assert cycle_lengths(starts) == [28]


def test_descending_input_gives_negative_intervals() -> None:
    stats = calculate_cycle_statistics(list(reversed(REGULAR_STARTS)))
    assert (stats.average, stats.minimum, stats.maximum) == (-28, -28, -28)


# Intervals 27, 33 and 29
IRREGULAR_STARTS = (date(2026, 1, 1), date(2026, 1, 28), date(2026, 3, 2), date(2026, 3, 31))


class TestAnalytics:
    def test_variance_is_population_variance(self) -> None:
        variance, std_dev = cycle_variance([27, 33, 29])
        assert variance == pytest.approx(56 / 9)
        assert std_dev == pytest.approx((56 / 9) ** 0.5)

    def test_variance_without_cycles(self) -> None:
        assert cycle_variance([]) == (0.0, 0.0)

    @pytest.mark.parametrize(
        ("lengths", "expected"),
        [
            ([], 28),
            ([27, 33, 29], 27),
            ([28, 30, 30, 28], 30),
            ([30, 29, 29, 30], 29),
        ],
    )
    def test_most_common(self, lengths: list[int], expected: int) -> None:
        assert most_common_cycle_length(lengths) == expected

    def test_confidence_drops_with_spread(self) -> None:
        assert prediction_confidence([28, 28]) == 1.0
        assert prediction_confidence([27, 33, 29]) == pytest.approx(
            1 - (56 / 9) ** 0.5 / (89 / 3)
        )

    def test_confidence_floor(self) -> None:
        assert prediction_confidence([10, 60]) == 0.3

    def test_accuracy_uses_earlier_cycles_only(self) -> None:
        # 33 misses the 27 predicted from the first cycle; 29 is within two of 30
        assert prediction_accuracy(IRREGULAR_STARTS) == 50.0

    def test_accuracy_needs_two_cycles(self) -> None:
        assert prediction_accuracy(REGULAR_STARTS[:2]) is None
        assert prediction_accuracy(REGULAR_STARTS) == 100.0

    def test_average_period_length(self) -> None:
        assert average_period_length([]) == 5
        assert average_period_length([5, 4]) == 4

    def test_regular_history(self) -> None:
        analytics = calculate_cycle_analytics(REGULAR_STARTS, [5, 5, 6])
        assert analytics == CycleAnalytics(
            variance=0.0,
            std_dev=0.0,
            most_common=28,
            confidence=1.0,
            accuracy=100.0,
            period_length=5,
        )

    def test_without_history(self) -> None:
        assert calculate_cycle_analytics([]) == CycleAnalytics()
