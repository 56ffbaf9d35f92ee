"""Cycle length statistics."""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from .const import (
    ACCURACY_TOLERANCE_DAYS,
    DEFAULT_CYCLE_LENGTH,
    DEFAULT_PERIOD_LENGTH,
    MIN_CONFIDENCE,
)


@dataclass(frozen=True)
class CycleStatistics:
    """Average, shortest and longest cycle in days.

    With fewer than two period starts there is nothing to measure and the
    defaults apply: ``minimum`` and ``maximum`` of 0 mean "no data", not a
    real extreme.
    """

    average: int = DEFAULT_CYCLE_LENGTH
    minimum: int = 0
    maximum: int = 0
    cycles: int = 0

    @property
    def has_data(self) -> bool:
        return self.cycles > 0


@dataclass(frozen=True)
class CycleAnalytics:
    """How regular the recorded cycles are and how well they predict.

    ``confidence`` runs from 0.3 to 1 and drops as cycle lengths spread out.
    ``accuracy`` is the percentage of cycles that ended within two days of
    the length predicted from the cycles before them; it stays ``None``
    until there are two cycles to compare.
    """

    variance: float = 0.0
    std_dev: float = 0.0
    most_common: int = DEFAULT_CYCLE_LENGTH
    confidence: float = 1.0
    accuracy: float | None = None
    period_length: int = DEFAULT_PERIOD_LENGTH


def cycle_lengths(start_dates: Sequence[date]) -> list[int]:
    """Return the day counts between consecutive period starts."""
    return [
        (start_dates[i + 1] - start_dates[i]).days
        for i in range(len(start_dates) - 1)
    ]


def calculate_cycle_statistics(start_dates: Sequence[date]) -> CycleStatistics:
    """Compute statistics from period starts in chronological order.

    Intervals are taken in the order given, so a descending sequence yields
    negative lengths. The average is truncated, not rounded.
    """
    if len(start_dates) < 2:
        return CycleStatistics()

    lengths = cycle_lengths(start_dates)
    return CycleStatistics(
        average=int(sum(lengths) / len(lengths)),
        minimum=min(lengths),
        maximum=max(lengths),
        cycles=len(lengths),
    )


def cycle_variance(lengths: Sequence[int]) -> tuple[float, float]:
    """Return the population variance and standard deviation."""
    if not lengths:
        return 0.0, 0.0
    mean = sum(lengths) / len(lengths)
    variance = sum((x - mean) ** 2 for x in lengths) / len(lengths)
    return variance, math.sqrt(variance)


def most_common_cycle_length(lengths: Sequence[int]) -> int:
    """Return the most frequent length; ties go to the first to reach the top count."""
    counts: Counter[int] = Counter()
    best, best_count = DEFAULT_CYCLE_LENGTH, 0
    for length in lengths:
        counts[length] += 1
        if counts[length] > best_count:
            best, best_count = length, counts[length]
    return best


def prediction_confidence(lengths: Sequence[int]) -> float:
    """Return 1 minus the coefficient of variation, kept within [0.3, 1]."""
    if not lengths:
        return 1.0
    mean = sum(lengths) / len(lengths)
    if mean <= 0:
        return MIN_CONFIDENCE
    _, std_dev = cycle_variance(lengths)
    return min(1.0, max(MIN_CONFIDENCE, 1 - std_dev / mean))


def prediction_accuracy(start_dates: Sequence[date]) -> float | None:
    """Return how often past predictions hit, as a percentage.

    Each cycle is predicted from the truncated mean of the cycles before it,
    so the first cycle is never scored.
    """
    lengths = cycle_lengths(start_dates)
    if len(lengths) < 2:
        return None
    hits = 0
    for i in range(1, len(lengths)):
        expected = int(sum(lengths[:i]) / i)
        if abs(lengths[i] - expected) <= ACCURACY_TOLERANCE_DAYS:
            hits += 1
    return 100 * hits / (len(lengths) - 1)


def average_period_length(durations: Sequence[int]) -> int:
    """Truncated mean of recorded period durations."""
    if not durations:
        return DEFAULT_PERIOD_LENGTH
    return int(sum(durations) / len(durations))


def calculate_cycle_analytics(
    start_dates: Sequence[date], durations: Sequence[int] = ()
) -> CycleAnalytics:
    """Compute regularity and accuracy figures from chronological starts."""
    lengths = cycle_lengths(start_dates)
    variance, std_dev = cycle_variance(lengths)
    return CycleAnalytics(
        variance=variance,
        std_dev=std_dev,
        most_common=most_common_cycle_length(lengths),
        confidence=prediction_confidence(lengths),
        accuracy=prediction_accuracy(start_dates),
        period_length=average_period_length(durations),
    )
