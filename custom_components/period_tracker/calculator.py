"""Cycle prediction for period_tracker.

Predictions are anchored on the start of the most recent period. The next
period is ``cycle_length`` days after it; the fertile window is a fixed
range of days 12 to 16 after it, whatever the cycle length.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from homeassistant.util import dt as dt_util

from .const import (
    DEFAULT_CYCLE_LENGTH,
    DEFAULT_PERIOD_LENGTH,
    FERTILE_WINDOW_END,
    FERTILE_WINDOW_START,
)


@dataclass(frozen=True)
class DateRange:
    """An inclusive range of calendar days."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"Range end {self.end} is before start {self.start}")

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def __str__(self) -> str:
        return f"{self.start} - {self.end}"


def is_leap_year(year: int) -> bool:
    """Return True for Gregorian leap years."""
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def is_valid_date(day: int, month: int, year: int) -> bool:
    """Return True if the day/month/year triple is a real calendar date."""
    try:
        date(year, month, day)
    except ValueError:
        return False
    return True


def calculate_period_length(start: date | None, end: date | None) -> int:
    """Return the inclusive number of days from start to end.

    Returns 0 when either date is missing or end falls before start.
    """
    if start is None or end is None or end < start:
        return 0
    return (end - start).days + 1


def _clamp_cycle_length(cycle_length: int) -> int:
    return cycle_length if cycle_length > 0 else DEFAULT_CYCLE_LENGTH


class CycleCalculator:
    """Predict periods and fertile windows from a reference period start.

    Usage::

        calculator = CycleCalculator(date(2026, 3, 12), 28)
        calculator.next_period_date()  # date(2026, 4, 9)
        calculator.fertile_window()    # DateRange(2026-03-24, 2026-03-28)

    "Today" is read from the Home Assistant clock on every call.
    """

    def __init__(
        self,
        reference_start: date | None = None,
        cycle_length: int = DEFAULT_CYCLE_LENGTH,
    ) -> None:
        self._reference_start = reference_start
        self._cycle_length = _clamp_cycle_length(cycle_length)

    @property
    def reference_start(self) -> date | None:
        """Start of the period predictions are anchored on."""
        return self._reference_start

    @reference_start.setter
    def reference_start(self, value: date | None) -> None:
        self._reference_start = value

    @property
    def cycle_length(self) -> int:
        return self._cycle_length

    @cycle_length.setter
    def cycle_length(self, value: int) -> None:
        self._cycle_length = _clamp_cycle_length(value)

    @staticmethod
    def _today() -> date:
        return dt_util.now().date()

    def next_period_date(self) -> date | None:
        if self._reference_start is None:
            return None
        return self._reference_start + timedelta(days=self._cycle_length)

    def next_period_range(self, period_length: int = DEFAULT_PERIOD_LENGTH) -> DateRange | None:
        """Return the days the next period is expected to cover."""
        start = self.next_period_date()
        if start is None:
            return None
        return DateRange(start, start + timedelta(days=max(1, period_length) - 1))

    def fertile_window(self) -> DateRange | None:
        """Return the fertile window of the current cycle."""
        return self.fertile_window_for_cycle(0)

    def fertile_window_for_cycle(self, cycle: int) -> DateRange | None:
        """Return the fertile window ``cycle`` cycles away from the reference.

        ``0`` is the current cycle; negative values look back.
        """
        if self._reference_start is None:
            return None
        cycle_start = self._reference_start + timedelta(days=self._cycle_length * cycle)
        return DateRange(
            cycle_start + timedelta(days=FERTILE_WINDOW_START),
            cycle_start + timedelta(days=FERTILE_WINDOW_END),
        )

    def upcoming_periods(self, count: int) -> list[date]:
        """Return the next ``count`` predicted period starts."""
        if self._reference_start is None:
            return []
        return [
            self._reference_start + timedelta(days=self._cycle_length * k)
            for k in range(1, count + 1)
        ]

    def days_until_next_period(self) -> int | None:
        """Signed days from today to the next period, None without a reference."""
        next_period = self.next_period_date()
        if next_period is None:
            return None
        return (next_period - self._today()).days

    def days_until_fertile_window(self) -> int | None:
        """Signed days from today to the fertile window start."""
        window = self.fertile_window()
        if window is None:
            return None
        return (window.start - self._today()).days

    def is_today_in_fertile_window(self) -> bool:
        window = self.fertile_window()
        if window is None:
            return False
        return window.contains(self._today())

    def day_of_cycle(self) -> int | None:
        """Return the 1-indexed day of the cycle today falls on."""
        if self._reference_start is None:
            return None
        return (self._today() - self._reference_start).days + 1
