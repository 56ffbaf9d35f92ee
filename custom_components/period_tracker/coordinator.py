"""Data coordinator for period tracker."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from .calculator import CycleCalculator
from .const import CONF_FORECAST_CYCLES, DEFAULT_FORECAST_CYCLES, LOGGER

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from .history import HistoryStore


class PeriodTrackerUpdateCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Rebuild cycle predictions from the recorded history."""

    def __init__(
        self,
        hass: HomeAssistant,
        *,
        config_entry: ConfigEntry,
        history: HistoryStore,
    ) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            logger=LOGGER,
            config_entry=config_entry,
            name="period_tracker",
            # Day counters move at midnight even without new data
            update_interval=timedelta(hours=1),
        )
        self.history = history
        self.calculator = CycleCalculator()

    @property
    def forecast_cycles(self) -> int:
        return int(
            self.config_entry.options.get(CONF_FORECAST_CYCLES, DEFAULT_FORECAST_CYCLES)
        )

    async def _async_update_data(self) -> dict[str, Any]:
        calc = self.calculator
        calc.reference_start = self.history.get_last_period_start()
        calc.cycle_length = self.history.get_effective_cycle_length()
        stats = self.history.get_statistics()
        analytics = self.history.get_analytics()
        next_period = calc.next_period_range(analytics.period_length)

        forecast = self.forecast_cycles
        fertile_windows = [
            window
            for n in range(forecast + 1)
            if (window := calc.fertile_window_for_cycle(n)) is not None
        ]

        return {
            "last_period_start": calc.reference_start,
            "cycle_length": calc.cycle_length,
            "day_of_cycle": calc.day_of_cycle(),
            "next_period_start": calc.next_period_date(),
            "next_period_end": next_period.end if next_period else None,
            "days_until_next_period": calc.days_until_next_period(),
            "fertile_window": calc.fertile_window(),
            "days_until_fertile_window": calc.days_until_fertile_window(),
            "in_fertile_window": calc.is_today_in_fertile_window(),
            "statistics": stats,
            "analytics": analytics,
            "predicted_periods": calc.upcoming_periods(forecast),
            "predicted_fertile_windows": fertile_windows,
            "encrypted": self.history.encrypted,
        }
