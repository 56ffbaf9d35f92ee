"""Custom types for period_tracker."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from homeassistant.config_entries import ConfigEntry

if TYPE_CHECKING:
    from homeassistant.loader import Integration

    from .coordinator import PeriodTrackerUpdateCoordinator
    from .history import HistoryStore
    from .storage import StorePrefs

    class PeriodTrackerConfigEntry(ConfigEntry["PeriodTrackerData"]):
        """Config entry type for this integration."""
else:
    PeriodTrackerConfigEntry = ConfigEntry


@dataclass
class PeriodTrackerData:
    """Runtime data for the integration."""

    coordinator: PeriodTrackerUpdateCoordinator
    integration: Integration
    history: HistoryStore
    prefs: StorePrefs
