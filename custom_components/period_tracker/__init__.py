"""Setup for period tracker integration."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.const import Platform
from homeassistant.core import callback
from homeassistant.helpers import config_validation as cv
from homeassistant.loader import async_get_loaded_integration

from .const import (
    CONF_CYCLE_LENGTH,
    CONF_ENCRYPT,
    CONF_ENCRYPTION_KEY,
    CONF_LAST_PERIOD,
    DEFAULT_CYCLE_LENGTH,
    DOMAIN,
    LOGGER,
)
from .coordinator import PeriodTrackerUpdateCoordinator
from .data import PeriodTrackerConfigEntry, PeriodTrackerData
from .history import HistoryStore
from .services import async_register_services
from .storage import async_open_prefs

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.typing import ConfigType

PLATFORMS: list[Platform] = [
    Platform.SENSOR,
    Platform.BINARY_SENSOR,
    Platform.CALENDAR,
]


CONFIG_SCHEMA = vol.Schema(
    {
        DOMAIN: vol.Schema(
            {
                vol.Optional(CONF_LAST_PERIOD): cv.date,
                vol.Optional(
                    CONF_CYCLE_LENGTH, default=DEFAULT_CYCLE_LENGTH
                ): cv.positive_int,
                vol.Optional(CONF_ENCRYPT, default=True): cv.boolean,
            }
        )
    },
    extra=vol.ALLOW_EXTRA,
)


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Set up integration from YAML configuration."""
    if DOMAIN not in config:
        return True
    conf = config[DOMAIN]
    data = {
        CONF_CYCLE_LENGTH: conf[CONF_CYCLE_LENGTH],
        CONF_ENCRYPT: conf[CONF_ENCRYPT],
    }
    if last_period := conf.get(CONF_LAST_PERIOD):
        data[CONF_LAST_PERIOD] = last_period.isoformat()
    hass.async_create_task(
        hass.config_entries.flow.async_init(
            DOMAIN,
            context={"source": config_entries.SOURCE_IMPORT},
            data=data,
        )
    )
    return True


def _seed_start(entry: PeriodTrackerConfigEntry) -> date | None:
    raw = entry.data.get(CONF_LAST_PERIOD)
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        LOGGER.warning("Ignoring invalid %s in config entry: %r", CONF_LAST_PERIOD, raw)
        return None


@callback
def _async_seed_history(
    hass: HomeAssistant, entry: PeriodTrackerConfigEntry, history: HistoryStore
) -> None:
    """Move the config entry's initial values into an empty history.

    The values are then dropped from the entry, so a later reload never
    brings back a history the user cleared.
    """
    if not history.get_entries():
        if (seed := _seed_start(entry)) is not None:
            history.save_entry(seed)
        if CONF_CYCLE_LENGTH in entry.data:
            history.set_manual_cycle_length(int(entry.data[CONF_CYCLE_LENGTH]))

    data = {
        key: value
        for key, value in entry.data.items()
        if key not in (CONF_LAST_PERIOD, CONF_CYCLE_LENGTH)
    }
    hass.config_entries.async_update_entry(entry, data=data)
    LOGGER.debug("Seeded period history from config entry %s", entry.entry_id)


async def async_setup_entry(
    hass: HomeAssistant, entry: PeriodTrackerConfigEntry
) -> bool:
    """Set up period tracker from a config entry."""
    async_register_services(hass)

    prefs = await async_open_prefs(
        hass,
        entry.entry_id,
        encrypt=bool(entry.data.get(CONF_ENCRYPT, False)),
        secret=entry.data.get(CONF_ENCRYPTION_KEY),
    )
    history = HistoryStore(prefs)
    if CONF_LAST_PERIOD in entry.data or CONF_CYCLE_LENGTH in entry.data:
        _async_seed_history(hass, entry, history)

    coordinator = PeriodTrackerUpdateCoordinator(
        hass,
        config_entry=entry,
        history=history,
    )
    entry.runtime_data = PeriodTrackerData(
        coordinator=coordinator,
        integration=async_get_loaded_integration(hass, entry.domain),
        history=history,
        prefs=prefs,
    )
    await coordinator.async_config_entry_first_refresh()
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    entry.async_on_unload(entry.add_update_listener(async_reload_entry))
    return True


async def async_unload_entry(
    hass: HomeAssistant, entry: PeriodTrackerConfigEntry
) -> bool:
    """Unload a config entry."""
    if unload_ok := await hass.config_entries.async_unload_platforms(entry, PLATFORMS):
        # Write pending preference changes before the store is dropped
        await entry.runtime_data.prefs.async_save()
    return unload_ok


async def async_reload_entry(
    hass: HomeAssistant, entry: PeriodTrackerConfigEntry
) -> None:
    """Reload when config entry options change."""
    await hass.config_entries.async_reload(entry.entry_id)
