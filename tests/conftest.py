"""Shared fixtures for period_tracker tests."""

from __future__ import annotations

from datetime import date
from typing import Any
from unittest.mock import patch

import pytest
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.period_tracker.const import (
    CONF_CYCLE_LENGTH,
    CONF_ENCRYPT,
    CONF_ENCRYPTION_KEY,
    DOMAIN,
)
from custom_components.period_tracker.history import HistoryStore
from custom_components.period_tracker.storage import MemoryPrefs, generate_key

# Starts of three regular 28-day cycles
REGULAR_STARTS = (date(2026, 1, 15), date(2026, 2, 12), date(2026, 3, 12))


@pytest.fixture
def prefs() -> MemoryPrefs:
    return MemoryPrefs()


@pytest.fixture
def history(prefs: MemoryPrefs) -> HistoryStore:
    return HistoryStore(prefs)


async def setup_integration(hass: HomeAssistant, data: dict[str, Any]) -> MockConfigEntry:
    """Set up a config entry with the entity platforms that need no HTTP server."""
    entry = MockConfigEntry(domain=DOMAIN, data=data)
    entry.add_to_hass(hass)
    with patch(
        "custom_components.period_tracker.PLATFORMS",
        [Platform.SENSOR, Platform.BINARY_SENSOR],
    ):
        assert await hass.config_entries.async_setup(entry.entry_id)
        await hass.async_block_till_done()
    return entry


@pytest.fixture
async def entry(hass: HomeAssistant, enable_custom_integrations: None) -> MockConfigEntry:
    """An encrypted, loaded config entry with no recorded history."""
    return await setup_integration(
        hass,
        {CONF_CYCLE_LENGTH: 28, CONF_ENCRYPT: True, CONF_ENCRYPTION_KEY: generate_key()},
    )
