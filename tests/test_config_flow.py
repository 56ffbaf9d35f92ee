"""Tests for the period tracker config and options flows."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from homeassistant import config_entries
from homeassistant.core import HomeAssistant
from homeassistant.data_entry_flow import FlowResultType
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.period_tracker.const import (
    CONF_CYCLE_LENGTH,
    CONF_ENCRYPT,
    CONF_ENCRYPTION_KEY,
    CONF_FORECAST_CYCLES,
    CONF_LAST_PERIOD,
    CONF_SHOW_FERTILITY_ON_CAL,
    DOMAIN,
)

pytestmark = pytest.mark.usefixtures("enable_custom_integrations")


async def test_user_flow_creates_encrypted_entry(hass: HomeAssistant) -> None:
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    assert result["type"] is FlowResultType.FORM

    with patch(
        "custom_components.period_tracker.async_setup_entry", return_value=True
    ):
        result = await hass.config_entries.flow.async_configure(
            result["flow_id"],
            {CONF_LAST_PERIOD: "2026-03-12", CONF_CYCLE_LENGTH: 30, CONF_ENCRYPT: True},
        )
        await hass.async_block_till_done()

    assert result["type"] is FlowResultType.CREATE_ENTRY
    data = result["data"]
    assert data[CONF_LAST_PERIOD] == "2026-03-12"
    assert data[CONF_CYCLE_LENGTH] == 30
    assert data[CONF_ENCRYPT] is True
    assert data[CONF_ENCRYPTION_KEY]


async def test_user_flow_without_encryption(hass: HomeAssistant) -> None:
    with patch(
        "custom_components.period_tracker.async_setup_entry", return_value=True
    ):
        result = await hass.config_entries.flow.async_init(
            DOMAIN,
            context={"source": config_entries.SOURCE_IMPORT},
            data={CONF_CYCLE_LENGTH: 28, CONF_ENCRYPT: False},
        )
        await hass.async_block_till_done()

    assert result["type"] is FlowResultType.CREATE_ENTRY
    assert CONF_ENCRYPTION_KEY not in result["data"]


async def test_options_flow(hass: HomeAssistant) -> None:
    entry = MockConfigEntry(domain=DOMAIN, data={CONF_ENCRYPT: False})
    entry.add_to_hass(hass)

    result = await hass.config_entries.options.async_init(entry.entry_id)
    assert result["type"] is FlowResultType.FORM

    with patch(
        "custom_components.period_tracker.async_setup_entry", return_value=True
    ):
        result = await hass.config_entries.options.async_configure(
            result["flow_id"],
            {CONF_SHOW_FERTILITY_ON_CAL: True, CONF_FORECAST_CYCLES: 6},
        )
        await hass.async_block_till_done()

    assert result["type"] is FlowResultType.CREATE_ENTRY
    assert entry.options == {CONF_SHOW_FERTILITY_ON_CAL: True, CONF_FORECAST_CYCLES: 6}
