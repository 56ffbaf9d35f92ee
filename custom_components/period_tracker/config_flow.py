"""Config flow for period tracker."""

from __future__ import annotations

from datetime import date
from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import callback
from homeassistant.helpers import selector

from .const import (
    CONF_CYCLE_LENGTH,
    CONF_ENCRYPT,
    CONF_ENCRYPTION_KEY,
    CONF_FORECAST_CYCLES,
    CONF_LAST_PERIOD,
    CONF_SHOW_FERTILITY_ON_CAL,
    DEFAULT_CYCLE_LENGTH,
    DEFAULT_FORECAST_CYCLES,
    DOMAIN,
    MAX_FORECAST_CYCLES,
)
from .storage import generate_key


class PeriodTrackerFlowHandler(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for the integration."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        """Handle the initial step."""
        errors: dict[str, str] = {}
        if user_input is not None:
            data = dict(user_input)
            try:
                if data.get(CONF_LAST_PERIOD):
                    date.fromisoformat(data[CONF_LAST_PERIOD])
            except ValueError:
                errors[CONF_LAST_PERIOD] = "invalid_date"
            else:
                await self.async_set_unique_id(DOMAIN)
                self._abort_if_unique_id_configured()
                data[CONF_CYCLE_LENGTH] = int(data.get(CONF_CYCLE_LENGTH, DEFAULT_CYCLE_LENGTH))
                if data.get(CONF_ENCRYPT, True):
                    data[CONF_ENCRYPT] = True
                    data[CONF_ENCRYPTION_KEY] = generate_key()
                return self.async_create_entry(title="Period Tracker", data=data)

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Optional(CONF_LAST_PERIOD): selector.DateSelector(),
                    vol.Optional(
                        CONF_CYCLE_LENGTH, default=DEFAULT_CYCLE_LENGTH
                    ): selector.NumberSelector(
                        selector.NumberSelectorConfig(
                            min=1, mode=selector.NumberSelectorMode.BOX
                        )
                    ),
                    vol.Optional(CONF_ENCRYPT, default=True): selector.BooleanSelector(),
                }
            ),
            errors=errors,
        )

    async def async_step_import(
        self, config: dict[str, Any]
    ) -> config_entries.ConfigFlowResult:
        """Handle import from YAML."""
        return await self.async_step_user(config)

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> config_entries.OptionsFlow:
        return OptionsFlowHandler()


class OptionsFlowHandler(config_entries.OptionsFlow):
    """Handle options for the integration."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        if user_input is not None:
            return self.async_create_entry(title="Options", data=user_input)

        current = self.config_entry.options
        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Optional(
                        CONF_SHOW_FERTILITY_ON_CAL,
                        default=bool(current.get(CONF_SHOW_FERTILITY_ON_CAL, False)),
                    ): selector.BooleanSelector(),
                    vol.Optional(
                        CONF_FORECAST_CYCLES,
                        default=int(current.get(CONF_FORECAST_CYCLES, DEFAULT_FORECAST_CYCLES)),
                    ): vol.All(vol.Coerce(int), vol.Range(min=1, max=MAX_FORECAST_CYCLES)),
                }
            ),
        )
