"""Services for period_tracker."""

from __future__ import annotations

from datetime import date as date_cls
from pathlib import Path
from typing import TYPE_CHECKING

import voluptuous as vol
from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from homeassistant.helpers import config_validation as cv, entity_registry as er
from homeassistant.util import dt as dt_util

from .const import DOMAIN, LOGGER

if TYPE_CHECKING:
    from .data import PeriodTrackerConfigEntry


SERVICE_LOG_PERIOD = "log_period"
SERVICE_DELETE_PERIOD = "delete_period"
SERVICE_SET_CYCLE_LENGTH = "set_cycle_length"
SERVICE_EXPORT_CSV = "export_csv"
SERVICE_CLEAR_HISTORY = "clear_history"

_TARGET = {
    vol.Optional("entity_id"): cv.entity_ids,
    vol.Optional("entry_id"): cv.string,
}

_LOG_SCHEMA = vol.Schema(
    {
        vol.Optional("start"): cv.date,
        vol.Optional("end"): cv.date,
        **_TARGET,
    }
)

_DELETE_SCHEMA = vol.Schema({vol.Required("start"): cv.date, **_TARGET})

_CYCLE_LENGTH_SCHEMA = vol.Schema(
    {vol.Required("cycle_length"): cv.positive_int, **_TARGET}
)

_EXPORT_SCHEMA = vol.Schema({vol.Optional("file"): cv.string, **_TARGET})

_CLEAR_SCHEMA = vol.Schema(_TARGET)


def _resolve_entry(hass: HomeAssistant, call: ServiceCall) -> PeriodTrackerConfigEntry:
    """Resolve the target config entry of a service call.

    Priority:
    1) entity_id provided -> map to config_entry_id via entity registry
    2) entry_id provided
    3) if only one entry for DOMAIN, use that
    """
    entry_id: str | None = None

    if entity_ids := call.data.get("entity_id"):
        ent_reg = er.async_get(hass)
        for entity_id in entity_ids:
            ent = ent_reg.async_get(entity_id)
            if ent and ent.config_entry_id:
                entry_id = ent.config_entry_id
                break

    if entry_id is None:
        entry_id = call.data.get("entry_id")

    if entry_id is None:
        entries = hass.config_entries.async_entries(DOMAIN)
        if len(entries) == 1:
            entry_id = entries[0].entry_id

    if entry_id is None:
        raise ServiceValidationError(
            f"{call.service}: could not resolve a config entry; provide entity_id or entry_id"
        )

    entry = hass.config_entries.async_get_entry(entry_id)
    if not entry or entry.domain != DOMAIN or not hasattr(entry, "runtime_data"):
        raise ServiceValidationError(f"{call.service}: unknown or unloaded entry {entry_id}")
    return entry


def async_register_services(hass: HomeAssistant) -> None:
    """Register integration services once."""
    key = f"{DOMAIN}_services_registered"
    if hass.data.get(key):
        return

    async def _handle_log_period(call: ServiceCall) -> None:
        entry = _resolve_entry(hass, call)
        start: date_cls = call.data.get("start") or dt_util.now().date()
        end: date_cls | None = call.data.get("end")
        if end is not None and end < start:
            raise ServiceValidationError(
                f"Period end {end} cannot be before its start {start}"
            )
        entry.runtime_data.history.save_entry(start, end)
        await entry.runtime_data.coordinator.async_request_refresh()

    async def _handle_delete_period(call: ServiceCall) -> None:
        entry = _resolve_entry(hass, call)
        start: date_cls = call.data["start"]
        if not entry.runtime_data.history.delete_entry(start):
            LOGGER.debug("delete_period: no recorded period starts on %s", start)
            return
        await entry.runtime_data.coordinator.async_request_refresh()

    async def _handle_set_cycle_length(call: ServiceCall) -> None:
        entry = _resolve_entry(hass, call)
        entry.runtime_data.history.set_manual_cycle_length(call.data["cycle_length"])
        await entry.runtime_data.coordinator.async_request_refresh()

    async def _handle_export_csv(call: ServiceCall) -> ServiceResponse:
        entry = _resolve_entry(hass, call)
        csv = entry.runtime_data.history.export_csv()
        if file_path := call.data.get("file"):
            path = Path(hass.config.path(file_path))
            try:
                await hass.async_add_executor_job(path.write_text, csv, "utf-8")
            except OSError as err:
                LOGGER.exception("export_csv: Failed to write file: %s", path)
                raise HomeAssistantError(f"Export failed: cannot write {path}") from err
        return {"csv": csv}

    async def _handle_clear_history(call: ServiceCall) -> None:
        entry = _resolve_entry(hass, call)
        entry.runtime_data.history.clear_all()
        await entry.runtime_data.coordinator.async_request_refresh()

    hass.services.async_register(
        DOMAIN, SERVICE_LOG_PERIOD, _handle_log_period, schema=_LOG_SCHEMA
    )
    hass.services.async_register(
        DOMAIN, SERVICE_DELETE_PERIOD, _handle_delete_period, schema=_DELETE_SCHEMA
    )
    hass.services.async_register(
        DOMAIN,
        SERVICE_SET_CYCLE_LENGTH,
        _handle_set_cycle_length,
        schema=_CYCLE_LENGTH_SCHEMA,
    )
    hass.services.async_register(
        DOMAIN,
        SERVICE_EXPORT_CSV,
        _handle_export_csv,
        schema=_EXPORT_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )
    hass.services.async_register(
        DOMAIN, SERVICE_CLEAR_HISTORY, _handle_clear_history, schema=_CLEAR_SCHEMA
    )

    hass.data[key] = True
    LOGGER.debug("Registered %s services", DOMAIN)
