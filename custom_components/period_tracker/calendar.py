"""Calendar platform for period tracker."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.components.calendar import (
    EVENT_END,
    EVENT_START,
    EVENT_SUMMARY,
    CalendarEntity,
    CalendarEntityFeature,
    CalendarEvent,
)
from homeassistant.exceptions import ServiceValidationError
from homeassistant.util import dt as dt_util

from .const import CONF_SHOW_FERTILITY_ON_CAL
from .entity import PeriodTrackerEntity

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import PeriodTrackerUpdateCoordinator
    from .data import PeriodTrackerConfigEntry

SUMMARY_PERIOD = "Period"
SUMMARY_PREDICTED = "Predicted Period"
SUMMARY_FERTILE = "Fertile Window"


async def async_setup_entry(
    _hass: HomeAssistant,
    entry: PeriodTrackerConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up calendar entity."""
    async_add_entities([PeriodTrackerCalendar(entry.runtime_data.coordinator)])


def _to_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return dt_util.as_local(value).date()
    return value


def _all_day(summary: str, first: date, last: date, uid: str | None = None) -> CalendarEvent:
    # Calendar all-day events use an exclusive end
    return CalendarEvent(summary=summary, start=first, end=last + timedelta(days=1), uid=uid)


class PeriodTrackerCalendar(PeriodTrackerEntity, CalendarEntity):
    """Calendar of recorded periods, predicted periods and fertile windows."""

    def __init__(self, coordinator: PeriodTrackerUpdateCoordinator) -> None:
        """Initialize the calendar entity."""
        super().__init__(coordinator)
        self._attr_name = "Menstrual Cycle"
        self._attr_unique_id = f"{coordinator.config_entry.entry_id}_calendar"
        self._attr_supported_features = (
            CalendarEntityFeature.CREATE_EVENT | CalendarEntityFeature.DELETE_EVENT
        )

    def _events(self) -> list[CalendarEvent]:
        data = self.coordinator.data
        events = [
            _all_day(
                SUMMARY_PERIOD,
                p.start,
                p.end or p.start,
                uid=f"{p.start.isoformat()}#{index}",
            )
            for index, p in enumerate(self.coordinator.history.get_entries())
        ]
        events.extend(
            _all_day(SUMMARY_PREDICTED, day, day) for day in data["predicted_periods"]
        )
        if self.coordinator.config_entry.options.get(CONF_SHOW_FERTILITY_ON_CAL, False):
            events.extend(
                _all_day(SUMMARY_FERTILE, window.start, window.end)
                for window in data["predicted_fertile_windows"]
            )
        return events

    @property
    def event(self) -> CalendarEvent | None:
        """Return the current or next upcoming event."""
        today = dt_util.now().date()
        upcoming = [e for e in self._events() if _to_date(e.end) > today]
        return min(upcoming, key=lambda e: _to_date(e.start)) if upcoming else None

    async def async_get_events(
        self,
        hass: HomeAssistant,  # noqa: ARG002
        start_date: datetime,
        end_date: datetime,
    ) -> list[CalendarEvent]:
        """Return calendar events within a date range."""
        first, last = _to_date(start_date), _to_date(end_date)
        return [
            e
            for e in self._events()
            if _to_date(e.start) <= last and _to_date(e.end) > first
        ]

    async def async_create_event(self, **kwargs: Any) -> None:
        """Record a period from a calendar event.

        Only events titled "Period" or "Menstruation" are accepted.
        """
        summary = str(kwargs.get(EVENT_SUMMARY, "")).strip().lower()
        if summary not in {"period", "menstruation"}:
            raise ServiceValidationError(
                'Only events titled "Period" can be added to this calendar'
            )

        start_day = _to_date(kwargs[EVENT_START])
        end_day: date | None = None
        if (end_raw := kwargs.get(EVENT_END)) is not None:
            end_day = _to_date(end_raw)
            if not isinstance(end_raw, datetime):
                # All-day events arrive with an exclusive end
                end_day -= timedelta(days=1)
            if end_day < start_day:
                raise ServiceValidationError("Period end must be on or after its start")

        self.coordinator.history.save_entry(start_day, end_day)
        await self.coordinator.async_request_refresh()

    async def async_delete_event(
        self,
        uid: str,
        recurrence_id: str | None = None,  # noqa: ARG002
        recurrence_range: str | None = None,  # noqa: ARG002
    ) -> None:
        """Delete the recorded period(s) starting on the event's day."""
        try:
            start = date.fromisoformat(uid.partition("#")[0])
        except ValueError as err:
            raise ServiceValidationError(f"Not a recorded period: {uid}") from err
        self.coordinator.history.delete_entry(start)
        await self.coordinator.async_request_refresh()
