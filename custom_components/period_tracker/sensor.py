"""Sensor platform for period tracker."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorEntityDescription,
)
from homeassistant.const import PERCENTAGE, UnitOfTime

from .entity import PeriodTrackerEntity

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import PeriodTrackerUpdateCoordinator
    from .data import PeriodTrackerConfigEntry


def _fertile_window(data: dict[str, Any]) -> str | None:
    window = data.get("fertile_window")
    return str(window) if window else None


def _stat(name: str) -> Callable[[dict[str, Any]], int | None]:
    def value(data: dict[str, Any]) -> int | None:
        stats = data.get("statistics")
        if stats is None or not stats.has_data:
            return None
        return getattr(stats, name)

    return value


def _analytic(
    name: str, scale: float = 1, digits: int = 1
) -> Callable[[dict[str, Any]], float | int | None]:
    def value(data: dict[str, Any]) -> float | int | None:
        stats = data.get("statistics")
        analytics = data.get("analytics")
        if stats is None or analytics is None or not stats.has_data:
            return None
        if (raw := getattr(analytics, name)) is None:
            return None
        return round(raw * scale, digits)

    return value


@dataclass(frozen=True, kw_only=True)
class PeriodTrackerSensorEntityDescription(SensorEntityDescription):
    """Sensor description with a value lookup into coordinator data."""

    value_fn: Callable[[dict[str, Any]], str | int | date | None]


ENTITY_DESCRIPTIONS: tuple[PeriodTrackerSensorEntityDescription, ...] = (
    PeriodTrackerSensorEntityDescription(
        key="last_period_start",
        name="Last Period Start",
        device_class=SensorDeviceClass.DATE,
        value_fn=lambda data: data.get("last_period_start"),
    ),
    PeriodTrackerSensorEntityDescription(
        key="day_of_cycle",
        name="Day of Cycle",
        icon="mdi:calendar-today",
        value_fn=lambda data: data.get("day_of_cycle"),
    ),
    PeriodTrackerSensorEntityDescription(
        key="next_period_start",
        name="Next Period Start",
        device_class=SensorDeviceClass.DATE,
        value_fn=lambda data: data.get("next_period_start"),
    ),
    PeriodTrackerSensorEntityDescription(
        key="days_until_next_period",
        name="Days Until Next Period",
        icon="mdi:calendar-arrow-right",
        native_unit_of_measurement=UnitOfTime.DAYS,
        value_fn=lambda data: data.get("days_until_next_period"),
    ),
    PeriodTrackerSensorEntityDescription(
        key="fertile_window",
        name="Fertile Window",
        icon="mdi:calendar-heart",
        value_fn=_fertile_window,
    ),
    PeriodTrackerSensorEntityDescription(
        key="days_until_fertile_window",
        name="Days Until Fertile Window",
        icon="mdi:calendar-arrow-right",
        native_unit_of_measurement=UnitOfTime.DAYS,
        value_fn=lambda data: data.get("days_until_fertile_window"),
    ),
    PeriodTrackerSensorEntityDescription(
        key="cycle_length",
        name="Cycle Length",
        icon="mdi:calendar-clock",
        native_unit_of_measurement=UnitOfTime.DAYS,
        value_fn=lambda data: data.get("cycle_length"),
    ),
    PeriodTrackerSensorEntityDescription(
        key="average_cycle_length",
        name="Average Cycle Length",
        icon="mdi:chart-bell-curve",
        native_unit_of_measurement=UnitOfTime.DAYS,
        value_fn=_stat("average"),
    ),
    PeriodTrackerSensorEntityDescription(
        key="min_cycle_length",
        name="Shortest Cycle",
        icon="mdi:chart-bell-curve",
        native_unit_of_measurement=UnitOfTime.DAYS,
        value_fn=_stat("minimum"),
    ),
    PeriodTrackerSensorEntityDescription(
        key="max_cycle_length",
        name="Longest Cycle",
        icon="mdi:chart-bell-curve",
        native_unit_of_measurement=UnitOfTime.DAYS,
        value_fn=_stat("maximum"),
    ),
    PeriodTrackerSensorEntityDescription(
        key="next_period_end",
        name="Next Period End",
        device_class=SensorDeviceClass.DATE,
        value_fn=lambda data: data.get("next_period_end"),
    ),
    PeriodTrackerSensorEntityDescription(
        key="period_length",
        name="Average Period Length",
        icon="mdi:calendar-range",
        native_unit_of_measurement=UnitOfTime.DAYS,
        value_fn=lambda data: data["analytics"].period_length,
    ),
    PeriodTrackerSensorEntityDescription(
        key="cycle_length_std_dev",
        name="Cycle Length Variability",
        icon="mdi:chart-bell-curve",
        native_unit_of_measurement=UnitOfTime.DAYS,
        value_fn=_analytic("std_dev"),
    ),
    PeriodTrackerSensorEntityDescription(
        key="most_common_cycle_length",
        name="Most Common Cycle Length",
        icon="mdi:chart-bar",
        native_unit_of_measurement=UnitOfTime.DAYS,
        value_fn=_analytic("most_common", digits=0),
    ),
    PeriodTrackerSensorEntityDescription(
        key="prediction_confidence",
        name="Prediction Confidence",
        icon="mdi:gauge",
        native_unit_of_measurement=PERCENTAGE,
        value_fn=_analytic("confidence", scale=100, digits=0),
    ),
    PeriodTrackerSensorEntityDescription(
        key="prediction_accuracy",
        name="Prediction Accuracy",
        icon="mdi:target",
        native_unit_of_measurement=PERCENTAGE,
        value_fn=_analytic("accuracy"),
    ),
)


async def async_setup_entry(
    _hass: HomeAssistant,
    entry: PeriodTrackerConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up sensor entities."""
    async_add_entities(
        PeriodTrackerSensor(entry.runtime_data.coordinator, description)
        for description in ENTITY_DESCRIPTIONS
    )


class PeriodTrackerSensor(PeriodTrackerEntity, SensorEntity):
    """Representation of a period tracker sensor."""

    entity_description: PeriodTrackerSensorEntityDescription

    def __init__(
        self,
        coordinator: PeriodTrackerUpdateCoordinator,
        description: PeriodTrackerSensorEntityDescription,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self.entity_description = description
        self._attr_unique_id = f"{coordinator.config_entry.entry_id}_{description.key}"

    @property
    def native_value(self) -> str | int | date | None:
        """Return the state of the sensor."""
        return self.entity_description.value_fn(self.coordinator.data)
