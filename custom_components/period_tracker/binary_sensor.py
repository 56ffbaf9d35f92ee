"""Binary sensors for period tracker."""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.components.binary_sensor import (
    BinarySensorEntity,
    BinarySensorEntityDescription,
)
from homeassistant.const import EntityCategory

from .entity import PeriodTrackerEntity

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import PeriodTrackerUpdateCoordinator
    from .data import PeriodTrackerConfigEntry

ENTITY_DESCRIPTIONS: tuple[BinarySensorEntityDescription, ...] = (
    BinarySensorEntityDescription(
        key="in_fertile_window",
        name="In Fertile Window",
        icon="mdi:calendar-heart",
    ),
    # Off when encryption is disabled, or requested but fell back to plain storage
    BinarySensorEntityDescription(
        key="encrypted",
        name="History Encrypted",
        icon="mdi:lock",
        entity_category=EntityCategory.DIAGNOSTIC,
    ),
)


async def async_setup_entry(
    _hass: HomeAssistant,
    entry: PeriodTrackerConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up binary sensor entities."""
    async_add_entities(
        PeriodTrackerBinarySensor(entry.runtime_data.coordinator, description)
        for description in ENTITY_DESCRIPTIONS
    )


class PeriodTrackerBinarySensor(PeriodTrackerEntity, BinarySensorEntity):
    """Representation of a period tracker binary sensor."""

    def __init__(
        self,
        coordinator: PeriodTrackerUpdateCoordinator,
        description: BinarySensorEntityDescription,
    ) -> None:
        """Initialize the binary sensor."""
        super().__init__(coordinator)
        self.entity_description = description
        self._attr_unique_id = f"{coordinator.config_entry.entry_id}_{description.key}"

    @property
    def is_on(self) -> bool:
        return bool(self.coordinator.data.get(self.entity_description.key))
