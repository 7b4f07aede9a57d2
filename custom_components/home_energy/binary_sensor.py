"""Binary sensor platform for Home Energy integration."""

from __future__ import annotations

from typing import Any, Dict, Optional

from homeassistant.components.binary_sensor import (
    BinarySensorDeviceClass,
    BinarySensorEntity,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import EntityCategory
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import (
    ATTR_LIVE_FEED_URL,
    ATTR_MODE,
    ATTR_RESULTS,
    DOMAIN,
    ENTITY_LIVE_FEED,
    ENTITY_SELF_TEST,
)
from .coordinator import HomeEnergyCoordinator
from .sensor import HomeEnergyEntityBase


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Home Energy binary sensors from a config entry."""
    coordinator: HomeEnergyCoordinator = hass.data[DOMAIN][config_entry.entry_id]

    async_add_entities(
        [
            HomeEnergyLiveFeedStatus(coordinator, config_entry),
            HomeEnergySelfTestStatus(coordinator, config_entry),
        ]
    )


class HomeEnergyLiveFeedStatus(HomeEnergyEntityBase, BinarySensorEntity):
    """Connectivity of the external live feed."""

    _attr_device_class = BinarySensorDeviceClass.CONNECTIVITY
    _attr_entity_category = EntityCategory.DIAGNOSTIC

    def __init__(
        self,
        coordinator: HomeEnergyCoordinator,
        config_entry: ConfigEntry,
    ) -> None:
        """Initialize the live feed status sensor."""
        super().__init__(coordinator, config_entry, ENTITY_LIVE_FEED, "Live Feed")
        self._attr_icon = "mdi:access-point-network"

    @property
    def available(self) -> bool:
        """Connectivity is reported even without a sample."""
        return self.coordinator.data is not None

    @property
    def is_on(self) -> Optional[bool]:
        """Return true while the live feed is connected."""
        if not self.available:
            return None
        return bool(self.coordinator.data.get("live_connected", False))

    @property
    def extra_state_attributes(self) -> Dict[str, Any]:
        """Return extra state attributes."""
        if not self.available:
            return {}
        data = self.coordinator.data
        return {
            ATTR_MODE: data.get("mode"),
            ATTR_LIVE_FEED_URL: self.coordinator.live_feed_url,
            "discarded_messages": data.get("discarded_messages", 0),
        }


class HomeEnergySelfTestStatus(HomeEnergyEntityBase, BinarySensorEntity):
    """Problem indicator for the self-test checks."""

    _attr_device_class = BinarySensorDeviceClass.PROBLEM
    _attr_entity_category = EntityCategory.DIAGNOSTIC

    def __init__(
        self,
        coordinator: HomeEnergyCoordinator,
        config_entry: ConfigEntry,
    ) -> None:
        """Initialize the self-test sensor."""
        super().__init__(coordinator, config_entry, ENTITY_SELF_TEST, "Self Test")
        self._attr_icon = "mdi:clipboard-check-outline"

    @property
    def available(self) -> bool:
        """Self-test results exist even without a sample."""
        return self.coordinator.data is not None

    @property
    def is_on(self) -> Optional[bool]:
        """Return true if any check failed."""
        if not self.available:
            return None
        return not self.coordinator.data.get("self_test_ok", False)

    @property
    def extra_state_attributes(self) -> Dict[str, Any]:
        """Return the individual check results."""
        if not self.available:
            return {}
        return {ATTR_RESULTS: self.coordinator.data.get("self_test", [])}
