"""Sensor platform for Home Energy integration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorEntityDescription,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import PERCENTAGE, UnitOfEnergy, UnitOfPower
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import (
    ATTR_FLOWS,
    ATTR_LAST_UPDATE,
    ATTR_MODE,
    DOMAIN,
    ENTITY_ENERGY_FLOW,
    INTEGRATION_NAME,
    INTEGRATION_VERSION,
)
from .coordinator import HomeEnergyCoordinator

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class HomeEnergySensorDescription(SensorEntityDescription):
    """Sensor bound to one field of the output record."""

    record_key: str = ""


def _power(key: str, name: str, icon: str) -> HomeEnergySensorDescription:
    return HomeEnergySensorDescription(
        key=key,
        record_key=key,
        name=name,
        icon=icon,
        native_unit_of_measurement=UnitOfPower.KILO_WATT,
        device_class=SensorDeviceClass.POWER,
        state_class=SensorStateClass.MEASUREMENT,
        suggested_display_precision=2,
    )


def _energy(key: str, name: str, icon: str) -> HomeEnergySensorDescription:
    return HomeEnergySensorDescription(
        key=key,
        record_key=key,
        name=name,
        icon=icon,
        native_unit_of_measurement=UnitOfEnergy.KILO_WATT_HOUR,
        device_class=SensorDeviceClass.ENERGY,
        state_class=SensorStateClass.TOTAL_INCREASING,
        suggested_display_precision=1,
    )


def _soc(key: str, name: str, icon: str) -> HomeEnergySensorDescription:
    return HomeEnergySensorDescription(
        key=key,
        record_key=key,
        name=name,
        icon=icon,
        native_unit_of_measurement=PERCENTAGE,
        device_class=SensorDeviceClass.BATTERY,
        state_class=SensorStateClass.MEASUREMENT,
        suggested_display_precision=1,
    )


SENSOR_DESCRIPTIONS = (
    _power("pv", "PV Power", "mdi:solar-power"),
    _power("loadBase", "Base Load", "mdi:home-lightning-bolt"),
    _power("heatPump", "Heat Pump", "mdi:heat-pump"),
    _power("loadTotal", "Total Load", "mdi:home-import-outline"),
    _power("evPower", "EV Power", "mdi:car-electric"),
    _power("batteryPower", "Battery Power", "mdi:battery-charging"),
    _power("grid", "Grid Power", "mdi:transmission-tower"),
    _soc("batterySoc", "Battery SOC", "mdi:battery"),
    _soc("evSoc", "EV SOC", "mdi:car-battery"),
    _energy("pvEnergy", "PV Energy", "mdi:solar-power-variant"),
    _energy("gridImportEnergy", "Grid Import Energy", "mdi:transmission-tower-import"),
    _energy("gridExportEnergy", "Grid Export Energy", "mdi:transmission-tower-export"),
    _energy("evChargeEnergy", "EV Charge Energy", "mdi:car-arrow-left"),
    _energy("evDischargeEnergy", "EV Discharge Energy", "mdi:car-arrow-right"),
)


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Home Energy sensors from a config entry."""
    coordinator: HomeEnergyCoordinator = hass.data[DOMAIN][config_entry.entry_id]

    entities: list[SensorEntity] = [HomeEnergyFlowSensor(coordinator, config_entry)]
    entities.extend(
        HomeEnergyRecordSensor(coordinator, config_entry, description)
        for description in SENSOR_DESCRIPTIONS
    )

    async_add_entities(entities)


class HomeEnergyEntityBase(CoordinatorEntity):
    """Base class for Home Energy entities."""

    def __init__(
        self,
        coordinator: HomeEnergyCoordinator,
        config_entry: ConfigEntry,
        entity_id_suffix: str,
        name_suffix: str,
    ) -> None:
        """Initialize the entity."""
        super().__init__(coordinator)
        self.config_entry = config_entry
        self._attr_unique_id = f"{config_entry.entry_id}_{entity_id_suffix}"
        self._attr_name = f"{INTEGRATION_NAME} {name_suffix}"

        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, config_entry.entry_id)},
            name=INTEGRATION_NAME,
            manufacturer=INTEGRATION_NAME,
            model="Household Energy Simulator",
            sw_version=INTEGRATION_VERSION,
        )

    @property
    def available(self) -> bool:
        """Return if entity is available."""
        return (
            self.coordinator.last_update_success
            and self.coordinator.data is not None
            and self.coordinator.data.get("point") is not None
        )


class HomeEnergyRecordSensor(HomeEnergyEntityBase, SensorEntity):
    """Sensor for one numeric field of the current sample."""

    entity_description: HomeEnergySensorDescription

    def __init__(
        self,
        coordinator: HomeEnergyCoordinator,
        config_entry: ConfigEntry,
        description: HomeEnergySensorDescription,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, config_entry, description.key, description.name)
        self.entity_description = description

    @property
    def native_value(self) -> Optional[float]:
        """Return the state of the sensor."""
        if not self.available:
            return None
        return self.coordinator.data["point"].get(self.entity_description.record_key)


class HomeEnergyFlowSensor(HomeEnergyEntityBase, SensorEntity):
    """Grid direction of the current sample with its flow edges."""

    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = ["import", "export", "neutral"]

    def __init__(
        self,
        coordinator: HomeEnergyCoordinator,
        config_entry: ConfigEntry,
    ) -> None:
        """Initialize the energy flow sensor."""
        super().__init__(coordinator, config_entry, ENTITY_ENERGY_FLOW, "Energy Flow")
        self._attr_icon = "mdi:transit-connection-variant"
        self._last_direction: Optional[str] = None

    @property
    def native_value(self) -> Optional[str]:
        """Return the grid direction."""
        if not self.available:
            return None
        direction = self.coordinator.data.get("grid_direction")
        if direction != self._last_direction:
            _LOGGER.debug("Grid direction changed: %s → %s", self._last_direction, direction)
            self._last_direction = direction
        return direction

    @property
    def extra_state_attributes(self) -> Dict[str, Any]:
        """Return the flow edges as attributes."""
        if not self.available:
            return {}

        data = self.coordinator.data
        return {
            ATTR_FLOWS: data.get("flows", []),
            ATTR_MODE: data.get("mode"),
            ATTR_LAST_UPDATE: data.get("last_update"),
        }
