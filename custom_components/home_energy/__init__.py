"""Home Energy integration for Home Assistant."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

import voluptuous as vol
from homeassistant.components.persistent_notification import async_create as persistent_notification_create
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import ConfigEntryNotReady

from .const import (
    CONF_LIVE_FEED_URL,
    CONF_USE_SIMULATION,
    DEFAULT_LIVE_FEED_URL,
    DEFAULT_USE_SIMULATION,
    DOMAIN,
    EXPORT_FORMAT_JSON,
    EXPORT_FORMAT_TABLE,
    INTEGRATION_NAME,
    SERVICE_EXPORT_SERIES,
)
from .coordinator import HomeEnergyCoordinator
from .debug_utils import format_series_table

_LOGGER = logging.getLogger(__name__)

PLATFORMS: list[Platform] = [Platform.SENSOR, Platform.BINARY_SENSOR]

EXPORT_SERIES_SCHEMA = vol.Schema(
    {
        vol.Optional("entry_id"): str,
        vol.Optional("file_path"): str,
        vol.Optional("format", default=EXPORT_FORMAT_JSON): vol.In(
            [EXPORT_FORMAT_JSON, EXPORT_FORMAT_TABLE]
        ),
    }
)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Home Energy from a config entry."""
    try:
        coordinator = HomeEnergyCoordinator(hass, {**entry.data, **entry.options})

        await coordinator.async_start()
        await coordinator.async_config_entry_first_refresh()

        hass.data.setdefault(DOMAIN, {})
        hass.data[DOMAIN][entry.entry_id] = coordinator

        if not hass.services.has_service(DOMAIN, SERVICE_EXPORT_SERIES):
            async def export_service(call: ServiceCall) -> None:
                """Handle export series service call."""
                await _async_export_series(hass, call)

            hass.services.async_register(
                DOMAIN,
                SERVICE_EXPORT_SERIES,
                export_service,
                schema=EXPORT_SERIES_SCHEMA,
            )

        await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

        entry.async_on_unload(entry.add_update_listener(async_update_options))

        return True

    except ConfigEntryNotReady:
        raise
    except Exception as err:
        _LOGGER.error("Error setting up Home Energy: %s", err)
        raise ConfigEntryNotReady from err


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)

    if unload_ok:
        coordinator: HomeEnergyCoordinator = hass.data[DOMAIN].pop(entry.entry_id)
        await coordinator.async_stop()
        if not hass.data[DOMAIN]:
            hass.services.async_remove(DOMAIN, SERVICE_EXPORT_SERIES)

    return unload_ok


async def async_update_options(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Apply a changed data source without reloading the entry."""
    coordinator: HomeEnergyCoordinator = hass.data[DOMAIN][entry.entry_id]
    config = {**entry.data, **entry.options}
    await coordinator.async_set_use_simulation(
        config.get(CONF_USE_SIMULATION, DEFAULT_USE_SIMULATION),
        config.get(CONF_LIVE_FEED_URL, DEFAULT_LIVE_FEED_URL),
    )


def _write_export(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


async def _async_export_series(hass: HomeAssistant, call: ServiceCall) -> None:
    """Export the current series to a file."""
    entry_id: str | None = call.data.get("entry_id")
    file_path: str | None = call.data.get("file_path")
    export_format: str = call.data.get("format", EXPORT_FORMAT_JSON)

    domain_data: Dict[str, HomeEnergyCoordinator] = hass.data.get(DOMAIN, {})
    if not domain_data:
        _LOGGER.error("No Home Energy entries loaded")
        return

    coordinator: HomeEnergyCoordinator | None = None

    if entry_id:
        coordinator = domain_data.get(entry_id)
        if coordinator is None:
            _LOGGER.error("Entry id %s not found", entry_id)
            return
    else:
        if len(domain_data) == 1:
            entry_id, coordinator = next(iter(domain_data.items()))
        else:
            _LOGGER.error("Multiple entries present; specify entry_id")
            return

    snapshot: Dict[str, Any] = coordinator.session.snapshot()

    if export_format == EXPORT_FORMAT_TABLE:
        content = format_series_table(snapshot["series"], snapshot["flows"])
        suffix = "txt"
    else:
        content = "".join(json.dumps(item) + "\n" for item in snapshot["series"])
        suffix = "jsonl"

    if not file_path:
        file_path = hass.config.path(f"home_energy_series_{entry_id}.{suffix}")

    try:
        await hass.async_add_executor_job(_write_export, Path(file_path), content)
    except OSError as err:
        _LOGGER.error("Failed to export series: %s", err)
        return

    _LOGGER.info(
        "Exported %d samples to %s", len(snapshot["series"]), file_path
    )
    persistent_notification_create(
        hass,
        f"Series exported to {file_path}",
        title=INTEGRATION_NAME,
    )
