"""Config flow for Home Energy integration."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import callback
from homeassistant.data_entry_flow import FlowResult

from .const import (
    CONF_LIVE_FEED_URL,
    CONF_USE_SIMULATION,
    DEFAULT_LIVE_FEED_URL,
    DEFAULT_USE_SIMULATION,
    DOMAIN,
    INTEGRATION_NAME,
    LIVE_FEED_SCHEMES,
)

_LOGGER = logging.getLogger(__name__)


def _data_schema(defaults: Dict[str, Any]) -> vol.Schema:
    return vol.Schema(
        {
            vol.Required(
                CONF_USE_SIMULATION,
                default=defaults.get(CONF_USE_SIMULATION, DEFAULT_USE_SIMULATION),
            ): bool,
            vol.Required(
                CONF_LIVE_FEED_URL,
                default=defaults.get(CONF_LIVE_FEED_URL, DEFAULT_LIVE_FEED_URL),
            ): vol.All(str, vol.Strip),
        }
    )


def validate_input(user_input: Dict[str, Any]) -> Dict[str, str]:
    """Validate the mode toggle and feed address.

    The address is only checked when the live feed is selected.

    Returns:
        Mapping of field name to error key, empty when valid
    """
    errors: Dict[str, str] = {}
    if not user_input.get(CONF_USE_SIMULATION, DEFAULT_USE_SIMULATION):
        url = user_input.get(CONF_LIVE_FEED_URL, "")
        if not url or not url.lower().startswith(LIVE_FEED_SCHEMES):
            errors[CONF_LIVE_FEED_URL] = "invalid_url"
    return errors


class HomeEnergyConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Home Energy."""

    VERSION = 1

    async def async_step_user(
        self, user_input: Optional[Dict[str, Any]] = None
    ) -> FlowResult:
        """Handle the initial step."""
        errors: Dict[str, str] = {}

        if user_input is not None:
            errors = validate_input(user_input)
            if not errors:
                return self.async_create_entry(title=INTEGRATION_NAME, data=user_input)
            _LOGGER.error("Invalid Home Energy configuration: %s", errors)

        return self.async_show_form(
            step_id="user",
            data_schema=_data_schema(user_input or {}),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> HomeEnergyOptionsFlow:
        """Create options flow."""
        return HomeEnergyOptionsFlow()


class HomeEnergyOptionsFlow(config_entries.OptionsFlow):
    """Handle options flow for Home Energy."""

    async def async_step_init(
        self, user_input: Optional[Dict[str, Any]] = None
    ) -> FlowResult:
        """Manage the options."""
        errors: Dict[str, str] = {}

        if user_input is not None:
            errors = validate_input(user_input)
            if not errors:
                return self.async_create_entry(title="", data=user_input)

        current_config = {**self.config_entry.data, **self.config_entry.options}

        return self.async_show_form(
            step_id="init",
            data_schema=_data_schema(user_input or current_config),
            errors=errors,
        )
