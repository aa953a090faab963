# File: config_flow.py
"""Config flow for the PetCare integration.

One config entry per player. Runtime data (pets, points, currency, missions,
achievements, discovery, inventory) lives in storage, never in the entry.
"""

from __future__ import annotations

from typing import Any

from homeassistant import config_entries
from homeassistant.core import callback

from . import const
from .helpers import flow_helpers as fh
from .options_flow import PetCareOptionsFlowHandler


class PetCareConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for PetCare."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        """Ask for the player's name and starting Star Fragments."""
        errors: dict[str, str] = {}

        if user_input is not None:
            errors = fh.validate_player_inputs(user_input)

            if not errors:
                data = fh.build_player_data(user_input)
                await self.async_set_unique_id(
                    data[const.CONF_PLAYER_NAME].casefold()
                )
                self._abort_if_unique_id_configured()

                const.LOGGER.debug(
                    "DEBUG: Creating PetCare entry for player '%s'",
                    data[const.CONF_PLAYER_NAME],
                )
                return self.async_create_entry(
                    title=data[const.CONF_PLAYER_NAME],
                    data=data,
                    options={
                        const.CONF_REFRESH_INTERVAL: const.DEFAULT_REFRESH_INTERVAL
                    },
                )

        default_name = (user_input or {}).get(const.CONF_PLAYER_NAME, "")
        return self.async_show_form(
            step_id=const.CONFIG_FLOW_STEP_USER,
            data_schema=fh.build_player_schema(default_name=default_name),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Return the Options Flow."""
        return PetCareOptionsFlowHandler()
