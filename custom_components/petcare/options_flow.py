# File: options_flow.py
"""Options Flow for the PetCare integration.

Edits the player's discovery defaults and the display refresh interval.
Discovery values are pushed to the live settings document when the entry is
loaded; the entry then reloads so the new refresh interval takes effect.
"""

from __future__ import annotations

from typing import Any

from homeassistant import config_entries

from . import const
from .helpers import flow_helpers as fh


class PetCareOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for a player's system settings."""

    def _get_session(self):
        """Get the player's session from hass.data (None when not loaded)."""
        entry_data = self.hass.data.get(const.DOMAIN, {}).get(
            self.config_entry.entry_id
        )
        if not entry_data:
            return None
        return entry_data[const.SESSION]

    async def async_step_init(self, user_input: dict[str, Any] | None = None):
        """Show and apply the settings form."""
        errors: dict[str, str] = {}

        if user_input is not None:
            errors = fh.validate_settings_inputs(user_input)

            if not errors:
                session = self._get_session()
                if session is not None:
                    await session.async_update_discovery_settings(
                        fh.build_discovery_overrides(user_input)
                    )

                options = dict(self.config_entry.options)
                options.update(user_input)
                const.LOGGER.debug(
                    "DEBUG: Updated PetCare options for %s: %s",
                    self.config_entry.entry_id,
                    options,
                )
                return self.async_create_entry(title="", data=options)

        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_INIT,
            data_schema=fh.build_settings_schema(
                dict(user_input or self.config_entry.options)
            ),
            errors=errors,
        )
