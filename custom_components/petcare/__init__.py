# File: __init__.py
"""Initialization file for the PetCare integration.

Handles setting up the integration, including loading configuration entries,
building the player's session and registering services.

Key Features:
- Config entry setup, unload and removal support.
- One PetCareSession per player entry, stored in hass.data.
- Periodic display refresh of pet stats.
"""

from __future__ import annotations

from datetime import timedelta

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from . import const
from .services import async_setup_services, async_unload_services
from .session import PetCareSession


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up the integration from a config entry."""
    const.LOGGER.info("INFO: Starting setup for PetCare entry: %s", entry.entry_id)

    # Must be done early before any components that use datetime helpers
    const.set_default_timezone(hass)

    session = PetCareSession(hass, entry)
    await session.async_setup()

    hass.data.setdefault(const.DOMAIN, {})[entry.entry_id] = {
        const.SESSION: session,
    }

    async_setup_services(hass)

    await hass.config_entries.async_forward_entry_setups(entry, const.PLATFORMS)

    session.async_start_refresh(
        timedelta(
            minutes=entry.options.get(
                const.CONF_REFRESH_INTERVAL, const.DEFAULT_REFRESH_INTERVAL
            )
        )
    )
    entry.async_on_unload(entry.add_update_listener(_async_update_listener))

    const.LOGGER.info("INFO: PetCare setup complete for entry: %s", entry.entry_id)
    return True


async def _async_update_listener(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry after its options change."""
    const.LOGGER.debug("DEBUG: Options changed, reloading entry %s", entry.entry_id)
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    const.LOGGER.info("INFO: Unloading PetCare entry: %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, const.PLATFORMS)

    if unload_ok:
        hass.data[const.DOMAIN].pop(entry.entry_id)

        # Services are shared by every player; drop them with the last one
        if not hass.data[const.DOMAIN]:
            await async_unload_services(hass)

    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle removal of a config entry."""
    const.LOGGER.info("INFO: Removing PetCare entry: %s", entry.entry_id)

    session = PetCareSession(hass, entry)
    await session.async_delete_all_data()

    const.LOGGER.info("INFO: PetCare entry data cleared: %s", entry.entry_id)
