"""Diagnostics support for PetCare integration.

Provides a snapshot of one player's state for troubleshooting: derived pet
stats, points, currency, progression, achievements, discovery and inventory.
"""

from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from . import const
from .session import PetCareSession


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    session: PetCareSession = hass.data[const.DOMAIN][entry.entry_id][const.SESSION]

    return {
        "entry": {
            "data": dict(entry.data),
            "options": dict(entry.options),
        },
        "summary": await session.async_get_summary(),
    }
