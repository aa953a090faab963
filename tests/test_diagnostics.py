"""Tests for PetCare diagnostics module."""

# pylint: disable=redefined-outer-name  # Pytest fixtures shadow names
# pylint: disable=unused-argument  # Some fixtures needed for setup only

from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.petcare import const
from custom_components.petcare.diagnostics import (
    async_get_config_entry_diagnostics,
)


async def test_config_entry_diagnostics(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Diagnostics include the entry and the player summary."""
    session = hass.data[const.DOMAIN][init_integration.entry_id][const.SESSION]
    await session.async_adopt_pet("mochi", "Mochi")

    result = await async_get_config_entry_diagnostics(hass, init_integration)

    assert result["entry"]["data"][const.CONF_PLAYER_NAME] == "Luna"
    assert result["entry"]["options"] == {
        const.CONF_REFRESH_INTERVAL: const.DEFAULT_REFRESH_INTERVAL
    }
    summary = result["summary"]
    assert summary["player_name"] == "Luna"
    assert set(summary["pets"]) == {"mochi"}
    assert summary["progress"]["level"] == 1
    assert summary["inventory"]["crafted_count"] == 0
