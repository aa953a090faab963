"""Shared fixtures for PetCare tests."""

from collections.abc import AsyncGenerator, Generator
import random
from typing import Any
from unittest.mock import MagicMock, patch
from zoneinfo import ZoneInfo

import pytest
from homeassistant.config_entries import ConfigEntryState
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.petcare import const
from custom_components.petcare.session import PetCareSession
from custom_components.petcare.utils import dt_utils

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name

TEST_PLAYER_NAME = "Luna"
TEST_ENTRY_ID = "test_player_entry"
TEST_SEED = 42


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture(autouse=True)
def reset_default_timezone() -> Generator[None]:
    """Keep dt_utils on UTC unless a test configures otherwise."""
    dt_utils.set_default_timezone(ZoneInfo("UTC"))
    yield
    dt_utils.set_default_timezone(ZoneInfo("UTC"))


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a mock config entry for one player."""
    return MockConfigEntry(
        domain=const.DOMAIN,
        title=TEST_PLAYER_NAME,
        data={
            const.CONF_PLAYER_NAME: TEST_PLAYER_NAME,
            const.CONF_STARTING_BALANCE: 0,
        },
        options={const.CONF_REFRESH_INTERVAL: const.DEFAULT_REFRESH_INTERVAL},
        entry_id=TEST_ENTRY_ID,
        unique_id=TEST_PLAYER_NAME.casefold(),
    )


@pytest.fixture
def seeded_rng() -> random.Random:
    """Return a deterministic random source."""
    return random.Random(TEST_SEED)


@pytest.fixture
async def session(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
    seeded_rng: random.Random,  # pylint: disable=redefined-outer-name
) -> AsyncGenerator[PetCareSession]:
    """Return a set-up session that is not attached to a loaded entry."""
    mock_config_entry.add_to_hass(hass)
    player_session = PetCareSession(hass, mock_config_entry, rng=seeded_rng)
    await player_session.async_setup()
    yield player_session
    await hass.async_block_till_done()


@pytest.fixture
def mock_dispatcher_send() -> Generator[MagicMock]:
    """Mock the dispatcher send function to capture emitted events.

    Manager events and the session's own signals land on the same mock.
    """
    with (
        patch(
            "custom_components.petcare.managers.base_manager.async_dispatcher_send"
        ) as mock,
        patch("custom_components.petcare.session.async_dispatcher_send", new=mock),
    ):
        yield mock


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
) -> AsyncGenerator[MockConfigEntry]:
    """Set up the PetCare integration for one player, unloading afterwards."""
    mock_config_entry.add_to_hass(hass)
    assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
    await hass.async_block_till_done()
    yield mock_config_entry
    if mock_config_entry.state is ConfigEntryState.LOADED:
        await hass.config_entries.async_unload(mock_config_entry.entry_id)
        await hass.async_block_till_done()


def get_emitted(mock_send: MagicMock, suffix: str) -> list[dict[str, Any]]:
    """Return the payloads of every emitted event with the given suffix."""
    return [
        call.args[2]
        for call in mock_send.call_args_list
        if call.args[1].endswith(f"_{suffix}")
    ]
