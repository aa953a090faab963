"""Shared plumbing for the per-player PetCare managers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.dispatcher import (
    async_dispatcher_connect,
    async_dispatcher_send,
)

from .. import const
from ..helpers.event_helpers import get_event_signal

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.core import HomeAssistant

    from ..session import PetCareSession


class BaseManager(ABC):
    """One slice of a player's game state (pets, wallet, missions, ...).

    Managers never call each other directly. Anything another manager or an
    entity may care about goes out through emit() on a signal scoped to the
    player's config entry, and listen() ties subscriptions to that entry's
    lifetime.

    Each manager owns its documents in session.store. A mutation takes
    store.lock(scope), edits a loaded copy and hands it to
    store.async_save(); when the save fails nothing is kept in memory.
    """

    def __init__(self, hass: HomeAssistant, session: PetCareSession) -> None:
        """Bind the manager to the player's session and store."""
        self.hass = hass
        self.session = session
        self.store = session.store
        self.entry_id = session.config_entry.entry_id

    def emit(self, suffix: str, **payload: Any) -> None:
        """Send a player-scoped event; payload arrives as one dict.

        e.g. self.emit(const.SIGNAL_SUFFIX_LEVEL_UP, old_level=1, new_level=2)
        """
        signal = get_event_signal(self.entry_id, suffix)
        const.LOGGER.debug(
            "DEBUG: Emitting event '%s' for player %s with payload keys: %s",
            suffix,
            self.entry_id,
            list(payload.keys()),
        )
        # Dispatcher only forwards positional args
        async_dispatcher_send(self.hass, signal, payload)

    def listen(self, suffix: str, callback: Callable[..., Any]) -> None:
        """Subscribe to a player-scoped event until the entry unloads."""
        signal = get_event_signal(self.entry_id, suffix)
        unsub = async_dispatcher_connect(self.hass, signal, callback)
        self.session.config_entry.async_on_unload(unsub)
        const.LOGGER.debug(
            "DEBUG: Manager %s listening to event '%s' for player %s",
            self.__class__.__name__,
            suffix,
            self.entry_id,
        )

    @abstractmethod
    async def async_setup(self) -> None:
        """Seed default documents and register listeners; runs once per session."""
