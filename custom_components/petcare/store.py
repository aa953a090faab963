# File: store.py
"""Handles persistent data storage for the PetCare integration.

Uses Home Assistant's Storage helper with one JSON document per scope
(pets index, each pet's timers and moon cycle, points, currency, discovery,
missions, achievements, inventory). Keys follow `petcare.<player_id>.<scope>`.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import copy
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.storage import Store

from . import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


class PetCareStore:
    """Handles persistent storage operations for one player's documents.

    Thin wrapper around Home Assistant's Store API. Keeps an in-memory cache
    per scope; callers get a deep copy to mutate and hand it back through
    async_save(), so a failed save leaves the cached state untouched.
    """

    def __init__(self, hass: HomeAssistant, player_id: str) -> None:
        """Initialize the store.

        Args:
            hass: Home Assistant core object.
            player_id: Player identifier (the config entry id).
        """
        self.hass = hass
        self.player_id = player_id
        self._stores: dict[str, Store] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._data: dict[str, dict[str, Any]] = {}  # In-memory cache per scope

    def lock(self, scope: str) -> asyncio.Lock:
        """Return the lock serializing read-modify-write of one document."""
        return self._locks.setdefault(scope, asyncio.Lock())

    @staticmethod
    def get_storage_key(player_id: str, scope: str) -> str:
        """Return the storage key for a player's document scope."""
        return f"{const.STORAGE_KEY_PREFIX}.{player_id}.{scope}"

    def _get_store(self, scope: str) -> Store:
        """Return (creating on first use) the Store for a scope."""
        store = self._stores.get(scope)
        if store is None:
            store = Store(
                self.hass,
                const.STORAGE_VERSION,
                self.get_storage_key(self.player_id, scope),
            )
            self._stores[scope] = store
        return store

    async def async_load(
        self,
        scope: str,
        hydrate: Callable[[dict[str, Any] | None], dict[str, Any]],
    ) -> dict[str, Any]:
        """Return a working copy of a document, loading it on first access.

        Args:
            scope: Document scope (e.g. const.DOC_POINTS).
            hydrate: Builder that merges stored data with defaults. Receives
                None when nothing is stored or the load failed.

        Returns:
            Deep copy of the hydrated document.
        """
        if scope not in self._data:
            raw: dict[str, Any] | None = None
            store = self._get_store(scope)
            try:
                raw = await store.async_load()
            except OSError as err:
                const.LOGGER.error(
                    "ERROR: Failed to load '%s' due to file system error: %s. "
                    "Using defaults",
                    scope,
                    err,
                )
            except (HomeAssistantError, ValueError) as err:
                const.LOGGER.error(
                    "ERROR: Failed to load '%s' due to invalid data format: %s. "
                    "Using defaults",
                    scope,
                    err,
                )

            if raw is None:
                const.LOGGER.debug(
                    "DEBUG: No stored data for '%s', initializing defaults", scope
                )
            self._data[scope] = hydrate(raw)

        return copy.deepcopy(self._data[scope])

    async def async_save(self, scope: str, data: dict[str, Any]) -> bool:
        """Persist a document and, on success, make it the cached state.

        Returns:
            True when saved. False on failure (logged, cache unchanged).
        """
        store = self._get_store(scope)
        try:
            await store.async_save(data)
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save '%s' due to file system error: %s. "
                "Check disk space and file permissions for %s",
                scope,
                err,
                store.path,
            )
            return False
        except TypeError as err:
            const.LOGGER.error(
                "ERROR: Failed to save '%s' due to non-serializable data: %s. "
                "Data contains types that cannot be converted to JSON",
                scope,
                err,
            )
            return False
        except (HomeAssistantError, ValueError) as err:
            const.LOGGER.error(
                "ERROR: Failed to save '%s' due to invalid data format: %s. "
                "Data structure may be corrupted",
                scope,
                err,
            )
            return False

        self._data[scope] = copy.deepcopy(data)
        const.LOGGER.debug("DEBUG: Document '%s' saved successfully", scope)
        return True

    async def async_remove(self, scope: str) -> bool:
        """Delete one document from disk and drop it from the cache."""
        self._data.pop(scope, None)
        store = self._get_store(scope)
        try:
            await store.async_remove()
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to remove storage file %s: %s. Check file permissions",
                store.path,
                err,
            )
            return False
        return True

    async def async_delete_storage(self, scopes: list[str]) -> None:
        """Delete every listed document of this player.

        Used when a config entry is removed.
        """
        const.LOGGER.warning(
            "WARNING: Deleting all PetCare data for player %s", self.player_id
        )
        for scope in scopes:
            await self.async_remove(scope)
