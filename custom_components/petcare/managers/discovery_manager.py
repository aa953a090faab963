"""Discovery Manager - Cooldown-gated, probabilistic resource discovery.

This manager owns the discovery document (settings, history, total):
- Gate checks (enabled, cooldown, daily cap) with the daily counter reset
- Rolling discoveries with the session's injected random source
- Notification and history queries, retention cleanup
- Partial settings updates

The resource catalog is injected (`pools`); DEFAULT_RESOURCE_POOLS only
keeps discovery usable out of the box. Inventory, achievement and mission
follow-ups are orchestrated by PetCareSession.async_discover().
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..engines.discovery_engine import DiscoveryEngine
from ..utils import dt_utils
from .base_manager import BaseManager

if TYPE_CHECKING:
    from datetime import datetime, timedelta
    import random

    from homeassistant.core import HomeAssistant

    from ..session import PetCareSession
    from ..type_defs import (
        DailyProgress,
        DiscoveryRecord,
        DiscoveryResult,
        OperationResult,
        ResourceEntry,
    )


class DiscoveryManager(BaseManager):
    """Manager for discovery settings, rolls and history."""

    def __init__(
        self,
        hass: HomeAssistant,
        session: PetCareSession,
        *,
        rng: random.Random,
        pools: dict[str, list[ResourceEntry]] | None = None,
        settings_overrides: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the DiscoveryManager.

        Args:
            hass: Home Assistant instance
            session: The player session
            rng: Random source for every roll (seed it for replayable runs)
            pools: Rarity -> resource entries (defaults to DEFAULT_RESOURCE_POOLS)
            settings_overrides: Defaults for a new document (options flow)
        """
        super().__init__(hass, session)
        self.rng = rng
        self.pools = pools if pools is not None else const.DEFAULT_RESOURCE_POOLS
        self._settings_overrides = settings_overrides or {}

    async def async_setup(self) -> None:
        """Set up the DiscoveryManager: prune expired history."""
        await self.async_cleanup_old_discoveries()

    async def _async_load(self, now: datetime) -> dict[str, Any]:
        return await self.store.async_load(
            const.DOC_DISCOVERY,
            lambda raw: db.hydrate_discovery_document(
                raw, now, self._settings_overrides
            ),
        )

    async def _async_load_current(self, now: datetime) -> dict[str, Any]:
        """Load the document with today's daily reset applied and persisted.

        Must be called with the discovery lock held.
        """
        document = await self._async_load(now)
        if DiscoveryEngine.reset_daily_if_needed(
            document[const.DATA_DISCOVERY_SETTINGS], dt_utils.local_date_iso(now)
        ):
            const.LOGGER.debug("DEBUG: Discovery daily counter reset")
            await self.store.async_save(const.DOC_DISCOVERY, document)
        return document

    # =========================================================================
    # Gate
    # =========================================================================

    async def async_should_discover(self) -> bool:
        """True iff enabled, the cooldown has elapsed and the cap is not hit."""
        now = dt_utils.dt_now_utc()
        async with self.store.lock(const.DOC_DISCOVERY):
            document = await self._async_load_current(now)
        return DiscoveryEngine.should_discover(
            document[const.DATA_DISCOVERY_SETTINGS], now
        )

    async def async_get_time_until_next_discovery(self) -> timedelta:
        """Time left before the cooldown elapses."""
        now = dt_utils.dt_now_utc()
        document = await self._async_load(now)
        return DiscoveryEngine.get_time_until_next(
            document[const.DATA_DISCOVERY_SETTINGS], now
        )

    async def async_get_daily_progress(self) -> DailyProgress:
        """Today's discovery count against the daily cap."""
        now = dt_utils.dt_now_utc()
        async with self.store.lock(const.DOC_DISCOVERY):
            document = await self._async_load_current(now)
        return DiscoveryEngine.get_daily_progress(
            document[const.DATA_DISCOVERY_SETTINGS]
        )

    # =========================================================================
    # Discover
    # =========================================================================

    async def async_discover(self) -> DiscoveryResult:
        """Roll one discovery attempt if the gate allows it.

        A closed gate or an empty roll changes nothing and returns
        success=False with no discoveries.
        """
        now = dt_utils.dt_now_utc()
        async with self.store.lock(const.DOC_DISCOVERY):
            document = await self._async_load_current(now)
            settings = document[const.DATA_DISCOVERY_SETTINGS]
            total = int(document[const.DATA_DISCOVERY_TOTAL])

            if not DiscoveryEngine.should_discover(settings, now):
                return self._result(False, const.MSG_DISCOVERY_NOT_READY, [], total)

            records = DiscoveryEngine.roll_discoveries(
                float(settings[const.DATA_DISCOVERY_CHANCE]), self.pools, now, self.rng
            )
            if not records:
                const.LOGGER.debug("DEBUG: Discovery roll came back empty")
                return self._result(False, const.MSG_DISCOVERY_NOTHING_FOUND, [], total)

            DiscoveryEngine.apply_discoveries(document, records, now)
            if not await self.store.async_save(const.DOC_DISCOVERY, document):
                return self._result(False, const.MSG_STORAGE_UNAVAILABLE, [], total)

        total = int(document[const.DATA_DISCOVERY_TOTAL])
        self.emit(
            const.SIGNAL_SUFFIX_DISCOVERY_MADE,
            discoveries=records,
            count=len(records),
            total_discovered=total,
        )
        const.LOGGER.info(
            "INFO: Discovered %d item(s): %s",
            len(records),
            ", ".join(record[const.DATA_RECORD_RESOURCE_NAME] for record in records),
        )
        return self._result(
            True, const.MSG_DISCOVERY_FOUND.format(count=len(records)), records, total
        )

    @staticmethod
    def _result(
        success: bool, message: str, records: list[DiscoveryRecord], total: int
    ) -> DiscoveryResult:
        return {
            "success": success,
            "message": message,
            "discoveries": records,
            "total_discovered": total,
        }

    # =========================================================================
    # History
    # =========================================================================

    async def async_get_history(self) -> list[DiscoveryRecord]:
        """Return the retained discovery history, oldest first."""
        document = await self._async_load(dt_utils.dt_now_utc())
        return document[const.DATA_DISCOVERY_HISTORY]

    async def async_get_total_discovered(self) -> int:
        """Return the cumulative number of discovered records."""
        document = await self._async_load(dt_utils.dt_now_utc())
        return int(document[const.DATA_DISCOVERY_TOTAL])

    async def async_get_recent_notifications(
        self, hours: float = const.DISCOVERY_NOTIFICATION_WINDOW_HOURS
    ) -> list[DiscoveryRecord]:
        """Records discovered within the last `hours`, newest first."""
        now = dt_utils.dt_now_utc()
        document = await self._async_load(now)
        recent = DiscoveryEngine.get_recent(
            document[const.DATA_DISCOVERY_HISTORY], now, hours
        )
        return list(reversed(recent))

    async def async_cleanup_old_discoveries(
        self, max_age_days: int = const.DISCOVERY_HISTORY_RETENTION_DAYS
    ) -> int:
        """Drop history older than max_age_days.

        Returns:
            Number of records removed (0 if nothing changed or the save failed).
        """
        now = dt_utils.dt_now_utc()
        async with self.store.lock(const.DOC_DISCOVERY):
            document = await self._async_load(now)
            removed = DiscoveryEngine.prune_history(
                document[const.DATA_DISCOVERY_HISTORY], now, max_age_days
            )
            if not removed:
                return 0
            if not await self.store.async_save(const.DOC_DISCOVERY, document):
                return 0
        const.LOGGER.debug("DEBUG: Pruned %d old discovery record(s)", removed)
        return removed

    # =========================================================================
    # Settings
    # =========================================================================

    async def async_get_settings(self) -> dict[str, Any]:
        """Return the current discovery settings."""
        now = dt_utils.dt_now_utc()
        async with self.store.lock(const.DOC_DISCOVERY):
            document = await self._async_load_current(now)
        return document[const.DATA_DISCOVERY_SETTINGS]

    async def async_update_settings(self, updates: dict[str, Any]) -> OperationResult:
        """Merge a validated partial update into the settings."""
        try:
            normalized = DiscoveryEngine.validate_settings(updates)
        except (TypeError, ValueError) as err:
            const.LOGGER.warning("WARNING: Rejected discovery settings: %s", err)
            return {"success": False, "message": str(err)}

        now = dt_utils.dt_now_utc()
        async with self.store.lock(const.DOC_DISCOVERY):
            document = await self._async_load(now)
            document[const.DATA_DISCOVERY_SETTINGS].update(normalized)
            if not await self.store.async_save(const.DOC_DISCOVERY, document):
                return {"success": False, "message": const.MSG_STORAGE_UNAVAILABLE}

        const.LOGGER.info("INFO: Discovery settings updated: %s", normalized)
        return {"success": True, "message": const.MSG_SETTINGS_UPDATED}
