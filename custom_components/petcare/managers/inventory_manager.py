"""Inventory Manager - Minimal quantity/rarity ledger for collected items.

The real item and recipe catalog is an external collaborator; this manager
only tracks what the progression engine needs:
- Quantity deltas from discoveries, crafting and rewards
- Total item quantity and the set of rarities held (achievement checks)
- The number of recipes crafted

Every change emits SIGNAL_SUFFIX_INVENTORY_CHANGED, which AchievementManager
listens to for its inventory checks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..utils import dt_utils
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..session import PetCareSession
    from ..type_defs import DiscoveryRecord


class InventoryManager(BaseManager):
    """Manager for the inventory document."""

    def __init__(self, hass: HomeAssistant, session: PetCareSession) -> None:
        """Initialize the InventoryManager."""
        super().__init__(hass, session)

    async def async_setup(self) -> None:
        """Set up the InventoryManager (no subscriptions)."""

    async def _async_load(self) -> dict[str, Any]:
        return await self.store.async_load(
            const.DOC_INVENTORY, db.hydrate_inventory_document
        )

    # =========================================================================
    # Reads
    # =========================================================================

    @staticmethod
    def _total_items(document: dict[str, Any]) -> int:
        return sum(
            int(item.get(const.DATA_ITEM_QUANTITY, 0))
            for item in document[const.DATA_INVENTORY_ITEMS].values()
        )

    @staticmethod
    def _rarities(document: dict[str, Any]) -> list[str]:
        return sorted(
            {
                item[const.DATA_ITEM_RARITY]
                for item in document[const.DATA_INVENTORY_ITEMS].values()
                if int(item.get(const.DATA_ITEM_QUANTITY, 0)) > 0
                and item.get(const.DATA_ITEM_RARITY)
            }
        )

    async def async_get_items(self) -> dict[str, Any]:
        """Return all held items keyed by item id."""
        document = await self._async_load()
        return document[const.DATA_INVENTORY_ITEMS]

    async def async_get_total_items(self) -> int:
        """Return the total quantity across all items."""
        return self._total_items(await self._async_load())

    async def async_get_rarities(self) -> list[str]:
        """Return the distinct rarities of items currently held."""
        return self._rarities(await self._async_load())

    async def async_get_crafted_count(self) -> int:
        """Return how many recipes have been crafted."""
        document = await self._async_load()
        return int(document.get(const.DATA_INVENTORY_CRAFTED_COUNT, 0))

    # =========================================================================
    # Mutations
    # =========================================================================

    async def async_add_item(
        self,
        item_id: str,
        quantity: int,
        *,
        rarity: str,
        source: str,
    ) -> bool:
        """Add a quantity delta for one item (negative deltas consume)."""
        return await self.async_apply_deltas(
            [{"item_id": item_id, "quantity": quantity, "rarity": rarity}],
            source=source,
        )

    async def async_add_discoveries(self, records: list[DiscoveryRecord]) -> bool:
        """Add every discovered resource to the inventory."""
        return await self.async_apply_deltas(
            [
                {
                    "item_id": record[const.DATA_RECORD_RESOURCE_ID],
                    "quantity": record[const.DATA_RECORD_QUANTITY],
                    "rarity": record[const.DATA_RECORD_RARITY],
                }
                for record in records
            ],
            source=const.INVENTORY_SOURCE_DISCOVERY,
        )

    async def async_apply_deltas(
        self, deltas: list[dict[str, Any]], *, source: str
    ) -> bool:
        """Apply quantity deltas in one write.

        Quantities never drop below zero; items reaching zero are removed.

        Returns:
            True if the inventory was saved.
        """
        if not deltas:
            return True

        now_iso = dt_utils.dt_to_iso(dt_utils.dt_now_utc())
        async with self.store.lock(const.DOC_INVENTORY):
            document = await self._async_load()
            items = document[const.DATA_INVENTORY_ITEMS]
            net = 0
            for delta in deltas:
                item_id = delta["item_id"]
                item = items.setdefault(
                    item_id,
                    {
                        const.DATA_ITEM_QUANTITY: 0,
                        const.DATA_ITEM_RARITY: delta.get("rarity")
                        or const.RARITY_COMMON,
                        const.DATA_ITEM_SOURCE: source,
                        const.DATA_ITEM_DATE_ADDED: now_iso,
                    },
                )
                old_quantity = int(item[const.DATA_ITEM_QUANTITY])
                new_quantity = max(0, old_quantity + int(delta["quantity"]))
                net += new_quantity - old_quantity
                if new_quantity == 0:
                    del items[item_id]
                else:
                    item[const.DATA_ITEM_QUANTITY] = new_quantity

            if not await self.store.async_save(const.DOC_INVENTORY, document):
                return False

        self._emit_changed(document, net, source)
        const.LOGGER.debug(
            "DEBUG: InventoryManager.apply_deltas: items=%d, net=%d, source=%s",
            len(deltas),
            net,
            source,
        )
        return True

    async def async_record_craft(self) -> int | None:
        """Count one crafted recipe.

        Returns:
            The new crafted count, or None if the save failed.
        """
        async with self.store.lock(const.DOC_INVENTORY):
            document = await self._async_load()
            crafted = int(document.get(const.DATA_INVENTORY_CRAFTED_COUNT, 0)) + 1
            document[const.DATA_INVENTORY_CRAFTED_COUNT] = crafted
            if not await self.store.async_save(const.DOC_INVENTORY, document):
                return None
        return crafted

    def _emit_changed(self, document: dict[str, Any], delta: int, source: str) -> None:
        self.emit(
            const.SIGNAL_SUFFIX_INVENTORY_CHANGED,
            total_items=self._total_items(document),
            rarities=self._rarities(document),
            delta=delta,
            source=source,
        )
