"""Achievement Manager - Threshold-based achievements and custom goals.

This manager owns the achievements document:
- Progress updates capped at target, unlocking once with a timestamp
- Category checks for inventory, discovery and crafting
- Custom player-defined achievements (add/remove at runtime)
- Completion queries

Unlocks emit SIGNAL_SUFFIX_ACHIEVEMENT_UNLOCKED; EconomyManager credits the
reward and the reward-issuance layer may react to the same event.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..engines.achievement_engine import AchievementEngine
from ..utils import dt_utils
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from homeassistant.core import HomeAssistant

    from ..session import PetCareSession
    from ..type_defs import (
        AchievementData,
        AchievementProgressSummary,
        AchievementUpdateResult,
        OverallCompletion,
    )


class AchievementManager(BaseManager):
    """Manager for achievement progress and custom achievements."""

    def __init__(self, hass: HomeAssistant, session: PetCareSession) -> None:
        """Initialize the AchievementManager."""
        super().__init__(hass, session)

    async def async_setup(self) -> None:
        """Set up the AchievementManager.

        Inventory achievements are re-evaluated on every inventory change.
        """
        self.listen(
            const.SIGNAL_SUFFIX_INVENTORY_CHANGED,
            self._on_inventory_changed,
        )

    async def _on_inventory_changed(self, payload: dict[str, Any]) -> None:
        """Handle inventory changed event - re-run the inventory checks."""
        await self.async_check_inventory_achievements(
            int(payload.get("total_items", 0)), payload.get("rarities", [])
        )

    async def _async_load(self) -> dict[str, Any]:
        return await self.store.async_load(
            const.DOC_ACHIEVEMENTS, db.hydrate_achievements_document
        )

    # =========================================================================
    # Progress
    # =========================================================================

    async def async_update_progress(
        self, achievement_id: str, value: int
    ) -> AchievementUpdateResult:
        """Set an achievement's progress to min(value, target).

        Returns:
            AchievementUpdateResult with status not_found, unchanged (already
            completed), progress_updated or completed.
        """
        async with self.store.lock(const.DOC_ACHIEVEMENTS):
            document = await self._async_load()
            definition = AchievementEngine.find_definition(document, achievement_id)
            if definition is None:
                return {
                    "success": False,
                    "status": const.ACHIEVEMENT_STATUS_NOT_FOUND,
                    "message": const.MSG_ACHIEVEMENT_NOT_FOUND,
                    "achievement": None,
                }
            results = await self._async_apply(document, [(definition, int(value))])
        return results[0]

    async def _async_apply(
        self,
        document: dict[str, Any],
        updates: Iterable[tuple[dict[str, Any], int]],
    ) -> list[AchievementUpdateResult]:
        """Apply progress values in one write, then emit events.

        Must be called with the achievements lock held.
        """
        now = dt_utils.dt_now_utc()
        applied: list[tuple[dict[str, Any], str, bool]] = []
        for definition, value in updates:
            status, changed = AchievementEngine.apply_progress(
                document, definition, value, now
            )
            applied.append((definition, status, changed))

        if any(changed for _, _, changed in applied) and not (
            await self.store.async_save(const.DOC_ACHIEVEMENTS, document)
        ):
            return [
                {
                    "success": False,
                    "status": const.ACHIEVEMENT_STATUS_UNCHANGED,
                    "message": const.MSG_STORAGE_UNAVAILABLE,
                    "achievement": None,
                }
                for _ in applied
            ]

        results: list[AchievementUpdateResult] = []
        for definition, status, changed in applied:
            achievement = AchievementEngine.build_achievement(document, definition)
            results.append(self._build_result(achievement, status))
            if status == const.ACHIEVEMENT_STATUS_COMPLETED:
                self._emit_unlocked(achievement)
            elif changed:
                self.emit(
                    const.SIGNAL_SUFFIX_ACHIEVEMENT_PROGRESS,
                    achievement_id=achievement[const.DATA_ACHIEVEMENT_ID],
                    progress=achievement[const.DATA_ACHIEVEMENT_PROGRESS],
                    target=AchievementEngine.get_target(definition),
                )
        return results

    @staticmethod
    def _build_result(
        achievement: AchievementData, status: str
    ) -> AchievementUpdateResult:
        if status == const.ACHIEVEMENT_STATUS_UNCHANGED:
            message = const.MSG_ACHIEVEMENT_ALREADY_COMPLETED
        elif status == const.ACHIEVEMENT_STATUS_COMPLETED:
            message = const.MSG_ACHIEVEMENT_UNLOCKED.format(
                name=achievement[const.DATA_ACHIEVEMENT_NAME]
            )
        else:
            message = const.MSG_ACHIEVEMENT_PROGRESS.format(
                progress=achievement[const.DATA_ACHIEVEMENT_PROGRESS],
                target=achievement[const.DATA_ACHIEVEMENT_REQUIREMENT][
                    const.DATA_REQUIREMENT_TARGET
                ],
            )
        return {
            "success": status != const.ACHIEVEMENT_STATUS_UNCHANGED,
            "status": status,
            "message": message,
            "achievement": achievement,
        }

    def _emit_unlocked(self, achievement: AchievementData) -> None:
        reward = achievement.get(const.DATA_ACHIEVEMENT_REWARD) or {}
        self.emit(
            const.SIGNAL_SUFFIX_ACHIEVEMENT_UNLOCKED,
            achievement_id=achievement[const.DATA_ACHIEVEMENT_ID],
            name=achievement[const.DATA_ACHIEVEMENT_NAME],
            category=achievement[const.DATA_ACHIEVEMENT_CATEGORY],
            reward_type=reward.get(const.DATA_REWARD_TYPE),
            reward_amount=int(reward.get(const.DATA_REWARD_AMOUNT, 0)),
            date_completed=achievement[const.DATA_ACHIEVEMENT_DATE_COMPLETED],
        )
        const.LOGGER.info(
            "INFO: Achievement unlocked: %s", achievement[const.DATA_ACHIEVEMENT_NAME]
        )

    # =========================================================================
    # Category checks
    # =========================================================================

    async def _async_check(
        self,
        requirement_types: list[str],
        value_for: Callable[[dict[str, Any]], int | None],
    ) -> list[AchievementUpdateResult]:
        """Run `value_for(definition)` over matching definitions and apply.

        Definitions for which value_for returns None are skipped.
        """
        async with self.store.lock(const.DOC_ACHIEVEMENTS):
            document = await self._async_load()
            updates = []
            for requirement_type in requirement_types:
                for definition in AchievementEngine.matching_definitions(
                    document, requirement_type
                ):
                    value = value_for(definition)
                    if value is not None:
                        updates.append((definition, value))
            if not updates:
                return []
            results = await self._async_apply(document, updates)
        return [
            result
            for result in results
            if result["status"] != const.ACHIEVEMENT_STATUS_UNCHANGED
        ]

    async def async_check_inventory_achievements(
        self, total_items: int, rarities: Iterable[str]
    ) -> list[AchievementUpdateResult]:
        """Update item_count and rarity_collected achievements."""
        rarities = list(rarities)
        return await self._async_check(
            [const.REQUIREMENT_ITEM_COUNT, const.REQUIREMENT_RARITY_COLLECTED],
            lambda definition: AchievementEngine.inventory_value(
                definition, total_items, rarities
            ),
        )

    async def async_check_discovery_achievements(
        self, discovery_count: int
    ) -> list[AchievementUpdateResult]:
        """Update discovery_count achievements with the cumulative count."""
        return await self._async_check(
            [const.REQUIREMENT_DISCOVERY_COUNT], lambda _definition: discovery_count
        )

    async def async_check_crafting_achievements(
        self, crafted_count: int, recipe_stars: int | None = None
    ) -> list[AchievementUpdateResult]:
        """Update recipe_crafted and the craft_4_star_recipe custom action."""
        return await self._async_check(
            [const.REQUIREMENT_RECIPE_CRAFTED, const.REQUIREMENT_CUSTOM],
            lambda definition: AchievementEngine.crafting_value(
                definition, crafted_count, recipe_stars
            ),
        )

    async def async_check_interaction_achievements(
        self, interaction_count: int
    ) -> list[AchievementUpdateResult]:
        """Update custom achievements tracking the care interaction count."""
        return await self._async_check(
            [const.REQUIREMENT_CUSTOM],
            lambda definition: AchievementEngine.interaction_value(
                definition, interaction_count
            ),
        )

    # =========================================================================
    # Custom achievements
    # =========================================================================

    async def async_add_custom_achievement(
        self, data: dict[str, Any]
    ) -> dict[str, Any]:
        """Validate and append a custom achievement.

        Returns:
            {success, message, achievement}; message is the translation key
            of the failing field on validation errors.
        """
        try:
            definition = db.build_custom_achievement(
                data, dt_utils.dt_now_utc(), self.session.rng
            )
        except db.EntityValidationError as err:
            return {
                const.RESULT_SUCCESS: False,
                const.RESULT_MESSAGE: err.translation_key,
                "field": err.field,
                "achievement": None,
            }

        async with self.store.lock(const.DOC_ACHIEVEMENTS):
            document = await self._async_load()
            document[const.DATA_ACHIEVEMENTS_CUSTOM].append(definition)
            if not await self.store.async_save(const.DOC_ACHIEVEMENTS, document):
                return {
                    const.RESULT_SUCCESS: False,
                    const.RESULT_MESSAGE: const.MSG_STORAGE_UNAVAILABLE,
                    "achievement": None,
                }

        const.LOGGER.info(
            "INFO: Added custom achievement '%s' (%s)",
            definition[const.DATA_ACHIEVEMENT_NAME],
            definition[const.DATA_ACHIEVEMENT_ID],
        )
        return {
            const.RESULT_SUCCESS: True,
            const.RESULT_MESSAGE: const.MSG_ACHIEVEMENT_ADDED.format(
                name=definition[const.DATA_ACHIEVEMENT_NAME]
            ),
            "achievement": AchievementEngine.build_achievement(document, definition),
        }

    async def async_remove_custom_achievement(
        self, achievement_id: str
    ) -> dict[str, Any]:
        """Remove a custom achievement and its progress.

        Template achievements cannot be removed.
        """
        async with self.store.lock(const.DOC_ACHIEVEMENTS):
            document = await self._async_load()
            if not AchievementEngine.is_custom(document, achievement_id):
                message = (
                    const.MSG_ACHIEVEMENT_NOT_CUSTOM
                    if AchievementEngine.find_definition(document, achievement_id)
                    else const.MSG_ACHIEVEMENT_NOT_FOUND
                )
                return {const.RESULT_SUCCESS: False, const.RESULT_MESSAGE: message}

            document[const.DATA_ACHIEVEMENTS_CUSTOM] = [
                definition
                for definition in document[const.DATA_ACHIEVEMENTS_CUSTOM]
                if definition[const.DATA_ACHIEVEMENT_ID] != achievement_id
            ]
            document[const.DATA_ACHIEVEMENTS_PROGRESS].pop(achievement_id, None)
            if not await self.store.async_save(const.DOC_ACHIEVEMENTS, document):
                return {
                    const.RESULT_SUCCESS: False,
                    const.RESULT_MESSAGE: const.MSG_STORAGE_UNAVAILABLE,
                }

        const.LOGGER.info("INFO: Removed custom achievement %s", achievement_id)
        return {
            const.RESULT_SUCCESS: True,
            const.RESULT_MESSAGE: const.MSG_ACHIEVEMENT_REMOVED,
        }

    # =========================================================================
    # Queries
    # =========================================================================

    async def async_get_achievements(
        self, category: str | None = None
    ) -> list[AchievementData]:
        """Return all achievements merged with progress, optionally by category."""
        document = await self._async_load()
        return [
            AchievementEngine.build_achievement(document, definition)
            for definition in AchievementEngine.get_definitions(document)
            if category is None
            or definition[const.DATA_ACHIEVEMENT_CATEGORY] == category
        ]

    async def async_get_achievement_progress(
        self, achievement_id: str
    ) -> AchievementProgressSummary | None:
        """Return current/target/percentage/completed, or None if unknown."""
        document = await self._async_load()
        definition = AchievementEngine.find_definition(document, achievement_id)
        if definition is None:
            return None
        return AchievementEngine.progress_summary(document, definition)

    async def async_get_overall_completion(self) -> OverallCompletion:
        """Return completed/total/percentage across all achievements."""
        return AchievementEngine.overall_completion(await self._async_load())

    async def async_reset_achievements(self) -> bool:
        """Clear all progress; custom definitions are kept.

        Returns:
            True if the document was saved.
        """
        async with self.store.lock(const.DOC_ACHIEVEMENTS):
            document = await self._async_load()
            document[const.DATA_ACHIEVEMENTS_PROGRESS] = {}
            saved = await self.store.async_save(const.DOC_ACHIEVEMENTS, document)
        if saved:
            const.LOGGER.warning(
                "WARNING: Achievement progress reset for player %s", self.entry_id
            )
        return saved
