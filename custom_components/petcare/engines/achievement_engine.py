"""Achievement Engine - Pure logic for threshold-based achievements.

This engine provides stateless, pure Python functions for:
- Merging achievement definitions (templates + custom) with stored progress
- Progress updates capped at target, with one-time completion
- Deriving progress values for inventory, discovery and crafting checks
- Completion summaries

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
State management belongs in AchievementManager.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils import dt_utils
from ..utils.math_utils import calculate_percentage

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..type_defs import (
        AchievementData,
        AchievementProgressSummary,
        OverallCompletion,
    )


class AchievementEngine:
    """Pure logic engine for achievement progress.

    `document` is the stored AchievementsDocument dict: per-id progress plus
    the list of custom definitions.
    """

    # =========================================================================
    # Definitions
    # =========================================================================

    @staticmethod
    def get_definitions(document: dict[str, Any]) -> list[dict[str, Any]]:
        """Template definitions followed by custom ones."""
        return [
            *const.DEFAULT_ACHIEVEMENT_TEMPLATES,
            *document.get(const.DATA_ACHIEVEMENTS_CUSTOM, []),
        ]

    @staticmethod
    def find_definition(
        document: dict[str, Any], achievement_id: str
    ) -> dict[str, Any] | None:
        """Find a definition by id (None if unknown)."""
        for definition in AchievementEngine.get_definitions(document):
            if definition[const.DATA_ACHIEVEMENT_ID] == achievement_id:
                return definition
        return None

    @staticmethod
    def is_custom(document: dict[str, Any], achievement_id: str) -> bool:
        """True if the id belongs to a custom definition."""
        return any(
            definition[const.DATA_ACHIEVEMENT_ID] == achievement_id
            for definition in document.get(const.DATA_ACHIEVEMENTS_CUSTOM, [])
        )

    @staticmethod
    def get_target(definition: dict[str, Any]) -> int:
        """Requirement target of a definition."""
        return int(
            definition[const.DATA_ACHIEVEMENT_REQUIREMENT][const.DATA_REQUIREMENT_TARGET]
        )

    @staticmethod
    def get_stored_progress(
        document: dict[str, Any], achievement_id: str
    ) -> dict[str, Any]:
        """Stored progress for an id, defaulting to not started."""
        return document[const.DATA_ACHIEVEMENTS_PROGRESS].get(
            achievement_id,
            {
                const.DATA_ACHIEVEMENT_PROGRESS: 0,
                const.DATA_ACHIEVEMENT_COMPLETED: False,
                const.DATA_ACHIEVEMENT_DATE_COMPLETED: None,
            },
        )

    @staticmethod
    def build_achievement(
        document: dict[str, Any], definition: dict[str, Any]
    ) -> AchievementData:
        """Merge a definition with its stored progress."""
        stored = AchievementEngine.get_stored_progress(
            document, definition[const.DATA_ACHIEVEMENT_ID]
        )
        achievement = dict(definition)
        achievement[const.DATA_ACHIEVEMENT_PROGRESS] = int(
            stored.get(const.DATA_ACHIEVEMENT_PROGRESS, 0)
        )
        achievement[const.DATA_ACHIEVEMENT_COMPLETED] = bool(
            stored.get(const.DATA_ACHIEVEMENT_COMPLETED, False)
        )
        achievement[const.DATA_ACHIEVEMENT_DATE_COMPLETED] = stored.get(
            const.DATA_ACHIEVEMENT_DATE_COMPLETED
        )
        return achievement  # type: ignore[return-value]

    # =========================================================================
    # Progress
    # =========================================================================

    @staticmethod
    def apply_progress(
        document: dict[str, Any],
        definition: dict[str, Any],
        value: int,
        now: datetime,
    ) -> tuple[str, bool]:
        """Set progress to min(value, target). Modifies document in place.

        Returns:
            (status, changed). Status is ACHIEVEMENT_STATUS_UNCHANGED for an
            already-completed achievement, ACHIEVEMENT_STATUS_COMPLETED when
            the target is newly reached, else ACHIEVEMENT_STATUS_PROGRESS_UPDATED.
        """
        achievement_id = definition[const.DATA_ACHIEVEMENT_ID]
        stored = dict(AchievementEngine.get_stored_progress(document, achievement_id))
        if stored.get(const.DATA_ACHIEVEMENT_COMPLETED):
            return const.ACHIEVEMENT_STATUS_UNCHANGED, False

        target = AchievementEngine.get_target(definition)
        previous = int(stored.get(const.DATA_ACHIEVEMENT_PROGRESS, 0))
        progress = min(max(int(value), 0), target)
        stored[const.DATA_ACHIEVEMENT_PROGRESS] = progress

        status = const.ACHIEVEMENT_STATUS_PROGRESS_UPDATED
        if progress >= target:
            stored[const.DATA_ACHIEVEMENT_COMPLETED] = True
            stored[const.DATA_ACHIEVEMENT_DATE_COMPLETED] = dt_utils.dt_to_iso(now)
            status = const.ACHIEVEMENT_STATUS_COMPLETED

        changed = progress != previous or status == const.ACHIEVEMENT_STATUS_COMPLETED
        if changed:
            document[const.DATA_ACHIEVEMENTS_PROGRESS][achievement_id] = stored
        return status, changed

    @staticmethod
    def count_rarities(
        rarities: Iterable[str], metadata: dict[str, Any] | None
    ) -> int:
        """Count distinct rarities, restricted to metadata.rarities when set."""
        present = set(rarities)
        allowed = (metadata or {}).get(const.RARITIES_METADATA_KEY)
        if allowed:
            present &= set(allowed)
        return len(present)

    @staticmethod
    def inventory_value(
        definition: dict[str, Any], total_items: int, rarities: Iterable[str]
    ) -> int | None:
        """Progress value an inventory check supplies (None if not applicable)."""
        requirement = definition[const.DATA_ACHIEVEMENT_REQUIREMENT]
        requirement_type = requirement[const.DATA_REQUIREMENT_TYPE]
        if requirement_type == const.REQUIREMENT_ITEM_COUNT:
            return total_items
        if requirement_type == const.REQUIREMENT_RARITY_COLLECTED:
            return AchievementEngine.count_rarities(
                rarities, requirement.get(const.DATA_REQUIREMENT_METADATA)
            )
        return None

    @staticmethod
    def crafting_value(
        definition: dict[str, Any], crafted_count: int, recipe_stars: int | None
    ) -> int | None:
        """Progress value a crafting check supplies (None if not applicable)."""
        requirement = definition[const.DATA_ACHIEVEMENT_REQUIREMENT]
        requirement_type = requirement[const.DATA_REQUIREMENT_TYPE]
        if requirement_type == const.REQUIREMENT_RECIPE_CRAFTED:
            return crafted_count
        metadata = requirement.get(const.DATA_REQUIREMENT_METADATA) or {}
        if (
            requirement_type == const.REQUIREMENT_CUSTOM
            and metadata.get(const.CUSTOM_ACTION_KEY) == const.CUSTOM_ACTION_CRAFT_4_STAR
            and recipe_stars is not None
            and recipe_stars >= const.STAR_CHEF_MIN_RECIPE_STARS
        ):
            return AchievementEngine.get_target(definition)
        return None

    @staticmethod
    def interaction_value(
        definition: dict[str, Any], interaction_count: int
    ) -> int | None:
        """Progress value for custom `interaction` achievements (else None)."""
        requirement = definition[const.DATA_ACHIEVEMENT_REQUIREMENT]
        metadata = requirement.get(const.DATA_REQUIREMENT_METADATA) or {}
        if (
            requirement[const.DATA_REQUIREMENT_TYPE] == const.REQUIREMENT_CUSTOM
            and metadata.get(const.CUSTOM_ACTION_KEY) == const.CUSTOM_ACTION_INTERACTION
        ):
            return interaction_count
        return None

    @staticmethod
    def matching_definitions(
        document: dict[str, Any], requirement_type: str
    ) -> list[dict[str, Any]]:
        """Definitions (template or custom) with a given requirement type."""
        return [
            definition
            for definition in AchievementEngine.get_definitions(document)
            if definition[const.DATA_ACHIEVEMENT_REQUIREMENT][
                const.DATA_REQUIREMENT_TYPE
            ]
            == requirement_type
        ]

    # =========================================================================
    # Summaries
    # =========================================================================

    @staticmethod
    def progress_summary(
        document: dict[str, Any], definition: dict[str, Any]
    ) -> AchievementProgressSummary:
        """Current/target/percentage/completed for one achievement."""
        achievement = AchievementEngine.build_achievement(document, definition)
        target = AchievementEngine.get_target(definition)
        current = achievement[const.DATA_ACHIEVEMENT_PROGRESS]
        return {
            "current": current,
            "target": target,
            "percentage": calculate_percentage(current, target),
            "completed": achievement[const.DATA_ACHIEVEMENT_COMPLETED],
        }

    @staticmethod
    def overall_completion(document: dict[str, Any]) -> OverallCompletion:
        """Completed count over all known achievements."""
        definitions = AchievementEngine.get_definitions(document)
        completed = sum(
            1
            for definition in definitions
            if AchievementEngine.get_stored_progress(
                document, definition[const.DATA_ACHIEVEMENT_ID]
            ).get(const.DATA_ACHIEVEMENT_COMPLETED)
        )
        return {
            "completed": completed,
            "total": len(definitions),
            "percentage": calculate_percentage(completed, len(definitions)),
        }
