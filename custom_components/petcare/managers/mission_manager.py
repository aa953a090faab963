"""Mission Manager - Time-boxed missions, experience and levels.

Missions are rebuilt on every read from DEFAULT_MISSION_TEMPLATES for the
active window (today, this ISO week, this quarter) and merged with stored
progress. A mission is claimable once per window; the completion key
records the claim.

On completion:
- Star Fragment rewards are credited through EconomyManager.async_earn()
- Experience rewards raise the player level; a level-up emits LEVEL_UP,
  which EconomyManager listens to for the level bonus
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..engines.mission_engine import MissionEngine
from ..utils import dt_utils
from .base_manager import BaseManager

if TYPE_CHECKING:
    from datetime import datetime

    from homeassistant.core import HomeAssistant

    from ..session import PetCareSession
    from ..type_defs import MissionData, MissionResult, PlayerProgress


class MissionManager(BaseManager):
    """Manager for mission progress and completion."""

    def __init__(
        self,
        hass: HomeAssistant,
        session: PetCareSession,
        templates: list[dict[str, Any]] | None = None,
    ) -> None:
        """Initialize the MissionManager.

        Args:
            hass: Home Assistant instance
            session: The player session
            templates: Mission templates (defaults to DEFAULT_MISSION_TEMPLATES)
        """
        super().__init__(hass, session)
        self.templates = (
            templates if templates is not None else const.DEFAULT_MISSION_TEMPLATES
        )

    async def async_setup(self) -> None:
        """Set up the MissionManager (no subscriptions)."""

    async def _async_load(self) -> dict[str, Any]:
        return await self.store.async_load(
            const.DOC_MISSIONS, db.hydrate_missions_document
        )

    def _find_template(self, mission_id: str) -> dict[str, Any] | None:
        for template in self.templates:
            if template[const.DATA_MISSION_ID] == mission_id:
                return template
        return None

    # =========================================================================
    # Progress
    # =========================================================================

    async def async_record_activity(
        self, activity_type: str, amount: int = 1
    ) -> list[dict[str, Any]]:
        """Advance every mission whose requirement matches the activity.

        Args:
            activity_type: An action type, MISSION_REQUIREMENT_DISCOVERY or
                MISSION_REQUIREMENT_LOGIN
            amount: Progress to add (e.g. number of items discovered)

        Returns:
            List of {mission_id, progress, target} for missions that changed.
        """
        now = dt_utils.dt_now_utc()
        async with self.store.lock(const.DOC_MISSIONS):
            document = await self._async_load()
            pruned = MissionEngine.prune_stale_windows(document, self.templates, now)
            changed = MissionEngine.record_activity(
                document, self.templates, activity_type, amount, now
            )
            if not (changed or pruned):
                return []
            if not await self.store.async_save(const.DOC_MISSIONS, document):
                return []

        for update in changed:
            self.emit(const.SIGNAL_SUFFIX_MISSION_PROGRESS, **update)
        if changed:
            const.LOGGER.debug(
                "DEBUG: MissionManager.record_activity: type=%s, amount=%d, "
                "missions=%s",
                activity_type,
                amount,
                [update[const.FIELD_MISSION_ID] for update in changed],
            )
        return changed

    # =========================================================================
    # Completion
    # =========================================================================

    async def async_complete_mission(self, mission_id: str) -> MissionResult:
        """Claim a mission's rewards for the current window.

        Fails when the mission is unknown, already claimed in this window,
        or its progress is below target.
        """
        now = dt_utils.dt_now_utc()
        template = self._find_template(mission_id)

        async with self.store.lock(const.DOC_MISSIONS):
            document = await self._async_load()
            MissionEngine.prune_stale_windows(document, self.templates, now)
            error = MissionEngine.validate_completion(document, template, now)
            if error is not None or template is None:
                return self._failure(error or const.MSG_MISSION_NOT_FOUND, document)

            outcome = MissionEngine.apply_completion(document, template, now)
            if not await self.store.async_save(const.DOC_MISSIONS, document):
                return self._failure(const.MSG_STORAGE_UNAVAILABLE, document)

        await self._async_pay_out(template, outcome, now)

        level_up = outcome["new_level"] > outcome["old_level"]
        const.LOGGER.info(
            "INFO: Mission '%s' completed: +%d Star Fragments, +%d XP, level %d",
            mission_id,
            outcome["star_fragments"],
            outcome["experience"],
            outcome["new_level"],
        )
        return {
            "success": True,
            "message": const.MSG_MISSION_COMPLETED.format(
                name=template[const.DATA_MISSION_NAME]
            ),
            "star_fragments": outcome["star_fragments"],
            "experience": outcome["experience"],
            "level_up": level_up,
            "new_level": outcome["new_level"],
        }

    async def _async_pay_out(
        self, template: dict[str, Any], outcome: dict[str, int], now: datetime
    ) -> None:
        """Credit fragments, then announce the completion and any level-up."""
        mission_id = template[const.DATA_MISSION_ID]
        if outcome["star_fragments"] > 0:
            await self.session.economy_manager.async_earn(
                outcome["star_fragments"],
                source=const.CURRENCY_SOURCE_MISSION,
                description=const.MSG_MISSION_COMPLETED.format(
                    name=template[const.DATA_MISSION_NAME]
                ),
                reference_id=MissionEngine.get_completion_key(
                    mission_id, template[const.DATA_MISSION_SCOPE], now
                ),
            )

        self.emit(
            const.SIGNAL_SUFFIX_MISSION_COMPLETED,
            mission_id=mission_id,
            name=template[const.DATA_MISSION_NAME],
            scope=template[const.DATA_MISSION_SCOPE],
            star_fragments=outcome["star_fragments"],
            experience=outcome["experience"],
        )

        if outcome["new_level"] > outcome["old_level"]:
            self.emit(
                const.SIGNAL_SUFFIX_LEVEL_UP,
                mission_id=mission_id,
                old_level=outcome["old_level"],
                new_level=outcome["new_level"],
                bonus=MissionEngine.calculate_level_up_bonus(outcome["new_level"]),
            )

    @staticmethod
    def _failure(message: str, document: dict[str, Any]) -> MissionResult:
        return {
            "success": False,
            "message": message,
            "star_fragments": 0,
            "experience": 0,
            "level_up": False,
            "new_level": int(document.get(const.DATA_MISSIONS_LEVEL, 1)),
        }

    # =========================================================================
    # Queries
    # =========================================================================

    async def async_get_missions(self, scope: str | None = None) -> list[MissionData]:
        """Return missions for the active windows, optionally for one scope."""
        now = dt_utils.dt_now_utc()
        document = await self._async_load()
        return [
            MissionEngine.build_mission(document, template, now)
            for template in self.templates
            if scope is None or template[const.DATA_MISSION_SCOPE] == scope
        ]

    async def async_get_player_progress(self) -> PlayerProgress:
        """Return level, experience and lifetime mission earnings."""
        now = dt_utils.dt_now_utc()
        document = await self._async_load()
        MissionEngine.prune_stale_windows(document, self.templates, now)
        level = int(document[const.DATA_MISSIONS_LEVEL])
        experience = int(document[const.DATA_MISSIONS_EXPERIENCE])
        return {
            "level": level,
            "experience": experience,
            "experience_to_next_level": level * const.EXPERIENCE_PER_LEVEL
            - experience,
            "total_earned": int(document[const.DATA_MISSIONS_TOTAL_EARNED]),
            "completed_missions": len(document[const.DATA_MISSIONS_COMPLETED_KEYS]),
        }
