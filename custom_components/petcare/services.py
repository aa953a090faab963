# File: services.py
"""Defines custom services for the PetCare integration.

These services are the UI layer's entry points into a player's session.
Every service accepts an optional `config_entry_id`; without it the first
loaded player is used. Domain failures (feed limit, insufficient funds,
mission not ready...) come back in the service response; only a missing
player raises.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import config_validation as cv

from . import const
from .session import PetCareSession

# --- Service Schemas ---
_ENTRY_FIELD = {vol.Optional(const.FIELD_CONFIG_ENTRY_ID): cv.string}

ADOPT_PET_SCHEMA = vol.Schema(
    {
        **_ENTRY_FIELD,
        vol.Required(const.FIELD_PET_ID): cv.string,
        vol.Optional(const.FIELD_PET_NAME): cv.string,
    }
)

RECORD_ACTION_SCHEMA = vol.Schema(
    {
        **_ENTRY_FIELD,
        vol.Required(const.FIELD_PET_ID): cv.string,
        vol.Required(const.FIELD_ACTION_TYPE): vol.In(const.ACTION_TYPES),
        vol.Optional(const.FIELD_MOOD_BOOST): vol.Coerce(int),
        vol.Optional(const.FIELD_HUNGER_BOOST): vol.Coerce(int),
        vol.Optional(const.FIELD_ENERGY_BOOST): vol.Coerce(int),
        vol.Optional(const.FIELD_ACHIEVED_GOAL, default=False): cv.boolean,
        vol.Optional(const.FIELD_PET_NAME): cv.string,
    }
)

DISCOVER_SCHEMA = vol.Schema(dict(_ENTRY_FIELD))

COMPLETE_MISSION_SCHEMA = vol.Schema(
    {
        **_ENTRY_FIELD,
        vol.Required(const.FIELD_MISSION_ID): cv.string,
    }
)

UPDATE_ACHIEVEMENT_PROGRESS_SCHEMA = vol.Schema(
    {
        **_ENTRY_FIELD,
        vol.Required(const.FIELD_ACHIEVEMENT_ID): cv.string,
        vol.Required(const.FIELD_VALUE): vol.Coerce(int),
    }
)

SPEND_CURRENCY_SCHEMA = vol.Schema(
    {
        **_ENTRY_FIELD,
        vol.Required(const.FIELD_AMOUNT): vol.Coerce(int),
        vol.Optional(const.FIELD_DESCRIPTION, default=""): cv.string,
    }
)

ADD_CUSTOM_ACHIEVEMENT_SCHEMA = vol.Schema(
    {
        **_ENTRY_FIELD,
        vol.Required(const.FIELD_NAME): cv.string,
        vol.Optional(const.FIELD_DESCRIPTION, default=""): cv.string,
        vol.Optional(
            const.FIELD_CATEGORY, default=const.ACHIEVEMENT_CATEGORY_GENERAL
        ): cv.string,
        vol.Required(const.FIELD_REQUIREMENT_TYPE): cv.string,
        vol.Required(const.FIELD_TARGET): vol.Coerce(int),
        vol.Optional(const.FIELD_REQUIREMENT_ACTION): cv.string,
        vol.Optional(const.FIELD_REWARD_AMOUNT, default=0): vol.Coerce(int),
    }
)

REMOVE_CUSTOM_ACHIEVEMENT_SCHEMA = vol.Schema(
    {
        **_ENTRY_FIELD,
        vol.Required(const.FIELD_ACHIEVEMENT_ID): cv.string,
    }
)

CLAIM_DAILY_LOGIN_SCHEMA = vol.Schema(dict(_ENTRY_FIELD))

RECORD_CRAFT_SCHEMA = vol.Schema(
    {
        **_ENTRY_FIELD,
        vol.Optional(const.FIELD_RECIPE_ID): cv.string,
        vol.Optional(const.FIELD_RECIPE_STARS): vol.Coerce(int),
        vol.Inclusive(const.FIELD_ITEM_ID, "output"): cv.string,
        vol.Inclusive(const.FIELD_QUANTITY, "output"): vol.Coerce(int),
        vol.Optional(const.FIELD_RARITY, default=const.RARITY_COMMON): vol.In(
            const.RARITIES
        ),
    }
)

PET_SCHEMA = vol.Schema(
    {
        **_ENTRY_FIELD,
        vol.Required(const.FIELD_PET_ID): cv.string,
    }
)

END_SLEEP_SCHEMA = PET_SCHEMA.extend({vol.Optional(const.FIELD_PET_NAME): cv.string})


def get_session(hass: HomeAssistant, entry_id: str | None = None) -> PetCareSession:
    """Return the session of a player entry (first loaded entry by default).

    Raises:
        HomeAssistantError: If no matching PetCare entry is loaded.
    """
    domain_entries = hass.data.get(const.DOMAIN) or {}
    if entry_id is None:
        entry_id = next(iter(domain_entries), None)
    if entry_id is None or entry_id not in domain_entries:
        const.LOGGER.warning("WARNING: %s (%s)", const.MSG_NO_ENTRY_FOUND, entry_id)
        raise HomeAssistantError(
            const.MSG_NO_ENTRY_FOUND,
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_NO_ENTRY,
        )
    return domain_entries[entry_id][const.SESSION]


def async_setup_services(hass: HomeAssistant) -> None:
    """Register PetCare services (once, shared by every player)."""
    if hass.services.has_service(const.DOMAIN, const.SERVICE_RECORD_ACTION):
        return

    def _session(call: ServiceCall) -> PetCareSession:
        return get_session(hass, call.data.get(const.FIELD_CONFIG_ENTRY_ID))

    async def handle_adopt_pet(call: ServiceCall) -> ServiceResponse:
        """Handle adopting a pet."""
        result = await _session(call).async_adopt_pet(
            call.data[const.FIELD_PET_ID], call.data.get(const.FIELD_PET_NAME)
        )
        const.LOGGER.info(
            "INFO: Adopt pet '%s': %s",
            call.data[const.FIELD_PET_ID],
            result[const.RESULT_MESSAGE],
        )
        return result

    async def handle_record_action(call: ServiceCall) -> ServiceResponse:
        """Handle a care action (feed/sleep/play/chat)."""
        stat_boost: dict[str, int] = {}
        for field, stat in (
            (const.FIELD_MOOD_BOOST, const.STAT_BOOST_MOOD),
            (const.FIELD_HUNGER_BOOST, const.STAT_BOOST_HUNGER),
            (const.FIELD_ENERGY_BOOST, const.STAT_BOOST_ENERGY),
        ):
            if field in call.data:
                stat_boost[stat] = call.data[field]

        result = await _session(call).async_perform_action(
            call.data[const.FIELD_PET_ID],
            call.data[const.FIELD_ACTION_TYPE],
            stat_boost or None,  # type: ignore[arg-type]
            achieved_goal=call.data[const.FIELD_ACHIEVED_GOAL],
            pet_name=call.data.get(const.FIELD_PET_NAME),
        )
        const.LOGGER.info(
            "INFO: Action '%s' for pet '%s': %s",
            call.data[const.FIELD_ACTION_TYPE],
            call.data[const.FIELD_PET_ID],
            result[const.RESULT_MESSAGE],
        )
        return result

    async def handle_discover(call: ServiceCall) -> ServiceResponse:
        """Handle a discovery attempt."""
        return await _session(call).async_discover()

    async def handle_complete_mission(call: ServiceCall) -> ServiceResponse:
        """Handle claiming a mission."""
        return await _session(call).async_complete_mission(
            call.data[const.FIELD_MISSION_ID]
        )

    async def handle_update_achievement_progress(
        call: ServiceCall,
    ) -> ServiceResponse:
        """Handle setting an achievement's progress."""
        return await _session(call).async_update_achievement_progress(
            call.data[const.FIELD_ACHIEVEMENT_ID], call.data[const.FIELD_VALUE]
        )

    async def handle_spend_currency(call: ServiceCall) -> ServiceResponse:
        """Handle spending Star Fragments."""
        return await _session(call).async_spend_currency(
            call.data[const.FIELD_AMOUNT], call.data[const.FIELD_DESCRIPTION]
        )

    async def handle_add_custom_achievement(call: ServiceCall) -> ServiceResponse:
        """Handle adding a custom achievement."""
        requirement: dict[str, Any] = {
            const.DATA_REQUIREMENT_TYPE: call.data[const.FIELD_REQUIREMENT_TYPE],
            const.DATA_REQUIREMENT_TARGET: call.data[const.FIELD_TARGET],
        }
        if const.FIELD_REQUIREMENT_ACTION in call.data:
            requirement[const.DATA_REQUIREMENT_METADATA] = {
                const.CUSTOM_ACTION_KEY: call.data[const.FIELD_REQUIREMENT_ACTION]
            }
        return await _session(call).async_add_custom_achievement(
            {
                const.DATA_ACHIEVEMENT_NAME: call.data[const.FIELD_NAME],
                const.DATA_ACHIEVEMENT_DESCRIPTION: call.data[
                    const.FIELD_DESCRIPTION
                ],
                const.DATA_ACHIEVEMENT_CATEGORY: call.data[const.FIELD_CATEGORY],
                const.DATA_ACHIEVEMENT_REQUIREMENT: requirement,
                const.DATA_ACHIEVEMENT_REWARD: {
                    const.DATA_REWARD_TYPE: const.REWARD_TYPE_STAR_FRAGMENTS,
                    const.DATA_REWARD_AMOUNT: call.data[const.FIELD_REWARD_AMOUNT],
                },
            }
        )

    async def handle_remove_custom_achievement(
        call: ServiceCall,
    ) -> ServiceResponse:
        """Handle removing a custom achievement."""
        return await _session(call).async_remove_custom_achievement(
            call.data[const.FIELD_ACHIEVEMENT_ID]
        )

    async def handle_claim_daily_login(call: ServiceCall) -> ServiceResponse:
        """Handle claiming today's login bonus."""
        return await _session(call).async_check_daily_login()

    async def handle_record_craft(call: ServiceCall) -> ServiceResponse:
        """Handle recording a crafted recipe."""
        outputs = None
        if const.FIELD_ITEM_ID in call.data:
            outputs = [
                {
                    "item_id": call.data[const.FIELD_ITEM_ID],
                    "quantity": call.data[const.FIELD_QUANTITY],
                    "rarity": call.data[const.FIELD_RARITY],
                }
            ]
        return await _session(call).async_record_craft(
            call.data.get(const.FIELD_RECIPE_STARS),
            outputs,
            recipe_id=call.data.get(const.FIELD_RECIPE_ID),
        )

    async def handle_start_sleep(call: ServiceCall) -> ServiceResponse:
        """Handle putting a pet to sleep."""
        return await _session(call).async_start_sleep(call.data[const.FIELD_PET_ID])

    async def handle_end_sleep(call: ServiceCall) -> ServiceResponse:
        """Handle waking a pet."""
        result = await _session(call).async_end_sleep(
            call.data[const.FIELD_PET_ID], call.data.get(const.FIELD_PET_NAME)
        )
        const.LOGGER.info(
            "INFO: End sleep for pet '%s': %s",
            call.data[const.FIELD_PET_ID],
            result[const.RESULT_MESSAGE],
        )
        return result

    async def handle_check_moon_cycle(call: ServiceCall) -> ServiceResponse:
        """Handle settling a pet's moon cycle."""
        return await _session(call).async_check_moon_cycle(
            call.data[const.FIELD_PET_ID]
        )

    # --- Register Services ---
    for service, handler, schema in (
        (const.SERVICE_ADOPT_PET, handle_adopt_pet, ADOPT_PET_SCHEMA),
        (const.SERVICE_RECORD_ACTION, handle_record_action, RECORD_ACTION_SCHEMA),
        (const.SERVICE_DISCOVER, handle_discover, DISCOVER_SCHEMA),
        (
            const.SERVICE_COMPLETE_MISSION,
            handle_complete_mission,
            COMPLETE_MISSION_SCHEMA,
        ),
        (
            const.SERVICE_UPDATE_ACHIEVEMENT_PROGRESS,
            handle_update_achievement_progress,
            UPDATE_ACHIEVEMENT_PROGRESS_SCHEMA,
        ),
        (const.SERVICE_SPEND_CURRENCY, handle_spend_currency, SPEND_CURRENCY_SCHEMA),
        (
            const.SERVICE_ADD_CUSTOM_ACHIEVEMENT,
            handle_add_custom_achievement,
            ADD_CUSTOM_ACHIEVEMENT_SCHEMA,
        ),
        (
            const.SERVICE_REMOVE_CUSTOM_ACHIEVEMENT,
            handle_remove_custom_achievement,
            REMOVE_CUSTOM_ACHIEVEMENT_SCHEMA,
        ),
        (
            const.SERVICE_CLAIM_DAILY_LOGIN,
            handle_claim_daily_login,
            CLAIM_DAILY_LOGIN_SCHEMA,
        ),
        (const.SERVICE_RECORD_CRAFT, handle_record_craft, RECORD_CRAFT_SCHEMA),
        (const.SERVICE_START_SLEEP, handle_start_sleep, PET_SCHEMA),
        (const.SERVICE_END_SLEEP, handle_end_sleep, END_SLEEP_SCHEMA),
        (const.SERVICE_CHECK_MOON_CYCLE, handle_check_moon_cycle, PET_SCHEMA),
    ):
        hass.services.async_register(
            const.DOMAIN,
            service,
            handler,
            schema=schema,
            supports_response=SupportsResponse.OPTIONAL,
        )

    const.LOGGER.info("INFO: PetCare services have been registered successfully")


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister PetCare services when the last player unloads."""
    services = [
        const.SERVICE_ADOPT_PET,
        const.SERVICE_RECORD_ACTION,
        const.SERVICE_DISCOVER,
        const.SERVICE_COMPLETE_MISSION,
        const.SERVICE_UPDATE_ACHIEVEMENT_PROGRESS,
        const.SERVICE_SPEND_CURRENCY,
        const.SERVICE_ADD_CUSTOM_ACHIEVEMENT,
        const.SERVICE_REMOVE_CUSTOM_ACHIEVEMENT,
        const.SERVICE_CLAIM_DAILY_LOGIN,
        const.SERVICE_RECORD_CRAFT,
        const.SERVICE_START_SLEEP,
        const.SERVICE_END_SLEEP,
        const.SERVICE_CHECK_MOON_CYCLE,
    ]

    for service in services:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: PetCare services have been unregistered")
