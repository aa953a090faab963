# File: helpers/flow_helpers.py
"""Helpers for the PetCare integration's Config and Options flow.

Provides schema builders, UI validation wrappers, and data transformation.

### Layer 1: Schema Building
**Function:** `build_<step>_schema(defaults) -> vol.Schema`
**Keys:** CONF_* constants (form field names)

### Layer 2: UI Validation
**Function:** `validate_<step>_inputs(user_input) -> errors_dict`
**Returns:** Error dict (empty = no errors), values are translation keys

### Layer 3: Data Building
**Function:** `build_<step>_data(user_input) -> dict`
**Purpose:** Normalized config entry data / options
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol

from .. import const
from ..engines import DiscoveryEngine

# Options flow key -> discovery settings key
DISCOVERY_OPTION_KEYS = {
    const.CONF_DISCOVERY_INTERVAL_HOURS: const.DATA_DISCOVERY_INTERVAL_HOURS,
    const.CONF_DISCOVERY_CHANCE: const.DATA_DISCOVERY_CHANCE,
    const.CONF_DISCOVERY_MAX_PER_DAY: const.DATA_DISCOVERY_MAX_PER_DAY,
}

_DISCOVERY_OPTION_ERRORS = {
    const.CONF_DISCOVERY_INTERVAL_HOURS: const.TRANS_KEY_ERROR_INVALID_INTERVAL,
    const.CONF_DISCOVERY_CHANCE: const.TRANS_KEY_ERROR_INVALID_DISCOVERY_CHANCE,
    const.CONF_DISCOVERY_MAX_PER_DAY: const.TRANS_KEY_ERROR_INVALID_MAX_PER_DAY,
}


# ----------------------------------------------------------------------------------
# PLAYER (config flow user step)
# ----------------------------------------------------------------------------------


def build_player_schema(
    default_name: str = "",
    default_balance: int = const.DEFAULT_STARTING_BALANCE,
) -> vol.Schema:
    """Build the schema for the player step."""
    return vol.Schema(
        {
            vol.Required(const.CONF_PLAYER_NAME, default=default_name): str,
            vol.Optional(
                const.CONF_STARTING_BALANCE, default=default_balance
            ): vol.Coerce(int),
        }
    )


def validate_player_inputs(user_input: dict[str, Any]) -> dict[str, str]:
    """Validate the player step.

    Returns:
        Dictionary of errors (empty if validation passes).
    """
    errors: dict[str, str] = {}

    if not str(user_input.get(const.CONF_PLAYER_NAME, "")).strip():
        errors[const.CONF_PLAYER_NAME] = const.TRANS_KEY_ERROR_INVALID_PLAYER_NAME

    balance = user_input.get(const.CONF_STARTING_BALANCE, const.DEFAULT_ZERO)
    if not 0 <= int(balance) <= const.MAX_STARTING_BALANCE:
        errors[const.CONF_STARTING_BALANCE] = const.TRANS_KEY_ERROR_INVALID_BALANCE

    return errors


def build_player_data(user_input: dict[str, Any]) -> dict[str, Any]:
    """Build config entry data from the player step."""
    return {
        const.CONF_PLAYER_NAME: str(user_input[const.CONF_PLAYER_NAME]).strip(),
        const.CONF_STARTING_BALANCE: int(
            user_input.get(const.CONF_STARTING_BALANCE, const.DEFAULT_STARTING_BALANCE)
        ),
    }


# ----------------------------------------------------------------------------------
# SYSTEM SETTINGS (options flow)
# ----------------------------------------------------------------------------------


def build_settings_schema(options: dict[str, Any]) -> vol.Schema:
    """Build the options schema, prefilled with the current options."""
    return vol.Schema(
        {
            vol.Required(
                const.CONF_DISCOVERY_INTERVAL_HOURS,
                default=options.get(
                    const.CONF_DISCOVERY_INTERVAL_HOURS,
                    const.DEFAULT_DISCOVERY_INTERVAL_HOURS,
                ),
            ): vol.Coerce(float),
            vol.Required(
                const.CONF_DISCOVERY_CHANCE,
                default=options.get(
                    const.CONF_DISCOVERY_CHANCE, const.DEFAULT_DISCOVERY_CHANCE
                ),
            ): vol.Coerce(float),
            vol.Required(
                const.CONF_DISCOVERY_MAX_PER_DAY,
                default=options.get(
                    const.CONF_DISCOVERY_MAX_PER_DAY,
                    const.DEFAULT_DISCOVERY_MAX_PER_DAY,
                ),
            ): vol.Coerce(int),
            vol.Required(
                const.CONF_REFRESH_INTERVAL,
                default=options.get(
                    const.CONF_REFRESH_INTERVAL, const.DEFAULT_REFRESH_INTERVAL
                ),
            ): vol.Coerce(int),
        }
    )


def validate_settings_inputs(user_input: dict[str, Any]) -> dict[str, str]:
    """Validate the options step.

    Discovery values go through the same validation the discovery settings
    update uses, so the form can never store what the manager would reject.
    """
    errors: dict[str, str] = {}

    for option_key, settings_key in DISCOVERY_OPTION_KEYS.items():
        if option_key not in user_input:
            continue
        try:
            DiscoveryEngine.validate_settings({settings_key: user_input[option_key]})
        except (TypeError, ValueError):
            errors[option_key] = _DISCOVERY_OPTION_ERRORS[option_key]

    if const.CONF_DISCOVERY_INTERVAL_HOURS not in errors and (
        float(user_input.get(const.CONF_DISCOVERY_INTERVAL_HOURS, 1)) <= 0
    ):
        errors[const.CONF_DISCOVERY_INTERVAL_HOURS] = (
            const.TRANS_KEY_ERROR_INVALID_INTERVAL
        )

    refresh = int(
        user_input.get(const.CONF_REFRESH_INTERVAL, const.DEFAULT_REFRESH_INTERVAL)
    )
    if not const.MIN_REFRESH_INTERVAL <= refresh <= const.MAX_REFRESH_INTERVAL:
        errors[const.CONF_REFRESH_INTERVAL] = (
            const.TRANS_KEY_ERROR_INVALID_REFRESH_INTERVAL
        )

    return errors


def build_discovery_overrides(options: dict[str, Any]) -> dict[str, Any]:
    """Map options flow keys to discovery settings keys (only those present)."""
    return {
        settings_key: options[option_key]
        for option_key, settings_key in DISCOVERY_OPTION_KEYS.items()
        if option_key in options
    }
