# File: utils/dt_utils.py
"""Date and time utilities for PetCare.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

UTILS PURITY: NO `homeassistant.*` imports allowed.
   Uses standard library: datetime, zoneinfo, dateutil.

Functions:
    - dt_today_local: Get today's date in local timezone
    - dt_today_iso: Get today's date as ISO string
    - dt_now_utc: Get current datetime in UTC
    - as_utc / as_local: Timezone conversion
    - dt_parse: Parse a stored ISO timestamp into an aware datetime
    - dt_to_iso: Serialize an aware datetime as a UTC ISO string
    - local_date_iso: Calendar date of a moment in local timezone
    - previous_date_iso: Calendar date one day before an ISO date
    - date_offset_iso / days_between_iso: Calendar arithmetic on ISO dates
    - hours_between: Elapsed hours between two moments
    - week_key / season_key: Reset-window keys for missions
    - dt_window_end: End of a daily/weekly/season window
    - format_countdown: Render a remaining timedelta as "1d 3h 5m"
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
import logging
from zoneinfo import ZoneInfo

# Third-party date utilities (no HA dependency)
from dateutil.relativedelta import relativedelta

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

# Window constants (mirror const.MISSION_SCOPE_*)
WINDOW_DAILY = "daily"
WINDOW_WEEKLY = "weekly"
WINDOW_SEASON = "season"

MONTHS_PER_SEASON = 3


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this during integration setup to configure the user's timezone.
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`."""
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


def dt_today_iso(tz: ZoneInfo | None = None) -> str:
    """Return today's date in local timezone as ISO string (YYYY-MM-DD)."""
    return dt_today_local(tz).isoformat()


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


# ==============================================================================
# Timezone Conversion
# ==============================================================================


def as_utc(dt_obj: datetime) -> datetime:
    """Convert a datetime to UTC timezone.

    Naive datetimes are assumed to be in the default timezone.
    """
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=DEFAULT_TIME_ZONE)
    return dt_obj.astimezone(UTC)


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone.

    Naive datetimes are assumed to be UTC.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(tz_info)


# ==============================================================================
# Parsing / Serialization
# ==============================================================================


def dt_parse(dt_input: str | datetime | None) -> datetime | None:
    """Parse a stored timestamp into a UTC-aware datetime.

    Args:
        dt_input: ISO 8601 string or datetime, or None

    Returns:
        UTC-aware datetime, or None if the input is empty or unparseable.

    Example:
        "2025-04-07T14:30:00+00:00" → datetime(2025, 4, 7, 14, 30, tzinfo=UTC)
    """
    if not dt_input:
        return None

    if isinstance(dt_input, datetime):
        return as_utc(dt_input)

    if not isinstance(dt_input, str):
        return None

    try:
        result = datetime.fromisoformat(dt_input)
    except ValueError:
        _LOGGER.debug("DEBUG: Unparseable timestamp '%s'", dt_input)
        return None

    return as_utc(result)


def dt_to_iso(dt_obj: datetime) -> str:
    """Serialize a datetime as an ISO 8601 string in UTC."""
    return as_utc(dt_obj).isoformat()


def local_date_iso(dt_obj: datetime, tz: ZoneInfo | None = None) -> str:
    """Return the local calendar date (YYYY-MM-DD) of a moment."""
    return as_local(dt_obj, tz).date().isoformat()


def previous_date_iso(date_iso: str) -> str:
    """Return the ISO date one calendar day before `date_iso`."""
    return (date.fromisoformat(date_iso) - timedelta(days=1)).isoformat()


def date_offset_iso(date_iso: str, days: int) -> str:
    """Return the ISO date `days` calendar days after `date_iso`."""
    return (date.fromisoformat(date_iso) + timedelta(days=days)).isoformat()


def days_between_iso(start_iso: str, end_iso: str) -> int:
    """Whole calendar days from one ISO date to another."""
    return (date.fromisoformat(end_iso) - date.fromisoformat(start_iso)).days


def hours_between(start: datetime, end: datetime) -> float:
    """Return elapsed hours from start to end (negative if end is earlier)."""
    return (as_utc(end) - as_utc(start)).total_seconds() / 3600


# ==============================================================================
# Reset Windows
# ==============================================================================


def week_key(dt_obj: datetime, tz: ZoneInfo | None = None) -> str:
    """Return the ISO week key (YYYY-Www) of a moment in local timezone.

    Example:
        datetime(2025, 1, 1) → "2025-W01"
    """
    iso_year, iso_week, _ = as_local(dt_obj, tz).isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def season_key(dt_obj: datetime, tz: ZoneInfo | None = None) -> str:
    """Return the calendar quarter key (YYYY-Qn) of a moment in local timezone.

    Example:
        datetime(2025, 5, 10) → "2025-Q2"
    """
    local = as_local(dt_obj, tz)
    quarter = (local.month - 1) // MONTHS_PER_SEASON + 1
    return f"{local.year}-Q{quarter}"


def dt_window_end(
    dt_obj: datetime, window: str, tz: ZoneInfo | None = None
) -> datetime:
    """Return the exclusive end of the reset window containing `dt_obj`.

    Windows start at local midnight: the next day for daily, the next
    Monday for weekly, and the first day of the next quarter for season.

    Returns:
        UTC-aware datetime at which the window closes.
    """
    local = as_local(dt_obj, tz)
    start_of_day = local.replace(hour=0, minute=0, second=0, microsecond=0)

    if window == WINDOW_DAILY:
        end = start_of_day + relativedelta(days=1)
    elif window == WINDOW_WEEKLY:
        end = start_of_day + relativedelta(days=7 - local.weekday())
    elif window == WINDOW_SEASON:
        first_month = ((local.month - 1) // MONTHS_PER_SEASON) * MONTHS_PER_SEASON + 1
        end = start_of_day.replace(month=first_month, day=1) + relativedelta(
            months=MONTHS_PER_SEASON
        )
    else:
        _LOGGER.warning("WARNING: Unknown window '%s', using daily", window)
        end = start_of_day + relativedelta(days=1)

    return as_utc(end)


# ==============================================================================
# Countdown Formatting
# ==============================================================================


def format_countdown(remaining: timedelta | None) -> str:
    """Render the time left until something opens, e.g. "3h 59m".

    Anything under a full minute renders as "now".
    """
    minutes = int(remaining.total_seconds() // 60) if remaining else 0
    if minutes <= 0:
        return "now"
    days, minutes = divmod(minutes, 24 * 60)
    hours, minutes = divmod(minutes, 60)
    units = ((days, "d"), (hours, "h"), (minutes, "m"))
    return " ".join(f"{value}{unit}" for value, unit in units if value)
