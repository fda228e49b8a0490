"""
Calendar utilities for saju calculations.
Handles birth date/time parsing, Julian Day Numbers,
and Local Mean Time correction from birth coordinates.
"""

import logging
import re
from datetime import date, datetime, timedelta
from functools import lru_cache
from typing import Optional, Union
from zoneinfo import ZoneInfo

import swisseph as swe
from timezonefinder import TimezoneFinder

from jakmyeong.errors import InvalidInputError

logger = logging.getLogger(__name__)

# Korea Standard Time is defined on the 135°E meridian
KST_MERIDIAN = 135.0

_TIME_PATTERN = re.compile(r"^\s*(\d{1,2})(?::(\d{1,2}))?\s*$")


# ============================================================
# INPUT PARSING
# ============================================================

def parse_birth_date(value: Union[date, datetime, str]) -> date:
    """
    Normalise a birth date to a `date`.

    Args:
        value: date/datetime object or ISO string (YYYY-MM-DD)

    Raises:
        InvalidInputError: the string does not parse or names an impossible day
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidInputError(f"Unsupported birth date value: {value!r}")

    parts = value.strip().split("-")
    if len(parts) != 3:
        raise InvalidInputError(f"Birth date must be YYYY-MM-DD, got {value!r}")
    try:
        year, month, day = (int(p) for p in parts)
        return date(year, month, day)
    except ValueError as e:
        raise InvalidInputError(f"Invalid birth date {value!r}: {e}") from e


def validate_hour_minute(hour: int, minute: Optional[int] = None) -> None:
    """Raise InvalidInputError unless 0 <= hour <= 23 and 0 <= minute <= 59."""
    if isinstance(hour, bool) or not isinstance(hour, int) or not 0 <= hour <= 23:
        raise InvalidInputError(f"Birth hour must be an integer 0-23, got {hour!r}")
    if minute is None:
        return
    if isinstance(minute, bool) or not isinstance(minute, int) or not 0 <= minute <= 59:
        raise InvalidInputError(f"Birth minute must be an integer 0-59, got {minute!r}")


def parse_birth_time(value: str) -> tuple[int, int]:
    """
    Parse "HH" or "HH:MM" (24h clock) into (hour, minute).

    Raises:
        InvalidInputError: malformed string or out-of-range fields
    """
    match = _TIME_PATTERN.match(value or "")
    if not match:
        raise InvalidInputError(f"Birth time must be HH or HH:MM, got {value!r}")
    hour = int(match.group(1))
    minute = int(match.group(2)) if match.group(2) is not None else 0
    validate_hour_minute(hour, minute)
    return hour, minute


# ============================================================
# JULIAN DAY
# ============================================================

def julian_day_number(day: date) -> int:
    """
    Julian Day Number of a Gregorian date.

    swe.julday at 12:00 UT lands exactly on the integer JDN
    (1900-01-01 -> 2415021).
    """
    return int(swe.julday(day.year, day.month, day.day, 12.0, swe.GREG_CAL))


# ============================================================
# LOCAL MEAN TIME
# ============================================================

def lmt_correction(longitude: float, standard_meridian: float = KST_MERIDIAN) -> float:
    """
    Calculate Local Mean Time correction in minutes.

    Korea keeps clocks on the 135°E meridian while the peninsula sits
    around 126-129°E, so solar time runs roughly half an hour behind.

    Args:
        longitude: birth location longitude in degrees (east positive)
        standard_meridian: timezone standard meridian (135.0 for KST)

    Returns:
        Correction in minutes (negative = subtract from clock time)

    Example:
        Seoul (126.98°E): correction = (126.98 - 135.0) * 4 = -32.08 min
    """
    return (longitude - standard_meridian) * 4.0


def apply_lmt(clock_time: datetime, longitude: float,
              standard_meridian: float = KST_MERIDIAN) -> datetime:
    """Convert clock time to Local Mean Time."""
    correction_minutes = lmt_correction(longitude, standard_meridian)
    return clock_time + timedelta(minutes=correction_minutes)


@lru_cache(maxsize=1)
def _timezone_finder() -> TimezoneFinder:
    return TimezoneFinder()


def utc_offset_for(latitude: float, longitude: float, birth_date: date,
                   hour: int, minute: int = 0) -> tuple[float, float, str, bool]:
    """
    Determine UTC offset from coordinates and date.
    Detects historical DST (Korea observed it in 1948-1960 and 1987-1988).

    Returns:
        (clock_offset, standard_offset, timezone_name, dst_detected)
    """
    tz_name = _timezone_finder().timezone_at(lat=latitude, lng=longitude)
    if tz_name is None:
        raise ValueError(f"Could not determine timezone for ({latitude}, {longitude})")

    local_dt = datetime(birth_date.year, birth_date.month, birth_date.day,
                        hour, minute, tzinfo=ZoneInfo(tz_name))
    clock_offset = local_dt.utcoffset().total_seconds() / 3600

    dst_seconds = local_dt.dst()
    dst_detected = dst_seconds is not None and dst_seconds.total_seconds() > 0
    if dst_detected:
        standard_offset = clock_offset - (dst_seconds.total_seconds() / 3600)
    else:
        standard_offset = clock_offset

    return clock_offset, standard_offset, tz_name, dst_detected


def solar_time(birth_date: date, hour: int, minute: int,
               latitude: float, longitude: float) -> dict:
    """
    Convert a clock birth time to Local Mean Time at the birth place.

    DST is stripped first, then the meridian correction applied. Only the
    time of day moves; the calendar date is kept as given.

    Returns:
        dict with hour, minute, correction_minutes, timezone, dst_detected
    """
    validate_hour_minute(hour, minute)
    clock_offset, standard_offset, tz_name, dst_detected = utc_offset_for(
        latitude, longitude, birth_date, hour, minute
    )

    local_dt = datetime(birth_date.year, birth_date.month, birth_date.day, hour, minute)
    if dst_detected:
        local_dt -= timedelta(hours=clock_offset - standard_offset)

    standard_meridian = standard_offset * 15
    correction = lmt_correction(longitude, standard_meridian)
    lmt_dt = apply_lmt(local_dt, longitude, standard_meridian)
    logger.debug("LMT correction for %s (%.4f): %.1f min, dst=%s",
                 tz_name, longitude, correction, dst_detected)

    return {
        "hour": lmt_dt.hour,
        "minute": lmt_dt.minute,
        "correction_minutes": round(correction, 1),
        "timezone": tz_name,
        "dst_detected": dst_detected,
    }
