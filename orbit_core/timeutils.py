"""
Time Conversions

Julian dates and TLE epochs. Julian dates are carried as a two-part
(jd, fr) pair, whole day plus fraction, to keep sub-millisecond resolution.
"""

import math
from datetime import date, datetime, timedelta, timezone
from typing import Tuple

MINUTES_PER_DAY = 1440.0

# Julian date at 0001-01-01 00:00 less that date's ordinal (1)
JD_ORDINAL_OFFSET = 1721424.5


def full_epoch_year(two_digit_year: int) -> int:
    """TLE years below 57 belong to the 2000s, the rest to the 1900s."""
    if two_digit_year < 57:
        return two_digit_year + 2000
    return two_digit_year + 1900


def epoch_to_datetime(year: int, days: float) -> datetime:
    """
    Convert a TLE epoch to a UTC datetime.

    Args:
        year: Four-digit year
        days: Day of year with fractional part (1.0 is Jan 1, 00:00)

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime(year, 1, 1, tzinfo=timezone.utc) + timedelta(days=days - 1.0)


def jday(year: int, mon: int, day: int, hr: int = 0, minute: int = 0,
         sec: float = 0.0) -> Tuple[float, float]:
    """
    Julian date of a proleptic Gregorian calendar instant.

    The whole part comes from the date ordinal, so it always ends in .5
    (midnight); the time of day is returned separately as a day fraction.

    Returns:
        Tuple of (julian_day, fraction)
    """
    jd = date(year, mon, day).toordinal() + JD_ORDINAL_OFFSET
    fr = (hr * 3600.0 + minute * 60.0 + sec) / 86400.0
    return jd, fr


def epoch_to_jd(year: int, days: float) -> Tuple[float, float]:
    """Two-part Julian date of a TLE epoch."""
    # Day 1.0 is Jan 1 00:00, so day 0 is the ordinal of Jan 1 less one
    jd0 = date(year, 1, 1).toordinal() - 1 + JD_ORDINAL_OFFSET
    whole = math.floor(days)
    return jd0 + whole, days - whole


def datetime_to_jd(dt: datetime) -> Tuple[float, float]:
    """
    Convert a datetime to a two-part Julian date.

    Naive datetimes are taken to be UTC.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    sec = dt.second + dt.microsecond / 1e6
    return jday(dt.year, dt.month, dt.day, dt.hour, dt.minute, sec)


def minutes_between(jd: float, fr: float, jd0: float, fr0: float) -> float:
    """Minutes elapsed from (jd0, fr0) to (jd, fr)."""
    return (jd - jd0) * MINUTES_PER_DAY + (fr - fr0) * MINUTES_PER_DAY
