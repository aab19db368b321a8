"""Time-scale service: rms-julian wrappers, TT-UT1 and sidereal time."""

from __future__ import annotations

import logging
import math
import re
from typing import TYPE_CHECKING

import julian

from eclipse_tools.config import get_leapsecs_path
from eclipse_tools.constants import (
    JD_J2000,
    JD_J2000_MIDNIGHT,
    SECONDS_PER_DAY,
    SECONDS_PER_HOUR,
)

if TYPE_CHECKING:
    from eclipse_tools.elements import BesselianElements

logger = logging.getLogger(__name__)

# Leap seconds loaded once at first use.
_leapsecs_loaded = False


def _ensure_leapsecs() -> None:
    """Load leap seconds file if not already loaded.

    rms-julian requires a NAIF LSK (e.g. naif0012.tls). If the configured file
    is missing or not in LSK format, falls back to rms-julian's bundled LSK.
    """
    global _leapsecs_loaded
    if _leapsecs_loaded:
        return
    julian.set_ut_model('SPICE')
    path = get_leapsecs_path()
    try:
        julian.load_lsk(path)
        _leapsecs_loaded = True
    except (OSError, KeyError, ValueError) as e:
        logger.info(
            'Leap seconds from %s not used (%s); using rms-julian bundled LSK.',
            path,
            e,
        )
        try:
            julian.load_lsk()
        except Exception as fallback_err:
            logger.error(
                'Fallback to rms-julian bundled LSK failed: %s',
                fallback_err,
                exc_info=True,
            )
            raise
        _leapsecs_loaded = True


def parse_datetime(string: str) -> tuple[int, float] | None:
    """Parse date/time string to UTC (day, sec).

    Parameters:
        string: Date/time string (format accepted by rms-julian).

    Returns:
        (day, sec) where day is days since J2000, sec is seconds within that day;
        None on parse failure.
    """
    _ensure_leapsecs()
    candidate_strings = [string]
    stripped = string.strip()
    if stripped.endswith(('Z', 'z')):
        # rms-julian does not parse the ISO UTC suffix "Z".
        candidate_strings.append(stripped[:-1])
    if re.fullmatch(r'-?\d{1,4}\s+\d{1,2}\s+\d{1,2}', stripped):
        # Element-table style "YYYY MM DD".
        candidate_strings.append('-'.join(f'{int(p):02d}' for p in stripped.split()))
    for candidate in candidate_strings:
        try:
            result = julian.day_sec_from_string(candidate)
            day, sec = result[0], result[1]
            return (int(day), float(sec))
        except (ValueError, TypeError, LookupError, OSError):
            continue
    return None


def parse_date(string: str) -> tuple[int, int, int] | None:
    """Parse a date string to (year, month, day), ignoring any time of day.

    Parameters:
        string: Date string such as '2017-08-21' or '2017 8 21'.

    Returns:
        Calendar date, or None on parse failure.
    """
    parsed = parse_datetime(string)
    if parsed is None:
        return None
    return ymd_from_day(parsed[0])


def tai_from_day_sec(day: int, sec: float) -> float:
    """Convert UTC (day, sec) to TAI seconds.

    Parameters:
        day: Days since J2000.
        sec: Seconds within that day.

    Returns:
        TAI in seconds.
    """
    _ensure_leapsecs()
    return float(julian.tai_from_day_sec(day, sec))


def ymd_from_day(day: int) -> tuple[int, int, int]:
    """Convert day since J2000 to calendar date.

    Parameters:
        day: Days since J2000.

    Returns:
        (year, month, day).
    """
    year, month, mday = julian.ymd_from_day(day)
    return (int(year), int(month), int(mday))


def day_from_ymd(year: int, month: int, day: int) -> int:
    """Convert calendar date to days since J2000.

    Parameters:
        year, month, day: Calendar date.

    Returns:
        Days since J2000.
    """
    return int(julian.day_from_ymd(year, month, day))


def format_utc(tai: float) -> str:
    """Format TAI as a UTC string with rms-julian's default format.

    Parameters:
        tai: TAI in seconds.

    Returns:
        Formatted UTC string.
    """
    _ensure_leapsecs()
    return julian.format_tai(tai)


def jd_from_ymd(year: int, month: int, day: int) -> float:
    """Julian Date at 0h of a calendar date.

    Parameters:
        year, month, day: Calendar date.

    Returns:
        Julian Date (same time scale as the caller's date).
    """
    return JD_J2000_MIDNIGHT + day_from_ymd(year, month, day)


def et_from_jd(jd_tdb: float) -> float:
    """Convert a TDB Julian Date to SPICE ephemeris seconds past J2000."""
    return (jd_tdb - JD_J2000) * SECONDS_PER_DAY


def delta_t(year: int, month: int = 1) -> float:
    """TT - UT1 in seconds for a calendar month.

    Polynomial expressions of Espenak & Meeus (Five Millennium Canon), which
    already use the -26"/cy^2 lunar secular acceleration.

    Parameters:
        year: Astronomical year (0 = 1 BC).
        month: Month 1..12.

    Returns:
        TT - UT1 in seconds.
    """
    y = year + (month - 0.5) / 12.0
    if y < -500.0 or y >= 2150.0:
        u = (y - 1820.0) / 100.0
        return -20.0 + 32.0 * u * u
    if y < 500.0:
        u = y / 100.0
        return (
            10583.6 - 1014.41 * u + 33.78311 * u**2 - 5.952053 * u**3
            - 0.1798452 * u**4 + 0.022174192 * u**5 + 0.0090316521 * u**6
        )
    if y < 1600.0:
        u = (y - 1000.0) / 100.0
        return (
            1574.2 - 556.01 * u + 71.23472 * u**2 + 0.319781 * u**3
            - 0.8503463 * u**4 - 0.005050998 * u**5 + 0.0083572073 * u**6
        )
    if y < 1700.0:
        t = y - 1600.0
        return 120.0 - 0.9808 * t - 0.01532 * t**2 + t**3 / 7129.0
    if y < 1800.0:
        t = y - 1700.0
        return 8.83 + 0.1603 * t - 0.0059285 * t**2 + 0.00013336 * t**3 - t**4 / 1174000.0
    if y < 1860.0:
        t = y - 1800.0
        return (
            13.72 - 0.332447 * t + 0.0068612 * t**2 + 0.0041116 * t**3
            - 0.00037436 * t**4 + 0.0000121272 * t**5 - 0.0000001699 * t**6
            + 0.000000000875 * t**7
        )
    if y < 1900.0:
        t = y - 1860.0
        return (
            7.62 + 0.5737 * t - 0.251754 * t**2 + 0.01680668 * t**3
            - 0.0004473624 * t**4 + t**5 / 233174.0
        )
    if y < 1920.0:
        t = y - 1900.0
        return -2.79 + 1.494119 * t - 0.0598939 * t**2 + 0.0061966 * t**3 - 0.000197 * t**4
    if y < 1941.0:
        t = y - 1920.0
        return 21.20 + 0.84493 * t - 0.076100 * t**2 + 0.0020936 * t**3
    if y < 1961.0:
        t = y - 1950.0
        return 29.07 + 0.407 * t - t**2 / 233.0 + t**3 / 2547.0
    if y < 1986.0:
        t = y - 1975.0
        return 45.45 + 1.067 * t - t**2 / 260.0 - t**3 / 718.0
    if y < 2005.0:
        t = y - 2000.0
        return (
            63.86 + 0.3345 * t - 0.060374 * t**2 + 0.0017275 * t**3
            + 0.000651814 * t**4 + 0.00002373599 * t**5
        )
    if y < 2050.0:
        t = y - 2000.0
        return 62.92 + 0.32217 * t + 0.005589 * t**2
    u = (y - 1820.0) / 100.0
    return -20.0 + 32.0 * u * u - 0.5628 * (2150.0 - y)


def greenwich_sidereal_time(jd_ut: float) -> float:
    """Greenwich mean sidereal time (radians, 0..2pi) for a UT1 Julian Date (Meeus 12.4)."""
    d = jd_ut - JD_J2000
    t = d / 36525.0
    gmst = 280.46061837 + 360.98564736629 * d + 0.000387933 * t * t - t**3 / 38710000.0
    return math.radians(gmst % 360.0)


def event_day_sec(elements: BesselianElements, hours_tt: float) -> tuple[int, float]:
    """UT (day, sec) of an instant given in hours TT after 0h of the element date.

    Parameters:
        elements: Element set providing the date and TT - UT1.
        hours_tt: Hours of TT after 0h of the element date (e.g. t0 + T).

    Returns:
        (day, sec) with sec normalized into 0..86400.
    """
    day = day_from_ymd(*elements.date)
    sec = hours_tt * SECONDS_PER_HOUR - elements.delta_t
    extra = math.floor(sec / SECONDS_PER_DAY)
    return (day + extra, sec - extra * SECONDS_PER_DAY)


def event_tai(elements: BesselianElements, hours_tt: float) -> float:
    """TAI seconds of an event instant (UT taken as UTC for reporting)."""
    day, sec = event_day_sec(elements, hours_tt)
    return tai_from_day_sec(day, sec)


def format_event_time(elements: BesselianElements, hours_tt: float) -> str:
    """Format an event instant (hours TT after 0h of the element date) as UTC."""
    return format_utc(event_tai(elements, hours_tt))
