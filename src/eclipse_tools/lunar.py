"""Lunar shadow geometry: opposition, Chauvenet shadow radii and phase times.

The Moon's path across the Earth's shadow is taken as a straight line over
the hour containing opposition in right ascension; no iteration is involved.
Angles are in arcminutes and times in hours TDB after 0h of the query date.
"""

from __future__ import annotations

import logging
import math

from eclipse_tools.circumstances import LunarEclipse, LunarEclipseType, LunarPhase
from eclipse_tools.constants import (
    ARCMIN_PER_DEGREE,
    AU_KM,
    CHAUVENET_ENLARGEMENT,
    DEGREES_PER_HOUR_RA,
    EARTH_RADIUS_KM,
    HOURS_PER_DAY,
    JD_J2000_MIDNIGHT,
    MOON_ID,
    SECONDS_PER_DAY,
    SOLAR_PARALLAX_ARCSEC,
    SUN_ID,
)
from eclipse_tools.ephemeris import BodyPosition, EphemerisService
from eclipse_tools.observer import Observer
from eclipse_tools.time_utils import delta_t, greenwich_sidereal_time, jd_from_ymd, ymd_from_day

logger = logging.getLogger(__name__)


def _arcmin(angle_rad: float) -> float:
    return math.degrees(angle_rad) * ARCMIN_PER_DEGREE


def _ra_hours(position: BodyPosition) -> float:
    return math.degrees(position.ra) / DEGREES_PER_HOUR_RA


def _antisolar_hours(sun: BodyPosition) -> float:
    return (_ra_hours(sun) + 12.0) % HOURS_PER_DAY


def _unwrap(ra_hours: float, reference: float) -> float:
    """Shift an RA (hours) by whole days so it lies within 12 h of reference."""
    return reference + ((ra_hours - reference + 12.0) % HOURS_PER_DAY - 12.0)


def _phase(
    kind: LunarEclipseType, radius: float, t: float, q: float, v: float, w: float
) -> LunarPhase:
    """Times when the Moon-to-shadow distance equals radius (quadratic roots)."""
    x = q * q - radius * radius
    discriminant = w * w - v * x
    if discriminant < 0.0:
        # Grazing contact; rounding can push the root slightly negative.
        discriminant = 0.0
    root = math.sqrt(discriminant)
    return LunarPhase(kind=kind, start=t + (-w - root) / v, end=t + (-w + root) / v)


def lunar_eclipse(
    ephemeris: EphemerisService, year: int, month: int, day: int
) -> LunarEclipse:
    """Geocentric circumstances of the lunar eclipse (if any) on a date.

    Parameters:
        ephemeris: Source of apparent Sun and Moon positions.
        year, month, day: Calendar date; 0h TDB of this date is the time origin.

    Returns:
        LunarEclipse; eclipse_type is NONE and phases empty when the Moon
        misses the penumbra.

    Raises:
        ValueError: If the Moon does not move relative to the anti-solar
            point in the ephemeris samples.
    """
    jd0 = jd_from_ymd(year, month, day)
    sun0 = ephemeris.position(SUN_ID, jd0)
    moon0 = ephemeris.position(MOON_ID, jd0)
    sun1 = ephemeris.position(SUN_ID, jd0 + 1.0)
    moon1 = ephemeris.position(MOON_ID, jd0 + 1.0)

    cc = _antisolar_hours(sun0)
    dd = _unwrap(_antisolar_hours(sun1), cc)
    aa = _unwrap(_ra_hours(moon0), cc)
    bb = _unwrap(_ra_hours(moon1), aa)
    kk = math.degrees(sun0.dec)
    ll = math.degrees(sun1.dec)
    separation_rate = bb - aa - dd + cc
    if separation_rate == 0.0:
        raise ValueError(f'Moon does not move relative to the anti-solar point on {year}-{month}-{day}')
    hour = math.floor(HOURS_PER_DAY * (cc - aa) / separation_rate)

    moon_h = ephemeris.position(MOON_ID, jd0 + hour / HOURS_PER_DAY)
    moon_h1 = ephemeris.position(MOON_ID, jd0 + (hour + 1) / HOURS_PER_DAY)
    sun_h1 = ephemeris.position(SUN_ID, jd0 + (hour + 1) / HOURS_PER_DAY)
    aa = _unwrap(_ra_hours(moon_h), cc)
    bb = _unwrap(_ra_hours(moon_h1), aa)
    pp = math.degrees(moon_h.dec)
    nn = math.degrees(moon_h1.dec)
    t = (aa - cc - (bb - aa) * hour) / ((dd - cc) / HOURS_PER_DAY - bb + aa)

    s1 = _arcmin(moon_h1.angular_radius)
    p1 = _arcmin(math.asin(EARTH_RADIUS_KM / moon_h1.distance_km))
    s2 = _arcmin(sun_h1.angular_radius)
    p2 = SOLAR_PARALLAX_ARCSEC / (sun_h1.distance_km / AU_KM)
    umbra = (p1 + p2 / 60.0 - s2) * CHAUVENET_ENLARGEMENT
    penumbra = (p1 + p2 / 60.0 + s2) * CHAUVENET_ENLARGEMENT

    # Moon minus shadow center: q is the declination offset at opposition,
    # o and u the hourly rates in RA and declination.
    q = ((nn - pp) * (t - math.floor(t)) + pp + kk + (ll - kk) * t / HOURS_PER_DAY) * 60.0
    o = ((dd - cc) / HOURS_PER_DAY - bb + aa) * 900.0
    u = (nn - pp + (ll - kk) / HOURS_PER_DAY) * 60.0
    v = o * o + u * u
    w = q * u
    miss = abs(o * q) / math.sqrt(v)

    phases: list[LunarPhase] = []
    if miss <= umbra - s1:
        phases.append(_phase(LunarEclipseType.TOTAL, umbra - s1, t, q, v, w))
    if miss < umbra + s1:
        phases.append(_phase(LunarEclipseType.PARTIAL, umbra + s1, t, q, v, w))
    if miss < penumbra + s1:
        phases.append(_phase(LunarEclipseType.PENUMBRAL, penumbra + s1, t, q, v, w))

    if phases:
        eclipse_type = phases[0].kind
        z = penumbra if eclipse_type is LunarEclipseType.PENUMBRAL else umbra
        magnitude = (z + s1 - miss) / (2.0 * s1)
    else:
        eclipse_type = LunarEclipseType.NONE
        magnitude = 0.0
    logger.debug(
        'Lunar eclipse %04d-%02d-%02d: %s, opposition %.4f h, D=%.2f\'',
        year,
        month,
        day,
        eclipse_type.value,
        t,
        miss,
    )
    return LunarEclipse(
        date=(year, month, day),
        eclipse_type=eclipse_type,
        magnitude=magnitude,
        opposition=t,
        umbra_radius=umbra,
        penumbra_radius=penumbra,
        moon_radius=s1,
        miss_distance=miss,
        phases=tuple(phases),
    )


def lunar_eclipse_magnitude(
    ephemeris: EphemerisService, year: int, month: int, day: int
) -> float:
    """Umbral magnitude (penumbral for penumbral-only eclipses); 0 when there is no eclipse."""
    return lunar_eclipse(ephemeris, year, month, day).magnitude


def moon_elevation(ephemeris: EphemerisService, observer: Observer, jd_tdb: float) -> float:
    """Topocentric elevation of the Moon's center in degrees.

    Local hour angle from Greenwich mean sidereal time at UT1 = TDB - dT,
    then the geocentric altitude is lowered by the Moon's parallax in altitude.
    """
    moon = ephemeris.position(MOON_ID, jd_tdb)
    year, month, _ = ymd_from_day(int(math.floor(jd_tdb - JD_J2000_MIDNIGHT)))
    jd_ut = jd_tdb - delta_t(year, month) / SECONDS_PER_DAY
    hour_angle = greenwich_sidereal_time(jd_ut) + math.radians(observer.longitude) - moon.ra
    phi = math.radians(observer.latitude)
    sin_alt = math.sin(phi) * math.sin(moon.dec) + math.cos(phi) * math.cos(moon.dec) * math.cos(
        hour_angle
    )
    altitude = math.asin(max(-1.0, min(1.0, sin_alt)))
    altitude -= math.asin(EARTH_RADIUS_KM / moon.distance_km * math.cos(altitude))
    return math.degrees(altitude)


def lunar_eclipse_visible(
    ephemeris: EphemerisService,
    observer: Observer,
    year: int,
    month: int,
    day: int,
    penumbral: bool = True,
) -> bool:
    """True if the Moon is above the horizon at the start or end of the eclipse.

    The outermost phase considered is used: the penumbral one, or the partial
    one when penumbral is False (a penumbral-only eclipse is then not visible).
    """
    eclipse = lunar_eclipse(ephemeris, year, month, day)
    considered = [
        phase
        for phase in eclipse.phases
        if penumbral or phase.kind is not LunarEclipseType.PENUMBRAL
    ]
    if not considered:
        return False
    outer = considered[-1]
    jd0 = jd_from_ymd(year, month, day)
    return any(
        moon_elevation(ephemeris, observer, jd0 + hours / HOURS_PER_DAY) > 0.0
        for hours in (outer.start, outer.end)
    )
