"""Tests for lunar eclipse shadow geometry against a linear fake ephemeris."""

from __future__ import annotations

import math

import pytest

from eclipse_tools.circumstances import LunarEclipseType
from eclipse_tools.constants import AU_KM, MOON_ID, SUN_ID
from eclipse_tools.ephemeris import BodyPosition
from eclipse_tools.lunar import (
    lunar_eclipse,
    lunar_eclipse_magnitude,
    lunar_eclipse_visible,
    moon_elevation,
)
from eclipse_tools.observer import Observer
from eclipse_tools.time_utils import delta_t, greenwich_sidereal_time, jd_from_ymd

DATE = (2020, 1, 10)
OPPOSITION = 11.81335


class FakeEphemeris:
    """Sun and Moon moving uniformly in RA at constant declination.

    RAs are in hours at t hours after 0h of DATE.
    """

    def __init__(
        self,
        moon_dec: float = 0.0,
        sun_ra0: float = 0.0,
        moon_ra0: float = 11.6,
    ) -> None:
        self.moon_dec = moon_dec
        self.sun_ra0 = sun_ra0
        self.moon_ra0 = moon_ra0
        self.jd0 = jd_from_ymd(*DATE)
        self.calls: list[tuple[int, float]] = []

    def moon_ra_hours(self, hours: float) -> float:
        return (self.moon_ra0 + 0.0366 * hours) % 24.0

    def position(self, body_id: int, jd_tdb: float) -> BodyPosition:
        self.calls.append((body_id, jd_tdb))
        hours = (jd_tdb - self.jd0) * 24.0
        if body_id == SUN_ID:
            ra_hours = (self.sun_ra0 + 0.00274 * hours) % 24.0
            return BodyPosition(
                ra=math.radians(ra_hours * 15.0),
                dec=0.0,
                angular_radius=math.asin(696000.0 / AU_KM),
                distance_km=AU_KM,
            )
        if body_id == MOON_ID:
            return BodyPosition(
                ra=math.radians(self.moon_ra_hours(hours) * 15.0),
                dec=math.radians(self.moon_dec),
                angular_radius=math.asin(1737.4 / 384400.0),
                distance_km=384400.0,
            )
        raise ValueError(f'Unknown body {body_id}')


def test_total_eclipse_phases() -> None:
    """A central passage reaches totality; phases are nested around opposition."""
    eclipse = lunar_eclipse(FakeEphemeris(0.0), *DATE)
    assert eclipse.eclipse_type is LunarEclipseType.TOTAL
    assert eclipse.opposition == pytest.approx(OPPOSITION, abs=1e-4)
    assert eclipse.moon_radius == pytest.approx(15.5379, abs=1e-3)
    assert eclipse.umbra_radius == pytest.approx(41.9373, abs=1e-3)
    assert eclipse.penumbra_radius == pytest.approx(74.5012, abs=1e-3)
    assert eclipse.miss_distance == pytest.approx(0.0, abs=1e-9)
    assert eclipse.magnitude == pytest.approx(1.84952, abs=1e-4)
    assert [p.kind for p in eclipse.phases] == [
        LunarEclipseType.TOTAL,
        LunarEclipseType.PARTIAL,
        LunarEclipseType.PENUMBRAL,
    ]
    total = eclipse.phase(LunarEclipseType.TOTAL)
    partial = eclipse.phase(LunarEclipseType.PARTIAL)
    penumbral = eclipse.phase(LunarEclipseType.PENUMBRAL)
    assert total is not None and partial is not None and penumbral is not None
    assert (total.start, total.end) == pytest.approx((10.94706, 12.67964), abs=1e-4)
    assert (partial.start, partial.end) == pytest.approx((9.92731, 13.69939), abs=1e-4)
    assert (penumbral.start, penumbral.end) == pytest.approx((8.85873, 14.76797), abs=1e-4)
    assert penumbral.duration > partial.duration > total.duration


def test_partial_eclipse() -> None:
    """A Moon 0.6 deg off the shadow axis is partially eclipsed."""
    eclipse = lunar_eclipse(FakeEphemeris(0.6), *DATE)
    assert eclipse.eclipse_type is LunarEclipseType.PARTIAL
    assert eclipse.miss_distance == pytest.approx(36.0, abs=1e-6)
    assert eclipse.phase(LunarEclipseType.TOTAL) is None
    partial = eclipse.phase(LunarEclipseType.PARTIAL)
    assert partial is not None
    assert (partial.start, partial.end) == pytest.approx((10.34311, 13.28358), abs=1e-4)
    assert eclipse.magnitude == pytest.approx(0.69106, abs=1e-4)


@pytest.mark.parametrize('moon_dec', [1.2, -1.2])
def test_penumbral_eclipse(moon_dec: float) -> None:
    """North and south passages give the same penumbral eclipse."""
    eclipse = lunar_eclipse(FakeEphemeris(moon_dec), *DATE)
    assert eclipse.eclipse_type is LunarEclipseType.PENUMBRAL
    assert len(eclipse.phases) == 1
    penumbral = eclipse.phases[0]
    assert (penumbral.start, penumbral.end) == pytest.approx((10.03921, 13.58749), abs=1e-4)
    assert eclipse.magnitude == pytest.approx(0.58049, abs=1e-4)


def test_no_eclipse() -> None:
    """Two degrees off the axis the Moon misses the penumbra."""
    ephemeris = FakeEphemeris(2.0)
    eclipse = lunar_eclipse(ephemeris, *DATE)
    assert eclipse.eclipse_type is LunarEclipseType.NONE
    assert eclipse.phases == ()
    assert eclipse.magnitude == 0.0
    assert lunar_eclipse_magnitude(ephemeris, *DATE) == 0.0


def test_magnitude_helper_matches_eclipse() -> None:
    """lunar_eclipse_magnitude is the magnitude of lunar_eclipse."""
    assert lunar_eclipse_magnitude(FakeEphemeris(0.6), *DATE) == pytest.approx(0.69106, abs=1e-4)


def test_right_ascension_wrap() -> None:
    """Opposition near RA 0h is found the same way as anywhere else."""
    eclipse = lunar_eclipse(FakeEphemeris(0.0, sun_ra0=12.0, moon_ra0=23.6), *DATE)
    assert eclipse.eclipse_type is LunarEclipseType.TOTAL
    assert eclipse.opposition == pytest.approx(OPPOSITION, abs=1e-4)


def test_samples_bracket_opposition() -> None:
    """Positions are sampled at 0h, 24h and the hour bracketing opposition."""
    ephemeris = FakeEphemeris(0.0)
    lunar_eclipse(ephemeris, *DATE)
    hours = sorted({round((jd - ephemeris.jd0) * 24.0, 6) for _, jd in ephemeris.calls})
    assert hours == [0.0, 11.0, 12.0, 24.0]


def test_stationary_moon_is_rejected() -> None:
    """No relative motion means no opposition."""

    class Frozen(FakeEphemeris):
        def position(self, body_id: int, jd_tdb: float) -> BodyPosition:
            return super().position(body_id, self.jd0)

    with pytest.raises(ValueError, match='does not move'):
        lunar_eclipse(Frozen(0.0), *DATE)


def _transit_longitude(ephemeris: FakeEphemeris, hours: float) -> float:
    """East longitude where the Moon crosses the meridian at hours TDB."""
    jd_tdb = ephemeris.jd0 + hours / 24.0
    jd_ut = jd_tdb - delta_t(DATE[0], DATE[1]) / 86400.0
    moon_ra = math.radians(ephemeris.moon_ra_hours(hours) * 15.0)
    longitude = math.degrees(moon_ra - greenwich_sidereal_time(jd_ut))
    return (longitude + 180.0) % 360.0 - 180.0


def test_moon_elevation_at_transit() -> None:
    """On the equator with the Moon at declination 0 it culminates at the zenith."""
    ephemeris = FakeEphemeris(0.0)
    longitude = _transit_longitude(ephemeris, OPPOSITION)
    observer = Observer(longitude, 0.0)
    elevation = moon_elevation(ephemeris, observer, ephemeris.jd0 + OPPOSITION / 24.0)
    assert elevation == pytest.approx(90.0, abs=0.01)
    antipode = Observer(longitude + 180.0, 0.0)
    assert moon_elevation(ephemeris, antipode, ephemeris.jd0 + OPPOSITION / 24.0) < -80.0


def test_visibility_depends_on_longitude() -> None:
    """Visible where the Moon is up during the eclipse, not on the opposite side."""
    ephemeris = FakeEphemeris(0.0)
    longitude = _transit_longitude(ephemeris, OPPOSITION)
    assert lunar_eclipse_visible(ephemeris, Observer(longitude, 0.0), *DATE)
    assert not lunar_eclipse_visible(ephemeris, Observer(longitude + 180.0, 0.0), *DATE)


def test_penumbral_only_not_visible_without_penumbral_phase() -> None:
    """Excluding the penumbral phase leaves nothing to see for a penumbral eclipse."""
    ephemeris = FakeEphemeris(1.2)
    observer = Observer(_transit_longitude(ephemeris, OPPOSITION), 0.0)
    assert lunar_eclipse_visible(ephemeris, observer, *DATE)
    assert not lunar_eclipse_visible(ephemeris, observer, *DATE, penumbral=False)


def test_no_eclipse_not_visible() -> None:
    """Without any phase there is nothing to see."""
    ephemeris = FakeEphemeris(2.0)
    observer = Observer(_transit_longitude(ephemeris, OPPOSITION), 0.0)
    assert not lunar_eclipse_visible(ephemeris, observer, *DATE)
