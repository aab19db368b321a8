"""Ephemeris service: apparent geocentric Sun and Moon positions.

The lunar shadow geometry only needs right ascension, declination, angular
radius and distance of the Sun and Moon; any object with a matching
position() method can stand in for the SPICE-backed implementation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Protocol

import cspyce

from eclipse_tools.constants import EARTH_ID, MOON_ID, MOON_RADIUS_KM, SUN_ID, SUN_RADIUS_KM
from eclipse_tools.spice.load import load_kernels
from eclipse_tools.time_utils import et_from_jd

_BODY_RADII_KM = {SUN_ID: SUN_RADIUS_KM, MOON_ID: MOON_RADIUS_KM}


@dataclass(frozen=True)
class BodyPosition:
    """Apparent position of a body.

    Attributes:
        ra: Right ascension in radians (0..2pi).
        dec: Declination in radians.
        angular_radius: Apparent angular radius in radians.
        distance_km: Distance from the observer in km.
    """

    ra: float
    dec: float
    angular_radius: float
    distance_km: float


class EphemerisService(Protocol):
    """Source of apparent body positions at a TDB Julian Date."""

    def position(self, body_id: int, jd_tdb: float) -> BodyPosition:
        """Return the apparent position of body_id (NAIF ID) at jd_tdb."""
        ...


def _body_radius_km(body_id: int) -> float:
    radius = _BODY_RADII_KM.get(body_id)
    if radius is not None:
        return radius
    radii = cspyce.bodvrd(str(body_id), 'RADII')
    return float(radii[0])


class SpiceEphemeris:
    """Geocentric apparent positions from kernels furnished with cspyce.

    Positions are J2000 RA/Dec corrected for light time and stellar
    aberration ('LT+S') as seen from observer_id (Earth's center by default).
    """

    def __init__(self, observer_id: int = EARTH_ID) -> None:
        self.observer_id = observer_id

    @classmethod
    def from_kernels(cls, names: Iterable[str] | None = None) -> SpiceEphemeris:
        """Load kernels from SPICE_PATH and return a ready ephemeris.

        Raises:
            ValueError: If the kernels cannot be loaded.
        """
        ok, reason = load_kernels(names)
        if not ok:
            raise ValueError(reason)
        return cls()

    def position(self, body_id: int, jd_tdb: float) -> BodyPosition:
        """Apparent position of body_id at a TDB Julian Date."""
        et = et_from_jd(jd_tdb)
        body_dpv, _lt = cspyce.spkez(body_id, et, 'J2000', 'LT+S', self.observer_id)
        distance, ra, dec = cspyce.recrad(body_dpv[:3])
        radius_km = _body_radius_km(body_id)
        if distance <= radius_km:
            raise ValueError(f'Observer {self.observer_id} is inside body {body_id}')
        return BodyPosition(
            ra=float(ra),
            dec=float(dec),
            angular_radius=math.asin(radius_km / distance),
            distance_km=float(distance),
        )
