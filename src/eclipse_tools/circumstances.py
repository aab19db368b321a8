"""Eclipse circumstance result types returned to callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SolarEclipseType(str, Enum):
    """Local type of a solar eclipse at an observer."""

    TOTAL = 'Total'
    ANNULAR = 'Annular'
    PARTIAL = 'Partial'
    NONE = 'No eclipse'


class LunarEclipseType(str, Enum):
    """Deepest phase reached by a lunar eclipse."""

    TOTAL = 'Total'
    PARTIAL = 'Partial'
    PENUMBRAL = 'Penumbral'
    NONE = 'No eclipse'


@dataclass(frozen=True)
class CentralLinePoint:
    """One sample of the central eclipse line.

    longitude/latitude in degrees (east/north), width in km, duration in
    seconds, diameter_ratio = Moon/Sun apparent diameter, time in hours TT
    after 0h of the element date.
    """

    longitude: float
    latitude: float
    width_km: float
    duration_s: float
    diameter_ratio: float
    total: bool
    time: float


@dataclass(frozen=True)
class LimitPair:
    """Northern and southern limit latitudes (degrees) at one longitude."""

    north: float
    south: float


@dataclass(frozen=True)
class MagnitudeContourPoint:
    """Latitudes (degrees) and times (hours UT) where a given magnitude is the local maximum."""

    longitude: float
    north: float | None
    north_time: float | None
    south: float | None
    south_time: float | None


@dataclass(frozen=True)
class IsochronePoint:
    """Latitude where the local maximum occurs at the requested instant."""

    longitude: float
    latitude: float
    magnitude: float


@dataclass(frozen=True)
class ContactInstant:
    """Geometry of one local instant: time (hours TT), Moon position angle and Sun altitude (deg)."""

    time: float
    position_angle: float
    altitude: float


@dataclass(frozen=True)
class ObserverCircumstance:
    """Local circumstances of a solar eclipse for one observer."""

    greatest_magnitude: float
    visible: bool
    eclipse_type: SolarEclipseType
    maximum: ContactInstant
    first_contact: ContactInstant | None
    last_contact: ContactInstant | None
    diameter_ratio: float
    central_duration_s: float


@dataclass(frozen=True)
class LunarPhase:
    """Start and end of one lunar eclipse phase (hours TDB after 0h of the date)."""

    kind: LunarEclipseType
    start: float
    end: float

    @property
    def duration(self) -> float:
        """Phase duration in hours."""
        return self.end - self.start


@dataclass(frozen=True)
class LunarEclipse:
    """Geocentric lunar eclipse circumstances for one date.

    Radii and miss distance are in arcminutes; opposition in hours TDB
    after 0h of date. phases are ordered deepest first.
    """

    date: tuple[int, int, int]
    eclipse_type: LunarEclipseType
    magnitude: float
    opposition: float
    umbra_radius: float
    penumbra_radius: float
    moon_radius: float
    miss_distance: float
    phases: tuple[LunarPhase, ...] = field(default_factory=tuple)

    def phase(self, kind: LunarEclipseType) -> LunarPhase | None:
        """Return the phase of the given kind, or None if not reached."""
        for p in self.phases:
            if p.kind == kind:
                return p
        return None
