"""Observer eclipse evaluator: greatest magnitude, visibility and contacts for one site."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from eclipse_tools.circumstances import ContactInstant, ObserverCircumstance, SolarEclipseType
from eclipse_tools.constants import ELEVATION_LIMIT
from eclipse_tools.elements import BesselianElements
from eclipse_tools.solver import GeometricSample, geocentric_site, solve_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Observer:
    """Geodetic observer position.

    Attributes:
        longitude: East longitude in degrees.
        latitude: Geodetic latitude in degrees.
        height: Height above the ellipsoid in meters.
        name: Optional label.
    """

    longitude: float
    latitude: float
    height: float = 0.0
    name: str = ''

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f'Observer latitude out of range: {self.latitude}')
        if not math.isfinite(self.longitude) or not math.isfinite(self.height):
            raise ValueError(f'Observer position must be finite: {self.longitude}, {self.height}')

    def site(self) -> tuple[float, float]:
        """Geocentric auxiliaries (rcos, rsin) of this observer."""
        return geocentric_site(self.latitude, self.height)


def _maximum(
    elements: BesselianElements, observer: Observer, delta_t: float | None
) -> GeometricSample | None:
    rcos, rsin = observer.site()
    sample = solve_time(elements, observer.longitude, rcos, rsin, delta_t=delta_t)
    if sample is None:
        logger.debug('No local maximum for %s', observer)
    return sample


def _contacts(
    elements: BesselianElements,
    observer: Observer,
    maximum: GeometricSample,
    delta_t: float | None,
) -> tuple[GeometricSample | None, GeometricSample | None]:
    """Exterior contacts refined from the maximum's geometry.

    The tangent parameter S = (A*V - U*B)/(N*L1') gives first-guess contacts
    at TM -+ L1'/N*sqrt(1 - S**2); each is then refined by solve_time.
    """
    s = (maximum.a * maximum.v - maximum.u * maximum.b) / (maximum.n * maximum.l1p)
    if s < -1.0 or s > 1.0:
        return (None, None)
    tau = maximum.l1p / maximum.n * math.sqrt(1.0 - s * s)
    rcos, rsin = observer.site()
    first = solve_time(
        elements, observer.longitude, rcos, rsin, maximum.t - tau, -1, s, delta_t
    )
    last = solve_time(
        elements, observer.longitude, rcos, rsin, maximum.t + tau, 1, s, delta_t
    )
    return (first, last)


def _above_horizon(sample: GeometricSample | None, latitude: float) -> bool:
    return sample is not None and sample.sun_sin_altitude(latitude) >= ELEVATION_LIMIT


def _visible(
    elements: BesselianElements,
    observer: Observer,
    maximum: GeometricSample,
    delta_t: float | None,
) -> bool:
    if maximum.magnitude < 0.0:
        return False
    if _above_horizon(maximum, observer.latitude):
        return True
    return any(
        _above_horizon(contact, observer.latitude)
        for contact in _contacts(elements, observer, maximum, delta_t)
    )


def greatest_magnitude(
    elements: BesselianElements, observer: Observer, delta_t: float | None = None
) -> float:
    """Greatest local magnitude G = (L1' - m) / (L1' + L2').

    Parameters:
        elements: Besselian elements.
        observer: Observer position.
        delta_t: TT - UT1 in seconds; None uses the element set's value.

    Returns:
        Magnitude (negative when the penumbra misses the site), or -1 when
        the local maximum does not converge.
    """
    maximum = _maximum(elements, observer, delta_t)
    if maximum is None:
        return -1.0
    return maximum.magnitude


def is_visible(
    elements: BesselianElements, observer: Observer, delta_t: float | None = None
) -> bool:
    """True if some part of the eclipse can be seen from the site.

    With the Sun above -34' at maximum the eclipse is visible whenever G >= 0.
    Otherwise first and last contacts are solved and at least one must have
    the Sun above that floor.
    """
    maximum = _maximum(elements, observer, delta_t)
    if maximum is None:
        return False
    return _visible(elements, observer, maximum, delta_t)


def eclipse_maximum_time(
    elements: BesselianElements, observer: Observer, delta_t: float | None = None
) -> float | None:
    """Instant of greatest eclipse at the site in hours TT after 0h of the element date."""
    maximum = _maximum(elements, observer, delta_t)
    if maximum is None:
        return None
    return elements.hours_tt(maximum.t)


def _instant(
    elements: BesselianElements,
    sample: GeometricSample,
    observer: Observer,
    zenith_position_angle: bool,
) -> ContactInstant:
    """Time, Moon position angle and Sun altitude of one solved instant."""
    if sample.v != 0.0:
        pa = math.degrees(math.atan(sample.u / sample.v))
    else:
        pa = math.copysign(90.0, sample.u)
    if sample.v < 0.0:
        pa += 180.0
    phi = math.radians(observer.latitude)
    if zenith_position_angle:
        # Parallactic angle of the Sun turns the north-based angle to a zenith-based one.
        x = math.tan(phi) * math.cos(sample.d) - math.sin(sample.d) * math.cos(sample.h)
        y = math.sin(sample.h)
        if x != 0.0:
            q = math.atan2(y, x)
        else:
            q = math.copysign(math.pi / 2.0, y)
        pa -= math.degrees(q)
    sin_alt = max(-1.0, min(1.0, sample.sun_sin_altitude(observer.latitude)))
    return ContactInstant(
        time=elements.hours_tt(sample.t),
        position_angle=pa % 360.0,
        altitude=math.degrees(math.asin(sin_alt)),
    )


def _eclipse_type(sample: GeometricSample) -> SolarEclipseType:
    m = sample.m
    if sample.magnitude < 0.0:
        return SolarEclipseType.NONE
    if abs(sample.l2p) > m:
        return SolarEclipseType.TOTAL if sample.l2p < 0.0 else SolarEclipseType.ANNULAR
    return SolarEclipseType.PARTIAL


def local_circumstances(
    elements: BesselianElements,
    observer: Observer,
    zenith_position_angle: bool = False,
    delta_t: float | None = None,
) -> ObserverCircumstance | None:
    """Local circumstances of the eclipse for one observer.

    Parameters:
        elements: Besselian elements.
        observer: Observer position.
        zenith_position_angle: True to measure position angles from the
            zenith instead of celestial north.
        delta_t: TT - UT1 in seconds; None uses the element set's value.

    Returns:
        ObserverCircumstance with the maximum and (when they converge) the
        exterior contacts, or None when the local maximum does not converge.
    """
    maximum = _maximum(elements, observer, delta_t)
    if maximum is None:
        return None
    eclipse_type = _eclipse_type(maximum)
    first, last = (None, None)
    if eclipse_type is not SolarEclipseType.NONE:
        first, last = _contacts(elements, observer, maximum, delta_t)
    visible = eclipse_type is not SolarEclipseType.NONE and (
        _above_horizon(maximum, observer.latitude)
        or _above_horizon(first, observer.latitude)
        or _above_horizon(last, observer.latitude)
    )
    duration = 0.0
    if eclipse_type in (SolarEclipseType.TOTAL, SolarEclipseType.ANNULAR):
        chord = math.sqrt(maximum.l2p * maximum.l2p - maximum.m * maximum.m)
        duration = 7200.0 * chord / maximum.n
    return ObserverCircumstance(
        greatest_magnitude=maximum.magnitude,
        visible=visible,
        eclipse_type=eclipse_type,
        maximum=_instant(elements, maximum, observer, zenith_position_angle),
        first_contact=None if first is None else _instant(elements, first, observer, zenith_position_angle),
        last_contact=None if last is None else _instant(elements, last, observer, zenith_position_angle),
        diameter_ratio=(maximum.l1p - maximum.l2p) / (maximum.l1p + maximum.l2p),
        central_duration_s=duration,
    )
