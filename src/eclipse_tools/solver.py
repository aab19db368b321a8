"""Tangency solver: fixed-point iterations of the shadow axis against an observer.

The local maximum and contact times, the limit latitudes, iso-magnitude
latitudes and central-line latitudes are all found this way. All variants
share one time update and one latitude update; only the offset term differs,
and a TangencyObjective selects it.

Non-convergence and out-of-domain values are normal results here and are
returned as None.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Callable

from eclipse_tools.circumstances import LimitPair
from eclipse_tools.constants import (
    BRACKET_LATITUDE_DEG,
    DELTA_T_TO_DEGREES,
    EARTH_RADIUS_M,
    ELEVATION_LIMIT,
    FLATTENING_FACTOR,
    LATITUDE_TOLERANCE_DEG,
    MAX_LATITUDE_ITERATIONS,
    MAX_LIMIT_SPREAD_DEG,
    MAX_TIME_ITERATIONS,
    TIME_TOLERANCE_HOURS,
)
from eclipse_tools.elements import BesselianElements
from eclipse_tools.shadow_axis import evaluate_shadow_axis, shadow_radii

logger = logging.getLogger(__name__)

DPR = 180.0 / math.pi


@dataclass(frozen=True)
class GeometricSample:
    """Observer/shadow geometry at one iteration.

    t: hours from t0; u, v: observer-to-axis offset on the fundamental plane;
    a, b: its hourly rate; n: hypot(a, b); d, h: declination and local hour
    angle of the axis (radians); r: observer distance along the axis;
    l1p, l2p: penumbral/umbral radii at the observer's plane.
    """

    t: float
    u: float
    v: float
    a: float
    b: float
    n: float
    d: float
    h: float
    r: float
    l1p: float
    l2p: float

    @property
    def m(self) -> float:
        """Distance of the observer from the shadow axis (Earth radii)."""
        return math.hypot(self.u, self.v)

    @property
    def magnitude(self) -> float:
        """Local eclipse magnitude G = (L1' - m) / (L1' + L2')."""
        return (self.l1p - self.m) / (self.l1p + self.l2p)

    def sun_sin_altitude(self, latitude_deg: float) -> float:
        """Approximate sine of the Sun's altitude for a geodetic latitude (degrees)."""
        phi = math.radians(latitude_deg)
        return math.sin(self.d) * math.sin(phi) + math.cos(self.d) * math.cos(phi) * math.cos(self.h)


@dataclass(frozen=True)
class TangencyObjective:
    """Offset term of the latitude search: |offset(L1', L2')| is added on each side.

    wide_band_guard rejects limit pairs where one side saturated at a pole
    and the sides are more than 25 degrees apart.
    """

    name: str
    offset: Callable[[float, float], float]
    wide_band_guard: bool = False


CENTRAL = TangencyObjective('central', lambda l1p, l2p: 0.0)
PENUMBRAL = TangencyObjective('penumbral', lambda l1p, l2p: l1p)
UMBRAL = TangencyObjective('umbral', lambda l1p, l2p: l2p, wide_band_guard=True)


def magnitude_objective(magnitude: float) -> TangencyObjective:
    """Objective for the curve where the local greatest magnitude equals magnitude.

    Parameters:
        magnitude: Target magnitude G (0 gives the penumbral limits).

    Returns:
        Objective with offset E = L1' - G * (L1' + L2').
    """
    return TangencyObjective(
        f'magnitude {magnitude:g}',
        lambda l1p, l2p: l1p - magnitude * (l1p + l2p),
    )


@dataclass(frozen=True)
class LatitudeSolution:
    """Converged latitude search: latitude (deg), offset t (hours from t0), last sample."""

    latitude: float
    t: float
    sample: GeometricSample
    saturated: bool = False


def geocentric_site(latitude_deg: float, height_m: float = 0.0) -> tuple[float, float]:
    """Geocentric auxiliaries (rho cos phi', rho sin phi') of a geodetic position.

    Parameters:
        latitude_deg: Geodetic latitude in degrees.
        height_m: Height above the reference ellipsoid in meters.

    Returns:
        (rcos, rsin) in Earth equatorial radii.
    """
    phi = math.radians(latitude_deg)
    fu = math.atan(FLATTENING_FACTOR * math.tan(phi))
    rsin = FLATTENING_FACTOR * math.sin(fu) + height_m * math.sin(phi) / EARTH_RADIUS_M
    rcos = math.cos(fu) + height_m * math.cos(phi) / EARTH_RADIUS_M
    return (rcos, rsin)


def sample_geometry(
    elements: BesselianElements,
    t: float,
    longitude: float,
    rcos: float,
    rsin: float,
    delta_t: float | None = None,
) -> GeometricSample:
    """Project an observer onto the fundamental plane at offset t.

    Parameters:
        elements: Besselian elements.
        t: Hours from t0.
        longitude: East longitude of the observer in degrees.
        rcos, rsin: Geocentric auxiliaries from geocentric_site.
        delta_t: TT - UT1 in seconds; None uses the element set's value.

    Returns:
        GeometricSample at t.
    """
    dt = elements.delta_t if delta_t is None else delta_t
    axis = evaluate_shadow_axis(elements, t)
    d = math.radians(axis.d)
    h = math.radians(axis.mu + longitude - DELTA_T_TO_DEGREES * dt)
    sin_d, cos_d = math.sin(d), math.cos(d)
    sin_h, cos_h = math.sin(h), math.cos(h)
    m1 = elements.mu[1]
    p = rcos * sin_h
    q = rsin * cos_d - rcos * cos_h * sin_d
    r = rsin * sin_d + rcos * cos_h * cos_d
    vp = math.radians(m1) * rcos * cos_h
    vq = math.radians(m1 * p * sin_d - r * elements.d[1])
    u = axis.x - p
    v = axis.y - q
    a = axis.dx - vp
    b = axis.dy - vq
    return GeometricSample(
        t=t,
        u=u,
        v=v,
        a=a,
        b=b,
        n=math.hypot(a, b),
        d=d,
        h=h,
        r=r,
        l1p=axis.l1 - r * elements.tan_f1,
        l2p=axis.l2 - r * elements.tan_f2,
    )


def solve_time(
    elements: BesselianElements,
    longitude: float,
    rcos: float,
    rsin: float,
    t: float = 0.0,
    direction: int = 0,
    s: float = 0.0,
    delta_t: float | None = None,
) -> GeometricSample | None:
    """Find the local maximum (direction 0) or a contact (direction -1/+1).

    Iterates T += TAU with TAU = -(U*A + V*B)/N**2 + I*L1'*sqrt(1 - S**2)/N
    until |TAU| <= 1e-6 h.

    Parameters:
        elements: Besselian elements.
        longitude: East longitude in degrees.
        rcos, rsin: Geocentric auxiliaries of the observer.
        t: Initial offset from t0 in hours.
        direction: -1 first contact, 0 maximum, +1 last contact.
        s: Tangent parameter in [-1, 1]; 0 for the maximum.
        delta_t: TT - UT1 in seconds; None uses the element set's value.

    Returns:
        Sample at the converged time (sample.t is the solution), or None if
        |s| > 1 or the iteration does not settle within 20 steps.
    """
    if s < -1.0 or s > 1.0:
        return None
    sqs = math.sqrt(1.0 - s * s)
    for _ in range(MAX_TIME_ITERATIONS):
        sample = sample_geometry(elements, t, longitude, rcos, rsin, delta_t)
        if sample.n == 0.0:
            return None
        tau = -(sample.u * sample.a + sample.v * sample.b) / (sample.n * sample.n)
        tau += direction * sample.l1p * sqs / sample.n
        t += tau
        if abs(tau) <= TIME_TOLERANCE_HOURS:
            return replace(sample, t=t)
    logger.debug('No time convergence at longitude %.3f (direction %d)', longitude, direction)
    return None


def _latitude_step(
    elements: BesselianElements,
    longitude: float,
    t: float,
    latitude: float,
    objective: TangencyObjective,
    side: int,
    delta_t: float | None,
) -> tuple[float, float, float, float, GeometricSample] | None:
    """One joint update of time and latitude.

    Returns:
        (t, latitude, tau, cfi, sample) after the update, or None when the
        geometry is degenerate (zero relative velocity or sensitivity).
    """
    rcos, rsin = geocentric_site(latitude)
    sample = sample_geometry(elements, t, longitude, rcos, rsin, delta_t)
    if sample.n == 0.0:
        return None
    tau = -(sample.u * sample.a + sample.v * sample.b) / (sample.n * sample.n)
    t += tau
    l1, l2 = shadow_radii(elements, t)
    l1p = l1 - sample.r * elements.tan_f1
    l2p = l2 - sample.r * elements.tan_f2
    sample = replace(sample, l1p=l1p, l2p=l2p)
    sin_h, cos_h = math.sin(sample.h), math.cos(sample.h)
    cw = (sample.v * sample.a - sample.u * sample.b) / sample.n
    cq = (
        sample.b * sin_h * rsin
        + sample.a * (cos_h * math.sin(sample.d) * rsin + math.cos(sample.d) * rcos)
    ) / (DPR * sample.n)
    if cq == 0.0:
        return None
    cfi = (cw + side * abs(objective.offset(l1p, l2p))) / cq
    return (t, latitude + cfi, tau, cfi, sample)


def _converged(tau: float, cfi: float) -> bool:
    return abs(tau) <= TIME_TOLERANCE_HOURS and abs(cfi) < LATITUDE_TOLERANCE_DEG


def _clamp_latitude(latitude: float) -> float:
    if abs(latitude) > 90.0:
        return math.copysign(90.0, latitude)
    return latitude


def solve_limit_latitude(
    elements: BesselianElements,
    longitude: float,
    objective: TangencyObjective,
    side: int,
    seed: tuple[float, float] = (0.0, 0.0),
    delta_t: float | None = None,
) -> LatitudeSolution | None:
    """Latitude of the northern (side +1) or southern (side -1) limit at a longitude.

    The plain iteration gets 50 steps from the seed; if it does not settle it
    is restarted from +80 and then -80 degrees (with t = 0). If all three
    attempts fail the limit saturates at the pole on its side. A converged
    point with the Sun below -34' returns None.

    Parameters:
        elements: Besselian elements.
        longitude: East longitude in degrees.
        objective: PENUMBRAL, UMBRAL or another offset strategy.
        side: +1 for the northern limit, -1 for the southern one.
        seed: Initial (t, latitude).
        delta_t: TT - UT1 in seconds; None uses the element set's value.

    Returns:
        LatitudeSolution clamped to [-90, 90], or None.
    """
    t, latitude = seed
    restarts = [BRACKET_LATITUDE_DEG, -BRACKET_LATITUDE_DEG]
    niter = 0
    saturated = False
    while True:
        step = _latitude_step(elements, longitude, t, latitude, objective, side, delta_t)
        if step is None:
            return None
        t, latitude, tau, cfi, sample = step
        niter += 1
        if niter < MAX_LATITUDE_ITERATIONS:
            if not _converged(tau, cfi):
                continue
            if sample.sun_sin_altitude(latitude) < ELEVATION_LIMIT:
                return None
            break
        if restarts:
            latitude = restarts.pop(0)
            t = 0.0
            niter = 0
            continue
        logger.debug(
            'No %s limit convergence at longitude %.3f (side %+d); saturating',
            objective.name,
            longitude,
            side,
        )
        latitude = 90.0 * side
        saturated = True
        break
    latitude = _clamp_latitude(latitude)
    return LatitudeSolution(latitude=latitude, t=t, sample=sample, saturated=saturated)


def limit_solutions(
    elements: BesselianElements,
    longitude: float,
    objective: TangencyObjective,
    seeds: tuple[tuple[float, float], tuple[float, float]] | None = None,
    delta_t: float | None = None,
) -> tuple[LatitudeSolution, LatitudeSolution] | None:
    """Northern and southern limit solutions at a longitude, or None for "no limit".

    Both sides pinned at opposite poles means no limit. With the objective's
    wide-band guard, one side at a pole and a spread above 25 degrees also
    means no limit.
    """
    north_seed, south_seed = seeds if seeds is not None else ((0.0, 0.0), (0.0, 0.0))
    north = solve_limit_latitude(elements, longitude, objective, 1, north_seed, delta_t)
    if north is None:
        return None
    south = solve_limit_latitude(elements, longitude, objective, -1, south_seed, delta_t)
    if south is None:
        return None
    if north.latitude == 90.0 and south.latitude == -90.0:
        return None
    if (
        objective.wide_band_guard
        and (north.latitude == 90.0 or south.latitude == -90.0)
        and abs(north.latitude - south.latitude) > MAX_LIMIT_SPREAD_DEG
    ):
        return None
    return (north, south)


def latitude_limits(
    elements: BesselianElements,
    longitude: float,
    objective: TangencyObjective,
    delta_t: float | None = None,
) -> LimitPair | None:
    """Return the northern and southern limit latitudes (degrees) at a longitude, or None."""
    solutions = limit_solutions(elements, longitude, objective, delta_t=delta_t)
    if solutions is None:
        return None
    return LimitPair(north=solutions[0].latitude, south=solutions[1].latitude)


def solve_magnitude_latitude(
    elements: BesselianElements,
    longitude: float,
    magnitude: float,
    side: int,
    seed: tuple[float, float] = (0.0, 0.0),
    delta_t: float | None = None,
) -> LatitudeSolution | None:
    """Latitude on one side of the path where the local maximum has the given magnitude.

    50 steps and no bracketing retries; the result
    is clamped to +-90 and rejected when the Sun is below -34'.
    """
    objective = magnitude_objective(magnitude)
    t, latitude = seed
    for _ in range(MAX_LATITUDE_ITERATIONS):
        step = _latitude_step(elements, longitude, t, latitude, objective, side, delta_t)
        if step is None:
            return None
        t, latitude, tau, cfi, sample = step
        if not _converged(tau, cfi):
            continue
        latitude = _clamp_latitude(latitude)
        if sample.sun_sin_altitude(latitude) < ELEVATION_LIMIT:
            return None
        return LatitudeSolution(latitude=latitude, t=t, sample=sample)
    return None


def solve_central_latitude(
    elements: BesselianElements,
    longitude: float,
    seed: tuple[float, float] = (0.0, 0.0),
    delta_t: float | None = None,
) -> LatitudeSolution | None:
    """Latitude and time where the shadow axis crosses a meridian.

    Both the time correction and the cross-track latitude correction must
    vanish. None after 50 steps, or when the crossing is on the night side
    (Sun below -34').
    """
    t, latitude = seed
    for _ in range(MAX_LATITUDE_ITERATIONS + 1):
        step = _latitude_step(elements, longitude, t, latitude, CENTRAL, 0, delta_t)
        if step is None:
            return None
        t, latitude, tau, cfi, sample = step
        if _converged(tau, cfi):
            if abs(latitude) > 90.0 or sample.sun_sin_altitude(latitude) < ELEVATION_LIMIT:
                return None
            return LatitudeSolution(latitude=latitude, t=t, sample=sample)
    logger.debug('No central-line convergence at longitude %.3f', longitude)
    return None
