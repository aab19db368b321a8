"""Eclipse curve tracer: central line, shadow limits, iso-magnitude and same-time curves.

Each tracer is a generator that walks longitude (or time) and calls the
tangency solver once per step. The previous converged (t, latitude) is passed
as the next seed; when a seeded search fails it is retried once from the
default seed. Longitudes where no solution exists are omitted.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, is_dataclass
from typing import TYPE_CHECKING, Any, Callable, Iterable, Iterator

from eclipse_tools.circumstances import (
    CentralLinePoint,
    IsochronePoint,
    LimitPair,
    MagnitudeContourPoint,
)
from eclipse_tools.constants import (
    DELTA_T_TO_DEGREES,
    EARTH_RADIUS_KM,
    ECCENTRICITY_SQUARED,
    ELEVATION_LIMIT,
    FLATTENING_FACTOR,
    INVERSE_FLATTENING_FACTOR,
    ISOCHRONE_TIME_TOLERANCE_HOURS,
    SECONDS_PER_HOUR,
)
from eclipse_tools.elements import BesselianElements
from eclipse_tools.shadow_axis import evaluate_shadow_axis
from eclipse_tools.solver import (
    LatitudeSolution,
    TangencyObjective,
    geocentric_site,
    limit_solutions,
    solve_central_latitude,
    solve_magnitude_latitude,
    solve_time,
)

if TYPE_CHECKING:
    import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_SEED = (0.0, 0.0)

# Sun-altitude thresholds (sin) and latitude skips used by the same-time scan.
_ISOCHRONE_SKIPS = (
    (-math.sin(math.radians(20.0)), 19.0),
    (-math.sin(math.radians(10.0)), 9.0),
    (-math.sin(math.radians(5.0)), 4.0),
)


def _longitudes(start: float, stop: float, step: float) -> Iterator[float]:
    """Yield start, start + step, ... up to and including stop."""
    if step <= 0.0:
        raise ValueError(f'Longitude step must be positive, got {step}')
    count = int(math.floor((stop - start) / step + 1.0e-9))
    for i in range(count + 1):
        yield start + i * step


def _normalize_longitude(longitude: float) -> float:
    """Wrap a longitude into [-180, 180)."""
    return (longitude + 180.0) % 360.0 - 180.0


def _search(
    solve: Callable[[tuple[float, float]], LatitudeSolution | None],
    seed: tuple[float, float] | None,
) -> LatitudeSolution | None:
    """Run solve from seed, retrying once from the default seed on failure."""
    if seed is None or seed == DEFAULT_SEED:
        return solve(DEFAULT_SEED)
    solution = solve(seed)
    if solution is None:
        solution = solve(DEFAULT_SEED)
    return solution


def _path_geometry(
    elements: BesselianElements, t: float, delta_t: float
) -> tuple[float, float, float, float, float, bool] | None:
    """Closed-form central point at offset t: (longitude, latitude, width, duration, ratio, total).

    None when the shadow axis misses the Earth (1 - X**2 - Y'**2 < 0).
    """
    axis = evaluate_shadow_axis(elements, t)
    d = math.radians(axis.d)
    sin_d, cos_d = math.sin(d), math.cos(d)
    w = 1.0 / math.sqrt(1.0 - ECCENTRICITY_SQUARED * cos_d * cos_d)
    p = math.radians(elements.mu[1])
    b = axis.dy - p * axis.x * sin_d
    c = axis.dx + p * axis.y * sin_d
    yp = w * axis.y
    b1 = w * sin_d
    b2 = FLATTENING_FACTOR * w * cos_d
    discriminant = 1.0 - axis.x * axis.x - yp * yp
    if discriminant < 0.0:
        return None
    bt = math.sqrt(discriminant)

    fi1 = math.asin(bt * b1 + yp * b2)
    denominator = bt * b2 - yp * b1
    if denominator == 0.0:
        h = math.copysign(math.pi / 2.0, axis.x)
    else:
        h = math.atan(axis.x / denominator)
        if denominator < 0.0:
            h += math.pi
    latitude = math.degrees(math.atan(INVERSE_FLATTENING_FACTOR * math.tan(fi1)))
    longitude = _normalize_longitude(-(axis.mu - math.degrees(h) - DELTA_T_TO_DEGREES * delta_t))

    l2p = axis.l2 - bt * elements.tan_f2
    l1p = axis.l1 - bt * elements.tan_f1
    a = c - p * bt * cos_d
    n = math.hypot(a, b)
    if n == 0.0:
        return None
    duration = 7200.0 * abs(l2p) / n
    k = math.sqrt(bt * bt + ((axis.x * a + axis.y * b) / n) ** 2)
    width = 2.0 * EARTH_RADIUS_KM * abs(l2p) / k
    ratio = (l1p - l2p) / (l1p + l2p)
    return (longitude, latitude, width, duration, ratio, l2p < 0.0)


def central_line_at(
    elements: BesselianElements, hours_tt: float, delta_t: float | None = None
) -> CentralLinePoint | None:
    """Central-line point under the shadow axis at an instant.

    Parameters:
        elements: Besselian elements.
        hours_tt: Hours of TT after 0h of the element date.
        delta_t: TT - UT1 in seconds; None uses the element set's value.

    Returns:
        CentralLinePoint, or None if the axis does not meet the Earth then.
    """
    dt = elements.delta_t if delta_t is None else delta_t
    geometry = _path_geometry(elements, elements.offset_from_hours(hours_tt), dt)
    if geometry is None:
        return None
    longitude, latitude, width, duration, ratio, total = geometry
    return CentralLinePoint(
        longitude=longitude,
        latitude=latitude,
        width_km=width,
        duration_s=duration,
        diameter_ratio=ratio,
        total=total,
        time=hours_tt,
    )


def central_extremes(elements: BesselianElements) -> tuple[float, float] | None:
    """First and last instants (hours TT) when the shadow axis touches the Earth.

    Solves the axis/ellipsoid tangency from the elements at t0 and refines
    each root once with the local rates.

    Returns:
        (begin, end) in hours TT after 0h of the element date, or None for a
        non-central eclipse.
    """
    first = _extreme_corrections(elements, 0.0)
    if first is None:
        return None
    tau1, tau2 = first
    begin = _extreme_corrections(elements, tau1)
    end = _extreme_corrections(elements, tau2)
    if begin is None or end is None:
        return None
    return (elements.hours_tt(tau1 + begin[0]), elements.hours_tt(tau2 + end[1]))


def _extreme_corrections(elements: BesselianElements, t: float) -> tuple[float, float] | None:
    axis = evaluate_shadow_axis(elements, t)
    w = 1.0 / math.sqrt(1.0 - ECCENTRICITY_SQUARED * math.cos(math.radians(axis.d)) ** 2)
    u, v = axis.x, w * axis.y
    a, b = axis.dx, w * axis.dy
    n = math.hypot(a, b)
    if n == 0.0:
        return None
    s = (a * v - u * b) / n
    if s < -1.0 or s > 1.0:
        return None
    sqs = math.sqrt(1.0 - s * s)
    tau = -(u * a + v * b) / (n * n)
    return (tau - sqs / n, tau + sqs / n)


def central_eclipse_at(elements: BesselianElements, hours_ut: float) -> CentralLinePoint | None:
    """Central-line point at an instant in hours UT after 0h of the element date.

    None for non-central eclipses or when the axis is off the Earth.
    """
    if central_extremes(elements) is None:
        return None
    return central_line_at(elements, hours_ut + elements.delta_t / SECONDS_PER_HOUR)


def central_line_by_time(
    elements: BesselianElements,
    step_minutes: float = 1.0,
    start: float | None = None,
    stop: float | None = None,
) -> Iterator[CentralLinePoint]:
    """Walk the central line in time.

    Parameters:
        elements: Besselian elements.
        step_minutes: Time step in minutes.
        start, stop: Hours TT; default to the central extremes.

    Yields:
        CentralLinePoint for each instant the axis meets the Earth.
    """
    if step_minutes <= 0.0:
        raise ValueError(f'Time step must be positive, got {step_minutes}')
    if start is None or stop is None:
        extremes = central_extremes(elements)
        if extremes is None:
            return
        start = extremes[0] if start is None else start
        stop = extremes[1] if stop is None else stop
    step = step_minutes / 60.0
    count = int(math.floor((stop - start) / step + 1.0e-9))
    for i in range(count + 1):
        point = central_line_at(elements, start + i * step)
        if point is not None:
            yield point


def central_line(
    elements: BesselianElements,
    start: float = -180.0,
    stop: float = 180.0,
    step: float = 1.0,
    delta_t: float | None = None,
) -> Iterator[CentralLinePoint]:
    """Walk the central line by longitude.

    Parameters:
        elements: Besselian elements.
        start, stop: East longitude range in degrees (inclusive).
        step: Longitude step in degrees.
        delta_t: TT - UT1 in seconds; None uses the element set's value.

    Yields:
        CentralLinePoint for each longitude crossed by the central line in daylight.
    """
    dt = elements.delta_t if delta_t is None else delta_t
    seed: tuple[float, float] | None = None
    for longitude in _longitudes(start, stop, step):
        solution = _search(
            lambda s: solve_central_latitude(elements, longitude, s, dt), seed
        )
        if solution is None:
            continue
        geometry = _path_geometry(elements, solution.t, dt)
        if geometry is None:
            continue
        seed = (solution.t, solution.latitude)
        _, _, width, duration, ratio, total = geometry
        yield CentralLinePoint(
            longitude=longitude,
            latitude=solution.latitude,
            width_km=width,
            duration_s=duration,
            diameter_ratio=ratio,
            total=total,
            time=elements.hours_tt(solution.t),
        )


def limit_curve(
    elements: BesselianElements,
    objective: TangencyObjective,
    start: float = -180.0,
    stop: float = 180.0,
    step: float = 1.0,
    delta_t: float | None = None,
) -> Iterator[tuple[float, LimitPair]]:
    """Walk the northern/southern limits of the penumbra or umbra by longitude.

    Parameters:
        elements: Besselian elements.
        objective: PENUMBRAL (partial-eclipse limits) or UMBRAL (central limits).
        start, stop: East longitude range in degrees (inclusive).
        step: Longitude step in degrees.
        delta_t: TT - UT1 in seconds; None uses the element set's value.

    Yields:
        (longitude, LimitPair) for each longitude with a limit.
    """
    seeds: tuple[tuple[float, float], tuple[float, float]] | None = None
    for longitude in _longitudes(start, stop, step):
        solutions = None
        if seeds is not None:
            solutions = limit_solutions(elements, longitude, objective, seeds, delta_t)
        if solutions is None:
            solutions = limit_solutions(elements, longitude, objective, None, delta_t)
        if solutions is None:
            seeds = None
            continue
        north, south = solutions
        seeds = (_continuation_seed(north), _continuation_seed(south))
        yield (longitude, LimitPair(north=north.latitude, south=south.latitude))


def _continuation_seed(solution: LatitudeSolution) -> tuple[float, float]:
    """Seed for the next longitude; pole-saturated sides restart from the default."""
    if solution.saturated:
        return DEFAULT_SEED
    return (solution.t, solution.latitude)


def _hours_ut(elements: BesselianElements, t: float, delta_t: float) -> float:
    return elements.hours_tt(t) - delta_t / SECONDS_PER_HOUR


def magnitude_contour(
    elements: BesselianElements,
    magnitude: float,
    start: float = -180.0,
    stop: float = 180.0,
    step: float = 1.0,
    delta_t: float | None = None,
) -> Iterator[MagnitudeContourPoint]:
    """Walk the curve where the local greatest magnitude equals magnitude.

    Yields:
        MagnitudeContourPoint for each longitude where at least one side
        exists; times are hours UT after 0h of the element date.
    """
    dt = elements.delta_t if delta_t is None else delta_t
    north_seed: tuple[float, float] | None = None
    south_seed: tuple[float, float] | None = None
    for longitude in _longitudes(start, stop, step):
        north = _search(
            lambda s: solve_magnitude_latitude(elements, longitude, magnitude, 1, s, dt),
            north_seed,
        )
        south = _search(
            lambda s: solve_magnitude_latitude(elements, longitude, magnitude, -1, s, dt),
            south_seed,
        )
        north_seed = None if north is None else (north.t, north.latitude)
        south_seed = None if south is None else (south.t, south.latitude)
        if north is None and south is None:
            continue
        yield MagnitudeContourPoint(
            longitude=longitude,
            north=None if north is None else north.latitude,
            north_time=None if north is None else _hours_ut(elements, north.t, dt),
            south=None if south is None else south.latitude,
            south_time=None if south is None else _hours_ut(elements, south.t, dt),
        )


def magnitude_limits(
    elements: BesselianElements,
    longitude: float,
    magnitude: float,
    delta_t: float | None = None,
) -> MagnitudeContourPoint:
    """Both sides of an iso-magnitude curve at one longitude (either may be None)."""
    dt = elements.delta_t if delta_t is None else delta_t
    north = solve_magnitude_latitude(elements, longitude, magnitude, 1, DEFAULT_SEED, dt)
    south = solve_magnitude_latitude(elements, longitude, magnitude, -1, DEFAULT_SEED, dt)
    return MagnitudeContourPoint(
        longitude=longitude,
        north=None if north is None else north.latitude,
        north_time=None if north is None else _hours_ut(elements, north.t, dt),
        south=None if south is None else south.latitude,
        south_time=None if south is None else _hours_ut(elements, south.t, dt),
    )


def isochrone_point(
    elements: BesselianElements,
    hours_ut: float,
    longitude: float,
    latitude_step: float = 0.3,
    delta_t: float | None = None,
) -> IsochronePoint | None:
    """Latitude on a meridian where the local maximum happens at a given instant.

    Latitudes between the southern and northern zero-magnitude limits are
    scanned in latitude_step increments; the one whose maximum is closest in
    time (within 0.01 h), with positive magnitude and the Sun above -34',
    is returned. Latitudes with the Sun well below the horizon are skipped
    faster.

    Parameters:
        elements: Besselian elements.
        hours_ut: Hours UT after 0h of the element date.
        longitude: East longitude in degrees.
        latitude_step: Scan step in degrees.
        delta_t: TT - UT1 in seconds; None uses the element set's value.

    Returns:
        IsochronePoint, or None if no latitude matches.
    """
    if latitude_step <= 0.0:
        raise ValueError(f'Latitude step must be positive, got {latitude_step}')
    dt = elements.delta_t if delta_t is None else delta_t
    bounds = magnitude_limits(elements, longitude, 0.0, dt)
    top = 90.0 if bounds.north is None else bounds.north
    bottom = -90.0 if bounds.south is None else bounds.south
    target = elements.offset_from_hours(hours_ut + dt / SECONDS_PER_HOUR)

    best: IsochronePoint | None = None
    best_gap = math.inf
    latitude = bottom
    while latitude <= top:
        rcos, rsin = geocentric_site(latitude)
        sample = solve_time(elements, longitude, rcos, rsin, delta_t=dt)
        if sample is not None:
            gap = abs(sample.t - target)
            if gap < best_gap and gap <= ISOCHRONE_TIME_TOLERANCE_HOURS and sample.magnitude >= 0.0:
                sin_alt = sample.sun_sin_altitude(latitude)
                if sin_alt >= ELEVATION_LIMIT:
                    best = IsochronePoint(longitude, latitude, sample.magnitude)
                    best_gap = gap
                else:
                    for threshold, skip in _ISOCHRONE_SKIPS:
                        if sin_alt < threshold:
                            latitude += skip
                            break
        latitude += latitude_step
    return best


def isochrone(
    elements: BesselianElements,
    hours_ut: float,
    start: float = -180.0,
    stop: float = 180.0,
    step: float = 1.0,
    latitude_step: float = 0.3,
) -> Iterator[IsochronePoint]:
    """Walk the same-time curve (local maximum at hours_ut) by longitude."""
    for longitude in _longitudes(start, stop, step):
        point = isochrone_point(elements, hours_ut, longitude, latitude_step)
        if point is not None:
            yield point


def _as_row(item: Any) -> dict[str, Any]:
    if isinstance(item, tuple) and len(item) == 2 and is_dataclass(item[1]):
        return {'longitude': item[0], **asdict(item[1])}
    if is_dataclass(item):
        return asdict(item)
    raise TypeError(f'Cannot tabulate curve sample {item!r}')


def curve_arrays(points: Iterable[Any]) -> dict[str, np.ndarray]:
    """Tabulate curve samples as one numpy array per field.

    Parameters:
        points: Curve samples (dataclasses, or (longitude, LimitPair) tuples).

    Returns:
        Field name -> float64 array (bool array for flags); missing values are NaN.
    """
    import numpy as np

    rows = [_as_row(p) for p in points]
    if not rows:
        return {}
    columns: dict[str, np.ndarray] = {}
    for name in rows[0]:
        values = [row[name] for row in rows]
        if all(isinstance(v, bool) for v in values):
            columns[name] = np.array(values, dtype=bool)
        else:
            columns[name] = np.array(
                [np.nan if v is None else v for v in values], dtype=np.float64
            )
    return columns
