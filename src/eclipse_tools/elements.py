"""Besselian element set for one solar eclipse."""

from __future__ import annotations

import math
from dataclasses import dataclass

# Required number of coefficients per polynomial family.
_FAMILY_LENGTHS = {'x': 4, 'y': 4, 'd': 3, 'mu': 2, 'l1': 3, 'l2': 3}


@dataclass(frozen=True)
class BesselianElements:
    """Polynomial coefficients of the Moon's shadow for one eclipse.

    Times are hours relative to t0 (TT). Coefficients are listed from the
    constant term upward: x = x[0] + x[1]*t + x[2]*t**2 + x[3]*t**3.

    Attributes:
        date: (year, month, day) of the reference epoch.
        t0: Reference time in hours of TT on that date.
        gamma: Minimum distance shadow axis-Earth center in Earth radii, positive north.
        x, y: Fundamental-plane coordinates of the shadow axis (Earth radii, cubic).
        d: Declination of the shadow axis (degrees, quadratic).
        mu: Greenwich hour angle of the shadow axis (degrees, linear).
        l1, l2: Penumbral/umbral radii on the fundamental plane (quadratic).
        tan_f1, tan_f2: Tangents of the penumbral/umbral cone half-angles.
        delta_t: TT - UT1 in seconds for the date.
    """

    date: tuple[int, int, int]
    t0: float
    gamma: float
    x: tuple[float, float, float, float]
    y: tuple[float, float, float, float]
    d: tuple[float, float, float]
    mu: tuple[float, float]
    l1: tuple[float, float, float]
    l2: tuple[float, float, float]
    tan_f1: float
    tan_f2: float
    delta_t: float

    def __post_init__(self) -> None:
        for name, length in _FAMILY_LENGTHS.items():
            coeffs = getattr(self, name)
            if coeffs is None or len(coeffs) != length:
                raise ValueError(
                    f'Besselian elements for {self.date}: {name} needs {length} coefficients, '
                    f'got {0 if coeffs is None else len(coeffs)}'
                )
            values = tuple(float(c) for c in coeffs)
            if not all(math.isfinite(c) for c in values):
                raise ValueError(f'Besselian elements for {self.date}: non-finite {name} coefficient')
            # Normalize lists to tuples so instances stay hashable.
            object.__setattr__(self, name, values)
        for name in ('t0', 'gamma', 'tan_f1', 'tan_f2', 'delta_t'):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f'Besselian elements for {self.date}: non-finite {name}')
        if self.tan_f1 <= 0.0:
            raise ValueError(f'Besselian elements for {self.date}: tan_f1 must be positive')

    @property
    def year(self) -> int:
        """Year of the reference date."""
        return self.date[0]

    def hours_tt(self, t: float) -> float:
        """Hours of TT after 0h of the reference date for an offset t from t0."""
        return self.t0 + t

    def offset_from_hours(self, hours_tt: float) -> float:
        """Offset from t0 for an instant in hours TT after 0h of the reference date."""
        return hours_tt - self.t0
