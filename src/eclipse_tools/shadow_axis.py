"""Shadow-axis evaluation: Besselian polynomials at a time offset from t0."""

from __future__ import annotations

from dataclasses import dataclass

from eclipse_tools.elements import BesselianElements


@dataclass(frozen=True)
class ShadowAxis:
    """Shadow axis on the fundamental plane at one instant.

    x, y and l1, l2 are in Earth radii; dx, dy in Earth radii per hour;
    d and mu in degrees.
    """

    t: float
    x: float
    y: float
    dx: float
    dy: float
    d: float
    mu: float
    l1: float
    l2: float


def _horner(coeffs: tuple[float, ...], t: float) -> float:
    """Evaluate c0 + c1*t + c2*t**2 + ... in Horner form."""
    value = 0.0
    for c in reversed(coeffs):
        value = value * t + c
    return value


def _horner_derivative(coeffs: tuple[float, ...], t: float) -> float:
    """Evaluate the first derivative of the polynomial with coefficients coeffs."""
    value = 0.0
    for power in range(len(coeffs) - 1, 0, -1):
        value = value * t + power * coeffs[power]
    return value


def shadow_radii(elements: BesselianElements, t: float) -> tuple[float, float]:
    """Return the penumbral and umbral radii (L1, L2) at offset t (hours from t0)."""
    return (_horner(elements.l1, t), _horner(elements.l2, t))


def evaluate_shadow_axis(elements: BesselianElements, t: float) -> ShadowAxis:
    """Evaluate the shadow axis at offset t (hours from t0).

    Parameters:
        elements: Besselian element set.
        t: Hours from the reference epoch t0. Any real value is accepted;
            accuracy degrades a few hours away from t0.

    Returns:
        ShadowAxis with position, hourly velocity, declination, hour angle and radii.
    """
    l1, l2 = shadow_radii(elements, t)
    return ShadowAxis(
        t=t,
        x=_horner(elements.x, t),
        y=_horner(elements.y, t),
        dx=_horner_derivative(elements.x, t),
        dy=_horner_derivative(elements.y, t),
        d=_horner(elements.d, t),
        mu=_horner(elements.mu, t),
        l1=l1,
        l2=l2,
    )
