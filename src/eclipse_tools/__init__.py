"""Eclipse geometry from Besselian elements.

Solar eclipses: central line, penumbral/umbral limits, iso-magnitude and
same-time curves, and local circumstances for an observer. Lunar eclipses:
shadow radii, phase times and magnitude from a Sun/Moon ephemeris.
"""

from eclipse_tools.catalog import find_elements, load_elements
from eclipse_tools.circumstances import (
    CentralLinePoint,
    LimitPair,
    LunarEclipse,
    LunarEclipseType,
    ObserverCircumstance,
    SolarEclipseType,
)
from eclipse_tools.elements import BesselianElements
from eclipse_tools.observer import Observer

__all__ = [
    'BesselianElements',
    'CentralLinePoint',
    'LimitPair',
    'LunarEclipse',
    'LunarEclipseType',
    'Observer',
    'ObserverCircumstance',
    'SolarEclipseType',
    'find_elements',
    'load_elements',
]
