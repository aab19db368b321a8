"""Shared fixtures: element sets for a real total eclipse and a synthetic central one."""

from __future__ import annotations

import pytest

from eclipse_tools.elements import BesselianElements


@pytest.fixture
def elements_2017() -> BesselianElements:
    """Total solar eclipse of 2017 August 21 (gamma 0.4367)."""
    return BesselianElements(
        date=(2017, 8, 21),
        t0=18.0,
        gamma=0.4367,
        x=(-0.129571, 0.5406426, -2.940e-05, -8.10e-06),
        y=(0.485416, -0.1416400, -9.050e-05, 2.05e-06),
        d=(11.86696, -0.013622, -2.0e-06),
        mu=(89.24543, 15.003940),
        l1=(0.542093, 0.0001241, -1.18e-05),
        l2=(-0.004025, 0.0001234, -1.17e-05),
        tan_f1=0.0046222,
        tan_f2=0.0045992,
        delta_t=70.3,
    )


def symmetric_elements(l2: float = -0.006) -> BesselianElements:
    """Axis through Earth's center at t0, moving along the equator, Sun at declination 0."""
    return BesselianElements(
        date=(2000, 3, 20),
        t0=12.0,
        gamma=0.0,
        x=(0.0, 0.54, 0.0, 0.0),
        y=(0.0, 0.0, 0.0, 0.0),
        d=(0.0, 0.0, 0.0),
        mu=(0.0, 15.0041),
        l1=(0.54, 0.0, 0.0),
        l2=(l2, 0.0, 0.0),
        tan_f1=0.0046,
        tan_f2=0.0046,
        delta_t=0.0,
    )


@pytest.fixture
def elements_symmetric() -> BesselianElements:
    """Synthetic total eclipse with gamma = 0."""
    return symmetric_elements()
