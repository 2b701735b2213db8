from __future__ import annotations

import pytest

from liftingpanel.analysis.body import RigidWakeBody
from liftingpanel.pre.generators import naca_wing, wedge_wing


@pytest.fixture
def wedge_body() -> RigidWakeBody:
    """Two lower and two upper panels, two spanwise strips: U = [1, 3], L = [0, 2]."""
    surface, U, L = wedge_wing(span=2.0, chord=1.0, n_span=2, thickness=0.1)
    return RigidWakeBody(surface, U, L)


@pytest.fixture
def naca_body() -> RigidWakeBody:
    surface, U, L = naca_wing(span=4.0, chord=1.0, n_span=4, n_chord=3, thickness=0.12)
    return RigidWakeBody(surface, U, L)
