"""
liftingpanel
============
Steady panel method for lifting bodies: vortex-ring panels closed at the
trailing edge by a rigid, semi-infinite wake.
"""
from liftingpanel.analysis.body import AbstractLiftingBody, RigidWakeBody, check_trailing_edge
from liftingpanel.analysis.fields import SolutionFields
from liftingpanel.errors import (
    DimensionMismatch,
    FieldNotFound,
    InvalidTopology,
    NotSolved,
    PanelError,
    SingularSystem,
)
from liftingpanel.pre.mesh import PanelSurface
