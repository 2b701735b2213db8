from __future__ import annotations

import numpy as np
import pytest

from liftingpanel.analysis.body import AbstractLiftingBody, RigidWakeBody, check_trailing_edge
from liftingpanel.errors import FieldNotFound, InvalidTopology, NotSolved
from liftingpanel.pre.generators import naca_wing, wedge_wing
from liftingpanel.solvers.solver import assemble_body_matrix


@pytest.fixture
def wedge():
    return wedge_wing(span=2.0, chord=1.0, n_span=2, thickness=0.1)


@pytest.mark.parametrize(
    "U, L",
    [
        ([1, 3], [0]),          # mismatched length
        ([], []),               # empty
        ([1, 4], [0, 2]),       # out of range
        ([1, 1], [0, 2]),       # repeated panel
        ([3, 1], [0, 2]),       # not contiguous along the trailing edge
        ([1, 3], [2, 0]),
        ([0, 2], [1, 3]),       # sides swapped
        ([1], [0]),             # surface has three trailing-edge nodes, not two
    ],
)
def test_invalid_trailing_edge_is_rejected(wedge, U, L):
    surface, _, _ = wedge
    with pytest.raises(InvalidTopology):
        RigidWakeBody(surface, U, L)


@pytest.mark.parametrize("case", ["same panels", "sides swapped", "one panel shared"])
def test_invalid_closed_trailing_edge_is_rejected(case):
    # Upper and lower panels share every trailing-edge node here
    surface, U, L = naca_wing(n_span=2, n_chord=3)
    assert U == [5, 11] and L == [0, 6]

    U, L = {
        "same panels": (U, U),
        "sides swapped": (L, U),
        "one panel shared": (U, [0, 11]),
    }[case]
    with pytest.raises(InvalidTopology):
        RigidWakeBody(surface, U, L)


def test_closed_trailing_edge_error_names_the_edge():
    surface, U, L = naca_wing(n_span=2, n_chord=3)
    with pytest.raises(InvalidTopology, match="in both U and L"):
        check_trailing_edge(surface, U, U)
    with pytest.raises(InvalidTopology, match=r"panel 0 \(U\[0\]\) has no edge from trailing-edge node 0 to 6"):
        check_trailing_edge(surface, L, U)


def test_invalid_trailing_edge_is_rejected_before_assembly(wedge, monkeypatch):
    surface, _, _ = wedge

    def fail(*args, **kwargs):
        raise AssertionError("matrix assembled for an invalid body")

    monkeypatch.setattr("liftingpanel.analysis.body.assemble_body_matrix", fail)
    with pytest.raises(InvalidTopology):
        RigidWakeBody(surface, [1, 3], [0])


def test_invalid_topology_is_a_value_error(wedge):
    surface, _, _ = wedge
    with pytest.raises(ValueError, match="U has 2 panels but L has 1"):
        check_trailing_edge(surface, [1, 3], [0])


def test_surface_without_trailing_edge_nodes():
    surface, U, L = naca_wing(n_span=2, n_chord=2)
    surface.te_upper = surface.te_upper[:0]
    surface.te_lower = surface.te_lower[:0]
    with pytest.raises(InvalidTopology):
        RigidWakeBody(surface, U, L)


def test_body_sizes(wedge_body):
    assert wedge_body.ncells == 4
    assert wedge_body.nnodes == 9
    assert wedge_body.ncellsTE == 2
    assert wedge_body.nnodesTE == 3
    np.testing.assert_array_equal(wedge_body.U, [1, 3])
    np.testing.assert_array_equal(wedge_body.L, [0, 2])
    np.testing.assert_allclose(wedge_body.get_te(2, upper=False), [1.0, 1.0, -0.05])


def test_cached_matrix(wedge_body):
    G = wedge_body.influence_matrix

    assert G.shape == (4, 4)
    np.testing.assert_array_equal(G, assemble_body_matrix(wedge_body.surface))
    assert not G.flags.writeable
    with pytest.raises(ValueError):
        G[0, 0] = 0.0


def test_self_influence_points_along_normal(naca_body):
    # Circulation follows the right-hand rule about the outward normal
    assert np.all(np.diag(naca_body.influence_matrix) > 0.0)


def test_unsolved_body(wedge_body):
    assert not wedge_body.solved
    assert not wedge_body.check_field("Gamma")

    with pytest.raises(FieldNotFound):
        wedge_body.get_field("Gamma")
    with pytest.raises(NotSolved):
        wedge_body.induced_velocity(np.zeros((1, 3)))
    with pytest.raises(NotSolved):
        wedge_body.wake_strengths()
    with pytest.raises(NotSolved):
        wedge_body.normal_residual()


def test_unknown_field(wedge_body):
    wedge_body.solve(np.tile([1.0, 0.0, 0.0], (4, 1)), np.tile([1.0, 0.0, 0.0], (3, 1)))
    with pytest.raises(FieldNotFound, match="Field 'Cp' not found"):
        wedge_body.get_field("Cp")
    with pytest.raises(KeyError):
        wedge_body.get_field("solved")


def test_induced_velocity_must_be_implemented(wedge):
    class SolveOnlyBody(AbstractLiftingBody):
        def solve(self, Vinf, D):
            pass

    surface, U, L = wedge
    body = SolveOnlyBody(surface, U, L)
    with pytest.raises(NotImplementedError):
        body.induced_velocity(np.zeros((1, 3)))


def test_abstract_body_cannot_be_instantiated(wedge):
    surface, U, L = wedge
    with pytest.raises(TypeError):
        AbstractLiftingBody(surface, U, L)
