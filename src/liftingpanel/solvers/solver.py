from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import numpy as np
import scipy as sp

from liftingpanel.analysis.fields import SolutionFields
from liftingpanel.analysis.kernels import semi_infinite_vortex, vortex_ring
from liftingpanel.errors import SingularSystem
from liftingpanel.utils import as_vectors, row_dot, timer

if TYPE_CHECKING:
    import numpy.typing as npt

    from liftingpanel.analysis.body import RigidWakeBody
    from liftingpanel.pre.mesh import PanelSurface

logger = logging.getLogger(__name__)


@timer
def assemble_body_matrix(surface: PanelSurface) -> npt.NDArray[np.float64]:
    """
    Assemble the body-only influence matrix.

    Entry (i, j) is the normal velocity at control point i induced by a
    unit-strength vortex ring on panel j. Depends on the geometry only.

    Args:
        surface: The paneled geometry.

    Returns:
        Dense (ncells, ncells) matrix.
    """
    n = surface.ncells
    G = np.zeros((n, n), dtype=np.float64)

    for j in range(n):
        vortex_ring(
            surface.ring_vertices(j),
            1.0,
            surface.control_points,
            G[:, j],
            dot_with=surface.normals,
        )

    logger.debug(f"Assembled {n}x{n} body influence matrix")
    return G


def wake_circulation(
    gamma: npt.NDArray[np.float64],
    U: npt.NDArray[np.int64],
    L: npt.NDArray[np.int64],
) -> npt.NDArray[np.float64]:
    """
    Circulation of the semi-infinite wake filaments from the panel circulation.

    The jump of bound circulation across trailing-edge cell k is
    GTE[k] = Gamma[L[k]] - Gamma[U[k]]. The filament at node k sheds the change
    of that jump between the cells on either side of it:

        Gammawake[0] = GTE[0]
        Gammawake[k] = GTE[k] - GTE[k-1]
        Gammawake[-1] = -GTE[-1]

    Only valid for a single contiguous trailing edge.
    """
    gte = gamma[L] - gamma[U]
    return np.diff(np.concatenate(([0.0], gte, [0.0])))


class Solver:
    """
    Steady solver for a lifting body with a rigid semi-infinite wake.
    """

    def __init__(
        self,
        body: RigidWakeBody,
    ) -> None:
        """
        Initialize the solver with a body.

        Args:
            body: The body to be solved. Its cached influence matrix is only read.
        """
        self.body = body

    def assemble_wake_matrix(self, D: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """
        Copy the body influence matrix and add the trailing filaments.

        Every trailing-edge panel is closed into a horseshoe by two
        semi-infinite filaments leaving from the ends of its trailing-edge
        segment. Their normal velocity is added to the column of that panel.
        Trailing-edge cells write to disjoint columns.

        Args:
            D: (nnodes_te, 3) direction of the filament leaving each node.

        Returns:
            A new (ncells, ncells) matrix.
        """
        body = self.body
        surface = body.surface
        targets = surface.control_points
        normals = surface.normals

        G = body.influence_matrix.copy()

        for j, u_j in enumerate(body.U):
            # Upper in-going filament
            semi_infinite_vortex(surface.get_te(j + 1, upper=True), D[j + 1], -1.0,
                                 targets, G[:, u_j], dot_with=normals)
            # Upper out-going filament
            semi_infinite_vortex(surface.get_te(j, upper=True), D[j], 1.0,
                                 targets, G[:, u_j], dot_with=normals)

        for j, l_j in enumerate(body.L):
            # Lower in-going filament
            semi_infinite_vortex(surface.get_te(j, upper=False), D[j], -1.0,
                                 targets, G[:, l_j], dot_with=normals)
            # Lower out-going filament
            semi_infinite_vortex(surface.get_te(j + 1, upper=False), D[j + 1], 1.0,
                                 targets, G[:, l_j], dot_with=normals)

        return G

    def assemble_rhs(self, Vinf: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """
        No-penetration right-hand side, lambda[i] = -Vinf[i] . n[i].
        """
        return -row_dot(Vinf, self.body.surface.normals)

    @staticmethod
    def linear_solve(G: npt.NDArray[np.float64], rhs: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """
        Dense LU solve of G x = rhs.

        Raises:
            SingularSystem: If the factorization hits an exactly zero pivot.
        """
        lu, piv = sp.linalg.lu_factor(G, check_finite=True)

        zero_pivots = np.flatnonzero(np.diag(lu) == 0.0)
        if zero_pivots.size:
            logger.error(f"Influence matrix is singular; zero pivots at {zero_pivots.tolist()}")
            raise SingularSystem(
                f"Influence matrix of size {G.shape[0]} is singular "
                f"(first zero pivot at row {zero_pivots[0]})."
            )

        return sp.linalg.lu_solve((lu, piv), rhs, check_finite=False)

    def solve(self, Vinf: Any, D: Any) -> SolutionFields:
        """
        Solve for the panel and wake circulation and store them in the body.

        Nothing in the body changes unless every step succeeds.

        Args:
            Vinf: Freestream velocity at every control point, (ncells, 3).
            D: Wake direction at every trailing-edge node, (nnodes_te, 3).

        Raises:
            DimensionMismatch: If ``Vinf`` or ``D`` has the wrong size.
            SingularSystem: If the system cannot be solved.

        Returns:
            The committed solution fields.
        """
        body = self.body
        vinf = as_vectors(Vinf, "Vinf", body.ncells)
        d = as_vectors(D, "D", body.nnodesTE)

        G = self.assemble_wake_matrix(d)
        rhs = self.assemble_rhs(vinf)

        logger.debug(f"Solving {body.ncells}x{body.ncells} system with {body.ncellsTE} trailing-edge cells")
        gamma = self.linear_solve(G, rhs)
        gammawake = wake_circulation(gamma, body.U, body.L)

        residual = float(np.linalg.norm(G @ gamma - rhs, ord=np.inf))
        logger.info(f"Solved {body.ncells} panels - residual norm: {residual:.3e}")

        solution = SolutionFields(Vinf=vinf, D=d, Gamma=gamma, Gammawake=gammawake, solved=True)
        body.fields = solution
        return solution
