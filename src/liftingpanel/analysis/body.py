"""
Lifting Bodies
==============
Paneled lifting bodies solved with vortex-ring panels.

Why is this file needed?
------------------------
1. Topology: It validates the trailing-edge panel lists against the surface
   before anything else is computed.
2. Caching: It owns the body-only influence matrix, assembled once per body
   and read-only afterwards.
3. Results: It holds the solution fields of the last successful solve and
   answers field and induced-velocity queries.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Sequence

import numpy as np

from liftingpanel.analysis.fields import SolutionFields
from liftingpanel.analysis.kernels import semi_infinite_vortex, vortex_ring
from liftingpanel.errors import DimensionMismatch, InvalidTopology, NotSolved
from liftingpanel.solvers.solver import Solver, assemble_body_matrix
from liftingpanel.utils import as_vectors, row_dot

if TYPE_CHECKING:
    import numpy.typing as npt

    from liftingpanel.pre.mesh import PanelSurface

logger = logging.getLogger(__name__)


def _has_edge(cell: Sequence[int], start: int, end: int) -> bool:
    """Whether the ring of ``cell`` runs along the edge ``start -> end``."""
    n = len(cell)
    return any(cell[i] == start and cell[(i + 1) % n] == end for i in range(n))


def check_trailing_edge(
    surface: PanelSurface,
    U: Sequence[int],
    L: Sequence[int],
) -> tuple[npt.NDArray[np.int64], npt.NDArray[np.int64]]:
    """
    Validate the trailing-edge panel lists of a surface.

    ``U[k]`` and ``L[k]`` are the upper and lower panels of the k-th
    trailing-edge cell, which spans trailing-edge nodes k and k + 1. The lists
    must be non-empty, equally long, free of duplicates, disjoint and in range.
    Each panel must have the edge of its cell on its own side, with the ring
    running from node k to node k + 1 on the upper side and back from k + 1 to
    k on the lower side. This makes the strip contiguous and tells the sides
    apart on a closed trailing edge, where both share the same nodes.

    Args:
        surface: The paneled geometry.
        U: Upper-side trailing-edge panels, in trailing-edge order.
        L: Lower-side trailing-edge panels, in trailing-edge order.

    Raises:
        InvalidTopology: If any of the rules above is broken.

    Returns:
        ``U`` and ``L`` as integer arrays.
    """
    U = np.array(U, dtype=np.int64).ravel()
    L = np.array(L, dtype=np.int64).ravel()

    if U.size == 0 or L.size == 0:
        raise InvalidTopology("Got invalid trailing edge: U and L must not be empty.")
    if U.size != L.size:
        raise InvalidTopology(
            f"Got invalid trailing edge: U has {U.size} panels but L has {L.size}."
        )

    for side, panels in (("U", U), ("L", L)):
        out_of_range = panels[(panels < 0) | (panels >= surface.ncells)]
        if out_of_range.size:
            raise InvalidTopology(
                f"Got invalid trailing edge: {side} references panels outside "
                f"[0, {surface.ncells}): {out_of_range.tolist()}."
            )
        if np.unique(panels).size != panels.size:
            raise InvalidTopology(f"Got invalid trailing edge: {side} contains repeated panels.")

    shared = np.intersect1d(U, L)
    if shared.size:
        raise InvalidTopology(
            f"Got invalid trailing edge: panels {shared.tolist()} are in both U and L."
        )

    for side, panels, upper in (("U", U, True), ("L", L, False)):
        te_nodes = surface.te_nodes(upper)
        if te_nodes.size != panels.size + 1:
            raise InvalidTopology(
                f"Got invalid trailing edge: {side} has {panels.size} panels, so the surface needs "
                f"{panels.size + 1} {'upper' if upper else 'lower'} trailing-edge nodes, "
                f"found {te_nodes.size}."
            )

        for k, panel in enumerate(panels):
            start, end = te_nodes[k], te_nodes[k + 1]
            if not upper:
                start, end = end, start
            if not _has_edge(surface.cells[panel], start, end):
                raise InvalidTopology(
                    f"Got invalid trailing edge: panel {panel} ({side}[{k}]) has no edge "
                    f"from trailing-edge node {start} to {end}."
                )

    return U, L


class AbstractLiftingBody(ABC):
    """
    Lifting paneled body with a trailing edge.

    Subclasses implement the solution strategy.
    """

    def __init__(
        self,
        surface: PanelSurface,
        U: Sequence[int],
        L: Sequence[int],
    ) -> None:
        """
        Initialize the body.

        Args:
            surface: Paneled geometry.
            U: Indices of all panels along the upper side of the trailing edge.
            L: Indices of all panels along the lower side of the trailing edge.

        Raises:
            InvalidTopology: If ``U``/``L`` are inconsistent with the surface.
        """
        self.U, self.L = check_trailing_edge(surface, U, L)
        self.surface = surface
        self.fields = SolutionFields()

    def __repr__(self) -> str:
        """String representation of the body."""
        return (
            f"{self.__class__.__name__}(ncells={self.ncells}, ncellsTE={self.ncellsTE}, "
            f"solved={self.solved})"
        )

    @property
    def nnodes(self) -> int:
        """Number of nodes."""
        return self.surface.nnodes

    @property
    def ncells(self) -> int:
        """Number of panels."""
        return self.surface.ncells

    @property
    def ncellsTE(self) -> int:
        """Number of panels along each side of the trailing edge."""
        return self.U.size

    @property
    def nnodesTE(self) -> int:
        """Number of nodes along the trailing edge."""
        return self.U.size + 1

    @property
    def solved(self) -> bool:
        """Whether a solve has completed."""
        return self.fields.solved

    def get_controlpoint(self, i: int) -> npt.NDArray[np.float64]:
        """Control point of the i-th panel."""
        return self.surface.get_controlpoint(i)

    def get_normal(self, i: int) -> npt.NDArray[np.float64]:
        """Unit outward normal of the i-th panel."""
        return self.surface.get_normal(i)

    def get_te(self, k: int, upper: bool = True) -> npt.NDArray[np.float64]:
        """Position of the k-th trailing-edge node."""
        return self.surface.get_te(k, upper=upper)

    def check_field(self, name: str) -> bool:
        """Whether the field ``name`` holds data."""
        return self.fields.has(name)

    def get_field(self, name: str) -> npt.NDArray[np.float64]:
        """
        Data of the solution field ``name``.

        Raises:
            FieldNotFound: If the field is unknown or not computed yet.
        """
        return self.fields.get(name)

    @abstractmethod
    def solve(self, Vinf: Any, D: Any) -> None:
        """Solve the body for the given freestream and wake direction."""
        pass

    def induced_velocity(
        self,
        targets: Any,
        out: npt.NDArray[np.float64] | None = None,
    ) -> npt.NDArray[np.float64]:
        """Velocity induced by the body and its wake on ``targets``."""
        raise NotImplementedError(
            f"{self.__class__.__name__} does not implement induced velocity queries."
        )


class RigidWakeBody(AbstractLiftingBody):
    """
    Lifting paneled body solved with vortex-ring panels and a steady, rigid,
    semi-infinite wake.

    The body-only influence matrix is assembled once here and never modified;
    every solve works on a copy of it.
    """

    def __init__(
        self,
        surface: PanelSurface,
        U: Sequence[int],
        L: Sequence[int],
    ) -> None:
        super().__init__(surface, U, L)

        G = assemble_body_matrix(surface)
        G.flags.writeable = False
        self._G = G

        logger.info(
            f"Created {self.__class__.__name__} with {self.ncells} panels "
            f"and {self.ncellsTE} trailing-edge cells"
        )

    @property
    def influence_matrix(self) -> npt.NDArray[np.float64]:
        """Read-only body influence matrix (without the wake)."""
        return self._G

    def solve(self, Vinf: Any, D: Any) -> None:
        """
        Solve for the circulation of the panels and of the wake filaments.

        Args:
            Vinf: Freestream velocity at every control point, (ncells, 3).
            D: Direction of the wake filament at every trailing-edge node,
                (nnodes_te, 3).

        Raises:
            DimensionMismatch: If ``Vinf`` or ``D`` has the wrong size. The
                current solution is left untouched.
        """
        Solver(self).solve(Vinf, D)

    def wake_strengths(self) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """
        Circulation of the semi-infinite filaments leaving each trailing-edge
        node, upper and lower side, in the convention of `semi_infinite_vortex`.

        Upper node k carries Gamma[U[k]] - Gamma[U[k-1]] and lower node k carries
        Gamma[L[k-1]] - Gamma[L[k]] (missing neighbors count as zero). Where both
        sides share the node, the sum is -Gammawake[k].

        Raises:
            NotSolved: If the body has not been solved.
        """
        if not self.solved:
            raise NotSolved("Requested wake strengths, but the body has not been solved.")

        gamma = self.fields.Gamma
        upper = np.diff(np.concatenate(([0.0], gamma[self.U], [0.0])))
        lower = -np.diff(np.concatenate(([0.0], gamma[self.L], [0.0])))
        return upper, lower

    def induced_velocity(
        self,
        targets: Any,
        out: npt.NDArray[np.float64] | None = None,
    ) -> npt.NDArray[np.float64]:
        """
        Add the velocity induced by the panels and the wake to ``out``.

        Args:
            targets: (N, 3) points.
            out: (N, 3) buffer; its contents are kept and added to. A zero
                buffer is created when omitted.

        Raises:
            NotSolved: If the body has not been solved.
            DimensionMismatch: If ``out`` does not match ``targets``.

        Returns:
            ``out``.
        """
        if not self.solved:
            raise NotSolved("Requested induced velocity, but the body has not been solved.")

        targets = as_vectors(targets, "targets")
        if out is None:
            out = np.zeros_like(targets)
        elif out.shape != targets.shape:
            raise DimensionMismatch("out", targets.shape, out.shape)

        gamma = self.fields.Gamma
        for j in range(self.ncells):
            vortex_ring(self.surface.ring_vertices(j), gamma[j], targets, out)

        D = self.fields.D
        upper, lower = self.wake_strengths()
        for k in range(self.nnodesTE):
            semi_infinite_vortex(self.get_te(k, upper=True), D[k], upper[k], targets, out)
            semi_infinite_vortex(self.get_te(k, upper=False), D[k], lower[k], targets, out)

        return out

    def surface_velocity(self) -> npt.NDArray[np.float64]:
        """Total velocity (freestream plus induced) at every control point."""
        if not self.solved:
            raise NotSolved("Requested surface velocity, but the body has not been solved.")
        vinf = self.get_field("Vinf")
        return self.induced_velocity(self.surface.control_points, out=vinf.copy())

    def normal_residual(self) -> npt.NDArray[np.float64]:
        """Normal component of the total velocity at every control point."""
        return row_dot(self.surface_velocity(), self.surface.normals)
