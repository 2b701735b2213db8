from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

import meshio
import numpy as np

from liftingpanel.config import CONTROL_POINT_OFFSET

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

# meshio cell type -> nodes per panel
PANEL_TYPE_MAP = {
    "triangle": 3,
    "quad": 4,
}

PANEL_TYPE_BY_SIZE = {n: name for name, n in PANEL_TYPE_MAP.items()}


class PanelSurface:
    """
    Paneled surface made of flat-ish triangular and quadrilateral panels.

    The node ordering of every panel defines both its outward normal (right-hand
    rule) and the circulation direction of its vortex ring. The trailing edge is
    described by the ordered node indices along it, one list per side; for a
    closed trailing edge both sides share the same nodes.
    """

    def __init__(
        self,
        nodes: Sequence[Sequence[float]] | npt.NDArray[np.float64],
        cells: Sequence[Sequence[int]],
        te_upper: Sequence[int] | None = None,
        te_lower: Sequence[int] | None = None,
        filename: str | None = None,
        control_point_offset: float = CONTROL_POINT_OFFSET,
    ) -> None:
        """
        Initialize the surface and compute the panel frames.

        Args:
            nodes: (nnodes, 3) node coordinates.
            cells: Node indices of every panel (3 or 4 per panel).
            te_upper: Node indices along the trailing edge, upper side.
            te_lower: Node indices along the trailing edge, lower side.
                Defaults to ``te_upper``.
            filename: Source file, if the surface was read from disk.
            control_point_offset: Shift of the control points along the normals.

        Raises:
            ValueError: If nodes are not 3D, a panel has an unsupported number
                of nodes, references a missing node or has zero area.
        """
        self.nodes: npt.NDArray[np.float64] = np.array(nodes, dtype=np.float64)
        if self.nodes.ndim != 2 or self.nodes.shape[1] != 3:
            raise ValueError(f"Expected nodes of shape (N, 3), got {self.nodes.shape}.")

        self.cells: list[tuple[int, ...]] = [tuple(int(n) for n in cell) for cell in cells]
        for i, cell in enumerate(self.cells):
            if len(cell) not in PANEL_TYPE_BY_SIZE:
                raise ValueError(
                    f"Panel {i} has {len(cell)} nodes; only triangles and quads are supported."
                )
            if min(cell) < 0 or max(cell) >= self.nnodes:
                raise ValueError(f"Panel {i} references a node outside [0, {self.nnodes}): {cell}.")

        self.te_upper: npt.NDArray[np.int64] = np.array(
            [] if te_upper is None else te_upper, dtype=np.int64
        )
        self.te_lower: npt.NDArray[np.int64] = (
            self.te_upper.copy() if te_lower is None else np.array(te_lower, dtype=np.int64)
        )
        for side, te_nodes in (("upper", self.te_upper), ("lower", self.te_lower)):
            if te_nodes.size and (te_nodes.min() < 0 or te_nodes.max() >= self.nnodes):
                raise ValueError(f"Trailing-edge ({side}) references a node outside [0, {self.nnodes}).")

        self.filename = filename
        self.control_point_offset = control_point_offset

        self._compute_panel_frames()

    def __repr__(self) -> str:
        """String representation of the surface."""
        return (
            f"{self.__class__.__name__}(nnodes={self.nnodes}, ncells={self.ncells}, "
            f"nnodes_te={self.te_upper.size})"
        )

    @classmethod
    def from_file(
        cls,
        filename: str,
        te_upper: Sequence[int],
        te_lower: Sequence[int] | None = None,
        **kwargs,
    ) -> PanelSurface:
        """
        Read a surface from any format meshio understands.

        Only triangle and quad blocks become panels; other cell blocks (lines,
        vertices, volume cells) are skipped. Panels keep the order of the blocks
        in the file.

        Args:
            filename: Mesh file.
            te_upper: Node indices along the trailing edge, upper side.
            te_lower: Node indices along the trailing edge, lower side.

        Raises:
            ValueError: If the file contains no triangle or quad cells.
        """
        mesh = meshio.read(filename)

        points = np.asarray(mesh.points, dtype=np.float64)
        if points.shape[1] == 2:
            points = np.hstack((points, np.zeros((points.shape[0], 1))))

        cells: list[list[int]] = []
        for block in mesh.cells:
            if block.type not in PANEL_TYPE_MAP:
                logger.debug(f"Skipping {len(block.data)} '{block.type}' cells in {filename}")
                continue
            cells.extend(block.data.tolist())

        if not cells:
            raise ValueError(f"No triangle or quad cells found in '{filename}'.")

        logger.info(f"Read {len(cells)} panels and {len(points)} nodes from {filename}")

        return cls(points, cells, te_upper=te_upper, te_lower=te_lower, filename=filename, **kwargs)

    @property
    def nnodes(self) -> int:
        """Number of nodes."""
        return self.nodes.shape[0]

    @property
    def ncells(self) -> int:
        """Number of panels."""
        return len(self.cells)

    def _compute_panel_frames(self) -> None:
        n = self.ncells
        self.normals: npt.NDArray[np.float64] = np.empty((n, 3), dtype=np.float64)
        self.areas: npt.NDArray[np.float64] = np.empty(n, dtype=np.float64)
        centroids = np.empty((n, 3), dtype=np.float64)

        for i, cell in enumerate(self.cells):
            p = self.nodes[list(cell)]
            if len(cell) == 3:
                normal = np.cross(p[1] - p[0], p[2] - p[0])
            else:
                # Diagonals of the quad; exact for planar panels
                normal = np.cross(p[2] - p[0], p[3] - p[1])

            doubled_area = np.linalg.norm(normal)
            if doubled_area == 0.0:
                raise ValueError(f"Panel {i} is degenerate (zero area): nodes {cell}.")

            self.normals[i] = normal / doubled_area
            self.areas[i] = 0.5 * doubled_area
            centroids[i] = p.mean(axis=0)

        self.control_points: npt.NDArray[np.float64] = centroids + self.control_point_offset * self.normals

        for arr in (self.normals, self.areas, self.control_points):
            arr.flags.writeable = False

    def get_controlpoint(self, i: int) -> npt.NDArray[np.float64]:
        """Control point of the i-th panel."""
        return self.control_points[i]

    def get_normal(self, i: int) -> npt.NDArray[np.float64]:
        """Unit outward normal of the i-th panel."""
        return self.normals[i]

    def ring_vertices(self, i: int) -> npt.NDArray[np.float64]:
        """Corners of the vortex ring of the i-th panel, in circulation order."""
        return self.nodes[list(self.cells[i])]

    def te_nodes(self, upper: bool = True) -> npt.NDArray[np.int64]:
        """Node indices along the trailing edge on one side."""
        return self.te_upper if upper else self.te_lower

    def get_te(self, k: int, upper: bool = True) -> npt.NDArray[np.float64]:
        """
        Position of the k-th trailing-edge node.

        Args:
            k: Index of the node along the trailing edge, in [0, nnodes_te).
            upper: Whether to use the upper-side nodes.

        Raises:
            IndexError: If ``k`` is out of range.
        """
        te_nodes = self.te_nodes(upper)
        if not 0 <= k < te_nodes.size:
            raise IndexError(f"Trailing-edge node {k} out of range [0, {te_nodes.size}).")
        return self.nodes[te_nodes[k]]

    def te_points(self, upper: bool = True) -> npt.NDArray[np.float64]:
        """Positions of all trailing-edge nodes on one side, (nnodes_te, 3)."""
        return self.nodes[self.te_nodes(upper)]

    def cell_blocks(self) -> list[tuple[str, npt.NDArray[np.int64], npt.NDArray[np.int64]]]:
        """
        Group consecutive panels of the same type.

        Returns:
            List of ``(meshio cell type, connectivity, panel indices)``, in panel
            order, suitable for building a `meshio.Mesh` with matching cell data.
        """
        blocks: list[tuple[str, npt.NDArray[np.int64], npt.NDArray[np.int64]]] = []
        start = 0
        for i in range(1, self.ncells + 1):
            if i == self.ncells or len(self.cells[i]) != len(self.cells[start]):
                indices = np.arange(start, i, dtype=np.int64)
                connectivity = np.array(self.cells[start:i], dtype=np.int64)
                blocks.append((PANEL_TYPE_BY_SIZE[len(self.cells[start])], connectivity, indices))
                start = i
        return blocks

    def to_meshio(self, cell_data: dict[str, npt.NDArray[np.float64]] | None = None) -> meshio.Mesh:
        """
        Build a `meshio.Mesh` of the surface.

        Args:
            cell_data: Per-panel arrays (first axis of length ``ncells``) to attach.
        """
        blocks = self.cell_blocks()
        data = {
            name: [np.asarray(values)[indices] for _, _, indices in blocks]
            for name, values in (cell_data or {}).items()
        }
        return meshio.Mesh(
            points=self.nodes,
            cells=[(cell_type, connectivity) for cell_type, connectivity, _ in blocks],
            cell_data=data,
        )
