"""
Export Manager (VTK)
Writes solved bodies and their wakes to VTK files for ParaView.
"""
from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import meshio
import numpy as np

from liftingpanel.config import DEFAULT_WAKE_LENGTH
from liftingpanel.errors import FieldNotFound

if TYPE_CHECKING:
    from liftingpanel.analysis.body import AbstractLiftingBody

# Get module logger
logger = logging.getLogger(__name__)

VTK_EXTENSION = ".vtu"


def _prepare_path(filename: str) -> str:
    path = filename if filename.endswith(VTK_EXTENSION) else filename + VTK_EXTENSION
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    return path


def save_wake(
    body: AbstractLiftingBody,
    filename: str,
    length: float = DEFAULT_WAKE_LENGTH,
    upper: bool = True,
    suffix: str = "_wake",
) -> str:
    """
    Write the wake filaments as line segments.

    Each trailing-edge node gives one segment from the node to
    ``node + length * D[node]``. When the body is solved, both ends of the
    segment carry the filament circulation as point data ``Gamma``.

    Args:
        body: Body with a ``D`` field.
        filename: Output path without extension.
        length: Length factor applied to ``D``.
        upper: Whether to start the segments at the upper trailing-edge nodes.
        suffix: Appended to ``filename``.

    Raises:
        FieldNotFound: If the body has no ``D`` field.

    Returns:
        Path of the written file.
    """
    if not body.check_field("D"):
        raise FieldNotFound("Requested to save wake, but D field wasn't found.")

    te = body.surface.te_points(upper=upper)
    wake = te + length * body.get_field("D")

    n = body.nnodesTE
    points = np.vstack((te, wake))
    lines = np.array([[i, i + n] for i in range(n)], dtype=np.int64)

    point_data = {}
    if body.solved:
        gammawake = body.get_field("Gammawake")
        point_data["Gamma"] = np.concatenate((gammawake, gammawake))

    path = _prepare_path(filename + suffix)
    meshio.write(path, meshio.Mesh(points=points, cells=[("line", lines)], point_data=point_data))
    logger.info(f"Wake exported to: {path}")

    return path


def save_body(body: AbstractLiftingBody, filename: str) -> str:
    """
    Write the panel surface with its per-panel fields.

    Cell data ``normal`` is always written; ``Gamma`` and ``Vinf`` are added
    when the body is solved.

    Returns:
        Path of the written file.
    """
    cell_data = {"normal": np.asarray(body.surface.normals)}
    if body.solved:
        cell_data["Gamma"] = body.get_field("Gamma")
        cell_data["Vinf"] = body.get_field("Vinf")

    path = _prepare_path(filename)
    meshio.write(path, body.surface.to_meshio(cell_data=cell_data))
    logger.info(f"Body exported to: {path}")

    return path


def save(
    body: AbstractLiftingBody,
    filename: str,
    wake_length: float = DEFAULT_WAKE_LENGTH,
    upper: bool = True,
) -> list[str]:
    """
    Write the body and, when available, its wake.

    Returns:
        Paths of the written files.
    """
    paths = [save_body(body, filename)]
    if body.check_field("D"):
        paths.append(save_wake(body, filename, length=wake_length, upper=upper))
    return paths


def plot_solution(body: AbstractLiftingBody, filename: str, wake_length: float = DEFAULT_WAKE_LENGTH) -> None:
    """Export the body and show the circulation on the surface with PyVista."""
    import pyvista as pv

    paths = save(body, filename, wake_length=wake_length)

    plotter = pv.Plotter()
    plotter.add_mesh(
        pv.read(paths[0]),
        scalars="Gamma" if body.solved else None,
        cmap="jet",
        show_edges=True,
        scalar_bar_args={"title": "Gamma", "vertical": True},
    )
    for path in paths[1:]:
        plotter.add_mesh(pv.read(path), color="black", line_width=2)
    plotter.show()
