"""
Biot-Savart velocity kernels for straight vortex filaments.

All kernels work on an (N, 3) array of targets and ADD their contribution to
``out``. With ``dot_with`` set to an (N, 3) array of directions, ``out`` is a
length-N buffer and receives the projection of the induced velocity on the
direction of each target instead of the velocity itself. ``out`` may be a
view, e.g. a column of an influence matrix.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from liftingpanel.config import CUTOFF
from liftingpanel.utils import row_dot

if TYPE_CHECKING:
    import numpy.typing as npt

FOUR_PI = 4.0 * np.pi


def _accumulate(
    velocity: npt.NDArray[np.float64],
    out: npt.NDArray[np.float64],
    dot_with: npt.NDArray[np.float64] | None,
) -> None:
    if dot_with is None:
        out += velocity
    else:
        out += row_dot(velocity, dot_with)


def vortex_segment(
    a: npt.NDArray[np.float64],
    b: npt.NDArray[np.float64],
    strength: float,
    targets: npt.NDArray[np.float64],
    out: npt.NDArray[np.float64],
    dot_with: npt.NDArray[np.float64] | None = None,
    cutoff: float = CUTOFF,
) -> None:
    """
    Velocity induced by a straight vortex segment going from ``a`` to ``b``.

    V = strength/(4 pi) * (r1 x r2)/|r1 x r2|^2 * r0 . (r1/|r1| - r2/|r2|)

    Targets closer than ``cutoff`` to the segment line or to either end point
    receive no contribution.

    Args:
        a: Start point of the segment.
        b: End point of the segment.
        strength: Circulation of the segment.
        targets: (N, 3) points where the velocity is evaluated.
        out: Buffer the contribution is added to.
        dot_with: Optional (N, 3) directions to project on.
        cutoff: Regularization distance.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    r0 = b - a
    r1 = targets - a
    r2 = targets - b

    cross = np.cross(r1, r2)
    cross2 = row_dot(cross, cross)
    n1 = np.linalg.norm(r1, axis=1)
    n2 = np.linalg.norm(r2, axis=1)

    valid = (n1 > cutoff) & (n2 > cutoff) & (cross2 > (cutoff * np.linalg.norm(r0)) ** 2)

    factor = np.zeros(targets.shape[0], dtype=np.float64)
    r1v = r1[valid] / n1[valid, np.newaxis]
    r2v = r2[valid] / n2[valid, np.newaxis]
    factor[valid] = strength / FOUR_PI * ((r1v - r2v) @ r0) / cross2[valid]

    _accumulate(cross * factor[:, np.newaxis], out, dot_with)


def vortex_ring(
    vertices: npt.NDArray[np.float64],
    strength: float,
    targets: npt.NDArray[np.float64],
    out: npt.NDArray[np.float64],
    dot_with: npt.NDArray[np.float64] | None = None,
    cutoff: float = CUTOFF,
) -> None:
    """
    Velocity induced by a closed polygonal vortex ring.

    The ring circulates through ``vertices`` in the given order and closes from
    the last vertex back to the first one. A positive strength circulates
    counterclockwise about the right-hand normal of that ordering.
    """
    n_vertices = vertices.shape[0]
    for i in range(n_vertices):
        vortex_segment(
            vertices[i],
            vertices[(i + 1) % n_vertices],
            strength,
            targets,
            out,
            dot_with=dot_with,
            cutoff=cutoff,
        )


def semi_infinite_vortex(
    p: npt.NDArray[np.float64],
    direction: npt.NDArray[np.float64],
    strength: float,
    targets: npt.NDArray[np.float64],
    out: npt.NDArray[np.float64],
    dot_with: npt.NDArray[np.float64] | None = None,
    cutoff: float = CUTOFF,
) -> None:
    """
    Velocity induced by a straight vortex filament that starts at ``p`` and
    extends to infinity along ``direction``.

    Limit of `vortex_segment` with the end point sent to infinity:

        V = strength/(4 pi h) * (1 + cos(beta)) * e

    where h is the distance from the target to the filament line, beta the
    angle between ``direction`` and the vector from ``p`` to the target and
    e the unit vector along ``direction x (target - p)``.

    Args:
        p: Starting point of the filament.
        direction: Direction towards infinity; it does not need to be unitary.
        strength: Circulation of the filament, positive when pointing away
            from ``p``.
        targets: (N, 3) points where the velocity is evaluated.
        out: Buffer the contribution is added to.
        dot_with: Optional (N, 3) directions to project on.
        cutoff: Regularization distance.
    """
    p = np.asarray(p, dtype=np.float64)
    direction = np.asarray(direction, dtype=np.float64)
    d_norm = np.linalg.norm(direction)
    if d_norm <= cutoff:
        raise ValueError(f"Semi-infinite vortex needs a non-zero direction, got {direction}.")
    d = direction / d_norm

    r = targets - p
    cross = np.cross(d, r)
    h2 = row_dot(cross, cross)
    n = np.linalg.norm(r, axis=1)

    valid = (n > cutoff) & (h2 > cutoff ** 2)

    factor = np.zeros(targets.shape[0], dtype=np.float64)
    factor[valid] = strength / FOUR_PI * (1.0 + (r[valid] @ d) / n[valid]) / h2[valid]

    _accumulate(cross * factor[:, np.newaxis], out, dot_with)
