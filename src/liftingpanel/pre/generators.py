"""
Structured surface generators for rectangular wings.

Both generators lay the panels out span station by span station. Within a
station the section is wrapped from the lower trailing edge, around the
leading edge, to the upper trailing edge, so panel ``s * n_wrap + m`` is the
m-th panel of the s-th spanwise strip and the first and last panel of each
strip touch the trailing edge. Coordinates: x chordwise (leading edge at 0),
y spanwise (centered at 0), z up.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from liftingpanel.pre.mesh import PanelSurface

if TYPE_CHECKING:
    import numpy.typing as npt


def naca00_thickness(x: npt.NDArray[np.float64], thickness: float) -> npt.NDArray[np.float64]:
    """
    Half thickness of a symmetric NACA 4-digit section with closed trailing edge.

    Args:
        x: Chordwise stations normalized by the chord, in [0, 1].
        thickness: Maximum thickness as a fraction of the chord (0.12 for NACA 0012).
    """
    return 5.0 * thickness * (
        0.2969 * np.sqrt(x) - 0.1260 * x - 0.3516 * x**2 + 0.2843 * x**3 - 0.1036 * x**4
    )


def cosine_spacing(n: int) -> npt.NDArray[np.float64]:
    """n + 1 stations in [0, 1] clustered at both ends."""
    return 0.5 * (1.0 - np.cos(np.linspace(0.0, np.pi, n + 1)))


def _strip_cells(n_span: int, n_wrap_nodes: int, closed: bool) -> list[tuple[int, int, int, int]]:
    # Panel (s, m) spans wrap nodes m -> m+1 on stations s -> s+1; this ordering
    # gives outward normals for a section wrapped lower TE -> LE -> upper TE.
    n_panels = n_wrap_nodes if closed else n_wrap_nodes - 1
    cells = []
    for s in range(n_span):
        for m in range(n_panels):
            m_next = (m + 1) % n_wrap_nodes
            cells.append((
                s * n_wrap_nodes + m,
                s * n_wrap_nodes + m_next,
                (s + 1) * n_wrap_nodes + m_next,
                (s + 1) * n_wrap_nodes + m,
            ))
    return cells


def _span_stations(span: float, n_span: int) -> npt.NDArray[np.float64]:
    return np.linspace(-0.5 * span, 0.5 * span, n_span + 1)


def naca_wing(
    span: float = 4.0,
    chord: float = 1.0,
    n_span: int = 8,
    n_chord: int = 6,
    thickness: float = 0.12,
) -> tuple[PanelSurface, list[int], list[int]]:
    """
    Rectangular, untwisted wing with a symmetric NACA 00xx section.

    The trailing edge is closed: upper and lower trailing-edge panels share the
    trailing-edge nodes. Wing tips are left open.

    Args:
        span: Wing span.
        chord: Wing chord.
        n_span: Number of spanwise panel strips.
        n_chord: Number of chordwise panels on each side of the section.
        thickness: Maximum thickness over chord.

    Returns:
        The surface and the upper/lower trailing-edge panel indices ``(U, L)``.
    """
    if n_span < 1 or n_chord < 2:
        raise ValueError(f"Need n_span >= 1 and n_chord >= 2, got {n_span} and {n_chord}.")

    x = cosine_spacing(n_chord)[::-1]  # trailing edge -> leading edge
    z = naca00_thickness(x, thickness)

    # Wrap: lower TE -> LE, then upper surface without repeating LE nor TE
    section_x = np.concatenate((x, x[-2:0:-1])) * chord
    section_z = np.concatenate((-z, z[-2:0:-1])) * chord
    n_wrap = section_x.size  # == 2 * n_chord

    nodes = [
        (xi, y, zi)
        for y in _span_stations(span, n_span)
        for xi, zi in zip(section_x, section_z)
    ]
    cells = _strip_cells(n_span, n_wrap, closed=True)

    te_nodes = [s * n_wrap for s in range(n_span + 1)]
    upper = [s * n_wrap + n_wrap - 1 for s in range(n_span)]
    lower = [s * n_wrap for s in range(n_span)]

    return PanelSurface(nodes, cells, te_upper=te_nodes, te_lower=te_nodes), upper, lower


def wedge_wing(
    span: float = 2.0,
    chord: float = 1.0,
    n_span: int = 2,
    thickness: float = 0.1,
) -> tuple[PanelSurface, list[int], list[int]]:
    """
    Thin wedge with a blunt, open trailing edge: one lower and one upper panel
    per spanwise strip, meeting at a sharp leading edge.

    Upper and lower trailing-edge nodes are distinct, ``thickness * chord``
    apart. The smallest lifting body the solver accepts.

    Returns:
        The surface and the upper/lower trailing-edge panel indices ``(U, L)``.
    """
    if n_span < 1:
        raise ValueError(f"Need n_span >= 1, got {n_span}.")

    half = 0.5 * thickness * chord
    section = [(chord, -half), (0.0, 0.0), (chord, half)]
    n_wrap = len(section)

    nodes = [(xi, y, zi) for y in _span_stations(span, n_span) for xi, zi in section]
    cells = _strip_cells(n_span, n_wrap, closed=False)

    te_lower = [s * n_wrap for s in range(n_span + 1)]
    te_upper = [s * n_wrap + 2 for s in range(n_span + 1)]
    upper = [s * 2 + 1 for s in range(n_span)]
    lower = [s * 2 for s in range(n_span)]

    return PanelSurface(nodes, cells, te_upper=te_upper, te_lower=te_lower), upper, lower
