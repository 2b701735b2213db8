"""Command-line interface."""
from __future__ import annotations

import argparse
import logging
import os
from typing import Sequence

import numpy as np

from liftingpanel.analysis.body import RigidWakeBody
from liftingpanel.config import DEFAULT_WAKE_LENGTH, OUTPUT_PATH
from liftingpanel.io import plot_solution, save
from liftingpanel.logging_config import setup_logging
from liftingpanel.pre.generators import naca_wing
from liftingpanel.utils import timer

logger = logging.getLogger("liftingpanel.main")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="liftingpanel",
        description="Solve a rectangular NACA wing with vortex-ring panels and a rigid wake.",
    )
    parser.add_argument("--alpha", type=float, default=5.0, help="Angle of attack [deg]")
    parser.add_argument("--magvinf", type=float, default=1.0, help="Freestream speed")
    parser.add_argument("--span", type=float, default=4.0)
    parser.add_argument("--chord", type=float, default=1.0)
    parser.add_argument("--thickness", type=float, default=0.12, help="Thickness over chord")
    parser.add_argument("--nspan", type=int, default=8, help="Spanwise panel strips")
    parser.add_argument("--nchord", type=int, default=6, help="Chordwise panels per side")
    parser.add_argument("--export", metavar="NAME", help="Export VTK files under this name")
    parser.add_argument("--wake-length", type=float, default=DEFAULT_WAKE_LENGTH)
    parser.add_argument("--plot", action="store_true", help="Show the solution with PyVista")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-file", default=None)
    args = parser.parse_args(argv)
    if args.magvinf <= 0.0:
        parser.error(f"--magvinf must be positive, got {args.magvinf}")
    return args


@timer
def run(args: argparse.Namespace) -> RigidWakeBody:
    surface, U, L = naca_wing(
        span=args.span,
        chord=args.chord,
        n_span=args.nspan,
        n_chord=args.nchord,
        thickness=args.thickness,
    )
    body = RigidWakeBody(surface, U, L)

    alpha = np.radians(args.alpha)
    direction = np.array([np.cos(alpha), 0.0, np.sin(alpha)])
    Vinf = np.tile(args.magvinf * direction, (body.ncells, 1))
    D = np.tile(direction, (body.nnodesTE, 1))

    body.solve(Vinf, D)

    residual = np.abs(body.normal_residual()).max()
    logger.info(f"Max normal velocity at control points: {residual:.3e}")
    logger.info(f"Total shed circulation: {np.abs(body.get_field('Gammawake')).sum():.6f}")

    return body


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(level=args.log_level, log_file=args.log_file)

    body = run(args)

    name = args.export
    if args.plot and not name:
        name = os.path.join(OUTPUT_PATH, "wing")

    if args.plot:
        plot_solution(body, name, wake_length=args.wake_length)
    elif name:
        save(body, name, wake_length=args.wake_length)


if __name__ == "__main__":
    main()
