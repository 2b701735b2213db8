"""
Configuration & Path Management
===============================
Central registry for numerical constants and output paths.

Why is this file needed?
------------------------
1. Numerics: The kernel cutoff and control-point offset are shared by the
   matrix assembly and by the induced-velocity queries; both must agree or the
   recomputed normal velocity no longer vanishes at the control points.
2. Output: Export helpers and the command-line entry point resolve their
   default output directory here instead of hardcoding it.

Exports:
    CUTOFF (float): Distance below which a vortex contribution is dropped.
    CONTROL_POINT_OFFSET (float): Shift of each control point along its normal.
    DEFAULT_WAKE_LENGTH (float): Length of the exported wake segments.
    OUTPUT_PATH (str): Absolute path to the default output directory.
"""
import os
from pathlib import Path


def get_output_path(relative_path: str = "") -> str:
    """
    Get absolute path inside the output directory.

    The ``LIFTINGPANEL_OUTPUT`` environment variable overrides the default
    ``output`` folder next to the ``src`` directory.
    """
    override = os.environ.get("LIFTINGPANEL_OUTPUT")
    if override:
        return os.path.join(override, relative_path)

    # config.py is in src/liftingpanel/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), "output", relative_path)


# Global Constants
CUTOFF: float = 1e-14
CONTROL_POINT_OFFSET: float = 0.0
DEFAULT_WAKE_LENGTH: float = 1.0
OUTPUT_PATH: str = get_output_path()
