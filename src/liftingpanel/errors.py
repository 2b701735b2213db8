"""
Error Taxonomy
==============
Exceptions raised by the panel solver.

Every error is raised where the problem is detected and propagated to the
caller unchanged. The classes also derive from the matching builtin exception
so callers catching ``ValueError``/``KeyError``/``RuntimeError`` keep working.
"""
from __future__ import annotations

import numpy as np


class PanelError(Exception):
    """Base class for all errors raised by liftingpanel."""


class InvalidTopology(PanelError, ValueError):
    """Trailing-edge panel lists are inconsistent with the surface."""


class DimensionMismatch(PanelError, ValueError):
    """
    An input array does not have the size the body expects.

    Args:
        name: Name of the offending input.
        expected: Expected size.
        actual: Size that was received.
    """

    def __init__(self, name: str, expected: int | tuple, actual: int | tuple) -> None:
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(f"Invalid {name}; expected size {expected}, got {actual}")


class NotSolved(PanelError, RuntimeError):
    """A query needs a solved body but `solve` has not completed yet."""


class FieldNotFound(PanelError, KeyError):
    """A named solution field is not available."""

    def __str__(self) -> str:
        # KeyError repr()s its argument; keep the plain message instead
        return str(self.args[0]) if self.args else ""


class SingularSystem(PanelError, np.linalg.LinAlgError):
    """The influence matrix could not be factorized."""
