from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Optional

import numpy as np

from liftingpanel.errors import FieldNotFound

if TYPE_CHECKING:
    import numpy.typing as npt


def _frozen(values: npt.ArrayLike | None) -> npt.NDArray[np.float64] | None:
    if values is None:
        return None
    arr = np.array(values, dtype=np.float64)
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True)
class SolutionFields:
    """
    Result of a solve.

    A body holds exactly one instance; a successful solve replaces it as a
    whole, so readers never see fields from two different solves. Arrays are
    stored as read-only copies.
    """
    Vinf: Optional[npt.NDArray[np.float64]] = None       # (ncells, 3) freestream at each control point
    D: Optional[npt.NDArray[np.float64]] = None          # (nnodes_te, 3) wake direction at each TE node
    Gamma: Optional[npt.NDArray[np.float64]] = None      # (ncells,) panel circulation
    Gammawake: Optional[npt.NDArray[np.float64]] = None  # (nnodes_te,) wake filament circulation
    solved: bool = False

    def __post_init__(self) -> None:
        for name in self.names():
            object.__setattr__(self, name, _frozen(getattr(self, name)))

    @staticmethod
    def names() -> tuple[str, ...]:
        """Names of the data fields, in declaration order."""
        return tuple(f.name for f in fields(SolutionFields) if f.name != "solved")

    def available(self) -> list[str]:
        """Names of the fields that hold data."""
        return [name for name in self.names() if getattr(self, name) is not None]

    def has(self, name: str) -> bool:
        """Whether ``name`` is a known field holding data."""
        return name in self.names() and getattr(self, name) is not None

    def get(self, name: str) -> npt.NDArray[np.float64]:
        """
        Data of a field.

        Raises:
            FieldNotFound: If ``name`` is unknown or the field is empty.
        """
        if not self.has(name):
            raise FieldNotFound(f"Field '{name}' not found. Available fields: {self.available()}")
        return getattr(self, name)
