from __future__ import annotations

import functools
import logging
import time
from typing import TYPE_CHECKING, Any, Callable, TypeVar

import numpy as np

from liftingpanel.errors import DimensionMismatch

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def timer(func: F) -> F:
    """Log the wall time spent in ``func`` at DEBUG level."""
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        start = time.perf_counter()
        result = func(*args, **kwargs)
        logger.debug(f"{func.__qualname__} took {time.perf_counter() - start:.3f} s")
        return result
    return wrapper  # type: ignore[return-value]


def row_dot(a: npt.NDArray[np.float64], b: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """
    Row-wise dot product of two (N, 3) arrays.

    **Example**:

        row_dot(np.array([[1.0, 2.0, 0.0]]), np.array([[3.0, 1.0, 5.0]]))
        # Output: array([5.])
    """
    return np.einsum("ij,ij->i", a, b)


def as_vectors(values: Any, name: str, expected: int | None = None) -> npt.NDArray[np.float64]:
    """
    Convert ``values`` into a float (N, 3) array.

    Args:
        values: Sequence of 3D vectors (lists, tuples or an array).
        name: Name reported in the error message.
        expected: Required number of vectors, or None to accept any number.

    Raises:
        DimensionMismatch: If the number of vectors differs from ``expected``,
            the vectors are not three-dimensional or the rows differ in length.

    Returns:
        A new C-contiguous float64 array of shape (N, 3).
    """
    try:
        arr = np.array(values, dtype=np.float64)
    except ValueError as exc:
        # Rows of different lengths do not form an array
        shape = (expected if expected is not None else "N", 3)
        raise DimensionMismatch(name, shape, "ragged rows") from exc
    if arr.ndim == 1 and arr.size == 0:
        arr = arr.reshape(0, 3)

    n = arr.shape[0] if arr.ndim >= 1 else 0
    if expected is not None and n != expected:
        raise DimensionMismatch(name, expected, n)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise DimensionMismatch(name, (n, 3), arr.shape)

    return np.ascontiguousarray(arr)
