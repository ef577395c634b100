"""Floating point comparison helpers shared across interpolation schemes."""

from __future__ import annotations

import numpy as np

from .errors import InvalidInputError

EPSILON = float(np.finfo(float).eps)


def close(x: float, y: float, n: int = 42) -> bool:
    """Return whether ``x`` and ``y`` agree within ``n`` ulps on both sides.

    Args:
        x: First value.
        y: Second value.
        n: Multiple of machine epsilon used as relative tolerance.

    Returns:
        ``True`` when the values are indistinguishable at that tolerance.
    """

    if x == y:
        return True
    diff = abs(x - y)
    tolerance = n * EPSILON
    if x * y == 0.0:
        return diff < tolerance * tolerance
    return diff <= tolerance * abs(x) and diff <= tolerance * abs(y)


def close_enough(x: float, y: float, n: int = 42) -> bool:
    """Like :func:`close` but accepts a match relative to either operand."""

    if x == y:
        return True
    diff = abs(x - y)
    tolerance = n * EPSILON
    if x * y == 0.0:
        return diff < tolerance * tolerance
    return diff <= tolerance * abs(x) or diff <= tolerance * abs(y)


def as_float_array(values, name: str = "values") -> np.ndarray:
    """Return ``values`` as a one dimensional float array without copying if possible."""

    array = np.asarray(values, dtype=float)
    if array.ndim != 1:
        raise InvalidInputError(f"{name} must be one dimensional, got shape {array.shape}")
    return array


__all__ = ["EPSILON", "close", "close_enough", "as_float_array"]
