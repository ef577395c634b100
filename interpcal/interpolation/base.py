"""Base contract shared by every one-dimensional interpolation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Protocol

import numpy as np

from interpcal.core.errors import (
    ExtrapolationError,
    InvalidInputError,
    UnsupportedOperationError,
)
from interpcal.core.utils import as_float_array, close


class Extrapolator:
    """Mixin carrying the extrapolation toggle of curves and interpolations."""

    def __init__(self) -> None:
        self._extrapolate = False

    def enable_extrapolation(self, enabled: bool = True) -> None:
        """Allow queries outside the sample range."""

        self._extrapolate = bool(enabled)

    def disable_extrapolation(self) -> None:
        """Reject queries outside the sample range."""

        self._extrapolate = False

    def allows_extrapolation(self) -> bool:
        return self._extrapolate


def validate_abscissas(x: np.ndarray, name: str = "x") -> None:
    """Raise when ``x`` is not strictly increasing."""

    if x.size > 1 and not np.all(np.diff(x) > 0.0):
        raise InvalidInputError(f"{name} values must be strictly increasing")


class Interpolation(Extrapolator, ABC):
    """Piecewise function defined by samples ``(x[i], y[i])``.

    Samples are held by reference: after changing ``y`` (or ``x``) in place the
    caller must invoke :meth:`update` before querying again. Nothing is
    recomputed implicitly.

    Args:
        x: Strictly increasing abscissas.
        y: Ordinates, one per abscissa.
        required_points: Minimum number of samples accepted by the scheme.

    Raises:
        InvalidInputError: If the samples are too few, of mismatched length or
            not strictly increasing.
    """

    def __init__(self, x: Iterable[float], y: Iterable[float], required_points: int = 2):
        super().__init__()
        self._x = as_float_array(x, "x")
        self._y = as_float_array(y, "y")
        self._required_points = required_points
        self._check_samples()

    def _check_samples(self) -> None:
        if self._x.size != self._y.size:
            raise InvalidInputError(
                f"x and y must have the same length, got {self._x.size} and {self._y.size}"
            )
        if self._x.size < self._required_points:
            raise InvalidInputError(
                f"not enough points to interpolate: at least {self._required_points} "
                f"required, {self._x.size} provided"
            )
        validate_abscissas(self._x)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def update(self) -> None:
        """Recompute derived state after the samples changed."""

        self._check_samples()
        self._calculate()

    @abstractmethod
    def _calculate(self) -> None:
        ...

    # ------------------------------------------------------------------
    # Range handling
    # ------------------------------------------------------------------
    @property
    def x_min(self) -> float:
        return float(self._x[0])

    @property
    def x_max(self) -> float:
        return float(self._x[-1])

    def x_values(self) -> np.ndarray:
        return self._x

    def y_values(self) -> np.ndarray:
        return self._y

    def is_in_range(self, x: float) -> bool:
        x_min, x_max = self.x_min, self.x_max
        return (x >= x_min or close(x, x_min)) and (x <= x_max or close(x, x_max))

    def check_range(self, x: float, allow_extrapolation: bool = False) -> None:
        """Raise :class:`ExtrapolationError` for an out-of-range query."""

        if not (allow_extrapolation or self.allows_extrapolation() or self.is_in_range(x)):
            raise ExtrapolationError(
                f"interpolation range is [{self.x_min}, {self.x_max}]: "
                f"extrapolation at {x} not allowed"
            )

    def locate(self, x: float) -> int:
        """Return ``j`` with ``x[j] <= x < x[j+1]``, clamped to ``[0, n - 2]``."""

        j = int(np.searchsorted(self._x, x, side="right")) - 1
        return min(max(j, 0), self._x.size - 2)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def value(self, x: float, allow_extrapolation: bool = False) -> float:
        self.check_range(x, allow_extrapolation)
        return self._value(float(x))

    def derivative(self, x: float, allow_extrapolation: bool = False) -> float:
        self.check_range(x, allow_extrapolation)
        return self._derivative(float(x))

    def second_derivative(self, x: float, allow_extrapolation: bool = False) -> float:
        self.check_range(x, allow_extrapolation)
        return self._second_derivative(float(x))

    def primitive(self, x: float, allow_extrapolation: bool = False) -> float:
        self.check_range(x, allow_extrapolation)
        return self._primitive(float(x))

    def __call__(self, x, allow_extrapolation: bool = False):
        """Evaluate at a scalar or element-wise over an array of abscissas."""

        if np.ndim(x) == 0:
            return self.value(x, allow_extrapolation)
        points = np.asarray(x, dtype=float)
        values = [self.value(point, allow_extrapolation) for point in points.ravel()]
        return np.asarray(values, dtype=float).reshape(points.shape)

    @abstractmethod
    def _value(self, x: float) -> float:
        ...

    def _derivative(self, x: float) -> float:
        raise UnsupportedOperationError(f"{type(self).__name__} does not provide derivatives")

    def _second_derivative(self, x: float) -> float:
        raise UnsupportedOperationError(
            f"{type(self).__name__} does not provide second derivatives"
        )

    def _primitive(self, x: float) -> float:
        raise UnsupportedOperationError(f"{type(self).__name__} does not provide primitives")


class InterpolationFactory(Protocol):
    """Builds interpolations of one family from sample arrays.

    ``is_global`` tells whether moving one sample can change the curve
    everywhere; ``required_points`` is the minimum number of samples.
    """

    is_global: bool
    required_points: int

    def interpolate(self, x: Iterable[float], y: Iterable[float]) -> Interpolation:
        ...


__all__ = ["Extrapolator", "Interpolation", "InterpolationFactory", "validate_abscissas"]
