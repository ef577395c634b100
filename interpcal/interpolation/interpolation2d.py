"""Two-dimensional interpolation on rectangular grids.

Grid values are stored as ``z[j, i] = f(x[i], y[j])``, i.e. one row per
``y`` node, matching the layout of a :class:`pandas.DataFrame` indexed by
``y`` with ``x`` columns.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

import numpy as np

from interpcal.core.errors import ExtrapolationError, InvalidInputError
from interpcal.core.utils import as_float_array, close

from .base import Extrapolator, validate_abscissas
from .cubic import CubicInterpolation, DerivativeApprox


class Interpolation2D(Extrapolator, ABC):
    """Function of two variables defined on a grid of samples.

    Args:
        x: Strictly increasing column abscissas.
        y: Strictly increasing row abscissas.
        z: Values with shape ``(len(y), len(x))``.

    Raises:
        InvalidInputError: If either axis has fewer than two nodes, the axes are
            not strictly increasing or ``z`` has the wrong shape.
    """

    def __init__(self, x: Iterable[float], y: Iterable[float], z) -> None:
        super().__init__()
        self._x = as_float_array(x, "x")
        self._y = as_float_array(y, "y")
        self._z = np.asarray(z, dtype=float)
        self._check_samples()

    def _check_samples(self) -> None:
        if self._x.size < 2:
            raise InvalidInputError(
                f"not enough points to interpolate: at least 2 x values required, {self._x.size} provided"
            )
        if self._y.size < 2:
            raise InvalidInputError(
                f"not enough points to interpolate: at least 2 y values required, {self._y.size} provided"
            )
        validate_abscissas(self._x, "x")
        validate_abscissas(self._y, "y")
        if self._z.shape != (self._y.size, self._x.size):
            raise InvalidInputError(
                f"z must have shape ({self._y.size}, {self._x.size}), got {self._z.shape}"
            )

    def update(self) -> None:
        self._check_samples()
        self._calculate()

    def _calculate(self) -> None:
        pass

    @property
    def x_min(self) -> float:
        return float(self._x[0])

    @property
    def x_max(self) -> float:
        return float(self._x[-1])

    @property
    def y_min(self) -> float:
        return float(self._y[0])

    @property
    def y_max(self) -> float:
        return float(self._y[-1])

    def x_values(self) -> np.ndarray:
        return self._x

    def y_values(self) -> np.ndarray:
        return self._y

    def z_data(self) -> np.ndarray:
        return self._z

    def is_in_range(self, x: float, y: float) -> bool:
        x_ok = (x >= self.x_min or close(x, self.x_min)) and (x <= self.x_max or close(x, self.x_max))
        y_ok = (y >= self.y_min or close(y, self.y_min)) and (y <= self.y_max or close(y, self.y_max))
        return x_ok and y_ok

    def check_range(self, x: float, y: float, allow_extrapolation: bool = False) -> None:
        if not (allow_extrapolation or self.allows_extrapolation() or self.is_in_range(x, y)):
            raise ExtrapolationError(
                f"interpolation range is [{self.x_min}, {self.x_max}] x "
                f"[{self.y_min}, {self.y_max}]: extrapolation at ({x}, {y}) not allowed"
            )

    def locate_x(self, x: float) -> int:
        j = int(np.searchsorted(self._x, x, side="right")) - 1
        return min(max(j, 0), self._x.size - 2)

    def locate_y(self, y: float) -> int:
        j = int(np.searchsorted(self._y, y, side="right")) - 1
        return min(max(j, 0), self._y.size - 2)

    def value(self, x: float, y: float, allow_extrapolation: bool = False) -> float:
        self.check_range(x, y, allow_extrapolation)
        return self._value(float(x), float(y))

    def __call__(self, x: float, y: float, allow_extrapolation: bool = False) -> float:
        return self.value(x, y, allow_extrapolation)

    @abstractmethod
    def _value(self, x: float, y: float) -> float:
        ...


class BilinearInterpolation(Interpolation2D):
    """Weighted average of the four grid corners around the query."""

    def _value(self, x: float, y: float) -> float:
        i = self.locate_x(x)
        j = self.locate_y(y)
        z = self._z
        t = (x - self._x[i]) / (self._x[i + 1] - self._x[i])
        u = (y - self._y[j]) / (self._y[j + 1] - self._y[j])
        return float(
            (1.0 - t) * (1.0 - u) * z[j, i]
            + t * (1.0 - u) * z[j, i + 1]
            + (1.0 - t) * u * z[j + 1, i]
            + t * u * z[j + 1, i + 1]
        )


def _natural_spline(x: np.ndarray, y: np.ndarray) -> CubicInterpolation:
    return CubicInterpolation(x, y, DerivativeApprox.SPLINE, monotonic=False)


class BicubicSpline(Interpolation2D):
    """Natural cubic splines along ``x`` for each row, then along ``y``."""

    def __init__(self, x: Iterable[float], y: Iterable[float], z) -> None:
        super().__init__(x, y, z)
        self._calculate()

    def _calculate(self) -> None:
        self._row_splines = [_natural_spline(self._x, row) for row in self._z]

    def _section(self, x: float) -> np.ndarray:
        return np.array([spline.value(x, True) for spline in self._row_splines])

    def _value(self, x: float, y: float) -> float:
        return _natural_spline(self._y, self._section(x)).value(y, True)

    def derivative_x(self, x: float, y: float) -> float:
        section = np.array([self.value(node, y, True) for node in self._x])
        return _natural_spline(self._x, section).derivative(x, True)

    def second_derivative_x(self, x: float, y: float) -> float:
        section = np.array([self.value(node, y, True) for node in self._x])
        return _natural_spline(self._x, section).second_derivative(x, True)

    def derivative_y(self, x: float, y: float) -> float:
        return _natural_spline(self._y, self._section(x)).derivative(y, True)

    def second_derivative_y(self, x: float, y: float) -> float:
        return _natural_spline(self._y, self._section(x)).second_derivative(y, True)

    def derivative_xy(self, x: float, y: float) -> float:
        section = np.array([self.derivative_y(node, y) for node in self._x])
        return _natural_spline(self._x, section).derivative(x, True)


class FlatExtrapolator2D(Interpolation2D):
    """Clamps queries to the grid of the wrapped interpolation.

    The wrapped object is shared rather than copied, so its ``update`` keeps
    this decorator current.
    """

    def __init__(self, interpolation: Interpolation2D) -> None:
        Extrapolator.__init__(self)
        self._inner = interpolation
        self._x = interpolation.x_values()
        self._y = interpolation.y_values()
        self._z = interpolation.z_data()
        self.enable_extrapolation()

    def update(self) -> None:
        self._inner.update()

    def _value(self, x: float, y: float) -> float:
        x = min(max(x, self.x_min), self.x_max)
        y = min(max(y, self.y_min), self.y_max)
        return self._inner.value(x, y, True)


class Bilinear:
    def interpolate(self, x, y, z) -> BilinearInterpolation:
        return BilinearInterpolation(x, y, z)


class Bicubic:
    def interpolate(self, x, y, z) -> BicubicSpline:
        return BicubicSpline(x, y, z)


__all__ = [
    "Interpolation2D",
    "BilinearInterpolation",
    "BicubicSpline",
    "FlatExtrapolator2D",
    "Bilinear",
    "Bicubic",
]
