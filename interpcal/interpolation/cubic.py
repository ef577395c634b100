"""Piecewise cubic interpolation with local and spline derivative schemes.

On each segment ``[x[j], x[j+1]]`` the interpolant is

    value(x) = y[j] + dx * (a[j] + dx * (b[j] + dx * c[j])),   dx = x - x[j]

where ``a[j]`` is the first derivative estimate at ``x[j]``. The schemes below
differ only in how those derivative estimates are obtained; an optional Hyman
filter then clamps them so that no spurious extremum is introduced.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable

import numpy as np

from interpcal.core.errors import InvalidInputError, UnsupportedOperationError
from interpcal.core.linalg import inverse, tridiagonal_solve
from interpcal.core.utils import close
from interpcal.logging import get_logger

from .base import Interpolation

logger = get_logger(__name__)


class DerivativeApprox(Enum):
    """Schemes estimating the first derivative at each sample."""

    SPLINE = "spline"
    SPLINE_OM1 = "spline_om1"
    SPLINE_OM2 = "spline_om2"
    FOURTH_ORDER = "fourth_order"
    PARABOLIC = "parabolic"
    FRITSCH_BUTLAND = "fritsch_butland"
    AKIMA = "akima"
    KRUGER = "kruger"
    HARMONIC = "harmonic"


class BoundaryCondition(Enum):
    """End conditions of the spline schemes."""

    NOT_A_KNOT = "not_a_knot"
    FIRST_DERIVATIVE = "first_derivative"
    SECOND_DERIVATIVE = "second_derivative"
    PERIODIC = "periodic"
    LAGRANGE = "lagrange"


def _lagrange_slope(x: np.ndarray, y: np.ndarray, at: float) -> float:
    """Derivative at ``at`` of the cubic through four points."""

    coefficients = np.polyfit(x - at, y, 3)
    return float(coefficients[-2])


def _parabolic_ends(dx: np.ndarray, s: np.ndarray) -> tuple[float, float]:
    n = s.size + 1
    first = ((2.0 * dx[0] + dx[1]) * s[0] - dx[0] * s[1]) / (dx[0] + dx[1])
    last = ((2.0 * dx[n - 2] + dx[n - 3]) * s[n - 2] - dx[n - 2] * s[n - 3]) / (
        dx[n - 2] + dx[n - 3]
    )
    return first, last


def _weighted_ratio(num_weight_a: float, a: float, num_weight_b: float, b: float) -> float:
    """``(wa * a + wb * b) / (wa + wb)``, or the plain average for zero weights."""

    total = num_weight_a + num_weight_b
    if total == 0.0:
        return 0.5 * (a + b)
    return (num_weight_a * a + num_weight_b * b) / total


class CubicInterpolation(Interpolation):
    """Cubic interpolation parametrised by a derivative scheme.

    Args:
        x: Strictly increasing abscissas.
        y: Ordinates.
        derivative_approx: Scheme used to estimate derivatives at the samples.
        monotonic: Apply the Hyman filter after estimating derivatives.
        left_condition: Left end condition for the spline schemes.
        left_value: Value attached to ``left_condition``.
        right_condition: Right end condition for the spline schemes.
        right_value: Value attached to ``right_condition``.

    Raises:
        InvalidInputError: If the samples are insufficient for the chosen
            scheme or end conditions.
        UnsupportedOperationError: For the fourth-order scheme and periodic end
            conditions.
    """

    def __init__(
        self,
        x: Iterable[float],
        y: Iterable[float],
        derivative_approx: DerivativeApprox = DerivativeApprox.SPLINE,
        monotonic: bool = False,
        left_condition: BoundaryCondition = BoundaryCondition.SECOND_DERIVATIVE,
        left_value: float = 0.0,
        right_condition: BoundaryCondition = BoundaryCondition.SECOND_DERIVATIVE,
        right_value: float = 0.0,
    ):
        self.derivative_approx = DerivativeApprox(derivative_approx)
        self.monotonic = monotonic
        self.left_condition = BoundaryCondition(left_condition)
        self.right_condition = BoundaryCondition(right_condition)
        self.left_value = float(left_value)
        self.right_value = float(right_value)

        required = 2
        if BoundaryCondition.LAGRANGE in (self.left_condition, self.right_condition):
            required = 4
        if self.derivative_approx is DerivativeApprox.AKIMA:
            required = 4
        super().__init__(x, y, required_points=required)

        self.monotonicity_adjustments: dict[int, bool] = {}
        self._calculate()

    # ------------------------------------------------------------------
    # Derivative estimates
    # ------------------------------------------------------------------
    def _spline_slopes(self, dx: np.ndarray, s: np.ndarray) -> np.ndarray:
        n = self._x.size
        left, right = self.left_condition, self.right_condition
        if BoundaryCondition.PERIODIC in (left, right):
            raise UnsupportedOperationError("periodic end conditions are not implemented")
        if n == 2 and BoundaryCondition.NOT_A_KNOT in (left, right):
            return np.full(2, s[0])

        lower = np.zeros(n - 1)
        diagonal = np.zeros(n)
        upper = np.zeros(n - 1)
        rhs = np.zeros(n)

        for i in range(1, n - 1):
            lower[i - 1] = dx[i]
            diagonal[i] = 2.0 * (dx[i] + dx[i - 1])
            upper[i] = dx[i - 1]
            rhs[i] = 3.0 * (dx[i] * s[i - 1] + dx[i - 1] * s[i])

        if left is BoundaryCondition.NOT_A_KNOT:
            diagonal[0] = dx[1] * (dx[1] + dx[0])
            upper[0] = (dx[0] + dx[1]) ** 2
            rhs[0] = s[0] * dx[1] * (2.0 * dx[1] + 3.0 * dx[0]) + s[1] * dx[0] ** 2
        elif left is BoundaryCondition.FIRST_DERIVATIVE:
            diagonal[0], upper[0] = 1.0, 0.0
            rhs[0] = self.left_value
        elif left is BoundaryCondition.SECOND_DERIVATIVE:
            diagonal[0], upper[0] = 2.0, 1.0
            rhs[0] = 3.0 * s[0] - self.left_value * dx[0] / 2.0
        else:
            diagonal[0], upper[0] = 1.0, 0.0
            rhs[0] = _lagrange_slope(self._x[:4], self._y[:4], self._x[0])

        if right is BoundaryCondition.NOT_A_KNOT:
            lower[n - 2] = -((dx[n - 2] + dx[n - 3]) ** 2)
            diagonal[n - 1] = -dx[n - 3] * (dx[n - 3] + dx[n - 2])
            rhs[n - 1] = -s[n - 3] * dx[n - 2] ** 2 - s[n - 2] * dx[n - 3] * (
                3.0 * dx[n - 2] + 2.0 * dx[n - 3]
            )
        elif right is BoundaryCondition.FIRST_DERIVATIVE:
            lower[n - 2], diagonal[n - 1] = 0.0, 1.0
            rhs[n - 1] = self.right_value
        elif right is BoundaryCondition.SECOND_DERIVATIVE:
            lower[n - 2], diagonal[n - 1] = 1.0, 2.0
            rhs[n - 1] = 3.0 * s[n - 2] + self.right_value * dx[n - 2] / 2.0
        else:
            lower[n - 2], diagonal[n - 1] = 0.0, 1.0
            rhs[n - 1] = _lagrange_slope(self._x[-4:], self._y[-4:], self._x[-1])

        return tridiagonal_solve(lower, diagonal, upper, rhs)

    def _overshooting_slopes(self, dx: np.ndarray) -> np.ndarray:
        """Spline slopes minimising overshooting (OM1: third, OM2: first order)."""

        n = self._x.size
        if n < 3:
            return np.full(2, (self._y[1] - self._y[0]) / dx[0])
        scale = 1.0 / (n - 1)

        t = np.zeros((n - 2, n))
        curvature = np.zeros((n - 2, n))
        for i in range(n - 2):
            t[i, i] = dx[i] / 6.0
            t[i, i + 1] = (dx[i] + dx[i + 1]) / 3.0
            t[i, i + 2] = dx[i + 1] / 6.0
            curvature[i, i] = 1.0 / dx[i]
            curvature[i, i + 1] = -(1.0 / dx[i + 1] + 1.0 / dx[i])
            curvature[i, i + 2] = 1.0 / dx[i + 1]

        up = np.zeros((n, 2))
        up[0, 0] = 1.0
        up[n - 1, 1] = 1.0
        us = np.zeros((n, n - 2))
        us[np.arange(1, n - 1), np.arange(n - 2)] = 1.0

        z = us @ inverse(t @ us)
        identity = np.eye(n)
        v = (identity - z @ t) @ up
        w = z @ curvature

        if self.derivative_approx is DerivativeApprox.SPLINE_OM1:
            weights = dx**3
            off_diagonal = 7.0 / 8.0
        else:
            weights = dx.copy()
            off_diagonal = 0.5
        q = np.zeros((n, n))
        q[np.arange(n - 1), np.arange(n - 1)] += scale * weights
        q[np.arange(1, n), np.arange(1, n)] += scale * weights
        q[np.arange(n - 1), np.arange(1, n)] = off_diagonal * scale * weights
        q[np.arange(1, n), np.arange(n - 1)] = off_diagonal * scale * weights

        j = (identity - v @ inverse(v.T @ q @ v) @ v.T @ q) @ w
        second = j @ self._y

        slopes = np.empty(n)
        slopes[:-1] = np.diff(self._y) / dx - (2.0 * second[:-1] + second[1:]) * dx / 6.0
        slopes[-1] = (
            slopes[-2]
            + second[-2] * dx[-1]
            + (second[-1] - second[-2]) * dx[-1] / 2.0
        )
        return slopes

    def _local_slopes(self, dx: np.ndarray, s: np.ndarray) -> np.ndarray:
        n = self._x.size
        scheme = self.derivative_approx
        if scheme is DerivativeApprox.FOURTH_ORDER:
            raise UnsupportedOperationError("the fourth order scheme is not implemented")
        if n == 2:
            return np.full(2, s[0])

        slopes = np.zeros(n)
        if scheme is DerivativeApprox.PARABOLIC:
            for i in range(1, n - 1):
                slopes[i] = (dx[i - 1] * s[i] + dx[i] * s[i - 1]) / (dx[i] + dx[i - 1])
            slopes[0], slopes[-1] = _parabolic_ends(dx, s)

        elif scheme is DerivativeApprox.FRITSCH_BUTLAND:
            for i in range(1, n - 1):
                s_min, s_max = min(s[i - 1], s[i]), max(s[i - 1], s[i])
                if s_min * s_max > 0.0:
                    slopes[i] = 3.0 * s_min * s_max / (s_max + 2.0 * s_min)
            slopes[0], slopes[-1] = _parabolic_ends(dx, s)

        elif scheme is DerivativeApprox.AKIMA:
            slopes = self._akima_slopes(s)

        elif scheme is DerivativeApprox.KRUGER:
            for i in range(1, n - 1):
                if s[i - 1] * s[i] > 0.0:
                    slopes[i] = 2.0 / (1.0 / s[i - 1] + 1.0 / s[i])
            slopes[0] = (3.0 * s[0] - slopes[1]) / 2.0
            slopes[-1] = (3.0 * s[-1] - slopes[-2]) / 2.0

        elif scheme is DerivativeApprox.HARMONIC:
            for i in range(1, n - 1):
                w1 = 2.0 * dx[i] + dx[i - 1]
                w2 = dx[i] + 2.0 * dx[i - 1]
                if s[i - 1] * s[i] > 0.0:
                    slopes[i] = (w1 + w2) / (w1 / s[i - 1] + w2 / s[i])
            first, last = _parabolic_ends(dx, s)
            if first * s[0] < 0.0:
                first = 0.0
            elif s[0] * s[1] < 0.0 and abs(first) > abs(3.0 * s[0]):
                first = 3.0 * s[0]
            if last * s[-1] < 0.0:
                last = 0.0
            elif s[-1] * s[-2] < 0.0 and abs(last) > abs(3.0 * s[-1]):
                last = 3.0 * s[-1]
            slopes[0], slopes[-1] = first, last

        else:
            raise InvalidInputError(f"unknown derivative scheme {scheme!r}")
        return slopes

    @staticmethod
    def _akima_slopes(s: np.ndarray) -> np.ndarray:
        n = s.size + 1
        slopes = np.zeros(n)

        def ratio(w_a: float, a: float, w_b: float, b: float) -> float:
            return _weighted_ratio(abs(w_a), a, abs(w_b), b)

        slopes[0] = ratio(
            s[1] - s[0], 2.0 * s[0] * s[1], 2.0 * s[0] * s[1] - 4.0 * s[0] ** 2 * s[1], s[0]
        )
        slopes[1] = ratio(s[2] - s[1], s[0], s[0] - 2.0 * s[0] * s[1], s[1])
        for i in range(2, n - 2):
            if close(s[i - 2], s[i - 1]) and close(s[i], s[i + 1]) and not close(s[i - 1], s[i]):
                slopes[i] = 0.5 * (s[i - 1] + s[i])
            elif close(s[i - 2], s[i - 1]) and not close(s[i], s[i + 1]):
                slopes[i] = s[i - 1]
            elif not close(s[i - 2], s[i - 1]) and close(s[i], s[i + 1]):
                slopes[i] = s[i]
            elif close(s[i], s[i - 1]):
                slopes[i] = s[i]
            else:
                slopes[i] = ratio(s[i + 1] - s[i], s[i - 1], s[i - 1] - s[i - 2], s[i])
        slopes[n - 2] = ratio(
            2.0 * s[n - 2] * s[n - 3] - s[n - 2], s[n - 3], s[n - 3] - s[n - 4], s[n - 2]
        )
        slopes[n - 1] = ratio(
            4.0 * s[n - 2] ** 2 * s[n - 3] - 2.0 * s[n - 2] * s[n - 3],
            s[n - 2],
            s[n - 2] - s[n - 3],
            2.0 * s[n - 2] * s[n - 3],
        )
        return slopes

    def _hyman_filter(self, slopes: np.ndarray, dx: np.ndarray, s: np.ndarray) -> None:
        """Clamp ``slopes`` in place so that the cubic preserves monotonicity."""

        n = slopes.size
        self.monotonicity_adjustments = {}
        for i in range(n):
            if i == 0 or i == n - 1:
                chord = s[0] if i == 0 else s[n - 2]
                if slopes[i] * chord > 0.0:
                    correction = np.sign(slopes[i]) * min(abs(slopes[i]), abs(3.0 * chord))
                else:
                    correction = 0.0
            else:
                pm = (s[i - 1] * dx[i] + s[i] * dx[i - 1]) / (dx[i - 1] + dx[i])
                bound = 3.0 * min(abs(s[i - 1]), abs(s[i]), abs(pm))
                if i > 1 and (s[i - 1] - s[i - 2]) * (s[i] - s[i - 1]) > 0.0:
                    pd = (s[i - 1] * (2.0 * dx[i - 1] + dx[i - 2]) - s[i - 2] * dx[i - 1]) / (
                        dx[i - 2] + dx[i - 1]
                    )
                    if pm * pd > 0.0 and pm * (s[i - 1] - s[i - 2]) > 0.0:
                        bound = max(bound, 1.5 * min(abs(pm), abs(pd)))
                if i < n - 2 and (s[i] - s[i - 1]) * (s[i + 1] - s[i]) > 0.0:
                    pu = (s[i] * (2.0 * dx[i] + dx[i + 1]) - s[i + 1] * dx[i]) / (dx[i] + dx[i + 1])
                    if pm * pu > 0.0 and -pm * (s[i] - s[i - 1]) > 0.0:
                        bound = max(bound, 1.5 * min(abs(pm), abs(pu)))
                if slopes[i] * pm > 0.0:
                    correction = np.sign(slopes[i]) * min(abs(slopes[i]), bound)
                else:
                    correction = 0.0
            if correction != slopes[i]:
                slopes[i] = correction
                self.monotonicity_adjustments[i] = True
        if self.monotonicity_adjustments:
            logger.debug(
                "Hyman filter adjusted derivatives at %s", sorted(self.monotonicity_adjustments)
            )

    # ------------------------------------------------------------------
    # Coefficients
    # ------------------------------------------------------------------
    def _calculate(self) -> None:
        dx = np.diff(self._x)
        s = np.diff(self._y) / dx

        scheme = self.derivative_approx
        if scheme is DerivativeApprox.SPLINE:
            slopes = self._spline_slopes(dx, s)
        elif scheme in (DerivativeApprox.SPLINE_OM1, DerivativeApprox.SPLINE_OM2):
            slopes = self._overshooting_slopes(dx)
        else:
            slopes = self._local_slopes(dx, s)

        self.monotonicity_adjustments = {}
        if self.monotonic:
            self._hyman_filter(slopes, dx, s)

        self.a = slopes[:-1].copy()
        self.b = (3.0 * s - slopes[1:] - 2.0 * slopes[:-1]) / dx
        self.c = (slopes[1:] + slopes[:-1] - 2.0 * s) / dx**2

        areas = dx * (
            self._y[:-1] + dx * (self.a / 2.0 + dx * (self.b / 3.0 + dx * self.c / 4.0))
        )
        self._primitive_const = np.concatenate(([0.0], np.cumsum(areas[:-1])))

    def _value(self, x: float) -> float:
        j = self.locate(x)
        dx = x - self._x[j]
        return float(self._y[j] + dx * (self.a[j] + dx * (self.b[j] + dx * self.c[j])))

    def _derivative(self, x: float) -> float:
        j = self.locate(x)
        dx = x - self._x[j]
        return float(self.a[j] + (2.0 * self.b[j] + 3.0 * self.c[j] * dx) * dx)

    def _second_derivative(self, x: float) -> float:
        j = self.locate(x)
        dx = x - self._x[j]
        return float(2.0 * self.b[j] + 6.0 * self.c[j] * dx)

    def _primitive(self, x: float) -> float:
        j = self.locate(x)
        dx = x - self._x[j]
        return float(
            self._primitive_const[j]
            + dx
            * (
                self._y[j]
                + dx * (self.a[j] / 2.0 + dx * (self.b[j] / 3.0 + dx * self.c[j] / 4.0))
            )
        )


class Cubic:
    """Generic factory for :class:`CubicInterpolation`."""

    is_global = True

    def __init__(
        self,
        derivative_approx: DerivativeApprox = DerivativeApprox.KRUGER,
        monotonic: bool = False,
        left_condition: BoundaryCondition = BoundaryCondition.SECOND_DERIVATIVE,
        left_value: float = 0.0,
        right_condition: BoundaryCondition = BoundaryCondition.SECOND_DERIVATIVE,
        right_value: float = 0.0,
    ):
        self.derivative_approx = DerivativeApprox(derivative_approx)
        self.monotonic = monotonic
        self.left_condition = BoundaryCondition(left_condition)
        self.left_value = left_value
        self.right_condition = BoundaryCondition(right_condition)
        self.right_value = right_value

    @property
    def required_points(self) -> int:
        if self.derivative_approx is DerivativeApprox.AKIMA:
            return 4
        if BoundaryCondition.LAGRANGE in (self.left_condition, self.right_condition):
            return 4
        return 2

    def interpolate(self, x: Iterable[float], y: Iterable[float]) -> CubicInterpolation:
        return CubicInterpolation(
            x,
            y,
            self.derivative_approx,
            self.monotonic,
            self.left_condition,
            self.left_value,
            self.right_condition,
            self.right_value,
        )


class CubicNaturalSpline(Cubic):
    def __init__(self) -> None:
        super().__init__(DerivativeApprox.SPLINE, monotonic=False)


class MonotonicCubicNaturalSpline(Cubic):
    def __init__(self) -> None:
        super().__init__(DerivativeApprox.SPLINE, monotonic=True)


class CubicSplineOvershootingMinimization1(Cubic):
    def __init__(self) -> None:
        super().__init__(DerivativeApprox.SPLINE_OM1, monotonic=False)


class CubicSplineOvershootingMinimization2(Cubic):
    def __init__(self) -> None:
        super().__init__(DerivativeApprox.SPLINE_OM2, monotonic=False)


class Parabolic(Cubic):
    def __init__(self, monotonic: bool = False) -> None:
        super().__init__(DerivativeApprox.PARABOLIC, monotonic=monotonic)


class MonotonicParabolic(Parabolic):
    def __init__(self) -> None:
        super().__init__(monotonic=True)


class FritschButland(Cubic):
    """Fritsch-Butland slopes; the Hyman filter is on by default to tame the ends."""

    def __init__(self, monotonic: bool = True) -> None:
        super().__init__(DerivativeApprox.FRITSCH_BUTLAND, monotonic=monotonic)


class Akima(Cubic):
    def __init__(self) -> None:
        super().__init__(DerivativeApprox.AKIMA, monotonic=False)


class Kruger(Cubic):
    def __init__(self) -> None:
        super().__init__(DerivativeApprox.KRUGER, monotonic=False)


class Harmonic(Cubic):
    def __init__(self) -> None:
        super().__init__(DerivativeApprox.HARMONIC, monotonic=False)


__all__ = [
    "DerivativeApprox",
    "BoundaryCondition",
    "CubicInterpolation",
    "Cubic",
    "CubicNaturalSpline",
    "MonotonicCubicNaturalSpline",
    "CubicSplineOvershootingMinimization1",
    "CubicSplineOvershootingMinimization2",
    "Parabolic",
    "MonotonicParabolic",
    "FritschButland",
    "Akima",
    "Kruger",
    "Harmonic",
]
