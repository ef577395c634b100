"""Hagan-West convex-monotone interpolation.

The samples are read as period averages: ``y[i]`` is the mean of the
interpolated function over ``(x[i-1], x[i]]`` and ``y[0]`` is ignored. Each
period is represented by a :class:`SectionHelper`, a tagged record whose
``kind`` selects the shape function used for evaluation. Helpers are built
left to right, each carrying the primitive accumulated by its predecessors,
so that a curve growing one pillar at a time can hand its helpers back in and
only rebuild the tail.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, Mapping, Optional

import numpy as np

from interpcal.core.errors import InvalidInputError, UnsupportedOperationError

from .base import Interpolation

_FLAT_GRADIENT = 1.0e-14


class SectionKind(Enum):
    EVERYWHERE_CONSTANT = "everywhere_constant"
    CONSTANT_GRADIENT = "constant_gradient"
    QUADRATIC = "quadratic"
    QUADRATIC_MIN = "quadratic_min"
    CONVEX_MONOTONE_2 = "convex_monotone_2"
    CONVEX_MONOTONE_3 = "convex_monotone_3"
    CONVEX_MONOTONE_4 = "convex_monotone_4"
    CONVEX_MONOTONE_4_MIN = "convex_monotone_4_min"
    COMBO = "combo"


# Shape functions take the local coordinate t = (x - x_prev) / x_scaling and
# the helper parameters. ``_VALUE`` returns the function value, ``_AREA`` its
# integral over [0, t] in units of t.


def _constant_value(t, v):
    return v


def _constant_area(t, v):
    return v * t


def _gradient_value(t, f_prev, f_next):
    return f_prev + (f_next - f_prev) * t


def _gradient_area(t, f_prev, f_next):
    return f_prev * t + 0.5 * (f_next - f_prev) * t * t


def _quadratic_value(t, a, b, c):
    return c + t * (b + t * a)


def _quadratic_area(t, a, b, c):
    return t * (c + t * (b / 2.0 + t * a / 3.0))


def _floored_value(t, f_prev, f_next, eta1, eta2):
    if t <= eta1:
        return f_prev * (eta1 - t) ** 2 / eta1**2
    if t < eta2:
        return 0.0
    return f_next * (t - eta2) ** 2 / (1.0 - eta2) ** 2


def _floored_area(t, f_prev, f_next, eta1, eta2):
    if t <= eta1:
        return f_prev * (eta1**3 - (eta1 - t) ** 3) / (3.0 * eta1**2)
    area = f_prev * eta1 / 3.0
    if t > eta2:
        area += f_next * (t - eta2) ** 3 / (3.0 * (1.0 - eta2) ** 2)
    return area


def _cm2_value(t, f_average, g_prev, g_next, eta):
    if t <= eta:
        return f_average + g_prev
    return f_average + g_prev + (g_next - g_prev) * (t - eta) ** 2 / (1.0 - eta) ** 2


def _cm2_area(t, f_average, g_prev, g_next, eta):
    area = (f_average + g_prev) * t
    if t > eta:
        area += (g_next - g_prev) * (t - eta) ** 3 / (3.0 * (1.0 - eta) ** 2)
    return area


def _cm3_value(t, f_average, g_prev, g_next, eta):
    if t <= eta:
        return f_average + g_next + (g_prev - g_next) * (eta - t) ** 2 / eta**2
    return f_average + g_next


def _cm3_area(t, f_average, g_prev, g_next, eta):
    hump = (g_prev - g_next) / eta**2
    if t <= eta:
        return (f_average + g_next) * t + hump * (eta**3 - (eta - t) ** 3) / 3.0
    return (f_average + g_next) * t + hump * eta**3 / 3.0


def _cm4_level(g_prev, g_next, eta):
    return -0.5 * (eta * g_prev + (1.0 - eta) * g_next)


def _cm4_value(t, f_average, g_prev, g_next, eta):
    level = _cm4_level(g_prev, g_next, eta)
    if t <= eta:
        return f_average + level + (g_prev - level) * (eta - t) ** 2 / eta**2
    return f_average + level + (g_next - level) * (t - eta) ** 2 / (1.0 - eta) ** 2


def _cm4_area(t, f_average, g_prev, g_next, eta):
    level = _cm4_level(g_prev, g_next, eta)
    if t <= eta:
        return (f_average + level) * t + (g_prev - level) * (eta**3 - (eta - t) ** 3) / (
            3.0 * eta**2
        )
    return (
        (f_average + level) * t
        + (g_prev - level) * eta / 3.0
        + (g_next - level) * (t - eta) ** 3 / (3.0 * (1.0 - eta) ** 2)
    )


_VALUE: Dict[SectionKind, Callable[..., float]] = {
    SectionKind.EVERYWHERE_CONSTANT: _constant_value,
    SectionKind.CONSTANT_GRADIENT: _gradient_value,
    SectionKind.QUADRATIC: _quadratic_value,
    SectionKind.QUADRATIC_MIN: _floored_value,
    SectionKind.CONVEX_MONOTONE_2: _cm2_value,
    SectionKind.CONVEX_MONOTONE_3: _cm3_value,
    SectionKind.CONVEX_MONOTONE_4: _cm4_value,
    SectionKind.CONVEX_MONOTONE_4_MIN: _floored_value,
}

_AREA: Dict[SectionKind, Callable[..., float]] = {
    SectionKind.EVERYWHERE_CONSTANT: _constant_area,
    SectionKind.CONSTANT_GRADIENT: _gradient_area,
    SectionKind.QUADRATIC: _quadratic_area,
    SectionKind.QUADRATIC_MIN: _floored_area,
    SectionKind.CONVEX_MONOTONE_2: _cm2_area,
    SectionKind.CONVEX_MONOTONE_3: _cm3_area,
    SectionKind.CONVEX_MONOTONE_4: _cm4_area,
    SectionKind.CONVEX_MONOTONE_4_MIN: _floored_area,
}


@dataclass(frozen=True)
class SectionHelper:
    """Shape of the interpolant over one period.

    Args:
        kind: Shape family.
        x_prev: Left edge of the period.
        x_scaling: Period length used to map ``x`` to the unit interval.
        prev_primitive: Integral of the interpolant up to ``x_prev``.
        f_next: Function value handed over to the next period.
        params: Shape parameters, interpreted according to ``kind``.
        parts: ``(quadratic, convex_monotone)`` pair for ``COMBO`` helpers.
        weight: Quadraticity used to blend the ``COMBO`` parts.
    """

    kind: SectionKind
    x_prev: float
    x_scaling: float
    prev_primitive: float
    f_next: float
    params: tuple[float, ...] = ()
    parts: tuple["SectionHelper", ...] = ()
    weight: float = 0.0

    def value(self, x: float) -> float:
        if self.kind is SectionKind.COMBO:
            quadratic, monotone = self.parts
            return self.weight * quadratic.value(x) + (1.0 - self.weight) * monotone.value(x)
        t = (x - self.x_prev) / self.x_scaling
        return _VALUE[self.kind](t, *self.params)

    def primitive(self, x: float) -> float:
        if self.kind is SectionKind.COMBO:
            quadratic, monotone = self.parts
            return self.weight * quadratic.primitive(x) + (1.0 - self.weight) * monotone.primitive(
                x
            )
        t = (x - self.x_prev) / self.x_scaling
        return self.prev_primitive + self.x_scaling * _AREA[self.kind](t, *self.params)


# ----------------------------------------------------------------------
# Helper constructors
# ----------------------------------------------------------------------
def everywhere_constant(value: float, prev_primitive: float, x_prev: float) -> SectionHelper:
    return SectionHelper(
        SectionKind.EVERYWHERE_CONSTANT, x_prev, 1.0, prev_primitive, value, (value,)
    )


def constant_gradient(
    f_prev: float, prev_primitive: float, x_prev: float, x_next: float, f_next: float
) -> SectionHelper:
    return SectionHelper(
        SectionKind.CONSTANT_GRADIENT,
        x_prev,
        x_next - x_prev,
        prev_primitive,
        f_next,
        (f_prev, f_next),
    )


def _quadratic_coefficients(f_prev: float, f_next: float, f_average: float):
    a = 3.0 * f_prev + 3.0 * f_next - 6.0 * f_average
    b = -(4.0 * f_prev + 2.0 * f_next - 6.0 * f_average)
    return a, b, f_prev


def quadratic(
    x_prev: float,
    x_next: float,
    f_prev: float,
    f_next: float,
    f_average: float,
    prev_primitive: float,
) -> SectionHelper:
    """Unique quadratic matching both end values and the period average."""

    return SectionHelper(
        SectionKind.QUADRATIC,
        x_prev,
        x_next - x_prev,
        prev_primitive,
        f_next,
        _quadratic_coefficients(f_prev, f_next, f_average),
    )


def _floored(
    kind: SectionKind,
    x_prev: float,
    x_next: float,
    f_prev: float,
    f_next: float,
    f_average: float,
    centre: float,
    prev_primitive: float,
) -> Optional[SectionHelper]:
    """Non-negative shape touching zero around ``centre`` with the right average."""

    denominator = centre * f_prev + (1.0 - centre) * f_next
    if denominator <= 0.0:
        return None
    shrink = 3.0 * f_average / denominator
    if not 0.0 < shrink < 1.0:
        return None
    eta1 = shrink * centre
    eta2 = 1.0 - shrink * (1.0 - centre)
    if eta1 <= 0.0 or eta2 >= 1.0:
        return None
    return SectionHelper(
        kind, x_prev, x_next - x_prev, prev_primitive, f_next, (f_prev, f_next, eta1, eta2)
    )


def quadratic_min(
    x_prev: float,
    x_next: float,
    f_prev: float,
    f_next: float,
    f_average: float,
    prev_primitive: float,
) -> SectionHelper:
    """Quadratic helper floored at zero when its minimum would be negative.

    The floored shape is two half-parabolas with double roots at ``eta1`` and
    ``eta2``, joined by a flat zero stretch and placed around the vertex of
    the unfloored quadratic, rather than a single parabola with a double
    root. Both ends keep ``f_prev`` and ``f_next`` and the period average is
    preserved. When no such shape exists, e.g. for a zero average, the plain
    quadratic is returned.
    """

    a, b, c = _quadratic_coefficients(f_prev, f_next, f_average)
    if a > 0.0:
        vertex = -b / (2.0 * a)
        if 0.0 < vertex < 1.0 and _quadratic_value(vertex, a, b, c) < 0.0:
            helper = _floored(
                SectionKind.QUADRATIC_MIN,
                x_prev,
                x_next,
                f_prev,
                f_next,
                f_average,
                vertex,
                prev_primitive,
            )
            if helper is not None:
                return helper
    return quadratic(x_prev, x_next, f_prev, f_next, f_average, prev_primitive)


def _convex_monotone(
    kind: SectionKind,
    x_prev: float,
    x_next: float,
    g_prev: float,
    g_next: float,
    f_average: float,
    eta: float,
    prev_primitive: float,
) -> SectionHelper:
    return SectionHelper(
        kind,
        x_prev,
        x_next - x_prev,
        prev_primitive,
        f_average + g_next,
        (f_average, g_prev, g_next, eta),
    )


def convex_monotone_2(x_prev, x_next, g_prev, g_next, f_average, eta, prev_primitive):
    return _convex_monotone(
        SectionKind.CONVEX_MONOTONE_2, x_prev, x_next, g_prev, g_next, f_average, eta, prev_primitive
    )


def convex_monotone_3(x_prev, x_next, g_prev, g_next, f_average, eta, prev_primitive):
    return _convex_monotone(
        SectionKind.CONVEX_MONOTONE_3, x_prev, x_next, g_prev, g_next, f_average, eta, prev_primitive
    )


def convex_monotone_4(x_prev, x_next, g_prev, g_next, f_average, eta, prev_primitive):
    return _convex_monotone(
        SectionKind.CONVEX_MONOTONE_4, x_prev, x_next, g_prev, g_next, f_average, eta, prev_primitive
    )


def convex_monotone_4_min(x_prev, x_next, g_prev, g_next, f_average, eta, prev_primitive):
    """Convex-monotone 4 shape with a zero floor when its trough dips below zero."""

    if f_average + _cm4_level(g_prev, g_next, eta) <= 0.0:
        helper = _floored(
            SectionKind.CONVEX_MONOTONE_4_MIN,
            x_prev,
            x_next,
            f_average + g_prev,
            f_average + g_next,
            f_average,
            eta,
            prev_primitive,
        )
        if helper is not None:
            return helper
    return convex_monotone_4(x_prev, x_next, g_prev, g_next, f_average, eta, prev_primitive)


def combo(quadratic_helper: SectionHelper, monotone_helper: SectionHelper, quadraticity: float):
    return SectionHelper(
        SectionKind.COMBO,
        quadratic_helper.x_prev,
        quadratic_helper.x_scaling,
        quadratic_helper.prev_primitive,
        quadraticity * quadratic_helper.f_next + (1.0 - quadraticity) * monotone_helper.f_next,
        parts=(quadratic_helper, monotone_helper),
        weight=quadraticity,
    )


# ----------------------------------------------------------------------
# Interpolation
# ----------------------------------------------------------------------
class ConvexMonotoneInterpolation(Interpolation):
    """Convex-monotone interpolation of period averages.

    Args:
        x: Strictly increasing period boundaries.
        y: Period averages; ``y[i]`` covers ``(x[i-1], x[i]]``.
        quadraticity: Weight in ``[0, 1]`` of the quadratic helper when blending
            with the convex-monotone helper.
        monotonicity: Parameter in ``[0, 1]`` controlling how strictly the
            convex-monotone shapes preserve monotonicity.
        force_positive: Floor the end values and helper troughs at zero. For
            strictly positive period averages the whole curve is then
            non-negative. A period whose average is zero keeps the plain
            quadratic, which may dip below zero, so callers must not rely on
            the floor for such data.
        constant_last_period: Represent the last period by a flat helper.
        pre_existing_helpers: Helpers keyed by period end, as returned by
            :meth:`existing_helpers` of a curve over a prefix of ``x``.

    Raises:
        InvalidInputError: If parameters are outside ``[0, 1]``, fewer than two
            points are given or too many helpers are supplied.
    """

    def __init__(
        self,
        x: Iterable[float],
        y: Iterable[float],
        quadraticity: float = 0.3,
        monotonicity: float = 0.7,
        force_positive: bool = True,
        constant_last_period: bool = False,
        pre_existing_helpers: Optional[Mapping[float, SectionHelper]] = None,
    ):
        if not 0.0 <= monotonicity <= 1.0:
            raise InvalidInputError("monotonicity must lie between 0 and 1")
        if not 0.0 <= quadraticity <= 1.0:
            raise InvalidInputError("quadraticity must lie between 0 and 1")
        self.quadraticity = quadraticity
        self.monotonicity = monotonicity
        self.force_positive = force_positive
        self.constant_last_period = constant_last_period
        self._pre_helpers = dict(sorted((pre_existing_helpers or {}).items()))
        super().__init__(x, y, required_points=2)
        self._calculate()

    def _section(self, i: int, f: np.ndarray, primitive: float) -> SectionHelper:
        x, y = self._x, self._y
        x_prev, x_next = x[i - 1], x[i]
        g_prev = f[i - 1] - y[i]
        g_next = f[i] - y[i]

        if abs(g_prev) < _FLAT_GRADIENT and abs(g_next) < _FLAT_GRADIENT:
            return constant_gradient(f[i - 1], primitive, x_prev, x_next, f[i])

        quad_builder = quadratic_min if self.force_positive else quadratic
        weight = self.quadraticity
        quadratic_helper = None
        monotone_helper = None
        if self.quadraticity > 0.0:
            quadratic_helper = quad_builder(x_prev, x_next, f[i - 1], f[i], y[i], primitive)

        if self.quadraticity < 1.0:
            cm4 = convex_monotone_4_min if self.force_positive else convex_monotone_4
            upper = (1.0 + self.monotonicity) / 2.0
            lower = (1.0 - self.monotonicity) / 2.0
            if (g_prev > 0.0 and -0.5 * g_prev >= g_next >= -2.0 * g_prev) or (
                g_prev < 0.0 and -0.5 * g_prev <= g_next <= -2.0 * g_prev
            ):
                weight = 1.0
                if self.quadraticity == 0.0:
                    quadratic_helper = quad_builder(x_prev, x_next, f[i - 1], f[i], y[i], primitive)
            elif (g_prev < 0.0 and g_next > -2.0 * g_prev) or (
                g_prev > 0.0 and g_next < -2.0 * g_prev
            ):
                eta = (g_next + 2.0 * g_prev) / (g_next - g_prev)
                if eta < upper:
                    monotone_helper = convex_monotone_2(
                        x_prev, x_next, g_prev, g_next, y[i], eta, primitive
                    )
                else:
                    monotone_helper = cm4(x_prev, x_next, g_prev, g_next, y[i], upper, primitive)
            elif (g_prev > 0.0 and 0.0 > g_next > -0.5 * g_prev) or (
                g_prev < 0.0 and 0.0 < g_next < -0.5 * g_prev
            ):
                eta = 3.0 * g_next / (g_next - g_prev)
                if eta > lower:
                    monotone_helper = convex_monotone_3(
                        x_prev, x_next, g_prev, g_next, y[i], eta, primitive
                    )
                else:
                    monotone_helper = cm4(x_prev, x_next, g_prev, g_next, y[i], lower, primitive)
            else:
                eta = g_next / (g_prev + g_next)
                eta = min(max(eta, lower), upper)
                monotone_helper = cm4(x_prev, x_next, g_prev, g_next, y[i], eta, primitive)

        if weight == 1.0:
            return quadratic_helper
        if weight == 0.0:
            return monotone_helper
        return combo(quadratic_helper, monotone_helper, weight)

    def _calculate(self) -> None:
        x, y = self._x, self._y
        n = x.size
        if n - len(self._pre_helpers) <= 1:
            raise InvalidInputError("too many existing helpers have been supplied")

        self._helpers: Dict[float, SectionHelper] = {}
        if n == 2:
            helper = everywhere_constant(float(y[1]), 0.0, float(x[0]))
            self._helpers[float(x[1])] = helper
            self._extrapolation_helper = helper
            self._index_helpers()
            return

        start = len(self._pre_helpers) + 1
        f = np.zeros(n)
        for i in range(start, n - 1):
            dx_prev = x[i] - x[i - 1]
            dx = x[i + 1] - x[i]
            f[i] = dx_prev / (dx + dx_prev) * y[i] + dx / (dx + dx_prev) * y[i + 1]

        if start > 1:
            f[start - 1] = next(reversed(self._pre_helpers.values())).f_next
        else:
            f[0] = 1.5 * y[1] - 0.5 * f[1]
        f[n - 1] = 1.5 * y[n - 1] - 0.5 * f[n - 2]
        if self.force_positive:
            f[0] = max(f[0], 0.0)
            f[n - 1] = max(f[n - 1], 0.0)

        self._helpers.update(self._pre_helpers)
        primitive = float(np.sum(y[1:start] * np.diff(x[:start])))

        end = n - 1 if self.constant_last_period else n
        for i in range(start, end):
            self._helpers[float(x[i])] = self._section(i, f, primitive)
            primitive += y[i] * (x[i] - x[i - 1])

        if self.constant_last_period:
            helper = everywhere_constant(float(y[n - 1]), primitive, float(x[n - 2]))
            self._helpers[float(x[n - 1])] = helper
            self._extrapolation_helper = helper
        else:
            last = self._helpers[float(x[n - 1])]
            self._extrapolation_helper = everywhere_constant(
                last.value(x[n - 1]), primitive, float(x[n - 1])
            )
        self._index_helpers()

    def _index_helpers(self) -> None:
        self._keys = sorted(self._helpers)
        self._ordered = [self._helpers[key] for key in self._keys]

    def _helper_for(self, x: float) -> SectionHelper:
        if x >= self._x[-1]:
            return self._extrapolation_helper
        index = min(bisect_right(self._keys, x), len(self._keys) - 1)
        return self._ordered[index]

    def _value(self, x: float) -> float:
        return float(self._helper_for(x).value(x))

    def _primitive(self, x: float) -> float:
        return float(self._helper_for(x).primitive(x))

    def _derivative(self, x: float) -> float:
        raise UnsupportedOperationError("convex-monotone interpolation does not provide derivatives")

    def _second_derivative(self, x: float) -> float:
        raise UnsupportedOperationError(
            "convex-monotone interpolation does not provide second derivatives"
        )

    def existing_helpers(self) -> Dict[float, SectionHelper]:
        """Helpers reusable when points are appended, without the flat last period."""

        helpers = dict(self._helpers)
        if self.constant_last_period:
            helpers.pop(float(self._x[-1]), None)
        return helpers

    def sections(self) -> list[SectionHelper]:
        """Helpers ordered by period, for inspection."""

        return list(self._ordered)


class ConvexMonotone:
    """Factory for :class:`ConvexMonotoneInterpolation`."""

    is_global = True
    required_points = 2
    data_size_adjustment = 1

    def __init__(
        self,
        quadraticity: float = 0.3,
        monotonicity: float = 0.7,
        force_positive: bool = True,
    ):
        self.quadraticity = quadraticity
        self.monotonicity = monotonicity
        self.force_positive = force_positive

    def interpolate(self, x: Iterable[float], y: Iterable[float]) -> ConvexMonotoneInterpolation:
        return ConvexMonotoneInterpolation(
            x, y, self.quadraticity, self.monotonicity, self.force_positive, False
        )

    def local_interpolate(
        self,
        x: Iterable[float],
        y: Iterable[float],
        localisation: int,
        previous: Optional[ConvexMonotoneInterpolation],
        final_size: int,
    ) -> ConvexMonotoneInterpolation:
        """Rebuild only the tail of a curve that grows one pillar at a time.

        Args:
            x: Period boundaries known so far.
            y: Period averages known so far.
            localisation: Number of trailing periods solved together.
            previous: Interpolation over the previous prefix, whose helpers are
                reused. Ignored on the first call.
            final_size: Number of points of the finished curve; the last period
                is kept flat until it is reached.
        """

        length = len(x)
        pre_helpers = None
        if length - localisation != 1 and previous is not None:
            pre_helpers = previous.existing_helpers()
        return ConvexMonotoneInterpolation(
            x,
            y,
            self.quadraticity,
            self.monotonicity,
            self.force_positive,
            length != final_size,
            pre_helpers,
        )


__all__ = [
    "SectionKind",
    "SectionHelper",
    "ConvexMonotoneInterpolation",
    "ConvexMonotone",
]
