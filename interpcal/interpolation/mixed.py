"""Interpolation switching scheme at a given sample index."""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from interpcal.core.errors import InvalidInputError

from .base import Interpolation, InterpolationFactory
from .cubic import Cubic, DerivativeApprox
from .linear import Linear


class MixedBehavior(Enum):
    """How the two schemes see the samples.

    ``SHARE_RANGES`` fits both schemes on all samples and switches at the
    pivot; ``SPLIT_RANGES`` fits the first on ``x[:n+1]`` and the second on
    ``x[n:]``.
    """

    SHARE_RANGES = "share_ranges"
    SPLIT_RANGES = "split_ranges"


class MixedInterpolation(Interpolation):
    """First scheme on ``[x[0], x[n])``, second scheme from ``x[n]`` onwards.

    Args:
        x: Strictly increasing abscissas.
        y: Ordinates.
        switch_index: Pivot sample index ``n``.
        first: Factory used left of the pivot.
        second: Factory used from the pivot onwards.
        behavior: Whether the schemes share or split the samples.

    Raises:
        InvalidInputError: If the pivot leaves no room for the second scheme.
    """

    def __init__(
        self,
        x: Iterable[float],
        y: Iterable[float],
        switch_index: int,
        first: InterpolationFactory,
        second: InterpolationFactory,
        behavior: MixedBehavior = MixedBehavior.SHARE_RANGES,
    ):
        super().__init__(
            x, y, required_points=max(first.required_points, second.required_points)
        )
        if not 0 <= switch_index < self._x.size:
            raise InvalidInputError(
                f"too large switch index ({switch_index}) for {self._x.size} points"
            )
        self.switch_index = switch_index
        self.behavior = MixedBehavior(behavior)

        n = switch_index
        if self.behavior is MixedBehavior.SHARE_RANGES:
            self._first = first.interpolate(self._x, self._y)
            self._second = second.interpolate(self._x, self._y)
        else:
            self._first = first.interpolate(self._x[: n + 1], self._y[: n + 1])
            self._second = second.interpolate(self._x[n:], self._y[n:])
        self._pivot = float(self._x[n])

    def _calculate(self) -> None:
        self._first.update()
        self._second.update()

    def _active(self, x: float) -> Interpolation:
        return self._first if x < self._pivot else self._second

    def _value(self, x: float) -> float:
        return self._active(x).value(x, True)

    def _derivative(self, x: float) -> float:
        return self._active(x).derivative(x, True)

    def _second_derivative(self, x: float) -> float:
        return self._active(x).second_derivative(x, True)

    def _primitive(self, x: float) -> float:
        if x < self._pivot:
            return self._first.primitive(x, True)
        offset = self._first.primitive(self._pivot, True) - self._second.primitive(self._pivot, True)
        return self._second.primitive(x, True) + offset

    def switch_value(self) -> float:
        return self._pivot


class MixedLinearCubic:
    """Linear up to ``switch_index``, cubic afterwards.

    Extra positional and keyword arguments are forwarded to :class:`Cubic`.
    """

    is_global = True

    def __init__(
        self,
        switch_index: int,
        behavior: MixedBehavior = MixedBehavior.SHARE_RANGES,
        *cubic_args,
        **cubic_kwargs,
    ) -> None:
        self.switch_index = switch_index
        self.behavior = MixedBehavior(behavior)
        self.cubic = Cubic(*cubic_args, **cubic_kwargs)

    @property
    def required_points(self) -> int:
        return max(Linear.required_points, self.cubic.required_points)

    def interpolate(self, x: Iterable[float], y: Iterable[float]) -> MixedInterpolation:
        return MixedInterpolation(x, y, self.switch_index, Linear(), self.cubic, self.behavior)


class MixedLinearCubicNaturalSpline(MixedLinearCubic):
    def __init__(self, switch_index: int, behavior: MixedBehavior = MixedBehavior.SHARE_RANGES):
        super().__init__(switch_index, behavior, DerivativeApprox.SPLINE, False)


class MixedLinearMonotonicCubicNaturalSpline(MixedLinearCubic):
    def __init__(self, switch_index: int, behavior: MixedBehavior = MixedBehavior.SHARE_RANGES):
        super().__init__(switch_index, behavior, DerivativeApprox.SPLINE, True)


__all__ = [
    "MixedBehavior",
    "MixedInterpolation",
    "MixedLinearCubic",
    "MixedLinearCubicNaturalSpline",
    "MixedLinearMonotonicCubicNaturalSpline",
]
