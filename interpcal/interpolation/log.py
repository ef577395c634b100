"""Interpolation of ``log(y)`` by any one-dimensional scheme."""

from __future__ import annotations

from typing import Iterable

import numpy as np

from interpcal.core.errors import InvalidInputError, UnsupportedOperationError

from .base import Interpolation, InterpolationFactory
from .cubic import Cubic, CubicNaturalSpline, MonotonicCubicNaturalSpline, Parabolic
from .linear import Linear
from .mixed import MixedBehavior, MixedLinearCubic


class LogInterpolation(Interpolation):
    """Exponential of an interpolation fitted to ``log(y)``.

    Args:
        x: Strictly increasing abscissas.
        y: Strictly positive ordinates.
        factory: Builds the interpolation of the log values.

    Raises:
        InvalidInputError: If any ordinate is not strictly positive.
    """

    def __init__(self, x: Iterable[float], y: Iterable[float], factory: InterpolationFactory):
        super().__init__(x, y, required_points=factory.required_points)
        self._log_y = np.empty_like(self._y)
        self._fill_logs()
        self._inner = factory.interpolate(self._x, self._log_y)

    def _fill_logs(self) -> None:
        if np.any(self._y <= 0.0):
            bad = int(np.argmax(self._y <= 0.0))
            raise InvalidInputError(
                f"invalid value ({self._y[bad]}) at index {bad}: log interpolation needs positive values"
            )
        np.log(self._y, out=self._log_y)

    def _calculate(self) -> None:
        self._fill_logs()
        self._inner.update()

    def _value(self, x: float) -> float:
        return float(np.exp(self._inner.value(x, True)))

    def _derivative(self, x: float) -> float:
        return self._value(x) * self._inner.derivative(x, True)

    def _second_derivative(self, x: float) -> float:
        inner_first = self._inner.derivative(x, True)
        inner_second = self._inner.second_derivative(x, True)
        return self._value(x) * (inner_first * inner_first + inner_second)

    def _primitive(self, x: float) -> float:
        raise UnsupportedOperationError("log interpolation does not provide primitives")


class _LogFactory:
    """Wraps a factory so that it interpolates in log space."""

    def __init__(self, factory: InterpolationFactory) -> None:
        self.factory = factory

    @property
    def is_global(self) -> bool:
        return self.factory.is_global

    @property
    def required_points(self) -> int:
        return self.factory.required_points

    def interpolate(self, x: Iterable[float], y: Iterable[float]) -> LogInterpolation:
        return LogInterpolation(x, y, self.factory)


class LogLinear(_LogFactory):
    def __init__(self) -> None:
        super().__init__(Linear())


class LogCubic(_LogFactory):
    """Log-space cubic; takes the same arguments as :class:`Cubic`."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(Cubic(*args, **kwargs))


class LogCubicNaturalSpline(_LogFactory):
    def __init__(self) -> None:
        super().__init__(CubicNaturalSpline())


class MonotonicLogCubicNaturalSpline(_LogFactory):
    def __init__(self) -> None:
        super().__init__(MonotonicCubicNaturalSpline())


class LogParabolic(_LogFactory):
    def __init__(self, monotonic: bool = False) -> None:
        super().__init__(Parabolic(monotonic=monotonic))


class LogMixedLinearCubic(_LogFactory):
    """Log-linear up to ``switch_index``, log-cubic afterwards."""

    def __init__(
        self,
        switch_index: int,
        behavior: MixedBehavior = MixedBehavior.SHARE_RANGES,
        *cubic_args,
        **cubic_kwargs,
    ) -> None:
        super().__init__(MixedLinearCubic(switch_index, behavior, *cubic_args, **cubic_kwargs))


__all__ = [
    "LogInterpolation",
    "LogLinear",
    "LogCubic",
    "LogCubicNaturalSpline",
    "MonotonicLogCubicNaturalSpline",
    "LogParabolic",
    "LogMixedLinearCubic",
]
