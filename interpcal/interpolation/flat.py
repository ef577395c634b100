"""Step interpolations used for piecewise constant rates."""

from __future__ import annotations

from typing import Iterable

import numpy as np

from .base import Interpolation


class BackwardFlatInterpolation(Interpolation):
    """Takes the value of the right sample on each ``(x[j], x[j+1]]``."""

    def __init__(self, x: Iterable[float], y: Iterable[float]):
        super().__init__(x, y)
        self._calculate()

    def _calculate(self) -> None:
        areas = np.diff(self._x) * self._y[1:]
        self._primitive_const = np.concatenate(([0.0], np.cumsum(areas)))

    def _value(self, x: float) -> float:
        if x <= self._x[0]:
            return float(self._y[0])
        j = self.locate(x)
        if x == self._x[j]:
            return float(self._y[j])
        return float(self._y[j + 1])

    def _derivative(self, x: float) -> float:
        return 0.0

    def _second_derivative(self, x: float) -> float:
        return 0.0

    def _primitive(self, x: float) -> float:
        j = self.locate(x)
        return float(self._primitive_const[j] + (x - self._x[j]) * self._y[j + 1])


class ForwardFlatInterpolation(Interpolation):
    """Takes the value of the left sample on each ``[x[j], x[j+1])``."""

    def __init__(self, x: Iterable[float], y: Iterable[float]):
        super().__init__(x, y)
        self._calculate()

    def _calculate(self) -> None:
        areas = np.diff(self._x) * self._y[:-1]
        self._primitive_const = np.concatenate(([0.0], np.cumsum(areas)))

    def _value(self, x: float) -> float:
        if x >= self._x[-1]:
            return float(self._y[-1])
        return float(self._y[self.locate(x)])

    def _derivative(self, x: float) -> float:
        return 0.0

    def _second_derivative(self, x: float) -> float:
        return 0.0

    def _primitive(self, x: float) -> float:
        j = self.locate(x)
        return float(self._primitive_const[j] + (x - self._x[j]) * self._y[j])


class BackwardFlat:
    is_global = False
    required_points = 2

    def interpolate(self, x: Iterable[float], y: Iterable[float]) -> BackwardFlatInterpolation:
        return BackwardFlatInterpolation(x, y)


class ForwardFlat:
    is_global = False
    required_points = 2

    def interpolate(self, x: Iterable[float], y: Iterable[float]) -> ForwardFlatInterpolation:
        return ForwardFlatInterpolation(x, y)


__all__ = [
    "BackwardFlatInterpolation",
    "ForwardFlatInterpolation",
    "BackwardFlat",
    "ForwardFlat",
]
