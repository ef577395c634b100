"""Piecewise linear interpolation."""

from __future__ import annotations

from typing import Iterable

import numpy as np

from .base import Interpolation


class LinearInterpolation(Interpolation):
    """Straight lines between consecutive samples."""

    def __init__(self, x: Iterable[float], y: Iterable[float]):
        super().__init__(x, y)
        self._calculate()

    def _calculate(self) -> None:
        dx = np.diff(self._x)
        self._slopes = np.diff(self._y) / dx
        segment_areas = dx * (self._y[:-1] + 0.5 * dx * self._slopes)
        self._primitive_const = np.concatenate(([0.0], np.cumsum(segment_areas)))

    def _value(self, x: float) -> float:
        j = self.locate(x)
        return float(self._y[j] + (x - self._x[j]) * self._slopes[j])

    def _derivative(self, x: float) -> float:
        return float(self._slopes[self.locate(x)])

    def _second_derivative(self, x: float) -> float:
        return 0.0

    def _primitive(self, x: float) -> float:
        j = self.locate(x)
        dx = x - self._x[j]
        return float(self._primitive_const[j] + dx * (self._y[j] + 0.5 * dx * self._slopes[j]))


class Linear:
    """Factory for :class:`LinearInterpolation`."""

    is_global = False
    required_points = 2

    def interpolate(self, x: Iterable[float], y: Iterable[float]) -> LinearInterpolation:
        return LinearInterpolation(x, y)


__all__ = ["LinearInterpolation", "Linear"]
