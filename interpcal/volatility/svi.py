"""Raw SVI total variance and the SVI calibration model."""

from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np

from interpcal.core.errors import InvalidInputError

from .black import black_std_dev_derivative


def svi_total_variance(
    a: float, b: float, sigma: float, rho: float, m: float, k: float
) -> float:
    """Raw SVI total implied variance ``w(k) = a + b (rho (k - m) + sqrt((k - m)^2 + sigma^2))``."""

    diff = k - m
    return a + b * (rho * diff + math.sqrt(diff * diff + sigma * sigma))


def check_svi_parameters(
    a: float, b: float, sigma: float, rho: float, m: float, expiry: float | None = None
) -> None:
    """Raise :class:`InvalidInputError` unless the raw SVI parameters are admissible.

    The conditions are those of Gatheral: non-negative minimum variance and
    Lee's moment bound on the wing slopes.
    """

    if b < 0.0:
        raise InvalidInputError(f"b ({b}) must be non negative")
    if not abs(rho) < 1.0:
        raise InvalidInputError(f"rho ({rho}) must be in (-1,1)")
    if not sigma > 0.0:
        raise InvalidInputError(f"sigma ({sigma}) must be positive")
    if a + b * sigma * math.sqrt(1.0 - rho * rho) < 0.0:
        raise InvalidInputError(
            f"a + b sigma sqrt(1-rho^2) (a={a}, b={b}, sigma={sigma}, rho={rho}) must be non negative"
        )
    if b * (1.0 + abs(rho)) >= 4.0:
        raise InvalidInputError(f"b(1+|rho|) must be less than 4 (b={b}, rho={rho})")
    if expiry is not None and expiry <= 0.0:
        raise InvalidInputError(f"expiry ({expiry}) must be positive")


class SVISmile:
    """Volatility evaluator for fixed raw SVI parameters."""

    def __init__(self, expiry: float, forward: float, params: Sequence[float]) -> None:
        self.expiry = expiry
        self.forward = forward
        self.a, self.b, self.sigma, self.rho, self.m = (float(p) for p in params)
        check_svi_parameters(self.a, self.b, self.sigma, self.rho, self.m, expiry)

    def total_variance(self, strike: float) -> float:
        k = math.log(strike / self.forward)
        return svi_total_variance(self.a, self.b, self.sigma, self.rho, self.m, k)

    def volatility(self, strike: float) -> float:
        return math.sqrt(max(0.0, self.total_variance(strike)) / self.expiry)


class SVIModel:
    """Raw SVI parametrisation ``[a, b, sigma, rho, m]`` for the XABR engine.

    ``sigma`` goes through a squared map, ``rho`` through a bounded sine and
    ``b`` through an arctangent capped by the moment bound
    ``b (1 + |rho|) < 4``; ``a`` is expressed relative to the minimum
    variance so that it can never become negative.
    """

    name = "svi"
    vega_weighted_default = False
    parameter_names = ("a", "b", "sigma", "rho", "m")
    eps1 = 1.0e-6
    eps2 = 0.999999

    @property
    def dimension(self) -> int:
        return 5

    def default_values(
        self, params: Sequence[Optional[float]], fixed: Sequence[bool], forward: float, expiry: float
    ) -> list[float]:
        a, b, sigma, rho, m = params
        if sigma is None:
            sigma = 0.1
        if rho is None:
            rho = -0.4
        if m is None:
            m = 0.0
        if b is None:
            b = 2.0 / (1.0 + abs(rho))
        if a is None:
            a = max(
                0.20 * 0.20 * expiry - b * (rho * -m + math.sqrt(m * m + sigma * sigma)),
                -b * sigma * math.sqrt(1.0 - rho * rho) + self.eps1,
            )
        return [float(a), float(b), float(sigma), float(rho), float(m)]

    def guess(
        self,
        values: np.ndarray,
        fixed: Sequence[bool],
        forward: float,
        expiry: float,
        draws: Sequence[float],
    ) -> np.ndarray:
        values = np.array(values, dtype=float)
        draws = iter(draws)
        if not fixed[2]:
            values[2] = next(draws) + self.eps1
        if not fixed[3]:
            values[3] = (2.0 * next(draws) - 1.0) * self.eps2
        if not fixed[4]:
            values[4] = 2.0 * next(draws) - 1.0
        if not fixed[1]:
            values[1] = next(draws) * 4.0 / (1.0 + abs(values[3])) * self.eps2
        if not fixed[0]:
            values[0] = next(draws) * expiry - self.eps2 * (
                values[1] * values[2] * math.sqrt(1.0 - values[3] * values[3])
            )
        return values

    def direct(
        self, x: Sequence[float], fixed: Sequence[bool], params: Sequence[float], forward: float
    ) -> np.ndarray:
        y = np.empty(5)
        y[2] = x[2] * x[2] + self.eps1
        y[3] = math.sin(x[3]) * self.eps2
        y[4] = x[4]
        if fixed[1]:
            y[1] = params[1]
        else:
            y[1] = (
                (math.atan(x[1]) + math.pi / 2.0) / math.pi * self.eps2 * 4.0 / (1.0 + abs(y[3]))
            )
        if fixed[0]:
            y[0] = params[0]
        else:
            y[0] = self.eps1 + x[0] * x[0] - y[1] * y[2] * math.sqrt(1.0 - y[3] * y[3])
        return y

    def inverse(
        self, y: Sequence[float], fixed: Sequence[bool], params: Sequence[float], forward: float
    ) -> np.ndarray:
        x = np.empty(5)
        x[2] = math.sqrt(max(0.0, y[2] - self.eps1))
        x[3] = math.asin(y[3] / self.eps2)
        x[4] = y[4]
        x[1] = math.tan(y[1] / 4.0 * (1.0 + abs(y[3])) / self.eps2 * math.pi - math.pi / 2.0)
        x[0] = math.sqrt(max(0.0, y[0] - self.eps1 + y[1] * y[2] * math.sqrt(1.0 - y[3] * y[3])))
        return x

    def weight(self, strike: float, forward: float, std_dev: float) -> float:
        return black_std_dev_derivative(strike, forward, std_dev, 1.0)

    def instance(self, expiry: float, forward: float, params: Sequence[float]) -> SVISmile:
        return SVISmile(expiry, forward, params)


__all__ = ["svi_total_variance", "check_svi_parameters", "SVISmile", "SVIModel"]
