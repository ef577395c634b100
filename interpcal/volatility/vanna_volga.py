"""Vanna-Volga smile through three quoted volatilities.

The middle quote is taken as the at-the-money volatility. A call at any strike
is priced with that flat volatility and corrected by a portfolio of the three
quoted calls whose weights match its vega, vanna and volga; the corrected
price is inverted back to a volatility.
"""

from __future__ import annotations

import math
from typing import Iterable

import numpy as np
from scipy.stats import norm

from interpcal.core.errors import InvalidInputError
from interpcal.interpolation.base import Interpolation
from interpcal.interpolation.registry import register_interpolator

from .black import black_formula, black_implied_std_dev


class VannaVolgaInterpolation(Interpolation):
    """Vanna-Volga interpolation of an FX-style three point smile.

    Args:
        x: Three strictly increasing, positive strikes.
        y: Volatilities quoted at ``x``; ``y[1]`` is the at-the-money quote.
        spot: Spot of the underlying.
        d_discount: Domestic discount factor to expiry.
        f_discount: Foreign discount factor to expiry.
        expiry: Time to expiry in years.

    Raises:
        InvalidInputError: If not exactly three positive strikes are given or
            the market data are not positive.
    """

    def __init__(
        self,
        x: Iterable[float],
        y: Iterable[float],
        spot: float,
        d_discount: float,
        f_discount: float,
        expiry: float,
    ) -> None:
        super().__init__(x, y, required_points=3)
        if self._x.size != 3:
            raise InvalidInputError(
                f"Vanna-Volga interpolates exactly 3 volatilities, {self._x.size} given"
            )
        if self._x[0] <= 0.0:
            raise InvalidInputError(f"strikes must be positive, got {self._x[0]}")
        for name, value in (
            ("spot", spot),
            ("d_discount", d_discount),
            ("f_discount", f_discount),
            ("expiry", expiry),
        ):
            if not value > 0.0:
                raise InvalidInputError(f"{name} ({value}) must be positive")
        self.spot = float(spot)
        self.d_discount = float(d_discount)
        self.f_discount = float(f_discount)
        self.expiry = float(expiry)
        self._calculate()

    def _calculate(self) -> None:
        if not np.all(self._y > 0.0):
            raise InvalidInputError("Vanna-Volga volatilities must be positive")
        self.atm_vol = float(self._y[1])
        self.forward = self.spot * self.f_discount / self.d_discount
        sqrt_t = math.sqrt(self.expiry)
        self._premia_bs = np.array(
            [self._call(strike, self.atm_vol * sqrt_t) for strike in self._x]
        )
        self._premia_mkt = np.array(
            [self._call(strike, vol * sqrt_t) for strike, vol in zip(self._x, self._y)]
        )
        self._vegas = np.array([self._vega(strike) for strike in self._x])

    def _call(self, strike: float, std_dev: float) -> float:
        return black_formula(strike, self.forward, std_dev, self.d_discount)

    def _vega(self, strike: float) -> float:
        sqrt_t = math.sqrt(self.expiry)
        d1 = (math.log(self.forward / strike) + 0.5 * self.atm_vol**2 * self.expiry) / (
            self.atm_vol * sqrt_t
        )
        return self.spot * self.d_discount * sqrt_t * float(norm.pdf(d1))

    def weights(self, strike: float) -> np.ndarray:
        """Amounts of the three quoted calls hedging a call struck at ``strike``."""

        if strike <= 0.0:
            raise InvalidInputError(f"strike ({strike}) must be positive")
        k0, k1, k2 = self._x
        log = math.log
        vega = self._vega(strike)
        return np.array(
            [
                vega
                / self._vegas[0]
                * log(k1 / strike)
                * log(k2 / strike)
                / (log(k1 / k0) * log(k2 / k0)),
                vega
                / self._vegas[1]
                * log(strike / k0)
                * log(k2 / strike)
                / (log(k1 / k0) * log(k2 / k1)),
                vega
                / self._vegas[2]
                * log(strike / k0)
                * log(strike / k1)
                / (log(k2 / k0) * log(k2 / k1)),
            ]
        )

    def _value(self, x: float) -> float:
        sqrt_t = math.sqrt(self.expiry)
        price = self._call(x, self.atm_vol * sqrt_t) + float(
            np.dot(self.weights(x), self._premia_mkt - self._premia_bs)
        )
        std_dev = black_implied_std_dev(x, self.forward, price, self.d_discount)
        return std_dev / sqrt_t


class VannaVolga:
    """Factory for :class:`VannaVolgaInterpolation` bound to market data."""

    is_global = True
    required_points = 3

    def __init__(self, spot: float, d_discount: float, f_discount: float, expiry: float) -> None:
        self.spot = spot
        self.d_discount = d_discount
        self.f_discount = f_discount
        self.expiry = expiry

    def interpolate(self, x: Iterable[float], y: Iterable[float]) -> VannaVolgaInterpolation:
        return VannaVolgaInterpolation(
            x, y, self.spot, self.d_discount, self.f_discount, self.expiry
        )


register_interpolator("vanna_volga", VannaVolga)


__all__ = ["VannaVolgaInterpolation", "VannaVolga"]
