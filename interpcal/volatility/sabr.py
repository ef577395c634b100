"""SABR implied volatility expansions and the SABR calibration model."""

from __future__ import annotations

import math
from enum import Enum
from typing import Optional, Sequence

import numpy as np

from interpcal.core.errors import InvalidInputError
from interpcal.core.utils import EPSILON, close

from .black import bachelier_std_dev_derivative, black_std_dev_derivative


class VolatilityType(Enum):
    SHIFTED_LOGNORMAL = "shifted_lognormal"
    NORMAL = "normal"


class SabrApproximationModel(Enum):
    HAGAN_2002 = "hagan2002"
    OBLOJ_2008 = "obloj2008"


def validate_sabr_parameters(alpha: float, beta: float, nu: float, rho: float) -> None:
    """Raise :class:`InvalidInputError` unless the SABR parameters are admissible."""

    if not alpha > 0.0:
        raise InvalidInputError(f"alpha must be positive: {alpha} not allowed")
    if not 0.0 <= beta <= 1.0:
        raise InvalidInputError(f"beta must be in [0.0, 1.0]: {beta} not allowed")
    if not nu >= 0.0:
        raise InvalidInputError(f"nu must be non negative: {nu} not allowed")
    if not rho * rho < 1.0:
        raise InvalidInputError(f"rho square must be less than one: {rho} not allowed")


def _log_moneyness(forward: float, strike: float) -> float:
    if not close(forward, strike):
        return math.log(forward / strike)
    epsilon = (forward - strike) / strike
    return epsilon - 0.5 * epsilon * epsilon


def _zeta_over_x(zeta: float, rho: float) -> float:
    """``zeta / x(zeta)`` with ``x(zeta) = log((sqrt(1 - 2 rho zeta + zeta^2) + zeta - rho) / (1 - rho))``."""

    if abs(zeta) < 1.0e-8:
        return 1.0 - 0.5 * rho * zeta
    x = math.log((math.sqrt(1.0 - 2.0 * rho * zeta + zeta * zeta) + zeta - rho) / (1.0 - rho))
    return zeta / x


def _backbone_integral(forward: float, strike: float, beta: float) -> float:
    """Integral of ``u^-beta`` from ``strike`` to ``forward``."""

    if beta == 1.0:
        return math.log(forward / strike)
    one_minus_beta = 1.0 - beta
    return (forward**one_minus_beta - strike**one_minus_beta) / one_minus_beta


def unsafe_sabr_volatility(
    strike: float,
    forward: float,
    expiry: float,
    alpha: float,
    beta: float,
    nu: float,
    rho: float,
    approximation_model: SabrApproximationModel = SabrApproximationModel.HAGAN_2002,
) -> float:
    """Lognormal SABR volatility without argument checks."""

    one_minus_beta = 1.0 - beta
    log_m = _log_moneyness(forward, strike)

    if approximation_model is SabrApproximationModel.HAGAN_2002:
        a = (forward * strike) ** one_minus_beta
        sqrt_a = math.sqrt(a)
        z = (nu / alpha) * sqrt_a * log_m
        b = 1.0 - 2.0 * rho * z + z * z
        c = one_minus_beta**2 * log_m**2
        denominator = sqrt_a * (1.0 + c / 24.0 + c * c / 1920.0)
        d = 1.0 + expiry * (
            one_minus_beta**2 * alpha**2 / (24.0 * a)
            + 0.25 * rho * beta * nu * alpha / sqrt_a
            + (2.0 - 3.0 * rho * rho) * nu * nu / 24.0
        )
        if abs(z * z) > EPSILON * 10.0:
            multiplier = z / math.log((math.sqrt(b) + z - rho) / (1.0 - rho))
        else:
            multiplier = 1.0 - 0.5 * rho * z - (3.0 * rho * rho - 2.0) * z * z / 12.0
        return (alpha / denominator) * multiplier * d

    if approximation_model is SabrApproximationModel.OBLOJ_2008:
        f_mid = math.sqrt(forward * strike)
        gamma1 = beta / f_mid
        gamma2 = -beta * one_minus_beta / (f_mid * f_mid)
        if close(forward, strike):
            level = alpha * f_mid ** (beta - 1.0)
        else:
            level = alpha * log_m / _backbone_integral(forward, strike, beta)
        zeta = nu / alpha * _backbone_integral(forward, strike, beta)
        d = 1.0 + (
            (2.0 * gamma2 - gamma1 * gamma1 + 1.0 / (f_mid * f_mid))
            / 24.0
            * alpha
            * alpha
            * f_mid ** (2.0 * beta)
            + rho * gamma1 / 4.0 * alpha * f_mid**beta * nu
            + (2.0 - 3.0 * rho * rho) / 24.0 * nu * nu
        ) * expiry
        return level * _zeta_over_x(zeta, rho) * d

    raise InvalidInputError(f"unknown approximation model {approximation_model!r}")


def unsafe_sabr_normal_volatility(
    strike: float,
    forward: float,
    expiry: float,
    alpha: float,
    beta: float,
    nu: float,
    rho: float,
) -> float:
    """Normal (Bachelier) SABR volatility without argument checks."""

    f_mid = (forward + strike) * 0.5 if forward * strike < 0.0 else math.sqrt(forward * strike)
    gamma1 = beta / f_mid
    gamma2 = -beta * (1.0 - beta) / (f_mid * f_mid)
    if close(forward, strike):
        level = alpha * f_mid**beta
        zeta = 0.0
    else:
        integral = _backbone_integral(forward, strike, beta)
        level = alpha * (forward - strike) / integral
        zeta = nu / alpha * integral
    d = 1.0 + (
        (2.0 * gamma2 - gamma1 * gamma1) / 24.0 * alpha * alpha * f_mid ** (2.0 * beta)
        + rho * gamma1 / 4.0 * alpha * f_mid**beta * nu
        + (2.0 - 3.0 * rho * rho) / 24.0 * nu * nu
    ) * expiry
    return level * _zeta_over_x(zeta, rho) * d


def _check_inputs(strike: float, forward: float, expiry: float, shift: float) -> None:
    if not strike + shift > 0.0:
        raise InvalidInputError(f"strike+shift must be positive: {strike}+{shift} not allowed")
    if not forward + shift > 0.0:
        raise InvalidInputError(
            f"at the money forward rate + shift must be positive: {forward} {shift} not allowed"
        )
    if expiry < 0.0:
        raise InvalidInputError(f"expiry time must be non-negative: {expiry} not allowed")


def sabr_volatility(
    strike: float,
    forward: float,
    expiry: float,
    alpha: float,
    beta: float,
    nu: float,
    rho: float,
    shift: float = 0.0,
    approximation_model: SabrApproximationModel = SabrApproximationModel.HAGAN_2002,
) -> float:
    """Shifted lognormal SABR volatility.

    Args:
        strike: Option strike.
        forward: At-the-money forward.
        expiry: Time to expiry in years.
        alpha: Initial volatility level.
        beta: CEV exponent in ``[0, 1]``.
        nu: Volatility of volatility.
        rho: Correlation in ``(-1, 1)``.
        shift: Displacement applied to strike and forward.
        approximation_model: Expansion used for the implied volatility.

    Raises:
        InvalidInputError: If the inputs or parameters are not admissible.
    """

    _check_inputs(strike, forward, expiry, shift)
    validate_sabr_parameters(alpha, beta, nu, rho)
    return unsafe_sabr_volatility(
        strike + shift, forward + shift, expiry, alpha, beta, nu, rho, approximation_model
    )


def sabr_normal_volatility(
    strike: float,
    forward: float,
    expiry: float,
    alpha: float,
    beta: float,
    nu: float,
    rho: float,
    shift: float = 0.0,
) -> float:
    """Shifted normal SABR volatility; arguments as for :func:`sabr_volatility`."""

    _check_inputs(strike, forward, expiry, shift)
    validate_sabr_parameters(alpha, beta, nu, rho)
    return unsafe_sabr_normal_volatility(strike + shift, forward + shift, expiry, alpha, beta, nu, rho)


class SABRSmile:
    """Volatility evaluator for fixed SABR parameters."""

    def __init__(
        self,
        expiry: float,
        forward: float,
        params: Sequence[float],
        shift: float = 0.0,
        volatility_type: VolatilityType = VolatilityType.SHIFTED_LOGNORMAL,
        approximation_model: SabrApproximationModel = SabrApproximationModel.HAGAN_2002,
    ) -> None:
        self.expiry = expiry
        self.forward = forward
        self.alpha, self.beta, self.nu, self.rho = (float(p) for p in params)
        self.shift = shift
        self.volatility_type = volatility_type
        self.approximation_model = approximation_model
        validate_sabr_parameters(self.alpha, self.beta, self.nu, self.rho)

    def volatility(self, strike: float) -> float:
        if self.volatility_type is VolatilityType.SHIFTED_LOGNORMAL:
            return unsafe_sabr_volatility(
                strike + self.shift,
                self.forward + self.shift,
                self.expiry,
                self.alpha,
                self.beta,
                self.nu,
                self.rho,
                self.approximation_model,
            )
        return sabr_normal_volatility(
            strike, self.forward, self.expiry, self.alpha, self.beta, self.nu, self.rho, self.shift
        )


class SABRModel:
    """SABR parametrisation ``[alpha, beta, nu, rho]`` for the XABR engine.

    Positive parameters are mapped through ``x^2 + eps1`` (linear beyond
    ``|x| = 5``), ``beta`` through ``exp(-x^2)`` and ``rho`` through a bounded
    sine, so any unconstrained vector yields an admissible parameter set.

    Args:
        shift: Displacement of strikes and forward.
        volatility_type: Whether quotes are shifted lognormal or normal vols.
        approximation_model: Expansion used for lognormal volatilities.
    """

    name = "sabr"
    vega_weighted_default = True
    parameter_names = ("alpha", "beta", "nu", "rho")
    eps1 = 1.0e-7
    eps2 = 0.9999

    def __init__(
        self,
        shift: float = 0.0,
        volatility_type: VolatilityType = VolatilityType.SHIFTED_LOGNORMAL,
        approximation_model: SabrApproximationModel = SabrApproximationModel.HAGAN_2002,
    ) -> None:
        self.shift = shift
        self.volatility_type = VolatilityType(volatility_type)
        self.approximation_model = SabrApproximationModel(approximation_model)

    @property
    def dimension(self) -> int:
        return 4

    @property
    def _beta_bound(self) -> float:
        return math.sqrt(-math.log(self.eps1))

    def default_values(
        self, params: Sequence[Optional[float]], fixed: Sequence[bool], forward: float, expiry: float
    ) -> list[float]:
        alpha, beta, nu, rho = params
        if beta is None:
            beta = 0.5
        if alpha is None:
            shifted = forward + self.shift
            alpha = 0.2 * (shifted ** (1.0 - beta) if beta < 0.9999 and shifted > 0.0 else 1.0)
        if nu is None:
            nu = math.sqrt(0.4)
        if rho is None:
            rho = 0.0
        return [float(alpha), float(beta), float(nu), float(rho)]

    def guess(
        self,
        values: np.ndarray,
        fixed: Sequence[bool],
        forward: float,
        expiry: float,
        draws: Sequence[float],
    ) -> np.ndarray:
        """Overwrite the free entries of ``values`` from quasi-random ``draws`` in ``[0, 1)``."""

        values = np.array(values, dtype=float)
        draws = iter(draws)
        if not fixed[1]:
            values[1] = (1.0 - 2.0e-6) * next(draws) + 1.0e-6
        if not fixed[0]:
            values[0] = (1.0 - 2.0e-6) * next(draws) + 1.0e-6
            shifted = forward + self.shift
            if values[1] < 0.999 and shifted > 0.0:
                values[0] *= shifted ** (1.0 - values[1])
        if not fixed[2]:
            values[2] = 1.5 * next(draws) + 1.0e-6
        if not fixed[3]:
            values[3] = (2.0 * next(draws) - 1.0) * (1.0 - 1.0e-6)
        return values

    def _positive_direct(self, x: float) -> float:
        if abs(x) < 5.0:
            return x * x + self.eps1
        return 10.0 * abs(x) - 25.0 + self.eps1

    def _positive_inverse(self, y: float) -> float:
        if y < 25.0 + self.eps1:
            return math.sqrt(max(self.eps1, y) - self.eps1)
        return (y - self.eps1 + 25.0) / 10.0

    def direct(
        self, x: Sequence[float], fixed: Sequence[bool], params: Sequence[float], forward: float
    ) -> np.ndarray:
        """Map an unconstrained vector to admissible SABR parameters."""

        y = np.empty(4)
        y[0] = self._positive_direct(x[0])
        if x[1] == 0.0:
            y[1] = 1.0
        elif abs(x[1]) < self._beta_bound:
            y[1] = math.exp(-(x[1] * x[1]))
        else:
            y[1] = self.eps1 if self.volatility_type is VolatilityType.SHIFTED_LOGNORMAL else 0.0
        y[2] = self._positive_direct(x[2])
        if abs(x[3]) < 2.5 * math.pi:
            y[3] = self.eps2 * math.sin(x[3])
        else:
            y[3] = self.eps2 * (1.0 if x[3] > 0.0 else -1.0)
        return y

    def inverse(
        self, y: Sequence[float], fixed: Sequence[bool], params: Sequence[float], forward: float
    ) -> np.ndarray:
        """Map admissible SABR parameters back to the unconstrained space."""

        x = np.empty(4)
        x[0] = self._positive_inverse(y[0])
        x[1] = self._beta_bound if y[1] <= 0.0 else math.sqrt(-math.log(y[1]))
        x[2] = self._positive_inverse(y[2])
        x[3] = math.asin(min(1.0, max(-1.0, y[3] / self.eps2)))
        return x

    def weight(self, strike: float, forward: float, std_dev: float) -> float:
        if self.volatility_type is VolatilityType.SHIFTED_LOGNORMAL:
            return black_std_dev_derivative(strike, forward, std_dev, 1.0, self.shift)
        return bachelier_std_dev_derivative(strike, forward, std_dev, 1.0)

    def instance(self, expiry: float, forward: float, params: Sequence[float]) -> SABRSmile:
        return SABRSmile(
            expiry, forward, params, self.shift, self.volatility_type, self.approximation_model
        )


__all__ = [
    "VolatilityType",
    "SabrApproximationModel",
    "validate_sabr_parameters",
    "unsafe_sabr_volatility",
    "unsafe_sabr_normal_volatility",
    "sabr_volatility",
    "sabr_normal_volatility",
    "SABRSmile",
    "SABRModel",
]
