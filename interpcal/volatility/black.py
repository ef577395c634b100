"""Black and Bachelier formulas: prices, implied standard deviations and vegas.

The vegas weight liquid strikes when calibrating smile models; the call price
and its inverse drive the Vanna-Volga smile.
"""

from __future__ import annotations

import math

from scipy.optimize import brentq
from scipy.stats import norm

from interpcal.core.errors import CalculationError, InvalidInputError
from interpcal.core.utils import close_enough


def _shifted_inputs(
    strike: float, forward: float, std_dev: float, discount: float, displacement: float
) -> tuple[float, float]:
    if discount <= 0.0:
        raise InvalidInputError(f"discount ({discount}) must be positive")
    if std_dev < 0.0:
        raise InvalidInputError(f"stdDev ({std_dev}) must be non-negative")
    if displacement < 0.0:
        raise InvalidInputError(f"displacement ({displacement}) must be non-negative")
    shifted_forward = forward + displacement
    shifted_strike = strike + displacement
    if shifted_forward <= 0.0:
        raise InvalidInputError(
            f"forward + displacement ({forward} + {displacement}) must be positive"
        )
    if shifted_strike < 0.0:
        raise InvalidInputError(
            f"strike + displacement ({strike} + {displacement}) must be non-negative"
        )
    return shifted_strike, shifted_forward


def black_formula(
    strike: float,
    forward: float,
    std_dev: float,
    discount: float = 1.0,
    displacement: float = 0.0,
) -> float:
    """Black call price on a forward, discounted by ``discount``.

    Parameters
    ----------
    strike : float
        Option strike.
    forward : float
        Forward of the underlying.
    std_dev : float
        Total standard deviation ``sigma * sqrt(T)``.
    discount : float, optional
        Discount factor applied to the payoff.
    displacement : float, optional
        Shift added to strike and forward.
    """
    shifted_strike, shifted_forward = _shifted_inputs(
        strike, forward, std_dev, discount, displacement
    )
    if std_dev == 0.0:
        return discount * max(shifted_forward - shifted_strike, 0.0)
    if shifted_strike == 0.0:
        return discount * shifted_forward
    d1 = math.log(shifted_forward / shifted_strike) / std_dev + 0.5 * std_dev
    d2 = d1 - std_dev
    return float(
        discount * (shifted_forward * norm.cdf(d1) - shifted_strike * norm.cdf(d2))
    )


def black_implied_std_dev(
    strike: float,
    forward: float,
    price: float,
    discount: float = 1.0,
    displacement: float = 0.0,
    accuracy: float = 1.0e-12,
    max_iterations: int = 100,
) -> float:
    """Total standard deviation reproducing a Black call ``price``.

    The root is bracketed between zero and a doubling upper bound and solved
    with Brent's method.

    Parameters
    ----------
    strike : float
        Option strike.
    forward : float
        Forward of the underlying.
    price : float
        Discounted call price.
    discount : float, optional
        Discount factor applied to the payoff.
    displacement : float, optional
        Shift added to strike and forward.
    accuracy : float, optional
        Absolute tolerance on the standard deviation.
    max_iterations : int, optional
        Iteration budget of the root search.

    Raises
    ------
    CalculationError
        If ``price`` lies outside ``[intrinsic, discount * forward)`` or the
        root search fails.
    """
    shifted_strike, shifted_forward = _shifted_inputs(
        strike, forward, 0.0, discount, displacement
    )
    intrinsic = discount * max(shifted_forward - shifted_strike, 0.0)
    if price <= intrinsic:
        if close_enough(price, intrinsic):
            return 0.0
        raise CalculationError(f"price ({price}) is below the intrinsic value ({intrinsic})")
    ceiling = discount * shifted_forward
    if price >= ceiling:
        raise CalculationError(f"price ({price}) must be below discount * forward ({ceiling})")

    def error(std_dev: float) -> float:
        return black_formula(strike, forward, std_dev, discount, displacement) - price

    upper = 1.0
    while error(upper) < 0.0:
        upper *= 2.0
        if upper > 1.0e6:
            raise CalculationError(f"could not bracket the implied stdDev of price {price}")
    try:
        return float(brentq(error, 0.0, upper, xtol=accuracy, maxiter=max_iterations))
    except (RuntimeError, ValueError) as exc:
        raise CalculationError(f"implied stdDev search failed for price {price}: {exc}") from exc


def black_std_dev_derivative(
    strike: float,
    forward: float,
    std_dev: float,
    discount: float = 1.0,
    displacement: float = 0.0,
) -> float:
    """Derivative of the (displaced) Black price with respect to ``sigma * sqrt(T)``.

    Parameters
    ----------
    strike : float
        Option strike.
    forward : float
        Forward of the underlying.
    std_dev : float
        Total standard deviation ``sigma * sqrt(T)``.
    discount : float, optional
        Discount factor applied to the payoff.
    displacement : float, optional
        Shift added to strike and forward.
    """
    shifted_strike, shifted_forward = _shifted_inputs(
        strike, forward, std_dev, discount, displacement
    )
    if std_dev == 0.0 or shifted_strike == 0.0:
        return 0.0
    d1 = math.log(shifted_forward / shifted_strike) / std_dev + 0.5 * std_dev
    return float(discount * shifted_forward * norm.pdf(d1))


def bachelier_std_dev_derivative(
    strike: float, forward: float, std_dev: float, discount: float = 1.0
) -> float:
    """Derivative of the Bachelier price with respect to the normal standard deviation."""
    if discount <= 0.0:
        raise InvalidInputError(f"discount ({discount}) must be positive")
    if std_dev < 0.0:
        raise InvalidInputError(f"stdDev ({std_dev}) must be non-negative")
    if std_dev == 0.0:
        return 0.0
    return float(discount * norm.pdf((forward - strike) / std_dev))


__all__ = [
    "black_formula",
    "black_implied_std_dev",
    "black_std_dev_derivative",
    "bachelier_std_dev_derivative",
]
