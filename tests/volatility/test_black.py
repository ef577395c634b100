from __future__ import annotations

import pytest

from interpcal.core.errors import CalculationError, InvalidInputError
from interpcal.volatility import (
    black_formula,
    black_implied_std_dev,
    black_std_dev_derivative,
)


def test_at_the_money_call_price():
    assert black_formula(100.0, 100.0, 0.2) == pytest.approx(7.9655674554058, rel=1e-10)
    assert black_formula(100.0, 100.0, 0.2, discount=0.9) == pytest.approx(
        0.9 * 7.9655674554058, rel=1e-10
    )


def test_zero_std_dev_gives_discounted_intrinsic():
    assert black_formula(90.0, 100.0, 0.0, discount=0.95) == pytest.approx(9.5)
    assert black_formula(110.0, 100.0, 0.0) == 0.0


@pytest.mark.parametrize("strike", [80.0, 100.0, 125.0])
def test_implied_std_dev_inverts_the_price(strike):
    price = black_formula(strike, 100.0, 0.3, discount=0.97)
    assert black_implied_std_dev(strike, 100.0, price, discount=0.97) == pytest.approx(
        0.3, abs=1e-10
    )


def test_vega_matches_price_sensitivity():
    bump = 1e-6
    slope = (black_formula(95.0, 100.0, 0.25 + bump) - black_formula(95.0, 100.0, 0.25 - bump)) / (
        2.0 * bump
    )
    assert black_std_dev_derivative(95.0, 100.0, 0.25) == pytest.approx(slope, rel=1e-6)


def test_implied_std_dev_rejects_prices_outside_bounds():
    assert black_implied_std_dev(90.0, 100.0, 10.0) == 0.0
    with pytest.raises(CalculationError, match="intrinsic"):
        black_implied_std_dev(90.0, 100.0, 9.0)
    with pytest.raises(CalculationError, match="below discount"):
        black_implied_std_dev(90.0, 100.0, 100.0)
    with pytest.raises(InvalidInputError):
        black_formula(90.0, -1.0, 0.2)
