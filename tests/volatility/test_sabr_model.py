from __future__ import annotations

import math

import numpy as np
import pytest

from interpcal.core.errors import InvalidInputError
from interpcal.volatility import (
    SABRModel,
    SABRSmile,
    SabrApproximationModel,
    VolatilityType,
    sabr_volatility,
    validate_sabr_parameters,
)

FIXED_NONE = (False, False, False, False)


@pytest.mark.parametrize("model", list(SabrApproximationModel))
def test_lognormal_atm_reduces_to_alpha(model):
    vol = sabr_volatility(0.05, 0.05, 1.0, 0.2, 1.0, 0.0, 0.0, approximation_model=model)
    assert vol == pytest.approx(0.2)


def test_normal_atm_reduces_to_alpha():
    smile = SABRSmile(1.0, 0.01, [0.005, 0.0, 0.0, 0.0], volatility_type=VolatilityType.NORMAL)
    assert smile.volatility(0.01) == pytest.approx(0.005)


def test_hagan_expansions_agree_near_the_money():
    params = dict(expiry=1.0, alpha=0.05, beta=0.5, nu=0.4, rho=-0.3)
    hagan = sabr_volatility(0.040, 0.039, **params)
    obloj = sabr_volatility(0.040, 0.039, approximation_model=SabrApproximationModel.OBLOJ_2008, **params)
    assert hagan == pytest.approx(obloj, rel=5e-3)


def test_negative_correlation_gives_downward_skew():
    smile = SABRSmile(1.0, 0.039, [0.05, 0.5, 0.4, -0.3])
    assert smile.volatility(0.025) > smile.volatility(0.039) > smile.volatility(0.046)


def test_shift_admits_negative_strikes():
    shifted = sabr_volatility(-0.005, 0.01, 1.0, 0.05, 0.5, 0.3, 0.0, shift=0.02)
    plain = sabr_volatility(0.015, 0.03, 1.0, 0.05, 0.5, 0.3, 0.0)
    assert shifted == pytest.approx(plain)
    with pytest.raises(InvalidInputError, match="strike"):
        sabr_volatility(-0.005, 0.01, 1.0, 0.05, 0.5, 0.3, 0.0)


@pytest.mark.parametrize(
    "alpha, beta, nu, rho",
    [(0.0, 0.5, 0.3, 0.0), (0.1, 1.5, 0.3, 0.0), (0.1, 0.5, -0.1, 0.0), (0.1, 0.5, 0.3, 1.0)],
)
def test_invalid_parameters(alpha, beta, nu, rho):
    with pytest.raises(InvalidInputError):
        validate_sabr_parameters(alpha, beta, nu, rho)


def test_default_values():
    model = SABRModel()
    alpha, beta, nu, rho = model.default_values([None] * 4, FIXED_NONE, 0.039, 1.0)
    assert beta == 0.5
    assert alpha == pytest.approx(0.2 * math.sqrt(0.039))
    assert nu == pytest.approx(math.sqrt(0.4))
    assert rho == 0.0

    assert model.default_values([0.1, 0.7, 0.2, -0.1], FIXED_NONE, 0.039, 1.0) == [0.1, 0.7, 0.2, -0.1]


def test_direct_inverts_inverse_on_admissible_parameters():
    model = SABRModel()
    rng = np.random.default_rng(11)
    for _ in range(200):
        y = np.array(
            [
                rng.uniform(0.01, 1.0),
                rng.uniform(0.05, 1.0),
                rng.uniform(0.01, 2.0),
                rng.uniform(-0.99, 0.99),
            ]
        )
        x = model.inverse(y, FIXED_NONE, y, 0.039)
        np.testing.assert_allclose(model.direct(x, FIXED_NONE, y, 0.039), y, rtol=1e-9, atol=1e-12)


def test_inverse_inverts_direct_on_principal_branch():
    model = SABRModel()
    rng = np.random.default_rng(12)
    for _ in range(200):
        x = np.array(
            [
                rng.uniform(0.1, 4.9),
                rng.uniform(0.1, 3.9),
                rng.uniform(0.1, 4.9),
                rng.uniform(-1.5, 1.5),
            ]
        )
        y = model.direct(x, FIXED_NONE, np.zeros(4), 0.039)
        np.testing.assert_allclose(model.inverse(y, FIXED_NONE, y, 0.039), x, rtol=1e-7)


def test_direct_always_yields_admissible_parameters():
    model = SABRModel()
    for x in ([0.0, 0.0, 0.0, 0.0], [12.0, 9.0, -30.0, 20.0], [-3.0, -1.0, 7.0, -2.0]):
        alpha, beta, nu, rho = model.direct(np.array(x), FIXED_NONE, np.zeros(4), 0.039)
        validate_sabr_parameters(alpha, beta, nu, rho)
    assert model.direct(np.zeros(4), FIXED_NONE, np.zeros(4), 0.039)[1] == 1.0


def test_guess_leaves_fixed_entries_untouched():
    model = SABRModel()
    start = np.array([0.05, 0.5, 0.4, -0.3])
    fixed = (False, True, False, False)
    guess = model.guess(start, fixed, 0.039, 1.0, [0.5, 0.5, 0.5])

    assert guess[1] == 0.5
    assert guess[0] == pytest.approx((0.5 * (1.0 - 2.0e-6) + 1.0e-6) * math.sqrt(0.039))
    assert guess[2] == pytest.approx(0.75 + 1.0e-6)
    assert guess[3] == pytest.approx(0.0)
    np.testing.assert_array_equal(start, [0.05, 0.5, 0.4, -0.3])


def test_inverse_tolerates_correlation_beyond_bound():
    model = SABRModel()
    x = model.inverse([0.05, 0.5, 0.4, 0.99999], FIXED_NONE, np.zeros(4), 0.039)
    assert x[3] == pytest.approx(math.pi / 2.0)


def test_vega_weight_is_black_vega():
    model = SABRModel()
    assert model.weight(0.04, 0.04, 0.2) > model.weight(0.08, 0.04, 0.2) > 0.0
