from __future__ import annotations

import logging

import numpy as np
import pytest

from interpcal.core.errors import InvalidInputError, UnsupportedOperationError
from interpcal.optimization import EndCriteriaType
from interpcal.volatility import (
    SABR,
    SABRInterpolation,
    SABRModel,
    SABRSmile,
    SVIModel,
    SVISmile,
    SviInterpolation,
    XABRInterpolation,
)

FORWARD = 0.039
EXPIRY = 1.0
STRIKES = np.array([0.025, 0.032, 0.039, 0.046, 0.053])
SABR_PARAMS = [0.05, 0.5, 0.4, -0.3]

SVI_FORWARD = 100.0
SVI_EXPIRY = 0.5
SVI_STRIKES = np.arange(70.0, 131.0, 10.0)
SVI_PARAMS = [0.02, 0.3, 0.2, -0.3, 0.05]


def _sabr_vols():
    smile = SABRSmile(EXPIRY, FORWARD, SABR_PARAMS)
    return np.array([smile.volatility(k) for k in STRIKES])


def _svi_vols():
    smile = SVISmile(SVI_EXPIRY, SVI_FORWARD, SVI_PARAMS)
    return np.array([smile.volatility(k) for k in SVI_STRIKES])


def test_sabr_recovers_generating_parameters():
    vols = _sabr_vols()
    smile = SABRInterpolation(
        STRIKES, vols, EXPIRY, FORWARD, beta=0.5, beta_is_fixed=True, options={"error_accept": 1e-7}
    )

    assert smile.rms_error < 1e-6
    assert smile.max_error < 1e-6
    assert smile.beta == pytest.approx(0.5)
    assert smile.alpha == pytest.approx(0.05, rel=1e-4)
    assert smile.nu == pytest.approx(0.4, rel=1e-3)
    assert smile.rho == pytest.approx(-0.3, abs=1e-3)
    assert smile.result.trials[0].guess_index == 0
    for strike, vol in zip(STRIKES, vols):
        assert smile.value(strike) == pytest.approx(vol, abs=1e-6)


def test_sabr_uses_normalised_vega_weights():
    smile = SABRInterpolation(
        STRIKES, _sabr_vols(), EXPIRY, FORWARD, *SABR_PARAMS, True, True, True, True
    )
    weights = smile.interpolation_weights

    assert weights.sum() == pytest.approx(1.0)
    assert weights[2] > weights[0]
    assert weights[2] > weights[-1]
    assert smile.vega_weighted


def test_all_fixed_parameters_skip_calibration():
    smile = SviInterpolation(
        SVI_STRIKES,
        _svi_vols(),
        SVI_EXPIRY,
        SVI_FORWARD,
        *SVI_PARAMS,
        a_is_fixed=True,
        b_is_fixed=True,
        sigma_is_fixed=True,
        rho_is_fixed=True,
        m_is_fixed=True,
    )

    assert smile.end_criteria is EndCriteriaType.NONE
    assert smile.result.trials == []
    assert smile.rms_error == pytest.approx(0.0, abs=1e-14)
    np.testing.assert_allclose(smile.params, SVI_PARAMS)
    np.testing.assert_allclose(smile.interpolation_weights, np.full(SVI_STRIKES.size, 1.0 / 7.0))


def test_svi_partial_calibration():
    smile = SviInterpolation(
        SVI_STRIKES,
        _svi_vols(),
        SVI_EXPIRY,
        SVI_FORWARD,
        a=0.03,
        b=0.2,
        sigma=0.1,
        rho=-0.3,
        m=0.05,
        rho_is_fixed=True,
        m_is_fixed=True,
        options={"error_accept": 1e-7},
    )

    assert smile.rms_error < 1e-6
    assert (smile.rho, smile.m) == (pytest.approx(-0.3), 0.05)
    assert smile.a == pytest.approx(0.02, rel=1e-3)
    assert smile.b == pytest.approx(0.3, rel=1e-3)
    assert smile.sigma == pytest.approx(0.2, rel=1e-3)

    frame = smile.result.trials_frame(SVIModel.parameter_names)
    assert list(frame.columns[:4]) == ["guess_index", "error", "end_criteria", "nfev"]
    assert {"start_a", "start_m", "a", "m"} <= set(frame.columns)
    assert frame["guess_index"].tolist() == list(range(len(frame)))
    assert frame["error"].min() == pytest.approx(smile.rms_error)


def _noisy_sabr(**overrides):
    vols = _sabr_vols() + np.array([0.002, -0.001, 0.0015, -0.002, 0.001])
    options = {"error_accept": 0.0, "max_guesses": 3, "use_max_error": True}
    options.update(overrides)
    return SABRInterpolation(
        STRIKES, vols, EXPIRY, FORWARD, beta=0.5, beta_is_fixed=True, options=options
    )


def test_restarts_are_bounded_and_best_attempt_is_kept(caplog):
    with caplog.at_level(logging.WARNING, logger="interpcal.volatility.xabr"):
        smile = _noisy_sabr()

    trials = smile.result.trials
    assert [trial.guess_index for trial in trials] == [0, 1, 2]
    assert smile.max_error == pytest.approx(min(trial.error for trial in trials))
    assert all(trial.start[1] == 0.5 for trial in trials)
    assert "missed error target" in caplog.text


def test_restarts_are_reproducible():
    first = _noisy_sabr().result.trials_frame(SABRModel.parameter_names)
    second = _noisy_sabr().result.trials_frame(SABRModel.parameter_names)
    assert first.equals(second)

    unscrambled = _noisy_sabr(halton_seed=None).result.trials_frame(SABRModel.parameter_names)
    assert len(unscrambled) == 3


def test_vanishing_vega_weights_fall_back_to_uniform(caplog):
    with caplog.at_level(logging.WARNING, logger="interpcal.volatility.xabr"):
        smile = SABRInterpolation(
            STRIKES, np.zeros(STRIKES.size), EXPIRY, FORWARD, *SABR_PARAMS, True, True, True, True
        )

    np.testing.assert_allclose(smile.interpolation_weights, np.full(STRIKES.size, 0.2))
    assert "uniform weights" in caplog.text


def test_smile_is_not_differentiable():
    smile = SABR(EXPIRY, FORWARD, beta=0.5, beta_is_fixed=True).interpolate(STRIKES, _sabr_vols())
    assert isinstance(smile, SABRInterpolation)
    with pytest.raises(UnsupportedOperationError):
        smile.derivative(FORWARD)
    with pytest.raises(UnsupportedOperationError):
        smile.primitive(FORWARD)


def test_invalid_configuration():
    vols = _sabr_vols()
    with pytest.raises(InvalidInputError, match="4 parameters"):
        XABRInterpolation(STRIKES, vols, EXPIRY, FORWARD, [None] * 3, None, SABRModel())
    with pytest.raises(InvalidInputError, match="fixed flags"):
        XABRInterpolation(STRIKES, vols, EXPIRY, FORWARD, [None] * 4, [False], SABRModel())
    with pytest.raises(InvalidInputError, match="max_guesses"):
        SABRInterpolation(STRIKES, vols, EXPIRY, FORWARD, options={"max_guesses": 0})
    with pytest.raises(TypeError, match="Unknown XABR option"):
        SABRInterpolation(STRIKES, vols, EXPIRY, FORWARD, options={"guesses": 3})


def test_constraint_keeps_calibration_inside_admissible_region():
    calls = []

    def rho_below_half(params, forward):
        calls.append(forward)
        return params[3] <= -0.5

    smile = SABRInterpolation(
        STRIKES,
        _sabr_vols(),
        EXPIRY,
        FORWARD,
        alpha=0.05,
        beta=0.5,
        nu=0.4,
        rho=-0.6,
        beta_is_fixed=True,
        options={"constraint": rho_below_half, "max_guesses": 1, "error_accept": 1e-7},
    )

    assert calls and set(calls) == {FORWARD}
    assert smile.rho <= -0.5
    assert rho_below_half(smile.params, FORWARD)
    assert len(smile.result.trials) == 1

    free = SABRInterpolation(
        STRIKES,
        _sabr_vols(),
        EXPIRY,
        FORWARD,
        alpha=0.05,
        beta=0.5,
        nu=0.4,
        rho=-0.6,
        beta_is_fixed=True,
        options={"max_guesses": 1, "error_accept": 1e-7},
    )
    assert free.rho > -0.5
