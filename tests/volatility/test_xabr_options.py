from __future__ import annotations

import pytest

from interpcal.optimization import EndCriteria, LevenbergMarquardt
from interpcal.volatility import XABRCalibrationOptions


def test_defaults():
    options = XABRCalibrationOptions()
    assert options.vega_weighted is None
    assert options.error_accept == 0.002
    assert options.max_guesses == 50
    assert options.halton_seed == 42


def test_from_mapping_applies_overrides():
    options = XABRCalibrationOptions.from_mapping({"error_accept": 1e-4, "use_max_error": True})
    assert options.error_accept == 1e-4
    assert options.use_max_error
    assert options.max_guesses == 50


def test_from_mapping_passes_instances_through():
    options = XABRCalibrationOptions(max_guesses=3)
    assert XABRCalibrationOptions.from_mapping(options) is options
    assert XABRCalibrationOptions.from_mapping(None) == XABRCalibrationOptions()


def test_unknown_keys_are_rejected():
    with pytest.raises(TypeError, match=r"\['tolerance'\]"):
        XABRCalibrationOptions.from_mapping({"tolerance": 1e-3})


def test_to_mapping_round_trips():
    options = XABRCalibrationOptions(max_iterations=500, xtol=1e-10)
    mapping = options.to_mapping()
    assert set(mapping) == XABRCalibrationOptions.field_names()
    assert XABRCalibrationOptions.from_mapping(mapping) == options


def test_builds_end_criteria_and_optimizer():
    options = XABRCalibrationOptions(max_iterations=500, function_epsilon=1e-6, epsfcn=1e-10)

    criteria = options.end_criteria()
    assert isinstance(criteria, EndCriteria)
    assert criteria.max_iterations == 500
    assert criteria.function_epsilon == 1e-6

    optimizer = options.optimizer()
    assert isinstance(optimizer, LevenbergMarquardt)
    assert optimizer.epsfcn == 1e-10


def test_constraint_defaults_to_none_and_survives_mapping():
    assert XABRCalibrationOptions().constraint is None

    def negative_rho(params, forward):
        return params[3] < 0.0

    options = XABRCalibrationOptions.from_mapping({"constraint": negative_rho})
    assert options.to_mapping()["constraint"] is negative_rho
    assert XABRCalibrationOptions.from_mapping(options.to_mapping()) == options
