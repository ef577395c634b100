from __future__ import annotations

import numpy as np
import pytest

from interpcal.core.errors import ExtrapolationError, InvalidInputError
from interpcal.interpolation import (
    BackwardFlat,
    ForwardFlat,
    Linear,
    LinearInterpolation,
)


def test_linear_scenario_value_and_derivative():
    interp = Linear().interpolate([0.0, 1.0, 2.0], [0.0, 2.0, 4.0])

    assert interp.value(0.5) == pytest.approx(1.0)
    for x in (0.0, 0.3, 1.0, 1.7, 2.0):
        assert interp.derivative(x) == pytest.approx(2.0)
        assert interp.second_derivative(x) == 0.0
    assert interp.primitive(2.0) == pytest.approx(4.0)
    assert interp.primitive(1.5) == pytest.approx(2.25)


def test_linear_rejects_extrapolation_unless_enabled():
    interp = LinearInterpolation([0.0, 1.0, 2.0], [0.0, 2.0, 4.0])

    with pytest.raises(ExtrapolationError, match=r"\[0.0, 2.0\].*2.5"):
        interp.value(2.5)
    assert interp.value(2.5, allow_extrapolation=True) == pytest.approx(5.0)

    interp.enable_extrapolation()
    assert interp.value(-1.0) == pytest.approx(-2.0)
    interp.disable_extrapolation()
    with pytest.raises(ExtrapolationError):
        interp.derivative(-1.0)


def test_linear_update_after_in_place_change():
    x = np.array([0.0, 1.0, 2.0])
    y = np.array([0.0, 1.0, 2.0])
    interp = LinearInterpolation(x, y)
    assert interp.value(1.5) == pytest.approx(1.5)

    y[2] = 4.0
    interp.update()
    assert interp.value(1.5) == pytest.approx(2.5)
    assert interp.y_values() is y


def test_call_evaluates_arrays_elementwise():
    interp = LinearInterpolation([0.0, 1.0, 2.0], [0.0, 2.0, 4.0])
    np.testing.assert_allclose(interp(np.array([0.25, 1.25])), [0.5, 2.5])
    assert interp(0.5) == pytest.approx(1.0)


@pytest.mark.parametrize(
    "x, y",
    [
        ([0.0, 1.0, 1.0], [1.0, 2.0, 3.0]),
        ([0.0, 2.0, 1.0], [1.0, 2.0, 3.0]),
        ([0.0, 1.0], [1.0, 2.0, 3.0]),
        ([0.0], [1.0]),
    ],
)
def test_invalid_samples_are_rejected(x, y):
    with pytest.raises(InvalidInputError):
        LinearInterpolation(x, y)


def test_backward_flat_takes_right_value():
    interp = BackwardFlat().interpolate([0.0, 1.0, 2.0], [1.0, 2.0, 3.0])

    assert interp.value(0.0) == 1.0
    assert interp.value(0.5) == 2.0
    assert interp.value(1.0) == 2.0
    assert interp.value(1.5) == 3.0
    assert interp.derivative(0.5) == 0.0
    assert interp.primitive(2.0) == pytest.approx(5.0)
    assert interp.primitive(1.5) == pytest.approx(3.5)


def test_forward_flat_takes_left_value():
    interp = ForwardFlat().interpolate([0.0, 1.0, 2.0], [1.0, 2.0, 3.0])

    assert interp.value(0.5) == 1.0
    assert interp.value(1.0) == 2.0
    assert interp.value(2.0) == 3.0
    assert interp.primitive(2.0) == pytest.approx(3.0)
    assert interp.primitive(0.5) == pytest.approx(0.5)
