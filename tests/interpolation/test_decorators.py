from __future__ import annotations

import math

import numpy as np
import pytest

from interpcal.core.errors import (
    ExtrapolationError,
    InvalidInputError,
    UnsupportedOperationError,
)
from interpcal.interpolation import (
    Bicubic,
    Bilinear,
    FlatExtrapolator2D,
    LinearInterpolation,
    LogCubicNaturalSpline,
    LogLinear,
    LogMixedLinearCubic,
    MixedBehavior,
    MixedLinearCubicNaturalSpline,
    MixedLinearMonotonicCubicNaturalSpline,
)


def test_log_linear_is_geometric():
    interp = LogLinear().interpolate([1.0, 2.0], [1.0, math.e])

    assert interp.value(1.5) == pytest.approx(math.sqrt(math.e))
    assert interp.derivative(1.5) == pytest.approx(math.sqrt(math.e))
    assert interp.second_derivative(1.5) == pytest.approx(math.sqrt(math.e))


def test_log_interpolation_rejects_non_positive_values():
    with pytest.raises(InvalidInputError, match="index 1"):
        LogLinear().interpolate([1.0, 2.0, 3.0], [1.0, 0.0, 2.0])

    y = np.array([1.0, 2.0, 3.0])
    interp = LogCubicNaturalSpline().interpolate([0.0, 1.0, 2.0], y)
    y[2] = -1.0
    with pytest.raises(InvalidInputError):
        interp.update()


def test_log_interpolation_tracks_updates_and_has_no_primitive():
    y = np.array([1.0, 2.0, 4.0])
    interp = LogLinear().interpolate([0.0, 1.0, 2.0], y)
    y[2] = 8.0
    interp.update()
    assert interp.value(1.5) == pytest.approx(4.0)

    with pytest.raises(UnsupportedOperationError):
        interp.primitive(1.0)


def test_log_mixed_linear_cubic_reproduces_samples():
    x = np.array([0.0, 1.0, 2.0, 3.0, 4.0])
    y = np.array([1.0, 0.9, 0.85, 0.7, 0.65])
    interp = LogMixedLinearCubic(2).interpolate(x, y)
    np.testing.assert_allclose([interp.value(v) for v in x], y, rtol=1e-12)
    assert interp.value(0.5) == pytest.approx(math.sqrt(0.9))


@pytest.mark.parametrize("behavior", list(MixedBehavior))
def test_mixed_switches_scheme_at_pivot(behavior):
    x = np.array([0.0, 1.0, 2.0, 3.0, 4.0, 5.0])
    y = np.array([0.0, 1.0, 4.0, 9.0, 16.0, 25.0])
    interp = MixedLinearCubicNaturalSpline(2, behavior).interpolate(x, y)
    linear = LinearInterpolation(x, y)

    assert interp.switch_value() == 2.0
    assert interp.value(0.5) == pytest.approx(linear.value(0.5))
    assert interp.derivative(1.5) == pytest.approx(3.0)
    assert interp.value(3.5) != pytest.approx(linear.value(3.5))


@pytest.mark.parametrize("behavior", list(MixedBehavior))
def test_mixed_primitive_is_continuous_at_pivot(behavior):
    x = np.array([0.0, 1.0, 2.0, 3.0, 4.0, 5.0])
    y = np.array([1.0, 2.0, 1.5, 3.0, 2.5, 4.0])
    interp = MixedLinearMonotonicCubicNaturalSpline(3, behavior).interpolate(x, y)

    pivot = interp.switch_value()
    left = interp.primitive(pivot - 1e-10)
    right = interp.primitive(pivot)
    assert left == pytest.approx(right, abs=1e-8)
    assert interp.primitive(1.0) == pytest.approx(1.5)


def test_mixed_rejects_out_of_range_pivot():
    with pytest.raises(InvalidInputError):
        MixedLinearCubicNaturalSpline(5).interpolate([0.0, 1.0, 2.0], [0.0, 1.0, 2.0])


def _grid():
    x = np.array([0.0, 1.0, 2.0, 4.0])
    y = np.array([0.0, 0.5, 2.0])
    z = np.array([[xi + 2.0 * yj + xi * yj for xi in x] for yj in y])
    return x, y, z


def test_bilinear_is_exact_for_bilinear_surface():
    x, y, z = _grid()
    interp = Bilinear().interpolate(x, y, z)

    assert interp.value(1.5, 1.0) == pytest.approx(1.5 + 2.0 + 1.5)
    assert interp.value(4.0, 2.0) == pytest.approx(z[-1, -1])
    assert (interp.x_min, interp.x_max, interp.y_min, interp.y_max) == (0.0, 4.0, 0.0, 2.0)
    assert interp.locate_x(2.5) == 2
    assert interp.locate_y(0.25) == 0
    assert interp.z_data().shape == (3, 4)


def test_2d_range_is_enforced():
    x, y, z = _grid()
    interp = Bilinear().interpolate(x, y, z)

    assert not interp.is_in_range(5.0, 1.0)
    with pytest.raises(ExtrapolationError):
        interp.value(5.0, 1.0)
    with pytest.raises(InvalidInputError):
        Bilinear().interpolate(x, y, z.T)


def test_bicubic_reproduces_grid_and_derivatives():
    x, y, z = _grid()
    interp = Bicubic().interpolate(x, y, z)

    for j, yj in enumerate(y):
        for i, xi in enumerate(x):
            assert interp.value(xi, yj) == pytest.approx(z[j, i], abs=1e-12)
    # The surface is linear along each axis, so natural splines are exact.
    assert interp.value(1.5, 1.0) == pytest.approx(1.5 + 2.0 + 1.5)
    assert interp.derivative_x(1.5, 1.0) == pytest.approx(2.0)
    assert interp.derivative_y(1.5, 1.0) == pytest.approx(3.5)
    assert interp.derivative_xy(1.5, 1.0) == pytest.approx(1.0)
    assert interp.second_derivative_x(1.5, 1.0) == pytest.approx(0.0, abs=1e-10)
    assert interp.second_derivative_y(1.5, 1.0) == pytest.approx(0.0, abs=1e-10)


def test_flat_extrapolator_clamps_to_grid():
    x, y, z = _grid()
    inner = Bilinear().interpolate(x, y, z)
    flat = FlatExtrapolator2D(inner)

    assert flat.value(10.0, 1.0) == pytest.approx(inner.value(4.0, 1.0))
    assert flat.value(-1.0, -3.0) == pytest.approx(z[0, 0])
    assert flat.value(1.5, 1.0) == pytest.approx(inner.value(1.5, 1.0))

    z[0, 0] = 10.0
    flat.update()
    assert flat.value(-1.0, -3.0) == pytest.approx(10.0)
