from __future__ import annotations

import numpy as np
import pytest

from interpcal.core.errors import InvalidInputError, UnsupportedOperationError
from interpcal.interpolation import (
    Akima,
    BackwardFlat,
    BoundaryCondition,
    Cubic,
    CubicInterpolation,
    CubicNaturalSpline,
    CubicSplineOvershootingMinimization1,
    CubicSplineOvershootingMinimization2,
    DerivativeApprox,
    ForwardFlat,
    FritschButland,
    Harmonic,
    Kruger,
    Linear,
    LogCubicNaturalSpline,
    LogLinear,
    LogParabolic,
    MixedLinearCubicNaturalSpline,
    MonotonicCubicNaturalSpline,
    MonotonicParabolic,
    Parabolic,
)

X = np.array([0.0, 0.5, 1.3, 2.0, 3.1, 4.0])
Y = np.array([1.0, 1.4, 1.2, 2.0, 2.6, 2.5])


@pytest.mark.parametrize(
    "factory",
    [
        Linear(),
        BackwardFlat(),
        ForwardFlat(),
        CubicNaturalSpline(),
        MonotonicCubicNaturalSpline(),
        CubicSplineOvershootingMinimization1(),
        CubicSplineOvershootingMinimization2(),
        Parabolic(),
        MonotonicParabolic(),
        FritschButland(),
        Akima(),
        Kruger(),
        Harmonic(),
        Cubic(
            DerivativeApprox.SPLINE,
            left_condition=BoundaryCondition.NOT_A_KNOT,
            right_condition=BoundaryCondition.LAGRANGE,
        ),
        Cubic(
            DerivativeApprox.SPLINE,
            left_condition=BoundaryCondition.FIRST_DERIVATIVE,
            left_value=0.5,
            right_condition=BoundaryCondition.FIRST_DERIVATIVE,
            right_value=-0.1,
        ),
        LogLinear(),
        LogCubicNaturalSpline(),
        LogParabolic(),
        MixedLinearCubicNaturalSpline(2),
    ],
    ids=lambda factory: type(factory).__name__,
)
def test_interpolation_reproduces_samples(factory):
    interp = factory.interpolate(X, Y)
    for x, y in zip(X, Y):
        assert interp.value(x) == pytest.approx(y, rel=1e-10)


def test_natural_spline_has_zero_end_curvature():
    interp = CubicNaturalSpline().interpolate([0.0, 1.0, 2.0, 3.0], [0.0, 1.0, 0.0, 1.0])

    assert interp.second_derivative(0.0) == pytest.approx(0.0, abs=1e-12)
    assert interp.second_derivative(3.0) == pytest.approx(0.0, abs=1e-12)
    assert interp.value(0.5) == pytest.approx(0.75)


def test_natural_spline_curvature_is_continuous():
    interp = CubicNaturalSpline().interpolate(X, Y)
    for knot in X[1:-1]:
        left = interp.second_derivative(knot - 1e-9)
        right = interp.second_derivative(knot + 1e-9)
        assert left == pytest.approx(right, abs=1e-6)
        assert interp.derivative(knot - 1e-9) == pytest.approx(
            interp.derivative(knot + 1e-9), abs=1e-6
        )


@pytest.mark.parametrize(
    "left, right",
    [
        (BoundaryCondition.NOT_A_KNOT, BoundaryCondition.NOT_A_KNOT),
        (BoundaryCondition.LAGRANGE, BoundaryCondition.LAGRANGE),
    ],
)
def test_spline_reproduces_cubic_polynomial(left, right):
    def cubic(x):
        return x**3 - 2.0 * x + 1.0

    interp = CubicInterpolation(
        X, cubic(X), DerivativeApprox.SPLINE, left_condition=left, right_condition=right
    )
    for x in (0.2, 1.7, 3.5):
        assert interp.value(x) == pytest.approx(cubic(x), rel=1e-9)
        assert interp.derivative(x) == pytest.approx(3.0 * x * x - 2.0, rel=1e-9)


def test_spline_primitive_of_linear_data():
    interp = CubicNaturalSpline().interpolate([0.0, 1.0, 2.0, 3.0], [1.0, 3.0, 5.0, 7.0])

    assert interp.primitive(3.0) == pytest.approx(12.0)
    assert interp.primitive(1.5) == pytest.approx(1.5 * 1.5 + 1.5)


def test_not_a_knot_with_two_points_is_a_line():
    interp = CubicInterpolation(
        [0.0, 2.0],
        [1.0, 5.0],
        left_condition=BoundaryCondition.NOT_A_KNOT,
        right_condition=BoundaryCondition.NOT_A_KNOT,
    )
    assert interp.value(0.5) == pytest.approx(2.0)
    assert interp.second_derivative(1.0) == pytest.approx(0.0)


def _assert_non_decreasing(interp, x):
    grid = np.linspace(x[0], x[-1], 2001)
    values = interp(grid)
    assert np.all(np.diff(values) >= -1e-12)


@pytest.mark.parametrize("factory", [Kruger(), FritschButland()], ids=["kruger", "fritsch_butland"])
def test_local_schemes_preserve_monotonicity(factory):
    rng = np.random.default_rng(20240611)
    for _ in range(25):
        x = np.cumsum(rng.uniform(0.1, 1.0, size=8))
        steps = rng.uniform(0.0, 1.0, size=8) * (rng.uniform(size=8) > 0.25)
        y = np.cumsum(steps)
        _assert_non_decreasing(factory.interpolate(x, y), x)


@pytest.mark.parametrize(
    "factory",
    [
        MonotonicCubicNaturalSpline(),
        MonotonicParabolic(),
        Cubic(DerivativeApprox.AKIMA, monotonic=True),
        Cubic(DerivativeApprox.HARMONIC, monotonic=True),
    ],
    ids=["spline", "parabolic", "akima", "harmonic"],
)
def test_hyman_filtered_schemes_preserve_monotonicity(factory):
    rng = np.random.default_rng(7)
    for _ in range(200):
        x = np.cumsum(rng.uniform(0.05, 2.0, size=8))
        steps = rng.uniform(0.0, 1.0, size=8) * (rng.uniform(size=8) > 0.2)
        y = np.cumsum(steps)
        _assert_non_decreasing(factory.interpolate(x, y), x)


def test_akima_treats_nearly_equal_slopes_as_equal():
    # chords are 0.7 then 1.3 up to rounding of the inputs
    x = np.linspace(0.0, 0.6, 7)
    y = np.where(x <= 0.3 + 1e-9, 0.7 * x, 0.21 + 1.3 * (x - 0.3))
    interp = Akima().interpolate(x, y)

    assert interp.derivative(x[2]) == pytest.approx(0.7, rel=1e-12)
    assert interp.derivative(x[3]) == pytest.approx(1.0, rel=1e-12)
    assert interp.derivative(x[4]) == pytest.approx(1.3, rel=1e-12)

    line = Akima().interpolate(x, 0.7 * x + 0.1)
    np.testing.assert_allclose(line(np.linspace(0.0, 0.6, 25)), 0.7 * np.linspace(0.0, 0.6, 25) + 0.1)


def test_hyman_filter_removes_spline_overshoot():
    x = np.arange(6.0)
    y = np.array([0.0, 0.1, 0.2, 2.0, 2.1, 2.2])

    plain = CubicNaturalSpline().interpolate(x, y)
    grid = np.linspace(0.0, 5.0, 501)
    assert np.any(np.diff(plain(grid)) < 0.0)

    filtered = MonotonicCubicNaturalSpline().interpolate(x, y)
    _assert_non_decreasing(filtered, x)
    assert filtered.monotonicity_adjustments
    assert plain.monotonicity_adjustments == {}


def test_unimplemented_schemes_fail_explicitly():
    with pytest.raises(UnsupportedOperationError):
        CubicInterpolation(X, Y, DerivativeApprox.FOURTH_ORDER)
    with pytest.raises(UnsupportedOperationError):
        CubicInterpolation(X, Y, left_condition=BoundaryCondition.PERIODIC)


def test_four_point_schemes_need_four_points():
    with pytest.raises(InvalidInputError):
        CubicInterpolation([0.0, 1.0, 2.0], [0.0, 1.0, 4.0], left_condition=BoundaryCondition.LAGRANGE)
    with pytest.raises(InvalidInputError):
        Akima().interpolate([0.0, 1.0, 2.0], [0.0, 1.0, 4.0])
    assert Akima().required_points == 4
    assert Kruger().required_points == 2


def test_update_recomputes_coefficients():
    y = Y.copy()
    interp = CubicNaturalSpline().interpolate(X, y)
    before = interp.value(1.0)

    y[2] += 1.0
    interp.update()
    assert interp.value(1.3) == pytest.approx(y[2])
    assert interp.value(1.0) != pytest.approx(before)
