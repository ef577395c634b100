from __future__ import annotations

import numpy as np
import pytest

from interpcal.core.errors import InvalidInputError
from interpcal.optimization import EndCriteria, EndCriteriaType, LevenbergMarquardt, Projection


def _exponential_fit():
    t = np.linspace(0.0, 2.0, 9)
    observed = 1.5 * np.exp(-0.8 * t)

    def residuals(params):
        return params[0] * np.exp(params[1] * t) - observed

    return residuals


def test_recovers_exponential_decay():
    result = LevenbergMarquardt().minimize(_exponential_fit(), np.array([1.0, 0.0]), EndCriteria())

    np.testing.assert_allclose(result.x, [1.5, -0.8], rtol=1e-6)
    assert result.cost < 1e-12
    assert EndCriteria.succeeded(result.end_criteria)
    assert result.nfev > 0


def test_evaluation_budget_is_reported():
    def rosenbrock(p):
        return np.array([10.0 * (p[1] - p[0] ** 2), 1.0 - p[0]])

    criteria = EndCriteria(max_iterations=4, max_stationary_state_iterations=None)
    result = LevenbergMarquardt().minimize(rosenbrock, np.array([-1.2, 1.0]), criteria)

    assert result.end_criteria is EndCriteriaType.MAX_ITERATIONS
    assert not EndCriteria.succeeded(result.end_criteria)


def test_projected_function_optimises_free_entries_only():
    residuals = _exponential_fit()
    projection = Projection([1.5, 0.0], [True, False])
    result = LevenbergMarquardt().minimize(
        projection.projected_function(residuals),
        projection.project([1.5, 0.0]),
        EndCriteria(),
    )
    np.testing.assert_allclose(projection.include(result.x), [1.5, -0.8], rtol=1e-6)


def test_rejects_underdetermined_problems():
    with pytest.raises(InvalidInputError, match="less functions"):
        LevenbergMarquardt().minimize(lambda p: np.array([p.sum()]), np.zeros(2), EndCriteria())
    with pytest.raises(InvalidInputError):
        LevenbergMarquardt().minimize(lambda p: np.zeros(3), np.zeros(0), EndCriteria())


def test_rejects_negative_tolerance():
    with pytest.raises(InvalidInputError, match="negative x tolerance"):
        LevenbergMarquardt(xtol=-1.0).minimize(_exponential_fit(), np.ones(2), EndCriteria())


def test_stationary_state_limit_does_not_change_the_path():
    loose = LevenbergMarquardt().minimize(
        _exponential_fit(), np.array([1.0, 0.0]), EndCriteria(max_stationary_state_iterations=2)
    )
    strict = LevenbergMarquardt().minimize(
        _exponential_fit(), np.array([1.0, 0.0]), EndCriteria(max_stationary_state_iterations=500)
    )

    np.testing.assert_array_equal(loose.x, strict.x)
    assert loose.nfev == strict.nfev
    assert loose.end_criteria is strict.end_criteria
