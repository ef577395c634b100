"""Levenberg-Marquardt least squares on top of MINPACK ``lmdif``."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

import numpy as np
from scipy.optimize import least_squares

from interpcal.core.errors import CalculationError, InvalidInputError
from interpcal.logging import get_logger

from .end_criteria import EndCriteria, EndCriteriaType

logger = get_logger(__name__)

Residuals = Callable[[np.ndarray], np.ndarray]

# scipy status codes of method="lm" (MINPACK info 5 is reported as 0).
_STATUS_TO_END_CRITERIA = {
    0: EndCriteriaType.MAX_ITERATIONS,
    1: EndCriteriaType.ZERO_GRADIENT_NORM,
    2: EndCriteriaType.STATIONARY_FUNCTION_VALUE,
    3: EndCriteriaType.STATIONARY_POINT,
    4: EndCriteriaType.STATIONARY_FUNCTION_VALUE,
}


@dataclass
class MinimizationResult:
    """Outcome of one minimisation.

    Args:
        x: Final parameter vector.
        end_criteria: Reason the minimiser stopped.
        cost: Half the sum of squared residuals at ``x``.
        nfev: Number of residual evaluations.
        status: Raw status reported by the minimiser.
        message: Human readable termination message.
    """

    x: np.ndarray
    end_criteria: EndCriteriaType
    cost: float
    nfev: int
    status: int
    message: str


class LevenbergMarquardt:
    """Unconstrained Levenberg-Marquardt with forward-difference Jacobians.

    Args:
        epsfcn: Relative error of the residual function; the finite
            difference step is its square root.
        xtol: Relative tolerance on the parameter step. Defaults to the root
            epsilon of the end criteria.
        gtol: Tolerance on the orthogonality between residuals and Jacobian.
            Defaults to the gradient norm epsilon of the end criteria.

    MINPACK has no stationary-state counter, so
    ``EndCriteria.max_stationary_state_iterations`` is not used here; the
    minimiser stops on ``max_iterations`` and the tolerances only.
    """

    def __init__(self, epsfcn: float = 1.0e-8, xtol: float | None = 1.0e-8, gtol: float | None = 1.0e-8):
        self.epsfcn = epsfcn
        self.xtol = xtol
        self.gtol = gtol

    def minimize(
        self, residuals: Residuals, initial: np.ndarray, end_criteria: EndCriteria
    ) -> MinimizationResult:
        """Minimise ``0.5 * sum(residuals(x)**2)`` starting from ``initial``.

        Raises:
            InvalidInputError: If there are fewer residuals than variables or a
                tolerance is negative.
            CalculationError: If the minimiser rejects its inputs.
        """

        initial = np.asarray(initial, dtype=float)
        n = initial.size
        if n == 0:
            raise InvalidInputError("no variables given")
        m = np.size(residuals(initial))
        if m < n:
            raise InvalidInputError(f"less functions ({m}) than available variables ({n})")

        ftol = end_criteria.function_epsilon
        xtol = end_criteria.root_epsilon if self.xtol is None else self.xtol
        gtol = end_criteria.gradient_norm_epsilon if self.gtol is None else self.gtol
        for label, tolerance in (("f", ftol), ("x", xtol), ("g", gtol)):
            if tolerance < 0.0:
                raise InvalidInputError(f"negative {label} tolerance")
        if end_criteria.max_iterations <= 0:
            raise InvalidInputError("null number of evaluations")

        try:
            solution = least_squares(
                residuals,
                initial,
                method="lm",
                ftol=ftol,
                xtol=xtol,
                gtol=gtol,
                max_nfev=end_criteria.max_iterations,
                diff_step=math.sqrt(self.epsfcn),
            )
        except ValueError as exc:
            raise CalculationError(f"MINPACK: improper input parameters: {exc}") from exc

        end_type = _STATUS_TO_END_CRITERIA.get(solution.status, EndCriteriaType.UNKNOWN)
        if end_criteria.check_max_iterations(solution.nfev):
            end_type = EndCriteriaType.MAX_ITERATIONS
        logger.debug(
            "Levenberg-Marquardt stopped after %d evaluations: %s", solution.nfev, solution.message
        )
        return MinimizationResult(
            x=np.asarray(solution.x, dtype=float),
            end_criteria=end_type,
            cost=float(solution.cost),
            nfev=int(solution.nfev),
            status=int(solution.status),
            message=str(solution.message),
        )


__all__ = ["LevenbergMarquardt", "MinimizationResult"]
