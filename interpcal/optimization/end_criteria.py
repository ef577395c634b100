"""Stopping policy shared by the optimisers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from interpcal.core.errors import InvalidInputError


class EndCriteriaType(Enum):
    """Reason an optimisation stopped."""

    NONE = "none"
    MAX_ITERATIONS = "max_iterations"
    STATIONARY_POINT = "stationary_point"
    STATIONARY_FUNCTION_VALUE = "stationary_function_value"
    STATIONARY_FUNCTION_ACCURACY = "stationary_function_accuracy"
    ZERO_GRADIENT_NORM = "zero_gradient_norm"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class EndCriteria:
    """Iteration limits and tolerances ending an optimisation.

    Args:
        max_iterations: Maximum number of function evaluations.
        max_stationary_state_iterations: Evaluations allowed without progress.
            Defaults to ``min(max_iterations // 2, 100)``. Validated
            here but not consulted by :class:`LevenbergMarquardt`, whose
            MINPACK backend keeps no stationary-state counter.
        root_epsilon: Tolerance on the parameter step.
        function_epsilon: Tolerance on the change of the objective.
        gradient_norm_epsilon: Tolerance on the gradient norm. Defaults to
            ``function_epsilon``.

    Raises:
        InvalidInputError: If the stationary iteration count is not strictly
            between 1 and ``max_iterations``.
    """

    max_iterations: int = 60000
    max_stationary_state_iterations: Optional[int] = 100
    root_epsilon: float = 1.0e-8
    function_epsilon: float = 1.0e-8
    gradient_norm_epsilon: Optional[float] = 1.0e-8

    def __post_init__(self) -> None:
        if self.max_stationary_state_iterations is None:
            object.__setattr__(
                self, "max_stationary_state_iterations", min(self.max_iterations // 2, 100)
            )
        stationary = self.max_stationary_state_iterations
        if stationary <= 1:
            raise InvalidInputError(
                f"max_stationary_state_iterations ({stationary}) must be greater than one"
            )
        if stationary >= self.max_iterations:
            raise InvalidInputError(
                f"max_stationary_state_iterations ({stationary}) must be less than "
                f"max_iterations ({self.max_iterations})"
            )
        if self.gradient_norm_epsilon is None:
            object.__setattr__(self, "gradient_norm_epsilon", self.function_epsilon)

    def check_max_iterations(self, iteration: int) -> bool:
        return iteration >= self.max_iterations

    @staticmethod
    def succeeded(end_type: EndCriteriaType) -> bool:
        """Whether ``end_type`` denotes convergence rather than exhaustion."""

        return end_type in (
            EndCriteriaType.STATIONARY_POINT,
            EndCriteriaType.STATIONARY_FUNCTION_VALUE,
            EndCriteriaType.STATIONARY_FUNCTION_ACCURACY,
            EndCriteriaType.ZERO_GRADIENT_NORM,
        )


__all__ = ["EndCriteriaType", "EndCriteria"]
