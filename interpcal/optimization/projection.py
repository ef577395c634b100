"""Restriction of a parameter vector to its free entries."""

from __future__ import annotations

from typing import Callable, Optional, Sequence

import numpy as np

from interpcal.core.errors import InvalidInputError


class Projection:
    """Splits a full parameter vector into free and fixed entries.

    Args:
        parameter_values: Full parameter vector supplying the fixed values.
        fix_parameters: Flags marking the entries excluded from optimisation.

    Raises:
        InvalidInputError: If the flag count does not match the parameters or
            no parameter is free.
    """

    def __init__(
        self,
        parameter_values: Sequence[float],
        fix_parameters: Optional[Sequence[bool]] = None,
    ) -> None:
        self.actual_parameters = np.array(parameter_values, dtype=float)
        if fix_parameters is None:
            fix_parameters = [False] * self.actual_parameters.size
        self.fixed = np.array(fix_parameters, dtype=bool)
        if self.fixed.size != self.actual_parameters.size:
            raise InvalidInputError(
                f"fix_parameters has {self.fixed.size} entries, "
                f"{self.actual_parameters.size} parameters given"
            )
        self.number_of_free_parameters = int(np.count_nonzero(~self.fixed))
        if self.number_of_free_parameters == 0:
            raise InvalidInputError("number of free parameters is zero")

    def project(self, parameters: Sequence[float]) -> np.ndarray:
        """Return the free entries of ``parameters``."""

        parameters = np.asarray(parameters, dtype=float)
        if parameters.size != self.fixed.size:
            raise InvalidInputError("parameters with incompatible size")
        return parameters[~self.fixed].copy()

    def include(self, projected: Sequence[float]) -> np.ndarray:
        """Return the full vector with free entries taken from ``projected``."""

        projected = np.asarray(projected, dtype=float)
        if projected.size != self.number_of_free_parameters:
            raise InvalidInputError("projected parameters with incompatible size")
        full = self.actual_parameters.copy()
        full[~self.fixed] = projected
        return full

    def projected_function(
        self, function: Callable[[np.ndarray], np.ndarray]
    ) -> Callable[[np.ndarray], np.ndarray]:
        """Wrap ``function`` of the full vector into a function of the free entries."""

        def projected(free: np.ndarray) -> np.ndarray:
            return function(self.include(free))

        return projected


__all__ = ["Projection"]
