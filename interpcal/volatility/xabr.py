"""Generic calibration engine for parametric volatility smiles.

The engine fits a model (SABR, SVI) to implied volatilities observed at a set
of strikes. Parameters are optimised in an unconstrained space obtained
through the model's ``inverse``/``direct`` maps, fixed parameters are
projected out, and the Levenberg-Marquardt minimiser is restarted from
Halton draws until the fit error falls below ``error_accept`` or the guess
budget is spent. The best attempt is always kept; missing the target is not
an error.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence

import numpy as np
from scipy.stats import qmc

from interpcal.core.errors import InvalidInputError
from interpcal.interpolation.base import Interpolation
from interpcal.logging import get_logger
from interpcal.optimization import EndCriteriaType, Projection

from .xabr_types import XABRCalibrationOptions, XABRCalibrationResult, XABRTrialRecord

logger = get_logger(__name__)


class SmileSection(Protocol):
    def volatility(self, strike: float) -> float:
        ...


class XABRModel(Protocol):
    """Capabilities a smile model offers to :class:`XABRInterpolation`."""

    name: str
    parameter_names: tuple[str, ...]
    vega_weighted_default: bool

    @property
    def dimension(self) -> int:
        ...

    def default_values(
        self, params: Sequence[Optional[float]], fixed: Sequence[bool], forward: float, expiry: float
    ) -> list[float]:
        ...

    def guess(
        self,
        values: np.ndarray,
        fixed: Sequence[bool],
        forward: float,
        expiry: float,
        draws: Sequence[float],
    ) -> np.ndarray:
        ...

    def direct(
        self, x: Sequence[float], fixed: Sequence[bool], params: Sequence[float], forward: float
    ) -> np.ndarray:
        ...

    def inverse(
        self, y: Sequence[float], fixed: Sequence[bool], params: Sequence[float], forward: float
    ) -> np.ndarray:
        ...

    def weight(self, strike: float, forward: float, std_dev: float) -> float:
        ...

    def instance(self, expiry: float, forward: float, params: Sequence[float]) -> SmileSection:
        ...


class XABRInterpolation(Interpolation):
    """Volatility smile calibrated to ``(strike, volatility)`` samples.

    Args:
        x: Strictly increasing strikes.
        y: Implied volatilities quoted at ``x``.
        expiry: Time to expiry in years.
        forward: Forward of the underlying.
        params: Initial parameter values; ``None`` entries take the model
            defaults.
        fixed: Flags excluding parameters from the optimisation.
        model: Smile model providing the reparametrisation and evaluator.
        options: Calibration options or a mapping of overrides.

    Raises:
        InvalidInputError: If the parameter or flag counts do not match the
            model dimension, or the samples are invalid.
    """

    def __init__(
        self,
        x: Iterable[float],
        y: Iterable[float],
        expiry: float,
        forward: float,
        params: Sequence[Optional[float]],
        fixed: Optional[Sequence[bool]],
        model: XABRModel,
        options: XABRCalibrationOptions | Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(x, y, required_points=2)
        self.model = model
        self.expiry = float(expiry)
        self.forward = float(forward)
        self.options = XABRCalibrationOptions.from_mapping(options)
        if self.options.max_guesses < 1:
            raise InvalidInputError(f"max_guesses ({self.options.max_guesses}) must be positive")
        self.vega_weighted = (
            model.vega_weighted_default
            if self.options.vega_weighted is None
            else bool(self.options.vega_weighted)
        )

        dimension = model.dimension
        if len(params) != dimension:
            raise InvalidInputError(
                f"{model.name} requires {dimension} parameters, {len(params)} given"
            )
        if fixed is None:
            fixed = [False] * dimension
        if len(fixed) != dimension:
            raise InvalidInputError(
                f"{model.name} requires {dimension} fixed flags, {len(fixed)} given"
            )
        self.fixed = tuple(bool(flag) for flag in fixed)
        self._fixed_mask = np.array(self.fixed, dtype=bool)
        self.params = np.array(
            model.default_values(params, self.fixed, self.forward, self.expiry), dtype=float
        )
        self.weights = np.full(self._x.size, 1.0 / self._x.size)
        self.rms_error = float("nan")
        self.max_error = float("nan")
        self.end_criteria = EndCriteriaType.NONE
        self.result: XABRCalibrationResult | None = None
        self._smile = model.instance(self.expiry, self.forward, self.params)
        self._start_residuals = np.zeros(self._x.size)
        self._calculate()

    # ------------------------------------------------------------------
    # Error measures
    # ------------------------------------------------------------------
    def _model_values(self) -> np.ndarray:
        return np.array([self._smile.volatility(strike) for strike in self._x])

    def interpolation_squared_error(self) -> float:
        errors = self._model_values() - self._y
        return float(np.sum(errors * errors * self.weights))

    def interpolation_error(self) -> float:
        """Weighted RMS error ``sqrt(n * sum(w e^2) / (n - 1))``."""

        n = self._x.size
        return math.sqrt(n * self.interpolation_squared_error() / (n - 1))

    def interpolation_max_error(self) -> float:
        return float(np.max(np.abs(self._model_values() - self._y)))

    def interpolation_errors(self) -> np.ndarray:
        return (self._model_values() - self._y) * np.sqrt(self.weights)

    # ------------------------------------------------------------------
    # Calibration
    # ------------------------------------------------------------------
    def _set_params(self, params: np.ndarray) -> None:
        self.params = np.asarray(params, dtype=float)
        self._smile = self.model.instance(self.expiry, self.forward, self.params)

    def _update_weights(self) -> None:
        n = self._x.size
        if not self.vega_weighted:
            self.weights = np.full(n, 1.0 / n)
            return
        sqrt_t = math.sqrt(self.expiry)
        raw = np.array(
            [
                self.model.weight(strike, self.forward, abs(vol) * sqrt_t)
                for strike, vol in zip(self._x, self._y)
            ]
        )
        total = float(np.sum(raw))
        if not total > 0.0:
            logger.warning("Vega weights of the %s smile vanish; using uniform weights", self.model.name)
            self.weights = np.full(n, 1.0 / n)
            return
        self.weights = raw / total

    def _residuals(self, unconstrained: np.ndarray) -> np.ndarray:
        candidate = self.model.direct(unconstrained, self.fixed, self.params, self.forward)
        constraint = self.options.constraint
        if constraint is not None and not constraint(candidate, self.forward):
            return self._start_residuals.copy()
        self._set_params(candidate)
        return self.interpolation_errors()

    def _attempt_error(self) -> float:
        if self.options.use_max_error:
            return self.interpolation_max_error()
        return self.interpolation_error()

    def _halton(self, dimension: int) -> qmc.Halton:
        seed = self.options.halton_seed
        if seed is None:
            sampler = qmc.Halton(d=dimension, scramble=False)
            sampler.fast_forward(1)
            return sampler
        return qmc.Halton(d=dimension, scramble=True, seed=seed)

    def _calculate(self) -> None:
        self._set_params(self.params)
        self._update_weights()
        result = XABRCalibrationResult(
            params=self.params.copy(),
            rms_error=float("nan"),
            max_error=float("nan"),
            weights=self.weights.copy(),
            end_criteria=EndCriteriaType.NONE,
        )

        if all(self.fixed):
            self.rms_error = self.interpolation_error()
            self.max_error = self.interpolation_max_error()
            self.end_criteria = EndCriteriaType.NONE
            result.rms_error, result.max_error = self.rms_error, self.max_error
            self.result = result
            logger.info(
                "All %s parameters fixed; skipping calibration (rms error %.3e)",
                self.model.name,
                self.rms_error,
            )
            return

        options = self.options
        end_criteria = options.end_criteria()
        optimizer = options.optimizer()
        free_parameters = self.fixed.count(False)
        halton = self._halton(free_parameters)
        logger.info(
            "Calibrating %s smile: %d points, %d free parameters, expiry %.4g",
            self.model.name,
            self._x.size,
            free_parameters,
            self.expiry,
        )

        fixed_values = self.params.copy()
        guess = self.params.copy()
        best_error = math.inf
        best_params = self.params.copy()
        best_end = EndCriteriaType.NONE
        guess_index = 0
        while True:
            if guess_index > 0:
                draws = halton.random(1)[0]
                guess = self.model.guess(guess, self.fixed, self.forward, self.expiry, draws)
                guess[self._fixed_mask] = fixed_values[self._fixed_mask]

            start = guess.copy()
            self._set_params(start)
            self._start_residuals = self.interpolation_errors()
            unconstrained = self.model.inverse(start, self.fixed, self.params, self.forward)
            projection = Projection(unconstrained, self.fixed)
            outcome = optimizer.minimize(
                projection.projected_function(self._residuals),
                projection.project(unconstrained),
                end_criteria,
            )
            params = self.model.direct(
                projection.include(outcome.x), self.fixed, self.params, self.forward
            )
            self._set_params(params)
            error = self._attempt_error()
            result.add_trial_record(
                XABRTrialRecord(
                    guess_index=guess_index,
                    start=tuple(float(v) for v in start),
                    params=tuple(float(v) for v in params),
                    error=error,
                    end_criteria=outcome.end_criteria,
                    nfev=outcome.nfev,
                )
            )
            logger.debug(
                "%s guess %d: error %.3e after %d evaluations (%s)",
                self.model.name,
                guess_index,
                error,
                outcome.nfev,
                outcome.end_criteria.value,
            )
            if error < best_error:
                best_error = error
                best_params = params.copy()
                best_end = outcome.end_criteria

            guess_index += 1
            if guess_index >= options.max_guesses or not error > options.error_accept:
                break

        self._set_params(best_params)
        self.end_criteria = best_end
        self.rms_error = self.interpolation_error()
        self.max_error = self.interpolation_max_error()
        result.params = best_params.copy()
        result.rms_error = self.rms_error
        result.max_error = self.max_error
        result.end_criteria = best_end
        self.result = result

        if best_error > options.error_accept:
            logger.warning(
                "%s calibration missed error target %.3e after %d guesses: best error %.3e",
                self.model.name,
                options.error_accept,
                guess_index,
                best_error,
            )
        logger.info(
            "Calibrated %s smile: rms error %.3e, max error %.3e, end criteria %s",
            self.model.name,
            self.rms_error,
            self.max_error,
            self.end_criteria.value,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def _value(self, x: float) -> float:
        return float(self._smile.volatility(x))


__all__ = ["SmileSection", "XABRModel", "XABRInterpolation"]
