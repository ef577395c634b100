"""Typed containers for XABR calibration configuration and results."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Callable, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from interpcal.optimization import EndCriteria, EndCriteriaType, LevenbergMarquardt


@dataclass(frozen=True)
class XABRCalibrationOptions:
    """Configuration knobs controlling an XABR calibration.

    Args:
        vega_weighted: Weight residuals by normalised model vega. ``None``
            selects the model default (SABR weighted, SVI uniform).
        error_accept: Error below which no further restarts are attempted.
        use_max_error: Compare attempts by maximum absolute error instead of
            the weighted RMS error.
        max_guesses: Maximum number of optimisation attempts; the first starts
            from the supplied parameters, later ones from quasi-random draws.
        halton_seed: Seed of the scrambled Halton sequence drawing restarts;
            ``None`` uses the unscrambled sequence.
        max_iterations: Maximum residual evaluations per attempt.
        max_stationary_state_iterations: Evaluations allowed without progress.
        root_epsilon: Tolerance on the parameter step.
        function_epsilon: Tolerance on the change of the objective.
        gradient_norm_epsilon: Tolerance on the gradient norm.
        epsfcn: Relative error of the residuals used for the Jacobian step.
        xtol: Levenberg-Marquardt step tolerance.
        gtol: Levenberg-Marquardt orthogonality tolerance.
        constraint: Optional predicate ``constraint(params, forward)`` on the
            model parameters. Trial points it rejects are answered with the
            residuals of the attempt's starting point, so the minimiser
            refuses the step. ``None`` accepts every point.
    """

    vega_weighted: bool | None = None
    error_accept: float = 0.002
    use_max_error: bool = False
    max_guesses: int = 50
    halton_seed: int | None = 42
    max_iterations: int = 60000
    max_stationary_state_iterations: int = 100
    root_epsilon: float = 1e-8
    function_epsilon: float = 1e-8
    gradient_norm_epsilon: float = 1e-8
    epsfcn: float = 1e-8
    xtol: float = 1e-8
    gtol: float = 1e-8
    constraint: Optional[Callable[[np.ndarray, float], bool]] = None

    @classmethod
    def field_names(cls) -> set[str]:
        """Return the names of supported configuration fields."""

        return {f.name for f in fields(cls)}

    @classmethod
    def from_mapping(
        cls, overrides: XABRCalibrationOptions | Mapping[str, Any] | None = None
    ) -> XABRCalibrationOptions:
        """Build an options instance from optional overrides.

        Args:
            overrides: Either an existing :class:`XABRCalibrationOptions`
                instance or a mapping of field overrides.

        Returns:
            A fully populated :class:`XABRCalibrationOptions` instance.

        Raises:
            TypeError: If ``overrides`` contains unrecognised keys.
        """

        if overrides is None:
            return cls()
        if isinstance(overrides, cls):
            return overrides
        unknown = set(overrides) - cls.field_names()
        if unknown:
            raise TypeError(f"Unknown XABR option(s): {sorted(unknown)}")
        return replace(cls(), **{name: overrides[name] for name in overrides})

    def to_mapping(self) -> dict[str, Any]:
        """Return a mapping representation of the options."""

        return asdict(self)

    def end_criteria(self) -> EndCriteria:
        return EndCriteria(
            max_iterations=self.max_iterations,
            max_stationary_state_iterations=self.max_stationary_state_iterations,
            root_epsilon=self.root_epsilon,
            function_epsilon=self.function_epsilon,
            gradient_norm_epsilon=self.gradient_norm_epsilon,
        )

    def optimizer(self) -> LevenbergMarquardt:
        return LevenbergMarquardt(epsfcn=self.epsfcn, xtol=self.xtol, gtol=self.gtol)


@dataclass
class XABRTrialRecord:
    """Diagnostics captured for one optimisation attempt.

    Args:
        guess_index: Zero for the initial guess, then the restart number.
        start: Parameters the attempt started from.
        params: Parameters the attempt finished with.
        error: Error used to compare attempts (RMS or max error).
        end_criteria: Reason the optimiser stopped.
        nfev: Residual evaluations spent by the attempt.
    """

    guess_index: int
    start: Tuple[float, ...]
    params: Tuple[float, ...]
    error: float
    end_criteria: EndCriteriaType
    nfev: int


@dataclass
class XABRCalibrationResult:
    """Outcome of an XABR calibration: the best attempt and its diagnostics."""

    params: np.ndarray
    rms_error: float
    max_error: float
    weights: np.ndarray
    end_criteria: EndCriteriaType
    trials: list[XABRTrialRecord] = field(default_factory=list)

    def add_trial_record(self, record: XABRTrialRecord) -> None:
        self.trials.append(record)

    def trials_frame(self, parameter_names: Tuple[str, ...] | None = None) -> pd.DataFrame:
        """Return one row per attempt with start and final parameters as columns."""

        rows = []
        for record in self.trials:
            names = parameter_names or tuple(f"p{i}" for i in range(len(record.params)))
            row: dict[str, Any] = {
                "guess_index": record.guess_index,
                "error": record.error,
                "end_criteria": record.end_criteria.value,
                "nfev": record.nfev,
            }
            row.update({f"start_{name}": value for name, value in zip(names, record.start)})
            row.update({name: value for name, value in zip(names, record.params)})
            rows.append(row)
        return pd.DataFrame(rows)


__all__ = ["XABRCalibrationOptions", "XABRTrialRecord", "XABRCalibrationResult"]
