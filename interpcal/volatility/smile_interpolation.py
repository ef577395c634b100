"""SABR and SVI smile interpolations built on the XABR engine."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Union

import numpy as np

from interpcal.interpolation.registry import register_interpolator

from .sabr import SABRModel, SabrApproximationModel, VolatilityType
from .svi import SVIModel
from .xabr import XABRInterpolation
from .xabr_types import XABRCalibrationOptions

Options = Union[XABRCalibrationOptions, Mapping[str, Any], None]


class _SmileAccessors:
    """Read-only views shared by the smile facades."""

    @property
    def interpolation_weights(self) -> np.ndarray:
        return self.weights


class SABRInterpolation(_SmileAccessors, XABRInterpolation):
    """SABR smile calibrated to strike/volatility samples.

    Args:
        x: Strictly increasing strikes.
        y: Implied volatilities quoted at ``x``.
        expiry: Time to expiry in years.
        forward: Forward of the underlying.
        alpha, beta, nu, rho: Initial parameters; ``None`` uses the default.
        alpha_is_fixed, beta_is_fixed, nu_is_fixed, rho_is_fixed: Exclude the
            parameter from the calibration.
        options: Calibration options or overrides. Vega weighting is on
            unless ``vega_weighted`` is set to ``False``.
        shift: Displacement for shifted SABR.
        volatility_type: Quote convention of ``y``.
        approximation_model: Expansion used for lognormal volatilities.

    Example:
        >>> smile = SABRInterpolation(strikes, vols, 1.0, 0.039, beta=0.5, beta_is_fixed=True)
        >>> smile.alpha, smile.rms_error
    """

    def __init__(
        self,
        x: Iterable[float],
        y: Iterable[float],
        expiry: float,
        forward: float,
        alpha: Optional[float] = None,
        beta: Optional[float] = None,
        nu: Optional[float] = None,
        rho: Optional[float] = None,
        alpha_is_fixed: bool = False,
        beta_is_fixed: bool = False,
        nu_is_fixed: bool = False,
        rho_is_fixed: bool = False,
        options: Options = None,
        shift: float = 0.0,
        volatility_type: VolatilityType = VolatilityType.SHIFTED_LOGNORMAL,
        approximation_model: SabrApproximationModel = SabrApproximationModel.HAGAN_2002,
    ) -> None:
        super().__init__(
            x,
            y,
            expiry,
            forward,
            [alpha, beta, nu, rho],
            [alpha_is_fixed, beta_is_fixed, nu_is_fixed, rho_is_fixed],
            SABRModel(shift, volatility_type, approximation_model),
            options,
        )

    @property
    def alpha(self) -> float:
        return float(self.params[0])

    @property
    def beta(self) -> float:
        return float(self.params[1])

    @property
    def nu(self) -> float:
        return float(self.params[2])

    @property
    def rho(self) -> float:
        return float(self.params[3])

    @property
    def shift(self) -> float:
        return self.model.shift


class SviInterpolation(_SmileAccessors, XABRInterpolation):
    """Raw SVI smile calibrated to strike/volatility samples.

    Residuals are unweighted unless ``vega_weighted`` is set in ``options``.
    """

    def __init__(
        self,
        x: Iterable[float],
        y: Iterable[float],
        expiry: float,
        forward: float,
        a: Optional[float] = None,
        b: Optional[float] = None,
        sigma: Optional[float] = None,
        rho: Optional[float] = None,
        m: Optional[float] = None,
        a_is_fixed: bool = False,
        b_is_fixed: bool = False,
        sigma_is_fixed: bool = False,
        rho_is_fixed: bool = False,
        m_is_fixed: bool = False,
        options: Options = None,
    ) -> None:
        super().__init__(
            x,
            y,
            expiry,
            forward,
            [a, b, sigma, rho, m],
            [a_is_fixed, b_is_fixed, sigma_is_fixed, rho_is_fixed, m_is_fixed],
            SVIModel(),
            options,
        )

    @property
    def a(self) -> float:
        return float(self.params[0])

    @property
    def b(self) -> float:
        return float(self.params[1])

    @property
    def sigma(self) -> float:
        return float(self.params[2])

    @property
    def rho(self) -> float:
        return float(self.params[3])

    @property
    def m(self) -> float:
        return float(self.params[4])


class SABR:
    """Factory for :class:`SABRInterpolation` with bound calibration settings."""

    is_global = True
    required_points = 2

    def __init__(self, expiry: float, forward: float, **kwargs: Any) -> None:
        self.expiry = expiry
        self.forward = forward
        self.kwargs = kwargs

    def interpolate(self, x: Iterable[float], y: Iterable[float]) -> SABRInterpolation:
        return SABRInterpolation(x, y, self.expiry, self.forward, **self.kwargs)


class SVI:
    """Factory for :class:`SviInterpolation` with bound calibration settings."""

    is_global = True
    required_points = 2

    def __init__(self, expiry: float, forward: float, **kwargs: Any) -> None:
        self.expiry = expiry
        self.forward = forward
        self.kwargs = kwargs

    def interpolate(self, x: Iterable[float], y: Iterable[float]) -> SviInterpolation:
        return SviInterpolation(x, y, self.expiry, self.forward, **self.kwargs)


register_interpolator("sabr", SABR)
register_interpolator("svi", SVI)


__all__ = ["SABRInterpolation", "SviInterpolation", "SABR", "SVI"]
