# interpcal - curve interpolation and smile calibration
"""Interpolate sparse samples into curves and calibrate SABR/SVI volatility smiles."""

from interpcal.core import (
    CalculationError,
    ExtrapolationError,
    InterpcalError,
    InvalidInputError,
    UnsupportedOperationError,
)
from interpcal.logging import configure_logging, get_logger
from interpcal.interpolation import (
    ConvexMonotone,
    CubicNaturalSpline,
    Interpolation,
    KernelInterpolation,
    Linear,
    LogLinear,
    get_interpolator,
)
from interpcal.optimization import EndCriteria, EndCriteriaType, LevenbergMarquardt
from interpcal.volatility import (
    SABR,
    SVI,
    SABRInterpolation,
    SviInterpolation,
    VannaVolga,
    XABRCalibrationOptions,
    XABRInterpolation,
)

__version__ = "0.1.0"

__all__ = [
    # Exceptions
    "InterpcalError",
    "InvalidInputError",
    "ExtrapolationError",
    "CalculationError",
    "UnsupportedOperationError",
    # Logging
    "configure_logging",
    "get_logger",
    # Interpolation
    "Interpolation",
    "Linear",
    "CubicNaturalSpline",
    "ConvexMonotone",
    "KernelInterpolation",
    "LogLinear",
    "get_interpolator",
    # Optimization
    "EndCriteria",
    "EndCriteriaType",
    "LevenbergMarquardt",
    # Smile calibration
    "XABRCalibrationOptions",
    "XABRInterpolation",
    "SABRInterpolation",
    "SviInterpolation",
    "SABR",
    "SVI",
    "VannaVolga",
]
