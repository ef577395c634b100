from interpcal.volatility.black import (
    bachelier_std_dev_derivative,
    black_formula,
    black_implied_std_dev,
    black_std_dev_derivative,
)
from interpcal.volatility.sabr import (
    SABRModel,
    SABRSmile,
    SabrApproximationModel,
    VolatilityType,
    sabr_normal_volatility,
    sabr_volatility,
    unsafe_sabr_normal_volatility,
    unsafe_sabr_volatility,
    validate_sabr_parameters,
)
from interpcal.volatility.smile_interpolation import SABR, SVI, SABRInterpolation, SviInterpolation
from interpcal.volatility.svi import SVIModel, SVISmile, check_svi_parameters, svi_total_variance
from interpcal.volatility.vanna_volga import VannaVolga, VannaVolgaInterpolation
from interpcal.volatility.xabr import SmileSection, XABRInterpolation, XABRModel
from interpcal.volatility.xabr_types import (
    XABRCalibrationOptions,
    XABRCalibrationResult,
    XABRTrialRecord,
)


__all__ = [
    "black_formula",
    "black_implied_std_dev",
    "black_std_dev_derivative",
    "bachelier_std_dev_derivative",
    "VolatilityType",
    "SabrApproximationModel",
    "validate_sabr_parameters",
    "unsafe_sabr_volatility",
    "unsafe_sabr_normal_volatility",
    "sabr_volatility",
    "sabr_normal_volatility",
    "SABRSmile",
    "SABRModel",
    "svi_total_variance",
    "check_svi_parameters",
    "SVISmile",
    "SVIModel",
    "SmileSection",
    "XABRModel",
    "XABRInterpolation",
    "XABRCalibrationOptions",
    "XABRCalibrationResult",
    "XABRTrialRecord",
    "SABRInterpolation",
    "SviInterpolation",
    "SABR",
    "SVI",
    "VannaVolgaInterpolation",
    "VannaVolga",
]
