from interpcal.interpolation.base import Extrapolator, Interpolation, InterpolationFactory
from interpcal.interpolation.convex_monotone import (
    ConvexMonotone,
    ConvexMonotoneInterpolation,
    SectionHelper,
    SectionKind,
)
from interpcal.interpolation.cubic import (
    Akima,
    BoundaryCondition,
    Cubic,
    CubicInterpolation,
    CubicNaturalSpline,
    CubicSplineOvershootingMinimization1,
    CubicSplineOvershootingMinimization2,
    DerivativeApprox,
    FritschButland,
    Harmonic,
    Kruger,
    MonotonicCubicNaturalSpline,
    MonotonicParabolic,
    Parabolic,
)
from interpcal.interpolation.flat import (
    BackwardFlat,
    BackwardFlatInterpolation,
    ForwardFlat,
    ForwardFlatInterpolation,
)
from interpcal.interpolation.interpolation2d import (
    Bicubic,
    BicubicSpline,
    Bilinear,
    BilinearInterpolation,
    FlatExtrapolator2D,
    Interpolation2D,
)
from interpcal.interpolation.kernel import (
    GaussianKernel,
    KernelInterpolation,
    KernelInterpolation2D,
)
from interpcal.interpolation.linear import Linear, LinearInterpolation
from interpcal.interpolation.log import (
    LogCubic,
    LogCubicNaturalSpline,
    LogInterpolation,
    LogLinear,
    LogMixedLinearCubic,
    LogParabolic,
    MonotonicLogCubicNaturalSpline,
)
from interpcal.interpolation.mixed import (
    MixedBehavior,
    MixedInterpolation,
    MixedLinearCubic,
    MixedLinearCubicNaturalSpline,
    MixedLinearMonotonicCubicNaturalSpline,
)
from interpcal.interpolation.registry import (
    available_interpolators,
    get_interpolator,
    register_interpolator,
)


__all__ = [
    "Extrapolator",
    "Interpolation",
    "InterpolationFactory",
    "Linear",
    "LinearInterpolation",
    "BackwardFlat",
    "BackwardFlatInterpolation",
    "ForwardFlat",
    "ForwardFlatInterpolation",
    "DerivativeApprox",
    "BoundaryCondition",
    "CubicInterpolation",
    "Cubic",
    "CubicNaturalSpline",
    "MonotonicCubicNaturalSpline",
    "CubicSplineOvershootingMinimization1",
    "CubicSplineOvershootingMinimization2",
    "Parabolic",
    "MonotonicParabolic",
    "FritschButland",
    "Akima",
    "Kruger",
    "Harmonic",
    "SectionKind",
    "SectionHelper",
    "ConvexMonotone",
    "ConvexMonotoneInterpolation",
    "GaussianKernel",
    "KernelInterpolation",
    "KernelInterpolation2D",
    "LogInterpolation",
    "LogLinear",
    "LogCubic",
    "LogCubicNaturalSpline",
    "MonotonicLogCubicNaturalSpline",
    "LogParabolic",
    "LogMixedLinearCubic",
    "MixedBehavior",
    "MixedInterpolation",
    "MixedLinearCubic",
    "MixedLinearCubicNaturalSpline",
    "MixedLinearMonotonicCubicNaturalSpline",
    "Interpolation2D",
    "BilinearInterpolation",
    "BicubicSpline",
    "FlatExtrapolator2D",
    "Bilinear",
    "Bicubic",
    "register_interpolator",
    "get_interpolator",
    "available_interpolators",
]
