"""Registry of one-dimensional interpolation factories keyed by name."""

from __future__ import annotations

from typing import Callable, Dict, Mapping

from .base import InterpolationFactory
from .convex_monotone import ConvexMonotone
from .cubic import (
    Akima,
    Cubic,
    CubicNaturalSpline,
    CubicSplineOvershootingMinimization1,
    CubicSplineOvershootingMinimization2,
    FritschButland,
    Harmonic,
    Kruger,
    MonotonicCubicNaturalSpline,
    MonotonicParabolic,
    Parabolic,
)
from .flat import BackwardFlat, ForwardFlat
from .linear import Linear
from .log import (
    LogCubic,
    LogCubicNaturalSpline,
    LogLinear,
    LogMixedLinearCubic,
    LogParabolic,
    MonotonicLogCubicNaturalSpline,
)
from .mixed import MixedLinearCubic

FactoryBuilder = Callable[..., InterpolationFactory]

_FACTORIES: Dict[str, FactoryBuilder] = {}


def register_interpolator(name: str, builder: FactoryBuilder) -> None:
    """Register a factory builder under ``name``, replacing any previous entry."""

    _FACTORIES[name] = builder


def get_interpolator(name: str, **kwargs) -> InterpolationFactory:
    """Return a factory built by the builder registered under ``name``.

    Args:
        name: Registered name, e.g. ``"linear"`` or ``"natural_cubic"``.
        **kwargs: Forwarded to the builder.

    Raises:
        ValueError: If ``name`` is not registered.
    """

    try:
        builder = _FACTORIES[name]
    except KeyError as exc:
        raise ValueError(
            f"Unknown interpolator '{name}'. Available: {sorted(_FACTORIES)}"
        ) from exc
    return builder(**kwargs)


def available_interpolators() -> Mapping[str, FactoryBuilder]:
    return dict(_FACTORIES)


for _name, _builder in {
    "linear": Linear,
    "backward_flat": BackwardFlat,
    "forward_flat": ForwardFlat,
    "cubic": Cubic,
    "natural_cubic": CubicNaturalSpline,
    "monotonic_natural_cubic": MonotonicCubicNaturalSpline,
    "spline_om1": CubicSplineOvershootingMinimization1,
    "spline_om2": CubicSplineOvershootingMinimization2,
    "parabolic": Parabolic,
    "monotonic_parabolic": MonotonicParabolic,
    "fritsch_butland": FritschButland,
    "akima": Akima,
    "kruger": Kruger,
    "harmonic": Harmonic,
    "convex_monotone": ConvexMonotone,
    "log_linear": LogLinear,
    "log_cubic": LogCubic,
    "log_natural_cubic": LogCubicNaturalSpline,
    "monotonic_log_natural_cubic": MonotonicLogCubicNaturalSpline,
    "log_parabolic": LogParabolic,
    "mixed_linear_cubic": MixedLinearCubic,
    "log_mixed_linear_cubic": LogMixedLinearCubic,
}.items():
    register_interpolator(_name, _builder)


__all__ = ["register_interpolator", "get_interpolator", "available_interpolators"]
