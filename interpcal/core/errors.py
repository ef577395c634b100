"""Centralized error types for the interpcal package."""

from __future__ import annotations


class InterpcalError(Exception):
    """Base exception for the interpcal package."""

    pass


class InvalidInputError(InterpcalError, ValueError):
    """Raised when samples or parameters violate a precondition."""

    pass


class ExtrapolationError(InvalidInputError):
    """Raised when a query falls outside the interpolation range.

    Args:
        message: Human readable description naming the range and the offending
            coordinate.
    """

    pass


class CalculationError(InterpcalError):
    """Raised when a numerical procedure fails, e.g. a singular linear solve."""

    pass


class UnsupportedOperationError(InterpcalError, NotImplementedError):
    """Raised for queries or schemes that an interpolation does not provide."""

    pass


__all__ = [
    "InterpcalError",
    "InvalidInputError",
    "ExtrapolationError",
    "CalculationError",
    "UnsupportedOperationError",
]
