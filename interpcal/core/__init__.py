from interpcal.core.errors import (
    CalculationError,
    ExtrapolationError,
    InterpcalError,
    InvalidInputError,
    UnsupportedOperationError,
)
from interpcal.core.linalg import inverse, qr_solve, tridiagonal_solve
from interpcal.core.utils import close, close_enough


__all__ = [
    "InterpcalError",
    "InvalidInputError",
    "ExtrapolationError",
    "CalculationError",
    "UnsupportedOperationError",
    "tridiagonal_solve",
    "qr_solve",
    "inverse",
    "close",
    "close_enough",
]
