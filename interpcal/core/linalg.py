"""Thin wrappers around :mod:`scipy.linalg` used by the interpolation schemes."""

from __future__ import annotations

import numpy as np
from scipy import linalg

from .errors import CalculationError, InvalidInputError


def tridiagonal_solve(
    lower: np.ndarray, diagonal: np.ndarray, upper: np.ndarray, rhs: np.ndarray
) -> np.ndarray:
    """Solve a tridiagonal system.

    Args:
        lower: Sub-diagonal of length ``n - 1``; ``lower[i]`` multiplies
            ``x[i]`` in row ``i + 1``.
        diagonal: Main diagonal of length ``n``.
        upper: Super-diagonal of length ``n - 1``; ``upper[i]`` multiplies
            ``x[i + 1]`` in row ``i``.
        rhs: Right hand side of length ``n``.

    Returns:
        The solution vector.

    Raises:
        InvalidInputError: If the band lengths are inconsistent.
        CalculationError: If the system is singular.
    """

    diagonal = np.asarray(diagonal, dtype=float)
    n = diagonal.size
    lower = np.asarray(lower, dtype=float)
    upper = np.asarray(upper, dtype=float)
    if lower.size != n - 1 or upper.size != n - 1 or np.size(rhs) != n:
        raise InvalidInputError(
            f"inconsistent tridiagonal system: diagonal {n}, lower {lower.size}, "
            f"upper {upper.size}, rhs {np.size(rhs)}"
        )

    banded = np.zeros((3, n))
    banded[0, 1:] = upper
    banded[1, :] = diagonal
    banded[2, :-1] = lower
    try:
        return linalg.solve_banded((1, 1), banded, np.asarray(rhs, dtype=float))
    except linalg.LinAlgError as exc:
        raise CalculationError(f"singular tridiagonal system: {exc}") from exc


def qr_solve(matrix: np.ndarray, rhs: np.ndarray) -> np.ndarray:
    """Return the least squares solution of ``matrix @ x = rhs`` via QR."""

    matrix = np.asarray(matrix, dtype=float)
    rhs = np.asarray(rhs, dtype=float)
    if matrix.shape[0] != rhs.size:
        raise InvalidInputError(
            f"dimension mismatch: matrix has {matrix.shape[0]} rows, rhs has {rhs.size}"
        )
    q, r = linalg.qr(matrix, mode="economic")
    try:
        return linalg.solve_triangular(r, q.T @ rhs)
    except linalg.LinAlgError as exc:
        raise CalculationError(f"rank deficient least squares system: {exc}") from exc


def inverse(matrix: np.ndarray) -> np.ndarray:
    """Return the inverse of a square matrix."""

    matrix = np.asarray(matrix, dtype=float)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise InvalidInputError(f"matrix must be square, got shape {matrix.shape}")
    try:
        return linalg.inv(matrix)
    except linalg.LinAlgError as exc:
        raise CalculationError(f"singular matrix: {exc}") from exc


__all__ = ["tridiagonal_solve", "qr_solve", "inverse"]
