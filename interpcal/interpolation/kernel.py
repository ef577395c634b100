"""Kernel interpolation in one and two dimensions.

Given a kernel ``K`` the interpolant is

    f(x) = sum_k alpha_k K(|x - x_k|) / gamma(x),   gamma(x) = sum_k K(|x - x_k|)

with ``alpha`` chosen so that ``f`` reproduces the samples. The coefficients
solve a dense linear system by QR; the residual is checked afterwards and a
badly conditioned system fails loudly.
"""

from __future__ import annotations

from typing import Callable, Iterable

import numpy as np
from scipy.stats import norm

from interpcal.core.errors import CalculationError
from interpcal.core.linalg import qr_solve
from interpcal.logging import get_logger

from .base import Interpolation
from .interpolation2d import Interpolation2D

logger = get_logger(__name__)

# Vectorised function of the distance between two nodes.
Kernel = Callable[[np.ndarray], np.ndarray]


class GaussianKernel:
    """Normal density with the given mean and standard deviation.

    Args:
        average: Mean of the density.
        sigma: Standard deviation of the density.
    """

    def __init__(self, average: float = 0.0, sigma: float = 1.0) -> None:
        self.average = average
        self.sigma = sigma

    def __call__(self, x):
        return norm.pdf(x, loc=self.average, scale=self.sigma)


def _solve_weights(matrix: np.ndarray, targets: np.ndarray, precision: float, label: str) -> np.ndarray:
    alpha = qr_solve(matrix, targets)
    residual = float(np.max(np.abs(matrix @ alpha - targets)))
    logger.debug("%s kernel solve residual %.3e (tolerance %.1e)", label, residual, precision)
    if not residual < precision:
        raise CalculationError(
            f"inversion failed in {label} kernel interpolation: residual {residual:.3e} "
            f"exceeds {precision:.1e}"
        )
    return alpha


class KernelInterpolation(Interpolation):
    """One-dimensional kernel interpolation.

    Args:
        x: Strictly increasing abscissas.
        y: Ordinates.
        kernel: Function of the distance between two abscissas.
        inverse_precision: Maximum accepted residual of the weight solve.
    """

    def __init__(
        self,
        x: Iterable[float],
        y: Iterable[float],
        kernel: Kernel,
        inverse_precision: float = 1.0e-7,
    ):
        super().__init__(x, y)
        self.kernel = kernel
        self.inverse_precision = inverse_precision
        self._calculate()

    def set_inverse_result_precision(self, precision: float) -> None:
        self.inverse_precision = precision

    def _kernel_row(self, x: float) -> np.ndarray:
        return np.asarray(self.kernel(np.abs(x - self._x)), dtype=float)

    def _calculate(self) -> None:
        distances = np.abs(self._x[:, None] - self._x[None, :])
        kernels = np.asarray(self.kernel(distances), dtype=float)
        gammas = kernels.sum(axis=1)
        self.matrix = kernels / gammas[:, None]
        self.alpha = _solve_weights(self.matrix, self._y, self.inverse_precision, "1d")

    def _value(self, x: float) -> float:
        row = self._kernel_row(x)
        return float(row @ self.alpha / row.sum())


class KernelInterpolation2D(Interpolation2D):
    """Kernel interpolation over the nodes of a grid.

    Args:
        x: Strictly increasing column abscissas.
        y: Strictly increasing row abscissas.
        z: Values with shape ``(len(y), len(x))``.
        kernel: Function of the Euclidean distance between two nodes.
        inverse_precision: Maximum accepted residual of the weight solve.
    """

    def __init__(self, x, y, z, kernel: Kernel, inverse_precision: float = 1.0e-10) -> None:
        super().__init__(x, y, z)
        self.kernel = kernel
        self.inverse_precision = inverse_precision
        self._calculate()

    def set_inverse_result_precision(self, precision: float) -> None:
        self.inverse_precision = precision

    def _nodes(self) -> np.ndarray:
        grid_x, grid_y = np.meshgrid(self._x, self._y)
        return np.column_stack([grid_x.ravel(), grid_y.ravel()])

    def _calculate(self) -> None:
        nodes = self._nodes()
        distances = np.linalg.norm(nodes[:, None, :] - nodes[None, :, :], axis=2)
        kernels = np.asarray(self.kernel(distances), dtype=float)
        self.matrix = kernels / kernels.sum(axis=1)[:, None]
        self.alpha = _solve_weights(self.matrix, self._z.ravel(), self.inverse_precision, "2d")
        self._grid_nodes = nodes

    def _value(self, x: float, y: float) -> float:
        distances = np.hypot(self._grid_nodes[:, 0] - x, self._grid_nodes[:, 1] - y)
        row = np.asarray(self.kernel(distances), dtype=float)
        return float(row @ self.alpha / row.sum())


__all__ = ["GaussianKernel", "KernelInterpolation", "KernelInterpolation2D"]
