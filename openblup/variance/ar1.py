"""First-order autoregressive variance structure."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from .base import InvalidParameterError, VarStruct

_DROP_BELOW = 1e-15


def _tridiagonal(dim: int, corner: float, interior: float, off: float) -> np.ndarray:
    """Symmetric tridiagonal matrix with given corner, interior and off-diagonal values."""
    diag = np.full(dim, interior)
    diag[0] = corner
    diag[-1] = corner
    mat = np.diag(diag)
    idx = np.arange(dim - 1)
    mat[idx, idx + 1] = off
    mat[idx + 1, idx] = off
    return mat


class AR1(VarStruct):
    """Sigma[i, j] = sigma^2 * rho^|i - j|, with parameters [sigma^2, rho].

    The inverse is tridiagonal and available in closed form:
    log|Sigma| = n * ln(sigma^2) + (n - 1) * ln(1 - rho^2).
    """

    name = "AR1"

    def __init__(self, sigma2: float = 1.0, rho: float = 0.5) -> None:
        self.sigma2 = float(sigma2)
        self.rho = float(rho)

    def n_params(self) -> int:
        return 2

    def params(self) -> list[float]:
        return [self.sigma2, self.rho]

    def set_params(self, params: Sequence[float]) -> None:
        if len(params) != 2:
            raise InvalidParameterError(
                f"AR1 expects 2 parameters, got {len(params)}"
            )
        sigma2, rho = float(params[0]), float(params[1])
        if sigma2 <= 0.0:
            raise InvalidParameterError("AR1 sigma^2 must be positive")
        if abs(rho) >= 1.0:
            raise InvalidParameterError("AR1 rho must satisfy |rho| < 1")
        self.sigma2 = sigma2
        self.rho = rho

    def covariance_matrix(self, dim: int) -> np.ndarray:
        positions = np.arange(dim)
        distance = np.abs(np.subtract.outer(positions, positions))
        cov = self.sigma2 * np.power(self.rho, distance, dtype=float)
        cov[np.abs(cov) <= _DROP_BELOW] = 0.0
        return cov

    def inverse_covariance_matrix(self, dim: int) -> np.ndarray:
        if dim == 0:
            return np.zeros((0, 0))
        if dim == 1:
            return np.array([[1.0 / self.sigma2]])
        rho2 = self.rho * self.rho
        scale = 1.0 / (self.sigma2 * (1.0 - rho2))
        return _tridiagonal(dim, scale, scale * (1.0 + rho2), -scale * self.rho)

    def log_determinant(self, dim: int) -> float:
        if dim == 0:
            return 0.0
        if dim == 1:
            return math.log(self.sigma2)
        rho2 = self.rho * self.rho
        return dim * math.log(self.sigma2) + (dim - 1) * math.log(1.0 - rho2)

    def derivatives_of_inverse(self, dim: int) -> list[np.ndarray]:
        if dim == 0:
            return [np.zeros((0, 0)), np.zeros((0, 0))]

        d_sigma2 = self.inverse_covariance_matrix(dim) * (-1.0 / self.sigma2)
        if dim == 1:
            return [d_sigma2, np.zeros((1, 1))]

        rho = self.rho
        rho2 = rho * rho
        one_minus_rho2 = 1.0 - rho2
        s = 1.0 / (self.sigma2 * one_minus_rho2)
        ds_drho = s * 2.0 * rho / one_minus_rho2

        d_rho = _tridiagonal(
            dim,
            ds_drho,
            ds_drho * (1.0 + rho2) + s * 2.0 * rho,
            ds_drho * (-rho) - s,
        )
        return [d_sigma2, d_rho]

    def bounds(self) -> list[tuple[float, float]]:
        return [(1e-10, math.inf), (-0.999, 0.999)]