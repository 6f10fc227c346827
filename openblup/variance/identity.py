"""Independent, homogeneous variance structure."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from .base import InvalidParameterError, VarStruct


class Identity(VarStruct):
    """G = sigma^2 * I, with the single parameter sigma^2."""

    name = "Identity"

    def __init__(self, sigma2: float = 1.0) -> None:
        self.sigma2 = float(sigma2)

    def n_params(self) -> int:
        return 1

    def params(self) -> list[float]:
        return [self.sigma2]

    def set_params(self, params: Sequence[float]) -> None:
        if len(params) != 1:
            raise InvalidParameterError(
                f"Identity expects 1 parameter, got {len(params)}"
            )
        self.sigma2 = float(params[0])

    def covariance_matrix(self, dim: int) -> np.ndarray:
        return self.sigma2 * np.eye(dim)

    def inverse_covariance_matrix(self, dim: int) -> np.ndarray:
        return self.inverse_scale() * np.eye(dim)

    def log_determinant(self, dim: int) -> float:
        return dim * math.log(self.sigma2)

    def derivatives_of_inverse(self, dim: int) -> list[np.ndarray]:
        return [-1.0 / (self.sigma2 * self.sigma2) * np.eye(dim)]

    def bounds(self) -> list[tuple[float, float]]:
        return [(1e-10, math.inf)]

    def inverse_scale(self) -> float:
        """Scaling factor 1/sigma^2 applied to a relationship-matrix inverse."""
        return 1.0 / self.sigma2