"""Heterogeneous diagonal variance structure."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from .base import InvalidParameterError, VarStruct


class Diagonal(VarStruct):
    """Sigma = diag(sigma^2_1, ..., sigma^2_k): one variance per level."""

    name = "Diagonal"

    def __init__(self, variances: Sequence[float]) -> None:
        self.variances = [float(v) for v in variances]

    @classmethod
    def default_start(cls, k: int) -> "Diagonal":
        """Structure with all k variances set to 1."""
        return cls([1.0] * k)

    def dim(self) -> int:
        """Number of distinct variance levels."""
        return len(self.variances)

    def _check_dim(self, dim: int) -> None:
        if dim != len(self.variances):
            raise ValueError(
                f"Diagonal dim mismatch: structure has {len(self.variances)} "
                f"variances but dim={dim} requested"
            )

    def n_params(self) -> int:
        return len(self.variances)

    def params(self) -> list[float]:
        return list(self.variances)

    def set_params(self, params: Sequence[float]) -> None:
        if len(params) != len(self.variances):
            raise InvalidParameterError(
                f"Diagonal expects {len(self.variances)} parameters, got {len(params)}"
            )
        for i, value in enumerate(params):
            if value <= 0.0:
                raise InvalidParameterError(
                    f"Diagonal variance[{i}] must be positive, got {value}"
                )
        self.variances = [float(v) for v in params]

    def covariance_matrix(self, dim: int) -> np.ndarray:
        self._check_dim(dim)
        return np.diag(self.variances)

    def inverse_covariance_matrix(self, dim: int) -> np.ndarray:
        self._check_dim(dim)
        return np.diag([1.0 / v for v in self.variances])

    def log_determinant(self, dim: int) -> float:
        self._check_dim(dim)
        return sum(math.log(v) for v in self.variances)

    def derivatives_of_inverse(self, dim: int) -> list[np.ndarray]:
        self._check_dim(dim)
        k = len(self.variances)
        derivs = []
        for i, v in enumerate(self.variances):
            d = np.zeros((k, k))
            d[i, i] = -1.0 / (v * v)
            derivs.append(d)
        return derivs

    def bounds(self) -> list[tuple[float, float]]:
        return [(1e-10, math.inf)] * len(self.variances)