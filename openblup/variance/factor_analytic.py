"""Factor analytic variance structure for multi-environment trials."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from .base import InvalidParameterError, VarStruct

_DROP_BELOW = 1e-15
_FD_STEP = 1e-7


def _drop_tiny(mat: np.ndarray) -> np.ndarray:
    mat[np.abs(mat) <= _DROP_BELOW] = 0.0
    return mat


class FactorAnalytic(VarStruct):
    """Sigma = Lambda Lambda' + Psi, with p environments and k factors.

    Lambda is a p x k loading matrix and Psi = diag(psi_1, ..., psi_p).
    The parameters are the k*p loadings in column-major order
    (all environments for factor 0, then factor 1, ...) followed by the
    p specific variances.
    """

    name = "FactorAnalytic"

    def __init__(
        self,
        n_env: int,
        n_factors: int,
        loadings: Sequence[float] | None = None,
        psi: Sequence[float] | None = None,
    ) -> None:
        if not 0 < n_factors <= n_env:
            raise ValueError("n_factors must be in [1, n_env]")
        self.n_env = int(n_env)
        self.n_factors = int(n_factors)
        n_load = self.n_env * self.n_factors
        if loadings is None:
            loadings = [0.1] * n_load
        if psi is None:
            psi = [1.0] * self.n_env
        if len(loadings) != n_load:
            raise ValueError(f"Expected {n_load} loadings, got {len(loadings)}")
        if len(psi) != self.n_env:
            raise ValueError(
                f"Expected {self.n_env} specific variances, got {len(psi)}"
            )
        self.loadings = [float(v) for v in loadings]
        self.psi = [float(v) for v in psi]

    def _check_dim(self, dim: int) -> None:
        if dim != self.n_env:
            raise ValueError(
                f"FactorAnalytic dim mismatch: structure has {self.n_env} "
                f"environments but dim={dim} requested"
            )

    def _lambda(self) -> np.ndarray:
        """Loading matrix Lambda (n_env x n_factors)."""
        return np.asarray(self.loadings, dtype=float).reshape(
            self.n_factors, self.n_env
        ).T

    def _inner_matrix(self) -> np.ndarray:
        """M = I_k + Lambda' Psi^-1 Lambda."""
        lam = self._lambda()
        psi_inv = 1.0 / np.asarray(self.psi, dtype=float)
        return np.eye(self.n_factors) + lam.T @ (psi_inv[:, None] * lam)

    def _sigma(self) -> np.ndarray:
        lam = self._lambda()
        return lam @ lam.T + np.diag(self.psi)

    def _sigma_inverse(self) -> np.ndarray:
        """Woodbury: Psi^-1 - Psi^-1 Lambda M^-1 Lambda' Psi^-1."""
        lam = self._lambda()
        psi_inv = 1.0 / np.asarray(self.psi, dtype=float)
        pil = psi_inv[:, None] * lam
        m_inv = np.linalg.inv(self._inner_matrix())
        return np.diag(psi_inv) - pil @ m_inv @ pil.T

    def n_params(self) -> int:
        return self.n_env * self.n_factors + self.n_env

    def params(self) -> list[float]:
        return list(self.loadings) + list(self.psi)

    def set_params(self, params: Sequence[float]) -> None:
        expected = self.n_params()
        if len(params) != expected:
            raise InvalidParameterError(
                f"FA({self.n_factors}) with {self.n_env} envs expects {expected} "
                f"parameters, got {len(params)}"
            )
        n_load = self.n_env * self.n_factors
        psi = [float(v) for v in params[n_load:]]
        for i, value in enumerate(psi):
            if value <= 0.0:
                raise InvalidParameterError(
                    f"Specific variance psi_{i} must be positive, got {value}"
                )
        self.loadings = [float(v) for v in params[:n_load]]
        self.psi = psi

    def covariance_matrix(self, dim: int) -> np.ndarray:
        self._check_dim(dim)
        return _drop_tiny(self._sigma())

    def inverse_covariance_matrix(self, dim: int) -> np.ndarray:
        self._check_dim(dim)
        return _drop_tiny(self._sigma_inverse())

    def log_determinant(self, dim: int) -> float:
        """log|Sigma| = log|Psi| + log|I_k + Lambda' Psi^-1 Lambda|."""
        self._check_dim(dim)
        log_psi = sum(math.log(v) for v in self.psi)
        _, log_det_m = np.linalg.slogdet(self._inner_matrix())
        return log_psi + float(log_det_m)

    def derivatives_of_inverse(self, dim: int) -> list[np.ndarray]:
        self._check_dim(dim)
        n_load = self.n_env * self.n_factors
        base = self.params()
        derivs = []
        for p_idx in range(len(base)):
            plus = list(base)
            minus = list(base)
            plus[p_idx] += _FD_STEP
            minus[p_idx] -= _FD_STEP
            fa_plus = FactorAnalytic(
                self.n_env, self.n_factors, plus[:n_load], plus[n_load:]
            )
            fa_minus = FactorAnalytic(
                self.n_env, self.n_factors, minus[:n_load], minus[n_load:]
            )
            diff = (fa_plus._sigma_inverse() - fa_minus._sigma_inverse()) / (
                2.0 * _FD_STEP
            )
            derivs.append(_drop_tiny(diff))
        return derivs

    def bounds(self) -> list[tuple[float, float]]:
        loading_bounds = [(-math.inf, math.inf)] * (self.n_env * self.n_factors)
        psi_bounds = [(1e-6, math.inf)] * self.n_env
        return loading_bounds + psi_bounds


def fa1(n_env: int) -> FactorAnalytic:
    """Single-factor structure with default starting values."""
    return FactorAnalytic(n_env, 1)


def fa2(n_env: int) -> FactorAnalytic:
    """Two-factor structure with default starting values."""
    return FactorAnalytic(n_env, 2)