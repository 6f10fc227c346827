"""Unstructured covariance with a Cholesky parameterisation."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from .base import InvalidParameterError, VarStruct

_DROP_BELOW = 1e-15
_FD_STEP = 1e-7


def _n_chol_params(dim: int) -> int:
    return dim * (dim + 1) // 2


def _diagonal_positions(dim: int) -> list[int]:
    """Positions of the L[i, i] entries within the column-major lower triangle."""
    positions = []
    idx = 0
    for col in range(dim):
        positions.append(idx)
        idx += dim - col
    return positions


def _drop_tiny(mat: np.ndarray) -> np.ndarray:
    mat[np.abs(mat) <= _DROP_BELOW] = 0.0
    return mat


class Unstructured(VarStruct):
    """Full covariance Sigma = L L', with L lower triangular.

    The parameters are the dim*(dim+1)/2 lower-triangle entries of L in
    column-major order: L[0,0], L[1,0], ..., L[k-1,0], L[1,1], ..., L[k-1,k-1].
    Positive diagonal entries of L guarantee a positive definite Sigma.
    """

    name = "Unstructured"

    def __init__(self, dim: int, chol_params: Sequence[float]) -> None:
        expected = _n_chol_params(dim)
        if len(chol_params) != expected:
            raise InvalidParameterError(
                f"Expected {expected} Cholesky parameters for dim={dim}, "
                f"got {len(chol_params)}"
            )
        self.dim = int(dim)
        self.chol_params = [float(v) for v in chol_params]

    @classmethod
    def default_start(cls, dim: int) -> "Unstructured":
        """Structure with L = I, so that Sigma = I."""
        params = [0.0] * _n_chol_params(dim)
        for idx in _diagonal_positions(dim):
            params[idx] = 1.0
        return cls(dim, params)

    def _check_dim(self, dim: int) -> None:
        if dim != self.dim:
            raise ValueError(
                f"Unstructured dim mismatch: structure has dim={self.dim} "
                f"but dim={dim} requested"
            )

    def n_params(self) -> int:
        return len(self.chol_params)

    def params(self) -> list[float]:
        return list(self.chol_params)

    def set_params(self, params: Sequence[float]) -> None:
        expected = _n_chol_params(self.dim)
        if len(params) != expected:
            raise InvalidParameterError(
                f"Unstructured(dim={self.dim}) expects {expected} parameters, "
                f"got {len(params)}"
            )
        for col, idx in enumerate(_diagonal_positions(self.dim)):
            if params[idx] <= 0.0:
                raise InvalidParameterError(
                    f"Cholesky diagonal element L[{col},{col}] must be positive, "
                    f"got {params[idx]}"
                )
        self.chol_params = [float(v) for v in params]

    def cholesky_factor(self) -> np.ndarray:
        """The lower triangular factor L as a dense matrix."""
        k = self.dim
        l_mat = np.zeros((k, k))
        rows, cols = np.tril_indices(k)
        # tril_indices is row-major; reorder to column-major to match parameters.
        order = np.lexsort((rows, cols))
        l_mat[rows[order], cols[order]] = self.chol_params
        return l_mat

    def _sigma(self) -> np.ndarray:
        l_mat = self.cholesky_factor()
        return l_mat @ l_mat.T

    def _sigma_inverse(self) -> np.ndarray:
        l_mat = self.cholesky_factor()
        l_inv = np.linalg.solve(l_mat, np.eye(self.dim))
        return l_inv.T @ l_inv

    def covariance_matrix(self, dim: int) -> np.ndarray:
        self._check_dim(dim)
        return _drop_tiny(self._sigma())

    def inverse_covariance_matrix(self, dim: int) -> np.ndarray:
        self._check_dim(dim)
        return _drop_tiny(self._sigma_inverse())

    def log_determinant(self, dim: int) -> float:
        self._check_dim(dim)
        return 2.0 * sum(
            math.log(self.chol_params[idx]) for idx in _diagonal_positions(self.dim)
        )

    def derivatives_of_inverse(self, dim: int) -> list[np.ndarray]:
        self._check_dim(dim)
        derivs = []
        for p in range(len(self.chol_params)):
            plus = list(self.chol_params)
            minus = list(self.chol_params)
            plus[p] += _FD_STEP
            minus[p] -= _FD_STEP
            inv_plus = Unstructured(dim, plus).inverse_covariance_matrix(dim)
            inv_minus = Unstructured(dim, minus).inverse_covariance_matrix(dim)
            derivs.append(_drop_tiny((inv_plus - inv_minus) / (2.0 * _FD_STEP)))
        return derivs

    def bounds(self) -> list[tuple[float, float]]:
        result: list[tuple[float, float]] = []
        for col in range(self.dim):
            result.append((1e-10, math.inf))
            result.extend((-math.inf, math.inf) for _ in range(col + 1, self.dim))
        return result