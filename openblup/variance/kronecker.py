"""Kronecker product for separable covariance structures."""

from __future__ import annotations

import numpy as np


def kronecker_product(a, b) -> np.ndarray:
    """Return A (x) B: an (m*p x n*q) matrix whose block (i, j) is A[i, j] * B."""
    return np.kron(np.asarray(a, dtype=float), np.asarray(b, dtype=float))