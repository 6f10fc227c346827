"""Genomic relationship matrix (VanRaden method 1)."""

from __future__ import annotations

import numpy as np


class MonomorphicMarkersError(ValueError):
    """Raised when no marker varies, so the G-matrix scale is zero."""


def compute_g_matrix(markers) -> np.ndarray:
    """G = Z Z' / sum(2 p (1 - p)) for 0/1/2-coded markers (individuals x markers).

    Allele frequencies are estimated from the markers themselves.
    """
    m = np.asarray(markers, dtype=float)
    if m.ndim != 2:
        raise ValueError("markers must be a two-dimensional array")
    n = m.shape[0]

    with np.errstate(invalid="ignore", divide="ignore"):
        freqs = m.sum(axis=0) / (2.0 * n)
        z = m - 2.0 * freqs
        denom = float(np.sum(2.0 * freqs * (1.0 - freqs)))

    if denom < 1e-10:
        raise MonomorphicMarkersError("All markers monomorphic")

    return (z @ z.T) / denom