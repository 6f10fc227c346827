"""Dense assembly and solution of Henderson's mixed model equations."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


class NotPositiveDefiniteError(ValueError):
    """Raised when the coefficient matrix has no Cholesky factor."""


@dataclass
class MmeSolution:
    """Solutions of the mixed model equations and quantities derived from C."""

    fixed_effects: list[float]
    random_effects: list[float]
    log_det_c: float
    c_inv_diag: list[float]


def solve_mme(x, z, y, r_inv_scale: float, g_inv) -> MmeSolution:
    """Solve [X'R⁻¹X  X'R⁻¹Z; Z'R⁻¹X  Z'R⁻¹Z + G⁻¹] [b; u] = [X'R⁻¹y; Z'R⁻¹y].

    R⁻¹ is r_inv_scale times the identity.
    """
    x = np.asarray(x, dtype=float)
    z = np.asarray(z, dtype=float)
    y = np.asarray(y, dtype=float)
    g_inv = np.asarray(g_inv, dtype=float)

    n, p = x.shape
    q = z.shape[1]
    if z.shape[0] != n or y.shape != (n,):
        raise ValueError("X, Z and y must have the same number of rows")
    if g_inv.shape != (q, q):
        raise ValueError(f"G-inverse must be {q}x{q}, got {g_inv.shape}")

    dim = p + q
    c = np.zeros((dim, dim))
    xtz = x.T @ z * r_inv_scale
    c[:p, :p] = x.T @ x * r_inv_scale
    c[:p, p:] = xtz
    c[p:, :p] = xtz.T
    c[p:, p:] = z.T @ z * r_inv_scale + g_inv

    rhs = np.concatenate([x.T @ y * r_inv_scale, z.T @ y * r_inv_scale])

    try:
        lower = np.linalg.cholesky(c)
    except np.linalg.LinAlgError as exc:
        raise NotPositiveDefiniteError("Matrix not positive definite") from exc

    lower_inv = np.linalg.solve(lower, np.eye(dim))
    solution = lower_inv.T @ (lower_inv @ rhs)
    log_det_c = 2.0 * float(np.sum(np.log(np.diag(lower))))
    c_inv_diag = np.sum(lower_inv * lower_inv, axis=0)

    return MmeSolution(
        fixed_effects=solution[:p].tolist(),
        random_effects=solution[p:].tolist(),
        log_det_c=log_det_c,
        c_inv_diag=c_inv_diag.tolist(),
    )