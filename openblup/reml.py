"""EM-REML estimation for a single random term (dense, small problems)."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .mme import NotPositiveDefiniteError, solve_mme

MAX_ITERATIONS = 50
TOLERANCE = 1e-6
_FLOOR = 1e-10


@dataclass
class RemlResult:
    """Estimates from an EM-REML fit."""

    fixed_effects: list[float]
    random_effects: list[float]
    sigma2_random: float
    sigma2_residual: float
    log_likelihood: float
    converged: bool
    n_iterations: int


def _solve(x, z, y, sigma2_u, sigma2_e, k_inv, context: str):
    try:
        return solve_mme(x, z, y, 1.0 / sigma2_e, k_inv / sigma2_u)
    except NotPositiveDefiniteError as exc:
        raise NotPositiveDefiniteError(f"{context}: {exc}") from exc


def fit_em_reml(y, x, z, ginv=None) -> RemlResult:
    """Fit y = Xb + Zu + e by EM-REML, with var(u) = sigma2_u * K.

    ``ginv`` is K⁻¹; the identity is used when it is None. The log-likelihood
    is not evaluated and is reported as 0.
    """
    y = np.asarray(y, dtype=float)
    x = np.asarray(x, dtype=float)
    z = np.asarray(z, dtype=float)
    n = y.shape[0]
    p = x.shape[1]
    q = z.shape[1]

    if n <= p:
        raise ValueError("need more observations than fixed-effect columns")
    if q == 0:
        raise ValueError("Z must have at least one column")

    k_inv = np.eye(q) if ginv is None else np.asarray(ginv, dtype=float)
    if k_inv.shape != (q, q):
        raise ValueError(f"G-inverse must be {q}x{q}, got {k_inv.shape}")

    y_mean = float(y.mean())
    y_var = float(np.sum((y - y_mean) ** 2)) / max(n - 1, 1)
    init_var = max(y_var / 2.0, 0.01)
    sigma2_u = sigma2_e = init_var

    converged = False
    n_iterations = 0

    for iteration in range(MAX_ITERATIONS):
        sol = _solve(x, z, y, sigma2_u, sigma2_e, k_inv, "MME solve failed")
        old_u, old_e = sigma2_u, sigma2_e

        b = np.asarray(sol.fixed_effects)
        u = np.asarray(sol.random_effects)
        resid = y - x @ b - z @ u
        sigma2_e = max(float(y @ resid) / (n - p), _FLOOR)

        u_kinv_u = float(u @ (k_inv @ u))
        trace_cinv_uu = sum(sol.c_inv_diag[p:])
        sigma2_u = max((u_kinv_u + trace_cinv_uu) / q, _FLOOR)

        change = math.hypot(sigma2_u - old_u, sigma2_e - old_e) / max(
            math.hypot(old_u, old_e), _FLOOR
        )

        n_iterations = iteration + 1
        if iteration > 0 and change < TOLERANCE:
            converged = True
            break

    sol = _solve(x, z, y, sigma2_u, sigma2_e, k_inv, "Final MME solve failed")

    return RemlResult(
        fixed_effects=sol.fixed_effects,
        random_effects=sol.random_effects,
        sigma2_random=sigma2_u,
        sigma2_residual=sigma2_e,
        log_likelihood=0.0,
        converged=converged,
        n_iterations=n_iterations,
    )