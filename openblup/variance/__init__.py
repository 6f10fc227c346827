"""Variance structures (identity, diagonal, AR1, unstructured, factor analytic) and Kronecker products."""

__all__ = [
    "base",
    "identity",
    "kronecker",
    "diagonal",
    "ar1",
    "unstructured",
    "factor_analytic",
]