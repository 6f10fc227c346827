"""Common interface shared by all variance structures."""

from __future__ import annotations

import copy as _copy
from abc import ABC, abstractmethod
from collections.abc import Sequence

import numpy as np


class InvalidParameterError(ValueError):
    """Raised when variance parameters are out of range or of the wrong count."""


class VarStruct(ABC):
    """A parameterised covariance structure for random effects or residuals.

    Matrices are returned as dense ``numpy`` arrays of ``float64``.
    """

    #: Human-readable name of the structure.
    name: str = "VarStruct"

    @abstractmethod
    def n_params(self) -> int:
        """Number of variance parameters."""

    @abstractmethod
    def params(self) -> list[float]:
        """Current parameter values."""

    @abstractmethod
    def set_params(self, params: Sequence[float]) -> None:
        """Replace the parameter values, raising InvalidParameterError if invalid."""

    @abstractmethod
    def covariance_matrix(self, dim: int) -> np.ndarray:
        """Covariance matrix of the given dimension."""

    @abstractmethod
    def inverse_covariance_matrix(self, dim: int) -> np.ndarray:
        """Inverse of the covariance matrix of the given dimension."""

    @abstractmethod
    def log_determinant(self, dim: int) -> float:
        """Natural logarithm of the covariance determinant."""

    @abstractmethod
    def derivatives_of_inverse(self, dim: int) -> list[np.ndarray]:
        """Derivative of the inverse covariance with respect to each parameter."""

    @abstractmethod
    def bounds(self) -> list[tuple[float, float]]:
        """(lower, upper) bounds for each parameter."""

    def initial_params(self) -> list[float]:
        """Starting values for estimation; the current parameters by default."""
        return self.params()

    def copy(self) -> "VarStruct":
        """Independent copy of this structure."""
        return _copy.deepcopy(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(params={self.params()!r})"