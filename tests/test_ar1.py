import math

import numpy as np
import pytest

from openblup.variance.ar1 import AR1
from openblup.variance.base import InvalidParameterError, VarStruct


def test_ar1_basic():
    ar1 = AR1(2.0, 0.7)
    assert ar1.name == "AR1"
    assert ar1.n_params() == 2
    assert ar1.params() == [2.0, 0.7]


def test_ar1_default_start():
    assert AR1().params() == [1.0, 0.5]


def test_ar1_covariance_pattern():
    cov = AR1(3.0, 0.6).covariance_matrix(4)
    assert cov.shape == (4, 4)
    np.testing.assert_allclose(np.diag(cov), [3.0, 3.0, 3.0, 3.0], atol=1e-10)
    assert cov[0, 1] == pytest.approx(1.8, abs=1e-10)
    assert cov[1, 0] == pytest.approx(1.8, abs=1e-10)
    assert cov[0, 2] == pytest.approx(1.08, abs=1e-10)
    assert cov[3, 0] == pytest.approx(0.648, abs=1e-10)
    np.testing.assert_allclose(cov, cov.T, atol=1e-12)


def test_ar1_inverse_tridiagonal():
    ar1 = AR1(2.0, 0.7)
    dim = 5
    product = ar1.covariance_matrix(dim) @ ar1.inverse_covariance_matrix(dim)
    np.testing.assert_allclose(product, np.eye(dim), atol=1e-10)
    inv = ar1.inverse_covariance_matrix(dim)
    assert inv[0, 2] == 0.0
    assert inv[1, 4] == 0.0


def test_ar1_log_determinant():
    ar1 = AR1(2.0, 0.5)
    dim = 4
    logdet = ar1.log_determinant(dim)
    assert logdet == pytest.approx(4 * math.log(2.0) + 3 * math.log(0.75), abs=1e-10)
    sign, direct = np.linalg.slogdet(ar1.covariance_matrix(dim))
    assert sign == 1.0
    assert logdet == pytest.approx(direct, abs=1e-8)


def test_ar1_rho_zero_gives_scaled_identity():
    ar1 = AR1(4.0, 0.0)
    np.testing.assert_allclose(ar1.covariance_matrix(3), 4.0 * np.eye(3), atol=1e-10)
    np.testing.assert_allclose(
        ar1.inverse_covariance_matrix(3), 0.25 * np.eye(3), atol=1e-10
    )


@pytest.mark.parametrize(
    "params",
    [[0.0, 0.5], [-1.0, 0.5], [1.0, 1.0], [1.0, -1.0]],
)
def test_ar1_bounds_checking_invalid(params):
    ar1 = AR1(1.0, 0.5)
    with pytest.raises(InvalidParameterError):
        ar1.set_params(params)
    assert ar1.params() == [1.0, 0.5]


@pytest.mark.parametrize("params", [[2.0, 0.99], [2.0, -0.99]])
def test_ar1_bounds_checking_valid(params):
    ar1 = AR1(1.0, 0.5)
    ar1.set_params(params)
    assert ar1.params() == params


def test_ar1_set_params():
    ar1 = AR1(1.0, 0.5)
    ar1.set_params([3.0, 0.8])
    assert ar1.params() == [3.0, 0.8]


@pytest.mark.parametrize("params", [[1.0], [1.0, 2.0, 3.0]])
def test_ar1_set_params_wrong_count(params):
    ar1 = AR1(1.0, 0.5)
    with pytest.raises(InvalidParameterError):
        ar1.set_params(params)


def test_invalid_parameter_error_is_value_error():
    with pytest.raises(ValueError):
        AR1().set_params([1.0])


def test_ar1_copy():
    ar1 = AR1(2.0, 0.6)
    clone: VarStruct = ar1.copy()
    assert clone.params() == [2.0, 0.6]
    assert clone.name == "AR1"
    clone.set_params([5.0, 0.1])
    assert ar1.params() == [2.0, 0.6]


def test_ar1_initial_params():
    assert AR1(2.5, -0.3).initial_params() == [2.5, -0.3]


def _numerical_derivative(make, eps, dim):
    plus = make(eps).inverse_covariance_matrix(dim)
    minus = make(-eps).inverse_covariance_matrix(dim)
    return (plus - minus) / (2.0 * eps)


def test_ar1_derivatives_sigma2():
    sigma2, rho, dim, eps = 2.0, 0.6, 4, 1e-6
    analytical = AR1(sigma2, rho).derivatives_of_inverse(dim)[0]
    numerical = _numerical_derivative(lambda e: AR1(sigma2 + e, rho), eps, dim)
    np.testing.assert_allclose(analytical, numerical, atol=1e-5)


def test_ar1_derivatives_rho():
    sigma2, rho, dim, eps = 2.0, 0.6, 4, 1e-6
    analytical = AR1(sigma2, rho).derivatives_of_inverse(dim)[1]
    numerical = _numerical_derivative(lambda e: AR1(sigma2, rho + e), eps, dim)
    np.testing.assert_allclose(analytical, numerical, atol=1e-4)


def test_ar1_derivatives_count_and_shape():
    derivs = AR1(1.5, 0.2).derivatives_of_inverse(3)
    assert len(derivs) == 2
    assert all(d.shape == (3, 3) for d in derivs)


def test_ar1_dim1():
    ar1 = AR1(3.0, 0.5)
    assert ar1.covariance_matrix(1)[0, 0] == pytest.approx(3.0, abs=1e-10)
    assert ar1.inverse_covariance_matrix(1)[0, 0] == pytest.approx(1.0 / 3.0, abs=1e-10)
    assert ar1.log_determinant(1) == pytest.approx(math.log(3.0), abs=1e-10)
    d_sigma2, d_rho = ar1.derivatives_of_inverse(1)
    assert d_sigma2[0, 0] == pytest.approx(-1.0 / 9.0, abs=1e-12)
    assert d_rho[0, 0] == 0.0


def test_ar1_dim0():
    ar1 = AR1(3.0, 0.5)
    assert ar1.inverse_covariance_matrix(0).shape == (0, 0)
    assert ar1.log_determinant(0) == 0.0
    derivs = ar1.derivatives_of_inverse(0)
    assert [d.shape for d in derivs] == [(0, 0), (0, 0)]


def test_ar1_negative_rho():
    ar1 = AR1(1.0, -0.5)
    dim = 4
    product = ar1.covariance_matrix(dim) @ ar1.inverse_covariance_matrix(dim)
    np.testing.assert_allclose(product, np.eye(dim), atol=1e-10)


def test_ar1_bounds():
    bounds = AR1().bounds()
    assert len(bounds) == 2
    assert bounds[0][0] > 0.0
    assert math.isinf(bounds[0][1])
    assert bounds[1] == (-0.999, 0.999)