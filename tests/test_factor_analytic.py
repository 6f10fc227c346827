import math

import numpy as np
import pytest

from openblup.variance.base import InvalidParameterError
from openblup.variance.factor_analytic import FactorAnalytic, fa1, fa2


def _fa1_example():
    return FactorAnalytic(3, 1, [2.0, 1.0, 3.0], [1.0, 2.0, 0.5])


def _fa2_example():
    return FactorAnalytic(
        4, 2, [1.0, 0.5, 0.3, 0.8, 0.2, 0.7, 0.4, 0.1], [1.0, 1.0, 1.0, 1.0]
    )


def test_fa1_param_count():
    assert fa1(4).n_params() == 8


def test_fa2_param_count():
    assert fa2(5).n_params() == 15


def test_default_start_values():
    fa = fa1(3)
    assert fa.params() == [0.1, 0.1, 0.1, 1.0, 1.0, 1.0]


def test_fa1_covariance():
    cov = _fa1_example().covariance_matrix(3)
    expected = np.array([[5.0, 2.0, 6.0], [2.0, 3.0, 3.0], [6.0, 3.0, 9.5]])
    np.testing.assert_allclose(cov, expected, atol=1e-10)


def test_fa_inverse_woodbury():
    fa = _fa1_example()
    product = fa.covariance_matrix(3) @ fa.inverse_covariance_matrix(3)
    np.testing.assert_allclose(product, np.eye(3), atol=1e-9)


def test_fa2_inverse():
    fa = _fa2_example()
    product = fa.covariance_matrix(4) @ fa.inverse_covariance_matrix(4)
    np.testing.assert_allclose(product, np.eye(4), atol=1e-8)


def test_fa_log_determinant():
    fa = _fa1_example()
    expected = math.log(np.linalg.det(fa.covariance_matrix(3)))
    assert fa.log_determinant(3) == pytest.approx(expected, abs=1e-10)


def test_fa_set_params():
    fa = fa1(3)
    params = [1.0, 2.0, 3.0, 0.5, 0.5, 0.5]
    fa.set_params(params)
    assert fa.params() == params


def test_fa_set_params_bad_psi():
    fa = fa1(3)
    with pytest.raises(InvalidParameterError):
        fa.set_params([1.0, 2.0, 3.0, 0.5, -0.1, 0.5])


def test_fa_set_params_wrong_count():
    fa = fa1(3)
    with pytest.raises(InvalidParameterError):
        fa.set_params([1.0, 2.0])


def test_fa_bounds():
    bounds = fa2(3).bounds()
    assert len(bounds) == 9
    assert math.isinf(bounds[0][0]) and bounds[0][0] < 0.0
    assert bounds[6][0] > 0.0
    assert math.isinf(bounds[8][1])


def test_fa_name():
    assert fa1(4).name == "FactorAnalytic"


def test_fa_copy():
    fa = FactorAnalytic(2, 1, [1.0, 0.5], [1.0, 2.0])
    clone = fa.copy()
    assert clone.n_params() == 4
    clone.set_params([3.0, 3.0, 3.0, 3.0])
    assert fa.params() == [1.0, 0.5, 1.0, 2.0]


def test_fa_symmetry():
    fa = _fa2_example()
    cov = fa.covariance_matrix(4)
    inv = fa.inverse_covariance_matrix(4)
    np.testing.assert_allclose(cov, cov.T, atol=1e-10)
    np.testing.assert_allclose(inv, inv.T, atol=1e-10)


def test_derivatives_with_zero_loadings():
    fa = FactorAnalytic(2, 1, [0.0, 0.0], [2.0, 4.0])
    derivs = fa.derivatives_of_inverse(2)
    assert len(derivs) == 4
    assert derivs[2][0, 0] == pytest.approx(-0.25, abs=1e-5)
    assert derivs[2][1, 1] == pytest.approx(0.0, abs=1e-8)
    assert derivs[3][1, 1] == pytest.approx(-1.0 / 16.0, abs=1e-5)


def test_dim_mismatch_raises():
    with pytest.raises(ValueError):
        _fa1_example().covariance_matrix(4)


def test_invalid_factor_count():
    with pytest.raises(ValueError):
        FactorAnalytic(2, 3)
    with pytest.raises(ValueError):
        FactorAnalytic(2, 0)


def test_wrong_loading_length():
    with pytest.raises(ValueError):
        FactorAnalytic(3, 1, [1.0, 2.0], [1.0, 1.0, 1.0])