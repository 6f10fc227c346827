# openblup

Building blocks for mixed models in plant and animal breeding: variance
structures for random effects and residuals, the pedigree-based A-inverse,
the genomic relationship matrix, a dense solver for the mixed model
equations and a small EM-REML fitter for one random term. All matrices are
dense `numpy` arrays of `float64`.

## Installation

```
pip install openblup
```

To run the test suite:

```
pip install "openblup[test]"
pytest
```

## Variance structures

Every structure in `openblup.variance` derives from
`openblup.variance.base.VarStruct` and offers `name`, `n_params()`,
`params()`, `set_params(params)`, `covariance_matrix(dim)`,
`inverse_covariance_matrix(dim)`, `log_determinant(dim)`,
`derivatives_of_inverse(dim)` (one matrix per parameter), `bounds()`,
`initial_params()` and `copy()`.

`set_params` raises `InvalidParameterError` (a `ValueError`) when the
number of parameters is wrong, and, for `Diagonal`, `AR1`, `Unstructured`
and `FactorAnalytic`, when a variance, a Cholesky diagonal entry or rho is
out of range. Structures of fixed size (`Diagonal`, `Unstructured`,
`FactorAnalytic`) raise `ValueError` when asked for a matrix of another
dimension.

| Class | Module | Covariance | Parameters |
|-------|--------|------------|------------|
| `Identity(sigma2=1.0)` | `identity` | sigma² I | sigma² |
| `Diagonal(variances)` | `diagonal` | diag(sigma²₁, …, sigma²ₖ) | one variance per level |
| `AR1(sigma2=1.0, rho=0.5)` | `ar1` | sigma² rho^\|i−j\| | sigma², rho with \|rho\| < 1 |
| `Unstructured(dim, chol_params)` | `unstructured` | L L′ | lower triangle of L, column by column |
| `FactorAnalytic(n_env, n_factors, loadings=None, psi=None)` | `factor_analytic` | ΛΛ′ + Ψ | loadings (factor by factor), then specific variances |

Further helpers:

- `Identity.inverse_scale()` returns 1/sigma², the factor applied to a
  relationship-matrix inverse.
- `Diagonal.default_start(k)` and `Unstructured.default_start(dim)` give
  unit variances and L = I respectively; `Unstructured.cholesky_factor()`
  returns L.
- `fa1(n_env)` and `fa2(n_env)` build one- and two-factor models with
  loadings 0.1 and specific variances 1.
- `AR1` has a closed-form tridiagonal inverse and exact derivatives;
  `Unstructured` and `FactorAnalytic` compute derivatives of the inverse by
  central differences.
- `kronecker_product(a, b)` in `openblup.variance.kronecker` forms A ⊗ B,
  for example to combine row and column AR1 structures of a field trial:

```python
from openblup.variance.ar1 import AR1
from openblup.variance.kronecker import kronecker_product

rows = AR1(1.0, 0.6)
cols = AR1(1.0, 0.3)
field_inverse = kronecker_product(
    rows.inverse_covariance_matrix(4),
    cols.inverse_covariance_matrix(5),
)
```

## Pedigrees and relationship matrices

```python
from openblup.pedigree import Pedigree
from openblup.ainverse import compute_a_inverse

ped = Pedigree()
ped.add_animal("1", "0", "0")
ped.add_animal("2", "0", "0")
ped.add_animal("3", "1", "2")
sorted_ped = ped.sort()          # SortedPedigree: parents before offspring
a_inv = compute_a_inverse(sorted_ped)
```

Unknown parents are written as `"0"`, an empty string or `"NA"` in any case
(see `is_unknown`). Parents that are not themselves listed as animals are
treated as unknown, and animals caught in a cycle are left out of the
sorted pedigree. `SortedPedigree` holds `ids` and the positions of each
animal's parents in `sire_idx` and `dam_idx` (`None` when unknown).
`compute_a_inverse` applies Henderson's rules without inbreeding.

`openblup.gmatrix.compute_g_matrix(markers)` builds the VanRaden method 1
genomic relationship matrix from an individuals × markers array coded
0/1/2, estimating allele frequencies from the data. It raises
`MonomorphicMarkersError` (a `ValueError`) when no marker varies.

## Fitting a model

`openblup.mme.solve_mme(x, z, y, r_inv_scale, g_inv)` assembles and solves
Henderson's mixed model equations with R⁻¹ = `r_inv_scale` · I. It returns
an `MmeSolution` with the fixed and random effect solutions, log|C| and the
diagonal of C⁻¹, and raises `NotPositiveDefiniteError` when C has no
Cholesky factor.

`openblup.reml.fit_em_reml(y, x, z, ginv=None)` estimates the random and
residual variances by EM-REML (at most 50 iterations, relative tolerance
1e-6), using the identity when `ginv` is `None`. It returns a `RemlResult`
with the effects, both variances, `converged` and `n_iterations`; the
log-likelihood is not evaluated and is reported as 0.

The JSON helpers in `openblup.api` wrap these steps. Malformed input and
failed fits raise `ValueError`.

```python
from openblup.api import ModelOutput, fit_mixed_model_json

text = fit_mixed_model_json("""{
    "y": [10.0, 12.0, 6.0, 8.0],
    "x": [[1.0], [1.0], [1.0], [1.0]],
    "z": [[1.0, 0.0], [1.0, 0.0], [0.0, 1.0], [0.0, 1.0]],
    "ginv": null
}""")
output = ModelOutput.from_json(text)
print(output.fixed_effects, output.sigma2_random, output.sigma2_residual)
```

- `compute_a_inverse_json(pedigree_json)` takes a list of
  `{"animal", "sire", "dam"}` records and returns JSON with `animal_ids`
  (in sorted order), `dim` and the row-major `values` of the dense A-inverse.
- `compute_g_matrix_flat(markers, n_individuals, n_markers)` takes a flat
  row-major marker list and returns the G-matrix as a flat row-major list.

## What is not included

There is no command-line program and no file input: data, pedigrees and
markers are passed in as Python objects or JSON strings. Matrices are held
densely, so the fitter suits small problems only. Model fitting covers a
single random term with a homogeneous residual by EM-REML; there is no
formula parsing or data-frame handling, no average-information REML, no
multi-trait fitting, no likelihood, AIC or BIC, and the A-inverse does not
account for inbreeding.