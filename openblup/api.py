"""JSON entry points for pedigree, genomic and mixed-model computations."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np

from .ainverse import compute_a_inverse
from .gmatrix import MonomorphicMarkersError, compute_g_matrix
from .pedigree import Pedigree
from .reml import fit_em_reml


@dataclass
class ModelOutput:
    """Result of a mixed-model fit in serialisable form."""

    fixed_effects: list[float]
    random_effects: list[float]
    sigma2_random: float
    sigma2_residual: float
    log_likelihood: float
    converged: bool
    n_iterations: int

    def to_json(self) -> str:
        """Compact JSON object with the fields in declaration order."""
        return json.dumps(asdict(self), separators=(",", ":"))

    @classmethod
    def from_json(cls, text: str) -> "ModelOutput":
        """Build from the JSON produced by to_json."""
        data = _load(text)
        if not isinstance(data, dict):
            raise ValueError("JSON parse error: expected an object")
        try:
            return cls(
                fixed_effects=_float_list(data["fixed_effects"], "fixed_effects"),
                random_effects=_float_list(data["random_effects"], "random_effects"),
                sigma2_random=_number(data["sigma2_random"], "sigma2_random"),
                sigma2_residual=_number(data["sigma2_residual"], "sigma2_residual"),
                log_likelihood=_number(data["log_likelihood"], "log_likelihood"),
                converged=bool(data["converged"]),
                n_iterations=int(data["n_iterations"]),
            )
        except KeyError as exc:
            raise ValueError(f"JSON parse error: missing field {exc}") from exc


def _load(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"JSON parse error: {exc}") from exc


def _number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"JSON parse error: '{name}' must be a number")
    return float(value)


def _float_list(value: Any, name: str) -> list[float]:
    if not isinstance(value, list):
        raise ValueError(f"JSON parse error: '{name}' must be an array")
    return [_number(v, name) for v in value]


def _rows(value: Any, name: str) -> list[list[float]]:
    if not isinstance(value, list):
        raise ValueError(f"JSON parse error: '{name}' must be an array of arrays")
    return [_float_list(row, name) for row in value]


def _dense(rows: list[list[float]], n_cols: int, name: str) -> np.ndarray:
    if any(len(row) != n_cols for row in rows):
        raise ValueError(f"rows of {name} must all have {n_cols} entries")
    return np.array(rows, dtype=float).reshape(len(rows), n_cols)


def compute_a_inverse_json(pedigree_json: str) -> str:
    """A-inverse from a JSON list of {animal, sire, dam} records.

    Returns a JSON object with ``animal_ids``, ``dim`` and the row-major
    ``values`` of the dense matrix.
    """
    entries = _load(pedigree_json)
    if not isinstance(entries, list):
        raise ValueError("JSON parse error: expected an array of pedigree entries")

    ped = Pedigree()
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError("JSON parse error: pedigree entry must be an object")
        fields = []
        for key in ("animal", "sire", "dam"):
            value = entry.get(key)
            if not isinstance(value, str):
                raise ValueError(f"JSON parse error: '{key}' must be a string")
            fields.append(value)
        ped.add_animal(*fields)

    sorted_ped = ped.sort()
    a_inv = compute_a_inverse(sorted_ped)
    result = {
        "animal_ids": sorted_ped.ids,
        "dim": a_inv.shape[0],
        "values": a_inv.ravel().tolist(),
    }
    return json.dumps(result, separators=(",", ":"))


def fit_mixed_model_json(model_json: str) -> str:
    """Fit a one-random-term model given y, X, Z and optional G-inverse as JSON."""
    data = _load(model_json)
    if not isinstance(data, dict):
        raise ValueError("JSON parse error: expected an object")
    try:
        y = _float_list(data["y"], "y")
        x_rows = _rows(data["x"], "x")
        z_rows = _rows(data["z"], "z")
    except KeyError as exc:
        raise ValueError(f"JSON parse error: missing field {exc}") from exc
    ginv_raw = data.get("ginv")
    ginv_rows = None if ginv_raw is None else _rows(ginv_raw, "ginv")

    n = len(y)
    p = len(x_rows[0]) if x_rows else 0
    q = len(z_rows[0]) if z_rows else 0
    if len(x_rows) != n or len(z_rows) != n:
        raise ValueError("X and Z must have same number of rows as y")

    x = _dense(x_rows, p, "X")
    z = _dense(z_rows, q, "Z")
    ginv = None if ginv_rows is None else _dense(ginv_rows, len(ginv_rows), "ginv")

    try:
        result = fit_em_reml(y, x, z, ginv)
    except ValueError as exc:
        raise ValueError(f"Fit error: {exc}") from exc

    return ModelOutput(
        fixed_effects=result.fixed_effects,
        random_effects=result.random_effects,
        sigma2_random=result.sigma2_random,
        sigma2_residual=result.sigma2_residual,
        log_likelihood=result.log_likelihood,
        converged=result.converged,
        n_iterations=result.n_iterations,
    ).to_json()


def compute_g_matrix_flat(markers, n_individuals: int, n_markers: int) -> list[float]:
    """G-matrix from row-major markers, returned row-major as a flat list."""
    if len(markers) != n_individuals * n_markers:
        raise ValueError("Marker array length must equal n_individuals * n_markers")
    matrix = np.asarray(markers, dtype=float).reshape(n_individuals, n_markers)
    try:
        g = compute_g_matrix(matrix)
    except MonomorphicMarkersError as exc:
        raise ValueError(f"G-matrix error: {exc}") from exc
    return g.ravel().tolist()