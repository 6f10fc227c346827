"""Inverse additive relationship matrix by Henderson's rules."""

from __future__ import annotations

import numpy as np

from .pedigree import SortedPedigree

_ALPHA = {0: 1.0, 1: 4.0 / 3.0, 2: 2.0}


def compute_a_inverse(pedigree: SortedPedigree) -> np.ndarray:
    """Dense A-inverse for a sorted pedigree, ignoring inbreeding."""
    n = len(pedigree.ids)
    a_inv = np.zeros((n, n))

    for i, (sire, dam) in enumerate(zip(pedigree.sire_idx, pedigree.dam_idx)):
        known = [parent for parent in (sire, dam) if parent is not None]
        alpha = _ALPHA[len(known)]

        a_inv[i, i] += alpha
        for parent in known:
            a_inv[i, parent] -= alpha / 2.0
            a_inv[parent, i] -= alpha / 2.0
            a_inv[parent, parent] += alpha / 4.0
        if len(known) == 2:
            a_inv[sire, dam] += alpha / 4.0
            a_inv[dam, sire] += alpha / 4.0

    return a_inv