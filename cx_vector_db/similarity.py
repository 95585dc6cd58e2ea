"""Missing-value-aware cosine similarity for cx-vector-db.

All functions operate on numpy float64 arrays.  A feature position takes
part in a comparison only when *both* vectors observed it (neither holds
MISSING there); every other position is dropped for that pair alone.

    S     = {i : a[i] != MISSING and b[i] != MISSING}
    score = sum_S a*b / (sqrt(sum_S a*a) * sqrt(sum_S b*b))

When either restricted norm is zero the score is 0.0: there is no
comparable signal, which is a defined result and not an error.  Each side
is rescaled to unit peak magnitude before summing, so very large or very
small observations neither overflow nor underflow.  Scores are not
clamped, so float rounding may step a hair outside [-1, 1].
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np

from .errors import DimensionMismatch
from .types import MISSING

ArrayLike = Union[np.ndarray, Sequence[float]]


def observed_mask(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Boolean mask of positions observed in both ``a`` and ``b`` (broadcasts)."""
    return (a != MISSING) & (b != MISSING)


def _unit_max(rows: np.ndarray) -> np.ndarray:
    """Divide each row by its largest absolute value; all-zero rows stay zero."""
    if not rows.size:
        return rows
    peak = np.max(np.abs(rows), axis=1, keepdims=True)
    return rows / np.where(peak > 0, peak, 1.0)


def similarity_to_all(target: ArrayLike, matrix: ArrayLike) -> np.ndarray:
    """Similarity between ``target`` and every row of ``matrix``.

    Parameters
    ----------
    target : 1-D array of length D.
    matrix : 2-D array of shape (n, D).

    Returns
    -------
    np.ndarray of shape (n,) — one score per row, 0.0 where undefined.
    """
    t = np.asarray(target, dtype=np.float64)
    m = np.asarray(matrix, dtype=np.float64)
    if m.ndim != 2:
        raise ValueError("matrix must be a 2-D array.")
    if t.ndim != 1 or t.shape[0] != m.shape[1]:
        raise DimensionMismatch(t.shape[0] if t.ndim == 1 else t.size, m.shape[1])

    mask = observed_mask(m, t)
    mt = np.where(mask, t, 0.0)
    mm = np.where(mask, m, 0.0)

    # Scale each side to a max magnitude of 1 so squares cannot overflow.
    mt = _unit_max(mt)
    mm = _unit_max(mm)

    dot = np.sum(mt * mm, axis=1)
    norm_t = np.sum(mt * mt, axis=1)
    norm_m = np.sum(mm * mm, axis=1)

    defined = (norm_t > 0) & (norm_m > 0)
    scores = np.zeros(m.shape[0], dtype=np.float64)
    scores[defined] = dot[defined] / (
        np.sqrt(norm_t[defined]) * np.sqrt(norm_m[defined])
    )
    return scores


def similarity(a: ArrayLike, b: ArrayLike) -> float:
    """Cosine similarity of ``a`` and ``b`` over their jointly observed positions.

    Raises
    ------
    DimensionMismatch — ``a`` and ``b`` differ in length.
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.ndim != 1 or vb.ndim != 1:
        raise ValueError("Feature vectors must be 1-D arrays.")
    if va.shape[0] != vb.shape[0]:
        raise DimensionMismatch(va.shape[0], vb.shape[0])
    return float(similarity_to_all(va, vb[np.newaxis, :])[0])


def overlap(a: ArrayLike, b: ArrayLike) -> int:
    """Number of feature positions both vectors observed."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise DimensionMismatch(va.size, vb.size)
    return int(np.count_nonzero(observed_mask(va, vb)))
