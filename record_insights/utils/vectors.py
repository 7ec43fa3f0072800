"""
Canonical vector representation.

Every prediction or feature vector entering the engine is passed through
``as_vector`` once. Afterwards a vector is either a 1-D float64 numpy array
(dense) or a 1 x n CSR matrix (sparse), and the rest of the code only asks
``is_sparse`` instead of switching on input types.
"""

from typing import Any, Iterable, List, Union

import numpy as np
import scipy.sparse as sp

from record_insights.core.exceptions import SchemaMismatch

Vector = Union[np.ndarray, sp.csr_matrix]


def as_vector(values: Any, what: str = "vector") -> Vector:
    """
    Canonicalize a vector-like value.

    Accepts lists, tuples, numpy arrays (1-D, or 2-D with a single row or
    column) and scipy sparse matrices/arrays of the same shapes.

    Args:
        values: Vector-like input
        what: Name used in error messages

    Returns:
        1-D float64 ndarray for dense input, 1 x n CSR matrix for sparse input

    Raises:
        SchemaMismatch: If the input is not one-dimensional
    """
    if sp.issparse(values):
        matrix = sp.csr_matrix(values, dtype=np.float64)
        if matrix.shape[0] != 1:
            if matrix.shape[1] != 1:
                raise SchemaMismatch(what, expected="a single row", actual=f"shape {matrix.shape}")
            matrix = sp.csr_matrix(matrix.T)
        matrix.sum_duplicates()
        return matrix

    array = np.asarray(values, dtype=np.float64)
    if array.ndim == 1:
        return array
    if array.ndim == 2 and 1 in array.shape:
        return array.ravel()
    raise SchemaMismatch(what, expected="a one-dimensional vector", actual=f"shape {array.shape}")


def is_sparse(vector: Vector) -> bool:
    return sp.issparse(vector)


def vector_size(vector: Vector) -> int:
    """Number of slots in a canonical vector (not the number of non-zeros)."""
    if sp.issparse(vector):
        return int(vector.shape[1])
    return int(vector.shape[0])


def to_dense(vector: Vector) -> np.ndarray:
    """Dense 1-D copy-free view where possible."""
    if sp.issparse(vector):
        return np.asarray(vector.toarray()).ravel()
    return vector


def concatenate(features: Vector, prediction: Vector) -> Vector:
    """
    Append the prediction values after the feature values.

    If either input is sparse the result is sparse, with prediction indices
    shifted by the feature size. If both are dense the result is dense.

    Args:
        features: Canonical feature vector (length F)
        prediction: Canonical prediction vector (length P)

    Returns:
        Canonical vector of length F + P
    """
    if sp.issparse(features) or sp.issparse(prediction):
        return sp.hstack(
            [sp.csr_matrix(features.reshape(1, -1)) if not sp.issparse(features) else features,
             sp.csr_matrix(prediction.reshape(1, -1)) if not sp.issparse(prediction) else prediction],
            format="csr"
        )
    return np.concatenate([features, prediction])


def stack_rows(vectors: Iterable[Vector]) -> np.ndarray:
    """
    Stack canonical vectors into a dense 2-D array, one row per vector.

    Sparse rows are stacked sparsely first so only a single dense
    materialization happens.
    """
    rows: List[Vector] = list(vectors)
    if not rows:
        return np.empty((0, 0), dtype=np.float64)

    if any(sp.issparse(row) for row in rows):
        stacked = sp.vstack(
            [row if sp.issparse(row) else sp.csr_matrix(row.reshape(1, -1)) for row in rows],
            format="csr"
        )
        return np.asarray(stacked.toarray(), dtype=np.float64)

    return np.vstack(rows).astype(np.float64, copy=False)
