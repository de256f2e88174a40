"""
Conversion between framework-shaped data and library-shaped arrays.

Tables go in as pandas DataFrames, column mappings or 2-D array-likes and
come out as dense float matrices. Categorical targets are encoded to integer
codes against a class pool, and a ``Decoder`` maps codes back to the
original labels.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from model_shims.constants import TABLE_CONTINUOUS, VECTOR_CONTINUOUS, VECTOR_FINITE


def matrix(X) -> np.ndarray:
    """
    Convert a table to a dense float matrix of shape (n_rows, n_columns).

    Raises:
        ValueError: If X is not two-dimensional
    """
    if isinstance(X, pd.DataFrame):
        return X.to_numpy(dtype=float)
    if isinstance(X, Mapping):
        return pd.DataFrame(dict(X)).to_numpy(dtype=float)

    Xmatrix = np.asarray(X, dtype=float)
    if Xmatrix.ndim != 2:
        raise ValueError(f"Expected a table with 2 dimensions, got shape {Xmatrix.shape}")
    return Xmatrix


def _is_categorical(y) -> bool:
    return isinstance(y, pd.Categorical) or (
        isinstance(y, pd.Series) and isinstance(y.dtype, pd.CategoricalDtype)
    )


def encode_target(y) -> Tuple[np.ndarray, "Decoder"]:
    """
    Encode a categorical target to integer codes.

    The class pool is the categories of a pandas categorical target (including
    levels absent from ``y``) or the sorted unique values otherwise. Codes are
    positions in that pool.

    Returns:
        Tuple of (codes, decoder)
    """
    if len(y) == 0:
        raise ValueError("Cannot encode an empty target")

    if _is_categorical(y):
        cat = pd.Categorical(y)
        codes = np.asarray(cat.codes, dtype=int)
        if np.any(codes < 0):
            raise ValueError("Target contains missing values")
        return codes, Decoder(list(cat.categories), categorical=True, ordered=bool(cat.ordered))

    pool, codes = np.unique(np.asarray(y), return_inverse=True)
    return codes.astype(int).reshape(-1), Decoder(pool.tolist())


class Decoder:
    """Maps integer class codes back to the labels of a class pool."""

    def __init__(self, pool: Sequence[Any], categorical: bool = False, ordered: bool = False):
        self.pool = list(pool)
        self.categorical = categorical
        self.ordered = ordered

    def __len__(self):
        return len(self.pool)

    def __call__(self, codes):
        labels = np.asarray(self.pool)[np.asarray(codes, dtype=int)]
        if self.categorical:
            return pd.Categorical(labels, categories=self.pool, ordered=self.ordered)
        return labels

    def encoding(self) -> Dict[Any, int]:
        """Map every class in the pool to its integer code."""
        return {label: code for code, label in enumerate(self.pool)}

    def classes_seen(self, codes) -> List[Any]:
        """Get the pool classes that actually occur in ``codes``, in pool order."""
        present = set(np.unique(codes).tolist())
        return [label for code, label in enumerate(self.pool) if code in present]

    def __repr__(self):
        return f"Decoder(pool={self.pool!r})"


class UnivariateFinite:
    """
    Probability distribution over a finite set of class labels.

    Args:
        classes: Class labels making up the support
        probs: One probability per class, summing to one
    """

    def __init__(self, classes: Sequence[Any], probs: Sequence[float]):
        probs = np.asarray(probs, dtype=float)
        if len(classes) != len(probs):
            raise ValueError(f"Got {len(classes)} classes but {len(probs)} probabilities")
        if np.any(probs < 0) or not np.isclose(probs.sum(), 1.0):
            raise ValueError("Probabilities must be non-negative and sum to 1")
        self.classes = list(classes)
        self.probs = probs

    def pdf(self, label) -> float:
        """Probability of ``label`` (zero outside the support)."""
        for c, p in zip(self.classes, self.probs):
            if c == label:
                return float(p)
        return 0.0

    def mode(self):
        return self.classes[int(np.argmax(self.probs))]

    def as_dict(self) -> Dict[Any, float]:
        return {c: float(p) for c, p in zip(self.classes, self.probs)}

    def __eq__(self, other):
        if not isinstance(other, UnivariateFinite):
            return NotImplemented
        return self.classes == other.classes and np.allclose(self.probs, other.probs)

    def __repr__(self):
        body = ", ".join(f"{c!r}=>{p:.3g}" for c, p in zip(self.classes, self.probs))
        return f"UnivariateFinite({body})"


def input_scitype(X) -> Optional[str]:
    """Scientific type of a table, or None if some column is not continuous."""
    if isinstance(X, Mapping):
        X = pd.DataFrame(dict(X))
    if isinstance(X, pd.DataFrame):
        if all(pd.api.types.is_float_dtype(dtype) for dtype in X.dtypes):
            return TABLE_CONTINUOUS
        return None
    arr = np.asarray(X)
    if arr.ndim == 2 and np.issubdtype(arr.dtype, np.floating):
        return TABLE_CONTINUOUS
    return None


def target_scitype(y) -> Optional[str]:
    """Scientific type of a target vector: Finite for labels, Continuous for floats."""
    if _is_categorical(y):
        return VECTOR_FINITE
    arr = np.asarray(y)
    if arr.dtype.kind in ("U", "S", "O", "b"):
        return VECTOR_FINITE
    if arr.dtype.kind == "f":
        return VECTOR_CONTINUOUS
    # integers are counts, which none of the shims accept
    return None
