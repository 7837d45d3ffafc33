"""Array conversion helpers shared across regressor implementations."""

from __future__ import annotations

import numpy as np
import pandas as pd

from ..errors import InvalidInput, ShapeMismatch
from .base import ArrayLike, TargetLike


def ensure_2d_array(features: ArrayLike, *, name: str = "features") -> np.ndarray:
    """Coerce features into a float64 array of shape (n_samples, n_features).

    Missing values are allowed; the regressor pipelines impute them.
    """
    arr = _as_numpy(features, name=name)
    if arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    if arr.ndim != 2:
        raise ShapeMismatch(f"{name} must be 2-D (rows × features), got shape {arr.shape}")
    return arr.astype(np.float64, copy=False)


def ensure_1d_target(values: TargetLike, *, name: str = "target") -> np.ndarray:
    """Coerce a regression target into a finite 1-D float64 array."""
    arr = _as_numpy(values, name=name).astype(np.float64, copy=False)
    if arr.ndim != 1:
        raise ShapeMismatch(f"{name} must be 1-D (rows,), got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise InvalidInput(f"{name} contains missing or non-finite values")
    return arr


def ensure_aligned(features: np.ndarray, target: np.ndarray) -> None:
    if features.shape[0] != target.shape[0]:
        raise ShapeMismatch(f"Feature rows ({features.shape[0]}) and target count ({target.shape[0]}) must match")


def _as_numpy(value: object, *, name: str) -> np.ndarray:
    """Convert frames/series/sequences to numpy arrays while keeping existing arrays intact."""
    if isinstance(value, (pd.DataFrame, pd.Series)):
        arr = value.to_numpy(dtype=np.float64, na_value=np.nan)
    else:
        arr = np.asarray(value, dtype=np.float64)
    if arr.size == 0:
        raise ShapeMismatch(f"{name} cannot be empty")
    return arr
