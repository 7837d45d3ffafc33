"""Common regressor interface and shared typing aliases."""

from __future__ import annotations

from typing import Protocol, Sequence, Union

import numpy as np
import pandas as pd

ArrayLike = Union[np.ndarray, pd.DataFrame, Sequence[Sequence[float]]]
TargetLike = Union[np.ndarray, pd.Series, Sequence[float]]


class BaseRegressor(Protocol):
    """Protocol describing the minimal surface area for regressor implementations."""

    def fit(self, features: ArrayLike, target: TargetLike) -> "BaseRegressor": ...

    def predict(self, features: ArrayLike) -> np.ndarray: ...
