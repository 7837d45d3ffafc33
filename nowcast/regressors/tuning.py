"""Shared tuner protocol definitions for regressors."""

from __future__ import annotations

from typing import Protocol

import numpy as np

from .base import BaseRegressor


class RegressorTuner(Protocol):
    """Interface describing how regressor tuners should behave."""

    def tune(self, features: np.ndarray, target: np.ndarray) -> None:
        """Inspect training data and run tuning (no-op if already tuned)."""

    def make_regressor(self) -> BaseRegressor:
        """Return a newly configured regressor ready to fit."""
