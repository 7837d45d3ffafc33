"""Ordinary least squares regressor built on scikit-learn."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
from sklearn.impute import SimpleImputer
from sklearn.linear_model import LinearRegression
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from .base import ArrayLike, BaseRegressor, TargetLike
from .helpers import ensure_1d_target, ensure_2d_array, ensure_aligned


@dataclass
class LinearRegressionConfig:
    fit_intercept: bool = True
    standardize: bool = False
    impute_strategy: str = "median"
    n_jobs: Optional[int] = None


class LinearRegressionRegressor(BaseRegressor):
    """OLS baseline, the first model fitted in every nowcasting tutorial."""

    def __init__(self, config: Optional[LinearRegressionConfig] = None) -> None:
        self.config = config or LinearRegressionConfig()
        self.model: Optional[Pipeline] = None

    def fit(self, features: ArrayLike, target: TargetLike) -> "LinearRegressionRegressor":
        X = ensure_2d_array(features)
        y = ensure_1d_target(target)
        ensure_aligned(X, y)

        steps = [("imputer", SimpleImputer(strategy=self.config.impute_strategy, keep_empty_features=True))]
        if self.config.standardize:
            steps.append(("scaler", StandardScaler()))
        steps.append(
            (
                "model",
                LinearRegression(fit_intercept=self.config.fit_intercept, n_jobs=self.config.n_jobs),
            )
        )
        self.model = Pipeline(steps=steps)
        self.model.fit(X, y)
        return self

    def predict(self, features: ArrayLike) -> np.ndarray:
        model = self._require_model()
        X = ensure_2d_array(features)
        return np.asarray(model.predict(X), dtype=np.float64)

    @property
    def coefficients(self) -> np.ndarray:
        return np.asarray(self._require_model().named_steps["model"].coef_)

    def _require_model(self) -> Pipeline:
        if self.model is None:
            raise RuntimeError("LinearRegressionRegressor has not been fitted yet.")
        return self.model


__all__ = ["LinearRegressionConfig", "LinearRegressionRegressor"]
