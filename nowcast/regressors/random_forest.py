"""Random forest regressor used as the non-linear nowcasting model."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Union

import numpy as np
from sklearn.ensemble import RandomForestRegressor
from sklearn.impute import SimpleImputer
from sklearn.pipeline import Pipeline

from .base import ArrayLike, BaseRegressor, TargetLike
from .helpers import ensure_1d_target, ensure_2d_array, ensure_aligned


@dataclass
class RandomForestConfig:
    """Forest settings; ``impute_strategy`` configures the imputer in front."""

    n_estimators: int = 300
    max_depth: Optional[int] = None
    max_features: Union[int, float, str] = 1.0
    min_samples_split: Union[int, float] = 2
    min_samples_leaf: Union[int, float] = 1
    bootstrap: bool = True
    max_samples: Optional[Union[int, float]] = None
    n_jobs: Optional[int] = None
    random_state: Optional[int] = None
    impute_strategy: str = "median"

    def to_regressor_kwargs(self) -> Dict[str, Any]:
        kwargs = asdict(self)
        kwargs.pop("impute_strategy")
        kwargs["criterion"] = "squared_error"
        return kwargs


class RandomForestRegressorModel(BaseRegressor):
    """Imputer + RandomForestRegressor pipeline; deterministic when ``random_state`` is set."""

    def __init__(self, config: Optional[RandomForestConfig] = None) -> None:
        self.config = config or RandomForestConfig()
        self.model: Optional[Pipeline] = None

    def fit(self, features: ArrayLike, target: TargetLike) -> "RandomForestRegressorModel":
        X = ensure_2d_array(features)
        y = ensure_1d_target(target)
        ensure_aligned(X, y)

        imputer = SimpleImputer(strategy=self.config.impute_strategy, keep_empty_features=True)
        forest = RandomForestRegressor(**self.config.to_regressor_kwargs())
        self.model = Pipeline(steps=[("imputer", imputer), ("model", forest)]).fit(X, y)
        return self

    def predict(self, features: ArrayLike) -> np.ndarray:
        return np.asarray(self._require_model().predict(ensure_2d_array(features)), dtype=np.float64)

    @property
    def feature_importances(self) -> np.ndarray:
        """Impurity-based importances, one per input column."""
        return np.asarray(self._require_model().named_steps["model"].feature_importances_)

    def _require_model(self) -> Pipeline:
        if self.model is None:
            raise RuntimeError("RandomForestRegressorModel has not been fitted yet.")
        return self.model


__all__ = ["RandomForestConfig", "RandomForestRegressorModel"]
