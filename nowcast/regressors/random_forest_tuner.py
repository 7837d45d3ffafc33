"""Optuna-backed hyperparameter tuning for the random forest regressor."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

import numpy as np
import optuna

from ..errors import InvalidInput
from ..metrics.regression import rmse
from ..pipelines.resampling import kfold_partitions
from .helpers import ensure_1d_target, ensure_2d_array, ensure_aligned
from .random_forest import RandomForestConfig, RandomForestRegressorModel
from .tuning import RegressorTuner


@dataclass
class RandomForestTuningConfig:
    """Configuration controlling the Optuna tuning pass."""

    trials: int = 25
    random_seed: int = 42
    n_folds: int = 5
    subsample: int = 2000  # cap tuning cost on large panels


class RandomForestOptunaTuner(RegressorTuner):
    """Search forest hyper-parameters once, minimizing k-fold RMSE."""

    def __init__(
        self,
        base_config: Optional[RandomForestConfig] = None,
        tuning_config: Optional[RandomForestTuningConfig] = None,
    ) -> None:
        self.base_config = base_config or RandomForestConfig()
        self.tuning_config = tuning_config or RandomForestTuningConfig()
        self._best_config: Optional[RandomForestConfig] = None
        self._study: Optional[optuna.Study] = None

    @property
    def best_config(self) -> Optional[RandomForestConfig]:
        return self._best_config

    @property
    def study(self) -> Optional[optuna.Study]:
        return self._study

    def tune(self, features: np.ndarray, target: np.ndarray) -> None:
        if self._best_config is not None:
            return

        X, y = self._prepare_subset(features, target)
        if X.shape[0] < self.tuning_config.n_folds or np.unique(y).size < 2:
            print("[tuning] Not enough varied rows to tune; keeping the base forest config.")
            self._best_config = self.base_config
            return

        sampler = optuna.samplers.TPESampler(seed=self.tuning_config.random_seed)
        self._study = optuna.create_study(direction="minimize", sampler=sampler, study_name="random_forest_regressor")
        self._study.optimize(lambda trial: self._objective(trial, X, y), n_trials=self.tuning_config.trials)

        params = self._study.best_params
        self._best_config = self._config_from_params(params)
        print(f"[tuning] Best forest params {params} (cv rmse={self._study.best_value:.4f})")

    def make_regressor(self) -> RandomForestRegressorModel:
        config = self._best_config or self.base_config
        return RandomForestRegressorModel(config)

    # --- internals -----------------------------------------------------

    def _config_from_params(self, params: dict) -> RandomForestConfig:
        # Searched fields override the base config; seeding and threading stay as given.
        return replace(self.base_config, **params)

    def _objective(self, trial: optuna.Trial, X: np.ndarray, y: np.ndarray) -> float:
        config = self._config_from_params(
            {
                "n_estimators": trial.suggest_int("n_estimators", 50, 500),
                "max_depth": trial.suggest_int("max_depth", 2, 32),
                "max_features": trial.suggest_categorical("max_features", ["sqrt", "log2", 1.0]),
                "min_samples_split": trial.suggest_int("min_samples_split", 2, 20),
                "min_samples_leaf": trial.suggest_int("min_samples_leaf", 1, 10),
            }
        )
        partitions = kfold_partitions(
            X.shape[0],
            self.tuning_config.n_folds,
            shuffle=True,
            seed=self.tuning_config.random_seed,
        )
        fold_rmse = []
        for partition in partitions:
            model = RandomForestRegressorModel(config)
            model.fit(X[partition.train], y[partition.train])
            fold_rmse.append(rmse(y[partition.validation], model.predict(X[partition.validation])))
        return float(np.mean(fold_rmse))

    def _prepare_subset(self, features: np.ndarray, target: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        X = ensure_2d_array(features)
        y = ensure_1d_target(target)
        ensure_aligned(X, y)
        if self.tuning_config.subsample < 1:
            raise InvalidInput("subsample must be at least 1")
        if X.shape[0] <= self.tuning_config.subsample:
            return X, y
        rng = np.random.default_rng(self.tuning_config.random_seed)
        idx = rng.choice(X.shape[0], size=self.tuning_config.subsample, replace=False)
        return X[idx], y[idx]
