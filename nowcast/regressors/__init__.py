"""Regressor implementations and helpers."""

from .base import ArrayLike, BaseRegressor, TargetLike
from .linear_regression import LinearRegressionConfig, LinearRegressionRegressor
from .random_forest import RandomForestConfig, RandomForestRegressorModel
from .registry import REGISTRY, RegressorKey, RegressorSpec, build_regressor, get_spec

__all__ = [
    "ArrayLike",
    "TargetLike",
    "BaseRegressor",
    "LinearRegressionConfig",
    "LinearRegressionRegressor",
    "RandomForestConfig",
    "RandomForestRegressorModel",
    "REGISTRY",
    "RegressorKey",
    "RegressorSpec",
    "build_regressor",
    "get_spec",
]
