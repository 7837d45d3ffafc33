"""Registry of the regressors used in the nowcasting tutorials.

Each entry names a factory and whether it consumes a random seed, so callers
can build any model from a short key and one explicit seed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal, Optional

from .base import BaseRegressor
from .linear_regression import LinearRegressionConfig, LinearRegressionRegressor
from .random_forest import RandomForestConfig, RandomForestRegressorModel

RegressorKey = Literal["ols", "random-forest"]


@dataclass(frozen=True)
class RegressorSpec:
    """Metadata describing a regressor that can be instantiated for evaluation."""

    name: str
    label: str
    factory: Callable[[Optional[int]], BaseRegressor]
    stochastic: bool = False


def _make_ols(seed: Optional[int]) -> BaseRegressor:
    return LinearRegressionRegressor(LinearRegressionConfig())


def _make_random_forest(seed: Optional[int]) -> BaseRegressor:
    return RandomForestRegressorModel(RandomForestConfig(random_state=seed))


REGISTRY: dict[RegressorKey, RegressorSpec] = {
    "ols": RegressorSpec(name="ols", label="Ordinary least squares", factory=_make_ols),
    "random-forest": RegressorSpec(
        name="random-forest",
        label="Random forest",
        factory=_make_random_forest,
        stochastic=True,
    ),
}


def get_spec(name: str) -> RegressorSpec:
    """Return the spec registered under ``name``."""
    try:
        return REGISTRY[name]  # type: ignore[index]
    except KeyError as exc:
        raise ValueError(f"Unknown regressor '{name}'. Options: {tuple(REGISTRY)}") from exc


def build_regressor(name: str, seed: Optional[int] = None) -> BaseRegressor:
    """Instantiate a fresh, unfitted regressor; ``seed`` feeds its random_state."""
    return get_spec(name).factory(seed)


__all__ = ["REGISTRY", "RegressorKey", "RegressorSpec", "build_regressor", "get_spec"]
