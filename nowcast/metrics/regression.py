"""Regression error metrics: MAE, RMSE and the coefficient of determination."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence, Tuple, Union

import numpy as np

from ..errors import InvalidInput, ShapeMismatch

NumericSequence = Union[np.ndarray, Sequence[float]]


@dataclass(frozen=True)
class RegressionScores:
    """Scores for a single set of paired observations."""

    mae: float
    rmse: float
    r_squared: float

    def as_dict(self) -> Dict[str, float]:
        return {"mae": self.mae, "rmse": self.rmse, "r_squared": self.r_squared}


def mae(actual: NumericSequence, predicted: NumericSequence) -> float:
    """Mean absolute error."""
    a, p = _paired_arrays(actual, predicted)
    return float(np.mean(np.abs(a - p)))


def rmse(actual: NumericSequence, predicted: NumericSequence) -> float:
    """Root mean squared error, never below the MAE of the same pairs."""
    a, p = _paired_arrays(actual, predicted)
    errors = np.abs(a - p)
    # Rounding can leave sqrt(mean(e**2)) one ulp under mean(e) when all errors are equal.
    return float(max(np.sqrt(np.mean(errors**2)), np.mean(errors)))


def r_squared(actual: NumericSequence, predicted: NumericSequence) -> float:
    """Coefficient of determination, 1 - SS_res / SS_tot.

    Raises InvalidInput when ``actual`` is constant, since SS_tot is then zero
    and the ratio is undefined.
    """
    a, p = _paired_arrays(actual, predicted)
    ss_res = float(np.sum((a - p) ** 2))
    ss_tot = float(np.sum((a - a.mean()) ** 2))
    if ss_tot == 0.0:
        raise InvalidInput("r_squared is undefined when actual values are constant.")
    return 1.0 - ss_res / ss_tot


def score_all(
    actual: NumericSequence,
    predicted: NumericSequence,
    *,
    allow_undefined_r2: bool = False,
) -> RegressionScores:
    """Compute every metric for one set of predictions.

    With ``allow_undefined_r2`` a constant ``actual`` (e.g. a single-row
    validation group) yields ``r_squared = nan`` instead of raising.
    """
    try:
        r2 = r_squared(actual, predicted)
    except InvalidInput:
        if not allow_undefined_r2 or not _is_constant(actual):
            raise
        r2 = float("nan")
    return RegressionScores(mae=mae(actual, predicted), rmse=rmse(actual, predicted), r_squared=r2)


def _is_constant(values: NumericSequence) -> bool:
    arr = np.asarray(values, dtype=np.float64).ravel()
    return bool(np.all(np.isfinite(arr))) and bool(np.all(arr == arr[0]))


def _paired_arrays(actual: NumericSequence, predicted: NumericSequence) -> Tuple[np.ndarray, np.ndarray]:
    a = np.asarray(actual, dtype=np.float64).ravel()
    p = np.asarray(predicted, dtype=np.float64).ravel()
    if a.size == 0 or p.size == 0:
        raise ShapeMismatch("actual and predicted must be non-empty.")
    if a.shape != p.shape:
        raise ShapeMismatch(f"actual ({a.size}) and predicted ({p.size}) lengths differ.")
    if not (np.all(np.isfinite(a)) and np.all(np.isfinite(p))):
        raise InvalidInput("actual and predicted must contain only finite values.")
    return a, p


__all__ = ["RegressionScores", "mae", "r_squared", "rmse", "score_all"]
