"""Fit / predict / score orchestration over a set of partitions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple, TypeVar

import numpy as np
import pandas as pd

from ..errors import InvalidInput, ShapeMismatch
from ..metrics.records import PartitionResult
from ..metrics.regression import score_all
from .resampling import Partition

ModelT = TypeVar("ModelT")
FitFn = Callable[[pd.DataFrame], ModelT]
PredictFn = Callable[[ModelT, pd.DataFrame], Sequence[float]]


@dataclass(frozen=True)
class EvaluationOutput:
    """Per-partition scores plus (optionally) the out-of-fold predictions."""

    results: List[PartitionResult]
    predictions: Optional[pd.DataFrame] = None


def evaluate_partitions(
    fit: FitFn,
    predict: PredictFn,
    dataset: pd.DataFrame,
    partitions: Sequence[Partition],
    target: str,
    *,
    collect_predictions: bool = False,
) -> EvaluationOutput:
    """Fit on each partition's training rows and score its validation rows.

    ``fit`` receives the training slice of ``dataset`` and returns a trained
    model; ``predict`` receives that model and the validation slice. Results
    come back in partition order, each tagged with the partition label.
    Aggregating across partitions is left to ``metrics.summary``.
    """
    if target not in dataset.columns:
        raise InvalidInput(f"Target column '{target}' not found in dataset")
    if not partitions:
        raise InvalidInput("At least one partition is required.")

    n_rows = len(dataset)
    results: List[PartitionResult] = []
    prediction_frames: List[pd.DataFrame] = []

    for partition in partitions:
        _check_partition(partition, n_rows)
        train_rows = dataset.iloc[partition.train]
        validation_rows = dataset.iloc[partition.validation]

        model = fit(train_rows)
        predicted = np.asarray(predict(model, validation_rows), dtype=np.float64).ravel()
        actual = validation_rows[target].to_numpy(dtype=np.float64)
        if predicted.shape != actual.shape:
            raise ShapeMismatch(
                f"Partition {partition.label!r}: predict returned {predicted.size} values "
                f"for {actual.size} validation rows"
            )

        scores = score_all(actual, predicted, allow_undefined_r2=True)
        results.append(
            PartitionResult(
                label=partition.label,
                n_train=partition.n_train,
                n_validation=partition.n_validation,
                scores=scores,
            )
        )
        if collect_predictions:
            prediction_frames.append(
                pd.DataFrame(
                    {
                        "partition": [partition.label] * actual.size,
                        "row": validation_rows.index,
                        "actual": actual,
                        "predicted": predicted,
                    }
                )
            )

    predictions = None
    if collect_predictions:
        predictions = pd.concat(prediction_frames, ignore_index=True)
    return EvaluationOutput(results=results, predictions=predictions)


def regressor_capabilities(
    factory: Callable[[], Any],
    feature_columns: Sequence[str],
    target: str,
) -> Tuple[FitFn, PredictFn]:
    """Adapt a regressor factory into the ``fit`` / ``predict`` pair.

    ``factory`` must return a fresh, unfitted regressor on every call so that
    no state leaks between partitions.
    """
    columns = list(feature_columns)
    if not columns:
        raise InvalidInput("At least one feature column is required.")

    def fit(train_rows: pd.DataFrame) -> Any:
        _require_columns(train_rows, columns + [target])
        return factory().fit(train_rows[columns], train_rows[target])

    def predict(model: Any, rows: pd.DataFrame) -> Sequence[float]:
        _require_columns(rows, columns)
        return model.predict(rows[columns])

    return fit, predict


def _check_partition(partition: Partition, n_rows: int) -> None:
    if partition.n_train == 0 or partition.n_validation == 0:
        raise InvalidInput(f"Partition {partition.label!r} has an empty train or validation set.")
    highest = max(int(partition.train.max()), int(partition.validation.max()))
    if highest >= n_rows:
        raise InvalidInput(f"Partition {partition.label!r} references row {highest} beyond {n_rows} rows.")


def _require_columns(frame: pd.DataFrame, columns: Sequence[str]) -> None:
    missing = [column for column in columns if column not in frame.columns]
    if missing:
        raise InvalidInput(f"Columns not found in dataset: {', '.join(missing)}")


__all__ = ["EvaluationOutput", "evaluate_partitions", "regressor_capabilities"]
