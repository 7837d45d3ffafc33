"""Optional aggregation of partition scores."""

from __future__ import annotations

from typing import Iterable, List

import numpy as np
import pandas as pd

from ..errors import InvalidInput
from .records import MetricSummary, PartitionResult

METRIC_NAMES = ("mae", "rmse", "r_squared")


def summarize_scores(results: Iterable[PartitionResult], ddof: int = 1) -> List[MetricSummary]:
    """Mean and standard deviation per metric across partitions.

    Undefined scores (NaN r_squared from single-row groups) are left out of
    that metric's summary and its ``count``. With one usable value the spread
    is reported as 0.0; with none, mean and std are NaN.
    """
    rows = list(results)
    if not rows:
        raise InvalidInput("Cannot summarize an empty set of partition results.")

    summaries: List[MetricSummary] = []
    for metric in METRIC_NAMES:
        values = np.asarray([getattr(row.scores, metric) for row in rows], dtype=np.float64)
        values = values[np.isfinite(values)]
        if values.size == 0:
            summaries.append(MetricSummary(metric=metric, mean=float("nan"), std=float("nan"), count=0))
            continue
        std = float(np.std(values, ddof=ddof)) if values.size > ddof else 0.0
        summaries.append(MetricSummary(metric=metric, mean=float(values.mean()), std=std, count=int(values.size)))
    return summaries


def results_to_frame(results: Iterable[PartitionResult]) -> pd.DataFrame:
    """One row per partition with its label, sizes and scores."""
    rows = [
        {
            "partition": row.label,
            "n_train": row.n_train,
            "n_validation": row.n_validation,
            **row.scores.as_dict(),
        }
        for row in results
    ]
    return pd.DataFrame(rows, columns=["partition", "n_train", "n_validation", *METRIC_NAMES])


__all__ = ["METRIC_NAMES", "results_to_frame", "summarize_scores"]
