"""Regression metrics and their aggregation across partitions."""

from .records import MetricSummary, PartitionResult
from .regression import RegressionScores, mae, r_squared, rmse, score_all
from .summary import results_to_frame, summarize_scores

__all__ = [
    "MetricSummary",
    "PartitionResult",
    "RegressionScores",
    "mae",
    "r_squared",
    "results_to_frame",
    "rmse",
    "score_all",
    "summarize_scores",
]
