"""Shared result records for partition-level evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable

from .regression import RegressionScores


@dataclass(frozen=True)
class PartitionResult:
    """Scores for one (train, validation) partition."""

    label: Hashable
    n_train: int
    n_validation: int
    scores: RegressionScores


@dataclass(frozen=True)
class MetricSummary:
    """Mean and spread of one metric across partitions."""

    metric: str
    mean: float
    std: float
    count: int
