"""Resampling strategies and fit / evaluate orchestration."""

from .evaluation import EvaluationOutput, evaluate_partitions, regressor_capabilities
from .grouping import group_positions
from .resampling import Partition, kfold_partitions, leave_one_group_out, train_test_partition

__all__ = [
    "EvaluationOutput",
    "Partition",
    "group_positions",
    "evaluate_partitions",
    "kfold_partitions",
    "leave_one_group_out",
    "regressor_capabilities",
    "train_test_partition",
]
