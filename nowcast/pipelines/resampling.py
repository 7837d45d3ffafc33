"""Train/validation partitioning: hold-out, k-fold and leave-one-group-out."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Hashable, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..errors import InvalidInput, MissingGroupKey
from .grouping import group_positions

Rows = Union[pd.DataFrame, Sequence[Mapping[str, Any]]]


@dataclass(frozen=True)
class Partition:
    """Disjoint train / validation positions over a dataset.

    Indices are positional (``iloc``-style) and sorted.
    """

    label: Hashable
    train: np.ndarray
    validation: np.ndarray

    def __post_init__(self) -> None:
        for name in ("train", "validation"):
            arr = np.sort(np.asarray(getattr(self, name), dtype=np.int64))
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)
        if np.intersect1d(self.train, self.validation).size:
            raise InvalidInput(f"Partition {self.label!r} has overlapping train and validation rows.")

    @property
    def n_train(self) -> int:
        return int(self.train.size)

    @property
    def n_validation(self) -> int:
        return int(self.validation.size)


def kfold_partitions(
    n_rows: int,
    n_folds: int,
    *,
    shuffle: bool = True,
    seed: Optional[int] = None,
) -> List[Partition]:
    """Split ``n_rows`` positions into ``n_folds`` near-equal validation folds.

    Fold sizes differ by at most one and every row validates exactly once. The
    shuffle draws from a generator created for this call only, so ``seed``
    fully determines the folds.
    """
    if n_folds < 2:
        raise InvalidInput(f"n_folds must be at least 2, got {n_folds}")
    if n_rows < n_folds:
        raise InvalidInput(f"Cannot split {n_rows} rows into {n_folds} folds")

    order = np.arange(n_rows)
    if shuffle:
        order = np.random.default_rng(seed).permutation(n_rows)

    partitions: List[Partition] = []
    for fold_idx, validation in enumerate(np.array_split(order, n_folds)):
        mask = np.ones(n_rows, dtype=bool)
        mask[validation] = False
        partitions.append(Partition(label=fold_idx, train=np.flatnonzero(mask), validation=validation))
    return partitions


def leave_one_group_out(rows: Rows, group_key: str) -> List[Partition]:
    """One partition per distinct value of ``group_key``, holding that group out.

    Accepts a DataFrame (column name) or a sequence of mappings. Partitions
    follow the order in which groups first appear. Rows whose group value is
    missing form no group of their own and always stay in training.
    """
    values = _group_values(rows, group_key)
    groups = group_positions(values)

    all_rows = np.arange(len(values))
    partitions: List[Partition] = []
    for key, positions in groups.items():
        if _is_missing(key):
            continue
        validation = np.asarray(positions, dtype=np.int64)
        train = np.setdiff1d(all_rows, validation, assume_unique=True)
        partitions.append(Partition(label=key, train=train, validation=validation))

    if len(partitions) < 2:
        raise InvalidInput(
            f"leave_one_group_out needs at least two groups in '{group_key}', found {len(partitions)}"
        )
    return partitions


def train_test_partition(
    n_rows: int,
    test_size: float = 0.2,
    *,
    seed: Optional[int] = None,
) -> Partition:
    """Single shuffled hold-out split labelled ``"holdout"``."""
    if not 0.0 < test_size < 1.0:
        raise InvalidInput(f"test_size must fall within (0, 1), got {test_size}")
    n_test = int(np.ceil(n_rows * test_size))
    if n_test < 1 or n_test >= n_rows:
        raise InvalidInput(f"Cannot hold out {test_size:.0%} of {n_rows} rows")
    order = np.random.default_rng(seed).permutation(n_rows)
    return Partition(label="holdout", train=order[n_test:], validation=order[:n_test])


def _group_values(rows: Rows, group_key: str) -> List[Hashable]:
    if isinstance(rows, pd.DataFrame):
        if group_key not in rows.columns:
            raise MissingGroupKey(f"Grouping column '{group_key}' not found in dataset columns {list(rows.columns)}")
        return list(rows[group_key])

    values: List[Hashable] = []
    for idx, row in enumerate(rows):
        if group_key not in row:
            raise MissingGroupKey(f"Row {idx} has no grouping key '{group_key}'")
        values.append(row[group_key])
    return values


def _is_missing(value: Hashable) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


__all__ = [
    "Partition",
    "kfold_partitions",
    "leave_one_group_out",
    "train_test_partition",
]
