"""Tests for partition builders and grouping helpers."""

from __future__ import annotations

from pathlib import Path
import sys

import numpy as np
import pandas as pd
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from nowcast.errors import InvalidInput, MissingGroupKey
from nowcast.pipelines.grouping import group_positions
from nowcast.pipelines.resampling import (
    Partition,
    kfold_partitions,
    leave_one_group_out,
    train_test_partition,
)


# ---------------------------------------------------------------------------
# Grouping


def test_group_positions_first_seen_order() -> None:
    groups = group_positions(["CIV", "GHA", "CIV", "SEN", "CIV"])
    assert list(groups) == ["CIV", "GHA", "SEN"]
    assert groups == {"CIV": [0, 2, 4], "GHA": [1], "SEN": [3]}
    assert group_positions([]) == {}


# ---------------------------------------------------------------------------
# Partition invariants


def test_partition_rejects_overlap() -> None:
    with pytest.raises(InvalidInput):
        Partition(label=0, train=np.array([0, 1, 2]), validation=np.array([2, 3]))


def test_partition_indices_are_sorted_and_read_only() -> None:
    partition = Partition(label="x", train=[3, 1], validation=[2, 0])
    assert partition.train.tolist() == [1, 3]
    assert partition.validation.tolist() == [0, 2]
    with pytest.raises(ValueError):
        partition.train[0] = 5


# ---------------------------------------------------------------------------
# k-fold


def test_kfold_hundred_rows_ten_folds() -> None:
    partitions = kfold_partitions(100, 10, seed=0)
    assert len(partitions) == 10
    for partition in partitions:
        assert partition.n_validation == 10
        assert np.unique(partition.validation).size == 10


@pytest.mark.parametrize("n_rows, n_folds", [(10, 3), (17, 5), (7, 7), (23, 2)])
def test_kfold_covers_every_row_once(n_rows: int, n_folds: int) -> None:
    partitions = kfold_partitions(n_rows, n_folds, seed=11)
    validation = np.concatenate([p.validation for p in partitions])
    assert sorted(validation.tolist()) == list(range(n_rows))

    sizes = {p.n_validation for p in partitions}
    assert sizes <= {n_rows // n_folds, -(-n_rows // n_folds)}

    for partition in partitions:
        combined = np.union1d(partition.train, partition.validation)
        assert combined.tolist() == list(range(n_rows))
        assert np.intersect1d(partition.train, partition.validation).size == 0
    assert [p.label for p in partitions] == list(range(n_folds))


def test_kfold_seed_is_reproducible_and_scoped() -> None:
    np.random.seed(123)
    before = np.random.random()
    first = kfold_partitions(30, 5, seed=99)
    second = kfold_partitions(30, 5, seed=99)
    np.random.seed(123)
    after = np.random.random()

    for a, b in zip(first, second):
        assert a.validation.tolist() == b.validation.tolist()
    # The global generator is untouched.
    assert before == after


def test_kfold_without_shuffle_is_contiguous() -> None:
    partitions = kfold_partitions(6, 3, shuffle=False)
    assert [p.validation.tolist() for p in partitions] == [[0, 1], [2, 3], [4, 5]]


@pytest.mark.parametrize("n_rows, n_folds", [(10, 1), (3, 4)])
def test_kfold_invalid_arguments(n_rows: int, n_folds: int) -> None:
    with pytest.raises(InvalidInput):
        kfold_partitions(n_rows, n_folds)


# ---------------------------------------------------------------------------
# Leave-one-group-out


def _panel() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "country": ["CIV", "CIV", "GHA", "SEN", "GHA", "CIV"],
            "year": [2019, 2020, 2019, 2020, 2021, 2021],
            "value": [0.1, 0.2, 0.3, 0.4, 0.5, 0.6],
        }
    )


def test_logo_one_partition_per_group() -> None:
    df = _panel()
    partitions = leave_one_group_out(df, "country")
    assert [p.label for p in partitions] == ["CIV", "GHA", "SEN"]
    assert len(partitions) == df["country"].nunique()
    for partition in partitions:
        held_out = df.iloc[partition.validation]["country"]
        assert set(held_out) == {partition.label}
        assert partition.label not in set(df.iloc[partition.train]["country"])
        assert partition.n_train + partition.n_validation == len(df)


def test_logo_single_row_group() -> None:
    partitions = {p.label: p for p in leave_one_group_out(_panel(), "country")}
    assert partitions["SEN"].validation.tolist() == [3]


def test_logo_by_year() -> None:
    partitions = leave_one_group_out(_panel(), "year")
    assert sorted(p.label for p in partitions) == [2019, 2020, 2021]


def test_logo_accepts_mappings() -> None:
    rows = [{"country": "CIV"}, {"country": "GHA"}, {"country": "CIV"}]
    partitions = leave_one_group_out(rows, "country")
    assert partitions[0].validation.tolist() == [0, 2]
    assert partitions[1].train.tolist() == [0, 2]


def test_logo_missing_group_key() -> None:
    with pytest.raises(MissingGroupKey):
        leave_one_group_out(_panel(), "region")
    with pytest.raises(MissingGroupKey):
        leave_one_group_out([{"country": "CIV"}, {"year": 2020}], "country")


def test_logo_missing_values_stay_in_training() -> None:
    df = pd.DataFrame({"region": ["A", None, "B", "A"], "value": [1, 2, 3, 4]})
    partitions = leave_one_group_out(df, "region")
    assert [p.label for p in partitions] == ["A", "B"]
    assert all(1 in p.train.tolist() for p in partitions)


def test_logo_needs_two_groups() -> None:
    with pytest.raises(InvalidInput):
        leave_one_group_out(pd.DataFrame({"country": ["CIV", "CIV"]}), "country")


# ---------------------------------------------------------------------------
# Hold-out


def test_train_test_partition_sizes() -> None:
    partition = train_test_partition(50, 0.2, seed=3)
    assert partition.label == "holdout"
    assert partition.n_validation == 10
    assert partition.n_train == 40
    assert train_test_partition(50, 0.2, seed=3).validation.tolist() == partition.validation.tolist()


@pytest.mark.parametrize("n_rows, test_size", [(10, 0.0), (10, 1.0), (1, 0.5)])
def test_train_test_partition_invalid(n_rows: int, test_size: float) -> None:
    with pytest.raises(InvalidInput):
        train_test_partition(n_rows, test_size)
