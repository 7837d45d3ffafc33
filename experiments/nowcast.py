from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Sequence

import pandas as pd

from nowcast.errors import InvalidInput
from nowcast.metrics import MetricSummary, PartitionResult, summarize_scores
from nowcast.pipelines import (
    Partition,
    evaluate_partitions,
    kfold_partitions,
    leave_one_group_out,
    regressor_capabilities,
    train_test_partition,
)
from nowcast.regressors import RandomForestConfig, build_regressor, get_spec
from nowcast.regressors.random_forest_tuner import RandomForestOptunaTuner, RandomForestTuningConfig

Scheme = Literal["holdout", "kfold", "logo"]
SCHEMES: tuple[Scheme, ...] = ("holdout", "kfold", "logo")


@dataclass(frozen=True)
class ModelReport:
    """Everything one model produced under one resampling scheme."""

    model: str
    results: List[PartitionResult]
    summaries: List[MetricSummary]
    predictions: pd.DataFrame


def prepare_training_frame(
    dataset: pd.DataFrame,
    target: str,
    features: Sequence[str],
) -> pd.DataFrame:
    """Drop rows without an observed target; feature gaps are imputed later."""
    missing = [column for column in [target, *features] if column not in dataset.columns]
    if missing:
        raise InvalidInput(f"Dataset is missing columns: {', '.join(missing)}")
    frame = dataset.dropna(subset=[target]).reset_index(drop=True)
    dropped = len(dataset) - len(frame)
    if dropped:
        print(f"[nowcast] Dropped {dropped} rows without an observed {target}.")
    return frame


def build_partitions(
    frame: pd.DataFrame,
    scheme: str,
    *,
    folds: int = 10,
    group_key: Optional[str] = None,
    test_size: float = 0.2,
    seed: Optional[int] = None,
) -> List[Partition]:
    """Resolve a scheme name into partitions over ``frame``."""
    if scheme == "holdout":
        return [train_test_partition(len(frame), test_size, seed=seed)]
    if scheme == "kfold":
        return kfold_partitions(len(frame), folds, shuffle=True, seed=seed)
    if scheme == "logo":
        if not group_key:
            raise InvalidInput("Leave-one-group-out needs a group key (e.g. country or year).")
        return leave_one_group_out(frame, group_key)
    raise InvalidInput(f"Unknown resampling scheme '{scheme}'. Options: {SCHEMES}")


def run_nowcast(
    dataset: pd.DataFrame,
    target: str,
    features: Sequence[str],
    *,
    scheme: str = "kfold",
    models: Sequence[str] = ("ols", "random-forest"),
    folds: int = 10,
    group_key: Optional[str] = None,
    test_size: float = 0.2,
    seed: Optional[int] = 42,
    tune_trials: int = 0,
) -> Dict[str, ModelReport]:
    """Evaluate each registered model on the same partitions of ``dataset``.

    ``seed`` drives both the partition shuffle and the random forest's
    random_state; nothing touches numpy's global generator.

    With ``tune_trials > 0`` the forest hyper-parameters are searched once
    with Optuna over the whole training frame before cross-validation, so
    its scores are optimistic compared with the untuned models.
    """
    for name in models:
        get_spec(name)

    frame = prepare_training_frame(dataset, target, features)
    partitions = build_partitions(
        frame, scheme, folds=folds, group_key=group_key, test_size=test_size, seed=seed
    )
    print(f"[nowcast] {scheme}: {len(partitions)} partitions over {len(frame)} rows, features={list(features)}")

    tuner = None
    if tune_trials > 0 and "random-forest" in models:
        tuner = tune_forest(frame, target, features, trials=tune_trials, seed=seed)

    reports: Dict[str, ModelReport] = {}
    for name in models:
        if tuner is not None and name == "random-forest":
            factory = tuner.make_regressor
        else:
            factory = lambda name=name: build_regressor(name, seed=seed)  # noqa: E731
        fit, predict = regressor_capabilities(
            factory,
            features,
            target,
        )
        output = evaluate_partitions(fit, predict, frame, partitions, target, collect_predictions=True)
        summaries = summarize_scores(output.results)
        reports[name] = ModelReport(
            model=name,
            results=output.results,
            summaries=summaries,
            predictions=output.predictions if output.predictions is not None else pd.DataFrame(),
        )
        described = ", ".join(f"{s.metric}={s.mean:.4f}±{s.std:.4f}" for s in summaries)
        print(f"[nowcast] {get_spec(name).label}: {described}")
    return reports


def tune_forest(
    frame: pd.DataFrame,
    target: str,
    features: Sequence[str],
    *,
    trials: int = 25,
    seed: Optional[int] = 42,
) -> RandomForestOptunaTuner:
    tuner = RandomForestOptunaTuner(
        base_config=RandomForestConfig(random_state=seed),
        tuning_config=RandomForestTuningConfig(trials=trials, random_seed=seed if seed is not None else 42),
    )
    tuner.tune(frame[list(features)], frame[target])
    return tuner


def summaries_to_frame(reports: Dict[str, ModelReport]) -> pd.DataFrame:
    """Long table of model × metric summaries, convenient for CSV export."""
    rows = [
        {"model": report.model, "metric": s.metric, "mean": s.mean, "std": s.std, "count": s.count}
        for report in reports.values()
        for s in report.summaries
    ]
    return pd.DataFrame(rows, columns=["model", "metric", "mean", "std", "count"])
