"""Bar chart of one metric per partition, grouped by model."""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

import pandas as pd
import plotly.express as px

from nowcast.metrics.records import PartitionResult
from .save_config import PlotSaveDestinations, emit_figure

METRIC_LABELS = {"mae": "MAE", "rmse": "RMSE", "r_squared": "R²"}


def plot_partition_metrics(
    results_by_model: Mapping[str, Sequence[PartitionResult]],
    metric: str = "rmse",
    save_to: Optional[PlotSaveDestinations] = None,
) -> None:
    """Compare models partition by partition on ``metric``."""
    if metric not in METRIC_LABELS:
        raise ValueError(f"Unknown metric '{metric}'. Options: {tuple(METRIC_LABELS)}")

    rows: list[dict[str, object]] = []
    for model_name, results in results_by_model.items():
        for result in results:
            rows.append(
                {
                    "model": model_name,
                    "partition": str(result.label),
                    "value": getattr(result.scores, metric),
                }
            )
    if not rows:
        return

    df = pd.DataFrame(rows)
    fig = px.bar(
        df,
        x="partition",
        y="value",
        color="model",
        barmode="group",
        title=f"{METRIC_LABELS[metric]} per held-out partition",
        labels={"partition": "Held-out partition", "value": METRIC_LABELS[metric], "model": "Model"},
    )

    emit_figure(fig, save_to)
