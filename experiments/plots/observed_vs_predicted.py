"""Scatter of out-of-fold predictions against observed values."""

from __future__ import annotations

from typing import Optional

import pandas as pd
import plotly.express as px

from .save_config import PlotSaveDestinations, emit_figure


def plot_observed_vs_predicted(
    predictions: pd.DataFrame,
    model_name: str,
    target: str,
    save_to: Optional[PlotSaveDestinations] = None,
) -> None:
    """One point per validation row, coloured by partition, with the 45° line."""
    if predictions is None or predictions.empty:
        return

    df = predictions.copy()
    df["partition"] = df["partition"].astype(str)

    lo = float(min(df["actual"].min(), df["predicted"].min()))
    hi = float(max(df["actual"].max(), df["predicted"].max()))

    fig = px.scatter(
        df,
        x="actual",
        y="predicted",
        color="partition",
        title=f"{model_name} – observed vs predicted {target}",
        labels={"actual": f"Observed {target}", "predicted": f"Predicted {target}", "partition": "Held out"},
    )
    fig.add_shape(type="line", x0=lo, y0=lo, x1=hi, y1=hi, line=dict(dash="dash", color="grey"))

    emit_figure(fig, save_to)
