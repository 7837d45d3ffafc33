"""Exploratory scatter of API estimates against an auxiliary indicator."""

from __future__ import annotations

from typing import Optional

import pandas as pd
import plotly.express as px

from .save_config import PlotSaveDestinations, emit_figure


def plot_estimates_vs_auxiliary(
    joined: pd.DataFrame,
    indicator: str,
    auxiliary_column: str,
    save_to: Optional[PlotSaveDestinations] = None,
) -> None:
    """Scatter ``predicted`` for one indicator against a joined auxiliary column."""
    df = joined[(joined["indicator"] == indicator)].dropna(subset=["predicted", auxiliary_column])
    if df.empty:
        print(f"[plots] No joined rows for {indicator} × {auxiliary_column}; skipping figure.")
        return

    fig = px.scatter(
        df,
        x=auxiliary_column,
        y="predicted",
        error_y="predicted_error" if df["predicted_error"].notna().any() else None,
        hover_name="country",
        hover_data=["date"],
        title=f"{indicator} estimates vs {auxiliary_column}",
        labels={"predicted": indicator, auxiliary_column: auxiliary_column},
    )

    emit_figure(fig, save_to)
