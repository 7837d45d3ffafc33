"""Plotting utilities for nowcasting results."""

from .estimates_vs_auxiliary import plot_estimates_vs_auxiliary
from .observed_vs_predicted import plot_observed_vs_predicted
from .partition_metrics import plot_partition_metrics
from .save_config import PlotSaveConfig, PlotSaveDestinations, emit_figure, slugify

__all__ = [
    "plot_estimates_vs_auxiliary",
    "plot_observed_vs_predicted",
    "plot_partition_metrics",
    "PlotSaveConfig",
    "PlotSaveDestinations",
    "emit_figure",
    "slugify",
]
