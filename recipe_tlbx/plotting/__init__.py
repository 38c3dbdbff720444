"""Plotting helpers for recipes and training results."""

from .recipe_plots import plot_correlation_heatmap, plot_explained_variance, plot_step_columns
from .resampling_plots import plot_observed_vs_predicted, plot_resamples


__all__ = [
    "plot_correlation_heatmap",
    "plot_explained_variance",
    "plot_observed_vs_predicted",
    "plot_resamples",
    "plot_step_columns",
]
