"""Visualizations of resampled training results."""

from __future__ import annotations

from typing import TYPE_CHECKING

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns
from matplotlib.figure import Figure

from recipe_tlbx.utils.plotting_config import DEFAULT_PLOT_CFG, PlottingConfig


if TYPE_CHECKING:
    from recipe_tlbx.training.trainer import TrainResult


def plot_resamples(
    result: TrainResult,
    metric: str | None = None,
    figsize: tuple[int, int] = (10, 6),
    config: PlottingConfig = DEFAULT_PLOT_CFG,
) -> Figure:
    """Box plot of a metric across resamples, one box per tuning candidate."""
    metric = metric or result.metric
    if metric not in result.resamples.columns:
        raise ValueError(f"Metric '{metric}' not found in resamples.")

    data = result.resamples.assign(candidate=lambda d: d["candidate"].astype(str))
    with config.apply():
        fig, ax = plt.subplots(figsize=figsize)
        order = [str(i) for i in range(len(result.results))]
        sns.boxplot(data=data, x="candidate", y=metric, order=order, color="lightgray", ax=ax)
        sns.stripplot(data=data, x="candidate", y=metric, order=order, color="tab:blue", alpha=0.6, ax=ax)
        ax.axvline(result.best_candidate, color="tab:orange", linestyle="--", linewidth=1)
        ax.set_xlabel("Candidate")
        ax.set_title(f"{metric} Across Resamples (best: {result.best_params or 'default'})")
        fig.tight_layout()
    return fig


def plot_observed_vs_predicted(
    result: TrainResult,
    hue: str | None = None,
    figsize: tuple[int, int] = (7, 7),
    config: PlottingConfig = DEFAULT_PLOT_CFG,
) -> Figure:
    """Scatter of hold-out predictions against observed values with the identity line.

    Args:
        result: TrainResult with saved predictions.
        hue: Optional auxiliary column used to colour the points (e.g. the weight).
        figsize: Figure size.
        config: Plotting style.
    """
    preds = result.predictions
    if hue is not None and hue not in preds.columns:
        raise ValueError(f"Column '{hue}' not found in the saved predictions.")

    with config.apply():
        fig, ax = plt.subplots(figsize=figsize)
        sns.scatterplot(data=preds, x="obs", y="pred", hue=hue, alpha=0.7, ax=ax)
        lims = np.array([preds[["obs", "pred"]].min().min(), preds[["obs", "pred"]].max().max()])
        ax.plot(lims, lims, color="black", linestyle="--", linewidth=1)
        ax.set_xlabel("Observed")
        ax.set_ylabel("Predicted (hold-out)")
        ax.set_title("Observed vs. Predicted")
        fig.tight_layout()
    return fig


__all__ = ["plot_observed_vs_predicted", "plot_resamples"]
