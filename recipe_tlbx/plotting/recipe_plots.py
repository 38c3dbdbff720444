"""Visualizations of recipe fitting: correlations, PCA variance and per-step column counts."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from matplotlib.figure import Figure

from recipe_tlbx.utils.plotting_config import DEFAULT_PLOT_CFG, PlottingConfig


if TYPE_CHECKING:
    from recipe_tlbx.analysis.correlation_analyzer import CorrelationResult
    from recipe_tlbx.analysis.pca_analyzer import PCAResult
    from recipe_tlbx.recipe.projection_steps import FittedPCA
    from recipe_tlbx.recipe.recipe import FittedRecipe


def plot_correlation_heatmap(
    result: CorrelationResult,
    figsize: tuple[int, int] = (12, 10),
    annot: bool | None = None,
    config: PlottingConfig = DEFAULT_PLOT_CFG,
    **kwargs: object,
) -> Figure:
    """Plot the correlation matrix; columns removed by the filter are marked with ``*``.

    Args:
        result: CorrelationResult from CorrelationAnalyzer.
        figsize: Figure size.
        annot: Print the coefficients (defaults to on for at most 15 columns).
        config: Plotting style.
        **kwargs: Passed on to :func:`seaborn.heatmap`.
    """
    removed = set(result.to_remove)
    labels = {c: f"{c} *" if c in removed else c for c in result.matrix.columns}
    annot = len(labels) <= 15 if annot is None else annot

    with config.apply():
        fig, ax = plt.subplots(figsize=figsize)
        sns.heatmap(
            result.matrix.rename(index=labels, columns=labels),
            annot=annot,
            fmt=".2f",
            cmap=config.heatmap_cmap,
            vmin=-1,
            vmax=1,
            ax=ax,
            square=True,
            cbar_kws={"shrink": 0.8},
            **kwargs,  # type: ignore[arg-type]
        )
        ax.set_xticklabels(ax.get_xticklabels(), rotation=45, ha="right", rotation_mode="anchor")
        ax.tick_params(axis="y", rotation=0)
        title = "Feature Correlation Heatmap"
        if result.threshold is not None:
            title += f" (threshold {result.threshold:g}, * = removed)"
        ax.set_title(title)
        fig.tight_layout()
    return fig


def plot_explained_variance(
    result: PCAResult | FittedPCA,
    figsize: tuple[int, int] = (10, 6),
    bar: Literal["explained_ratio", "variance"] = "explained_ratio",
) -> Figure:
    """Scree plot: per-component bars with the cumulative explained-variance curve.

    Accepts the analyzer result or a fitted PCA step; for a step the number
    of kept components is marked with a vertical line.
    """
    explained = result.explained_variance
    kept = len(getattr(result, "names", ())) or None

    fig, ax1 = plt.subplots(figsize=figsize)
    x = np.arange(len(explained))
    sns.barplot(x=x, y=explained[bar], ax=ax1, color="skyblue")
    ax1.set_xlabel("Principal Component")
    ax1.set_ylabel(bar.replace("_", " ").title(), color="blue")
    ax1.tick_params(axis="y", labelcolor="blue")

    ax2 = ax1.twinx()
    sns.lineplot(x=x, y=explained["cumulative_ratio"], marker="o", color="red", ax=ax2)
    ax2.set_ylabel("Cumulative Variance Explained", color="red")
    ax2.set_yticks(np.arange(0, 1.1, 0.1))
    ax2.tick_params(axis="y", labelcolor="red")
    if kept is not None:
        ax1.axvline(kept - 0.5, color="black", linestyle="--", linewidth=1)

    ax1.set_xticks(x)
    ax1.set_xticklabels(explained["PC"])
    ax1.set_title("PCA Explained Variance")
    ax1.grid(True, alpha=0.2)
    fig.tight_layout()
    return fig


def plot_step_columns(
    fitted: FittedRecipe,
    figsize: tuple[int, int] = (10, 5),
) -> Figure:
    """Bar chart of the tracked column count before the first and after every step."""
    if not fitted.history:
        raise ValueError("Recipe has no steps to plot.")

    counts = pd.DataFrame(
        {
            "step": ["input", *(h.step_id for h in fitted.history)],
            "columns": [fitted.history[0].n_columns_before, *(h.n_columns_after for h in fitted.history)],
        },
    )
    fig, ax = plt.subplots(figsize=figsize)
    sns.barplot(data=counts, x="step", y="columns", color="tab:blue", ax=ax)
    for patch, value in zip(ax.patches, counts["columns"], strict=False):
        ax.annotate(str(value), (patch.get_x() + patch.get_width() / 2, patch.get_height()), ha="center", va="bottom")
    ax.set_xlabel("")
    ax.set_ylabel("Tracked columns")
    ax.set_title("Columns After Each Step")
    ax.tick_params(axis="x", rotation=30)
    fig.tight_layout()
    return fig


__all__ = ["plot_correlation_heatmap", "plot_explained_variance", "plot_step_columns"]
