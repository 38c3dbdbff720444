"""Correlation analysis and correlation-based column filtering."""

from dataclasses import dataclass
from typing import Literal, Self

import numpy as np
import pandas as pd

from .base_analyser import BaseAnalyser


CorrelationMethod = Literal["pearson", "spearman", "kendall"]


@dataclass(frozen=True)
class CorrelationResult:
    """Correlation analysis outputs.

    Attributes:
        matrix: Full correlation matrix (rows/cols = analyzed columns).
        feature_pairs: DataFrame with columns `feature_a`, `feature_b`, `correlation`,
            `abs_correlation`, `pair`; sorted by strongest absolute correlations.
        threshold: Absolute-correlation cutoff used for filtering (``None`` if not filtering).
        to_remove: Columns the greedy filter removes so that no remaining pair
            exceeds ``threshold``; empty when no threshold is configured.
    """

    matrix: pd.DataFrame
    feature_pairs: pd.DataFrame
    threshold: float | None = None
    to_remove: tuple[str, ...] = ()

    @property
    def retained(self) -> list[str]:
        return [c for c in self.matrix.columns if c not in self.to_remove]

    # ------------------------------------------------------------------ plotting shortcuts
    def plot_heatmap(self, **kwargs: object):
        """Plot correlation heatmap using the plotting helper."""
        from recipe_tlbx.plotting.recipe_plots import plot_correlation_heatmap  # noqa: PLC0415

        return plot_correlation_heatmap(self, **kwargs)


class CorrelationAnalyzer(BaseAnalyser):
    """Analyzer for column correlations with an optional greedy filter.

    The filter mirrors the classic ``findCorrelation`` heuristic: while some
    pair exceeds the cutoff, drop the member of the most correlated pair that
    has the larger mean absolute correlation with the remaining columns.

    Example:
        >>> res = CorrelationAnalyzer(df[numeric_cols], threshold=0.9).fit().result()
        >>> res.to_remove
        ('NumBonds',)
    """

    def __init__(
        self,
        df: pd.DataFrame,
        method: CorrelationMethod = "pearson",
        threshold: float | None = None,
    ):
        """Initialize the correlation analyzer.

        Args:
            df: Numeric columns to analyze.
            method: Correlation method passed to :meth:`pandas.DataFrame.corr`.
            threshold: Absolute correlation cutoff in ``(0, 1]`` used by the filter.
        """
        if method not in ("pearson", "spearman", "kendall"):
            raise ValueError(f"Unknown correlation method '{method}'.")
        if threshold is not None and not 0 < threshold <= 1:
            raise ValueError("threshold must be in (0, 1].")
        self._df = df
        self._method = method
        self._threshold = threshold
        self._corr_mat: pd.DataFrame | None = None
        self._to_remove: tuple[str, ...] | None = None

    def get_correlation_matrix(self) -> pd.DataFrame:
        """Compute the correlation matrix via :meth:`pandas.DataFrame.corr`."""
        if self._corr_mat is None:
            self._corr_mat = self._df.corr(method=self._method, numeric_only=True)
        return self._corr_mat

    def get_top_correlated_pairs(self, n: int = 20) -> pd.DataFrame:
        """Return the strongest absolute correlations between column pairs.

        The symmetric matrix is vectorized by masking the upper triangle
        (excluding the diagonal) using :func:`np.triu`, then melted for sorting.
        """
        corr_matrix = self.get_correlation_matrix()
        mask = np.triu(np.ones(corr_matrix.shape, dtype=bool), k=1)

        return (
            corr_matrix.where(mask)
            .melt(ignore_index=False, var_name="feature_b", value_name="correlation")
            .dropna()
            .reset_index()
            .rename(columns={"index": "feature_a"})
            .assign(
                abs_correlation=lambda d: d.correlation.abs(),
                pair=lambda d: d.feature_a + " vs " + d.feature_b,
            )
            .sort_values("abs_correlation", ascending=False, kind="stable")
            .head(n)
            .reset_index(drop=True)
        )

    def find_columns_to_remove(self, threshold: float) -> tuple[str, ...]:
        """Greedy search for columns whose removal brings every pair to ``|r| <= threshold``.

        Undefined correlations (e.g. constant columns) count as zero. Ties in the
        mean absolute correlation drop the later column.
        """
        abs_corr = self.get_correlation_matrix().abs().fillna(0.0)
        values = abs_corr.to_numpy(copy=True)
        np.fill_diagonal(values, 0.0)
        names = list(abs_corr.columns)

        remaining = list(range(len(names)))
        removed: list[str] = []
        while len(remaining) > 1:
            sub = values[np.ix_(remaining, remaining)]
            upper = np.triu(sub, k=1)
            if upper.max() <= threshold:
                break
            i, j = np.unravel_index(np.argmax(upper), upper.shape)
            mean_abs = sub.sum(axis=0) / (len(remaining) - 1)
            drop = i if mean_abs[i] > mean_abs[j] else j
            removed.append(names[remaining[drop]])
            del remaining[drop]

        return tuple(removed)

    def fit(self) -> Self:
        """Compute the correlation matrix and, if configured, the columns to remove."""
        self.get_correlation_matrix()
        if self._threshold is not None:
            self._to_remove = self.find_columns_to_remove(self._threshold)
        return self

    def result(self, *, top_n_pairs: int = 20) -> CorrelationResult:
        if self._corr_mat is None:
            raise ValueError("Analyzer not fitted. Call fit() first.")

        return CorrelationResult(
            matrix=self._corr_mat,
            feature_pairs=self.get_top_correlated_pairs(n=top_n_pairs),
            threshold=self._threshold,
            to_remove=self._to_remove or (),
        )
