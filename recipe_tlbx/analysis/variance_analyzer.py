"""Zero- and near-zero-variance diagnostics."""

from dataclasses import dataclass
from typing import Self

import pandas as pd

from .base_analyser import BaseAnalyser


DEFAULT_FREQ_CUT = 95 / 5
DEFAULT_UNIQUE_CUT = 10.0


@dataclass(frozen=True)
class VarianceResult:
    """Per-column variance diagnostics.

    Attributes:
        metrics: DataFrame indexed by column with `freq_ratio`, `percent_unique`,
            `zero_var` and `nzv` columns.
        freq_cut: Cutoff on the ratio of the most common to the second most common value.
        unique_cut: Cutoff on the percentage of distinct values.
    """

    metrics: pd.DataFrame
    freq_cut: float
    unique_cut: float

    @property
    def zero_variance(self) -> list[str]:
        return self.metrics.index[self.metrics["zero_var"]].tolist()

    @property
    def near_zero_variance(self) -> list[str]:
        return self.metrics.index[self.metrics["nzv"]].tolist()


class VarianceAnalyzer(BaseAnalyser):
    """Flag columns that carry (almost) no information.

    A column has zero variance when it holds at most one distinct non-missing
    value. It has near-zero variance when, in addition to that case, the most
    frequent value is more than ``freq_cut`` times as common as the second most
    frequent one *and* at most ``unique_cut`` percent of the rows are distinct
    values.

    Example:
        >>> res = VarianceAnalyzer(df).fit().result()
        >>> res.near_zero_variance
        ['FP018', 'FP019', 'FP020']
    """

    def __init__(
        self,
        df: pd.DataFrame,
        freq_cut: float = DEFAULT_FREQ_CUT,
        unique_cut: float = DEFAULT_UNIQUE_CUT,
    ):
        if freq_cut <= 0:
            raise ValueError("freq_cut must be positive.")
        if not 0 <= unique_cut <= 100:
            raise ValueError("unique_cut must be a percentage in [0, 100].")
        self._df = df
        self._freq_cut = freq_cut
        self._unique_cut = unique_cut
        self._metrics: pd.DataFrame | None = None

    @staticmethod
    def _freq_ratio(counts: pd.Series) -> float:
        if len(counts) <= 1:
            return 0.0
        top_two = counts.nlargest(2).to_numpy()
        return float(top_two[0] / top_two[1])

    def fit(self) -> Self:
        n_rows = len(self._df)
        rows = []
        for name in self._df.columns:
            counts = self._df[name].value_counts(dropna=True)
            counts = counts[counts > 0]
            rows.append(
                {
                    "column": name,
                    "freq_ratio": self._freq_ratio(counts),
                    "percent_unique": 100.0 * len(counts) / n_rows if n_rows else 0.0,
                    "zero_var": len(counts) <= 1,
                },
            )

        metrics = pd.DataFrame(rows, columns=["column", "freq_ratio", "percent_unique", "zero_var"])
        metrics = metrics.set_index("column")
        metrics["zero_var"] = metrics["zero_var"].astype(bool)
        metrics["nzv"] = metrics["zero_var"] | (
            (metrics["freq_ratio"] > self._freq_cut) & (metrics["percent_unique"] <= self._unique_cut)
        )
        self._metrics = metrics
        return self

    def result(self) -> VarianceResult:
        if self._metrics is None:
            raise ValueError("Analyzer not fitted. Call fit() first.")
        return VarianceResult(metrics=self._metrics, freq_cut=self._freq_cut, unique_cut=self._unique_cut)
