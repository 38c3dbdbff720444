"""Steps that remove columns: explicit removal, (near-)zero variance and correlation filters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

import pandas as pd

from recipe_tlbx.analysis.correlation_analyzer import CorrelationAnalyzer, CorrelationMethod
from recipe_tlbx.analysis.variance_analyzer import DEFAULT_FREQ_CUT, DEFAULT_UNIQUE_CUT, VarianceAnalyzer
from recipe_tlbx.data.roles import Schema

from .base_step import FittedStep, Step


@dataclass(frozen=True)
class FittedColumnFilter(FittedStep):
    """Fitted state shared by all filters: the columns to drop.

    Attributes:
        removed: Columns removed by the filter.
        metrics: Optional per-column statistics computed while fitting.
    """

    removed: tuple[str, ...] = ()
    metrics: pd.DataFrame | None = field(default=None, compare=False, repr=False)

    @property
    def retained(self) -> tuple[str, ...]:
        return tuple(c for c in self.columns if c not in self.removed)

    @property
    def required_columns(self) -> tuple[str, ...]:
        # removed columns may already be absent from new data
        return self.retained

    def _apply(self, df: pd.DataFrame) -> pd.DataFrame:
        return df.drop(columns=list(self.removed), errors="ignore")

    def output_schema(self, schema: Schema) -> Schema:
        return schema.drop(self.removed)

    def tidy(self) -> pd.DataFrame:
        return pd.DataFrame({"terms": list(self.removed), "id": self.step_id})


@dataclass(frozen=True)
class RemoveColumns(Step):
    """Drop every selected column."""

    kind: ClassVar[str] = "rm"
    numeric_only: ClassVar[bool] = False

    def _fit(self, df: pd.DataFrame, schema: Schema, columns: tuple[str, ...]) -> FittedColumnFilter:
        return FittedColumnFilter(step_id=self.step_id, columns=columns, removed=columns)


@dataclass(frozen=True)
class ZeroVarianceFilter(Step):
    """Drop selected columns holding a single distinct value."""

    kind: ClassVar[str] = "zv"
    numeric_only: ClassVar[bool] = False

    def _fit(self, df: pd.DataFrame, schema: Schema, columns: tuple[str, ...]) -> FittedColumnFilter:
        res = VarianceAnalyzer(df.loc[:, list(columns)]).fit().result()
        return FittedColumnFilter(
            step_id=self.step_id,
            columns=columns,
            removed=tuple(res.zero_variance),
            metrics=res.metrics,
        )


@dataclass(frozen=True)
class NearZeroVarianceFilter(Step):
    """Drop selected columns that are sparse and unbalanced.

    Attributes:
        freq_cut: Cutoff for the ratio of the most common to the second most common value.
        unique_cut: Cutoff for the percentage of distinct values out of the number of rows.
    """

    freq_cut: float = DEFAULT_FREQ_CUT
    unique_cut: float = DEFAULT_UNIQUE_CUT

    kind: ClassVar[str] = "nzv"
    numeric_only: ClassVar[bool] = False

    def __post_init__(self) -> None:
        if self.freq_cut <= 0:
            raise ValueError("freq_cut must be positive.")
        if not 0 <= self.unique_cut <= 100:
            raise ValueError("unique_cut must be a percentage in [0, 100].")

    def _fit(self, df: pd.DataFrame, schema: Schema, columns: tuple[str, ...]) -> FittedColumnFilter:
        res = (
            VarianceAnalyzer(df.loc[:, list(columns)], freq_cut=self.freq_cut, unique_cut=self.unique_cut)
            .fit()
            .result()
        )
        return FittedColumnFilter(
            step_id=self.step_id,
            columns=columns,
            removed=tuple(res.near_zero_variance),
            metrics=res.metrics,
        )

    def describe(self) -> str:
        return f"{super().describe()} (freq_cut={self.freq_cut:g}, unique_cut={self.unique_cut:g})"


@dataclass(frozen=True)
class CorrelationFilter(Step):
    """Drop selected columns until no pair has an absolute correlation above ``threshold``.

    Attributes:
        threshold: Absolute correlation cutoff in ``(0, 1]``.
        method: ``"pearson"``, ``"spearman"`` or ``"kendall"``.
    """

    threshold: float = 0.9
    method: CorrelationMethod = "pearson"

    kind: ClassVar[str] = "corr"

    def __post_init__(self) -> None:
        if not 0 < self.threshold <= 1:
            raise ValueError("threshold must be in (0, 1].")
        if self.method not in ("pearson", "spearman", "kendall"):
            raise ValueError(f"Unknown correlation method '{self.method}'.")

    def _fit(self, df: pd.DataFrame, schema: Schema, columns: tuple[str, ...]) -> FittedColumnFilter:
        res = (
            CorrelationAnalyzer(df.loc[:, list(columns)], method=self.method, threshold=self.threshold)
            .fit()
            .result()
        )
        return FittedColumnFilter(
            step_id=self.step_id,
            columns=columns,
            removed=res.to_remove,
            metrics=res.matrix,
        )

    def describe(self) -> str:
        return f"{super().describe()} (threshold={self.threshold:g}, method={self.method})"
