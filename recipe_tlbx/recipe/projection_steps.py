"""Principal component projection step."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

import pandas as pd
from sklearn.decomposition import PCA

from recipe_tlbx.analysis.pca_analyzer import PCAAnalyzer
from recipe_tlbx.data.roles import ColumnInfo, ColumnType, Role, Schema

from .base_step import FittedStep, Step


def component_names(prefix: str, n: int) -> tuple[str, ...]:
    """``prefix1..prefixN`` zero-padded to the width of ``n`` (``PC01..PC12``)."""
    width = len(str(n))
    return tuple(f"{prefix}{i:0{width}d}" for i in range(1, n + 1))


@dataclass(frozen=True)
class FittedPCA(FittedStep):
    """Fitted projection: replaces ``columns`` with ``names``.

    Attributes:
        names: Names of the derived component columns.
        model: Fitted PCA model (all components; only the first ``len(names)`` are kept).
        explained_variance: Explained-variance table of the fitted model.
        loadings: Loadings of the original columns on every component.
        role: Role given to the derived columns.
    """

    names: tuple[str, ...] = ()
    model: PCA | None = field(default=None, compare=False, repr=False)
    explained_variance: pd.DataFrame | None = field(default=None, compare=False, repr=False)
    loadings: pd.DataFrame | None = field(default=None, compare=False, repr=False)
    role: str = Role.PREDICTOR

    def _apply(self, df: pd.DataFrame) -> pd.DataFrame:
        cols = list(self.columns)
        scores = self.model.transform(df[cols])[:, : len(self.names)]
        return df.drop(columns=cols).assign(**dict(zip(self.names, scores.T, strict=True)))

    def output_schema(self, schema: Schema) -> Schema:
        return schema.drop(self.columns).extend(
            ColumnInfo(name=name, role=str(self.role), type=ColumnType.NUMERIC, source="derived") for name in self.names
        )

    def tidy(self) -> pd.DataFrame:
        kept = self.loadings.iloc[:, : len(self.names)].set_axis(list(self.names), axis=1)
        return (
            kept.rename_axis("terms")
            .reset_index()
            .melt(id_vars="terms", var_name="component", value_name="value")
            .assign(id=self.step_id)
        )


@dataclass(frozen=True)
class PrincipalComponents(Step):
    """Replace the selected columns with their leading principal components.

    The step does not scale its inputs; put centering/scaling steps before it
    when the columns are on different scales.

    Attributes:
        num_comp: Number of components to keep (capped at ``min(n_rows, n_columns)``).
        threshold: If set, keep the fewest components whose cumulative explained
            variance reaches this fraction; overrides ``num_comp``.
        prefix: Prefix of the derived column names.
    """

    num_comp: int = 5
    threshold: float | None = None
    prefix: str = "PC"

    kind: ClassVar[str] = "pca"

    def __post_init__(self) -> None:
        if self.num_comp < 1:
            raise ValueError("num_comp must be at least 1.")
        if self.threshold is not None and not 0 < self.threshold <= 1:
            raise ValueError("threshold must be in (0, 1].")
        if not self.prefix:
            raise ValueError("prefix must be a non-empty string.")

    def _fit(self, df: pd.DataFrame, schema: Schema, columns: tuple[str, ...]) -> FittedPCA:
        res = PCAAnalyzer(df.loc[:, list(columns)].astype(float)).fit().result()
        available = res.model.n_components_
        n_keep = res.n_components_for(self.threshold) if self.threshold is not None else min(self.num_comp, available)

        names = component_names(self.prefix, n_keep)
        clash = [n for n in names if n in schema and n not in columns]
        if clash:
            raise ValueError(f"Derived column name(s) {clash} already exist; choose another prefix.")

        return FittedPCA(
            step_id=self.step_id,
            columns=columns,
            names=names,
            model=res.model,
            explained_variance=res.explained_variance,
            loadings=res.loadings,
        )

    def describe(self) -> str:
        keep = f"threshold={self.threshold:g}" if self.threshold is not None else f"num_comp={self.num_comp}"
        return f"{super().describe()} ({keep}, prefix={self.prefix!r})"
