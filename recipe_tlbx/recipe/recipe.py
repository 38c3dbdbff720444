"""Recipe builder and the fitted recipe it produces.

A :class:`Recipe` is an immutable declaration: a role registry plus an ordered
tuple of step declarations. Every builder method returns a *new* recipe, so a
recipe can be shared, extended and fitted repeatedly without side effects.

``Recipe.fit`` walks the steps in append order (``UNFIT -> FITTING ->
FITTED``) and returns a :class:`FittedRecipe`, which owns a snapshot of the
roles and the fitted state of every step. Only a fitted recipe can ``apply``.

Example:
    >>> from recipe_tlbx.recipe import Recipe, all_predictors, starts_with
    >>> rec = (
    ...     Recipe.from_formula("solubility ~ .", df)
    ...     .update_role("weight", "auxiliary")
    ...     .step_nzv(all_predictors())
    ...     .step_pca(starts_with("surf_area_"), num_comp=2, prefix="surf_area_PC")
    ...     .step_corr(all_predictors() - starts_with("surf_area_"), threshold=0.9)
    ...     .step_center(all_predictors())
    ...     .step_scale(all_predictors())
    ... )
    >>> fitted = rec.fit(df)
    >>> processed = fitted.apply(new_df)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from enum import StrEnum

import pandas as pd

from recipe_tlbx.analysis.correlation_analyzer import CorrelationMethod
from recipe_tlbx.analysis.variance_analyzer import DEFAULT_FREQ_CUT, DEFAULT_UNIQUE_CUT
from recipe_tlbx.data.roles import RoleRegistry, Schema
from recipe_tlbx.data.views import DatasetView
from recipe_tlbx.errors import FitError, NotFittedError, SchemaMismatchError

from .base_step import FittedStep, Step
from .filter_steps import CorrelationFilter, NearZeroVarianceFilter, RemoveColumns, ZeroVarianceFilter
from .projection_steps import PrincipalComponents
from .selectors import Selector, col, union
from .transform_steps import BoxCox, Center, ImputeMedian, Normalize, Scale, YeoJohnson


logger = logging.getLogger(__name__)


class RecipeState(StrEnum):
    """Lifecycle of a recipe, carried by type.

    A :class:`Recipe` is always ``UNFIT`` and a :class:`FittedRecipe` always
    ``FITTED``. ``FITTING`` lasts only for the duration of :meth:`Recipe.fit`
    and is reported in its log records, never stored on an object.
    """

    UNFIT = "unfit"
    FITTING = "fitting"
    FITTED = "fitted"


def _as_selector(selectors: Sequence[Selector | str]) -> Selector:
    """Union of the given selectors (plain strings are exact column names), left to right."""
    if not selectors:
        raise ValueError("At least one selector is required.")
    converted = [col(s) if isinstance(s, str) else s for s in selectors]
    combined = converted[0]
    for sel in converted[1:]:
        combined = union(combined, sel)
    return combined


def _schema_frame(schema: Schema) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "variable": [c.name for c in schema],
            "type": [str(c.type) for c in schema],
            "role": [str(c.role) for c in schema],
            "source": [c.source for c in schema],
        },
    )


@dataclass(frozen=True)
class StepSummary:
    """Bookkeeping for one fitted step.

    Attributes:
        step_id: Identifier of the step.
        kind: Step kind (e.g. ``"corr"``).
        input_columns: Columns the step was fitted on.
        added: Columns created by the step.
        removed: Columns removed by the step.
        n_columns_before: Tracked column count before the step.
        n_columns_after: Tracked column count after the step.
        duration_seconds: Wall-clock fitting time.
    """

    step_id: str
    kind: str
    input_columns: tuple[str, ...]
    added: tuple[str, ...]
    removed: tuple[str, ...]
    n_columns_before: int
    n_columns_after: int
    duration_seconds: float = 0.0

    def summary(self) -> str:
        """Human-readable one-line summary."""
        return (
            f"{self.step_id}: {self.n_columns_before} -> {self.n_columns_after} columns "
            f"(+{len(self.added)}/-{len(self.removed)}) in {self.duration_seconds:.3f}s"
        )


class Recipe:
    """Immutable declaration of roles and preprocessing steps."""

    state = RecipeState.UNFIT

    def __init__(self, roles: RoleRegistry, steps: Sequence[Step] = ()) -> None:
        self._roles = roles.copy()
        self._steps: tuple[Step, ...] = tuple(steps)

    # ------------------------------------------------------------------ construction
    @classmethod
    def from_formula(cls, formula: str, data: pd.DataFrame) -> Recipe:
        """Declare roles with ``"outcome ~ ."`` (or ``"outcome ~ a + b"``) over a template frame."""
        return cls(RoleRegistry.from_formula(formula, data))

    @classmethod
    def from_frame(cls, data: pd.DataFrame, outcome: str | Sequence[str] | None = None) -> Recipe:
        """Declare ``outcome`` column(s); every other column becomes a predictor."""
        return cls(RoleRegistry.from_frame(data, outcome=outcome))

    @property
    def roles(self) -> RoleRegistry:
        """A copy of the role registry (modify roles with :meth:`update_role`)."""
        return self._roles.copy()

    @property
    def steps(self) -> tuple[Step, ...]:
        return self._steps

    def __len__(self) -> int:
        return len(self._steps)

    def update_role(self, column: str, new_role: str) -> Recipe:
        """Return a recipe where ``column`` holds ``new_role``.

        Raises:
            UnknownColumnError: If the column is not tracked.
        """
        roles = self._roles.copy()
        roles.set_role(column, new_role)
        return Recipe(roles, self._steps)

    def add_step(self, step: Step) -> Recipe:
        """Return a recipe with ``step`` appended.

        Steps without an ``id`` get ``"{kind}_{position}"`` (1-based).

        Raises:
            TypeError: If ``step`` is not a :class:`Step`.
            ValueError: If the id is already used by another step.
        """
        if not isinstance(step, Step):
            raise TypeError(f"Expected a Step, got {type(step).__name__}")
        if step.id is None:
            step = replace(step, id=f"{step.kind}_{len(self._steps) + 1}")
        if any(s.id == step.id for s in self._steps):
            raise ValueError(f"Duplicate step id '{step.id}'.")
        return Recipe(self._roles, (*self._steps, step))

    # ------------------------------------------------------------------ step builders
    def step_rm(self, *selectors: Selector | str, id: str | None = None) -> Recipe:  # noqa: A002
        """Remove the selected columns."""
        return self.add_step(RemoveColumns(_as_selector(selectors), id=id))

    def step_zv(self, *selectors: Selector | str, id: str | None = None) -> Recipe:  # noqa: A002
        """Remove selected columns with a single distinct value."""
        return self.add_step(ZeroVarianceFilter(_as_selector(selectors), id=id))

    def step_nzv(
        self,
        *selectors: Selector | str,
        freq_cut: float = DEFAULT_FREQ_CUT,
        unique_cut: float = DEFAULT_UNIQUE_CUT,
        id: str | None = None,  # noqa: A002
    ) -> Recipe:
        """Remove sparse, highly unbalanced selected columns."""
        return self.add_step(
            NearZeroVarianceFilter(_as_selector(selectors), id=id, freq_cut=freq_cut, unique_cut=unique_cut),
        )

    def step_corr(
        self,
        *selectors: Selector | str,
        threshold: float = 0.9,
        method: CorrelationMethod = "pearson",
        id: str | None = None,  # noqa: A002
    ) -> Recipe:
        """Remove selected columns so no remaining pair exceeds ``threshold`` absolute correlation."""
        return self.add_step(CorrelationFilter(_as_selector(selectors), id=id, threshold=threshold, method=method))

    def step_pca(
        self,
        *selectors: Selector | str,
        num_comp: int = 5,
        threshold: float | None = None,
        prefix: str = "PC",
        id: str | None = None,  # noqa: A002
    ) -> Recipe:
        """Replace the selected columns with principal components named ``{prefix}{k}``."""
        return self.add_step(
            PrincipalComponents(_as_selector(selectors), id=id, num_comp=num_comp, threshold=threshold, prefix=prefix),
        )

    def step_center(self, *selectors: Selector | str, id: str | None = None) -> Recipe:  # noqa: A002
        return self.add_step(Center(_as_selector(selectors), id=id))

    def step_scale(self, *selectors: Selector | str, id: str | None = None) -> Recipe:  # noqa: A002
        return self.add_step(Scale(_as_selector(selectors), id=id))

    def step_normalize(self, *selectors: Selector | str, id: str | None = None) -> Recipe:  # noqa: A002
        return self.add_step(Normalize(_as_selector(selectors), id=id))

    def step_impute_median(self, *selectors: Selector | str, id: str | None = None) -> Recipe:  # noqa: A002
        return self.add_step(ImputeMedian(_as_selector(selectors), id=id))

    def step_yeo_johnson(self, *selectors: Selector | str, id: str | None = None) -> Recipe:  # noqa: A002
        return self.add_step(YeoJohnson(_as_selector(selectors), id=id))

    def step_boxcox(self, *selectors: Selector | str, id: str | None = None) -> Recipe:  # noqa: A002
        return self.add_step(BoxCox(_as_selector(selectors), id=id))

    # ------------------------------------------------------------------ lifecycle
    def fit(self, data: pd.DataFrame, *, retain: bool = True) -> FittedRecipe:
        """Estimate every step on ``data`` in append order.

        Args:
            data: Reference (training) dataset; must contain every tracked column.
            retain: Keep the processed training set on the fitted recipe.

        Returns:
            A new :class:`FittedRecipe`; this recipe is left untouched.

        Raises:
            SchemaMismatchError: If ``data`` lacks tracked columns.
            FitError: If a step fails; fitting stops at that step.
        """
        schema = self._roles.snapshot()
        missing = [c for c in schema.names if c not in data.columns]
        if missing:
            raise SchemaMismatchError(missing)

        logger.info("Fitting recipe with %d step(s) on %d rows (%s)", len(self._steps), len(data), RecipeState.FITTING)
        input_schema = schema
        current = data.loc[:, schema.names]
        fitted_steps: list[FittedStep] = []
        history: list[StepSummary] = []

        for index, step in enumerate(self._steps):
            start = time.perf_counter()
            try:
                fitted = step.fit(current, schema)
                current = fitted.apply(current)
                new_schema = fitted.output_schema(schema)
            except Exception as exc:
                logger.error("Step %d ('%s') failed: %s", index, step.step_id, exc)
                raise FitError(index, step.step_id, exc) from exc

            added = tuple(n for n in new_schema.names if n not in schema)
            removed = tuple(n for n in schema.names if n not in new_schema)
            history.append(
                StepSummary(
                    step_id=step.step_id,
                    kind=step.kind,
                    input_columns=fitted.columns,
                    added=added,
                    removed=removed,
                    n_columns_before=len(schema),
                    n_columns_after=len(new_schema),
                    duration_seconds=time.perf_counter() - start,
                ),
            )
            logger.debug(history[-1].summary())
            fitted_steps.append(fitted)
            schema = new_schema

        logger.info("Recipe fitted: %d -> %d columns", len(input_schema), len(schema))
        return FittedRecipe(
            input_schema=input_schema,
            steps=tuple(fitted_steps),
            output_schema=schema,
            history=tuple(history),
            training_data=current if retain else None,
        )

    def apply(self, data: pd.DataFrame) -> pd.DataFrame:
        """Always fails: only a :class:`FittedRecipe` can be applied."""
        raise NotFittedError("Recipe has not been fitted. Call fit() first and apply the returned FittedRecipe.")

    # ------------------------------------------------------------------ reporting
    def summary(self) -> pd.DataFrame:
        """Tracked columns with their type, role and source."""
        return _schema_frame(self._roles.snapshot())

    def describe(self) -> str:
        roles = self.summary()["role"].value_counts()
        lines = ["Recipe", "", "Inputs:"]
        lines += [f"  {role:<12} {count}" for role, count in roles.items()]
        lines += ["", "Operations:"]
        lines += [f"  {i + 1}. [{s.step_id}] {s.describe()}" for i, s in enumerate(self._steps)] or ["  (none)"]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"Recipe(columns={len(self._roles)}, steps={[s.step_id for s in self._steps]})"


@dataclass(frozen=True)
class FittedRecipe:
    """Result of :meth:`Recipe.fit`: frozen roles plus every step's fitted state.

    Attributes:
        input_schema: Roles and types at fit time.
        steps: Fitted state of each step, in append order.
        output_schema: Schema of the processed data.
        history: Per-step bookkeeping (columns added/removed, timings).
        training_data: Processed training set (``None`` when fitted with ``retain=False``).
    """

    input_schema: Schema
    steps: tuple[FittedStep, ...]
    output_schema: Schema
    history: tuple[StepSummary, ...] = ()
    training_data: pd.DataFrame | None = field(default=None, compare=False, repr=False)

    state = RecipeState.FITTED

    @property
    def training(self) -> pd.DataFrame:
        """Processed training set.

        Raises:
            NotFittedError: If the recipe was fitted with ``retain=False``.
        """
        if self.training_data is None:
            raise NotFittedError("Training data was not retained. Fit with retain=True or call apply().")
        return self.training_data.copy()

    @property
    def predictors(self) -> list[str]:
        return self.output_schema.with_role("predictor")

    @property
    def outcomes(self) -> list[str]:
        return self.output_schema.with_role("outcome")

    def apply(self, data: pd.DataFrame, columns: Selector | None = None) -> pd.DataFrame:
        """Process ``data`` with the stored step states.

        Tracked columns missing from ``data`` are tolerated unless a step needs them.
        Untracked columns are dropped. The row index is preserved.

        Args:
            data: Dataset to process (training data or new data).
            columns: Optional selector restricting the returned columns.

        Raises:
            SchemaMismatchError: If a fitted step needs a column absent from ``data``.
        """
        current = data.loc[:, [c for c in self.input_schema.names if c in data.columns]]
        for fitted in self.steps:
            current = fitted.apply(current)

        present = self.output_schema.subset(current.columns)
        keep = columns.resolve(present) if columns is not None else present.names
        return current.loc[:, keep]

    def view(self, data: pd.DataFrame) -> DatasetView:
        """Process ``data`` and wrap it in a role-aware :class:`DatasetView`."""
        processed = self.apply(data)
        return DatasetView(df=processed, schema=self.output_schema.subset(processed.columns))

    def tidy(self, step: int | str | None = None) -> pd.DataFrame:
        """Describe the fitted state.

        Args:
            step: Step position (0-based) or id. ``None`` lists all steps.
        """
        if step is None:
            return pd.DataFrame(
                {
                    "number": range(1, len(self.history) + 1),
                    "id": [h.step_id for h in self.history],
                    "kind": [h.kind for h in self.history],
                    "n_added": [len(h.added) for h in self.history],
                    "n_removed": [len(h.removed) for h in self.history],
                },
            )
        return self.get_step(step).tidy()

    def get_step(self, step: int | str) -> FittedStep:
        if isinstance(step, int):
            return self.steps[step]
        for fitted in self.steps:
            if fitted.step_id == step:
                return fitted
        raise KeyError(f"No step with id '{step}'. Available: {[s.step_id for s in self.steps]}")

    def summary(self) -> pd.DataFrame:
        """Processed columns with their type, role and source."""
        return _schema_frame(self.output_schema)

    # ------------------------------------------------------------------ plotting shortcuts
    def plot_steps(self, **kwargs: object):
        """Plot tracked column counts after each step."""
        from recipe_tlbx.plotting.recipe_plots import plot_step_columns  # noqa: PLC0415

        return plot_step_columns(self, **kwargs)
