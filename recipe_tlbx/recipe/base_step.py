"""Step declarations and their fitted state.

A step is split in two immutable halves:

* the **declaration** (:class:`Step`) holds the selector and parameters and is
  what a :class:`~recipe_tlbx.recipe.recipe.Recipe` stores;
* the **fitted state** (:class:`FittedStep`) is produced by
  :meth:`Step.fit` on training data and reused unchanged by every ``apply``.

Because neither half is ever mutated, one declaration can be fitted on many
resamples in isolation.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import ClassVar

import pandas as pd

from recipe_tlbx.data.roles import ColumnType, Schema
from recipe_tlbx.errors import EmptySelectionError, SchemaMismatchError

from .selectors import Selector


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FittedStep(ABC):
    """Trained state of one step.

    Attributes:
        step_id: Identifier of the declaring step.
        columns: Columns the step was fitted on, in schema order.
    """

    step_id: str
    columns: tuple[str, ...]

    @property
    def required_columns(self) -> tuple[str, ...]:
        """Columns that must be present in data handed to :meth:`apply`."""
        return self.columns

    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        """Apply the stored state to ``df`` and return a new frame.

        Raises:
            SchemaMismatchError: If ``df`` lacks any of :attr:`required_columns`.
        """
        missing = [c for c in self.required_columns if c not in df.columns]
        if missing:
            raise SchemaMismatchError(missing, step_id=self.step_id)
        return self._apply(df.copy())

    @abstractmethod
    def _apply(self, df: pd.DataFrame) -> pd.DataFrame:
        """Transform a private copy of the input frame."""
        ...

    def output_schema(self, schema: Schema) -> Schema:
        """Schema after this step; unchanged unless the step adds or removes columns."""
        return schema

    def tidy(self) -> pd.DataFrame:
        """Describe the fitted state as a tidy frame with at least `terms` and `id` columns."""
        return pd.DataFrame({"terms": list(self.columns), "id": self.step_id})


@dataclass(frozen=True)
class Step(ABC):
    """Declaration of a transformation: a selector plus parameters.

    Subclasses set :attr:`kind` and implement :meth:`_fit`. The ``id`` is
    filled in by the recipe when the step is appended.
    """

    selector: Selector
    id: str | None = None

    kind: ClassVar[str] = "step"
    numeric_only: ClassVar[bool] = True

    def fit(self, df: pd.DataFrame, schema: Schema) -> FittedStep:
        """Resolve the selector against ``schema`` and estimate the step's state on ``df``.

        Raises:
            EmptySelectionError: If the selector matches no column.
            UnknownColumnError: If the selector names a column absent from ``schema``.
            TypeError: If a numeric-only step selects categorical columns.
        """
        columns = self.selector.resolve(schema)
        if not columns:
            raise EmptySelectionError(f"Selector {self.selector!r} of step '{self.step_id}' matched no columns.")
        if self.numeric_only:
            self._check_numeric(schema, columns)

        logger.debug("Fitting step '%s' on %d column(s)", self.step_id, len(columns))
        return self._fit(df, schema, tuple(columns))

    @abstractmethod
    def _fit(self, df: pd.DataFrame, schema: Schema, columns: tuple[str, ...]) -> FittedStep: ...

    @property
    def step_id(self) -> str:
        return self.id or self.kind

    def _check_numeric(self, schema: Schema, columns: Sequence[str]) -> None:
        categorical = [c for c in columns if schema.get(c).type != ColumnType.NUMERIC]
        if categorical:
            raise TypeError(f"Step '{self.step_id}' requires numeric columns; got categorical {categorical}.")

    def describe(self) -> str:
        """One-line human-readable description used by ``Recipe.describe``."""
        return f"{self.kind} on {self.selector!r}"
