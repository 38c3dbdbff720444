"""Exception hierarchy shared by recipes, steps and the trainer."""

from __future__ import annotations

from collections.abc import Iterable


class RecipeError(Exception):
    """Base class for all errors raised by ``recipe_tlbx``."""


class UnknownColumnError(RecipeError, KeyError):
    """A role assignment or selector references a column that is not in the schema."""

    def __init__(self, columns: str | Iterable[str], available: Iterable[str] | None = None) -> None:
        self.columns = [columns] if isinstance(columns, str) else list(columns)
        self.available = list(available) if available is not None else None
        msg = f"Unknown column(s): {self.columns}"
        if self.available is not None:
            msg += f". Available: {self.available}"
        super().__init__(msg)

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class EmptySelectionError(RecipeError, ValueError):
    """A step selector resolved to zero columns at fit time."""


class FitError(RecipeError):
    """Fitting a recipe failed at a specific step.

    Attributes:
        step_index: Zero-based position of the failing step in the recipe.
        step_id: Identifier of the failing step.
        cause: The underlying exception.
    """

    def __init__(self, step_index: int, step_id: str, cause: BaseException) -> None:
        self.step_index = step_index
        self.step_id = step_id
        self.cause = cause
        super().__init__(f"Step {step_index} ('{step_id}') failed to fit: {type(cause).__name__}: {cause}")


class NotFittedError(RecipeError, ValueError):
    """``apply`` was requested from an object that has not been fitted."""


class SchemaMismatchError(RecipeError, ValueError):
    """A dataset lacks columns that the recipe (or one of its fitted steps) requires.

    Attributes:
        missing: Column names absent from the dataset.
        step_id: Identifier of the step that needed them (``None`` for the recipe itself).
    """

    def __init__(self, missing: Iterable[str], step_id: str | None = None) -> None:
        self.missing = list(missing)
        self.step_id = step_id
        where = f"step '{step_id}'" if step_id is not None else "the recipe"
        super().__init__(f"Dataset is missing column(s) required by {where}: {self.missing}")


class FoldError(RecipeError):
    """A resample failed while training.

    Attributes:
        fold: Label of the failing resample (e.g. ``"Fold03.Rep1"``).
        cause: The underlying exception.
    """

    def __init__(self, fold: str, cause: BaseException) -> None:
        self.fold = fold
        self.cause = cause
        super().__init__(f"Resample '{fold}' failed: {type(cause).__name__}: {cause}")


__all__ = [
    "EmptySelectionError",
    "FitError",
    "FoldError",
    "NotFittedError",
    "RecipeError",
    "SchemaMismatchError",
    "UnknownColumnError",
]
