"""Declarative preprocessing recipes with role-aware model training.

Typical use::

    from recipe_tlbx import Recipe, TrainControl, all_predictors, make_weighted_rmse, train

    rec = Recipe.from_formula("solubility ~ .", df).update_role("weight", "auxiliary")
    rec = rec.step_nzv(all_predictors()).step_center(all_predictors()).step_scale(all_predictors())
    result = train(rec, df, SVR(), control=TrainControl(summary=make_weighted_rmse("weight")))
"""

from .data import ColumnType, DatasetView, Role, RoleRegistry, Schema, make_solubility_like
from .errors import (
    EmptySelectionError,
    FitError,
    FoldError,
    NotFittedError,
    RecipeError,
    SchemaMismatchError,
    UnknownColumnError,
)
from .recipe import (
    FittedRecipe,
    Recipe,
    RecipeState,
    all_nominal,
    all_nominal_predictors,
    all_numeric,
    all_numeric_predictors,
    all_outcomes,
    all_predictors,
    col,
    contains,
    ends_with,
    everything,
    has_role,
    has_type,
    matches,
    starts_with,
)
from .training import EvaluationData, TrainControl, TrainResult, default_summary, make_weighted_rmse, train


__version__ = "0.1.0"

__all__ = [
    "ColumnType",
    "DatasetView",
    "EmptySelectionError",
    "EvaluationData",
    "FitError",
    "FittedRecipe",
    "FoldError",
    "NotFittedError",
    "Recipe",
    "RecipeError",
    "RecipeState",
    "Role",
    "RoleRegistry",
    "Schema",
    "SchemaMismatchError",
    "TrainControl",
    "TrainResult",
    "UnknownColumnError",
    "all_nominal",
    "all_nominal_predictors",
    "all_numeric",
    "all_numeric_predictors",
    "all_outcomes",
    "all_predictors",
    "col",
    "contains",
    "default_summary",
    "ends_with",
    "everything",
    "has_role",
    "has_type",
    "make_solubility_like",
    "make_weighted_rmse",
    "matches",
    "starts_with",
    "train",
]
