"""Recipe module: selectors, steps and the fit/apply lifecycle."""

from .base_step import FittedStep, Step
from .filter_steps import (
    CorrelationFilter,
    FittedColumnFilter,
    NearZeroVarianceFilter,
    RemoveColumns,
    ZeroVarianceFilter,
)
from .projection_steps import FittedPCA, PrincipalComponents, component_names
from .recipe import FittedRecipe, Recipe, RecipeState, StepSummary
from .selectors import (
    Selector,
    all_nominal,
    all_nominal_predictors,
    all_numeric,
    all_numeric_predictors,
    all_outcomes,
    all_predictors,
    col,
    contains,
    difference,
    ends_with,
    everything,
    has_role,
    has_type,
    intersection,
    matches,
    starts_with,
    union,
)
from .transform_steps import (
    BoxCox,
    Center,
    FittedPowerTransform,
    FittedShiftScale,
    FittedSklearnTransform,
    ImputeMedian,
    Normalize,
    Scale,
    YeoJohnson,
)


__all__ = [
    "BoxCox",
    "Center",
    "CorrelationFilter",
    "FittedColumnFilter",
    "FittedPCA",
    "FittedPowerTransform",
    "FittedRecipe",
    "FittedShiftScale",
    "FittedSklearnTransform",
    "FittedStep",
    "ImputeMedian",
    "NearZeroVarianceFilter",
    "Normalize",
    "PrincipalComponents",
    "Recipe",
    "RecipeState",
    "RemoveColumns",
    "Scale",
    "Selector",
    "Step",
    "StepSummary",
    "YeoJohnson",
    "ZeroVarianceFilter",
    "all_nominal",
    "all_nominal_predictors",
    "all_numeric",
    "all_numeric_predictors",
    "all_outcomes",
    "all_predictors",
    "col",
    "component_names",
    "contains",
    "difference",
    "ends_with",
    "everything",
    "has_role",
    "has_type",
    "intersection",
    "matches",
    "starts_with",
    "union",
]
