"""Resampled model training with a recipe in front of the model.

For every resample the recipe is refit on the analysis rows only, so no
information from the held-out rows leaks into the preprocessing. The model
sees predictor columns only; auxiliary and case-weight columns travel with
the rows and are handed to the summary function of the held-out fold.

Example:
    >>> from sklearn.svm import SVR
    >>> result = train(
    ...     rec,
    ...     df,
    ...     SVR(),
    ...     control=TrainControl(number=5, summary=make_weighted_rmse("weight"), metric="RMSE_wt"),
    ...     tune_grid={"C": [0.5, 1, 2]},
    ... )
    >>> result.best_params
    {'C': 2}
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, clone
from sklearn.model_selection import ParameterGrid

from recipe_tlbx.data.views import DatasetView
from recipe_tlbx.errors import FoldError, RecipeError
from recipe_tlbx.recipe.recipe import FittedRecipe, Recipe

from .control import TrainControl
from .resampling import Resample, make_resamples
from .summary import EvaluationData, default_summary


logger = logging.getLogger(__name__)

ParamGrid = Mapping[str, Sequence[Any]] | Sequence[Mapping[str, Sequence[Any]]]


@dataclass(frozen=True)
class FoldResult:
    """Metrics of one candidate on one resample.

    Attributes:
        fold: Resample label.
        candidate: Position of the parameter candidate in the grid.
        params: Parameter values of the candidate.
        metrics: Values returned by the summary function.
        n_analysis: Rows used to fit the recipe and model.
        n_assessment: Held-out rows.
        predictions: Hold-out ``pred``/``obs``/auxiliary frame (``None`` unless saved).
    """

    fold: str
    candidate: int
    params: dict[str, Any]
    metrics: dict[str, float]
    n_analysis: int
    n_assessment: int
    predictions: pd.DataFrame | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class TrainResult:
    """Outcome of :func:`train`.

    Attributes:
        resamples: One row per candidate and resample with the fold metrics.
        results: Mean and standard deviation (``<metric>SD``) of every metric per candidate.
        metric: Metric used to select :attr:`best_params`.
        best_params: Parameters of the selected candidate.
        fold_results: Per-fold details, including hold-out predictions.
        fitted_recipe: Recipe refit on the full data.
        model: Model refit on the full processed data with :attr:`best_params`.
        control: Settings used for training.
    """

    resamples: pd.DataFrame
    results: pd.DataFrame
    metric: str
    best_params: dict[str, Any]
    fold_results: tuple[FoldResult, ...]
    fitted_recipe: FittedRecipe
    model: BaseEstimator
    control: TrainControl
    best_candidate: int = 0
    skipped: tuple[str, ...] = ()

    @property
    def predictions(self) -> pd.DataFrame:
        """Saved hold-out predictions of the selected candidate across all resamples."""
        frames = [
            fr.predictions
            for fr in self.fold_results
            if fr.candidate == self.best_candidate and fr.predictions is not None
        ]
        if not frames:
            raise ValueError("No hold-out predictions were saved. Train with save_predictions=True.")
        return pd.concat(frames, axis=0)

    def predict(self, data: pd.DataFrame) -> pd.Series:
        """Apply the fitted recipe to ``data`` and predict with the final model."""
        view = self.fitted_recipe.view(data)
        return pd.Series(self.model.predict(view.predictors), index=view.df.index, name="pred")

    # ------------------------------------------------------------------ plotting shortcuts
    def plot_resamples(self, **kwargs: object):
        """Distribution of the selection metric across resamples, per candidate."""
        from recipe_tlbx.plotting.resampling_plots import plot_resamples  # noqa: PLC0415

        return plot_resamples(self, **kwargs)

    def plot_observed_vs_predicted(self, **kwargs: object):
        """Observed vs. hold-out predicted values of the selected candidate."""
        from recipe_tlbx.plotting.resampling_plots import plot_observed_vs_predicted  # noqa: PLC0415

        return plot_observed_vs_predicted(self, **kwargs)


def _model_inputs(view: DatasetView, control: TrainControl) -> tuple[pd.DataFrame, pd.Series, dict[str, Any]]:
    X = view.predictors
    if X.shape[1] == 0:
        raise RecipeError("The processed data has no predictor columns left to fit a model on.")
    fit_kwargs: dict[str, Any] = {}
    if control.use_case_weights:
        weight_cols = view.case_weight_cols
        if len(weight_cols) > 1:
            raise ValueError(f"Expected at most one case_weight column, found {weight_cols}.")
        if weight_cols:
            fit_kwargs["sample_weight"] = view.df[weight_cols[0]].to_numpy(dtype=float)
    return X, view.outcome, fit_kwargs


def _fit_model(
    model: BaseEstimator,
    params: Mapping[str, Any],
    view: DatasetView,
    control: TrainControl,
) -> BaseEstimator:
    X, y, fit_kwargs = _model_inputs(view, control)
    return clone(model).set_params(**params).fit(X, y, **fit_kwargs)


def _evaluate_resample(
    recipe: Recipe,
    data: pd.DataFrame,
    resample: Resample,
    model: BaseEstimator,
    candidates: list[dict[str, Any]],
    control: TrainControl,
) -> tuple[list[FoldResult], list[str]]:
    summary = control.summary or default_summary
    analysis = data.loc[resample.analysis]
    assessment = data.loc[resample.assessment]

    try:
        fitted = recipe.fit(analysis, retain=False)
        train_view = fitted.view(analysis)
        test_view = fitted.view(assessment)
    except Exception as exc:
        if control.on_fold_error == "raise":
            raise FoldError(resample.label, exc) from exc
        logger.warning("Skipping resample '%s': recipe failed (%s)", resample.label, exc)
        return [], [resample.label]

    results, skipped = [], []
    for i, params in enumerate(candidates):
        try:
            est = _fit_model(model, params, train_view, control)
            pred = pd.Series(est.predict(test_view.predictors), index=test_view.df.index, name="pred")
            evaluation = EvaluationData(
                pred=pred,
                obs=test_view.outcome,
                auxiliary=test_view.auxiliary,
                fold=resample.label,
            )
            metrics = {k: float(v) for k, v in summary(evaluation, est).items()}
        except Exception as exc:
            if control.on_fold_error == "raise":
                raise FoldError(resample.label, exc) from exc
            logger.warning("Skipping resample '%s' for candidate %s: %s", resample.label, params, exc)
            skipped.append(resample.label)
            continue

        results.append(
            FoldResult(
                fold=resample.label,
                candidate=i,
                params=dict(params),
                metrics=metrics,
                n_analysis=len(analysis),
                n_assessment=len(assessment),
                predictions=evaluation.frame if control.save_predictions else None,
            ),
        )
    return results, skipped


def _aggregate(fold_results: list[FoldResult], candidates: list[dict[str, Any]]) -> tuple[pd.DataFrame, pd.DataFrame]:
    resamples = pd.DataFrame(
        [{"candidate": fr.candidate, **fr.params, "fold": fr.fold, **fr.metrics} for fr in fold_results],
    )
    metric_names = list(dict.fromkeys(m for fr in fold_results for m in fr.metrics))

    grouped = resamples.groupby("candidate")[metric_names]
    means = grouped.mean()
    sds = grouped.std(ddof=1).add_suffix("SD")
    params = pd.DataFrame(candidates, index=pd.RangeIndex(len(candidates), name="candidate"))
    results = (
        params.join(means, how="left")
        .join(sds, how="left")
        .assign(n_resamples=resamples.groupby("candidate").size())
        .fillna({"n_resamples": 0})
        .reset_index()
    )
    results["n_resamples"] = results["n_resamples"].astype(int)
    return resamples, results


def train(
    recipe: Recipe,
    data: pd.DataFrame,
    model: BaseEstimator,
    control: TrainControl | None = None,
    tune_grid: ParamGrid | None = None,
) -> TrainResult:
    """Resample, score and refit ``model`` behind ``recipe``.

    Args:
        recipe: Unfitted recipe; it is refit on every resample.
        data: Full training data (must contain every tracked column).
        model: scikit-learn compatible estimator; cloned for every fit.
        control: Resampling settings (defaults to 10-fold CV with :func:`default_summary`).
        tune_grid: Parameter grid accepted by :class:`sklearn.model_selection.ParameterGrid`.

    Returns:
        A :class:`TrainResult` with the resampled metrics and the final fit.

    Raises:
        FoldError: If a resample fails and ``control.on_fold_error == "raise"``.
        RecipeError: If every resample failed.
        ValueError: If the selection metric is not produced by the summary function.
    """
    control = control or TrainControl()
    candidates = [dict(p) for p in ParameterGrid(tune_grid)] if tune_grid else [{}]
    resamples = make_resamples(data.index, control)
    logger.info(
        "Training %s: %d candidate(s) x %d resample(s) (%s)",
        type(model).__name__,
        len(candidates),
        len(resamples),
        control.method,
    )

    fold_results: list[FoldResult] = []
    skipped: list[str] = []
    for resample in resamples:
        logger.debug(
            "Resample '%s': %d analysis / %d assessment rows",
            resample.label,
            len(resample.analysis),
            len(resample.assessment),
        )
        done, failed = _evaluate_resample(recipe, data, resample, model, candidates, control)
        fold_results.extend(done)
        skipped.extend(failed)

    if not fold_results:
        raise RecipeError(f"All {len(resamples)} resample(s) failed; nothing to summarize.")

    resample_frame, results = _aggregate(fold_results, candidates)
    metric = control.metric or next(iter(fold_results[0].metrics))
    if metric not in results.columns:
        available = list(fold_results[0].metrics)
        raise ValueError(f"Metric '{metric}' not returned by the summary function. Available: {available}")
    scores = results[metric].to_numpy(dtype=float)
    if np.isnan(scores).all():
        raise RecipeError(f"Metric '{metric}' is undefined for every candidate.")
    best = int(np.nanargmax(scores) if control.maximize else np.nanargmin(scores))
    best_params = candidates[best]
    logger.info("Selected candidate %d %s (%s=%.4f)", best, best_params, metric, scores[best])

    fitted_recipe = recipe.fit(data)
    final_view = DatasetView(df=fitted_recipe.training, schema=fitted_recipe.output_schema)
    final_model = _fit_model(model, best_params, final_view, control)

    return TrainResult(
        resamples=resample_frame,
        results=results,
        metric=metric,
        best_params=best_params,
        fold_results=tuple(fold_results),
        fitted_recipe=fitted_recipe,
        model=final_model,
        control=control,
        best_candidate=best,
        skipped=tuple(skipped),
    )


__all__ = ["FoldResult", "TrainResult", "train"]
