"""Resampling and evaluation settings for :func:`recipe_tlbx.training.train`."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal


if TYPE_CHECKING:
    from sklearn.base import BaseEstimator

    from .summary import EvaluationData


ResamplingMethod = Literal["cv", "repeatedcv", "boot", "none"]
FoldErrorPolicy = Literal["raise", "skip"]
SummaryFunction = Callable[["EvaluationData", "BaseEstimator"], Mapping[str, float]]


@dataclass(frozen=True)
class TrainControl:
    """How models are resampled and scored.

    Attributes:
        method: ``"cv"`` (k-fold), ``"repeatedcv"``, ``"boot"`` (bootstrap with
            out-of-bag assessment) or ``"none"`` (fit on all rows, no resampling).
        number: Folds for ``cv``/``repeatedcv``, resamples for ``boot``.
        repeats: Repeats for ``repeatedcv``.
        seed: Seed for fold assignment.
        metric: Metric used to pick the best candidate (defaults to the first
            metric returned by ``summary``).
        maximize: Whether a larger ``metric`` is better.
        summary: Evaluation function ``(data, model) -> {name: value}``;
            defaults to :func:`~recipe_tlbx.training.summary.default_summary`.
        on_fold_error: ``"raise"`` wraps a failing resample in a ``FoldError``;
            ``"skip"`` logs a warning and drops it from the aggregate.
        use_case_weights: Pass a single ``case_weight`` column to the model as ``sample_weight``.
        save_predictions: Keep per-fold hold-out predictions on the result.
    """

    method: ResamplingMethod = "cv"
    number: int = 10
    repeats: int = 1
    seed: int | None = 0
    metric: str | None = None
    maximize: bool = False
    summary: SummaryFunction | None = None
    on_fold_error: FoldErrorPolicy = "raise"
    use_case_weights: bool = True
    save_predictions: bool = True

    def __post_init__(self) -> None:
        if self.method not in ("cv", "repeatedcv", "boot", "none"):
            raise ValueError(f"Unknown resampling method '{self.method}'.")
        if self.method in ("cv", "repeatedcv") and self.number < 2:
            raise ValueError("Cross-validation needs number >= 2 folds.")
        if self.method == "boot" and self.number < 1:
            raise ValueError("Bootstrap needs number >= 1 resamples.")
        if self.repeats < 1:
            raise ValueError("repeats must be at least 1.")
        if self.on_fold_error not in ("raise", "skip"):
            raise ValueError("on_fold_error must be 'raise' or 'skip'.")
        if self.summary is not None and not callable(self.summary):
            raise TypeError("summary must be callable.")


__all__ = ["FoldErrorPolicy", "ResamplingMethod", "SummaryFunction", "TrainControl"]
