"""Training module: resampled model fitting with auxiliary-aware evaluation."""

from .control import TrainControl
from .resampling import Resample, make_resamples
from .summary import EvaluationData, default_summary, make_weighted_rmse
from .trainer import FoldResult, TrainResult, train


__all__ = [
    "EvaluationData",
    "FoldResult",
    "Resample",
    "TrainControl",
    "TrainResult",
    "default_summary",
    "make_resamples",
    "make_weighted_rmse",
    "train",
]
